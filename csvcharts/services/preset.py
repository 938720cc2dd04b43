"""
Bundled sample dataset shown before the user uploads anything.
"""
import logging
from pathlib import Path

from csvcharts.core.schemas import CSVDataset
from csvcharts.services.dataset import build_dataset
from csvcharts.services.parser import read_csv_records

logger = logging.getLogger(__name__)

PRESET_ID = "preset-environmental-data"
PRESET_FILENAME = "Global Environmental Indicators"
PRESET_PATH = Path(__file__).resolve().parent.parent / "data" / "preset-data.csv"


def load_preset_dataset() -> CSVDataset:
    """Parse and analyze the bundled environmental indicators CSV."""
    headers, records = read_csv_records(PRESET_PATH.read_bytes())
    logger.debug(f"Loaded preset dataset with {len(records)} rows")
    return build_dataset(PRESET_FILENAME, headers, records, dataset_id=PRESET_ID)
