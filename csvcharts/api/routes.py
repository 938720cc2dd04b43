import asyncio
import logging
from typing import List
from fastapi import APIRouter, UploadFile, File, HTTPException, Request
from slowapi.errors import RateLimitExceeded
from csvcharts.services.parser import parse_upload
from csvcharts.services.dataset import build_dataset
from csvcharts.services.dashboard import build_dashboard
from csvcharts.services.preset import load_preset_dataset
from csvcharts.core.schemas import AnalyzeRequest, CSVDataset, DashboardLayout
from csvcharts.core.errors import ErrorCodes, IngestionError, get_error_response
from csvcharts.core.sanitization import sanitize_filename, sanitize_for_logging

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_STATUS = {
    ErrorCodes.FILE_TOO_LARGE: 413,
}


def _error_detail(request: Request, code: str, detail: str = None, filename: str = None) -> dict:
    error_info = get_error_response(code, detail)
    error_info['correlation_id'] = getattr(request.state, 'correlation_id', 'unknown')
    if filename:
        error_info['filename'] = filename
    return error_info


def _ingestion_failure(request: Request, error: IngestionError, filename: str) -> HTTPException:
    logger.warning(
        f"Rejected file {sanitize_for_logging(filename)}: {error.code} {sanitize_for_logging(error.detail or '')}"
    )
    return HTTPException(
        status_code=ERROR_STATUS.get(error.code, 400),
        detail=_error_detail(request, error.code, error.detail, filename)
    )


@router.get("/health")
async def health_check():
    return {"status": "ok"}


async def _process_uploads(files: List[UploadFile], request: Request) -> List[CSVDataset]:
    settings = request.app.state.settings

    if len(files) > settings.max_files_per_upload:
        raise HTTPException(
            status_code=400,
            detail=_error_detail(
                request, ErrorCodes.TOO_MANY_FILES,
                f"Received {len(files)} files, the limit is {settings.max_files_per_upload}."
            )
        )

    datasets = []
    for file in files:
        display_name = sanitize_filename(file.filename)
        try:
            filename, headers, records = await parse_upload(file, settings)
        except IngestionError as e:
            raise _ingestion_failure(request, e, display_name)

        datasets.append(await asyncio.to_thread(build_dataset, filename, headers, records))

    logger.info(f"Analyzed {len(datasets)} uploaded file(s)")
    return datasets


@router.post("/upload", response_model=List[CSVDataset])
async def upload_files(request: Request, files: List[UploadFile] = File(...)):
    """
    Upload one or more CSV files and analyze each of them.

    Rate limited per client IP (configurable).
    """
    limiter = request.app.state.limiter
    app_settings = request.app.state.settings

    @limiter.limit(f"{app_settings.rate_limit_per_minute}/minute")
    async def _rate_limited_handler(request: Request):
        return await _process_uploads(files, request)

    try:
        return await _rate_limited_handler(request)
    except (HTTPException, RateLimitExceeded):
        raise
    except Exception as e:
        logger.error(f"Unexpected error processing upload: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=_error_detail(request, ErrorCodes.UNKNOWN_ERROR))


@router.post("/analyze", response_model=CSVDataset)
async def analyze_records(payload: AnalyzeRequest):
    """Analyze records that were already parsed by the caller."""
    return await asyncio.to_thread(build_dataset, payload.filename, payload.headers, payload.records)


@router.post("/dashboard", response_model=DashboardLayout)
async def dashboard_layout(payload: AnalyzeRequest):
    """Analyze records and lay them out as dashboard panels."""
    dataset = await asyncio.to_thread(build_dataset, payload.filename, payload.headers, payload.records)
    return await asyncio.to_thread(build_dashboard, dataset)


@router.get("/preset", response_model=CSVDataset)
async def preset_dataset():
    """The bundled Global Environmental Indicators dataset."""
    return await asyncio.to_thread(load_preset_dataset)
