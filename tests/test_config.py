"""
Tests for centralized configuration.
"""
import pytest
import os
from csvcharts.core.config import Settings, get_settings, reload_settings


def test_settings_defaults():
    """Test that settings have sensible defaults."""
    settings = Settings()

    assert settings.max_file_size_mb == 20
    assert settings.max_files_per_upload == 10
    assert settings.rate_limit_per_minute == 30
    assert settings.request_timeout_seconds == 120
    assert settings.log_level == "INFO"
    assert settings.max_file_rows == 200000


def test_settings_from_env():
    """Test loading settings from environment variables."""
    # Save original values
    original_max_file = os.environ.get("MAX_FILE_SIZE_MB")
    original_rows = os.environ.get("MAX_FILE_ROWS")

    try:
        os.environ["MAX_FILE_SIZE_MB"] = "100"
        os.environ["MAX_FILE_ROWS"] = "5000"

        # Reload to pick up new env vars
        reload_settings()
        settings = get_settings()

        assert settings.max_file_size_mb == 100
        assert settings.max_file_rows == 5000
    finally:
        # Cleanup - restore original or remove
        if original_max_file:
            os.environ["MAX_FILE_SIZE_MB"] = original_max_file
        else:
            os.environ.pop("MAX_FILE_SIZE_MB", None)

        if original_rows:
            os.environ["MAX_FILE_ROWS"] = original_rows
        else:
            os.environ.pop("MAX_FILE_ROWS", None)

        reload_settings()


def test_settings_validation():
    """Test that settings validate input ranges."""
    with pytest.raises(ValueError):
        Settings(max_file_size_mb=0)  # Below minimum

    with pytest.raises(ValueError):
        Settings(max_file_size_mb=1000)  # Above maximum

    with pytest.raises(ValueError):
        Settings(max_file_rows=10)

    with pytest.raises(ValueError):
        Settings(log_level="INVALID")  # Invalid log level


def test_log_level_is_normalized():
    assert Settings(log_level="debug").log_level == "DEBUG"


def test_settings_properties():
    """Test computed properties."""
    settings = Settings(max_file_size_mb=50, allowed_origins="http://a.test, ,http://b.test")

    assert settings.max_file_size_bytes == 50 * 1024 * 1024
    assert settings.allowed_origins_list == ["http://a.test", "http://b.test"]


def test_settings_singleton():
    """Test that get_settings returns singleton."""
    settings1 = get_settings()
    settings2 = get_settings()

    assert settings1 is settings2


def test_invalid_env_value_is_rejected(monkeypatch):
    monkeypatch.setenv("MAX_FILE_ROWS", "5")
    with pytest.raises(ValueError):
        Settings.from_env()


def test_unset_env_keeps_defaults(monkeypatch):
    monkeypatch.delenv("MAX_CELL_SIZE_BYTES", raising=False)
    assert Settings.from_env().max_cell_size_bytes == Settings().max_cell_size_bytes
