"""
Shared fixtures.
"""
import pytest
from main import app


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Every test starts with empty slowapi counters."""
    app.state.limiter.reset()
    yield
    app.state.limiter.reset()
