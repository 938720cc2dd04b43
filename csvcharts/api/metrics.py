"""
Metrics endpoint for performance monitoring.
"""
from fastapi import APIRouter
from csvcharts.core.performance import PerformanceMonitor

router = APIRouter()


@router.get("/metrics")
async def get_metrics():
    """Timing statistics for parsing, analysis and requests."""
    return {'performance': PerformanceMonitor.get_all_metrics()}
