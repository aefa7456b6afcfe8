"""
app/api/routers package marker.
"""

from app.api.routers.import_history_router import router as import_history_router
from app.api.routers.report_ingestion import router as report_ingestion_router
from app.api.routers.report_router import router as report_router

__all__ = [
    "import_history_router",
    "report_ingestion_router",
    "report_router",
]
