"""FastAPI routers package."""

from .health import router as health_router
from .metrics import router as metrics_router
from .transaction import router as transaction_router
from .travel_gallery import router as travel_gallery_router

__all__ = [
    "health_router",
    "metrics_router",
    "transaction_router",
    "travel_gallery_router",
]
