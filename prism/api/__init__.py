from prism.api.health import router as health_router
from prism.api.prisms import router as prisms_router
from prism.api.processing import router as processing_router

__all__ = [
    "health_router",
    "prisms_router",
    "processing_router",
]
