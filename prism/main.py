from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from prism.api import health_router, prisms_router, processing_router
from prism.config import settings
from prism.db.database import init_db
from prism.models.failure import KnownError


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    await init_db()
    yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("prism-sleeves"),
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(prisms_router)
app.include_router(processing_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(KnownError)
async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    """Render any KnownError as {"detail": {kind, message, detail, suggestion}}."""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_dict()})
