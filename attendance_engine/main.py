from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from attendance_engine.api.deps import close_clients
from attendance_engine.api.v1.router import router as api_v1_router
from attendance_engine.config.logging import setup_logging
from attendance_engine.config.settings import settings
from attendance_engine.core.exceptions import BaseAppException

logger = logging.getLogger(__name__)


async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path} -> {exc}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_clients()


def create_app() -> FastAPI:
    """
    Application factory for the FastAPI app.

    - Configures logging, title, version, debug mode from Settings.
    - Registers CORS and the engine's exception handler.
    - Includes the versioned API router under /api/v1.
    """
    setup_logging(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version=settings.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BaseAppException, app_exception_handler)

    app.include_router(api_v1_router, prefix=settings.API_V1_STR)

    return app


app = create_app()
