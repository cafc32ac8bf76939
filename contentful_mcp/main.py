from datetime import datetime, timezone

from dotenv import load_dotenv

load_dotenv()

import structlog
from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.middleware.cors import CORSMiddleware

from . import __version__
from .api.rpc import router as rpc_router
from .api.ws import router as ws_router
from .core.config import get_settings
from .core.error_handler import setup_error_handlers
from .core.logging_config import setup_logging


logger = structlog.get_logger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    settings = get_settings()
    setup_logging(level=settings.log_level, enable_colors=settings.log_colors)

    app = FastAPI(title=settings.app_name, version=__version__)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origin_list,
        allow_credentials=False,
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Contentful-Space-Id", "X-Contentful-Environment-Id"],
        max_age=86400,
    )
    setup_error_handlers(app)

    app.include_router(rpc_router)
    app.include_router(ws_router)

    @app.get("/healthz")
    async def healthz():
        return {
            "status": "ok",
            "version": __version__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/metrics")
    async def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    logger.info("app_created", origins=settings.allowed_origin_list)
    return app


app = create_app()
