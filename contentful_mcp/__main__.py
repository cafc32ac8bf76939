"""stdio entry point: ``python -m contentful_mcp`` / ``contentful-mcp``."""

import asyncio
import sys

import structlog
from dotenv import load_dotenv

from .adapters.streams import stdio_adapter
from .core.config import get_settings
from .core.logging_config import setup_logging
from .core.server import ServerInstance
from .core.tenant import TenantCredentials, validate_tenant_credentials
from .external.errors import ClassifiedError

logger = structlog.get_logger(__name__)


async def serve(credentials: TenantCredentials) -> None:
    server = ServerInstance(credentials.to_context())
    try:
        await stdio_adapter(server)
        logger.info("stdio_server_running", space_id=credentials.space_id)
        await server.wait_closed()
    finally:
        await server.stop()


def main() -> int:
    load_dotenv()
    settings = get_settings()
    setup_logging(level=settings.log_level, enable_colors=settings.log_colors)

    try:
        credentials = validate_tenant_credentials(settings.default_tenant())
    except ClassifiedError as exc:
        logger.error("fatal_configuration_error", error=exc.message)
        return 1

    try:
        asyncio.run(serve(credentials))
    except KeyboardInterrupt:
        logger.info("stdio_server_interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
