"""
Logging setup

Console output goes to stderr: on the stdio transport stdout carries
protocol frames and must stay clean.
"""

import logging
import sys
from typing import Any, Iterable

import structlog


SENSITIVE_KEYS = frozenset(
    {
        "token",
        "access_token",
        "accesstoken",
        "authorization",
        "password",
        "secret",
        "api_key",
        "apikey",
        "contentful_management_access_token",
    }
)


def redact_token(token: str | None) -> str:
    """Keep only the last four characters of a credential."""
    if not token:
        return ""
    if len(token) <= 4:
        return "****"
    return f"****{token[-4:]}"


class SecretRedactor:
    """structlog processor masking known secrets and sensitive keys."""

    def __init__(self, secrets: Iterable[str] = ()):
        self._secrets = tuple(s for s in secrets if s)

    def _scrub(self, value: Any) -> Any:
        if isinstance(value, str):
            for secret in self._secrets:
                if secret in value:
                    value = value.replace(secret, redact_token(secret))
            return value
        if isinstance(value, dict):
            return {
                k: redact_token(str(v)) if str(k).lower() in SENSITIVE_KEYS else self._scrub(v)
                for k, v in value.items()
            }
        if isinstance(value, (list, tuple)):
            return type(value)(self._scrub(v) for v in value)
        return value

    def __call__(self, logger: Any, method_name: str, event_dict: dict) -> dict:
        return self._scrub(event_dict)


class ColoredFormatter(logging.Formatter):
    """Colored console formatter"""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
        'RESET': '\033[0m'
    }

    def format(self, record):
        log_color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset_color = self.COLORS['RESET']
        formatted = super().format(record)
        return f"{log_color}{formatted}{reset_color}"


def _shared_processors(secrets: Iterable[str] = ()) -> list:
    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.processors.format_exc_info,
        SecretRedactor(secrets),
        structlog.processors.KeyValueRenderer(key_order=["event"], sort_keys=False),
    ]


def setup_logging(level: str = "INFO", enable_colors: bool = True) -> None:
    """Configure stdlib logging and route structlog through it."""

    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)

    fmt = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    if enable_colors:
        formatter = ColoredFormatter(fmt, datefmt='%Y-%m-%d %H:%M:%S')
    else:
        formatter = logging.Formatter(fmt, datefmt='%Y-%m-%d %H:%M:%S')

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    structlog.configure(
        processors=_shared_processors(),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("mcp").setLevel(logging.INFO)

    structlog.get_logger(__name__).info("logging_configured", level=logging.getLevelName(log_level))


def get_tenant_logger(access_token: str | None = None, **initial_values: Any):
    """Logger bound to one tenant; its credential never reaches the output."""
    return structlog.wrap_logger(
        logging.getLogger("contentful_mcp.tenant"),
        processors=_shared_processors([access_token] if access_token else []),
        wrapper_class=structlog.stdlib.BoundLogger,
    ).bind(**initial_values)
