"""
Exception handlers for the HTTP façade

Every failure leaves the app as a JSON-RPC error envelope.
"""

import traceback

import structlog
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from ..api.jsonrpc import JsonRpcError, JsonRpcErrorCode, jsonrpc_error
from ..external.errors import ClassifiedError

logger = structlog.get_logger(__name__)


def setup_error_handlers(app):
    """Register exception handlers on ``app``."""

    @app.exception_handler(JsonRpcError)
    async def jsonrpc_error_handler(request: Request, exc: JsonRpcError):
        logger.warning(
            "jsonrpc_error",
            code=int(exc.code),
            error_message=exc.message,
            path=request.url.path,
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    @app.exception_handler(ClassifiedError)
    async def classified_error_handler(request: Request, exc: ClassifiedError):
        logger.error(
            "classified_error",
            kind=exc.kind,
            status_code=exc.status_code,
            error_message=exc.message,
            path=request.url.path,
        )
        return JSONResponse(status_code=200, content=JsonRpcError.from_classified(exc).to_response())

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        logger.warning("http_exception", status_code=exc.status_code, detail=exc.detail, path=request.url.path)
        return JSONResponse(
            status_code=exc.status_code,
            content=jsonrpc_error(None, JsonRpcErrorCode.INVALID_REQUEST, str(exc.detail)),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(
            "unexpected_error",
            error=str(exc),
            path=request.url.path,
            method=request.method,
            traceback=traceback.format_exc(),
        )
        return JSONResponse(
            status_code=500,
            content=jsonrpc_error(None, JsonRpcErrorCode.INTERNAL_ERROR, "Internal server error"),
        )
