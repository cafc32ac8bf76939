"""
JSON-RPC façade

POST /mcp accepts ``tools/list``, ``tools/call`` and the short form
``tools/<toolName>``. Each request runs on a fresh ServerInstance bound to
the caller's tenant, stopped once the response is ready.
"""

from typing import Any, Dict

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ..core.config import Settings, get_settings
from ..core.server import ServerInstance
from ..external.errors import ClassifiedError
from .jsonrpc import JsonRpcError, JsonRpcErrorCode, JsonRpcRequest
from .tenant import bearer_token, resolve_tenant

logger = structlog.get_logger(__name__)

router = APIRouter()


def _parse_envelope(body: Any) -> JsonRpcRequest:
    if not isinstance(body, dict):
        raise JsonRpcError(JsonRpcErrorCode.PARSE_ERROR, "Invalid JSON-RPC request", status_code=400)
    request_id = body.get("id")
    if body.get("jsonrpc") != "2.0":
        raise JsonRpcError(
            JsonRpcErrorCode.INVALID_REQUEST,
            'Invalid JSON-RPC version. Must be "2.0"',
            request_id=request_id,
        )
    try:
        return JsonRpcRequest.model_validate(body)
    except ValidationError as exc:
        raise JsonRpcError(
            JsonRpcErrorCode.INVALID_REQUEST,
            "Invalid JSON-RPC request",
            request_id=request_id,
            data=exc.errors(include_url=False),
        ) from exc


async def _dispatch(server: ServerInstance, tool: str, params: Dict[str, Any], request_id: Any) -> Any:
    if tool == "list":
        tools = await server.list_tools()
        return {
            "tools": [
                {"name": t.name, "description": t.description, "inputSchema": t.input_schema}
                for t in tools
            ]
        }
    if tool == "call":
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise JsonRpcError(
                JsonRpcErrorCode.INVALID_PARAMS,
                "params.name must be a tool name",
                request_id=request_id,
            )
        return await server.call_tool(name, params.get("arguments") or {})
    return await server.call_tool(tool, params)


@router.post("/mcp")
async def handle_jsonrpc(request: Request, settings: Settings = Depends(get_settings)):
    if "application/json" not in request.headers.get("content-type", ""):
        return JSONResponse(
            status_code=415,
            content={"error": "Unsupported Media Type", "message": "Content-Type must be application/json"},
        )
    try:
        body = await request.json()
    except ValueError as exc:
        raise JsonRpcError(JsonRpcErrorCode.PARSE_ERROR, "Parse error", status_code=400) from exc

    rpc = _parse_envelope(body)
    parts = rpc.method.split("/")
    if len(parts) != 2:
        raise JsonRpcError(
            JsonRpcErrorCode.METHOD_NOT_FOUND,
            f"Invalid method format: {rpc.method}",
            request_id=rpc.id,
        )
    category, tool = parts
    if category != "tools":
        raise JsonRpcError(
            JsonRpcErrorCode.METHOD_NOT_FOUND,
            f"Unsupported method category: {category}",
            request_id=rpc.id,
        )

    params = dict(rpc.params or {})
    tenant = params.pop("tenant", None)
    if tool == "call" and isinstance(params.get("arguments"), dict):
        # tenant inside the tool arguments takes precedence over the envelope
        arguments = dict(params["arguments"])
        tenant = arguments.pop("tenant", tenant)
        params["arguments"] = arguments
    try:
        credentials = resolve_tenant(
            settings,
            tenant=tenant,
            token=bearer_token(request.headers.get("authorization")),
            space_id=request.headers.get("x-contentful-space-id"),
            environment_id=request.headers.get("x-contentful-environment-id"),
        )
    except ClassifiedError as exc:
        raise JsonRpcError.from_classified(exc, rpc.id) from exc

    server = ServerInstance(credentials.to_context())
    try:
        result = await _dispatch(server, tool, params, rpc.id)
    except ClassifiedError as exc:
        logger.warning("jsonrpc_tool_failed", method=rpc.method, kind=exc.kind, status_code=exc.status_code)
        raise JsonRpcError.from_classified(exc, rpc.id) from exc
    finally:
        await server.stop()

    return {"jsonrpc": "2.0", "id": rpc.id, "result": result}
