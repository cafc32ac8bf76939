from __future__ import annotations

from enum import IntEnum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel

from ..external.errors import ClassifiedError


RequestId = Optional[Union[str, int]]


class JsonRpcErrorCode(IntEnum):
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


_KIND_TO_CODE = {
    "tool_not_found": JsonRpcErrorCode.METHOD_NOT_FOUND,
    "bad_request": JsonRpcErrorCode.INVALID_PARAMS,
    "validation_failed": JsonRpcErrorCode.INVALID_PARAMS,
    "configuration": JsonRpcErrorCode.INVALID_PARAMS,
}


class JsonRpcRequest(BaseModel):
    jsonrpc: str
    method: str
    params: Optional[Dict[str, Any]] = None
    id: RequestId = None


class JsonRpcError(Exception):
    """Protocol-level failure rendered as a JSON-RPC error envelope."""

    def __init__(
        self,
        code: JsonRpcErrorCode,
        message: str,
        *,
        request_id: RequestId = None,
        data: Any = None,
        status_code: int = 200,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.request_id = request_id
        self.data = data
        self.status_code = status_code

    @classmethod
    def from_classified(cls, exc: ClassifiedError, request_id: RequestId = None) -> "JsonRpcError":
        code = _KIND_TO_CODE.get(exc.kind, JsonRpcErrorCode.INTERNAL_ERROR)
        return cls(code, exc.message, request_id=request_id, data=exc.to_dict())

    def to_response(self) -> dict[str, Any]:
        return jsonrpc_error(self.request_id, self.code, self.message, self.data)


def jsonrpc_error(request_id: RequestId, code: int, message: str, data: Any = None) -> dict[str, Any]:
    error: Dict[str, Any] = {"code": int(code), "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": "2.0", "id": request_id, "error": error}
