"""Tool registry.

Records tool metadata, turns parameter models into JSON schemas and wraps
every handler so it runs inside the registry's tenant scope.
"""

from __future__ import annotations

import types
import typing
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import BaseModel, ValidationError

from ..external.errors import ErrorMeta, classify
from .context import run_with_context
from .tenant import TenantContext


ToolHandler = Callable[..., Awaitable[Any]]
WrappedHandler = Callable[[Optional[Dict[str, Any]]], Awaitable[Any]]

OPEN_OBJECT_SCHEMA: Dict[str, Any] = {"type": "object", "properties": {}}


@dataclass(frozen=True, slots=True)
class ToolMetadata:
    name: str
    description: str
    input_schema: Dict[str, Any]


@dataclass(frozen=True, slots=True)
class ToolRecord:
    metadata: ToolMetadata
    handler: WrappedHandler


def _unwrap_optional(annotation: Any) -> Any:
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return _unwrap_optional(args[0])
    return annotation


def _json_type(annotation: Any) -> Dict[str, Any]:
    annotation = _unwrap_optional(annotation)
    origin = typing.get_origin(annotation) or annotation
    if origin is bool:
        return {"type": "boolean"}
    if origin in (int, float):
        return {"type": "number"}
    if origin in (list, tuple, set, frozenset):
        return {"type": "array", "items": {"type": "string"}}
    if origin is dict or (isinstance(origin, type) and issubclass(origin, BaseModel)):
        return {"type": "object"}
    return {"type": "string"}


def normalize_schema(schema: Any) -> Dict[str, Any]:
    """Canonical JSON schema for a parameter descriptor.

    pydantic models are introspected field by field; dicts are taken as
    ready-made JSON schemas; anything else becomes an open object.
    """
    if isinstance(schema, type) and issubclass(schema, BaseModel):
        properties: Dict[str, Any] = {}
        required: List[str] = []
        for name, info in schema.model_fields.items():
            key = info.alias or name
            prop = _json_type(info.annotation)
            if info.description:
                prop["description"] = info.description
            properties[key] = prop
            if info.is_required():
                required.append(key)
        normalized: Dict[str, Any] = {"type": "object", "properties": properties}
        if required:
            normalized["required"] = required
        normalized["additionalProperties"] = False
        return normalized
    if isinstance(schema, dict):
        return dict(schema)
    return dict(OPEN_OBJECT_SCHEMA)


class ToolRegistry:
    def __init__(self, context: TenantContext):
        self._context = context
        self._tools: Dict[str, ToolRecord] = {}

    @property
    def context(self) -> TenantContext:
        return self._context

    def register(self, name: str, description: str, schema: Any, handler: ToolHandler) -> None:
        if name in self._tools:
            raise ValueError(f"Tool already registered: {name}")

        model = schema if isinstance(schema, type) and issubclass(schema, BaseModel) else None
        context = self._context

        async def wrapped(arguments: Optional[Dict[str, Any]] = None) -> Any:
            args = arguments or {}
            if model is None:
                return await run_with_context(context, handler, args)
            try:
                params = model.model_validate(args)
            except ValidationError as exc:
                raise classify(exc, ErrorMeta(action=name)) from exc
            return await run_with_context(context, handler, params)

        self._tools[name] = ToolRecord(
            metadata=ToolMetadata(name=name, description=description, input_schema=normalize_schema(schema)),
            handler=wrapped,
        )
        context.logger.debug("tool_registered", name=name)

    def list_tools(self) -> List[ToolMetadata]:
        return [record.metadata for record in self._tools.values()]

    def get_tool_handler(self, name: str) -> Optional[WrappedHandler]:
        record = self._tools.get(name)
        return record.handler if record else None

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
