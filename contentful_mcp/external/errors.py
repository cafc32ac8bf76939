from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping

import httpx
from pydantic import ValidationError


# Normalized error kinds for content API and runtime failures
ErrorKind = Literal[
    "bad_request",
    "auth_or_permission",
    "not_found",
    "conflict",
    "validation_failed",
    "rate_limited",
    "upstream_error",
    "unknown",
    "tool_not_found",
    "configuration",
]


@dataclass(slots=True)
class ErrorMeta:
    """What the caller was attempting when the failure happened."""

    action: str | None = None
    resource: str | None = None
    resource_id: str | None = None

    def describe(self) -> str:
        if not self.action and not self.resource:
            return ""
        target = " ".join(p for p in (self.resource, self.resource_id) if p)
        if self.action and target:
            return f" (while attempting {self.action} on {target})"
        return f" (while attempting {self.action or target})"


@dataclass(slots=True)
class ClassifiedError(Exception):
    kind: ErrorKind
    message: str
    status_code: int | None = None
    retryable: bool = False
    cause: BaseException | None = field(default=None, repr=False)
    action: str | None = None
    resource: str | None = None
    resource_id: str | None = None

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "message": self.message,
            "status_code": self.status_code,
            "retryable": self.retryable,
            "action": self.action,
            "resource": self.resource,
            "resource_id": self.resource_id,
        }


# status -> (kind, prefix, hint, retryable)
_STATUS_TABLE: dict[int, tuple[ErrorKind, str, str, bool]] = {
    400: ("bad_request", "Bad Request", "Please check your input parameters.", False),
    401: (
        "auth_or_permission",
        "Authentication failed",
        "Please check your CONTENTFUL_MANAGEMENT_ACCESS_TOKEN.",
        False,
    ),
    403: (
        "auth_or_permission",
        "Permission denied",
        "Your access token does not have permission for this operation.",
        False,
    ),
    404: ("not_found", "Resource not found", "Please verify the resource ID and space/environment.", False),
    409: (
        "conflict",
        "Conflict",
        "The resource was modified by another request. Fetch the latest version and retry.",
        False,
    ),
    422: ("validation_failed", "Validation failed", "Please check the field values against the content model.", False),
    429: ("rate_limited", "Rate limit exceeded", "The request will be retried automatically.", True),
    500: ("upstream_error", "Contentful service error", "The service is temporarily unavailable.", True),
    502: ("upstream_error", "Contentful service error", "The service is temporarily unavailable.", True),
    503: ("upstream_error", "Contentful service error", "The service is temporarily unavailable.", True),
    504: ("upstream_error", "Contentful service error", "The service is temporarily unavailable.", True),
}


def _status_from_mapping(data: Mapping[str, Any]) -> int | None:
    for key in ("status", "statusCode", "status_code"):
        value = data.get(key)
        if isinstance(value, int):
            return value
    return None


def extract_status(error: Any) -> int | None:
    """Find an HTTP status on the error itself or on a nested response."""
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    if isinstance(error, Mapping):
        return _status_from_mapping(error)
    for attr in ("status_code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    response = getattr(error, "response", None)
    if response is not None:
        value = getattr(response, "status_code", None) or getattr(response, "status", None)
        if isinstance(value, int):
            return value
        if isinstance(response, Mapping):
            return _status_from_mapping(response)
    return None


def _extract_message(error: Any) -> str:
    if isinstance(error, httpx.HTTPStatusError):
        response = error.response
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, Mapping) and body.get("message"):
            return str(body["message"])
        return response.reason_phrase or f"HTTP {response.status_code}"
    if isinstance(error, Mapping):
        return str(error.get("message") or error)
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error)


def classify(error: Any, meta: ErrorMeta | None = None) -> ClassifiedError:
    """Translate any failure into a ClassifiedError.

    Already-classified errors pass through untouched. Status-bearing errors
    are mapped through the status table; any other 5xx is treated as a
    retryable upstream failure. httpx transport failures (timeouts, refused
    connections) are retryable upstream failures too. Everything else is
    ``unknown`` and not retryable.
    """
    if isinstance(error, ClassifiedError):
        return error

    meta = meta or ErrorMeta()
    suffix = meta.describe()
    cause = error if isinstance(error, BaseException) else None

    def build(kind: ErrorKind, message: str, status: int | None, retryable: bool) -> ClassifiedError:
        return ClassifiedError(
            kind=kind,
            message=message + suffix,
            status_code=status,
            retryable=retryable,
            cause=cause,
            action=meta.action,
            resource=meta.resource,
            resource_id=meta.resource_id,
        )

    if isinstance(error, ValidationError):
        details = "; ".join(
            f"{'.'.join(str(p) for p in e['loc']) or 'arguments'}: {e['msg']}" for e in error.errors()
        )
        return build("bad_request", f"Invalid arguments: {details}", None, False)

    status = extract_status(error)
    if status is not None:
        upstream = _extract_message(error)
        entry = _STATUS_TABLE.get(status)
        if entry is not None:
            kind, prefix, hint, retryable = entry
            return build(kind, f"{prefix}: {upstream}. {hint}", status, retryable)
        if 500 <= status < 600:
            return build("upstream_error", f"Contentful service error ({status}): {upstream}", status, True)
        return build("unknown", f"Contentful API error ({status}): {upstream}", status, False)

    if isinstance(error, httpx.TransportError):
        return build("upstream_error", f"Contentful unreachable: {error!s}", None, True)
    if isinstance(error, Exception):
        return build("unknown", f"Unexpected error: {error!s}", None, False)
    return build("unknown", f"Unknown error: {error!s}", None, False)


def tool_not_found(name: str) -> ClassifiedError:
    return ClassifiedError(kind="tool_not_found", message=f"Tool not found: {name}", resource="tool", resource_id=name)


def configuration_error(message: str) -> ClassifiedError:
    return ClassifiedError(kind="configuration", message=message)
