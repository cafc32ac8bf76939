from __future__ import annotations

import httpx
import pytest
from pydantic import BaseModel, ValidationError

from contentful_mcp.external.errors import ClassifiedError, ErrorMeta, classify, extract_status


class StatusError(Exception):
    def __init__(self, status: int, message: str = "boom"):
        super().__init__(message)
        self.status = status
        self.message = message


def _http_error(status: int, body: dict | None = None) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://api.contentful.com/spaces/s1")
    response = httpx.Response(status, json=body or {}, request=request)
    return httpx.HTTPStatusError("error", request=request, response=response)


@pytest.mark.parametrize(
    "status,kind,retryable",
    [
        (400, "bad_request", False),
        (401, "auth_or_permission", False),
        (403, "auth_or_permission", False),
        (404, "not_found", False),
        (409, "conflict", False),
        (422, "validation_failed", False),
        (429, "rate_limited", True),
        (500, "upstream_error", True),
        (502, "upstream_error", True),
        (503, "upstream_error", True),
        (504, "upstream_error", True),
        (418, "unknown", False),
    ],
)
def test_status_taxonomy(status, kind, retryable):
    err = classify(StatusError(status))
    assert err.kind == kind
    assert err.retryable is retryable
    assert err.status_code == status


def test_any_5xx_is_retryable_upstream_error():
    err = classify(StatusError(507))
    assert err.kind == "upstream_error"
    assert err.retryable is True


def test_http_status_error_uses_response_message():
    err = classify(_http_error(404, {"message": "The resource could not be found."}))
    assert err.kind == "not_found"
    assert "The resource could not be found." in err.message
    assert isinstance(err.cause, httpx.HTTPStatusError)


def test_auth_message_points_at_token():
    err = classify(StatusError(401, "Access token invalid"))
    assert "CONTENTFUL_MANAGEMENT_ACCESS_TOKEN" in err.message


def test_nested_status_is_found():
    class Wrapper(Exception):
        def __init__(self):
            super().__init__("wrapped")
            self.response = {"status": 429}

    assert extract_status(Wrapper()) == 429
    assert extract_status({"statusCode": 503}) == 503
    assert classify(Wrapper()).kind == "rate_limited"


def test_message_names_action_and_resource():
    err = classify(StatusError(409), ErrorMeta(action="publish", resource="entry", resource_id="e1"))
    assert err.message.startswith("Conflict:")
    assert "publish" in err.message and "entry e1" in err.message
    assert (err.action, err.resource, err.resource_id) == ("publish", "entry", "e1")
    assert str(err) == err.message


def test_unrecognized_errors_are_not_retryable():
    err = classify(ValueError("weird"))
    assert err.kind == "unknown"
    assert err.retryable is False
    assert err.message.startswith("Unexpected error: weird")

    assert classify("just a string").message.startswith("Unknown error")


def test_transport_errors_are_retryable():
    err = classify(httpx.ConnectTimeout("timed out"))
    assert err.kind == "upstream_error"
    assert err.retryable is True
    assert err.status_code is None


def test_validation_error_is_bad_request():
    class Params(BaseModel):
        entry_id: str

    with pytest.raises(ValidationError) as exc:
        Params.model_validate({})
    err = classify(exc.value)
    assert err.kind == "bad_request"
    assert "entry_id" in err.message


def test_classified_errors_pass_through():
    original = ClassifiedError(kind="conflict", message="already classified")
    assert classify(original) is original
    assert original.to_dict()["kind"] == "conflict"
