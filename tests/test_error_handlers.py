"""Unit tests for the API exception handlers."""

import json
import sqlite3
from unittest.mock import Mock, patch

import pytest
from fastapi import Request
from starlette.exceptions import HTTPException as StarletteHTTPException

from avocado.domain.errors import (
    AuthError,
    ConflictError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from avocado.presentation.api.error_handlers import (
    global_exception_handler,
    http_exception_handler,
    marketplace_error_handler,
)

pytestmark = pytest.mark.asyncio


@pytest.fixture
def mock_request():
    request = Mock(spec=Request)
    request.method = "GET"
    request.url.path = "/api/marketplace/items"
    return request


@pytest.mark.parametrize(
    "exc, status",
    [
        (ValidationError("bad"), 400),
        (AuthError("bad"), 401),
        (ForbiddenError("bad"), 403),
        (NotFoundError("bad"), 404),
        (ConflictError("bad"), 409),
        (InternalError("bad"), 500),
        (StoreUnavailableError("bad"), 503),
    ],
)
async def test_domain_errors_map_to_status(mock_request, exc, status):
    response = await marketplace_error_handler(mock_request, exc)
    assert response.status_code == status
    assert json.loads(response.body) == {"error": "bad"}


async def test_method_not_allowed_reported_as_not_found(mock_request):
    response = await http_exception_handler(mock_request, StarletteHTTPException(status_code=405))
    assert response.status_code == 404
    assert json.loads(response.body) == {"error": "Endpoint not found"}


async def test_store_error_text_is_redacted(mock_request):
    exc = sqlite3.OperationalError("no such table: users_secret_internal")
    with patch("avocado.presentation.api.error_handlers.logger") as mock_logger:
        response = await global_exception_handler(mock_request, exc)

    mock_logger.error.assert_called_once()
    body = json.loads(response.body)
    assert response.status_code == 500
    assert body["error"] == "Internal server error"
    assert "users_secret_internal" not in response.body.decode()
    assert body["error_id"]
