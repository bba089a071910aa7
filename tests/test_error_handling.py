"""
EcoAudit - Error Handling Tests

Tests for the JSON error responses produced by the exception handlers.
"""

import json

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.requests import Request

from ecoaudit.utils.error_handling import (
    ErrorCode,
    http_exception_handler,
    sqlalchemy_exception_handler,
)


def _request() -> Request:
    return Request({
        "type": "http",
        "method": "POST",
        "scheme": "http",
        "server": ("testserver", 80),
        "path": "/api/waste-audit/save",
        "headers": [],
        "query_string": b"",
    })


def _detail(response) -> dict:
    return json.loads(response.body)["detail"]


class TestSqlalchemyExceptionHandler:
    """Test database errors mapped to responses."""

    @pytest.mark.asyncio
    async def test_missing_parent_audit(self):
        exc = IntegrityError("INSERT INTO waste_data", {}, Exception("FOREIGN KEY constraint failed"))

        response = await sqlalchemy_exception_handler(_request(), exc)

        assert response.status_code == 422
        assert _detail(response)["code"] == ErrorCode.DATA_INTEGRITY_ERROR.value
        assert _detail(response)["message"] == "Referenced audit does not exist"

    @pytest.mark.asyncio
    async def test_other_integrity_errors_are_server_errors(self):
        exc = IntegrityError("INSERT INTO audits", {}, Exception("UNIQUE constraint failed: audits.id"))

        response = await sqlalchemy_exception_handler(_request(), exc)

        assert response.status_code == 500
        assert _detail(response)["code"] == ErrorCode.DATA_INTEGRITY_ERROR.value

    @pytest.mark.asyncio
    async def test_operational_error(self):
        exc = OperationalError("SELECT 1", {}, Exception("database is locked"))

        response = await sqlalchemy_exception_handler(_request(), exc)

        assert response.status_code == 500
        assert _detail(response)["code"] == ErrorCode.CONNECTION_ERROR.value


class TestHttpExceptionHandler:
    """Test HTTP errors mapped to error codes."""

    @pytest.mark.asyncio
    async def test_not_found(self):
        response = await http_exception_handler(_request(), HTTPException(status_code=404, detail="Nope"))

        assert response.status_code == 404
        assert _detail(response)["code"] == ErrorCode.NOT_FOUND.value

    @pytest.mark.asyncio
    async def test_unmapped_status_uses_internal_error_code(self):
        response = await http_exception_handler(_request(), HTTPException(status_code=409, detail="Conflict"))

        assert response.status_code == 409
        assert _detail(response)["code"] == ErrorCode.INTERNAL_ERROR.value
