from __future__ import annotations

from typing import Any

from backend.app.core.errors import ServiceError


def ok(data: Any = None, message: str | None = None) -> dict:
    body: dict[str, Any] = {"success": True, "data": data}
    if message:
        body["message"] = message
    return body


def error_body(message: str, code: str = "ERROR", retryable: bool = False, details: dict | None = None) -> dict:
    return {
        "success": False,
        "error": message,
        "code": code,
        "retryable": retryable,
        "details": details or {},
    }


def service_error_body(exc: ServiceError) -> dict:
    return error_body(exc.message, exc.code, exc.retryable, exc.details)
