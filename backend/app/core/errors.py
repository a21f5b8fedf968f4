"""
Taxonomie des erreurs métier.

Les services lèvent ces exceptions, main.py les traduit en enveloppe JSON.
`retryable` distingue les échecs transitoires (store) des rejets définitifs.
"""

from __future__ import annotations

from typing import Any


class ServiceError(Exception):
    status_code = 500
    code = "ERROR"
    retryable = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class NotFoundError(ServiceError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            f"{resource} not found: {identifier}",
            {"resource": resource, "identifier": str(identifier)},
        )


class ProductNotFoundError(NotFoundError):
    code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: Any):
        super().__init__("Product", product_id)


class MaterialNotFoundError(NotFoundError):
    code = "MATERIAL_NOT_FOUND"

    def __init__(self, material_id: Any):
        super().__init__("Material", material_id)


class InvalidInputError(ServiceError):
    status_code = 400
    code = "INVALID_INPUT"

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, {"field": field} if field else None)
        self.field = field


class InvalidStatusError(InvalidInputError):
    code = "INVALID_STATUS"

    def __init__(self, status: Any, allowed: list[str]):
        super().__init__(
            f"Invalid status {status!r}, expected one of: {', '.join(allowed)}",
            field="status",
        )


class UserInvalidError(InvalidInputError):
    code = "USER_INVALID"

    def __init__(self, user_id: Any):
        super().__init__(f"User is unknown or inactive: {user_id}", field="user_id")


class ConflictError(ServiceError):
    status_code = 409
    code = "CONFLICT"


class StorageFailureError(ServiceError):
    status_code = 503
    code = "STORAGE_FAILURE"
    retryable = True
