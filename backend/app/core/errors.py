"""
Typed errors raised by the ledger / aggregator services.

Services raise these; routers let them propagate; ``app.main`` renders them
as ``{"code": ..., "detail": ...}`` with ``status_code``.

    InventoryError
    +-- ValidationError   (400)  malformed input, unknown product
    +-- AuthError         (401)  no resolvable actor
    +-- NotFoundError     (404)  missing or already deleted entity
    +-- StateError        (409)  illegal lifecycle transition
"""

from __future__ import annotations


class InventoryError(Exception):
    code: str = "inventory_error"
    status_code: int = 400

    def __init__(self, message: str, **data: object) -> None:
        super().__init__(message)
        self.message = message
        self.data = data

    def to_dict(self) -> dict:
        body: dict = {"code": self.code, "detail": self.message}
        if self.data:
            body["data"] = {k: str(v) for k, v in self.data.items()}
        return body


class ValidationError(InventoryError):
    code = "validation_error"
    status_code = 400


class AuthError(InventoryError):
    code = "unauthenticated"
    status_code = 401


class NotFoundError(InventoryError):
    code = "not_found"
    status_code = 404


class StateError(InventoryError):
    code = "invalid_state"
    status_code = 409


__all__ = [
    "InventoryError",
    "ValidationError",
    "AuthError",
    "NotFoundError",
    "StateError",
]
