# app/domain/errors.py
from typing import Any, Dict, List


class ServiceError(Exception):
    """
    Bazowy blad warstwy serwisow.
    Router mapuje go 1:1 na HTTPException(status_code, detail).
    """

    status_code = 400

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    @property
    def detail(self) -> Dict[str, Any]:
        return {"message": self.message, **self.context}


class InvalidInput(ServiceError, ValueError):
    status_code = 400


class BatchValidationError(InvalidInput):
    """All-or-nothing batch rejected; lists every invalid element."""

    def __init__(self, message: str, invalid_items: List[Dict[str, Any]]):
        super().__init__(
            message,
            invalid_count=len(invalid_items),
            invalid_items=invalid_items,
        )
        self.invalid_items = invalid_items


class NotFound(ServiceError, LookupError):
    status_code = 404


class StockInsufficient(ServiceError):
    status_code = 400


class CartEmpty(ServiceError):
    status_code = 400


class BusinessRuleViolation(ServiceError):
    status_code = 400


class DuplicateEntry(ServiceError):
    status_code = 409


class AuthenticationFailed(ServiceError):
    status_code = 401


class AccessDenied(ServiceError, PermissionError):
    status_code = 403


class ConcurrencyConflict(ServiceError, RuntimeError):
    """Write conflicts kept happening after all retries; safe for the client to retry."""

    status_code = 409

    def __init__(self, message: str, attempts: int):
        super().__init__(message, retryable=True, attempts=attempts)


class TransientConflict(RuntimeError):
    """
    Sygnal wewnatrz proby transakcji: ktos inny zapisal w miedzyczasie.
    Nigdy nie wychodzi poza run_in_transaction.
    """
