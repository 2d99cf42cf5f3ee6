from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class AppError(Exception):
    code: str
    message: str
    status_code: int
    field: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.field:
            payload["field"] = self.field
        return payload


class BadRequestError(AppError):
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(code="BAD_REQUEST", message=message, status_code=400, field=field)


class ConflictError(AppError):
    def __init__(self, message: str):
        super().__init__(code="CONFLICT", message=message, status_code=409)


class FieldMissingError(AppError):
    """A step form payload is missing a field the step reads."""

    def __init__(self, field: str, step: int):
        super().__init__(
            code="FIELD_MISSING",
            message=f"step {step} form is missing field '{field}'",
            status_code=400,
            field=field,
        )


class ValidationError(AppError):
    def __init__(self, message: str, errors: Dict[str, str], code: str = "VALIDATION_FAILED"):
        super().__init__(code=code, message=message, status_code=422)
        self.errors = dict(errors)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["errors"] = dict(self.errors)
        return payload


class InvariantViolation(ValidationError):
    def __init__(self, message: str, errors: Dict[str, str]):
        super().__init__(message, errors, code="INVARIANT_VIOLATION")


class ReceiptMissingError(AppError):
    def __init__(self, message: str = "upload your payment receipt before submitting the booking"):
        super().__init__(code="RECEIPT_MISSING", message=message, status_code=409, field="receipt_present")


class StoreCorruptError(AppError):
    def __init__(self, message: str):
        super().__init__(code="STORE_CORRUPT", message=message, status_code=500)


class BackendRejectedError(AppError):
    def __init__(self, message: str):
        super().__init__(code="BACKEND_REJECTED", message=message, status_code=502)
