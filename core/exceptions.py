from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import ValidationError


class CarCareError(Exception):
    """Base class for errors the HTTP layer knows how to render."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> Dict[str, Any]:
        return {"message": self.message}


class RecordValidationError(CarCareError):
    status_code = 400

    def __init__(self, message: str, errors: Optional[List[Dict[str, str]]] = None) -> None:
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def from_pydantic(cls, message: str, exc: ValidationError) -> "RecordValidationError":
        errors = []
        for err in exc.errors():
            field = ".".join(str(part) for part in err.get("loc", ())) or "__root__"
            errors.append({"field": field, "message": err.get("msg", "invalid value")})
        return cls(message, errors)

    def to_payload(self) -> Dict[str, Any]:
        return {"message": self.message, "errors": self.errors}


class RecordNotFoundError(CarCareError):
    status_code = 404


class StoreError(CarCareError):
    status_code = 500


class TransportError(CarCareError):
    """Mail delivery failed. Never rendered to a client."""
