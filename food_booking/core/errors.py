from typing import Any, Dict, Optional


class BookingError(Exception):
    """
    Base class for every failure the booking store reports.
    Carries a machine-readable kind and a human-readable message.
    """
    kind = "internal"
    status_code = 500

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "field": self.field}


class BookingValidationError(BookingError):
    """Missing or invalid payload field. `field` names the offender."""
    kind = "validation"
    status_code = 400


class BookingConflictError(BookingError):
    kind = "conflict"
    status_code = 409


class BookingNotFoundError(BookingError):
    kind = "not_found"
    status_code = 404


class BookingInternalError(BookingError):
    kind = "internal"
    status_code = 500
