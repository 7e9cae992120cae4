"""
Error taxonomy for the introduction workflow and trust verification.

Every error carries a stable `code` that the outer layer reports verbatim.
Families:
    ValidationError  - malformed, user-correctable input
    AdmissionError   - a new request is not allowed (not retried)
    ConflictError    - the losing side of a race or a stale action (not retried)
    TransientError   - reachability problems, surfaced after one retry
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class IntroError(Exception):
    code: str = "Error"

    def __init__(self, message: Optional[str] = None, **details: Any) -> None:
        self.message = message or self.code
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return {"error": payload}


class NotFound(IntroError):
    code = "NotFound"


# --- Validation ---
class ValidationError(IntroError):
    code = "ValidationError"


class InvalidFormat(ValidationError):
    code = "InvalidFormat"


class InvalidInput(ValidationError):
    code = "InvalidInput"


# --- Admission ---
class AdmissionError(IntroError):
    code = "AdmissionDenied"


class CompanyNotVerified(AdmissionError):
    code = "CompanyNotVerified"


class CapacityExceeded(AdmissionError):
    """Raised when a capacity rule fails; subclasses name the rule."""

    code = "CapacityExceeded"


class InsufficientCredits(CapacityExceeded):
    code = "InsufficientCredits"


class RecipientAtCapacity(CapacityExceeded):
    code = "RecipientAtCapacity"


class DuplicateActiveRequest(CapacityExceeded):
    code = "DuplicateActiveRequest"


class RecipientUnavailable(AdmissionError):
    code = "RecipientUnavailable"


class CompanyBlocked(AdmissionError):
    code = "CompanyBlocked"


# --- Conflict ---
class ConflictError(IntroError):
    code = "Conflict"


class AlreadyResponded(ConflictError):
    code = "AlreadyResponded"


class Expired(ConflictError):
    code = "Expired"


class Forbidden(ConflictError):
    code = "Forbidden"


# --- Transient ---
class TransientError(IntroError):
    code = "Transient"


class Unreachable(TransientError):
    code = "Unreachable"


class ManualReviewRequired(TransientError):
    code = "ManualReviewRequired"


ADMISSION_ERRORS = {
    cls.code: cls
    for cls in (
        InsufficientCredits,
        RecipientAtCapacity,
        DuplicateActiveRequest,
        RecipientUnavailable,
        CompanyBlocked,
    )
}
