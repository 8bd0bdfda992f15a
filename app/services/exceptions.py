# app/services/exceptions.py
from typing import Any, Dict, Optional
from uuid import UUID


class BookingError(Exception):
    """
    Base for every error the booking and notification services raise.

    Each subclass also derives from the builtin the routers already map
    (ValueError -> 400, LookupError -> 404, PermissionError -> 403), so the
    HTTP layer only needs the usual `except` chain.
    """
    kind = "internal"

    def __init__(self, message: str, payload: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.payload = payload or {}

    def to_detail(self) -> Dict[str, Any]:
        return {"message": self.message, **self.payload}


# --- 400 ---
class ValidationError(BookingError, ValueError):
    kind = "validation"


class SelfInterestError(ValidationError):
    def __init__(self):
        super().__init__("You cannot buy your own property.")


class AgentSelfMessageError(ValidationError):
    def __init__(self):
        super().__init__("Agents cannot initiate a conversation.")


class ConflictError(BookingError, ValueError):
    kind = "conflict"


class DuplicateInterestError(ConflictError):
    def __init__(self, interest_id: Optional[UUID] = None):
        super().__init__(
            "You have already shown interest in this property.",
            {"interestId": str(interest_id)} if interest_id else None,
        )
        self.interest_id = interest_id


class AlreadyFinalizedError(ConflictError):
    def __init__(self, interest_id: UUID):
        super().__init__(
            "Only one interest can be finalized for this property.",
            {"interestId": str(interest_id)},
        )
        self.interest_id = interest_id


class BookingFinalizedError(ConflictError):
    def __init__(self, interest_id: UUID):
        super().__init__(
            "This booking has been finalized and can no longer be changed.",
            {"interestId": str(interest_id)},
        )
        self.interest_id = interest_id


# --- 404 ---
class NotFoundError(BookingError, LookupError):
    kind = "not_found"


class NotFoundOrUnauthorizedError(NotFoundError):
    """Deliberately does not say which of the two it was."""

    def __init__(self):
        super().__init__("Interest record not found or unauthorized.")


# --- 403 ---
class AuthorizationError(BookingError, PermissionError):
    kind = "authorization"


# --- 500 ---
class InternalError(BookingError, RuntimeError):
    kind = "internal"
