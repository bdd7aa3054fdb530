"""
Typed, user-presentable errors raised by the decision services
"""
from typing import Any, Dict


class DecisionLogError(Exception):
    """Base error for rule violations surfaced to the caller"""
    status_code = 500
    error_type = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "type": self.error_type}


class NotFoundError(DecisionLogError):
    """Message, decision, or channel absent"""
    status_code = 404
    error_type = "not_found"


class ConflictError(DecisionLogError):
    """Operation conflicts with the current state of a decision or message"""
    status_code = 409
    error_type = "conflict"


class ForbiddenError(DecisionLogError):
    """Actor lacks the team role required for the operation"""
    status_code = 403
    error_type = "forbidden"


class ValidationError(DecisionLogError):
    """Input rejected before touching the store"""
    status_code = 400
    error_type = "validation"


class AuthenticationError(DecisionLogError):
    """No usable actor identity on the request"""
    status_code = 401
    error_type = "unauthenticated"
