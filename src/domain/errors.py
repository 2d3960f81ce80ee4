from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Machine-readable failure kinds returned by roster components."""

    UNAUTHENTICATED = "unauthenticated"
    INVALID_ARGUMENT = "invalid_argument"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    FAILED_PRECONDITION = "failed_precondition"
    INTERNAL = "internal"


@dataclass(frozen=True)
class RosterError:
    """Failure with a code and a message naming the violated precondition."""

    code: ErrorCode
    message: str
    field: str | None = None

    @classmethod
    def unauthenticated(cls) -> "RosterError":
        return cls(ErrorCode.UNAUTHENTICATED, "Must be signed in.")

    @classmethod
    def invalid(cls, message: str, field: str | None = None) -> "RosterError":
        return cls(ErrorCode.INVALID_ARGUMENT, message, field)

    @classmethod
    def invalid_role(cls) -> "RosterError":
        return cls(ErrorCode.INVALID_ARGUMENT, "role must be admin, edit, or view.", "role")

    @classmethod
    def denied(cls, message: str) -> "RosterError":
        return cls(ErrorCode.PERMISSION_DENIED, message)

    @classmethod
    def not_found(cls, message: str) -> "RosterError":
        return cls(ErrorCode.NOT_FOUND, message)
