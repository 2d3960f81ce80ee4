from dataclasses import dataclass

from src.domain.errors import RosterError


@dataclass(frozen=True)
class RequireAdminInput:
    caller_id: str
    company_id: str


@dataclass(frozen=True)
class GuardOutput:
    success: bool = False
    error: RosterError | None = None
