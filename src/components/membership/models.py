from dataclasses import dataclass

from src.domain.entities import Caller, Role
from src.domain.errors import RosterError


@dataclass
class RemoveMemberInput:
    caller: Caller | None
    company_id: str
    target_uid: str


@dataclass
class UpdateRoleInput:
    caller: Caller | None
    company_id: str
    target_uid: str
    role: str


@dataclass
class RemoveOutput:
    status: str | None = None  # "removed"
    target_uid: str | None = None
    success: bool = False
    error: RosterError | None = None


@dataclass
class UpdateRoleOutput:
    status: str | None = None  # "updated"
    target_uid: str | None = None
    role: Role | None = None
    success: bool = False
    error: RosterError | None = None
