from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Wire models use camelCase keys; Python code uses snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Errors ---
class ErrorDetail(BaseModel):
    code: str
    message: str
    field: str | None = None


# --- Invites ---
# Request fields are optional so missing values surface as invalid_argument
class InviteMemberRequest(CamelModel):
    email: str | None = None
    role: str | None = None
    company_id: str | None = None


class InviteMemberResponse(CamelModel):
    status: str
    email: str
    token: str | None = None
    email_sent: bool | None = None


class AcceptInviteRequest(CamelModel):
    token: str | None = None


class AcceptInviteResponse(CamelModel):
    status: str
    company_id: str
    role: str


class SendInviteEmailRequest(CamelModel):
    to: str | None = None
    invite_url: str | None = None
    role: str | None = None


class SendInviteEmailResponse(CamelModel):
    status: str
    to: str


# --- Members ---
class RemoveMemberRequest(CamelModel):
    target_uid: str | None = None
    company_id: str | None = None


class RemoveMemberResponse(CamelModel):
    status: str
    target_uid: str


class UpdateMemberRoleRequest(CamelModel):
    target_uid: str | None = None
    role: str | None = None
    company_id: str | None = None


class UpdateMemberRoleResponse(CamelModel):
    status: str
    target_uid: str
    role: str


class ProfileResponse(CamelModel):
    uid: str
    company_id: str | None = None
    role: str | None = None


# --- Accounts ---
class RegisterRequest(BaseModel):
    email: str
    password: str


class AccountResponse(BaseModel):
    uid: str
    email: str
    created_at: datetime
