from pydantic import BaseModel, Field, field_validator

from src.domain.entities import ROLES


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class InviteRules(BaseModel):
    token_bytes: int = Field(default=32, ge=16)  # 128-bit minimum
    ttl_days: int | None = Field(default=None, ge=1)  # None = never expires
    max_token_attempts: int = Field(default=3, ge=1)


class EmailRules(BaseModel):
    app_name: str
    sender_email: str
    sender_name: str | None = None
    subject: str = "You've been invited to {{app_name}}"
    dev_fallback: bool = False
    timeout_seconds: float = 10.0


class AppRules(BaseModel):
    base_url: str


class OpsRules(BaseModel):
    data_dir_required: bool = True
    required_env: list[str] = Field(default_factory=list)


class Rules(BaseModel):
    project: ProjectRules
    roles: list[str]
    invites: InviteRules
    email: EmailRules
    app: AppRules
    ops: OpsRules

    @field_validator("roles")
    @classmethod
    def roles_are_fixed(cls, v: list[str]) -> list[str]:
        if sorted(v) != sorted(ROLES):
            raise ValueError(f"roles must be exactly {list(ROLES)}")
        return v
