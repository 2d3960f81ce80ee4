import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, status

from src.adapters.clock import SystemClock
from src.adapters.sqlite.accounts import SQLiteAccountDirectory
from src.adapters.sqlite.store import SQLiteMembershipStore
from src.api.deps import (
    get_accounts,
    get_caller,
    get_clock,
    get_email,
    get_invite_settings,
    get_notify_config,
    get_provider_email,
    get_store,
)
from src.api.schemas import (
    AcceptInviteRequest,
    AcceptInviteResponse,
    InviteMemberRequest,
    InviteMemberResponse,
    ProfileResponse,
    RemoveMemberRequest,
    RemoveMemberResponse,
    SendInviteEmailRequest,
    SendInviteEmailResponse,
    UpdateMemberRoleRequest,
    UpdateMemberRoleResponse,
)
from src.components.invite import (
    InviteSettings,
    IssueInviteInput,
    RedeemInviteInput,
    run_issue,
    run_redeem,
)
from src.components.membership import (
    RemoveMemberInput,
    UpdateRoleInput,
    run_remove,
    run_update_role,
)
from src.components.notify import (
    EmailSenderPort,
    NotifyConfig,
    SendInviteEmailInput,
    run_send,
)
from src.domain.entities import Caller
from src.domain.errors import ErrorCode, RosterError

logger = logging.getLogger(__name__)

router = APIRouter()

HTTP_STATUS = {
    ErrorCode.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.INVALID_ARGUMENT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.FAILED_PRECONDITION: status.HTTP_412_PRECONDITION_FAILED,
    ErrorCode.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def raise_for_error(error: RosterError | None) -> NoReturn:
    if error is None:
        raise HTTPException(status_code=500, detail={"code": "internal", "message": "Unknown error"})

    detail = {"code": error.code.value, "message": error.message}
    if error.field:
        detail["field"] = error.field
    headers = {"WWW-Authenticate": "Bearer"} if error.code == ErrorCode.UNAUTHENTICATED else None
    raise HTTPException(status_code=HTTP_STATUS[error.code], detail=detail, headers=headers)


@router.post("/invites", response_model=InviteMemberResponse, response_model_exclude_none=True)
def invite_member(
    req: InviteMemberRequest,
    caller: Caller | None = Depends(get_caller),
    store: SQLiteMembershipStore = Depends(get_store),
    accounts: SQLiteAccountDirectory = Depends(get_accounts),
    clock: SystemClock = Depends(get_clock),
    email: EmailSenderPort | None = Depends(get_email),
    notify_config: NotifyConfig = Depends(get_notify_config),
    settings: InviteSettings = Depends(get_invite_settings),
) -> InviteMemberResponse:
    """Add an existing account to the company, or issue a pending invite."""
    inp = IssueInviteInput(
        caller=caller,
        company_id=req.company_id or "",
        email=req.email or "",
        role=req.role or "",
    )
    out = run_issue(
        inp,
        store=store,
        identity=accounts,
        time=clock,
        notify_config=notify_config,
        email=email,
        settings=settings,
    )
    if not out.success or out.status is None or out.email is None:
        raise_for_error(out.error)

    return InviteMemberResponse(
        status=out.status,
        email=out.email,
        token=out.token,
        email_sent=out.email_sent if out.status == "invited" else None,
    )


@router.post("/invites/accept", response_model=AcceptInviteResponse)
def accept_invite(
    req: AcceptInviteRequest,
    caller: Caller | None = Depends(get_caller),
    store: SQLiteMembershipStore = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
    settings: InviteSettings = Depends(get_invite_settings),
) -> AcceptInviteResponse:
    out = run_redeem(
        RedeemInviteInput(caller=caller, token=req.token or ""),
        store=store,
        time=clock,
        settings=settings,
    )
    if not out.success or out.company_id is None or out.role is None:
        raise_for_error(out.error)

    return AcceptInviteResponse(status=out.status or "accepted", company_id=out.company_id, role=out.role)


@router.post("/invites/email", response_model=SendInviteEmailResponse)
def send_invite_email(
    req: SendInviteEmailRequest,
    caller: Caller | None = Depends(get_caller),
    email: EmailSenderPort | None = Depends(get_provider_email),
    notify_config: NotifyConfig = Depends(get_notify_config),
) -> SendInviteEmailResponse:
    """Send (or resend) an invitation email for an existing invite link."""
    out = run_send(
        SendInviteEmailInput(
            caller=caller,
            to=req.to or "",
            invite_url=req.invite_url or "",
            role=req.role,
        ),
        email=email,
        config=notify_config,
    )
    if not out.success or out.to is None:
        raise_for_error(out.error)

    return SendInviteEmailResponse(status=out.status or "sent", to=out.to)


@router.post("/members/remove", response_model=RemoveMemberResponse)
def remove_member(
    req: RemoveMemberRequest,
    caller: Caller | None = Depends(get_caller),
    store: SQLiteMembershipStore = Depends(get_store),
) -> RemoveMemberResponse:
    out = run_remove(
        RemoveMemberInput(
            caller=caller,
            company_id=req.company_id or "",
            target_uid=req.target_uid or "",
        ),
        store=store,
    )
    if not out.success or out.target_uid is None:
        raise_for_error(out.error)

    return RemoveMemberResponse(status=out.status or "removed", target_uid=out.target_uid)


@router.post("/members/role", response_model=UpdateMemberRoleResponse)
def update_member_role(
    req: UpdateMemberRoleRequest,
    caller: Caller | None = Depends(get_caller),
    store: SQLiteMembershipStore = Depends(get_store),
) -> UpdateMemberRoleResponse:
    out = run_update_role(
        UpdateRoleInput(
            caller=caller,
            company_id=req.company_id or "",
            target_uid=req.target_uid or "",
            role=req.role or "",
        ),
        store=store,
    )
    if not out.success or out.target_uid is None or out.role is None:
        raise_for_error(out.error)

    return UpdateMemberRoleResponse(
        status=out.status or "updated", target_uid=out.target_uid, role=out.role
    )


@router.get("/profile", response_model=ProfileResponse)
def read_profile(
    caller: Caller | None = Depends(get_caller),
    store: SQLiteMembershipStore = Depends(get_store),
) -> ProfileResponse:
    """The caller's company and role; both null when not a member anywhere."""
    if caller is None:
        raise_for_error(RosterError.unauthenticated())

    profile = store.get_profile(caller.uid)
    if profile is None:
        return ProfileResponse(uid=caller.uid)
    return ProfileResponse(uid=caller.uid, company_id=profile.company_id, role=profile.role)
