import logging
import secrets
from collections.abc import Callable
from datetime import timedelta

from src.components.guard import require_admin
from src.components.notify import EmailSenderPort, NotifyConfig, dispatch_invite_email
from src.core.ports.store import DuplicateRecordError, RecordNotFoundError, WriteBatch
from src.core.services.roster import MembershipChange, apply_membership_change
from src.domain.entities import PendingInvite, UserProfile
from src.domain.errors import RosterError
from src.domain.policy import PolicyEngine

from .models import (
    InviteSettings,
    IssueInviteInput,
    IssueInviteOutput,
    RedeemInviteInput,
    RedeemOutput,
)
from .ports import IdentityPort, InviteStorePort, TimePort

logger = logging.getLogger(__name__)

TOKEN_NOT_FOUND = "Invite token not found or already used."


def new_invite_token(nbytes: int = 32) -> str:
    return secrets.token_hex(nbytes)


def _emails_match(a: str, b: str) -> bool:
    return a.strip().lower() == b.strip().lower()


def _other_company(profile: UserProfile | None, company_id: str) -> str | None:
    if profile and profile.company_id and profile.company_id != company_id:
        return profile.company_id
    return None


def run_issue(
    inp: IssueInviteInput,
    *,
    store: InviteStorePort,
    identity: IdentityPort,
    time: TimePort,
    notify_config: NotifyConfig,
    email: EmailSenderPort | None = None,
    settings: InviteSettings = InviteSettings(),
    policy: PolicyEngine | None = None,
    token_factory: Callable[[], str] | None = None,
) -> IssueInviteOutput:
    policy = policy or PolicyEngine()

    if inp.caller is None:
        return IssueInviteOutput(error=RosterError.unauthenticated())

    if not inp.email or not inp.role or not inp.company_id:
        return IssueInviteOutput(
            error=RosterError.invalid("email, role, and companyId are required.")
        )

    if not policy.validate_role(inp.role):
        return IssueInviteOutput(error=RosterError.invalid_role())

    denied = require_admin(store, inp.caller.uid, inp.company_id, policy)
    if denied:
        return IssueInviteOutput(error=denied)

    target_email = inp.email.strip()
    now = time.now_utc()

    # 1. Existing account: add directly
    target_uid = identity.get_uid_by_email(target_email)
    if target_uid:
        if not policy.can_act_on(inp.caller.uid, target_uid):
            return IssueInviteOutput(error=RosterError.invalid("You cannot invite yourself."))

        if _other_company(store.get_profile(target_uid), inp.company_id):
            return IssueInviteOutput(
                error=RosterError.invalid(
                    f"{target_email} already belongs to another company.", "email"
                )
            )

        batch = apply_membership_change(
            WriteBatch(),
            MembershipChange.join(inp.company_id, target_uid, target_email, inp.role, now),
        )
        store.commit(batch)
        logger.info("Added %s to company %s as %s", target_uid, inp.company_id, inp.role)
        return IssueInviteOutput(status="added", email=target_email, success=True)

    # 2. No account yet: pending invite + best-effort email
    make_token = token_factory or (lambda: new_invite_token(settings.token_bytes))
    invite: PendingInvite | None = None
    for attempt in range(1, settings.max_token_attempts + 1):
        candidate = PendingInvite(
            token=make_token(),
            company_id=inp.company_id,
            email=target_email,
            role=inp.role,
            invited_at=now,
            invited_by=inp.caller.uid,
        )
        try:
            store.commit(WriteBatch().create_invite(candidate))
        except DuplicateRecordError:
            logger.warning("Invite token collision (attempt %d), regenerating", attempt)
            continue
        invite = candidate
        break

    if invite is None:
        raise DuplicateRecordError("invite", "token generation exhausted")

    logger.info(
        "Invited %s to company %s as %s (token %s...)",
        target_email,
        inp.company_id,
        inp.role,
        invite.token[:8],
    )

    email_sent = dispatch_invite_email(
        email, notify_config, target_email, invite.token, role=inp.role
    )

    return IssueInviteOutput(
        status="invited",
        email=target_email,
        token=invite.token,
        email_sent=email_sent,
        success=True,
    )


def run_redeem(
    inp: RedeemInviteInput,
    *,
    store: InviteStorePort,
    time: TimePort,
    settings: InviteSettings = InviteSettings(),
) -> RedeemOutput:
    if inp.caller is None:
        return RedeemOutput(error=RosterError.unauthenticated())

    if not inp.token:
        return RedeemOutput(error=RosterError.invalid("token is required.", "token"))

    invite = store.find_invite_by_token(inp.token)
    if invite is None:
        return RedeemOutput(error=RosterError.not_found(TOKEN_NOT_FOUND))

    now = time.now_utc()
    if settings.ttl_days is not None and invite.invited_at + timedelta(days=settings.ttl_days) < now:
        return RedeemOutput(error=RosterError.not_found("Invite token has expired."))

    if not _emails_match(invite.email, inp.caller.email):
        # Invite stays pending for its rightful recipient
        return RedeemOutput(
            error=RosterError.denied(
                f"This invite was sent to {invite.email}. Sign in with that email to accept."
            )
        )

    if _other_company(store.get_profile(inp.caller.uid), invite.company_id):
        return RedeemOutput(
            error=RosterError.invalid(
                "Leave your current company before accepting this invite.", "token"
            )
        )

    batch = apply_membership_change(
        WriteBatch(),
        MembershipChange.join(
            invite.company_id, inp.caller.uid, inp.caller.email, invite.role, now
        ),
    )
    batch.delete_invite(invite.company_id, invite.token, must_exist=True)

    try:
        store.commit(batch)
    except RecordNotFoundError as e:
        if e.kind != "invite":
            raise
        # Lost a race with a concurrent redemption of the same token
        return RedeemOutput(error=RosterError.not_found(TOKEN_NOT_FOUND))

    logger.info(
        "%s accepted invite to company %s as %s", inp.caller.uid, invite.company_id, invite.role
    )
    return RedeemOutput(
        status="accepted",
        company_id=invite.company_id,
        role=invite.role,
        success=True,
    )


def run(
    inp: IssueInviteInput | RedeemInviteInput,
    *,
    store: InviteStorePort,
    time: TimePort,
    identity: IdentityPort | None = None,  # Only needed for issue
    notify_config: NotifyConfig | None = None,  # Only needed for issue
    email: EmailSenderPort | None = None,
    settings: InviteSettings = InviteSettings(),
) -> IssueInviteOutput | RedeemOutput:
    if isinstance(inp, IssueInviteInput):
        assert identity and notify_config
        return run_issue(
            inp,
            store=store,
            identity=identity,
            time=time,
            notify_config=notify_config,
            email=email,
            settings=settings,
        )

    elif isinstance(inp, RedeemInviteInput):
        return run_redeem(inp, store=store, time=time, settings=settings)

    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
