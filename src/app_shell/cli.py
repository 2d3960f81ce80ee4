import argparse
import logging
import os
import sys
from pathlib import Path
from typing import NoReturn

from src.adapters.clock import SystemClock
from src.adapters.dev_email import DevEmailAdapter
from src.adapters.sendgrid_email import SendGridEmailAdapter
from src.adapters.sqlite.accounts import AccountExistsError, SQLiteAccountDirectory
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.store import SQLiteMembershipStore
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
from src.components.notify import EmailSenderPort, NotifyConfig
from src.core.ports.email import EmailAddress
from src.core.ports.store import StoreError, WriteBatch
from src.core.services.roster import MembershipChange, apply_membership_change
from src.domain.entities import Caller
from src.domain.errors import RosterError
from src.domain.policy import validate_role
from src.rules.loader import load_rules
from src.rules.models import Rules

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cli")

RULES_PATH = "rules.yaml"


def get_db_path() -> str:
    data_dir = Path(os.environ.get("ROSTER_DATA_DIR", "./data"))
    data_dir.mkdir(parents=True, exist_ok=True)
    return str(data_dir / "roster.db")


def get_rules() -> Rules:
    if not Path(RULES_PATH).exists():
        logger.error(f"Rules file {RULES_PATH} not found.")
        sys.exit(1)
    return load_rules(Path(RULES_PATH))


def get_email(rules: Rules) -> EmailSenderPort | None:
    api_key = os.environ.get("ROSTER_SENDGRID_API_KEY")
    if api_key:
        sender = EmailAddress(rules.email.sender_email, rules.email.sender_name)
        return SendGridEmailAdapter(api_key, sender, timeout=rules.email.timeout_seconds)
    if rules.email.dev_fallback:
        return DevEmailAdapter(log_body=True)
    return None


def resolve_caller(accounts: SQLiteAccountDirectory, email: str) -> Caller:
    account = accounts.get_by_email(email)
    if not account:
        logger.error(f"Account {email} not found. Create it with create-account first.")
        sys.exit(1)
    return Caller(uid=account.uid, email=account.email)


def fail(error: RosterError | None) -> NoReturn:
    if error is None:
        logger.error("Operation failed")
    else:
        logger.error(f"{error.code.value}: {error.message}")
    sys.exit(1)


def handle_init_db(db_path: str) -> None:
    applied = SQLiteMigrator(db_path).run_migrations()
    print(f"Database ready at {db_path} ({len(applied)} migrations applied).")


def handle_create_account(db_path: str, args: argparse.Namespace) -> None:
    accounts = SQLiteAccountDirectory(db_path)
    try:
        account = accounts.create_account(args.email, args.password)
    except AccountExistsError as e:
        logger.error(str(e))
        sys.exit(1)
    print(f"Account created: {account.uid} <{account.email}>")

    if args.admin_of:
        # Bootstrap: the first admin of a company has nobody to invite them
        store = SQLiteMembershipStore(db_path)
        batch = apply_membership_change(
            WriteBatch(),
            MembershipChange.join(
                args.admin_of, account.uid, account.email, "admin", SystemClock().now_utc()
            ),
        )
        store.commit(batch)
        print(f"{account.email} is now admin of company {args.admin_of}.")


def handle_invite(db_path: str, args: argparse.Namespace) -> None:
    rules = get_rules()
    if not validate_role(args.role):
        logger.error(RosterError.invalid_role().message)
        sys.exit(1)

    accounts = SQLiteAccountDirectory(db_path)
    caller = resolve_caller(accounts, args.as_email)
    email = get_email(rules)
    try:
        out = run_issue(
            IssueInviteInput(caller=caller, company_id=args.company, email=args.email, role=args.role),
            store=SQLiteMembershipStore(db_path),
            identity=accounts,
            time=SystemClock(),
            notify_config=NotifyConfig.from_rules(rules, base_url=os.environ.get("ROSTER_APP_URL")),
            email=email,
            settings=InviteSettings.from_rules(rules),
        )
    finally:
        if isinstance(email, SendGridEmailAdapter):
            email.close()
    if not out.success:
        fail(out.error)

    if out.status == "added":
        print(f"{out.email} already has an account; added to {args.company} as {args.role}.")
    else:
        print(f"Invite created for {out.email} as '{args.role}'.")
        print(f"Token: {out.token}")
        print(f"Email sent: {'yes' if out.email_sent else 'no'}")


def handle_accept(db_path: str, args: argparse.Namespace) -> None:
    rules = get_rules()
    caller = resolve_caller(SQLiteAccountDirectory(db_path), args.as_email)
    out = run_redeem(
        RedeemInviteInput(caller=caller, token=args.token),
        store=SQLiteMembershipStore(db_path),
        time=SystemClock(),
        settings=InviteSettings.from_rules(rules),
    )
    if not out.success:
        fail(out.error)
    print(f"{caller.email} joined company {out.company_id} as {out.role}.")


def handle_remove(db_path: str, args: argparse.Namespace) -> None:
    caller = resolve_caller(SQLiteAccountDirectory(db_path), args.as_email)
    out = run_remove(
        RemoveMemberInput(caller=caller, company_id=args.company, target_uid=args.target_uid),
        store=SQLiteMembershipStore(db_path),
    )
    if not out.success:
        fail(out.error)
    print(f"Removed {out.target_uid} from company {args.company}.")


def handle_set_role(db_path: str, args: argparse.Namespace) -> None:
    caller = resolve_caller(SQLiteAccountDirectory(db_path), args.as_email)
    out = run_update_role(
        UpdateRoleInput(
            caller=caller, company_id=args.company, target_uid=args.target_uid, role=args.role
        ),
        store=SQLiteMembershipStore(db_path),
    )
    if not out.success:
        fail(out.error)
    print(f"{out.target_uid} is now '{out.role}' in company {args.company}.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Company Roster CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # init-db
    subparsers.add_parser("init-db", help="Create or migrate the SQLite database")

    # create-account
    account_parser = subparsers.add_parser("create-account", help="Create a sign-in account")
    account_parser.add_argument("email")
    account_parser.add_argument("--password", required=True)
    account_parser.add_argument(
        "--admin-of", metavar="COMPANY_ID", help="Make the new account admin of this company"
    )

    # invite
    invite_parser = subparsers.add_parser("invite", help="Invite an email to a company")
    invite_parser.add_argument("email")
    invite_parser.add_argument("role", help="Role to assign (admin, edit, view)")
    invite_parser.add_argument("--company", required=True)
    invite_parser.add_argument("--as", dest="as_email", required=True, help="Admin email")

    # accept
    accept_parser = subparsers.add_parser("accept", help="Redeem an invite token")
    accept_parser.add_argument("token")
    accept_parser.add_argument("--as", dest="as_email", required=True, help="Invitee email")

    # remove
    remove_parser = subparsers.add_parser("remove", help="Remove a member from a company")
    remove_parser.add_argument("target_uid")
    remove_parser.add_argument("--company", required=True)
    remove_parser.add_argument("--as", dest="as_email", required=True, help="Admin email")

    # set-role
    role_parser = subparsers.add_parser("set-role", help="Change a member's role")
    role_parser.add_argument("target_uid")
    role_parser.add_argument("role", help="New role (admin, edit, view)")
    role_parser.add_argument("--company", required=True)
    role_parser.add_argument("--as", dest="as_email", required=True, help="Admin email")

    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    db_path = get_db_path()

    if args.command == "init-db":
        handle_init_db(db_path)
        return

    # Every other command needs the schema in place
    SQLiteMigrator(db_path).run_migrations()

    try:
        if args.command == "create-account":
            handle_create_account(db_path, args)
        elif args.command == "invite":
            handle_invite(db_path, args)
        elif args.command == "accept":
            handle_accept(db_path, args)
        elif args.command == "remove":
            handle_remove(db_path, args)
        elif args.command == "set-role":
            handle_set_role(db_path, args)
    except StoreError as e:
        logger.error(f"Store error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
