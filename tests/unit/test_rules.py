"""Unit tests for rules loading and validation."""

from pathlib import Path

import pytest

from src.rules.loader import load_rules

ROOT_RULES = Path(__file__).resolve().parents[2] / "rules.yaml"

VALID = """
project: {slug: roster, rules_version: "1"}
roles: [admin, edit, view]
invites: {token_bytes: 32, ttl_days: null, max_token_attempts: 3}
email: {app_name: Roster, sender_email: a@b.c}
app: {base_url: "https://app"}
ops: {required_env: []}
"""


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "rules.yaml"
    path.write_text(text)
    return path


def test_project_rules_load() -> None:
    rules = load_rules(ROOT_RULES)

    assert rules.project.slug == "company-roster"
    assert rules.roles == ["admin", "edit", "view"]
    assert rules.invites.ttl_days is None
    assert rules.email.dev_fallback is True


def test_minimal_rules_defaults(tmp_path: Path) -> None:
    rules = load_rules(_write(tmp_path, VALID))

    assert rules.email.subject == "You've been invited to {{app_name}}"
    assert rules.email.dev_fallback is False
    assert rules.ops.data_dir_required is True


def test_email_section_has_no_provider_switch() -> None:
    rules = load_rules(ROOT_RULES)

    assert "provider" not in type(rules.email).model_fields
    assert "provider:" not in ROOT_RULES.read_text()


def test_fenced_yaml_block(tmp_path: Path) -> None:
    text = f"# Rules\n\nSome prose.\n\n```yaml\n{VALID}\n```\n\nMore prose.\n"

    rules = load_rules(_write(tmp_path, text))

    assert rules.project.slug == "roster"


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_rules(tmp_path / "nope.yaml")


def test_invalid_yaml(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Invalid YAML"):
        load_rules(_write(tmp_path, "project: [unclosed"))


def test_non_mapping(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="mapping"):
        load_rules(_write(tmp_path, "- just\n- a list\n"))


@pytest.mark.parametrize(
    "old,new",
    [
        ("roles: [admin, edit, view]", "roles: [admin, edit, view, owner]"),
        ("roles: [admin, edit, view]", "roles: [admin, edit]"),
        ("token_bytes: 32", "token_bytes: 8"),
        ("ttl_days: null", "ttl_days: 0"),
        ("max_token_attempts: 3", "max_token_attempts: 0"),
    ],
)
def test_schema_violations(tmp_path: Path, old: str, new: str) -> None:
    with pytest.raises(ValueError, match="validation failed"):
        load_rules(_write(tmp_path, VALID.replace(old, new)))


def test_ttl_days(tmp_path: Path) -> None:
    rules = load_rules(_write(tmp_path, VALID.replace("ttl_days: null", "ttl_days: 14")))
    assert rules.invites.ttl_days == 14
