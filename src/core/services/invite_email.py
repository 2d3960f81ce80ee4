"""
Invite email rendering.

Builds the redemption URL and the subject/HTML/text bodies of the team
invitation email. Pure functions; sending lives in src.components.notify.
"""

from __future__ import annotations

import html
from dataclasses import dataclass
from urllib.parse import urlencode, urlsplit, urlunsplit

DEFAULT_SUBJECT = "You've been invited to {{app_name}}"


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    body_html: str
    body_text: str


def build_invite_url(base_url: str, token: str) -> str:
    """
    Append the invite token to the app URL as `?invite=<token>`.

    Existing query parameters on the base URL are preserved.
    """
    parts = urlsplit(base_url)
    query = f"{parts.query}&" if parts.query else ""
    query += urlencode({"invite": token})
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def render_invite_subject(app_name: str, template: str = DEFAULT_SUBJECT) -> str:
    return template.replace("{{app_name}}", app_name)


def render_invite_email(
    invite_url: str,
    app_name: str,
    role: str | None = None,
    subject_template: str = DEFAULT_SUBJECT,
) -> RenderedEmail:
    safe_url = html.escape(invite_url, quote=True)
    safe_app = html.escape(app_name)

    if role:
        intro = (
            f"You've been invited to join a <strong>{safe_app}</strong> workspace "
            f"as a <strong>{html.escape(role)}</strong>."
        )
        intro_text = f"You've been invited to join a {app_name} workspace as a {role}."
    else:
        intro = f"You've been invited to join a <strong>{safe_app}</strong> workspace."
        intro_text = f"You've been invited to join a {app_name} workspace."

    body_html = (
        '<div style="font-family:sans-serif;max-width:480px;margin:0 auto;padding:32px 24px">'
        f'<p style="font-size:15px;line-height:1.6">{intro}</p>'
        "<p>Click the link below to accept your invitation and get started:</p>"
        f'<p style="margin:24px 0"><a href="{safe_url}" '
        'style="background:#3b82f6;color:#fff;padding:12px 24px;border-radius:6px;'
        'text-decoration:none;font-weight:bold;display:inline-block">Accept Invitation</a></p>'
        f'<p style="font-size:13px">Or copy this link: <a href="{safe_url}">{safe_url}</a></p>'
        '<p style="color:#666;font-size:12px">'
        "If you didn't expect this invitation, you can safely ignore this email.</p>"
        "</div>"
    )
    body_text = (
        f"{intro_text}\n\n"
        f"Accept your invitation: {invite_url}\n\n"
        "If you didn't expect this invitation, you can safely ignore this email."
    )

    return RenderedEmail(
        subject=render_invite_subject(app_name, subject_template),
        body_html=body_html,
        body_text=body_text,
    )
