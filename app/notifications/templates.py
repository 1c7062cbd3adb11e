"""
app/notifications/templates.py — Hot-lead alert email rendering.

The plain-text body lists contact details, score and every answer; the
HTML body shows the same pairs as a two-column table with an admin link.
"""

import html
from dataclasses import dataclass

from app.db.models import FormLead


@dataclass
class RenderedEmail:
    """Final email ready to be sent — subject, HTML body, plain-text body."""
    subject: str
    html_body: str
    plain_body: str


def _lead_lines(lead: FormLead, max_score: int | None) -> list[str]:
    score = f"{lead.score_total}/{max_score}" if max_score else str(lead.score_total)
    lines = [
        f"Name: {lead.nome or '-'}",
        f"Email: {lead.email or '-'}",
        f"Phone: {lead.telefone or '-'}",
        f"Location: {lead.cidade_estado or '-'}",
        f"Score: {score} ({lead.classification})",
        "",
        "Answers:",
    ]
    for question_id, answer in sorted((lead.answers or {}).items()):
        lines.append(f"  {question_id}: {answer}")
    return lines


def _split_lines(lines: list[str]) -> list[tuple[str, str]]:
    # "Label: value" pairs for the HTML table; the "Answers:" heading is dropped
    pairs = []
    for line in lines:
        label, sep, value = line.strip().partition(": ")
        if sep:
            pairs.append((label, value))
    return pairs


def render_hot_lead_email(
    lead: FormLead,
    max_score: int | None = None,
    admin_url: str | None = None,
) -> RenderedEmail:
    """
    Render the alert sent when a lead is first classified HOT.

    Args:
        lead:      The lead that just turned HOT.
        max_score: Highest achievable score, shown next to the lead's score.
        admin_url: Link to the lead in the admin panel, if known.

    Returns:
        RenderedEmail with subject, HTML body, and plain-text body.
    """
    who = lead.nome or lead.email or f"session {lead.session_id}"
    subject = f"🔥 New HOT lead: {who} (score {lead.score_total})"

    lines = _lead_lines(lead, max_score)
    rows = "\n".join(
        f'<tr><td style="padding:2px 12px 2px 0;color:#666">{html.escape(label)}</td>'
        f"<td>{html.escape(value)}</td></tr>"
        for label, value in _split_lines(lines)
    )
    if admin_url:
        lines += ["", f"Open in admin: {admin_url}"]
    plain_body = "\n".join(lines)

    link = (
        f'<p><a href="{html.escape(admin_url, quote=True)}">Open lead in admin</a></p>'
        if admin_url else ""
    )
    html_body = (
        "<!DOCTYPE html>\n"
        f'<html lang="en"><head><meta charset="UTF-8"><title>{html.escape(subject)}</title></head>\n'
        '<body style="font-family:sans-serif;font-size:14px;color:#1a1a1a">\n'
        f"<h2>{html.escape(subject)}</h2>\n"
        f'<table style="border-collapse:collapse">\n{rows}\n</table>\n'
        f"{link}\n"
        "</body></html>"
    )

    return RenderedEmail(subject=subject, html_body=html_body, plain_body=plain_body)
