"""
app/notifications/mailer.py — Hot-lead alert mailer (SMTP over SSL) with dry-run support.

HotLeadMailer emails the configured recipient when a lead is classified HOT
for the first time. The submission workflow records the "notified" flag on
the lead; this class only renders and delivers.
"""

import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from app.config import settings
from app.db.models import FormLead
from app.notifications.templates import RenderedEmail, render_hot_lead_email

logger = logging.getLogger(__name__)


class HotLeadMailer:
    """
    Sends hot-lead alerts via SMTP.

    With MAILER_DRY_RUN=true (the default) the alert is printed instead of
    sent, so local runs never reach a real inbox.
    """

    def __init__(self, dry_run: Optional[bool] = None, recipient: Optional[str] = None):
        self.smtp_host = settings.smtp_host
        self.smtp_port = settings.smtp_port
        self.smtp_user = settings.smtp_user
        self.smtp_password = settings.smtp_password
        self.recipient = recipient if recipient is not None else settings.notify_email
        self.dry_run = dry_run if dry_run is not None else settings.mailer_dry_run

    # ── Public API ────────────────────────────────────────────────────────────

    def notify_hot_lead(self, lead: FormLead, max_score: Optional[int] = None) -> bool:
        """
        Send (or simulate) the alert for a lead that just turned HOT.

        Returns:
            True when the alert was delivered (or printed in dry-run),
            False when there is no recipient or delivery failed.
        """
        if not self.recipient:
            logger.warning("NOTIFY_EMAIL is not set; skipping hot-lead alert for lead %s.", lead.id)
            return False

        email = render_hot_lead_email(
            lead,
            max_score=max_score,
            admin_url=f"{settings.public_site_url.rstrip('/')}/admin/leads/{lead.id}",
        )

        if self.dry_run:
            self._print_dry_run(self.recipient, email)
            logger.info("DRY RUN: hot-lead alert for lead %s printed (not sent).", lead.id)
            return True

        try:
            self._send_via_smtp(self.recipient, email)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send hot-lead alert for lead %s: %s", lead.id, exc)
            return False

        logger.info("Hot-lead alert sent to %s (lead_id=%s).", self.recipient, lead.id)
        return True

    # ── Private helpers ───────────────────────────────────────────────────────

    def _build_message(self, to_address: str, email: RenderedEmail) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = email.subject
        msg["From"] = self.smtp_user
        msg["To"] = to_address
        msg.set_content(email.plain_body)
        msg.add_alternative(email.html_body, subtype="html")
        return msg

    @retry(
        retry=retry_if_exception_type((smtplib.SMTPException, OSError)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _send_via_smtp(self, to_address: str, email: RenderedEmail) -> None:
        """Deliver over SMTP_SSL; transient failures are retried up to 3 times."""
        with smtplib.SMTP_SSL(self.smtp_host, self.smtp_port) as server:
            server.login(self.smtp_user, self.smtp_password)
            server.sendmail(self.smtp_user, to_address, self._build_message(to_address, email).as_string())

    @staticmethod
    def _print_dry_run(to_address: str, email: RenderedEmail) -> None:
        rule = "=" * 60
        print("\n".join([
            "",
            rule,
            f"[DRY RUN] hot-lead alert to {to_address}",
            f"Subject: {email.subject}",
            rule,
            email.plain_body,
            rule,
            "",
        ]))
