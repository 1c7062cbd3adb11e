"""
app/services/lead_service.py — Business logic for form lead submissions.

This is the "glue" layer that coordinates:
  - Loading the effective form configuration
  - Scoring and classifying the session's answers
  - Upserting the lead row for the session
  - Sending the hot-lead alert exactly once per session
"""

import logging
from datetime import datetime
from typing import Any, Optional, Protocol

from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.db.models import TERMINAL_STATUSES, FormLead, LeadStatus
from app.db import repository
from app.forms.defaults import KNOWN_FIELD_IDS
from app.forms.models import LeadTier
from app.services.form_config_service import get_effective_config
from app.services.scoring import classify_score, compute_score, normalize_answers

logger = logging.getLogger(__name__)

# Answers copied onto their own FormLead columns
CONTACT_COLUMNS = {
    "nome": "nome",
    "email": "email",
    "telefone": "telefone",
    "cidadeEstado": "cidade_estado",
}


class LeadNotFoundError(LookupError):
    """Raised when a lead id doesn't exist."""


class HotLeadNotifier(Protocol):
    def notify_hot_lead(self, lead: FormLead, max_score: Optional[int] = None) -> bool:
        ...


class LeadProgress(BaseModel):
    """One progress submission from the form for a session."""

    session_id: str = Field(..., min_length=1, max_length=64)
    answers: dict[str, Any] = Field(default_factory=dict)
    question_number: int = Field(default=0, ge=0)
    form_completo: bool = False
    started_at: datetime | None = None
    tempo_total_segundos: int | None = Field(default=None, ge=0)
    url_origem: str | None = None
    utm_source: str | None = None
    utm_medium: str | None = None
    utm_campaign: str | None = None


def _default_notifier() -> HotLeadNotifier:
    # Lazy import keeps SMTP setup out of code paths that never notify
    from app.notifications.mailer import HotLeadMailer
    return HotLeadMailer()


def submit_progress(
    db: Session,
    progress: LeadProgress,
    notifier: Optional[HotLeadNotifier] = None,
) -> FormLead:
    """
    Score a progress submission and upsert the session's lead.

    New answers are merged over the answers already stored for the session,
    so each step only needs to send what changed. When the lead is HOT and
    no alert has gone out yet, the notifier is called once; a failed alert
    leaves the flag unset so the next submission tries again.

    Returns:
        The created or updated FormLead.
    """
    existing = repository.get_lead_by_session(db, progress.session_id)
    if existing is not None and existing.status in TERMINAL_STATUSES:
        logger.warning(
            "Ignoring progress for session %s: lead %d is already %s.",
            progress.session_id, existing.id, existing.status.value,
        )
        return existing

    config = get_effective_config(db)
    previous = dict(existing.answers or {}) if existing is not None else {}
    answers = {**previous, **normalize_answers(progress.answers, config)}

    score = compute_score(answers, config)
    tier = classify_score(score.total, config.thresholds)

    fields: dict[str, Any] = {
        "answers": answers,
        "custom_answers": {k: v for k, v in answers.items() if k not in KNOWN_FIELD_IDS} or None,
        "score_total": score.total,
        "score_breakdown": score.breakdown,
        "classification": tier.value,
        "question_number": max(progress.question_number, existing.question_number if existing else 0),
        "form_completo": progress.form_completo or bool(existing and existing.form_completo),
    }
    for answer_id, column in CONTACT_COLUMNS.items():
        if answer_id in answers:
            fields[column] = answers[answer_id]
    for name in ("started_at", "tempo_total_segundos", "url_origem", "utm_source", "utm_medium", "utm_campaign"):
        value = getattr(progress, name)
        if value is not None:
            fields[name] = value
    if progress.form_completo:
        fields["status"] = LeadStatus.COMPLETED

    lead = repository.upsert_lead(db, progress.session_id, fields)
    logger.info(
        "Lead %d (session %s): score=%d/%d → %s.",
        lead.id, progress.session_id, score.total, config.max_score, tier.value,
    )

    if tier is LeadTier.HOT and not lead.hot_notified:
        notifier = notifier or _default_notifier()
        if notifier.notify_hot_lead(lead, max_score=config.max_score):
            repository.mark_hot_notified(db, lead)
        else:
            logger.warning("Hot-lead alert for lead %d not delivered; will retry on next update.", lead.id)

    return lead


def _require_lead(db: Session, lead_id: int) -> FormLead:
    lead = repository.get_lead(db, lead_id)
    if lead is None:
        raise LeadNotFoundError(f"Lead {lead_id} not found.")
    return lead


def set_lead_status(db: Session, lead_id: int, status: LeadStatus) -> FormLead:
    """
    Move a lead through the external status workflow.

    Raises:
        LeadNotFoundError: when no lead has this id.
    """
    lead = _require_lead(db, lead_id)
    repository.update_lead_status(db, lead_id, status)
    db.flush()
    db.refresh(lead)
    logger.info("Lead %d status → %s.", lead_id, status.value)
    return lead


def update_lead(
    db: Session,
    lead_id: int,
    status: Optional[LeadStatus] = None,
    observacoes: Optional[str] = None,
    hot_notified: Optional[bool] = None,
) -> FormLead:
    """
    Apply an admin edit to a lead. Arguments left as None are not touched.

    Setting `hot_notified` by hand stamps hot_notified_at when turning it on
    and clears it when turning it off, so a cleared flag lets the next HOT
    submission send the alert again.

    Raises:
        LeadNotFoundError: when no lead has this id.
    """
    lead = _require_lead(db, lead_id)
    if status is not None:
        lead.status = status
    if observacoes is not None:
        lead.observacoes = observacoes.strip() or None
    if hot_notified is True and not lead.hot_notified:
        repository.mark_hot_notified(db, lead)
    elif hot_notified is False:
        lead.hot_notified = False
        lead.hot_notified_at = None
    db.flush()
    logger.info("Lead %d updated by admin.", lead_id)
    return lead


def delete_lead(db: Session, lead_id: int) -> None:
    """
    Raises:
        LeadNotFoundError: when no lead has this id.
    """
    repository.delete_lead(db, _require_lead(db, lead_id))
    logger.info("Lead %d deleted.", lead_id)
