"""
app/db/repository.py — All database read/write operations.

Business logic should never write raw SQL or ORM queries directly —
everything goes through this module. This keeps DB logic centralized
and easy to test/mock.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.db.models import SCORE_COLUMNS, CompanySettings, FormLead, LeadStatus

logger = logging.getLogger(__name__)


# ── Company settings / form config ────────────────────────────────────────────

def get_company_settings(db: Session) -> Optional[CompanySettings]:
    """Return the deployment's settings row, if one exists."""
    return db.query(CompanySettings).order_by(CompanySettings.id.asc()).first()


def get_stored_form_config(db: Session) -> Optional[dict[str, Any]]:
    """Return the raw stored form configuration document, or None."""
    row = get_company_settings(db)
    return row.form_config if row else None


def save_form_config_document(db: Session, document: dict[str, Any]) -> CompanySettings:
    """Store a form configuration document, creating the settings row if needed."""
    row = get_company_settings(db)
    if row is None:
        row = CompanySettings(form_config=document)
        db.add(row)
    else:
        row.form_config = document
    db.flush()
    logger.debug("Stored form config (%d questions).", len(document.get("questions", [])))
    return row


# ── Form leads ────────────────────────────────────────────────────────────────

def get_lead_by_session(db: Session, session_id: str) -> Optional[FormLead]:
    return db.query(FormLead).filter(FormLead.session_id == session_id).first()


def get_lead(db: Session, lead_id: int) -> Optional[FormLead]:
    return db.query(FormLead).filter(FormLead.id == lead_id).first()


def upsert_lead(db: Session, session_id: str, fields: dict[str, Any]) -> FormLead:
    """
    Create the lead for a session, or update it in place.

    `fields` maps FormLead attribute names to values; a `score_breakdown`
    entry is also copied into the dedicated score columns.
    """
    lead = get_lead_by_session(db, session_id)
    created = lead is None
    if created:
        lead = FormLead(session_id=session_id)
        db.add(lead)

    for name, value in fields.items():
        setattr(lead, name, value)

    breakdown = fields.get("score_breakdown")
    if breakdown is not None:
        for key, column in SCORE_COLUMNS.items():
            setattr(lead, column, breakdown.get(key))

    db.flush()
    logger.debug(
        "Lead %s for session %s (score=%s).",
        "created" if created else "updated", session_id, lead.score_total,
    )
    return lead


def mark_hot_notified(db: Session, lead: FormLead) -> None:
    """Record that the hot-lead alert went out for this lead."""
    lead.hot_notified = True
    lead.hot_notified_at = datetime.utcnow()
    db.flush()


def list_leads(
    db: Session,
    classification: Optional[str] = None,
    status: Optional[LeadStatus] = None,
    form_completo: Optional[bool] = None,
    search: Optional[str] = None,
    limit: int = 50,
) -> list[FormLead]:
    """
    Most recent leads first.

    Every filter is optional; `search` is a case-insensitive substring match
    on name, email or phone.
    """
    query = db.query(FormLead)
    if classification:
        query = query.filter(FormLead.classification == classification)
    if status is not None:
        query = query.filter(FormLead.status == status)
    if form_completo is not None:
        query = query.filter(FormLead.form_completo == form_completo)
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(
            FormLead.nome.ilike(pattern),
            FormLead.email.ilike(pattern),
            FormLead.telefone.ilike(pattern),
        ))
    return query.order_by(FormLead.created_at.desc(), FormLead.id.desc()).limit(limit).all()


def count_leads_by_classification(db: Session, classification: str) -> int:
    return db.query(FormLead).filter(FormLead.classification == classification).count()


def update_lead_status(db: Session, lead_id: int, status: LeadStatus) -> None:
    """Update the status of a lead."""
    db.query(FormLead).filter(FormLead.id == lead_id).update({"status": status})
    logger.debug("Lead %d status → %s", lead_id, status)


def delete_lead(db: Session, lead: FormLead) -> None:
    db.delete(lead)
    db.flush()
    logger.debug("Lead %d deleted.", lead.id)
