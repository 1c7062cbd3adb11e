"""
api/endpoints/lead_routes.py — Routes for form leads.

POST   /form-leads/progress                 — Submit form progress (upsert by session id)
GET    /form-leads                          — List leads (filter by classification, status, completion, search)
GET    /form-leads/stats                    — Counts by classification
GET    /form-leads/by-session/{session_id}  — Lead for a form session (resume a partial form)
GET    /form-leads/{id}                     — Get a single lead
PATCH  /form-leads/{id}                     — Admin edit: status, notes, hot-alert flag
PATCH  /form-leads/{id}/status              — Update lead status
DELETE /form-leads/{id}                     — Delete a lead
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.db.models import LeadStatus
from app.db.repository import count_leads_by_classification, get_lead, get_lead_by_session, list_leads
from app.forms.models import LeadTier
from app.services.lead_service import (
    LeadNotFoundError,
    delete_lead,
    set_lead_status,
    submit_progress,
    update_lead,
)
from api.schemas import FormLeadOut, LeadProgressRequest, LeadStatusUpdate, LeadUpdate, OKResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/progress", response_model=FormLeadOut, summary="Submit form progress")
def post_progress(payload: LeadProgressRequest, db: Session = Depends(get_db)):
    """
    Score the session's answers and create or update its lead.
    Called after every answered step; repeated calls update the same row.
    """
    try:
        lead = submit_progress(db, payload)
    except Exception as exc:
        logger.error("Progress submission failed for session %s: %s", payload.session_id, exc)
        raise HTTPException(status_code=500, detail="Could not save form progress.")
    db.commit()
    return lead


@router.get("", response_model=list[FormLeadOut], summary="List leads")
def get_leads(
    classification: Optional[LeadTier] = Query(
        default=None,
        description="Filter by classification. Omit to return all leads.",
    ),
    status: Optional[LeadStatus] = Query(default=None, description="Filter by lead status"),
    form_completo: Optional[bool] = Query(default=None, description="Only completed (true) or partial (false) forms"),
    search: Optional[str] = Query(default=None, max_length=255, description="Match name, email or phone"),
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    """Return the most recent leads matching every given filter."""
    return list_leads(
        db,
        classification=classification.value if classification else None,
        status=status,
        form_completo=form_completo,
        search=search,
        limit=limit,
    )


@router.get("/stats", summary="Lead counts by classification")
def lead_stats(db: Session = Depends(get_db)):
    """Return aggregate lead counts grouped by classification."""
    stats = {tier.value: count_leads_by_classification(db, tier.value) for tier in LeadTier}
    stats["total"] = sum(stats.values())
    return stats


@router.get("/by-session/{session_id}", response_model=FormLeadOut, summary="Get lead by form session")
def get_lead_for_session(session_id: str, db: Session = Depends(get_db)):
    """Used by the form to restore answers when a visitor comes back."""
    lead = get_lead_by_session(db, session_id)
    if not lead:
        raise HTTPException(status_code=404, detail=f"No lead for session {session_id}.")
    return lead


@router.get("/{lead_id}", response_model=FormLeadOut, summary="Get lead by ID")
def get_lead_by_id(lead_id: int, db: Session = Depends(get_db)):
    lead = get_lead(db, lead_id)
    if not lead:
        raise HTTPException(status_code=404, detail=f"Lead {lead_id} not found.")
    return lead


@router.patch("/{lead_id}", response_model=FormLeadOut, summary="Edit lead")
def patch_lead(lead_id: int, payload: LeadUpdate, db: Session = Depends(get_db)):
    """Update status, notes and/or the hot-alert flag. Omitted fields are left alone."""
    try:
        lead = update_lead(
            db,
            lead_id,
            status=payload.status,
            observacoes=payload.observacoes,
            hot_notified=payload.hot_notified,
        )
    except LeadNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    db.commit()
    return lead


@router.patch("/{lead_id}/status", response_model=FormLeadOut, summary="Update lead status")
def patch_lead_status(
    lead_id: int,
    payload: LeadStatusUpdate,
    db: Session = Depends(get_db),
):
    """
    Update the status of a lead.
    Valid statuses: in_progress, completed, contacted, converted, lost.
    """
    try:
        lead = set_lead_status(db, lead_id, payload.status)
    except LeadNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    db.commit()
    logger.info("Lead %d status updated to %s via API.", lead_id, payload.status.value)
    return lead


@router.delete("/{lead_id}", response_model=OKResponse, summary="Delete lead")
def remove_lead(lead_id: int, db: Session = Depends(get_db)):
    try:
        delete_lead(db, lead_id)
    except LeadNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    db.commit()
    return OKResponse(message=f"Lead {lead_id} deleted.")
