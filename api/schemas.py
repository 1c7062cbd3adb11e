"""
api/schemas.py — Pydantic request/response models for all API endpoints.

These are the API contract — separate from DB ORM models so we can
control exactly what data is exposed over HTTP. The form configuration
itself is served with the FormConfig model (camelCase keys).
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.db.models import LeadStatus
from app.forms.models import LeadTier
from app.services.lead_service import LeadProgress


# ── Shared ────────────────────────────────────────────────────────────────────

class OKResponse(BaseModel):
    """Generic success acknowledgement."""
    status: str = "ok"
    message: str


class ConfigErrorDetail(BaseModel):
    message: str
    problems: list[str]


class ConfigErrorResponse(BaseModel):
    """Body of a 422 raised for an invalid form configuration."""
    detail: ConfigErrorDetail


# ── Scoring preview ───────────────────────────────────────────────────────────

class ScoreRequest(BaseModel):
    answers: dict[str, Any] = Field(default_factory=dict, description="Answers keyed by question id")


class ScoreResponse(BaseModel):
    total: int
    breakdown: dict[str, int]
    max_score: int
    classification: LeadTier


# ── Leads ─────────────────────────────────────────────────────────────────────

class LeadProgressRequest(LeadProgress):
    """Progress submission; accepts camelCase keys as sent by the web form."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FormLeadOut(BaseModel):
    id: int
    session_id: str
    nome: Optional[str] = None
    email: Optional[str] = None
    telefone: Optional[str] = None
    cidade_estado: Optional[str] = None
    answers: dict[str, Any] = Field(default_factory=dict)
    custom_answers: Optional[dict[str, Any]] = None
    score_total: int
    score_breakdown: dict[str, int] = Field(default_factory=dict)
    classification: LeadTier
    question_number: int
    form_completo: bool
    status: LeadStatus
    observacoes: Optional[str] = None
    hot_notified: bool
    hot_notified_at: Optional[datetime] = None
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class LeadStatusUpdate(BaseModel):
    status: LeadStatus = Field(..., description="New lead status")


class LeadUpdate(BaseModel):
    """Admin edit of a lead; omitted fields stay unchanged."""
    status: Optional[LeadStatus] = None
    observacoes: Optional[str] = Field(default=None, max_length=5000, description="Sales team notes")
    hot_notified: Optional[bool] = Field(default=None, description="Override the hot-lead alert flag")
