"""
app/db/models.py — SQLAlchemy ORM models for the lead-qualification form.

Tables:
  - CompanySettings → per-deployment settings; holds the form configuration JSON
  - FormLead        → one row per form session, updated on every partial submission
"""

import enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase


# ── Base ─────────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    pass


# ── Enums ────────────────────────────────────────────────────────────────────

class LeadStatus(str, enum.Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CONTACTED = "contacted"
    CONVERTED = "converted"
    LOST = "lost"


TERMINAL_STATUSES = {LeadStatus.CONVERTED, LeadStatus.LOST}


# ── Models ───────────────────────────────────────────────────────────────────

class CompanySettings(Base):
    __tablename__ = "company_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    form_config = Column(JSON, nullable=True)             # FormConfig document (camelCase keys)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<CompanySettings id={self.id} has_form_config={self.form_config is not None}>"


class FormLead(Base):
    __tablename__ = "form_leads"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String(64), nullable=False, unique=True, index=True)

    # Contact fields lifted out of the answers for listing/search
    nome = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    telefone = Column(String(64), nullable=True)
    cidade_estado = Column(String(255), nullable=True)

    answers = Column(JSON, nullable=False, default=dict)          # every answer, keyed by question id
    custom_answers = Column(JSON, nullable=True)                  # answers to non-standard questions

    # Scoring
    score_total = Column(Integer, nullable=False, default=0)
    score_breakdown = Column(JSON, nullable=False, default=dict)  # full breakdown, keyed by score key
    score_tipo_negocio = Column(Integer, nullable=True)
    score_tempo_negocio = Column(Integer, nullable=True)
    score_experiencia = Column(Integer, nullable=True)
    score_orcamento = Column(Integer, nullable=True)
    score_desafio = Column(Integer, nullable=True)
    score_disponibilidade = Column(Integer, nullable=True)
    score_expectativa = Column(Integer, nullable=True)
    classification = Column(String(32), nullable=False, default="DISQUALIFIED")

    # Progress
    question_number = Column(Integer, nullable=False, default=0)
    form_completo = Column(Boolean, nullable=False, default=False)
    started_at = Column(DateTime, nullable=True)
    tempo_total_segundos = Column(Integer, nullable=True)

    # Attribution
    url_origem = Column(Text, nullable=True)
    utm_source = Column(String(255), nullable=True)
    utm_medium = Column(String(255), nullable=True)
    utm_campaign = Column(String(255), nullable=True)

    status = Column(Enum(LeadStatus), default=LeadStatus.IN_PROGRESS, nullable=False)
    observacoes = Column(Text, nullable=True)                      # sales team notes
    hot_notified = Column(Boolean, nullable=False, default=False)
    hot_notified_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self) -> str:
        return (
            f"<FormLead id={self.id} session={self.session_id!r} "
            f"score={self.score_total} class={self.classification}>"
        )


# Breakdown keys with a dedicated column on form_leads
SCORE_COLUMNS = {
    "scoreTipoNegocio": "score_tipo_negocio",
    "scoreTempoNegocio": "score_tempo_negocio",
    "scoreExperiencia": "score_experiencia",
    "scoreOrcamento": "score_orcamento",
    "scoreDesafio": "score_desafio",
    "scoreDisponibilidade": "score_disponibilidade",
    "scoreExpectativa": "score_expectativa",
}
