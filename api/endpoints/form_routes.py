"""
api/endpoints/form_routes.py — Routes for the form configuration.

GET    /form-config        — Effective configuration (stored or canonical)
PUT    /form-config        — Validate and store an edited configuration
POST   /form-config/sync   — Reconcile the stored configuration with the canonical one
POST   /form-config/score  — Score answers against the effective configuration (no persistence)
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.forms.models import FormConfig
from app.forms.validation import FormConfigError
from app.services.form_config_service import get_effective_config, save_form_config, sync_form_config
from app.services.scoring import classify_score, compute_score
from api.schemas import ConfigErrorDetail, ConfigErrorResponse, ScoreRequest, ScoreResponse

logger = logging.getLogger(__name__)
router = APIRouter()

CONFIG_ERROR_RESPONSES = {422: {"model": ConfigErrorResponse, "description": "Invalid form configuration"}}


def _config_error(exc: FormConfigError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail=ConfigErrorDetail(message="Invalid form configuration.", problems=exc.problems).model_dump(),
    )


@router.get("", response_model=FormConfig, response_model_by_alias=True, summary="Get form config")
def get_form_config(db: Session = Depends(get_db)):
    """Return the configuration the form should render and score against."""
    return get_effective_config(db)


@router.put(
    "",
    response_model=FormConfig,
    response_model_by_alias=True,
    responses=CONFIG_ERROR_RESPONSES,
    summary="Save form config",
)
def put_form_config(config: FormConfig, db: Session = Depends(get_db)):
    """
    Validate and store an operator-edited configuration.
    maxScore is recomputed from the questions; any submitted value is ignored.
    """
    try:
        saved = save_form_config(db, config)
    except FormConfigError as exc:
        raise _config_error(exc)
    db.commit()
    return saved


@router.post(
    "/sync",
    response_model=FormConfig,
    response_model_by_alias=True,
    responses=CONFIG_ERROR_RESPONSES,
    summary="Sync form config",
)
def post_sync_form_config(db: Session = Depends(get_db)):
    """
    Merge the stored configuration with the canonical questions and store the result.
    Custom questions and thresholds are preserved.
    """
    try:
        merged = sync_form_config(db)
    except FormConfigError as exc:
        raise _config_error(exc)
    db.commit()
    logger.info("Form config synced via API (%d questions).", len(merged.questions))
    return merged


@router.post("/score", response_model=ScoreResponse, summary="Preview a score")
def preview_score(payload: ScoreRequest, db: Session = Depends(get_db)):
    """Score answers without saving anything — used by the form to preview progress."""
    config = get_effective_config(db)
    result = compute_score(payload.answers, config)
    return ScoreResponse(
        total=result.total,
        breakdown=result.breakdown,
        max_score=config.max_score,
        classification=classify_score(result.total, config.thresholds),
    )
