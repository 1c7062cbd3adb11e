"""
app/services/form_config_service.py — Loading, saving and syncing the
deployment's form configuration.

The configuration is stored as one JSON document in company_settings. Reads
are permissive (a stale or hand-edited document still loads); writes are
strict (validate_form_config must pass) and always recompute maxScore.
"""

import logging

from sqlalchemy.orm import Session

from app.db.repository import get_stored_form_config, save_form_config_document
from app.forms.defaults import DEFAULT_FORM_CONFIG, default_form_config
from app.forms.models import FormConfig
from app.forms.validation import validate_form_config
from app.services.reconciler import load_live_config, reconcile_config
from app.services.scoring import max_score

logger = logging.getLogger(__name__)


def with_max_score(config: FormConfig) -> FormConfig:
    """Copy of the configuration with maxScore derived from its questions."""
    return config.model_copy(update={"max_score": max_score(config)})


def get_effective_config(db: Session) -> FormConfig:
    """The stored configuration if there is one, else the canonical configuration."""
    stored = load_live_config(get_stored_form_config(db))
    if stored is None or not stored.questions:
        return default_form_config()
    if stored.thresholds is None:
        stored.thresholds = DEFAULT_FORM_CONFIG.thresholds.model_copy()
    return with_max_score(stored)


def save_form_config(db: Session, config: FormConfig) -> FormConfig:
    """
    Validate and store an operator-authored configuration.

    Raises:
        FormConfigError: when the configuration violates an invariant.
    """
    config = with_max_score(config)
    validate_form_config(config)
    save_form_config_document(db, config.to_json_dict())
    logger.info(
        "Form config saved: %d questions, maxScore=%d.",
        len(config.questions), config.max_score,
    )
    return config


def sync_form_config(db: Session, canonical: FormConfig = DEFAULT_FORM_CONFIG) -> FormConfig:
    """
    Reconcile the stored configuration against the canonical one and store the result.

    Raises:
        FormConfigError: when the merged configuration is still invalid
                         (e.g. a custom question with an unknown type).
    """
    merged = reconcile_config(get_stored_form_config(db), canonical)
    return save_form_config(db, merged)


def push_default_config(db: Session) -> FormConfig:
    """Overwrite the stored configuration with the canonical one."""
    return save_form_config(db, default_form_config())
