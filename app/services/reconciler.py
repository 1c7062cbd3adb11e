"""
app/services/reconciler.py — Merge a stored form configuration with the
canonical one.

When the canonical questions change (new questions, corrected wording or
options), a deployment's stored ("live") configuration may still hold its own
ordering, extra custom questions, and leftovers from older schema versions.
reconcile_config() produces a configuration that:

  1. takes canonical metadata for every question the canonical set knows,
  2. appends canonical questions the live set is missing,
  3. folds stray top-level copies of conditional fields back into their parent,
  4. orders canonical questions by canonical order, custom ones after them,
  5. renumbers order from 1,
  6. recomputes maxScore,
  7. keeps live thresholds (canonical ones if the live config has none).

This is a best-effort forward migration run on demand by an operator; it
never raises on malformed live data.
"""

import copy
import logging
from typing import Any

from pydantic import ValidationError

from app.forms.defaults import DEFAULT_FORM_CONFIG
from app.forms.models import FormConfig, Question, Thresholds
from app.services.scoring import UNORDERED, max_score

logger = logging.getLogger(__name__)

# Fields the canonical definition owns; everything else stays as stored
CANONICAL_FIELDS = ("title", "type", "required", "placeholder", "options", "conditional_field")


# ── Loading ───────────────────────────────────────────────────────────────────

def _field_keys(loc_key: Any) -> set[str]:
    """Both spellings (field name and camelCase alias) of a Question field."""
    for name, field in Question.model_fields.items():
        if loc_key in (name, field.alias):
            return {name, field.alias or name}
    return {str(loc_key)}


def _read_question(index: int, item: Any) -> Question | None:
    """
    Read one stored question, discarding any field that fails validation.

    Only entries that are not objects or carry no usable id are dropped;
    an unreadable `order` or `title` is removed and the question is kept.
    """
    if not isinstance(item, dict) or not isinstance(item.get("id"), str) or not item["id"]:
        logger.warning("Dropping unreadable stored question #%d (%r).", index, item)
        return None

    data = dict(item)
    while True:
        try:
            return Question.model_validate(data)
        except ValidationError as exc:
            bad = {err["loc"][0] for err in exc.errors() if err["loc"]}
            bad_keys = set().union(*(_field_keys(key) for key in bad)) if bad else set()
            if not bad_keys & data.keys() or "id" in bad_keys:
                logger.warning(
                    "Dropping unreadable stored question #%d (%s): %d error(s).",
                    index, item["id"], exc.error_count(),
                )
                return None
            logger.warning(
                "Stored question %s: discarding unreadable field(s) %s.",
                item["id"], ", ".join(sorted(bad_keys & data.keys())),
            )
            for key in bad_keys:
                data.pop(key, None)


def load_live_config(raw: dict[str, Any] | None) -> FormConfig | None:
    """
    Parse a stored configuration permissively.

    Questions that are not objects or have no id are dropped with a warning.
    Fields that fail validation are discarded from their question (an
    unreadable `order` sorts as unordered); everything else is kept as
    stored, including unknown types and missing options.
    """
    if raw is None:
        return None
    if not isinstance(raw, dict):
        logger.warning("Stored form config is not an object (%s); ignoring it.", type(raw).__name__)
        return None

    questions: list[Question] = []
    raw_questions = raw.get("questions")
    for index, item in enumerate(raw_questions if isinstance(raw_questions, list) else []):
        question = _read_question(index, item)
        if question is not None:
            questions.append(question)

    thresholds = None
    if raw.get("thresholds") is not None:
        try:
            thresholds = Thresholds.model_validate(raw["thresholds"])
        except ValidationError:
            logger.warning("Stored thresholds are unreadable; canonical thresholds will apply.")

    stored_max = raw.get("maxScore")
    return FormConfig(
        questions=questions,
        max_score=stored_max if isinstance(stored_max, int) else 0,
        thresholds=thresholds,
    )


# ── Merge steps ───────────────────────────────────────────────────────────────

def _adopt_canonical_metadata(live_q: Question, canonical_q: Question) -> Question:
    if live_q.type != canonical_q.type:
        logger.warning(
            "Question '%s' is '%s' in the stored config but '%s' canonically; "
            "using the canonical type.",
            live_q.id, live_q.type, canonical_q.type,
        )
    update = {field: copy.deepcopy(getattr(canonical_q, field)) for field in CANONICAL_FIELDS}
    return live_q.model_copy(update=update, deep=True)


def _fold_stray_conditionals(
    questions: list[Question],
    canonical_by_id: dict[str, Question],
) -> list[Question]:
    """Drop top-level questions that duplicate a parent's conditional field."""
    for canonical_q in canonical_by_id.values():
        cond = canonical_q.conditional_field
        if cond is None:
            continue
        parent_index = next((i for i, q in enumerate(questions) if q.id == canonical_q.id), None)
        if parent_index is None:
            continue

        if any(q.id == cond.id for q in questions):
            logger.info(
                "Removing standalone question '%s'; it is now the conditional field of '%s'.",
                cond.id, canonical_q.id,
            )
            parent = questions[parent_index]
            questions = [q for q in questions if q.id != cond.id]
            parent_index = questions.index(parent)

        questions[parent_index] = questions[parent_index].model_copy(
            update={"conditional_field": cond.model_copy()},
        )
    return questions


def _sort_key(question: Question, canonical_by_id: dict[str, Question]) -> tuple[int, int]:
    canonical_q = canonical_by_id.get(question.id)
    if canonical_q is not None:
        return (0, canonical_q.order if canonical_q.order is not None else UNORDERED)
    return (1, question.order if question.order is not None else UNORDERED)


# ── Public API ────────────────────────────────────────────────────────────────

def reconcile_config(
    live: FormConfig | dict[str, Any] | None,
    canonical: FormConfig = DEFAULT_FORM_CONFIG,
) -> FormConfig:
    """
    Merge a live configuration with the canonical one.

    Args:
        live: Stored configuration, as a FormConfig or the raw JSON document.
              None means nothing is stored yet.
        canonical: Canonical configuration. Defaults to DEFAULT_FORM_CONFIG.

    Returns:
        A new FormConfig. Neither input is modified.
    """
    if isinstance(live, dict) or live is None:
        live = load_live_config(live)
    if live is None:
        live = FormConfig(questions=[], thresholds=None)

    canonical_by_id = {q.id: q for q in canonical.questions}

    merged: list[Question] = []
    for live_q in live.questions:
        canonical_q = canonical_by_id.get(live_q.id)
        merged.append(_adopt_canonical_metadata(live_q, canonical_q) if canonical_q else live_q.model_copy(deep=True))

    live_ids = {q.id for q in merged}
    for canonical_q in canonical.questions:
        if canonical_q.id not in live_ids:
            merged.append(canonical_q.model_copy(deep=True))

    merged = _fold_stray_conditionals(merged, canonical_by_id)

    merged.sort(key=lambda q: _sort_key(q, canonical_by_id))
    merged = [q.model_copy(update={"order": position}) for position, q in enumerate(merged, start=1)]

    thresholds = live.thresholds or canonical.thresholds
    result = FormConfig(
        questions=merged,
        thresholds=thresholds.model_copy() if thresholds else None,
    )
    result.max_score = max_score(result)

    logger.info(
        "Reconciled form config: %d questions (%d custom), maxScore=%d.",
        len(merged), sum(1 for q in merged if q.id not in canonical_by_id), result.max_score,
    )
    return result
