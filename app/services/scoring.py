"""
app/services/scoring.py — Lead scoring and classification.

Scores a (possibly partial) set of answers against a form configuration and
maps the total onto a tier using the configuration's thresholds. Everything
here is pure: no I/O, no mutation of inputs, and scoring never raises for
bad answers — a missing or unrecognised answer simply earns 0 points.
"""

import logging
from collections.abc import Mapping
from typing import Any

from app.forms.defaults import DEFAULT_FORM_CONFIG, SCORE_FIELD_MAPPING
from app.forms.models import (
    AnswerMap,
    FormConfig,
    LeadTier,
    Option,
    Question,
    QuestionId,
    ScoreResult,
    Thresholds,
)

logger = logging.getLogger(__name__)

# Questions without a stored order sort after every ordered one
UNORDERED = 999


def score_key(question_id: str) -> str:
    """Stable breakdown key for a question, e.g. 'tipoNegocio' → 'scoreTipoNegocio'."""
    return SCORE_FIELD_MAPPING.get(question_id) or f"score_{question_id}"


def _is_filled(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _find_option(options: list[Option], answer: Any) -> Option | None:
    """Match an answer against option values, falling back to labels (legacy answers)."""
    if not isinstance(answer, str) or not answer:
        return None
    for option in options:
        if option.value == answer or option.label == answer:
            return option
    return None


def _question_points(question: Question, answers: Mapping[str, Any]) -> int:
    options = question.options or []
    answer = answers.get(question.id)
    match = _find_option(options, answer)
    points = match.points if match else 0

    cond = question.conditional_field
    if cond is None:
        return points
    trigger = next((o for o in options if o.value == cond.show_when), None)
    if answer == cond.show_when or (match is not None and match is trigger):
        if not _is_filled(answers.get(cond.id)):
            # "Please specify" choices earn nothing until the follow-up is filled in
            return 0
        if points == 0:
            points = trigger.points if trigger else 0

    return points


def compute_score(answers: Mapping[str, Any], config: FormConfig) -> ScoreResult:
    """
    Score answers against every select question of a configuration.

    Args:
        answers: Answers keyed by question id (conditional-field ids included).
                 May be partial; non-string values never match.
        config:  The effective form configuration.

    Returns:
        ScoreResult with the total and a breakdown keyed by score_key().
    """
    breakdown: dict[str, int] = {}
    total = 0

    for question in config.questions:
        if not question.is_select or not question.options:
            continue
        points = _question_points(question, answers)
        breakdown[score_key(question.id)] = points
        total += points

    return ScoreResult(total=total, breakdown=breakdown)


def classify_score(total: int, thresholds: Thresholds | None = None) -> LeadTier:
    """Map a total score onto a tier. Ties go to the higher tier."""
    t = thresholds or DEFAULT_FORM_CONFIG.thresholds
    if total >= t.hot:
        return LeadTier.HOT
    if total >= t.warm:
        return LeadTier.WARM
    if total >= t.cold:
        return LeadTier.COLD
    return LeadTier.DISQUALIFIED


def max_score(config: FormConfig) -> int:
    """Highest achievable total: the best option of every select question, summed."""
    return sum(
        max(option.points for option in question.options)
        for question in config.questions
        if question.is_select and question.options
    )


def sorted_questions(config: FormConfig) -> list[Question]:
    """Questions in presentation order; unordered questions go last."""
    return sorted(
        config.questions,
        key=lambda q: q.order if q.order is not None else UNORDERED,
    )


def normalize_answers(raw: Mapping[str, Any], config: FormConfig) -> AnswerMap:
    """
    Build a clean answer map from a raw submission.

    Keeps trimmed, non-empty string values. Keys the configuration doesn't
    know about are kept as custom answers but logged, so a misspelled id
    shows up instead of silently scoring 0.
    """
    known_ids = config.question_ids() | config.conditional_ids()
    answers: AnswerMap = {}

    for key, value in raw.items():
        if not _is_filled(value):
            continue
        if key not in known_ids:
            logger.debug("Answer for unknown question id %r kept as custom answer.", key)
        answers[QuestionId(key)] = value.strip()

    return answers
