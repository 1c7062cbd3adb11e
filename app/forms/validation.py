"""
app/forms/validation.py — Authoring-time checks for a form configuration.

Scoring assumes a consistent configuration, so every invariant is enforced
here, when an operator saves or syncs a configuration, and never at scoring
time. All problems are collected and raised together so the operator can fix
them in one pass.
"""

import logging

from app.forms.models import FormConfig, QuestionType

logger = logging.getLogger(__name__)

_VALID_TYPES = {t.value for t in QuestionType}


class FormConfigError(ValueError):
    """Raised when a form configuration violates one or more invariants."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("Invalid form configuration: " + "; ".join(problems))


def _threshold_problems(config: FormConfig) -> list[str]:
    t = config.thresholds
    if t is None:
        return ["thresholds are missing"]
    problems = []
    if t.cold < 0:
        problems.append(f"thresholds.cold must be >= 0 (got {t.cold})")
    if not (t.hot >= t.warm >= t.cold):
        problems.append(
            f"thresholds must satisfy hot >= warm >= cold "
            f"(got hot={t.hot}, warm={t.warm}, cold={t.cold})"
        )
    return problems


def collect_problems(config: FormConfig) -> list[str]:
    """Return every invariant violation found in the configuration."""
    problems = _threshold_problems(config)

    seen_ids: set[str] = set()
    for question in config.questions:
        if question.id in seen_ids:
            problems.append(f"duplicate question id '{question.id}'")
        seen_ids.add(question.id)

    top_level_ids = config.question_ids()
    seen_conditional_ids: set[str] = set()

    for question in config.questions:
        qid = question.id

        if question.type not in _VALID_TYPES:
            problems.append(f"question '{qid}' has unknown type '{question.type}'")

        if question.is_select:
            if not question.options:
                problems.append(f"select question '{qid}' has no options")
        elif question.options:
            problems.append(f"question '{qid}' of type '{question.type}' must not have options")

        option_values: set[str] = set()
        for option in question.options or []:
            if option.points < 0:
                problems.append(
                    f"option '{option.value}' of question '{qid}' has negative points"
                )
            if option.value in option_values:
                problems.append(f"question '{qid}' repeats option value '{option.value}'")
            option_values.add(option.value)

        cond = question.conditional_field
        if cond is None:
            continue
        if cond.id in top_level_ids:
            problems.append(
                f"conditional field id '{cond.id}' of question '{qid}' "
                f"collides with a top-level question id"
            )
        if cond.id in seen_conditional_ids:
            problems.append(f"conditional field id '{cond.id}' is used more than once")
        seen_conditional_ids.add(cond.id)
        if cond.show_when not in option_values:
            problems.append(
                f"conditional field '{cond.id}' of question '{qid}' is shown when "
                f"'{cond.show_when}', which is not an option value"
            )

    return problems


def validate_form_config(config: FormConfig) -> FormConfig:
    """
    Check a configuration before it is stored.

    Returns the same configuration when it is valid.

    Raises:
        FormConfigError: listing every violation found.
    """
    problems = collect_problems(config)
    if problems:
        logger.warning("Rejected form configuration with %d problem(s).", len(problems))
        raise FormConfigError(problems)
    return config
