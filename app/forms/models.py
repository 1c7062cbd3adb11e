"""
app/forms/models.py — Typed value objects for the lead-qualification form.

The form configuration lives in the database as one JSON document per
deployment. These models give it a shape:

  - Option           → a selectable answer and the points it earns
  - ConditionalField → a follow-up input shown when a given option is chosen
  - Question         → one step of the questionnaire
  - Thresholds       → tier cut-offs (hot ≥ warm ≥ cold)
  - FormConfig       → the whole questionnaire

JSON keys are camelCase (conditionalField, showWhen, maxScore) to match the
stored documents; attributes are snake_case.

Parsing is deliberately shape-only: a stored configuration with an unknown
question type or a select question without options still loads. Semantic
invariants are enforced by app.forms.validation when a configuration is saved.
"""

import enum
from typing import NewType

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


QuestionId = NewType("QuestionId", str)

# Answers keyed by question id (conditional-field ids included)
AnswerMap = dict[QuestionId, str]


class QuestionType(str, enum.Enum):
    TEXT = "text"
    EMAIL = "email"
    TEL = "tel"
    TEXTAREA = "textarea"
    SELECT = "select"


class LeadTier(str, enum.Enum):
    HOT = "HOT"
    WARM = "WARM"
    COLD = "COLD"
    DISQUALIFIED = "DISQUALIFIED"


class _FormModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json_dict(self) -> dict:
        """Dump with camelCase keys, the shape stored in the database."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Option(_FormModel):
    value: str
    label: str = ""
    points: int = 0

    @model_validator(mode="after")
    def _label_defaults_to_value(self) -> "Option":
        if not self.label:
            self.label = self.value
        return self


class ConditionalField(_FormModel):
    show_when: str
    id: str
    title: str = ""
    placeholder: str | None = None


class Question(_FormModel):
    # Stored questions may carry keys we don't model (e.g. admin UI hints)
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    id: str = Field(..., min_length=1)
    order: int | None = None
    title: str = ""
    type: str = QuestionType.TEXT.value
    required: bool = False
    placeholder: str | None = None
    options: list[Option] | None = None
    conditional_field: ConditionalField | None = None

    @property
    def is_select(self) -> bool:
        return self.type == QuestionType.SELECT.value


class Thresholds(_FormModel):
    hot: int
    warm: int
    cold: int


class FormConfig(_FormModel):
    questions: list[Question] = Field(default_factory=list)
    max_score: int = 0
    thresholds: Thresholds | None = None

    def question_ids(self) -> set[str]:
        return {q.id for q in self.questions}

    def conditional_ids(self) -> set[str]:
        return {q.conditional_field.id for q in self.questions if q.conditional_field}

    def get_question(self, question_id: str) -> Question | None:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None


class ScoreResult(BaseModel):
    """Total score plus per-question points keyed by stable score key."""
    total: int = 0
    breakdown: dict[str, int] = Field(default_factory=dict)
