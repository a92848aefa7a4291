from datetime import datetime
from enum import Enum
from typing import Any

from formlytics.models.common import CamelModel

DEFAULT_SCALE_MIN = 1
DEFAULT_SCALE_MAX = 5
DEFAULT_SCALE_STEP = 1


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    CHECKBOXES = "CHECKBOXES"
    SHORT_ANSWER = "SHORT_ANSWER"
    LONG_ANSWER = "LONG_ANSWER"
    DROPDOWN = "DROPDOWN"
    LINEAR_SCALE = "LINEAR_SCALE"
    DATE = "DATE"
    TIME = "TIME"
    DATETIME = "DATETIME"
    FILE_UPLOAD = "FILE_UPLOAD"
    RICH_TEXT = "RICH_TEXT"


class FormStatus(str, Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class ChoiceOptions(CamelModel):
    choices: list[str] = []


class ScaleOptions(CamelModel):
    min: int = DEFAULT_SCALE_MIN
    max: int = DEFAULT_SCALE_MAX
    step: int = DEFAULT_SCALE_STEP


def _as_int(value: Any, default: int) -> int:
    """Coerce a loosely-typed option value to int, falling back to default."""
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return default
    return default


class Question(CamelModel):
    id: str
    form_id: str | None = None
    type: QuestionType
    title: str
    description: str | None = None
    required: bool = False
    order: int = 0
    options: Any = None  # {"choices": [...]} or {"min", "max", "step", "labels"}

    def _raw_options(self) -> dict:
        return self.options if isinstance(self.options, dict) else {}

    def choice_options(self) -> ChoiceOptions:
        choices = self._raw_options().get("choices")
        if not isinstance(choices, list):
            return ChoiceOptions()
        return ChoiceOptions(choices=[c for c in choices if isinstance(c, str)])

    def scale_options(self) -> ScaleOptions:
        raw = self._raw_options()
        return ScaleOptions(
            min=_as_int(raw.get("min"), DEFAULT_SCALE_MIN),
            max=_as_int(raw.get("max"), DEFAULT_SCALE_MAX),
            step=_as_int(raw.get("step"), DEFAULT_SCALE_STEP),
        )


class Form(CamelModel):
    id: str
    title: str
    description: str | None = None
    user_id: str
    status: FormStatus = FormStatus.DRAFT
    shareable_url: str | None = None
    expires_at: datetime | None = None
    response_limit: int | None = None
    allow_multiple: bool = True
    collect_email: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    published_at: datetime | None = None
    questions: list[Question] = []


class Answer(CamelModel):
    id: str
    response_id: str
    question_id: str
    value: Any = None  # scalar, or list of scalars for CHECKBOXES
    file_url: str | None = None
    created_at: datetime | None = None
    question: Question | None = None


class Response(CamelModel):
    id: str
    form_id: str
    user_id: str | None = None
    email: str | None = None
    started_at: datetime
    completed_at: datetime | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    metadata: dict | None = None
    answers: list[Answer] = []


class SubmitAnswer(CamelModel):
    question_id: str
    value: Any = None
    file_url: str | None = None


class SubmitResponseRequest(CamelModel):
    form_id: str
    email: str | None = None
    started_at: datetime | None = None
    answers: list[SubmitAnswer]


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


class ResponsePage(CamelModel):
    responses: list[Response]
    pagination: Pagination
