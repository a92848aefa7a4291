from formlytics.models.common import CamelModel
from formlytics.models.forms import Form, QuestionType, Response


class ChoiceCount(CamelModel):
    choice: str
    count: int
    percentage: float


class ScaleCount(CamelModel):
    value: int
    count: int
    percentage: float


class QuestionAnalytics(CamelModel):
    question_id: str
    question_title: str
    question_type: QuestionType
    response_count: int
    choice_distribution: list[ChoiceCount] | None = None  # MULTIPLE_CHOICE, CHECKBOXES, DROPDOWN
    scale_distribution: list[ScaleCount] | None = None  # LINEAR_SCALE
    average: float | None = None  # LINEAR_SCALE, omitted when no in-range answers


class TrendPoint(CamelModel):
    date: str  # YYYY-MM-DD, UTC
    count: int


class AnalyticsReport(CamelModel):
    form_id: str
    total_responses: int
    completed_responses: int
    completion_rate: float
    average_completion_time_seconds: int
    question_analytics: list[QuestionAnalytics]
    trends: list[TrendPoint]


class ExportDocument(CamelModel):
    form: Form
    responses: list[Response]


class ExportFile(CamelModel):
    content: str
    filename: str
    media_type: str
