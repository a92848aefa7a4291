"""Response analytics: per-question distributions, completion stats and daily trends.

compute_report is a pure function over a snapshot of questions and responses;
get_analytics wraps it with the store lookup.
"""

import logging
import math
from collections import Counter, defaultdict
from collections.abc import Callable, Hashable
from datetime import datetime, timezone
from typing import Any

from formlytics.models.analytics import (
    AnalyticsReport,
    ChoiceCount,
    QuestionAnalytics,
    ScaleCount,
    TrendPoint,
)
from formlytics.models.forms import Answer, Question, QuestionType, Response
from formlytics.store import get_store

logger = logging.getLogger(__name__)


def to_utc(value: datetime) -> datetime:
    """Naive timestamps are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _percentage(count: int, total: int) -> float:
    if total <= 0:
        return 0
    return round(count / total * 100, 2)


def _answer_values(answer: Answer) -> list[Any]:
    if isinstance(answer.value, (list, tuple)):
        return list(answer.value)
    return [answer.value]


def _as_number(value: Any) -> float | None:
    """Numeric reading of a scale answer, or None if it has none."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


# --- Per-type handlers ---
# Each returns the extra QuestionAnalytics fields for one question.

def _choice_fields(question: Question, answers: list[Answer]) -> dict:
    counts: Counter = Counter()
    for answer in answers:
        # A value repeated inside one answer counts once
        counts.update({v for v in _answer_values(answer) if isinstance(v, Hashable)})

    total = len(answers)
    distribution = [
        ChoiceCount(choice=choice, count=counts[choice], percentage=_percentage(counts[choice], total))
        for choice in question.choice_options().choices
    ]
    return {"choice_distribution": distribution}


def _scale_fields(question: Question, answers: list[Answer]) -> dict:
    scale = question.scale_options()
    counts: Counter = Counter()
    in_range = []
    for answer in answers:
        number = _as_number(answer.value)
        if number is None or not scale.min <= number <= scale.max:
            continue
        in_range.append(number)
        if number.is_integer():
            counts[int(number)] += 1

    total = len(answers)
    distribution = [
        ScaleCount(value=value, count=counts[value], percentage=_percentage(counts[value], total))
        for value in range(scale.min, scale.max + 1)
    ]
    fields = {"scale_distribution": distribution}
    if in_range:
        fields["average"] = round(sum(in_range) / len(in_range), 2)
    return fields


def _no_fields(question: Question, answers: list[Answer]) -> dict:
    return {}


QUESTION_HANDLERS: dict[QuestionType, Callable[[Question, list[Answer]], dict]] = {
    QuestionType.MULTIPLE_CHOICE: _choice_fields,
    QuestionType.CHECKBOXES: _choice_fields,
    QuestionType.DROPDOWN: _choice_fields,
    QuestionType.LINEAR_SCALE: _scale_fields,
    QuestionType.SHORT_ANSWER: _no_fields,
    QuestionType.LONG_ANSWER: _no_fields,
    QuestionType.DATE: _no_fields,
    QuestionType.TIME: _no_fields,
    QuestionType.DATETIME: _no_fields,
    QuestionType.FILE_UPLOAD: _no_fields,
    QuestionType.RICH_TEXT: _no_fields,
}


def analyze_question(question: Question, answers: list[Answer]) -> QuestionAnalytics:
    """Summarize the answers given to one question."""
    handler = QUESTION_HANDLERS.get(question.type, _no_fields)
    return QuestionAnalytics(
        question_id=question.id,
        question_title=question.title,
        question_type=question.type,
        response_count=len(answers),
        **handler(question, answers),
    )


def _average_completion_seconds(responses: list[Response]) -> int:
    durations = [
        (to_utc(r.completed_at) - to_utc(r.started_at)).total_seconds()
        for r in responses
        if r.completed_at is not None and r.started_at is not None
    ]
    if not durations:
        return 0
    return round(sum(durations) / len(durations))


def compute_trends(responses: list[Response]) -> list[TrendPoint]:
    """Completed responses per UTC calendar day, ascending. Days without completions are absent."""
    per_day = Counter(
        to_utc(r.completed_at).date().isoformat()
        for r in responses
        if r.completed_at is not None
    )
    return [TrendPoint(date=day, count=count) for day, count in sorted(per_day.items())]


def compute_report(form_id: str, questions: list[Question], responses: list[Response]) -> AnalyticsReport:
    """Build the analytics report for one form.

    questions must already be in catalog order. Answers whose question is not in
    the catalog are ignored. Never raises on degenerate input: empty collections,
    zero denominators and malformed option configs all resolve to zero/empty values.
    """
    answers_by_question: dict[str, list[Answer]] = defaultdict(list)
    for response in responses:
        for answer in response.answers:
            answers_by_question[answer.question_id].append(answer)

    total = len(responses)
    completed = sum(1 for r in responses if r.completed_at is not None)

    report = AnalyticsReport(
        form_id=form_id,
        total_responses=total,
        completed_responses=completed,
        completion_rate=_percentage(completed, total),
        average_completion_time_seconds=_average_completion_seconds(responses),
        question_analytics=[analyze_question(q, answers_by_question.get(q.id, [])) for q in questions],
        trends=compute_trends(responses),
    )
    logger.debug(
        "Computed analytics for form %s: %d responses, %d questions", form_id, total, len(questions),
    )
    return report


def get_analytics(form_id: str, user_id: str | None = None) -> AnalyticsReport:
    """Fetch a form's catalog and responses and compute its analytics report."""
    store = get_store()
    form = store.get_form(form_id, user_id)
    responses = store.get_responses_with_answers(form_id)
    logger.info("Computing analytics for form %s (%d responses)", form_id, len(responses))
    return compute_report(form.id, form.questions, responses)
