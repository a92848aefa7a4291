import csv
import io
import json
import logging
from datetime import datetime
from typing import Any

from formlytics.models.analytics import ExportDocument, ExportFile
from formlytics.models.forms import Answer, Form, Question, Response
from formlytics.services.analytics import to_utc
from formlytics.store import get_store

logger = logging.getLogger(__name__)

CSV_MEDIA_TYPE = "text/csv"
JSON_MEDIA_TYPE = "application/json"
LIST_SEPARATOR = "; "


def _export_filename(form_id: str, extension: str) -> str:
    return f"form-{form_id}-responses.{extension}"


def _format_timestamp(value: datetime | None) -> str:
    """UTC ISO-8601 with milliseconds and a Z suffix, e.g. 2025-01-01T12:00:00.000Z."""
    if value is None:
        return ""
    return to_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _format_scalar(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def format_answer(answer: Answer | None) -> str:
    """Render an answer as one CSV cell. Sequence answers are joined with '; '."""
    if answer is None:
        return ""
    if isinstance(answer.value, (list, tuple)):
        return LIST_SEPARATOR.join(_format_scalar(v) for v in answer.value)
    return _format_scalar(answer.value)


def sort_for_export(responses: list[Response]) -> list[Response]:
    """Newest completion first; responses never completed follow, in their original order."""
    completed = [r for r in responses if r.completed_at is not None]
    pending = [r for r in responses if r.completed_at is None]
    completed.sort(key=lambda r: to_utc(r.completed_at), reverse=True)
    return completed + pending


def render_csv(questions: list[Question], responses: list[Response]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(["Response ID", "Submitted At", "Email", *(q.title for q in questions)])
    for response in sort_for_export(responses):
        by_question: dict[str, Answer] = {}
        for answer in response.answers:
            # First answer wins if a question was answered twice
            by_question.setdefault(answer.question_id, answer)
        writer.writerow([
            response.id,
            _format_timestamp(response.completed_at),
            response.email or "",
            *(format_answer(by_question.get(q.id)) for q in questions),
        ])
    return buffer.getvalue().rstrip("\n")


def _attach_questions(form: Form, responses: list[Response]) -> list[Response]:
    catalog = {q.id: q for q in form.questions}
    attached = []
    for response in responses:
        answers = [
            a if a.question is not None else a.model_copy(update={"question": catalog.get(a.question_id)})
            for a in response.answers
        ]
        attached.append(response.model_copy(update={"answers": answers}))
    return attached


def render_json(form: Form, responses: list[Response]) -> str:
    """Structural dump of the form, its questions and every response with answers and their questions."""
    document = ExportDocument(form=form, responses=_attach_questions(form, sort_for_export(responses)))
    return document.model_dump_json(by_alias=True, indent=2)


def export_csv(form_id: str, user_id: str | None = None) -> ExportFile:
    store = get_store()
    form = store.get_form(form_id, user_id)
    responses = store.get_responses_with_answers(form_id)
    logger.info("Exporting %d responses of form %s as CSV", len(responses), form_id)
    return ExportFile(
        content=render_csv(form.questions, responses),
        filename=_export_filename(form.id, "csv"),
        media_type=CSV_MEDIA_TYPE,
    )


def export_json(form_id: str, user_id: str | None = None) -> ExportFile:
    store = get_store()
    form = store.get_form(form_id, user_id)
    responses = store.get_responses_with_answers(form_id)
    logger.info("Exporting %d responses of form %s as JSON", len(responses), form_id)
    return ExportFile(
        content=render_json(form, responses),
        filename=_export_filename(form.id, "json"),
        media_type=JSON_MEDIA_TYPE,
    )
