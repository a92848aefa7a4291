import logging
import math
import uuid
from datetime import datetime, timezone

from formlytics.exceptions import (
    DuplicateResponseError,
    FormExpiredError,
    FormNotFoundError,
    InvalidAnswerError,
    ResponseLimitError,
)
from formlytics.models.forms import (
    Answer,
    Form,
    FormStatus,
    Pagination,
    Response,
    ResponsePage,
    SubmitAnswer,
    SubmitResponseRequest,
)
from formlytics.services.analytics import to_utc
from formlytics.services.export import sort_for_export
from formlytics.store import get_store

logger = logging.getLogger(__name__)


def _is_empty(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def _validate_answers(form: Form, answers: list[SubmitAnswer]) -> None:
    catalog = {q.id: q for q in form.questions}
    for answer in answers:
        question = catalog.get(answer.question_id)
        if question is None:
            raise InvalidAnswerError(f"Question {answer.question_id} not found")
        if question.required and _is_empty(answer.value):
            raise InvalidAnswerError(f'Question "{question.title}" is required')


def _check_accepting(form: Form, existing: list[Response], ip_address: str | None, now: datetime) -> None:
    if form.expires_at is not None and to_utc(form.expires_at) < now:
        raise FormExpiredError("Form has expired")
    if form.response_limit is not None:
        completed = sum(1 for r in existing if r.completed_at is not None)
        if completed >= form.response_limit:
            raise ResponseLimitError("Response limit reached")
    if not form.allow_multiple and ip_address is not None:
        if any(r.ip_address == ip_address for r in existing):
            raise DuplicateResponseError("Multiple responses not allowed")


def submit_response(
    request: SubmitResponseRequest,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> Response:
    """Validate and store a completed public response. Returns the stored response."""
    store = get_store()
    form = store.get_form(request.form_id)
    if form.status != FormStatus.PUBLISHED:
        raise FormNotFoundError("Form not found or not published")

    now = datetime.now(timezone.utc)
    try:
        _validate_answers(form, request.answers)
    except InvalidAnswerError as e:
        logger.warning("Rejected response to form %s: %s", form.id, e)
        raise

    response_id = str(uuid.uuid4())
    response = Response(
        id=response_id,
        form_id=form.id,
        email=request.email,
        started_at=request.started_at or now,
        completed_at=now,
        ip_address=ip_address,
        user_agent=user_agent,
        answers=[
            Answer(
                id=str(uuid.uuid4()),
                response_id=response_id,
                question_id=a.question_id,
                value=a.value,
                file_url=a.file_url,
                created_at=now,
            )
            for a in request.answers
        ],
    )
    # Limit and duplicate checks must see every response stored before this one
    with store.locked():
        existing = store.get_responses_with_answers(form.id)
        try:
            _check_accepting(form, existing, ip_address, now)
        except (FormExpiredError, ResponseLimitError, DuplicateResponseError) as e:
            logger.warning("Rejected response to form %s: %s", form.id, e)
            raise
        store.add_response(response)
    logger.info("Stored response %s for form %s", response_id, form.id)

    catalog = {q.id: q for q in form.questions}
    for answer in response.answers:
        answer.question = catalog.get(answer.question_id)
    return response


def list_responses(
    form_id: str,
    user_id: str | None = None,
    page: int = 1,
    limit: int = 50,
) -> ResponsePage:
    """Page through a form's responses, newest completion first."""
    page = max(page, 1)
    limit = max(limit, 1)
    store = get_store()
    form = store.get_form(form_id, user_id)
    responses = sort_for_export(store.get_responses_with_answers(form_id))

    catalog = {q.id: q for q in form.questions}
    start = (page - 1) * limit
    selected = responses[start:start + limit]
    for response in selected:
        for answer in response.answers:
            answer.question = catalog.get(answer.question_id)

    total = len(responses)
    return ResponsePage(
        responses=selected,
        pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit)),
    )
