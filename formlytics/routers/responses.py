"""Public submission and response listing. user_id is a caller-supplied owner filter, not access control."""

from fastapi import APIRouter, Request

from formlytics.models.forms import Response, ResponsePage, SubmitResponseRequest
from formlytics.services import responses as responses_service

router = APIRouter(prefix="/api/responses", tags=["responses"])


@router.post("/submit", status_code=201)
def submit(request: SubmitResponseRequest, http_request: Request) -> Response:
    ip_address = http_request.client.host if http_request.client else None
    return responses_service.submit_response(
        request, ip_address=ip_address, user_agent=http_request.headers.get("user-agent"),
    )


@router.get("/forms/{form_id}")
def list_responses(form_id: str, user_id: str | None = None, page: int = 1, limit: int = 50) -> ResponsePage:
    return responses_service.list_responses(form_id, user_id=user_id, page=page, limit=limit)
