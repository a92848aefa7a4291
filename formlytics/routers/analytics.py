"""Analytics report and export downloads.

user_id is an optional owner filter supplied by the caller: when given, forms
owned by someone else answer 404. It is not authentication. Callers are
authenticated and authorized upstream of this service.
"""

import io
from urllib.parse import quote

from fastapi import APIRouter
from starlette.responses import StreamingResponse

from formlytics.models.analytics import AnalyticsReport, ExportFile
from formlytics.services import analytics as analytics_service
from formlytics.services import export as export_service

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


def _content_disposition(filename: str) -> str:
    # Plain filename for clients that ignore filename*; header values must stay latin-1
    fallback = filename.encode("ascii", "replace").decode("ascii").replace('"', "_").replace("\\", "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


def _download(export: ExportFile) -> StreamingResponse:
    return StreamingResponse(
        io.BytesIO(export.content.encode("utf-8")),
        media_type=export.media_type,
        headers={"Content-Disposition": _content_disposition(export.filename)},
    )


@router.get("/forms/{form_id}", response_model_exclude_none=True)
def get_analytics(form_id: str, user_id: str | None = None) -> AnalyticsReport:
    return analytics_service.get_analytics(form_id, user_id=user_id)


@router.get("/forms/{form_id}/export/csv")
def export_csv(form_id: str, user_id: str | None = None):
    return _download(export_service.export_csv(form_id, user_id=user_id))


@router.get("/forms/{form_id}/export/json")
def export_json(form_id: str, user_id: str | None = None):
    return _download(export_service.export_json(form_id, user_id=user_id))
