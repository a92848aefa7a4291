from fastmcp import FastMCP

from formlytics.exceptions import FormNotFoundError, StoreError
from formlytics.services import analytics as analytics_service
from formlytics.services import export as export_service
from formlytics.services import responses as responses_service

mcp = FastMCP("Formlytics")


def _handle_mcp_error(e: Exception) -> dict:
    """Convert exceptions to agent-friendly error dicts."""
    if isinstance(e, FormNotFoundError):
        return {"error": "not_found", "message": str(e), "action": "Check the form ID and the owning user ID"}
    if isinstance(e, StoreError):
        return {"error": "store_error", "message": str(e)}
    return {"error": "unknown_error", "message": str(e)}


# --- Analytics tools ---

@mcp.tool
def analytics_get_report(form_id: str, user_id: str | None = None) -> dict:
    """Get the analytics report for a form: response totals, completion rate, average completion time,
    per-question choice/scale distributions and daily completion trends.
    Pass user_id to restrict access to forms owned by that user."""
    try:
        report = analytics_service.get_analytics(form_id, user_id=user_id)
        return report.model_dump(mode="json", by_alias=True, exclude_none=True)
    except (FormNotFoundError, StoreError) as e:
        return _handle_mcp_error(e)


@mcp.tool
def analytics_export_csv(form_id: str, user_id: str | None = None) -> dict:
    """Export all responses of a form as CSV text (one row per response, one column per question).
    Returns the filename and the CSV content."""
    try:
        return export_service.export_csv(form_id, user_id=user_id).model_dump()
    except (FormNotFoundError, StoreError) as e:
        return _handle_mcp_error(e)


@mcp.tool
def analytics_export_json(form_id: str, user_id: str | None = None) -> dict:
    """Export a form, its questions and all responses with their answers as a JSON document.
    Returns the filename and the JSON content as a string."""
    try:
        return export_service.export_json(form_id, user_id=user_id).model_dump()
    except (FormNotFoundError, StoreError) as e:
        return _handle_mcp_error(e)


# --- Response tools ---

@mcp.tool
def responses_list(form_id: str, user_id: str | None = None, page: int = 1, limit: int = 50) -> dict:
    """List responses of a form, newest first, with their answers. Paginated by page and limit."""
    try:
        result = responses_service.list_responses(form_id, user_id=user_id, page=page, limit=limit)
        return result.model_dump(mode="json", by_alias=True)
    except (FormNotFoundError, StoreError) as e:
        return _handle_mcp_error(e)
