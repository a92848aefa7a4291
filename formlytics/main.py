import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.applications import Starlette
from starlette.routing import Mount

from formlytics.config import get_settings
from formlytics.exceptions import (
    DuplicateResponseError,
    FormExpiredError,
    FormNotFoundError,
    InvalidAnswerError,
    ResponseLimitError,
    StoreError,
)
from formlytics.mcp_server import mcp
from formlytics.models.common import StatusResponse
from formlytics.routers.analytics import router as analytics_router
from formlytics.routers.responses import router as responses_router
from formlytics.store import get_store

logger = logging.getLogger(__name__)


# --- FastAPI app ---

api = FastAPI(title="Formlytics", version="0.1.0")
api.include_router(analytics_router)
api.include_router(responses_router)


@api.get("/api/status")
def api_status() -> StatusResponse:
    store = get_store()
    form_count = store.count_forms()
    return StatusResponse(data_file=str(store.path), ready=store.path.exists(), form_count=form_count)


# --- Exception handlers ---

@api.exception_handler(FormNotFoundError)
async def not_found_handler(request: Request, exc: FormNotFoundError):
    return JSONResponse(status_code=404, content={"error_code": "not_found", "message": str(exc)})


@api.exception_handler(InvalidAnswerError)
async def invalid_answer_handler(request: Request, exc: InvalidAnswerError):
    return JSONResponse(status_code=400, content={"error_code": "invalid_answer", "message": str(exc)})


@api.exception_handler(DuplicateResponseError)
async def duplicate_response_handler(request: Request, exc: DuplicateResponseError):
    return JSONResponse(status_code=403, content={"error_code": "duplicate_response", "message": str(exc)})


@api.exception_handler(FormExpiredError)
async def form_expired_handler(request: Request, exc: FormExpiredError):
    return JSONResponse(status_code=410, content={"error_code": "form_expired", "message": str(exc)})


@api.exception_handler(ResponseLimitError)
async def response_limit_handler(request: Request, exc: ResponseLimitError):
    return JSONResponse(status_code=429, content={"error_code": "response_limit", "message": str(exc)})


@api.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error("Store failure on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"error_code": "store_error", "message": str(exc)})


# --- Starlette root app ---

mcp_app = mcp.http_app(path="/", stateless_http=True)

app = Starlette(
    routes=[
        Mount("/mcp", app=mcp_app),
        Mount("/", app=api),
    ],
    lifespan=mcp_app.lifespan,
)


def run():
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "formlytics.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
