from __future__ import annotations

from fastapi import APIRouter, Query, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool

from visservice.models.schemas import VisualizationResult
from visservice.services.errors import ServiceError
from visservice.services.visualization_service import (
    create_visualization,
    create_visualization_page,
    match_existing,
)

router = APIRouter(prefix="/interpret", tags=["interpret"])


def _error_response(error: ServiceError) -> PlainTextResponse:
    return PlainTextResponse(error.message, status_code=error.status_code)


def _as_int(value: str | None) -> int:
    # Missing or malformed sizes count as unset.
    try:
        return int(value) if value is not None else 0
    except ValueError:
        return 0


@router.post("/d3", response_model=VisualizationResult)
async def create_d3(
    request: Request,
    src: str | None = Query(default=None),
    width: str | None = Query(default=None),
    height: str | None = Query(default=None),
    visid: str | None = Query(default=None),
) -> Response | VisualizationResult:
    body = await request.body()
    result = await run_in_threadpool(create_visualization, body, src, _as_int(width), _as_int(height), visid)
    if isinstance(result, ServiceError):
        return _error_response(result)
    return result


@router.get("/d3", response_class=HTMLResponse)
def create_d3_page(
    brunel_src: str | None = Query(default=None),
    brunel_url: str | None = Query(default=None),
    width: str | None = Query(default=None),
    height: str | None = Query(default=None),
    data: str | None = Query(default=None),
    files: str | None = Query(default=None),
) -> Response:
    result = create_visualization_page(
        spec_text=brunel_src,
        spec_url=brunel_url,
        width=_as_int(width),
        height=_as_int(height),
        data_url=data,
        files_location=files,
    )
    if isinstance(result, ServiceError):
        return _error_response(result)
    return HTMLResponse(result)


@router.get("/match", response_class=PlainTextResponse)
def match(
    original_data: str | None = Query(default=None),
    new_data: str | None = Query(default=None),
    src: str | None = Query(default=None),
) -> Response:
    result = match_existing(original_data=original_data, new_data=new_data, spec_text=src)
    if isinstance(result, ServiceError):
        return _error_response(result)
    return PlainTextResponse(result)
