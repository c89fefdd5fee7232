import json
import uuid
from collections.abc import AsyncIterator
from time import perf_counter
from typing import Any

from fastapi import APIRouter, Depends, Header, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from starlette.formparsers import FormParser
from starlette.requests import Request

from insight_api.core.config import Settings
from insight_api.core.logging_config import logger
from insight_api.deps.state import get_settings, get_vision_client
from insight_api.models.analyze import AnalysisRequest, AnalysisResponse, ErrorResponse
from insight_api.services.vision_client import (
    AnalysisOutcome,
    DashScopeVisionClient,
    MalformedResponse,
    Success,
    TransportError,
    UpstreamError,
)

router = APIRouter(prefix="/api", tags=["analyze"])

TRANSPORT_ERROR_MESSAGE = "Internal Server Error"
GENERIC_ERROR_MESSAGE = "Something went wrong!"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class RequestBodyTooLarge(ValueError):
    """Body exceeded `max_body_bytes`; answered by the fallback error handler."""


async def read_limited_body(request: Request, max_body_bytes: int) -> bytes:
    declared_length = request.headers.get("content-length")
    if declared_length and declared_length.isdigit() and int(declared_length) > max_body_bytes:
        raise RequestBodyTooLarge(f"Declared body of {declared_length} bytes exceeds {max_body_bytes}.")

    chunks: list[bytes] = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > max_body_bytes:
            raise RequestBodyTooLarge(f"Body exceeds {max_body_bytes} bytes.")
        chunks.append(chunk)
    return b"".join(chunks)


async def _replay(body: bytes) -> AsyncIterator[bytes]:
    yield body


async def read_analysis_request(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> AnalysisRequest:
    """
    Parse the inbound body into an `AnalysisRequest`.

    JSON and urlencoded bodies are accepted. JSON arrays, empty bodies and any
    other content type give an empty request, so the upstream call still
    happens with no image. Bare JSON scalars are rejected.
    """
    body = await read_limited_body(request, settings.max_body_bytes)

    content_type = request.headers.get("content-type", "").split(";", 1)[0].strip().lower()
    if content_type == FORM_CONTENT_TYPE:
        form = await FormParser(request.headers, _replay(body)).parse()
        return AnalysisRequest.model_validate(dict(form))
    if content_type == "application/json" or content_type.endswith("+json"):
        if not body.strip():
            return AnalysisRequest()
        parsed = json.loads(body)
        if isinstance(parsed, dict):
            return AnalysisRequest.model_validate(parsed)
        if isinstance(parsed, list):
            return AnalysisRequest()
        raise ValueError(f"JSON body must be an object or an array, got {type(parsed).__name__}.")
    return AnalysisRequest()


def _error_body(body: Any) -> Any:
    if body is None or body == "":
        return TRANSPORT_ERROR_MESSAGE
    return body


def outcome_to_response(outcome: AnalysisOutcome, request_id: str) -> JSONResponse:
    headers = {"X-Request-ID": request_id}
    if isinstance(outcome, Success):
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content=AnalysisResponse(result=outcome.text).model_dump(),
            headers=headers,
        )
    if isinstance(outcome, UpstreamError):
        return JSONResponse(
            status_code=outcome.status,
            content={"error": _error_body(outcome.body)},
            headers=headers,
        )
    if isinstance(outcome, TransportError):
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": TRANSPORT_ERROR_MESSAGE},
            headers=headers,
        )
    if isinstance(outcome, MalformedResponse):
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": GENERIC_ERROR_MESSAGE},
            headers=headers,
        )
    raise TypeError(f"Unknown analysis outcome: {outcome!r}")


@router.post(
    "/analyze",
    response_model=AnalysisResponse,
    responses={500: {"model": ErrorResponse}},
    summary="Describe an image with the vision-language model",
)
async def analyze_image(
    analysis_request: AnalysisRequest = Depends(read_analysis_request),
    x_request_id: str | None = Header(default=None),
    client: DashScopeVisionClient = Depends(get_vision_client),
) -> JSONResponse:
    started_at = perf_counter()
    request_id = x_request_id or str(uuid.uuid4())
    image = analysis_request.image
    logger.info(
        "Analyze request accepted request_id=%s has_image=%s image_chars=%s",
        request_id,
        image is not None,
        len(image) if isinstance(image, str) else None,
    )

    outcome = await run_in_threadpool(client.analyze, image, request_id)

    logger.info(
        "Analyze request finished request_id=%s outcome=%s total_ms=%s",
        request_id,
        outcome.__class__.__name__,
        round((perf_counter() - started_at) * 1000, 1),
    )
    return outcome_to_response(outcome, request_id)
