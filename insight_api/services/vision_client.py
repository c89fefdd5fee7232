from __future__ import annotations

from dataclasses import dataclass
from time import perf_counter
from typing import Any, Union

import requests

from insight_api.core.config import Settings
from insight_api.core.logging_config import logger


class MalformedUpstreamPayload(ValueError):
    pass


@dataclass(frozen=True)
class Success:
    text: str


@dataclass(frozen=True)
class UpstreamError:
    status: int
    body: Any


@dataclass(frozen=True)
class TransportError:
    message: str


@dataclass(frozen=True)
class MalformedResponse:
    detail: str
    body: Any = None


AnalysisOutcome = Union[Success, UpstreamError, TransportError, MalformedResponse]


def _first(container: Any, label: str) -> Any:
    if not isinstance(container, list) or not container:
        raise MalformedUpstreamPayload(f"Expected a non-empty list at {label}.")
    return container[0]


def _field(container: Any, key: str, label: str) -> Any:
    if not isinstance(container, dict) or key not in container:
        raise MalformedUpstreamPayload(f"Missing field {label}.")
    return container[key]


def extract_text(payload: Any) -> str:
    """Return `output.choices[0].message.content[0].text` of a generation response."""
    output = _field(payload, "output", "output")
    choices = _field(output, "choices", "output.choices")
    message = _field(_first(choices, "output.choices"), "message", "output.choices[0].message")
    content = _field(message, "content", "output.choices[0].message.content")
    text = _field(
        _first(content, "output.choices[0].message.content"),
        "text",
        "output.choices[0].message.content[0].text",
    )
    if not isinstance(text, str):
        raise MalformedUpstreamPayload("output.choices[0].message.content[0].text is not a string.")
    return text


def _response_body(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class DashScopeVisionClient:
    """Sends one image plus the fixed analysis prompt to the DashScope generation endpoint."""

    def __init__(self, settings: Settings, session: requests.Session | None = None) -> None:
        self._settings = settings
        self._session = session or requests.Session()

    def build_payload(self, image: Any) -> dict[str, Any]:
        return {
            "model": self._settings.model,
            "input": {
                "messages": [
                    {
                        "role": "user",
                        "content": [
                            {"text": self._settings.prompt},
                            {"image": image},
                        ],
                    }
                ]
            },
        }

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._settings.dashscope_api_key}",
        }

    def analyze(self, image: Any, request_id: str | None = None) -> AnalysisOutcome:
        started_at = perf_counter()
        logger.info(
            "Upstream call start request_id=%s model=%s image_chars=%s",
            request_id,
            self._settings.model,
            len(image) if isinstance(image, str) else None,
        )
        try:
            response = self._session.post(
                self._settings.upstream_url,
                json=self.build_payload(image),
                headers=self._headers(),
                timeout=self._settings.upstream_timeout,
            )
        except requests.RequestException as exc:
            logger.error("API Error request_id=%s: %s", request_id, exc)
            return TransportError(message=str(exc) or exc.__class__.__name__)

        duration_ms = round((perf_counter() - started_at) * 1000, 1)
        body = _response_body(response)
        if not response.ok:
            logger.error(
                "API Error request_id=%s status=%s duration_ms=%s body=%s",
                request_id,
                response.status_code,
                duration_ms,
                body,
            )
            return UpstreamError(status=response.status_code, body=body)

        try:
            text = extract_text(body)
        except MalformedUpstreamPayload as exc:
            logger.error(
                "Malformed upstream response request_id=%s status=%s: %s",
                request_id,
                response.status_code,
                exc,
            )
            return MalformedResponse(detail=str(exc), body=body)

        logger.info(
            "Upstream call done request_id=%s status=%s duration_ms=%s result_chars=%s",
            request_id,
            response.status_code,
            duration_ms,
            len(text),
        )
        return Success(text=text)
