import json
from pathlib import Path
from unittest.mock import Mock

import pytest
import requests
from fastapi.testclient import TestClient

from insight_api.core.config import Settings
from insight_api.main import create_app
from insight_api.services.vision_client import DashScopeVisionClient

UPSTREAM_URL = "https://upstream.test/api/v1/services/aigc/multimodal-generation/generation"
INDEX_HTML = b"<!doctype html><html><body><div id=\"app\"></div></body></html>"
APP_JS = b"console.log('bundle');\n"


def make_response(status_code: int, payload=None, text: str = "") -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.encoding = "utf-8"
    if payload is not None:
        response._content = json.dumps(payload).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = text.encode("utf-8")
    return response


def generation_payload(text: str) -> dict:
    return {
        "output": {"choices": [{"message": {"role": "assistant", "content": [{"text": text}]}}]},
        "usage": {"input_tokens": 1200, "output_tokens": 80},
        "request_id": "upstream-req-1",
    }


@pytest.fixture
def dist_dir(tmp_path: Path) -> Path:
    dist = tmp_path / "dist"
    (dist / "assets").mkdir(parents=True)
    (dist / "index.html").write_bytes(INDEX_HTML)
    (dist / "assets" / "app.js").write_bytes(APP_JS)
    return dist


@pytest.fixture
def settings(dist_dir: Path) -> Settings:
    return Settings(
        dashscope_api_key="test-key",
        upstream_url=UPSTREAM_URL,
        static_dir=dist_dir,
    )


@pytest.fixture
def session() -> Mock:
    return Mock(spec=requests.Session)


@pytest.fixture
def vision_client(settings: Settings, session: Mock) -> DashScopeVisionClient:
    return DashScopeVisionClient(settings, session=session)


@pytest.fixture
def client(settings: Settings, vision_client: DashScopeVisionClient) -> TestClient:
    app = create_app(settings, vision_client)
    return TestClient(app, raise_server_exceptions=False)
