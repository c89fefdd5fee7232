from starlette.requests import Request

from insight_api.core.config import Settings
from insight_api.services.vision_client import DashScopeVisionClient


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_vision_client(request: Request) -> DashScopeVisionClient:
    return request.app.state.vision_client
