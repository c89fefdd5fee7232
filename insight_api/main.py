from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from insight_api.core.config import Settings
from insight_api.core.logging_config import logger
from insight_api.routes.analyze import GENERIC_ERROR_MESSAGE
from insight_api.routes.analyze import router as analyze_router
from insight_api.routes.health import router as health_router
from insight_api.routes.spa import router as spa_router
from insight_api.services.vision_client import DashScopeVisionClient


def create_app(
    settings: Settings | None = None,
    vision_client: DashScopeVisionClient | None = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    if not settings.dashscope_api_key:
        logger.warning("DASHSCOPE_API_KEY is not set, upstream calls will be rejected.")

    app = FastAPI(
        title=settings.api_name,
        version=settings.api_version,
        description=(
            "Relays browser images to a vision-language model and serves the "
            "single-page application bundle."
        ),
    )
    app.state.settings = settings
    app.state.vision_client = vision_client or DashScopeVisionClient(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_: Request, exc: StarletteHTTPException):  # type: ignore[no-untyped-def]
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):  # type: ignore[no-untyped-def]
        logger.error(
            "Unhandled error on %s %s (%s)",
            request.method,
            request.url.path,
            exc.__class__.__name__,
            exc_info=exc,
        )
        return JSONResponse(status_code=500, content={"error": GENERIC_ERROR_MESSAGE})

    app.include_router(health_router)
    app.include_router(analyze_router)
    # Catch-all GET route, must stay last.
    app.include_router(spa_router)
    return app


app = create_app()
