import uvicorn

from insight_api.core.config import Settings
from insight_api.core.logging_config import logger
from insight_api.main import create_app


def main() -> None:
    settings = Settings.from_env()
    app = create_app(settings)
    logger.info("Server running on port %s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
