import logging
import logging.config
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]
LOGGER_NAME = "imageinsight"
FALLBACK_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def configure_logging(project_root: Path = PROJECT_ROOT) -> Path | None:
    """
    Load `<project_root>/logging.conf` if present, else log to stderr at INFO.

    Returns the log directory handed to the file handlers, or None when the
    stderr fallback is used. The directory only exists when it is needed.
    """
    log_conf_path = project_root / "logging.conf"
    if not log_conf_path.exists():
        logging.basicConfig(level=logging.INFO, format=FALLBACK_FORMAT)
        return None

    log_dir = project_root / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    logging.config.fileConfig(
        log_conf_path,
        disable_existing_loggers=False,
        defaults={"logdirpath": str(log_dir)},
    )
    return log_dir


configure_logging()

logger = logging.getLogger(LOGGER_NAME)
