import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[2]

DEFAULT_UPSTREAM_URL = (
    "https://dashscope.aliyuncs.com/api/v1/services/aigc/multimodal-generation/generation"
)
DEFAULT_MODEL = "qwen-vl-plus"
DEFAULT_PORT = 3000
DEFAULT_MAX_BODY_BYTES = 50 * 1024 * 1024

ANALYSIS_PROMPT = "请详细分析这张图片的内容，告诉我你看到了什么？请用通俗易懂的语言描述。"


def _optional_float(raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    return float(raw)


@dataclass(frozen=True)
class Settings:
    api_name: str = "Image Insight API"
    api_version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    dashscope_api_key: str = ""
    upstream_url: str = DEFAULT_UPSTREAM_URL
    model: str = DEFAULT_MODEL
    prompt: str = ANALYSIS_PROMPT
    # None means the HTTP client waits indefinitely.
    upstream_timeout: float | None = None
    static_dir: Path = field(default_factory=lambda: PROJECT_ROOT / "dist")
    index_file: str = "index.html"
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES

    @property
    def index_path(self) -> Path:
        return self.static_dir / self.index_file

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "Settings":
        """
        Build settings from the process environment.

        A `.env` file is loaded first (without overriding variables that are
        already set). Call this once at startup and pass the result around.
        """
        load_dotenv(dotenv_path=env_file)

        static_dir_raw = os.getenv("STATIC_DIR", "").strip()
        return cls(
            api_name=os.getenv("API_NAME", "Image Insight API"),
            api_version=os.getenv("API_VERSION", "1.0.0"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", str(DEFAULT_PORT))),
            dashscope_api_key=os.getenv("DASHSCOPE_API_KEY", "").strip(),
            upstream_url=os.getenv("DASHSCOPE_API_URL", DEFAULT_UPSTREAM_URL).strip(),
            model=os.getenv("DASHSCOPE_MODEL", DEFAULT_MODEL).strip(),
            upstream_timeout=_optional_float(os.getenv("UPSTREAM_TIMEOUT_SECONDS")),
            static_dir=Path(static_dir_raw) if static_dir_raw else PROJECT_ROOT / "dist",
            max_body_bytes=int(os.getenv("MAX_BODY_BYTES", str(DEFAULT_MAX_BODY_BYTES))),
        )
