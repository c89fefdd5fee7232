from pathlib import Path, PurePosixPath

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse

from insight_api.core.config import Settings
from insight_api.deps.state import get_settings

router = APIRouter(tags=["spa"])


def resolve_static_file(static_dir: Path, request_path: str) -> Path | None:
    """
    Return the file under `static_dir` matching `request_path`, or None.

    Dotfiles and anything inside a dot-directory are never served, and paths
    that resolve outside `static_dir` count as unmatched.
    """
    relative = request_path.lstrip("/")
    if any(part.startswith(".") for part in PurePosixPath(relative).parts):
        return None

    root = static_dir.resolve()
    candidate = (root / relative).resolve()
    if not candidate.is_relative_to(root):
        return None
    if candidate.is_file():
        return candidate
    return None


@router.api_route("/{full_path:path}", methods=["GET", "HEAD"], include_in_schema=False)
def serve_spa(full_path: str, settings: Settings = Depends(get_settings)) -> FileResponse:
    asset = resolve_static_file(settings.static_dir, full_path)
    if asset is not None:
        return FileResponse(asset)

    if not settings.index_path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
    return FileResponse(settings.index_path, media_type="text/html")
