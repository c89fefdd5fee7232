from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AnalysisRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # Forwarded as-is; a missing image is sent upstream as null.
    image: Any = Field(default=None, description="Image payload, usually a base64 data URI.")


class AnalysisResponse(BaseModel):
    success: bool = Field(default=True)
    result: str = Field(..., description="Natural-language description of the image.")


class ErrorResponse(BaseModel):
    error: Any = Field(..., description="Upstream error body or a generic message.")
