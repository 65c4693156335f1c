"""API request and response schemas.

Pydantic v2 models for API serialization/deserialization.
"""

from typing import Any

from pydantic import BaseModel, Field

from bannergen.strategies.template_engine.models import ArtifactStatus


# =============================================================================
# Generation Schemas
# =============================================================================


class BannerFile(BaseModel):
    """One generated banner as exposed to clients."""

    name: str = Field(description="Row identifier (the name column, or 'Banner N')")
    file_name: str = Field(description="Image file name inside the session")
    url: str = Field(description="Path of the image under the static mount")
    status: ArtifactStatus = Field(default=ArtifactStatus.GENERATED)
    asset_url: str | None = Field(default=None, description="URL returned by the asset service")
    error: str | None = Field(default=None, description="Render or upload failure, if any")
    skipped_fields: list[str] = Field(default_factory=list)


class GenerateResponse(BaseModel):
    """Result of a generation request."""

    success: bool = Field(default=True)
    session_id: str = Field(description="Identifier for downloading the batch")
    width: int = Field(description="Raster width in pixels")
    height: int = Field(description="Raster height in pixels")
    files: list[BannerFile] = Field(default_factory=list)
    generated_count: int = Field(default=0)
    failed_count: int = Field(default=0)
    zip_url: str = Field(description="Download path for the zipped images")
    report_url: str | None = Field(default=None, description="Download path for the report CSV")


class GenerateErrorResponse(BaseModel):
    """Batch-fatal generation failure."""

    success: bool = Field(default=False)
    error: str = Field(description="Why the batch could not be generated")


# =============================================================================
# Error Schemas
# =============================================================================


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str = Field(description="Error message")
    error_code: str | None = Field(default=None, description="Application-specific error code")
    extra: dict[str, Any] | None = Field(default=None, description="Additional error context")
