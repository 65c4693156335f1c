"""Template engine domain models.

Enumerations and Pydantic models specific to template binding and batch
generation. These models live here to avoid circular imports with the
API layer.
"""

import enum

from pydantic import BaseModel, Field


class ImageFit(str, enum.Enum):
    """Aspect-ratio policy applied to every image written in one run."""

    CONTAIN = "contain"
    COVER = "cover"

    @property
    def preserve_aspect_ratio(self) -> str:
        """Return the SVG preserveAspectRatio value for this policy."""
        if self is ImageFit.CONTAIN:
            return "xMidYMid meet"
        return "xMidYMid slice"


class ValueKind(str, enum.Enum):
    """What a bound data value looks like."""

    IMAGE_REFERENCE = "image_reference"
    COLOR = "color"
    PLAIN_TEXT = "plain_text"


class MutationKind(str, enum.Enum):
    """How a targeted element is rewritten for one row."""

    IMAGE_FILL = "image_fill"
    SHAPE_TO_IMAGE = "shape_to_image"
    COLOR_FILL = "color_fill"
    GROUP_TEXT = "group_text"
    TEXT = "text"


class ArtifactStatus(str, enum.Enum):
    """Outcome of one row of a batch."""

    GENERATED = "generated"
    FAILED = "failed"


class GeneratedArtifact(BaseModel):
    """One output image of a batch."""

    index: int = Field(description="1-based row position in the input")
    name: str = Field(description="Row identifier shown to the user")
    file_name: str = Field(description="Image file name inside the session directory")
    status: ArtifactStatus = Field(default=ArtifactStatus.GENERATED)
    url: str | None = Field(default=None, description="Reference URL from the asset service")
    error: str | None = Field(default=None, description="Render or upload failure, if any")
    skipped_fields: list[str] = Field(
        default_factory=list,
        description="Mapped element ids left untouched for this row",
    )


class GenerationResult(BaseModel):
    """Outcome of a whole batch."""

    artifacts: list[GeneratedArtifact] = Field(default_factory=list)
    width: int = Field(description="Raster width in pixels")
    height: int = Field(description="Raster height in pixels")
    report_path: str | None = Field(default=None, description="Per-row report, when written")

    @property
    def generated_count(self) -> int:
        return sum(1 for a in self.artifacts if a.status is ArtifactStatus.GENERATED)

    @property
    def failed_count(self) -> int:
        return sum(1 for a in self.artifacts if a.status is ArtifactStatus.FAILED)
