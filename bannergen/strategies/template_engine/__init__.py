"""Template engine strategies.

Implements the template-binding engine: document sizing, element
classification, text/group mutation, shape promotion and overflow
truncation for SVG banner templates.
"""

from bannergen.strategies.template_engine.binder import BoundDocument, TemplateBinder
from bannergen.strategies.template_engine.classifier import classify_element, classify_value
from bannergen.strategies.template_engine.models import (
    ArtifactStatus,
    GeneratedArtifact,
    GenerationResult,
    ImageFit,
    MutationKind,
    ValueKind,
)
from bannergen.strategies.template_engine.sizing import PreparedTemplate, size_template
from bannergen.strategies.template_engine.truncation import OverflowTruncator

__all__ = [
    "ArtifactStatus",
    "BoundDocument",
    "GeneratedArtifact",
    "GenerationResult",
    "ImageFit",
    "MutationKind",
    "OverflowTruncator",
    "PreparedTemplate",
    "TemplateBinder",
    "ValueKind",
    "classify_element",
    "classify_value",
    "size_template",
]
