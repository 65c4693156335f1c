"""Core configuration and factory components."""

from bannergen.core.config import Settings, get_settings
from bannergen.core.factory import ComponentFactory, get_factory

__all__ = [
    "Settings",
    "get_settings",
    "ComponentFactory",
    "get_factory",
]
