"""FastAPI dependencies for dependency injection.

Provides reusable dependencies for routes including:
- The component factory and batch generator
- Session directory lookup
"""

import logging
import re
from pathlib import Path

from fastapi import Depends, HTTPException, status

from bannergen.core.config import Settings, get_settings
from bannergen.core.factory import ComponentFactory
from bannergen.generator import BannerGenerator
from bannergen.interfaces.packager import BasePackager

logger = logging.getLogger(__name__)

SESSION_ID_PATTERN = re.compile(r"^[0-9a-f]{8,64}$")


def get_component_factory(
    settings: Settings = Depends(get_settings),
) -> ComponentFactory:
    """Dependency for the component factory bound to the current settings."""
    return ComponentFactory(settings)


def get_generator(
    settings: Settings = Depends(get_settings),
    factory: ComponentFactory = Depends(get_component_factory),
) -> BannerGenerator:
    """Dependency for the batch generator."""
    return BannerGenerator(settings, factory)


def get_packager(
    factory: ComponentFactory = Depends(get_component_factory),
) -> BasePackager:
    """Dependency for the session packager."""
    return factory.get_packager()


def get_session_dir(
    session_id: str,
    settings: Settings = Depends(get_settings),
) -> Path:
    """Dependency resolving an existing session directory.

    Args:
        session_id: The session id from the path.
        settings: Application settings.

    Returns:
        The session directory.

    Raises:
        HTTPException: If the id is malformed or the session does not exist.
    """
    if not SESSION_ID_PATTERN.match(session_id):
        logger.warning(f"Rejected session id: {session_id!r}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session expired or not found",
        )

    session_dir = settings.output_dir / session_id
    if not session_dir.is_dir():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session expired or not found",
        )
    return session_dir
