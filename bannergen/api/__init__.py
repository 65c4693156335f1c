"""FastAPI routers and dependencies."""

from bannergen.api.banners import router as banners_router
from bannergen.api.deps import (
    get_component_factory,
    get_generator,
    get_packager,
    get_session_dir,
)

__all__ = [
    "banners_router",
    "get_component_factory",
    "get_generator",
    "get_packager",
    "get_session_dir",
]
