"""Rendering strategies."""

from bannergen.strategies.renderers.playwright import PlaywrightRenderer

__all__ = ["PlaywrightRenderer"]
