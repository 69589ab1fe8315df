"""Rendering boundary: dispatch, reference templates and output sink."""

from quire.rendering.dispatcher import RenderDispatcher, Renderer, build_request
from quire.rendering.sink import SiteWriter
from quire.rendering.templates import TemplateRenderer

__all__ = ["RenderDispatcher", "Renderer", "SiteWriter", "TemplateRenderer", "build_request"]
