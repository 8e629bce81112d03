"""Renderer contract and the headless implementation."""

from src.sgraph.renderer.base import SceneGraphRenderer
from src.sgraph.renderer.headless import DrawCommand, HeadlessRenderer, LightState

__all__ = ["DrawCommand", "HeadlessRenderer", "LightState", "SceneGraphRenderer"]
