"""Scenes package — public API re-exports."""

from ..geometry import CanvasSize
from .elements import (
    ELEMENT_TYPES,
    AudioElement,
    BaseElement,
    Element,
    ImageElement,
    ShapeElement,
    StickerElement,
    TextElement,
    VideoElement,
    element_adapter,
    new_element_id,
)
from .scene import (
    Background,
    GradientBackground,
    ImageBackground,
    Scene,
    Transition,
    new_scene_id,
)
from .template import CANVAS_PRESETS, CUSTOM_PRESET, CanvasPreset, Template

__all__ = [
    "CanvasSize",
    "Template",
    "CanvasPreset",
    "CANVAS_PRESETS",
    "CUSTOM_PRESET",
    "Scene",
    "Transition",
    "Background",
    "GradientBackground",
    "ImageBackground",
    "Element",
    "BaseElement",
    "TextElement",
    "ImageElement",
    "ShapeElement",
    "AudioElement",
    "VideoElement",
    "StickerElement",
    "ELEMENT_TYPES",
    "element_adapter",
    "new_element_id",
    "new_scene_id",
]
