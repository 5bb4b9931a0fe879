"""Template model and the built-in canvas presets."""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from ..geometry import CanvasSize
from .scene import Scene

TEMPLATE_VERSION = "1.0"


class Template(BaseModel):
    """Ordered scenes plus the canvas size they share.

    The unit of persistence and export. Always holds at least one scene.
    """
    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    version: str = TEMPLATE_VERSION
    canvas_size: CanvasSize = Field(default_factory=CanvasSize)
    scenes: list[Scene] = Field(default_factory=lambda: [Scene()], min_length=1)
    created_at: Optional[str] = None
    exported_at: Optional[str] = None

    @property
    def total_duration(self) -> float:
        return sum(s.duration for s in self.scenes)

    def get_scene(self, scene_id: str) -> Optional[Scene]:
        for s in self.scenes:
            if s.id == scene_id:
                return s
        return None

    def scene_index(self, scene_id: str) -> Optional[int]:
        for i, s in enumerate(self.scenes):
            if s.id == scene_id:
                return i
        return None

    def to_summary(self) -> list[dict]:
        return [{"index": i, **s.to_summary()} for i, s in enumerate(self.scenes)]


class CanvasPreset(BaseModel):
    """A named canvas size."""
    name: str
    description: str
    size: CanvasSize


CANVAS_PRESETS: dict[str, CanvasPreset] = {
    p.name: p for p in [
        CanvasPreset(name="Instagram Story", description="Vertical 9:16 story / status",
                     size=CanvasSize(width=1080, height=1920)),
        CanvasPreset(name="Instagram Post", description="Square feed post",
                     size=CanvasSize(width=1080, height=1080)),
        CanvasPreset(name="Facebook Post", description="Landscape link post",
                     size=CanvasSize(width=1200, height=630)),
        CanvasPreset(name="YouTube Thumbnail", description="16:9 thumbnail",
                     size=CanvasSize(width=1280, height=720)),
        CanvasPreset(name="Twitter Post", description="Landscape in-stream image",
                     size=CanvasSize(width=1200, height=675)),
        CanvasPreset(name="LinkedIn Post", description="Landscape shared image",
                     size=CanvasSize(width=1200, height=628)),
        CanvasPreset(name="Pinterest Pin", description="Tall 2:3 pin",
                     size=CanvasSize(width=1000, height=1500)),
    ]
}

CUSTOM_PRESET = "Custom"
