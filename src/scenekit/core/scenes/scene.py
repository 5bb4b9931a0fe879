"""Scene data model."""

import uuid
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from .elements import Element

DEFAULT_GRADIENT = ["#667eea", "#764ba2"]


def new_scene_id() -> str:
    return f"scene-{uuid.uuid4().hex[:12]}"


class Transition(str, Enum):
    """Transition to the next scene.

    Descriptive only: consumed by the external video-compositing step, never
    evaluated by the frame renderer.
    """
    NONE = "None"
    FADE = "Fade"
    SLIDE_LEFT = "Slide Left"
    SLIDE_RIGHT = "Slide Right"
    SLIDE_UP = "Slide Up"
    SLIDE_DOWN = "Slide Down"
    ZOOM_IN = "Zoom In"
    ZOOM_OUT = "Zoom Out"
    ROTATE = "Rotate"
    FLIP = "Flip"
    DISSOLVE = "Dissolve"
    BLUR = "Blur"
    GLOW = "Glow"


class GradientBackground(BaseModel):
    """Linear gradient; angle follows CSS (180 = top to bottom)."""
    type: Literal["gradient"] = "gradient"
    colors: list[str] = Field(default_factory=lambda: list(DEFAULT_GRADIENT), min_length=1)
    angle: float = 180.0


class ImageBackground(BaseModel):
    type: Literal["image"] = "image"
    src: Optional[str] = None


# A plain string is a flat colour (or a CSS gradient expression).
Background = Union[str, GradientBackground, ImageBackground]


class Scene(BaseModel):
    """One timed segment of a template's timeline.

    ``elements`` order is the initial stacking order, but each element's
    zIndex is authoritative when compositing (ties keep sequence order).
    """
    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    id: str = Field(default_factory=new_scene_id)
    name: str = "Scene 1"
    duration: float = Field(default=3.0, gt=0)
    background: Background = Field(
        default_factory=lambda: GradientBackground(colors=list(DEFAULT_GRADIENT), angle=135.0)
    )
    transition: Transition = Transition.NONE
    elements: list[Element] = Field(default_factory=list)

    def get_element(self, element_id: str):
        for el in self.elements:
            if el.id == element_id:
                return el
        return None

    def element_index(self, element_id: str) -> Optional[int]:
        for i, el in enumerate(self.elements):
            if el.id == element_id:
                return i
        return None

    def to_summary(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "duration": f"{self.duration:.1f}s",
            "transition": self.transition.value,
            "element_count": len(self.elements),
            "element_types": [el.type for el in self.elements],
        }
