"""Draw commands, the renderer output consumed by an external drawing surface.

A surface (canvas API, server-side rasteriser, SVG writer) executes the
commands in order; later commands paint over earlier ones.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from .animation import Glow

PLACEHOLDER_COLOR = "#4A90E2"
IMAGE_BACKGROUND_PLACEHOLDER = "#1a1a2e"


class BackgroundCommand(BaseModel):
    """Fill covering the whole canvas."""
    op: Literal["background"] = "background"
    fill: Literal["solid", "gradient", "image"]
    width: int
    height: int
    color: Optional[str] = None
    colors: list[str] = Field(default_factory=list)
    angle: Optional[float] = None
    src: Optional[str] = None
    placeholder: bool = False


class ElementCommand(BaseModel):
    """Positioned box shared by every visual command.

    x/y/width/height are the authored box in logical pixels; ``scale`` is a
    uniform scale about the box centre and ``rotation`` is in degrees.
    """
    element_id: str
    x: float
    y: float
    width: float
    height: float
    rotation: float = 0.0
    opacity: float = 1.0
    scale: float = 1.0
    shadow: Optional[Glow] = None


class TextCommand(ElementCommand):
    op: Literal["text"] = "text"
    content: str
    font_size: float
    font_family: str
    font_weight: str = "normal"
    font_style: str = "normal"
    color: str
    align: str


class ImageCommand(ElementCommand):
    """Image or video frame. ``placeholder`` set when the source is missing."""
    op: Literal["image"] = "image"
    kind: Literal["image", "video"] = "image"
    src: Optional[str] = None
    alt: str = ""
    placeholder: bool = False
    placeholder_color: Optional[str] = None


class ShapeCommand(ElementCommand):
    op: Literal["shape"] = "shape"
    shape_type: str
    fill_color: str
    stroke_color: str
    stroke_width: float


class StickerCommand(ElementCommand):
    op: Literal["sticker"] = "sticker"
    sticker: str


class AudioCommand(BaseModel):
    """Non-visual: schedule playback at a scene-relative time."""
    op: Literal["audio"] = "audio"
    element_id: str
    src: Optional[str] = None
    start_at: float = 0.0
    autoplay: bool = True
    loop: bool = False
    placeholder: bool = False


DrawCommand = Annotated[
    Union[BackgroundCommand, TextCommand, ImageCommand, ShapeCommand,
          StickerCommand, AudioCommand],
    Field(discriminator="op"),
]
