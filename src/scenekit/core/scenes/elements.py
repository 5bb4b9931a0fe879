"""Element models: one visual or audio layer placed within a scene.

Element is a tagged union on ``type``. Kind-specific style fields live
only on their own variant, so a shape can never carry ``fontSize``.
"""

import uuid
from typing import Annotated, Any, ClassVar, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, model_validator
from pydantic.alias_generators import to_camel

TextAlign = Literal["left", "center", "right", "justify"]
ShapeType = Literal[
    "rectangle", "circle", "triangle", "star", "heart",
    "arrow-right", "arrow-left", "arrow-up", "arrow-down",
]


def new_element_id() -> str:
    return f"element-{uuid.uuid4().hex[:12]}"


class BaseElement(BaseModel):
    """Geometry and flags shared by every element kind.

    x/y is the top-left corner in logical canvas pixels. ``animation`` names
    an entry in the animation table; ``duration`` optionally overrides the
    entrance ramp length in seconds.
    """
    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    # Older editors wrote these spellings; mapped onto our field names on input.
    legacy_keys: ClassVar[dict[str, str]] = {}

    id: str = Field(default_factory=new_element_id)
    type: str
    x: float = 0.0
    y: float = 0.0
    width: float = Field(default=100.0, gt=0)
    height: float = Field(default=100.0, gt=0)
    rotation: float = 0.0
    opacity: float = Field(default=1.0, ge=0.0, le=1.0)
    visible: bool = True
    locked: bool = False
    z_index: int = 0
    animation: Optional[str] = None
    duration: Optional[float] = Field(default=None, gt=0)

    @model_validator(mode="before")
    @classmethod
    def _rename_legacy_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict) or not cls.legacy_keys:
            return data
        data = dict(data)
        for old, new in cls.legacy_keys.items():
            if old in data:
                value = data.pop(old)
                if new not in data and to_camel(new) not in data:
                    data[new] = value
        return data

    @property
    def display_rotation(self) -> float:
        """Rotation normalized into [0, 360)."""
        return self.rotation % 360

    @classmethod
    def field_lookup(cls) -> dict[str, str]:
        """Map every accepted input key (name, alias, legacy spelling) to a field name."""
        lookup: dict[str, str] = {}
        for name, info in cls.model_fields.items():
            lookup[name] = name
            if info.alias:
                lookup[info.alias] = name
        lookup.update(cls.legacy_keys)
        return lookup


class TextElement(BaseElement):
    legacy_keys: ClassVar[dict[str, str]] = {"textAlign": "align", "content": "text"}

    type: Literal["text"] = "text"
    width: float = Field(default=200.0, gt=0)
    height: float = Field(default=50.0, gt=0)
    text: str = "Sample Text"
    font_size: float = Field(default=24.0, gt=0)
    font_family: str = "Arial"
    font_weight: str = "normal"
    font_style: str = "normal"
    color: str = "#000000"
    align: TextAlign = "left"


class ShapeElement(BaseElement):
    legacy_keys: ClassVar[dict[str, str]] = {"fill": "fill_color", "stroke": "stroke_color"}

    type: Literal["shape"] = "shape"
    shape_type: ShapeType = "rectangle"
    fill_color: str = "#3b82f6"
    stroke_color: str = "#1e40af"
    stroke_width: float = Field(default=2.0, ge=0)


class ImageElement(BaseElement):
    type: Literal["image"] = "image"
    src: Optional[str] = None
    alt: str = ""


class VideoElement(BaseElement):
    type: Literal["video"] = "video"
    src: Optional[str] = None
    alt: str = ""
    autoplay: bool = True
    loop: bool = False


class AudioElement(BaseElement):
    type: Literal["audio"] = "audio"
    src: Optional[str] = None
    autoplay: bool = True
    loop: bool = False


class StickerElement(BaseElement):
    type: Literal["sticker"] = "sticker"
    sticker: str = "🎉"


Element = Annotated[
    Union[TextElement, ImageElement, ShapeElement, AudioElement, VideoElement, StickerElement],
    Field(discriminator="type"),
]

ELEMENT_TYPES: dict[str, type[BaseElement]] = {
    "text": TextElement,
    "image": ImageElement,
    "shape": ShapeElement,
    "audio": AudioElement,
    "video": VideoElement,
    "sticker": StickerElement,
}

element_adapter: TypeAdapter = TypeAdapter(Element)
