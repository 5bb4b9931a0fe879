"""Render-time customization overrides.

A customization map is keyed by the element's own stable id and carries a
partial property bag per element. Templates converted from the legacy layer
format carry ``"{type}_{index}"`` ids, so positional keys resolve there.
"""

import logging
import numbers
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from .errors import ValidationError
from .scenes import BaseElement

logger = logging.getLogger("SceneKit.core.customization")

MIN_FONT_SIZE = 1.0
MIN_SIZE = 1.0

Customizations = Mapping[str, Mapping[str, Any]]


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _as_font_size(value: Any) -> Optional[float]:
    if not _is_number(value):
        return None
    return max(MIN_FONT_SIZE, float(value))


def _as_align(value: Any) -> Optional[str]:
    if value in ("left", "center", "right", "justify"):
        return value
    return None


def _as_pair(value: Any) -> Optional[tuple[float, float]]:
    if isinstance(value, (list, tuple)) and len(value) == 2 and all(_is_number(v) for v in value):
        return float(value[0]), float(value[1])
    return None


# override key -> (element field, coercion, kinds it applies to)
_SCALAR_OVERRIDES: dict[str, tuple[str, Callable[[Any], Any], frozenset[str]]] = {
    "content": ("text", _as_str, frozenset({"text"})),
    "text": ("text", _as_str, frozenset({"text"})),
    "fontSize": ("font_size", _as_font_size, frozenset({"text"})),
    "color": ("color", _as_str, frozenset({"text"})),
    "fontFamily": ("font_family", _as_str, frozenset({"text"})),
    "textAlign": ("align", _as_align, frozenset({"text"})),
    "align": ("align", _as_align, frozenset({"text"})),
    "src": ("src", _as_str, frozenset({"image", "video", "audio"})),
}


def customization_key(element: BaseElement) -> str:
    return element.id


def resolve(element: BaseElement, customizations: Optional[Customizations]):
    """Return the element with any matching override applied.

    Fields present in the override replace the authored value; absent fields
    keep it. Values of the wrong type, and fields that do not apply to the
    element's kind, are skipped one by one; they never fail the frame.
    """
    if not isinstance(customizations, Mapping):
        return element
    bag = customizations.get(customization_key(element))
    if not isinstance(bag, Mapping) or not bag:
        return element

    update: dict[str, Any] = {}
    for key, raw in bag.items():
        if key in _SCALAR_OVERRIDES:
            field, coerce, kinds = _SCALAR_OVERRIDES[key]
            if element.type not in kinds:
                logger.debug(f"Override '{key}' does not apply to {element.type} element {element.id}")
                continue
            value = coerce(raw)
            if value is None:
                logger.debug(f"Ignoring malformed override {key}={raw!r} for {element.id}")
                continue
            update[field] = value
        elif key == "size":
            pair = _as_pair(raw)
            if pair is None:
                logger.debug(f"Ignoring malformed size override {raw!r} for {element.id}")
                continue
            update["width"] = max(MIN_SIZE, pair[0])
            update["height"] = max(MIN_SIZE, pair[1])
        elif key == "position":
            pair = _as_pair(raw)
            if pair is None:
                logger.debug(f"Ignoring malformed position override {raw!r} for {element.id}")
                continue
            update["x"], update["y"] = pair
        else:
            logger.debug(f"Unknown override '{key}' for {element.id}")

    if not update:
        return element
    return element.model_copy(update=update)


# ── Strict validation for callers ───────────────────────────────────────

class CustomizationOverride(BaseModel):
    """Validated override bag, with the limits the preview and export endpoints enforce."""
    model_config = {"alias_generator": to_camel, "populate_by_name": True, "extra": "forbid"}

    content: Optional[str] = Field(default=None, max_length=500)
    font_size: Optional[float] = Field(default=None, ge=8, le=200)
    color: Optional[str] = Field(default=None, pattern=r"^#[0-9A-Fa-f]{6}$")
    font_family: Optional[str] = Field(default=None, max_length=100)
    text_align: Optional[str] = Field(default=None, pattern=r"^(left|center|right)$")
    src: Optional[str] = Field(default=None, max_length=500)
    size: Optional[tuple[float, float]] = None
    position: Optional[tuple[float, float]] = None


def validate_customizations(raw: Any) -> dict[str, dict[str, Any]]:
    """Check a caller-supplied customization map before rendering or export.

    Returns the map with unset fields dropped, using the camelCase keys the
    resolver reads. Raises ValidationError on the first bad entry.
    """
    if not isinstance(raw, Mapping):
        raise ValidationError("Customizations must be a mapping of element id to overrides")
    cleaned: dict[str, dict[str, Any]] = {}
    for key, bag in raw.items():
        if not isinstance(bag, Mapping):
            raise ValidationError(f"Customization for '{key}' must be a mapping")
        try:
            override = CustomizationOverride.model_validate(dict(bag))
        except PydanticValidationError as e:
            raise ValidationError.from_pydantic(e, f"customization '{key}'") from e
        data = override.model_dump(by_alias=True, exclude_none=True)
        for pair_key in ("size", "position"):
            if pair_key in data:
                data[pair_key] = list(data[pair_key])
        cleaned[str(key)] = data
    return cleaned
