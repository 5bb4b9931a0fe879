"""Canonical template JSON: export, import, and legacy layer-format conversion.

Ids are preserved on a round trip: import_template(export_template(t)) gives
back the same scene and element ids.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError
from .geometry import CanvasSize
from .scenes import GradientBackground, Scene, Template

logger = logging.getLogger("SceneKit.core.export")

LEGACY_TEXT_WIDTH_FACTOR = 0.6
LEGACY_LINE_HEIGHT = 1.2


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def export_template(template: Template, exported_at: Optional[str] = None) -> dict:
    """Serialize to the canonical camelCase JSON structure.

    Pure unless ``exported_at`` is given, which is stamped into the output.
    """
    data = template.model_dump(mode="json", by_alias=True, exclude_none=True)
    if exported_at is not None:
        data["exportedAt"] = exported_at
    return data


def export_template_json(template: Template, indent: Optional[int] = 2,
                         exported_at: Optional[str] = None) -> str:
    return json.dumps(export_template(template, exported_at), indent=indent, ensure_ascii=False)


def import_template(blob: Union[dict, str, bytes]) -> Template:
    """Build a Template from canonical JSON (dict or JSON text).

    Also accepts the ``{"json_layout": {...}}`` envelope posted by the admin
    editor, and the legacy single-scene ``{"layers": [...]}`` format.
    """
    if isinstance(blob, (str, bytes)):
        try:
            blob = json.loads(blob)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Template JSON is not valid JSON: {e}") from e
    if not isinstance(blob, dict):
        raise ValidationError("Template JSON must be an object")
    if "json_layout" in blob and isinstance(blob["json_layout"], dict):
        blob = blob["json_layout"]
    if "scenes" not in blob and "layers" in blob:
        return import_legacy_config(blob)
    if not blob.get("scenes"):
        raise ValidationError("Template must contain at least one scene")
    try:
        return Template.model_validate(blob)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e, "import_template") from e


# ── Legacy layer format ─────────────────────────────────────────────────

def _parse_resolution(value: Any) -> CanvasSize:
    if isinstance(value, str) and "x" in value.lower():
        w, h = value.lower().split("x", 1)
        try:
            return CanvasSize(width=int(w), height=int(h))
        except (ValueError, PydanticValidationError):
            logger.warning(f"Unreadable legacy resolution {value!r}, using default canvas")
    return CanvasSize()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _number(layer: dict, key: str, default: float, index: int) -> float:
    value = layer.get(key, default)
    if not _is_number(value):
        raise ValidationError(f"Legacy layer {index}: {key} must be a number, got {value!r}")
    return float(value)


def _pair(layer: dict, key: str, default: list, index: int) -> tuple[float, float]:
    value = layer.get(key) or default
    if not isinstance(value, (list, tuple)) or len(value) != 2 or not all(map(_is_number, value)):
        raise ValidationError(f"Legacy layer {index}: {key} must be two numbers, got {value!r}")
    return float(value[0]), float(value[1])


def _centre_box(layer: dict, width: float, height: float, canvas: CanvasSize,
                index: int) -> dict:
    cx, cy = _pair(layer, "position", [canvas.width / 2, canvas.height / 2], index)
    return {"x": cx - width / 2, "y": cy - height / 2, "width": width, "height": height}


def _legacy_element(layer: dict, index: int, canvas: CanvasSize) -> Optional[dict]:
    kind = layer.get("type")
    element: dict[str, Any] = {
        "id": f"{kind}_{index}",
        "zIndex": index,
        "animation": layer.get("animation"),
    }
    if kind == "text":
        content = str(layer.get("content", ""))
        font_size = _number(layer, "fontSize", 24, index)
        width = max(1.0, len(content) * font_size * LEGACY_TEXT_WIDTH_FACTOR)
        height = max(1.0, font_size * LEGACY_LINE_HEIGHT)
        element.update(_centre_box(layer, width, height, canvas, index))
        element.update({
            "type": "text",
            "text": content,
            "fontSize": font_size,
            "color": layer.get("color", "#FFFFFF"),
            "fontFamily": layer.get("fontFamily", "Arial"),
            "align": layer.get("textAlign", "center"),
        })
        return element
    if kind not in ("image", "lottie"):
        logger.warning(f"Skipping legacy layer {index} of unsupported type {kind!r}")
        return None
    width, height = _pair(layer, "size", [100, 100], index)
    element.update(_centre_box(layer, width, height, canvas, index))
    if kind == "image":
        element.update({
            "type": "image",
            "src": layer.get("src"),
            "alt": layer.get("placeholder", ""),
        })
        return element
    element.update({"type": "sticker", "sticker": layer.get("placeholder", "lottie")})
    return element


def import_legacy_config(config: dict) -> Template:
    """Convert the older single-scene ``json_config`` layer format.

    Layers there are anchored at their centre ``position``; element ids are
    set to ``"{type}_{index}"`` so positional customization keys written for
    that format still address the same layers. A layer whose position, size
    or fontSize is not numeric raises ValidationError.
    """
    canvas = _parse_resolution(config.get("resolution"))
    background = config.get("background")
    if isinstance(background, dict) and background.get("type") == "gradient":
        background = GradientBackground(colors=background.get("colors") or ["#000000"])
    elif background is None:
        background = "#000000"

    elements = []
    for index, layer in enumerate(config.get("layers") or []):
        if not isinstance(layer, dict):
            continue
        element = _legacy_element(layer, index, canvas)
        if element is not None:
            elements.append({k: v for k, v in element.items() if v is not None})

    try:
        scene = Scene.model_validate({
            "name": "Scene 1",
            "duration": config.get("duration", 3),
            "background": background,
            "elements": elements,
        })
        return Template(canvas_size=canvas, scenes=[scene])
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e, "import_legacy_config") from e
