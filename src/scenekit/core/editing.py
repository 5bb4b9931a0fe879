"""Scene and element editing operations.

Every operation works on a deep copy and returns the new value; inputs are
never mutated, so a failed operation leaves the caller's template intact.
Scene-level operations that move the editing focus return a SceneEdit
carrying the new current-scene index alongside the template.
"""

import logging
from typing import Any, NamedTuple, Optional

from pydantic import ValidationError as PydanticValidationError

from .errors import InvalidOperation, NotFound, ValidationError
from .geometry import CanvasSize, clamp_position
from .scenes import (
    CANVAS_PRESETS,
    CUSTOM_PRESET,
    ELEMENT_TYPES,
    BaseElement,
    Scene,
    Template,
    element_adapter,
    new_element_id,
    new_scene_id,
)

logger = logging.getLogger("SceneKit.core.editing")

DUPLICATE_OFFSET = 20.0


class SceneEdit(NamedTuple):
    template: Template
    current_index: int


def _check_index(template: Template, index: int, what: str = "Scene index") -> None:
    if not 0 <= index < len(template.scenes):
        raise InvalidOperation(
            f"{what} {index} out of range (template has {len(template.scenes)} scenes)"
        )


def _validated(model_cls, data: dict, context: str):
    try:
        return model_cls.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e, context) from e


# ── Scene operations ────────────────────────────────────────────────────

def add_scene(template: Template, **overrides: Any) -> SceneEdit:
    """Append a scene with default values; it becomes the current scene."""
    t = template.model_copy(deep=True)
    data = {"name": f"Scene {len(t.scenes) + 1}", **overrides}
    t.scenes.append(_validated(Scene, data, "add_scene"))
    return SceneEdit(t, len(t.scenes) - 1)


def duplicate_scene(template: Template, index: int, current_index: int = 0) -> SceneEdit:
    """Insert a deep copy of scenes[index] immediately after it.

    The copy gets a fresh scene id, ``"<name> Copy"`` and fresh element ids
    (positions preserved). The current index keeps pointing at the same scene.
    """
    _check_index(template, index)
    t = template.model_copy(deep=True)
    source = t.scenes[index]
    copy = source.model_copy(deep=True)
    copy.id = new_scene_id()
    copy.name = f"{source.name} Copy"
    for el in copy.elements:
        el.id = new_element_id()
    t.scenes.insert(index + 1, copy)
    if current_index > index:
        current_index += 1
    return SceneEdit(t, current_index)


def delete_scene(template: Template, index: int, current_index: int = 0) -> SceneEdit:
    """Remove scenes[index]. Refuses to remove the only scene."""
    if len(template.scenes) == 1:
        raise InvalidOperation("Cannot delete the only scene in a template")
    _check_index(template, index)
    t = template.model_copy(deep=True)
    del t.scenes[index]
    if current_index == index:
        current_index = max(0, index - 1)
    elif current_index > index:
        current_index -= 1
    current_index = min(current_index, len(t.scenes) - 1)
    return SceneEdit(t, current_index)


def reorder_scenes(template: Template, from_index: int, to_index: int,
                   current_index: int = 0) -> SceneEdit:
    """Move the scene at from_index to to_index (drag-and-drop semantics).

    The current index follows the scene object it pointed at, not the slot.
    """
    _check_index(template, from_index, "Source index")
    _check_index(template, to_index, "Target index")
    t = template.model_copy(deep=True)
    current_id = t.scenes[current_index].id if 0 <= current_index < len(t.scenes) else None
    scene = t.scenes.pop(from_index)
    t.scenes.insert(to_index, scene)
    if current_id is not None:
        current_index = t.scene_index(current_id)
    return SceneEdit(t, current_index)


def rename_scene(template: Template, index: int, new_name: str) -> Template:
    """Rename a scene. A name that trims to empty keeps the old one."""
    _check_index(template, index)
    if new_name is not None and not isinstance(new_name, str):
        raise ValidationError(f"Scene name must be a string, got {type(new_name).__name__}")
    t = template.model_copy(deep=True)
    name = (new_name or "").strip()
    if name:
        t.scenes[index].name = name
    return t


def update_scene(template: Template, index: int, **changes: Any) -> Template:
    """Change scene-level properties (name, duration, background, transition)."""
    _check_index(template, index)
    allowed = {"name", "duration", "background", "transition"}
    unknown = set(changes) - allowed
    if unknown:
        raise ValidationError(f"Unknown scene properties: {', '.join(sorted(unknown))}")
    if "name" in changes and not str(changes["name"]).strip():
        raise ValidationError("Scene name must not be empty")
    t = template.model_copy(deep=True)
    data = t.scenes[index].model_dump()
    data.update(changes)
    t.scenes[index] = _validated(Scene, data, "update_scene")
    return t


def replace_scene(template: Template, index: int, scene: Scene) -> Template:
    _check_index(template, index)
    t = template.model_copy(deep=True)
    t.scenes[index] = scene.model_copy(deep=True)
    return t


# ── Canvas size ─────────────────────────────────────────────────────────

def _clamp_element(el: BaseElement, canvas_size: CanvasSize) -> None:
    el.x, el.y = clamp_position(el.x, el.y, el.width, el.height, canvas_size)


def set_canvas_size(template: Template, width: int, height: int) -> Template:
    """Resize the canvas and pull every element back inside the new bounds."""
    size = _validated(CanvasSize, {"width": width, "height": height}, "set_canvas_size")
    t = template.model_copy(deep=True)
    t.canvas_size = size
    for scene in t.scenes:
        for el in scene.elements:
            _clamp_element(el, size)
    return t


def apply_canvas_preset(template: Template, preset_name: str) -> Template:
    """Switch to a named canvas preset. "Custom" keeps the current size."""
    if preset_name == CUSTOM_PRESET:
        return template.model_copy(deep=True)
    preset = CANVAS_PRESETS.get(preset_name)
    if preset is None:
        available = ", ".join([*CANVAS_PRESETS.keys(), CUSTOM_PRESET])
        raise ValidationError(f"Unknown canvas preset '{preset_name}'. Available: {available}")
    return set_canvas_size(template, preset.size.width, preset.size.height)


# ── Element operations ──────────────────────────────────────────────────

def _element_index(scene: Scene, element_id: str) -> int:
    index = scene.element_index(element_id)
    if index is None:
        raise NotFound(f"Element '{element_id}' not found in scene '{scene.id}'")
    return index


def _normalize_patch(element_cls: type[BaseElement], patch: dict,
                     frozen: tuple[str, ...] = ("id", "type")) -> dict:
    lookup = element_cls.field_lookup()
    unknown = [k for k in patch if k not in lookup]
    if unknown:
        kind = element_cls.model_fields["type"].default
        raise ValidationError(
            f"Fields not valid for a {kind} element: {', '.join(sorted(unknown))}"
        )
    normalized = {lookup[k]: v for k, v in patch.items()}
    for name in frozen:
        if name in normalized:
            raise ValidationError(f"Element '{name}' cannot be changed")
    return normalized


def _validate_element(data: dict, context: str):
    try:
        return element_adapter.validate_python(data)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e, context) from e


def new_element(kind: str, canvas_size: CanvasSize, overrides: Optional[dict] = None):
    """Build an element of ``kind`` with kind-appropriate defaults.

    The default position is centred-ish on ``canvas_size``, as the editor
    places new layers, then clamped into bounds.
    """
    element_cls = ELEMENT_TYPES.get(kind)
    if element_cls is None:
        raise ValidationError(
            f"Unknown element kind '{kind}'. Allowed: {', '.join(ELEMENT_TYPES)}"
        )
    data = {
        "type": kind,
        "x": canvas_size.width / 2 - 50,
        "y": canvas_size.height / 2 - 50,
    }
    if overrides:
        data.update(_normalize_patch(element_cls, dict(overrides), frozen=()))
    data["type"] = kind
    element = _validate_element(data, f"add {kind} element")
    _clamp_element(element, canvas_size)
    return element


def add_element(scene: Scene, kind: str, canvas_size: CanvasSize,
                overrides: Optional[dict] = None) -> Scene:
    """Append a new element with zIndex equal to the current element count."""
    s = scene.model_copy(deep=True)
    element = new_element(kind, canvas_size, overrides)
    element.z_index = len(s.elements)
    s.elements.append(element)
    logger.debug(f"Added {kind} element {element.id} to scene {s.id}")
    return s


def update_element(scene: Scene, element_id: str, patch: dict,
                   canvas_size: CanvasSize) -> Scene:
    """Shallow-merge ``patch`` onto an element.

    Raises NotFound for an unknown id and ValidationError for fields that do
    not belong to the element's kind or fail their constraints. The resulting
    position is clamped into ``canvas_size``.
    """
    index = _element_index(scene, element_id)
    current = scene.elements[index]
    changes = _normalize_patch(type(current), patch)
    data = current.model_dump()
    data.update(changes)
    updated = _validate_element(data, f"update element {element_id}")
    _clamp_element(updated, canvas_size)
    s = scene.model_copy(deep=True)
    s.elements[index] = updated
    return s


def delete_element(scene: Scene, element_id: str) -> Scene:
    index = _element_index(scene, element_id)
    s = scene.model_copy(deep=True)
    del s.elements[index]
    return s


def _top_z_index(scene: Scene) -> int:
    """zIndex for an element about to be appended on top of ``scene``."""
    if not scene.elements:
        return 1
    return max(len(scene.elements) + 1, max(el.z_index for el in scene.elements) + 1)


def duplicate_element(scene: Scene, element_id: str,
                      canvas_size: CanvasSize) -> tuple[Scene, str]:
    """Clone an element with a new id, offset by +20,+20 and stacked on top.

    Returns the new scene and the id of the copy.
    """
    index = _element_index(scene, element_id)
    s = scene.model_copy(deep=True)
    copy = s.elements[index].model_copy(deep=True)
    copy.id = new_element_id()
    copy.x += DUPLICATE_OFFSET
    copy.y += DUPLICATE_OFFSET
    copy.z_index = _top_z_index(s)
    _clamp_element(copy, canvas_size)
    s.elements.append(copy)
    return s, copy.id


def _pointer_target(scene: Scene, element_id: str) -> int:
    index = _element_index(scene, element_id)
    if scene.elements[index].locked:
        raise InvalidOperation(f"Element '{element_id}' is locked")
    return index


def move_element(scene: Scene, element_id: str, dx: float, dy: float,
                 canvas_size: CanvasSize) -> Scene:
    """Apply a drag delta (logical pixels) and clamp the result into the canvas."""
    index = _pointer_target(scene, element_id)
    s = scene.model_copy(deep=True)
    el = s.elements[index]
    el.x, el.y = clamp_position(el.x + dx, el.y + dy, el.width, el.height, canvas_size)
    return s


def resize_element(scene: Scene, element_id: str, width: float, height: float,
                   canvas_size: CanvasSize) -> Scene:
    index = _pointer_target(scene, element_id)
    if width <= 0 or height <= 0:
        raise ValidationError("Element width and height must be positive")
    s = scene.model_copy(deep=True)
    el = s.elements[index]
    el.width, el.height = float(width), float(height)
    _clamp_element(el, canvas_size)
    return s


def bring_to_front(scene: Scene, element_id: str) -> Scene:
    index = _element_index(scene, element_id)
    s = scene.model_copy(deep=True)
    others = [el.z_index for i, el in enumerate(s.elements) if i != index]
    s.elements[index].z_index = (max(others) + 1) if others else 0
    return s


def send_to_back(scene: Scene, element_id: str) -> Scene:
    index = _element_index(scene, element_id)
    s = scene.model_copy(deep=True)
    others = [el.z_index for i, el in enumerate(s.elements) if i != index]
    s.elements[index].z_index = (min(others) - 1) if others else 0
    return s
