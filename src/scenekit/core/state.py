"""Editor session state: the open template, the focused scene, the selection."""

import logging
from typing import Optional

from pydantic import BaseModel, Field

from . import editing, geometry
from .commands import DrawCommand
from .customization import Customizations
from .errors import InvalidOperation, NotFound
from .export import export_template, import_template, now_iso
from .geometry import CanvasSize, Viewport
from .renderer import render_frame
from .scenes import CANVAS_PRESETS, CanvasPreset, Scene, Template
from .workspace import Workspace

logger = logging.getLogger("SceneKit.core.state")


def _fresh_template() -> Template:
    return Template(created_at=now_iso())


class EditorSession(BaseModel):
    """Global session state for one template being edited."""
    workspace: Optional[Workspace] = None
    template: Template = Field(default_factory=_fresh_template)
    template_id: Optional[str] = None
    current_scene_index: int = 0
    selected_element_id: Optional[str] = None
    viewport: Viewport = Field(default_factory=Viewport)

    model_config = {"arbitrary_types_allowed": True}

    @property
    def current_scene(self) -> Scene:
        return self.template.scenes[self.current_scene_index]

    @property
    def canvas_size(self) -> CanvasSize:
        return self.template.canvas_size

    def _apply(self, edit: editing.SceneEdit):
        self.template = edit.template
        self.current_scene_index = edit.current_index
        self._check_selection()

    def _check_selection(self):
        if self.selected_element_id and self.current_scene.get_element(self.selected_element_id) is None:
            self.selected_element_id = None

    def _set_current_scene(self, scene: Scene):
        self.template = editing.replace_scene(self.template, self.current_scene_index, scene)

    # ── Scenes ──────────────────────────────────────────────────────────

    def select_scene(self, index: int):
        if not 0 <= index < len(self.template.scenes):
            raise InvalidOperation(f"Scene index {index} out of range")
        self.current_scene_index = index
        self.selected_element_id = None

    def add_scene(self) -> Scene:
        self._apply(editing.add_scene(self.template))
        self.selected_element_id = None
        self.auto_save()
        return self.current_scene

    def duplicate_scene(self, index: Optional[int] = None) -> Scene:
        index = self.current_scene_index if index is None else index
        self._apply(editing.duplicate_scene(self.template, index, self.current_scene_index))
        self.auto_save()
        return self.template.scenes[index + 1]

    def delete_scene(self, index: Optional[int] = None):
        index = self.current_scene_index if index is None else index
        self._apply(editing.delete_scene(self.template, index, self.current_scene_index))
        self.auto_save()

    def reorder_scenes(self, from_index: int, to_index: int):
        self._apply(editing.reorder_scenes(self.template, from_index, to_index,
                                           self.current_scene_index))
        self.auto_save()

    def rename_scene(self, index: int, name: str):
        self.template = editing.rename_scene(self.template, index, name)
        self.auto_save()

    def update_scene(self, index: Optional[int] = None, **changes):
        index = self.current_scene_index if index is None else index
        self.template = editing.update_scene(self.template, index, **changes)
        self.auto_save()

    # ── Elements ────────────────────────────────────────────────────────

    def add_element(self, kind: str, overrides: Optional[dict] = None) -> str:
        """Add an element to the current scene and select it. Returns its id."""
        scene = editing.add_element(self.current_scene, kind, self.canvas_size, overrides)
        self._set_current_scene(scene)
        self.selected_element_id = scene.elements[-1].id
        self.auto_save()
        return self.selected_element_id

    def update_element(self, element_id: str, patch: dict):
        scene = editing.update_element(self.current_scene, element_id, patch, self.canvas_size)
        self._set_current_scene(scene)
        self.auto_save()

    def delete_element(self, element_id: str):
        scene = editing.delete_element(self.current_scene, element_id)
        self._set_current_scene(scene)
        if self.selected_element_id == element_id:
            self.selected_element_id = None
        self.auto_save()

    def duplicate_element(self, element_id: str) -> str:
        scene, new_id = editing.duplicate_element(self.current_scene, element_id, self.canvas_size)
        self._set_current_scene(scene)
        self.selected_element_id = new_id
        self.auto_save()
        return new_id

    def select_element(self, element_id: Optional[str]):
        if element_id is not None and self.current_scene.get_element(element_id) is None:
            raise NotFound(f"Element '{element_id}' not found in the current scene")
        self.selected_element_id = element_id

    def drag_element(self, element_id: str, screen_dx: float, screen_dy: float):
        """Move by a pointer delta measured in screen pixels at the current zoom."""
        dx, dy = geometry.screen_delta_to_logical(screen_dx, screen_dy, self.viewport)
        self.move_element(element_id, dx, dy)

    def move_element(self, element_id: str, dx: float, dy: float):
        scene = editing.move_element(self.current_scene, element_id, dx, dy, self.canvas_size)
        self._set_current_scene(scene)
        self.auto_save()

    def resize_element(self, element_id: str, width: float, height: float):
        scene = editing.resize_element(self.current_scene, element_id, width, height,
                                       self.canvas_size)
        self._set_current_scene(scene)
        self.auto_save()

    def bring_to_front(self, element_id: str):
        self._set_current_scene(editing.bring_to_front(self.current_scene, element_id))
        self.auto_save()

    def send_to_back(self, element_id: str):
        self._set_current_scene(editing.send_to_back(self.current_scene, element_id))
        self.auto_save()

    # ── Canvas and viewport ─────────────────────────────────────────────

    def set_canvas_size(self, width: int, height: int):
        self.template = editing.set_canvas_size(self.template, width, height)
        self.auto_save()

    def apply_canvas_preset(self, name: str):
        self.template = editing.apply_canvas_preset(self.template, name)
        self.auto_save()

    def zoom_in(self) -> float:
        self.viewport = geometry.zoom_in(self.viewport)
        return self.viewport.zoom

    def zoom_out(self) -> float:
        self.viewport = geometry.zoom_out(self.viewport)
        return self.viewport.zoom

    def set_zoom(self, zoom: float) -> float:
        self.viewport = geometry.with_zoom(self.viewport, zoom)
        return self.viewport.zoom

    def reset_zoom(self) -> float:
        self.viewport = geometry.reset_zoom(self.viewport)
        return self.viewport.zoom

    def fit_to_screen(self, container_width: float, container_height: float) -> float:
        zoom = geometry.fit_zoom(self.canvas_size, container_width, container_height)
        self.viewport = self.viewport.model_copy(update={
            "zoom": zoom,
            "pan_x": 0.0,
            "pan_y": 0.0,
            "container_width": container_width,
            "container_height": container_height,
        })
        return zoom

    # ── Preview and persistence ─────────────────────────────────────────

    def preview_frame(self, t: float, customizations: Optional[Customizations] = None
                      ) -> list[DrawCommand]:
        resolver = self.workspace.resolve_asset_url if self.workspace else None
        return render_frame(self.current_scene, t, customizations, self.canvas_size, resolver)

    def export(self) -> dict:
        return export_template(self.template, exported_at=now_iso())

    def load_template(self, blob):
        """Replace the open template; focus returns to the first scene."""
        self.template = import_template(blob)
        self.current_scene_index = 0
        self.selected_element_id = None

    def auto_save(self):
        """Save current template to the workspace if one is attached."""
        if self.workspace:
            self.template_id = self.workspace.save_template(
                export_template(self.template), self.template_id
            )

    def load_from_workspace(self, template_id: str):
        if not self.workspace:
            raise InvalidOperation("No workspace attached to this session")
        self.load_template(self.workspace.load_template(template_id))
        self.template_id = template_id
        logger.info(f"Loaded template {template_id}")

    @staticmethod
    def get_preset(name: str) -> Optional[CanvasPreset]:
        return CANVAS_PRESETS.get(name)

    @staticmethod
    def list_presets() -> list[dict]:
        return [
            {"name": p.name, "description": p.description,
             "width": p.size.width, "height": p.size.height}
            for p in CANVAS_PRESETS.values()
        ]
