"""SceneKit Studio MCP Server - template editing and preview tools over MCP."""

from mcp.server.fastmcp import FastMCP, Context
import json
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Any, Optional
from pathlib import Path

import requests

# SDK imports
from scenekit.config import get_config
from scenekit.core.errors import SceneKitError
from scenekit.core.renderer import iter_frames, scene_at
from scenekit.core.state import EditorSession
from scenekit.core.workspace import Workspace
from scenekit.services.export_jobs import ExportJobClient

# Configure logging
logging.basicConfig(level=get_config().log_level,
                    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger("SceneKit")


# ── Global State ────────────────────────────────────────────────────────

_session_state = EditorSession()
_export_client: Optional[ExportJobClient] = None


def get_export_client() -> ExportJobClient:
    global _export_client
    if _export_client is None:
        config = get_config()
        _export_client = ExportJobClient(
            base_url=config.export_url,
            api_key=config.export_api_key,
            timeout=config.export_timeout,
        )
    return _export_client


def _new_session(workspace: Optional[Workspace] = None) -> EditorSession:
    session = EditorSession(workspace=workspace)
    preset = get_config().default_preset
    if session.get_preset(preset) is not None:
        session.apply_canvas_preset(preset)
    return session


def _scene_summary() -> dict:
    return {
        "current_scene_index": _session_state.current_scene_index,
        "scenes": _session_state.template.to_summary(),
    }


# ── Server Setup ────────────────────────────────────────────────────────

@asynccontextmanager
async def server_lifespan(server: FastMCP) -> AsyncIterator[Dict[str, Any]]:
    try:
        logger.info("SceneKitStudio server starting up")
        if not get_config().export_enabled:
            logger.warning("SCENEKIT_EXPORT_URL not set - export job tools are disabled")
        yield {}
    finally:
        logger.info("SceneKitStudio server shut down")


mcp = FastMCP("SceneKitStudio", lifespan=server_lifespan)


# ═══════════════════════════════════════════════════════════════════════
# PROJECT MANAGEMENT TOOLS
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def create_project(ctx: Context, project_name: str, base_path: str = "") -> str:
    """Create a new project with a blank template.

    Parameters:
    - project_name: Name for the project (used as directory name)
    - base_path: Optional base directory (defaults to SCENEKIT_PROJECTS_DIR)
    """
    global _session_state
    base = Path(base_path) if base_path else get_config().projects_path
    project_path = base / project_name

    if project_path.exists():
        return f"Error: Project directory already exists at {project_path}"

    workspace = Workspace(project_name=project_name, root_path=project_path,
                          asset_base_url=get_config().asset_base_url)
    workspace.initialize()

    _session_state = _new_session(workspace)
    _session_state.auto_save()

    return json.dumps({
        "status": "created",
        "project_name": project_name,
        "path": str(project_path),
        "template_id": _session_state.template_id,
        "canvas_size": _session_state.canvas_size.model_dump(),
    }, indent=2)


@mcp.tool()
def load_project(ctx: Context, project_path: str, template_id: str = "") -> str:
    """Load an existing project and open one of its templates.

    Parameters:
    - project_path: Path to the project directory
    - template_id: Template to open (defaults to the first one stored)
    """
    global _session_state
    try:
        workspace = Workspace.load(Path(project_path), asset_base_url=get_config().asset_base_url)
        _session_state = EditorSession(workspace=workspace)
        stored = workspace.list_templates()
        if template_id or stored:
            _session_state.load_from_workspace(template_id or stored[0])

        return json.dumps({
            "status": "loaded",
            "project_name": workspace.project_name,
            "path": str(workspace.root_path),
            "template_id": _session_state.template_id,
            "templates": stored,
            "scene_count": len(_session_state.template.scenes),
        }, indent=2)
    except SceneKitError as e:
        return f"Error loading project: {str(e)}"


@mcp.tool()
def save_project(ctx: Context) -> str:
    """Save the current template and the asset manifest."""
    if not _session_state.workspace:
        return "Error: No project is currently open. Use create_project or load_project first."

    _session_state.auto_save()
    _session_state.workspace.save_manifest()
    return f"Template '{_session_state.template_id}' saved in project '{_session_state.workspace.project_name}'."


@mcp.tool()
def get_project_status(ctx: Context) -> str:
    """Get the current session status: template, canvas, scenes, selection, zoom."""
    status = {
        "project_loaded": _session_state.workspace is not None,
        "template_id": _session_state.template_id,
        "canvas_size": _session_state.canvas_size.model_dump(),
        "scene_count": len(_session_state.template.scenes),
        "total_duration": _session_state.template.total_duration,
        "current_scene_index": _session_state.current_scene_index,
        "selected_element_id": _session_state.selected_element_id,
        "zoom": _session_state.viewport.zoom,
    }
    if _session_state.workspace:
        status["project_name"] = _session_state.workspace.project_name
        status["asset_count"] = len(_session_state.workspace.assets)
    return json.dumps(status, indent=2)


@mcp.tool()
def import_template(ctx: Context, template_json: str) -> str:
    """Replace the open template with one given as JSON.

    Parameters:
    - template_json: Canonical template JSON, a {"json_layout": ...} envelope,
      or the legacy single-scene layer format
    """
    try:
        _session_state.load_template(template_json)
        _session_state.auto_save()
    except SceneKitError as e:
        return f"Error: {str(e)}"
    return json.dumps(_scene_summary(), indent=2)


@mcp.tool()
def export_template(ctx: Context) -> str:
    """Export the open template as canonical JSON."""
    return json.dumps(_session_state.export(), indent=2, ensure_ascii=False)


# ═══════════════════════════════════════════════════════════════════════
# CANVAS TOOLS
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def list_canvas_presets(ctx: Context) -> str:
    """List the named canvas size presets."""
    return json.dumps(EditorSession.list_presets(), indent=2)


@mcp.tool()
def set_canvas(ctx: Context, preset: str = "", width: int = 0, height: int = 0) -> str:
    """Change the canvas size by preset name or explicit dimensions.

    Elements are pulled back inside the new bounds.

    Parameters:
    - preset: Preset name (see list_canvas_presets), or "Custom"
    - width, height: Explicit size in pixels, used when no preset is given
    """
    try:
        if preset:
            _session_state.apply_canvas_preset(preset)
        elif width and height:
            _session_state.set_canvas_size(width, height)
        else:
            return "Error: Give a preset name or both width and height."
    except SceneKitError as e:
        return f"Error: {str(e)}"
    return json.dumps(_session_state.canvas_size.model_dump(), indent=2)


@mcp.tool()
def set_zoom(ctx: Context, action: str = "reset", value: float = 1.0,
             container_width: float = 0, container_height: float = 0) -> str:
    """Change the editor zoom level.

    Parameters:
    - action: "in", "out", "reset", "set" (uses value) or "fit" (uses container size)
    - value: Zoom for action "set", clamped to 0.25-3.0
    - container_width, container_height: Viewport size for action "fit"
    """
    if action == "in":
        zoom = _session_state.zoom_in()
    elif action == "out":
        zoom = _session_state.zoom_out()
    elif action == "reset":
        zoom = _session_state.reset_zoom()
    elif action == "set":
        zoom = _session_state.set_zoom(value)
    elif action == "fit":
        zoom = _session_state.fit_to_screen(container_width, container_height)
    else:
        return f"Error: Unknown zoom action '{action}'. Use in, out, reset, set or fit."
    return json.dumps({"zoom": zoom}, indent=2)


# ═══════════════════════════════════════════════════════════════════════
# SCENE TOOLS
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def get_scenes(ctx: Context) -> str:
    """Get a summary of all scenes in order."""
    return json.dumps(_scene_summary(), indent=2)


@mcp.tool()
def get_scene(ctx: Context, index: int = -1) -> str:
    """Get the full data of one scene, including its elements.

    Parameters:
    - index: Scene index (defaults to the current scene)
    """
    scenes = _session_state.template.scenes
    index = _session_state.current_scene_index if index < 0 else index
    if index >= len(scenes):
        return f"Error: Scene index {index} out of range."
    return json.dumps(scenes[index].model_dump(mode="json", by_alias=True), indent=2)


@mcp.tool()
def select_scene(ctx: Context, index: int) -> str:
    """Make a scene the current scene for element editing."""
    try:
        _session_state.select_scene(index)
    except SceneKitError as e:
        return f"Error: {str(e)}"
    return json.dumps(_scene_summary(), indent=2)


@mcp.tool()
def add_scene(ctx: Context) -> str:
    """Append a new scene with default background; it becomes current."""
    _session_state.add_scene()
    return json.dumps(_scene_summary(), indent=2)


@mcp.tool()
def duplicate_scene(ctx: Context, index: int = -1) -> str:
    """Copy a scene and insert the copy right after it.

    Parameters:
    - index: Scene index (defaults to the current scene)
    """
    try:
        _session_state.duplicate_scene(None if index < 0 else index)
    except SceneKitError as e:
        return f"Error: {str(e)}"
    return json.dumps(_scene_summary(), indent=2)


@mcp.tool()
def delete_scene(ctx: Context, index: int = -1) -> str:
    """Delete a scene. The last remaining scene cannot be deleted.

    Parameters:
    - index: Scene index (defaults to the current scene)
    """
    try:
        _session_state.delete_scene(None if index < 0 else index)
    except SceneKitError as e:
        return f"Error: {str(e)}"
    return json.dumps(_scene_summary(), indent=2)


@mcp.tool()
def reorder_scenes(ctx: Context, from_index: int, to_index: int) -> str:
    """Move a scene to a new position in the sequence."""
    try:
        _session_state.reorder_scenes(from_index, to_index)
    except SceneKitError as e:
        return f"Error: {str(e)}"
    return json.dumps(_scene_summary(), indent=2)


@mcp.tool()
def rename_scene(ctx: Context, index: int, name: str) -> str:
    """Rename a scene. Blank names are ignored."""
    try:
        _session_state.rename_scene(index, name)
    except SceneKitError as e:
        return f"Error: {str(e)}"
    return json.dumps(_scene_summary(), indent=2)


@mcp.tool()
def update_scene(ctx: Context, index: int = -1, duration: float = 0,
                 background: Optional[Any] = None, transition: str = "") -> str:
    """Change scene duration, background or transition.

    Parameters:
    - index: Scene index (defaults to the current scene)
    - duration: Seconds, > 0
    - background: "#RRGGBB", a CSS gradient string, {"type": "gradient", "colors": [...]}
      or {"type": "image", "src": "..."}
    - transition: Transition name, e.g. "Fade", "Slide Left"
    """
    changes: dict[str, Any] = {}
    if duration:
        changes["duration"] = duration
    if background is not None:
        changes["background"] = background
    if transition:
        changes["transition"] = transition
    if not changes:
        return "Error: Nothing to update."
    try:
        _session_state.update_scene(None if index < 0 else index, **changes)
    except SceneKitError as e:
        return f"Error: {str(e)}"
    return json.dumps(_scene_summary(), indent=2)


# ═══════════════════════════════════════════════════════════════════════
# ELEMENT TOOLS
# ═══════════════════════════════════════════════════════════════════════

def _element_result(element_id: str) -> str:
    element = _session_state.current_scene.get_element(element_id)
    return json.dumps({
        "selected_element_id": _session_state.selected_element_id,
        "element": element.model_dump(mode="json", by_alias=True) if element else None,
    }, indent=2)


@mcp.tool()
def add_element(ctx: Context, kind: str, properties: Optional[dict] = None) -> str:
    """Add an element to the current scene and select it.

    Parameters:
    - kind: text, image, shape, audio, video or sticker
    - properties: Optional initial properties, e.g. {"text": "Hi", "fontSize": 48}
    """
    try:
        element_id = _session_state.add_element(kind, properties)
    except SceneKitError as e:
        return f"Error: {str(e)}"
    return _element_result(element_id)


@mcp.tool()
def update_element(ctx: Context, element_id: str, properties: dict) -> str:
    """Merge properties onto an element of the current scene.

    Parameters:
    - element_id: The element to change
    - properties: Fields to set, e.g. {"color": "#ff0000", "animation": "fadeIn"}
    """
    try:
        _session_state.update_element(element_id, properties)
    except SceneKitError as e:
        return f"Error: {str(e)}"
    return _element_result(element_id)


@mcp.tool()
def delete_element(ctx: Context, element_id: str) -> str:
    """Remove an element from the current scene."""
    try:
        _session_state.delete_element(element_id)
    except SceneKitError as e:
        return f"Error: {str(e)}"
    return f"Element '{element_id}' deleted. {len(_session_state.current_scene.elements)} elements remaining."


@mcp.tool()
def duplicate_element(ctx: Context, element_id: str) -> str:
    """Copy an element, offset by 20px and stacked on top; the copy is selected."""
    try:
        new_id = _session_state.duplicate_element(element_id)
    except SceneKitError as e:
        return f"Error: {str(e)}"
    return _element_result(new_id)


@mcp.tool()
def move_element(ctx: Context, element_id: str, dx: float, dy: float,
                 screen_pixels: bool = False) -> str:
    """Drag an element. The result is always kept inside the canvas.

    Parameters:
    - dx, dy: Movement delta
    - screen_pixels: True if the delta is in zoomed screen pixels rather than canvas pixels
    """
    try:
        if screen_pixels:
            _session_state.drag_element(element_id, dx, dy)
        else:
            _session_state.move_element(element_id, dx, dy)
    except SceneKitError as e:
        return f"Error: {str(e)}"
    return _element_result(element_id)


@mcp.tool()
def arrange_element(ctx: Context, element_id: str, position: str) -> str:
    """Change stacking order.

    Parameters:
    - position: "front" or "back"
    """
    try:
        if position == "front":
            _session_state.bring_to_front(element_id)
        elif position == "back":
            _session_state.send_to_back(element_id)
        else:
            return "Error: position must be 'front' or 'back'."
    except SceneKitError as e:
        return f"Error: {str(e)}"
    return _element_result(element_id)


# ═══════════════════════════════════════════════════════════════════════
# PREVIEW & EXPORT TOOLS
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def render_preview_frame(ctx: Context, t: float = 0.0,
                         customizations: Optional[dict] = None) -> str:
    """Render the current scene at time t into draw commands.

    Parameters:
    - t: Seconds since the scene became visible
    - customizations: Optional overrides keyed by element id
    """
    commands = _session_state.preview_frame(t, customizations)
    return json.dumps([c.model_dump(mode="json", exclude_none=True) for c in commands], indent=2)


@mcp.tool()
def render_timeline(ctx: Context, fps: int = 0, start: float = 0.0, max_frames: int = 10,
                    customizations: Optional[dict] = None) -> str:
    """Sample the whole template timeline into draw commands.

    Parameters:
    - fps: Frames per second (defaults to SCENEKIT_PREVIEW_FPS)
    - start: Template time in seconds of the first frame returned
    - max_frames: Maximum number of frames to return
    - customizations: Optional overrides keyed by element id
    """
    fps = fps or get_config().preview_fps
    resolver = _session_state.workspace.resolve_asset_url if _session_state.workspace else None
    frames = []
    try:
        for t, commands in iter_frames(_session_state.template, fps, customizations, resolver,
                                       start=start, limit=max_frames):
            scene_index, local_t = scene_at(_session_state.template, t)
            frames.append({
                "t": round(t, 4),
                "scene_index": scene_index,
                "scene_time": round(local_t, 4),
                "commands": [c.model_dump(mode="json", exclude_none=True) for c in commands],
            })
    except SceneKitError as e:
        return f"Error: {str(e)}"
    return json.dumps({
        "fps": fps,
        "total_duration": _session_state.template.total_duration,
        "frames": frames,
    }, indent=2)


@mcp.tool()
def enqueue_export(ctx: Context, format: str = "mp4", quality: str = "high",
                   customizations: Optional[dict] = None) -> str:
    """Send the open template to the export service for rendering.

    Parameters:
    - format: mp4 or webm
    - quality: low, medium or high
    - customizations: Optional overrides keyed by element id
    """
    if not get_config().export_enabled:
        return "Error: Export service not configured. Set SCENEKIT_EXPORT_URL."
    try:
        job_id = get_export_client().enqueue_export_job(
            _session_state.export(), customizations, format, quality
        )
    except SceneKitError as e:
        return f"Error: {str(e)}"
    except requests.RequestException as e:
        logger.error(f"Export request failed: {str(e)}")
        return f"Error contacting export service: {str(e)}"
    return json.dumps({"status": "queued", "job_id": job_id}, indent=2)


@mcp.tool()
def get_export_status(ctx: Context, job_id: str) -> str:
    """Check progress of an export job."""
    if not get_config().export_enabled:
        return "Error: Export service not configured. Set SCENEKIT_EXPORT_URL."
    try:
        status = get_export_client().get_export_status(job_id)
    except SceneKitError as e:
        return f"Error: {str(e)}"
    except requests.RequestException as e:
        logger.error(f"Export status request failed: {str(e)}")
        return f"Error contacting export service: {str(e)}"
    return json.dumps({
        "job_id": job_id,
        "status": status.status,
        "progress": status.progress,
        "download_url": status.download_url,
    }, indent=2)


# ═══════════════════════════════════════════════════════════════════════
# MCP PROMPT
# ═══════════════════════════════════════════════════════════════════════

@mcp.prompt()
def template_design_workflow() -> str:
    """Recommended workflow for designing a template"""
    return """You are helping the user design an animated social-media template. Follow this workflow:

1. **Create Project**: Use create_project() to set up a workspace with a blank template.
   Use set_canvas() with a preset (see list_canvas_presets()) to pick the format.

2. **Build Scenes**: Use add_scene(), duplicate_scene(), reorder_scenes() and
   rename_scene() to lay out the sequence. Use update_scene() for duration,
   background and transition.

3. **Add Elements**: Use select_scene() then add_element() with text, image, shape,
   audio, video or sticker. Refine with update_element(), move_element(),
   duplicate_element() and arrange_element().

4. **Animate**: Set "animation" on elements with update_element():
   none, fadeIn, fadeInUp, bounce, glow, typewriter, pulse.

5. **Preview**: Use render_preview_frame() at a few times to check the result,
   with customizations keyed by element id to try alternative content.

6. **Export**: Use export_template() for the JSON, or enqueue_export() and
   get_export_status() to render a video.

Tips:
- Element positions are always kept inside the canvas
- The last remaining scene cannot be deleted
- Use save_project() periodically to persist state
"""


# ── Main ────────────────────────────────────────────────────────────────

def main():
    """Run the MCP server"""
    mcp.run()


if __name__ == "__main__":
    main()
