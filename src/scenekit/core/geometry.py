"""Mapping between logical canvas coordinates and the zoomed on-screen view.

Elements always live in logical canvas pixels. Zooming and panning only
change the Viewport; nothing here rewrites element geometry.
"""

from typing import Optional

from pydantic import BaseModel, Field, PositiveInt

ZOOM_MIN = 0.25
ZOOM_MAX = 3.0
ZOOM_STEP = 0.1

Point = tuple[float, float]


class CanvasSize(BaseModel):
    """Logical pixel dimensions shared by every scene of a template."""
    width: PositiveInt = 1080
    height: PositiveInt = 1920


class Viewport(BaseModel):
    """How the canvas is shown on screen.

    container_width/height describe the widget hosting the canvas. When
    both are known the scaled canvas is centred inside it.
    """
    zoom: float = Field(default=1.0, ge=ZOOM_MIN, le=ZOOM_MAX)
    pan_x: float = 0.0
    pan_y: float = 0.0
    container_width: Optional[float] = None
    container_height: Optional[float] = None


def clamp_zoom(zoom: float) -> float:
    return max(ZOOM_MIN, min(zoom, ZOOM_MAX))


def _origin(canvas_size: CanvasSize, viewport: Viewport) -> Point:
    ox, oy = viewport.pan_x, viewport.pan_y
    if viewport.container_width is not None:
        ox += (viewport.container_width - canvas_size.width * viewport.zoom) / 2
    if viewport.container_height is not None:
        oy += (viewport.container_height - canvas_size.height * viewport.zoom) / 2
    return ox, oy


def to_screen(point: Point, canvas_size: CanvasSize, viewport: Viewport) -> Point:
    """Map a logical canvas point to screen coordinates (screen = logical * zoom + offset)."""
    ox, oy = _origin(canvas_size, viewport)
    return point[0] * viewport.zoom + ox, point[1] * viewport.zoom + oy


def to_logical(point: Point, canvas_size: CanvasSize, viewport: Viewport) -> Point:
    """Inverse of to_screen."""
    ox, oy = _origin(canvas_size, viewport)
    return (point[0] - ox) / viewport.zoom, (point[1] - oy) / viewport.zoom


def screen_delta_to_logical(dx: float, dy: float, viewport: Viewport) -> Point:
    """Convert a pointer movement on screen into a logical-pixel delta."""
    return dx / viewport.zoom, dy / viewport.zoom


def clamp_position(x: float, y: float, width: float, height: float,
                   canvas_size: CanvasSize) -> Point:
    """Keep an element's box inside the canvas.

    An element larger than the canvas on an axis is pinned at 0 on that axis.
    """
    return (
        max(0.0, min(x, canvas_size.width - width)),
        max(0.0, min(y, canvas_size.height - height)),
    )


# ── Zoom transitions ────────────────────────────────────────────────────

def with_zoom(viewport: Viewport, zoom: float) -> Viewport:
    return viewport.model_copy(update={"zoom": clamp_zoom(zoom)})


def zoom_in(viewport: Viewport, step: float = ZOOM_STEP) -> Viewport:
    return with_zoom(viewport, round(viewport.zoom + step, 4))


def zoom_out(viewport: Viewport, step: float = ZOOM_STEP) -> Viewport:
    return with_zoom(viewport, round(viewport.zoom - step, 4))


def reset_zoom(viewport: Viewport) -> Viewport:
    return viewport.model_copy(update={"zoom": 1.0, "pan_x": 0.0, "pan_y": 0.0})


def fit_zoom(canvas_size: CanvasSize, container_width: float, container_height: float) -> float:
    """Largest zoom (within range) at which the whole canvas fits the container."""
    if container_width <= 0 or container_height <= 0:
        return ZOOM_MIN
    return clamp_zoom(min(container_width / canvas_size.width,
                          container_height / canvas_size.height))
