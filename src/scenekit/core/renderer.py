"""Frame renderer: scene + time cursor + customizations -> draw commands.

The renderer never paints pixels and never raises for content problems:
missing assets become placeholders and bad override fields are skipped.
"""

import logging
import math
import re
from typing import Callable, Iterator, Optional

from . import animation
from .commands import (
    IMAGE_BACKGROUND_PLACEHOLDER,
    PLACEHOLDER_COLOR,
    AudioCommand,
    BackgroundCommand,
    DrawCommand,
    ImageCommand,
    ShapeCommand,
    StickerCommand,
    TextCommand,
)
from .customization import Customizations, resolve
from .errors import ValidationError
from .geometry import CanvasSize
from .scenes import (
    AudioElement,
    BaseElement,
    GradientBackground,
    ImageBackground,
    ImageElement,
    Scene,
    ShapeElement,
    StickerElement,
    Template,
    TextElement,
    VideoElement,
)

logger = logging.getLogger("SceneKit.core.renderer")

AssetResolver = Callable[[str], Optional[str]]

DEFAULT_BACKGROUND = "#000000"
_CSS_GRADIENT = re.compile(r"^\s*linear-gradient\((.*)\)\s*$", re.IGNORECASE | re.DOTALL)
_CSS_ANGLE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)deg\s*$")
_CSS_COLOR = re.compile(r"#[0-9a-fA-F]{3,8}\b|rgba?\([^)]*\)")


def _resolve_src(src: Optional[str], asset_resolver: Optional[AssetResolver]) -> Optional[str]:
    if not src:
        return None
    if asset_resolver is None:
        return src
    try:
        return asset_resolver(src)
    except Exception as e:
        logger.warning(f"Asset resolution failed for {src!r}: {e}")
        return None


def parse_css_gradient(value: str) -> Optional[GradientBackground]:
    """Read a CSS ``linear-gradient(...)`` string as a gradient, or None."""
    match = _CSS_GRADIENT.match(value)
    if not match:
        return None
    body = match.group(1)
    angle = 180.0
    first = body.split(",", 1)[0]
    angle_match = _CSS_ANGLE.match(first)
    if angle_match:
        angle = float(angle_match.group(1))
    colors = _CSS_COLOR.findall(body)
    if not colors:
        return None
    return GradientBackground(colors=colors, angle=angle)


def render_background(scene: Scene, canvas_size: CanvasSize,
                      asset_resolver: Optional[AssetResolver] = None) -> BackgroundCommand:
    bg = scene.background
    size = {"width": canvas_size.width, "height": canvas_size.height}
    if isinstance(bg, str):
        gradient = parse_css_gradient(bg)
        if gradient is None:
            return BackgroundCommand(fill="solid", color=bg.strip() or DEFAULT_BACKGROUND, **size)
        bg = gradient
    if isinstance(bg, GradientBackground):
        return BackgroundCommand(fill="gradient", colors=list(bg.colors), angle=bg.angle, **size)
    if isinstance(bg, ImageBackground):
        src = _resolve_src(bg.src, asset_resolver)
        if src is None:
            logger.warning(f"Scene {scene.id} background image missing, using placeholder")
            return BackgroundCommand(fill="image", color=IMAGE_BACKGROUND_PLACEHOLDER,
                                     placeholder=True, **size)
        return BackgroundCommand(fill="image", src=src, **size)
    return BackgroundCommand(fill="solid", color=DEFAULT_BACKGROUND, **size)


def _box(element: BaseElement, state: animation.AnimatedState) -> dict:
    return {
        "element_id": element.id,
        "x": state.x,
        "y": state.y,
        "width": element.width,
        "height": element.height,
        "rotation": element.rotation,
        "opacity": state.opacity,
        "scale": state.scale,
        "shadow": state.glow,
    }


def render_element(element: BaseElement, t: float,
                   asset_resolver: Optional[AssetResolver] = None) -> Optional[DrawCommand]:
    """Draw command for one (already customized) element, or None if hidden."""
    if not element.visible:
        return None
    state = animation.evaluate(element, t)

    if isinstance(element, TextElement):
        return TextCommand(
            content=state.visible_text if state.visible_text is not None else element.text,
            font_size=element.font_size,
            font_family=element.font_family,
            font_weight=element.font_weight,
            font_style=element.font_style,
            color=element.color,
            align=element.align,
            **_box(element, state),
        )
    if isinstance(element, (ImageElement, VideoElement)):
        src = _resolve_src(element.src, asset_resolver)
        if src is None:
            logger.warning(f"{element.type} element {element.id} has no usable source, using placeholder")
        return ImageCommand(
            kind=element.type,
            src=src,
            alt=element.alt,
            placeholder=src is None,
            placeholder_color=PLACEHOLDER_COLOR if src is None else None,
            **_box(element, state),
        )
    if isinstance(element, ShapeElement):
        return ShapeCommand(
            shape_type=element.shape_type,
            fill_color=element.fill_color,
            stroke_color=element.stroke_color,
            stroke_width=element.stroke_width,
            **_box(element, state),
        )
    if isinstance(element, StickerElement):
        return StickerCommand(sticker=element.sticker, **_box(element, state))
    if isinstance(element, AudioElement):
        src = _resolve_src(element.src, asset_resolver)
        return AudioCommand(
            element_id=element.id,
            src=src,
            start_at=0.0,
            autoplay=element.autoplay,
            loop=element.loop,
            placeholder=src is None,
        )
    logger.warning(f"No draw command for element kind {element.type!r}")
    return None


def render_frame(scene: Scene, t: float, customizations: Optional[Customizations] = None,
                 canvas_size: Optional[CanvasSize] = None,
                 asset_resolver: Optional[AssetResolver] = None) -> list[DrawCommand]:
    """Composite one frame of ``scene`` at ``t`` seconds after it became visible.

    Output order: the background, then visible elements by ascending zIndex
    (ties keep their sequence order). Same arguments, same list.
    """
    canvas_size = canvas_size or CanvasSize()
    commands: list[DrawCommand] = [render_background(scene, canvas_size, asset_resolver)]
    for element in sorted(scene.elements, key=lambda el: el.z_index):
        if not element.visible:
            continue
        effective = resolve(element, customizations)
        command = render_element(effective, t, asset_resolver)
        if command is not None:
            commands.append(command)
    return commands


# ── Timeline ────────────────────────────────────────────────────────────

def total_duration(template: Template) -> float:
    return template.total_duration


def scene_at(template: Template, t: float) -> tuple[int, float]:
    """Locate the scene playing at template time t.

    Returns (scene index, scene-relative time). Each scene covers
    [start, start + duration); past the end the last scene is held at its end.
    """
    if t <= 0:
        return 0, 0.0
    start = 0.0
    for index, scene in enumerate(template.scenes):
        if t < start + scene.duration:
            return index, t - start
        start += scene.duration
    last = len(template.scenes) - 1
    return last, template.scenes[last].duration


def render_template_frame(template: Template, t: float,
                          customizations: Optional[Customizations] = None,
                          asset_resolver: Optional[AssetResolver] = None) -> list[DrawCommand]:
    index, local_t = scene_at(template, t)
    return render_frame(template.scenes[index], local_t, customizations,
                        template.canvas_size, asset_resolver)


def iter_frames(template: Template, fps: int = 30,
                customizations: Optional[Customizations] = None,
                asset_resolver: Optional[AssetResolver] = None,
                start: float = 0.0, limit: Optional[int] = None
                ) -> Iterator[tuple[float, list[DrawCommand]]]:
    """Sample the template at ``fps``; yields (template time, commands).

    Sampling begins at the first frame at or after ``start`` and stops after
    ``limit`` frames when a limit is given. Frames before ``start`` are never
    rendered.
    """
    if fps < 1:
        raise ValidationError("fps must be >= 1")
    frame_count = max(1, math.ceil(template.total_duration * fps - 1e-9))
    first = max(0, math.ceil(start * fps - 1e-9))
    last = frame_count if limit is None else min(frame_count, first + max(0, limit))
    for i in range(first, last):
        t = i / fps
        yield t, render_template_frame(template, t, customizations, asset_resolver)
