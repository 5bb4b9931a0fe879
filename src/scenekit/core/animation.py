"""Animation evaluation: an element's effective look at a given instant.

Every animation is a pure function of (element, t), where t is seconds since
the scene became visible. There is no accumulated state, so evaluating the
same instant twice always gives the same answer and playback can restart
or seek anywhere.

    none        identity
    fadeIn      opacity ramps 0 -> element.opacity over 2s
    fadeInUp    fadeIn, and rises 50px into place
    scaleIn     scale ramps 0 -> 1 over 0.5s
    bounce      looping 2s cycle, scale 1 -> 1.1 -> 1 about the centre
    glow        soft shadow in the element's own colour, blur 20
    typewriter  reveals one character every 0.1s, then stays fully revealed
    pulse       scale 0.8 + 0.2 * sin(2t), never terminates (alias: loop)

An element's ``duration`` replaces the default ramp of the entrance animations.
"""

import logging
import math
from typing import Callable, Optional

from pydantic import BaseModel

from .scenes import BaseElement

logger = logging.getLogger("SceneKit.core.animation")

FADE_RAMP = 2.0
FADE_RISE = 50.0
SCALE_IN_RAMP = 0.5
BOUNCE_CYCLE = 2.0
BOUNCE_AMPLITUDE = 0.1
GLOW_BLUR = 20.0
TYPEWRITER_INTERVAL = 0.1

# Guards floor() against binary fractions like 0.3 / 0.1 == 2.9999999999999996.
_EPSILON = 1e-9

DEFAULT_GLOW_COLOR = "#FFFFFF"


class Glow(BaseModel):
    color: str
    blur: float = GLOW_BLUR


class AnimatedState(BaseModel):
    """Effective geometry and appearance of one element at one instant.

    ``scale`` is uniform and applied about the element's centre.
    ``visible_text`` is None for non-text elements.
    """
    x: float
    y: float
    opacity: float
    scale: float = 1.0
    glow: Optional[Glow] = None
    visible_text: Optional[str] = None


def _progress(t: float, ramp: float) -> float:
    if ramp <= 0:
        return 1.0
    return max(0.0, min(t / ramp, 1.0))


def _ramp(element: BaseElement, default: float) -> float:
    return element.duration if element.duration else default


def _identity(element: BaseElement) -> AnimatedState:
    return AnimatedState(
        x=element.x,
        y=element.y,
        opacity=element.opacity,
        visible_text=getattr(element, "text", None),
    )


def _none(element: BaseElement, t: float) -> AnimatedState:
    return _identity(element)


def _fade_in(element: BaseElement, t: float) -> AnimatedState:
    state = _identity(element)
    state.opacity = _progress(t, _ramp(element, FADE_RAMP)) * element.opacity
    return state


def _fade_in_up(element: BaseElement, t: float) -> AnimatedState:
    state = _identity(element)
    progress = _progress(t, _ramp(element, FADE_RAMP))
    state.opacity = progress * element.opacity
    state.y = element.y - (1.0 - progress) * FADE_RISE
    return state


def _scale_in(element: BaseElement, t: float) -> AnimatedState:
    state = _identity(element)
    state.scale = _progress(t, _ramp(element, SCALE_IN_RAMP))
    return state


def _bounce(element: BaseElement, t: float) -> AnimatedState:
    state = _identity(element)
    phase = (t % BOUNCE_CYCLE) / BOUNCE_CYCLE
    state.scale = 1.0 + math.sin(phase * math.pi) * BOUNCE_AMPLITUDE
    return state


def glow_color(element: BaseElement) -> str:
    for field in ("color", "fill_color"):
        value = getattr(element, field, None)
        if value:
            return value
    return DEFAULT_GLOW_COLOR


def _glow(element: BaseElement, t: float) -> AnimatedState:
    state = _identity(element)
    state.glow = Glow(color=glow_color(element))
    return state


def visible_characters(text: str, t: float) -> int:
    return min(int(math.floor(t / TYPEWRITER_INTERVAL + _EPSILON)), len(text))


def _typewriter(element: BaseElement, t: float) -> AnimatedState:
    state = _identity(element)
    text = getattr(element, "text", None)
    if text is not None:
        state.visible_text = text[:visible_characters(text, t)]
    return state


def _pulse(element: BaseElement, t: float) -> AnimatedState:
    state = _identity(element)
    state.scale = 0.8 + 0.2 * math.sin(t * 2)
    return state


ANIMATIONS: dict[str, Callable[[BaseElement, float], AnimatedState]] = {
    "none": _none,
    "fadeIn": _fade_in,
    "fadeInUp": _fade_in_up,
    "scaleIn": _scale_in,
    "bounce": _bounce,
    "glow": _glow,
    "typewriter": _typewriter,
    "pulse": _pulse,
    "loop": _pulse,
}

# Used when an element has no animation set at all.
DEFAULT_ANIMATIONS: dict[str, str] = {"sticker": "pulse", "shape": "pulse"}


def effective_animation(element: BaseElement) -> str:
    """Name of the animation that will actually run for this element."""
    name = element.animation
    if name is None:
        return DEFAULT_ANIMATIONS.get(element.type, "none")
    if name not in ANIMATIONS:
        logger.debug(f"Unknown animation '{name}' on {element.id}, using none")
        return "none"
    return name


def evaluate(element: BaseElement, t: float) -> AnimatedState:
    """Evaluate the element's animation at t seconds after scene start."""
    t = max(0.0, float(t))
    return ANIMATIONS[effective_animation(element)](element, t)
