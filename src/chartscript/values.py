# src/chartscript/values.py
from __future__ import annotations
import logging
import math
import numbers
import re
from fractions import Fraction
from typing import Dict, Tuple, Union

from .errors import ArgumentError

logger = logging.getLogger(__name__)

Direction = Union[str, float]
Color = Union[str, int]

COLORS: Dict[str, str] = {
    "easy": "#3eb9fd",
    "normal": "#f19e56",
    "hard": "#e75e74",
    "master": "#8c68f3",
    "special": "#f156ee",
}

DIRECTIONS: Dict[str, float] = {
    "right": 0.0,
    "up_right": math.pi / 4,
    "up": math.pi / 2,
    "up_left": math.pi * 3 / 4,
    "left": math.pi,
    "down_left": -math.pi * 3 / 4,
    "down": -math.pi / 2,
    "down_right": -math.pi / 4,
}
_DIRECTION_ALIASES = {
    "right": ("r",),
    "up_right": ("ur", "ru"),
    "up": ("u",),
    "up_left": ("ul", "lu"),
    "left": ("l",),
    "down_left": ("dl", "ld"),
    "down": ("d",),
    "down_right": ("dr", "rd"),
}
for _name, _aliases in _DIRECTION_ALIASES.items():
    for _a in _aliases:
        DIRECTIONS[_a] = DIRECTIONS[_name]

_HEX6 = re.compile(r"^#[0-9a-fA-F]{6}$")
_HEX3 = re.compile(r"^#[0-9a-fA-F]{3}$")
_RGB = re.compile(r"^rgb\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*\)$")

def is_number(value) -> bool:
    # bool ist in Python ein int – als Koordinate aber sinnlos
    return isinstance(value, numbers.Real) and not isinstance(value, bool)

def coordinates(x, y) -> Tuple[float, float]:
    if not is_number(x) or not is_number(y):
        raise ArgumentError("x and y must be numbers")
    return float(x), float(y)

def to_beat(value, what: str = "beat", warn_float: bool = True) -> Fraction:
    """int/Fraction exakt, float mit Warnung (exakte Binärdarstellung)."""
    if isinstance(value, (int, Fraction)) and not isinstance(value, bool):
        return Fraction(value)
    if is_number(value):
        if warn_float:
            logger.warning("float %s is not recommended, use int or Fraction", what)
        return Fraction(float(value))
    raise ArgumentError(f"invalid {what}")

def duration(value, positive: bool = False, warn_float: bool = True) -> Fraction:
    if not is_number(value):
        raise ArgumentError("duration_beats must be a number")
    if positive and value <= 0:
        raise ArgumentError("duration must be positive")
    if not positive and value < 0:
        raise ArgumentError("duration must be non-negative")
    return to_beat(value, "duration_beats", warn_float)

def angle(value, warn_degrees: bool = True) -> float:
    if not is_number(value):
        raise ArgumentError("angle must be a number")
    if warn_degrees and value != 0 and value % 45 == 0:
        logger.warning("are you using degrees as angle unit instead of radians? (%s)", value)
    return float(value)

def direction(value: Direction, warn_degrees: bool = True) -> float:
    if isinstance(value, str):
        if value not in DIRECTIONS:
            raise ArgumentError(f"unknown direction {value!r}")
        return DIRECTIONS[value]
    if is_number(value):
        return angle(value, warn_degrees)
    raise ArgumentError("direction must be a direction name or a number")

def color(value: Color) -> str:
    if isinstance(value, str):
        if value in COLORS:
            return COLORS[value]
        if _HEX6.match(value):
            return value
        if _HEX3.match(value):
            _, r, g, b = value
            return f"#{r}{r}{g}{g}{b}{b}"
        m = _RGB.match(value)
        if m:
            r, g, b = (int(c) for c in m.groups())
            if max(r, g, b) > 255:
                raise ArgumentError(f"rgb component out of range in {value!r}")
            return f"#{r:02x}{g:02x}{b:02x}"
    elif isinstance(value, int) and not isinstance(value, bool):
        return f"#{value % 0x1000000:06x}"
    raise ArgumentError(f"unknown format of difficulty_color: {value!r}")

def text(value, what: str) -> str:
    if not isinstance(value, str):
        raise ArgumentError(f"{what} must be a string")
    return value
