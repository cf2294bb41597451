# src/chartscript/transform.py
from __future__ import annotations
import math
from fractions import Fraction
from typing import Iterable, Union

import numpy as np

from .errors import ArgumentError
from .timeline import Event
from .values import angle as _angle, is_number, to_beat

class Transform:
    """
    Homographie (3x3, homogene Koordinaten) + affine Beat-Abbildung beat' = t1 + tt*beat.
    Operationen werden von links aufmultipliziert, die Reihenfolge ist also relevant.
    """

    def __init__(self):
        self.matrix = np.identity(3, dtype=float)
        self.t1 = Fraction(0)
        self.tt = Fraction(1)

    def _compose_linear(self, xx: float, xy: float, yx: float, yy: float) -> "Transform":
        lin = np.array([[xx, xy, 0.0], [yx, yy, 0.0], [0.0, 0.0, 1.0]])
        self.matrix = lin @ self.matrix
        return self

    def translate(self, dx, dy) -> "Transform":
        if not is_number(dx) or not is_number(dy):
            raise ArgumentError("dx and dy must be numbers")
        self.matrix[0, 2] += float(dx)
        self.matrix[1, 2] += float(dy)
        return self

    def horizontal_flip(self) -> "Transform":
        return self._compose_linear(-1.0, 0.0, 0.0, 1.0)

    def vertical_flip(self) -> "Transform":
        return self._compose_linear(1.0, 0.0, 0.0, -1.0)

    def rotate(self, angle) -> "Transform":
        a = _angle(angle)
        c, s = math.cos(a), math.sin(a)
        return self._compose_linear(c, -s, s, c)

    def scale(self, sx, sy=None) -> "Transform":
        if sy is None:
            sy = sx
        if not is_number(sx) or not is_number(sy):
            raise ArgumentError("sx and sy must be numbers")
        return self._compose_linear(float(sx), 0.0, 0.0, float(sy))

    def homography(self, matrix) -> "Transform":
        """Beliebige projektive 3x3-Matrix von links aufmultiplizieren."""
        m = np.asarray(matrix, dtype=float)
        if m.shape != (3, 3):
            raise ArgumentError("homography matrix must be 3x3")
        self.matrix = m @ self.matrix
        return self

    def beat_translate(self, delta_beat) -> "Transform":
        self.t1 += to_beat(delta_beat, "delta_beat")
        return self

    def apply(self, event: Event) -> Event:
        event.beat = self.t1 + self.tt * event.beat
        x, y = event["x"], event["y"]
        if x is None or y is None:
            return event
        m = self.matrix
        rx, ry, d = m @ np.array([x, y, 1.0])
        event["x"] = float(rx / d)
        event["y"] = float(ry / d)

        a = event["angle"]
        if a is None:
            return event
        # Richtung über die (ortsabhängige) Jacobi-Matrix abbilden; Faktor 1/d^2 entfällt
        v = np.array([math.cos(a), math.sin(a)])
        jac = d * m[:2, :2] - np.outer([rx, ry], m[2, :2])
        dxp, dyp = jac @ v
        event["angle"] = float(math.atan2(dyp, dxp))
        return event

    def apply_all(self, events: Union[Event, Iterable[Event]]) -> list:
        if isinstance(events, Event):
            events = [events]
        events = list(events)
        for ev in events:
            self.apply(ev)
        return events
