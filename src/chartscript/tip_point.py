# src/chartscript/tip_point.py
from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from fractions import Fraction
from typing import TYPE_CHECKING, Optional

from .errors import ArgumentError
from .timeline import Event
from .values import is_number

if TYPE_CHECKING:
    from .scope import SessionState

logger = logging.getLogger(__name__)

CHAIN = "chain"
DROP = "drop"
NONE = "none"
MODES = (CHAIN, DROP, NONE)

TIMING_KEYS = ("relative_time", "speed", "relative_beat", "beat_speed")

@dataclass(frozen=True)
class SpawnDescriptor:
    """
    Herkunft + Timing des Spawn-Markers (Placeholder) vor einem Tip-Point-Kopf.
    Genau eines der Timing-Felder darf vom Default abweichen:
      relative_time  Sekunden Vorlauf
      speed          Einheiten/Sekunde  (Vorlauf = Distanz / speed)
      relative_beat  Beats Vorlauf
      beat_speed     Einheiten/Beat     (Vorlauf in Beats = Distanz / beat_speed)
    """
    x: float = 0.0
    y: float = 0.0
    relative_time: float = 0.0
    relative: bool = True
    speed: Optional[float] = None
    relative_beat: Optional[Fraction] = None
    beat_speed: Optional[float] = None

    def __post_init__(self):
        if not is_number(self.x) or not is_number(self.y):
            raise ArgumentError("x and y must be numbers")
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))
        key = None
        for k in TIMING_KEYS:
            if self._is_set(k):
                if key is not None:
                    raise ArgumentError(f"cannot specify both {key} and {k}")
                key = k
        key = key or "relative_time"
        value = getattr(self, key)
        if not is_number(value):
            raise ArgumentError(f"{key} must be a number")
        if key in ("relative_time", "relative_beat") and value < 0:
            raise ArgumentError(f"{key} must be non-negative")
        if key in ("speed", "beat_speed") and value <= 0:
            raise ArgumentError(f"{key} must be positive")
        if key == "relative_beat" and isinstance(value, float):
            logger.warning("Fraction is recommended over float for relative_beat")

    def _is_set(self, key: str) -> bool:
        value = getattr(self, key)
        if key == "relative_time":
            return value is not None and value != 0
        return value is not None

    @property
    def timing_key(self) -> str:
        for k in TIMING_KEYS:
            if self._is_set(k):
                return k
        return "relative_time"

    def materialize(self, target: Event) -> Event:
        if not target.tip_pointable:
            raise ArgumentError(f"{target.type} is not tip-pointable")
        result = Event("placeholder", target.beat, target.time_model, source=target.source)
        if self.relative:
            result["x"] = target["x"] + self.x
            result["y"] = target["y"] + self.y
        else:
            result["x"] = self.x
            result["y"] = self.y
        distance = math.hypot(result["x"] - target["x"], result["y"] - target["y"])
        key = self.timing_key
        if key == "relative_time":
            result.offset = -float(self.relative_time or 0.0)
        elif key == "speed":
            result.offset = -distance / self.speed
        elif key == "relative_beat":
            result.beat -= Fraction(self.relative_beat)
        else:
            # Näherung im Beat-Raum, ohne BPM-Umrechnung
            result.beat -= Fraction(distance / self.beat_speed)
        result["tip_point"] = target["tip_point"]
        return result

class TipPointEngine:
    """Modus-Zustandsautomat (chain / drop / none) über die Stacks des SessionState."""

    def __init__(self):
        self.peak = 0  # nächste freie Tip-Point-ID, wird nie zurückgesetzt

    def allocate(self) -> int:
        tp = self.peak
        self.peak += 1
        return tp

    def enter(self, state: "SessionState", mode: str, descriptor: Optional[SpawnDescriptor]) -> None:
        if mode not in MODES:
            raise ArgumentError(f"unknown tip point mode {mode!r}")
        state.tip_point_modes.append(mode)
        if mode == NONE:
            state.tip_point_ids.append(None)
            state.spawn_to_emit.append(None)
            state.inherited_spawn.append(None)
        else:
            tp = self.allocate()
            logger.debug("tip point %s: %d", mode, tp)
            state.tip_point_ids.append(tp)
            state.spawn_to_emit.append(descriptor)
            state.inherited_spawn.append(descriptor)

    def bind_boundary(self, state: "SessionState", group: list) -> None:
        state.scope_boundaries.append(group)

    def leave(self, state: "SessionState") -> None:
        state.tip_point_modes.pop()
        state.tip_point_ids.pop()
        state.spawn_to_emit.pop()
        state.inherited_spawn.pop()
        state.scope_boundaries.pop()

    def route(self, state: "SessionState", event: Event) -> Optional[Event]:
        """
        Hängt 'event' an alle offenen Gruppen; vergibt vorher ggf. die Tip-Point-ID
        und fügt den Placeholder direkt vor dem Event ein. Liefert den Placeholder.
        """
        mode = state.tip_point_modes[-1]
        placeholder = None
        if event.tip_pointable and mode != NONE:
            event["tip_point"] = str(state.tip_point_ids[-1])
            spawn = state.spawn_to_emit[-1]
            if spawn is not None:
                placeholder = spawn.materialize(event)
                boundary = state.scope_boundaries[-1]
                for group in state.groups:
                    group.append(placeholder)
                    # chain: Marker nur bis einschließlich der eigenen Tip-Point-Gruppe
                    if group is boundary and mode != DROP:
                        break
            if mode == CHAIN:
                state.spawn_to_emit[-1] = None
            else:
                state.tip_point_ids[-1] = self.allocate()
        for group in state.groups:
            group.append(event)
        return placeholder
