from __future__ import annotations
import copy
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Any, Dict, List, Optional

from .errors import ArgumentError
from .util.naming import snake_to_camel
from .util.time import rightmost_at_or_before, segment_seconds

SCHEMA = "https://sunniesnow.github.io/schema/chart-1.0.json"
VERSION = "0.1.0"

TIP_POINTABLE_TYPES = ("tap", "hold", "flick", "drag")
NOTE_TYPES = ("tap", "hold", "drag", "flick")
BACKGROUND_PATTERNS = ("grid", "hexagon", "checkerboard", "diamond_grid", "pentagon", "turntable", "hexagram")

# --- Tempo: Beat -> Sekunden ---

@dataclass
class BpmChange:
    beat: Fraction
    bps: float             # beats per second (bpm / 60)

    @classmethod
    def from_bpm(cls, beat: Fraction, bpm: float) -> "BpmChange":
        return cls(beat=Fraction(beat), bps=float(bpm) / 60.0)

@dataclass(eq=False)
class TimeModel:
    """
    Stückweise lineare Abbildung Beat -> Sekunden.
    Wird von vielen Events geteilt; Zeiten werden bei jeder Abfrage neu berechnet,
    damit später eingefügte Tempowechsel auch bereits gesetzte Noten betreffen.
    """
    offset: float
    changes: List[BpmChange] = field(default_factory=list)

    def add(self, beat: Fraction, bpm: float) -> BpmChange:
        change = BpmChange.from_bpm(beat, bpm)
        self.changes.append(change)
        # stabil: bei gleichem Beat gewinnt der zuletzt hinzugefügte Wechsel
        self.changes.sort(key=lambda c: c.beat)
        return change

    def time_at(self, beat: Fraction) -> float:
        idx = rightmost_at_or_before(self.changes, beat, key=lambda c: c.beat)
        if idx < 0:
            raise ArgumentError("beat is before the first bpm change")
        t = self.offset
        for i in range(idx):
            t += segment_seconds(self.changes[i].beat, self.changes[i + 1].beat, self.changes[i].bps)
        located = self.changes[idx]
        return t + segment_seconds(located.beat, beat, located.bps)

# --- Pass 1: Authoring-Events (Beat-basiert, mutierbar) ---

@dataclass(eq=False)
class Event:
    type: str
    beat: Fraction
    time_model: TimeModel
    duration_beats: Optional[Fraction] = None
    properties: Dict[str, Any] = field(default_factory=dict)
    offset: float = 0.0          # zusätzliche Sekunden (z.B. Vorlauf eines Placeholders)
    source: Optional[str] = None  # Definitionsstelle im Chart-Skript

    def time_at_relative_beat(self, delta_beat: Fraction) -> float:
        return self.offset + self.time_model.time_at(self.beat + delta_beat)

    def time(self) -> float:
        return self.time_at_relative_beat(Fraction(0))

    def end_time(self) -> float:
        return self.time_at_relative_beat(self.duration_beats or Fraction(0))

    def __getitem__(self, key: str) -> Any:
        return self.properties.get(key)

    def __setitem__(self, key: str, value: Any) -> None:
        self.properties[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self.properties

    @property
    def tip_pointable(self) -> bool:
        return self.type in TIP_POINTABLE_TYPES

    def duplicate(self) -> "Event":
        # TimeModel bleibt geteilt, nur die Properties werden kopiert
        return Event(
            type=self.type,
            beat=self.beat,
            time_model=self.time_model,
            duration_beats=self.duration_beats,
            properties=copy.deepcopy(self.properties),
            offset=self.offset,
            source=self.source,
        )

    def resolve(self) -> "ResolvedEvent":
        t = self.time()
        props = {snake_to_camel(k): v for k, v in self.properties.items()}
        if self.duration_beats is not None:
            props["duration"] = self.end_time() - t
        return ResolvedEvent(time=t, type=snake_to_camel(self.type), properties=props)

    def __repr__(self) -> str:
        dur = f" for {self.duration_beats}" if self.duration_beats is not None else ""
        props = ", ".join(f"{k}={v!r}" for k, v in self.properties.items())
        return f"<{self.type} at {self.beat}{dur} offset {self.offset}: {props}>"

# --- Pass 2: aufgelöste Ausgabe (Sekunden) ---

@dataclass
class ResolvedEvent:
    time: float
    type: str
    properties: Dict[str, Any] = field(default_factory=dict)

    def to_serializable(self) -> Dict[str, Any]:
        return {"time": self.time, "type": self.type, "properties": dict(self.properties)}

@dataclass
class Chart:
    title: str = ""
    artist: str = ""
    charter: str = ""
    difficulty_name: str = ""
    difficulty_color: str = "#000000"
    difficulty: str = ""
    difficulty_sup: str = ""
    events: List[ResolvedEvent] = field(default_factory=list)
    production: bool = False
    live_reload_port: int = 31108
    integration_key: str = "sscharter"

    def to_serializable(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "$schema": SCHEMA,
            "title": self.title,
            "artist": self.artist,
            "charter": self.charter,
            "difficultyName": self.difficulty_name,
            "difficultyColor": self.difficulty_color,
            "difficulty": self.difficulty,
            "difficultySup": self.difficulty_sup,
            "events": [ev.to_serializable() for ev in self.events],
        }
        if not self.production:
            out[self.integration_key] = {"version": VERSION, "port": self.live_reload_port}
        return out
