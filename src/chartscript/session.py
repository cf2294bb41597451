# src/chartscript/session.py
from __future__ import annotations
import logging
from contextlib import contextmanager
from fractions import Fraction
from typing import Any, Dict, Iterator, List, Optional, Union

from . import values
from .config import get_section, merged
from .errors import ArgumentError, ConfigurationError, TipPointStateError
from .scope import SessionState, Snapshot
from .timeline import BACKGROUND_PATTERNS, NOTE_TYPES, Chart, Event, TimeModel
from .tip_point import CHAIN, DROP, NONE, SpawnDescriptor, TipPointEngine
from .transform import Transform
from .util.naming import definition_site

logger = logging.getLogger(__name__)

class ChartSession:
    """
    Veränderlicher Authoring-Kontext eines Charts: Beat-Cursor, Tempo, Gruppen,
    Tip-Point-Stacks und Bookmarks. Die DSL-Methoden werden in Programmreihenfolge
    aufgerufen; Scopes sind Context-Manager.
    """

    def __init__(self, name: str, config: Optional[Dict[str, Any]] = None):
        self.name = name
        self.config = merged(config)
        self.state = SessionState()
        self.bookmarks: Dict[str, Snapshot] = {}
        self.duplicate_count = 0
        self._tip_points = TipPointEngine()

        chart_cfg = get_section(self.config, "chart")
        self._title = ""
        self._artist = ""
        self._charter = ""
        self._difficulty_name = ""
        self._difficulty_color = values.color(chart_cfg.get("difficulty_color", "#000000"))
        self._difficulty = ""
        self._difficulty_sup = ""

        warn = get_section(self.config, "warnings")
        self._warn_float = bool(warn.get("float_beats", True))
        self._warn_degrees = bool(warn.get("degree_angles", True))

    def __repr__(self) -> str:
        return f"<ChartSession {self.name}>"

    @property
    def events(self) -> List[Event]:
        return self.state.events

    @property
    def current_beat(self) -> Optional[Fraction]:
        return self.state.current_beat

    @property
    def tip_point_peak(self) -> int:
        return self._tip_points.peak

    # ---------- Metadaten ----------

    def title(self, title: str) -> None:
        self._title = values.text(title, "title")

    def artist(self, artist: str) -> None:
        self._artist = values.text(artist, "artist")

    def charter(self, charter: str) -> None:
        self._charter = values.text(charter, "charter")

    def difficulty_name(self, difficulty_name: str) -> None:
        self._difficulty_name = values.text(difficulty_name, "difficulty_name")

    def difficulty_color(self, difficulty_color: values.Color) -> None:
        self._difficulty_color = values.color(difficulty_color)

    def difficulty(self, difficulty) -> None:
        self._difficulty = str(difficulty)

    def difficulty_sup(self, difficulty_sup) -> None:
        self._difficulty_sup = str(difficulty_sup)

    # ---------- Zeit / Beat-Cursor ----------

    def _require_time_model(self, method_name: str) -> TimeModel:
        if self.state.time_model is None:
            raise ConfigurationError(method_name)
        return self.state.time_model

    def offset(self, offset) -> TimeModel:
        if not values.is_number(offset):
            raise ArgumentError("offset must be a number")
        self.state.current_beat = Fraction(0)
        self.state.time_model = TimeModel(offset=float(offset))
        return self.state.time_model

    def bpm(self, bpm) -> None:
        tm = self._require_time_model("bpm")
        if not values.is_number(bpm) or bpm <= 0:
            raise ArgumentError("bpm must be a positive number")
        tm.add(self.state.current_beat, float(bpm))

    def time_at(self, beat=None) -> float:
        tm = self._require_time_model("time_at")
        beat = self.state.current_beat if beat is None else values.to_beat(beat, "beat", self._warn_float)
        return tm.time_at(beat)

    def beat(self, delta_beat=0) -> Fraction:
        if self.state.current_beat is None:
            raise ConfigurationError("beat")
        self.state.current_beat += values.to_beat(delta_beat, "delta_beat", self._warn_float)
        return self.state.current_beat

    b = beat

    def set_beat(self, beat=None) -> Fraction:
        if self.state.current_beat is None:
            raise ConfigurationError("set_beat")
        if beat is not None:
            self.state.current_beat = values.to_beat(beat, "beat", self._warn_float)
        return self.state.current_beat

    # ---------- Events ----------

    def event(self, type: str, duration_beats: Optional[Fraction] = None, **properties) -> Event:
        tm = self._require_time_model("event")
        ev = Event(
            type=type,
            beat=self.state.current_beat,
            time_model=tm,
            duration_beats=duration_beats,
            properties=properties,
            source=definition_site(),
        )
        self._tip_points.route(self.state, ev)
        return ev

    def tap(self, x, y, text: str = "") -> Event:
        x, y = values.coordinates(x, y)
        return self.event("tap", x=x, y=y, text=str(text))

    t = tap

    def hold(self, x, y, duration_beats, text: str = "") -> Event:
        x, y = values.coordinates(x, y)
        dur = values.duration(duration_beats, positive=True, warn_float=self._warn_float)
        return self.event("hold", dur, x=x, y=y, text=str(text))

    h = hold

    def drag(self, x, y) -> Event:
        x, y = values.coordinates(x, y)
        return self.event("drag", x=x, y=y)

    d = drag

    def flick(self, x, y, direction: values.Direction, text: str = "") -> Event:
        x, y = values.coordinates(x, y)
        a = values.direction(direction, self._warn_degrees)
        return self.event("flick", x=x, y=y, angle=a, text=str(text))

    f = flick

    def bg_note(self, x, y, duration_beats=0, text: Optional[str] = None) -> Event:
        if text is None:
            if isinstance(duration_beats, str):
                text, duration_beats = duration_beats, 0
            else:
                text = ""
        x, y = values.coordinates(x, y)
        dur = values.duration(duration_beats, warn_float=self._warn_float)
        return self.event("bg_note", dur, x=x, y=y, text=str(text))

    def big_text(self, text: str, duration_beats=0) -> Event:
        dur = values.duration(duration_beats, warn_float=self._warn_float)
        return self.event("big_text", dur, text=str(text))

    def background_pattern(self, pattern: str, duration_beats=0) -> Event:
        if pattern not in BACKGROUND_PATTERNS:
            raise ArgumentError(f"unknown background pattern {pattern!r}")
        dur = values.duration(duration_beats, warn_float=self._warn_float)
        return self.event(pattern, dur)

    def grid(self, duration_beats=0) -> Event:
        return self.background_pattern("grid", duration_beats)

    def hexagon(self, duration_beats=0) -> Event:
        return self.background_pattern("hexagon", duration_beats)

    def checkerboard(self, duration_beats=0) -> Event:
        return self.background_pattern("checkerboard", duration_beats)

    def diamond_grid(self, duration_beats=0) -> Event:
        return self.background_pattern("diamond_grid", duration_beats)

    def pentagon(self, duration_beats=0) -> Event:
        return self.background_pattern("pentagon", duration_beats)

    def turntable(self, duration_beats=0) -> Event:
        return self.background_pattern("turntable", duration_beats)

    def hexagram(self, duration_beats=0) -> Event:
        return self.background_pattern("hexagram", duration_beats)

    # ---------- Gruppen / Bookmarks ----------

    @contextmanager
    def group(self, preserve_beat: bool = True) -> Iterator[List[Event]]:
        result = self.state.open_group()
        beat_backup = None if preserve_beat else self.state.beat_backup()
        yield result
        if beat_backup is not None:
            self.state.restore_beat(beat_backup)
        self.state.close_group(result)

    def remove(self, *events: Event) -> None:
        for ev in events:
            self.state.remove(ev)

    def mark(self, name: str) -> str:
        self.bookmarks[name] = self.state.snapshot()
        return name

    @contextmanager
    def at(self, name: str, preserve_beat: bool = False, update_mark: bool = False) -> Iterator[List[Event]]:
        bookmark = self.bookmarks.get(name)
        if bookmark is None:
            raise ArgumentError(f"unknown bookmark {name!r}")
        backup = self.state.snapshot()
        self.state.restore(bookmark)
        logger.debug("at %r: beat %s", name, self.state.current_beat)
        with self.group() as result:
            yield result
        if update_mark:
            self.mark(name)
        beat_backup = self.state.beat_backup() if preserve_beat else None
        self.state.restore(backup)
        if beat_backup is not None:
            self.state.restore_beat(beat_backup)

    # ---------- Tip Points ----------

    def _spawn_for(self, mode: str, args: tuple, opts: Dict[str, Any]) -> Optional[SpawnDescriptor]:
        if mode == NONE:
            if args or opts:
                raise ArgumentError("tip_point_none takes no spawn arguments")
            return None
        if not args and not opts:
            # ohne Herkunft/Timing: Descriptor der umgebenden chain/drop übernehmen
            TipPointStateError.ensure(self.state.tip_point_modes[-1], CHAIN, DROP)
            return self.state.inherited_spawn[-1]
        if len(args) > 3:
            raise ArgumentError("too many positional spawn arguments (x, y, relative_time)")
        unknown = set(opts) - {"relative", "speed", "relative_beat", "beat_speed"}
        if unknown:
            raise ArgumentError(f"unknown spawn arguments: {', '.join(sorted(unknown))}")
        kwargs = dict(zip(("x", "y", "relative_time"), args))
        kwargs.update(opts)
        return SpawnDescriptor(**kwargs)

    @contextmanager
    def tip_point(self, mode: str, *args, preserve_beat: bool = True, **opts) -> Iterator[List[Event]]:
        descriptor = self._spawn_for(mode, args, opts)
        self._tip_points.enter(self.state, mode, descriptor)
        with self.group(preserve_beat=preserve_beat) as result:
            self._tip_points.bind_boundary(self.state, result)
            yield result
        self._tip_points.leave(self.state)

    def tip_point_chain(self, *args, **opts):
        return self.tip_point(CHAIN, *args, **opts)

    def tip_point_drop(self, *args, **opts):
        return self.tip_point(DROP, *args, **opts)

    def tip_point_none(self, *args, **opts):
        return self.tip_point(NONE, *args, **opts)

    tp_chain = tip_point_chain
    tp_drop = tip_point_drop
    tp_none = tip_point_none

    # ---------- Nachbearbeitung ----------

    def duplicate(self, events, new_tip_points: bool = True) -> List[Event]:
        result = []
        # Kopien landen evtl. in genau dieser Liste (z.B. s.events)
        for ev in list(events):
            if ev.type == "placeholder" and not new_tip_points:
                continue
            copy_ev = ev.duplicate()
            if new_tip_points and copy_ev["tip_point"] is not None:
                copy_ev["tip_point"] = f"{self.duplicate_count} {copy_ev['tip_point']}"
            for group in self.state.groups:
                group.append(copy_ev)
            result.append(copy_ev)
        if new_tip_points:
            self.duplicate_count += 1
        return result

    @contextmanager
    def transform(self, events: Union[Event, List[Event]]) -> Iterator[Transform]:
        tf = Transform()
        yield tf
        tf.apply_all(events)

    def check(self, notes_in_bound: Optional[bool] = None, bg_notes_in_bound: Optional[bool] = None) -> List[Event]:
        """Events außerhalb des Spielfelds (|x| <= x_bound, |y| <= y_bound) sammeln und loggen."""
        cfg = get_section(self.config, "check")
        if notes_in_bound is None:
            notes_in_bound = bool(cfg.get("notes_in_bound", True))
        if bg_notes_in_bound is None:
            bg_notes_in_bound = bool(cfg.get("bg_notes_in_bound", True))
        xb = float(cfg.get("x_bound", 100))
        yb = float(cfg.get("y_bound", 50))
        eps = float(cfg.get("epsilon", 1e-10))

        out = []
        for ev in self.state.events:
            if not ((ev.type in NOTE_TYPES and notes_in_bound) or (ev.type == "bg_note" and bg_notes_in_bound)):
                continue
            if abs(ev["x"]) > xb + eps or abs(ev["y"]) > yb + eps:
                out.append(ev)
        if not (notes_in_bound or bg_notes_in_bound):
            return out
        if not out:
            logger.info("[%s] all notes are in bound", self.name)
        for ev in out:
            logger.warning("[%s] out of bound: %r at time %s, defined at %s", self.name, ev, ev.time(), ev.source)
        return out

    # ---------- Ausgabe ----------

    def to_chart(self, production: Optional[bool] = None, live_reload_port: Optional[int] = None) -> Chart:
        lr = get_section(self.config, "live_reload")
        return Chart(
            title=self._title,
            artist=self._artist,
            charter=self._charter,
            difficulty_name=self._difficulty_name,
            difficulty_color=self._difficulty_color,
            difficulty=self._difficulty,
            difficulty_sup=self._difficulty_sup,
            events=[ev.resolve() for ev in self.state.events],
            production=bool(self.config.get("production", False)) if production is None else production,
            live_reload_port=int(lr.get("port", 31108)) if live_reload_port is None else live_reload_port,
            integration_key=str(lr.get("key", "sscharter")),
        )

    def to_serializable(self, **opts) -> Dict[str, Any]:
        return self.to_chart(**opts).to_serializable()
