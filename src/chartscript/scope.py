# src/chartscript/scope.py
from __future__ import annotations
from dataclasses import dataclass, field
from fractions import Fraction
from typing import List, Optional, Tuple

from .timeline import Event, TimeModel
from .tip_point import NONE, SpawnDescriptor

@dataclass(frozen=True)
class Snapshot:
    """Unveränderlicher Abzug des Authoring-Zustands (für mark/at). Zähler gehören nicht dazu."""
    current_beat: Optional[Fraction]
    time_model: Optional[TimeModel]
    tip_point_modes: Tuple[str, ...]
    tip_point_ids: Tuple[Optional[int], ...]
    spawn_to_emit: Tuple[Optional[SpawnDescriptor], ...]
    inherited_spawn: Tuple[Optional[SpawnDescriptor], ...]
    scope_boundaries: Tuple[list, ...]
    groups: Tuple[list, ...]

@dataclass
class SessionState:
    events: List[Event] = field(default_factory=list)
    current_beat: Optional[Fraction] = None
    time_model: Optional[TimeModel] = None
    tip_point_modes: List[str] = field(default_factory=lambda: [NONE])
    tip_point_ids: List[Optional[int]] = field(default_factory=lambda: [None])
    spawn_to_emit: List[Optional[SpawnDescriptor]] = field(default_factory=lambda: [None])
    inherited_spawn: List[Optional[SpawnDescriptor]] = field(default_factory=lambda: [None])
    scope_boundaries: List[list] = field(default_factory=list)
    groups: List[list] = field(default_factory=list)

    def __post_init__(self):
        # groups[0] ist immer die persistente Event-Liste
        if not self.groups:
            self.groups.append(self.events)

    def snapshot(self) -> Snapshot:
        return Snapshot(
            current_beat=self.current_beat,
            time_model=self.time_model,
            tip_point_modes=tuple(self.tip_point_modes),
            tip_point_ids=tuple(self.tip_point_ids),
            spawn_to_emit=tuple(self.spawn_to_emit),
            inherited_spawn=tuple(self.inherited_spawn),
            scope_boundaries=tuple(self.scope_boundaries),
            groups=tuple(self.groups),
        )

    def restore(self, snap: Snapshot) -> None:
        self.current_beat = snap.current_beat
        self.time_model = snap.time_model
        self.tip_point_modes = list(snap.tip_point_modes)
        self.tip_point_ids = list(snap.tip_point_ids)
        self.spawn_to_emit = list(snap.spawn_to_emit)
        self.inherited_spawn = list(snap.inherited_spawn)
        self.scope_boundaries = list(snap.scope_boundaries)
        self.groups = list(snap.groups)

    def beat_backup(self) -> Tuple[Optional[Fraction], Optional[TimeModel]]:
        return self.current_beat, self.time_model

    def restore_beat(self, backup: Tuple[Optional[Fraction], Optional[TimeModel]]) -> None:
        self.current_beat, self.time_model = backup

    def open_group(self) -> list:
        group: list = []
        self.groups.append(group)
        return group

    def close_group(self, group: list) -> None:
        self.groups = [g for g in self.groups if g is not group]

    def remove(self, event: Event) -> None:
        for group in self.groups:
            group[:] = [e for e in group if e is not event]
