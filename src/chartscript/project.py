# src/chartscript/project.py
from __future__ import annotations
import logging
from typing import Any, Callable, Dict, List, Optional

from .config import merged
from .session import ChartSession

logger = logging.getLogger(__name__)

Subscriber = Callable[[Dict[str, Dict[str, Any]]], None]

class Project:
    """Registry aller Charts eines Levels (Name -> ChartSession)."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = merged(config)
        self.charts: Dict[str, ChartSession] = {}
        self._subscribers: List[Subscriber] = []

    def open(self, name: str, script: Optional[Callable[[ChartSession], Any]] = None) -> ChartSession:
        """Liefert den Chart 'name' (legt ihn bei Bedarf an) und führt optional 'script' darauf aus."""
        session = self.charts.get(name)
        if session is None:
            session = self.charts[name] = ChartSession(name, self.config)
        if script is not None:
            script(session)
        return session

    def to_serializable(self, production: Optional[bool] = None) -> Dict[str, Dict[str, Any]]:
        return {name: s.to_serializable(production=production) for name, s in self.charts.items()}

    def subscribe(self, callback: Subscriber) -> None:
        """'rebuilt'-Benachrichtigung (z.B. für einen Live-Reload-Server)."""
        self._subscribers.append(callback)

    def build(self, script: Callable[["Project"], Any], production: Optional[bool] = None) -> Dict[str, Dict[str, Any]]:
        """Charts verwerfen, 'script' ausführen, Ergebnis an alle Subscriber melden."""
        self.charts = {}
        script(self)
        table = self.to_serializable(production=production)
        logger.info("rebuilt %d chart(s): %s", len(table), ", ".join(table))
        for cb in self._subscribers:
            cb(table)
        return table
