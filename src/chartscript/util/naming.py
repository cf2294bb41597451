from __future__ import annotations
import sys
from pathlib import Path
from typing import Optional

PKG_ROOT = Path(__file__).resolve().parent.parent

def snake_to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head.lower() + "".join(p.capitalize() for p in rest)

def definition_site() -> Optional[str]:
    """Erster Stack-Frame außerhalb des Pakets als 'datei:zeile' (für check())."""
    frame = sys._getframe(1)
    while frame is not None:
        path = Path(frame.f_code.co_filename)
        try:
            path.resolve().relative_to(PKG_ROOT)
        except ValueError:
            return f"{path.name}:{frame.f_lineno}"
        frame = frame.f_back
    return None
