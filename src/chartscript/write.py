from __future__ import annotations
import json
import os
import re
from typing import Any, Dict, Optional

# ---------- interne Helfer ----------

def _sanitize_filename(name: str) -> str:
    name = re.sub(r"[^\w\s\-\.\(\)\[\]]+", "_", str(name).strip())
    name = re.sub(r"\s+", " ", name)
    return name or "chart"

# ---------- öffentliche APIs ----------

def write_charts(
    table: Dict[str, Dict[str, Any]],
    out_dir: str,
    template: str = "{name}.json",
    indent: Optional[int] = None,
) -> Dict[str, str]:
    """
    Schreibt pro Chart eine JSON-Datei.
    - table: Ergebnis von Project.to_serializable()
    - template: Dateinamen-Template; Platzhalter: {index}, {name}
    Rückgabe: Chart-Name -> Pfad
    """
    os.makedirs(out_dir, exist_ok=True)
    written = {}
    for idx, (name, data) in enumerate(table.items(), start=1):
        fname = template.format(index=idx, name=_sanitize_filename(name))
        path = os.path.join(out_dir, fname)
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=indent, ensure_ascii=False)
        written[name] = path
    return written
