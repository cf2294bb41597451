# src/chartscript/config.py
from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Optional
import copy
import logging
import yaml

logger = logging.getLogger(__name__)

# Paket-Root: .../src/chartscript
PKG_ROOT = Path(__file__).resolve().parent
DEFAULT_CFG_PATH = PKG_ROOT / "config.default.yaml"
USER_CFG_PATH = Path.home() / ".config" / "chartscript" / "config.yaml"

def _safe_load(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        # kaputte User-Config soll das Bauen nicht verhindern
        logger.warning("ignoring unreadable config %s: %s", path, e)
        return {}

def _deep_merge(base: Dict[str, Any], *layers: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Spätere Layer überschreiben frühere; verschachtelte Dicts werden rekursiv gemergt."""
    out = copy.deepcopy(base)
    for layer in layers:
        for key, value in (layer or {}).items():
            current = out.get(key)
            if isinstance(value, dict) and isinstance(current, dict):
                out[key] = _deep_merge(current, value)
            else:
                out[key] = copy.deepcopy(value)
    return out

def load_config(
    user_path: Optional[Path] = None,
    default_path: Optional[Path] = None,
) -> Dict[str, Any]:
    """
    Lädt die Konfiguration (Default + User-Overrides) und liefert ein gemergtes Dict.
    """
    dpath = Path(default_path) if default_path else DEFAULT_CFG_PATH
    upath = Path(user_path) if user_path else USER_CFG_PATH

    defaults = _safe_load(dpath)
    user = _safe_load(upath)
    cfg = _deep_merge(defaults, user)

    # Minimal-Defaults sicherstellen
    cfg.setdefault("production", False)
    cfg.setdefault("live_reload", {}).setdefault("port", 31108)
    cfg["live_reload"].setdefault("key", "sscharter")
    return cfg

def merged(cfg: Optional[Dict[str, Any]], overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Defaults (Paket) + übergebene Config + Overrides, ohne User-Datei."""
    base = _safe_load(DEFAULT_CFG_PATH)
    return _deep_merge(base, cfg, overrides)

def get_section(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    """Bequemer Accessor."""
    section = cfg.get(name)
    return section if isinstance(section, dict) else {}
