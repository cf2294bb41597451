# src/chartscript/errors.py
from __future__ import annotations


class ChartScriptError(Exception):
    """Basisklasse aller Fehler beim Chart-Authoring."""


class ConfigurationError(ChartScriptError):
    """Beat-/Zeit-abhängiger Aufruf, bevor ein Offset (TimeModel) existiert."""

    def __init__(self, method_name: str):
        self.method_name = method_name
        super().__init__(f"offset must be set before using {method_name}")


class ArgumentError(ChartScriptError, ValueError):
    """Falscher Typ / Wertebereich / Format eines DSL-Parameters."""


class TipPointStateError(ChartScriptError):
    def __init__(self, *expected_states: str, actual_state: str):
        self.expected_states = expected_states
        self.actual_state = actual_state
        super().__init__(
            f"wrong tip point state: expected {' or '.join(expected_states)}, got {actual_state}"
        )

    @classmethod
    def ensure(cls, state: str, *expected: str) -> None:
        if state not in expected:
            raise cls(*expected, actual_state=state)
