"""Calculation-trace sinks: a recording CalcLogger and a no-op NullSink."""

from __future__ import annotations

import time

from flexgrid._utils import format_address
from flexgrid.calc._protocol import LogEntry, LogEventType

_ICONS = {
    LogEventType.INPUT_CHANGED: "[INPUT]",
    LogEventType.FORMULA_EVALUATING: "[CALC>]",
    LogEventType.FORMULA_EVALUATED: "[CALC=]",
    LogEventType.DEPENDENCY_TRIGGERED: "[DEP]",
}


class NullSink:
    """TraceSink that drops every event."""

    def log_input_changed(
        self, col: int, row: int, name: str, old_value: float, new_value: float,
    ) -> None:
        pass

    def log_formula_evaluating(self, col: int, row: int, formula: str) -> None:
        pass

    def log_formula_evaluated(
        self, col: int, row: int, formula: str, result: float,
    ) -> None:
        pass

    def log_dependency_triggered(self, source_name: str, col: int, row: int) -> None:
        pass


class CalcLogger:
    """Records the evaluation cascade for observability tooling.

    Disabled by default; while disabled every ``log_*`` call is a no-op.
    Entries are kept newest first and trimmed to ``max_entries``.
    """

    def __init__(self, max_entries: int = 500, enabled: bool = False) -> None:
        self.max_entries = max_entries
        self.enabled = enabled
        self._entries: list[LogEntry] = []

    def enable(self) -> None:
        self.enabled = True

    def disable(self) -> None:
        self.enabled = False

    def clear(self) -> None:
        self._entries.clear()

    @property
    def entries(self) -> list[LogEntry]:
        """All entries, newest first."""
        return list(self._entries)

    def entries_chronological(self) -> list[LogEntry]:
        """All entries, oldest first."""
        return list(reversed(self._entries))

    def _add(self, entry: LogEntry) -> None:
        if not self.enabled:
            return
        self._entries.insert(0, entry)
        if len(self._entries) > self.max_entries:
            del self._entries[self.max_entries:]

    def log_input_changed(
        self, col: int, row: int, name: str, old_value: float, new_value: float,
    ) -> None:
        self._add(LogEntry(
            timestamp=_now_ms(),
            event_type=LogEventType.INPUT_CHANGED,
            cell_address=format_address(col, row),
            formula=None,
            old_value=old_value,
            new_value=new_value,
            message=f"Input '{name}' changed: {old_value:.4f} -> {new_value:.4f}",
        ))

    def log_formula_evaluating(self, col: int, row: int, formula: str) -> None:
        address = format_address(col, row)
        self._add(LogEntry(
            timestamp=_now_ms(),
            event_type=LogEventType.FORMULA_EVALUATING,
            cell_address=address,
            formula=formula,
            old_value=None,
            new_value=None,
            message=f"Evaluating {address}: {formula}",
        ))

    def log_formula_evaluated(
        self, col: int, row: int, formula: str, result: float,
    ) -> None:
        address = format_address(col, row)
        self._add(LogEntry(
            timestamp=_now_ms(),
            event_type=LogEventType.FORMULA_EVALUATED,
            cell_address=address,
            formula=formula,
            old_value=None,
            new_value=result,
            message=f"{address} = {result:.4f}",
        ))

    def log_dependency_triggered(self, source_name: str, col: int, row: int) -> None:
        address = format_address(col, row)
        self._add(LogEntry(
            timestamp=_now_ms(),
            event_type=LogEventType.DEPENDENCY_TRIGGERED,
            cell_address=address,
            formula=None,
            old_value=None,
            new_value=None,
            message=f"Dependency: {source_name} triggered recalc of {address}",
        ))

    @staticmethod
    def format_entry(entry: LogEntry) -> str:
        return f"{_ICONS.get(entry.event_type, '[?]')} {entry.message}"

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        state = "enabled" if self.enabled else "disabled"
        return f"<CalcLogger [{state}] entries={len(self._entries)}>"


def _now_ms() -> float:
    return time.perf_counter() * 1000.0
