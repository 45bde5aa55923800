"""
Structured diagnostic events emitted by the selection core.

The core never writes log lines for its degradation signals directly; it
emits named events on a sink. ``LoggingSink`` forwards them to the module
logger and ``RecordingSink`` also keeps them for assertions.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)


class DiagnosticSink(Protocol):
    def info(self, event: str, **fields: Any) -> None: ...

    def warn(self, event: str, **fields: Any) -> None: ...

    def error(self, event: str, **fields: Any) -> None: ...


def _format_fields(fields: Dict[str, Any]) -> str:
    parts = []
    for key, value in fields.items():
        if isinstance(value, float):
            parts.append(f"{key}={value:.3f}")
        else:
            parts.append(f"{key}={value}")
    return " ".join(parts)


class LoggingSink:
    """Forwards diagnostic events to a standard logger."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self._log = log or logger

    def info(self, event: str, **fields: Any) -> None:
        self._log.info("%s %s", event, _format_fields(fields))

    def warn(self, event: str, **fields: Any) -> None:
        self._log.warning("%s %s", event, _format_fields(fields))

    def error(self, event: str, **fields: Any) -> None:
        self._log.error("%s %s", event, _format_fields(fields))


@dataclass(frozen=True)
class DiagnosticEvent:
    level: str
    event: str
    fields: Dict[str, Any] = field(default_factory=dict)


class RecordingSink(LoggingSink):
    """LoggingSink that also records every event in order."""

    def __init__(self, log: Optional[logging.Logger] = None):
        super().__init__(log)
        self.events: List[DiagnosticEvent] = []

    def info(self, event: str, **fields: Any) -> None:
        self.events.append(DiagnosticEvent("info", event, dict(fields)))
        super().info(event, **fields)

    def warn(self, event: str, **fields: Any) -> None:
        self.events.append(DiagnosticEvent("warn", event, dict(fields)))
        super().warn(event, **fields)

    def error(self, event: str, **fields: Any) -> None:
        self.events.append(DiagnosticEvent("error", event, dict(fields)))
        super().error(event, **fields)

    def named(self, event: str) -> List[DiagnosticEvent]:
        return [e for e in self.events if e.event == event]

    def has(self, event: str, level: Optional[str] = None) -> bool:
        return any(e.event == event and (level is None or e.level == level) for e in self.events)
