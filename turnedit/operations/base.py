"""
TurnEdit - Base Classes for Tool Sessions
=========================================

Gemeinsames Ergebnis-Format und Cycle/Keep/Cancel-Protokoll für Fillet und Trim.
Eine Session lebt vom Öffnen bis Keep oder Cancel; danach ist sie geschlossen.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, List, Optional

from ..host import NullHost, PreviewHost


class ResultStatus(Enum):
    """Status einer Operation."""
    SUCCESS = auto()
    INVALID_SELECTION = auto()   # Picks fehlen, identisch oder degeneriert
    DEGENERATE_RADIUS = auto()   # Radius nicht parsebar oder <= 0
    NO_CANDIDATES = auto()       # Keine Fillet-Kandidaten
    NO_INTERSECTIONS = auto()    # Keine Schnittpunkte
    NO_VALID_OUTCOMES = auto()   # Schnittpunkte, aber keine gültigen Trim-Ergebnisse
    NOTHING_TO_KEEP = auto()     # Keep ohne markierten Kandidaten
    CANCELLED = auto()
    SESSION_CLOSED = auto()      # Session bereits per Keep/Cancel beendet


@dataclass
class OperationResult:
    """
    Strukturiertes Ergebnis einer Session-Operation.

    Fehler sind Werte, keine Exceptions: der Host zeigt message an,
    an den Segmenten des Hosts ändert sich nichts.
    """
    status: ResultStatus
    message: str = ""
    data: Any = None

    @property
    def success(self) -> bool:
        return self.status == ResultStatus.SUCCESS

    @classmethod
    def ok(cls, message: str = "", data: Any = None) -> 'OperationResult':
        return cls(ResultStatus.SUCCESS, message, data)

    @classmethod
    def fail(cls, status: ResultStatus, message: str) -> 'OperationResult':
        return cls(status, message)


class SessionState(Enum):
    OPEN = auto()
    KEPT = auto()
    CANCELLED = auto()


class ToolSession(ABC):
    """
    Abstrakte Basisklasse für interaktive Werkzeug-Sessions.

    Jede Session hat:
    - Host für Preview/Log
    - Kandidatenliste und Cursor (-1 = keine Markierung)
    - Zustand OPEN / KEPT / CANCELLED
    """

    tool_name = "Tool"

    def __init__(self, host: Optional[PreviewHost] = None):
        self.host = host if host is not None else NullHost()
        self._cursor = -1
        self._state = SessionState.OPEN
        self._last_result: Optional[OperationResult] = None
        self._final_result: Optional[OperationResult] = None

    @property
    @abstractmethod
    def candidates(self) -> List[Any]:
        """Aktuelle Kandidatenliste."""

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state == SessionState.OPEN

    @property
    def last_result(self) -> Optional[OperationResult]:
        """Letztes Ergebnis der Session."""
        return self._last_result

    @property
    def final_result(self) -> Optional[OperationResult]:
        """Ergebnis von Keep bzw. Cancel (None solange die Session offen ist)."""
        return self._final_result

    @property
    def current(self) -> Optional[Any]:
        """Aktuell markierter Kandidat oder None."""
        items = self.candidates
        if 0 <= self._cursor < len(items):
            return items[self._cursor]
        return None

    def _finish(self, result: OperationResult) -> OperationResult:
        self._last_result = result
        return result

    def _close(self, state: SessionState, result: OperationResult) -> OperationResult:
        self._clear_preview()
        self._state = state
        self._final_result = result
        return self._finish(result)

    def _closed(self) -> OperationResult:
        return self._finish(OperationResult.fail(
            ResultStatus.SESSION_CLOSED, f"{self.tool_name}: session already closed."))

    def _advance(self, step: int) -> None:
        n = len(self.candidates)
        if self._cursor < 0:
            self._cursor = 0 if step >= 0 else n - 1
        else:
            self._cursor = (self._cursor + step) % n

    def _clear_preview(self) -> None:
        if self.host.map_valid:
            self.host.clear_preview_only()

    @abstractmethod
    def render_preview(self) -> None:
        """Zeichnet die Kandidaten über den Host."""

    @abstractmethod
    def keep(self) -> OperationResult:
        """Übernimmt den markierten Kandidaten und beendet die Session."""

    def cancel(self) -> OperationResult:
        """Beendet die Session ohne Ergebnis."""
        if not self.is_open:
            return self._closed()

        return self._close(SessionState.CANCELLED,
                           OperationResult.fail(ResultStatus.CANCELLED, f"{self.tool_name}: cancelled."))
