"""
TurnEdit - Operations Module
============================

Interaktive Werkzeug-Sessions für Fillet und Trim.

Verwendung:
    from turnedit.operations import FilletSession

    session = FilletSession(pick_a, pick_b, radius="2")
    result = session.open()

    if result.success:
        session.cycle()
        line = session.keep().data
    else:
        print(result.message)

Keine Operation verändert die Segmente des Hosts; das Ergebnis ist
immer eine Textzeile, die der Aufrufer selbst einfügt bzw. ersetzt.
"""

from .base import OperationResult, ResultStatus, SessionState, ToolSession
from .fillet import FilletRunResult, FilletSession, run_fillet
from .trim import TrimOption, TrimRunResult, TrimSession, run_trim

__all__ = [
    # Core
    'OperationResult',
    'ResultStatus',
    'SessionState',
    'ToolSession',
    # Fillet
    'FilletSession',
    'FilletRunResult',
    'run_fillet',
    # Trim
    'TrimSession',
    'TrimOption',
    'TrimRunResult',
    'run_trim',
]
