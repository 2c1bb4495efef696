"""API pública de sesión: historial, portapapeles y gestor de moléculas."""

from .clipboard import Clipboard
from .editor import MoleculeEditor
from .history import HistoryManager, HistorySnapshot, restore, snapshot
from .manager import MoleculeSessionManager, SessionEntry
from .options import SessionOptions, SessionSettings
from .outcome import ErrorKind, Outcome, OutcomeStatus

__all__ = [
    "Clipboard",
    "ErrorKind",
    "HistoryManager",
    "HistorySnapshot",
    "MoleculeEditor",
    "MoleculeSessionManager",
    "Outcome",
    "OutcomeStatus",
    "SessionEntry",
    "SessionOptions",
    "SessionSettings",
    "restore",
    "snapshot",
]
