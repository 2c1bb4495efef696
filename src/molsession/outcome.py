"""Resultado etiquetado de las operaciones de sesión y edición.

Las operaciones públicas no lanzan excepciones por errores de validación:
devuelven un `Outcome` con su estado, un mensaje legible y, si procede, el
tipo de error o un valor asociado.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class OutcomeStatus(str, Enum):
    """Categorías de resultado."""
    SUCCESS = "success"
    WARNING = "warning"
    INFO = "info"
    ERROR = "error"


class ErrorKind(str, Enum):
    """Causas de rechazo; siempre se detectan antes de mutar nada."""
    SELECTION_COUNT = "selection_count"
    INVALID_ATOM = "invalid_atom"
    INVALID_TARGET = "invalid_target"
    MISSING_BOND = "missing_bond"
    DUPLICATE_BOND = "duplicate_bond"
    INVALID_ELEMENT = "invalid_element"
    INVALID_INDEX = "invalid_index"
    INVALID_NAME = "invalid_name"
    DUPLICATE_NAME = "duplicate_name"
    LAST_MOLECULE = "last_molecule"
    SELF_MERGE = "self_merge"
    EMPTY_SELECTION = "empty_selection"
    EMPTY_CLIPBOARD = "empty_clipboard"


@dataclass(frozen=True)
class Outcome:
    """Resultado de una operación."""
    status: OutcomeStatus
    message: str
    kind: Optional[ErrorKind] = None
    payload: Any = None

    @classmethod
    def success(cls, message: str, payload: Any = None) -> "Outcome":
        return cls(OutcomeStatus.SUCCESS, message, payload=payload)

    @classmethod
    def warning(cls, message: str, payload: Any = None) -> "Outcome":
        """Operación completada con una condición degenerada."""
        return cls(OutcomeStatus.WARNING, message, payload=payload)

    @classmethod
    def info(cls, message: str, payload: Any = None) -> "Outcome":
        """Operación sin cambios (p. ej., nada que deshacer)."""
        return cls(OutcomeStatus.INFO, message, payload=payload)

    @classmethod
    def error(cls, kind: ErrorKind, message: str) -> "Outcome":
        return cls(OutcomeStatus.ERROR, message, kind=kind)

    @property
    def ok(self) -> bool:
        """`True` salvo para errores."""
        return self.status is not OutcomeStatus.ERROR

    @property
    def is_error(self) -> bool:
        return self.status is OutcomeStatus.ERROR

    @property
    def is_warning(self) -> bool:
        return self.status is OutcomeStatus.WARNING
