"""Datos de elementos químicos obtenidos de la tabla periódica de RDKit.

El núcleo trata la tabla como una consulta pura: validación de símbolos,
radios covalentes (para el autoenlazado) y pesos atómicos (para el centro
de masas).
"""

from __future__ import annotations

from typing import FrozenSet

from rdkit import Chem

from molcore.errors import UnknownElementError

_PERIODIC_TABLE = Chem.GetPeriodicTable()

# Símbolos H..Og aceptados por el editor.
ELEMENT_SYMBOLS: FrozenSet[str] = frozenset(
    _PERIODIC_TABLE.GetElementSymbol(number) for number in range(1, 119)
)


def is_valid_element(symbol: str) -> bool:
    """Indica si `symbol` es un símbolo de elemento conocido."""
    return symbol in ELEMENT_SYMBOLS


def validate_element(symbol: str) -> str:
    """Devuelve el símbolo si es válido.

    Args:
        symbol: Símbolo químico (sensible a mayúsculas, p. ej. "Cl").

    Returns:
        El mismo símbolo.

    Raises:
        UnknownElementError: Si el símbolo no está en la tabla periódica.
    """
    if not is_valid_element(symbol):
        raise UnknownElementError(f"Unknown element symbol: {symbol!r}")
    return symbol


def covalent_radius(symbol: str) -> float:
    """Radio covalente (Å) del elemento según RDKit."""
    return float(_PERIODIC_TABLE.GetRcovalent(validate_element(symbol)))


def atomic_weight(symbol: str) -> float:
    """Peso atómico promedio (u) del elemento según RDKit."""
    return float(_PERIODIC_TABLE.GetAtomicWeight(validate_element(symbol)))
