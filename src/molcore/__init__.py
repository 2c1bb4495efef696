"""API pública del núcleo del grafo molecular.

Reexpone las clases base del modelo para facilitar importaciones.
"""

from molcore.errors import InvalidBondError, MolGraphError, UnknownElementError
from molcore.model import Atom, Bond, MolGraph

__all__ = [
    "Atom",
    "Bond",
    "MolGraph",
    "MolGraphError",
    "InvalidBondError",
    "UnknownElementError",
]
