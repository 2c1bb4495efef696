"""Historial de deshacer/rehacer basado en instantáneas completas.

Cada instantánea es una copia profunda e inmutable del grafo (elementos,
posiciones y enlaces). El llamador guarda una instantánea *antes* de mutar,
de modo que la pila siempre contiene estados que existieron y `undo`
retrocede a un estado real anterior.

La pila tiene un cursor: las entradas por debajo del cursor son estados a
los que se puede volver con `undo`; las entradas por encima forman la rama
de rehacer, que se descarta al registrar una edición nueva.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from molcore.model import MolGraph

logger = logging.getLogger(__name__)

DEFAULT_MAX_HISTORY = 50


@dataclass(frozen=True)
class HistorySnapshot:
    """Copia inmutable del estado estructural de un grafo.

    Solo guarda elementos, posiciones y enlaces. La selección no forma parte
    del estado: `restore` crea átomos sin seleccionar, por lo que cada
    `undo` o `redo` deja la selección vacía.
    """
    atoms: Tuple[Tuple[str, float, float, float], ...]
    bonds: Tuple[Tuple[int, int, int], ...]


def snapshot(graph: MolGraph) -> HistorySnapshot:
    """Copia profunda del grafo; no comparte objetos con el grafo vivo."""
    atoms = tuple((atom.element, atom.x, atom.y, atom.z) for atom in graph.atoms)
    bonds = tuple((bond.a1, bond.a2, bond.order) for bond in graph.bonds)
    return HistorySnapshot(atoms=atoms, bonds=bonds)


def restore(graph: MolGraph, state: HistorySnapshot) -> None:
    """Reemplaza por completo átomos y enlaces del grafo con `state`.

    Se crean objetos nuevos en cada restauración; todos los átomos quedan
    con `selected=False`.

    Side Effects:
        Limpia y reconstruye `graph`.
    """
    graph.clear()
    for element, x, y, z in state.atoms:
        graph.add_atom(element, (x, y, z))
    for a1, a2, order in state.bonds:
        graph.add_bond(a1, a2, order=order)


class HistoryManager:
    """Pila acotada de instantáneas con cursor."""

    def __init__(self, max_history: int = DEFAULT_MAX_HISTORY) -> None:
        if max_history < 2:
            raise ValueError("max_history must be at least 2")
        self.max_history = max_history
        self._stack: List[HistorySnapshot] = []
        self._cursor = 0

    def __len__(self) -> int:
        return len(self._stack)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._stack) - 1

    def push(self, state: HistorySnapshot) -> None:
        """Registra un estado previo a una edición.

        Descarta la rama de rehacer, apila el estado y expulsa la entrada
        más antigua si se supera `max_history`.
        """
        del self._stack[self._cursor:]
        self._stack.append(state)
        self._cursor = len(self._stack)
        self._trim()
        logger.debug("History push: %d entries, cursor %d", len(self._stack), self._cursor)

    def save_state(self, graph: MolGraph) -> HistorySnapshot:
        """Toma una instantánea de `graph` y la apila."""
        state = snapshot(graph)
        self.push(state)
        return state

    def undo(self, graph: MolGraph) -> Optional[HistorySnapshot]:
        """Restaura en `graph` el estado anterior.

        Si el cursor está en la cima se registra primero el estado vivo para
        que `redo` pueda volver a él.

        Returns:
            La instantánea restaurada, o `None` si no hay nada que deshacer.
        """
        if not self.can_undo:
            return None
        if self._cursor == len(self._stack):
            self._stack.append(snapshot(graph))
        self._cursor -= 1
        self._trim()
        state = self._stack[self._cursor]
        restore(graph, state)
        logger.debug("Undo: cursor %d of %d", self._cursor, len(self._stack))
        return state

    def redo(self, graph: MolGraph) -> Optional[HistorySnapshot]:
        """Restaura en `graph` el estado siguiente, si existe."""
        if not self.can_redo:
            return None
        self._cursor += 1
        state = self._stack[self._cursor]
        restore(graph, state)
        logger.debug("Redo: cursor %d of %d", self._cursor, len(self._stack))
        return state

    def clear(self) -> None:
        self._stack = []
        self._cursor = 0

    def _trim(self) -> None:
        overflow = len(self._stack) - self.max_history
        if overflow > 0:
            del self._stack[:overflow]
            self._cursor = max(0, self._cursor - overflow)
