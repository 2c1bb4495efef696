"""Partición del grafo en fragmentos móviles.

Un fragmento es el conjunto de átomos que se desplazan juntos en una
edición geométrica: todo lo alcanzable desde un átomo semilla sin cruzar
un enlace excluido. El enlace excluido se filtra durante el recorrido; el
grafo nunca se modifica.

Si el enlace excluido pertenece a un anillo existe un camino alternativo y
el resultado es la componente conexa completa. No es un error: los enlaces
de anillo no separan el grafo y la edición mueve toda la componente.
"""

from __future__ import annotations

from collections import deque
from typing import List, Optional, Set

from molcore.errors import MolGraphError
from molcore.model import Bond, MolGraph


def partition(graph: MolGraph, seed: int, excluded_bond: Optional[Bond] = None) -> Set[int]:
    """Índices alcanzables desde `seed` sin usar `excluded_bond`.

    Args:
        graph: Grafo molecular.
        seed: Índice del átomo de partida (siempre incluido).
        excluded_bond: Enlace que se considera ausente solo en esta llamada.

    Returns:
        Conjunto de índices de átomos del fragmento.

    Raises:
        MolGraphError: Si `seed` no existe.
    """
    graph.get_atom(seed)
    visited: Set[int] = {seed}
    queue = deque([seed])
    while queue:
        current = queue.popleft()
        for bond in graph.atoms[current].bonds:
            if bond is excluded_bond:
                continue
            neighbor = bond.other(current)
            if neighbor not in visited:
                visited.add(neighbor)
                queue.append(neighbor)
    return visited


def moving_fragment(graph: MolGraph, anchor: int, moving: int) -> Set[int]:
    """Fragmento del lado de `moving` respecto al enlace `anchor`-`moving`.

    Raises:
        MolGraphError: Si no hay enlace entre ambos átomos.
    """
    bond = graph.get_bond(anchor, moving)
    if bond is None:
        raise MolGraphError(f"No bond between atoms {anchor} and {moving}")
    return partition(graph, moving, bond)


def connected_components(graph: MolGraph) -> List[List[int]]:
    """Lista las componentes conexas (fragmentos) en orden de índice."""
    seen: Set[int] = set()
    components: List[List[int]] = []
    for atom in graph.atoms:
        if atom.index in seen:
            continue
        component = partition(graph, atom.index)
        seen.update(component)
        components.append(sorted(component))
    return components
