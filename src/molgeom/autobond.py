"""Creación automática de enlaces por distancia interatómica."""

from __future__ import annotations

import math
from typing import Callable

from molcore.elements import covalent_radius
from molcore.model import MolGraph

DEFAULT_THRESHOLD_FACTOR = 1.1


def bond_threshold(
    element1: str,
    element2: str,
    threshold_factor: float = DEFAULT_THRESHOLD_FACTOR,
    radius: Callable[[str], float] = covalent_radius,
) -> float:
    """Distancia máxima (exclusiva) para considerar enlazados dos átomos."""
    return (radius(element1) + radius(element2)) * threshold_factor


def auto_bond(
    graph: MolGraph,
    threshold_factor: float = DEFAULT_THRESHOLD_FACTOR,
    radius: Callable[[str], float] = covalent_radius,
) -> int:
    """Añade enlaces simples entre pares de átomos suficientemente cercanos.

    Recorre los pares (i, j) con i < j en orden ascendente y enlaza si
    `distancia < (r_i + r_j) * threshold_factor` (desigualdad estricta) y
    el par aún no está enlazado. Repetir la llamada sobre la misma geometría
    produce el mismo conjunto de enlaces.

    Args:
        graph: Grafo a modificar.
        threshold_factor: Factor multiplicativo sobre la suma de radios.
        radius: Consulta de radio covalente por símbolo.

    Returns:
        Número de enlaces añadidos.

    Side Effects:
        Añade enlaces a `graph`.
    """
    atoms = graph.atoms
    radii = [radius(atom.element) for atom in atoms]
    coords = [(atom.x, atom.y, atom.z) for atom in atoms]
    added = 0
    for i in range(len(atoms)):
        for j in range(i + 1, len(atoms)):
            threshold = (radii[i] + radii[j]) * threshold_factor
            if math.dist(coords[i], coords[j]) < threshold and graph.get_bond(i, j) is None:
                graph.add_bond(i, j, order=1)
                added += 1
    return added
