"""Portapapeles de átomos y enlaces desacoplado de cualquier grafo vivo."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from molcore.model import MolGraph
from molgeom.measure import center_of_mass


@dataclass
class Clipboard:
    """Plantilla de átomos (elemento, posición) y enlaces internos.

    Los enlaces guardan índices dentro de la propia plantilla; los enlaces
    que cruzan el borde de la selección no se copian.
    """
    atoms: List[Tuple[str, Tuple[float, float, float]]] = field(default_factory=list)
    bonds: List[Tuple[int, int, int]] = field(default_factory=list)
    center_of_mass: Optional[np.ndarray] = None

    @property
    def is_empty(self) -> bool:
        return not self.atoms

    def positions(self) -> np.ndarray:
        if not self.atoms:
            return np.zeros((0, 3), dtype=float)
        return np.array([position for _element, position in self.atoms], dtype=float)

    @classmethod
    def from_atoms(cls, graph: MolGraph, atom_indices: Sequence[int]) -> "Clipboard":
        """Construye la plantilla a partir de los átomos indicados.

        Args:
            graph: Grafo de origen (no se modifica).
            atom_indices: Índices de los átomos a copiar, en orden.

        Returns:
            Portapapeles con átomos, enlaces internos y centro de masas.
        """
        template_index: Dict[int, int] = {}
        atoms: List[Tuple[str, Tuple[float, float, float]]] = []
        for atom_index in atom_indices:
            if atom_index in template_index:
                continue
            atom = graph.get_atom(atom_index)
            template_index[atom_index] = len(atoms)
            atoms.append((atom.element, (atom.x, atom.y, atom.z)))

        bonds: List[Tuple[int, int, int]] = []
        for bond in graph.bonds:
            if bond.a1 in template_index and bond.a2 in template_index:
                bonds.append((template_index[bond.a1], template_index[bond.a2], bond.order))

        clipboard = cls(atoms=atoms, bonds=bonds)
        clipboard.center_of_mass = center_of_mass(
            [element for element, _position in atoms], clipboard.positions()
        )
        return clipboard

    @classmethod
    def from_graph(cls, graph: MolGraph) -> "Clipboard":
        """Plantilla con todos los átomos y enlaces de `graph`."""
        return cls.from_atoms(graph, range(len(graph.atoms)))

    def paste_into(self, graph: MolGraph, offset: Sequence[float]) -> List[int]:
        """Inserta la plantilla en `graph` desplazada por `offset`.

        Returns:
            Índices de los átomos creados.

        Side Effects:
            Añade átomos y enlaces a `graph`.
        """
        dx, dy, dz = (float(value) for value in offset)
        created: List[int] = []
        for element, (x, y, z) in self.atoms:
            created.append(graph.add_atom(element, (x + dx, y + dy, z + dz)).index)
        for i, j, order in self.bonds:
            graph.add_bond(created[i], created[j], order=order)
        return created
