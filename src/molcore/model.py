"""Modelos de datos base del motor de edición geométrica.

Este módulo concentra las estructuras que representan el grafo molecular
(átomos y enlaces). Los átomos viven en una lista densa cuyo orden define
los índices externos; los enlaces guardan índices de átomos, no referencias,
de modo que copiar el estado completo es una operación puramente de datos.
Cada átomo mantiene además la lista de enlaces que lo tocan (referencias de
identidad) para recorrer vecinos en O(grado).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from molcore.elements import validate_element
from molcore.errors import InvalidBondError, MolGraphError


def is_index(value) -> bool:
    """Indica si `value` es un índice entero (int o numpy), excluyendo `bool`."""
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


@dataclass(eq=False)
class Atom:
    """Representa un átomo en el grafo molecular."""
    element: str
    x: float
    y: float
    z: float
    index: int = -1
    selected: bool = False
    bonds: List["Bond"] = field(default_factory=list, repr=False)

    @property
    def position(self) -> np.ndarray:
        """Posición cartesiana como vector numpy (copia)."""
        return np.array([self.x, self.y, self.z], dtype=float)

    def set_position(self, position: Sequence[float]) -> None:
        """Actualiza las coordenadas del átomo.

        Args:
            position: Secuencia de tres números (x, y, z).

        Side Effects:
            Modifica `x`, `y` y `z`.
        """
        x, y, z = position
        self.x = float(x)
        self.y = float(y)
        self.z = float(z)


@dataclass(eq=False)
class Bond:
    """Representa un enlace químico entre dos átomos (por índice)."""
    a1: int
    a2: int
    order: int = 1

    def involves(self, atom_index: int) -> bool:
        return self.a1 == atom_index or self.a2 == atom_index

    def other(self, atom_index: int) -> int:
        """Devuelve el índice del extremo opuesto a `atom_index`."""
        if atom_index == self.a1:
            return self.a2
        if atom_index == self.a2:
            return self.a1
        raise MolGraphError(f"Atom {atom_index} is not an endpoint of this bond")

    @property
    def pair(self) -> frozenset[int]:
        return frozenset((self.a1, self.a2))


class MolGraph:
    """Grafo molecular mutable con operaciones de edición básicas."""

    def __init__(self) -> None:
        """Inicializa el grafo vacío."""
        self.atoms: List[Atom] = []
        self.bonds: List[Bond] = []

    def __len__(self) -> int:
        return len(self.atoms)

    def __iter__(self) -> Iterator[Atom]:
        return iter(self.atoms)

    def add_atom(self, element: str, position: Sequence[float]) -> Atom:
        """Crea y registra un átomo al final de la lista.

        Args:
            element: Símbolo del elemento químico (p. ej., "C", "O").
            position: Coordenadas (x, y, z) en Å.

        Returns:
            El átomo creado; su `index` es su posición en `self.atoms`.

        Raises:
            UnknownElementError: Si el símbolo no es un elemento conocido.

        Side Effects:
            Modifica `self.atoms`.
        """
        validate_element(element)
        x, y, z = position
        atom = Atom(element=element, x=float(x), y=float(y), z=float(z), index=len(self.atoms))
        self.atoms.append(atom)
        return atom

    def remove_atom(self, atom_index: int) -> Tuple[Atom, List[Bond]]:
        """Elimina un átomo y todos los enlaces conectados.

        Los enlaces incidentes se retiran de las listas de adyacencia de
        ambos extremos antes de retirar el átomo. Después se renumeran los
        índices de los átomos posteriores y los extremos de los enlaces, por
        lo que cualquier índice guardado fuera del grafo queda invalidado.

        Args:
            atom_index: Índice del átomo a eliminar.

        Returns:
            Una tupla con el átomo eliminado y la lista de enlaces removidos.

        Raises:
            MolGraphError: Si el índice no existe (no se modifica nada).

        Side Effects:
            Modifica `self.atoms`, `self.bonds` y los índices restantes.
        """
        atom = self.get_atom(atom_index)
        removed_bonds = list(atom.bonds)
        for bond in removed_bonds:
            self._detach_bond(bond)
        self.atoms.pop(atom_index)
        atom.bonds = []
        atom.index = -1

        for position, remaining in enumerate(self.atoms[atom_index:], start=atom_index):
            remaining.index = position
        for bond in self.bonds:
            if bond.a1 > atom_index:
                bond.a1 -= 1
            if bond.a2 > atom_index:
                bond.a2 -= 1
        return atom, removed_bonds

    def remove_atoms(self, atom_indices: Iterable[int]) -> int:
        """Elimina varios átomos; devuelve cuántos se eliminaron.

        Los índices se validan todos antes de borrar y se procesan de mayor
        a menor para que la renumeración no afecte a los pendientes.
        """
        unique = sorted(set(atom_indices), reverse=True)
        for atom_index in unique:
            self.get_atom(atom_index)
        for atom_index in unique:
            self.remove_atom(atom_index)
        return len(unique)

    def add_bond(self, a1: int, a2: int, order: int = 1) -> Bond:
        """Crea y registra un enlace entre dos átomos.

        Args:
            a1: Índice del primer átomo.
            a2: Índice del segundo átomo.
            order: Orden de enlace (solo semántico).

        Returns:
            El enlace creado.

        Raises:
            InvalidBondError: Si `a1 == a2`, algún índice no existe o ya hay
                un enlace entre ese par.

        Side Effects:
            Modifica `self.bonds` y las adyacencias de ambos átomos.
        """
        if a1 == a2:
            raise InvalidBondError(f"Cannot bond atom {a1} to itself")
        if not self.has_atom(a1) or not self.has_atom(a2):
            raise InvalidBondError(f"Bond endpoints out of range: {a1}, {a2}")
        if self.get_bond(a1, a2) is not None:
            raise InvalidBondError(f"Bond between {a1} and {a2} already exists")
        bond = Bond(a1=a1, a2=a2, order=order)
        self.bonds.append(bond)
        self.atoms[a1].bonds.append(bond)
        self.atoms[a2].bonds.append(bond)
        return bond

    def remove_bond(self, bond: Bond) -> Bond:
        """Elimina un enlace del grafo.

        Raises:
            MolGraphError: Si el enlace no pertenece a este grafo.
        """
        if not any(existing is bond for existing in self.bonds):
            raise MolGraphError("Bond does not belong to this graph")
        self._detach_bond(bond)
        return bond

    def _detach_bond(self, bond: Bond) -> None:
        self.bonds = [existing for existing in self.bonds if existing is not bond]
        for atom_index in (bond.a1, bond.a2):
            atom = self.atoms[atom_index]
            atom.bonds = [existing for existing in atom.bonds if existing is not bond]

    def has_atom(self, atom_index: int) -> bool:
        return is_index(atom_index) and 0 <= atom_index < len(self.atoms)

    def get_atom(self, atom_index: int) -> Atom:
        """Obtiene un átomo por índice.

        Raises:
            MolGraphError: Si el índice no existe.
        """
        if not self.has_atom(atom_index):
            raise MolGraphError(f"Invalid atom index: {atom_index}")
        return self.atoms[atom_index]

    def get_bond(self, a1: int, a2: int) -> Optional[Bond]:
        """Busca un enlace existente entre dos átomos.

        Recorre solo la adyacencia de `a1`.

        Returns:
            El enlace si existe, o `None` en caso contrario.
        """
        if not self.has_atom(a1):
            return None
        for bond in self.atoms[a1].bonds:
            if bond.other(a1) == a2:
                return bond
        return None

    def neighbors(self, atom_index: int) -> List[int]:
        return [bond.other(atom_index) for bond in self.get_atom(atom_index).bonds]

    def positions(self, atom_indices: Optional[Iterable[int]] = None) -> np.ndarray:
        """Devuelve las posiciones como matriz `(n, 3)`.

        Args:
            atom_indices: Subconjunto opcional; por defecto todos los átomos.
        """
        if atom_indices is None:
            atoms = self.atoms
        else:
            atoms = [self.get_atom(i) for i in atom_indices]
        if not atoms:
            return np.zeros((0, 3), dtype=float)
        return np.array([[atom.x, atom.y, atom.z] for atom in atoms], dtype=float)

    def set_positions(self, atom_indices: Sequence[int], positions: Sequence[Sequence[float]]) -> None:
        """Asigna nuevas posiciones a los átomos indicados (mismo orden).

        Raises:
            MolGraphError: Si las longitudes no coinciden o algún índice no
                existe; en ese caso no se modifica ningún átomo.
        """
        atom_indices = list(atom_indices)
        if len(atom_indices) != len(positions):
            raise MolGraphError("Number of positions does not match number of atoms")
        atoms = [self.get_atom(i) for i in atom_indices]
        for atom, position in zip(atoms, positions):
            atom.set_position(position)

    def selected_indices(self) -> List[int]:
        return [atom.index for atom in self.atoms if atom.selected]

    def clear_bonds(self) -> None:
        """Elimina todos los enlaces conservando los átomos."""
        self.bonds = []
        for atom in self.atoms:
            atom.bonds = []

    def clear(self) -> None:
        """Elimina todos los átomos y enlaces del grafo.

        Side Effects:
            Limpia `self.atoms` y `self.bonds`.
        """
        for atom in self.atoms:
            atom.bonds = []
            atom.index = -1
        self.atoms = []
        self.bonds = []
