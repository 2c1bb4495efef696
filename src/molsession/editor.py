"""Orquestación de ediciones sobre una molécula.

`MoleculeEditor` recibe de forma explícita el grafo y su historial (no hay
estado global de "molécula activa"). Cada operación valida primero la
selección y los valores, calcula las posiciones nuevas con funciones puras y
solo entonces guarda la instantánea y aplica el cambio. Un error de
validación no deja rastro en el grafo ni en el historial.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional, Sequence

import numpy as np

from molcore.elements import is_valid_element
from molcore.model import MolGraph
from molgeom import engine
from molgeom.autobond import DEFAULT_THRESHOLD_FACTOR, auto_bond
from molgeom.fragments import connected_components, partition
from molgeom.measure import angle_deg, center_of_mass, dihedral_deg, distance, rotated, translated
from molsession.history import HistoryManager, snapshot
from molsession.outcome import ErrorKind, Outcome

logger = logging.getLogger(__name__)

RING_WARNING = "Bond is part of a ring; the whole fragment moved"
TARGET_NOT_REACHED = "target not reached"


def _is_finite(value) -> bool:
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


class MoleculeEditor:
    """Operaciones de edición con deshacer sobre un único grafo."""

    def __init__(
        self,
        graph: MolGraph,
        history: HistoryManager,
        threshold_factor: float = DEFAULT_THRESHOLD_FACTOR,
    ) -> None:
        self.graph = graph
        self.history = history
        self.threshold_factor = threshold_factor

    # ------------------------------------------------------------------
    # Validación
    # ------------------------------------------------------------------
    def _check_selection(self, selection: Sequence[int], count: int, purpose: str) -> Optional[Outcome]:
        selection = list(selection)
        if len(selection) != count:
            return Outcome.error(
                ErrorKind.SELECTION_COUNT, f"Select exactly {count} atoms for {purpose}"
            )
        return self._check_atoms(selection)

    def _check_atoms(self, atom_indices: Sequence[int]) -> Optional[Outcome]:
        for atom_index in atom_indices:
            if not self.graph.has_atom(atom_index):
                return Outcome.error(ErrorKind.INVALID_ATOM, f"Invalid atom index: {atom_index}")
        if len(set(atom_indices)) != len(atom_indices):
            return Outcome.error(ErrorKind.INVALID_ATOM, "Selected atoms must be distinct")
        return None

    def _require_bond(self, a1: int, a2: int):
        bond = self.graph.get_bond(a1, a2)
        if bond is None:
            return None, Outcome.error(
                ErrorKind.MISSING_BOND, f"No bond found between atoms {a1} and {a2}"
            )
        return bond, None

    # ------------------------------------------------------------------
    # Geometría
    # ------------------------------------------------------------------
    def set_bond_length(self, selection: Sequence[int], target: float) -> Outcome:
        """Fija la distancia entre dos átomos enlazados.

        El primer átomo queda fijo; se traslada todo lo alcanzable desde el
        segundo sin cruzar el enlace entre ambos.

        Args:
            selection: Índices `[fijo, móvil]`.
            target: Distancia objetivo en Å (> 0).

        Returns:
            Resultado con la distancia final como `payload`.
        """
        failure = self._check_selection(selection, 2, "bond length adjustment")
        if failure:
            return failure
        if not _is_finite(target) or target <= 0:
            return Outcome.error(ErrorKind.INVALID_TARGET, f"Invalid distance: {target}")
        fixed, moving = selection
        bond, failure = self._require_bond(fixed, moving)
        if failure:
            return failure

        fragment = sorted(partition(self.graph, moving, bond))
        p_fixed = self.graph.atoms[fixed].position
        p_moving = self.graph.atoms[moving].position
        new_positions = engine.bond_length(
            p_fixed, p_moving, self.graph.positions(fragment), float(target)
        )
        return self._apply_positions(
            fragment,
            new_positions,
            [engine.bond_length_degeneracy(p_fixed, p_moving)],
            f"Bond length set to {float(target):.2f} Å",
            lambda: distance(self.graph.atoms[fixed].position, self.graph.atoms[moving].position),
            "{:.3f} Å",
            coupled=fixed in fragment,
        )

    def set_angle(self, selection: Sequence[int], target_deg: float) -> Outcome:
        """Fija el ángulo `a1-pivote-a3` rotando el lado de `a3`.

        Args:
            selection: Índices `[a1, pivote, a3]`.
            target_deg: Ángulo objetivo en grados (0..180).
        """
        failure = self._check_selection(selection, 3, "angle adjustment")
        if failure:
            return failure
        if not _is_finite(target_deg) or not 0.0 <= target_deg <= 180.0:
            return Outcome.error(ErrorKind.INVALID_TARGET, f"Invalid angle: {target_deg}")
        a1, pivot, a3 = selection
        bond, failure = self._require_bond(pivot, a3)
        if failure:
            return failure

        fragment = sorted(partition(self.graph, a3, bond))
        p1, p_pivot, p3 = (self.graph.atoms[i].position for i in (a1, pivot, a3))
        new_positions = engine.angle(p1, p_pivot, p3, self.graph.positions(fragment), float(target_deg))
        return self._apply_positions(
            fragment,
            new_positions,
            [engine.angle_degeneracy(p1, p_pivot, p3)],
            f"Angle set to {float(target_deg):.1f}°",
            lambda: angle_deg(*(self.graph.atoms[i].position for i in (a1, pivot, a3))),
            "{:.2f}°",
            coupled=pivot in fragment or a1 in fragment,
        )

    def set_dihedral(self, selection: Sequence[int], target_deg: float) -> Outcome:
        """Fija el diedro `a1-a2-a3-a4` rotando el lado de `a3` sobre el eje a2-a3.

        Args:
            selection: Índices `[a1, a2, a3, a4]`; `a2-a3` debe estar enlazado.
            target_deg: Diedro objetivo en grados.
        """
        failure = self._check_selection(selection, 4, "dihedral adjustment")
        if failure:
            return failure
        if not _is_finite(target_deg):
            return Outcome.error(ErrorKind.INVALID_TARGET, f"Invalid dihedral: {target_deg}")
        a1, a2, a3, a4 = selection
        bond, failure = self._require_bond(a2, a3)
        if failure:
            return failure

        fragment = sorted(partition(self.graph, a3, bond))
        points = [self.graph.atoms[i].position for i in (a1, a2, a3, a4)]
        new_positions = engine.dihedral(*points, self.graph.positions(fragment), float(target_deg))
        return self._apply_positions(
            fragment,
            new_positions,
            [engine.dihedral_degeneracy(*points)],
            f"Dihedral set to {float(target_deg):.1f}°",
            lambda: dihedral_deg(*(self.graph.atoms[i].position for i in (a1, a2, a3, a4))),
            "{:.2f}°",
            coupled=a1 in fragment or a2 in fragment,
        )

    def _apply_positions(
        self, fragment, new_positions, warnings, message, measure, value_format, coupled=False
    ) -> Outcome:
        """Aplica posiciones nuevas con una única entrada de historial.

        Con `coupled` el lado fijo pertenece al fragmento (enlace de anillo):
        el movimiento es rígido, el valor medido no cambia y el resultado es un
        aviso que informa del valor real en lugar del objetivo.
        """
        warnings = [warning for warning in warnings if warning]
        changed = not np.array_equal(new_positions, self.graph.positions(fragment))
        if changed:
            self.history.save_state(self.graph)
            self.graph.set_positions(fragment, new_positions)
            logger.debug("%s (%d atoms moved)", message, len(fragment))
        value = measure()
        if coupled:
            detail = f"{TARGET_NOT_REACHED}, measured {value_format.format(value)}"
            return Outcome.warning("; ".join([RING_WARNING, detail] + warnings), payload=value)
        if not changed:
            if warnings:
                return Outcome.warning("; ".join(warnings), payload=value)
            return Outcome.info("Geometry already at target", payload=value)
        if warnings:
            return Outcome.warning(f"{message}; " + "; ".join(warnings), payload=value)
        return Outcome.success(message, payload=value)

    def measure(self, selection: Sequence[int]) -> Outcome:
        """Mide distancia (2 átomos), ángulo (3) o diedro (4)."""
        selection = list(selection)
        if len(selection) not in (2, 3, 4):
            return Outcome.error(ErrorKind.SELECTION_COUNT, "Select 2, 3, or 4 atoms to measure")
        failure = self._check_atoms(selection)
        if failure:
            return failure
        points = [self.graph.atoms[i].position for i in selection]
        if len(points) == 2:
            value = distance(*points)
            return Outcome.info(f"Distance: {value:.3f} Å", payload=value)
        if len(points) == 3:
            value = angle_deg(*points)
            return Outcome.info(f"Angle: {value:.2f}°", payload=value)
        value = dihedral_deg(*points)
        return Outcome.info(f"Dihedral: {value:.2f}°", payload=value)

    # ------------------------------------------------------------------
    # Transformaciones de molécula completa
    # ------------------------------------------------------------------
    def translate(self, dx: float, dy: float, dz: float) -> Outcome:
        if not all(_is_finite(value) for value in (dx, dy, dz)):
            return Outcome.error(ErrorKind.INVALID_TARGET, "Invalid coordinates")
        if not self.graph.atoms:
            return Outcome.info("No atoms")
        indices = list(range(len(self.graph)))
        new_positions = translated(self.graph.positions(), (dx, dy, dz))
        self.history.save_state(self.graph)
        self.graph.set_positions(indices, new_positions)
        return Outcome.success(f"Translated by ({dx}, {dy}, {dz})")

    def rotate(self, rx: float, ry: float, rz: float) -> Outcome:
        """Rota la molécula (ángulos de Euler en grados) sobre su centroide."""
        if not all(_is_finite(value) for value in (rx, ry, rz)):
            return Outcome.error(ErrorKind.INVALID_TARGET, "Invalid angles")
        if not self.graph.atoms:
            return Outcome.info("No atoms")
        indices = list(range(len(self.graph)))
        new_positions = rotated(self.graph.positions(), rx, ry, rz)
        self.history.save_state(self.graph)
        self.graph.set_positions(indices, new_positions)
        return Outcome.success(f"Rotated by ({rx}, {ry}, {rz})")

    def center(self) -> Outcome:
        """Lleva el centro de masas de la molécula al origen."""
        if not self.graph.atoms:
            return Outcome.info("No atoms")
        com = center_of_mass([atom.element for atom in self.graph.atoms], self.graph.positions())
        return self.translate(*(-com))

    # ------------------------------------------------------------------
    # Topología
    # ------------------------------------------------------------------
    def add_atom(self, element: str, position: Sequence[float]) -> Outcome:
        if not is_valid_element(element):
            return Outcome.error(ErrorKind.INVALID_ELEMENT, f"Unknown element: {element}")
        position = list(position)
        if len(position) != 3 or not all(_is_finite(value) for value in position):
            return Outcome.error(ErrorKind.INVALID_TARGET, "Invalid position")
        self.history.save_state(self.graph)
        atom = self.graph.add_atom(element, position)
        return Outcome.success(f"Added {element} atom {atom.index}", payload=atom.index)

    def add_bond(self, a1: int, a2: int, order: int = 1) -> Outcome:
        if a1 == a2:
            return Outcome.error(ErrorKind.INVALID_ATOM, "Cannot bond an atom to itself")
        failure = self._check_atoms([a1, a2])
        if failure:
            return failure
        if self.graph.get_bond(a1, a2) is not None:
            return Outcome.error(ErrorKind.DUPLICATE_BOND, f"Bond between {a1} and {a2} already exists")
        self.history.save_state(self.graph)
        self.graph.add_bond(a1, a2, order=order)
        return Outcome.success(f"Added bond {a1}-{a2}")

    def remove_bond(self, a1: int, a2: int) -> Outcome:
        failure = self._check_atoms([a1, a2])
        if failure:
            return failure
        bond, failure = self._require_bond(a1, a2)
        if failure:
            return failure
        self.history.save_state(self.graph)
        self.graph.remove_bond(bond)
        return Outcome.success(f"Removed bond {a1}-{a2}")

    def remove_atoms(self, atom_indices: Iterable[int]) -> Outcome:
        """Elimina átomos (y sus enlaces) en un único paso de deshacer."""
        atom_indices = sorted(set(atom_indices))
        if not atom_indices:
            return Outcome.error(ErrorKind.EMPTY_SELECTION, "No atoms to remove")
        failure = self._check_atoms(atom_indices)
        if failure:
            return failure
        self.history.save_state(self.graph)
        count = self.graph.remove_atoms(atom_indices)
        return Outcome.success(f"Removed {count} atom(s)", payload=count)

    def delete_selected(self) -> Outcome:
        selected = self.graph.selected_indices()
        if not selected:
            return Outcome.error(ErrorKind.EMPTY_SELECTION, "No atoms selected")
        return self.remove_atoms(selected)

    def select(self, atom_indices: Iterable[int], additive: bool = False) -> Outcome:
        """Marca átomos como seleccionados (no genera historial)."""
        atom_indices = list(atom_indices)
        failure = self._check_atoms(sorted(set(atom_indices)))
        if failure:
            return failure
        if not additive:
            self.clear_selection()
        for atom_index in atom_indices:
            self.graph.atoms[atom_index].selected = True
        return Outcome.success(f"Selected {len(self.graph.selected_indices())} atom(s)")

    def clear_selection(self) -> None:
        for atom in self.graph.atoms:
            atom.selected = False

    def auto_bond(self, threshold_factor: Optional[float] = None) -> Outcome:
        """Añade enlaces por distancia; sin cambios no se registra historial."""
        factor = self.threshold_factor if threshold_factor is None else threshold_factor
        if not _is_finite(factor) or factor <= 0:
            return Outcome.error(ErrorKind.INVALID_TARGET, f"Invalid threshold: {factor}")
        before = snapshot(self.graph)
        added = auto_bond(self.graph, factor)
        if added:
            self.history.push(before)
        return Outcome.success(f"Added {added} bond(s)", payload=added)

    def rebond(self, threshold_factor: Optional[float] = None) -> Outcome:
        """Descarta todos los enlaces y los recalcula por distancia."""
        factor = self.threshold_factor if threshold_factor is None else threshold_factor
        if not _is_finite(factor) or factor <= 0:
            return Outcome.error(ErrorKind.INVALID_TARGET, f"Invalid threshold: {factor}")
        before = snapshot(self.graph)
        self.graph.clear_bonds()
        added = auto_bond(self.graph, factor)
        if snapshot(self.graph) != before:
            self.history.push(before)
        return Outcome.success("Bonds recalculated", payload=added)

    def fragments(self) -> Outcome:
        components: List[List[int]] = connected_components(self.graph)
        if not components:
            return Outcome.info("No fragments", payload=components)
        lines = [
            f"Fragment {i}: atoms [{','.join(str(a) for a in frag)}] ({len(frag)} atoms)"
            for i, frag in enumerate(components)
        ]
        return Outcome.info("\n".join(lines), payload=components)

    # ------------------------------------------------------------------
    # Historial
    # ------------------------------------------------------------------
    def save_state(self) -> Outcome:
        self.history.save_state(self.graph)
        return Outcome.success("State saved")

    def undo(self) -> Outcome:
        if self.history.undo(self.graph) is None:
            return Outcome.info("Nothing to undo")
        return Outcome.success("Undid last action")

    def redo(self) -> Outcome:
        if self.history.redo(self.graph) is None:
            return Outcome.info("Nothing to redo")
        return Outcome.success("Redid last action")
