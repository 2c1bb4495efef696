"""Gestor de sesión con varias moléculas y portapapeles.

Cada entrada de la sesión posee su propio grafo, su historial y sus
preferencias de visualización; cambiar de molécula solo cambia el índice
activo, por lo que el historial de una molécula nunca se mezcla con el de
otra.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

from molcore.model import MolGraph, is_index
from molgeom.offset import smart_offset
from molsession.clipboard import Clipboard
from molsession.editor import MoleculeEditor
from molsession.history import HistoryManager
from molsession.options import SessionOptions, SessionSettings
from molsession.outcome import ErrorKind, Outcome

logger = logging.getLogger(__name__)


@dataclass
class SessionEntry:
    """Una molécula de la sesión con su historial y preferencias."""
    id: int
    name: str
    graph: MolGraph
    history: HistoryManager
    settings: SessionSettings = field(default_factory=SessionSettings)
    editor: Optional[MoleculeEditor] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.editor is None:
            self.editor = MoleculeEditor(self.graph, self.history)


class MoleculeSessionManager:
    """Lista ordenada de moléculas con una activa y un portapapeles."""

    def __init__(self, options: Optional[SessionOptions] = None) -> None:
        """Inicializa la sesión con una molécula vacía.

        Args:
            options: Configuración compartida; por defecto `SessionOptions()`.
        """
        self.options = options or SessionOptions()
        self.molecules: List[SessionEntry] = []
        self.active_index = -1
        self.clipboard = Clipboard()
        self._next_id = 1
        self.create_molecule()

    # ------------------------------------------------------------------
    # Acceso
    # ------------------------------------------------------------------
    @property
    def active(self) -> SessionEntry:
        return self.molecules[self.active_index]

    @property
    def graph(self) -> MolGraph:
        return self.active.graph

    @property
    def editor(self) -> MoleculeEditor:
        return self.active.editor

    def _valid_index(self, index: int) -> bool:
        return is_index(index) and 0 <= index < len(self.molecules)

    def _name_taken(self, name: str, ignore_index: Optional[int] = None) -> bool:
        return any(
            entry.name == name for i, entry in enumerate(self.molecules) if i != ignore_index
        )

    def find_molecule(self, name: str) -> Optional[int]:
        """Índice de la molécula con ese nombre, o `None`."""
        for i, entry in enumerate(self.molecules):
            if entry.name == name:
                return i
        return None

    def summary(self) -> str:
        """Listado `* i: nombre (n atoms)` marcando la activa."""
        lines = []
        for i, entry in enumerate(self.molecules):
            marker = "*" if i == self.active_index else " "
            lines.append(f"{marker} {i}: {entry.name} ({len(entry.graph)} atoms)")
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Ciclo de vida de moléculas
    # ------------------------------------------------------------------
    def create_molecule(self, name: Optional[str] = None) -> Outcome:
        """Crea una molécula vacía y la activa.

        Args:
            name: Nombre explícito; si falta se genera "Molecule N" con el
                primer sufijo libre.

        Returns:
            Resultado con la `SessionEntry` creada como `payload`, o un error
            `DUPLICATE_NAME` si el nombre explícito ya existe.
        """
        name = name.strip() if name else ""
        if not name:
            counter = len(self.molecules) + 1
            name = f"{self.options.name_prefix} {counter}"
            while self._name_taken(name):
                counter += 1
                name = f"{self.options.name_prefix} {counter}"
        elif self._name_taken(name):
            return Outcome.error(ErrorKind.DUPLICATE_NAME, f'Molecule with name "{name}" already exists')

        graph = MolGraph()
        history = HistoryManager(self.options.max_history)
        entry = SessionEntry(
            id=self._next_id,
            name=name,
            graph=graph,
            history=history,
            editor=MoleculeEditor(graph, history, self.options.bond_threshold_factor),
        )
        self._next_id += 1
        self.molecules.append(entry)
        self.active_index = len(self.molecules) - 1
        logger.info("Created molecule %r", name)
        return Outcome.success(f"Created {name}", payload=entry)

    def switch_molecule(self, index: int) -> Outcome:
        if not self._valid_index(index):
            return Outcome.error(ErrorKind.INVALID_INDEX, f"Invalid molecule index: {index}")
        self.active_index = int(index)
        return Outcome.success(f'Switched to "{self.active.name}"', payload=self.active)

    def rename_molecule(self, index: int, new_name: str) -> Outcome:
        if not self._valid_index(index):
            return Outcome.error(ErrorKind.INVALID_INDEX, f"Invalid molecule index: {index}")
        new_name = (new_name or "").strip()
        if not new_name:
            return Outcome.error(ErrorKind.INVALID_NAME, "Name cannot be empty")
        if self._name_taken(new_name, ignore_index=index):
            return Outcome.error(ErrorKind.DUPLICATE_NAME, f'Molecule with name "{new_name}" already exists')
        entry = self.molecules[index]
        old_name = entry.name
        entry.name = new_name
        return Outcome.success(f'Renamed "{old_name}" to "{new_name}"')

    def remove_molecule(self, index: int) -> Outcome:
        """Elimina una molécula; nunca la última.

        Si se elimina la activa se activa la anterior (o la primera).
        """
        if not self._valid_index(index):
            return Outcome.error(ErrorKind.INVALID_INDEX, f"Invalid molecule index: {index}")
        if len(self.molecules) == 1:
            return Outcome.error(ErrorKind.LAST_MOLECULE, "Cannot remove the last molecule")
        removed = self._drop_entry(index)
        return Outcome.success(f'Removed molecule "{removed.name}"')

    def _drop_entry(self, index: int) -> SessionEntry:
        removed = self.molecules.pop(index)
        if index == self.active_index:
            self.active_index = max(0, index - 1)
        elif index < self.active_index:
            self.active_index -= 1
        logger.info("Removed molecule %r", removed.name)
        return removed

    # ------------------------------------------------------------------
    # Portapapeles
    # ------------------------------------------------------------------
    def copy_selection(self) -> Outcome:
        """Copia los átomos seleccionados y los enlaces entre ellos."""
        selected = self.graph.selected_indices()
        if not selected:
            return Outcome.error(ErrorKind.EMPTY_SELECTION, "No atoms selected")
        self.clipboard = Clipboard.from_atoms(self.graph, selected)
        return Outcome.success(f"Copied {len(selected)} atom(s) to clipboard", payload=len(selected))

    def cut_selection(self) -> Outcome:
        """Copia la selección y la elimina en un único paso de deshacer."""
        copied = self.copy_selection()
        if copied.is_error:
            return copied
        removed = self.editor.delete_selected()
        if removed.is_error:
            return removed
        return Outcome.success(f"Cut {copied.payload} atom(s)", payload=copied.payload)

    def _resolve_min_distance(self, min_distance: Optional[float]):
        value = self.options.paste_min_distance if min_distance is None else min_distance
        try:
            value = float(value)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(value) or value < 0:
            return None
        return value

    def paste_clipboard(self, min_distance: Optional[float] = None) -> Outcome:
        """Inserta el portapapeles en la molécula activa sin solaparse.

        Args:
            min_distance: Holgura mínima entre esferas envolventes; por
                defecto `options.paste_min_distance`.

        Returns:
            Resultado con los índices de los átomos creados como `payload`.
        """
        if self.clipboard.is_empty:
            return Outcome.error(ErrorKind.EMPTY_CLIPBOARD, "Clipboard is empty")
        distance = self._resolve_min_distance(min_distance)
        if distance is None:
            return Outcome.error(ErrorKind.INVALID_TARGET, f"Invalid minimum distance: {min_distance}")
        created = self._insert_template(self.active, self.clipboard, distance)
        return Outcome.success(f"Pasted {len(created)} atom(s)", payload=created)

    def merge_molecule(self, source_index: int, min_distance: Optional[float] = None) -> Outcome:
        """Copia toda la molécula `source_index` en la activa y la elimina.

        Equivale a pegar la molécula completa en la activa y luego eliminar
        la entrada de origen, en un único paso de deshacer sobre la activa.
        """
        if not self._valid_index(source_index):
            return Outcome.error(ErrorKind.INVALID_INDEX, f"Invalid molecule index: {source_index}")
        if source_index == self.active_index:
            return Outcome.error(ErrorKind.SELF_MERGE, "Cannot merge molecule with itself")
        distance = self._resolve_min_distance(min_distance)
        if distance is None:
            return Outcome.error(ErrorKind.INVALID_TARGET, f"Invalid minimum distance: {min_distance}")

        source = self.molecules[source_index]
        target = self.active
        template = Clipboard.from_graph(source.graph)
        created = self._insert_template(target, template, distance)
        self._drop_entry(source_index)
        return Outcome.success(
            f'Merged {len(created)} atoms from "{source.name}" into "{target.name}"',
            payload=created,
        )

    def _insert_template(self, entry: SessionEntry, template: Clipboard, min_distance: float) -> List[int]:
        offset = smart_offset(
            template.positions(),
            entry.graph.positions(),
            min_distance,
            self.options.offset_direction,
            self.options.paste_clearance,
        )
        entry.history.save_state(entry.graph)
        return template.paste_into(entry.graph, offset)

    # ------------------------------------------------------------------
    # Delegación a la molécula activa
    # ------------------------------------------------------------------
    def auto_bond(self, threshold_factor: Optional[float] = None) -> Outcome:
        return self.editor.auto_bond(threshold_factor)

    def save_state(self) -> Outcome:
        return self.editor.save_state()

    def undo(self) -> Outcome:
        return self.editor.undo()

    def redo(self) -> Outcome:
        return self.editor.redo()
