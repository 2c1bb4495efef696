"""Pruebas unitarias para test_editor."""

import math
import os
import sys
import unittest

import numpy as np

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from molcore.model import MolGraph
from molgeom.fragments import partition
from molsession.editor import RING_WARNING, TARGET_NOT_REACHED, MoleculeEditor
from molsession.history import HistoryManager, snapshot
from molsession.outcome import ErrorKind, OutcomeStatus


SQUARE_RING = [
    ("C", (0.0, 0.0, 0.0)),
    ("C", (1.5, 0.0, 0.0)),
    ("C", (1.5, 1.5, 0.0)),
    ("C", (0.0, 1.5, 0.0)),
]
SQUARE_RING_BONDS = [(0, 1), (1, 2), (2, 3), (3, 0)]


def build_editor(atoms, bonds=()):
    graph = MolGraph()
    for element, position in atoms:
        graph.add_atom(element, position)
    for a1, a2 in bonds:
        graph.add_bond(a1, a2)
    return MoleculeEditor(graph, HistoryManager())


class GeometryEditTest(unittest.TestCase):
    """Casos de prueba para GeometryEditTest."""
    def test_bond_length_moves_second_atom(self):
        """Verifica bond length moves second atom.

        Returns:
            None.

        """
        editor = build_editor([("C", (0.0, 0.0, 0.0)), ("C", (1.5, 0.0, 0.0))], [(0, 1)])

        outcome = editor.set_bond_length([0, 1], 1.2)

        self.assertEqual(outcome.status, OutcomeStatus.SUCCESS)
        self.assertAlmostEqual(outcome.payload, 1.2, places=9)
        self.assertEqual(editor.graph.atoms[0].position.tolist(), [0.0, 0.0, 0.0])
        moved = editor.graph.atoms[1]
        self.assertAlmostEqual(moved.x, 1.2, places=9)
        self.assertAlmostEqual(moved.y, 0.0, places=12)
        self.assertAlmostEqual(moved.z, 0.0, places=12)
        self.assertEqual(len(editor.history), 1)

    def test_bond_length_moves_whole_side(self):
        """Verifica bond length moves whole side."""
        editor = build_editor(
            [("H", (-1.0, 0.0, 0.0)), ("C", (0.0, 0.0, 0.0)), ("C", (1.5, 0.0, 0.0)), ("H", (2.0, 1.0, 0.0))],
            [(0, 1), (1, 2), (2, 3)],
        )
        editor.set_bond_length([1, 2], 1.3)
        self.assertEqual(editor.graph.atoms[0].position.tolist(), [-1.0, 0.0, 0.0])
        self.assertAlmostEqual(editor.graph.atoms[3].x, 1.8, places=9)
        self.assertAlmostEqual(editor.graph.atoms[3].y, 1.0, places=12)

    def test_repeated_edit_is_noop(self):
        """Verifica repeated edit is noop."""
        editor = build_editor([("C", (0.0, 0.0, 0.0)), ("C", (1.5, 0.0, 0.0))], [(0, 1)])
        editor.set_bond_length([0, 1], 1.2)
        state = snapshot(editor.graph)

        outcome = editor.set_bond_length([0, 1], 1.2)

        self.assertEqual(outcome.status, OutcomeStatus.INFO)
        self.assertEqual(snapshot(editor.graph), state)
        self.assertEqual(len(editor.history), 1)

    def test_collinear_angle_to_right_angle(self):
        """Verifica collinear angle to right angle."""
        editor = build_editor(
            [("C", (0.0, 0.0, 0.0)), ("C", (1.0, 0.0, 0.0)), ("C", (2.0, 0.0, 0.0))],
            [(0, 1), (1, 2)],
        )

        outcome = editor.set_angle([0, 1, 2], 90.0)

        self.assertEqual(outcome.status, OutcomeStatus.WARNING)
        self.assertAlmostEqual(outcome.payload, 90.0, places=6)
        self.assertEqual(editor.measure([0, 1, 2]).payload, outcome.payload)
        self.assertEqual(editor.graph.atoms[0].position.tolist(), [0.0, 0.0, 0.0])

    def test_dihedral_on_chain(self):
        """Verifica dihedral on chain."""
        editor = build_editor(
            [("C", (1.0, 0.0, -0.5)), ("C", (0.0, 0.0, 0.0)), ("C", (0.0, 0.0, 1.5)), ("C", (1.0, 0.0, 2.0))],
            [(0, 1), (1, 2), (2, 3)],
        )

        outcome = editor.set_dihedral([0, 1, 2, 3], 60.0)

        self.assertEqual(outcome.status, OutcomeStatus.SUCCESS)
        self.assertAlmostEqual(outcome.payload, 60.0, places=6)
        self.assertEqual(editor.graph.atoms[0].position.tolist(), [1.0, 0.0, -0.5])
        self.assertEqual(editor.graph.atoms[1].position.tolist(), [0.0, 0.0, 0.0])
        self.assertAlmostEqual(editor.graph.atoms[3].x, math.cos(math.radians(60.0)), places=9)
        self.assertAlmostEqual(editor.graph.atoms[3].y, math.sin(math.radians(60.0)), places=9)

    def test_ring_dihedral_moves_whole_ring(self):
        """Verifica ring dihedral moves whole ring.

        En un anillo de cuatro átomos el fragmento móvil es el anillo
        completo y se informa con un aviso.
        """
        editor = build_editor(
            [("C", (0.0, 0.0, 0.0)), ("C", (1.5, 0.0, 0.0)), ("C", (1.5, 1.5, 0.0)), ("C", (0.0, 1.5, 0.0))],
            [(0, 1), (1, 2), (2, 3), (3, 0)],
        )
        graph = editor.graph
        self.assertEqual(partition(graph, 2, graph.get_bond(1, 2)), {0, 1, 2, 3})
        before = graph.positions()

        outcome = editor.set_dihedral([0, 1, 2, 3], 30.0)

        self.assertEqual(outcome.status, OutcomeStatus.WARNING)
        self.assertIn(RING_WARNING, outcome.message)
        after = graph.positions()
        for i in range(4):
            for j in range(i + 1, 4):
                self.assertAlmostEqual(
                    float(np.linalg.norm(after[i] - after[j])),
                    float(np.linalg.norm(before[i] - before[j])),
                    places=9,
                )

    def test_ring_bond_length_reports_unreached_target(self):
        """Verifica ring bond length reports unreached target.

        El anillo se traslada entero, la distancia no cambia y el aviso
        informa del valor medido en lugar del objetivo.
        """
        editor = build_editor(SQUARE_RING, SQUARE_RING_BONDS)
        before = snapshot(editor.graph)

        outcome = editor.set_bond_length([0, 1], 1.2)

        self.assertEqual(outcome.status, OutcomeStatus.WARNING)
        self.assertIn(RING_WARNING, outcome.message)
        self.assertIn(TARGET_NOT_REACHED, outcome.message)
        self.assertIn("measured 1.500 Å", outcome.message)
        self.assertNotIn("set to", outcome.message)
        self.assertAlmostEqual(outcome.payload, 1.5, places=9)
        editor.undo()
        self.assertEqual(snapshot(editor.graph), before)

    def test_ring_angle_reports_unreached_target(self):
        """Verifica ring angle reports unreached target."""
        editor = build_editor(SQUARE_RING, SQUARE_RING_BONDS)

        outcome = editor.set_angle([0, 1, 2], 60.0)

        self.assertEqual(outcome.status, OutcomeStatus.WARNING)
        self.assertIn(TARGET_NOT_REACHED, outcome.message)
        self.assertIn("measured 90.00°", outcome.message)
        self.assertAlmostEqual(outcome.payload, 90.0, places=6)

    def test_dihedral_first_atom_on_moving_side(self):
        """Verifica dihedral first atom on moving side.

        Si el primer átomo se alcanza desde el tercero sin pasar por el
        segundo, gira con el fragmento y el diedro no cambia.
        """
        editor = build_editor(
            [("C", (1.0, 0.0, -0.5)), ("C", (0.0, 0.0, 0.0)), ("C", (0.0, 0.0, 1.5)), ("C", (1.0, 0.0, 2.0))],
            [(1, 2), (2, 3), (3, 0)],
        )

        outcome = editor.set_dihedral([0, 1, 2, 3], 60.0)

        self.assertEqual(outcome.status, OutcomeStatus.WARNING)
        self.assertIn(TARGET_NOT_REACHED, outcome.message)
        self.assertAlmostEqual(outcome.payload, 0.0, places=6)
        self.assertEqual(editor.graph.atoms[1].position.tolist(), [0.0, 0.0, 0.0])

    def test_undo_restores_exact_positions(self):
        """Verifica undo restores exact positions."""
        editor = build_editor(
            [("C", (0.1, 0.2, 0.3)), ("O", (1.4, -0.2, 0.7))], [(0, 1)]
        )
        before = snapshot(editor.graph)
        editor.set_bond_length([0, 1], 1.21)
        after = snapshot(editor.graph)

        self.assertEqual(editor.undo().status, OutcomeStatus.SUCCESS)
        self.assertEqual(snapshot(editor.graph), before)
        self.assertEqual(editor.redo().status, OutcomeStatus.SUCCESS)
        self.assertEqual(snapshot(editor.graph), after)
        self.assertEqual(editor.redo().status, OutcomeStatus.INFO)


class ValidationTest(unittest.TestCase):
    """Casos de prueba para ValidationTest."""
    def setUp(self):
        self.editor = build_editor(
            [("C", (0.0, 0.0, 0.0)), ("C", (1.5, 0.0, 0.0)), ("C", (2.0, 1.4, 0.0)), ("C", (3.5, 1.4, 0.0))],
            [(0, 1), (1, 2), (2, 3)],
        )
        self.before = snapshot(self.editor.graph)

    def assertRejected(self, outcome, kind):
        self.assertEqual(outcome.status, OutcomeStatus.ERROR)
        self.assertEqual(outcome.kind, kind)
        self.assertEqual(snapshot(self.editor.graph), self.before)
        self.assertEqual(len(self.editor.history), 0)

    def test_wrong_selection_count(self):
        """Verifica wrong selection count."""
        self.assertRejected(self.editor.set_bond_length([0], 1.2), ErrorKind.SELECTION_COUNT)
        self.assertRejected(self.editor.set_angle([0, 1], 90.0), ErrorKind.SELECTION_COUNT)
        self.assertRejected(self.editor.set_dihedral([0, 1, 2], 90.0), ErrorKind.SELECTION_COUNT)

    def test_invalid_targets(self):
        """Verifica invalid targets."""
        self.assertRejected(self.editor.set_bond_length([0, 1], 0.0), ErrorKind.INVALID_TARGET)
        self.assertRejected(self.editor.set_bond_length([0, 1], float("nan")), ErrorKind.INVALID_TARGET)
        self.assertRejected(self.editor.set_angle([0, 1, 2], 181.0), ErrorKind.INVALID_TARGET)
        self.assertRejected(self.editor.set_dihedral([0, 1, 2, 3], float("inf")), ErrorKind.INVALID_TARGET)

    def test_missing_bond(self):
        """Verifica missing bond."""
        self.assertRejected(self.editor.set_bond_length([0, 2], 1.2), ErrorKind.MISSING_BOND)
        self.assertRejected(self.editor.set_angle([1, 0, 2], 90.0), ErrorKind.MISSING_BOND)
        self.assertRejected(self.editor.set_dihedral([0, 1, 3, 2], 90.0), ErrorKind.MISSING_BOND)

    def test_invalid_atoms(self):
        """Verifica invalid atoms."""
        self.assertRejected(self.editor.set_bond_length([0, 9], 1.2), ErrorKind.INVALID_ATOM)
        self.assertRejected(self.editor.set_angle([0, 1, 1], 90.0), ErrorKind.INVALID_ATOM)

    def test_topology_errors(self):
        """Verifica topology errors."""
        self.assertRejected(self.editor.add_atom("Qq", (0.0, 0.0, 0.0)), ErrorKind.INVALID_ELEMENT)
        self.assertRejected(self.editor.add_bond(0, 1), ErrorKind.DUPLICATE_BOND)
        self.assertRejected(self.editor.add_bond(2, 2), ErrorKind.INVALID_ATOM)
        self.assertRejected(self.editor.remove_bond(0, 3), ErrorKind.MISSING_BOND)
        self.assertRejected(self.editor.delete_selected(), ErrorKind.EMPTY_SELECTION)


class TopologyEditTest(unittest.TestCase):
    """Casos de prueba para TopologyEditTest."""
    def test_delete_selected_is_one_undo_step(self):
        """Verifica delete selected is one undo step."""
        editor = build_editor(
            [("C", (0.0, 0.0, 0.0)), ("O", (1.2, 0.0, 0.0)), ("N", (2.4, 0.0, 0.0))],
            [(0, 1), (1, 2)],
        )
        before = snapshot(editor.graph)
        editor.select([0, 2])

        outcome = editor.delete_selected()

        self.assertEqual(outcome.payload, 2)
        self.assertEqual([atom.element for atom in editor.graph.atoms], ["O"])
        self.assertEqual(editor.graph.bonds, [])
        editor.undo()
        self.assertEqual(snapshot(editor.graph), before)

    def test_add_atom_and_bond(self):
        """Verifica add atom and bond."""
        editor = build_editor([("C", (0.0, 0.0, 0.0))])
        outcome = editor.add_atom("Cl", (1.8, 0.0, 0.0))
        self.assertEqual(outcome.payload, 1)
        self.assertEqual(editor.add_bond(0, 1).status, OutcomeStatus.SUCCESS)
        self.assertEqual(len(editor.history), 2)
        self.assertEqual(editor.remove_bond(1, 0).status, OutcomeStatus.SUCCESS)
        self.assertEqual(editor.graph.bonds, [])

    def test_auto_bond_records_history_only_on_change(self):
        """Verifica auto bond records history only on change."""
        editor = build_editor([("C", (0.0, 0.0, 0.0)), ("C", (1.5, 0.0, 0.0)), ("C", (9.0, 0.0, 0.0))])
        self.assertEqual(editor.auto_bond().payload, 1)
        self.assertEqual(len(editor.history), 1)
        self.assertEqual(editor.auto_bond().payload, 0)
        self.assertEqual(len(editor.history), 1)
        self.assertEqual(editor.auto_bond(-1.0).kind, ErrorKind.INVALID_TARGET)

    def test_rebond_replaces_bonds(self):
        """Verifica rebond replaces bonds."""
        editor = build_editor(
            [("C", (0.0, 0.0, 0.0)), ("C", (1.5, 0.0, 0.0)), ("C", (9.0, 0.0, 0.0))], [(0, 2)]
        )
        editor.rebond()
        self.assertIsNone(editor.graph.get_bond(0, 2))
        self.assertIsNotNone(editor.graph.get_bond(0, 1))
        self.assertEqual(len(editor.history), 1)
        editor.rebond()
        self.assertEqual(len(editor.history), 1)

    def test_fragments_listing(self):
        """Verifica fragments listing."""
        editor = build_editor(
            [("C", (0.0, 0.0, 0.0)), ("C", (1.5, 0.0, 0.0)), ("O", (9.0, 0.0, 0.0))], [(0, 1)]
        )
        outcome = editor.fragments()
        self.assertEqual(outcome.payload, [[0, 1], [2]])
        self.assertIn("Fragment 1: atoms [2] (1 atoms)", outcome.message)


class WholeMoleculeTest(unittest.TestCase):
    """Casos de prueba para WholeMoleculeTest."""
    def test_translate(self):
        """Verifica translate."""
        editor = build_editor([("C", (0.0, 0.0, 0.0)), ("O", (1.2, 0.0, 0.0))])
        editor.translate(1.0, -2.0, 0.5)
        np.testing.assert_allclose(editor.graph.positions(), [[1.0, -2.0, 0.5], [2.2, -2.0, 0.5]], atol=1e-12)
        self.assertEqual(editor.translate(float("nan"), 0.0, 0.0).kind, ErrorKind.INVALID_TARGET)

    def test_rotate_about_centroid(self):
        """Verifica rotate about centroid."""
        editor = build_editor([("C", (0.0, 0.0, 0.0)), ("C", (2.0, 0.0, 0.0))])
        editor.rotate(0.0, 0.0, 90.0)
        positions = editor.graph.positions()
        np.testing.assert_allclose(positions, [[1.0, -1.0, 0.0], [1.0, 1.0, 0.0]], atol=1e-12)

    def test_center_moves_center_of_mass_to_origin(self):
        """Verifica center moves center of mass to origin."""
        editor = build_editor([("C", (1.0, 2.0, 3.0)), ("O", (2.2, 2.0, 3.0))])
        editor.center()
        positions = editor.graph.positions()
        self.assertAlmostEqual(positions[0][1], 0.0, places=12)
        self.assertLess(abs(positions[1][0]), abs(positions[0][0]))
        editor.undo()
        self.assertEqual(editor.graph.atoms[0].position.tolist(), [1.0, 2.0, 3.0])

    def test_empty_molecule(self):
        """Verifica empty molecule."""
        editor = build_editor([])
        self.assertEqual(editor.center().status, OutcomeStatus.INFO)
        self.assertEqual(len(editor.history), 0)


if __name__ == "__main__":
    unittest.main()
