"""API pública de geometría molecular.

Partición de fragmentos, transformaciones rígidas para longitud, ángulo y
diedro, autoenlazado por distancia y desplazamiento de pegado.
"""

from .autobond import auto_bond, bond_threshold
from .engine import angle, bond_length, dihedral
from .fragments import connected_components, moving_fragment, partition
from .offset import smart_offset

__all__ = [
    "angle",
    "auto_bond",
    "bond_length",
    "bond_threshold",
    "connected_components",
    "dihedral",
    "moving_fragment",
    "partition",
    "smart_offset",
]
