"""Opciones de configuración de la sesión y preferencias por molécula."""

from dataclasses import dataclass
from typing import Tuple


@dataclass
class SessionOptions:
    """Parámetros de comportamiento compartidos por todas las moléculas."""

    # Profundidad máxima del historial de deshacer por molécula.
    max_history: int = 50
    # Factor sobre la suma de radios covalentes para el autoenlazado.
    bond_threshold_factor: float = 1.1
    # Holgura (Å) por defecto entre esferas al pegar o fusionar.
    paste_min_distance: float = 0.0
    # Separación fija (Å) entre átomos pegados y existentes.
    paste_clearance: float = 1.0
    # Dirección de búsqueda del desplazamiento de pegado.
    offset_direction: Tuple[float, float, float] = (1.0, 0.0, 0.0)
    # Prefijo de los nombres automáticos ("Molecule 1", "Molecule 2", ...).
    name_prefix: str = "Molecule"


@dataclass
class SessionSettings:
    """Preferencias de visualización que viajan con cada molécula."""
    label_mode: str = "none"
    color_scheme: str = "jmol"
