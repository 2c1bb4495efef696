"""Desplazamiento inteligente para pegar o fusionar átomos sin solaparlos."""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np

from molgeom.vectors import Vec3, as_points, is_zero, normalize

DEFAULT_DIRECTION = (1.0, 0.0, 0.0)
# Separación mínima (Å) entre esferas, además de `min_distance`.
ATOM_CLEARANCE = 1.0


def bounding_sphere(points) -> Tuple[np.ndarray, float]:
    """Esfera envolvente: centroide y distancia máxima al centroide."""
    points = as_points(points)
    center = points.mean(axis=0)
    radius = float(np.linalg.norm(points - center, axis=1).max())
    return center, radius


def smart_offset(
    incoming,
    existing,
    min_distance: float = 0.0,
    direction: Vec3 = DEFAULT_DIRECTION,
    clearance: float = ATOM_CLEARANCE,
) -> np.ndarray:
    """Traslación que separa los átomos entrantes de los existentes.

    Busca el menor `t >= 0` tal que, desplazando los entrantes `t * direction`,
    la distancia entre centros de ambas esferas envolventes sea al menos
    `r_entrante + r_existente + clearance + min_distance`. Los radios se
    miden hasta los centros atómicos, así que con `clearance > 0` ningún
    átomo pegado coincide con uno existente. Si ya están separadas el
    desplazamiento es nulo.

    Args:
        incoming: Posiciones de los átomos que se van a insertar.
        existing: Posiciones de los átomos ya presentes.
        min_distance: Holgura mínima entre las superficies de las esferas.
        direction: Dirección fija de búsqueda.
        clearance: Separación fija entre átomos de ambos conjuntos.

    Returns:
        Vector de desplazamiento (ceros si algún conjunto está vacío).
    """
    incoming = as_points(incoming)
    existing = as_points(existing)
    if len(incoming) == 0 or len(existing) == 0:
        return np.zeros(3, dtype=float)
    unit = normalize(direction)
    if is_zero(unit):
        unit = normalize(DEFAULT_DIRECTION)

    center_in, radius_in = bounding_sphere(incoming)
    center_ex, radius_ex = bounding_sphere(existing)
    required = radius_in + radius_ex + max(clearance, 0.0) + max(min_distance, 0.0)
    separation = center_in - center_ex
    gap = float(np.dot(separation, separation))
    if gap >= required * required:
        return np.zeros(3, dtype=float)

    # |separation + t * unit| = required  ->  t^2 + 2 b t + c = 0
    b = float(np.dot(separation, unit))
    c = gap - required * required
    t = -b + math.sqrt(b * b - c)
    return unit * t
