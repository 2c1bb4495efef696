"""Mediciones y transformaciones de molécula completa."""

from __future__ import annotations

import math
from typing import Optional, Sequence

import numpy as np

from molcore.elements import atomic_weight
from molgeom.engine import current_angle, current_dihedral
from molgeom.vectors import Vec3, as_points, as_vec3, norm, rotation_matrix


def distance(p1: Vec3, p2: Vec3) -> float:
    return norm(as_vec3(p2) - as_vec3(p1))


def angle_deg(p1: Vec3, pivot: Vec3, p3: Vec3) -> float:
    return current_angle(p1, pivot, p3)


def dihedral_deg(p1: Vec3, p2: Vec3, p3: Vec3, p4: Vec3) -> float:
    return current_dihedral(p1, p2, p3, p4)


def centroid(points) -> Optional[np.ndarray]:
    """Centro geométrico de un conjunto de puntos (`None` si está vacío)."""
    points = as_points(points)
    if len(points) == 0:
        return None
    return points.mean(axis=0)


def center_of_mass(elements: Sequence[str], points) -> Optional[np.ndarray]:
    """Centro de masas ponderado por el peso atómico de cada elemento.

    Args:
        elements: Símbolos, en el mismo orden que `points`.
        points: Posiciones `(n, 3)`.

    Returns:
        Vector con el centro de masas, o `None` si no hay átomos.
    """
    points = as_points(points)
    if len(points) == 0:
        return None
    weights = np.array([atomic_weight(element) for element in elements], dtype=float)
    total = float(weights.sum())
    if total <= 0.0:
        return points.mean(axis=0)
    return (points * weights[:, None]).sum(axis=0) / total


def translated(points, offset: Vec3) -> np.ndarray:
    return as_points(points) + as_vec3(offset)


def euler_matrix(rx_deg: float, ry_deg: float, rz_deg: float) -> np.ndarray:
    """Matriz de rotación para ángulos de Euler en grados (orden XYZ)."""
    rx = rotation_matrix((1.0, 0.0, 0.0), math.radians(rx_deg))
    ry = rotation_matrix((0.0, 1.0, 0.0), math.radians(ry_deg))
    rz = rotation_matrix((0.0, 0.0, 1.0), math.radians(rz_deg))
    return rx @ ry @ rz


def rotated(points, rx_deg: float, ry_deg: float, rz_deg: float, center: Optional[Vec3] = None) -> np.ndarray:
    """Rota los puntos con ángulos de Euler alrededor de `center`.

    Si no se indica centro se usa el centroide de los propios puntos, de
    modo que la molécula gira sobre sí misma.
    """
    points = as_points(points)
    if len(points) == 0:
        return points
    origin = centroid(points) if center is None else as_vec3(center)
    matrix = euler_matrix(rx_deg, ry_deg, rz_deg)
    return (points - origin) @ matrix.T + origin
