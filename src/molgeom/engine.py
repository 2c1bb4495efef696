"""Transformaciones rígidas para fijar longitudes, ángulos y diedros.

Todas las funciones son puras: reciben posiciones actuales y un valor
objetivo, y devuelven las nuevas posiciones del fragmento (matriz `(n, 3)`)
sin tocar la topología. Los ángulos cruzan la interfaz pública en grados; el
cálculo interno se hace en radianes.

Convenciones:
- Longitud: traslación pura del fragmento a lo largo de fixed -> moving.
- Ángulo: rotación alrededor de `pivot` sobre el eje v1 x v2.
- Diedro: rotación alrededor de la recta que pasa por `p3` con dirección
  p3 - p2. El anclaje es siempre `p3`, el extremo del eje unido al
  fragmento móvil.
"""
from __future__ import annotations

import math
from typing import Optional

import numpy as np

from molgeom.vectors import (
    Vec3,
    angle_between,
    as_points,
    as_vec3,
    is_zero,
    norm,
    normalize,
    perpendicular,
    rotate_about_point,
    wrap_radians,
)

LENGTH_TOLERANCE = 1e-6
ANGLE_TOLERANCE = 1e-9
# Relación |v1 x v2| / (|v1| |v2|) por debajo de la cual se asume colinealidad.
COLLINEAR_TOLERANCE = 1e-10

FALLBACK_DIRECTION = np.array([1.0, 0.0, 0.0])


def bond_length(fixed: Vec3, moving: Vec3, fragment, target: float) -> np.ndarray:
    """Traslada el fragmento para que |moving - fixed| sea `target`.

    Args:
        fixed: Posición del átomo fijo.
        moving: Posición del átomo que se mueve (incluido en el fragmento).
        fragment: Posiciones del fragmento móvil.
        target: Distancia objetivo en Å.

    Returns:
        Nuevas posiciones del fragmento, en el mismo orden.
    """
    fixed = as_vec3(fixed)
    moving = as_vec3(moving)
    points = as_points(fragment)
    current = norm(moving - fixed)
    if abs(current - target) <= LENGTH_TOLERANCE:
        return points
    direction = normalize(moving - fixed)
    if is_zero(direction):
        direction = FALLBACK_DIRECTION.copy()
    displacement = fixed + direction * target - moving
    return points + displacement


def current_angle(p1: Vec3, pivot: Vec3, p3: Vec3) -> float:
    """Ángulo p1-pivot-p3 en grados."""
    pivot = as_vec3(pivot)
    return math.degrees(angle_between(as_vec3(p1) - pivot, as_vec3(p3) - pivot))


def angle(p1: Vec3, pivot: Vec3, p3: Vec3, fragment, target_deg: float) -> np.ndarray:
    """Rota el fragmento alrededor de `pivot` hasta el ángulo objetivo.

    Si v1 y v2 son paralelos o antiparalelos se usa como eje una
    perpendicular determinista a v1 (ver `vectors.perpendicular`); el
    ángulo final sigue siendo el objetivo.

    Args:
        p1: Átomo del lado fijo.
        pivot: Vértice del ángulo.
        p3: Átomo del lado móvil.
        fragment: Posiciones del fragmento que contiene a `p3`.
        target_deg: Ángulo objetivo en grados.

    Returns:
        Nuevas posiciones del fragmento.
    """
    pivot = as_vec3(pivot)
    v1 = as_vec3(p1) - pivot
    v2 = as_vec3(p3) - pivot
    points = as_points(fragment)
    if is_zero(v2):
        return points
    delta = math.radians(target_deg) - angle_between(v1, v2)
    if abs(delta) <= ANGLE_TOLERANCE:
        return points
    axis = _angle_axis(v1, v2)
    return rotate_about_point(points, pivot, axis, delta)


def _angle_axis(v1: np.ndarray, v2: np.ndarray) -> np.ndarray:
    if is_zero(v1):
        return perpendicular(v2)
    if _collinear(v1, v2):
        return perpendicular(v1)
    return normalize(np.cross(v1, v2))


def _collinear(v1: np.ndarray, v2: np.ndarray) -> bool:
    return norm(np.cross(v1, v2)) <= COLLINEAR_TOLERANCE * norm(v1) * norm(v2)


def current_dihedral(p1: Vec3, p2: Vec3, p3: Vec3, p4: Vec3) -> float:
    """Diedro p1-p2-p3-p4 en grados, en el intervalo (-180, 180]."""
    return math.degrees(_dihedral_radians(as_vec3(p1), as_vec3(p2), as_vec3(p3), as_vec3(p4)))


def _dihedral_radians(p1: np.ndarray, p2: np.ndarray, p3: np.ndarray, p4: np.ndarray) -> float:
    axis = normalize(p3 - p2)
    v1 = p1 - p2
    v2 = p4 - p3
    proj1 = v1 - axis * float(np.dot(v1, axis))
    proj2 = v2 - axis * float(np.dot(v2, axis))
    return math.atan2(float(np.dot(np.cross(proj1, proj2), axis)), float(np.dot(proj1, proj2)))


def dihedral(p1: Vec3, p2: Vec3, p3: Vec3, p4: Vec3, fragment, target_deg: float) -> np.ndarray:
    """Rota el fragmento alrededor del eje p2-p3 hasta el diedro objetivo.

    Args:
        p1: Primer átomo (lado fijo).
        p2: Inicio del eje.
        p3: Fin del eje; ancla de la rotación.
        p4: Último átomo (lado móvil).
        fragment: Posiciones del fragmento que contiene a `p3` y `p4`.
        target_deg: Diedro objetivo en grados.

    Returns:
        Nuevas posiciones del fragmento.
    """
    p1, p2, p3, p4 = (as_vec3(p) for p in (p1, p2, p3, p4))
    points = as_points(fragment)
    axis = normalize(p3 - p2)
    if is_zero(axis):
        return points
    delta = wrap_radians(math.radians(target_deg) - _dihedral_radians(p1, p2, p3, p4))
    if abs(delta) <= ANGLE_TOLERANCE:
        return points
    return rotate_about_point(points, p3, axis, delta)


def bond_length_degeneracy(fixed: Vec3, moving: Vec3) -> Optional[str]:
    """Describe la degeneración de una edición de longitud, si la hay."""
    if is_zero(as_vec3(moving) - as_vec3(fixed)):
        return "Atoms are coincident; moved along +x"
    return None


def angle_degeneracy(p1: Vec3, pivot: Vec3, p3: Vec3) -> Optional[str]:
    """Describe la degeneración de una edición de ángulo, si la hay."""
    pivot = as_vec3(pivot)
    v1 = as_vec3(p1) - pivot
    v2 = as_vec3(p3) - pivot
    if is_zero(v2):
        return "Moving atom coincides with the vertex; angle left unchanged"
    if is_zero(v1):
        return "Fixed atom coincides with the vertex; used a fallback rotation axis"
    if _collinear(v1, v2):
        return "Atoms are collinear; used a fallback rotation axis"
    return None


def dihedral_degeneracy(p1: Vec3, p2: Vec3, p3: Vec3, p4: Vec3) -> Optional[str]:
    """Describe la degeneración de una edición de diedro, si la hay."""
    p1, p2, p3, p4 = (as_vec3(p) for p in (p1, p2, p3, p4))
    axis = normalize(p3 - p2)
    if is_zero(axis):
        return "Axis atoms are coincident; dihedral left unchanged"
    for outer, base in ((p1, p2), (p4, p3)):
        vec = outer - base
        if is_zero(vec - axis * float(np.dot(vec, axis))):
            return "An end atom lies on the rotation axis; dihedral is undefined"
    return None
