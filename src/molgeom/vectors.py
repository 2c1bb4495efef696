"""Utilidades vectoriales 3D sobre numpy.

Funciones puras: reciben vectores o matrices de posiciones y devuelven
arreglos nuevos, sin modificar las entradas.
"""
from __future__ import annotations

import math
from typing import Sequence, Union

import numpy as np

Vec3 = Union[Sequence[float], np.ndarray]

# Por debajo de esta norma un vector se considera nulo.
ZERO_NORM = 1e-12


def as_vec3(value: Vec3) -> np.ndarray:
    """Convierte una secuencia de tres números en un vector float."""
    vec = np.asarray(value, dtype=float).reshape(3)
    return vec.copy()


def as_points(values) -> np.ndarray:
    """Convierte una colección de puntos en una matriz `(n, 3)`."""
    points = np.asarray(values, dtype=float)
    if points.size == 0:
        return np.zeros((0, 3), dtype=float)
    return points.reshape(-1, 3).copy()


def norm(vec: Vec3) -> float:
    return float(np.linalg.norm(vec))


def is_zero(vec: Vec3) -> bool:
    return norm(vec) <= ZERO_NORM


def normalize(vec: Vec3) -> np.ndarray:
    """Devuelve el vector unitario; un vector nulo devuelve ceros."""
    vec = as_vec3(vec)
    length = norm(vec)
    if length <= ZERO_NORM:
        return np.zeros(3, dtype=float)
    return vec / length


def angle_between(v1: Vec3, v2: Vec3) -> float:
    """Ángulo (radianes, 0..pi) entre dos vectores.

    Usa atan2(|v1 x v2|, v1 . v2), estable cerca de 0 y de pi. Si alguno
    es nulo devuelve 0.
    """
    v1 = as_vec3(v1)
    v2 = as_vec3(v2)
    if is_zero(v1) or is_zero(v2):
        return 0.0
    return math.atan2(norm(np.cross(v1, v2)), float(np.dot(v1, v2)))


def perpendicular(vec: Vec3) -> np.ndarray:
    """Vector unitario perpendicular a `vec`, elegido de forma determinista.

    Se cruza `vec` con el eje cartesiano en el que `vec` tiene la menor
    componente absoluta (empates: x, luego y, luego z).
    """
    vec = as_vec3(vec)
    if is_zero(vec):
        return np.array([0.0, 0.0, 1.0])
    axis_index = int(np.argmin(np.abs(vec)))
    basis = np.zeros(3, dtype=float)
    basis[axis_index] = 1.0
    return normalize(np.cross(vec, basis))


def rotation_matrix(axis: Vec3, radians: float) -> np.ndarray:
    """Matriz de rotación (regla de Rodrigues) alrededor de un eje unitario."""
    axis = normalize(axis)
    x, y, z = axis
    c = math.cos(radians)
    s = math.sin(radians)
    t = 1.0 - c
    return np.array(
        [
            [t * x * x + c, t * x * y - s * z, t * x * z + s * y],
            [t * x * y + s * z, t * y * y + c, t * y * z - s * x],
            [t * x * z - s * y, t * y * z + s * x, t * z * z + c],
        ]
    )


def rotate_about_point(points, center: Vec3, axis: Vec3, radians: float) -> np.ndarray:
    """Rota un conjunto de puntos alrededor de la recta (center, axis)."""
    points = as_points(points)
    center = as_vec3(center)
    matrix = rotation_matrix(axis, radians)
    return (points - center) @ matrix.T + center


def wrap_radians(value: float) -> float:
    """Normaliza un ángulo al intervalo (-pi, pi]."""
    wrapped = math.fmod(value + math.pi, 2.0 * math.pi)
    if wrapped <= 0.0:
        wrapped += 2.0 * math.pi
    return wrapped - math.pi
