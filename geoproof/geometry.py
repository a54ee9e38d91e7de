from __future__ import annotations

import math
from typing import List, Tuple

import numpy as np

Point = Tuple[float, float]

_EPS = 1e-12


def _vec(a: Point, b: Point) -> Point:
    return b[0] - a[0], b[1] - a[1]


def _dot(a: Point, b: Point) -> float:
    return a[0] * b[0] + a[1] * b[1]


def _cross(a: Point, b: Point) -> float:
    return a[0] * b[1] - a[1] * b[0]


def distance(a: Point, b: Point) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def dist_to_line(p: Point, a: Point, b: Point) -> float:
    """Distance from ``p`` to the infinite line through ``a`` and ``b``."""

    d = _vec(a, b)
    length = math.hypot(*d)
    if length < _EPS:
        return distance(p, a)
    return abs(_cross(d, _vec(a, p))) / length


def _project_parameter(p: Point, a: Point, b: Point) -> float:
    d = _vec(a, b)
    return _dot(_vec(a, p), d) / _dot(d, d)


def dist_to_segment(p: Point, a: Point, b: Point) -> float:
    d = _vec(a, b)
    if _dot(d, d) < _EPS * _EPS:
        return distance(p, a)
    t = min(1.0, max(0.0, _project_parameter(p, a, b)))
    return distance(p, (a[0] + t * d[0], a[1] + t * d[1]))


def dist_to_ray(p: Point, a: Point, b: Point) -> float:
    """Distance from ``p`` to the ray starting at ``a`` through ``b``."""

    d = _vec(a, b)
    if _dot(d, d) < _EPS * _EPS:
        return distance(p, a)
    t = _project_parameter(p, a, b)
    if t < 0:
        return distance(p, a)
    return distance(p, (a[0] + t * d[0], a[1] + t * d[1]))


def intersect_line_line(a: Point, b: Point, c: Point, d: Point) -> List[Point]:
    """Intersection of lines AB and CD; empty when they are parallel."""

    r = _vec(a, b)
    s = _vec(c, d)
    denom = _cross(r, s)
    if abs(denom) < _EPS:
        return []
    t = _cross(_vec(a, c), s) / denom
    return [(a[0] + t * r[0], a[1] + t * r[1])]


def angle_at_vertex_deg(arm1: Point, vertex: Point, arm2: Point) -> float:
    """Unsigned angle ``arm1-vertex-arm2`` in degrees, in ``[0, 180]``."""

    u = np.array(_vec(vertex, arm1), dtype=float)
    v = np.array(_vec(vertex, arm2), dtype=float)
    nu = float(np.linalg.norm(u))
    nv = float(np.linalg.norm(v))
    if nu < _EPS or nv < _EPS:
        return 0.0
    cos_theta = float(np.clip(np.dot(u, v) / (nu * nv), -1.0, 1.0))
    return float(np.degrees(np.arccos(cos_theta)))

