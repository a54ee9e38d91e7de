"""Resolved construction context: named points and lines/rays through them."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, TypedDict, Union, cast

from .config import active_tolerances
from .geometry import Point, dist_to_line, dist_to_ray

logger = logging.getLogger(__name__)


class SnapshotError(ValueError):
    pass


class GeomObject(TypedDict, total=False):
    """Plain geometry entity as produced by the drawing surface.

    ``type`` is one of point/line/ray/segment/angle/circle; only points are
    used by the proof checker.
    """

    type: str
    x: float
    y: float
    x1: float
    y1: float
    x2: float
    y2: float
    vx: float
    vy: float
    cx: float
    cy: float
    r: float


@dataclass
class SnapshotEntry:
    geom: GeomObject
    name: Optional[str] = None
    label_angle: Optional[float] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "SnapshotEntry":
        geom = payload.get("geom") or {}
        if not isinstance(geom, Mapping):
            raise SnapshotError(f"snapshot geom must be a mapping, got {geom!r}")
        label_angle = payload.get("labelAngle", payload.get("label_angle"))
        if label_angle is not None and not _is_number(label_angle):
            raise SnapshotError(f"snapshot labelAngle must be numeric, got {label_angle!r}")
        name = payload.get("name")
        return cls(
            geom=cast(GeomObject, dict(geom)),
            name=None if name is None else str(name),
            label_angle=None if label_angle is None else float(label_angle),
        )


SnapshotLike = Union[SnapshotEntry, Mapping[str, Any]]


@dataclass(frozen=True)
class LineLike:
    """Line or ray given by two points ``(x1, y1) -> (x2, y2)``."""

    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def start(self) -> Point:
        return self.x1, self.y1

    @property
    def end(self) -> Point:
        return self.x2, self.y2

    @property
    def direction(self) -> Point:
        return self.x2 - self.x1, self.y2 - self.y1


@dataclass
class ResolvedContext:
    points: Dict[str, Point] = field(default_factory=dict)

    def has_point(self, name: str) -> bool:
        return name in self.points

    def point(self, name: str) -> Optional[Point]:
        return self.points.get(name)

    def _two_points(self, a: str, b: str) -> Optional[LineLike]:
        p_a = self.points.get(a)
        p_b = self.points.get(b)
        if p_a is None or p_b is None:
            return None
        if math.hypot(p_b[0] - p_a[0], p_b[1] - p_a[1]) < active_tolerances().coincidence:
            return None
        return LineLike(p_a[0], p_a[1], p_b[0], p_b[1])

    def line_through(self, a: str, b: str) -> Optional[LineLike]:
        return self._two_points(a, b)

    def ray_from_through(self, a: str, b: str) -> Optional[LineLike]:
        return self._two_points(a, b)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _coerce_entry(entry: SnapshotLike) -> SnapshotEntry:
    if isinstance(entry, SnapshotEntry):
        return entry
    if not isinstance(entry, Mapping):
        raise SnapshotError(f"snapshot entry must be a mapping, got {entry!r}")
    return SnapshotEntry.from_dict(entry)


def _point_coords(entry: SnapshotEntry) -> Point:
    geom = entry.geom
    x, y = geom.get("x"), geom.get("y")
    if not _is_number(x) or not _is_number(y):
        raise SnapshotError(f"point {entry.name!r} needs numeric x and y, got {dict(geom)!r}")
    return float(x), float(y)


def resolve_context(snapshot: Iterable[SnapshotLike]) -> ResolvedContext:
    """Index the named points of ``snapshot``; the first entry for a name wins.

    Raises :class:`SnapshotError` for entries that are not mappings and for
    point entities without numeric coordinates.
    """

    points: Dict[str, Point] = {}
    for raw in snapshot:
        entry = _coerce_entry(raw)
        if entry.geom.get("type") != "point":
            continue
        coords = _point_coords(entry)
        name = (entry.name or "").strip()
        if not name or name in points:
            continue
        points[name] = coords
    logger.debug("resolve_context: %d named point(s)", len(points))
    return ResolvedContext(points=points)


def point_on_line(p: Point, line: LineLike, tolerance: Optional[float] = None) -> bool:
    tol = active_tolerances().on_entity if tolerance is None else tolerance
    return dist_to_line(p, line.start, line.end) <= tol


def point_on_ray(p: Point, ray: LineLike, tolerance: Optional[float] = None) -> bool:
    tol = active_tolerances().on_entity if tolerance is None else tolerance
    return dist_to_ray(p, ray.start, ray.end) <= tol


def line_key(line: LineLike) -> Tuple[Any, ...]:
    """Canonical key of the infinite line; equal for any two defining points."""

    grid = active_tolerances().line
    dx, dy = line.direction
    length = math.hypot(dx, dy)
    if length < active_tolerances().coincidence:
        return ("point", line.x1, line.y1)
    nx = dx / length
    ny = dy / length
    d = line.x1 * ny - line.y1 * nx
    if nx < 0 or (nx == 0 and ny < 0):
        nx, ny, d = -nx, -ny, -d
    return (round(nx / grid), round(ny / grid), round(d / grid))


def same_line(l1: LineLike, l2: LineLike) -> bool:
    return line_key(l1) == line_key(l2)


def are_opposite_rays(ray1: LineLike, ray2: LineLike, line_tol: Optional[float] = None) -> bool:
    tol = active_tolerances().line if line_tol is None else line_tol
    d1 = ray1.direction
    d2 = ray2.direction
    len1 = math.hypot(*d1)
    len2 = math.hypot(*d2)
    if len1 < active_tolerances().coincidence or len2 < active_tolerances().coincidence:
        return False
    cross = abs(d1[0] * d2[1] - d1[1] * d2[0])
    if cross > tol * len1 * len2:
        return False
    if d1[0] * d2[0] + d1[1] * d2[1] >= 0:
        return False
    on_line1 = dist_to_line(ray2.start, ray1.start, ray1.end) <= tol
    on_line2 = dist_to_line(ray1.start, ray2.start, ray2.end) <= tol
    return on_line1 and on_line2
