"""Numeric oracle: does a concrete statement hold in the construction?"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from .config import active_tolerances
from .context import ResolvedContext, are_opposite_rays, point_on_line, same_line
from .geometry import Point, angle_at_vertex_deg, dist_to_segment, distance, intersect_line_line
from .logging_utils import apply_debug_logging
from .statements import Statement

logger = logging.getLogger(__name__)

Checker = Callable[[ResolvedContext, Statement], bool]


def _resolve_all(ctx: ResolvedContext, names) -> Optional[List[Point]]:
    out: List[Point] = []
    for name in names:
        p = ctx.point(name)
        if p is None:
            return None
        out.append(p)
    return out


def _measure(ctx: ResolvedContext, names) -> Optional[float]:
    pts = _resolve_all(ctx, names)
    if pts is None:
        return None
    return angle_at_vertex_deg(pts[0], pts[1], pts[2])


def _points_distinct(ctx: ResolvedContext, s: Statement) -> bool:
    pts = _resolve_all(ctx, s.point_names)
    if pts is None:
        return False
    return distance(pts[0], pts[1]) >= active_tolerances().line


def _point_on_line(ctx: ResolvedContext, s: Statement) -> bool:
    c, a, b = s.point_names
    line = ctx.line_through(a, b)
    p_c = ctx.point(c)
    if line is None or p_c is None:
        return False
    return point_on_line(p_c, line)


def _line_equals_line(ctx: ResolvedContext, s: Statement) -> bool:
    a1, c1, a2, b2 = s.point_names
    line1 = ctx.line_through(a1, c1)
    line2 = ctx.line_through(a2, b2)
    if line1 is None or line2 is None:
        return False
    return same_line(line1, line2)


def _rays_form_line(ctx: ResolvedContext, s: Statement) -> bool:
    a, b, c = s.point_names
    ray_ab = ctx.ray_from_through(a, b)
    ray_cb = ctx.ray_from_through(c, b)
    line_ab = ctx.line_through(a, b)
    if ray_ab is None or ray_cb is None or line_ab is None:
        return False
    if not are_opposite_rays(ray_ab, ray_cb):
        return False
    return same_line(ray_ab, line_ab) and same_line(ray_cb, line_ab)


def _unique_line(ctx: ResolvedContext, s: Statement) -> bool:
    return _points_distinct(ctx, Statement("points-distinct", s.point_names))


def _intersection_equals(ctx: ResolvedContext, s: Statement) -> bool:
    e, a, b, c, d = s.point_names
    line_ab = ctx.line_through(a, b)
    line_cd = ctx.line_through(c, d)
    p_e = ctx.point(e)
    if line_ab is None or line_cd is None or p_e is None:
        return False
    hits = intersect_line_line(line_ab.start, line_ab.end, line_cd.start, line_cd.end)
    if len(hits) != 1:
        return False
    return distance(hits[0], p_e) <= active_tolerances().on_entity


def _angle_equals_constant(ctx: ResolvedContext, s: Statement) -> bool:
    deg = _measure(ctx, s.point_names)
    if deg is None:
        return False
    if s.constant is None:
        return True
    return abs(deg - s.constant) <= active_tolerances().angle_deg


def _angle_pair(ctx: ResolvedContext, s: Statement):
    first = _measure(ctx, s.triple(0))
    second = _measure(ctx, s.triple(1))
    if first is None or second is None:
        return None
    return first, second


def _angle_equals_angle(ctx: ResolvedContext, s: Statement) -> bool:
    pair = _angle_pair(ctx, s)
    if pair is None:
        return False
    return abs(pair[0] - pair[1]) <= active_tolerances().angle_deg


def _segment_equals_segment(ctx: ResolvedContext, s: Statement) -> bool:
    pts = _resolve_all(ctx, s.point_names)
    if pts is None:
        return False
    len1 = distance(pts[0], pts[1])
    len2 = distance(pts[2], pts[3])
    return abs(len1 - len2) <= active_tolerances().length


def _triangles_congruent(ctx: ResolvedContext, s: Statement) -> bool:
    # Existence only; congruence itself comes from the congruence reasons.
    return all(ctx.has_point(name) for name in s.point_names)


def _point_midpoint(ctx: ResolvedContext, s: Statement) -> bool:
    pts = _resolve_all(ctx, s.point_names)
    if pts is None:
        return False
    m, a, b = pts
    tol = active_tolerances()
    on_segment = dist_to_segment(m, a, b) <= tol.on_entity
    return on_segment and abs(distance(m, a) - distance(m, b)) <= tol.length


_CHECKERS: Dict[str, Checker] = {
    "points-distinct": _points_distinct,
    "point-on-line": _point_on_line,
    "line-equals-line": _line_equals_line,
    "rays-form-line": _rays_form_line,
    "unique-line": _unique_line,
    "intersection-equals": _intersection_equals,
    "angle-equals-constant": _angle_equals_constant,
    "angle-equals-angle": _angle_equals_angle,
    "segment-equals-segment": _segment_equals_segment,
    "triangles-congruent": _triangles_congruent,
    "point-midpoint-of-segment": _point_midpoint,
}


def check_statement(ctx: ResolvedContext, statement: Statement) -> bool:
    """Whether ``statement`` holds in ``ctx``.

    Angle orderings and the triangle angle sum have no numeric rule: they are
    reachable only through the transitivity chains, the angle-sum theorem or
    the task givens, so they are always false here.
    """

    checker = _CHECKERS.get(statement.kind)
    if checker is None:
        return False
    return checker(ctx, statement)


apply_debug_logging(globals(), logger=logger, skip={"_resolve_all", "_measure"})
