"""Statement vocabulary for proof steps.

A statement is a kind plus an ordered tuple of point names (and an optional
numeric constant for angle measures).  The same type is used for concrete
facts about a construction and for the placeholder templates stored in the
reason catalog.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Literal, Optional, Tuple, Union

PointName = str

StatementKind = Literal[
    "points-distinct",
    "point-on-line",
    "line-equals-line",
    "rays-form-line",
    "unique-line",
    "intersection-equals",
    "angle-equals-constant",
    "angle-equals-angle",
    "angle-less-than-angle",
    "angle-greater-than-angle",
    "angle-leq-angle",
    "angle-geq-angle",
    "segment-equals-segment",
    "triangles-congruent",
    "triangle-angles-sum-180",
    "point-midpoint-of-segment",
]

STATEMENT_POINT_COUNTS: Dict[str, int] = {
    "points-distinct": 2,
    "point-on-line": 3,
    "line-equals-line": 4,
    "rays-form-line": 3,
    "unique-line": 2,
    "intersection-equals": 5,
    "angle-equals-constant": 3,
    "angle-equals-angle": 6,
    "angle-less-than-angle": 6,
    "angle-greater-than-angle": 6,
    "angle-leq-angle": 6,
    "angle-geq-angle": 6,
    "segment-equals-segment": 4,
    "triangles-congruent": 6,
    "triangle-angles-sum-180": 3,
    "point-midpoint-of-segment": 3,
}

ANGLE_COMPARISON_KINDS = (
    "angle-less-than-angle",
    "angle-greater-than-angle",
    "angle-leq-angle",
    "angle-geq-angle",
)

# Orderings of the second triangle's vertices relative to the first.
TRIANGLE_SECOND_PERMS: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (0, 2, 1),
    (1, 0, 2),
    (1, 2, 0),
    (2, 0, 1),
    (2, 1, 0),
)


class StatementError(ValueError):
    pass


@dataclass(frozen=True)
class Statement:
    kind: str
    point_names: Tuple[PointName, ...]
    constant: Optional[float] = None

    def __post_init__(self) -> None:
        expected = STATEMENT_POINT_COUNTS.get(self.kind)
        if expected is None:
            raise StatementError(f"unknown statement kind {self.kind!r}")
        names = tuple(self.point_names)
        if len(names) != expected:
            raise StatementError(
                f"{self.kind} expects {expected} point names, got {len(names)}"
            )
        if not all(isinstance(name, str) and name for name in names):
            raise StatementError(f"{self.kind} point names must be non-empty strings")
        object.__setattr__(self, "point_names", names)
        if self.constant is not None:
            object.__setattr__(self, "constant", float(self.constant))

    def with_names(self, names: Iterable[PointName]) -> "Statement":
        """Return a copy carrying ``names`` (and the same constant)."""

        return Statement(self.kind, tuple(names), self.constant)

    def triple(self, index: int) -> Tuple[PointName, PointName, PointName]:
        """Return the ``index``-th group of three names (angle or triangle)."""

        start = 3 * index
        a, b, c = self.point_names[start:start + 3]
        return a, b, c

    def __str__(self) -> str:
        from .printer import statement_to_string

        return statement_to_string(self)


StatementLike = Union[Statement, Dict[str, object]]


def make_statement(
    kind: str, point_names: Iterable[PointName], constant: Optional[float] = None
) -> Statement:
    return Statement(kind, tuple(point_names), constant)


def statement_from_dict(payload: Dict[str, object]) -> Statement:
    """Build a statement from ``{"kind", "pointNames", "constant"?}``.

    Both the camelCase record keys and ``point_names`` are accepted.
    """

    kind = payload.get("kind")
    names = payload.get("pointNames", payload.get("point_names"))
    if not isinstance(kind, str):
        raise StatementError(f"statement kind must be a string, got {kind!r}")
    if not isinstance(names, (list, tuple)):
        raise StatementError(f"statement pointNames must be a list, got {names!r}")
    constant = payload.get("constant")
    if constant is not None and not isinstance(constant, (int, float)):
        raise StatementError(f"statement constant must be numeric, got {constant!r}")
    return Statement(kind, tuple(str(name) for name in names), constant)


def statement_to_dict(statement: Statement) -> Dict[str, object]:
    out: Dict[str, object] = {
        "kind": statement.kind,
        "pointNames": list(statement.point_names),
    }
    if statement.constant is not None:
        out["constant"] = statement.constant
    return out
