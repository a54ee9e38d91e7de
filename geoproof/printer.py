from typing import TYPE_CHECKING, Optional, Sequence

from .statements import Statement

if TYPE_CHECKING:  # pragma: no cover
    from .verify import ProofStep

_COMPARISON_SYMBOLS = {
    "angle-equals-angle": "=",
    "angle-less-than-angle": "<",
    "angle-greater-than-angle": ">",
    "angle-leq-angle": "≤",
    "angle-geq-angle": "≥",
}


def number_str(value: Optional[float]) -> str:
    if value is None:
        return "·"
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def angle_str(points: Sequence[str]) -> str:
    return f"∠{points[0]}{points[1]}{points[2]}"


def triangle_str(points: Sequence[str]) -> str:
    return f"Δ{points[0]}{points[1]}{points[2]}"


def statement_to_string(s: Statement) -> str:
    p = s.point_names
    kind = s.kind
    if kind == "points-distinct":
        return f"{p[0]} ≠ {p[1]}"
    if kind == "point-on-line":
        return f"{p[0]} ∈ line {p[1]}{p[2]}"
    if kind == "line-equals-line":
        return f"line {p[0]}{p[1]} = line {p[2]}{p[3]}"
    if kind == "rays-form-line":
        return f"ray {p[0]}{p[1]} ∪ ray {p[2]}{p[1]} = line {p[0]}{p[1]}"
    if kind == "unique-line":
        return f"∃₁ line through {p[0]}, {p[1]}"
    if kind == "intersection-equals":
        return f"{p[0]} = line {p[1]}{p[2]} ∩ line {p[3]}{p[4]}"
    if kind == "angle-equals-constant":
        return f"{angle_str(p)} = {number_str(s.constant)}°"
    if kind in _COMPARISON_SYMBOLS:
        return f"{angle_str(p[:3])} {_COMPARISON_SYMBOLS[kind]} {angle_str(p[3:])}"
    if kind == "segment-equals-segment":
        return f"{p[0]}{p[1]} = {p[2]}{p[3]}"
    if kind == "triangles-congruent":
        return f"{triangle_str(p[:3])} ≅ {triangle_str(p[3:])}"
    if kind == "triangle-angles-sum-180":
        return f"angles of {triangle_str(p)} sum to 180°"
    if kind == "point-midpoint-of-segment":
        return f"{p[0]} is midpoint of {p[1]}{p[2]}"
    return kind


def format_refs(refs: Sequence[object]) -> str:
    return ", ".join(str(ref) for ref in refs)


def format_step(index: int, step: "ProofStep", reason_name: Optional[str] = None) -> str:
    """Render one numbered line of a proof listing."""

    reason = reason_name or step.reason_id
    refs = step.prerequisite_refs
    suffix = f"; from: {format_refs(refs)}" if refs else ""
    return f"{index}. {statement_to_string(step.outcome)}  [{reason}{suffix}]"
