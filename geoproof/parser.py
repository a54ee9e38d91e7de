"""Best-effort free-text parser for proof-step outcomes.

The parser is a first-match-wins classifier.  Cues are tested in a fixed
order and the first cue whose surface marks and point-token count fit wins,
even when a later cue would describe the text better.  For example the
rendered form of a rays-form-line statement (``ray AB ∪ ray CB = line AB``)
contains ``line `` and ``=`` and is therefore read as a line equality.
Callers and tests rely on this precedence, so it must not be reordered.
"""

import logging
import re
from typing import Callable, List, Optional

from .statements import Statement, StatementError

logger = logging.getLogger(__name__)

PARSE_HINT = (
    "Could not parse outcome. Use forms like: A ≠ B, C ∈ line AB, "
    "E = line AB ∩ line CD, Let M be midpoint of AB, ∠AMC = 90°, "
    "∠AMC = ∠AMB, AB = AC, ΔAMB ≅ ΔAMC"
)

LATEX_REPLACEMENTS = {
    "ang": "∠",
    "angle": "∠",
    "triangle": "Δ",
    "tri": "Δ",
    "deg": "°",
    "degree": "°",
    "circ": "°",
    "perp": "⊥",
    "cong": "≅",
    "equiv": "≡",
    "cup": "∪",
    "cap": "∩",
    "in": "∈",
    "neq": "≠",
    "ne": "≠",
    "exists": "∃",
    "forall": "∀",
    "cdot": "·",
    "to": "→",
    "rightarrow": "→",
    "leftarrow": "←",
    "leq": "≤",
    "geq": "≥",
}

_id_re = re.compile(r"[A-Za-z][A-Za-z0-9_]*")
_macro_re = re.compile(r"\\([A-Za-z]+)")
_degree_re = re.compile(r"(\d+(?:\.\d+)?)\s*°")
_midpoint_res = (
    re.compile(r"let\s+(\w+)\s+be\s+midpoint\s+of\s+(\w+)", re.IGNORECASE),
    re.compile(r"(\w+)\s+is\s+midpoint\s+of\s+(\w+)", re.IGNORECASE),
    re.compile(r"(\w+)\s+be\s+midpoint\s+of\s+(\w+)", re.IGNORECASE),
)

_KEYWORDS = frozenset(
    {
        "line",
        "lines",
        "ray",
        "rays",
        "angle",
        "angles",
        "triangle",
        "triangles",
        "midpoint",
        "of",
        "is",
        "let",
        "be",
        "in",
        "through",
        "unique",
        "exists",
        "sum",
        "to",
        "congruent",
        "and",
        "deg",
        "degree",
        "degrees",
    }
)


def expand_latex_macros(text: str) -> str:
    """Replace known ``\\name`` macros by their symbols; unknown ones stay."""

    def _sub(m: "re.Match[str]") -> str:
        return LATEX_REPLACEMENTS.get(m.group(1), m.group(0))

    return _macro_re.sub(_sub, text)


def extract_point_names(text: str) -> List[str]:
    """Return point-name tokens left to right.

    English keywords and other lowercase words are skipped.  An uppercase run
    such as ``ABC`` is shorthand for the single-letter points ``A, B, C``;
    tokens containing digits or underscores (``P1``, ``A_2``) are kept whole.
    """

    names: List[str] = []
    for m in _id_re.finditer(text):
        tok = m.group(0)
        if tok.lower() in _KEYWORDS:
            continue
        if tok.isalpha() and len(tok) > 1:
            if tok.islower():
                continue
            if tok.isupper():
                names.extend(tok)
                continue
        names.append(tok)
    return names


def _has_angle_mark(t: str) -> bool:
    return "∠" in t or "angle" in t.lower()


def _statement(kind: str, names: List[str], constant: Optional[float] = None) -> Optional[Statement]:
    try:
        return Statement(kind, tuple(names), constant)
    except StatementError:
        return None


def _parse_midpoint(t: str) -> Optional[Statement]:
    for pattern in _midpoint_res:
        match = pattern.search(t)
        if match:
            point, seg = match.group(1), match.group(2)
            if len(seg) >= 2:
                return _statement("point-midpoint-of-segment", [point, seg[0], seg[1]])
            return None
    return None


def _parse_segment_equality(t: str, names: List[str]) -> Optional[Statement]:
    sides = [side.strip() for side in t.split("=")]
    if len(sides) >= 2 and sides[0] and sides[1]:
        left = extract_point_names(sides[0])
        right = extract_point_names(sides[1])
        if len(left) >= 2 and len(right) >= 2:
            return _statement("segment-equals-segment", [left[0], left[1], right[0], right[1]])
    if len(names) >= 4:
        return _statement("segment-equals-segment", names[:4])
    return None


def _angle_comparison(kind: str) -> Callable[[str, List[str]], Optional[Statement]]:
    def parse(t: str, names: List[str]) -> Optional[Statement]:
        if len(names) >= 6:
            return _statement(kind, names[:6])
        return None

    return parse


def parse_outcome_statement(text: str) -> Optional[Statement]:
    """Parse a written outcome into a :class:`Statement`, or ``None``."""

    t = expand_latex_macros(text or "").strip()
    if not t:
        return None
    names = extract_point_names(t)
    lower = t.lower()

    if "≠" in t and len(names) >= 2:
        return _statement("points-distinct", names[:2])
    if ("∈" in t or " in line " in lower) and len(names) >= 3:
        return _statement("point-on-line", [names[0], names[-2], names[-1]])
    if "line " in t and "=" in t and len(names) >= 4:
        return _statement("line-equals-line", names[:4])
    if "ray " in t and "∪" in t and "line " in t and len(names) >= 3:
        return _statement("rays-form-line", names[:3])
    if ("∃" in t or "unique" in lower) and "line" in lower and len(names) >= 2:
        return _statement("unique-line", names[:2])
    if "∩" in t and len(names) >= 5:
        return _statement("intersection-equals", names[:5])
    if "midpoint" in lower and "of" in lower:
        parsed = _parse_midpoint(t)
        if parsed is not None:
            return parsed
    if _has_angle_mark(t) and "°" in t and len(names) >= 3:
        deg = _degree_re.search(t)
        constant = float(deg.group(1)) if deg else None
        return _statement("angle-equals-constant", names[:3], constant)
    if _has_angle_mark(t) and "=" in t and len(names) >= 6:
        return _statement("angle-equals-angle", names[:6])

    comparisons = (
        ("≤", "angle-leq-angle"),
        ("≥", "angle-geq-angle"),
        ("<", "angle-less-than-angle"),
        (">", "angle-greater-than-angle"),
    )
    if _has_angle_mark(t):
        for symbol, kind in comparisons:
            if symbol in t:
                parsed = _angle_comparison(kind)(t, names)
                if parsed is not None:
                    return parsed

    if "=" in t and len(names) >= 2 and "line " not in t and "ray " not in t:
        parsed = _parse_segment_equality(t, names)
        if parsed is not None:
            return parsed
    if ("triangle" in lower and ("180" in t or "°" in t)) or ("∠" in t and "+" in t and "180" in t):
        if len(names) >= 3:
            return _statement("triangle-angles-sum-180", names[:3])
    if ("≅" in t or "congruent" in lower) and len(names) >= 6:
        return _statement("triangles-congruent", names[:6])

    logger.debug("parse_outcome_statement: no cue matched %r", text)
    return None
