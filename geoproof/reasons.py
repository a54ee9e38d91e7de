"""Reason catalog (axioms, theorems, definitions) and statement matching.

Schemas are written over small placeholder alphabets (``A``, ``B``, ``M``,
...).  A template is never checked against coordinates directly: it is first
substituted against the point names of a concrete outcome, either by
occurrence order (:func:`substitute_premise_by_occurrence`) or by mapping the
conclusion's distinct placeholders positionally
(:func:`get_conclusion_for_reason`).
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Literal, Mapping, MutableMapping, Optional, Sequence, Tuple

from .check import check_statement
from .context import ResolvedContext
from .logging_utils import apply_debug_logging
from .printer import statement_to_string
from .statements import Statement

logger = logging.getLogger(__name__)

ReasonType = Literal["axiom", "theorem", "definition"]

REASON_GIVEN = "given"
REASON_DEFINITION = "definition"


class Matcher(enum.Enum):
    """How the verifier decides whether a step follows from its reason."""

    GIVEN = "given"
    DEFINITION = "definition"
    REFLEXIVITY = "reflexivity"
    THALES = "thales"
    ANGLE_SUM = "angle-sum"
    TRANSITIVITY_EQUALS = "transitivity-equals"
    ANGLE_CHAIN = "angle-chain"
    SAS = "sas"
    ASA = "asa"
    AAS = "aas"
    SSS = "sss"
    HL = "hl"
    FROM_CONGRUENCE = "from-congruence"
    TEMPLATE = "template"


@dataclass(frozen=True)
class VerifyResult:
    ok: bool
    message: str

    def __bool__(self) -> bool:
        return self.ok


@dataclass(frozen=True)
class ReasonSchema:
    id: str
    name: str
    reason_type: ReasonType
    premises: Tuple[Statement, ...]
    conclusion: Statement
    matcher: Matcher = Matcher.TEMPLATE
    # Whether occurrence counters carry over from one premise to the next.
    shares_occurrence_counter: bool = False
    disabled: bool = False


def _s(kind: str, names: str, constant: Optional[float] = None) -> Statement:
    return Statement(kind, tuple(names), constant)


def _chain(reason_id: str, name: str, kind: str) -> ReasonSchema:
    return ReasonSchema(
        reason_id,
        name,
        "theorem",
        premises=(_s(kind, "AMBCND"), _s(kind, "CNDEPF")),
        conclusion=_s(kind, "AMBEPF"),
        matcher=Matcher.ANGLE_CHAIN,
    )


REASONS: Tuple[ReasonSchema, ...] = (
    ReasonSchema(
        REASON_GIVEN,
        "Given in task statement",
        "axiom",
        premises=(),
        conclusion=_s("points-distinct", "AB"),
        matcher=Matcher.GIVEN,
    ),
    ReasonSchema(
        REASON_DEFINITION,
        "Definition",
        "definition",
        premises=(),
        conclusion=_s("point-on-line", "PAB"),
        matcher=Matcher.DEFINITION,
    ),
    ReasonSchema(
        "line-determination",
        "Incidence axiom I1 (two points determine a unique line)",
        "axiom",
        premises=(_s("points-distinct", "AB"),),
        conclusion=_s("unique-line", "AB"),
    ),
    ReasonSchema(
        "point-on-line-same-line",
        "By I1 (point on line: line AC = line AB)",
        "theorem",
        premises=(_s("point-on-line", "CAB"),),
        conclusion=_s("line-equals-line", "ACAB"),
    ),
    ReasonSchema(
        "opposite-rays-form-line",
        "Theorem: opposite rays lie on one line",
        "theorem",
        premises=(_s("rays-form-line", "ABC"),),
        conclusion=_s("rays-form-line", "ABC"),
    ),
    ReasonSchema(
        "reflexivity",
        "Reflexivity (AB = AB or ∠A = ∠A)",
        "definition",
        premises=(),
        conclusion=_s("segment-equals-segment", "ABAB"),
        matcher=Matcher.REFLEXIVITY,
    ),
    ReasonSchema(
        "transitivity-equals",
        "Transitivity (=)",
        "theorem",
        premises=(_s("angle-equals-constant", "AMC"), _s("angle-equals-constant", "AMB")),
        conclusion=_s("angle-equals-angle", "AMCAMB"),
        matcher=Matcher.TRANSITIVITY_EQUALS,
        shares_occurrence_counter=True,
    ),
    _chain("transitivity-less", "Transitivity (<)", "angle-less-than-angle"),
    _chain("transitivity-greater", "Transitivity (>)", "angle-greater-than-angle"),
    _chain("transitivity-leq", "Transitivity (≤)", "angle-leq-angle"),
    _chain("transitivity-geq", "Transitivity (≥)", "angle-geq-angle"),
    ReasonSchema(
        "sas",
        "Triangle congruence (SAS)",
        "theorem",
        premises=(
            _s("segment-equals-segment", "AMAM"),
            _s("segment-equals-segment", "BMMC"),
            _s("angle-equals-angle", "AMBAMC"),
        ),
        conclusion=_s("triangles-congruent", "AMBAMC"),
        matcher=Matcher.SAS,
    ),
    ReasonSchema(
        "asa",
        "Triangle congruence (ASA)",
        "theorem",
        premises=(
            _s("angle-equals-angle", "CABFDE"),
            _s("segment-equals-segment", "ABDE"),
            _s("angle-equals-angle", "ABCDEF"),
        ),
        conclusion=_s("triangles-congruent", "ABCDEF"),
        matcher=Matcher.ASA,
    ),
    ReasonSchema(
        "aas",
        "Triangle congruence (AAS)",
        "theorem",
        premises=(
            _s("angle-equals-angle", "CABFDE"),
            _s("angle-equals-angle", "ABCDEF"),
            _s("segment-equals-segment", "BCEF"),
        ),
        conclusion=_s("triangles-congruent", "ABCDEF"),
        matcher=Matcher.AAS,
    ),
    ReasonSchema(
        "sss",
        "Triangle congruence (SSS)",
        "theorem",
        premises=(
            _s("segment-equals-segment", "ABDE"),
            _s("segment-equals-segment", "BCEF"),
            _s("segment-equals-segment", "CAFD"),
        ),
        conclusion=_s("triangles-congruent", "ABCDEF"),
        matcher=Matcher.SSS,
    ),
    ReasonSchema(
        "hl",
        "Triangle congruence (HL)",
        "theorem",
        premises=(
            _s("angle-equals-constant", "ABC"),
            _s("angle-equals-constant", "DEF"),
            _s("segment-equals-segment", "ACDF"),
            _s("segment-equals-segment", "ABDE"),
        ),
        conclusion=_s("triangles-congruent", "ABCDEF"),
        matcher=Matcher.HL,
    ),
    ReasonSchema(
        "from-congruence",
        "From congruence (CPCTC): corresponding sides equal",
        "theorem",
        premises=(_s("triangles-congruent", "AMBAMC"),),
        conclusion=_s("segment-equals-segment", "ABAC"),
        matcher=Matcher.FROM_CONGRUENCE,
    ),
    ReasonSchema(
        "sum-triangle-angles",
        "Sum of triangle angles",
        "theorem",
        premises=(),
        conclusion=_s("triangle-angles-sum-180", "ABC"),
        matcher=Matcher.ANGLE_SUM,
    ),
    ReasonSchema(
        "thales",
        "Thales theorem",
        "theorem",
        premises=(),
        conclusion=_s("angle-equals-constant", "ABC", 90),
        matcher=Matcher.THALES,
    ),
)

REASONS_BY_ID: Mapping[str, ReasonSchema] = MappingProxyType({r.id: r for r in REASONS})


def get_reason(reason_id: str) -> Optional[ReasonSchema]:
    """Return the enabled schema for ``reason_id``, or ``None``."""

    reason = REASONS_BY_ID.get(reason_id)
    if reason is None or reason.disabled:
        return None
    return reason


def statements_equal(a: Statement, b: Statement) -> bool:
    return a.kind == b.kind and a.point_names == b.point_names


def segment_statement_key(s: Statement) -> Tuple[Tuple[str, str], ...]:
    """Key of a segment equality, invariant under endpoint and side swaps."""

    if s.kind != "segment-equals-segment":
        return ()
    a, b, c, d = s.point_names
    seg1 = tuple(sorted((a, b)))
    seg2 = tuple(sorted((c, d)))
    return tuple(sorted((seg1, seg2)))


def _angle_triple_key(p0: str, vertex: str, p2: str) -> Tuple[str, Tuple[str, ...]]:
    return vertex, tuple(sorted((p0, p2)))


def angle_constant_statement_key(s: Statement) -> Tuple[object, ...]:
    if s.kind != "angle-equals-constant":
        return ()
    return _angle_triple_key(*s.point_names)


def angle_statement_key(s: Statement) -> Tuple[object, ...]:
    """Key of an angle equality: arms swap at each vertex, sides swap."""

    if s.kind != "angle-equals-angle":
        return ()
    k1 = _angle_triple_key(*s.triple(0))
    k2 = _angle_triple_key(*s.triple(1))
    return tuple(sorted((k1, k2)))


def statements_equal_structural(a: Statement, b: Statement) -> bool:
    if a.kind != b.kind:
        return False
    if a.kind == "segment-equals-segment":
        return segment_statement_key(a) == segment_statement_key(b)
    if a.kind == "angle-equals-constant":
        return angle_constant_statement_key(a) == angle_constant_statement_key(b)
    if a.kind == "angle-equals-angle":
        return angle_statement_key(a) == angle_statement_key(b)
    return statements_equal(a, b)


def substitute(statement: Statement, mapping: Mapping[str, str]) -> Statement:
    return statement.with_names(mapping.get(name, name) for name in statement.point_names)


def substitute_premise_by_occurrence(
    premise: Statement,
    conclusion_names: Sequence[str],
    outcome_names: Sequence[str],
    used: MutableMapping[str, int],
) -> Optional[Statement]:
    """Substitute ``premise`` against a concrete outcome by occurrence order.

    The k-th use of placeholder ``P`` (k counted in ``used``, which the caller
    may share across premises) takes the outcome name found at the position of
    the k-th ``P`` in the conclusion template.  Returns ``None`` when the
    conclusion has no such occurrence.
    """

    names: List[str] = []
    for placeholder in premise.point_names:
        k = used.get(placeholder, 0)
        positions = [i for i, name in enumerate(conclusion_names) if name == placeholder]
        if k >= len(positions) or positions[k] >= len(outcome_names):
            return None
        names.append(outcome_names[positions[k]])
        used[placeholder] = k + 1
    return Statement(premise.kind, tuple(names))


def get_conclusion_for_reason(reason_id: str, point_names: Sequence[str]) -> Optional[Statement]:
    """Instantiate a reason's conclusion with the caller's point names.

    Distinct placeholders are taken in first-occurrence order and mapped
    positionally onto ``point_names``.
    """

    if reason_id in (REASON_GIVEN, REASON_DEFINITION, "reflexivity"):
        return None
    reason = get_reason(reason_id)
    if reason is None:
        return None
    uniq = list(dict.fromkeys(reason.conclusion.point_names))
    mapping: Dict[str, str] = {p: point_names[i] for i, p in enumerate(uniq) if i < len(point_names)}
    return substitute(reason.conclusion, mapping)


def verify_reason_application(
    ctx: ResolvedContext, reason_id: str, point_names: Sequence[str]
) -> VerifyResult:
    """Numerically check a reason instantiated on ``A, B, C := point_names``."""

    reason = get_reason(reason_id)
    if reason is None:
        return VerifyResult(False, "Unknown or disabled reason.")
    mapping = {p: point_names[i] for i, p in enumerate("ABC") if i < len(point_names)}

    for premise in reason.premises:
        sub = substitute(premise, mapping)
        if not check_statement(ctx, sub):
            return VerifyResult(False, f"Premise not satisfied: {statement_to_string(sub)}")

    conclusion = substitute(reason.conclusion, mapping)
    if not check_statement(ctx, conclusion):
        return VerifyResult(False, f"Conclusion does not hold: {statement_to_string(conclusion)}")
    return VerifyResult(True, statement_to_string(conclusion))


apply_debug_logging(globals(), logger=logger)
