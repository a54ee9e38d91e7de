"""Proof step verification.

``verify_step`` decides whether one proposed step follows from its cited
reason and prerequisites.  Each reason schema carries a :class:`Matcher` tag
and the tag selects the matcher function below; the generic template matcher
handles every reason without bespoke logic.  All outcomes are returned as a
:class:`VerifyResult`, nothing is raised for user input.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .check import check_statement
from .context import ResolvedContext
from .logging_utils import apply_debug_logging
from .printer import statement_to_string
from .reasons import (
    REASONS_BY_ID,
    Matcher,
    ReasonSchema,
    VerifyResult,
    get_reason,
    segment_statement_key,
    statements_equal,
    statements_equal_structural,
    substitute_premise_by_occurrence,
)
from .statements import TRIANGLE_SECOND_PERMS, Statement, StatementError, statement_from_dict, statement_to_dict

logger = logging.getLogger(__name__)

PrerequisiteRef = Union[str, int]  # "given" or a 1-based step index
Triangle = Tuple[str, str, str]

GIVEN_REF = "given"


class ProofRecordError(ValueError):
    pass


@dataclass(frozen=True)
class ProofStep:
    outcome: Statement
    reason_id: str
    prerequisite_refs: Tuple[PrerequisiteRef, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "prerequisite_refs", tuple(self.prerequisite_refs))

    def to_record(self) -> Dict[str, Any]:
        """Serializable operation-log record for an accepted step."""

        return {
            "op": "proof_step",
            "reasonId": self.reason_id,
            "outcome": statement_to_dict(self.outcome),
            "prerequisiteRefs": list(self.prerequisite_refs),
        }

    @classmethod
    def from_record(cls, payload: Mapping[str, Any]) -> "ProofStep":
        reason_id = payload.get("reasonId")
        if not isinstance(reason_id, str) or not reason_id:
            raise ProofRecordError(f"record has no reasonId: {payload!r}")
        outcome = payload.get("outcome")
        if not isinstance(outcome, Mapping):
            raise ProofRecordError(f"record has no outcome mapping: {payload!r}")
        try:
            statement = statement_from_dict(dict(outcome))
        except StatementError as exc:
            raise ProofRecordError(f"invalid outcome in record: {exc}") from exc
        refs = payload.get("prerequisiteRefs", [])
        if not isinstance(refs, (list, tuple)):
            raise ProofRecordError(f"prerequisiteRefs must be a list, got {refs!r}")
        for ref in refs:
            if not is_valid_ref_shape(ref):
                raise ProofRecordError(f"invalid prerequisite ref {ref!r}")
        return cls(statement, reason_id, tuple(refs))


def is_valid_ref_shape(ref: object) -> bool:
    if ref == GIVEN_REF:
        return True
    return isinstance(ref, int) and not isinstance(ref, bool)


@dataclass
class _StepInput:
    ctx: ResolvedContext
    step: ProofStep
    reason: ReasonSchema
    previous_steps: Sequence[ProofStep]
    task_givens: Sequence[Statement]
    prerequisites: List[Statement] = field(default_factory=list)

    @property
    def outcome(self) -> Statement:
        return self.step.outcome


MatcherFn = Callable[[_StepInput], VerifyResult]


def _accept(outcome: Statement) -> VerifyResult:
    return VerifyResult(True, statement_to_string(outcome))


def _reject(message: str) -> VerifyResult:
    return VerifyResult(False, message)


def resolve_prerequisites(
    refs: Iterable[PrerequisiteRef],
    previous_steps: Sequence[ProofStep],
    task_givens: Sequence[Statement],
) -> List[Statement]:
    """Expand prerequisite refs; refs outside ``[1, len(previous_steps)]`` are skipped."""

    out: List[Statement] = []
    for ref in refs:
        if ref == GIVEN_REF:
            out.extend(task_givens)
        elif isinstance(ref, int) and not isinstance(ref, bool) and 1 <= ref <= len(previous_steps):
            out.append(previous_steps[ref - 1].outcome)
    return out


def _conclusion_hint(reason: ReasonSchema) -> str:
    return f"Conclusion should be: {statement_to_string(reason.conclusion)} (with your point names)."


# --- pass-through and shape-only reasons -----------------------------------


def _match_given(inp: _StepInput) -> VerifyResult:
    if not inp.task_givens:
        return _accept(inp.outcome)
    if any(statements_equal(g, inp.outcome) for g in inp.task_givens):
        return _accept(inp.outcome)
    return _reject(f'"{statement_to_string(inp.outcome)}" is not in the task givens.')


def _match_definition(inp: _StepInput) -> VerifyResult:
    if check_statement(inp.ctx, inp.outcome):
        return _accept(inp.outcome)
    return _reject(f"Not satisfied in construction: {statement_to_string(inp.outcome)}")


def _match_reflexivity(inp: _StepInput) -> VerifyResult:
    outcome = inp.outcome
    if outcome.kind == "segment-equals-segment":
        a, b, c, d = outcome.point_names
        if a == c and b == d:
            return _accept(outcome)
        return _reject("Reflexivity requires the same segment on both sides (e.g. AB = AB).")
    if outcome.kind == "angle-equals-angle":
        if outcome.triple(0) == outcome.triple(1):
            return _accept(outcome)
        return _reject("Reflexivity requires the same angle on both sides (e.g. ∠AMB = ∠AMB).")
    return _reject(
        "Reflexivity: outcome must be AB = AB or ∠AMB = ∠AMB (same segment or angle twice)."
    )


def _match_thales(inp: _StepInput) -> VerifyResult:
    if inp.outcome.kind != "angle-equals-constant":
        return _reject("Thales: conclusion must be a right angle (e.g. ∠ABC = 90°).")
    if inp.outcome.constant != 90:
        return _reject("Thales theorem applies to a right angle (90°).")
    return _accept(inp.outcome)


def _match_angle_sum(inp: _StepInput) -> VerifyResult:
    if inp.outcome.kind != "triangle-angles-sum-180":
        return _reject(
            "Conclusion must be: angles of a triangle sum to 180° (e.g. triangle ABC)."
        )
    return _accept(inp.outcome)


# --- transitivity chains ----------------------------------------------------


def _match_middle_term(inp: _StepInput, kind: str) -> VerifyResult:
    p0, p1 = inp.prerequisites[0], inp.prerequisites[1]
    if p0.kind != kind or p1.kind != kind:
        return _reject(
            f"Prerequisites must be two {statement_to_string(inp.reason.conclusion)}-type statements."
        )
    if p0.triple(1) != p1.triple(0):
        return _reject(
            "Middle term must match: second angle of first prerequisite = first angle of second."
        )
    if inp.outcome.kind != kind:
        return _reject(_conclusion_hint(inp.reason))
    if inp.outcome.triple(0) != p0.triple(0) or inp.outcome.triple(1) != p1.triple(1):
        return _reject(
            "Conclusion must be: first angle of prerequisite 1, second angle of prerequisite 2."
        )
    return _accept(inp.outcome)


def _match_transitivity_equals(inp: _StepInput) -> VerifyResult:
    p = inp.prerequisites
    if len(p) >= 2 and p[0].kind == "angle-equals-angle" and p[1].kind == "angle-equals-angle":
        return _match_middle_term(inp, "angle-equals-angle")
    return _match_template(inp)


def _match_angle_chain(inp: _StepInput) -> VerifyResult:
    return _match_middle_term(inp, inp.reason.conclusion.kind)


# --- triangle congruence criteria ------------------------------------------


def _seg(a: str, b: str, c: str, d: str) -> Statement:
    return Statement("segment-equals-segment", (a, b, c, d))


def _ang(t1: Sequence[str], t2: Sequence[str]) -> Statement:
    return Statement("angle-equals-angle", (*t1, *t2))


def _correspondences(names: Sequence[str]) -> Iterable[Tuple[Triangle, Triangle]]:
    """First triangle as written, second under each of the 6 vertex orders."""

    tri1: Triangle = (names[0], names[1], names[2])
    for perm in TRIANGLE_SECOND_PERMS:
        tri2: Triangle = (names[3 + perm[0]], names[3 + perm[1]], names[3 + perm[2]])
        yield tri1, tri2


def _rotations(tri1: Triangle, tri2: Triangle) -> Iterable[Tuple[Triangle, Triangle]]:
    for v in range(3):
        yield (
            (tri1[v], tri1[(v + 1) % 3], tri1[(v + 2) % 3]),
            (tri2[v], tri2[(v + 1) % 3], tri2[(v + 2) % 3]),
        )


def _sas_premises(t1: Triangle, t2: Triangle) -> List[Statement]:
    a, b, c = t1
    d, e, f = t2
    return [_seg(a, b, d, e), _seg(a, c, d, f), _ang((c, a, b), (f, d, e))]


def _asa_premises(t1: Triangle, t2: Triangle) -> List[Statement]:
    a, b, c = t1
    d, e, f = t2
    return [_ang((c, a, b), (f, d, e)), _seg(a, b, d, e), _ang((a, b, c), (d, e, f))]


def _aas_premises(t1: Triangle, t2: Triangle) -> List[Statement]:
    a, b, c = t1
    d, e, f = t2
    return [_ang((c, a, b), (f, d, e)), _ang((a, b, c), (d, e, f)), _seg(b, c, e, f)]


def _sss_premises(t1: Triangle, t2: Triangle) -> List[Statement]:
    a, b, c = t1
    d, e, f = t2
    return [_seg(a, b, d, e), _seg(b, c, e, f), _seg(c, a, f, d)]


def _hl_premises(t1: Triangle, t2: Triangle) -> List[Statement]:
    a, b, c = t1
    d, e, f = t2
    return [
        Statement("angle-equals-constant", t1, 90),
        Statement("angle-equals-constant", t2, 90),
        _seg(a, c, d, f),
        _seg(a, b, d, e),
    ]


def _is_right_angle_claim(p: Statement) -> bool:
    return p.kind == "angle-equals-constant" and (p.constant is None or p.constant == 90)


def _match_distinct(
    prerequisites: Sequence[Statement],
    required: Sequence[Statement],
    admissible: Optional[Callable[[Statement, Statement], bool]] = None,
) -> bool:
    """True when each required premise matches its own, unused prerequisite.

    Structural equality is an equivalence, so taking the first free match is
    enough; no prerequisite is ever counted twice.
    """

    used: set = set()
    for req in required:
        for i, p in enumerate(prerequisites):
            if i in used:
                continue
            if admissible is not None and not admissible(req, p):
                continue
            if statements_equal_structural(p, req):
                used.add(i)
                break
        else:
            return False
    return True


def _hl_admissible(req: Statement, p: Statement) -> bool:
    return req.kind != "angle-equals-constant" or _is_right_angle_claim(p)


_CRITERIA: Dict[Matcher, Tuple[Callable[[Triangle, Triangle], List[Statement]], bool, str]] = {
    Matcher.SAS: (
        _sas_premises,
        True,
        "No valid SAS combination: need two sides and the included angle equal under the same correspondence.",
    ),
    Matcher.ASA: (
        _asa_premises,
        True,
        "No valid ASA: need two angles and the included side under the same correspondence.",
    ),
    Matcher.AAS: (
        _aas_premises,
        True,
        "No valid AAS: need two angles and a non-included side under the same correspondence.",
    ),
    Matcher.SSS: (
        _sss_premises,
        False,
        "No valid SSS: need all three sides equal under the same correspondence.",
    ),
    Matcher.HL: (
        _hl_premises,
        False,
        "No valid HL: need right angles at corresponding vertices, hypotenuse and one leg equal.",
    ),
}


def _match_congruence(inp: _StepInput) -> VerifyResult:
    if inp.outcome.kind != "triangles-congruent":
        return _reject(_conclusion_hint(inp.reason))
    build, rotate, failure = _CRITERIA[inp.reason.matcher]
    admissible = _hl_admissible if inp.reason.matcher is Matcher.HL else None
    for tri1, tri2 in _correspondences(inp.outcome.point_names):
        layouts = _rotations(tri1, tri2) if rotate else [(tri1, tri2)]
        for t1, t2 in layouts:
            if _match_distinct(inp.prerequisites, build(t1, t2), admissible):
                return _accept(inp.outcome)
    return _reject(failure)


def _match_from_congruence(inp: _StepInput) -> VerifyResult:
    if inp.outcome.kind != "segment-equals-segment":
        return _reject("Conclusion must be a segment equality (e.g. AB = DE).")
    target = segment_statement_key(inp.outcome)
    for prereq in inp.prerequisites:
        if prereq.kind != "triangles-congruent":
            continue
        for tri1, tri2 in _correspondences(prereq.point_names):
            sides = _sss_premises(tri1, tri2)
            if any(segment_statement_key(side) == target for side in sides):
                return _accept(inp.outcome)
    return _reject(
        "Conclusion must be a pair of corresponding sides from a triangle congruence prerequisite."
    )


# --- generic template substitution -----------------------------------------


def _outcome_namings(outcome: Statement) -> List[Tuple[str, ...]]:
    if outcome.kind == "triangles-congruent":
        return [tri1 + tri2 for tri1, tri2 in _correspondences(outcome.point_names)]
    return [outcome.point_names]


def _same_measure(candidates: Sequence[Sequence[Statement]]) -> bool:
    common: Optional[set] = None
    for group in candidates:
        values = {p.constant for p in group if p.constant is not None}
        common = values if common is None else common & values
    return bool(common)


def _match_template(inp: _StepInput) -> VerifyResult:
    reason = inp.reason
    outcome = inp.outcome
    if outcome.kind != reason.conclusion.kind:
        return _reject(_conclusion_hint(reason))

    last_error: Optional[str] = None
    for names in _outcome_namings(outcome):
        used: Dict[str, int] = {}
        matched: List[List[Statement]] = []
        ok = True
        for i, template in enumerate(reason.premises, start=1):
            if not reason.shares_occurrence_counter:
                used.clear()
            premise = substitute_premise_by_occurrence(
                template, reason.conclusion.point_names, names, used
            )
            if premise is None:
                last_error = f"Prerequisite {i}: could not match to conclusion."
                ok = False
                break
            hits = [p for p in inp.prerequisites if statements_equal_structural(p, premise)]
            if not hits:
                hint = ""
                if premise.kind == "angle-equals-constant":
                    hint = (
                        " For this use of the rule you need two steps stating each angle in your"
                        " conclusion equals the same measure (e.g. 90°, 45°)."
                    )
                last_error = (
                    f'Prerequisite {i}: need a step stating "{statement_to_string(premise)}"'
                    f" (order of prerequisites does not matter).{hint}"
                )
                ok = False
                break
            if premise.kind == "angle-equals-constant":
                matched.append(hits)
        if ok and reason.shares_occurrence_counter and matched and not _same_measure(matched):
            last_error = "Prerequisites must state the same measure for both angles."
            ok = False
        if ok:
            return _accept(outcome)
    return _reject(last_error or "Prerequisites do not match.")


_MATCHERS: Dict[Matcher, MatcherFn] = {
    Matcher.GIVEN: _match_given,
    Matcher.DEFINITION: _match_definition,
    Matcher.REFLEXIVITY: _match_reflexivity,
    Matcher.THALES: _match_thales,
    Matcher.ANGLE_SUM: _match_angle_sum,
    Matcher.TRANSITIVITY_EQUALS: _match_transitivity_equals,
    Matcher.ANGLE_CHAIN: _match_angle_chain,
    Matcher.SAS: _match_congruence,
    Matcher.ASA: _match_congruence,
    Matcher.AAS: _match_congruence,
    Matcher.SSS: _match_congruence,
    Matcher.HL: _match_congruence,
    Matcher.FROM_CONGRUENCE: _match_from_congruence,
    Matcher.TEMPLATE: _match_template,
}

_missing = set(Matcher) - set(_MATCHERS)
if _missing:  # pragma: no cover - guards catalog/matcher drift
    raise RuntimeError(f"no matcher registered for {sorted(m.value for m in _missing)}")

# Matchers that decide from the outcome alone, before prerequisites are counted.
_PREMISE_FREE = {
    Matcher.GIVEN,
    Matcher.DEFINITION,
    Matcher.REFLEXIVITY,
    Matcher.THALES,
    Matcher.ANGLE_SUM,
}


def verify_step(
    ctx: ResolvedContext,
    step: ProofStep,
    previous_steps: Sequence[ProofStep],
    task_givens: Sequence[Statement] = (),
) -> VerifyResult:
    reason = get_reason(step.reason_id)
    if reason is None:
        logger.debug("verify_step: unknown or disabled reason %r", step.reason_id)
        return _reject("Unknown or disabled reason.")

    inp = _StepInput(ctx, step, reason, previous_steps, task_givens)
    if reason.matcher not in _PREMISE_FREE:
        inp.prerequisites = resolve_prerequisites(step.prerequisite_refs, previous_steps, task_givens)
        if len(inp.prerequisites) < len(reason.premises):
            result = _reject(f"This reason requires {len(reason.premises)} prerequisite(s).")
            logger.debug("verify_step: %s rejected: %s", reason.id, result.message)
            return result

    result = _MATCHERS[reason.matcher](inp)
    if not result.ok:
        logger.debug("verify_step: %s rejected: %s", reason.id, result.message)
    return result


def known_reason_ids() -> List[str]:
    return [r.id for r in REASONS_BY_ID.values() if not r.disabled]


apply_debug_logging(globals(), logger=logger)
