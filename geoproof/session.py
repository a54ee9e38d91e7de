"""Caller-side proof session: owns the append-only list of accepted steps."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .context import ResolvedContext, SnapshotLike, resolve_context
from .parser import PARSE_HINT, parse_outcome_statement
from .printer import format_step
from .reasons import VerifyResult, get_reason
from .statements import Statement
from .verify import GIVEN_REF, PrerequisiteRef, ProofStep, is_valid_ref_shape, verify_step

logger = logging.getLogger(__name__)

OutcomeInput = Union[Statement, str]


class ProofSession:
    """Verify proposed steps against a construction and keep the accepted ones.

    The construction snapshot may change between proposals (the user keeps
    drawing); a fresh :class:`ResolvedContext` is built for every call.
    Accepted steps are never renumbered or removed.  A snapshot that cannot
    be resolved raises :class:`SnapshotError` when it is installed.
    """

    def __init__(
        self,
        snapshot: Iterable[SnapshotLike] = (),
        givens: Iterable[Statement] = (),
    ) -> None:
        self._snapshot: List[SnapshotLike] = list(snapshot)
        resolve_context(self._snapshot)
        self._givens: Tuple[Statement, ...] = tuple(givens)
        self._steps: List[ProofStep] = []

    @property
    def steps(self) -> Tuple[ProofStep, ...]:
        return tuple(self._steps)

    @property
    def givens(self) -> Tuple[Statement, ...]:
        return self._givens

    @property
    def context(self) -> ResolvedContext:
        return resolve_context(self._snapshot)

    def update_snapshot(self, snapshot: Iterable[SnapshotLike]) -> None:
        """Replace the construction; raises ``SnapshotError`` and keeps the old one if invalid."""

        entries = list(snapshot)
        resolve_context(entries)
        self._snapshot = entries

    def _check_refs(self, refs: Sequence[PrerequisiteRef]) -> Optional[str]:
        for ref in refs:
            if not is_valid_ref_shape(ref):
                return f"Invalid prerequisite {ref!r}: use 'given' or a step number."
            if ref != GIVEN_REF and not 1 <= int(ref) <= len(self._steps):
                return f"Step {ref} does not exist yet."
        return None

    def propose(
        self,
        outcome: OutcomeInput,
        reason_id: str,
        prerequisite_refs: Sequence[PrerequisiteRef] = (),
    ) -> Tuple[VerifyResult, Optional[ProofStep]]:
        """Verify a step and append it when accepted.

        ``outcome`` may be free text; unparsable text is rejected with the
        parser hint.  Returns the verdict and the accepted step (or ``None``).
        """

        if isinstance(outcome, str):
            parsed = parse_outcome_statement(outcome)
            if parsed is None:
                return VerifyResult(False, PARSE_HINT), None
            outcome = parsed

        problem = self._check_refs(prerequisite_refs)
        if problem is not None:
            return VerifyResult(False, problem), None

        step = ProofStep(outcome, reason_id, tuple(prerequisite_refs))
        result = verify_step(self.context, step, self._steps, self._givens)
        if not result.ok:
            return result, None

        self._steps.append(step)
        logger.info("Accepted step %d: %s", len(self._steps), json.dumps(step.to_record(), ensure_ascii=False))
        return result, step

    def records(self) -> List[Dict[str, Any]]:
        return [step.to_record() for step in self._steps]

    def has_step(self, reason_id: str, kind: Optional[str] = None) -> bool:
        """Whether any accepted step cites ``reason_id`` (with an outcome of ``kind``)."""

        return any(
            step.reason_id == reason_id and (kind is None or step.outcome.kind == kind)
            for step in self._steps
        )

    def listing(self) -> str:
        lines = []
        for idx, step in enumerate(self._steps, start=1):
            reason = get_reason(step.reason_id)
            lines.append(format_step(idx, step, reason.name if reason else None))
        return "\n".join(lines)
