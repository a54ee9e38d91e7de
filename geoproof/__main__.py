import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional, Sequence

from geoproof import (
    ProofRecordError,
    ProofSession,
    SnapshotError,
    Statement,
    StatementError,
    parse_outcome_statement,
    statement_from_dict,
)

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _load_statement(payload: Any) -> Statement:
    if isinstance(payload, str):
        parsed = parse_outcome_statement(payload)
        if parsed is None:
            raise ProofRecordError(f"cannot parse statement {payload!r}")
        return parsed
    if isinstance(payload, dict):
        try:
            return statement_from_dict(payload)
        except StatementError as exc:
            raise ProofRecordError(str(exc)) from exc
    raise ProofRecordError(f"statement must be text or a mapping, got {payload!r}")


def _load_document(path: str) -> Dict[str, Any]:
    with open(path, encoding="utf-8") as fin:
        document = json.load(fin)
    if not isinstance(document, dict):
        raise ProofRecordError("proof document must be a JSON object")
    for key in ("snapshot", "givens", "steps"):
        if not isinstance(document.get(key, []), list):
            raise ProofRecordError(f"{key} must be a list")
    for entry in document.get("steps", []):
        if not isinstance(entry, dict):
            raise ProofRecordError(f"step must be a JSON object, got {entry!r}")
        if not isinstance(entry.get("prereqs", []), list):
            raise ProofRecordError(f"step prereqs must be a list, got {entry['prereqs']!r}")
    return document


def _step_outcome(entry: Dict[str, Any]) -> Any:
    outcome = entry.get("outcome")
    # Text goes through the session's parser so failures come back as verdicts.
    if isinstance(outcome, str):
        return outcome
    return _load_statement(outcome)


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Verify geometric proof steps")
    parser.add_argument("path", help="Path to a JSON proof document")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "--records",
        action="store_true",
        help="Print the JSON log record of every accepted step",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    try:
        document = _load_document(args.path)
        givens = [_load_statement(g) for g in document.get("givens", [])]
        entries: List[Dict[str, Any]] = list(document.get("steps", []))
        outcomes = [_step_outcome(entry) for entry in entries]
        session = ProofSession(document.get("snapshot", []), givens)
    except (OSError, json.JSONDecodeError, ProofRecordError, SnapshotError) as exc:
        logger.error("Cannot load proof document %s: %s", args.path, exc)
        raise SystemExit(2)

    logger.info(
        "Loaded %d snapshot entr(ies), %d given(s), %d step(s)",
        len(document.get("snapshot", [])),
        len(givens),
        len(entries),
    )

    all_ok = True
    for idx, (entry, outcome) in enumerate(zip(entries, outcomes), start=1):
        reason_id = str(entry.get("reason", ""))
        refs = entry.get("prereqs", [])
        result, _ = session.propose(outcome, reason_id, refs)
        verdict = "OK" if result.ok else "REJECTED"
        print(f"Step {idx}: {verdict} {result.message}")
        all_ok = all_ok and result.ok

    if args.records:
        print("Records:")
        for record in session.records():
            print(json.dumps(record, ensure_ascii=False))

    if not all_ok:
        raise SystemExit(1)


if __name__ == "__main__":
    main(sys.argv[1:])
