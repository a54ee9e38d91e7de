from .statements import (
    STATEMENT_POINT_COUNTS,
    TRIANGLE_SECOND_PERMS,
    Statement,
    StatementError,
    statement_from_dict,
    statement_to_dict,
)
from .printer import statement_to_string, format_step
from .parser import PARSE_HINT, parse_outcome_statement, expand_latex_macros
from .config import ToleranceConfig, get_tolerance_config, set_tolerance_config
from .context import (
    LineLike,
    ResolvedContext,
    SnapshotEntry,
    SnapshotError,
    resolve_context,
    point_on_line,
    point_on_ray,
    same_line,
    are_opposite_rays,
)
from .check import check_statement
from .reasons import (
    REASON_GIVEN,
    REASON_DEFINITION,
    REASONS,
    REASONS_BY_ID,
    Matcher,
    ReasonSchema,
    VerifyResult,
    get_reason,
    statements_equal,
    statements_equal_structural,
    segment_statement_key,
    substitute_premise_by_occurrence,
    get_conclusion_for_reason,
    verify_reason_application,
)
from .verify import ProofRecordError, ProofStep, PrerequisiteRef, verify_step
from .session import ProofSession

__all__ = [
    'STATEMENT_POINT_COUNTS',
    'TRIANGLE_SECOND_PERMS',
    'Statement',
    'StatementError',
    'statement_from_dict',
    'statement_to_dict',
    'statement_to_string',
    'format_step',
    'PARSE_HINT',
    'parse_outcome_statement',
    'expand_latex_macros',
    'ToleranceConfig',
    'get_tolerance_config',
    'set_tolerance_config',
    'LineLike',
    'ResolvedContext',
    'SnapshotEntry',
    'SnapshotError',
    'resolve_context',
    'point_on_line',
    'point_on_ray',
    'same_line',
    'are_opposite_rays',
    'check_statement',
    'REASON_GIVEN',
    'REASON_DEFINITION',
    'REASONS',
    'REASONS_BY_ID',
    'Matcher',
    'ReasonSchema',
    'VerifyResult',
    'get_reason',
    'statements_equal',
    'statements_equal_structural',
    'segment_statement_key',
    'substitute_premise_by_occurrence',
    'get_conclusion_for_reason',
    'verify_reason_application',
    'ProofRecordError',
    'ProofStep',
    'PrerequisiteRef',
    'verify_step',
    'ProofSession',
]
