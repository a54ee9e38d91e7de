import pytest

from geoproof.context import resolve_context
from geoproof.statements import Statement
from geoproof.verify import ProofRecordError, ProofStep, known_reason_ids, resolve_prerequisites, verify_step


def s(kind, names, constant=None):
    return Statement(kind, tuple(names), constant)


def seg(names):
    return s('segment-equals-segment', names)


def ang(names):
    return s('angle-equals-angle', names)


def given_steps(*outcomes):
    return [ProofStep(o, 'given') for o in outcomes]


@pytest.fixture
def ctx():
    # Isosceles triangle split by its altitude AM.
    coords = {'A': (0, 4), 'M': (0, 0), 'B': (-3, 0), 'C': (3, 0)}
    return resolve_context(
        [{'geom': {'type': 'point', 'x': x, 'y': y}, 'name': name} for name, (x, y) in coords.items()]
    )


@pytest.fixture
def empty_ctx():
    return resolve_context([])


def test_unknown_reason(empty_ctx):
    result = verify_step(empty_ctx, ProofStep(seg('ABAB'), 'pythagoras'), [])
    assert not result
    assert result.message == 'Unknown or disabled reason.'


def test_reflexivity(empty_ctx):
    assert verify_step(empty_ctx, ProofStep(seg('ABAB'), 'reflexivity'), [])
    assert verify_step(empty_ctx, ProofStep(ang('AMBAMB'), 'reflexivity'), [])
    result = verify_step(empty_ctx, ProofStep(seg('ABAC'), 'reflexivity'), [])
    assert not result
    assert 'same segment' in result.message
    result = verify_step(empty_ctx, ProofStep(s('points-distinct', 'AB'), 'reflexivity'), [])
    assert not result


def test_given_checks_membership_only_when_givens_exist(empty_ctx):
    assert verify_step(empty_ctx, ProofStep(seg('AMAC'), 'given'), [])
    givens = [seg('BMMC')]
    assert verify_step(empty_ctx, ProofStep(seg('BMMC'), 'given'), [], givens)
    result = verify_step(empty_ctx, ProofStep(seg('AMAC'), 'given'), [], givens)
    assert not result
    assert result.message == '"AM = AC" is not in the task givens.'


def test_definition_is_checked_numerically(ctx):
    assert verify_step(ctx, ProofStep(seg('BMMC'), 'definition'), [])
    result = verify_step(ctx, ProofStep(seg('AMMC'), 'definition'), [])
    assert not result
    assert result.message == 'Not satisfied in construction: AM = MC'


@pytest.mark.parametrize(
    'outcome',
    [
        s('angle-leq-angle', 'AMBAMC'),
        s('angle-less-than-angle', 'AMBBAC'),
        s('triangle-angles-sum-180', 'AMB'),
    ],
)
def test_definition_cannot_state_orderings_or_angle_sum(ctx, outcome):
    result = verify_step(ctx, ProofStep(outcome, 'definition'), [])
    assert not result
    assert result.message.startswith('Not satisfied in construction')


def test_thales_and_angle_sum(empty_ctx):
    assert verify_step(empty_ctx, ProofStep(s('angle-equals-constant', 'ABC', 90), 'thales'), [])
    result = verify_step(empty_ctx, ProofStep(s('angle-equals-constant', 'ABC', 60), 'thales'), [])
    assert result.message == 'Thales theorem applies to a right angle (90°).'
    assert not verify_step(empty_ctx, ProofStep(seg('ABAC'), 'thales'), [])

    assert verify_step(empty_ctx, ProofStep(s('triangle-angles-sum-180', 'ABC'), 'sum-triangle-angles'), [])
    assert not verify_step(empty_ctx, ProofStep(seg('ABAC'), 'sum-triangle-angles'), [])


def test_transitivity_chain_needs_matching_middle_term(empty_ctx):
    previous = given_steps(ang('AMCAMB'), ang('AMBDEF'), ang('DEFAMC'))
    ok = verify_step(empty_ctx, ProofStep(ang('AMCDEF'), 'transitivity-equals', (1, 2)), previous)
    assert ok
    assert ok.message == '∠AMC = ∠DEF'

    result = verify_step(empty_ctx, ProofStep(ang('AMCAMB'), 'transitivity-equals', (1, 2)), previous)
    assert not result
    assert result.message.startswith('Conclusion must be: first angle')

    result = verify_step(empty_ctx, ProofStep(ang('AMCAMC'), 'transitivity-equals', (1, 3)), previous)
    assert result.message.startswith('Middle term must match')


def test_transitivity_equals_from_equal_measures(empty_ctx):
    previous = given_steps(
        s('angle-equals-constant', 'AMC', 90),
        s('angle-equals-constant', 'BMA', 90),
        s('angle-equals-constant', 'AMB', 45),
    )
    assert verify_step(empty_ctx, ProofStep(ang('AMCAMB'), 'transitivity-equals', (1, 2)), previous)
    result = verify_step(empty_ctx, ProofStep(ang('AMCAMB'), 'transitivity-equals', (1, 3)), previous)
    assert not result
    assert result.message == 'Prerequisites must state the same measure for both angles.'


def test_strict_transitivity(empty_ctx):
    less = 'angle-less-than-angle'
    previous = given_steps(s(less, 'AMBCND'), s(less, 'CNDEPF'))
    assert verify_step(empty_ctx, ProofStep(s(less, 'AMBEPF'), 'transitivity-less', (1, 2)), previous)
    result = verify_step(empty_ctx, ProofStep(s(less, 'AMBEPF'), 'transitivity-greater', (1, 2)), previous)
    assert not result


def test_sas_end_to_end(ctx):
    steps = []
    for outcome, reason in [(seg('AMAM'), 'reflexivity'), (seg('BMMC'), 'definition'), (ang('AMBAMC'), 'definition')]:
        step = ProofStep(outcome, reason)
        assert verify_step(ctx, step, steps), outcome
        steps.append(step)

    result = verify_step(ctx, ProofStep(s('triangles-congruent', 'AMBAMC'), 'sas', (1, 2, 3)), steps)
    assert result
    assert result.message == 'ΔAMB ≅ ΔAMC'

    # Any vertex order of the second triangle is tried.
    assert verify_step(ctx, ProofStep(s('triangles-congruent', 'AMBACM'), 'sas', (3, 1, 2)), steps)

    result = verify_step(ctx, ProofStep(s('triangles-congruent', 'ABCAMB'), 'sas', (1, 2, 3)), steps)
    assert not result
    assert result.message.startswith('No valid SAS combination')


def test_prerequisite_count_is_enforced(ctx):
    steps = given_steps(seg('AMAM'), seg('BMMC'))
    result = verify_step(ctx, ProofStep(s('triangles-congruent', 'AMBAMC'), 'sas', (1, 2)), steps)
    assert result.message == 'This reason requires 3 prerequisite(s).'
    # refs beyond the accepted steps are ignored
    result = verify_step(ctx, ProofStep(s('triangles-congruent', 'AMBAMC'), 'sas', (1, 2, 7)), steps)
    assert result.message == 'This reason requires 3 prerequisite(s).'


def test_congruence_needs_triangle_outcome(empty_ctx):
    steps = given_steps(seg('AMAM'), seg('BMMC'), ang('AMBAMC'))
    result = verify_step(empty_ctx, ProofStep(seg('ABAC'), 'sas', (1, 2, 3)), steps)
    assert result.message == 'Conclusion should be: ΔAMB ≅ ΔAMC (with your point names).'


def test_sss(empty_ctx):
    steps = given_steps(seg('CABA'), seg('MAMA'), seg('MBMC'))
    assert verify_step(empty_ctx, ProofStep(s('triangles-congruent', 'AMBAMC'), 'sss', (1, 2, 3)), steps)
    steps = given_steps(seg('CABA'), seg('MAMA'), seg('MBMA'))
    assert not verify_step(empty_ctx, ProofStep(s('triangles-congruent', 'AMBAMC'), 'sss', (1, 2, 3)), steps)


def test_asa_tries_each_included_side(empty_ctx):
    steps = given_steps(ang('ABCDEF'), seg('ABDE'), ang('CABFDE'))
    assert verify_step(empty_ctx, ProofStep(s('triangles-congruent', 'ABCDEF'), 'asa', (1, 2, 3)), steps)
    steps = given_steps(ang('ABCDEF'), seg('BCEF'), ang('BCAEFD'))
    assert verify_step(empty_ctx, ProofStep(s('triangles-congruent', 'ABCDEF'), 'asa', (1, 2, 3)), steps)


def test_aas_needs_non_included_side(empty_ctx):
    outcome = s('triangles-congruent', 'ABCDEF')
    steps = given_steps(ang('CABFDE'), ang('ABCDEF'), seg('BCEF'))
    assert verify_step(empty_ctx, ProofStep(outcome, 'aas', (1, 2, 3)), steps)
    steps = given_steps(ang('CABFDE'), ang('ABCDEF'), seg('ABDE'))
    result = verify_step(empty_ctx, ProofStep(outcome, 'aas', (1, 2, 3)), steps)
    assert not result
    assert result.message.startswith('No valid AAS')


def test_hl_requires_right_angles(empty_ctx):
    outcome = s('triangles-congruent', 'ABCDEF')
    legs = (seg('ACDF'), seg('ABDE'))
    steps = given_steps(s('angle-equals-constant', 'ABC', 90), s('angle-equals-constant', 'DEF', 90), *legs)
    assert verify_step(empty_ctx, ProofStep(outcome, 'hl', (1, 2, 3, 4)), steps)
    steps = given_steps(s('angle-equals-constant', 'ABC', 60), s('angle-equals-constant', 'DEF', 60), *legs)
    result = verify_step(empty_ctx, ProofStep(outcome, 'hl', (1, 2, 3, 4)), steps)
    assert result.message.startswith('No valid HL')


def test_one_prerequisite_fills_at_most_one_premise(empty_ctx):
    outcome = s('triangles-congruent', 'ABCACB')
    # AB = AC would stand for both AB = AC and AC = AB
    steps = given_steps(seg('ABAC'), ang('CABBAC'), seg('BCBC'))
    result = verify_step(empty_ctx, ProofStep(outcome, 'sas', (1, 2, 3)), steps)
    assert not result
    assert result.message.startswith('No valid SAS combination')

    steps = given_steps(seg('ABAC'), seg('ACAB'), ang('CABBAC'))
    assert verify_step(empty_ctx, ProofStep(outcome, 'sas', (1, 2, 3)), steps)


def test_from_congruence(empty_ctx):
    steps = given_steps(s('triangles-congruent', 'AMBAMC'))
    assert verify_step(empty_ctx, ProofStep(seg('ABAC'), 'from-congruence', (1,)), steps)
    result = verify_step(empty_ctx, ProofStep(seg('ABBC'), 'from-congruence', (1,)), steps)
    assert not result
    result = verify_step(empty_ctx, ProofStep(ang('ABCABC'), 'from-congruence', (1,)), steps)
    assert result.message == 'Conclusion must be a segment equality (e.g. AB = DE).'


def test_template_reasons(empty_ctx):
    steps = given_steps(s('point-on-line', 'CAB'), s('points-distinct', 'PQ'))
    assert verify_step(empty_ctx, ProofStep(s('line-equals-line', 'ACAB'), 'point-on-line-same-line', (1,)), steps)
    assert verify_step(empty_ctx, ProofStep(s('unique-line', 'PQ'), 'line-determination', (2,)), steps)

    result = verify_step(empty_ctx, ProofStep(s('line-equals-line', 'ADAB'), 'point-on-line-same-line', (1,)), steps)
    assert result.message == (
        'Prerequisite 1: need a step stating "D ∈ line AB" (order of prerequisites does not matter).'
    )
    result = verify_step(empty_ctx, ProofStep(s('points-distinct', 'AB'), 'point-on-line-same-line', (1,)), steps)
    assert result.message == 'Conclusion should be: line AC = line AB (with your point names).'


def test_given_ref_expands_to_task_givens(empty_ctx):
    givens = [s('point-on-line', 'CAB')]
    step = ProofStep(s('line-equals-line', 'ACAB'), 'point-on-line-same-line', ('given',))
    assert verify_step(empty_ctx, step, [], givens)
    assert resolve_prerequisites(['given', 0, 1], [], givens) == givens


def test_proof_step_record_round_trip():
    step = ProofStep(s('angle-equals-constant', 'AMC', 90), 'thales', ['given', 2])
    record = step.to_record()
    assert record == {
        'op': 'proof_step',
        'reasonId': 'thales',
        'outcome': {'kind': 'angle-equals-constant', 'pointNames': ['A', 'M', 'C'], 'constant': 90.0},
        'prerequisiteRefs': ['given', 2],
    }
    assert ProofStep.from_record(record) == step


@pytest.mark.parametrize(
    'record',
    [
        {'outcome': {'kind': 'points-distinct', 'pointNames': ['A', 'B']}},
        {'reasonId': 'given'},
        {'reasonId': 'given', 'outcome': {'kind': 'points-distinct', 'pointNames': ['A']}},
        {'reasonId': 'given', 'outcome': {'kind': 'points-distinct', 'pointNames': ['A', 'B']}, 'prerequisiteRefs': [True]},
    ],
)
def test_bad_records_raise(record):
    with pytest.raises(ProofRecordError):
        ProofStep.from_record(record)


def test_known_reason_ids_lists_enabled_catalog():
    ids = known_reason_ids()
    assert ids[0] == 'given'
    assert 'sas' in ids and 'thales' in ids
