import pytest

from geoproof.parser import expand_latex_macros, extract_point_names, parse_outcome_statement
from geoproof.statements import Statement


@pytest.mark.parametrize(
    'text, kind, names',
    [
        ('A ≠ B', 'points-distinct', ('A', 'B')),
        ('C ∈ line AB', 'point-on-line', ('C', 'A', 'B')),
        ('C in line AB', 'point-on-line', ('C', 'A', 'B')),
        ('line AC = line AB', 'line-equals-line', ('A', 'C', 'A', 'B')),
        ('ray AB ∪ ray CB form line AB', 'rays-form-line', ('A', 'B', 'C')),
        ('∃₁ line through A, B', 'unique-line', ('A', 'B')),
        ('E = AB ∩ CD', 'intersection-equals', ('E', 'A', 'B', 'C', 'D')),
        ('Let M be midpoint of AB', 'point-midpoint-of-segment', ('M', 'A', 'B')),
        ('M is midpoint of AB', 'point-midpoint-of-segment', ('M', 'A', 'B')),
        ('∠AMC = ∠AMB', 'angle-equals-angle', ('A', 'M', 'C', 'A', 'M', 'B')),
        ('∠AMB < ∠CND', 'angle-less-than-angle', ('A', 'M', 'B', 'C', 'N', 'D')),
        ('∠AMB > ∠CND', 'angle-greater-than-angle', ('A', 'M', 'B', 'C', 'N', 'D')),
        ('∠AMB ≤ ∠CND', 'angle-leq-angle', ('A', 'M', 'B', 'C', 'N', 'D')),
        ('∠AMB ≥ ∠CND', 'angle-geq-angle', ('A', 'M', 'B', 'C', 'N', 'D')),
        ('AB = AC', 'segment-equals-segment', ('A', 'B', 'A', 'C')),
        ('BM = MC', 'segment-equals-segment', ('B', 'M', 'M', 'C')),
        ('triangle ABC angles sum to 180', 'triangle-angles-sum-180', ('A', 'B', 'C')),
        ('ΔAMB ≅ ΔAMC', 'triangles-congruent', ('A', 'M', 'B', 'A', 'M', 'C')),
        ('AMB congruent AMC', 'triangles-congruent', ('A', 'M', 'B', 'A', 'M', 'C')),
    ],
)
def test_parse_recognized_forms(text, kind, names):
    parsed = parse_outcome_statement(text)
    assert parsed is not None
    assert parsed.kind == kind
    assert parsed.point_names == names


def test_parse_angle_constant_reads_degrees():
    parsed = parse_outcome_statement('∠AMC = 90°')
    assert parsed == Statement('angle-equals-constant', ('A', 'M', 'C'), 90)

    fractional = parse_outcome_statement('angle ABC = 37.5°')
    assert fractional is not None
    assert fractional.constant == pytest.approx(37.5)


def test_latex_macros_are_expanded_before_parsing():
    assert expand_latex_macros(r'\angle AMC = 90\deg') == '∠ AMC = 90°'
    assert expand_latex_macros(r'\unknown A') == r'\unknown A'
    parsed = parse_outcome_statement(r'\ang AMB \leq \ang CND')
    assert parsed is not None
    assert parsed.kind == 'angle-leq-angle'


def test_point_names_skip_keywords_and_split_uppercase_runs():
    assert extract_point_names('Let M be midpoint of AB') == ['M', 'A', 'B']
    assert extract_point_names('P1 ∈ line A_2 B') == ['P1', 'A_2', 'B']


def test_first_matching_cue_wins_over_better_fit():
    # "line " and "=" are tested before the ray-union cue.
    parsed = parse_outcome_statement('ray AB ∪ ray CB = line AB')
    assert parsed is not None
    assert parsed.kind == 'line-equals-line'

    # The angle-with-degree cue precedes the triangle-sum cue.
    parsed = parse_outcome_statement('angles of ΔABC sum to 180°')
    assert parsed is not None
    assert parsed.kind == 'angle-equals-constant'
    assert parsed.constant == 180


@pytest.mark.parametrize('text', ['', '   ', 'hello world', 'AB =', '∠AM = ∠B', 'ΔAB ≅ ΔCD'])
def test_unrecognized_text_returns_none(text):
    assert parse_outcome_statement(text) is None
