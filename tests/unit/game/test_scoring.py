import math

import pytest

from dicedestiny.game.distribution import OutcomeDistribution, evaluate
from dicedestiny.game.expression import parse_expression
from dicedestiny.game.scoring import aligned_probabilities, distance, is_match

EXPRESSIONS = ["2 + 4", "4 + 2", "2 * 4", "12 / 8 - 6", "2", "8 - 12 * 2"]


@pytest.mark.parametrize("text", EXPRESSIONS)
def test_distance_to_self_is_zero(text):
    dist = evaluate(parse_expression(text))
    assert distance(dist, dist) == 0.0
    assert is_match(dist, dist)


@pytest.mark.parametrize("a", EXPRESSIONS)
@pytest.mark.parametrize("b", EXPRESSIONS)
def test_distance_symmetric(a, b):
    da, db = evaluate(parse_expression(a)), evaluate(parse_expression(b))
    assert distance(da, db) == distance(db, da)
    assert distance(da, db) >= 0.0


def test_commutative_sum_is_exact_match():
    assert distance(evaluate(parse_expression("2 + 4")), evaluate(parse_expression("4 + 2"))) == 0.0


def test_disjoint_supports():
    one = OutcomeDistribution.from_counts({1.0: 1}, 1)
    two = OutcomeDistribution.from_counts({2.0: 1}, 1)
    assert distance(one, two) == pytest.approx(math.sqrt(2))
    assert not is_match(one, two)


def test_hand_computed_distance():
    a = evaluate(parse_expression("2"))  # {1: .5, 2: .5}
    b = evaluate(parse_expression("4"))  # {1..4: .25}
    # (.25^2 + .25^2 + .25^2 + .25^2) = 0.25
    assert distance(a, b) == pytest.approx(0.5)


def test_empty_distributions_do_not_crash():
    empty = OutcomeDistribution()
    full = evaluate(parse_expression("2"))
    assert distance(empty, empty) == 0.0
    assert distance(empty, full) == pytest.approx(math.sqrt(0.5))


def test_aligned_probabilities_zero_pads():
    a = evaluate(parse_expression("2"))
    b = OutcomeDistribution.from_counts({3.0: 1}, 1)
    values, pa, pb = aligned_probabilities(a, b)
    assert values.tolist() == [1.0, 2.0, 3.0]
    assert pa.tolist() == [0.5, 0.5, 0.0]
    assert pb.tolist() == [0.0, 0.0, 1.0]
