import pytest

from lecture_feedback.utils.statistics import (
    calculate_average,
    calculate_percentage,
    count_occurrences,
    round_half_up,
)


@pytest.mark.parametrize(
    "value, expected",
    [(1.125, 1.13), (4.3333, 4.33), (2.5, 2.5), (0.005, 0.01), (0.0, 0.0)],
)
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_percentage_zero_total():
    assert calculate_percentage(0, 0) == 0.0
    assert calculate_percentage(1, 3) == 33.33


def test_average():
    assert calculate_average([]) == 0.0
    assert calculate_average([3, 4, 4, 5]) == 4.0


def test_count_occurrences_uses_string_keys():
    assert count_occurrences([1, "1", 2]) == {"1": 2, "2": 1}
