"""집계 계산에 쓰는 기본 통계 함수 모음입니다."""

import math
from typing import Dict, Iterable, Sequence


def round_half_up(value: float, decimals: int = 2) -> float:
    # round(x * 100) / 100 과 같은 반올림(0.5는 올림)
    multiplier = 10 ** decimals
    return math.floor(value * multiplier + 0.5) / multiplier


def calculate_average(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def calculate_percentage(count: int, total: int, decimals: int = 2) -> float:
    if total == 0:
        return 0.0
    return round_half_up(count / total * 100, decimals)


def count_occurrences(values: Iterable) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for value in values:
        key = str(value)
        counts[key] = counts.get(key, 0) + 1
    return counts

