"""설문 응답 집계 엔진입니다.

DB나 시계에 접근하지 않는 순수 함수만 둡니다. 같은 응답 집합을 넣으면 항상 같은
결과 팩트가 나옵니다. 세 가지 통계를 계산합니다.

- simple: 문항별 선택지 분포(n, pct, base_n)
- cross2: 평가 문항 x 속성 문항 교차표(row/col/total 비율과 분모)
- summary: 평가 문항 평균(소수 둘째 자리 반올림), ``_total`` 차원에 기록

선택지는 응답이 없어도 전부 출력합니다(n=0, pct=0).
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Sequence, Union

from lecture_feedback.models.analysis import STAT_CROSS, STAT_SIMPLE, STAT_SUMMARY
from lecture_feedback.utils import questions
from lecture_feedback.utils.statistics import (
    calculate_average,
    calculate_percentage,
    count_occurrences,
    round_half_up,
)


@dataclass(frozen=True)
class SimpleFact:
    dim1_question_code: str
    dim1_option_code: str
    n: int
    base_n: int
    pct: float
    stat_type: str = field(default=STAT_SIMPLE, init=False)


@dataclass(frozen=True)
class CrossFact:
    dim1_question_code: str
    dim1_option_code: str
    dim2_question_code: str
    dim2_option_code: str
    n: int
    row_pct: float
    row_base_n: int
    col_pct: float
    col_base_n: int
    total_pct: float
    total_base_n: int
    stat_type: str = field(default=STAT_CROSS, init=False)


@dataclass(frozen=True)
class SummaryFact:
    dim1_question_code: str
    dim1_option_code: str
    target_question_code: str
    avg_score: float
    base_n: int
    stat_type: str = field(default=STAT_SUMMARY, init=False)


Fact = Union[SimpleFact, CrossFact, SummaryFact]


@dataclass(frozen=True)
class ComputedAnalysis:
    lecture_id: int
    closed_at: datetime
    total_responses: int
    simple: List[SimpleFact]
    cross: List[CrossFact]
    summary: List[SummaryFact]

    @property
    def facts(self) -> List[Fact]:
        return [*self.simple, *self.cross, *self.summary]

    def counts(self) -> Dict[str, int]:
        return {"simple": len(self.simple), "cross": len(self.cross), "summary": len(self.summary)}


def _answer(response: Any, question_code: str) -> Any:
    field_name = questions.QUESTION_FIELDS[question_code]
    if isinstance(response, Mapping):
        return response.get(field_name, response.get(question_code))
    return getattr(response, field_name, None)


def _answer_code(response: Any, question_code: str) -> str:
    value = _answer(response, question_code)
    if value is None:
        return ""
    return str(value)


def calculate_simple_distribution(responses: Sequence[Any], question_code: str) -> List[SimpleFact]:
    if not questions.is_valid_question_code(question_code):
        raise ValueError(f"unknown question code: {question_code}")

    base_n = len(responses)
    occurrences = count_occurrences(_answer_code(row, question_code) for row in responses)
    return [
        SimpleFact(
            dim1_question_code=question_code,
            dim1_option_code=option,
            n=occurrences.get(option, 0),
            base_n=base_n,
            pct=calculate_percentage(occurrences.get(option, 0), base_n),
        )
        for option in questions.get_options(question_code)
    ]


def build_cross_table(
    responses: Sequence[Any],
    row_question: str,
    col_question: str,
) -> Dict[str, Dict[str, int]]:
    table = {
        row_option: {col_option: 0 for col_option in questions.get_options(col_question)}
        for row_option in questions.get_options(row_question)
    }
    for response in responses:
        row_value = _answer_code(response, row_question)
        col_value = _answer_code(response, col_question)
        # 정의되지 않은 선택지 값은 교차표에서 제외한다.
        if row_value in table and col_value in table[row_value]:
            table[row_value][col_value] += 1
    return table


def calculate_cross_analysis(
    responses: Sequence[Any],
    row_question: str,
    col_question: str,
) -> List[CrossFact]:
    if not questions.is_valid_cross_pair(row_question, col_question):
        raise ValueError(f"invalid cross question pair: {row_question} x {col_question}")

    table = build_cross_table(responses, row_question, col_question)
    col_options = questions.get_options(col_question)
    row_totals = {row_option: sum(cells.values()) for row_option, cells in table.items()}
    col_totals = {
        col_option: sum(cells[col_option] for cells in table.values())
        for col_option in col_options
    }
    grand_total = sum(row_totals.values())

    results: List[CrossFact] = []
    for row_option, cells in table.items():
        for col_option in col_options:
            count = cells[col_option]
            results.append(
                CrossFact(
                    dim1_question_code=row_question,
                    dim1_option_code=row_option,
                    dim2_question_code=col_question,
                    dim2_option_code=col_option,
                    n=count,
                    row_pct=calculate_percentage(count, row_totals[row_option]),
                    row_base_n=row_totals[row_option],
                    col_pct=calculate_percentage(count, col_totals[col_option]),
                    col_base_n=col_totals[col_option],
                    total_pct=calculate_percentage(count, grand_total),
                    total_base_n=grand_total,
                )
            )
    return results


def extract_numeric_scores(responses: Sequence[Any], target_question: str) -> List[float]:
    scores: List[float] = []
    for response in responses:
        value = _answer(response, target_question)
        if value is None or value == "":
            continue
        try:
            scores.append(float(value))
        except (TypeError, ValueError):
            continue
    return scores


def calculate_summary_statistics(responses: Sequence[Any], target_question: str) -> List[SummaryFact]:
    """평가 문항 평균을 ``_total`` 차원 하나로 낸다."""
    if target_question not in questions.RATING_QUESTIONS:
        raise ValueError(f"not a rating question: {target_question}")

    scores = extract_numeric_scores(responses, target_question)
    avg_score = round_half_up(calculate_average(scores), 2) if scores else 0.0
    return [
        SummaryFact(
            dim1_question_code=questions.TOTAL_DIMENSION,
            dim1_option_code=questions.TOTAL_DIMENSION,
            target_question_code=target_question,
            avg_score=avg_score,
            base_n=len(scores),
        )
    ]


def compute_result_facts(lecture_id: int, responses: Sequence[Any], closed_at: datetime) -> ComputedAnalysis:
    simple = [
        fact
        for question_code in questions.SIMPLE_QUESTIONS
        for fact in calculate_simple_distribution(responses, question_code)
    ]
    cross = [
        fact
        for row_question, col_question in questions.CROSS_PAIRS
        for fact in calculate_cross_analysis(responses, row_question, col_question)
    ]
    summary = [
        fact
        for target_question in questions.RATING_QUESTIONS
        for fact in calculate_summary_statistics(responses, target_question)
    ]
    return ComputedAnalysis(
        lecture_id=lecture_id,
        closed_at=closed_at,
        total_responses=len(responses),
        simple=simple,
        cross=cross,
        summary=summary,
    )
