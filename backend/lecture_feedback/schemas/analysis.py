"""분석 결과 조회 API 스키마입니다.

결과 팩트는 stat_type으로 구분되는 판별 유니온으로 내보내며, 각 유형은 자기에게
해당하는 측정값만 가집니다.
"""

from datetime import datetime
from typing import Annotated, Dict, List, Literal, Union

from pydantic import BaseModel, Field

from lecture_feedback.models.analysis import STAT_CROSS, STAT_SIMPLE, STAT_SUMMARY, ResultFact


class _FactBase(BaseModel):
    fact_id: int
    dim1_question_code: str
    dim1_option_code: str

    model_config = {"from_attributes": True}


class SimpleFactOut(_FactBase):
    stat_type: Literal["simple"] = STAT_SIMPLE
    n: int
    base_n: int
    pct: float


class CrossFactOut(_FactBase):
    stat_type: Literal["cross2"] = STAT_CROSS
    dim2_question_code: str
    dim2_option_code: str
    n: int
    row_pct: float
    row_base_n: int
    col_pct: float
    col_base_n: int
    total_pct: float
    total_base_n: int


class SummaryFactOut(_FactBase):
    stat_type: Literal["summary"] = STAT_SUMMARY
    target_question_code: str
    avg_score: float
    base_n: int


ResultFactOut = Annotated[
    Union[SimpleFactOut, CrossFactOut, SummaryFactOut],
    Field(discriminator="stat_type"),
]

_FACT_SCHEMAS = {
    STAT_SIMPLE: SimpleFactOut,
    STAT_CROSS: CrossFactOut,
    STAT_SUMMARY: SummaryFactOut,
}


def fact_to_out(row: ResultFact) -> Union[SimpleFactOut, CrossFactOut, SummaryFactOut]:
    schema = _FACT_SCHEMAS.get(row.stat_type)
    if schema is None:
        raise ValueError(f"unknown stat_type: {row.stat_type}")
    return schema.model_validate(row)


class ResultSetOut(BaseModel):
    result_set_id: int
    lecture_id: int
    closed_at: datetime
    total_responses: int
    created_at: datetime

    model_config = {"from_attributes": True}


class LatestAnalysisOut(BaseModel):
    result_set: ResultSetOut
    facts: List[ResultFactOut] = Field(default_factory=list)


class BasicDistributionsOut(BaseModel):
    gender: List[SimpleFactOut] = Field(default_factory=list)
    age_group: List[SimpleFactOut] = Field(default_factory=list)
    understanding: List[SimpleFactOut] = Field(default_factory=list)
    satisfaction: List[SimpleFactOut] = Field(default_factory=list)


class AveragesOut(BaseModel):
    understanding: float = 0.0
    satisfaction: float = 0.0


class BasicStatisticsOut(BaseModel):
    lecture_id: int
    result_set_id: int
    closed_at: datetime
    total_responses: int
    distributions: BasicDistributionsOut
    averages: AveragesOut


class CrossAnalysisOut(BaseModel):
    lecture_id: int
    result_set_id: int
    closed_at: datetime
    total_responses: int
    understanding_by_gender: List[CrossFactOut] = Field(default_factory=list)
    understanding_by_age_group: List[CrossFactOut] = Field(default_factory=list)
    satisfaction_by_gender: List[CrossFactOut] = Field(default_factory=list)
    satisfaction_by_age_group: List[CrossFactOut] = Field(default_factory=list)


class AllLecturesAverageOut(BaseModel):
    target_question: str
    average: float
    total_lectures: int


class AnalysisRunOut(BaseModel):
    lecture_id: int
    result_set_id: int
    total_responses: int
    results_count: Dict[str, int]
    execution_time_ms: int


class ProcessingStatsOut(BaseModel):
    success_count: int
    failure_count: int
    failed_ids: List[int] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


class ClosureSweepOut(BaseModel):
    closed_count: int
    analyzed_count: int
    processing_time_ms: int
    closure: ProcessingStatsOut
    analysis: ProcessingStatsOut
    summary: str
