"""강의 평가 설문의 고정 문항/선택지 정의입니다."""

from typing import Dict, List, Tuple

GENDER = "gender"
AGE_GROUP = "ageGroup"
UNDERSTANDING = "understanding"
SATISFACTION = "satisfaction"

TOTAL_DIMENSION = "_total"

GENDER_OPTIONS = ("male", "female", "other", "preferNotToSay")
AGE_GROUP_OPTIONS = ("10s", "20s", "30s", "40s", "50s", "60s", "70s")
RATING_LEVELS = ("1", "2", "3", "4", "5")
RATING_MIN = 1
RATING_MAX = 5

QUESTION_OPTIONS: Dict[str, Tuple[str, ...]] = {
    GENDER: GENDER_OPTIONS,
    AGE_GROUP: AGE_GROUP_OPTIONS,
    UNDERSTANDING: RATING_LEVELS,
    SATISFACTION: RATING_LEVELS,
}

# 문항 코드 -> SurveyResponse 컬럼명
QUESTION_FIELDS: Dict[str, str] = {
    GENDER: "gender",
    AGE_GROUP: "age_group",
    UNDERSTANDING: "understanding",
    SATISFACTION: "satisfaction",
}

SIMPLE_QUESTIONS: Tuple[str, ...] = (GENDER, AGE_GROUP, UNDERSTANDING, SATISFACTION)
RATING_QUESTIONS: Tuple[str, ...] = (UNDERSTANDING, SATISFACTION)
CROSS_PAIRS: Tuple[Tuple[str, str], ...] = (
    (UNDERSTANDING, GENDER),
    (UNDERSTANDING, AGE_GROUP),
    (SATISFACTION, GENDER),
    (SATISFACTION, AGE_GROUP),
)


def is_valid_question_code(question_code: str) -> bool:
    return question_code in QUESTION_OPTIONS


def is_valid_cross_pair(row_question: str, col_question: str) -> bool:
    # 평가 문항(행) x 속성 문항(열) 네 조합만 허용한다.
    return (row_question, col_question) in CROSS_PAIRS


def get_options(question_code: str) -> List[str]:
    if question_code not in QUESTION_OPTIONS:
        raise ValueError(f"unknown question code: {question_code}")
    return list(QUESTION_OPTIONS[question_code])
