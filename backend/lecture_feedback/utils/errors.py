"""설문 마감/분석 파이프라인의 사전조건 위반 예외입니다.

모두 ``HTTPException`` 하위 클래스이므로 라우터에서는 그대로 전파하고,
마감 배치에서는 ``reason`` 코드로 실패 유형을 구분합니다.
"""

from typing import Optional

from fastapi import HTTPException


class SurveyPipelineError(HTTPException):
    default_status_code = 400
    reason = "invalid_request"

    def __init__(self, detail: str, *, status_code: Optional[int] = None):
        super().__init__(status_code=status_code or self.default_status_code, detail=detail)

    def __str__(self) -> str:
        return f"{self.reason}: {self.detail}"


class LectureNotFoundError(SurveyPipelineError):
    default_status_code = 404
    reason = "lecture_not_found"

    def __init__(self, lecture_id: int):
        super().__init__(f"강의를 찾을 수 없습니다. (lecture_id={lecture_id})")
        self.lecture_id = lecture_id


class InvalidLectureStateError(SurveyPipelineError):
    default_status_code = 409
    reason = "invalid_state"


class SurveyDeadlineNotReachedError(SurveyPipelineError):
    default_status_code = 409
    reason = "deadline_not_reached"


class InvalidScheduleError(SurveyPipelineError):
    reason = "invalid_schedule"


class InvalidResultSetArgsError(SurveyPipelineError):
    reason = "invalid_arguments"


class DuplicateResultSetError(SurveyPipelineError):
    default_status_code = 409
    reason = "duplicate_result_set"


class SurveyClosedError(SurveyPipelineError):
    default_status_code = 409
    reason = "survey_not_active"


class DuplicateResponseError(SurveyPipelineError):
    default_status_code = 409
    reason = "duplicate_response"
