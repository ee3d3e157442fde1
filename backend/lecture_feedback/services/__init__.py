"""서비스 레이어 패키지 초기화 모듈입니다."""

from lecture_feedback.services import (
    auth_service,
    lecture_service,
    response_service,
    lifecycle_service,
    analysis_engine,
    result_service,
    closure_service,
)
