"""환경 변수 기반 애플리케이션 설정을 중앙에서 관리합니다."""

from datetime import datetime
from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./lecture_feedback.db"
    SECRET_KEY: str = "change-me-to-a-random-secret-key"
    DEBUG: bool = True
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # JWT
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    # 설문 마감 일시(YYYY-MM-DD + HH:MM)를 해석할 기본 타임존
    SURVEY_TIMEZONE: str = "Asia/Tokyo"

    # 결과 세트 생성 인자 검증 범위
    RESULT_SET_MIN_CLOSED_AT: datetime = datetime.fromisoformat("2020-01-01T00:00:00+00:00")
    RESULT_SET_MAX_FUTURE_DAYS: int = 365
    MAX_TOTAL_RESPONSES: int = 100_000

    # scripts/run_closure_sweep.py --loop 실행 간격
    CLOSURE_SWEEP_INTERVAL_MINUTES: int = 5
    LOG_LEVEL: str = "INFO"

    class Config:
        # 실행 cwd와 무관하게 backend/.env를 로드한다.
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
