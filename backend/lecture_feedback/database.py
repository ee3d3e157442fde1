"""SQLAlchemy 엔진/세션 팩토리와 FastAPI DB 의존성을 정의합니다."""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from lecture_feedback.config import settings


def _engine_kwargs(url: str) -> dict:
    # 마감 배치가 스레드별 세션을 사용하므로 SQLite 스레드 검사를 끈다.
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
