"""FastAPI 애플리케이션 진입점. 미들웨어와 API 라우터를 등록합니다."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lecture_feedback.config import settings
from lecture_feedback.database import Base, engine
import lecture_feedback.models  # noqa: F401 - 모델 import로 metadata 등록
from lecture_feedback.routers import admin, analysis, auth, lectures, surveys

app = FastAPI(
    title="강의 피드백 설문 시스템",
    description="강의 후 설문을 마감하고 응답을 집계해 분석 결과를 제공하는 시스템",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(lectures.router)
app.include_router(surveys.router)
app.include_router(analysis.router)
app.include_router(admin.router)


@app.on_event("startup")
def ensure_schema():
    # 누락된 테이블만 생성한다.
    Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health():
    return {"status": "ok"}
