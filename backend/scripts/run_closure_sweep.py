"""Run the survey closure/analysis sweep (cron entry point)."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import argparse
import asyncio
import logging

from lecture_feedback.config import settings
from lecture_feedback.database import Base, SessionLocal, engine
import lecture_feedback.models  # noqa: F401
from lecture_feedback.services.closure_service import run_closure_sweep

logger = logging.getLogger("run_closure_sweep")


async def run_loop(interval_minutes: int):
    while True:
        await run_closure_sweep(SessionLocal)
        await asyncio.sleep(interval_minutes * 60)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="마감 시각이 지난 설문을 마감하고 분석 결과를 저장합니다.")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--once", action="store_true", help="한 번만 실행 (기본값)")
    mode.add_argument("--loop", action="store_true", help="CLOSURE_SWEEP_INTERVAL_MINUTES 간격으로 반복 실행")
    parser.add_argument("--interval", type=int, default=settings.CLOSURE_SWEEP_INTERVAL_MINUTES)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    Base.metadata.create_all(bind=engine)

    if args.loop:
        logger.info("[closure] loop mode interval=%sm", args.interval)
        try:
            asyncio.run(run_loop(args.interval))
        except KeyboardInterrupt:
            logger.info("[closure] loop stopped")
        return 0

    result = asyncio.run(run_closure_sweep(SessionLocal))
    return 1 if result.metrics.closure.failure_count or result.metrics.analysis.failure_count else 0


if __name__ == "__main__":
    sys.exit(main())
