"""Bearer 토큰 인증과 강의 관리 권한 의존성입니다.

공개 설문 응답 API를 제외한 모든 라우터가 이 모듈의 의존성으로 사용자를 확인합니다.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from lecture_feedback.config import settings
from lecture_feedback.database import get_db
from lecture_feedback.models.lecture import Lecture
from lecture_feedback.models.user import User
from lecture_feedback.services.auth_service import ALGORITHM
from lecture_feedback.services.lifecycle_service import get_lecture
from lecture_feedback.utils.permissions import ADMIN, ensure_can_manage_lecture

security = HTTPBearer()


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="유효하지 않거나 만료된 토큰입니다.",
        )


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    payload = decode_token(credentials.credentials)
    user_id = payload.get("sub")
    if user_id is None or not str(user_id).isdigit():
        raise HTTPException(status_code=401, detail="토큰에 사용자 정보가 없습니다.")

    user = db.query(User).filter(User.user_id == int(user_id), User.is_active == True).first()  # noqa: E712
    if not user:
        raise HTTPException(status_code=401, detail="비활성화되었거나 존재하지 않는 사용자입니다.")
    return user


def require_roles(*roles: str):
    def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"권한이 없습니다. (필요 역할: {', '.join(roles)})",
            )
        return current_user
    return checker


require_admin = require_roles(ADMIN)


def get_managed_lecture(
    lecture_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Lecture:
    """경로의 lecture_id 강의를 반환한다. 없으면 404, 소유자/관리자가 아니면 403."""
    lecture = get_lecture(db, lecture_id)
    ensure_can_manage_lecture(lecture, current_user)
    return lecture
