"""
사용자 식별 서비스 (Identity Store)

토큰 발급과 토큰 -> 사용자 조회를 담당합니다.
"""

import time
import uuid
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from location_hub.core.logging import get_logger, log_database_operation
from location_hub.models.users import User
from location_hub.schemas.user import UserSummary

logger = get_logger(__name__)


async def create_user(db: AsyncSession, name: str) -> User:
    """새 사용자 생성 및 토큰 발급"""
    user = User(
        id=str(uuid.uuid4()),
        name=name,
        token=str(uuid.uuid4()),
        created_at=int(time.time() * 1000)
    )

    db.add(user)
    await db.commit()
    await db.refresh(user)

    log_database_operation(logger, "insert", "users", affected_rows=1, user_id=user.id)
    return user


async def find_user_by_token(db: AsyncSession, token: Optional[str]) -> Optional[User]:
    """토큰으로 사용자 조회"""
    if not token:
        return None

    result = await db.execute(
        select(User).where(User.token == token)
    )
    return result.scalar_one_or_none()


async def lookup_identity(token: Optional[str]) -> Optional[UserSummary]:
    """
    WebSocket 인증용 토큰 조회.

    자체 세션을 열어 조회하며, 조회 중 오류는 로그로 남기고 미등록 토큰과 동일하게 처리합니다.

    Returns:
        UserSummary: 토큰에 해당하는 사용자, 없으면 None
    """
    if not token:
        return None

    from location_hub.database.session import AsyncSessionLocal

    try:
        async with AsyncSessionLocal() as db:
            user = await find_user_by_token(db, token)
            if not user:
                return None
            return UserSummary.model_validate(user)
    except Exception as e:
        logger.error(f"Identity lookup failed: {e}")
        return None
