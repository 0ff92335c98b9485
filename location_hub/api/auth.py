from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from location_hub.core.errors import name_required_error, token_required_error, invalid_token_error
from location_hub.core.logging import get_logger, log_authentication_event
from location_hub.database.session import get_async_session
from location_hub.models.users import User
from location_hub.schemas.user import RegisterRequest, RegisterResponse
from location_hub.services import auth_service

logger = get_logger(__name__)

router = APIRouter(tags=["Authentication"])


async def get_current_user(
        token: Optional[str] = Query(None, description="등록 시 발급받은 토큰"),
        db: AsyncSession = Depends(get_async_session)
) -> User:
    """
    쿼리 파라미터 토큰으로 현재 사용자 조회
    """
    if not token:
        raise token_required_error()

    user = await auth_service.find_user_by_token(db, token)
    if not user:
        log_authentication_event(logger, "http_token", success=False)
        raise invalid_token_error()

    return user


@router.post("/register",
             response_model=RegisterResponse,
             status_code=status.HTTP_200_OK)
async def register(
        user_data: RegisterRequest,
        db: AsyncSession = Depends(get_async_session)
) -> RegisterResponse:
    """
    사용자 등록 및 토큰 발급

    - 이름은 앞뒤 공백을 제거한 뒤 비어 있으면 안 됨
    - 발급된 토큰으로 WebSocket auth 메시지를 보냄
    """
    name = user_data.name.strip()
    if not name:
        raise name_required_error(user_data.name)

    user = await auth_service.create_user(db, name)
    log_authentication_event(logger, "register", user_id=user.id)

    return RegisterResponse.model_validate(user)
