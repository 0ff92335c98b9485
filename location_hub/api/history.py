from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from location_hub.api.auth import get_current_user
from location_hub.database.session import get_async_session
from location_hub.models.users import User
from location_hub.schemas.location import HistoryResponse, LocationRecord
from location_hub.schemas.user import UserSummary
from location_hub.services import location_service

router = APIRouter(tags=["History"])


def content_disposition(filename: str) -> str:
    """
    첨부 파일 헤더 생성.

    헤더는 latin-1로 인코딩되므로 ASCII 대체 이름을 따옴표로 감싸고,
    원래 이름은 RFC 5987 filename* 파라미터로 함께 보냅니다.
    """
    fallback = "".join(
        ch if ch.isascii() and ch.isprintable() and ch not in '"\\' else "_"
        for ch in filename
    )
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


@router.get("/history", response_model=HistoryResponse)
async def download_history(
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_async_session)
):
    """
    토큰 소유자의 위치 이력을 JSON 파일로 내려받습니다 (ts 오름차순).
    """
    locations = await location_service.get_user_history(db, current_user.id)

    history = HistoryResponse(
        user=UserSummary.model_validate(current_user),
        locations=[LocationRecord.model_validate(location) for location in locations]
    )

    filename = f"history_{current_user.name or current_user.id}.json"
    return JSONResponse(
        content=history.model_dump(),
        headers={"Content-Disposition": content_disposition(filename)}
    )
