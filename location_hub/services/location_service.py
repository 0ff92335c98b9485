"""
위치 기록 서비스 (Position Log)

append-only 위치 저장과 사용자별 이력 조회를 담당합니다.
"""

from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from location_hub.models.locations import Location
from location_hub.schemas.location import LocationEvent


async def append_location(db: AsyncSession, event: LocationEvent) -> Location:
    """위치 한 건 저장"""
    location = Location(
        user_id=event.user_id,
        lat=event.lat,
        lng=event.lng,
        accuracy=event.accuracy,
        ts=event.ts
    )

    db.add(location)
    await db.commit()
    return location


async def get_user_history(db: AsyncSession, user_id: str) -> List[Location]:
    """사용자의 위치 이력 조회 (ts 오름차순)"""
    result = await db.execute(
        select(Location)
        .where(Location.user_id == user_id)
        .order_by(Location.ts.asc(), Location.id.asc())
    )
    return list(result.scalars().all())
