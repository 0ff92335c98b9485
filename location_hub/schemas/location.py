from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict

from location_hub.schemas.user import UserSummary


class LocationEvent(BaseModel):
    """수신된 위치 하나 (저장과 브로드캐스트에 함께 사용)"""
    model_config = ConfigDict(frozen=True)

    user_id: str
    name: Optional[str] = None
    lat: float
    lng: float
    accuracy: float = 0
    ts: int


class LocationRecord(BaseModel):
    """이력 조회 응답의 위치 항목"""
    model_config = ConfigDict(from_attributes=True)

    lat: float
    lng: float
    accuracy: float
    ts: int


class HistoryResponse(BaseModel):
    """위치 이력 응답 스키마"""
    user: UserSummary
    locations: List[LocationRecord] = Field(default_factory=list)


class RoomStatus(BaseModel):
    """방 상태 스키마"""
    room: str
    users: List[UserSummary] = Field(default_factory=list)
    online_count: int = 0
