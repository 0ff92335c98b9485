"""
WebSocket 메시지 스키마

클라이언트와 주고받는 JSON 프레임의 형태를 정의합니다.
출력 메시지는 클라이언트 호환을 위해 camelCase 별칭(clientId)으로 직렬화합니다.
"""

from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, FiniteFloat

from location_hub.schemas.user import UserSummary

INVALID_TOKEN = "invalid token"
NOT_AUTHENTICATED = "not authenticated"


# =============================================================================
# 수신 메시지
# =============================================================================

class AuthMessage(BaseModel):
    """인증 요청 {type:"auth", token, room?}"""
    type: Literal["auth"] = "auth"
    token: Optional[str] = None
    room: Optional[str] = None


class LocationMessage(BaseModel):
    """위치 업데이트 {type:"location", lat, lng, ts?, accuracy?}

    숫자 문자열은 숫자로 변환됩니다. NaN/Infinity는 거부합니다.
    """
    type: Literal["location"] = "location"
    lat: FiniteFloat
    lng: FiniteFloat
    ts: Optional[FiniteFloat] = None
    accuracy: Optional[FiniteFloat] = None


# =============================================================================
# 송신 메시지
# =============================================================================

class OutboundMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class WelcomeMessage(OutboundMessage):
    type: Literal["welcome"] = "welcome"
    client_id: str = Field(..., alias="clientId")


class MetaMessage(OutboundMessage):
    """방 참가자 목록"""
    type: Literal["meta"] = "meta"
    users: List[UserSummary] = Field(default_factory=list)


class LocationBroadcast(OutboundMessage):
    type: Literal["location"] = "location"
    client_id: str = Field(..., alias="clientId")
    name: Optional[str] = None
    lat: float
    lng: float
    ts: int
    accuracy: float


class ErrorMessage(OutboundMessage):
    type: Literal["error"] = "error"
    error: str
