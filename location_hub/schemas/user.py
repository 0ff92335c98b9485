from pydantic import BaseModel, Field, ConfigDict


class RegisterRequest(BaseModel):
    """사용자 등록 요청 스키마"""
    name: str = Field(default="", max_length=100, description="표시명")


class RegisterResponse(BaseModel):
    """사용자 등록 응답 스키마 (토큰은 이 응답에서만 노출)"""
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="사용자 ID")
    name: str = Field(..., description="표시명")
    token: str = Field(..., description="WebSocket 인증용 토큰")


class UserSummary(BaseModel):
    """세션에 캐시되는 읽기 전용 사용자 정보"""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str = Field(..., description="사용자 ID")
    name: str = Field(..., description="표시명")
