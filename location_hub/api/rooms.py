from typing import List
from fastapi import APIRouter, Depends

from location_hub.api.auth import get_current_user
from location_hub.core.errors import room_not_found_error
from location_hub.models.users import User
from location_hub.schemas.location import RoomStatus
from location_hub.websockets.connection_manager import manager

router = APIRouter(prefix="/rooms", tags=["Rooms"])


@router.get("", response_model=List[RoomStatus])
async def list_rooms(current_user: User = Depends(get_current_user)) -> List[RoomStatus]:
    """참가자가 있는 방 목록"""
    return [
        RoomStatus(
            room=room,
            users=manager.get_room_users(room),
            online_count=manager.get_user_count_in_room(room)
        )
        for room in manager.get_room_names()
    ]


@router.get("/{room}", response_model=RoomStatus)
async def get_room_status(room: str, current_user: User = Depends(get_current_user)) -> RoomStatus:
    """
    방의 현재 참가자 정보를 조회합니다.
    비어 있는 방은 존재하지 않는 방과 같게 취급합니다.
    """
    online_count = manager.get_user_count_in_room(room)
    if online_count == 0:
        raise room_not_found_error(room)

    return RoomStatus(
        room=room,
        users=manager.get_room_users(room),
        online_count=online_count
    )
