"""
위치 저장 워커

WebSocket 핸들러는 위치를 큐에 넣기만 하고 바로 브로드캐스트합니다.
프로세스당 하나의 큐와 하나의 워커가 저장을 직렬로 처리하므로
같은 연결에서 온 위치들은 수신 순서대로 저장됩니다.
"""

import asyncio
from typing import Awaitable, Callable, Optional

from location_hub.core.config import settings
from location_hub.core.logging import get_logger
from location_hub.schemas.location import LocationEvent
from location_hub.services import location_service

logger = get_logger(__name__)

AppendFunc = Callable[[LocationEvent], Awaitable[None]]


async def persist_location(event: LocationEvent) -> None:
    """자체 세션으로 위치 한 건 저장"""
    from location_hub.database.session import AsyncSessionLocal

    async with AsyncSessionLocal() as db:
        await location_service.append_location(db, event)


class PositionWriter:
    """Position Log 직렬 저장기"""

    def __init__(self, append: Optional[AppendFunc] = None, maxsize: Optional[int] = None):
        self._append = append or persist_location
        self._maxsize = settings.position_queue_size if maxsize is None else maxsize
        self._queue: Optional[asyncio.Queue] = None
        self.task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self.task is not None and not self.task.done()

    async def start(self):
        """워커 시작"""
        if self.running:
            logger.warning("Position writer is already running")
            return

        # 큐는 현재 이벤트 루프에서 생성
        self._queue = asyncio.Queue(maxsize=self._maxsize)
        self.task = asyncio.create_task(self._run())
        logger.info("Position writer started")

    async def stop(self):
        """남은 위치를 모두 저장한 뒤 워커 중지"""
        if not self.running:
            return

        await self._queue.put(None)
        try:
            await self.task
        except asyncio.CancelledError:
            pass
        self.task = None
        self._queue = None
        logger.info("Position writer stopped")

    def submit(self, event: LocationEvent) -> bool:
        """
        위치 저장 요청 (fire-and-forget).

        호출자를 막지 않으며, 워커가 멈춰 있거나 큐가 가득 차면 이벤트를 버리고 로그를 남깁니다.

        Returns:
            bool: 큐에 들어갔으면 True
        """
        if not self.running:
            logger.error(f"Position writer not running, dropping location for user {event.user_id}")
            return False

        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.error(f"Position queue full, dropping location for user {event.user_id}")
            return False
        return True

    async def join(self):
        """지금까지 제출된 위치가 모두 처리될 때까지 대기"""
        if self._queue is not None:
            await self._queue.join()

    def pending(self) -> int:
        return self._queue.qsize() if self._queue is not None else 0

    async def _run(self):
        while True:
            event = await self._queue.get()
            try:
                if event is None:
                    return
                await self._append(event)
            except Exception as e:
                logger.error(f"Failed to persist location for user {event.user_id}: {e}")
            finally:
                self._queue.task_done()


# 전역 위치 저장기 인스턴스
position_writer = PositionWriter()
