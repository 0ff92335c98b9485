"""
Location Hub - FastAPI Application

토큰으로 인증된 사용자들이 방 단위로 실시간 위치를 공유하는 서비스
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.exceptions import HTTPException as StarletteHTTPException

from location_hub.api import auth, health, history, rooms, websocket
from location_hub.core.config import settings
from location_hub.core.logging import setup_logging, get_logger
from location_hub.database import init_databases, close_databases
from location_hub.middleware.error_handler import ErrorHandlerMiddleware, create_http_exception_handler
from location_hub.services.position_writer import position_writer

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management"""
    # Startup
    setup_logging()
    logger.info(f"{settings.app_name} starting up")
    await init_databases()
    await position_writer.start()

    yield

    # Shutdown
    logger.info(f"{settings.app_name} shutting down")
    await position_writer.stop()
    await close_databases()


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    lifespan=lifespan
)

app.add_middleware(ErrorHandlerMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_exception_handler(StarletteHTTPException, create_http_exception_handler())

# Include routers
app.include_router(auth.router)
app.include_router(history.router)
app.include_router(rooms.router)
app.include_router(health.router)
app.include_router(websocket.router)

# Prometheus metrics
Instrumentator().instrument(app).expose(app)

# 정적 파일은 모든 라우터 뒤에 마운트
if settings.static_dir and Path(settings.static_dir).is_dir():
    app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "location_hub.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
