from typing import List, Optional

from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()  # .env 파일 로드


class Settings(BaseSettings):
    """Location Hub 설정"""

    # Application
    app_name: str = "Location Hub"
    version: str = "1.0.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8080

    # Database
    database_url: str = "sqlite+aiosqlite:///./ubicacion.db"

    # WebSocket
    websocket_path: str = "/ws"
    default_room: str = "sala1"

    # 위치 저장 큐 크기 (가득 차면 이벤트를 버림)
    position_queue_size: int = 10000

    # CORS
    cors_origins: List[str] = ["http://localhost:3000"]

    # 정적 파일 디렉토리 (존재하면 "/"에 마운트, 빈 값이면 사용 안 함)
    static_dir: Optional[str] = "static"

    # Logging
    log_dir: str = "logs"
    log_to_file: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
