"""
캐시 클라이언트 설정 클래스

Redis 연결, 캐시 동작, 로깅 설정을 관리합니다.
모든 설정은 기본값을 가지며 환경 변수로 오버라이드할 수 있습니다.
"""

import os
from dataclasses import dataclass
from typing import Optional


def _optional_float(value: Optional[str]) -> Optional[float]:
    return float(value) if value else None


@dataclass
class RedisConfig:
    """
    Redis 연결 및 연결 풀 설정

    max_connections는 최대 활성 연결 수이며,
    health_check_interval(초) 이상 유휴였던 연결은 재사용 전에 PING으로 확인합니다.
    """

    host: str = "localhost"
    port: int = 6379
    password: Optional[str] = None
    db: int = 0
    max_connections: int = 1000
    health_check_interval: int = 1
    socket_timeout: Optional[float] = None

    @classmethod
    def from_env(cls) -> "RedisConfig":
        """환경 변수에서 Redis 설정 로드"""
        return cls(
            host=os.getenv("REDIS_HOST", "localhost"),
            port=int(os.getenv("REDIS_PORT", "6379")),
            password=os.getenv("REDIS_PASSWORD") or None,
            db=int(os.getenv("REDIS_DB", "0")),
            max_connections=int(os.getenv("REDIS_MAX_CONNECTIONS", "1000")),
            health_check_interval=int(os.getenv("REDIS_HEALTH_CHECK_INTERVAL", "1")),
            socket_timeout=_optional_float(os.getenv("REDIS_SOCKET_TIMEOUT")),
        )


@dataclass
class CacheConfig:
    """
    캐시 동작 설정

    default_expiration은 초 단위이며 0이면 만료 없음을 뜻합니다.
    """

    default_expiration: int = 0
    key_prefix: str = "kvcache"

    @classmethod
    def from_env(cls) -> "CacheConfig":
        """환경 변수에서 캐시 설정 로드"""
        return cls(
            default_expiration=int(os.getenv("CACHE_DEFAULT_EXPIRATION", "0")),
            key_prefix=os.getenv("CACHE_KEY_PREFIX", "kvcache"),
        )


@dataclass
class LoggingConfig:
    """
    로깅 설정

    구조화된 로깅(structlog) 출력 형식과 레벨을 제어합니다.
    """

    log_level: str = "INFO"
    json_logs: bool = False

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        """환경 변수에서 로깅 설정 로드"""
        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            json_logs=os.getenv("LOG_JSON", "false").lower() == "true",
        )
