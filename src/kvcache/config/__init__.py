"""
설정 관리 모듈

주요 구성요소:
    - RedisConfig: Redis 연결 및 풀 설정
    - CacheConfig: 기본 만료 시간, 키 접두사
    - LoggingConfig: 로그 레벨과 출력 형식
    - validate_config: 설정 검증기
    - configure_logging: structlog 설정
"""

from .settings import CacheConfig, LoggingConfig, RedisConfig
from .validators import validate_config
from .log_setup import configure_logging

__all__ = [
    "RedisConfig",
    "CacheConfig",
    "LoggingConfig",
    "validate_config",
    "configure_logging",
]
