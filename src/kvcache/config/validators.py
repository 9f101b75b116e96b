"""
설정 검증 모듈

Redis 연결 설정과 캐시 설정의 유효성을 검증합니다.
"""

from typing import List, Optional, Tuple
import structlog

from .settings import CacheConfig, RedisConfig

logger = structlog.get_logger(__name__)


def validate_config(
    redis_config: RedisConfig, cache_config: Optional[CacheConfig] = None
) -> Tuple[bool, List[str]]:
    """
    전체 설정 검증

    Args:
        redis_config: 검증할 Redis 설정
        cache_config: 검증할 캐시 설정 (선택사항)

    Returns:
        (유효 여부, 오류 메시지 목록)
    """
    errors = []

    errors.extend(_validate_redis_settings(redis_config))
    if cache_config is not None:
        errors.extend(_validate_cache_settings(cache_config))

    is_valid = len(errors) == 0

    if not is_valid:
        logger.error(
            "설정 검증 실패",
            error_count=len(errors),
            errors=errors[:5],  # 처음 5개만 로깅
        )
    else:
        logger.debug("설정 검증 성공")

    return is_valid, errors


def _validate_redis_settings(config: RedisConfig) -> List[str]:
    """Redis 연결 설정 검증"""
    errors = []

    if not config.host or not config.host.strip():
        errors.append("Redis 호스트가 비어있음")

    if not 1 <= config.port <= 65535:
        errors.append(f"잘못된 Redis 포트: {config.port}")

    if config.db < 0:
        errors.append(f"데이터베이스 번호는 0 이상이어야 함: {config.db}")

    if config.max_connections < 1:
        errors.append(f"최대 연결 수는 1 이상이어야 함: {config.max_connections}")

    if config.health_check_interval < 0:
        errors.append(
            f"헬스 체크 간격은 0 이상이어야 함: {config.health_check_interval}"
        )

    if config.socket_timeout is not None and config.socket_timeout <= 0:
        errors.append(f"소켓 타임아웃은 양수여야 함: {config.socket_timeout}")

    return errors


def _validate_cache_settings(config: CacheConfig) -> List[str]:
    """캐시 동작 설정 검증"""
    errors = []

    if config.default_expiration < 0:
        errors.append(f"기본 만료 시간은 0 이상이어야 함: {config.default_expiration}")

    if not config.key_prefix:
        errors.append("키 접두사가 비어있음")

    return errors
