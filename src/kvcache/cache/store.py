"""
Redis 기반 캐시 저장소

캐시 작업(set/add/replace/get/delete/increment/decrement/exists/set_expire/flush)을
Redis 기본 명령(GET, SET, SETEX, DEL, EXISTS, EXPIRE, DECRBY, FLUSHDB)으로 변환합니다.
존재 여부 확인, 만료 시간 변환, 0에서 멈추는 감소 같은 캐시 계약은 모두 이 계층에서 적용됩니다.

캐시 계약:
    - add: 키가 없을 때만 저장, 있으면 NotStoredError
    - replace: 키가 있을 때만 저장, 없거나 값이 None이면 NotStoredError
    - get/delete/increment/decrement: 키가 없으면 CacheMissError
    - decrement: 결과는 0 아래로 내려가지 않음
    - exists/set_expire: 실패해도 예외 없이 False

일관성 모델:
    - 확인 후 변경하는 작업(add, replace, delete, increment)은 원자적이지 않음
    - 확인과 변경 사이에 다른 호출자의 쓰기가 끼어들 수 있음 (마지막 쓰기 우선)
    - 클라이언트 측 잠금은 사용하지 않음 (Redis가 여러 프로세스가 공유하는 원본)

만료 정책:
    - Expiration.DEFAULT: 저장소 기본 만료 시간 사용
    - Expiration.FOREVER: 만료 없음 (SET)
    - timedelta 또는 초(int/float): SETEX, 초 미만은 버림
"""

import re
from contextlib import contextmanager
from datetime import timedelta
from enum import Enum
from typing import Any, Iterator, Optional, Union

import redis.asyncio as redis
import structlog

from kvcache.cache.pool import RedisPool, create_pool
from kvcache.cache.serializer import JSONSerializer, Serializer
from kvcache.config.settings import CacheConfig, RedisConfig
from kvcache.config.validators import validate_config
from kvcache.exceptions import (
    CacheMissError,
    ErrorHandler,
    NotStoredError,
    ParseError,
    StoreError,
)

logger = structlog.get_logger(__name__)

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_UINT64_MASK = (1 << 64) - 1
_INTEGER_PATTERN = re.compile(rb"[+-]?[0-9]+")

# 저장소가 직접 만드는 풀의 최대 활성 연결 수
STORE_MAX_CONNECTIONS = 1000


class Expiration(Enum):
    """호출 단위 만료 정책"""

    DEFAULT = "default"
    FOREVER = "forever"


DEFAULT = Expiration.DEFAULT
FOREVER = Expiration.FOREVER

TTL = Union[Expiration, timedelta, int, float]


def _total_seconds(ttl: Union[timedelta, int, float]) -> float:
    if isinstance(ttl, timedelta):
        return ttl.total_seconds()
    return float(ttl)


def _as_uint64(value: int) -> int:
    return value & _UINT64_MASK


def _wrap_int64(value: int) -> int:
    return ((value - _INT64_MIN) & _UINT64_MASK) + _INT64_MIN


def _check_delta(delta: int) -> None:
    if not 0 <= delta <= _UINT64_MASK:
        raise ValueError(f"delta must fit in an unsigned 64-bit integer, got {delta}")


def _parse_int64(raw: bytes, key: str) -> int:
    if not _INTEGER_PATTERN.fullmatch(raw):
        raise ParseError("저장된 값이 정수 형식이 아닙니다", key=key, value=raw)
    value = int(raw)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ParseError("저장된 값이 64비트 정수 범위를 벗어났습니다", key=key, value=raw)
    return value


@contextmanager
def _store_errors(operation: str, key: Optional[str] = None) -> Iterator[None]:
    """redis 예외를 StoreError로 변환"""
    try:
        yield
    except redis.RedisError as e:
        logger.warning(
            "Redis 명령 실패", **ErrorHandler.create_error_context(e, operation, key)
        )
        raise StoreError(str(e), operation=operation, key=key) from e


class RedisStore:
    """
    단일 Redis 인스턴스 위의 캐시 저장소

    모든 작업은 풀에서 연결 하나를 빌려 수행하고, 끝나면 반드시 반환합니다.
    저장소 자체는 풀 핸들과 기본 만료 시간 외에 상태를 갖지 않습니다.

    사용 예시:
        ```python
        store = RedisStore.create("localhost", 6379, db=1, default_expiration=300)

        await store.set("user:1", {"name": "홍길동"})
        user = await store.get("user:1")

        await store.add("counter", 10, FOREVER)
        await store.increment("counter", 5)  # 15
        await store.decrement("counter", 100)  # 0

        await store.close()
        ```

    Attributes:
        default_expiration: Expiration.DEFAULT가 가리키는 만료 시간
    """

    def __init__(
        self,
        pool: Union[RedisPool, redis.ConnectionPool],
        default_expiration: TTL = FOREVER,
        serializer: Optional[Serializer] = None,
    ):
        """
        Args:
            pool: 풀 핸들 또는 이미 설정된 redis ConnectionPool
            default_expiration: 기본 만료 시간 (0 이하나 FOREVER면 만료 없음)
            serializer: 값 직렬화기 (기본값: JSONSerializer)
        """
        if isinstance(pool, redis.ConnectionPool):
            pool = RedisPool(pool)
        self._pool = pool
        self.default_expiration = default_expiration
        self._serializer = serializer or JSONSerializer()

    @classmethod
    def create(
        cls,
        host: str = "localhost",
        port: int = 6379,
        password: Optional[str] = None,
        db: int = 0,
        default_expiration: TTL = FOREVER,
        **pool_options: Any,
    ) -> "RedisStore":
        """
        연결 풀을 직접 만들어 저장소 생성

        pool_options는 create_pool()에 그대로 전달됩니다.
        """
        pool_options.setdefault("max_connections", STORE_MAX_CONNECTIONS)
        pool = create_pool(host, port, db, password, **pool_options)
        return cls(pool, default_expiration)

    @classmethod
    def from_config(
        cls, redis_config: RedisConfig, cache_config: Optional[CacheConfig] = None
    ) -> "RedisStore":
        """
        설정 객체로 저장소 생성

        Raises:
            ValueError: 설정 검증 실패
        """
        cache_config = cache_config or CacheConfig()
        is_valid, errors = validate_config(redis_config, cache_config)
        if not is_valid:
            raise ValueError("; ".join(errors))

        return cls.create(
            host=redis_config.host,
            port=redis_config.port,
            password=redis_config.password,
            db=redis_config.db,
            default_expiration=cache_config.default_expiration,
            max_connections=redis_config.max_connections,
            health_check_interval=redis_config.health_check_interval,
            socket_timeout=redis_config.socket_timeout,
        )

    @property
    def pool(self) -> RedisPool:
        return self._pool

    def _expiration_seconds(self, ttl: TTL) -> Optional[int]:
        """
        만료 정책을 초 단위로 변환

        Returns:
            Optional[int]: SETEX/EXPIRE에 쓸 초 (소수점 버림),
                만료 없음이면 None
        """
        if ttl is Expiration.DEFAULT:
            ttl = self.default_expiration
        if isinstance(ttl, Expiration):
            # FOREVER, 또는 기본값 자리에 DEFAULT가 들어온 경우
            return None

        seconds = _total_seconds(ttl)
        if seconds <= 0:
            return None
        return int(seconds)

    async def _exists(self, conn: redis.Redis, key: str) -> bool:
        return await conn.exists(key) > 0

    async def _write(
        self, conn: redis.Redis, key: str, value: Any, ttl: TTL
    ) -> None:
        payload = self._serializer.serialize(value)
        seconds = self._expiration_seconds(ttl)

        if seconds is None:
            await conn.set(key, payload)
        else:
            await conn.setex(key, seconds, payload)

        logger.debug("캐시 저장 성공", key=key, ttl=seconds)

    async def set(self, key: str, value: Any, ttl: TTL = DEFAULT) -> None:
        """
        값 저장 (무조건 덮어쓰기)

        Raises:
            SerializationError: 값 인코딩 실패
            StoreError: 쓰기 실패
        """
        async with self._pool.acquire() as conn:
            with _store_errors("set", key):
                await self._write(conn, key, value, ttl)

    async def add(self, key: str, value: Any, ttl: TTL = DEFAULT) -> None:
        """
        키가 없을 때만 저장

        EXISTS 확인 후 저장하므로 원자적이지 않습니다.
        동시에 호출된 두 add가 모두 성공할 수 있습니다.

        Raises:
            NotStoredError: 키가 이미 존재
        """
        async with self._pool.acquire() as conn:
            with _store_errors("add", key):
                if await self._exists(conn, key):
                    raise NotStoredError(key=key)
                await self._write(conn, key, value, ttl)

    async def replace(self, key: str, value: Any, ttl: TTL = DEFAULT) -> None:
        """
        키가 있을 때만 저장

        value가 None이면 키가 존재하더라도 저장하지 않고 거부합니다.

        Raises:
            NotStoredError: 키가 없거나 value가 None
        """
        async with self._pool.acquire() as conn:
            with _store_errors("replace", key):
                if not await self._exists(conn, key):
                    raise NotStoredError(key=key)
                if value is None:
                    raise NotStoredError("cache: cannot replace with no value", key=key)
                await self._write(conn, key, value, ttl)

    async def get(self, key: str, out_type: Optional[Any] = None) -> Any:
        """
        값 조회

        Args:
            key: 캐시 키
            out_type: 복원할 타입 (None이면 JSON 값 그대로, bytes면 원본 바이트)

        Raises:
            CacheMissError: 키 없음
            DeserializationError: 디코딩 실패
            StoreError: 읽기 실패
        """
        async with self._pool.acquire() as conn:
            with _store_errors("get", key):
                raw = await conn.get(key)

        if raw is None:
            raise CacheMissError(key=key)
        return self._serializer.deserialize(raw, out_type)

    async def exists(self, key: str) -> bool:
        """키 존재 여부. 어떤 실패든 False로 처리합니다."""
        try:
            async with self._pool.acquire() as conn:
                return await self._exists(conn, key)
        except Exception as e:
            logger.warning("캐시 존재 확인 실패", key=key, error=str(e))
            return False

    async def set_expire(self, key: str, ttl: TTL) -> bool:
        """
        기존 키의 만료 시간 설정/갱신

        Returns:
            bool: Redis가 변경을 확인하면 True, 그 밖의 모든 경우 False
                (만료 없음으로 해석되는 ttl 포함)
        """
        seconds = self._expiration_seconds(ttl)
        if seconds is None:
            logger.warning("만료 없음은 EXPIRE로 설정할 수 없음", key=key)
            return False

        try:
            async with self._pool.acquire() as conn:
                return bool(await conn.expire(key, seconds))
        except Exception as e:
            logger.warning("캐시 만료 설정 실패", key=key, ttl=seconds, error=str(e))
            return False

    async def delete(self, key: str) -> None:
        """
        키 삭제

        Raises:
            CacheMissError: 키 없음
            StoreError: 전송 실패
        """
        async with self._pool.acquire() as conn:
            with _store_errors("delete", key):
                if not await self._exists(conn, key):
                    raise CacheMissError(key=key)
                await conn.delete(key)

    async def increment(self, key: str, delta: int) -> int:
        """
        저장된 정수에 delta를 더함

        Redis INCRBY는 키가 없으면 새로 만들기 때문에 사용하지 않습니다.
        GET 한 번으로 존재 확인과 현재 값 조회를 함께 처리하고 SET으로 되씁니다.
        원자적이지 않으며, 일반 SET이므로 기존 만료 시간은 제거됩니다.

        Args:
            key: 캐시 키
            delta: 더할 값 (부호 없는 64비트 범위)

        Returns:
            int: 새 값 (부호 없는 64비트로 해석)

        Raises:
            CacheMissError: 키 없음
            ParseError: 저장된 값이 정수 형식이 아님
        """
        _check_delta(delta)
        async with self._pool.acquire() as conn:
            with _store_errors("increment", key):
                raw = await conn.get(key)
                if raw is None:
                    raise CacheMissError(key=key)

                # int64 범위를 넘으면 2의 보수로 순환
                total = _wrap_int64(_parse_int64(raw, key) + delta)
                await conn.set(key, total)

        return _as_uint64(total)

    async def decrement(self, key: str, delta: int) -> int:
        """
        저장된 정수에서 delta를 뺌 (0 아래로 내려가지 않음)

        delta가 현재 값보다 크면 현재 값만큼 DECRBY 하여 0을 만듭니다.
        감소 자체는 Redis의 원자적 DECRBY로 수행됩니다.

        Returns:
            int: DECRBY 결과 (부호 없는 64비트로 해석)

        Raises:
            CacheMissError: 키 없음
            StoreError: 저장된 값이 정수가 아니어서 DECRBY가 거부된 경우 등
        """
        _check_delta(delta)
        async with self._pool.acquire() as conn:
            with _store_errors("decrement", key):
                if not await self._exists(conn, key):
                    raise CacheMissError(key=key)

                amount = delta
                raw = await conn.get(key)
                if raw is not None:
                    try:
                        current = _parse_int64(raw, key)
                    except ParseError:
                        # DECRBY가 직접 거부하도록 그대로 진행
                        pass
                    else:
                        if delta > current:
                            amount = current

                result = await conn.decrby(key, amount)

        return _as_uint64(result)

    async def flush(self) -> None:
        """현재 선택된 데이터베이스 전체 삭제 (FLUSHDB)"""
        async with self._pool.acquire() as conn:
            with _store_errors("flush"):
                await conn.flushdb()
        logger.info("캐시 데이터베이스 초기화")

    async def close(self) -> None:
        """연결 풀 종료"""
        await self._pool.disconnect()

    async def __aenter__(self) -> "RedisStore":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
