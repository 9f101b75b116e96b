"""
네임스페이스 캐시 서비스

모든 키에 "{prefix}:" 접두사를 붙여 저장소에 위임하는 얇은 파사드입니다.
여러 논리적 호출자가 하나의 Redis와 연결 풀을 키 충돌 없이 공유할 수 있습니다.

키 구조:
    {prefix}:{key}
    예: prefix="app", key="u" → "app:u"
"""

from typing import Any, Optional, Union

import redis.asyncio as redis

from kvcache.cache.pool import RedisPool
from kvcache.cache.store import DEFAULT, FOREVER, TTL, RedisStore
from kvcache.config.settings import CacheConfig, RedisConfig


class CacheService:
    """
    접두사가 적용된 캐시 서비스

    저장소와 동일한 작업을 제공하며, 추가 동작이나 추가 에러는 없습니다.
    flush()는 접두사와 무관하게 선택된 데이터베이스 전체를 비웁니다.

    Attributes:
        prefix (str): 이 서비스의 키 접두사
    """

    def __init__(self, store: RedisStore, prefix: str):
        self._prefix = prefix
        self._store = store

    @classmethod
    def with_pool(
        cls, pool: Union[RedisPool, redis.ConnectionPool], prefix: str
    ) -> "CacheService":
        """공유 풀 위에 기본 만료 없음 저장소를 만들어 서비스 생성"""
        return cls(RedisStore(pool, FOREVER), prefix)

    @classmethod
    def from_config(
        cls, redis_config: RedisConfig, cache_config: Optional[CacheConfig] = None
    ) -> "CacheService":
        """
        설정 객체로 서비스 생성

        저장소는 RedisStore.from_config()로 만들고,
        접두사는 cache_config.key_prefix를 사용합니다.

        Raises:
            ValueError: 설정 검증 실패
        """
        cache_config = cache_config or CacheConfig()
        store = RedisStore.from_config(redis_config, cache_config)
        return cls(store, cache_config.key_prefix)

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def store(self) -> RedisStore:
        return self._store

    def cache_key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    async def get(self, key: str, out_type: Optional[Any] = None) -> Any:
        return await self._store.get(self.cache_key(key), out_type)

    async def set(self, key: str, value: Any, ttl: TTL = DEFAULT) -> None:
        await self._store.set(self.cache_key(key), value, ttl)

    async def add(self, key: str, value: Any, ttl: TTL = DEFAULT) -> None:
        await self._store.add(self.cache_key(key), value, ttl)

    async def replace(self, key: str, value: Any, ttl: TTL = DEFAULT) -> None:
        await self._store.replace(self.cache_key(key), value, ttl)

    async def delete(self, key: str) -> None:
        await self._store.delete(self.cache_key(key))

    async def increment(self, key: str, delta: int) -> int:
        return await self._store.increment(self.cache_key(key), delta)

    async def decrement(self, key: str, delta: int) -> int:
        return await self._store.decrement(self.cache_key(key), delta)

    async def flush(self) -> None:
        await self._store.flush()

    async def exists(self, key: str) -> bool:
        return await self._store.exists(self.cache_key(key))

    async def set_expire(self, key: str, ttl: TTL) -> bool:
        return await self._store.set_expire(self.cache_key(key), ttl)


def new_service(
    pool: Union[RedisPool, redis.ConnectionPool], prefix: str
) -> CacheService:
    """CacheService.with_pool()의 함수형 별칭"""
    return CacheService.with_pool(pool, prefix)
