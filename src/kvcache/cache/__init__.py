"""
Redis 캐시 클라이언트 모듈

주요 컴포넌트:
    RedisStore: 캐시 계약을 Redis 명령으로 변환하는 저장소
        - 존재 여부 기반 add/replace/delete
        - 만료 정책 변환 (DEFAULT, FOREVER, 초 단위 TTL)
        - 0에서 멈추는 decrement

    CacheService: 키 접두사를 적용하는 네임스페이스 파사드

    RedisPool / create_pool: 연결 풀 생성과 작업 단위 연결 관리

    JSONSerializer: 기본 값 직렬화기

사용 예시:
    ```python
    from kvcache.cache import RedisPool, new_service

    pool = RedisPool.create("localhost", 6379, db=1)
    users = new_service(pool, "users")

    await users.set("u1", {"name": "홍길동"}, 60)
    profile = await users.get("u1")

    await pool.disconnect()
    ```
"""

from .pool import RedisPool, create_pool
from .serializer import JSONSerializer, Serializer
from .service import CacheService, new_service
from .store import DEFAULT, FOREVER, TTL, Expiration, RedisStore

__all__ = [
    "RedisStore",
    "CacheService",
    "new_service",
    "RedisPool",
    "create_pool",
    "Serializer",
    "JSONSerializer",
    "Expiration",
    "DEFAULT",
    "FOREVER",
    "TTL",
]
