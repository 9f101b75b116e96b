"""Redis 기반 접두사 캐시 클라이언트"""

from .cache import (
    DEFAULT,
    FOREVER,
    CacheService,
    Expiration,
    JSONSerializer,
    RedisPool,
    RedisStore,
    create_pool,
    new_service,
)
from .exceptions import (
    CacheError,
    CacheMissError,
    DeserializationError,
    NotStoredError,
    ParseError,
    SerializationError,
    StoreError,
    UnsupportedError,
)

__version__ = "0.1.0"

__all__ = [
    "RedisStore",
    "CacheService",
    "new_service",
    "RedisPool",
    "create_pool",
    "JSONSerializer",
    "Expiration",
    "DEFAULT",
    "FOREVER",
    "CacheError",
    "CacheMissError",
    "NotStoredError",
    "SerializationError",
    "DeserializationError",
    "ParseError",
    "StoreError",
    "UnsupportedError",
]
