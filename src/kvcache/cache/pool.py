"""
Redis 연결 풀 관리 모듈

저장소가 사용하는 연결 풀을 생성하고, 작업 단위로 연결을 빌려주고 돌려받습니다.

주요 기능:
    - redis.asyncio.ConnectionPool 생성 (AUTH/SELECT는 연결 시 자동 수행)
    - 유휴 연결 재사용 전 PING 헬스 체크
    - 작업 범위(async with) 기반 연결 획득/반환 보장
    - 풀 상태 확인 및 명시적 종료

연결 수명주기:
    1. acquire() 진입 시 단일 연결 클라이언트 생성
    2. 첫 명령 실행 시 풀에서 연결 획득 (필요하면 새로 연결)
    3. 블록 종료 시 성공/실패와 관계없이 연결 반환
    4. 연결 에러가 난 연결은 redis 클라이언트가 끊은 상태로 반환됨
"""

import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

import redis.asyncio as redis
from redis.asyncio.retry import Retry
from redis.backoff import NoBackoff
import structlog

from kvcache.exceptions import StoreError

logger = structlog.get_logger(__name__)


def create_pool(
    host: str = "localhost",
    port: int = 6379,
    db: int = 0,
    password: Optional[str] = None,
    *,
    max_connections: Optional[int] = None,
    health_check_interval: int = 1,
    socket_timeout: Optional[float] = None,
    socket_connect_timeout: Optional[float] = None,
) -> redis.ConnectionPool:
    """
    Redis 연결 풀 생성

    연결은 첫 사용 시점에 만들어지며, 연결 과정에서
    비밀번호가 있으면 AUTH, 이어서 SELECT db 가 수행됩니다.
    AUTH/SELECT 실패 시 해당 연결은 폐기되고 에러가 호출자에게 전달됩니다.
    redis-py 풀에는 최대 유휴 연결 수와 유휴 타임아웃 설정이 없어 둘 다 적용되지 않습니다.

    Args:
        host: Redis 호스트
        port: Redis 포트
        db: 논리 데이터베이스 번호
        password: 비밀번호 (빈 문자열/None이면 AUTH 생략)
        max_connections: 최대 활성 연결 수 (None이면 제한 없음)
        health_check_interval: 이 시간(초) 이상 유휴였던 연결은 재사용 전 PING
        socket_timeout: 명령 소켓 타임아웃 (초)
        socket_connect_timeout: 연결 타임아웃 (초)

    Returns:
        redis.ConnectionPool: 설정된 비동기 연결 풀
    """
    return redis.ConnectionPool(
        host=host,
        port=port,
        db=db,
        password=password or None,
        max_connections=max_connections,
        health_check_interval=health_check_interval,
        socket_timeout=socket_timeout,
        socket_connect_timeout=socket_connect_timeout,
        # 캐시 계층은 내부 재시도를 하지 않음
        retry=Retry(NoBackoff(), 0),
    )


class RedisPool:
    """
    작업 단위 연결 획득/반환을 제공하는 풀 핸들

    저장소와 서비스가 공유하는 유일한 가변 자원입니다.
    여러 호출자가 동시에 사용해도 안전합니다.

    사용 예시:
        ```python
        pool = RedisPool(create_pool("localhost", 6379, db=1))

        async with pool.acquire() as conn:
            await conn.get("key")

        await pool.disconnect()
        ```
    """

    def __init__(self, connection_pool: redis.ConnectionPool):
        self._pool = connection_pool
        self._closed = False

    @classmethod
    def create(
        cls,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        password: Optional[str] = None,
        **options: Any,
    ) -> "RedisPool":
        """create_pool()로 만든 풀을 감싼 핸들 생성"""
        return cls(create_pool(host, port, db, password, **options))

    @property
    def connection_pool(self) -> redis.ConnectionPool:
        return self._pool

    @property
    def closed(self) -> bool:
        return self._closed

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[redis.Redis]:
        """
        작업 하나 동안 사용할 연결 획득

        블록 안의 모든 명령은 같은 연결로 전송되며,
        블록을 벗어나면 예외 여부와 관계없이 연결이 풀로 반환됩니다.

        Raises:
            StoreError: 이미 종료된 풀에서 획득을 시도한 경우
        """
        if self._closed:
            raise StoreError("connection pool is closed", operation="acquire")

        client = redis.Redis(connection_pool=self._pool, single_connection_client=True)
        try:
            yield client
        finally:
            # 연결 풀은 닫지 않고 빌린 연결만 반환
            await client.aclose()

    async def ping(self) -> bool:
        """PING으로 서버 응답 확인 (실패 시 예외 전파)"""
        async with self.acquire() as conn:
            return bool(await conn.ping())

    async def health_check(self) -> Dict[str, Any]:
        """
        풀 상태 확인

        Returns:
            Dict[str, Any]: status("healthy"/"unhealthy"/"closed"),
                latency_ms 또는 error
        """
        if self._closed:
            return {"status": "closed"}

        start_time = time.time()
        try:
            await self.ping()
        except Exception as e:
            logger.warning("Redis 헬스 체크 실패", error=str(e))
            return {"status": "unhealthy", "error": str(e)}

        return {
            "status": "healthy",
            "latency_ms": round((time.time() - start_time) * 1000, 2),
            "max_connections": self._pool.max_connections,
        }

    async def disconnect(self) -> None:
        """
        풀 종료

        모든 연결을 끊고 이후의 acquire()를 거부합니다.
        중복 호출해도 안전합니다.
        """
        if self._closed:
            return
        self._closed = True
        await self._pool.disconnect()
        logger.info("Redis 연결 풀 종료")
