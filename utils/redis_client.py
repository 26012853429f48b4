"""
Redis 클라이언트 유틸리티
"""

import json
import logging
from typing import Any, Optional

import redis
import redis.asyncio as aioredis

from config.settings import CacheConfig, get_cache_config


class RedisClient:
    """Redis 클라이언트 관리 클래스 (asyncio)"""

    def __init__(self, config: Optional[CacheConfig] = None):
        self.config = config or get_cache_config()
        self.logger = logging.getLogger(__name__)
        self._client: Optional[aioredis.Redis] = None
        self._connection_failed = False

    async def get_client(self) -> Optional[aioredis.Redis]:
        """Redis 클라이언트 생성 및 반환 (연결 실패 시 None)"""
        if self._client is None and not self._connection_failed:
            try:
                self._client = aioredis.Redis(
                    host=self.config.redis_host,
                    port=self.config.redis_port,
                    password=self.config.redis_password or None,
                    db=self.config.redis_db,
                    decode_responses=True,
                    socket_timeout=5,
                    socket_connect_timeout=5,
                    health_check_interval=30,
                )
                # 연결 테스트
                await self._client.ping()
                self.logger.info("Redis 연결 성공")
            except (redis.RedisError, OSError) as e:
                self.logger.warning(f"Redis 연결 실패: {e}. 캐시 기능 없이 계속 실행됩니다.")
                self._connection_failed = True
                self._client = None

        return self._client

    async def set_if_absent(self, key: str, value: Any, expire: int) -> bool:
        """키가 없을 때만 저장 (SET NX EX)"""
        client = await self.get_client()
        if not client:
            self.logger.debug(f"Redis 클라이언트 없음, 캐시 저장 건너뜀: {key}")
            return False

        try:
            payload = json.dumps(value, ensure_ascii=False)
            result = await client.set(key, payload, ex=expire, nx=True)
            self.logger.debug(f"캐시 저장: {key} (저장됨: {bool(result)})")
            return bool(result)
        except (redis.RedisError, TypeError, ValueError) as e:
            self.logger.error(f"캐시 저장 실패 [{key}]: {e}")
            return False

    async def get_cache(self, key: str) -> Optional[Any]:
        """캐시 데이터 조회"""
        client = await self.get_client()
        if not client:
            return None

        try:
            value = await client.get(key)
        except redis.RedisError as e:
            self.logger.error(f"캐시 조회 실패 [{key}]: {e}")
            return None

        if value is None:
            return None

        try:
            return json.loads(value)
        except (json.JSONDecodeError, TypeError):
            self.logger.warning(f"JSON이 아닌 캐시 값 무시: {key}")
            return None

    async def close(self):
        """Redis 연결 종료"""
        if self._client:
            try:
                await self._client.aclose()
                self.logger.info("Redis 연결 종료")
            except redis.RedisError as e:
                self.logger.error(f"Redis 연결 종료 실패: {e}")
            finally:
                self._client = None
