"""
API 응답 캐시

엔드포인트별 캐시 기간(TTL)을 적용하는 캐시 계층입니다. 읽기와
'없을 때만 쓰기'만 지원하며, 저장된 값을 제자리에서 수정하지 않습니다.
"""

import copy
import time
import hashlib
import logging
from typing import Any, Callable, Dict, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit

from config.settings import CacheConfig, get_cache_config


logger = logging.getLogger(__name__)

EXCLUDED_CACHE_PARAMS = ("serviceKey",)


def generate_cache_key(url: str, prefix: str = "tour_api") -> str:
    """캐시 키 생성 (서비스 키 제외, 파라미터 정렬)"""
    parts = urlsplit(url)
    params = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key not in EXCLUDED_CACHE_PARAMS
    ]
    params_str = urlencode(sorted(params))
    key_input = f"{parts.path}?{params_str}"
    key_hash = hashlib.md5(key_input.encode("utf-8")).hexdigest()
    endpoint = parts.path.rstrip("/").rsplit("/", 1)[-1] or "root"
    return f"{prefix}:{endpoint}:{key_hash}"


class ResponseCache:
    """캐시 인터페이스"""

    async def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    async def set_if_absent(self, key: str, value: Any, ttl: int) -> bool:
        raise NotImplementedError

    async def close(self) -> None:
        return None


class MemoryResponseCache(ResponseCache):
    """프로세스 메모리 캐시 (monotonic 시계 기준 만료, 저장/조회 시 복사본 사용)"""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._store: Dict[str, Tuple[float, Any]] = {}
        self._clock = clock

    async def get(self, key: str) -> Optional[Any]:
        entry = self._store.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            # 만료된 항목은 교체 대상
            self._store.pop(key, None)
            return None
        return copy.deepcopy(value)

    async def set_if_absent(self, key: str, value: Any, ttl: int) -> bool:
        if ttl <= 0:
            return False
        if await self.get(key) is not None:
            return False
        self._store[key] = (self._clock() + ttl, copy.deepcopy(value))
        return True

    def __len__(self) -> int:
        return len(self._store)


class RedisResponseCache(ResponseCache):
    """Redis 캐시 (SET NX EX)"""

    def __init__(self, redis_client):
        self.redis_client = redis_client

    async def get(self, key: str) -> Optional[Any]:
        return await self.redis_client.get_cache(key)

    async def set_if_absent(self, key: str, value: Any, ttl: int) -> bool:
        if ttl <= 0:
            return False
        return await self.redis_client.set_if_absent(key, value, ttl)

    async def close(self) -> None:
        await self.redis_client.close()


def create_response_cache(config: Optional[CacheConfig] = None) -> Optional[ResponseCache]:
    """설정에 맞는 캐시 백엔드 생성 (none 이면 None)"""
    config = config or get_cache_config()

    if config.backend == "none":
        logger.info("응답 캐시 비활성화")
        return None
    if config.backend == "redis":
        from utils.redis_client import RedisClient

        logger.info(f"Redis 응답 캐시 사용: {config.redis_host}:{config.redis_port}")
        return RedisResponseCache(RedisClient(config))
    if config.backend != "memory":
        logger.warning(f"알 수 없는 캐시 백엔드 '{config.backend}', 메모리 캐시를 사용합니다.")
    return MemoryResponseCache()
