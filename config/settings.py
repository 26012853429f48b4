"""
애플리케이션 설정 관리 모듈

환경 변수와 설정 값들을 중앙에서 관리합니다.
"""

import os
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List

from dotenv import load_dotenv

from app.core.error_handling import ConfigurationError, ErrorCodes

# 환경 변수 로드
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_TOUR_API_BASE_URL = "https://apis.data.go.kr/B551011/KorService2"

SERVER_KEY_ENV = "TOUR_API_KEY"
CLIENT_KEY_ENV = "NEXT_PUBLIC_TOUR_API_KEY"


class ExecutionContext(Enum):
    """서비스 키를 조회하는 실행 환경"""

    SERVER = "server"
    CLIENT = "client"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "y")


@dataclass
class TourAPIConfig:
    """관광 API 설정"""

    base_url: str = DEFAULT_TOUR_API_BASE_URL
    mobile_os: str = "ETC"
    mobile_app: str = "MyTrip"
    response_type: str = "json"
    timeout_ms: int = 10000
    max_retries: int = 3
    base_delay_ms: int = 1000
    max_delay_ms: int = 5000
    retry_auth_errors: bool = True
    debug_log: bool = False


@dataclass
class StatsConfig:
    """통계 집계 설정"""

    max_concurrency: int = 5


@dataclass
class CacheConfig:
    """응답 캐시 설정"""

    backend: str = "memory"  # memory, redis, none
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str = ""
    redis_db: int = 0
    key_prefix: str = "tour_api"


@dataclass
class LoggingConfig:
    """로깅 설정"""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_prefix: str = "mytrip_tour_api"
    log_dir: str = "logs"
    file_enabled: bool = False
    max_bytes: int = 10485760  # 10MB
    backup_count: int = 5


@dataclass
class AppSettings:
    """전체 애플리케이션 설정"""

    debug: bool
    environment: str
    tour_api: TourAPIConfig
    stats: StatsConfig
    cache: CacheConfig
    logging: LoggingConfig


def get_tour_api_config() -> TourAPIConfig:
    """관광 API 설정 조회"""
    return TourAPIConfig(
        base_url=os.getenv("TOUR_API_BASE_URL", DEFAULT_TOUR_API_BASE_URL).rstrip("/"),
        mobile_os=os.getenv("TOUR_API_MOBILE_OS", "ETC"),
        mobile_app=os.getenv("TOUR_API_MOBILE_APP", "MyTrip"),
        timeout_ms=int(os.getenv("TOUR_API_TIMEOUT_MS", "10000")),
        max_retries=int(os.getenv("TOUR_API_MAX_RETRIES", "3")),
        base_delay_ms=int(os.getenv("TOUR_API_BASE_DELAY_MS", "1000")),
        max_delay_ms=int(os.getenv("TOUR_API_MAX_DELAY_MS", "5000")),
        retry_auth_errors=_env_bool("TOUR_API_RETRY_AUTH_ERRORS", "true"),
        debug_log=_env_bool("TOUR_API_DEBUG_LOG", "false"),
    )


def get_stats_config() -> StatsConfig:
    """통계 집계 설정 조회"""
    return StatsConfig(
        max_concurrency=max(1, int(os.getenv("STATS_MAX_CONCURRENCY", "5"))),
    )


def get_cache_config() -> CacheConfig:
    """캐시 설정 조회"""
    return CacheConfig(
        backend=os.getenv("CACHE_BACKEND", "memory").strip().lower(),
        redis_host=os.getenv("REDIS_HOST", "localhost"),
        redis_port=int(os.getenv("REDIS_PORT", "6379")),
        redis_password=os.getenv("REDIS_PASSWORD", ""),
        redis_db=int(os.getenv("REDIS_DB", "0")),
        key_prefix=os.getenv("CACHE_KEY_PREFIX", "tour_api"),
    )


def get_logging_config() -> LoggingConfig:
    """로깅 설정 조회"""
    return LoggingConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format=os.getenv(
            "LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ),
        file_prefix=os.getenv("LOG_FILE_PREFIX", "mytrip_tour_api"),
        log_dir=os.getenv("LOG_DIR", "logs"),
        file_enabled=_env_bool("LOG_FILE_ENABLED", "false"),
        max_bytes=int(os.getenv("LOG_MAX_BYTES", "10485760")),
        backup_count=int(os.getenv("LOG_BACKUP_COUNT", "5")),
    )


def get_app_settings() -> AppSettings:
    """전체 애플리케이션 설정 조회"""
    return AppSettings(
        debug=_env_bool("DEBUG", "false"),
        environment=os.getenv("ENVIRONMENT", "development"),
        tour_api=get_tour_api_config(),
        stats=get_stats_config(),
        cache=get_cache_config(),
        logging=get_logging_config(),
    )


def resolve_service_key(context: ExecutionContext = ExecutionContext.SERVER) -> str:
    """
    실행 환경에 맞는 관광 API 서비스 키 조회

    서버 환경에서는 서버 전용 키(TOUR_API_KEY)를 우선 사용하고, 없으면
    공개 키(NEXT_PUBLIC_TOUR_API_KEY)로 대체합니다. 공공 API이므로 공개 키
    사용이 허용됩니다. 클라이언트 환경은 공개 키만 사용합니다.

    Raises:
        ConfigurationError: 사용할 수 있는 키가 없는 경우
    """
    if context == ExecutionContext.SERVER:
        server_key = os.getenv(SERVER_KEY_ENV, "").strip()
        if server_key:
            return server_key
        logger.debug(f"{SERVER_KEY_ENV} 미설정, {CLIENT_KEY_ENV}로 대체합니다.")

    client_key = os.getenv(CLIENT_KEY_ENV, "").strip()
    if client_key:
        return client_key

    config_key = (
        f"{SERVER_KEY_ENV} 또는 {CLIENT_KEY_ENV}"
        if context == ExecutionContext.SERVER
        else CLIENT_KEY_ENV
    )
    raise ConfigurationError(
        f"환경변수 {config_key}가 설정되지 않았습니다.",
        config_key=config_key,
        error_code=ErrorCodes.API_KEY_MISSING,
    )


REQUIRED_ENV_VARS = {
    CLIENT_KEY_ENV: "한국관광공사 API 키 (클라이언트)",
}


def validate_env() -> List[str]:
    """누락된 필수 환경변수 목록을 반환하고, 운영 환경이 아니면 경고를 남깁니다."""
    missing = [
        f"{key} ({description})"
        for key, description in REQUIRED_ENV_VARS.items()
        if not os.getenv(key)
    ]

    if missing and os.getenv("ENVIRONMENT", "development") != "production":
        logger.warning(
            "다음 환경변수가 설정되지 않았습니다: " + ", ".join(missing)
        )

    return missing
