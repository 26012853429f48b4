"""
로깅 설정 및 관리 모듈

애플리케이션 전체의 로깅과 API 호출 진단 로그를 중앙에서 관리합니다.
"""

import logging
import logging.handlers
from datetime import datetime
from pathlib import Path
from typing import Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from app.core.error_handling import sanitize_parameters


def setup_logging(config=None) -> None:
    """로깅 설정 (콘솔 + 선택적 파일 로그)"""
    if config is None:
        from config.settings import get_logging_config

        config = get_logging_config()

    level = getattr(logging, config.level, logging.INFO)
    formatter = logging.Formatter(config.format)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)

    # 콘솔 핸들러
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if not config.file_enabled:
        return

    log_dir = Path(config.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    today = datetime.now().strftime("%Y%m%d")

    # 파일 핸들러 (일반 로그)
    file_handler = logging.handlers.RotatingFileHandler(
        log_dir / f"{config.file_prefix}_{today}.log",
        maxBytes=config.max_bytes,
        backupCount=config.backup_count,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    # 에러 로그 파일 핸들러
    error_handler = logging.handlers.RotatingFileHandler(
        log_dir / f"{config.file_prefix}_error_{today}.log",
        maxBytes=config.max_bytes,
        backupCount=config.backup_count,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(formatter)
    root_logger.addHandler(error_handler)


def mask_url(url: str) -> str:
    """URL 쿼리의 서비스 키를 가림"""
    parts = urlsplit(url)
    if not parts.query:
        return url
    params = sanitize_parameters(dict(parse_qsl(parts.query, keep_blank_values=True)))
    return urlunsplit(parts._replace(query=urlencode(params, safe="*")))


class APICallLogger:
    """
    API 호출 진단 로거

    시도, 실패, 최종 결과를 구조화된 메시지로 남깁니다. 운영 환경에서는
    enabled=False로 시도 단위 로그를 끌 수 있으며, 재시도 소진(최종 실패)만
    항상 기록됩니다.
    """

    def __init__(self, name: str = "app.core.fetch_executor", enabled: bool = False):
        self.logger = logging.getLogger(name)
        self.enabled = enabled

    def log_attempt(self, url: str, attempt: int, total_attempts: int) -> None:
        if self.enabled:
            self.logger.debug(
                f"API 호출 시도 {attempt + 1}/{total_attempts}: {mask_url(url)}"
            )

    def log_failure(
        self, url: str, attempt: int, total_attempts: int, error: Exception,
        delay_ms: Optional[int] = None,
    ) -> None:
        if not self.enabled:
            return
        message = (
            f"API 호출 실패 (시도 {attempt + 1}/{total_attempts}) "
            f"[{error.__class__.__name__}] {error}"
        )
        if delay_ms is not None:
            message += f", {delay_ms}ms 후 재시도"
        self.logger.warning(message)

    def log_success(self, url: str, attempt: int, duration_ms: int) -> None:
        if self.enabled:
            self.logger.debug(
                f"API 호출 성공 (시도 {attempt + 1}, {duration_ms}ms): {mask_url(url)}"
            )

    def log_cache_hit(self, url: str) -> None:
        if self.enabled:
            self.logger.debug(f"캐시 히트: {mask_url(url)}")

    def log_no_data(self, url: str, error: Exception) -> None:
        self.logger.info(f"조회 결과 없음: {error} - {mask_url(url)}")

    def log_exhausted(self, url: str, total_attempts: int, error: Exception) -> None:
        self.logger.error(
            f"API 호출 최종 실패 ({total_attempts}회 시도) "
            f"[{error.__class__.__name__}] {error} - {mask_url(url)}"
        )


def get_logger(name: str) -> logging.Logger:
    """특정 이름의 로거 반환 (편의 함수)"""
    return logging.getLogger(name)
