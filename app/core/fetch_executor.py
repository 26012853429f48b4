"""
재시도 포함 API 호출 실행기

단일 논리 호출에 대해 시도별 타임아웃, 응답 봉투 검사, 오류 분류,
지수 백오프 재시도를 수행합니다.

상태 전이:
    PENDING -> IN_FLIGHT -> SUCCEEDED
    IN_FLIGHT -> BACKOFF -> IN_FLIGHT   (실패, 시도 남음)
    IN_FLIGHT -> FAILED                 (실패, 시도 소진)
"""

import json
import time
import asyncio
import logging
import xml.etree.ElementTree as ET
from typing import Any, Awaitable, Callable, Dict, Optional

import aiohttp

from app.core.error_handling import (
    ErrorContext,
    HTTPStatusError,
    MalformedResponseError,
    NetworkError,
    NoDataError,
    RequestTimeoutError,
    RetryConfig,
    TourAPIError,
    classify_result,
    is_success_code,
)
from app.core.envelope import get_header
from app.core.logger import APICallLogger, mask_url
from app.core.response_cache import ResponseCache, generate_cache_key
from config.settings import TourAPIConfig, get_tour_api_config


GENERIC_MALFORMED_MESSAGE = "API 응답 형식이 올바르지 않습니다."


class ResilientFetchExecutor:
    """재시도 포함 API 호출 실행기"""

    def __init__(
        self,
        config: Optional[TourAPIConfig] = None,
        cache: Optional[ResponseCache] = None,
        retry_config: Optional[RetryConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        cache_prefix: str = "tour_api",
        owns_cache: bool = False,
    ):
        self.config = config or get_tour_api_config()
        self.cache = cache
        self._owns_cache = owns_cache
        self.retry_config = retry_config or RetryConfig.from_settings(self.config)
        self.timeout_seconds = self.config.timeout_ms / 1000
        self.cache_prefix = cache_prefix
        self.logger = logging.getLogger(__name__)
        self.call_logger = APICallLogger(__name__, enabled=self.config.debug_log)

        self._sleep = sleep
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self):
        """비동기 컨텍스트 매니저 진입"""
        self._get_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """비동기 컨텍스트 매니저 종료"""
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                headers={"Accept": "application/json"},
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        if self._owns_session:
            self._session = None
        if self.cache is not None and self._owns_cache:
            await self.cache.close()

    async def execute(
        self,
        url: str,
        cache_ttl: Optional[int] = None,
        max_retries: Optional[int] = None,
        endpoint: str = "",
    ) -> Dict:
        """
        API 호출 실행

        Args:
            url: 쿼리 문자열까지 포함한 전체 URL
            cache_ttl: 캐시 유지 시간(초). None/0 이면 캐시를 사용하지 않음
            max_retries: 재시도 횟수 (총 시도 = max_retries + 1)
            endpoint: 로그와 오류에 남길 엔드포인트 이름

        Returns:
            Dict: response 봉투 전체

        Raises:
            TourAPIError: 재시도를 모두 소진한 경우 마지막 오류
        """
        if max_retries is None:
            max_retries = self.retry_config.max_retries
        total_attempts = max_retries + 1

        cache_key = None
        if self.cache is not None and cache_ttl:
            cache_key = generate_cache_key(url, self.cache_prefix)
            cached = await self.cache.get(cache_key)
            if cached is not None:
                self.call_logger.log_cache_hit(url)
                return cached

        session = self._get_session()
        last_error: Optional[TourAPIError] = None

        for attempt in range(total_attempts):
            self.call_logger.log_attempt(url, attempt, total_attempts)
            started = time.monotonic()

            try:
                data = await asyncio.wait_for(
                    self._attempt(session, url, endpoint), timeout=self.timeout_seconds
                )
            except asyncio.TimeoutError:
                last_error = RequestTimeoutError(
                    f"API 호출 시간 초과 ({self.config.timeout_ms}ms)",
                    url=mask_url(url),
                    timeout=self.timeout_seconds,
                )
            except TourAPIError as e:
                last_error = e
            else:
                duration_ms = int((time.monotonic() - started) * 1000)
                self.call_logger.log_success(url, attempt, duration_ms)
                if cache_key is not None:
                    await self.cache.set_if_absent(cache_key, data, cache_ttl)
                return data

            last_error.context.attempt = attempt
            last_error.context.url = mask_url(url)

            if not self.retry_config.should_retry(last_error, attempt, max_retries):
                self.call_logger.log_failure(url, attempt, total_attempts, last_error)
                break

            delay_ms = self.retry_config.calculate_delay(attempt)
            self.call_logger.log_failure(url, attempt, total_attempts, last_error, delay_ms)
            await self._sleep(delay_ms / 1000)

        if isinstance(last_error, NoDataError):
            self.call_logger.log_no_data(url, last_error)
        else:
            self.call_logger.log_exhausted(url, attempt + 1, last_error)
        raise last_error

    async def _attempt(self, session, url: str, endpoint: str) -> Dict:
        """단일 시도: 요청, 상태 코드 확인, 봉투 검사"""
        try:
            async with session.get(url) as response:
                status = response.status
                text = await response.text()
                reason = getattr(response, "reason", "") or ""
        except asyncio.TimeoutError as e:
            raise RequestTimeoutError(
                f"API 호출 시간 초과 ({self.config.timeout_ms}ms)",
                url=mask_url(url),
                timeout=self.timeout_seconds,
                cause=e,
            ) from e
        except aiohttp.ClientError as e:
            raise NetworkError(
                f"API 호출 오류: {e}", url=mask_url(url), cause=e
            ) from e

        if not 200 <= status < 300:
            raise HTTPStatusError(
                f"API 호출 실패: {status} {reason}".strip(),
                status_code=status,
                endpoint=endpoint,
            )

        return self._inspect_body(text, endpoint)

    def _inspect_body(self, text: str, endpoint: str) -> Dict:
        """응답 본문 파싱 및 봉투 검사"""
        stripped = (text or "").strip()

        # 인증 실패 등은 _type=json 이어도 XML 로 내려옴
        if stripped.startswith("<"):
            raise self._xml_error(stripped, endpoint)

        try:
            data = json.loads(stripped)
        except ValueError as e:
            raise MalformedResponseError(
                f"JSON 파싱 실패: {stripped[:200]}",
                endpoint=endpoint,
                cause=e,
            ) from e

        if not isinstance(data, dict):
            raise MalformedResponseError(GENERIC_MALFORMED_MESSAGE, endpoint=endpoint)

        if "response" not in data:
            # 일부 오류는 봉투 없이 resultCode 만 내려옴
            if "resultCode" in data:
                raise classify_result(data.get("resultCode"), data.get("resultMsg"), endpoint)
            message = next(
                (str(data[key]) for key in ("message", "error", "msg") if data.get(key)),
                GENERIC_MALFORMED_MESSAGE,
            )
            raise MalformedResponseError(message, endpoint=endpoint)

        header = get_header(data)
        result_code = header.get("resultCode")
        if result_code is not None and not is_success_code(result_code):
            raise classify_result(result_code, header.get("resultMsg"), endpoint)

        return data

    def _xml_error(self, xml_text: str, endpoint: str) -> TourAPIError:
        """XML 오류 응답 처리"""
        try:
            root = ET.fromstring(xml_text)
        except ET.ParseError as e:
            return MalformedResponseError(
                f"XML 파싱 오류: {xml_text[:200]}", endpoint=endpoint, cause=e
            )

        def find_text(tag: str) -> str:
            node = root.find(f".//{tag}")
            return node.text.strip() if node is not None and node.text else ""

        auth_message = find_text("returnAuthMsg")
        reason_code = find_text("returnReasonCode") or find_text("resultCode")
        error_message = find_text("errMsg") or find_text("resultMsg")

        if not (auth_message or reason_code or error_message):
            return MalformedResponseError(
                GENERIC_MALFORMED_MESSAGE,
                endpoint=endpoint,
                context=ErrorContext(operation=endpoint, metadata={"body": xml_text[:200]}),
            )

        return classify_result(
            reason_code or None, auth_message or error_message, endpoint
        )
