"""
관광 API 오류 처리 프레임워크

API 접근 계층 전체에서 일관된 오류 분류와 재시도 정책을 제공합니다.
"""

import sys
import logging
import traceback
from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional, Tuple, Type
from dataclasses import dataclass, field


logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """오류 심각도 수준"""

    CRITICAL = "critical"  # 시스템 중단 수준
    HIGH = "high"  # 주요 기능 영향
    MEDIUM = "medium"  # 일부 기능 영향
    LOW = "low"  # 경미한 문제


class ErrorCategory(Enum):
    """오류 카테고리"""

    API_ERROR = "api"  # 응답 결과 코드 관련
    NETWORK_ERROR = "network"  # 전송 계층 (연결, 타임아웃)
    RESPONSE_ERROR = "response"  # 응답 형식 오류
    VALIDATION_ERROR = "validation"  # 요청 파라미터 검증
    CONFIGURATION_ERROR = "config"  # 설정 관련


class ErrorKind(Enum):
    """결과 코드 분류"""

    AUTH = "auth"
    TRANSIENT = "transient"
    NO_DATA = "no_data"
    GENERIC = "generic"


@dataclass
class ErrorContext:
    """오류 컨텍스트 정보"""

    operation: str = ""
    url: str = ""
    attempt: Optional[int] = None
    parameters: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리로 변환 (JSON 직렬화용)"""
        return {
            "operation": self.operation,
            "url": self.url,
            "attempt": self.attempt,
            "parameters": sanitize_parameters(self.parameters),
            "metadata": self.metadata,
            "timestamp": self.timestamp.isoformat(),
        }


SENSITIVE_KEYS = ("servicekey", "api_key", "apikey", "password", "token", "secret")


def mask_secret(value: Any) -> str:
    text = str(value)
    return f"{text[:3]}***{text[-3:]}" if len(text) > 6 else "***"


def sanitize_parameters(params: Dict[str, Any]) -> Dict[str, Any]:
    """민감 정보 제거"""
    sanitized = {}
    for key, value in params.items():
        if any(sensitive in key.lower() for sensitive in SENSITIVE_KEYS):
            sanitized[key] = mask_secret(value) if value else "***"
        else:
            sanitized[key] = value
    return sanitized


class TourAPIError(Exception):
    """관광 API 계층 기본 예외 클래스"""

    def __init__(
        self,
        message: str,
        error_code: str = "TOUR_UNKNOWN",
        category: ErrorCategory = ErrorCategory.API_ERROR,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리로 변환"""
        return {
            "type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
            "traceback": traceback.format_exc() if sys.exc_info()[0] else None,
        }


# ========== 전송 계층 오류 ==========


class NetworkError(TourAPIError):
    """네트워크 관련 오류"""

    def __init__(self, message: str, url: str = "", timeout: Optional[float] = None, **kwargs):
        kwargs.setdefault("error_code", ErrorCodes.NETWORK_CONNECTION_FAILED)
        super().__init__(message, category=ErrorCategory.NETWORK_ERROR, **kwargs)
        self.url = url
        self.timeout = timeout
        self.context.metadata.update({"timeout": timeout})


class RequestTimeoutError(NetworkError):
    """요청 시간 초과"""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("error_code", ErrorCodes.NETWORK_TIMEOUT)
        super().__init__(message, **kwargs)


# ========== 응답 / 결과 코드 오류 ==========


class APIError(TourAPIError):
    """API 관련 오류 (분류되지 않은 결과 코드 포함)"""

    kind = ErrorKind.GENERIC

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        endpoint: str = "",
        result_code: Optional[str] = None,
        **kwargs,
    ):
        kwargs.setdefault("error_code", f"TOUR_API_{result_code or status_code or 'ERROR'}")
        kwargs.setdefault("category", ErrorCategory.API_ERROR)
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.endpoint = endpoint
        self.result_code = result_code
        self.context.metadata.update(
            {"status_code": status_code, "endpoint": endpoint, "result_code": result_code}
        )


class HTTPStatusError(APIError):
    """2xx 이외의 HTTP 상태 코드"""

    kind = ErrorKind.TRANSIENT


class MalformedResponseError(APIError):
    """JSON 파싱 실패 또는 response 봉투 누락"""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("error_code", ErrorCodes.API_RESPONSE_INVALID)
        kwargs.setdefault("category", ErrorCategory.RESPONSE_ERROR)
        super().__init__(message, **kwargs)


class AuthenticationError(APIError):
    """서비스 키 인증 오류"""

    kind = ErrorKind.AUTH

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        super().__init__(message, **kwargs)


class TransientAPIError(APIError):
    """서버 측 일시 오류 (재시도 대상)"""

    kind = ErrorKind.TRANSIENT


class NoDataError(APIError):
    """조회 결과 없음"""

    kind = ErrorKind.NO_DATA

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("severity", ErrorSeverity.LOW)
        super().__init__(message, **kwargs)


# ========== 설정 / 입력 오류 ==========


class ConfigurationError(TourAPIError):
    """설정 관련 오류"""

    def __init__(self, message: str, config_key: str = "", **kwargs):
        kwargs.setdefault("error_code", ErrorCodes.CONFIG_REQUIRED_MISSING)
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        super().__init__(message, category=ErrorCategory.CONFIGURATION_ERROR, **kwargs)
        self.config_key = config_key
        self.context.metadata.update({"config_key": config_key})


class ValidationError(TourAPIError):
    """요청 파라미터 검증 오류"""

    def __init__(self, message: str, field_name: str = "", **kwargs):
        kwargs.setdefault("error_code", ErrorCodes.VALIDATION_REQUIRED_FIELD)
        super().__init__(message, category=ErrorCategory.VALIDATION_ERROR, **kwargs)
        self.field_name = field_name
        self.context.metadata.update({"field_name": field_name})


# ========== 결과 코드 분류 ==========

SUCCESS_RESULT_CODE = "0000"

# 공공데이터포털 OpenAPI 공통 결과 코드
RESULT_CODE_TABLE: Dict[int, Tuple[ErrorKind, str]] = {
    1: (ErrorKind.TRANSIENT, "APPLICATION_ERROR"),
    2: (ErrorKind.TRANSIENT, "DB_ERROR"),
    3: (ErrorKind.NO_DATA, "NODATA_ERROR"),
    4: (ErrorKind.TRANSIENT, "HTTP_ERROR"),
    5: (ErrorKind.TRANSIENT, "SERVICETIMEOUT_ERROR"),
    10: (ErrorKind.GENERIC, "INVALID_REQUEST_PARAMETER_ERROR"),
    11: (ErrorKind.GENERIC, "NO_MANDATORY_REQUEST_PARAMETERS_ERROR"),
    12: (ErrorKind.GENERIC, "NO_OPENAPI_SERVICE_ERROR"),
    20: (ErrorKind.AUTH, "SERVICE_ACCESS_DENIED_ERROR"),
    21: (ErrorKind.AUTH, "TEMPORARILY_DISABLE_THE_SERVICEKEY_ERROR"),
    22: (ErrorKind.TRANSIENT, "LIMITED_NUMBER_OF_SERVICE_REQUESTS_EXCEEDS_ERROR"),
    30: (ErrorKind.AUTH, "SERVICE_KEY_IS_NOT_REGISTERED_ERROR"),
    31: (ErrorKind.AUTH, "DEADLINE_HAS_EXPIRED_ERROR"),
    32: (ErrorKind.AUTH, "UNREGISTERED_IP_ERROR"),
    33: (ErrorKind.AUTH, "UNSIGNED_CALL_ERROR"),
    99: (ErrorKind.GENERIC, "UNKNOWN_ERROR"),
}

# 결과 코드 이름으로도 조회 (XML 오류 응답의 returnAuthMsg 용)
RESULT_NAME_TABLE: Dict[str, int] = {
    name: code for code, (_, name) in RESULT_CODE_TABLE.items()
}

AUTH_KEYWORDS = ("auth", "service_key", "servicekey", "인증", "키")
TRANSIENT_KEYWORDS = ("server", "timeout", "서버", "일시")

ERROR_CLASS_BY_KIND: Dict[ErrorKind, Type[APIError]] = {
    ErrorKind.AUTH: AuthenticationError,
    ErrorKind.TRANSIENT: TransientAPIError,
    ErrorKind.NO_DATA: NoDataError,
    ErrorKind.GENERIC: APIError,
}


def lookup_result_code(result_code: Any) -> Optional[Tuple[ErrorKind, str]]:
    """결과 코드 표 조회 ("30"과 "0030"은 같은 코드)"""
    if result_code is None:
        return None
    text = str(result_code).strip()
    if text in RESULT_NAME_TABLE:
        return RESULT_CODE_TABLE[RESULT_NAME_TABLE[text]]
    try:
        return RESULT_CODE_TABLE.get(int(text))
    except ValueError:
        return None


def is_success_code(result_code: Any) -> bool:
    return str(result_code).strip() in (SUCCESS_RESULT_CODE, "00")


def classify_result(
    result_code: Any, result_msg: Optional[str], endpoint: str = ""
) -> APIError:
    """
    실패 결과 코드를 예외로 변환

    문서화된 결과 코드 표를 먼저 조회하고, 알 수 없는 코드일 때만
    메시지 문자열로 추정합니다. 추정 분류는 "unclassified"로 기록됩니다.
    """
    message = result_msg or "알 수 없는 오류"
    code_text = None if result_code is None else str(result_code)

    entry = lookup_result_code(result_code)
    if entry is None:
        entry = lookup_result_code(message)

    if entry is not None:
        kind, name = entry
    else:
        lowered = message.lower()
        if any(keyword in lowered for keyword in AUTH_KEYWORDS):
            kind = ErrorKind.AUTH
        elif any(keyword in lowered for keyword in TRANSIENT_KEYWORDS):
            kind = ErrorKind.TRANSIENT
        else:
            kind = ErrorKind.GENERIC
        name = "UNCLASSIFIED"
        logger.warning(
            f"unclassified 결과 코드: {code_text} ({message}) -> {kind.value}"
        )

    error_class = ERROR_CLASS_BY_KIND[kind]
    return error_class(
        f"API 오류 ({code_text}): {message}",
        endpoint=endpoint,
        result_code=code_text,
        context=ErrorContext(operation=endpoint, metadata={"result_name": name}),
    )


# ========== 재시도 정책 ==========


class RetryConfig:
    """재시도 설정"""

    def __init__(
        self,
        max_retries: int = 3,
        base_delay_ms: int = 1000,
        max_delay_ms: int = 5000,
        exponential_base: float = 2.0,
        retry_on: tuple = (TourAPIError,),
        stop_on: tuple = (NoDataError,),
    ):
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms
        self.exponential_base = exponential_base
        self.retry_on = retry_on
        self.stop_on = stop_on

    @classmethod
    def from_settings(cls, config) -> "RetryConfig":
        """TourAPIConfig로부터 재시도 정책 생성"""
        stop_on: tuple = (NoDataError,)
        if not config.retry_auth_errors:
            stop_on += (AuthenticationError, ConfigurationError)
        return cls(
            max_retries=config.max_retries,
            base_delay_ms=config.base_delay_ms,
            max_delay_ms=config.max_delay_ms,
            stop_on=stop_on,
        )

    def calculate_delay(self, attempt: int) -> int:
        """재시도 지연 시간 계산 (지수 백오프, attempt는 0부터)"""
        delay = self.base_delay_ms * (self.exponential_base ** attempt)
        return int(min(delay, self.max_delay_ms))

    def should_retry(
        self, error: Exception, attempt: int, max_retries: Optional[int] = None
    ) -> bool:
        limit = self.max_retries if max_retries is None else max_retries
        if attempt >= limit:
            return False
        if isinstance(error, self.stop_on):
            return False
        return isinstance(error, self.retry_on)


# ========== 오류 코드 상수 ==========


class ErrorCodes:
    """표준 오류 코드"""

    # API 관련
    API_KEY_MISSING = "TOUR_API_001"
    API_RESPONSE_INVALID = "TOUR_API_005"

    # 네트워크 관련
    NETWORK_TIMEOUT = "TOUR_NET_001"
    NETWORK_CONNECTION_FAILED = "TOUR_NET_002"

    # 데이터 검증 관련
    VALIDATION_REQUIRED_FIELD = "TOUR_VAL_001"

    # 설정 관련
    CONFIG_REQUIRED_MISSING = "TOUR_CFG_003"
