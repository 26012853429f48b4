"""
요청 파라미터 -> 쿼리 문자열 조립
"""

from typing import Any, Dict, Mapping
from urllib.parse import urlencode


def is_absent(value: Any) -> bool:
    return value is None or value == ""


def filter_params(params: Mapping[str, Any]) -> Dict[str, str]:
    """None/빈 문자열 값을 제외하고 입력 순서대로 문자열 값 딕셔너리를 만듭니다."""
    return {key: str(value) for key, value in params.items() if not is_absent(value)}


def build_query(params: Mapping[str, Any]) -> str:
    """쿼리 문자열 생성 (빈 값 제외, 숫자는 str() 그대로)"""
    return urlencode(filter_params(params))
