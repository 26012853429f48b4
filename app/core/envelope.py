"""
응답 봉투 정규화

관광 API의 response.body.items.item 은 결과 건수에 따라 객체, 배열,
빈 문자열 또는 누락 상태로 내려옵니다. 수신 즉시 Empty | Single | Many 로
해석한 뒤 항상 리스트로 정규화합니다.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Empty:
    """item 없음"""


@dataclass(frozen=True)
class Single:
    """item 단건 (객체)"""

    item: Any


@dataclass(frozen=True)
class Many:
    """item 배열"""

    items: Tuple[Any, ...]


EnvelopeItems = Union[Empty, Single, Many]


@dataclass(frozen=True)
class PageMeta:
    """페이지 메타데이터"""

    total_count: int = 0
    page_no: int = 0
    num_of_rows: int = 0


@dataclass
class NormalizedResult(Generic[T]):
    """정규화된 조회 결과"""

    items: List[T] = field(default_factory=list)
    meta: PageMeta = field(default_factory=PageMeta)

    @property
    def total_count(self) -> int:
        return self.meta.total_count

    def __len__(self) -> int:
        return len(self.items)


def get_body(envelope: Any) -> Dict:
    """response.body 추출 (없으면 빈 딕셔너리)"""
    if not isinstance(envelope, dict):
        return {}
    response = envelope.get("response")
    if not isinstance(response, dict):
        return {}
    body = response.get("body")
    return body if isinstance(body, dict) else {}


def get_header(envelope: Any) -> Dict:
    """response.header 추출 (없으면 빈 딕셔너리)"""
    if not isinstance(envelope, dict):
        return {}
    response = envelope.get("response")
    if not isinstance(response, dict):
        return {}
    header = response.get("header")
    return header if isinstance(header, dict) else {}


def decode_items(envelope: Any) -> EnvelopeItems:
    """봉투의 item 형태 판별"""
    items = get_body(envelope).get("items")
    if not isinstance(items, dict):
        # 결과가 없으면 items 가 "" 로 내려오기도 함
        return Empty()

    item = items.get("item")
    if item is None:
        return Empty()
    if isinstance(item, list):
        return Many(tuple(item))
    return Single(item)


def normalize(envelope: Any) -> List[Any]:
    """item 을 항상 리스트로 반환 (순서 유지, 중복 제거/정렬 없음)"""
    decoded = decode_items(envelope)
    if isinstance(decoded, Single):
        return [decoded.item]
    if isinstance(decoded, Many):
        return list(decoded.items)
    return []


def first_item(envelope: Any) -> Optional[Any]:
    """단건 조회 응답의 첫 item"""
    items = normalize(envelope)
    return items[0] if items else None


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def page_meta(envelope: Any) -> PageMeta:
    """페이지 메타데이터 추출"""
    body = get_body(envelope)
    return PageMeta(
        total_count=_to_int(body.get("totalCount")),
        page_no=_to_int(body.get("pageNo")),
        num_of_rows=_to_int(body.get("numOfRows")),
    )
