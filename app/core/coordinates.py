"""
KATEC 정수 좌표 -> WGS84 경위도 변환

관광 API의 mapx/mapy 값은 경위도에 10,000,000을 곱한 정수(또는 정수 문자열)로
내려옵니다.
"""

import math
from typing import NamedTuple, Union

KATEC_SCALE = 10_000_000

Numeric = Union[int, float, str, None]


class Coordinate(NamedTuple):
    """WGS84 좌표 (경도, 위도)"""

    longitude: float
    latitude: float


def _to_float(value: Numeric) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return math.nan


def convert_katec_to_wgs84(mapx: Numeric, mapy: Numeric) -> Coordinate:
    """
    KATEC 좌표를 WGS84로 변환

    파싱할 수 없는 값은 예외 없이 NaN이 됩니다. 범위 검증은 호출자 책임입니다.
    """
    return Coordinate(
        longitude=_to_float(mapx) / KATEC_SCALE,
        latitude=_to_float(mapy) / KATEC_SCALE,
    )


def is_valid_coordinate(coordinate: Coordinate) -> bool:
    """NaN이 없는 좌표인지 확인"""
    return not (math.isnan(coordinate.longitude) or math.isnan(coordinate.latitude))

