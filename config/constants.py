"""
상수 정의 모듈

관광 API 계층에서 사용하는 상수들을 정의합니다.
"""

from enum import Enum


class ContentType(Enum):
    """관광 콘텐츠 타입"""

    TOURIST_SPOT = "12"  # 관광지
    CULTURAL_FACILITY = "14"  # 문화시설
    FESTIVAL = "15"  # 축제공연행사
    TRAVEL_COURSE = "25"  # 여행코스
    LEISURE_SPORTS = "28"  # 레포츠
    ACCOMMODATION = "32"  # 숙박
    SHOPPING = "38"  # 쇼핑
    RESTAURANT = "39"  # 음식점


# 관광 타입 이름 (통계 집계 순서)
CONTENT_TYPE_NAMES = {
    ContentType.TOURIST_SPOT.value: "관광지",
    ContentType.CULTURAL_FACILITY.value: "문화시설",
    ContentType.FESTIVAL.value: "축제/행사",
    ContentType.TRAVEL_COURSE.value: "여행코스",
    ContentType.LEISURE_SPORTS.value: "레포츠",
    ContentType.ACCOMMODATION.value: "숙박",
    ContentType.SHOPPING.value: "쇼핑",
    ContentType.RESTAURANT.value: "음식점",
}

# 지역 코드 매핑 (시/도)
AREA_CODES = {
    "서울": "1",
    "인천": "2",
    "대전": "3",
    "대구": "4",
    "광주": "5",
    "부산": "6",
    "울산": "7",
    "세종": "8",
    "경기": "31",
    "강원": "32",
    "충북": "33",
    "충남": "34",
    "경북": "35",
    "경남": "36",
    "전북": "37",
    "전남": "38",
    "제주": "39",
}

# 캐시 기간 (초)
REFERENCE_CACHE_TTL = 3600  # 지역코드, 상세, 이미지, 소개, 반려동물
VOLATILE_CACHE_TTL = 300  # 목록, 검색

ALL_AREAS = "all"
