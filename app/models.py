"""
관광 API 레코드 모델

관광 API 응답 item 을 담는 Pydantic 모델들입니다. 필드명은 API 응답 키
(소문자)를 그대로 사용하며, 정의되지 않은 필드는 버리지 않고 보존합니다.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.core.coordinates import Coordinate, convert_katec_to_wgs84


class TourRecord(BaseModel):
    """API item 공통 설정"""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    @classmethod
    def from_items(cls, items: List[Dict[str, Any]]) -> List["TourRecord"]:
        return [cls.model_validate(item) for item in items if isinstance(item, dict)]


class _Locatable(TourRecord):
    mapx: Optional[str] = None
    mapy: Optional[str] = None

    @property
    def coordinates(self) -> Coordinate:
        """KATEC mapx/mapy -> WGS84 (값이 없으면 NaN)"""
        return convert_katec_to_wgs84(self.mapx, self.mapy)


class TourItem(_Locatable):
    """관광지 목록 항목 (areaBasedList2, searchKeyword2)"""

    contentid: str
    contenttypeid: Optional[str] = None
    title: str = ""
    addr1: Optional[str] = None
    addr2: Optional[str] = None
    areacode: Optional[str] = None
    sigungucode: Optional[str] = None
    firstimage: Optional[str] = None
    firstimage2: Optional[str] = None
    tel: Optional[str] = None
    cat1: Optional[str] = None
    cat2: Optional[str] = None
    cat3: Optional[str] = None
    modifiedtime: Optional[str] = None
    createdtime: Optional[str] = None
    overview: Optional[str] = None


class TourDetail(_Locatable):
    """관광지 공통 정보 (detailCommon2)"""

    contentid: str
    contenttypeid: Optional[str] = None
    title: str = ""
    addr1: Optional[str] = None
    addr2: Optional[str] = None
    zipcode: Optional[str] = None
    tel: Optional[str] = None
    homepage: Optional[str] = None
    overview: Optional[str] = None
    firstimage: Optional[str] = None
    firstimage2: Optional[str] = None
    areacode: Optional[str] = None
    sigungucode: Optional[str] = None
    cat1: Optional[str] = None
    cat2: Optional[str] = None
    cat3: Optional[str] = None
    createdtime: Optional[str] = None
    modifiedtime: Optional[str] = None


class TourIntro(TourRecord):
    """
    관광지 소개 정보 (detailIntro2)

    contentTypeId 에 따라 필드 구성이 달라지므로 공통 필드만 선언하고
    나머지는 extra 로 보존합니다.
    """

    contentid: str
    contenttypeid: Optional[str] = None
    infocenter: Optional[str] = None
    parking: Optional[str] = None
    chkpet: Optional[str] = None
    usetime: Optional[str] = None
    restdate: Optional[str] = None
    usecost: Optional[str] = None

    def present_fields(self) -> Dict[str, str]:
        """값이 있는 필드만 반환 (식별자 제외)"""
        fields = {}
        for key, value in self.model_dump().items():
            if key in ("contentid", "contenttypeid"):
                continue
            if value is None:
                continue
            text = str(value).strip()
            if text:
                fields[key] = text
        return fields


class TourImage(TourRecord):
    """관광지 이미지 (detailImage2)"""

    contentid: str
    originimgurl: str = ""
    imgname: Optional[str] = None
    serialnum: Optional[str] = None
    smallimageurl: Optional[str] = None
    cpyrhtDivCd: Optional[str] = None


class PetTourInfo(TourRecord):
    """반려동물 동반 여행 정보 (detailPetTour2)"""

    contentid: str
    contenttypeid: Optional[str] = None
    chkpetleash: Optional[str] = None  # 목줄 착용 여부
    chkpetsize: Optional[str] = None  # 동반 가능 크기
    chkpetplace: Optional[str] = None  # 입장 가능 장소 (실내/실외)
    chkpetfee: Optional[str] = None  # 추가 요금
    petinfo: Optional[str] = None
    parking: Optional[str] = None


class AreaCodeItem(TourRecord):
    """지역 코드 (areaCode2)"""

    code: str
    name: str
    rnum: Optional[int] = None


class RegionStats(BaseModel):
    """지역별 관광지 수"""

    area_code: str
    area_name: str
    count: int = 0


class TypeStats(BaseModel):
    """관광 타입별 관광지 수"""

    content_type_id: str
    type_name: str
    count: int = 0


class StatsSummary(BaseModel):
    """통계 요약"""

    total_count: int = 0
    top_regions: List[RegionStats] = Field(default_factory=list)
    top_types: List[TypeStats] = Field(default_factory=list)
    last_updated: str
