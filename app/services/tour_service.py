"""
관광지 조회 서비스

목록/검색, 상세, 추천 관광지 조회 흐름을 제공합니다.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from app.collectors.tour_api_client import TourAPIClient
from app.core.envelope import PageMeta
from app.core.error_handling import ConfigurationError, TourAPIError
from app.models import PetTourInfo, TourDetail, TourImage, TourIntro, TourItem
from config.constants import ALL_AREAS

SORT_LATEST = "latest"
SORT_NAME = "name"

RECOMMEND_FETCH_ROWS = 8


@dataclass
class TourListPage:
    """관광지 목록 한 페이지"""

    items: List[TourItem] = field(default_factory=list)
    meta: PageMeta = field(default_factory=PageMeta)

    @property
    def total_count(self) -> int:
        return self.meta.total_count


@dataclass
class PlaceDetail:
    """관광지 상세 (공통 + 소개 + 이미지 + 반려동물)"""

    detail: TourDetail
    intro: Optional[TourIntro] = None
    images: List[TourImage] = field(default_factory=list)
    pet_info: Optional[PetTourInfo] = None

    @property
    def primary_image(self) -> Optional[str]:
        """대표 이미지 (이미지 목록의 첫 번째, 없으면 firstimage)"""
        if self.images and self.images[0].originimgurl:
            return self.images[0].originimgurl
        return self.detail.firstimage or self.detail.firstimage2 or None


def _modified_key(item: TourItem) -> datetime:
    # modifiedtime: YYYYMMDDHHMMSS
    try:
        return datetime.strptime(item.modifiedtime or "", "%Y%m%d%H%M%S")
    except ValueError:
        return datetime.min


def sort_tours(tours: List[TourItem], sort: str = SORT_LATEST) -> List[TourItem]:
    """정렬 (name: 제목순, 그 외: 최신 수정순)"""
    if sort == SORT_NAME:
        return sorted(tours, key=lambda tour: tour.title)
    return sorted(tours, key=_modified_key, reverse=True)


def single_content_type(content_type_id: Optional[str]) -> Optional[str]:
    """쉼표로 구분된 타입 목록은 하나일 때만 필터로 사용"""
    if not content_type_id:
        return None
    ids = [value.strip() for value in str(content_type_id).split(",") if value.strip()]
    return ids[0] if len(ids) == 1 else None


def area_filter(area_code: Optional[str]) -> Optional[str]:
    if not area_code or area_code == ALL_AREAS:
        return None
    return area_code


class TourService:
    """관광지 조회 서비스"""

    def __init__(self, client: TourAPIClient):
        self.client = client
        self.logger = logging.getLogger(__name__)

    async def list_tours(
        self,
        area_code: Optional[str] = None,
        content_type_id: Optional[str] = None,
        keyword: Optional[str] = None,
        sort: str = SORT_LATEST,
        page: int = 1,
        num_of_rows: int = 20,
    ) -> TourListPage:
        """검색어가 있으면 키워드 검색, 없으면 지역 기반 목록"""
        filters = {
            "area_code": area_filter(area_code),
            "content_type_id": single_content_type(content_type_id),
            "num_of_rows": num_of_rows or 20,
            "page_no": max(1, page),
        }

        if keyword and keyword.strip():
            result = await self.client.fetch_search(keyword.strip(), **filters)
        else:
            result = await self.client.fetch_tour_list(**filters)

        return TourListPage(items=sort_tours(result.items, sort), meta=result.meta)

    async def get_place_detail(self, content_id: str) -> Optional[PlaceDetail]:
        """
        관광지 상세 조회

        공통 정보가 없으면 None. 소개 정보는 공통 정보의 contentTypeId 가
        필요하므로 공통 정보 조회 후 이미지, 반려동물 정보와 함께 병렬 조회합니다.
        """
        detail = await self.client.fetch_detail(content_id)
        if detail is None:
            return None

        async def load_intro() -> Optional[TourIntro]:
            if not detail.contenttypeid:
                return None
            return await self.client.fetch_intro(content_id, detail.contenttypeid)

        intro, images, pet_info = await asyncio.gather(
            load_intro(),
            self.client.fetch_images(content_id),
            self.client.fetch_pet_info(content_id),
        )
        return PlaceDetail(detail=detail, intro=intro, images=images, pet_info=pet_info)

    async def get_recommended_tours(
        self,
        current_content_id: str,
        area_code: Optional[str] = None,
        content_type_id: Optional[str] = None,
        limit: int = 6,
    ) -> List[TourItem]:
        """같은 지역/타입의 다른 관광지 (오류 시 빈 목록)"""
        try:
            result = await self.client.fetch_tour_list(
                area_code=area_filter(area_code),
                content_type_id=content_type_id,
                num_of_rows=RECOMMEND_FETCH_ROWS,
                page_no=1,
            )
        except ConfigurationError:
            raise
        except TourAPIError as e:
            self.logger.error(f"추천 관광지 조회 실패 ({current_content_id}): {e}")
            return []

        return [
            tour for tour in result.items if tour.contentid != str(current_content_id)
        ][:limit]
