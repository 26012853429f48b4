"""
한국관광공사 관광정보 API 클라이언트

KorService2 엔드포인트별 호출 메소드를 제공합니다. 각 메소드는 엔드포인트
파라미터와 캐시 기간을 정해 실행기에 위임하고, 응답 봉투를 그대로 반환합니다.
정규화는 호출자가 수행하며, 반려동물 정보 조회만 내부에서 정규화 후
데이터가 없으면 None 을 반환합니다.

Base URL: https://apis.data.go.kr/B551011/KorService2
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Type

import pydantic

from app.core.envelope import NormalizedResult, first_item, normalize, page_meta
from app.core.error_handling import (
    ConfigurationError,
    MalformedResponseError,
    TourAPIError,
    ValidationError,
)
from app.core.fetch_executor import ResilientFetchExecutor
from app.core.query_builder import build_query, is_absent
from app.core.response_cache import ResponseCache, create_response_cache
from app.models import (
    AreaCodeItem,
    PetTourInfo,
    TourDetail,
    TourImage,
    TourIntro,
    TourItem,
    TourRecord,
)
from config.constants import REFERENCE_CACHE_TTL, VOLATILE_CACHE_TTL
from config.settings import (
    ExecutionContext,
    TourAPIConfig,
    get_cache_config,
    get_tour_api_config,
    resolve_service_key,
)


@dataclass(frozen=True)
class EndpointDescriptor:
    """엔드포인트 정의"""

    name: str
    path: str
    cache_ttl: int
    record_type: Type[TourRecord]
    required: Tuple[str, ...] = ()
    defaults: Tuple[Tuple[str, Any], ...] = ()


ENDPOINTS: Dict[str, EndpointDescriptor] = {
    descriptor.name: descriptor
    for descriptor in (
        EndpointDescriptor(
            name="area_code",
            path="areaCode2",
            cache_ttl=REFERENCE_CACHE_TTL,
            record_type=AreaCodeItem,
            defaults=(("numOfRows", 100), ("pageNo", 1)),
        ),
        EndpointDescriptor(
            name="area_based_list",
            path="areaBasedList2",
            cache_ttl=VOLATILE_CACHE_TTL,
            record_type=TourItem,
            defaults=(("numOfRows", 20), ("pageNo", 1)),
        ),
        EndpointDescriptor(
            name="search_keyword",
            path="searchKeyword2",
            cache_ttl=VOLATILE_CACHE_TTL,
            record_type=TourItem,
            required=("keyword",),
            defaults=(("numOfRows", 20), ("pageNo", 1)),
        ),
        EndpointDescriptor(
            name="detail_common",
            path="detailCommon2",
            cache_ttl=REFERENCE_CACHE_TTL,
            record_type=TourDetail,
            required=("contentId",),
        ),
        EndpointDescriptor(
            name="detail_intro",
            path="detailIntro2",
            cache_ttl=REFERENCE_CACHE_TTL,
            record_type=TourIntro,
            required=("contentId", "contentTypeId"),
        ),
        EndpointDescriptor(
            name="detail_image",
            path="detailImage2",
            cache_ttl=REFERENCE_CACHE_TTL,
            record_type=TourImage,
            required=("contentId",),
            defaults=(("imageYN", "Y"), ("subImageYN", "Y")),
        ),
        EndpointDescriptor(
            name="detail_pet_tour",
            path="detailPetTour2",
            cache_ttl=REFERENCE_CACHE_TTL,
            record_type=PetTourInfo,
            required=("contentId",),
        ),
    )
}


class TourAPIClient:
    """한국관광공사 관광정보 API 클라이언트"""

    def __init__(
        self,
        executor: Optional[ResilientFetchExecutor] = None,
        config: Optional[TourAPIConfig] = None,
        service_key: Optional[str] = None,
        context: ExecutionContext = ExecutionContext.SERVER,
    ):
        self.logger = logging.getLogger(__name__)
        self.config = config or get_tour_api_config()
        self.executor = executor or ResilientFetchExecutor(self.config)
        self.context = context
        self._service_key = service_key

        # 기본 파라미터 설정
        self.default_params = {
            "MobileOS": self.config.mobile_os,
            "MobileApp": self.config.mobile_app,
            "_type": self.config.response_type,
        }

    async def __aenter__(self):
        await self.executor.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.executor.__aexit__(exc_type, exc_val, exc_tb)

    @property
    def service_key(self) -> str:
        """서비스 키 (최초 사용 시 설정에서 조회)"""
        if not self._service_key:
            self._service_key = resolve_service_key(self.context)
        return self._service_key

    # ========== 요청 조립 ==========

    def compose_params(self, descriptor: EndpointDescriptor, **params) -> Dict[str, Any]:
        """서비스 키, 공통 파라미터, 기본값, 호출 파라미터 순으로 병합"""
        missing = [name for name in descriptor.required if is_absent(params.get(name))]
        if missing:
            raise ValidationError(
                f"{descriptor.path} 필수 파라미터 누락: {', '.join(missing)}",
                field_name=missing[0],
            )

        composed: Dict[str, Any] = {"serviceKey": self.service_key, **self.default_params}
        composed.update(descriptor.defaults)
        for key, value in params.items():
            if not is_absent(value):
                composed[key] = value
        return composed

    def build_url(self, descriptor: EndpointDescriptor, **params) -> str:
        query = build_query(self.compose_params(descriptor, **params))
        return f"{self.config.base_url}/{descriptor.path}?{query}"

    async def _call(self, name: str, **params) -> Dict:
        descriptor = ENDPOINTS[name]
        url = self.build_url(descriptor, **params)
        return await self.executor.execute(
            url, cache_ttl=descriptor.cache_ttl, endpoint=descriptor.path
        )

    # ========== 엔드포인트 메소드 ==========

    async def get_area_code(
        self,
        area_code: Optional[str] = None,
        num_of_rows: Optional[int] = None,
        page_no: Optional[int] = None,
    ) -> Dict:
        """지역코드 조회 (areaCode2). area_code 를 주면 시군구 목록"""
        return await self._call(
            "area_code", areaCode=area_code, numOfRows=num_of_rows, pageNo=page_no
        )

    async def get_area_based_list(
        self,
        area_code: Optional[str] = None,
        content_type_id: Optional[str] = None,
        sigungu_code: Optional[str] = None,
        cat1: Optional[str] = None,
        cat2: Optional[str] = None,
        cat3: Optional[str] = None,
        arrange: Optional[str] = None,
        num_of_rows: Optional[int] = None,
        page_no: Optional[int] = None,
    ) -> Dict:
        """지역 기반 관광정보 목록 (areaBasedList2)"""
        return await self._call(
            "area_based_list",
            areaCode=area_code,
            contentTypeId=content_type_id,
            sigunguCode=sigungu_code,
            cat1=cat1,
            cat2=cat2,
            cat3=cat3,
            arrange=arrange,
            numOfRows=num_of_rows,
            pageNo=page_no,
        )

    async def search_keyword(
        self,
        keyword: str,
        area_code: Optional[str] = None,
        content_type_id: Optional[str] = None,
        sigungu_code: Optional[str] = None,
        cat1: Optional[str] = None,
        cat2: Optional[str] = None,
        cat3: Optional[str] = None,
        arrange: Optional[str] = None,
        num_of_rows: Optional[int] = None,
        page_no: Optional[int] = None,
    ) -> Dict:
        """키워드 검색 (searchKeyword2)"""
        return await self._call(
            "search_keyword",
            keyword=keyword,
            areaCode=area_code,
            contentTypeId=content_type_id,
            sigunguCode=sigungu_code,
            cat1=cat1,
            cat2=cat2,
            cat3=cat3,
            arrange=arrange,
            numOfRows=num_of_rows,
            pageNo=page_no,
        )

    async def get_detail_common(self, content_id: str) -> Dict:
        """관광지 공통 정보 (detailCommon2)"""
        return await self._call("detail_common", contentId=content_id)

    async def get_detail_intro(self, content_id: str, content_type_id: str) -> Dict:
        """관광지 소개 정보 (detailIntro2)"""
        return await self._call(
            "detail_intro", contentId=content_id, contentTypeId=content_type_id
        )

    async def get_detail_image(
        self, content_id: str, image_yn: str = "Y", sub_image_yn: str = "Y"
    ) -> Dict:
        """관광지 이미지 목록 (detailImage2)"""
        return await self._call(
            "detail_image", contentId=content_id, imageYN=image_yn, subImageYN=sub_image_yn
        )

    async def get_detail_pet_tour(self, content_id: str) -> Optional[Dict]:
        """
        반려동물 동반 여행 정보 (detailPetTour2)

        반려동물 정보가 없는 관광지가 대부분이므로, 데이터가 없거나 API 오류가
        나면 예외 대신 None 을 반환합니다.
        """
        descriptor = ENDPOINTS["detail_pet_tour"]
        url = self.build_url(descriptor, contentId=content_id)

        try:
            envelope = await self.executor.execute(
                url, cache_ttl=descriptor.cache_ttl, endpoint=descriptor.path
            )
        except ConfigurationError:
            raise
        except TourAPIError as e:
            self.logger.info(f"반려동물 정보 없음 (contentId={content_id}): {e}")
            return None

        if not normalize(envelope):
            self.logger.debug(f"반려동물 정보 없음 (contentId={content_id})")
            return None
        return envelope

    # ========== 정규화 편의 메소드 ==========

    @staticmethod
    def to_records(name: str, items: List[Any]) -> List[TourRecord]:
        """item 목록 -> 타입 레코드 (필수 필드 누락 시 MalformedResponseError)"""
        descriptor = ENDPOINTS[name]
        try:
            return descriptor.record_type.from_items(items)
        except pydantic.ValidationError as e:
            raise MalformedResponseError(
                f"{descriptor.path} 응답 레코드 형식 오류: {e.error_count()}건",
                endpoint=descriptor.path,
                cause=e,
            ) from e

    @classmethod
    def to_result(cls, name: str, envelope: Optional[Dict]) -> NormalizedResult:
        """봉투 -> 타입 레코드 + 페이지 메타데이터"""
        if envelope is None:
            return NormalizedResult()
        return NormalizedResult(
            items=cls.to_records(name, normalize(envelope)),
            meta=page_meta(envelope),
        )

    @classmethod
    def to_record(cls, name: str, envelope: Optional[Dict]) -> Optional[TourRecord]:
        """단건 조회 봉투 -> 첫 레코드 (없으면 None)"""
        item = first_item(envelope)
        if not isinstance(item, dict):
            return None
        return cls.to_records(name, [item])[0]

    async def fetch_area_codes(self, area_code: Optional[str] = None) -> List[AreaCodeItem]:
        envelope = await self.get_area_code(area_code=area_code)
        return self.to_result("area_code", envelope).items

    async def fetch_tour_list(self, **filters) -> NormalizedResult:
        envelope = await self.get_area_based_list(**filters)
        return self.to_result("area_based_list", envelope)

    async def fetch_search(self, keyword: str, **filters) -> NormalizedResult:
        envelope = await self.search_keyword(keyword, **filters)
        return self.to_result("search_keyword", envelope)

    async def fetch_detail(self, content_id: str) -> Optional[TourDetail]:
        return self.to_record("detail_common", await self.get_detail_common(content_id))

    async def fetch_intro(self, content_id: str, content_type_id: str) -> Optional[TourIntro]:
        envelope = await self.get_detail_intro(content_id, content_type_id)
        return self.to_record("detail_intro", envelope)

    async def fetch_images(self, content_id: str) -> List[TourImage]:
        envelope = await self.get_detail_image(content_id)
        return self.to_result("detail_image", envelope).items

    async def fetch_pet_info(self, content_id: str) -> Optional[PetTourInfo]:
        envelope = await self.get_detail_pet_tour(content_id)
        try:
            return self.to_record("detail_pet_tour", envelope)
        except MalformedResponseError as e:
            self.logger.info(f"반려동물 정보 형식 오류 (contentId={content_id}): {e}")
            return None


def create_tour_api_client(
    config: Optional[TourAPIConfig] = None,
    cache: Optional[ResponseCache] = None,
    context: ExecutionContext = ExecutionContext.SERVER,
) -> TourAPIClient:
    """설정 기반 클라이언트 생성 (캐시를 넘기지 않으면 설정의 캐시 백엔드를 생성해 소유)"""
    config = config or get_tour_api_config()
    cache_config = get_cache_config()
    owns_cache = cache is None
    if owns_cache:
        cache = create_response_cache(cache_config)
    executor = ResilientFetchExecutor(
        config,
        cache=cache,
        cache_prefix=cache_config.key_prefix,
        owns_cache=owns_cache,
    )
    return TourAPIClient(executor=executor, config=config, context=context)
