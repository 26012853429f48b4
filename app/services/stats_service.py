"""
관광지 통계 집계 서비스

지역별, 타입별 관광지 수를 집계합니다. 개수는 목록 API 를 numOfRows=1 로
호출해 받은 totalCount 를 그대로 사용합니다.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

from app.collectors.tour_api_client import TourAPIClient
from app.core.envelope import page_meta
from app.core.error_handling import ConfigurationError, TourAPIError
from app.models import RegionStats, StatsSummary, TypeStats
from config.constants import CONTENT_TYPE_NAMES
from config.settings import get_stats_config

T = TypeVar("T")

TOP_N = 3


def rank_by_count(stats: Sequence[T]) -> List[T]:
    """개수 내림차순 정렬 (동점은 원래 순서 유지)"""
    return sorted(stats, key=lambda stat: stat.count, reverse=True)


class StatsService:
    """관광지 통계 집계"""

    def __init__(self, client: TourAPIClient, max_concurrency: Optional[int] = None):
        self.client = client
        self.logger = logging.getLogger(__name__)
        if max_concurrency is None:
            max_concurrency = get_stats_config().max_concurrency
        self.max_concurrency = max(1, max_concurrency)

    async def _gather_bounded(self, factories: List[Callable[[], Awaitable[T]]]) -> List[T]:
        """동시 실행 수를 제한한 fan-out / fan-in (입력 순서대로 결과 반환)"""
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def run(factory: Callable[[], Awaitable[T]]) -> T:
            async with semaphore:
                return await factory()

        return await asyncio.gather(*(run(factory) for factory in factories))

    async def _count(self, label: str, **filters) -> int:
        """필터 조합의 totalCount 조회 (실패 시 0)"""
        try:
            envelope = await self.client.get_area_based_list(
                num_of_rows=1, page_no=1, **filters
            )
        except ConfigurationError:
            raise
        except TourAPIError as e:
            self.logger.error(f"통계 조회 실패 ({label}): {e}")
            return 0
        return page_meta(envelope).total_count

    async def get_region_stats(self) -> List[RegionStats]:
        """지역별 관광지 수 (내림차순)"""
        try:
            area_codes = await self.client.fetch_area_codes()
        except ConfigurationError:
            raise
        except TourAPIError as e:
            self.logger.error(f"지역 코드 조회 실패: {e}")
            return []

        if not area_codes:
            return []

        async def region_stat(code: str, name: str) -> RegionStats:
            count = await self._count(f"area {code}", area_code=code)
            return RegionStats(area_code=code, area_name=name, count=count)

        stats = await self._gather_bounded(
            [
                (lambda area=area: region_stat(area.code, area.name))
                for area in area_codes
            ]
        )
        self.logger.info(f"지역별 통계 수집 완료: {len(stats)}개 지역")
        return rank_by_count(stats)

    async def get_type_stats(self) -> List[TypeStats]:
        """관광 타입별 관광지 수 (내림차순)"""

        async def type_stat(content_type_id: str, type_name: str) -> TypeStats:
            count = await self._count(
                f"type {content_type_id}", content_type_id=content_type_id
            )
            return TypeStats(
                content_type_id=content_type_id, type_name=type_name, count=count
            )

        stats = await self._gather_bounded(
            [
                (lambda type_id=type_id, name=name: type_stat(type_id, name))
                for type_id, name in CONTENT_TYPE_NAMES.items()
            ]
        )
        self.logger.info(f"타입별 통계 수집 완료: {len(stats)}개 타입")
        return rank_by_count(stats)

    async def get_summary(self) -> StatsSummary:
        """
        통계 요약

        전체 관광지 수는 지역별 개수의 합입니다. 한 관광지가 여러 지역 필터에
        잡히면 중복 집계됩니다 (현재 API 스키마에서 areacode 는 단일 값).
        """
        region_stats, type_stats = await asyncio.gather(
            self.get_region_stats(), self.get_type_stats()
        )

        return StatsSummary(
            total_count=sum(stat.count for stat in region_stats),
            top_regions=region_stats[:TOP_N],
            top_types=type_stats[:TOP_N],
            last_updated=datetime.now(timezone.utc).isoformat(),
        )
