#!/usr/bin/env python3
"""
관광정보 API 수동 조회 도구

프로젝트 루트에서 실행하여 관광정보 API 조회 결과를 JSON 으로 출력합니다.

사용 예:
  python run_tour_api.py areas                       # 지역 코드
  python run_tour_api.py list --area 1 --type 12     # 지역 기반 목록
  python run_tour_api.py search 경복궁                # 키워드 검색
  python run_tour_api.py detail 126508               # 관광지 상세
  python run_tour_api.py stats --summary             # 통계 요약
"""

import sys
import json
import asyncio
import argparse
from typing import Any, List, Optional

from dotenv import load_dotenv

load_dotenv()

from app.collectors.tour_api_client import create_tour_api_client
from app.core.error_handling import ConfigurationError, TourAPIError
from app.core.logger import get_logger, setup_logging
from app.services.stats_service import StatsService
from app.services.tour_service import SORT_LATEST, SORT_NAME, TourService
from config.constants import AREA_CODES
from config.settings import get_app_settings, validate_env


def _to_jsonable(value: Any) -> Any:
    if hasattr(value, "model_dump"):
        return value.model_dump()
    if isinstance(value, list):
        return [_to_jsonable(item) for item in value]
    return value


def resolve_area(area: Optional[str]) -> Optional[str]:
    """지역 이름(서울, 부산 ...)도 지역 코드로 허용"""
    if area is None:
        return None
    return AREA_CODES.get(area, area)


def _print_json(value: Any) -> None:
    print(json.dumps(_to_jsonable(value), ensure_ascii=False, indent=2, default=str))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="한국관광공사 관광정보 API 조회 도구")
    subparsers = parser.add_subparsers(dest="command", required=True)

    areas = subparsers.add_parser("areas", help="지역 코드 조회")
    areas.add_argument("--area", help="시군구 목록을 조회할 지역 코드")

    listing = subparsers.add_parser("list", help="지역 기반 관광지 목록")
    listing.add_argument("--area", default=None, help="지역 코드 또는 이름 (all 이면 전체)")
    listing.add_argument("--type", dest="content_type_id", default=None, help="관광 타입 ID")
    listing.add_argument("--sort", choices=[SORT_LATEST, SORT_NAME], default=SORT_LATEST)
    listing.add_argument("--page", type=int, default=1)
    listing.add_argument("--rows", type=int, default=20)

    search = subparsers.add_parser("search", help="키워드 검색")
    search.add_argument("keyword")
    search.add_argument("--area", default=None)
    search.add_argument("--type", dest="content_type_id", default=None)
    search.add_argument("--sort", choices=[SORT_LATEST, SORT_NAME], default=SORT_LATEST)
    search.add_argument("--page", type=int, default=1)
    search.add_argument("--rows", type=int, default=20)

    detail = subparsers.add_parser("detail", help="관광지 상세 조회")
    detail.add_argument("content_id")

    stats = subparsers.add_parser("stats", help="지역별/타입별 통계")
    stats.add_argument("--summary", action="store_true", help="요약만 출력")

    return parser


async def run(args: argparse.Namespace) -> int:
    logger = get_logger(__name__)

    async with create_tour_api_client() as client:
        service = TourService(client)

        if args.command == "areas":
            _print_json(await client.fetch_area_codes(area_code=resolve_area(args.area)))

        elif args.command in ("list", "search"):
            page = await service.list_tours(
                area_code=resolve_area(args.area),
                content_type_id=args.content_type_id,
                keyword=getattr(args, "keyword", None),
                sort=args.sort,
                page=args.page,
                num_of_rows=args.rows,
            )
            _print_json(
                {
                    "totalCount": page.total_count,
                    "pageNo": page.meta.page_no,
                    "items": _to_jsonable(page.items),
                }
            )

        elif args.command == "detail":
            place = await service.get_place_detail(args.content_id)
            if place is None:
                logger.warning(f"관광지를 찾을 수 없습니다: {args.content_id}")
                return 1
            _print_json(
                {
                    "detail": _to_jsonable(place.detail),
                    "intro": _to_jsonable(place.intro),
                    "images": _to_jsonable(place.images),
                    "petInfo": _to_jsonable(place.pet_info),
                }
            )

        elif args.command == "stats":
            stats_service = StatsService(client)
            if args.summary:
                _print_json(await stats_service.get_summary())
            else:
                regions, types = await asyncio.gather(
                    stats_service.get_region_stats(), stats_service.get_type_stats()
                )
                _print_json({"regions": _to_jsonable(regions), "types": _to_jsonable(types)})

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_app_settings()
    setup_logging(settings.logging)
    logger = get_logger(__name__)
    validate_env()

    try:
        return asyncio.run(run(args))
    except ConfigurationError as e:
        logger.error(f"설정 오류: {e}")
        return 2
    except TourAPIError as e:
        logger.error(f"API 호출 실패: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
