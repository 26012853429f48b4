"""
관광지 조회 서비스 통합 테스트
"""

from urllib.parse import parse_qsl, urlsplit

import pytest

from app.services.tour_service import (
    TourService,
    area_filter,
    single_content_type,
    sort_tours,
)
from app.models import TourItem
from tests.fakes import FakeResponse, FakeSession, envelope

LIST_ITEMS = [
    {"contentid": "1", "title": "나", "modifiedtime": "20240101120000", "mapx": "1269769000", "mapy": "375788000"},
    {"contentid": "2", "title": "가", "modifiedtime": "20250301090000"},
    {"contentid": "3", "title": "다", "modifiedtime": ""},
]


def params_of(url):
    return dict(parse_qsl(urlsplit(url).query))


def test_single_content_type():
    assert single_content_type("12") == "12"
    assert single_content_type("12,14") is None
    assert single_content_type(" 39 , ") == "39"
    assert single_content_type(None) is None


def test_area_filter():
    assert area_filter("all") is None
    assert area_filter("") is None
    assert area_filter("1") == "1"


def test_sort_tours():
    tours = TourItem.from_items(LIST_ITEMS)

    assert [tour.contentid for tour in sort_tours(tours, "latest")] == ["2", "1", "3"]
    assert [tour.contentid for tour in sort_tours(tours, "name")] == ["2", "1", "3"]
    assert [tour.title for tour in sort_tours(tours, "name")] == ["가", "나", "다"]


@pytest.mark.asyncio
async def test_list_tours_area_based(make_client):
    """시나리오: 지역 1, 1페이지, 20건"""
    items = [{"contentid": str(i), "title": f"관광지{i}"} for i in range(20)]
    session = FakeSession([envelope(items, total_count=1234, num_of_rows=20)])
    service = TourService(make_client(session))

    page = await service.list_tours(area_code="1", page=1, num_of_rows=20)

    assert len(page.items) <= 20
    assert page.total_count >= len(page.items)
    assert page.total_count == 1234
    assert all(isinstance(item, TourItem) for item in page.items)

    params = params_of(session.requested_urls[0])
    assert urlsplit(session.requested_urls[0]).path.endswith("/areaBasedList2")
    assert params["areaCode"] == "1"
    assert params["numOfRows"] == "20"
    assert params["pageNo"] == "1"


@pytest.mark.asyncio
async def test_list_tours_filters(make_client):
    """all 지역과 복수 타입은 필터 미적용"""
    session = FakeSession([envelope(LIST_ITEMS)])
    service = TourService(make_client(session))

    page = await service.list_tours(area_code="all", content_type_id="12,14")

    params = params_of(session.requested_urls[0])
    assert "areaCode" not in params
    assert "contentTypeId" not in params
    assert [item.contentid for item in page.items] == ["2", "1", "3"]


@pytest.mark.asyncio
async def test_list_tours_keyword_search(make_client):
    session = FakeSession([envelope(LIST_ITEMS)])
    service = TourService(make_client(session))

    page = await service.list_tours(keyword="  궁 ", content_type_id="12", sort="name")

    url = session.requested_urls[0]
    assert urlsplit(url).path.endswith("/searchKeyword2")
    assert params_of(url)["keyword"] == "궁"
    assert params_of(url)["contentTypeId"] == "12"
    assert [item.title for item in page.items] == ["가", "나", "다"]


@pytest.mark.asyncio
async def test_list_tours_coordinates(make_client):
    session = FakeSession([envelope(LIST_ITEMS[:1])])
    service = TourService(make_client(session))

    page = await service.list_tours()

    coordinate = page.items[0].coordinates
    assert coordinate.longitude == pytest.approx(126.9769)
    assert coordinate.latitude == pytest.approx(37.5788)


def detail_handler(with_pet=True, intro_fails=False):
    def handler(url):
        path = urlsplit(url).path
        if path.endswith("/detailCommon2"):
            if "contentId=404" in url:
                return envelope(None)
            return envelope({"contentid": "126508", "contenttypeid": "12", "title": "경복궁",
                             "firstimage": "http://img/first.jpg"})
        if path.endswith("/detailIntro2"):
            if intro_fails:
                return envelope(result_code="03", result_msg="NODATA_ERROR")
            return envelope({"contentid": "126508", "contenttypeid": "12",
                             "infocenter": "02-3700-3900", "parking": "", "usetime": "09:00~18:00"})
        if path.endswith("/detailImage2"):
            return envelope([
                {"contentid": "126508", "originimgurl": "http://img/1.jpg", "serialnum": "1"},
                {"contentid": "126508", "originimgurl": "http://img/2.jpg", "serialnum": "2"},
            ])
        if path.endswith("/detailPetTour2"):
            if not with_pet:
                return envelope(None)
            return envelope({"contentid": "126508", "chkpetleash": "Y"})
        return FakeResponse(status=404, reason="Not Found")

    return handler


@pytest.mark.asyncio
async def test_place_detail(make_client):
    session = FakeSession(handler=detail_handler())
    service = TourService(make_client(session))

    place = await service.get_place_detail("126508")

    assert place.detail.title == "경복궁"
    assert place.intro.present_fields() == {"infocenter": "02-3700-3900", "usetime": "09:00~18:00"}
    assert [image.serialnum for image in place.images] == ["1", "2"]
    assert place.primary_image == "http://img/1.jpg"
    assert place.pet_info.chkpetleash == "Y"

    intro_url = next(url for url in session.requested_urls if "detailIntro2" in url)
    assert params_of(intro_url)["contentTypeId"] == "12"


@pytest.mark.asyncio
async def test_place_detail_not_found(make_client):
    session = FakeSession(handler=detail_handler())
    service = TourService(make_client(session))

    assert await service.get_place_detail("404") is None
    assert len(session.requested_urls) == 1


@pytest.mark.asyncio
async def test_place_detail_without_pet_info(make_client, sleep_recorder):
    """시나리오: 반려동물 정보 없음 -> None, 재시도 없음"""
    session = FakeSession(handler=detail_handler(with_pet=False))
    service = TourService(make_client(session))

    place = await service.get_place_detail("126508")

    assert place.pet_info is None
    pet_urls = [url for url in session.requested_urls if "detailPetTour2" in url]
    assert len(pet_urls) == 1
    assert sleep_recorder.delays == []


@pytest.mark.asyncio
async def test_pet_info_no_data_code_is_not_retried(make_client, sleep_recorder):
    session = FakeSession([envelope(result_code="03", result_msg="NODATA_ERROR")])
    client = make_client(session)

    assert await client.get_detail_pet_tour("126508") is None
    assert len(session.requested_urls) == 1
    assert sleep_recorder.delays == []


@pytest.mark.asyncio
async def test_recommended_tours(make_client):
    """현재 관광지 제외, 최대 6건"""
    items = [{"contentid": str(i), "title": f"관광지{i}"} for i in range(8)]
    session = FakeSession([envelope(items)])
    service = TourService(make_client(session))

    tours = await service.get_recommended_tours("3", area_code="1", content_type_id="12")

    assert len(tours) == 6
    assert "3" not in [tour.contentid for tour in tours]
    params = params_of(session.requested_urls[0])
    assert params["numOfRows"] == "8"
    assert params["areaCode"] == "1"


@pytest.mark.asyncio
async def test_recommended_tours_error_returns_empty(make_client):
    session = FakeSession([FakeResponse(status=500)])
    service = TourService(make_client(session))

    assert await service.get_recommended_tours("3", area_code="1") == []


@pytest.mark.asyncio
async def test_recommended_tours_malformed_records(make_client):
    """contentid 없는 item 이 섞인 응답도 빈 목록"""
    session = FakeSession([envelope([{"title": "x"}])])
    service = TourService(make_client(session))

    assert await service.get_recommended_tours("1") == []


@pytest.mark.asyncio
async def test_list_tours_zero_rows_uses_default(make_client):
    session = FakeSession([envelope([])])
    service = TourService(make_client(session))

    await service.list_tours(area_code="1", num_of_rows=0)

    assert params_of(session.requested_urls[0])["numOfRows"] == "20"
