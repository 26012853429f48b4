"""
테스트 공용 픽스처
"""

from typing import Optional

import pytest

from app.core.error_handling import RetryConfig
from app.core.fetch_executor import ResilientFetchExecutor
from app.collectors.tour_api_client import TourAPIClient
from config.settings import TourAPIConfig
from tests.fakes import FakeSession, SleepRecorder


@pytest.fixture
def api_config():
    return TourAPIConfig(base_url="https://apis.example.test/B551011/KorService2")


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


@pytest.fixture
def make_executor(api_config, sleep_recorder):
    """가짜 세션을 사용하는 실행기 생성 함수"""

    def factory(session: FakeSession, cache=None, config: Optional[TourAPIConfig] = None):
        config = config or api_config
        return ResilientFetchExecutor(
            config,
            cache=cache,
            retry_config=RetryConfig.from_settings(config),
            session=session,
            sleep=sleep_recorder,
        )

    return factory


@pytest.fixture
def make_client(api_config, make_executor):
    """가짜 세션을 사용하는 API 클라이언트 생성 함수"""

    def factory(session: FakeSession, cache=None, service_key: str = "test-service-key"):
        return TourAPIClient(
            executor=make_executor(session, cache=cache),
            config=api_config,
            service_key=service_key,
        )

    return factory
