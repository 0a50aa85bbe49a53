from typing import Callable, List

import httpx
import pytest

from silver_care_mcp.config import Config


class RecordingSleep:
    """Stands in for asyncio.sleep and records each requested delay"""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served"""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def test_config() -> Config:
    return Config(
        geocoding_url="https://geocode.test/search",
        weather_url="https://weather.test/v1/forecast",
        mcp_api_key=None,
    )
