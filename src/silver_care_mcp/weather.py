import logging

from pydantic import ValidationError

from silver_care_mcp.config import Config
from silver_care_mcp.errors import UpstreamError
from silver_care_mcp.fetcher import RetryingFetcher
from silver_care_mcp.models import Coordinates, WeatherSnapshot

logger = logging.getLogger("silver_care.weather")

WEATHER_TIMEOUT_MS = 10000
WEATHER_MAX_ATTEMPTS = 3
CURRENT_FIELDS = ("temperature_2m", "relative_humidity_2m", "apparent_temperature", "uv_index")


class WeatherService:
    """Service for fetching current conditions from Open-Meteo"""

    def __init__(self, fetcher: RetryingFetcher, config: Config):
        self._fetcher = fetcher
        self._config = config

    async def get_snapshot(self, coords: Coordinates) -> WeatherSnapshot:
        """Get the current weather for a coordinate"""
        logger.info(f"Requesting current weather for ({coords.latitude}, {coords.longitude})")
        data = await self._fetcher.fetch(
            self._config.weather_url,
            params={
                "latitude": coords.latitude,
                "longitude": coords.longitude,
                "current": ",".join(CURRENT_FIELDS),
                "timezone": self._config.timezone,
            },
            timeout_ms=WEATHER_TIMEOUT_MS,
            max_attempts=WEATHER_MAX_ATTEMPTS,
        )

        current = data.get("current") if isinstance(data, dict) else None
        if not current:
            raise UpstreamError("The weather service response did not contain current conditions.")

        try:
            snapshot = WeatherSnapshot.model_validate(current)
        except ValidationError as e:
            logger.error(f"Malformed weather payload: {e.errors()}")
            raise UpstreamError("The weather service returned a malformed response.") from e
        logger.debug(f"Weather snapshot: {snapshot}")
        return snapshot
