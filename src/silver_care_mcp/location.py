import logging
from typing import Union

from silver_care_mcp.config import Config
from silver_care_mcp.errors import SilverCareError, Unauthorized, UpstreamError
from silver_care_mcp.fetcher import RetryingFetcher
from silver_care_mcp.models import Coordinates, LocationNotFound, NotFoundReason, ResolvedLocation

logger = logging.getLogger("silver_care.location")

GEOCODE_TIMEOUT_MS = 5000
GEOCODE_MAX_ATTEMPTS = 3


class LocationResolver:
    """Turns a free-text place name into coordinates using OpenStreetMap Nominatim"""

    def __init__(self, fetcher: RetryingFetcher, config: Config):
        self._fetcher = fetcher
        self._config = config

    async def resolve(self, location: str) -> Union[ResolvedLocation, LocationNotFound]:
        """Resolve ``location`` to its best match within the configured country.

        Returns :class:`LocationNotFound` when there is no match or when the
        lookup failed for any reason other than authorization.
        :class:`Unauthorized` is propagated to the caller.
        """
        try:
            results = await self._fetcher.fetch(
                self._config.geocoding_url,
                params={
                    "format": "json",
                    "q": location,
                    "limit": 1,
                    "countrycodes": self._config.country_code,
                },
                headers={"User-Agent": self._config.user_agent},
                timeout_ms=GEOCODE_TIMEOUT_MS,
                max_attempts=GEOCODE_MAX_ATTEMPTS,
            )
        except Unauthorized:
            raise
        except SilverCareError as e:
            logger.error(f"Error getting coordinates for {location}: {e.message}")
            return LocationNotFound(query=location, reason=NotFoundReason.LOOKUP_FAILED, detail=e.message)

        if not results:
            logger.info(f"No geocoding match for {location}")
            return LocationNotFound(query=location, reason=NotFoundReason.NO_MATCH)

        try:
            place = results[0]
            coords = Coordinates(latitude=float(place["lat"]), longitude=float(place["lon"]))
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed geocoding result for {location}: {results!r}")
            raise UpstreamError("The geocoding service returned a malformed response.") from e
        logger.debug(f"Coordinates found for {location}: {coords}")
        return ResolvedLocation(coordinates=coords, display_name=place.get("display_name"))
