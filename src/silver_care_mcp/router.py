import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Type, Union

import httpx
from pydantic import BaseModel, ValidationError

from silver_care_mcp.config import Config
from silver_care_mcp.errors import ErrorKind, InvalidInput, SilverCareError, UnknownTool
from silver_care_mcp.fetcher import RetryingFetcher, Sleep
from silver_care_mcp.location import LocationResolver
from silver_care_mcp.models import (
    Coordinates,
    GeocodeInput,
    LocatedInput,
    LocationNotFound,
    ResolvedLocation,
    SosInput,
    ToolInvocation,
    ToolResult,
)
from silver_care_mcp.risk import classify
from silver_care_mcp.shelter import find_shelters
from silver_care_mcp.sos import build_sos_message
from silver_care_mcp.weather import WeatherService

logger = logging.getLogger("silver_care.router")

GEOCODE_LOCATION = "geocode_location"
ANALYZE_HEAT_RISK = "analyze_heat_risk"
FIND_COOLING_SHELTER = "find_cooling_shelter"
GENERATE_SOS_ALERT = "generate_sos_alert"

Clock = Callable[[], datetime]
Handler = Callable[[Any], Awaitable[ToolResult]]

LOCATION_REQUIRED = "A location is required. Provide 'location' (a place name) or both 'lat' and 'lon'."


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _render_error(error: SilverCareError) -> str:
    if error.kind is ErrorKind.UNAUTHORIZED:
        return f"Authentication error (401 Unauthorized)\n\n{error.message}\n\nPlease provide a valid API key."
    if error.kind in (ErrorKind.EXHAUSTED_RETRIES, ErrorKind.TRANSIENT_NETWORK_FAILURE):
        return f"Service temporarily unavailable\n\n{error.message}\n\nPlease try again in a moment."
    if error.kind is ErrorKind.INVALID_INPUT:
        return f"Invalid request: {error.message}"
    return f"Error: {error.message or 'An unknown error occurred.'}"


def _not_found(missing: LocationNotFound) -> ToolResult:
    # NO_MATCH and LOOKUP_FAILED are rendered the same way on purpose; the reason is only logged.
    logger.info(f"Location '{missing.query}' not resolved ({missing.reason.value})")
    return ToolResult.error(
        f'Location could not be found: "{missing.query}"\n\nPlease try a different location name.'
    )


def _describe_validation(error: ValidationError) -> str:
    problems = []
    for detail in error.errors():
        field = ".".join(str(part) for part in detail["loc"]) or "arguments"
        problems.append(f"{field}: {detail['msg']}")
    return "; ".join(problems)


def _location_header(location: ResolvedLocation) -> str:
    return f"**Location**: {location.display_name}\n" if location.display_name else ""


class ToolRouter:
    """Routes a tool invocation to its resolution path and response shape.

    :meth:`invoke` never raises. Every failure becomes a :class:`ToolResult`
    with ``is_error`` set.
    """

    def __init__(
        self,
        resolver: LocationResolver,
        weather: WeatherService,
        config: Config,
        clock: Optional[Clock] = None,
    ):
        self._resolver = resolver
        self._weather = weather
        self._config = config
        self._clock = clock or _utc_now
        self._tools: Dict[str, Tuple[Type[BaseModel], Handler]] = {
            GEOCODE_LOCATION: (GeocodeInput, self._geocode_location),
            ANALYZE_HEAT_RISK: (LocatedInput, self._analyze_heat_risk),
            FIND_COOLING_SHELTER: (LocatedInput, self._find_cooling_shelter),
            GENERATE_SOS_ALERT: (SosInput, self._generate_sos_alert),
        }

    async def call(self, tool_name: str, arguments: Optional[Dict[str, Any]] = None) -> ToolResult:
        try:
            invocation = ToolInvocation(tool_name=tool_name, arguments=arguments or {})
        except ValidationError as e:
            error = InvalidInput(_describe_validation(e))
            logger.error(f"Rejected call to {tool_name!r}: {error.message}")
            return ToolResult.error(_render_error(error))
        return await self.invoke(invocation)

    async def invoke(self, invocation: ToolInvocation) -> ToolResult:
        # Values may hold health details (symptoms); log keys only
        logger.info(f"Tool {invocation.tool_name} called with arguments {sorted(invocation.arguments)}")
        try:
            return await self._dispatch(invocation)
        except SilverCareError as e:
            logger.error(f"Tool {invocation.tool_name} failed ({e.kind.value}): {e.message}")
            return ToolResult.error(_render_error(e))
        except Exception as e:
            logger.exception(f"Unexpected error in tool {invocation.tool_name}")
            return ToolResult.error(f"Error: {str(e) or 'An unknown error occurred.'}")

    async def _dispatch(self, invocation: ToolInvocation) -> ToolResult:
        if invocation.tool_name not in self._tools:
            raise UnknownTool(invocation.tool_name)
        input_model, handler = self._tools[invocation.tool_name]

        try:
            args = input_model.model_validate(invocation.arguments)
        except ValidationError as e:
            raise InvalidInput(_describe_validation(e)) from e

        return await handler(args)

    async def _resolve(self, args: LocatedInput) -> Union[ResolvedLocation, LocationNotFound]:
        if args.location:
            return await self._resolver.resolve(args.location)
        if args.lat is not None and args.lon is not None:
            return ResolvedLocation(coordinates=Coordinates(latitude=args.lat, longitude=args.lon))
        raise InvalidInput(LOCATION_REQUIRED)

    # Tools

    async def _geocode_location(self, args: GeocodeInput) -> ToolResult:
        location = await self._resolver.resolve(args.location)
        if isinstance(location, LocationNotFound):
            return _not_found(location)

        coords = location.coordinates
        return ToolResult.success(
            "## Location information\n\n"
            f"**Location**: {location.display_name}\n"
            f"**Latitude**: {coords.latitude}\n"
            f"**Longitude**: {coords.longitude}\n\n"
            "You can now use these coordinates with the heat-risk or cooling-shelter tools."
        )

    async def _analyze_heat_risk(self, args: LocatedInput) -> ToolResult:
        location = await self._resolve(args)
        if isinstance(location, LocationNotFound):
            return _not_found(location)

        snapshot = await self._weather.get_snapshot(location.coordinates)
        risk = classify(snapshot.temperature_c, snapshot.relative_humidity_pct)
        logger.info(f"Heat risk {risk.tier.value} (feels like {risk.feels_like_c:.1f}°C)")

        return ToolResult.success(
            "## Heat illness risk at your location\n"
            f"{_location_header(location)}\n"
            f'> **"{risk.description}"**\n\n'
            f"* **Risk level**: **{risk.label}**\n"
            f"* **Current temperature**: {snapshot.temperature_c}°C\n"
            f"* **Feels like**: **{snapshot.apparent_temperature_c}°C** "
            f"(humidity {snapshot.relative_humidity_pct}%)\n"
            f"* **UV index**: {snapshot.uv_index}\n"
        )

    async def _find_cooling_shelter(self, args: LocatedInput) -> ToolResult:
        location = await self._resolve(args)
        if isinstance(location, LocationNotFound):
            return _not_found(location)

        text = f"## Nearby cooling shelters\n{_location_header(location)}\n"
        for index, shelter in enumerate(find_shelters(location.coordinates), start=1):
            text += f"**{index}. {shelter.name}** ({shelter.distance})\n"
            text += f"- Type: {shelter.kind}\n"
            text += f"- [Get directions]({shelter.directions_url})\n\n"
        return ToolResult.success(text)

    async def _generate_sos_alert(self, args: SosInput) -> ToolResult:
        location = await self._resolve(args)
        if isinstance(location, LocationNotFound):
            return _not_found(location)

        message = build_sos_message(location, args.symptoms, self._clock(), self._config.timezone)
        return ToolResult.success(message)


def build_router(
    config: Config,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    sleep: Sleep = asyncio.sleep,
    clock: Optional[Clock] = None,
) -> ToolRouter:
    fetcher = RetryingFetcher(transport=transport, sleep=sleep)
    return ToolRouter(
        resolver=LocationResolver(fetcher, config),
        weather=WeatherService(fetcher, config),
        config=config,
        clock=clock,
    )
