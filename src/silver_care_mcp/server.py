import logging
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from silver_care_mcp.auth import with_http_middleware
from silver_care_mcp.config import Config, config
from silver_care_mcp.router import (
    ANALYZE_HEAT_RISK,
    FIND_COOLING_SHELTER,
    GENERATE_SOS_ALERT,
    GEOCODE_LOCATION,
    build_router,
)

load_dotenv()

logger = logging.getLogger("silver_care")


def configure_logging(settings: Config) -> None:
    """Log to a file under ``settings.log_dir`` and to stderr.

    Stdout is reserved for the stdio transport.
    """
    log_dir = Path(settings.log_dir)
    log_dir.mkdir(exist_ok=True)
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(log_dir / "silver_care.log"),
            logging.StreamHandler(),
        ],
    )


mcp = FastMCP(
    "Silver Care",
    instructions="Heat illness risk, cooling shelters and SOS messages for older adults in Korea",
    host=config.host,
    port=config.port,
    log_level=config.log_level,
    stateless_http=True,
)

router = build_router(config)


def _arguments(**kwargs: Any) -> Dict[str, Any]:
    return {key: value for key, value in kwargs.items() if value is not None}


async def _run(tool_name: str, arguments: Dict[str, Any]) -> str:
    result = await router.call(tool_name, arguments)
    if result.is_error:
        raise ToolError(result.text)
    return result.text


# Tools
@mcp.tool(name=GEOCODE_LOCATION)
async def geocode_location(location: str) -> str:
    """
    Convert a place name (e.g. 'Jongno-gu, Seoul', 'Haeundae, Busan') to latitude and longitude.
    Call this first when the user describes their location as text.

    Args:
        location: Place name, e.g. 'Jongno-gu, Seoul', 'Haeundae, Busan', 'Jeju City Hall'
    """
    return await _run(GEOCODE_LOCATION, _arguments(location=location))


@mcp.tool(name=ANALYZE_HEAT_RISK)
async def analyze_heat_risk(
    location: Optional[str] = None,
    lat: Optional[float] = None,
    lon: Optional[float] = None,
) -> str:
    """
    Analyze live weather and heat illness risk for a location.
    Accepts either a place name or a latitude/longitude pair.

    Args:
        location: Place name, used when lat/lon are not given
        lat: Latitude in degrees, used when location is not given
        lon: Longitude in degrees, used when location is not given
    """
    return await _run(ANALYZE_HEAT_RISK, _arguments(location=location, lat=lat, lon=lon))


@mcp.tool(name=FIND_COOLING_SHELTER)
async def find_cooling_shelter(
    location: Optional[str] = None,
    lat: Optional[float] = None,
    lon: Optional[float] = None,
) -> str:
    """
    Find nearby cooling shelters.
    Accepts either a place name or a latitude/longitude pair.

    Args:
        location: Place name, used when lat/lon are not given
        lat: Latitude in degrees, used when location is not given
        lon: Longitude in degrees, used when location is not given
    """
    return await _run(FIND_COOLING_SHELTER, _arguments(location=location, lat=lat, lon=lon))


@mcp.tool(name=GENERATE_SOS_ALERT)
async def generate_sos_alert(
    location: Optional[str] = None,
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    symptoms: Optional[str] = None,
) -> str:
    """
    Generate an emergency rescue request message for a guardian.
    Accepts either a place name or a latitude/longitude pair.

    Args:
        location: Place name, used when lat/lon are not given
        lat: Latitude in degrees, used when location is not given
        lon: Longitude in degrees, used when location is not given
        symptoms: Current symptoms, e.g. dizziness, vomiting, shortness of breath
    """
    return await _run(
        GENERATE_SOS_ALERT, _arguments(location=location, lat=lat, lon=lon, symptoms=symptoms)
    )


def main() -> None:
    configure_logging(config)

    if config.transport == "stdio":
        mcp.run(transport="stdio")
        return

    import uvicorn

    if config.mcp_api_key:
        logger.info("API key authentication enabled")
    else:
        logger.info("API key authentication disabled (set MCP_API_KEY to enable)")
    app = with_http_middleware(mcp.streamable_http_app(), config.mcp_api_key, config.cors_origins)
    logger.info(f"Streamable HTTP MCP server on http://{config.host}:{config.port}/mcp")
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
