from typing import List, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    geocoding_url: str = "https://nominatim.openstreetmap.org/search"
    weather_url: str = "https://api.open-meteo.com/v1/forecast"
    user_agent: str = "SilverCare-MCP/1.0"
    country_code: str = "kr"
    timezone: str = "Asia/Seoul"

    host: str = "0.0.0.0"
    port: int = 8000
    transport: Literal["stdio", "streamable-http"] = "stdio"
    mcp_api_key: Optional[str] = None
    cors_origins: List[str] = ["*"]

    log_level: str = "INFO"
    log_dir: str = "logs"


config = Config()
