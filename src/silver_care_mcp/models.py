from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Coordinates(BaseModel):
    """Geographic coordinates"""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class ResolvedLocation(BaseModel):
    """Coordinates for a request, with a display name when they came from geocoding"""
    coordinates: Coordinates
    display_name: Optional[str] = None


class NotFoundReason(str, Enum):
    NO_MATCH = "no_match"
    LOOKUP_FAILED = "lookup_failed"


class LocationNotFound(BaseModel):
    """Resolver outcome when a place name could not be turned into coordinates"""
    query: str
    reason: NotFoundReason
    detail: Optional[str] = None


class WeatherSnapshot(BaseModel):
    """Current conditions as reported by the weather provider"""
    model_config = ConfigDict(populate_by_name=True)

    temperature_c: float = Field(..., alias="temperature_2m")
    relative_humidity_pct: float = Field(..., alias="relative_humidity_2m")
    apparent_temperature_c: float = Field(..., alias="apparent_temperature")
    uv_index: float


class RiskTier(str, Enum):
    CONCERN = "concern"
    CAUTION = "caution"
    WARNING = "warning"
    DANGER = "danger"


class RiskAssessment(BaseModel):
    """Heat-risk tier derived from temperature and humidity"""
    tier: RiskTier
    label: str
    description: str
    feels_like_c: float


class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    """Uniform response for every tool, success or failure"""
    model_config = ConfigDict(populate_by_name=True)

    content: List[TextContent]
    is_error: bool = Field(default=False, alias="isError")

    @classmethod
    def success(cls, text: str) -> "ToolResult":
        return cls(content=[TextContent(text=text)])

    @classmethod
    def error(cls, text: str) -> "ToolResult":
        return cls(content=[TextContent(text=text)], is_error=True)

    @property
    def text(self) -> str:
        return "\n".join(segment.text for segment in self.content)


class ToolInvocation(BaseModel):
    tool_name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


# Tool inputs

def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class GeocodeInput(BaseModel):
    """Arguments of the geocoding tool"""
    model_config = ConfigDict(extra="ignore")

    location: str = Field(..., min_length=1)

    @field_validator("location", mode="before")
    @classmethod
    def _strip_location(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value


class LocatedInput(BaseModel):
    """Arguments shared by every tool that needs a coordinate"""
    model_config = ConfigDict(extra="ignore")

    location: Optional[str] = None
    lat: Optional[float] = Field(default=None, ge=-90, le=90, strict=True)
    lon: Optional[float] = Field(default=None, ge=-180, le=180, strict=True)

    @field_validator("location", mode="before")
    @classmethod
    def _blank_location(cls, value: Any) -> Any:
        value = _blank_to_none(value)
        return value.strip() if isinstance(value, str) else value


class SosInput(LocatedInput):
    symptoms: Optional[str] = None

    @field_validator("symptoms", mode="before")
    @classmethod
    def _blank_symptoms(cls, value: Any) -> Any:
        return _blank_to_none(value)
