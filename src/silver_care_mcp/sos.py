from datetime import datetime
from typing import Optional
from urllib.parse import quote
from zoneinfo import ZoneInfo

from silver_care_mcp.models import ResolvedLocation

NO_SYMPTOMS = "No symptoms described"
KAKAO_MAP_URL = "https://map.kakao.com/link/map"
MAP_PIN_LABEL = "Rescue request location"
EMERGENCY_NUMBER = "119"


def map_url(location: ResolvedLocation) -> str:
    coords = location.coordinates
    return f"{KAKAO_MAP_URL}/{quote(MAP_PIN_LABEL)},{coords.latitude},{coords.longitude}"


def format_timestamp(now: datetime, timezone: str) -> str:
    return now.astimezone(ZoneInfo(timezone)).strftime("%Y-%m-%d %H:%M:%S")


def build_sos_message(
    location: ResolvedLocation,
    symptoms: Optional[str],
    now: datetime,
    timezone: str,
) -> str:
    """Format the emergency card a caregiver can forward as-is"""
    coords = location.coordinates
    where = location.display_name or f"Latitude {coords.latitude}, Longitude {coords.longitude}"
    return f"""## Emergency Rescue Request (SOS)
Send the message below to a guardian.

```text
[URGENT] Heat illness rescue request
Time: {format_timestamp(now, timezone)}
Symptoms: {symptoms or NO_SYMPTOMS}
Location: {where}

View map: {map_url(location)}
```

**If you need to call {EMERGENCY_NUMBER}, use the link below**
[Call {EMERGENCY_NUMBER}](tel:{EMERGENCY_NUMBER})
"""
