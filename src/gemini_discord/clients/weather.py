"""Weather lookups via Open-Meteo geocoding and forecast APIs."""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from ..models.base import Source
from ..services.cache import ResponseCache
from .base import FetchClient

logger = logging.getLogger(__name__)

GEOCODE_URL = "https://geocoding-api.open-meteo.com/v1/search"
FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
OPEN_METEO_LINK = "https://open-meteo.com/"
WEATHER_CACHE_TTL = 10 * 60

CURRENT_FIELDS = [
    "temperature_2m",
    "apparent_temperature",
    "precipitation",
    "rain",
    "showers",
    "snowfall",
    "weather_code",
    "wind_speed_10m",
]
DAILY_FIELDS = [
    "temperature_2m_max",
    "temperature_2m_min",
    "precipitation_sum",
    "precipitation_probability_max",
]

WEATHER_PATTERN = re.compile(
    r"(天氣|氣溫|溫度|下雨|降雨|雷雨|雨量|風速|體感|紫外線|濕度|weather|forecast)", re.IGNORECASE
)
TAIWAN_LOCATION_PATTERN = re.compile(
    r"(臺北|台北|新北|桃園|臺中|台中|臺南|台南|高雄|基隆|新竹|苗栗|彰化|南投|雲林|嘉義|屏東|宜蘭|花蓮|臺東|台東|澎湖|金門|連江)"
)


def is_weather_query(text: str) -> bool:
    return bool(WEATHER_PATTERN.search(text or ""))


def guess_taiwan_location(text: str, default: str = "台北") -> str:
    """Pick the first Taiwanese city/county named in the text."""
    match = TAIWAN_LOCATION_PATTERN.search(text or "")
    if match:
        return match.group(1).replace("臺", "台")
    return default


@dataclass
class GeoLocation:
    name: str
    latitude: float
    longitude: float
    country: str = ""
    admin1: str = ""
    timezone: str = ""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _first(values: Any) -> Optional[Any]:
    if isinstance(values, list) and values:
        return values[0]
    return None


def format_weather_block(label: str, geo: GeoLocation, forecast: Dict[str, Any]) -> str:
    """Render the fixed-field text block; each field is optional."""
    current = forecast.get("current") or {}
    daily = forecast.get("daily") or {}
    today_max = _first(daily.get("temperature_2m_max"))
    today_min = _first(daily.get("temperature_2m_min"))
    precip_prob = _first(daily.get("precipitation_probability_max"))
    precip_sum = _first(daily.get("precipitation_sum"))

    admin = f" / {geo.admin1}" if geo.admin1 else ""
    lines = [
        f"Weather (Open-Meteo) for: {label}",
        f"Geo: {geo.name}{admin} ({geo.latitude}, {geo.longitude})",
    ]
    if _is_number(current.get("temperature_2m")):
        lines.append(f"Current temp: {current['temperature_2m']}°C")
    if _is_number(current.get("apparent_temperature")):
        lines.append(f"Feels like: {current['apparent_temperature']}°C")
    if _is_number(current.get("wind_speed_10m")):
        lines.append(f"Wind: {current['wind_speed_10m']} km/h")
    if _is_number(current.get("precipitation")):
        lines.append(f"Current precipitation: {current['precipitation']} mm")
    if today_min is not None and today_max is not None:
        lines.append(f"Today: {today_min}°C ~ {today_max}°C")
    if precip_prob is not None:
        lines.append(f"Today precip prob (max): {precip_prob}%")
    if precip_sum is not None:
        lines.append(f"Today precip sum: {precip_sum} mm")
    lines.append(f"Source: {OPEN_METEO_LINK}")
    return "\n".join(lines)


class OpenMeteoClient(FetchClient):
    """Geocode a place name, then fetch current and daily weather."""

    name = "open-meteo"

    def __init__(
        self,
        cache: Optional[ResponseCache] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 8.0,
        forecast_timezone: str = "Asia/Taipei",
    ):
        super().__init__(client=client, timeout=timeout)
        self.cache = cache if cache is not None else ResponseCache(ttl_seconds=WEATHER_CACHE_TTL)
        self.forecast_timezone = forecast_timezone

    async def geocode(self, name: str) -> Optional[GeoLocation]:
        data = await self._request_json(
            "GET",
            GEOCODE_URL,
            params={"name": name, "count": 1, "language": "zh", "format": "json"},
        )
        results: List[Dict[str, Any]] = []
        if isinstance(data, dict):
            results = data.get("results") or []
        if not results or not isinstance(results[0], dict):
            logger.info(f"No geocoding result for {name!r}")
            return None
        top = results[0]
        try:
            return GeoLocation(
                name=str(top.get("name") or name),
                latitude=float(top["latitude"]),
                longitude=float(top["longitude"]),
                country=str(top.get("country") or ""),
                admin1=str(top.get("admin1") or ""),
                timezone=str(top.get("timezone") or ""),
            )
        except (KeyError, TypeError, ValueError):
            logger.warning(f"Malformed geocoding result for {name!r}: {top}")
            return None

    async def forecast(self, latitude: float, longitude: float) -> Optional[Dict[str, Any]]:
        data = await self._request_json(
            "GET",
            FORECAST_URL,
            params={
                "latitude": latitude,
                "longitude": longitude,
                "current": ",".join(CURRENT_FIELDS),
                "daily": ",".join(DAILY_FIELDS),
                "timezone": self.forecast_timezone,
            },
        )
        return data if isinstance(data, dict) else None

    async def weather_source(self, location: str) -> Optional[Source]:
        """Cached geocode + forecast for one location, as a citable Source."""
        cache_key = self.cache.create_key("wx", location)
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        geo = await self.geocode(location)
        if geo is None:
            return None
        forecast = await self.forecast(geo.latitude, geo.longitude)
        if forecast is None:
            return None

        source = Source(
            title=f"天氣資料：{location}（Open-Meteo）",
            snippet=format_weather_block(location, geo, forecast),
            link=OPEN_METEO_LINK,
        )
        self.cache.set(cache_key, source)
        return source
