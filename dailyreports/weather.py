"""
Current site weather from Open-Meteo (free, no key needed).
"""
import logging
from dataclasses import dataclass
from typing import Optional

import requests
from django.conf import settings

from .exceptions import LookupFailure

logger = logging.getLogger(__name__)

# WMO weather codes used by Open-Meteo
WEATHER_CODES = {
    0: "Clear",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    71: "Slight snow",
    73: "Moderate snow",
    75: "Heavy snow",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}

CURRENT_FIELDS = (
    "temperature_2m",
    "relative_humidity_2m",
    "apparent_temperature",
    "precipitation",
    "weather_code",
    "wind_speed_10m",
)


def describe_code(code):
    try:
        return WEATHER_CODES.get(int(code), "Weather")
    except (TypeError, ValueError):
        return "Weather"


@dataclass(frozen=True)
class WeatherReport:
    temperature: Optional[float]
    humidity: Optional[float]
    apparent_temperature: Optional[float]
    precipitation: Optional[float]
    weather_code: Optional[int]
    wind_speed: Optional[float]

    @property
    def condition(self):
        return describe_code(self.weather_code)

    def describe(self):
        parts = [self.condition]
        if self.temperature is not None:
            temp = f"{round(self.temperature)}°C"
            if self.apparent_temperature is not None:
                temp += f" (feels {round(self.apparent_temperature)}°C)"
            parts.append(temp)
        if self.humidity is not None:
            parts.append(f"humidity {round(self.humidity)}%")
        if self.wind_speed is not None:
            parts.append(f"wind {round(self.wind_speed)} km/h")
        if self.precipitation:
            parts.append(f"rain {self.precipitation} mm")
        return ", ".join(parts)


def fetch_current_weather(latitude, longitude):
    """
    Current conditions at a coordinate.

    Raises LookupFailure on any network or payload problem; callers keep
    whatever the foreman already typed.
    """
    params = {
        "latitude": latitude,
        "longitude": longitude,
        "current": ",".join(CURRENT_FIELDS),
        "timezone": "auto",
    }
    try:
        response = requests.get(
            settings.DAILYREPORTS_WEATHER_URL,
            params=params,
            timeout=settings.DAILYREPORTS_WEATHER_TIMEOUT,
        )
        response.raise_for_status()
        current = response.json()["current"]
    except requests.RequestException as e:
        logger.error(f"Weather API error: {e}")
        raise LookupFailure("Weather service unavailable.") from e
    except (KeyError, TypeError, ValueError) as e:
        logger.error(f"Weather processing error: {e}")
        raise LookupFailure("Unexpected weather response.") from e

    return WeatherReport(
        temperature=current.get("temperature_2m"),
        humidity=current.get("relative_humidity_2m"),
        apparent_temperature=current.get("apparent_temperature"),
        precipitation=current.get("precipitation"),
        weather_code=current.get("weather_code"),
        wind_speed=current.get("wind_speed_10m"),
    )


def weather_text(latitude, longitude, fallback=""):
    """Weather description for the form; falls back to `fallback` on failure."""
    try:
        return fetch_current_weather(latitude, longitude).describe(), ""
    except LookupFailure as exc:
        return fallback, str(exc)
