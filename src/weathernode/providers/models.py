"""Weather records and the upstream WeatherAPI.com payloads they are mapped from.

Field order on the record models is part of the contract: tool results
serialize records in declaration order.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Records returned by providers
# ---------------------------------------------------------------------------


class WeatherData(BaseModel):
    """Current conditions for one location."""

    city: str
    country: str
    temperature: float
    temperature_unit: str
    feels_like: float
    description: str
    humidity: float
    pressure: float
    wind_speed: float


class ForecastDay(BaseModel):
    """One day of a forecast."""

    date: str
    min_temp: float
    max_temp: float
    description: str


class WeatherForecast(BaseModel):
    """A multi-day forecast for one location."""

    city: str
    country: str
    temperature_unit: str
    days_requested: int
    forecast: list[ForecastDay] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Upstream payloads (only the fields we read)
# ---------------------------------------------------------------------------


class APICondition(BaseModel):
    text: str


class APILocation(BaseModel):
    name: str
    country: str


class APICurrent(BaseModel):
    temp_c: float
    temp_f: float
    feelslike_c: float
    feelslike_f: float
    condition: APICondition
    humidity: float
    pressure_mb: float
    wind_kph: float


class APICurrentResponse(BaseModel):
    location: APILocation
    current: APICurrent


class APIDaySummary(BaseModel):
    mintemp_c: float
    maxtemp_c: float
    mintemp_f: float
    maxtemp_f: float
    condition: APICondition


class APIForecastDay(BaseModel):
    date: str
    day: APIDaySummary


class APIForecast(BaseModel):
    forecastday: list[APIForecastDay] = Field(default_factory=list)


class APIForecastResponse(BaseModel):
    location: APILocation
    forecast: APIForecast
