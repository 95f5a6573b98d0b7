"""WeatherAPIClient — fetches current conditions and forecasts from WeatherAPI.com."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from weathernode.providers.errors import ProviderConfigError
from weathernode.providers.models import (
    APICurrentResponse,
    APIForecastResponse,
    ForecastDay,
    WeatherData,
    WeatherForecast,
)
from weathernode.utils.telemetry import (
    ATTR_PROVIDER_ENDPOINT,
    ATTR_PROVIDER_LOCATION,
    get_tracer,
)

if TYPE_CHECKING:
    from weathernode.config import Settings

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

DEFAULT_BASE_URL = "http://api.weatherapi.com/v1"
MAX_FORECAST_DAYS = 10


class WeatherAPIClient:
    """Async client for WeatherAPI.com.

    Satisfies the :class:`~weathernode.providers.base.WeatherProvider` protocol.
    Upstream failures are logged and reported as ``None``; a missing API key
    raises :class:`ProviderConfigError` on every call.

    Usage::

        async with WeatherAPIClient(api_key="...") as provider:
            weather = await provider.fetch_current("London")
    """

    def __init__(
        self,
        api_key: str,
        *,
        default_location: str = "London",
        temp_unit: str = "C",
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._default_location = default_location
        self._temp_unit = temp_unit
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> WeatherAPIClient:
        return cls(
            settings.weather_api_key,
            default_location=settings.default_location,
            temp_unit=settings.temp_unit,
            base_url=settings.weather_api_base_url,
        )

    @property
    def default_location(self) -> str:
        return self._default_location

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def __aenter__(self) -> WeatherAPIClient:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self._base_url, timeout=self._timeout)
        return self._client

    @property
    def _celsius(self) -> bool:
        return self._temp_unit.upper() == "C"

    async def fetch_current(self, location: str | None = None) -> WeatherData | None:
        """GET ``current.json`` and map it to a :class:`WeatherData` record."""
        location = location or self._default_location
        self._require_key()

        try:
            raw = await self._get("/current.json", {"q": location, "aqi": "no"})
            data = APICurrentResponse.model_validate(raw)
        except (httpx.HTTPError, ValidationError, ValueError) as exc:
            logger.error("Error fetching current weather for %s: %s", location, exc)
            return None

        current = data.current
        return WeatherData(
            city=data.location.name,
            country=data.location.country,
            temperature=current.temp_c if self._celsius else current.temp_f,
            temperature_unit=self._temp_unit,
            feels_like=current.feelslike_c if self._celsius else current.feelslike_f,
            description=current.condition.text,
            humidity=current.humidity,
            pressure=current.pressure_mb,
            wind_speed=current.wind_kph,
        )

    async def fetch_forecast(
        self, location: str | None = None, days: int = 3
    ) -> WeatherForecast | None:
        """GET ``forecast.json``; at most :data:`MAX_FORECAST_DAYS` days are requested upstream."""
        location = location or self._default_location
        days = int(days)
        self._require_key()

        params = {
            "q": location,
            "days": max(1, min(days, MAX_FORECAST_DAYS)),
            "aqi": "no",
            "alerts": "no",
        }
        try:
            raw = await self._get("/forecast.json", params)
            data = APIForecastResponse.model_validate(raw)
        except (httpx.HTTPError, ValidationError, ValueError) as exc:
            logger.error(
                "Error fetching weather forecast for %s (%d days): %s", location, days, exc
            )
            return None

        return WeatherForecast(
            city=data.location.name,
            country=data.location.country,
            temperature_unit=self._temp_unit,
            days_requested=days,
            forecast=[
                ForecastDay(
                    date=entry.date,
                    min_temp=entry.day.mintemp_c if self._celsius else entry.day.mintemp_f,
                    max_temp=entry.day.maxtemp_c if self._celsius else entry.day.maxtemp_f,
                    description=entry.day.condition.text,
                )
                for entry in data.forecast.forecastday
            ],
        )

    async def fetch_local(self) -> WeatherData | None:
        return await self.fetch_current(self._default_location)

    def _require_key(self) -> None:
        if not self._api_key:
            raise ProviderConfigError("WEATHER_API_KEY")

    async def _get(self, path: str, params: dict[str, Any]) -> Any:
        with _tracer.start_as_current_span("provider.fetch") as span:
            span.set_attribute(ATTR_PROVIDER_ENDPOINT, path)
            span.set_attribute(ATTR_PROVIDER_LOCATION, str(params.get("q", "")))
            response = await self._http().get(path, params={"key": self._api_key, **params})
            response.raise_for_status()
            return response.json()
