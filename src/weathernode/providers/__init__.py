"""Upstream weather data sources."""

from weathernode.providers.base import WeatherProvider
from weathernode.providers.errors import ProviderConfigError, ProviderError
from weathernode.providers.models import ForecastDay, WeatherData, WeatherForecast
from weathernode.providers.weatherapi import WeatherAPIClient

__all__ = [
    "ForecastDay",
    "ProviderConfigError",
    "ProviderError",
    "WeatherAPIClient",
    "WeatherData",
    "WeatherForecast",
    "WeatherProvider",
]
