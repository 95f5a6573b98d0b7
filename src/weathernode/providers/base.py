"""WeatherProvider protocol — the backend every tool and REST route calls.

Implementations return a record on success and ``None`` when the data
could not be fetched; configuration problems raise.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from weathernode.providers.models import WeatherData, WeatherForecast


@runtime_checkable
class WeatherProvider(Protocol):
    """Fetches weather records from an upstream service."""

    async def fetch_current(self, location: str | None = None) -> WeatherData | None:
        """Current conditions for *location*, or the provider's default location."""
        ...

    async def fetch_forecast(
        self, location: str | None = None, days: int = 3
    ) -> WeatherForecast | None:
        """A *days*-day forecast; the provider clamps *days* to what it supports."""
        ...

    async def fetch_local(self) -> WeatherData | None:
        """Current conditions for the provider's default location."""
        ...
