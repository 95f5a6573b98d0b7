"""Tests for ``weathernode tools`` CLI commands."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

from weathernode.cli import main
from weathernode.providers.models import WeatherData

LONDON = WeatherData(
    city="London",
    country="United Kingdom",
    temperature=15,
    temperature_unit="C",
    feels_like=14,
    description="Sunny",
    humidity=60,
    pressure=1015,
    wind_speed=8,
)


class TestToolsList:
    def test_lists_tools(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["tools", "list"])

        assert result.exit_code == 0
        assert "get_weather" in result.output
        assert "get_forecast" in result.output
        assert "get_local_weather" in result.output


class TestToolsCall:
    def test_call_tool(self) -> None:
        with patch(
            "weathernode.providers.weatherapi.WeatherAPIClient.fetch_current",
            new_callable=AsyncMock,
            return_value=LONDON,
        ) as fetch:
            runner = CliRunner()
            result = runner.invoke(
                main,
                ["tools", "call", "get_weather", "-a", "city=London"],
                env={"WEATHER_API_KEY": "k"},
            )

            assert result.exit_code == 0
            assert "London" in result.output
            fetch.assert_awaited_once_with("London")

    def test_integer_arguments(self) -> None:
        with patch(
            "weathernode.providers.weatherapi.WeatherAPIClient.fetch_forecast",
            new_callable=AsyncMock,
            return_value=None,
        ) as fetch:
            runner = CliRunner()
            result = runner.invoke(
                main, ["tools", "call", "get_forecast", "-a", "city=Oslo", "-a", "days=5"]
            )

            fetch.assert_awaited_once_with("Oslo", 5)
            assert result.exit_code == 1
            assert "Could not fetch forecast data for Oslo" in result.output

    def test_non_ascii_digits_stay_strings(self) -> None:
        with patch(
            "weathernode.providers.weatherapi.WeatherAPIClient.fetch_current",
            new_callable=AsyncMock,
            return_value=LONDON,
        ) as fetch:
            runner = CliRunner()
            result = runner.invoke(main, ["tools", "call", "get_weather", "-a", "city=²"])

            assert result.exit_code == 0
            fetch.assert_awaited_once_with("²")

    def test_unknown_tool(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["tools", "call", "get_alerts"])

        assert result.exit_code == 1
        assert "Unknown tool: get_alerts" in result.output

    def test_bad_argument(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["tools", "call", "get_weather", "-a", "London"])

        assert result.exit_code != 0
        assert "key=value" in result.output

    def test_config_error(self) -> None:
        runner = CliRunner()
        result = runner.invoke(
            main, ["tools", "call", "get_weather"], env={"TEMP_UNIT": "Kelvin"}
        )

        assert result.exit_code == 1
