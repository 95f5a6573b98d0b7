"""Smoke test to verify the project scaffolding works."""

from __future__ import annotations


def test_import() -> None:
    import weathernode

    assert weathernode.__version__ == "1.0.0"


def test_cli_entrypoint() -> None:
    from weathernode.cli import main

    assert callable(main)


def test_package_imports() -> None:
    from weathernode.protocols.mcp import JsonRpcDispatcher, StreamServer, ToolRegistry
    from weathernode.providers import WeatherAPIClient, WeatherProvider
    from weathernode.runtime import AdmissionDeniedError, SlidingWindowLimiter

    assert JsonRpcDispatcher is not None
    assert StreamServer is not None
    assert ToolRegistry is not None
    assert WeatherAPIClient is not None
    assert WeatherProvider is not None
    assert SlidingWindowLimiter is not None
    assert AdmissionDeniedError is not None


def test_lazy_import_from_weathernode() -> None:
    import weathernode

    assert callable(weathernode.create_app)
