"""Data models for the admission controller."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field


class RateLimitConfig(BaseModel):
    """Window length and request budget for one surface."""

    window_ms: int = Field(default=15 * 60 * 1000, gt=0, description="Window length in ms.")
    max_requests: int = Field(default=100, gt=0, description="Requests per key per window.")

    def describe(self) -> str:
        return f"Max {self.max_requests} requests per {self.window_ms / 1000:g} seconds"


@dataclass
class WindowEntry:
    """Per-key window state: how many requests since the window opened."""

    count: int
    window_started_at: float


@dataclass(frozen=True)
class AdmissionDecision:
    """Outcome of checking one request against the limiter."""

    allowed: bool
    remaining: int
    retry_after: int = 0
