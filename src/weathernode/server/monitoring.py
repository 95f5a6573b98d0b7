"""Request log ring buffer and the ``/monitoring`` routes that read it.

The :class:`RequestLog` belongs to the application instance
(``app.state.request_log``); nothing here is process-global.
"""

from __future__ import annotations

import os
import platform
import time
from collections import Counter, deque
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Request
from pydantic import BaseModel

DEFAULT_LIMIT = 100


class RequestLogEntry(BaseModel):
    """One completed HTTP request."""

    timestamp: str
    method: str
    url: str
    ip: str
    user_agent: str
    status_code: int
    response_time_ms: float
    error: str | None = None


class RequestLog:
    """Fixed-size buffer of the most recent requests; the oldest entry is dropped first."""

    def __init__(self, size: int = 1000) -> None:
        self._entries: deque[RequestLogEntry] = deque(maxlen=size)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def size(self) -> int:
        return self._entries.maxlen or 0

    def record(self, entry: RequestLogEntry) -> None:
        self._entries.append(entry)

    def recent(self, limit: int = DEFAULT_LIMIT) -> list[RequestLogEntry]:
        if limit <= 0:
            return []
        return list(self._entries)[-limit:]

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> dict[str, Any]:
        entries = list(self._entries)
        total = len(entries)
        by_method = Counter(entry.method for entry in entries)
        by_status = Counter(f"{entry.status_code // 100}xx" for entry in entries)
        errors = sum(1 for entry in entries if entry.status_code >= 400)
        elapsed = sum(entry.response_time_ms for entry in entries)
        return {
            "timestamp": _now_iso(),
            "totalRequests": total,
            "requestsByMethod": dict(by_method),
            "requestsByStatus": dict(by_status),
            "averageResponseTime": round(elapsed / total) if total else 0,
            "errorRate": round(errors / total, 2) if total else 0,
        }


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_limit(raw: str | None) -> int:
    try:
        limit = int(raw) if raw is not None else DEFAULT_LIMIT
    except ValueError:
        return DEFAULT_LIMIT
    return limit if limit > 0 else DEFAULT_LIMIT


router = APIRouter(prefix="/monitoring", tags=["monitoring"])


@router.get("/logs")
async def get_logs(request: Request) -> dict[str, Any]:
    limit = _parse_limit(request.query_params.get("limit"))
    logs = request.app.state.request_log.recent(limit)
    return {
        "logs": [entry.model_dump() for entry in logs],
        "count": len(logs),
        "limit": limit,
    }


@router.delete("/logs")
async def clear_logs(request: Request) -> dict[str, str]:
    request.app.state.request_log.clear()
    return {"message": "Logs cleared successfully"}


@router.get("/metrics")
async def metrics(request: Request) -> dict[str, Any]:
    state = request.app.state
    return {
        "timestamp": _now_iso(),
        "uptime": round(time.monotonic() - state.started_at, 3),
        "pid": os.getpid(),
        "platform": platform.system().lower(),
        "pythonVersion": platform.python_version(),
        "environment": state.settings.environment,
    }


@router.get("/stats")
async def stats(request: Request) -> dict[str, Any]:
    return request.app.state.request_log.stats()
