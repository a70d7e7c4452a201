from datetime import datetime, timedelta
from typing import Dict, List

from fastapi import HTTPException


class RateLimiter:
    def __init__(self, limit: int, window_seconds: int):
        self.limit = limit
        self.window = timedelta(seconds=window_seconds)
        self.hits: Dict[str, List[datetime]] = {}

    def check(self, key: str) -> None:
        now = datetime.utcnow()
        window_start = now - self.window
        entries = [ts for ts in self.hits.get(key, []) if ts >= window_start]

        if len(entries) >= self.limit:
            oldest_in_window = min(entries) if entries else now
            retry_after = int(max(1, (oldest_in_window + self.window - now).total_seconds()))
            raise HTTPException(
                status_code=429,
                detail={
                    "message": "Too many readiness recomputes, slow down",
                    "retry_after_seconds": retry_after,
                },
            )

        entries.append(now)
        self.hits[key] = entries

    def reset(self) -> None:
        self.hits.clear()

from career_readiness.core.config import settings


# Callers are expected to debounce; this only catches ones that don't.
recompute_rate_limiter = RateLimiter(
    limit=settings.recompute_rate_limit,
    window_seconds=settings.recompute_rate_window_seconds,
)
