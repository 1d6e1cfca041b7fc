#!/usr/bin/env python3
"""Utility functions for gh-org-migrator."""

import threading
import time
from typing import Iterable, List, Optional

from logging_utils import Logger


class RateLimiter:
    """Rate limiter to prevent abuse and respect API limits."""

    def __init__(self, max_requests_per_minute: int = 60):
        self.max_requests = max_requests_per_minute
        self.requests: List[float] = []
        self.lock = threading.Lock()

    def wait_if_needed(self, operation_type: str = "API") -> None:
        """Wait if necessary to respect rate limits."""
        current_time = time.time()

        with self.lock:
            self._clean_old_requests(current_time)
            if len(self.requests) >= self.max_requests:
                wait_time = 60 - (current_time - self.requests[0])
                if wait_time > 0:
                    Logger.security_event(
                        "RATE_LIMIT_HIT",
                        f"rate limit reached for {operation_type}, "
                        f"waiting {wait_time:.2f}s",
                    )
                    time.sleep(wait_time)
                    self._clean_old_requests(time.time())
            self.requests.append(current_time)

    def _clean_old_requests(self, current_time: float) -> None:
        """Remove requests older than 1 minute."""
        cutoff_time = current_time - 60
        self.requests = [
            req_time for req_time in self.requests if req_time > cutoff_time
        ]


def split_csv(value: Optional[str]) -> List[str]:
    """Split a comma-separated flag value, trimming entries and dropping empties."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def build_exclusion_set(names: Iterable[str]) -> frozenset:
    """Exact-match, case-sensitive set of trimmed repository names."""
    return frozenset(name.strip() for name in names if name and name.strip())
