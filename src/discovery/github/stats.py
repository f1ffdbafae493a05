# src/discovery/github/stats.py

from datetime import datetime, timezone
from typing import Dict

from core.logging.logger import get_logger


class ApiCallStats:
    """
    Observability counters for outbound GitHub calls.
    """

    def __init__(self):
        self.logger = get_logger(__name__)
        self.total_calls = 0
        self.by_endpoint: Dict[str, int] = {}
        self.last_reset = datetime.now(timezone.utc)

    def track_call(self, endpoint: str):
        self.total_calls += 1
        self.by_endpoint[endpoint] = self.by_endpoint.get(endpoint, 0) + 1
        self.logger.debug(f"GitHub API call to {endpoint}. Total: {self.total_calls}")

    def get_stats(self) -> dict:
        return {
            "total_calls": self.total_calls,
            "by_endpoint": dict(self.by_endpoint),
            "since": self.last_reset.isoformat(),
        }

    def reset(self):
        self.total_calls = 0
        self.by_endpoint = {}
        self.last_reset = datetime.now(timezone.utc)
