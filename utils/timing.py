"""Timing utilities for per-request performance logging."""

import time
import logging
from contextlib import contextmanager
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class Timer:
    """
    Timer class for tracking step durations of a try-on request.

    Besides logging, the measured steps are exposed to the client as
    ``X-Processing-Time`` and a ``Server-Timing`` header, so slow overlay
    or generation steps are visible in browser dev tools.

    Usage:
        timer = Timer(request_id="ab12cd34")
        with timer.measure("resolve"):
            # resolve garment

        response.headers.update(timer.response_headers())
    """

    def __init__(self, request_id: Optional[str] = None):
        self.request_id = request_id
        self.steps: Dict[str, float] = {}

    @contextmanager
    def measure(self, step_name: str):
        """Context manager to measure duration of a step."""
        start = time.perf_counter()
        try:
            yield
        finally:
            duration = time.perf_counter() - start
            self.steps[step_name] = duration
            logger.debug(f"[{self.request_id}] {step_name}: {duration:.3f}s")

    def get_total(self) -> float:
        return sum(self.steps.values())

    def server_timing(self) -> str:
        """Format steps as a Server-Timing header value (durations in ms)."""
        return ", ".join(f"{name};dur={duration * 1000:.1f}" for name, duration in self.steps.items())

    def response_headers(self) -> Dict[str, str]:
        """Headers identifying the request and reporting where its time went."""
        headers = {"X-Processing-Time": f"{self.get_total():.3f}s"}
        if self.request_id:
            headers["X-Request-ID"] = self.request_id
        if self.steps:
            headers["Server-Timing"] = self.server_timing()
        return headers

    def log_summary(self, level: int = logging.INFO) -> None:
        """Log the timing summary."""
        parts = [f"{k}: {v:.3f}s" for k, v in self.steps.items()]
        parts.append(f"total: {self.get_total():.3f}s")
        logger.log(level, f"[{self.request_id}] Timing: {', '.join(parts)}")
