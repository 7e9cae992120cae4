"""
HTTP reachability probe used by LinkedIn verification.
"""
from __future__ import annotations

import logging
import time
from typing import Callable, Optional

import requests

from config.settings import get_settings
from ports.probe import ReachabilityProbePort
from utils.probe_logger import log_probe


logger = logging.getLogger(__name__)


class HttpReachabilityProbe:
    """HEAD request with a bounded timeout; 2xx/3xx means reachable."""

    def __init__(self, timeout_seconds: Optional[float] = None, session: Optional[requests.Session] = None):
        self.timeout_seconds = timeout_seconds or get_settings().http_timeout_seconds
        self.session = session or requests.Session()

    def is_reachable(self, url: str) -> bool:
        started = time.monotonic()
        try:
            response = self.session.head(url, timeout=self.timeout_seconds, allow_redirects=False)
        except requests.exceptions.RequestException as e:
            duration_ms = int((time.monotonic() - started) * 1000)
            logger.warning(
                f"HEAD {url} failed: {e}",
                extra={"step": "probe", "status": "error", "duration_ms": duration_ms, "error": type(e).__name__},
            )
            log_probe(caller="reachability", url=url, duration_ms=duration_ms, status="error", error=str(e))
            return False

        duration_ms = int((time.monotonic() - started) * 1000)
        reachable = 200 <= response.status_code < 400
        logger.info(
            f"HEAD {url} -> {response.status_code}",
            extra={"step": "probe", "status": "ok" if reachable else "unreachable", "duration_ms": duration_ms},
        )
        log_probe(
            caller="reachability",
            url=url,
            status_code=response.status_code,
            duration_ms=duration_ms,
            status="ok" if reachable else "unreachable",
        )
        return reachable


def probe_with_retry(
    probe: ReachabilityProbePort,
    url: str,
    retries: int = 1,
    backoff_seconds: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Probe once, then retry at most once after a backoff pause."""
    attempts = 1 + min(1, max(0, retries))
    for attempt in range(attempts):
        if probe.is_reachable(url):
            return True
        if attempt < attempts - 1:
            logger.info(
                f"Retrying reachability probe for {url} after {backoff_seconds}s",
                extra={"step": "probe", "status": "retry"},
            )
            sleep(backoff_seconds)
    return False


class RetryingProbe:
    """Probe adapter applying probe_with_retry to every call."""

    def __init__(
        self,
        probe: ReachabilityProbePort,
        retries: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        settings = get_settings()
        self.probe = probe
        self.retries = settings.probe_max_retries if retries is None else retries
        self.backoff_seconds = settings.probe_backoff_seconds if backoff_seconds is None else backoff_seconds
        self.sleep = sleep

    def is_reachable(self, url: str) -> bool:
        return probe_with_retry(self.probe, url, self.retries, self.backoff_seconds, self.sleep)
