from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


DOMAIN_MATCH_MODES = ("two_label", "public_suffix")


def _load_env() -> None:
    # Centralized dotenv loading; safe if .env missing
    load_dotenv()


def _as_bool(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    log_level: str

    # Core/runtime
    db_path: str
    run_env: str

    # Reachability probe
    http_timeout_seconds: float
    probe_max_retries: int
    probe_backoff_seconds: float

    # Introduction policy defaults (system_settings rows win when present)
    default_expiry_days: int
    default_max_pending_per_professional: int

    # Domain matching
    domain_match_mode: str  # two_label | public_suffix

    # Batch jobs
    reconcile_batch_size: int
    verification_queue_threshold: int

    # Logging/tracing
    probe_trace: bool = False
    probe_log_path: str = "logs/probe_calls.jsonl"

    @property
    def public_suffix_matching(self) -> bool:
        return self.domain_match_mode == "public_suffix"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    _load_env()
    domain_match_mode = os.getenv("DOMAIN_MATCH_MODE", "two_label").strip().lower()
    if domain_match_mode not in DOMAIN_MATCH_MODES:
        raise RuntimeError(
            f"DOMAIN_MATCH_MODE must be one of {', '.join(DOMAIN_MATCH_MODES)}; got {domain_match_mode!r}"
        )
    # The verifier contract allows a single retry at most
    probe_max_retries = min(1, max(0, int(os.getenv("PROBE_MAX_RETRIES", "1"))))
    return Settings(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        db_path=os.getenv("DB_PATH", "introductions.db"),
        run_env=os.getenv("RUN_ENV", "local"),
        http_timeout_seconds=float(os.getenv("HTTP_TIMEOUT_SECONDS", "5")),
        probe_max_retries=probe_max_retries,
        probe_backoff_seconds=float(os.getenv("PROBE_BACKOFF_SECONDS", "1.0")),
        default_expiry_days=int(os.getenv("INTRODUCTION_EXPIRY_DAYS", "7")),
        default_max_pending_per_professional=int(os.getenv("MAX_PENDING_INTRODUCTIONS_PER_PROFESSIONAL", "10")),
        domain_match_mode=domain_match_mode,
        reconcile_batch_size=int(os.getenv("RECONCILE_BATCH_SIZE", "500")),
        verification_queue_threshold=int(os.getenv("VERIFICATION_QUEUE_THRESHOLD", "10")),
        probe_trace=_as_bool(os.getenv("PROBE_TRACE", "false")),
        probe_log_path=os.getenv("PROBE_LOG_PATH", "logs/probe_calls.jsonl"),
    )
