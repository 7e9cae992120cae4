from __future__ import annotations

import logging
import sqlite3
from typing import Dict, Optional

from pydantic import ValidationError

from models.introduction_policy import IntroductionPolicy
from utils.timeutil import to_iso, utc_now


logger = logging.getLogger(__name__)

EXPIRY_DAYS_KEY = "introduction_expiry_days"
MAX_PENDING_KEY = "max_pending_introductions_per_professional"

_POLICY_FIELDS = {
    EXPIRY_DAYS_KEY: "expiry_days",
    MAX_PENDING_KEY: "max_pending_per_professional",
}


def _parse_positive_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        parsed = int(str(value).strip())
    except ValueError:
        return None
    return parsed if parsed >= 1 else None


class SettingsRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def get_all(self) -> Dict[str, str]:
        cur = self.conn.cursor()
        cur.execute("SELECT key, value FROM system_settings ORDER BY key")
        return {r[0]: r[1] for r in cur.fetchall()}

    def get_value(self, key: str) -> Optional[str]:
        cur = self.conn.cursor()
        cur.execute("SELECT value FROM system_settings WHERE key = ?", (key,))
        row = cur.fetchone()
        return row[0] if row else None

    def set_value(self, key: str, value: str, updated_by: str) -> None:
        """Administrative write path for the introduction policy keys."""
        if key not in _POLICY_FIELDS:
            raise ValueError(f"Unknown system setting: {key}")
        if _parse_positive_int(value) is None:
            raise ValueError(f"{key} must be a positive integer; got {value!r}")
        self.conn.execute(
            "INSERT INTO system_settings (key, value, updated_at, updated_by) VALUES (?, ?, ?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at, updated_by = excluded.updated_by;",
            (key, str(int(value)), to_iso(utc_now()), updated_by),
        )

    def load_policy(self, defaults: Optional[IntroductionPolicy] = None) -> IntroductionPolicy:
        """Read the current policy; unparsable rows fall back to the defaults."""
        base = defaults or IntroductionPolicy()
        values = base.model_dump()
        stored = self.get_all()
        for key, field in _POLICY_FIELDS.items():
            if key not in stored:
                continue
            parsed = _parse_positive_int(stored[key])
            if parsed is None:
                logger.warning(
                    f"Ignoring invalid system setting {key}={stored[key]!r}",
                    extra={"step": "load_policy", "status": "fallback"},
                )
                continue
            values[field] = parsed
        try:
            return IntroductionPolicy(**values)
        except ValidationError:
            return base
