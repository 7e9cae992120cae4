from __future__ import annotations

from datetime import timedelta

from pydantic import BaseModel, ConfigDict, Field


class IntroductionPolicy(BaseModel):
    """Snapshot of the system settings that govern sending.

    Built from the system_settings table at decision time and handed to the
    capacity guard and lifecycle manager; never mutated in place.
    """

    expiry_days: int = Field(default=7, ge=1)
    max_pending_per_professional: int = Field(default=10, ge=1)

    model_config = ConfigDict(frozen=True)

    @property
    def expiry(self) -> timedelta:
        return timedelta(days=self.expiry_days)

    @classmethod
    def from_settings(cls, settings) -> "IntroductionPolicy":
        """Process-level defaults used when system_settings rows are missing or invalid."""
        return cls(
            expiry_days=settings.default_expiry_days,
            max_pending_per_professional=settings.default_max_pending_per_professional,
        )
