from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict

from .enums import IntroductionStatus


# SQL twin of IntroductionRequest.effective_status; bind the current time
# (ISO text) as the single positional parameter.
EFFECTIVE_STATUS_SQL = (
    "(CASE WHEN status = 'PENDING' AND expires_at <= ? THEN 'EXPIRED' ELSE status END)"
)


class IntroductionRequest(BaseModel):
    """App/DB record shape of an introduction request, optionally with joined search fields."""

    id: int
    company_id: int
    professional_id: int
    sent_by_id: int
    job_role_id: int | None = None
    personalized_message: str = ""
    match_score: float | None = None
    status: IntroductionStatus = IntroductionStatus.PENDING
    sent_at: datetime
    expires_at: datetime
    viewed_by_professional: bool = False
    viewed_at: datetime | None = None
    responded_at: datetime | None = None
    response_message: str | None = None

    # Joined from v_introductions
    company_name: str | None = None
    industry: str | None = None
    role_title: str | None = None
    location_city: str | None = None

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "IntroductionRequest":
        return cls.model_validate(dict(row))

    def effective_status(self, now: datetime) -> IntroductionStatus:
        """Stored status with lazily-detected expiry folded in."""
        if self.status is IntroductionStatus.PENDING and self.expires_at <= now:
            return IntroductionStatus.EXPIRED
        return self.status
