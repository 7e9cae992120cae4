from __future__ import annotations

import json
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import ProfessionalVerificationStatus


class ProfessionalRecord(BaseModel):
    """App/DB record shape: used for persistence and internal flows."""

    id: int
    first_name: str | None = None
    last_name: str | None = None
    linkedin_url: str | None = None
    verification_status: ProfessionalVerificationStatus = ProfessionalVerificationStatus.UNVERIFIED
    verification_date: datetime | None = None
    verification_notes: str | None = None
    verified_by: str | None = None
    open_to_opportunities: bool = True
    hidden_from_company_ids: list[int] = Field(default_factory=list)
    deleted_at: datetime | None = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("hidden_from_company_ids", mode="before")
    @classmethod
    def _decode_hidden(cls, value):
        # Stored as JSON text in SQLite
        if value is None:
            return []
        if isinstance(value, str):
            return json.loads(value or "[]")
        return value

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
