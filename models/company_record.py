from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from .enums import CompanyVerificationStatus


class CompanyRecord(BaseModel):
    """App/DB record shape: used for persistence and internal flows."""

    id: int
    company_name: str
    company_website: str | None = None
    industry: str | None = None
    verification_status: CompanyVerificationStatus = CompanyVerificationStatus.PENDING
    verification_date: datetime | None = None
    verification_notes: str | None = None
    verified_by: str | None = None
    introduction_credits: int = 0

    model_config = ConfigDict(extra="ignore")
