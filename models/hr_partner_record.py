from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from .enums import HrRole


class HrPartnerRecord(BaseModel):
    """App/DB record shape: used for persistence and internal flows."""

    id: int
    company_id: int
    email: str
    full_name: str | None = None
    role_in_platform: HrRole = HrRole.MEMBER

    model_config = ConfigDict(extra="ignore")
