from __future__ import annotations

from enum import Enum


class ProfessionalVerificationStatus(str, Enum):
    """Professional trust level; only ever raised by LinkedIn verification."""
    UNVERIFIED = "UNVERIFIED"
    BASIC = "BASIC"
    FULL = "FULL"
    PREMIUM = "PREMIUM"


class CompanyVerificationStatus(str, Enum):
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    UNVERIFIED = "UNVERIFIED"
    PREMIUM = "PREMIUM"


class IntroductionStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    EXPIRED = "EXPIRED"


class HrRole(str, Enum):
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class DomainVerdictStatus(str, Enum):
    VERIFIED = "VERIFIED"
    UNVERIFIED = "UNVERIFIED"
    MANUAL_REVIEW = "MANUAL_REVIEW"


# Companies allowed to send introductions
SENDING_COMPANY_STATUSES = frozenset(
    {CompanyVerificationStatus.VERIFIED, CompanyVerificationStatus.PREMIUM}
)
