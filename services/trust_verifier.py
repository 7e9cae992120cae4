"""
Trust decisions for professionals (LinkedIn reachability) and companies
(website domain vs. admin HR email domain).

Both checks are pure functions of their inputs plus the injected probe;
persisting the outcome is the verification service's job.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from models.enums import DomainVerdictStatus, ProfessionalVerificationStatus
from ports.probe import ReachabilityProbePort
from services.domain_utils import domains_match, extract_domain_from_email, extract_domain_from_url
from services.errors import InvalidFormat, Unreachable


LINKEDIN_PROFILE_RE = re.compile(r"^https?://(www\.)?linkedin\.com/in/[A-Za-z0-9_-]+/?$")

PROFESSIONAL_STATUS_RANK = {
    ProfessionalVerificationStatus.UNVERIFIED: 0,
    ProfessionalVerificationStatus.BASIC: 1,
    ProfessionalVerificationStatus.FULL: 2,
    ProfessionalVerificationStatus.PREMIUM: 3,
}


def at_least(current: ProfessionalVerificationStatus, floor: ProfessionalVerificationStatus) -> bool:
    return PROFESSIONAL_STATUS_RANK[ProfessionalVerificationStatus(current)] >= PROFESSIONAL_STATUS_RANK[ProfessionalVerificationStatus(floor)]


@dataclass(frozen=True)
class LinkedInCheck:
    ok: bool
    code: Optional[str] = None  # InvalidFormat | Unreachable
    url: Optional[str] = None


@dataclass(frozen=True)
class DomainVerdict:
    status: DomainVerdictStatus
    reason: str
    website_domain: Optional[str] = None
    email_domain: Optional[str] = None


def is_linkedin_profile_url(url: Optional[str]) -> bool:
    return bool(url) and LINKEDIN_PROFILE_RE.match(url.strip()) is not None


def verify_professional_linkedin(url: Optional[str], probe: ReachabilityProbePort) -> LinkedInCheck:
    """Format check, then a single reachability probe.

    Retries belong to the caller (see reachability.probe_with_retry).
    """
    if not is_linkedin_profile_url(url):
        return LinkedInCheck(ok=False, code=InvalidFormat.code, url=url)
    target = url.strip()
    if not probe.is_reachable(target):
        return LinkedInCheck(ok=False, code=Unreachable.code, url=target)
    return LinkedInCheck(ok=True, url=target)


def verify_company_domain(
    website_url: Optional[str],
    admin_hr_email: Optional[str],
    public_suffix: bool = False,
) -> DomainVerdict:
    if not admin_hr_email:
        return DomainVerdict(DomainVerdictStatus.MANUAL_REVIEW, "no ADMIN HR partner on file")

    website_domain = extract_domain_from_url(website_url)
    email_domain = extract_domain_from_email(admin_hr_email)
    if website_domain is None:
        return DomainVerdict(
            DomainVerdictStatus.MANUAL_REVIEW,
            f"website domain could not be parsed from {website_url!r}",
            None,
            email_domain,
        )
    if email_domain is None:
        return DomainVerdict(
            DomainVerdictStatus.MANUAL_REVIEW,
            f"email domain could not be parsed from {admin_hr_email!r}",
            website_domain,
            None,
        )

    if domains_match(website_domain, email_domain, public_suffix=public_suffix):
        return DomainVerdict(DomainVerdictStatus.VERIFIED, "auto-verified: domain match", website_domain, email_domain)
    return DomainVerdict(
        DomainVerdictStatus.UNVERIFIED,
        f"domain mismatch: website {website_domain} vs email {email_domain}",
        website_domain,
        email_domain,
    )
