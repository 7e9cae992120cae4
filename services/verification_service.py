from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, Optional

from config.settings import get_settings
from db.connection import immediate_transaction
from db.repos.activity_repo import ActivityRepo
from db.repos.companies_repo import CompaniesRepo
from db.repos.hr_partners_repo import HrPartnersRepo
from db.repos.professionals_repo import ProfessionalsRepo
from models.enums import (
    CompanyVerificationStatus,
    DomainVerdictStatus,
    ProfessionalVerificationStatus,
)
from ports.probe import ReachabilityProbePort
from services.domain_utils import normalize_linkedin_profile_url
from services.errors import InvalidFormat, InvalidInput, ManualReviewRequired, NotFound
from services.reachability import HttpReachabilityProbe, RetryingProbe
from services.trust_verifier import PROFESSIONAL_STATUS_RANK, verify_company_domain, verify_professional_linkedin
from utils.timeutil import Clock, to_iso, utc_now


logger = logging.getLogger(__name__)

ENTITY_TYPES = ("professional", "company")
APPROVABLE_COMPANY_STATUSES = (CompanyVerificationStatus.VERIFIED, CompanyVerificationStatus.PREMIUM)


def _statuses_below(target: ProfessionalVerificationStatus) -> list[str]:
    rank = PROFESSIONAL_STATUS_RANK[target]
    return [s.value for s, r in PROFESSIONAL_STATUS_RANK.items() if r < rank]


def _statuses_at_or_above(target: ProfessionalVerificationStatus) -> list[str]:
    rank = PROFESSIONAL_STATUS_RANK[target]
    return [s.value for s, r in PROFESSIONAL_STATUS_RANK.items() if r >= rank]


class VerificationService:
    """Runs the trust checks and records their verdicts with actor and date."""

    def __init__(
        self,
        conn: sqlite3.Connection,
        probe: Optional[ReachabilityProbePort] = None,
        clock: Clock = utc_now,
        public_suffix: Optional[bool] = None,
    ) -> None:
        settings = get_settings()
        self.conn = conn
        self.probe = probe if probe is not None else RetryingProbe(HttpReachabilityProbe())
        self.clock = clock
        self.public_suffix = settings.public_suffix_matching if public_suffix is None else public_suffix
        self.companies = CompaniesRepo(conn)
        self.professionals = ProfessionalsRepo(conn)
        self.hr_partners = HrPartnersRepo(conn)
        self.activity = ActivityRepo(conn)

    # --- professionals ---
    def verify_professional(
        self,
        professional_id: int,
        reviewer_id: str,
        notes: Optional[str] = None,
        strict: bool = False,
    ) -> Dict[str, Any]:
        """LinkedIn check for one professional.

        A reachable profile lifts UNVERIFIED to BASIC; higher levels keep
        their status and only get a fresh date, verifier and note. An unreachable profile leaves the status unchanged and is
        reported as a MANUAL_REVIEW verdict (or raised, when strict).
        """
        professional = self.professionals.get(professional_id)
        if professional is None or professional.is_deleted:
            raise NotFound(f"professional {professional_id} not found", professional_id=professional_id)

        check = verify_professional_linkedin(professional.linkedin_url, self.probe)
        if check.code == InvalidFormat.code:
            raise InvalidFormat(
                f"not a LinkedIn profile URL: {professional.linkedin_url!r}",
                professional_id=professional_id,
            )

        at_iso = to_iso(self.clock())
        current = professional.verification_status
        entity = f"professional:{professional_id}"
        if not check.ok:
            reason = f"LinkedIn profile unreachable: {check.url}"
            self.activity.record(
                reviewer_id,
                "professional_verification_manual_review",
                "professional",
                professional_id,
                description=reason,
                at_iso=at_iso,
            )
            logger.warning(reason, extra={"step": "verify_professional", "status": "manual_review", "entity": entity})
            if strict:
                raise ManualReviewRequired(reason, professional_id=professional_id)
            return {"status": current.value, "verdict": DomainVerdictStatus.MANUAL_REVIEW.value, "reason": reason}

        canonical = normalize_linkedin_profile_url(check.url) or check.url
        note = notes or f"LinkedIn profile reachable: {canonical}"
        with immediate_transaction(self.conn):
            upgraded = self.professionals.upgrade_verification(
                professional_id,
                ProfessionalVerificationStatus.BASIC.value,
                _statuses_below(ProfessionalVerificationStatus.BASIC),
                note,
                reviewer_id,
                at_iso,
            )
            if not upgraded:
                self.professionals.refresh_verification(
                    professional_id,
                    _statuses_at_or_above(ProfessionalVerificationStatus.BASIC),
                    note,
                    reviewer_id,
                    at_iso,
                )
            self.activity.record(
                reviewer_id,
                "professional_verified" if upgraded else "professional_verification_confirmed",
                "professional",
                professional_id,
                description=note,
                at_iso=at_iso,
            )
        status = ProfessionalVerificationStatus.BASIC if upgraded else current
        logger.info(
            f"Professional {professional_id} verification: {status.value}",
            extra={"step": "verify_professional", "status": "upgraded" if upgraded else "unchanged", "entity": entity},
        )
        return {"status": status.value, "verdict": DomainVerdictStatus.VERIFIED.value, "reason": note}

    # --- companies ---
    def verify_company(self, company_id: int, actor_id: str = "system") -> Dict[str, Any]:
        company = self.companies.get(company_id)
        if company is None:
            raise NotFound(f"company {company_id} not found", company_id=company_id)
        admin = self.hr_partners.authoritative_admin(company_id)
        verdict = verify_company_domain(
            company.company_website,
            admin.email if admin else None,
            public_suffix=self.public_suffix,
        )

        at_iso = to_iso(self.clock())
        company_status = company.verification_status
        with immediate_transaction(self.conn):
            if verdict.status is DomainVerdictStatus.MANUAL_REVIEW:
                self.companies.record_verification_note(company_id, verdict.reason, actor_id, at_iso)
            elif self.companies.set_verification(
                company_id,
                verdict.status.value,
                verdict.reason,
                actor_id,
                at_iso,
                unless_status=CompanyVerificationStatus.PREMIUM.value,
            ):
                company_status = CompanyVerificationStatus(verdict.status.value)
            self.activity.record(
                actor_id,
                "company_domain_verification",
                "company",
                company_id,
                description=verdict.reason,
                metadata={
                    "verdict": verdict.status.value,
                    "website_domain": verdict.website_domain,
                    "email_domain": verdict.email_domain,
                },
                at_iso=at_iso,
            )
        logger.info(
            f"Company {company_id} domain verdict: {verdict.status.value} ({verdict.reason})",
            extra={"step": "verify_company", "status": verdict.status.value, "entity": f"company:{company_id}"},
        )
        return {"status": verdict.status.value, "reason": verdict.reason, "company_status": company_status.value}

    # --- admin review ---
    def approve(
        self,
        entity_type: str,
        entity_id: int,
        reviewer_id: str,
        status: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Manual approval; a professional is never moved below their current level."""
        at_iso = to_iso(self.clock())
        if entity_type == "professional":
            try:
                target = ProfessionalVerificationStatus((status or "BASIC").upper())
            except ValueError:
                raise InvalidInput(f"unknown professional verification status {status!r}")
            if target is ProfessionalVerificationStatus.UNVERIFIED:
                raise InvalidInput("approval cannot set UNVERIFIED; use reject")
            note = notes or "approved by admin review"
            with immediate_transaction(self.conn):
                upgraded = self.professionals.upgrade_verification(
                    entity_id, target.value, _statuses_below(target), note, reviewer_id, at_iso
                )
                if upgraded:
                    self.activity.record(reviewer_id, "verification_approved", "professional", entity_id, description=note, at_iso=at_iso)
            professional = self.professionals.get(entity_id)
            if professional is None or professional.is_deleted:
                raise NotFound(f"professional {entity_id} not found", professional_id=entity_id)
            return {"status": professional.verification_status.value, "changed": upgraded}

        if entity_type == "company":
            try:
                target_company = CompanyVerificationStatus((status or "VERIFIED").upper())
            except ValueError:
                raise InvalidInput(f"unknown company verification status {status!r}")
            if target_company not in APPROVABLE_COMPANY_STATUSES:
                raise InvalidInput("company approval must set VERIFIED or PREMIUM")
            note = notes or "approved by admin review"
            with immediate_transaction(self.conn):
                if not self.companies.set_verification(entity_id, target_company.value, note, reviewer_id, at_iso):
                    raise NotFound(f"company {entity_id} not found", company_id=entity_id)
                self.activity.record(reviewer_id, "verification_approved", "company", entity_id, description=note, at_iso=at_iso)
            return {"status": target_company.value, "changed": True}

        raise InvalidInput(f"entity_type must be one of {', '.join(ENTITY_TYPES)}")

    def reject(self, entity_type: str, entity_id: int, reviewer_id: str, reason: str) -> Dict[str, Any]:
        if not (reason or "").strip():
            raise InvalidInput("rejection reason is required")
        at_iso = to_iso(self.clock())
        with immediate_transaction(self.conn):
            if entity_type == "professional":
                found = self.professionals.reset_verification(entity_id, reason, reviewer_id, at_iso)
                status = ProfessionalVerificationStatus.UNVERIFIED.value
            elif entity_type == "company":
                found = self.companies.set_verification(
                    entity_id, CompanyVerificationStatus.UNVERIFIED.value, reason, reviewer_id, at_iso
                )
                status = CompanyVerificationStatus.UNVERIFIED.value
            else:
                raise InvalidInput(f"entity_type must be one of {', '.join(ENTITY_TYPES)}")
            if not found:
                raise NotFound(f"{entity_type} {entity_id} not found")
            self.activity.record(reviewer_id, "verification_rejected", entity_type, entity_id, description=reason, at_iso=at_iso)
        logger.info(
            f"Rejected {entity_type} {entity_id}",
            extra={"step": "reject", "status": "ok", "entity": f"{entity_type}:{entity_id}"},
        )
        return {"status": status}

    def verification_queue(self, threshold: Optional[int] = None) -> Dict[str, Any]:
        """Backlog of items awaiting review, with a notify flag past the threshold."""
        threshold = get_settings().verification_queue_threshold if threshold is None else threshold
        professionals = self.professionals.count_unverified()
        companies = self.companies.count_by_verification_status(CompanyVerificationStatus.PENDING.value)
        total = professionals + companies
        return {
            "unverified_professionals": professionals,
            "pending_companies": companies,
            "total": total,
            "threshold": threshold,
            "should_notify": total >= threshold,
        }
