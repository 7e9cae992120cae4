from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from config.settings import get_settings
from db.repos.companies_repo import CompaniesRepo
from db.repos.introductions_repo import IntroductionsRepo
from db.repos.professionals_repo import ProfessionalsRepo
from db.repos.settings_repo import SettingsRepo
from models.introduction_policy import IntroductionPolicy
from ports.repos import CompaniesRepoPort, IntroductionsRepoPort
from services.errors import ADMISSION_ERRORS, NotFound
from utils.timeutil import Clock, to_iso, utc_now


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Admission:
    allowed: bool
    reason: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def raise_for_denial(self) -> None:
        if self.allowed:
            return
        raise ADMISSION_ERRORS[self.reason](**self.details)


ADMIT = Admission(allowed=True)


class CapacityGuard:
    """Read-only admission check ahead of a send.

    The verdict is advisory: the send transaction re-derives credits and
    pending counts before it writes anything.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        policy_defaults: Optional[IntroductionPolicy] = None,
        clock: Clock = utc_now,
    ) -> None:
        self.conn = conn
        self.policy_defaults = policy_defaults or IntroductionPolicy.from_settings(get_settings())
        self.clock = clock
        self.companies: CompaniesRepoPort = CompaniesRepo(conn)
        self.professionals = ProfessionalsRepo(conn)
        self.introductions: IntroductionsRepoPort = IntroductionsRepo(conn)
        self.settings = SettingsRepo(conn)

    def current_policy(self) -> IntroductionPolicy:
        return self.settings.load_policy(self.policy_defaults)

    def can_send(
        self,
        company_id: int,
        professional_id: int,
        policy: Optional[IntroductionPolicy] = None,
        now: Optional[datetime] = None,
    ) -> Admission:
        policy = policy or self.current_policy()
        now_iso = to_iso(now or self.clock())

        company = self.companies.get(company_id)
        if company is None:
            raise NotFound(f"company {company_id} not found", company_id=company_id)
        professional = self.professionals.get(professional_id)
        if professional is None or professional.is_deleted:
            raise NotFound(f"professional {professional_id} not found", professional_id=professional_id)

        admission = ADMIT
        if company.introduction_credits <= 0:
            admission = Admission(False, "InsufficientCredits", {"company_id": company_id, "credits": company.introduction_credits})
        else:
            pending = self.introductions.count_effective_pending_for_professional(professional_id, now_iso)
            if pending >= policy.max_pending_per_professional:
                admission = Admission(False, "RecipientAtCapacity", {
                    "professional_id": professional_id,
                    "pending": pending,
                    "limit": policy.max_pending_per_professional,
                })
            elif self.introductions.has_effective_pending(company_id, professional_id, now_iso):
                admission = Admission(False, "DuplicateActiveRequest", {"company_id": company_id, "professional_id": professional_id})
            elif not professional.open_to_opportunities:
                admission = Admission(False, "RecipientUnavailable", {"professional_id": professional_id})
            elif company_id in professional.hidden_from_company_ids:
                admission = Admission(False, "CompanyBlocked", {"company_id": company_id, "professional_id": professional_id})

        if not admission.allowed:
            logger.info(
                f"Admission denied: {admission.reason}",
                extra={"step": "can_send", "status": "denied", "entity": f"company:{company_id}->professional:{professional_id}"},
            )
        return admission
