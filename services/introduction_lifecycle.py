"""
Introduction request state machine.

    PENDING -> ACCEPTED | DECLINED | EXPIRED

Every write is a single-row conditional update inside one BEGIN IMMEDIATE
transaction, so the outcome holds across processes sharing the database.
"""
from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Optional

from config.settings import get_settings
from db.connection import immediate_transaction
from db.repos.activity_repo import ActivityRepo
from db.repos.companies_repo import CompaniesRepo
from db.repos.hr_partners_repo import HrPartnersRepo
from db.repos.introductions_repo import IntroductionsRepo
from db.repos.job_roles_repo import JobRolesRepo
from db.repos.professionals_repo import ProfessionalsRepo
from models.enums import IntroductionStatus, SENDING_COMPANY_STATUSES
from models.introduction_policy import IntroductionPolicy
from ports.repos import CompaniesRepoPort, IntroductionsRepoPort
from services.capacity_guard import CapacityGuard
from services.errors import (
    AlreadyResponded,
    CompanyNotVerified,
    DuplicateActiveRequest,
    Expired,
    Forbidden,
    InsufficientCredits,
    IntroError,
    InvalidInput,
    NotFound,
    RecipientAtCapacity,
)
from utils.timeutil import Clock, to_iso, utc_now


logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 1000
MAX_RESPONSE_LENGTH = 500


class IntroductionLifecycle:
    def __init__(
        self,
        conn: sqlite3.Connection,
        policy_defaults: Optional[IntroductionPolicy] = None,
        clock: Clock = utc_now,
    ) -> None:
        self.conn = conn
        self.clock = clock
        self.guard = CapacityGuard(conn, policy_defaults=policy_defaults, clock=clock)
        self.companies: CompaniesRepoPort = CompaniesRepo(conn)
        self.professionals = ProfessionalsRepo(conn)
        self.hr_partners = HrPartnersRepo(conn)
        self.job_roles = JobRolesRepo(conn)
        self.introductions: IntroductionsRepoPort = IntroductionsRepo(conn)
        self.activity = ActivityRepo(conn)

    # --- send ---
    def send(
        self,
        company_id: int,
        professional_id: int,
        sent_by_id: int,
        message: str,
        match_score: Optional[float] = None,
        job_role_id: Optional[int] = None,
        policy: Optional[IntroductionPolicy] = None,
    ) -> int:
        """Debit one credit and create a PENDING request; returns its id."""
        now = self.clock()
        policy = policy or self.guard.current_policy()

        company = self.companies.get(company_id)
        if company is None:
            raise NotFound(f"company {company_id} not found", company_id=company_id)
        if company.verification_status not in SENDING_COMPANY_STATUSES:
            raise CompanyNotVerified(
                f"company {company_id} is {company.verification_status.value}",
                company_id=company_id,
            )
        sender = self.hr_partners.get(sent_by_id)
        if sender is None or sender.company_id != company_id:
            raise Forbidden(f"HR partner {sent_by_id} cannot send for company {company_id}")
        professional = self.professionals.get(professional_id)
        if professional is None or professional.is_deleted:
            raise NotFound(f"professional {professional_id} not found", professional_id=professional_id)

        text = (message or "").strip()
        if not text or len(text) > MAX_MESSAGE_LENGTH:
            raise InvalidInput(f"message must be 1-{MAX_MESSAGE_LENGTH} characters")
        if job_role_id is not None and not self.job_roles.is_active_for_company(job_role_id, company_id):
            raise InvalidInput(f"job role {job_role_id} is not an active role of company {company_id}")

        self.guard.can_send(company_id, professional_id, policy=policy, now=now).raise_for_denial()

        now_iso = to_iso(now)
        expires_iso = to_iso(now + policy.expiry)
        entity = f"company:{company_id}->professional:{professional_id}"
        with immediate_transaction(self.conn):
            if not self.companies.debit_credit(company_id):
                raise InsufficientCredits(company_id=company_id)
            # Re-derived under the write lock; the advisory check may be stale
            pending = self.introductions.count_effective_pending_for_professional(professional_id, now_iso)
            if pending >= policy.max_pending_per_professional:
                raise RecipientAtCapacity(
                    professional_id=professional_id,
                    pending=pending,
                    limit=policy.max_pending_per_professional,
                )
            if self.introductions.has_effective_pending(company_id, professional_id, now_iso):
                raise DuplicateActiveRequest(company_id=company_id, professional_id=professional_id)
            request_id = self.introductions.insert_request(
                company_id,
                professional_id,
                sent_by_id,
                text,
                now_iso,
                expires_iso,
                match_score=match_score,
                job_role_id=job_role_id,
            )
            self.activity.record(
                sent_by_id,
                "introduction_sent",
                "introduction_request",
                request_id,
                description=f"Introduction sent to professional {professional_id}",
                metadata={"company_id": company_id, "professional_id": professional_id, "expires_at": expires_iso},
                at_iso=now_iso,
            )
        logger.info(
            f"Introduction {request_id} sent",
            extra={"step": "send", "status": "ok", "entity": entity},
        )
        return request_id

    # --- recipient actions ---
    def mark_viewed(self, request_id: int, professional_id: int) -> bool:
        """Set the viewed flag; True only on the call that set it."""
        request = self.introductions.get(request_id)
        if request is None:
            raise NotFound(f"introduction request {request_id} not found", request_id=request_id)
        if request.professional_id != professional_id:
            raise Forbidden(f"request {request_id} is not addressed to professional {professional_id}")
        return self.introductions.mark_viewed(request_id, professional_id, to_iso(self.clock()))

    def accept(self, request_id: int, professional_id: int, response_message: Optional[str] = None) -> None:
        self._respond(request_id, professional_id, IntroductionStatus.ACCEPTED, response_message)

    def decline(self, request_id: int, professional_id: int, response_message: Optional[str] = None) -> None:
        self._respond(request_id, professional_id, IntroductionStatus.DECLINED, response_message)

    def _respond(
        self,
        request_id: int,
        professional_id: int,
        to_status: IntroductionStatus,
        response_message: Optional[str],
    ) -> None:
        if response_message is not None and len(response_message) > MAX_RESPONSE_LENGTH:
            raise InvalidInput(f"response message must be at most {MAX_RESPONSE_LENGTH} characters")
        now = self.clock()
        now_iso = to_iso(now)
        with immediate_transaction(self.conn):
            won = self.introductions.respond(request_id, professional_id, to_status.value, response_message, now_iso)
            if not won:
                raise self._classify_failed_response(request_id, professional_id, now)
            self.activity.record(
                professional_id,
                f"introduction_{to_status.value.lower()}",
                "introduction_request",
                request_id,
                at_iso=now_iso,
            )
        logger.info(
            f"Introduction {request_id} {to_status.value.lower()}",
            extra={"step": "respond", "status": to_status.value, "entity": f"request:{request_id}"},
        )

    def _classify_failed_response(self, request_id: int, professional_id: int, now: datetime) -> IntroError:
        request = self.introductions.get(request_id)
        if request is None:
            return NotFound(f"introduction request {request_id} not found", request_id=request_id)
        if request.professional_id != professional_id:
            return Forbidden(f"request {request_id} is not addressed to professional {professional_id}")
        effective = request.effective_status(now)
        if effective is IntroductionStatus.EXPIRED:
            return Expired(f"request {request_id} expired at {to_iso(request.expires_at)}", request_id=request_id)
        return AlreadyResponded(f"request {request_id} is already {effective.value}", request_id=request_id)

    # --- scheduled ---
    def reconcile_expired(self, batch_size: Optional[int] = None) -> int:
        """Flip up to batch_size stale PENDING rows to EXPIRED; returns the count."""
        batch_size = batch_size if batch_size is not None else get_settings().reconcile_batch_size
        if batch_size < 1:
            raise InvalidInput("batch_size must be at least 1")
        now_iso = to_iso(self.clock())
        with immediate_transaction(self.conn):
            ids = self.introductions.expire_stale(now_iso, batch_size)
            if ids:
                self.activity.record(
                    "system",
                    "introductions_expired",
                    "introduction_request",
                    None,
                    description=f"Expired {len(ids)} stale requests",
                    metadata={"request_ids": ids},
                    at_iso=now_iso,
                )
        logger.info(
            f"Reconciled {len(ids)} expired requests",
            extra={"step": "reconcile_expired", "status": "ok"},
        )
        return len(ids)
