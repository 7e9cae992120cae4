from __future__ import annotations

from typing import Dict, List, Optional, Protocol, Tuple

from models.company_record import CompanyRecord
from models.introduction_request import IntroductionRequest


class CompaniesRepoPort(Protocol):
    def get(self, company_id: int) -> Optional[CompanyRecord]:
        ...

    def debit_credit(self, company_id: int) -> bool:
        ...

    def set_verification(
        self,
        company_id: int,
        status: str,
        notes: Optional[str],
        verified_by: str,
        at_iso: str,
        unless_status: Optional[str] = None,
    ) -> bool:
        ...

    def select_pending_verification(self, limit: int = 50) -> List[Tuple[int, str]]:
        ...


class IntroductionsRepoPort(Protocol):
    def insert_request(
        self,
        company_id: int,
        professional_id: int,
        sent_by_id: int,
        personalized_message: str,
        sent_at_iso: str,
        expires_at_iso: str,
        match_score: Optional[float] = None,
        job_role_id: Optional[int] = None,
    ) -> int:
        ...

    def get(self, request_id: int) -> Optional[IntroductionRequest]:
        ...

    def count_effective_pending_for_professional(self, professional_id: int, now_iso: str) -> int:
        ...

    def has_effective_pending(self, company_id: int, professional_id: int, now_iso: str) -> bool:
        ...

    def respond(
        self,
        request_id: int,
        professional_id: int,
        to_status: str,
        response_message: Optional[str],
        now_iso: str,
    ) -> bool:
        ...

    def mark_viewed(self, request_id: int, professional_id: int, now_iso: str) -> bool:
        ...

    def expire_stale(self, now_iso: str, batch_size: int) -> List[int]:
        ...

    def count_by_effective_status(
        self,
        now_iso: str,
        professional_id: Optional[int] = None,
        company_id: Optional[int] = None,
    ) -> Dict[str, int]:
        ...
