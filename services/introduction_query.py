from __future__ import annotations

import math
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from db.repos.introductions_repo import IntroductionsRepo
from models.enums import IntroductionStatus
from models.introduction_request import IntroductionRequest
from services.errors import InvalidInput
from utils.timeutil import Clock, to_iso, utc_now


SORTS = ("newest", "oldest", "match", "expiring")
FILTERS = ("all",) + tuple(s.value.lower() for s in IntroductionStatus)
MAX_PAGE_SIZE = 100


@dataclass
class IntroductionPage:
    items: List[IntroductionRequest] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10
    as_of: Optional[datetime] = None

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def pagination(self) -> Dict[str, Any]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
            "hasNext": self.has_next,
            "hasPrev": self.has_prev,
        }


def _normalize_filter(status_filter: Optional[str]) -> Optional[str]:
    value = (status_filter or "all").strip().lower()
    if value not in FILTERS:
        raise InvalidInput(f"unknown status filter {status_filter!r}; expected one of {', '.join(FILTERS)}")
    return None if value == "all" else value.upper()


def _start_of_month(moment: datetime) -> datetime:
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def _start_of_previous_month(moment: datetime) -> datetime:
    first = _start_of_month(moment)
    if first.month == 1:
        return first.replace(year=first.year - 1, month=12)
    return first.replace(month=first.month - 1)


class IntroductionQuery:
    """Read side: every status it reports is the effective status at query time."""

    def __init__(self, conn: sqlite3.Connection, clock: Clock = utc_now) -> None:
        self.conn = conn
        self.clock = clock
        self.introductions = IntroductionsRepo(conn)

    def get(self, request_id: int) -> Optional[IntroductionRequest]:
        return self.introductions.get(request_id)

    def list_received(
        self,
        professional_id: int,
        status_filter: Optional[str] = "all",
        sort: str = "newest",
        page: int = 1,
        limit: int = 10,
        query: Optional[str] = None,
    ) -> IntroductionPage:
        return self._list(status_filter, sort, page, limit, query, professional_id=professional_id)

    def list_sent(
        self,
        company_id: int,
        status_filter: Optional[str] = "all",
        sort: str = "newest",
        page: int = 1,
        limit: int = 10,
        query: Optional[str] = None,
    ) -> IntroductionPage:
        return self._list(status_filter, sort, page, limit, query, company_id=company_id)

    def _list(
        self,
        status_filter: Optional[str],
        sort: str,
        page: int,
        limit: int,
        query: Optional[str],
        professional_id: Optional[int] = None,
        company_id: Optional[int] = None,
    ) -> IntroductionPage:
        if sort not in SORTS:
            raise InvalidInput(f"unknown sort {sort!r}; expected one of {', '.join(SORTS)}")
        if page < 1:
            raise InvalidInput("page must be at least 1")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise InvalidInput(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        now = self.clock()
        items, total = self.introductions.search(
            to_iso(now),
            professional_id=professional_id,
            company_id=company_id,
            effective_status=_normalize_filter(status_filter),
            query=query,
            sort=sort,
            limit=limit,
            offset=(page - 1) * limit,
        )
        return IntroductionPage(items=items, total=total, page=page, limit=limit, as_of=now)

    def status_counts(self, professional_id: Optional[int] = None, company_id: Optional[int] = None) -> Dict[str, int]:
        return self.introductions.count_by_effective_status(
            to_iso(self.clock()),
            professional_id=professional_id,
            company_id=company_id,
        )

    def company_stats(self, company_id: int) -> Dict[str, Any]:
        """Dashboard figures for one company's sent requests."""
        now = self.clock()
        requests = self.introductions.select_for_company(company_id)
        counts = {s.value: 0 for s in IntroductionStatus}
        response_hours: List[float] = []
        this_month_start = _start_of_month(now)
        last_month_start = _start_of_previous_month(now)
        this_month = last_month = 0
        for r in requests:
            counts[r.effective_status(now).value] += 1
            if r.status in (IntroductionStatus.ACCEPTED, IntroductionStatus.DECLINED) and r.responded_at:
                response_hours.append((r.responded_at - r.sent_at).total_seconds() / 3600)
            if r.sent_at >= this_month_start:
                this_month += 1
            elif r.sent_at >= last_month_start:
                last_month += 1

        responded = counts["ACCEPTED"] + counts["DECLINED"]
        acceptance_rate = (counts["ACCEPTED"] / responded * 100) if responded else 0.0
        average_response = (sum(response_hours) / len(response_hours)) if response_hours else 0.0
        if this_month > last_month:
            trend = "up"
        elif this_month < last_month:
            trend = "down"
        else:
            trend = "stable"
        return {
            "totalSent": len(requests),
            "pending": counts["PENDING"],
            "accepted": counts["ACCEPTED"],
            "declined": counts["DECLINED"],
            "expired": counts["EXPIRED"],
            "acceptanceRate": round(acceptance_rate, 1),
            "averageResponseTime": round(average_response, 1),
            "thisMonth": this_month,
            "lastMonth": last_month,
            "trend": trend,
        }
