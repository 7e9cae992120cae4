from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional, Tuple

from models.introduction_request import EFFECTIVE_STATUS_SQL, IntroductionRequest


_ORDER_BY = {
    "newest": "sent_at DESC, id DESC",
    "oldest": "sent_at ASC, id ASC",
    "match": "match_score DESC NULLS LAST, sent_at DESC, id DESC",
    "expiring": "expires_at ASC, id ASC",
}

_SEARCH_COLUMNS = ("role_title", "company_name", "industry", "location_city")


def _like_pattern(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class IntroductionsRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

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
        sql = (
            "INSERT INTO introduction_requests (company_id, professional_id, sent_by_id, job_role_id, personalized_message, match_score, status, sent_at, expires_at) "
            "VALUES (?, ?, ?, ?, ?, ?, 'PENDING', ?, ?) RETURNING id;"
        )
        cur = self.conn.cursor()
        cur.execute(sql, (
            company_id, professional_id, sent_by_id, job_role_id, personalized_message, match_score, sent_at_iso, expires_at_iso
        ))
        row = cur.fetchone()
        return int(row[0])

    def get(self, request_id: int) -> Optional[IntroductionRequest]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM v_introductions WHERE id = ?", (request_id,))
        row = cur.fetchone()
        return IntroductionRequest.from_row(row) if row else None

    # --- Counts used by admission control (effective status, never raw) ---
    def count_effective_pending_for_professional(self, professional_id: int, now_iso: str) -> int:
        sql = (
            "SELECT COUNT(*) FROM introduction_requests "
            f"WHERE professional_id = ? AND {EFFECTIVE_STATUS_SQL} = 'PENDING';"
        )
        cur = self.conn.cursor()
        cur.execute(sql, (professional_id, now_iso))
        return int(cur.fetchone()[0])

    def has_effective_pending(self, company_id: int, professional_id: int, now_iso: str) -> bool:
        sql = (
            "SELECT 1 FROM introduction_requests "
            f"WHERE company_id = ? AND professional_id = ? AND {EFFECTIVE_STATUS_SQL} = 'PENDING' LIMIT 1;"
        )
        cur = self.conn.cursor()
        cur.execute(sql, (company_id, professional_id, now_iso))
        return cur.fetchone() is not None

    # --- State-gated writes ---
    def respond(
        self,
        request_id: int,
        professional_id: int,
        to_status: str,
        response_message: Optional[str],
        now_iso: str,
    ) -> bool:
        """PENDING -> ACCEPTED/DECLINED, only while unexpired and for the recipient.

        Returns True when this call won the transition.
        """
        if to_status not in ("ACCEPTED", "DECLINED"):
            raise ValueError(f"Not a response status: {to_status}")
        sql = (
            "UPDATE introduction_requests SET status = ?, responded_at = ?, response_message = ?, "
            "  viewed_by_professional = 1, viewed_at = COALESCE(viewed_at, ?) "
            "WHERE id = ? AND professional_id = ? AND status = 'PENDING' AND expires_at > ?;"
        )
        cur = self.conn.execute(sql, (to_status, now_iso, response_message, now_iso, request_id, professional_id, now_iso))
        return cur.rowcount == 1

    def mark_viewed(self, request_id: int, professional_id: int, now_iso: str) -> bool:
        """Set the viewed flag once; returns False when already viewed or not the recipient."""
        cur = self.conn.execute(
            "UPDATE introduction_requests SET viewed_by_professional = 1, viewed_at = ? "
            "WHERE id = ? AND professional_id = ? AND viewed_by_professional = 0;",
            (now_iso, request_id, professional_id),
        )
        return cur.rowcount == 1

    def expire_stale(self, now_iso: str, batch_size: int) -> List[int]:
        """Flip up to batch_size stale PENDING rows to EXPIRED; returns the ids touched."""
        sql = (
            "UPDATE introduction_requests SET status = 'EXPIRED' "
            "WHERE id IN ("
            "  SELECT id FROM introduction_requests WHERE status = 'PENDING' AND expires_at <= ? "
            "  ORDER BY expires_at ASC, id ASC LIMIT ?"
            ") AND status = 'PENDING' "
            "RETURNING id;"
        )
        cur = self.conn.cursor()
        cur.execute(sql, (now_iso, batch_size))
        return sorted(int(r[0]) for r in cur.fetchall())

    # --- Reads ---
    def search(
        self,
        now_iso: str,
        professional_id: Optional[int] = None,
        company_id: Optional[int] = None,
        effective_status: Optional[str] = None,
        query: Optional[str] = None,
        sort: str = "newest",
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[IntroductionRequest], int]:
        """Filtered, ordered page of requests plus the total matching count."""
        if sort not in _ORDER_BY:
            raise ValueError(f"Unknown sort: {sort}")
        where: List[str] = []
        params: List[Any] = []
        if professional_id is not None:
            where.append("professional_id = ?")
            params.append(professional_id)
        if company_id is not None:
            where.append("company_id = ?")
            params.append(company_id)
        if effective_status:
            where.append(f"{EFFECTIVE_STATUS_SQL} = ?")
            params.extend([now_iso, effective_status])
        text = (query or "").strip().lower()
        if text:
            pattern = _like_pattern(text)
            where.append(
                "(" + " OR ".join(f"LOWER(COALESCE({col}, '')) LIKE ? ESCAPE '\\'" for col in _SEARCH_COLUMNS) + ")"
            )
            params.extend([pattern] * len(_SEARCH_COLUMNS))
        where_sql = (" WHERE " + " AND ".join(where)) if where else ""

        cur = self.conn.cursor()
        cur.execute(f"SELECT COUNT(*) FROM v_introductions{where_sql};", tuple(params))
        total = int(cur.fetchone()[0])
        cur.execute(
            f"SELECT * FROM v_introductions{where_sql} ORDER BY {_ORDER_BY[sort]} LIMIT ? OFFSET ?;",
            (*params, limit, offset),
        )
        return [IntroductionRequest.from_row(r) for r in cur.fetchall()], total

    def count_by_effective_status(
        self,
        now_iso: str,
        professional_id: Optional[int] = None,
        company_id: Optional[int] = None,
    ) -> Dict[str, int]:
        where: List[str] = []
        params: List[Any] = [now_iso]
        if professional_id is not None:
            where.append("professional_id = ?")
            params.append(professional_id)
        if company_id is not None:
            where.append("company_id = ?")
            params.append(company_id)
        where_sql = (" WHERE " + " AND ".join(where)) if where else ""
        cur = self.conn.cursor()
        cur.execute(
            f"SELECT {EFFECTIVE_STATUS_SQL} AS eff, COUNT(*) FROM introduction_requests{where_sql} GROUP BY eff;",
            tuple(params),
        )
        counts = {"PENDING": 0, "ACCEPTED": 0, "DECLINED": 0, "EXPIRED": 0}
        for status, n in cur.fetchall():
            counts[str(status)] = int(n)
        return counts

    def select_for_company(self, company_id: int) -> List[IntroductionRequest]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM v_introductions WHERE company_id = ? ORDER BY sent_at, id", (company_id,))
        return [IntroductionRequest.from_row(r) for r in cur.fetchall()]
