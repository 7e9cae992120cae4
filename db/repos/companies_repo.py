from __future__ import annotations

import sqlite3
from typing import List, Optional, Tuple

from models.company_record import CompanyRecord


class CompaniesRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def create_company(
        self,
        company_name: str,
        company_website: Optional[str] = None,
        industry: Optional[str] = None,
        introduction_credits: int = 0,
        verification_status: str = "PENDING",
    ) -> int:
        """Insert a company row; returns the company id."""
        sql = (
            "INSERT INTO companies (company_name, company_website, industry, introduction_credits, verification_status) "
            "VALUES (?, ?, ?, ?, ?) RETURNING id;"
        )
        cur = self.conn.cursor()
        cur.execute(sql, (company_name, company_website, industry, introduction_credits, verification_status))
        row = cur.fetchone()
        return int(row[0])

    def get(self, company_id: int) -> Optional[CompanyRecord]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM companies WHERE id = ?", (company_id,))
        row = cur.fetchone()
        return CompanyRecord.model_validate(dict(row)) if row else None

    def credits(self, company_id: int) -> Optional[int]:
        cur = self.conn.cursor()
        cur.execute("SELECT introduction_credits FROM companies WHERE id = ?", (company_id,))
        row = cur.fetchone()
        return int(row[0]) if row else None

    def debit_credit(self, company_id: int) -> bool:
        """Take one introduction credit if any remain.

        The WHERE guard makes this a compare-and-swap: of two concurrent
        debits against a balance of 1, exactly one affects a row.
        """
        cur = self.conn.execute(
            "UPDATE companies SET introduction_credits = introduction_credits - 1 "
            "WHERE id = ? AND introduction_credits > 0;",
            (company_id,),
        )
        return cur.rowcount == 1

    def set_verification(
        self,
        company_id: int,
        status: str,
        notes: Optional[str],
        verified_by: str,
        at_iso: str,
        unless_status: Optional[str] = None,
    ) -> bool:
        """Write a verification verdict; skipped when the row holds unless_status."""
        sql = (
            "UPDATE companies SET verification_status = ?, verification_notes = ?, verified_by = ?, verification_date = ? "
            "WHERE id = ?"
        )
        params: List[object] = [status, notes, verified_by, at_iso, company_id]
        if unless_status:
            sql += " AND verification_status <> ?"
            params.append(unless_status)
        cur = self.conn.execute(sql + ";", tuple(params))
        return cur.rowcount == 1

    def record_verification_note(self, company_id: int, notes: str, verified_by: str, at_iso: str) -> None:
        """Record a review note without touching the status (manual review outcomes)."""
        self.conn.execute(
            "UPDATE companies SET verification_notes = ?, verified_by = ?, verification_date = ? WHERE id = ?;",
            (notes, verified_by, at_iso, company_id),
        )

    def select_pending_verification(self, limit: int = 50) -> List[Tuple[int, str]]:
        """Return (id, company_name) tuples for companies never checked yet.

        PENDING rows with a recorded verdict are waiting on a human reviewer
        and are left to the admin approve/reject path.
        """
        sql = (
            "SELECT id, company_name FROM companies "
            "WHERE verification_status = 'PENDING' AND verification_date IS NULL "
            "ORDER BY id LIMIT ?;"
        )
        cur = self.conn.cursor()
        cur.execute(sql, (limit,))
        return [(int(r[0]), r[1]) for r in cur.fetchall()]

    def count_by_verification_status(self, status: str) -> int:
        cur = self.conn.cursor()
        cur.execute("SELECT COUNT(*) FROM companies WHERE verification_status = ?", (status,))
        return int(cur.fetchone()[0])
