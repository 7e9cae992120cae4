from __future__ import annotations

import json
import sqlite3
from typing import Iterable, Optional

from models.professional_record import ProfessionalRecord


class ProfessionalsRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def create_professional(
        self,
        first_name: Optional[str],
        last_name: Optional[str],
        linkedin_url: Optional[str] = None,
        open_to_opportunities: bool = True,
        hidden_from_company_ids: Optional[Iterable[int]] = None,
        verification_status: str = "UNVERIFIED",
    ) -> int:
        """Insert a professional row; returns the professional id."""
        sql = (
            "INSERT INTO professionals (first_name, last_name, linkedin_url, open_to_opportunities, hidden_from_company_ids_json, verification_status) "
            "VALUES (?, ?, ?, ?, ?, ?) RETURNING id;"
        )
        cur = self.conn.cursor()
        cur.execute(sql, (
            first_name,
            last_name,
            linkedin_url,
            1 if open_to_opportunities else 0,
            json.dumps(sorted(int(x) for x in (hidden_from_company_ids or []))),
            verification_status,
        ))
        row = cur.fetchone()
        return int(row[0])

    def get(self, professional_id: int) -> Optional[ProfessionalRecord]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM professionals WHERE id = ?", (professional_id,))
        row = cur.fetchone()
        if not row:
            return None
        data = dict(row)
        data["hidden_from_company_ids"] = data.pop("hidden_from_company_ids_json", "[]")
        return ProfessionalRecord.model_validate(data)

    def upgrade_verification(
        self,
        professional_id: int,
        status: str,
        from_statuses: Iterable[str],
        notes: Optional[str],
        verified_by: str,
        at_iso: str,
    ) -> bool:
        """Move verification_status to `status` only from one of `from_statuses`.

        The status guard keeps concurrent reviews from lowering a level
        another reviewer already granted.
        """
        allowed = list(from_statuses)
        if not allowed:
            return False
        placeholders = ", ".join("?" for _ in allowed)
        sql = (
            "UPDATE professionals SET verification_status = ?, verification_notes = ?, verified_by = ?, verification_date = ? "
            f"WHERE id = ? AND deleted_at IS NULL AND verification_status IN ({placeholders});"
        )
        cur = self.conn.execute(sql, (status, notes, verified_by, at_iso, professional_id, *allowed))
        return cur.rowcount == 1

    def refresh_verification(
        self,
        professional_id: int,
        min_statuses: Iterable[str],
        notes: Optional[str],
        verified_by: str,
        at_iso: str,
    ) -> bool:
        """Re-stamp date, verifier and notes on a row already at one of `min_statuses`."""
        allowed = list(min_statuses)
        if not allowed:
            return False
        placeholders = ", ".join("?" for _ in allowed)
        sql = (
            "UPDATE professionals SET verification_notes = ?, verified_by = ?, verification_date = ? "
            f"WHERE id = ? AND deleted_at IS NULL AND verification_status IN ({placeholders});"
        )
        cur = self.conn.execute(sql, (notes, verified_by, at_iso, professional_id, *allowed))
        return cur.rowcount == 1

    def reset_verification(self, professional_id: int, notes: Optional[str], verified_by: str, at_iso: str) -> bool:
        """Admin rejection: back to UNVERIFIED."""
        cur = self.conn.execute(
            "UPDATE professionals SET verification_status = 'UNVERIFIED', verification_notes = ?, verified_by = ?, verification_date = ? "
            "WHERE id = ? AND deleted_at IS NULL;",
            (notes, verified_by, at_iso, professional_id),
        )
        return cur.rowcount == 1

    def soft_delete(self, professional_id: int, at_iso: str) -> None:
        self.conn.execute(
            "UPDATE professionals SET deleted_at = COALESCE(deleted_at, ?) WHERE id = ?;",
            (at_iso, professional_id),
        )

    def count_unverified(self) -> int:
        cur = self.conn.cursor()
        cur.execute("SELECT COUNT(*) FROM professionals WHERE verification_status = 'UNVERIFIED' AND deleted_at IS NULL")
        return int(cur.fetchone()[0])
