from __future__ import annotations

import sqlite3
from typing import Optional

from models.hr_partner_record import HrPartnerRecord


class HrPartnersRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def create_hr_partner(self, company_id: int, email: str, full_name: Optional[str] = None, role_in_platform: str = "MEMBER") -> int:
        sql = (
            "INSERT INTO hr_partners (company_id, email, full_name, role_in_platform) "
            "VALUES (?, ?, ?, ?) RETURNING id;"
        )
        cur = self.conn.cursor()
        cur.execute(sql, (company_id, email, full_name, role_in_platform))
        row = cur.fetchone()
        return int(row[0])

    def get(self, hr_partner_id: int) -> Optional[HrPartnerRecord]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM hr_partners WHERE id = ?", (hr_partner_id,))
        row = cur.fetchone()
        return HrPartnerRecord.model_validate(dict(row)) if row else None

    def authoritative_admin(self, company_id: int) -> Optional[HrPartnerRecord]:
        """The company's first ADMIN partner, whose email is used for domain checks."""
        cur = self.conn.cursor()
        cur.execute(
            "SELECT * FROM hr_partners WHERE company_id = ? AND role_in_platform = 'ADMIN' ORDER BY id LIMIT 1",
            (company_id,),
        )
        row = cur.fetchone()
        return HrPartnerRecord.model_validate(dict(row)) if row else None
