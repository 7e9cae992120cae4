from __future__ import annotations

import sqlite3
from typing import Optional


class JobRolesRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def create_job_role(self, company_id: int, role_title: str, location_city: Optional[str] = None, status: str = "ACTIVE") -> int:
        cur = self.conn.cursor()
        cur.execute(
            "INSERT INTO job_roles (company_id, role_title, location_city, status) VALUES (?, ?, ?, ?) RETURNING id;",
            (company_id, role_title, location_city, status),
        )
        row = cur.fetchone()
        return int(row[0])

    def is_active_for_company(self, job_role_id: int, company_id: int) -> bool:
        cur = self.conn.cursor()
        cur.execute(
            "SELECT 1 FROM job_roles WHERE id = ? AND company_id = ? AND status = 'ACTIVE'",
            (job_role_id, company_id),
        )
        return cur.fetchone() is not None
