from __future__ import annotations

import logging
import sqlite3
from typing import Any, Callable, Dict, List, Optional

from db.repos.companies_repo import CompaniesRepo
from pipelines.runner import RunContext
from services.verification_service import VerificationService


logger = logging.getLogger(__name__)


class LoadPendingCompanies:
    def __init__(self, conn: sqlite3.Connection, limit: int = 50) -> None:
        self.conn = conn
        self.limit = limit

    def run(self, ctx: RunContext) -> RunContext:
        repo = CompaniesRepo(self.conn)
        rows = repo.select_pending_verification(limit=self.limit)
        companies: List[Dict[str, Any]] = []
        for (company_id, name) in rows:
            companies.append({"id": company_id, "name": name})
        ctx.companies = companies
        ctx.meta["pending_companies_total"] = len(companies)
        return ctx


class VerifyAndPersistCompanies:
    def __init__(
        self,
        conn: sqlite3.Connection,
        actor_id: str = "system",
        on_progress: Optional[Callable[[int, int, int, str], None]] = None,
        service: Optional[VerificationService] = None,
    ) -> None:
        self.conn = conn
        self.actor_id = actor_id
        self.on_progress = on_progress
        self.service = service or VerificationService(conn)

    def run(self, ctx: RunContext) -> RunContext:
        companies = ctx.companies or []
        total = len(companies)
        tallies: Dict[str, int] = {}
        verified = 0
        for idx, comp in enumerate(companies, start=1):
            company_id = int(comp["id"])
            if self.on_progress:
                self.on_progress(idx, total, company_id, str(comp.get("name") or ""))
            result = self.service.verify_company(company_id, actor_id=self.actor_id)
            comp["verdict"] = result["status"]
            comp["reason"] = result["reason"]
            tallies[result["status"]] = tallies.get(result["status"], 0) + 1
            verified += 1

        ctx.meta["companies_verified"] = verified
        ctx.meta["verdicts"] = tallies
        logger.info(
            f"Verified {verified} companies",
            extra={"step": "verify_companies", "status": "ok"},
        )
        return ctx
