from __future__ import annotations

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest


def pytest_configure():
    # Ensure project root is on sys.path for absolute imports like 'services.introduction_lifecycle'
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))
    # Set test environment knobs
    os.environ.setdefault("RUN_ENV", "test")


T0 = datetime(2026, 3, 10, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Controllable clock; call it like utc_now()."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FakeProbe:
    """Reachability oracle answering from a queue of results (last one repeats)."""

    def __init__(self, *results: bool) -> None:
        self.results = list(results) or [True]
        self.calls: list[str] = []

    def is_reachable(self, url: str) -> bool:
        self.calls.append(url)
        if len(self.results) > 1:
            return self.results.pop(0)
        return self.results[0]


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    from config.settings import get_settings

    monkeypatch.setenv("RUN_ENV", "test")
    monkeypatch.setenv("PROBE_TRACE", "false")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "intro.db")


@pytest.fixture
def conn(db_path):
    from db import schema
    from db.connection import get_connection

    c = get_connection(db_path)
    schema.bootstrap(c)
    try:
        yield c
    finally:
        c.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def seed(conn):
    """Factory helpers for companies, HR partners, professionals and job roles."""
    from db.repos.companies_repo import CompaniesRepo
    from db.repos.hr_partners_repo import HrPartnersRepo
    from db.repos.job_roles_repo import JobRolesRepo
    from db.repos.professionals_repo import ProfessionalsRepo

    class _Seed:
        def company(self, name="Acme", website="https://www.acme.com", credits=5, status="VERIFIED", industry="Software"):
            return CompaniesRepo(conn).create_company(name, website, industry, credits, status)

        def hr(self, company_id, email="jane@acme.com", role="ADMIN"):
            return HrPartnersRepo(conn).create_hr_partner(company_id, email, "Jane Doe", role)

        def professional(self, linkedin_url="https://www.linkedin.com/in/ada-lovelace", **kwargs):
            return ProfessionalsRepo(conn).create_professional("Ada", "Lovelace", linkedin_url, **kwargs)

        def job_role(self, company_id, title="Staff Engineer", city="Lagos", status="ACTIVE"):
            return JobRolesRepo(conn).create_job_role(company_id, title, city, status)

        def sender_company(self, credits=5, name="Acme", website="https://www.acme.com", email="jane@acme.com", industry="Software"):
            company_id = self.company(name=name, website=website, credits=credits, industry=industry)
            hr_id = self.hr(company_id, email=email)
            return company_id, hr_id

    return _Seed()


@pytest.fixture
def lifecycle(conn, clock):
    from services.introduction_lifecycle import IntroductionLifecycle

    return IntroductionLifecycle(conn, clock=clock)
