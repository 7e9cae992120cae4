from __future__ import annotations

import pytest

from conftest import FakeProbe
from db.repos.activity_repo import ActivityRepo
from db.repos.companies_repo import CompaniesRepo
from db.repos.professionals_repo import ProfessionalsRepo
from services.errors import InvalidFormat, InvalidInput, ManualReviewRequired, NotFound
from services.reachability import RetryingProbe
from services.verification_service import VerificationService
from utils.timeutil import to_iso


def _service(conn, clock, *results, public_suffix=False):
    inner = FakeProbe(*results)
    probe = RetryingProbe(inner, retries=1, backoff_seconds=0, sleep=lambda s: None)
    return VerificationService(conn, probe=probe, clock=clock, public_suffix=public_suffix), inner


# --- professionals ---
def test_reachable_profile_upgrades_to_basic(conn, seed, clock):
    professional_id = seed.professional()
    service, probe = _service(conn, clock, True)

    result = service.verify_professional(professional_id, "reviewer-1", notes="looks legit")

    assert result == {"status": "BASIC", "verdict": "VERIFIED", "reason": "looks legit"}
    record = ProfessionalsRepo(conn).get(professional_id)
    assert record.verification_status.value == "BASIC"
    assert record.verified_by == "reviewer-1"
    assert record.verification_notes == "looks legit"
    assert record.verification_date == clock.now
    assert len(probe.calls) == 1
    actions = [a["action_type"] for a in ActivityRepo(conn).for_entity("professional", professional_id)]
    assert actions == ["professional_verified"]


def test_verification_never_downgrades(conn, seed, clock):
    professional_id = seed.professional(verification_status="FULL")
    service, _ = _service(conn, clock, True)
    assert service.verify_professional(professional_id, "reviewer-1")["status"] == "FULL"
    assert ProfessionalsRepo(conn).get(professional_id).verification_status.value == "FULL"


def test_reverification_restamps_without_changing_status(conn, seed, clock):
    professional_id = seed.professional(verification_status="FULL")
    service, _ = _service(conn, clock, True)

    result = service.verify_professional(professional_id, "reviewer-2", notes="re-checked")

    assert result == {"status": "FULL", "verdict": "VERIFIED", "reason": "re-checked"}
    record = ProfessionalsRepo(conn).get(professional_id)
    assert record.verification_status.value == "FULL"
    assert record.verified_by == "reviewer-2"
    assert record.verification_notes == "re-checked"
    assert record.verification_date == clock.now
    actions = [a["action_type"] for a in ActivityRepo(conn).for_entity("professional", professional_id)]
    assert actions == ["professional_verification_confirmed"]


def test_unreachable_profile_goes_to_manual_review_after_one_retry(conn, seed, clock):
    professional_id = seed.professional()
    service, probe = _service(conn, clock, False)

    result = service.verify_professional(professional_id, "reviewer-1")

    assert result["status"] == "UNVERIFIED"
    assert result["verdict"] == "MANUAL_REVIEW"
    assert len(probe.calls) == 2
    actions = [a["action_type"] for a in ActivityRepo(conn).for_entity("professional", professional_id)]
    assert actions == ["professional_verification_manual_review"]


def test_retry_recovers_from_a_transient_failure(conn, seed, clock):
    professional_id = seed.professional()
    service, probe = _service(conn, clock, False, True)
    assert service.verify_professional(professional_id, "reviewer-1")["status"] == "BASIC"
    assert len(probe.calls) == 2


def test_strict_mode_raises_manual_review(conn, seed, clock):
    professional_id = seed.professional()
    service, _ = _service(conn, clock, False)
    with pytest.raises(ManualReviewRequired):
        service.verify_professional(professional_id, "reviewer-1", strict=True)


@pytest.mark.parametrize("url", [None, "https://linkedin.com/company/acme", "ada-lovelace"])
def test_invalid_linkedin_url(conn, seed, clock, url):
    professional_id = seed.professional(linkedin_url=url)
    service, probe = _service(conn, clock, True)
    with pytest.raises(InvalidFormat):
        service.verify_professional(professional_id, "reviewer-1")
    assert probe.calls == []


def test_missing_or_deleted_professional(conn, seed, clock):
    professional_id = seed.professional()
    ProfessionalsRepo(conn).soft_delete(professional_id, to_iso(clock.now))
    service, _ = _service(conn, clock, True)
    with pytest.raises(NotFound):
        service.verify_professional(professional_id, "reviewer-1")
    with pytest.raises(NotFound):
        service.verify_professional(999, "reviewer-1")


# --- companies ---
def test_company_domain_match_is_persisted(conn, seed, clock):
    company_id = seed.company(status="PENDING", website="https://www.acme.com")
    seed.hr(company_id, email="jane@acme.com", role="ADMIN")
    service, _ = _service(conn, clock)

    result = service.verify_company(company_id, actor_id="system")

    assert result["status"] == "VERIFIED"
    assert result["reason"] == "auto-verified: domain match"
    company = CompaniesRepo(conn).get(company_id)
    assert company.verification_status.value == "VERIFIED"
    assert company.verified_by == "system"
    assert company.verification_date == clock.now


def test_company_domain_mismatch(conn, seed, clock):
    company_id = seed.company(status="PENDING", website="https://acme.com")
    seed.hr(company_id, email="jane@other.com", role="ADMIN")
    service, _ = _service(conn, clock)

    result = service.verify_company(company_id)

    assert result["status"] == "UNVERIFIED"
    company = CompaniesRepo(conn).get(company_id)
    assert company.verification_status.value == "UNVERIFIED"
    assert "acme.com" in company.verification_notes and "other.com" in company.verification_notes


def test_company_uses_first_admin_only(conn, seed, clock):
    company_id = seed.company(status="PENDING", website="https://acme.com")
    seed.hr(company_id, email="member@other.com", role="MEMBER")
    seed.hr(company_id, email="first@acme.com", role="ADMIN")
    seed.hr(company_id, email="second@other.com", role="ADMIN")
    service, _ = _service(conn, clock)
    assert service.verify_company(company_id)["status"] == "VERIFIED"


def test_company_without_admin_keeps_status(conn, seed, clock):
    company_id = seed.company(status="PENDING")
    seed.hr(company_id, email="member@acme.com", role="MEMBER")
    service, _ = _service(conn, clock)

    result = service.verify_company(company_id)

    assert result == {"status": "MANUAL_REVIEW", "reason": "no ADMIN HR partner on file", "company_status": "PENDING"}
    company = CompaniesRepo(conn).get(company_id)
    assert company.verification_status.value == "PENDING"
    assert company.verification_notes == "no ADMIN HR partner on file"


def test_premium_company_keeps_status(conn, seed, clock):
    company_id = seed.company(status="PREMIUM", website="https://acme.com")
    seed.hr(company_id, email="jane@other.com", role="ADMIN")
    service, _ = _service(conn, clock)
    result = service.verify_company(company_id)
    assert result["status"] == "UNVERIFIED"
    assert result["company_status"] == "PREMIUM"
    assert CompaniesRepo(conn).get(company_id).verification_status.value == "PREMIUM"


def test_company_verification_is_idempotent(conn, seed, clock):
    company_id = seed.company(status="PENDING", website="https://acme.com")
    seed.hr(company_id, email="jane@acme.com", role="ADMIN")
    service, _ = _service(conn, clock)
    assert service.verify_company(company_id) == service.verify_company(company_id)


def test_public_suffix_mode(conn, seed, clock):
    company_id = seed.company(status="PENDING", website="https://acme.co.uk")
    seed.hr(company_id, email="jane@other.co.uk", role="ADMIN")
    two_label, _ = _service(conn, clock)
    suffix_aware, _ = _service(conn, clock, public_suffix=True)
    assert two_label.verify_company(company_id)["status"] == "VERIFIED"
    assert suffix_aware.verify_company(company_id)["status"] == "UNVERIFIED"


def test_unknown_company(conn, clock):
    service, _ = _service(conn, clock)
    with pytest.raises(NotFound):
        service.verify_company(999)


# --- admin review ---
def test_approve_and_reject_professional(conn, seed, clock):
    professional_id = seed.professional(verification_status="BASIC")
    service, _ = _service(conn, clock)

    assert service.approve("professional", professional_id, "admin-1", status="FULL") == {"status": "FULL", "changed": True}
    assert service.approve("professional", professional_id, "admin-1", status="BASIC") == {"status": "FULL", "changed": False}
    assert service.reject("professional", professional_id, "admin-1", "fake profile") == {"status": "UNVERIFIED"}
    record = ProfessionalsRepo(conn).get(professional_id)
    assert record.verification_status.value == "UNVERIFIED"
    assert record.verification_notes == "fake profile"


def test_approve_and_reject_company(conn, seed, clock):
    company_id = seed.company(status="PENDING")
    service, _ = _service(conn, clock)
    assert service.approve("company", company_id, "admin-1")["status"] == "VERIFIED"
    assert service.reject("company", company_id, "admin-1", "documents expired")["status"] == "UNVERIFIED"
    assert CompaniesRepo(conn).get(company_id).verification_status.value == "UNVERIFIED"


def test_admin_review_validation(conn, seed, clock):
    service, _ = _service(conn, clock)
    professional_id = seed.professional()
    with pytest.raises(InvalidInput):
        service.reject("professional", professional_id, "admin-1", "  ")
    with pytest.raises(InvalidInput):
        service.approve("recruiter", 1, "admin-1")
    with pytest.raises(InvalidInput):
        service.approve("professional", professional_id, "admin-1", status="UNVERIFIED")
    with pytest.raises(InvalidInput):
        service.approve("company", 1, "admin-1", status="PENDING")
    with pytest.raises(NotFound):
        service.approve("company", 999, "admin-1")
    with pytest.raises(NotFound):
        service.reject("professional", 999, "admin-1", "no such person")


def test_verification_queue(conn, seed, clock):
    seed.professional()
    seed.professional()
    seed.professional(verification_status="BASIC")
    seed.company(status="PENDING")
    seed.company(status="VERIFIED")
    service, _ = _service(conn, clock)

    queue = service.verification_queue(threshold=3)

    assert queue["unverified_professionals"] == 2
    assert queue["pending_companies"] == 1
    assert queue["total"] == 3
    assert queue["should_notify"] is True
    assert service.verification_queue(threshold=10)["should_notify"] is False
