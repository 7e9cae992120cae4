from __future__ import annotations

import pytest

from conftest import FakeProbe
from models.enums import DomainVerdictStatus, ProfessionalVerificationStatus
from services.trust_verifier import at_least, verify_company_domain, verify_professional_linkedin


@pytest.mark.parametrize(
    "url",
    [
        "https://www.linkedin.com/in/ada-lovelace",
        "http://linkedin.com/in/ada_l0velace/",
        "https://linkedin.com/in/AdaLovelace",
    ],
)
def test_linkedin_valid_and_reachable(url):
    probe = FakeProbe(True)
    check = verify_professional_linkedin(url, probe)
    assert check.ok is True
    assert check.code is None
    assert probe.calls == [url]


@pytest.mark.parametrize(
    "url",
    [
        None,
        "",
        "https://www.linkedin.com/company/acme",
        "https://linkedin.com/in/ada/details",
        "https://uk.linkedin.com/in/ada",
        "ftp://linkedin.com/in/ada",
        "https://linkedin.com/in/ada lovelace",
    ],
)
def test_linkedin_invalid_format_never_probes(url):
    probe = FakeProbe(True)
    check = verify_professional_linkedin(url, probe)
    assert check.ok is False
    assert check.code == "InvalidFormat"
    assert probe.calls == []


def test_linkedin_unreachable_probes_once():
    probe = FakeProbe(False)
    check = verify_professional_linkedin("https://www.linkedin.com/in/ada", probe)
    assert check.ok is False
    assert check.code == "Unreachable"
    assert len(probe.calls) == 1


def test_company_domain_match():
    verdict = verify_company_domain("https://www.acme.com", "jane@acme.com")
    assert verdict.status is DomainVerdictStatus.VERIFIED
    assert verdict.reason == "auto-verified: domain match"


def test_company_domain_mismatch_names_both_domains():
    verdict = verify_company_domain("https://acme.com", "jane@other.com")
    assert verdict.status is DomainVerdictStatus.UNVERIFIED
    assert "acme.com" in verdict.reason and "other.com" in verdict.reason


def test_company_domain_unparsable_is_manual_review():
    verdict = verify_company_domain("not a url", "bad-email")
    assert verdict.status is DomainVerdictStatus.MANUAL_REVIEW
    verdict = verify_company_domain("https://acme.com", "bad-email")
    assert verdict.status is DomainVerdictStatus.MANUAL_REVIEW
    assert "email" in verdict.reason


def test_company_without_admin_is_manual_review():
    verdict = verify_company_domain("https://acme.com", None)
    assert verdict.status is DomainVerdictStatus.MANUAL_REVIEW
    assert verdict.reason == "no ADMIN HR partner on file"


def test_company_domain_verdict_is_idempotent():
    first = verify_company_domain("https://careers.acme.com", "hr@mail.acme.com")
    second = verify_company_domain("https://careers.acme.com", "hr@mail.acme.com")
    assert first == second


def test_public_suffix_mode_separates_co_uk_organisations():
    assert verify_company_domain("https://acme.co.uk", "jane@other.co.uk").status is DomainVerdictStatus.VERIFIED
    verdict = verify_company_domain("https://acme.co.uk", "jane@other.co.uk", public_suffix=True)
    assert verdict.status is DomainVerdictStatus.UNVERIFIED


def test_status_rank_is_monotonic():
    assert at_least(ProfessionalVerificationStatus.FULL, ProfessionalVerificationStatus.BASIC)
    assert at_least("BASIC", "BASIC")
    assert not at_least(ProfessionalVerificationStatus.UNVERIFIED, ProfessionalVerificationStatus.BASIC)
