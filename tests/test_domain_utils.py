from __future__ import annotations

import pytest

from services.domain_utils import (
    compare_website_and_email,
    domains_match,
    extract_domain_from_email,
    extract_domain_from_url,
    normalize_linkedin_profile_url,
    root_domain,
)


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://www.acme.com", "acme.com"),
        ("HTTP://WWW.Acme.COM/careers?x=1", "acme.com"),
        ("acme.com/careers", "acme.com"),
        ("https://jobs.acme.co.uk:8443/", "jobs.acme.co.uk"),
        ("not a url", None),
        ("http://localhost", None),
        ("https://acme_corp.com", None),
        ("", None),
        (None, None),
    ],
)
def test_extract_domain_from_url(url, expected):
    assert extract_domain_from_url(url) == expected


@pytest.mark.parametrize(
    "email,expected",
    [
        ("jane@acme.com", "acme.com"),
        ("Jane.Doe@Mail.ACME.com", "mail.acme.com"),
        ("odd@name@acme.org", "acme.org"),
        ("bad-email", None),
        ("jane@", None),
        (None, None),
    ],
)
def test_extract_domain_from_email(email, expected):
    assert extract_domain_from_email(email) == expected


def test_root_domain_keeps_last_two_labels():
    assert root_domain("acme.com") == "acme.com"
    assert root_domain("mail.acme.com") == "acme.com"
    # Known simplification for multi-part public suffixes
    assert root_domain("mail.acme.co.ng") == "co.ng"


def test_root_domain_public_suffix_mode():
    assert root_domain("mail.acme.co.uk", public_suffix=True) == "acme.co.uk"
    assert root_domain("mail.acme.com", public_suffix=True) == "acme.com"


def test_domains_match():
    assert domains_match("acme.com", "mail.acme.com")
    assert not domains_match("acme.com", "other.com")
    # Two-label mode conflates different organisations under co.uk
    assert domains_match("acme.co.uk", "other.co.uk")
    assert not domains_match("acme.co.uk", "other.co.uk", public_suffix=True)


def test_compare_website_and_email_properties():
    assert compare_website_and_email("https://www.acme.com", "jane@acme.com").matched is True
    assert compare_website_and_email("https://acme.com", "jane@other.com").matched is False
    unparsable = compare_website_and_email("not a url", "bad-email")
    assert unparsable.matched is None
    assert unparsable.website_domain is None and unparsable.email_domain is None


def test_normalize_linkedin_profile_url():
    assert normalize_linkedin_profile_url("https://www.linkedin.com/in/Ada-Lovelace/de/") == "https://linkedin.com/in/ada-lovelace"
    assert normalize_linkedin_profile_url("https://linkedin.com/company/acme") is None
    assert normalize_linkedin_profile_url("https://evil-linkedin.com/in/ada") is None
    assert normalize_linkedin_profile_url(None) is None
