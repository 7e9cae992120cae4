from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote, urlparse

import tldextract


# Bundled public-suffix snapshot only; never fetches the list over the network
_EXTRACT = tldextract.TLDExtract(suffix_list_urls=())

_LABEL = r"[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?"
_HOST_RE = re.compile(rf"^{_LABEL}(?:\.{_LABEL})+$")
_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)


@dataclass(frozen=True)
class DomainComparison:
    website_domain: Optional[str]
    email_domain: Optional[str]
    # None when either side could not be parsed
    matched: Optional[bool]


def _clean_host(host: Optional[str]) -> Optional[str]:
    if not host:
        return None
    host = host.strip().lower().rstrip(".")
    if host.startswith("www."):
        host = host[4:]
    return host if _HOST_RE.match(host) else None


def extract_domain_from_url(url: Optional[str]) -> Optional[str]:
    """Hostname of a website URL without scheme or leading www., lower-cased.

    Bare hosts ("acme.com/careers") are accepted. Returns None for anything
    that does not carry a dotted hostname.
    """
    if not isinstance(url, str) or not url.strip():
        return None
    text = url.strip()
    if not _SCHEME_RE.match(text):
        text = f"https://{text}"
    try:
        host = urlparse(text).hostname
    except ValueError:
        return None
    return _clean_host(host)


def extract_domain_from_email(email: Optional[str]) -> Optional[str]:
    """Everything after the last '@', lower-cased; None without '@'."""
    if not isinstance(email, str) or "@" not in email:
        return None
    return _clean_host(email.rsplit("@", 1)[1])


def extract_apex_domain(url_or_domain: Optional[str]) -> Optional[str]:
    """Registrable domain per the public-suffix list (acme.co.uk, not co.uk)."""
    if not url_or_domain:
        return None
    text = str(url_or_domain).strip().lower()
    if not text:
        return None
    ext = _EXTRACT(text)
    if ext.domain and ext.suffix:
        return f"{ext.domain}.{ext.suffix}"
    return None


def root_domain(domain: str, public_suffix: bool = False) -> str:
    """Coarse organisation key for a domain.

    Default keeps the last two labels, so mail.acme.co.ng -> co.ng. With
    public_suffix=True the registrable domain is used instead when one
    can be determined.
    """
    text = (domain or "").strip().lower()
    if public_suffix:
        apex = extract_apex_domain(text)
        if apex:
            return apex
    parts = text.split(".")
    if len(parts) <= 2:
        return text
    return ".".join(parts[-2:])


def domains_match(domain_a: str, domain_b: str, public_suffix: bool = False) -> bool:
    return root_domain(domain_a, public_suffix) == root_domain(domain_b, public_suffix)


def compare_website_and_email(website_url: Optional[str], email: Optional[str], public_suffix: bool = False) -> DomainComparison:
    website_domain = extract_domain_from_url(website_url)
    email_domain = extract_domain_from_email(email)
    if website_domain is None or email_domain is None:
        return DomainComparison(website_domain, email_domain, None)
    return DomainComparison(website_domain, email_domain, domains_match(website_domain, email_domain, public_suffix))


def normalize_linkedin_profile_url(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    try:
        u = urlparse(url.strip())
    except ValueError:
        return None
    host = (u.netloc or '').lower().replace('www.', '')
    path = (u.path or '').rstrip('/')
    if not host:
        return None
    if host != 'linkedin.com' or not path.startswith('/in/'):
        return None
    # Keep only /in/{slug} and drop trailing locale/segments (e.g., /de, /en)
    parts = [p for p in path.split('/') if p]
    if len(parts) >= 2 and parts[0] == 'in':
        slug = unquote(parts[1])
        slug = unicodedata.normalize('NFKC', slug).strip().lower()
        # Remove invisible characters occasionally present
        slug = slug.replace('\u200b', '').replace('\u200c', '').replace('\u200d', '')
        return f"https://linkedin.com/in/{slug}"
    return None
