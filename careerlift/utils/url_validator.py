"""
Link sanitization for AI-suggested learning resources.

Only links on well-known course, certification and competition platforms are
passed through to users.
"""
from typing import Iterable, Optional
from urllib.parse import urlsplit

ALLOWED_DOMAINS = (
    "coursera.org",
    "udemy.com",
    "grow.google",
    "google.com",
    "skillbuilder.aws",
    "aws.amazon.com",
    "edx.org",
    "linkedin.com",
    "kaggle.com",
    "mlh.io",
    "hackthebox.com",
)


def is_allowed_domain(url: Optional[str]) -> bool:
    """True when the URL's host is one of ALLOWED_DOMAINS or a subdomain of one."""
    if not url or not isinstance(url, str):
        return False
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    if parts.scheme not in ("http", "https"):
        return False
    host = (parts.hostname or "").lower()
    return any(host == domain or host.endswith("." + domain) for domain in ALLOWED_DOMAINS)


def choose_link(candidate: Optional[str], sources: Iterable = ()) -> Optional[str]:
    """
    Pick a trusted link for a resource.

    The candidate wins if trusted; otherwise the first trusted citation URI is
    substituted. Returns None when neither is trusted.
    """
    if is_allowed_domain(candidate):
        return candidate
    for source in sources or ():
        uri = source.get("uri") if isinstance(source, dict) else getattr(source, "uri", None)
        if is_allowed_domain(uri):
            return uri
    return None
