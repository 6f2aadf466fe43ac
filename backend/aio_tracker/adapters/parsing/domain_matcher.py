"""
Domain Matcher
Canonical domain form used to correlate citations with references
"""

import re

# scheme://, e.g. "https://" or "android-app://"
SCHEME_PATTERN = re.compile(r"^[a-z][a-z0-9+.\-]*://")
URL_TAIL_PATTERN = re.compile(r"[/?#]")


def normalize_domain(value: str) -> str:
    """
    Reduce a URL or domain string to a bare lowercase host.

    Strips the scheme, everything from the first "/", "?" or "#", and any
    leading "www." labels. Any string is accepted and the result is stable
    under repeated normalization.
    """
    if not value:
        return ""

    domain = value.lower()
    domain = SCHEME_PATTERN.sub("", domain, count=1)
    domain = URL_TAIL_PATTERN.split(domain, maxsplit=1)[0]

    while domain.startswith("www."):
        domain = domain[4:]

    return domain


def domains_match(a: str, b: str) -> bool:
    """
    Loose "same site" check: equal, or one contains the other.

    Lets "blog.example.com" match "example.com". An empty side never
    matches, otherwise it would be contained in every domain.
    """
    left = normalize_domain(a)
    right = normalize_domain(b)

    if not left or not right:
        return False

    return left == right or left in right or right in left
