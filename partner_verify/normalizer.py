from __future__ import annotations

import re

from .errors import InvalidInput
from .models import NormalizedDomain


_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)

WEBSITE_REQUIRED = "Website URL is required."
EMAIL_REQUIRED = "Missing email parameter"
EMAIL_MALFORMED = "Invalid email format"


def normalize_website(raw: str | None) -> NormalizedDomain:
    if not raw:
        raise InvalidInput(WEBSITE_REQUIRED)

    value = _SCHEME_RE.sub("", raw, count=1)
    value = value.split("/", 1)[0]
    domain = value.strip().lower()
    if not domain:
        raise InvalidInput(WEBSITE_REQUIRED)
    return NormalizedDomain(raw=raw, domain=domain)


def normalize_email(raw: str | None) -> NormalizedDomain:
    if not raw:
        raise InvalidInput(EMAIL_REQUIRED)

    _, at, right = raw.partition("@")
    domain = right.strip().lower()
    if not at or not domain:
        raise InvalidInput(EMAIL_MALFORMED)
    return NormalizedDomain(raw=raw, domain=domain)


def declares_https(raw: str) -> bool:
    return raw.strip().lower().startswith("https://")
