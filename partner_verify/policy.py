"""Heuristic constants for website and email scoring.

Every threshold, delta and hint list used by the scorers lives here so the
scoring functions stay free of magic numbers and the policy can be tuned in
one place.
"""
from __future__ import annotations

from .models import RiskLevel, WebsiteStatus

BASELINE_SCORE = 50
SCORE_FLOOR = 0
SCORE_CEILING = 100

# (exclusive upper bound in days, delta); the last band has no upper bound.
DOMAIN_AGE_BANDS: tuple[tuple[int | None, int], ...] = (
    (90, -15),
    (365, -5),
    (None, 20),
)
# WHOIS privacy masking is common for legitimate registrants, so a missing age
# is scored like a mature domain.
DOMAIN_AGE_UNAVAILABLE_DELTA = 20

CORPORATE_REGISTRAR_HINTS = ("corporate", "markmonitor", "csc", "com laude", "safenames")
CORPORATE_REGISTRAR_DELTA = 5

MANAGED_NAMESERVER_HINTS = ("cloudflare", "google", "aws", "nsone")
MANAGED_NAMESERVER_DELTA = 3
NAMESERVERS_SHOWN = 2

HTTPS_SECURE_DELTA = 10
HTTPS_INSECURE_DELTA = -10

THREAT_FLAGGED_DELTA = -60
THREAT_CLEAN_DELTA = 10

# (inclusive lower bound, status, risk level), checked top to bottom.
WEBSITE_STATUS_BANDS: tuple[tuple[int, WebsiteStatus, RiskLevel], ...] = (
    (80, "Likely Legitimate", "Low"),
    (50, "Needs Review", "Medium"),
    (SCORE_FLOOR, "Potentially Fraudulent", "High"),
)

# The provider's "reputation" runs opposite to risk.
REPUTATION_TO_RISK: dict[str, RiskLevel] = {
    "high": "Low",
    "medium": "Medium",
    "low": "High",
    "malicious": "High",
    "very low": "High",
}
UNKNOWN_RISK: RiskLevel = "Unknown"

# Business domains are never reported above this level on reputation alone.
BUSINESS_DOMAIN_RISK_CORRECTIONS: dict[RiskLevel, RiskLevel] = {
    "High": "Medium",
}

THREAT_TYPES = (
    "MALWARE",
    "SOCIAL_ENGINEERING",
    "UNWANTED_SOFTWARE",
    "POTENTIALLY_HARMFUL_APPLICATION",
)
