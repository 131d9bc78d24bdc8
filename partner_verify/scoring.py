from __future__ import annotations

from .models import RiskLevel, WebsiteStatus
from .policy import SCORE_CEILING, SCORE_FLOOR, WEBSITE_STATUS_BANDS


def clamp_score(score: int) -> int:
    return max(SCORE_FLOOR, min(SCORE_CEILING, int(score)))


def label_for_website(score: int) -> tuple[WebsiteStatus, RiskLevel]:
    """Map a clamped website score to its (status, risk level) pair."""
    for lower_bound, status, risk_level in WEBSITE_STATUS_BANDS:
        if score >= lower_bound:
            return status, risk_level
    _, status, risk_level = WEBSITE_STATUS_BANDS[-1]
    return status, risk_level
