from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from . import policy
from .collectors import EmailReputationClient, WhoisCollector
from .config import VerifierConfig
from .models import EmailVerification, ReputationSignal, RiskLevel, WhoisSignal
from .normalizer import normalize_email

logger = logging.getLogger(__name__)


def _flag(value: bool) -> str:
    return "true" if value else "false"


def risk_from_reputation(label: str | None) -> RiskLevel:
    return policy.REPUTATION_TO_RISK.get((label or "").strip().lower(), policy.UNKNOWN_RISK)


def corrected_risk(risk_level: RiskLevel, is_business_domain: bool) -> RiskLevel:
    """Free-mail and disposable domains are the high-risk population; a business
    domain is never reported above Medium on a generic reputation label alone."""
    if not is_business_domain:
        return risk_level
    return policy.BUSINESS_DOMAIN_RISK_CORRECTIONS.get(risk_level, risk_level)


def is_valid_address(reputation: ReputationSignal) -> bool:
    if reputation.is_business_domain:
        return True
    return not reputation.is_suspicious


def score_email(
    email: str,
    domain: str,
    reputation: ReputationSignal,
    whois: WhoisSignal | None,
) -> EmailVerification:
    risk_level = corrected_risk(
        risk_from_reputation(reputation.reputation_label),
        reputation.is_business_domain,
    )

    # Age is reported only; it does not feed the email risk level.
    age_days = whois.age_days if whois is not None else None
    domain_status = (whois.domain_status if whois is not None else None) or "N/A"
    registrar = (whois.registrar_name if whois is not None else None) or "Unknown"

    summary = [
        f"Reputation: {reputation.reputation_label or 'unknown'}",
        f"Mapped Risk Level: {risk_level}",
        f"Suspicious: {_flag(reputation.is_suspicious)}",
        f"Days Since Domain Created: {age_days if age_days is not None else 'N/A'}",
        f"Domain Status: {domain_status}",
        f"Registrar: {registrar}",
        f"Malicious Activity: {reputation.malicious_activity or 'none'}",
        f"Disposable: {_flag(reputation.is_disposable)}",
        f"Free Provider: {_flag(reputation.is_free_provider)}",
    ]

    return EmailVerification(
        email=email,
        domain=domain,
        is_valid=is_valid_address(reputation),
        status=reputation.reputation_label or "unknown",
        risk_level=risk_level,
        spam_score=reputation.risk_score or 0,
        domain_age_days=age_days,
        domain_status=domain_status,
        summary=summary,
    )


class EmailVerifier:
    def __init__(
        self,
        config: VerifierConfig,
        *,
        reputation: EmailReputationClient | None = None,
        whois: WhoisCollector | None = None,
    ):
        self._reputation = reputation or EmailReputationClient(config)
        self._whois = whois or WhoisCollector(config)

    def verify(self, email: str | None) -> EmailVerification:
        normalized = normalize_email(email)

        # The domain comes from the input alone, so both lookups start together.
        pool = ThreadPoolExecutor(max_workers=2)
        whois_future = pool.submit(self._whois.fetch, normalized.domain)
        reputation_future = pool.submit(self._reputation.fetch, normalized.raw)

        try:
            reputation = reputation_future.result()
        except Exception:
            # Required signal: fail now, leave the WHOIS lookup to finish on its own.
            pool.shutdown(wait=False, cancel_futures=True)
            raise

        try:
            whois = whois_future.result()
        except Exception:
            logger.exception("WHOIS collector raised for %s; treating as absent", normalized.domain)
            whois = None
        finally:
            pool.shutdown(wait=True)

        result = score_email(normalized.raw, normalized.domain, reputation, whois)
        logger.debug("Email verification result: %s", result.model_dump(by_alias=True))
        return result
