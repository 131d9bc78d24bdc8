from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from typing import Callable

from . import policy
from .collectors import DnsCollector, HttpsCollector, ThreatListCollector, WhoisCollector
from .config import VerifierConfig
from .models import HttpsSignal, WebsiteScore, WebsiteSignals, WebsiteVerification, WhoisSignal
from .normalizer import declares_https, normalize_website
from .scoring import clamp_score, label_for_website

logger = logging.getLogger(__name__)


def _age_delta(age_days: int) -> int:
    for upper_bound, delta in policy.DOMAIN_AGE_BANDS:
        if upper_bound is None or age_days < upper_bound:
            return delta
    return policy.DOMAIN_AGE_BANDS[-1][1]


def _age_entry(whois: WhoisSignal, age_days: int) -> str:
    since = whois.create_date.isoformat() if whois.create_date else "unknown"
    return f"Domain active for {age_days / 365:.1f} years (since {since})"


def _is_corporate_registrar(name: str) -> bool:
    lowered = name.lower()
    return any(hint in lowered for hint in policy.CORPORATE_REGISTRAR_HINTS)


def _uses_managed_nameservers(nameservers: tuple[str, ...]) -> bool:
    text = " ".join(nameservers).lower()
    return any(hint in text for hint in policy.MANAGED_NAMESERVER_HINTS)


def score_website(signals: WebsiteSignals) -> WebsiteScore:
    """Fold the collected signals into a bounded score and an ordered rationale.

    The deltas are independent of each other; the order only fixes the order of
    the summary entries.
    """
    score = policy.BASELINE_SCORE
    summary: list[str] = []

    if signals.dns is not None:
        summary.append(f"Resolves to IP {signals.dns.resolved_address}")

    whois = signals.whois
    age_days = whois.age_days if whois is not None else None
    if age_days is not None:
        summary.append(_age_entry(whois, age_days))
        score += _age_delta(age_days)
    else:
        summary.append("Domain age unavailable")
        score += policy.DOMAIN_AGE_UNAVAILABLE_DELTA

    if whois is not None and whois.registrar_name:
        summary.append(f"Registrar: {whois.registrar_name}")
        if _is_corporate_registrar(whois.registrar_name):
            score += policy.CORPORATE_REGISTRAR_DELTA

    if whois is not None and whois.nameservers:
        shown = ", ".join(whois.nameservers[: policy.NAMESERVERS_SHOWN])
        summary.append(f"Nameservers: {shown}")
        if _uses_managed_nameservers(whois.nameservers):
            score += policy.MANAGED_NAMESERVER_DELTA

    if signals.https.is_secure:
        summary.append("Valid HTTPS detected")
        score += policy.HTTPS_SECURE_DELTA
    else:
        summary.append("No HTTPS detected")
        score += policy.HTTPS_INSECURE_DELTA

    if not signals.threat_list_configured:
        summary.append("Google Safe Browsing key not configured")
    elif signals.threat is not None:
        if signals.threat.is_flagged:
            summary.append("Flagged by Google Safe Browsing for malware/phishing")
            score += policy.THREAT_FLAGGED_DELTA
        else:
            summary.append("No threats found (Google Safe Browsing)")
            score += policy.THREAT_CLEAN_DELTA

    final_score = clamp_score(score)
    status, risk_level = label_for_website(final_score)
    return WebsiteScore(score=final_score, status=status, risk_level=risk_level, summary=tuple(summary))


class WebsiteVerifier:
    def __init__(
        self,
        config: VerifierConfig,
        *,
        dns: DnsCollector | None = None,
        whois: WhoisCollector | None = None,
        https: HttpsCollector | None = None,
        threat_list: ThreatListCollector | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._dns = dns or DnsCollector(config)
        self._whois = whois or WhoisCollector(config)
        self._https = https or HttpsCollector(config)
        self._threat_list = threat_list or ThreatListCollector(config)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def collect(self, website: str, domain: str) -> WebsiteSignals:
        """Run every collector concurrently and join on completion."""
        results: dict[str, object] = {}
        # An explicit https:// scheme counts as secure without a probe.
        if declares_https(website):
            results["https"] = HttpsSignal(is_secure=True)

        with ThreadPoolExecutor(max_workers=4) as pool:
            futures = {
                pool.submit(self._dns.fetch, domain): "dns",
                pool.submit(self._whois.fetch, domain): "whois",
                pool.submit(self._threat_list.fetch, website): "threat",
            }
            if "https" not in results:
                futures[pool.submit(self._https.fetch, domain)] = "https"
            for fut in as_completed(futures):
                name = futures[fut]
                try:
                    results[name] = fut.result()
                except Exception:
                    logger.exception("%s collector raised for %s; treating as absent", name, domain)
                    results[name] = None

        https = results.get("https") or HttpsSignal(is_secure=False)

        return WebsiteSignals(
            https=https,
            threat_list_configured=self._threat_list.configured,
            dns=results.get("dns"),
            whois=results.get("whois"),
            threat=results.get("threat"),
        )

    def verify(self, website: str | None) -> WebsiteVerification:
        normalized = normalize_website(website)
        logger.debug("Verifying %s", normalized.domain)

        signals = self.collect(normalized.raw, normalized.domain)
        result = score_website(signals)

        verification = WebsiteVerification(
            domain=normalized.domain,
            score=result.score,
            status=result.status,
            summary=list(result.summary),
            risk_level=result.risk_level,
            timestamp=self._clock().isoformat(),
        )
        logger.debug("Verification result: %s", verification.model_dump(by_alias=True))
        return verification
