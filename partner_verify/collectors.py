"""Thin clients over the external signal providers.

Optional collectors (DNS, WHOIS, HTTPS, threat list) never raise: a timeout,
network error, non-2xx answer or missing credential all come back as ``None``
(or ``is_secure=False`` for the HTTPS probe). The email reputation client is
the one required signal and raises ``UpstreamUnavailable`` instead.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Callable
from urllib.parse import quote

import dns.exception
import dns.resolver
import httpx

from .config import VerifierConfig
from .errors import UpstreamUnavailable
from .models import DnsSignal, HttpsSignal, ReputationSignal, ThreatSignal, WhoisSignal
from .policy import THREAT_TYPES

logger = logging.getLogger(__name__)

IP2WHOIS_URL = "https://api.ip2whois.com/v2"
SAFE_BROWSING_URL = "https://safebrowsing.googleapis.com/v4/threatMatches:find"
EMAILREP_URL = "https://emailrep.io"

WHOIS_TIMEOUT_S = 10.0
HTTPS_TIMEOUT_S = 5.0
HTTPS_MAX_REDIRECTS = 2
THREAT_TIMEOUT_S = 10.0
EMAILREP_TIMEOUT_S = 10.0

CLIENT_ID = "navitas"
CLIENT_VERSION = "1.0"
USER_AGENT = "navitas-partner-onboarding"

_OFFSET_RE = re.compile(r"([+-]\d{2})(\d{2})$")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(raw: Any) -> datetime | None:
    if not isinstance(raw, str) or not raw.strip():
        return None
    value = raw.strip().replace("Z", "+00:00")
    value = _OFFSET_RE.sub(r"\1:\2", value)
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _activity_text(value: Any) -> str | None:
    if not value:
        return None
    if value is True:
        return "true"
    return str(value)


def age_in_days(created: datetime, now: datetime) -> int | None:
    days = int((now - created).total_seconds() // 86400)
    return days if days >= 0 else None


class _HttpCollector:
    def __init__(self, config: VerifierConfig, transport: httpx.BaseTransport | None = None):
        self._config = config
        self._transport = transport

    def _client(self, **kwargs: Any) -> httpx.Client:
        return httpx.Client(transport=self._transport, **kwargs)


class DnsCollector:
    """Resolves a domain to its first A (or AAAA) address."""

    def __init__(self, config: VerifierConfig, resolver: dns.resolver.Resolver | None = None):
        self._timeout = config.dns_timeout_s
        self._resolver = resolver

    def _make_resolver(self) -> dns.resolver.Resolver:
        if self._resolver is not None:
            return self._resolver
        resolver = dns.resolver.Resolver()
        resolver.timeout = self._timeout
        resolver.lifetime = self._timeout
        return resolver

    def fetch(self, domain: str) -> DnsSignal | None:
        try:
            resolver = self._make_resolver()
            for rdtype in ("A", "AAAA"):
                try:
                    answer = resolver.resolve(domain, rdtype)
                except dns.resolver.NoAnswer:
                    continue
                for record in answer:
                    return DnsSignal(resolved_address=record.to_text())
        except dns.exception.DNSException as e:
            logger.debug("DNS lookup failed for %s: %s", domain, e)
        return None


class WhoisCollector(_HttpCollector):
    """IP2WHOIS domain intelligence: creation date, registrar, nameservers, status."""

    def __init__(
        self,
        config: VerifierConfig,
        transport: httpx.BaseTransport | None = None,
        now: Callable[[], datetime] = _utcnow,
    ):
        super().__init__(config, transport)
        self._now = now

    def fetch(self, domain: str) -> WhoisSignal | None:
        key = self._config.whois_api_key
        if not key:
            return None

        try:
            with self._client(timeout=WHOIS_TIMEOUT_S) as client:
                res = client.get(IP2WHOIS_URL, params={"key": key, "domain": domain})
                res.raise_for_status()
                data = res.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("WHOIS lookup failed for %s: %s", domain, e)
            return None

        if not isinstance(data, dict) or data.get("error"):
            logger.warning("WHOIS lookup returned no record for %s", domain)
            return None
        return self._parse(data)

    def _parse(self, data: dict[str, Any]) -> WhoisSignal:
        created = _parse_timestamp(data.get("create_date"))

        age_days: int | None = None
        reported_age = data.get("domain_age")
        if isinstance(reported_age, (int, float)) and reported_age > 0:
            age_days = int(reported_age)
        elif created is not None:
            age_days = age_in_days(created, self._now())

        registrar = data.get("registrar")
        registrar_name = registrar.get("name") if isinstance(registrar, dict) else None
        registrar_name = registrar_name or data.get("registrar_name") or None

        nameservers = data.get("nameservers") or []
        if not isinstance(nameservers, list):
            nameservers = []

        status = data.get("domain_status") or data.get("status") or None

        return WhoisSignal(
            create_date=created.date() if created else None,
            age_days=age_days,
            registrar_name=str(registrar_name) if registrar_name else None,
            nameservers=tuple(str(ns) for ns in nameservers if ns),
            domain_status=str(status) if status else None,
        )


class HttpsCollector(_HttpCollector):
    """Checks that the domain answers over HTTPS, even when the caller sent no scheme."""

    def fetch(self, domain: str) -> HttpsSignal:
        try:
            with self._client(
                timeout=HTTPS_TIMEOUT_S,
                follow_redirects=True,
                max_redirects=HTTPS_MAX_REDIRECTS,
            ) as client:
                res = client.get(f"https://{domain}")
        except httpx.HTTPError as e:
            logger.debug("HTTPS probe failed for %s: %s", domain, e)
            return HttpsSignal(is_secure=False)

        return HttpsSignal(is_secure=200 <= res.status_code < 400)


class ThreatListCollector(_HttpCollector):
    """Google Safe Browsing lookup for the exact URL the caller submitted."""

    @property
    def configured(self) -> bool:
        return self._config.threat_list_configured

    def fetch(self, url: str) -> ThreatSignal | None:
        key = self._config.safe_browsing_api_key
        if not key:
            return None

        body = {
            "client": {"clientId": CLIENT_ID, "clientVersion": CLIENT_VERSION},
            "threatInfo": {
                "threatTypes": list(THREAT_TYPES),
                "platformTypes": ["ANY_PLATFORM"],
                "threatEntryTypes": ["URL"],
                "threatEntries": [{"url": url}],
            },
        }
        try:
            with self._client(timeout=THREAT_TIMEOUT_S) as client:
                res = client.post(SAFE_BROWSING_URL, params={"key": key}, json=body)
                res.raise_for_status()
                data = res.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("GSB check failed: %s", e)
            return None

        matches = data.get("matches") if isinstance(data, dict) else None
        return ThreatSignal(is_flagged=bool(matches))


class EmailReputationClient(_HttpCollector):
    """EmailRep lookup. Required signal: failures raise ``UpstreamUnavailable``."""

    def fetch(self, email: str) -> ReputationSignal:
        headers = {"User-Agent": USER_AGENT}
        if self._config.emailrep_api_key:
            headers["Key"] = self._config.emailrep_api_key

        try:
            with self._client(timeout=EMAILREP_TIMEOUT_S) as client:
                res = client.get(f"{EMAILREP_URL}/{quote(email, safe='')}", headers=headers)
        except httpx.HTTPError as e:
            logger.error("EmailRep request failed: %s", e)
            raise UpstreamUnavailable(502, str(e)) from e

        if not res.is_success:
            raise UpstreamUnavailable(res.status_code, res.text)

        try:
            data = res.json()
        except ValueError as e:
            raise UpstreamUnavailable(502, f"Undecodable response: {e}") from e
        if not isinstance(data, dict):
            raise UpstreamUnavailable(502, "Unexpected response shape")
        return self._parse(data)

    @staticmethod
    def _parse(data: dict[str, Any]) -> ReputationSignal:
        details = data.get("details")
        if not isinstance(details, dict):
            details = {}

        risk = data.get("risk")
        reputation = data.get("reputation")
        return ReputationSignal(
            reputation_label=str(reputation) if reputation else None,
            risk_score=risk if isinstance(risk, (int, float)) and not isinstance(risk, bool) else 0,
            is_suspicious=bool(data.get("suspicious")),
            is_free_provider=bool(details.get("free_provider")),
            is_disposable=bool(details.get("disposable")),
            malicious_activity=_activity_text(details.get("malicious_activity")),
        )

