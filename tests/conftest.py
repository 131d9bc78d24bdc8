"""
Shared fixtures for the partner_verify tests.

Collectors are replaced by small fakes returning canned signals, so scoring and
routing tests never touch the network. HTTP collectors themselves are tested
against httpx.MockTransport in test_collectors.py.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Callable

import httpx
import pytest

from partner_verify.config import VerifierConfig
from partner_verify.errors import UpstreamUnavailable
from partner_verify.models import (
    DnsSignal,
    HttpsSignal,
    ReputationSignal,
    ThreatSignal,
    WebsiteSignals,
    WhoisSignal,
)

FIXED_NOW = datetime(2025, 10, 14, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# FACTORIES
# =============================================================================

def make_whois(
    age_days: int | None = 1000,
    registrar: str | None = None,
    nameservers: tuple[str, ...] = (),
    create_date: date | None = date(2023, 1, 18),
    domain_status: str | None = None,
) -> WhoisSignal:
    return WhoisSignal(
        create_date=create_date,
        age_days=age_days,
        registrar_name=registrar,
        nameservers=nameservers,
        domain_status=domain_status,
    )


def make_signals(
    whois: WhoisSignal | None = None,
    https: bool = True,
    threat_configured: bool = True,
    flagged: bool | None = False,
    dns: str | None = None,
) -> WebsiteSignals:
    return WebsiteSignals(
        https=HttpsSignal(is_secure=https),
        threat_list_configured=threat_configured,
        dns=DnsSignal(dns) if dns else None,
        whois=whois,
        threat=ThreatSignal(is_flagged=flagged) if (threat_configured and flagged is not None) else None,
    )


def make_reputation(
    label: str | None = "high",
    suspicious: bool = False,
    free_provider: bool = False,
    disposable: bool = False,
    risk: int | float = 0,
    malicious_activity: str | None = None,
) -> ReputationSignal:
    return ReputationSignal(
        reputation_label=label,
        risk_score=risk,
        is_suspicious=suspicious,
        is_free_provider=free_provider,
        is_disposable=disposable,
        malicious_activity=malicious_activity,
    )


# =============================================================================
# FAKE COLLECTORS
# =============================================================================

class FakeDns:
    def __init__(self, address: str | None = "93.184.216.34"):
        self.address = address
        self.calls: list[str] = []

    def fetch(self, domain):
        self.calls.append(domain)
        return DnsSignal(self.address) if self.address else None


class FakeWhois:
    def __init__(self, signal: WhoisSignal | None = None):
        self.signal = signal
        self.calls: list[str] = []

    def fetch(self, domain):
        self.calls.append(domain)
        return self.signal


class FakeHttps:
    def __init__(self, probe_result: bool = False):
        self.probe_result = probe_result
        self.probed: list[str] = []

    def fetch(self, domain):
        self.probed.append(domain)
        return HttpsSignal(is_secure=self.probe_result)


class FakeThreatList:
    def __init__(self, flagged: bool | None = False, configured: bool = True):
        self.flagged = flagged
        self.configured = configured
        self.urls: list[str] = []

    def fetch(self, url):
        self.urls.append(url)
        if not self.configured or self.flagged is None:
            return None
        return ThreatSignal(is_flagged=self.flagged)


class ExplodingCollector:
    """Breaks the no-raise contract, to check the fan-out still degrades."""

    configured = True

    def fetch(self, *args, **kwargs):
        raise RuntimeError("collector bug")


class GatedCollector:
    """Blocks in ``fetch`` until ``gate`` lets it through, then returns ``signal``.

    ``gate`` is anything with a ``wait()``: an Event to hold the call open,
    a Barrier to require a concurrent partner.
    """

    configured = True

    def __init__(self, gate, signal=None):
        self.gate = gate
        self.signal = signal

    def fetch(self, *args, **kwargs):
        self.gate.wait()
        return self.signal


class FakeReputation:
    def __init__(self, signal: ReputationSignal | None = None, error: UpstreamUnavailable | None = None):
        self.signal = signal or make_reputation()
        self.error = error
        self.calls: list[str] = []

    def fetch(self, email):
        self.calls.append(email)
        if self.error is not None:
            raise self.error
        return self.signal


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def config() -> VerifierConfig:
    return VerifierConfig(
        whois_api_key="whois-key",
        safe_browsing_api_key="gsb-key",
        emailrep_api_key="emailrep-key",
        crm_base_url="https://crm.example.com/services/apexrest/",
        mode="test",
    )


@pytest.fixture
def bare_config() -> VerifierConfig:
    return VerifierConfig()


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def mock_transport():
    """Build an httpx.MockTransport that records every request it serves."""

    def build(handler):
        seen: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        transport = httpx.MockTransport(record)
        transport.requests = seen
        return transport

    return build
