from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

WebsiteStatus = Literal["Likely Legitimate", "Needs Review", "Potentially Fraudulent"]
RiskLevel = Literal["Low", "Medium", "High", "Unknown"]


# --- per-request values ------------------------------------------------------


@dataclass(frozen=True)
class NormalizedDomain:
    raw: str
    domain: str


@dataclass(frozen=True)
class DnsSignal:
    resolved_address: str


@dataclass(frozen=True)
class WhoisSignal:
    create_date: date | None = None
    age_days: int | None = None
    registrar_name: str | None = None
    nameservers: tuple[str, ...] = ()
    domain_status: str | None = None


@dataclass(frozen=True)
class HttpsSignal:
    is_secure: bool


@dataclass(frozen=True)
class ThreatSignal:
    is_flagged: bool


@dataclass(frozen=True)
class ReputationSignal:
    reputation_label: str | None
    risk_score: int | float = 0
    is_suspicious: bool = False
    is_free_provider: bool = False
    is_disposable: bool = False
    malicious_activity: str | None = None

    @property
    def is_business_domain(self) -> bool:
        return not self.is_free_provider and not self.is_disposable


@dataclass(frozen=True)
class WebsiteSignals:
    """Everything the website scorer looks at. ``None`` means the signal is absent."""

    https: HttpsSignal
    threat_list_configured: bool
    dns: DnsSignal | None = None
    whois: WhoisSignal | None = None
    threat: ThreatSignal | None = None


@dataclass(frozen=True)
class WebsiteScore:
    score: int
    status: WebsiteStatus
    risk_level: RiskLevel
    summary: tuple[str, ...] = field(default_factory=tuple)


# --- HTTP payloads -----------------------------------------------------------


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VerifyWebsiteRequest(BaseModel):
    website: str | None = None


class VerifyEmailRequest(BaseModel):
    email: str | None = None


class WebsiteVerification(_CamelModel):
    domain: str
    score: int
    status: WebsiteStatus
    summary: list[str]
    risk_level: RiskLevel
    timestamp: str


class EmailVerification(_CamelModel):
    email: str
    domain: str
    is_valid: bool
    status: str
    risk_level: RiskLevel
    spam_score: int | float
    domain_age_days: int | None
    domain_status: str
    summary: list[str]
