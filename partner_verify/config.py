from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv


_HERE = Path(__file__).resolve()
_PROJECT_ROOT = _HERE.parents[1]

_DEFAULT_MAX_BODY_BYTES = 5 * 1024 * 1024


def load_env_files() -> None:
    # Local dev convenience; real environment variables always win.
    load_dotenv(_PROJECT_ROOT / ".env", override=False)


def _optional(name: str, *aliases: str) -> str | None:
    for key in (name, *aliases):
        value = os.getenv(key, "").strip()
        if value:
            return value
    return None


def _cors_origins(raw: str) -> tuple[str, ...]:
    raw = raw.strip()
    if not raw:
        return ("*",)
    return tuple(o.strip() for o in raw.split(",") if o.strip())


@dataclass(frozen=True)
class VerifierConfig:
    """Provider keys and service toggles, built once at startup.

    Collectors and verifiers receive this record in their constructors; nothing
    below the HTTP layer reads the process environment.
    """

    whois_api_key: str | None = None
    safe_browsing_api_key: str | None = None
    emailrep_api_key: str | None = None
    crm_base_url: str | None = None
    mode: str = "unknown"
    port: int = 3000
    debug: bool = False
    dns_timeout_s: float = 3.0
    cors_origins: tuple[str, ...] = field(default=("*",))
    max_body_bytes: int = _DEFAULT_MAX_BODY_BYTES

    @property
    def threat_list_configured(self) -> bool:
        return bool(self.safe_browsing_api_key)

    @classmethod
    def from_env(cls) -> "VerifierConfig":
        return cls(
            whois_api_key=_optional("IP2WHOIS_KEY", "IP2WHOIS_API_KEY"),
            safe_browsing_api_key=_optional("GSB_API_KEY"),
            emailrep_api_key=_optional("EMAILREP_API_KEY"),
            crm_base_url=_optional("TARGET_SF_URL"),
            mode=os.getenv("MODE", "unknown") or "unknown",
            port=int(os.getenv("PORT", "3000")),
            debug=os.getenv("VERIFIER_DEBUG", "").strip().lower() == "true",
            dns_timeout_s=float(os.getenv("DNS_TIMEOUT_S", "3.0")),
            cors_origins=_cors_origins(os.getenv("PARTNER_VERIFY_CORS_ORIGINS", "")),
            max_body_bytes=int(os.getenv("MAX_BODY_BYTES", str(_DEFAULT_MAX_BODY_BYTES))),
        )
