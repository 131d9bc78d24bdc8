"""Relays onboarding payloads to the CRM's REST endpoints."""
from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from .config import VerifierConfig

logger = logging.getLogger(__name__)

FORWARD_TIMEOUT_S = 20.0


def build_target_url(base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def _body_or_text(res: httpx.Response) -> Any:
    try:
        return res.json()
    except ValueError:
        return res.text or None


def forward_to_crm(
    method: str,
    path: str,
    body: Any,
    config: VerifierConfig,
    transport: httpx.BaseTransport | None = None,
) -> tuple[int, Any]:
    """Forward one request and return ``(status_code, json_payload)`` for the caller."""
    start = time.perf_counter()
    mode = config.mode
    tag = f"[{mode}] [{method} {path}]"

    if not config.crm_base_url:
        logger.error("[%s] TARGET_SF_URL not configured.", mode)
        return 500, {"error": True, "message": "Missing TARGET_SF_URL environment variable."}

    target_url = build_target_url(config.crm_base_url, path)
    logger.info("%s Forwarding to CRM: %s", tag, target_url)

    try:
        with httpx.Client(timeout=FORWARD_TIMEOUT_S, follow_redirects=True, transport=transport) as client:
            res = client.request(
                method,
                target_url,
                json=body,
                headers={"Content-Type": "application/json"},
            )
            res.raise_for_status()
    except httpx.HTTPStatusError as e:
        duration = time.perf_counter() - start
        logger.error("%s Forward failed (%.2fs) -> %s :: %s", tag, duration, e.response.status_code, e)
        return e.response.status_code, {
            "error": True,
            "message": str(e),
            "details": _body_or_text(e.response),
        }
    except httpx.HTTPError as e:
        duration = time.perf_counter() - start
        logger.error("%s Forward failed (%.2fs) -> ERR :: %s", tag, duration, e)
        return 500, {"error": True, "message": str(e), "details": None}

    duration = time.perf_counter() - start
    logger.info("%s Success (%.2fs) -> Status %s", tag, duration, res.status_code)

    payload = _body_or_text(res)
    if isinstance(payload, dict):
        logger.info("%s CRM response keys: %s", tag, ", ".join(payload.keys()))
    return res.status_code, payload
