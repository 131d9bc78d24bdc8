from __future__ import annotations

import json
import logging
import traceback
from functools import lru_cache
from typing import Any

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError

from .config import VerifierConfig, load_env_files
from .crm_proxy import forward_to_crm
from .email_check import EmailVerifier
from .errors import InvalidInput, PayloadTooLarge, UpstreamUnavailable
from .models import EmailVerification, VerifyEmailRequest, VerifyWebsiteRequest, WebsiteVerification
from .website_check import WebsiteVerifier


load_env_files()
_CONFIG = VerifierConfig.from_env()

logging.basicConfig(
    level=logging.DEBUG if _CONFIG.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Partner Onboarding Proxy", version="2.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(_CONFIG.cors_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_config() -> VerifierConfig:
    return _CONFIG


@lru_cache(maxsize=1)
def _default_website_verifier() -> WebsiteVerifier:
    return WebsiteVerifier(_CONFIG)


@lru_cache(maxsize=1)
def _default_email_verifier() -> EmailVerifier:
    return EmailVerifier(_CONFIG)


def get_website_verifier() -> WebsiteVerifier:
    return _default_website_verifier()


def get_email_verifier() -> EmailVerifier:
    return _default_email_verifier()


def get_crm_transport() -> httpx.BaseTransport | None:
    return None


async def json_body(request: Request, config: VerifierConfig = Depends(get_config)) -> Any:
    """Parsed JSON body; a missing or undecodable body reads as ``{}``.

    The size limit is enforced on the bytes actually received, so chunked
    uploads without a ``Content-Length`` are capped too.
    """
    raw = bytearray()
    async for chunk in request.stream():
        raw.extend(chunk)
        if len(raw) > config.max_body_bytes:
            raise PayloadTooLarge()
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except ValueError:
        return {}


def _as_object(body: Any) -> dict[str, Any]:
    return body if isinstance(body, dict) else {}


def _too_large() -> JSONResponse:
    return JSONResponse(status_code=413, content={"error": True, "message": "Request body too large."})


@app.exception_handler(PayloadTooLarge)
async def payload_too_large_handler(request: Request, exc: PayloadTooLarge):
    return _too_large()


@app.middleware("http")
async def limit_body_size(request: Request, call_next):
    # Early reject on the declared length; json_body caps what is actually read.
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > _CONFIG.max_body_bytes:
        return _too_large()
    return await call_next(request)


@app.get("/ping", response_class=PlainTextResponse)
def ping(config: VerifierConfig = Depends(get_config)):
    return f"Partner Onboarding Proxy is live in {config.mode} mode"


@app.post("/onboarding")
def onboarding_endpoint(
    body: Any = Depends(json_body),
    config: VerifierConfig = Depends(get_config),
    transport: httpx.BaseTransport | None = Depends(get_crm_transport),
):
    status_code, payload = forward_to_crm("POST", "/newpartner", body, config, transport=transport)
    return JSONResponse(status_code=status_code, content=payload)


@app.post("/verifyWebsite", response_model=WebsiteVerification)
def verify_website_endpoint(
    body: Any = Depends(json_body),
    verifier: WebsiteVerifier = Depends(get_website_verifier),
):
    try:
        req = VerifyWebsiteRequest.model_validate(_as_object(body))
    except ValidationError:
        req = VerifyWebsiteRequest()

    try:
        return verifier.verify(req.website)
    except InvalidInput as e:
        return JSONResponse(status_code=400, content={"error": True, "message": str(e)})
    except Exception as e:
        logger.exception("verifyWebsite error")
        return JSONResponse(status_code=500, content={"error": True, "message": str(e)})


@app.post("/verifyEmail", response_model=EmailVerification)
def verify_email_endpoint(
    body: Any = Depends(json_body),
    verifier: EmailVerifier = Depends(get_email_verifier),
):
    try:
        req = VerifyEmailRequest.model_validate(_as_object(body))
    except ValidationError:
        req = VerifyEmailRequest()

    try:
        return verifier.verify(req.email)
    except InvalidInput as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    except UpstreamUnavailable as e:
        return JSONResponse(status_code=e.status_code, content={"error": f"EmailRep API error: {e.body}"})
    except Exception as e:
        logger.exception("verifyEmail error")
        return JSONResponse(
            status_code=500,
            content={"error": str(e) or "Unknown error", "stack": traceback.format_exc()},
        )


def run() -> None:
    import uvicorn

    logger.info("Partner Onboarding Proxy (%s) running on port %s", _CONFIG.mode, _CONFIG.port)
    uvicorn.run(app, host="0.0.0.0", port=_CONFIG.port)
