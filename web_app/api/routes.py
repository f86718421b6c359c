"""API routes implementation."""

from typing import Optional

from fastapi import APIRouter, Request, status

from .schemas import (
    CreateLinkRequest,
    CreateLinkResponse,
    LinkLookupResponse,
    VerifyPinRequest,
    VerifyPinResponse,
    HealthResponse,
    ErrorResponse,
)
from linkvault.common.url_builder import build_short_url
from linkvault.common.headers import build_base_url
from linkvault.errors import LinkNotFoundError, RateLimitError
from linkvault.shortcode import ShortCodeGenerator
from linkvault.storage.models import utc_now

router = APIRouter()


def _enforce_rate_limit(request: Request) -> None:
    """Raise RateLimitError if the calling client is over its budget."""
    rate_limiter = request.app.state.rate_limiter
    if not rate_limiter.check(request.state.client_id):
        raise RateLimitError()


def _check_short_code(short_code: str) -> None:
    """Reject codes that could never have been generated without touching the store."""
    if not ShortCodeGenerator.is_valid_format(short_code):
        raise LinkNotFoundError(short_code)


@router.post(
    "/links",
    response_model=CreateLinkResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Missing or invalid long_url or PIN"},
        429: {"model": ErrorResponse, "description": "Rate limited"},
    },
    summary="Create short link",
    description="Shorten a URL, optionally protected by a 4-digit PIN. Links expire after 30 days.",
)
async def create_link(request: Request, body: Optional[CreateLinkRequest] = None):
    """Create a short link."""
    _enforce_rate_limit(request)

    store = request.app.state.store
    config = request.app.state.config
    body = body or CreateLinkRequest()

    record = await store.create(long_url=body.long_url, pin=body.pin)

    base_url = build_base_url(
        headers=request.headers,
        fallback_base_url=config.base_url,
        request_scheme=request.url.scheme,
        request_host=request.headers.get("host"),
    )

    return CreateLinkResponse(
        id=record.id,
        short_url=build_short_url(record.id, base_url, config.path_prefix),
        long_url=record.long_url,
        created=record.created,
        expires=record.expires,
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the service is up and how many links it holds.",
)
async def health_check(request: Request):
    """Health check endpoint for load balancers and monitoring."""
    store = request.app.state.store

    return HealthResponse(
        status="healthy",
        links=await store.count(),
        timestamp=utc_now(),
    )


@router.get(
    "/{short_code}",
    response_model=LinkLookupResponse,
    response_model_exclude_none=True,
    responses={
        404: {"model": ErrorResponse, "description": "Link not found or expired"},
    },
    summary="Look up short link",
    description=(
        "Tell the caller whether the link needs a PIN. Links without a PIN "
        "resolve directly and include long_url."
    ),
)
async def lookup_link(request: Request, short_code: str):
    """Look up a short link."""
    _check_short_code(short_code)

    store = request.app.state.store

    description = await store.describe(short_code)

    return LinkLookupResponse(
        requires_pin=description.requires_pin,
        id=description.id,
        long_url=description.long_url,
    )


@router.post(
    "/{short_code}/verify",
    response_model=VerifyPinResponse,
    responses={
        400: {"model": ErrorResponse, "description": "PIN missing or incorrect"},
        404: {"model": ErrorResponse, "description": "Link not found or expired"},
        429: {"model": ErrorResponse, "description": "Rate limited"},
    },
    summary="Verify PIN",
    description="Check a link's PIN and release its destination URL.",
)
async def verify_pin(request: Request, short_code: str, body: Optional[VerifyPinRequest] = None):
    """Verify a PIN and return the long URL."""
    _enforce_rate_limit(request)

    _check_short_code(short_code)

    store = request.app.state.store
    body = body or VerifyPinRequest()

    long_url = await store.verify(short_code, body.pin)

    return VerifyPinResponse(long_url=long_url)
