from __future__ import annotations

import asyncio
import json
import logging
import re
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from config import settings

logger = logging.getLogger("checkout-broker")

PREFER_MINIMAL = "return=minimal"
TOKEN_EXPIRY_MARGIN_SECONDS = 60
ORDER_ID_PATTERN = r"^[A-Za-z0-9-]+$"


@dataclass
class PayPalCredentials:
    client_id: str
    client_secret: str
    base_url: str


@dataclass
class ProcessorResponse:
    status_code: int
    body: str


class ProcessorError(Exception):
    """Base class for failures talking to the payment processor."""


class ProcessorTransportError(ProcessorError):
    """The processor could not be reached or did not answer."""


class ProcessorApiError(ProcessorError):
    """The processor answered with an error status."""

    def __init__(
        self,
        message: str,
        status_code: int,
        *,
        name: Optional[str] = None,
        details: Optional[List[Dict[str, Any]]] = None,
        debug_id: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.name = name
        self.details = details or []
        self.debug_id = debug_id


@dataclass
class _AccessToken:
    value: str
    expires_at: float = field(default=0.0)

    def is_fresh(self) -> bool:
        return time.monotonic() < self.expires_at - TOKEN_EXPIRY_MARGIN_SECONDS


def _order_path_segment(order_id: str) -> str:
    if not re.fullmatch(ORDER_ID_PATTERN, order_id or ""):
        raise ValueError(f"Invalid order id: {order_id!r}")
    return quote(order_id, safe="")


def _parse_error(response: httpx.Response) -> ProcessorApiError:
    try:
        data = response.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}
    message = (
        data.get("message")
        or data.get("error_description")
        or data.get("error")
        or response.reason_phrase
        or f"Processor returned HTTP {response.status_code}"
    )
    details = data.get("details") if isinstance(data.get("details"), list) else None
    return ProcessorApiError(
        str(message),
        response.status_code,
        name=data.get("name") or data.get("error"),
        details=details,
        debug_id=data.get("debug_id"),
    )


class PayPalClient:
    """Thin async client for the Orders v2 API.

    Safe to share between concurrent requests: the only mutable state is the
    cached access token, refreshed under a lock.
    """

    def __init__(
        self,
        creds: PayPalCredentials,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._creds = creds
        self._http = httpx.AsyncClient(
            base_url=creds.base_url,
            timeout=timeout,
            transport=transport,
        )
        self._token: Optional[_AccessToken] = None
        self._token_lock = asyncio.Lock()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _fetch_token(self) -> _AccessToken:
        try:
            response = await self._http.post(
                "/v1/oauth2/token",
                data={"grant_type": "client_credentials"},
                auth=(self._creds.client_id, self._creds.client_secret),
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as exc:
            raise ProcessorTransportError(f"Token request failed: {exc}") from exc
        if response.status_code >= 400:
            raise _parse_error(response)
        data = response.json()
        expires_in = float(data.get("expires_in") or 0)
        return _AccessToken(
            value=data["access_token"],
            expires_at=time.monotonic() + expires_in,
        )

    async def _access_token(self) -> str:
        async with self._token_lock:
            if self._token is None or not self._token.is_fresh():
                self._token = await self._fetch_token()
                logger.debug("Fetched processor access token")
            return self._token.value

    async def _post(
        self,
        path: str,
        payload: Optional[Dict[str, Any]],
        *,
        prefer: str,
        request_id: Optional[str],
    ) -> ProcessorResponse:
        token = await self._access_token()
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Prefer": prefer,
        }
        if request_id:
            headers["PayPal-Request-Id"] = request_id
        content = json.dumps(payload) if payload is not None else None
        try:
            response = await self._http.post(path, content=content, headers=headers)
        except httpx.HTTPError as exc:
            raise ProcessorTransportError(f"POST {path} failed: {exc}") from exc
        if response.status_code >= 400:
            error = _parse_error(response)
            logger.warning(
                "Processor rejected POST %s status=%s name=%s debug_id=%s",
                path,
                response.status_code,
                error.name,
                error.debug_id,
            )
            raise error
        return ProcessorResponse(status_code=response.status_code, body=response.text)

    async def create_order(
        self,
        order_request: Dict[str, Any],
        *,
        prefer: str = PREFER_MINIMAL,
        request_id: Optional[str] = None,
    ) -> ProcessorResponse:
        return await self._post(
            "/v2/checkout/orders",
            order_request,
            prefer=prefer,
            request_id=request_id,
        )

    async def capture_order(
        self,
        order_id: str,
        *,
        prefer: str = PREFER_MINIMAL,
        request_id: Optional[str] = None,
    ) -> ProcessorResponse:
        return await self._post(
            f"/v2/checkout/orders/{_order_path_segment(order_id)}/capture",
            None,
            prefer=prefer,
            request_id=request_id,
        )


def create_paypal_client(creds: PayPalCredentials, timeout: float = 30.0) -> PayPalClient:
    return PayPalClient(creds, timeout=timeout)


_client: Optional[PayPalClient] = None


def get_paypal_client() -> PayPalClient:
    global _client
    if _client is None:
        _client = create_paypal_client(
            PayPalCredentials(
                client_id=settings.paypal_client_id,
                client_secret=settings.paypal_client_secret,
                base_url=settings.paypal_base_url,
            ),
            timeout=settings.paypal_timeout_seconds,
        )
    return _client


async def close_paypal_client() -> None:
    global _client
    if _client is None:
        return
    await _client.aclose()
    _client = None
