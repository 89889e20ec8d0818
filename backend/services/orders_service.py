"""
Create and capture orchestration between the HTTP layer and the processor.

Both operations share one ErrorPolicy:
- expose_processor_messages (default on): a ProcessorApiError surfaces the
  processor's message to the caller, for create as well as capture. With it
  on, create-order answers "Failed to create order." only for failures that
  are not processor API errors. Processor auth failures (401/403) are always
  masked with the generic message.
- classify_status_codes (default off): every failure is HTTP 500 unless
  enabled, then rejections, auth, outage and transport failures get distinct
  status codes and an error code.
"""

import json
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from config import settings
from paypal import (
    PREFER_MINIMAL,
    PayPalClient,
    ProcessorApiError,
    ProcessorResponse,
    ProcessorTransportError,
)
from schemas import CreateOrderRequest
from services.checkout.pricing import PricingService, StaticCatalogPricing
from services.checkout.shipping_options import load_shipping_options
from services.order_payload import PayloadValidationError, build_order_request

logger = logging.getLogger("checkout-broker")

CREATE_FAILED_MESSAGE = "Failed to create order."
CAPTURE_FAILED_MESSAGE = "Failed to capture order."
# Credential failures describe our own PayPal account, never the caller's request.
AUTH_FAILURE_STATUSES = (401, 403)


@dataclass(frozen=True)
class ErrorPolicy:
    expose_processor_messages: bool = True
    classify_status_codes: bool = False


@dataclass
class ProcessorResult:
    status_code: int
    body: Dict[str, Any]


class CheckoutError(Exception):
    def __init__(self, status_code: int, message: str, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.code = code


_shipping_options: Optional[List[Dict[str, Any]]] = None


def get_error_policy() -> ErrorPolicy:
    return ErrorPolicy(
        expose_processor_messages=settings.expose_processor_errors,
        classify_status_codes=settings.classify_processor_errors,
    )


def get_pricing_service() -> PricingService:
    return StaticCatalogPricing()


def get_shipping_options() -> List[Dict[str, Any]]:
    global _shipping_options
    if _shipping_options is None:
        _shipping_options = load_shipping_options(settings.shipping_options_file)
    return _shipping_options


def new_request_id(idempotency_key: Optional[str]) -> str:
    key = (idempotency_key or "").strip()
    return key or str(uuid.uuid4())


def _classify(exc: Exception) -> tuple[int, str]:
    if isinstance(exc, PayloadValidationError):
        return 400, "validation_error"
    if isinstance(exc, ProcessorApiError):
        if exc.status_code in AUTH_FAILURE_STATUSES:
            return 502, "processor_auth_failed"
        if 400 <= exc.status_code < 500:
            return 422, "processor_rejected"
        return 502, "processor_unavailable"
    if isinstance(exc, ProcessorTransportError):
        return 504, "processor_unreachable"
    return 500, "internal_error"


def to_checkout_error(exc: Exception, fallback_message: str, policy: ErrorPolicy) -> CheckoutError:
    message = fallback_message
    if (
        policy.expose_processor_messages
        and isinstance(exc, ProcessorApiError)
        and exc.status_code not in AUTH_FAILURE_STATUSES
        and exc.message
    ):
        message = exc.message
    if not policy.classify_status_codes:
        return CheckoutError(500, message)
    status_code, code = _classify(exc)
    if isinstance(exc, PayloadValidationError):
        message = str(exc)
    return CheckoutError(status_code, message, code)


def _to_result(response: ProcessorResponse) -> ProcessorResult:
    body = json.loads(response.body) if response.body else {}
    return ProcessorResult(status_code=response.status_code, body=body)


async def create_order(
    client: PayPalClient,
    payload: CreateOrderRequest,
    *,
    request_id: str,
    policy: ErrorPolicy,
    pricing: Optional[PricingService] = None,
) -> ProcessorResult:
    logger.info("create_order cart=%s pref=%s request_id=%s", payload.cart, payload.pref.value, request_id)
    try:
        order_request = build_order_request(
            payload.cart,
            payload.pref,
            currency=settings.currency,
            pricing=pricing,
            shipping_options=get_shipping_options(),
        )
        if order_request.purchase_units[0].shipping is None:
            logger.info("create_order request_id=%s no contact info to pass", request_id)
        response = await client.create_order(
            order_request.to_payload(),
            prefer=PREFER_MINIMAL,
            request_id=request_id,
        )
        result = _to_result(response)
    except Exception as exc:
        logger.exception("Failed to create order request_id=%s", request_id)
        raise to_checkout_error(exc, CREATE_FAILED_MESSAGE, policy) from exc
    logger.info("create_order status=%s response=%s", result.status_code, result.body)
    return result


async def capture_order(
    client: PayPalClient,
    order_id: str,
    *,
    request_id: str,
    policy: ErrorPolicy,
) -> ProcessorResult:
    try:
        response = await client.capture_order(
            order_id,
            prefer=PREFER_MINIMAL,
            request_id=request_id,
        )
        result = _to_result(response)
    except Exception as exc:
        logger.exception("Capture error order=%s request_id=%s", order_id, request_id)
        raise to_checkout_error(exc, CAPTURE_FAILED_MESSAGE, policy) from exc
    logger.info("capture_order order=%s status=%s", order_id, result.status_code)
    return result
