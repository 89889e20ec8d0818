from fastapi import APIRouter, Depends, Header, Path
from fastapi.responses import JSONResponse

from paypal import ORDER_ID_PATTERN, PayPalClient, get_paypal_client
from schemas import CreateOrderRequest
from services.checkout.pricing import PricingService
from services.orders_service import (
    ErrorPolicy,
    capture_order,
    create_order,
    get_error_policy,
    get_pricing_service,
    new_request_id,
)

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("")
async def create_order_endpoint(
    payload: CreateOrderRequest,
    idempotency_key: str | None = Header(default=None),
    client: PayPalClient = Depends(get_paypal_client),
    policy: ErrorPolicy = Depends(get_error_policy),
    pricing: PricingService = Depends(get_pricing_service),
) -> JSONResponse:
    result = await create_order(
        client,
        payload,
        request_id=new_request_id(idempotency_key),
        policy=policy,
        pricing=pricing,
    )
    return JSONResponse(status_code=result.status_code, content=result.body)


@router.post("/{order_id}/capture")
async def capture_order_endpoint(
    order_id: str = Path(..., pattern=ORDER_ID_PATTERN),
    idempotency_key: str | None = Header(default=None),
    client: PayPalClient = Depends(get_paypal_client),
    policy: ErrorPolicy = Depends(get_error_policy),
) -> JSONResponse:
    result = await capture_order(
        client,
        order_id,
        request_id=new_request_id(idempotency_key),
        policy=policy,
    )
    return JSONResponse(status_code=result.status_code, content=result.body)
