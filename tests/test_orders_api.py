"""
HTTP tests for the create and capture endpoints with a fake processor.

Run:
    pytest tests/test_orders_api.py -q
"""

import pytest

from main import app
from paypal import ProcessorApiError, ProcessorResponse, ProcessorTransportError
from services.orders_service import ErrorPolicy, get_error_policy


def test_create_order_relays_processor_status_and_body(client, processor):
    processor.create_result = ProcessorResponse(201, '{"id":"O-1"}')

    response = client.post("/api/orders", json={"cart": [], "pref": "RETAIN_CONTACT_INFO"})

    assert response.status_code == 201
    assert response.json() == {"id": "O-1"}
    call = processor.create_calls[0]
    assert call["prefer"] == "return=minimal"
    assert call["body"]["payment_source"]["paypal"]["experience_context"]["contact_preference"] == "RETAIN_CONTACT_INFO"
    assert len(call["body"]["purchase_units"][0]["shipping"]["options"]) == 4


def test_create_order_without_contact_sends_no_shipping(client, processor):
    client.post("/api/orders", json={"cart": [], "pref": "NO_CONTACT_INFO"})

    assert "shipping" not in processor.create_calls[0]["body"]["purchase_units"][0]


def test_create_order_failure_returns_generic_error(client, processor):
    processor.create_result = RuntimeError("socket closed")

    response = client.post("/api/orders", json={"cart": [], "pref": "NO_CONTACT_INFO"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to create order."}


def test_create_order_hides_processor_message_when_not_exposed(client, processor):
    app.dependency_overrides[get_error_policy] = lambda: ErrorPolicy(expose_processor_messages=False)
    processor.create_result = ProcessorApiError("Request is not well-formed", 400, name="INVALID_REQUEST")

    response = client.post("/api/orders", json={"cart": [], "pref": "NO_CONTACT_INFO"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to create order."}


def test_capture_relays_processor_response(client, processor):
    response = client.post("/api/orders/O-1/capture")

    assert response.status_code == 201
    assert response.json() == {"id": "O-1", "status": "COMPLETED"}
    assert processor.capture_calls[0]["order_id"] == "O-1"
    assert processor.capture_calls[0]["prefer"] == "return=minimal"


def test_capture_surfaces_processor_api_message(client, processor):
    processor.capture_results = [ProcessorApiError("Order already captured", 422)]

    response = client.post("/api/orders/O-1/capture")

    assert response.status_code == 500
    assert response.json() == {"error": "Order already captured"}


def test_capture_unknown_failure_uses_generic_message(client, processor):
    processor.capture_results = [ProcessorTransportError("connect timeout")]

    response = client.post("/api/orders/O-1/capture")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to capture order."}


def test_second_capture_fails_cleanly(client, processor):
    processor.capture_results = [
        ProcessorResponse(201, '{"id":"O-9","status":"COMPLETED"}'),
        ProcessorApiError("Order already captured", 422, name="UNPROCESSABLE_ENTITY"),
    ]

    first = client.post("/api/orders/O-9/capture")
    second = client.post("/api/orders/O-9/capture")

    assert first.status_code == 201
    assert second.status_code == 500
    assert second.json() == {"error": "Order already captured"}
    assert len(processor.capture_calls) == 2


@pytest.mark.parametrize(
    "body",
    [
        {"cart": [], "pref": "SHARE_EVERYTHING"},
        {"cart": []},
    ],
)
def test_invalid_requests_never_reach_processor(client, processor, body):
    response = client.post("/api/orders", json=body)

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request."
    assert processor.create_calls == []


def test_idempotency_key_is_forwarded(client, processor):
    headers = {"Idempotency-Key": "cart-42-attempt"}

    client.post("/api/orders", json={"cart": [], "pref": "NO_CONTACT_INFO"}, headers=headers)
    client.post("/api/orders/O-1/capture", headers=headers)

    assert processor.create_calls[0]["request_id"] == "cart-42-attempt"
    assert processor.capture_calls[0]["request_id"] == "cart-42-attempt"


def test_request_id_generated_when_missing(client, processor):
    client.post("/api/orders", json={"cart": [], "pref": "NO_CONTACT_INFO"})
    client.post("/api/orders", json={"cart": [], "pref": "NO_CONTACT_INFO"})

    first, second = (call["request_id"] for call in processor.create_calls)
    assert first and second and first != second


@pytest.mark.parametrize(
    "error, status_code, code",
    [
        (ProcessorApiError("Order already captured", 422), 422, "processor_rejected"),
        (ProcessorApiError("Client Authentication failed", 401), 502, "processor_auth_failed"),
        (ProcessorApiError("Internal Service Error", 500), 502, "processor_unavailable"),
        (ProcessorTransportError("connect timeout"), 504, "processor_unreachable"),
        (RuntimeError("boom"), 500, "internal_error"),
    ],
)
def test_classified_errors(client, processor, error, status_code, code):
    app.dependency_overrides[get_error_policy] = lambda: ErrorPolicy(classify_status_codes=True)
    processor.capture_results = [error]

    response = client.post("/api/orders/O-1/capture")

    assert response.status_code == status_code
    assert response.json()["code"] == code


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.parametrize("order_id", ["O-1%3Fx%3D1", "O-1%23", "O-1%20x"])
def test_capture_rejects_malformed_order_id(client, processor, order_id):
    response = client.post(f"/api/orders/{order_id}/capture")

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request."
    assert processor.capture_calls == []


def test_create_order_masks_processor_auth_failure(client, processor):
    processor.create_result = ProcessorApiError("Client Authentication failed", 401, name="invalid_client")

    response = client.post("/api/orders", json={"cart": [], "pref": "NO_CONTACT_INFO"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to create order."}


def test_create_order_surfaces_processor_rejection_by_default(client, processor):
    processor.create_result = ProcessorApiError("Request is not well-formed", 400, name="INVALID_REQUEST")

    response = client.post("/api/orders", json={"cart": [], "pref": "NO_CONTACT_INFO"})

    assert response.status_code == 500
    assert response.json() == {"error": "Request is not well-formed"}


def test_capture_masks_processor_permission_failure(client, processor):
    processor.capture_results = [ProcessorApiError("Authorization failed due to insufficient permissions", 403)]

    response = client.post("/api/orders/O-1/capture")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to capture order."}
