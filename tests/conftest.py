"""Pytest fixtures for the checkout broker."""

import os

os.environ.setdefault("PAYPAL_CLIENT_ID", "test-client-id")
os.environ.setdefault("PAYPAL_CLIENT_SECRET", "test-client-secret")
os.environ.setdefault("STATIC_DIR", os.path.join(os.path.dirname(__file__), "no-static"))

import json  # noqa: E402
from typing import Any, Dict, List, Optional  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from main import app  # noqa: E402
from paypal import ProcessorResponse, get_paypal_client  # noqa: E402
from services.orders_service import ErrorPolicy, get_error_policy  # noqa: E402


class FakeProcessor:
    """Records calls and answers with queued responses or exceptions."""

    def __init__(self) -> None:
        self.create_calls: List[Dict[str, Any]] = []
        self.capture_calls: List[Dict[str, Any]] = []
        self.create_result: Any = ProcessorResponse(201, json.dumps({"id": "O-1", "status": "PAYER_ACTION_REQUIRED"}))
        self.capture_results: List[Any] = [ProcessorResponse(201, json.dumps({"id": "O-1", "status": "COMPLETED"}))]

    async def create_order(self, order_request, *, prefer="return=minimal", request_id: Optional[str] = None):
        self.create_calls.append({"body": order_request, "prefer": prefer, "request_id": request_id})
        if isinstance(self.create_result, Exception):
            raise self.create_result
        return self.create_result

    async def capture_order(self, order_id, *, prefer="return=minimal", request_id: Optional[str] = None):
        self.capture_calls.append({"order_id": order_id, "prefer": prefer, "request_id": request_id})
        result = self.capture_results.pop(0) if len(self.capture_results) > 1 else self.capture_results[0]
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def processor():
    return FakeProcessor()


@pytest.fixture
def policy():
    return ErrorPolicy()


@pytest.fixture
def client(processor, policy):
    app.dependency_overrides[get_paypal_client] = lambda: processor
    app.dependency_overrides[get_error_policy] = lambda: policy
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
