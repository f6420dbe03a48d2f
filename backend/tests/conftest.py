import json
import logging
import os
from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

# Set test environment variables
os.environ.update(
    {
        "WEBHOOK_SECRET": "whsec_test",
        "VALIDATE_SIGNATURE": "true",
        "EVENTS": "",
        "MAX_AGE_SECONDS": "300",
    }
)

# Import app modules after setting environment variables
from repejo_trigger.core.config import get_settings
from repejo_trigger.main import app, get_validator
from repejo_trigger.schemas.validation import ValidationConfig
from repejo_trigger.services.signature import compute_signature
from repejo_trigger.services.validator import WebhookValidator

logger = logging.getLogger(__name__)

SECRET = "whsec_test"
NOW = datetime(2026, 3, 14, 12, 0, 0, tzinfo=UTC)

PAYER = {"id": "pay_123", "name": "Greta Donor", "status": "active"}
SUBSCRIPTION = {
    "id": "sub_456",
    "payer_id": "pay_123",
    "amount": 200,
    "receivable_date": "last_bank_date",
    "payment_method_type": "autogiro_external",
    "status": "active",
    "reference": "REF-1",
    "source": "repejo",
    "index_adjustment_consent": False,
}
RECEIVABLE = {
    "id": "rcv_789",
    "subscription": "sub_456",
    "amount": 200,
    "status": "paid",
    "type": "recurring",
    "payment_method": "swish_recurring",
    "receivable_date": "2026-03-01",
    "reference": "REF-1",
}
DATA_BY_ENTITY = {"payer": PAYER, "subscription": SUBSCRIPTION, "receivable": RECEIVABLE}


def make_payload(event_type="payer.created", sent_at=NOW, data=None) -> dict:
    if data is None:
        data = DATA_BY_ENTITY[event_type.split(".")[0]]
    if isinstance(sent_at, datetime):
        sent_at = sent_at.isoformat()
    return {
        "sent_at": sent_at,
        "event_type": event_type,
        "data": data,
    }


def make_body(payload: dict) -> bytes:
    return json.dumps(payload, indent=2).encode()


def signed_headers(body: bytes, secret: str = SECRET) -> dict:
    return {
        "repejo-signature": f"sha256={compute_signature(body, secret)}",
        "Content-Type": "application/json",
    }


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    get_validator.cache_clear()
    yield
    get_settings.cache_clear()
    get_validator.cache_clear()


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def config() -> ValidationConfig:
    return ValidationConfig.from_parameters(webhook_secret=SECRET)


@pytest.fixture
def validator(config, clock) -> WebhookValidator:
    return WebhookValidator(config, clock=clock)


@pytest.fixture
def client(validator):
    app.dependency_overrides[get_validator] = lambda: validator
    with TestClient(app) as test_client:
        logger.info("Test client created")
        yield test_client
    app.dependency_overrides.clear()
