import logging
from datetime import timedelta
from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException, Request, status

from repejo_trigger.core.config import get_settings
from repejo_trigger.core.errors import RejectionReason
from repejo_trigger.middleware.body_size import BodySizeLimitMiddleware
from repejo_trigger.schemas.validation import RawRequest, ValidationConfig
from repejo_trigger.services.validator import WebhookValidator

logger = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(
    title="Repejo Webhook Trigger",
    description="Authenticates and normalizes Repejo webhooks for workflow consumers",
    version="1.0.0",
)

app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)

REJECTION_STATUS = {
    RejectionReason.MISSING_SIGNATURE: status.HTTP_401_UNAUTHORIZED,
    RejectionReason.INVALID_SIGNATURE: status.HTTP_401_UNAUTHORIZED,
    RejectionReason.STALE_WEBHOOK: status.HTTP_409_CONFLICT,
    RejectionReason.MALFORMED_TIMESTAMP: status.HTTP_400_BAD_REQUEST,
    RejectionReason.MALFORMED_EVENT_TYPE: status.HTTP_400_BAD_REQUEST,
    RejectionReason.MALFORMED_PAYLOAD: status.HTTP_400_BAD_REQUEST,
}


# ---------- dependency ----------
@lru_cache
def get_validator() -> WebhookValidator:
    settings = get_settings()
    config = ValidationConfig.from_settings(settings)
    logger.info(
        f"Webhook validator configured: signature={config.signature_enabled}, "
        f"events={sorted(e.value for e in config.subscribed_events) or 'all'}"
    )
    return WebhookValidator(config, max_age=timedelta(seconds=settings.max_age_seconds))


@app.get("/health", include_in_schema=False)
async def health():
    settings = get_settings()
    return {
        "status": "ok",
        "settings": {
            "validate_signature": settings.validate_signature,
            "secret_configured": bool(settings.webhook_secret.get_secret_value()),
            "events": settings.subscribed_events,
            "max_age_seconds": settings.max_age_seconds,
        },
    }


# ---------- ingress ----------
@app.post("/webhook")
async def receive_webhook(
    request: Request, validator: WebhookValidator = Depends(get_validator)
):
    raw = await request.body()
    outcome = validator.validate(RawRequest(headers=dict(request.headers), body=raw))

    if not outcome.ok:
        raise HTTPException(
            status_code=REJECTION_STATUS[outcome.reason],
            detail={"reason": outcome.reason.value, "message": outcome.message},
        )

    return {
        "status": "filtered" if outcome.suppressed else "received",
        "events": [event.model_dump() for event in outcome.events],
    }
