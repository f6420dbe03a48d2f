"""
Authentication and normalization of inbound Repejo webhooks.

A request goes through three stages in order: signature, freshness, then
event filtering/normalization. Any stage can reject; rejections come back as
`Rejected` values, never as exceptions.
"""

import json
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from repejo_trigger.core.errors import MalformedPayloadError, WebhookRejected
from repejo_trigger.schemas.validation import (
    Accepted,
    RawRequest,
    Rejected,
    ValidationConfig,
    ValidationOutcome,
)
from repejo_trigger.services import freshness, normalizer, signature

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class WebhookValidator:
    def __init__(
        self,
        config: ValidationConfig,
        clock: Optional[Clock] = None,
        max_age: timedelta = freshness.MAX_AGE,
    ):
        self.config = config
        self.clock = clock or freshness.utc_now
        self.max_age = max_age

    def validate(self, request: RawRequest) -> ValidationOutcome:
        try:
            degraded = self._check_signature(request)
            payload = self._parse(request)
            freshness.check(payload.get("sent_at"), self.clock(), self.max_age)
            envelope = normalizer.build_envelope(payload)
            events = normalizer.normalize(envelope, self.config.subscribed_events)
        except WebhookRejected as exc:
            logger.warning(f"Rejected webhook ({exc.reason.value}): {exc.message}")
            return Rejected(reason=exc.reason, message=exc.message)

        for event in events:
            logger.info(f"Accepted {event.event_type} sent at {event.sent_at}")
        return Accepted(events=events, degraded_signature=degraded)

    def _check_signature(self, request: RawRequest) -> bool:
        """Verify the signature if enabled. Returns True when the body had to be rebuilt."""
        if not self.config.signature_enabled:
            return False

        degraded = False
        raw = request.body
        if raw is None and request.parsed_body is not None:
            logger.warning(
                "Raw body unavailable, verifying signature against re-serialized "
                "JSON; legitimate signatures may fail"
            )
            raw = signature.reserialize_body(request.parsed_body)
            degraded = True
        elif raw is None:
            raw = b""

        signature.verify(
            raw_body=raw,
            header=request.header(signature.SIGNATURE_HEADER),
            secret=self.config.secret.get_secret_value(),
        )
        return degraded

    @staticmethod
    def _parse(request: RawRequest) -> dict[str, Any]:
        payload = request.parsed_body
        if payload is None:
            if not request.body:
                raise MalformedPayloadError("Empty JSON body")
            try:
                payload = json.loads(request.body)
            except (json.JSONDecodeError, UnicodeDecodeError):
                raise MalformedPayloadError("Invalid JSON payload")
        if not isinstance(payload, dict):
            raise MalformedPayloadError("Webhook body must be a JSON object")
        return payload


def validate_webhook(
    request: RawRequest, config: ValidationConfig, clock: Optional[Clock] = None
) -> ValidationOutcome:
    return WebhookValidator(config, clock=clock).validate(request)
