import logging
from typing import Any, Collection

from pydantic import ValidationError

from repejo_trigger.core.errors import MalformedEventTypeError, MalformedPayloadError
from repejo_trigger.schemas.events import EventType, NormalizedEvent, WebhookEnvelope

logger = logging.getLogger(__name__)


def split_event_type(event_type: Any) -> tuple[str, str]:
    """Split `<entity>.<action>`; anything else is MalformedEventTypeError."""
    if not isinstance(event_type, str):
        raise MalformedEventTypeError("Missing or non-string event_type")
    parts = event_type.split(".")
    if len(parts) != 2 or not all(parts):
        raise MalformedEventTypeError(
            f"event_type must be <entity>.<action>, got {event_type!r}"
        )
    return parts[0], parts[1]


def build_envelope(payload: dict[str, Any]) -> WebhookEnvelope:
    """Check event_type and the presence of `data`, without touching the entity shape."""
    raw_type = payload.get("event_type")
    entity_type, action = split_event_type(raw_type)
    try:
        event_type = EventType(raw_type)
    except ValueError:
        raise MalformedEventTypeError(f"Unsupported event_type: {raw_type!r}")

    data = payload.get("data")
    if not isinstance(data, dict):
        raise MalformedPayloadError("Webhook data must be a JSON object")
    return WebhookEnvelope(
        sent_at=payload["sent_at"],
        event_type=event_type,
        entity_type=entity_type,
        action=action,
        data=data,
    )


def is_subscribed(event_type: EventType, subscribed: Collection[EventType]) -> bool:
    return not subscribed or event_type in subscribed


def normalize(
    envelope: WebhookEnvelope, subscribed: Collection[EventType]
) -> list[NormalizedEvent]:
    """Zero events when filtered out, otherwise exactly one."""
    if not is_subscribed(envelope.event_type, subscribed):
        logger.info(f"Filtered {envelope.event_type.value} (not subscribed)")
        return []

    try:
        envelope.entity()
    except ValidationError as ve:
        raise MalformedPayloadError(
            f"{envelope.entity_type} payload does not match schema: "
            f"{ve.error_count()} error(s)"
        )

    return [
        NormalizedEvent(
            event_type=envelope.event_type.value,
            sent_at=envelope.sent_at,
            data=envelope.data,
            entity_type=envelope.entity_type,
            action=envelope.action,
        )
    ]
