import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from repejo_trigger.core.errors import MalformedTimestampError, StaleWebhookError

logger = logging.getLogger(__name__)

# Replay protection window
MAX_AGE = timedelta(minutes=5)


def utc_now() -> datetime:
    return datetime.now(UTC)


def parse_sent_at(sent_at: Any) -> datetime:
    if not isinstance(sent_at, str) or not sent_at.strip():
        raise MalformedTimestampError("Missing or non-string sent_at")
    try:
        ts = datetime.fromisoformat(sent_at.strip())
    except ValueError:
        raise MalformedTimestampError(f"Unparsable sent_at: {sent_at!r}")
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    return ts


def check(sent_at: Any, now: datetime, max_age: timedelta = MAX_AGE) -> None:
    """
    Raise StaleWebhookError if `sent_at` is older than `max_age`.

    Only the age is bounded; timestamps ahead of `now` are accepted.
    """
    age = now - parse_sent_at(sent_at)
    if age > max_age:
        logger.warning(
            f"Webhook sent_at outside tolerance: {age.total_seconds():.0f}s > "
            f"{max_age.total_seconds():.0f}s"
        )
        raise StaleWebhookError("Webhook is too old (replay attack protection)")
