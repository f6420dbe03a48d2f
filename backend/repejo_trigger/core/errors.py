import enum


class RejectionReason(str, enum.Enum):
    MISSING_SIGNATURE = "MissingSignature"
    INVALID_SIGNATURE = "InvalidSignature"
    MALFORMED_TIMESTAMP = "MalformedTimestamp"
    STALE_WEBHOOK = "StaleWebhook"
    MALFORMED_EVENT_TYPE = "MalformedEventType"
    MALFORMED_PAYLOAD = "MalformedPayload"


class WebhookRejected(Exception):
    """Base for every terminal rejection of an inbound webhook."""

    reason: RejectionReason

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingSignatureError(WebhookRejected):
    reason = RejectionReason.MISSING_SIGNATURE


class InvalidSignatureError(WebhookRejected):
    reason = RejectionReason.INVALID_SIGNATURE


class MalformedTimestampError(WebhookRejected):
    reason = RejectionReason.MALFORMED_TIMESTAMP


class StaleWebhookError(WebhookRejected):
    reason = RejectionReason.STALE_WEBHOOK


class MalformedEventTypeError(WebhookRejected):
    reason = RejectionReason.MALFORMED_EVENT_TYPE


class MalformedPayloadError(WebhookRejected):
    reason = RejectionReason.MALFORMED_PAYLOAD
