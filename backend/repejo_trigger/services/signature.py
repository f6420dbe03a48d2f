import hashlib
import hmac
import json
import logging
from typing import Any, Optional, Union

from repejo_trigger.core.errors import InvalidSignatureError, MissingSignatureError

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "repejo-signature"
SIGNATURE_PREFIX = "sha256="


def compute_signature(body: Union[bytes, str], secret: str) -> str:
    """Lowercase hex HMAC-SHA256 of `body` keyed with `secret`."""
    if isinstance(body, str):
        body = body.encode("utf-8")
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def normalize_signature(header: str) -> str:
    sig = header.strip().lower()
    if sig.startswith(SIGNATURE_PREFIX):
        sig = sig[len(SIGNATURE_PREFIX) :]
    return sig


def reserialize_body(parsed_body: Any) -> bytes:
    """
    Rebuild a body from already-parsed JSON.

    Lossy: whitespace, number formatting and escaping of the original request
    are gone, so a legitimate signature may no longer match.
    """
    return json.dumps(parsed_body, separators=(",", ":"), ensure_ascii=False).encode(
        "utf-8"
    )


def verify(raw_body: Union[bytes, str], header: Optional[str], secret: str) -> None:
    """
    Raise MissingSignatureError or InvalidSignatureError unless `header`
    carries the HMAC-SHA256 of `raw_body` under `secret`.
    """
    if not header:
        raise MissingSignatureError("Missing Repejo-Signature header")

    expected = bytes.fromhex(compute_signature(raw_body, secret))
    try:
        provided = bytes.fromhex(normalize_signature(header))
    except ValueError:
        raise InvalidSignatureError("Invalid webhook signature")

    if len(provided) != len(expected) or not hmac.compare_digest(provided, expected):
        raise InvalidSignatureError("Invalid webhook signature")
    logger.debug("Repejo signature verified")
