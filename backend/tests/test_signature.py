import hashlib
import hmac
import inspect

import pytest

from repejo_trigger.core.errors import InvalidSignatureError, MissingSignatureError
from repejo_trigger.services import signature
from repejo_trigger.services.signature import (
    compute_signature,
    normalize_signature,
    reserialize_body,
    verify,
)

SECRET = "whsec_test"
BODY = b'{"sent_at": "2026-03-14T12:00:00Z", "event_type": "payer.created", "data": {}}'


def test_compute_signature_is_lowercase_hex_hmac():
    expected = hmac.new(SECRET.encode(), BODY, hashlib.sha256).hexdigest()
    assert compute_signature(BODY, SECRET) == expected
    assert compute_signature(BODY.decode(), SECRET) == expected


@pytest.mark.parametrize(
    "decorate",
    [
        lambda s: s,
        lambda s: f"sha256={s}",
        lambda s: s.upper(),
        lambda s: f"SHA256={s.upper()}",
        lambda s: f"  sha256={s}\n",
        lambda s: f"\t{s.upper()} ",
    ],
)
def test_valid_signature_variants_pass(decorate):
    header = decorate(compute_signature(BODY, SECRET))
    verify(BODY, header, SECRET)


def test_normalize_signature_strips_single_prefix():
    assert normalize_signature(" SHA256=ABCDEF ") == "abcdef"
    assert normalize_signature("sha256=sha256=ab") == "sha256=ab"


@pytest.mark.parametrize("byte_index", [0, 10, len(BODY) - 1])
@pytest.mark.parametrize("bit", [0, 3, 7])
def test_single_bit_mutation_fails(byte_index, bit):
    header = compute_signature(BODY, SECRET)
    mutated = bytearray(BODY)
    mutated[byte_index] ^= 1 << bit
    with pytest.raises(InvalidSignatureError):
        verify(bytes(mutated), header, SECRET)


def test_wrong_secret_fails():
    header = compute_signature(BODY, "whsec_other")
    with pytest.raises(InvalidSignatureError):
        verify(BODY, header, SECRET)


@pytest.mark.parametrize("header", [None, ""])
def test_missing_signature(header):
    with pytest.raises(MissingSignatureError):
        verify(BODY, header, SECRET)


@pytest.mark.parametrize(
    "header",
    [
        "invalid_signature",
        "sha256=",
        "abc",  # odd length
        "00" * 31,  # one byte short
        "00" * 33,  # one byte long
    ],
)
def test_malformed_or_wrong_length_signature_fails_closed(header):
    with pytest.raises(InvalidSignatureError):
        verify(BODY, header, SECRET)


def test_truncated_prefix_of_valid_signature_fails():
    # A matching prefix must not be enough
    header = compute_signature(BODY, SECRET)[:32]
    with pytest.raises(InvalidSignatureError):
        verify(BODY, header, SECRET)


def test_comparison_is_timing_safe(monkeypatch):
    calls = []
    real_compare = hmac.compare_digest

    def spy(a, b):
        calls.append((len(a), len(b)))
        return real_compare(a, b)

    monkeypatch.setattr(signature.hmac, "compare_digest", spy)
    expected = compute_signature(BODY, SECRET)
    wrong_tail = expected[:-2] + ("00" if expected[-2:] != "00" else "11")

    verify(BODY, expected, SECRET)
    with pytest.raises(InvalidSignatureError):
        verify(BODY, wrong_tail, SECRET)

    assert calls == [(32, 32), (32, 32)]
    assert "==" not in inspect.getsource(signature.verify)


def test_reserialize_body_is_compact_and_order_preserving():
    parsed = {"sent_at": "x", "event_type": "payer.created", "data": {"name": "Åsa"}}
    assert (
        reserialize_body(parsed)
        == '{"sent_at":"x","event_type":"payer.created","data":{"name":"Åsa"}}'.encode()
    )
