#!/usr/bin/env python3
"""Print the repejo-signature header value for a payload, for manual testing."""

import json
import sys

from repejo_trigger.services.signature import SIGNATURE_PREFIX, compute_signature


def make_signature(secret: str, payload: str) -> str:
    return f"{SIGNATURE_PREFIX}{compute_signature(payload, secret)}"


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 2:
        print("Usage: python -m repejo_trigger.sign <secret> <payload>")
        return 1

    secret, payload = args

    # Validate payload is valid JSON
    try:
        json.loads(payload)
    except json.JSONDecodeError:
        print("Error: Payload must be valid JSON", file=sys.stderr)
        return 1

    print(make_signature(secret, payload))
    return 0


if __name__ == "__main__":
    sys.exit(main())
