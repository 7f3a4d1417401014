"""
License key generation and signed license assertions.

Key format: {PREFIX}-{XXXXXXXX}-{XXXXXXXX}
- configurable prefix (default "GG")
- 2 groups of 8 uppercase hex chars, 32 bits of CSPRNG entropy each

Assertion: the compact JSON of {license_key, status, expires_at, issued_at}
plus an HMAC-SHA256 hex signature over those exact bytes. Agents holding the
shared secret check the signature against the string they received, never a
re-serialization of it.
"""

import hashlib
import hmac
import json
import secrets
import time
from dataclasses import asdict, dataclass
from typing import Any, Optional

GROUP_BYTES = 4
GROUPS = 2


def generate_license_key(prefix: str = "GG") -> str:
    """Generate a new license key such as ``GG-1A2B3C4D-5E6F7081``."""
    groups = [secrets.token_hex(GROUP_BYTES).upper() for _ in range(GROUPS)]
    return "-".join([prefix.upper(), *groups])


@dataclass
class LicenseAssertion:
    """The license state signed into a verify response."""

    license_key: str
    status: str
    expires_at: Optional[str]  # ISO format, None = permanent
    issued_at: int  # epoch milliseconds

    @classmethod
    def issue(cls, license_key: str, status: str, expires_at: Optional[str]) -> "LicenseAssertion":
        return cls(
            license_key=license_key,
            status=status,
            expires_at=expires_at,
            issued_at=int(time.time() * 1000),
        )

    def serialize(self) -> str:
        # Field order is fixed by the dataclass; compact separators, no sorting.
        return json.dumps(asdict(self), separators=(",", ":"))


def sign_payload(payload: str, secret: str) -> str:
    """HMAC-SHA256 hex digest of a serialized assertion."""
    return hmac.new(secret.encode(), payload.encode(), hashlib.sha256).hexdigest()


def sign_assertion(assertion: LicenseAssertion, secret: str) -> dict[str, Any]:
    """Serialize and sign an assertion.

    Returns:
        Dict with 'payload' (the exact signed string) and 'signature'
    """
    payload = assertion.serialize()
    return {"payload": payload, "signature": sign_payload(payload, secret)}


def verify_assertion(payload: str | bytes, signature: str, secret: str) -> bool:
    """Check a signature against the payload bytes exactly as received."""
    if isinstance(payload, bytes):
        payload = payload.decode()
    if not isinstance(signature, str):
        return False
    expected = sign_payload(payload, secret)
    return hmac.compare_digest(signature, expected)


def decode_assertion(payload: str) -> LicenseAssertion | None:
    """Parse a payload string back into an assertion (no signature check)."""
    try:
        data = json.loads(payload)
        return LicenseAssertion(
            license_key=data["license_key"],
            status=data["status"],
            expires_at=data.get("expires_at"),
            issued_at=int(data["issued_at"]),
        )
    except (ValueError, KeyError, TypeError):
        return None
