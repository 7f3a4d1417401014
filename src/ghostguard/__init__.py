"""GhostGuard: license, liveness and ban control plane for game-server agents."""

from ghostguard.client import AgentClient
from ghostguard.licensing.keygen import (
    LicenseAssertion,
    decode_assertion,
    generate_license_key,
    sign_assertion,
    verify_assertion,
)

__all__ = [
    "AgentClient",
    "LicenseAssertion",
    "decode_assertion",
    "generate_license_key",
    "sign_assertion",
    "verify_assertion",
]
__version__ = "3.1.0"
