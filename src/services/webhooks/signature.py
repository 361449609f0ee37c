"""
GitHub webhook signature checks.

GitHub signs every delivery with HMAC-SHA256 over the raw request body and
sends the digest in the X-Hub-Signature-256 header.
"""

import hashlib
import hmac
from typing import Optional

SIGNATURE_ALGORITHM = "sha256"


def compute_signature(payload: bytes, secret: str) -> str:
    return hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()


def verify_webhook_signature(payload: bytes, signature: Optional[str], secret: str) -> bool:
    """Verify an X-Hub-Signature-256 header against the raw request body.

    Accepts ``sha256=<hex>`` as GitHub sends it, or the bare hex digest.
    """
    if not signature:
        return False

    signature = signature.strip()
    if "=" in signature:
        algorithm, _, signature = signature.partition("=")
        if algorithm != SIGNATURE_ALGORITHM:
            return False

    expected = compute_signature(payload, secret)
    return hmac.compare_digest(expected.encode(), signature.lower().encode("utf-8"))
