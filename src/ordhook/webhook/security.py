"""
Security module for webhook authentication.

Requests are authenticated with an HMAC-SHA256 signature of the raw
request body, sent as ``sha256=<hexdigest>`` in a request header.
"""

import hashlib
import hmac
from typing import Optional, Union

from ordhook.core.logging import get_logger
from ordhook.core.settings import WebhookSettings

logger = get_logger(__name__)

SIGNATURE_PREFIX = "sha256="


def _as_bytes(secret: Union[str, bytes]) -> bytes:
    if isinstance(secret, str):
        return secret.encode("utf-8")
    return secret


def compute_signature(secret: Union[str, bytes], raw_body: bytes) -> str:
    """Return the ``sha256=<hexdigest>`` signature of ``raw_body``."""
    mac = hmac.new(_as_bytes(secret), raw_body, hashlib.sha256)
    return SIGNATURE_PREFIX + mac.hexdigest()


def verify_signature(
    signature_header: Optional[str],
    raw_body: bytes,
    secret: Union[str, bytes]
) -> bool:
    """
    Check a signature header against the body.

    Args:
        signature_header: Header value as received, or None if absent
        raw_body: Exact request body bytes
        secret: Shared signing secret

    Returns:
        True only for a present header equal to the expected digest
    """
    if not signature_header or not secret:
        return False

    digest = compute_signature(secret, raw_body).encode("utf-8")
    try:
        received = signature_header.encode("utf-8")
    except UnicodeEncodeError:
        return False

    if len(received) != len(digest):
        return False

    return hmac.compare_digest(digest, received)


class SignatureVerifier:
    """Admission gate bound to the configured shared secret."""

    def __init__(self, secret: Union[str, bytes, None]):
        self._secret = _as_bytes(secret) if secret else b""
        if not self._secret:
            logger.warning("No webhook secret configured; every request will be rejected")

    @classmethod
    def from_settings(cls, settings: WebhookSettings) -> "SignatureVerifier":
        secret = settings.secret_key.get_secret_value() if settings.secret_key else None
        return cls(secret)

    def verify(self, signature_header: Optional[str], raw_body: bytes) -> bool:
        """Return True if the signature header matches the body."""
        return verify_signature(signature_header, raw_body, self._secret)
