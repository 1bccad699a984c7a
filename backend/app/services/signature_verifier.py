"""HMAC-SHA256 signatures for payment provider callbacks.

Signatures are computed over the exact raw bytes received; the payload is only parsed
after it has been authenticated.
"""

import hashlib
import hmac

from common.utils.utils import get_logger

logger = get_logger(__name__)


def compute_signature(payload: bytes, secret: bytes) -> str:
    """Lowercase hex HMAC-SHA256 of ``payload``."""
    return hmac.new(secret, payload, hashlib.sha256).hexdigest()


def verify_signature(payload: bytes, supplied_signature: str | None, secret: bytes) -> bool:
    """Constant-time check of ``supplied_signature`` against the payload.

    A missing signature or an empty secret never verifies.
    """
    if not supplied_signature:
        logger.warning("Missing payment signature")
        return False
    if not secret:
        logger.error("Payment signature secret is not configured")
        return False

    expected = compute_signature(payload, secret)
    return hmac.compare_digest(expected.encode("utf-8"), supplied_signature.strip().lower().encode("utf-8"))


class HmacSignatureVerifier:
    """Binds a secret to :func:`verify_signature`."""

    def __init__(self, secret: str, name: str) -> None:
        self._secret = secret.encode("utf-8")
        self.name = name

    def verify(self, payload: bytes, supplied_signature: str | None) -> bool:
        valid = verify_signature(payload, supplied_signature, self._secret)
        if not valid:
            logger.warning("Payment signature rejected", verifier=self.name, payload_size=len(payload))
        return valid

    def verify_checkout(self, order_reference: str, payment_reference: str, supplied_signature: str | None) -> bool:
        """Client confirmation: signature over ``order|payment``."""
        return self.verify(f"{order_reference}|{payment_reference}".encode(), supplied_signature)
