"""
HMAC-SHA256 request signing for the WebLab REST API.
"""

import hashlib
import hmac
from typing import Mapping

SIGNATURE_PARAM = "signature"


def canonical_query(params: Mapping[str, str]) -> str:
    """Joins ``key=value`` pairs with ``&`` in the order they were declared."""
    return "&".join(f"{key}={value}" for key, value in params.items())


def compute_signature(message: str, secret: str) -> str:
    """Returns the lower-case hex HMAC-SHA256 digest of ``message`` keyed by ``secret``."""
    return hmac.new(
        secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256
    ).hexdigest()


def sign_query(params: Mapping[str, str], secret: str) -> dict[str, str]:
    """
    Returns a copy of ``params`` with the ``signature`` parameter appended.

    The signature covers the canonical query string of ``params``.
    """
    signed = dict(params)
    signed[SIGNATURE_PARAM] = compute_signature(canonical_query(params), secret)
    return signed
