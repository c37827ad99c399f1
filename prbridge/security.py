"""Security-related helpers (webhook signature verification).

GitHub signs each webhook delivery with HMAC-SHA256 over the raw request
body and sends it as `X-Hub-Signature-256: sha256=<hexdigest>`.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets

SIGNATURE_HEADER = "X-Hub-Signature-256"


def _parse_signature_header(header_value: str | None) -> str | None:
    """Return the hex digest from a `sha256=<hex>` header, or None."""
    if not header_value:
        return None

    scheme, sep, digest = header_value.strip().partition("=")
    if sep != "=" or scheme.lower() != "sha256" or not digest:
        return None

    try:
        bytes.fromhex(digest)
    except ValueError:
        return None
    return digest.lower()


def compute_signature(secret: str, body: bytes) -> str:
    """Value of the signature header GitHub sends for `body`."""
    return "sha256=" + hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_signature(secret: str, body: bytes, header_value: str | None) -> bool:
    """Constant-time check of a GitHub webhook signature."""
    digest = _parse_signature_header(header_value)
    if digest is None:
        return False

    expected = compute_signature(secret, body).partition("=")[2]
    return secrets.compare_digest(digest, expected)
