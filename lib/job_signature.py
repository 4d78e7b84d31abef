# =============================================================================
# lib/job_signature.py - Job Webhook Signatures
# =============================================================================
# The orchestrator signs every call it makes to /api/inngest:
#
#   X-Inngest-Signature: t=<unix seconds>&s=<hex HMAC-SHA256(body + t)>
#
# keyed with the signing key minus its "signkey-<env>-" prefix.
# =============================================================================

import hashlib
import hmac
import re
import time
from urllib.parse import parse_qs

SIGNATURE_HEADER = "X-Inngest-Signature"

# Signatures older than this are replays
MAX_SIGNATURE_AGE_SECONDS = 300

_KEY_PREFIX = re.compile(r"^signkey-\w+-")


class SignatureError(Exception):
    """The signature header is missing, malformed, stale, or wrong."""


def normalize_signing_key(signing_key: str) -> str:
    return _KEY_PREFIX.sub("", signing_key)


def sign(body: bytes, signing_key: str, timestamp: int | None = None) -> str:
    """
    Build a signature header value for `body`.

    Example:
        headers = {SIGNATURE_HEADER: sign(payload, settings.INNGEST_SIGNING_KEY)}
    """
    ts = str(int(time.time()) if timestamp is None else timestamp)
    mac = hmac.new(
        normalize_signing_key(signing_key).encode(),
        body + ts.encode(),
        hashlib.sha256,
    ).hexdigest()
    return f"t={ts}&s={mac}"


def verify_signature(
    body: bytes,
    header: str | None,
    signing_key: str,
    now: float | None = None,
) -> None:
    """
    Check a signature header against the body.

    Raises:
        SignatureError: With the reason the signature was rejected
    """
    if not header:
        raise SignatureError("missing signature header")

    parts = parse_qs(header)
    try:
        ts = parts["t"][0]
        given = parts["s"][0]
        timestamp = int(ts)
    except (KeyError, IndexError, ValueError):
        raise SignatureError("malformed signature header")

    current = time.time() if now is None else now
    if abs(current - timestamp) > MAX_SIGNATURE_AGE_SECONDS:
        raise SignatureError("signature expired or not yet valid")

    expected = sign(body, signing_key, timestamp).split("&s=", 1)[1]
    if not hmac.compare_digest(expected, given):
        raise SignatureError("signature mismatch")
