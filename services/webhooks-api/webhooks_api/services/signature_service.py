"""HMAC-SHA256 verification of MercadoPago webhook deliveries.

Both verifiers are pure: they never raise and never log, so the caller decides how a
rejection is reported. Hex digests are compared exactly as received; an uppercase digest
is a different string and is rejected.
"""

from __future__ import annotations

import hashlib
import hmac
import re

from shared.contracts import SignatureScheme

_ALGORITHM = "sha256"
_HEX_DIGEST_PATTERN = re.compile(r"[0-9a-f]{64}")


def compute_signature(raw_body: bytes, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()


def _split_algorithm(signature_header: str) -> tuple[str | None, str]:
    if "=" not in signature_header:
        return None, signature_header
    algorithm, _, digest = signature_header.partition("=")
    return algorithm, digest


def _digest_matches(expected: str, candidate: str) -> bool:
    if _HEX_DIGEST_PATTERN.fullmatch(candidate) is None:
        return False
    return hmac.compare_digest(expected, candidate)


def verify(raw_body: bytes, signature_header: str | None, secret: str) -> bool:
    """Check a bare hex digest, or one prefixed with `sha256=`, over the exact raw body."""
    if not secret or not signature_header:
        return False
    algorithm, digest = _split_algorithm(signature_header.strip())
    if algorithm is not None and algorithm != _ALGORITHM:
        return False
    return _digest_matches(compute_signature(raw_body, secret), digest)


def _parse_manifest_header(signature_header: str) -> tuple[str | None, str | None]:
    ts: str | None = None
    digest: str | None = None
    for part in signature_header.split(","):
        key, _, value = part.strip().partition("=")
        if key == "ts":
            ts = value
        elif key == "v1":
            digest = value
    return ts, digest


def manifest_for(raw_body: bytes, ts: str, request_id: str | None) -> bytes:
    return f"{ts}.{request_id or ''}.".encode() + raw_body


def verify_manifest(
    raw_body: bytes, signature_header: str | None, request_id: str | None, secret: str
) -> bool:
    """Check MercadoPago's `ts=<ts>,v1=<hex>` header signed over `ts.request_id.body`."""
    if not secret or not signature_header:
        return False
    ts, digest = _parse_manifest_header(signature_header)
    if not ts or not digest:
        return False
    expected = compute_signature(manifest_for(raw_body, ts, request_id), secret)
    return _digest_matches(expected, digest)


class SignatureVerifier:
    def __init__(self, secret: str, scheme: SignatureScheme = SignatureScheme.HEX) -> None:
        self._secret = secret
        self._scheme = scheme

    def is_valid(
        self, raw_body: bytes, signature_header: str | None, request_id: str | None = None
    ) -> bool:
        if self._scheme == SignatureScheme.MANIFEST:
            return verify_manifest(raw_body, signature_header, request_id, self._secret)
        return verify(raw_body, signature_header, self._secret)
