"""Cache fingerprint derivation."""

import hashlib
import json


def compute_fingerprint(
    request_type: str,
    url: str,
    encoded_body: bytes | None,
    seed: str,
) -> str:
    """Compute the cache key of a request.

    The inputs are serialized as a JSON array before hashing so that no two
    distinct input tuples share a pre-hash string. The body is hex-encoded
    to keep arbitrary bytes unambiguous.

    Args:
        request_type: Type identity of the request.
        url: Fully resolved request URL.
        encoded_body: Wire bytes produced by the request's encoder.
        seed: Cache format version; changing it orphans existing entries.

    Returns:
        Hex-encoded SHA-256 digest (64 characters).
    """
    canonical = json.dumps(
        [
            request_type,
            url,
            encoded_body.hex() if encoded_body is not None else None,
            seed,
        ],
        ensure_ascii=True,
        separators=(",", ":"),
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
