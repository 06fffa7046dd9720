"""
Identifiers and Account References

Positions, options and stop-losses are keyed by opaque 32-byte identifiers
rendered as 0x-prefixed hex strings. Position identifiers are content-derived
from (maker, timestamp, counter) so two creations never collide.
"""

import hashlib

ZERO_ADDRESS = "0x" + "0" * 40
ZERO_ID = "0x" + "0" * 64

OPTION_TAG = "option"
STOP_LOSS_TAG = "stop-loss"


def is_null(reference: str | None) -> bool:
    """Return True for a missing account, asset or oracle reference."""
    if reference is None:
        return True
    if isinstance(reference, str):
        return not reference.strip() or reference.lower() == ZERO_ADDRESS
    return False


def derive_id(*parts: object) -> str:
    """
    Hash the given parts into a 32-byte identifier.

    Parts are length-prefixed before hashing so ("ab", "c") and ("a", "bc")
    produce different identifiers.

    Example:
        >>> derive_id("0xmaker", 1700000000, 0).startswith("0x")
        True
    """
    digest = hashlib.sha3_256()
    for part in parts:
        encoded = str(part).encode("utf-8")
        digest.update(len(encoded).to_bytes(4, "big"))
        digest.update(encoded)
    return "0x" + digest.hexdigest()


def label_id(label: str) -> str:
    """Identifier for a human-readable label (hash of its UTF-8 bytes)."""
    return "0x" + hashlib.sha3_256(label.encode("utf-8")).hexdigest()


def id_to_bytes(identifier: str) -> bytes:
    """Convert a 0x-prefixed identifier to its 32 raw bytes."""
    if not isinstance(identifier, str) or not identifier.startswith("0x"):
        raise ValueError(f"Identifier must be a 0x-prefixed hex string, got {identifier!r}")
    raw = bytes.fromhex(identifier[2:])
    if len(raw) != 32:
        raise ValueError(f"Identifier must be 32 bytes, got {len(raw)}")
    return raw


def id_from_bytes(raw: bytes) -> str:
    if len(raw) != 32:
        raise ValueError(f"Identifier must be 32 bytes, got {len(raw)}")
    return "0x" + raw.hex()
