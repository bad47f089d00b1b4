"""Identifier encoding and seed helpers."""

import base64
import binascii

from .error import IdentifierError
from .secbuf import SecBuf
from .types import SEED_SIZE, SIGN_PUBLIC_KEY_SIZE


def encode_id(public_key: bytes) -> str:
    """Encode a signing public key as an unpadded RFC 4648 Base32 identifier."""
    if len(public_key) != SIGN_PUBLIC_KEY_SIZE:
        raise IdentifierError(f"Public key must be {SIGN_PUBLIC_KEY_SIZE} bytes")
    return base64.b32encode(bytes(public_key)).decode("ascii").rstrip("=")


def decode_id(identifier: str) -> bytes:
    """
    Decode a Base32 identifier back into the raw public key.

    Raises:
        IdentifierError: If the string is not Base32 or does not hold 32 bytes
    """
    padded = identifier.upper() + "=" * (-len(identifier) % 8)
    try:
        raw = base64.b32decode(padded)
    except (binascii.Error, ValueError) as e:
        raise IdentifierError(f"Invalid identifier: {e}") from e
    if len(raw) != SIGN_PUBLIC_KEY_SIZE:
        raise IdentifierError(f"Identifier must decode to {SIGN_PUBLIC_KEY_SIZE} bytes")
    return raw


def generate_random_seed_buf() -> SecBuf:
    """Fresh random seed buffer of SEED_SIZE bytes."""
    seed = SecBuf.with_secure(SEED_SIZE)
    seed.randomize()
    return seed
