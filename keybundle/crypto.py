"""Authenticated encryption using XChaCha20-Poly1305."""

from Crypto.Cipher import ChaCha20_Poly1305

from .error import DecryptionFailed, EncryptionError
from .secbuf import rand_bytes
from .types import AEAD_KEY_SIZE, AEAD_NONCE_SIZE, AEAD_TAG_SIZE


def make_nonce() -> bytes:
    """
    Create a random 192-bit nonce.

    The extended XChaCha20 nonce is large enough that random nonces never
    collide in practice, so no counter state is kept.
    """
    return rand_bytes(AEAD_NONCE_SIZE)


def encrypt(key: bytes, nonce: bytes, ad: bytes, pt: bytes) -> bytes:
    """
    Encrypt plaintext using XChaCha20-Poly1305.

    Args:
        key: AEAD key (32 bytes)
        nonce: Nonce (24 bytes)
        ad: Associated data
        pt: Plaintext

    Returns:
        Ciphertext with authentication tag

    Raises:
        EncryptionError: If the key or nonce is rejected
    """
    if len(key) != AEAD_KEY_SIZE or len(nonce) != AEAD_NONCE_SIZE:
        raise EncryptionError("Invalid key or nonce length")
    try:
        cipher = ChaCha20_Poly1305.new(key=key, nonce=nonce)
        cipher.update(ad)
        ciphertext, tag = cipher.encrypt_and_digest(pt)
    except (ValueError, TypeError) as e:
        raise EncryptionError(f"Encryption failed: {e}") from e
    return ciphertext + tag


def decrypt(key: bytes, nonce: bytes, ad: bytes, ct: bytes) -> bytes:
    """
    Decrypt ciphertext using XChaCha20-Poly1305.

    Args:
        key: AEAD key (32 bytes)
        nonce: Nonce (24 bytes)
        ad: Associated data
        ct: Ciphertext with authentication tag

    Returns:
        Decrypted plaintext

    Raises:
        DecryptionFailed: If decryption or authentication fails
    """
    if len(ct) < AEAD_TAG_SIZE:
        raise DecryptionFailed("Ciphertext too short")
    if len(key) != AEAD_KEY_SIZE or len(nonce) != AEAD_NONCE_SIZE:
        raise DecryptionFailed("Invalid key or nonce length")

    ciphertext = ct[:-AEAD_TAG_SIZE]
    tag = ct[-AEAD_TAG_SIZE:]

    cipher = ChaCha20_Poly1305.new(key=key, nonce=nonce)
    cipher.update(ad)

    try:
        return cipher.decrypt_and_verify(ciphertext, tag)
    except ValueError as e:
        raise DecryptionFailed(f"Decryption failed: {e}") from e
