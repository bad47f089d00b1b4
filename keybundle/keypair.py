"""Signing (Ed25519) and encrypting (X25519 + XChaCha20-Poly1305) keypairs."""

import hmac
import logging

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey, X25519PublicKey

from . import crypto
from .error import DecryptionFailed, DerivationError, EncryptionError, InvariantViolation
from .kdf import derive_aead_key, derive_encrypting_key, derive_signing_seed
from .secbuf import SecBuf
from .types import (
    AEAD_NONCE_SIZE,
    AEAD_TAG_SIZE,
    ENC_PRIVATE_KEY_SIZE,
    SEED_SIZE,
    SIGN_PRIVATE_KEY_SIZE,
    SIGN_SEED_SIZE,
    SIGNATURE_SIZE,
)
from .utils import decode_id, encode_id

logger = logging.getLogger(__name__)


def ciphertext_size(plaintext_len: int) -> int:
    """Size of encrypt() output: nonce || ciphertext || tag."""
    return AEAD_NONCE_SIZE + plaintext_len + AEAD_TAG_SIZE


def plaintext_size(ciphertext_len: int) -> int:
    """Size of decrypt() output for a ciphertext of the given length."""
    return ciphertext_len - AEAD_NONCE_SIZE - AEAD_TAG_SIZE


def _check_seed(seed_buf: SecBuf) -> None:
    if len(seed_buf) != SEED_SIZE:
        raise DerivationError(f"Seed must be {SEED_SIZE} bytes, got {len(seed_buf)}")


class SigningKeyPair:
    """
    Ed25519 keypair.

    The private buffer uses the libsodium layout: 32-byte Ed25519 seed followed
    by the 32-byte public key. The public identifier is computed from it.
    """

    def __init__(self, private: SecBuf):
        if len(private) != SIGN_PRIVATE_KEY_SIZE:
            raise InvariantViolation(
                f"Signing private key must be {SIGN_PRIVATE_KEY_SIZE} bytes, got {len(private)}"
            )
        with private.read_lock() as priv:
            try:
                key = Ed25519PrivateKey.from_private_bytes(bytes(priv[:SIGN_SEED_SIZE]))
            except ValueError as e:
                raise DerivationError(f"Invalid signing key: {e}") from e
            public = key.public_key().public_bytes_raw()
            if not hmac.compare_digest(public, priv[SIGN_SEED_SIZE:]):
                raise DerivationError("Signing private key does not match its public half")
        self._public = encode_id(public)
        self.private = private

    @classmethod
    def new_from_seed(cls, seed_buf: SecBuf) -> "SigningKeyPair":
        """
        Deterministically derive a signing keypair from a 32-byte seed.

        Raises:
            DerivationError: If the seed has the wrong size or is rejected
        """
        _check_seed(seed_buf)
        sign_seed = derive_signing_seed(seed_buf)
        try:
            with sign_seed.read_lock() as s:
                public = Ed25519PrivateKey.from_private_bytes(bytes(s)).public_key().public_bytes_raw()
            private = SecBuf.with_secure(SIGN_PRIVATE_KEY_SIZE)
            with sign_seed.read_lock() as s, private.write_lock() as w:
                w[:SIGN_SEED_SIZE] = s
                w[SIGN_SEED_SIZE:] = public
        except ValueError as e:
            raise DerivationError(f"Signing key derivation failed: {e}") from e
        finally:
            sign_seed.release()
        keys = cls(private)
        logger.debug("Derived signing keypair %s", keys.public)
        return keys

    @property
    def public(self) -> str:
        """Base32 identifier of the public key."""
        return self._public

    def public_key_bytes(self) -> bytes:
        """Raw 32-byte public key."""
        return decode_id(self._public)

    def sign(self, data: SecBuf) -> SecBuf:
        """
        Sign data with the private key.

        Returns:
            Fresh 64-byte signature buffer
        """
        with self.private.read_lock() as priv, data.read_lock() as msg:
            key = Ed25519PrivateKey.from_private_bytes(bytes(priv[:SIGN_SEED_SIZE]))
            signature = key.sign(bytes(msg))
        return SecBuf.from_bytes(signature)

    def verify(self, data: SecBuf, signature: SecBuf) -> bool:
        """Check a signature over data. Any mismatch is False, never an error."""
        if len(signature) != SIGNATURE_SIZE:
            return False
        public_key = Ed25519PublicKey.from_public_bytes(self.public_key_bytes())
        with data.read_lock() as msg, signature.read_lock() as sig:
            try:
                public_key.verify(bytes(sig), bytes(msg))
            except InvalidSignature:
                return False
        return True

    def is_same(self, other: "SigningKeyPair") -> bool:
        """Constant-time equality of public and private material."""
        same_public = hmac.compare_digest(self._public.encode(), other._public.encode())
        same_private = self.private.compare(other.private)
        return same_public & same_private

    def release(self) -> None:
        self.private.release()

    def __repr__(self) -> str:
        return f"SigningKeyPair(public={self._public!r})"


class EncryptingKeyPair:
    """
    X25519 keypair used for self-addressed authenticated encryption.

    The AEAD key is derived from the X25519 exchange of the private key with
    its own public key, so only the holder of the private key can decrypt.
    """

    def __init__(self, private: SecBuf):
        if len(private) != ENC_PRIVATE_KEY_SIZE:
            raise InvariantViolation(
                f"Encrypting private key must be {ENC_PRIVATE_KEY_SIZE} bytes, got {len(private)}"
            )
        with private.read_lock() as priv:
            try:
                key = X25519PrivateKey.from_private_bytes(bytes(priv))
            except ValueError as e:
                raise DerivationError(f"Invalid encrypting key: {e}") from e
        self.public: bytes = key.public_key().public_bytes_raw()
        self.private = private

    @classmethod
    def new_from_seed(cls, seed_buf: SecBuf) -> "EncryptingKeyPair":
        """
        Deterministically derive an encrypting keypair from a 32-byte seed.

        Raises:
            DerivationError: If the seed has the wrong size
        """
        _check_seed(seed_buf)
        keys = cls(derive_encrypting_key(seed_buf))
        logger.debug("Derived encrypting keypair with %d-byte public key", len(keys.public))
        return keys

    def _aead_key(self) -> bytes:
        with self.private.read_lock() as priv:
            private_key = X25519PrivateKey.from_private_bytes(bytes(priv))
            shared = private_key.exchange(X25519PublicKey.from_public_bytes(self.public))
        return derive_aead_key(shared, self.public)

    def encrypt(self, data: SecBuf, out: SecBuf) -> None:
        """
        Encrypt data into out as nonce || ciphertext || tag.

        Raises:
            EncryptionError: If out is not ciphertext_size(len(data)) or the primitive fails
        """
        expected = ciphertext_size(len(data))
        if len(out) != expected:
            raise EncryptionError(f"Output buffer must be {expected} bytes, got {len(out)}")
        try:
            key = self._aead_key()
        except ValueError as e:
            raise EncryptionError(f"Key exchange failed: {e}") from e
        nonce = crypto.make_nonce()
        with data.read_lock() as pt:
            ct = crypto.encrypt(key, nonce, self.public, bytes(pt))
        with out.write_lock() as w:
            w[:AEAD_NONCE_SIZE] = nonce
            w[AEAD_NONCE_SIZE:] = ct

    def decrypt(self, cipher: SecBuf, out: SecBuf) -> None:
        """
        Decrypt nonce || ciphertext || tag into out.

        Raises:
            DecryptionFailed: If cipher is truncated or tampered, or out has the wrong size
        """
        if len(cipher) < AEAD_NONCE_SIZE + AEAD_TAG_SIZE:
            raise DecryptionFailed("Ciphertext too short")
        expected = plaintext_size(len(cipher))
        if len(out) != expected:
            raise DecryptionFailed(f"Output buffer must be {expected} bytes, got {len(out)}")
        try:
            key = self._aead_key()
        except ValueError as e:
            raise DecryptionFailed(f"Key exchange failed: {e}") from e
        with cipher.read_lock() as c:
            nonce = bytes(c[:AEAD_NONCE_SIZE])
            body = bytes(c[AEAD_NONCE_SIZE:])
        pt = crypto.decrypt(key, nonce, self.public, body)
        with out.write_lock() as w:
            w[:] = pt

    def is_same(self, other: "EncryptingKeyPair") -> bool:
        """Constant-time equality of public and private material."""
        same_public = hmac.compare_digest(self.public, other.public)
        same_private = self.private.compare(other.private)
        return same_public & same_private

    def release(self) -> None:
        self.private.release()

    def __repr__(self) -> str:
        return f"EncryptingKeyPair(public={self.public.hex()!r})"
