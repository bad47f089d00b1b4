"""KeyBundle: a signing keypair and an encrypting keypair derived from one seed."""

import logging

from .error import InvariantViolation
from .keypair import EncryptingKeyPair, SigningKeyPair, ciphertext_size, plaintext_size
from .secbuf import SecBuf
from .seed import Seed
from .types import SEED_SIZE

logger = logging.getLogger(__name__)


class KeyBundle:
    """
    All the keys generated by a seed.

    A bundle exclusively owns its keypairs and is not safe for concurrent use:
    callers sharing one across threads must serialize access themselves.
    """

    def __init__(self, sign_keys: SigningKeyPair, enc_keys: EncryptingKeyPair):
        """
        Compose a bundle from two keypairs.

        No check is made that the keypairs come from the same seed.
        """
        self.sign_keys = sign_keys
        self.enc_keys = enc_keys

    @classmethod
    def new(cls, sign_keys: SigningKeyPair, enc_keys: EncryptingKeyPair) -> "KeyBundle":
        return cls(sign_keys, enc_keys)

    @classmethod
    def new_from_seed(cls, seed: Seed) -> "KeyBundle":
        """
        Derive the keys from a Seed.

        Raises:
            DerivationError: If the seed buffer is not SEED_SIZE bytes
        """
        bundle = cls(
            SigningKeyPair.new_from_seed(seed.buf),
            EncryptingKeyPair.new_from_seed(seed.buf),
        )
        logger.debug("Derived key bundle %s from %s seed", bundle.get_id(), seed.seed_type.value)
        return bundle

    @classmethod
    def new_from_seed_buf(cls, seed_buf: SecBuf) -> "KeyBundle":
        """
        Derive the keys from a 32 bytes seed buffer.

        The length is a precondition: a wrong size raises InvariantViolation,
        which callers are not expected to handle.
        """
        if len(seed_buf) != SEED_SIZE:
            raise InvariantViolation(f"Seed buffer must be {SEED_SIZE} bytes, got {len(seed_buf)}")
        return cls(
            SigningKeyPair.new_from_seed(seed_buf),
            EncryptingKeyPair.new_from_seed(seed_buf),
        )

    def get_id(self) -> str:
        """Identifier of the bundle: the Base32 signing public key."""
        return self.sign_keys.public

    def sign(self, data: SecBuf) -> SecBuf:
        """Sign data with the signing private key; returns a fresh signature buffer."""
        return self.sign_keys.sign(data)

    def verify(self, data: SecBuf, signature: SecBuf) -> bool:
        """True if signature was made over data by our signing key."""
        return self.sign_keys.verify(data, signature)

    def encrypt(self, data: SecBuf) -> SecBuf:
        """
        Encrypt data for this bundle.

        Returns:
            Buffer of len(data) + AEAD_TAG_SIZE + AEAD_NONCE_SIZE bytes

        Raises:
            EncryptionError: If the primitive call fails
        """
        encrypted = SecBuf.with_insecure(ciphertext_size(len(data)))
        self.enc_keys.encrypt(data, encrypted)
        return encrypted

    def decrypt(self, cipher: SecBuf) -> SecBuf:
        """
        Decrypt a buffer produced by encrypt().

        Returns:
            Protected buffer of len(cipher) - AEAD_NONCE_SIZE - AEAD_TAG_SIZE bytes

        Raises:
            DecryptionFailed: If the ciphertext is truncated or fails authentication
        """
        decrypted = SecBuf.with_secure(max(plaintext_size(len(cipher)), 0))
        try:
            self.enc_keys.decrypt(cipher, decrypted)
        except Exception:
            decrypted.release()
            raise
        return decrypted

    def is_same(self, other: "KeyBundle") -> bool:
        """True if both keypairs match other's, compared in constant time."""
        same_sign = self.sign_keys.is_same(other.sign_keys)
        same_enc = self.enc_keys.is_same(other.enc_keys)
        return same_sign & same_enc

    def release(self) -> None:
        """Zero both private keys."""
        self.sign_keys.release()
        self.enc_keys.release()

    def __enter__(self) -> "KeyBundle":
        return self

    def __exit__(self, *exc) -> None:
        self.release()

    def __repr__(self) -> str:
        return f"KeyBundle(id={self.get_id()!r})"
