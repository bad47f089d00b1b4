"""
KeyBundle: deterministic identity keys from a single seed

From one 32-byte seed a KeyBundle derives an Ed25519 signing keypair and an
X25519 encrypting keypair, and offers sign/verify, authenticated
encrypt/decrypt and a constant-time equality check.

Features:
- Deterministic derivation: HKDF-SHA256 separates the two keys, the raw seed
  is never used as a private key
- XChaCha20-Poly1305 AEAD with random 192-bit nonces
- Secret material held in SecBuf protected buffers, zeroed on release
- Passphrase protection of seeds at rest with scrypt
"""

from .types import (
    SEED_SIZE,
    SIGN_PUBLIC_KEY_SIZE,
    SIGN_PRIVATE_KEY_SIZE,
    SIGNATURE_SIZE,
    ENC_PUBLIC_KEY_SIZE,
    ENC_PRIVATE_KEY_SIZE,
    AEAD_KEY_SIZE,
    AEAD_NONCE_SIZE,
    AEAD_TAG_SIZE,
    SeedType,
    PwHashConfig,
    EncryptedData,
)
from .secbuf import SecBuf, rand_bytes, zero_bytes
from .utils import encode_id, decode_id, generate_random_seed_buf
from .password_encryption import pw_enc, pw_dec
from .seed import Seed
from .keypair import SigningKeyPair, EncryptingKeyPair, ciphertext_size, plaintext_size
from .key_bundle import KeyBundle
from .error import (
    KeyBundleError,
    DerivationError,
    EncryptionError,
    DecryptionFailed,
    IdentifierError,
    ConfigError,
    BufferReleased,
    BufferLocked,
    InvariantViolation,
)

__version__ = "0.1.0"
__all__ = [
    # Constants
    "SEED_SIZE",
    "SIGN_PUBLIC_KEY_SIZE",
    "SIGN_PRIVATE_KEY_SIZE",
    "SIGNATURE_SIZE",
    "ENC_PUBLIC_KEY_SIZE",
    "ENC_PRIVATE_KEY_SIZE",
    "AEAD_KEY_SIZE",
    "AEAD_NONCE_SIZE",
    "AEAD_TAG_SIZE",
    # Types
    "SeedType",
    "PwHashConfig",
    "EncryptedData",
    # Protected memory
    "SecBuf",
    "rand_bytes",
    "zero_bytes",
    # Identifiers and seeds
    "encode_id",
    "decode_id",
    "generate_random_seed_buf",
    "Seed",
    # Passphrase encryption
    "pw_enc",
    "pw_dec",
    # Keys
    "SigningKeyPair",
    "EncryptingKeyPair",
    "ciphertext_size",
    "plaintext_size",
    "KeyBundle",
    # Error
    "KeyBundleError",
    "DerivationError",
    "EncryptionError",
    "DecryptionFailed",
    "IdentifierError",
    "ConfigError",
    "BufferReleased",
    "BufferLocked",
    "InvariantViolation",
]
