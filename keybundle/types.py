"""Constants and types for KeyBundle key material."""

from dataclasses import dataclass
from enum import Enum
import base64
import json

from .error import ConfigError


# Seed length in bytes
SEED_SIZE: int = 32

# Ed25519 sizes (libsodium layout: private = seed || public)
SIGN_PUBLIC_KEY_SIZE: int = 32
SIGN_PRIVATE_KEY_SIZE: int = 64
SIGN_SEED_SIZE: int = 32
SIGNATURE_SIZE: int = 64

# X25519 key sizes
ENC_PUBLIC_KEY_SIZE: int = 32
ENC_PRIVATE_KEY_SIZE: int = 32

# XChaCha20-Poly1305
AEAD_KEY_SIZE: int = 32
AEAD_NONCE_SIZE: int = 24
AEAD_TAG_SIZE: int = 16

# scrypt salt length
PWHASH_SALT_SIZE: int = 16

# HKDF info strings, one per derived key so no material is shared between algorithms
SIGN_SEED_INFO: bytes = b"KeyBundle-Sign-Seed"
ENC_SEED_INFO: bytes = b"KeyBundle-Enc-Seed"
ENC_AEAD_INFO: bytes = b"KeyBundle-Enc-AEAD"


class SeedType(Enum):
    """Classification of a seed by the role it plays in an identity."""

    ROOT = "root"
    DEVICE = "device"
    DEVICE_PIN = "device_pin"
    APP = "app"
    REVOCATION = "revocation"
    AUTH = "auth"
    MNEMONIC = "mnemonic"


@dataclass
class PwHashConfig:
    """scrypt cost parameters for passphrase-protected data."""

    n: int = 2 ** 14
    r: int = 8
    p: int = 1

    @classmethod
    def interactive(cls) -> "PwHashConfig":
        """Cheap parameters, fit for tests and interactive unlocks."""
        return cls(n=2 ** 14, r=8, p=1)

    @classmethod
    def sensitive(cls) -> "PwHashConfig":
        """Expensive parameters for long-term storage of root seeds."""
        return cls(n=2 ** 20, r=8, p=1)

    def validate(self) -> None:
        """Validate the configuration, raises ConfigError if invalid."""
        if self.n < 2 or self.n & (self.n - 1):
            raise ConfigError("n must be a power of two greater than 1")
        if self.r < 1:
            raise ConfigError("r must be >= 1")
        if self.p < 1:
            raise ConfigError("p must be >= 1")


@dataclass
class EncryptedData:
    """Passphrase-encrypted payload as stored at rest."""

    salt: bytes  # scrypt salt
    nonce: bytes  # XChaCha20-Poly1305 nonce
    cipher: bytes  # ciphertext || tag

    def to_json(self) -> bytes:
        """Serialize to JSON bytes with base64 fields."""
        return json.dumps({
            "salt": base64.b64encode(self.salt).decode("ascii"),
            "nonce": base64.b64encode(self.nonce).decode("ascii"),
            "cipher": base64.b64encode(self.cipher).decode("ascii"),
        }).encode()

    @classmethod
    def from_json(cls, data: bytes) -> "EncryptedData":
        """Deserialize from JSON bytes."""
        d = json.loads(data)
        return cls(
            salt=base64.b64decode(d["salt"]),
            nonce=base64.b64decode(d["nonce"]),
            cipher=base64.b64decode(d["cipher"]),
        )
