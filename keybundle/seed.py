"""Seeds: typed 32-byte root entropy buffers."""

import logging
from typing import Optional

from .error import DerivationError
from .password_encryption import pw_dec, pw_enc
from .secbuf import SecBuf
from .types import SEED_SIZE, EncryptedData, PwHashConfig, SeedType
from .utils import generate_random_seed_buf

logger = logging.getLogger(__name__)


class Seed:
    """A seed buffer tagged with the role it plays."""

    def __init__(self, seed_type: SeedType, buf: SecBuf):
        self.seed_type = seed_type
        self.buf = buf

    @classmethod
    def new_random(cls, seed_type: SeedType) -> "Seed":
        """Generate a fresh random seed."""
        return cls(seed_type, generate_random_seed_buf())

    def encrypt(self, passphrase: SecBuf, config: Optional[PwHashConfig] = None) -> EncryptedData:
        """Protect the seed under a passphrase for storage at rest."""
        return pw_enc(self.buf, passphrase, config)

    @classmethod
    def decrypt(
        cls,
        encrypted: EncryptedData,
        passphrase: SecBuf,
        seed_type: SeedType,
        config: Optional[PwHashConfig] = None,
    ) -> "Seed":
        """
        Recover a seed stored with encrypt().

        Raises:
            DecryptionFailed: On a wrong passphrase or tampered data
            DerivationError: If the recovered buffer is not a seed
        """
        buf = pw_dec(encrypted, passphrase, config)
        if len(buf) != SEED_SIZE:
            buf.release()
            raise DerivationError(f"Decrypted seed must be {SEED_SIZE} bytes")
        logger.debug("Recovered %s seed from encrypted storage", seed_type.value)
        return cls(seed_type, buf)

    def release(self) -> None:
        self.buf.release()

    def __repr__(self) -> str:
        return f"Seed({self.seed_type.value}, len={len(self.buf)})"
