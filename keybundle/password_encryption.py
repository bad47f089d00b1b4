"""Passphrase-based encryption of secret buffers (scrypt + XChaCha20-Poly1305)."""

from typing import Optional

from . import crypto
from .error import DecryptionFailed
from .kdf import pw_hash
from .secbuf import SecBuf, rand_bytes
from .types import AEAD_TAG_SIZE, PWHASH_SALT_SIZE, EncryptedData, PwHashConfig

# Associated data binding ciphertexts to this format
PW_ENC_AD: bytes = b"KeyBundle-PwEnc"


def pw_enc(data: SecBuf, passphrase: SecBuf, config: Optional[PwHashConfig] = None) -> EncryptedData:
    """
    Encrypt a buffer under a passphrase.

    Args:
        data: Secret to protect
        passphrase: Passphrase bytes
        config: scrypt parameters, PwHashConfig() when omitted

    Returns:
        Salt, nonce and ciphertext needed to recover the data
    """
    config = config or PwHashConfig()
    salt = rand_bytes(PWHASH_SALT_SIZE)
    nonce = crypto.make_nonce()
    with pw_hash(passphrase, salt, config) as key:
        with key.read_lock() as k, data.read_lock() as pt:
            cipher = crypto.encrypt(bytes(k), nonce, PW_ENC_AD, bytes(pt))
    return EncryptedData(salt=salt, nonce=nonce, cipher=cipher)


def pw_dec(
    encrypted: EncryptedData,
    passphrase: SecBuf,
    config: Optional[PwHashConfig] = None,
) -> SecBuf:
    """
    Recover a buffer encrypted with pw_enc().

    Raises:
        DecryptionFailed: On a wrong passphrase, wrong config or tampered data
    """
    config = config or PwHashConfig()
    if len(encrypted.cipher) < AEAD_TAG_SIZE:
        raise DecryptionFailed("Ciphertext too short")
    with pw_hash(passphrase, encrypted.salt, config) as key:
        with key.read_lock() as k:
            plaintext = crypto.decrypt(bytes(k), encrypted.nonce, PW_ENC_AD, encrypted.cipher)
    return SecBuf.from_bytes(plaintext, secure=True)
