"""Key derivation functions using HKDF-SHA256 and scrypt."""

from Crypto.Hash import SHA256
from Crypto.Protocol.KDF import HKDF, scrypt

from .secbuf import SecBuf
from .types import (
    AEAD_KEY_SIZE,
    ENC_AEAD_INFO,
    ENC_PRIVATE_KEY_SIZE,
    ENC_SEED_INFO,
    SIGN_SEED_INFO,
    SIGN_SEED_SIZE,
    PwHashConfig,
)


def hkdf_expand(secret: bytes, info: bytes, length: int = 32) -> bytes:
    """Derive a key using HKDF-SHA256."""
    return HKDF(secret, length, salt=b"", num_keys=1, hashmod=SHA256, context=info)


def _derive_into(seed_buf: SecBuf, info: bytes, length: int) -> SecBuf:
    out = SecBuf.with_secure(length)
    with seed_buf.read_lock() as seed, out.write_lock() as w:
        w[:] = hkdf_expand(bytes(seed), info, length)
    return out


def derive_signing_seed(seed_buf: SecBuf) -> SecBuf:
    """
    Derive the Ed25519 seed from a root seed.

    sign_seed = HKDF(seed, "KeyBundle-Sign-Seed")
    """
    return _derive_into(seed_buf, SIGN_SEED_INFO, SIGN_SEED_SIZE)


def derive_encrypting_key(seed_buf: SecBuf) -> SecBuf:
    """
    Derive the X25519 private key from a root seed.

    enc_priv = HKDF(seed, "KeyBundle-Enc-Seed")
    """
    return _derive_into(seed_buf, ENC_SEED_INFO, ENC_PRIVATE_KEY_SIZE)


def derive_aead_key(shared_secret: bytes, public_key: bytes) -> bytes:
    """
    Derive the AEAD key from an X25519 shared secret.

    Binding the public key into the info string ties the key to this keypair.
    The caller is responsible for dropping the returned key promptly.
    """
    return hkdf_expand(shared_secret, ENC_AEAD_INFO + public_key, AEAD_KEY_SIZE)


def pw_hash(passphrase: SecBuf, salt: bytes, config: PwHashConfig) -> SecBuf:
    """
    Stretch a passphrase into a 32-byte key with scrypt.

    Args:
        passphrase: Passphrase bytes
        salt: Random salt stored next to the ciphertext
        config: scrypt cost parameters

    Returns:
        Protected buffer holding the derived key
    """
    config.validate()
    out = SecBuf.with_secure(AEAD_KEY_SIZE)
    with passphrase.read_lock() as pw, out.write_lock() as w:
        w[:] = scrypt(bytes(pw), salt, AEAD_KEY_SIZE, N=config.n, r=config.r, p=config.p)
    return out
