"""Tests for KeyBundle derivation, signing and encryption."""

import pytest
from keybundle import (
    AEAD_NONCE_SIZE,
    AEAD_TAG_SIZE,
    SIGNATURE_SIZE,
    DecryptionFailed,
    DerivationError,
    EncryptingKeyPair,
    InvariantViolation,
    KeyBundle,
    SecBuf,
    Seed,
    SeedType,
    SigningKeyPair,
    decode_id,
    generate_random_seed_buf,
)


FIXED_SEED = bytes(range(32))
FIXED_MESSAGE = bytes([0xA5] * 8 + [0x5A] * 8)


def create_test_bundle() -> KeyBundle:
    """Derive a bundle from a random seed."""
    seed = generate_random_seed_buf()
    return KeyBundle.new_from_seed_buf(seed)


def read(buf: SecBuf) -> bytes:
    with buf.read_lock() as view:
        return bytes(view)


def test_create_from_pairs():
    """Test composing a bundle from separately derived keypairs."""
    seed = generate_random_seed_buf()
    sign_keys = SigningKeyPair.new_from_seed(seed)
    enc_keys = EncryptingKeyPair.new_from_seed(seed)

    bundle = KeyBundle.new(sign_keys, enc_keys)

    assert bundle.sign_keys is sign_keys
    assert bundle.enc_keys is enc_keys
    assert len(bundle.sign_keys.private) == 64
    assert len(bundle.enc_keys.private) == 32


def test_create_from_seed():
    """Test key sizes of a derived bundle."""
    bundle = create_test_bundle()

    assert len(bundle.sign_keys.private) == 64
    assert len(bundle.enc_keys.private) == 32
    assert len(bundle.enc_keys.public) == 32
    assert len(decode_id(bundle.get_id())) == 32


def test_fixed_seed_scenario():
    """Test the fixed seed: same bundle twice, sign/verify, one-bit tamper."""
    b1 = KeyBundle.new_from_seed(Seed(SeedType.DEVICE, SecBuf.from_bytes(FIXED_SEED)))
    b2 = KeyBundle.new_from_seed(Seed(SeedType.DEVICE, SecBuf.from_bytes(FIXED_SEED)))
    assert b1.is_same(b2)
    assert b1.get_id() == b2.get_id()

    message = SecBuf.from_bytes(FIXED_MESSAGE)
    signature = b1.sign(message)
    assert b1.verify(message, signature)

    with message.write_lock() as w:
        w[0] ^= 0x01
    assert not b1.verify(message, signature)


def test_seed_reused_across_derivations():
    """Test the seed is left intact by derivation."""
    seed = SecBuf.from_bytes(FIXED_SEED)
    KeyBundle.new_from_seed_buf(seed)
    assert read(seed) == FIXED_SEED


def test_derived_keys_differ_from_seed():
    """Test neither private key is the raw seed."""
    bundle = KeyBundle.new_from_seed_buf(SecBuf.from_bytes(FIXED_SEED))

    assert read(bundle.enc_keys.private) != FIXED_SEED
    assert read(bundle.sign_keys.private)[:32] != FIXED_SEED
    assert read(bundle.enc_keys.private) != read(bundle.sign_keys.private)[:32]


def test_random_bundles_differ():
    """Test independently random seeds give different bundles."""
    b1 = create_test_bundle()
    b2 = create_test_bundle()

    assert not b1.is_same(b2)
    assert b1.get_id() != b2.get_id()


def test_get_id_stable():
    """Test the identifier does not change across calls."""
    bundle = create_test_bundle()
    assert bundle.get_id() == bundle.get_id()


def test_new_from_seed_rejects_wrong_size():
    """Test a short or long seed is a typed failure."""
    for size in (0, 16, 31, 33, 64):
        seed = Seed(SeedType.ROOT, SecBuf.from_bytes(bytes(size)))
        with pytest.raises(DerivationError):
            KeyBundle.new_from_seed(seed)


def test_new_from_seed_buf_precondition():
    """Test a wrong-size buffer is an invariant violation."""
    with pytest.raises(InvariantViolation):
        KeyBundle.new_from_seed_buf(SecBuf.from_bytes(bytes(31)))
    assert issubclass(InvariantViolation, AssertionError)


def test_sign_and_verify():
    """Test signing, random signatures and re-randomized data."""
    bundle = create_test_bundle()

    message = SecBuf.with_insecure(16)
    message.randomize()

    signature = bundle.sign(message)
    assert len(signature) == SIGNATURE_SIZE
    assert bundle.verify(message, signature)

    random_signature = SecBuf.with_insecure(SIGNATURE_SIZE)
    random_signature.randomize()
    assert not bundle.verify(message, random_signature)

    message.randomize()
    assert not bundle.verify(message, signature)


def test_sign_does_not_mutate_data():
    """Test sign leaves its input untouched and returns fresh buffers."""
    bundle = create_test_bundle()
    message = SecBuf.from_bytes(FIXED_MESSAGE)

    s1 = bundle.sign(message)
    s2 = bundle.sign(message)

    assert read(message) == FIXED_MESSAGE
    assert s1 is not s2
    assert s1.compare(s2)  # Ed25519 is deterministic


def test_verify_rejects_other_message_signature():
    """Test a signature over another message does not verify."""
    bundle = create_test_bundle()
    other = bundle.sign(SecBuf.from_bytes(b"another message"))

    assert not bundle.verify(SecBuf.from_bytes(FIXED_MESSAGE), other)


def test_verify_rejects_other_key():
    """Test a signature from another bundle does not verify."""
    b1 = create_test_bundle()
    b2 = create_test_bundle()
    message = SecBuf.from_bytes(FIXED_MESSAGE)

    assert not b2.verify(message, b1.sign(message))


def test_verify_wrong_length_signature():
    """Test truncated or empty signatures return False."""
    bundle = create_test_bundle()
    message = SecBuf.from_bytes(FIXED_MESSAGE)

    assert not bundle.verify(message, SecBuf.with_insecure(0))
    assert not bundle.verify(message, SecBuf.with_insecure(SIGNATURE_SIZE - 1))


@pytest.mark.parametrize("size", [0, 1, 16, 1000, 65536])
def test_encrypt_and_decrypt(size):
    """Test round trip and both size laws."""
    bundle = create_test_bundle()

    message = SecBuf.with_insecure(size)
    message.randomize()

    encrypted = bundle.encrypt(message.clone())
    assert len(encrypted) == size + AEAD_TAG_SIZE + AEAD_NONCE_SIZE

    decrypted = bundle.decrypt(encrypted)
    assert len(decrypted) == len(encrypted) - AEAD_NONCE_SIZE - AEAD_TAG_SIZE
    assert decrypted.compare(message)


def test_encrypt_is_randomized():
    """Test two encryptions of the same data differ."""
    bundle = create_test_bundle()
    message = SecBuf.from_bytes(FIXED_MESSAGE)

    assert read(bundle.encrypt(message)) != read(bundle.encrypt(message))


def test_decrypt_rejects_tampering():
    """Test a flipped ciphertext bit fails authentication."""
    bundle = create_test_bundle()
    encrypted = bundle.encrypt(SecBuf.from_bytes(FIXED_MESSAGE))

    with encrypted.write_lock() as w:
        w[AEAD_NONCE_SIZE] ^= 0x80

    with pytest.raises(DecryptionFailed):
        bundle.decrypt(encrypted)


def test_decrypt_rejects_truncated():
    """Test ciphertext shorter than nonce and tag."""
    bundle = create_test_bundle()
    with pytest.raises(DecryptionFailed):
        bundle.decrypt(SecBuf.with_insecure(AEAD_NONCE_SIZE + AEAD_TAG_SIZE - 1))


def test_decrypt_with_other_bundle_fails():
    """Test only the encrypting bundle can decrypt."""
    b1 = create_test_bundle()
    b2 = create_test_bundle()
    encrypted = b1.encrypt(SecBuf.from_bytes(FIXED_MESSAGE))

    with pytest.raises(DecryptionFailed):
        b2.decrypt(encrypted)


def test_same_seed_decrypts():
    """Test a re-derived bundle decrypts what the first one encrypted."""
    b1 = KeyBundle.new_from_seed_buf(SecBuf.from_bytes(FIXED_SEED))
    b2 = KeyBundle.new_from_seed_buf(SecBuf.from_bytes(FIXED_SEED))

    encrypted = b1.encrypt(SecBuf.from_bytes(FIXED_MESSAGE))
    assert read(b2.decrypt(encrypted)) == FIXED_MESSAGE


def test_is_same_mixed_keypairs():
    """Test bundles sharing only one keypair are not the same."""
    seed_a = SecBuf.from_bytes(FIXED_SEED)
    seed_b = generate_random_seed_buf()

    a = KeyBundle(SigningKeyPair.new_from_seed(seed_a), EncryptingKeyPair.new_from_seed(seed_a))
    mixed = KeyBundle(SigningKeyPair.new_from_seed(seed_a), EncryptingKeyPair.new_from_seed(seed_b))

    assert not a.is_same(mixed)
    assert a.get_id() == mixed.get_id()


def test_release_zeroes_private_keys():
    """Test releasing a bundle wipes and closes both private buffers."""
    bundle = create_test_bundle()
    sign_private = bundle.sign_keys.private
    enc_private = bundle.enc_keys.private

    with bundle:
        pass

    assert sign_private.is_released
    assert enc_private.is_released
    assert bytes(sign_private._buf) == bytes(64)
    assert bytes(enc_private._buf) == bytes(32)


def test_repr_hides_secrets():
    """Test repr shows only the identifier."""
    bundle = KeyBundle.new_from_seed_buf(SecBuf.from_bytes(FIXED_SEED))
    text = repr(bundle) + repr(bundle.sign_keys) + repr(bundle.enc_keys) + repr(bundle.sign_keys.private)

    assert bundle.get_id() in text
    with bundle.sign_keys.private.read_lock() as priv:
        assert bytes(priv[:32]).hex() not in text


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
