"""KeyBundle Demo - deterministic identity keys from one seed."""

from .key_bundle import KeyBundle
from .secbuf import SecBuf
from .seed import Seed
from .types import PwHashConfig, SeedType


def main():
    """Run the KeyBundle demo."""
    print("=== KeyBundle Demo (Python) ===\n")

    print("Generating random device seed...")
    seed = Seed.new_random(SeedType.DEVICE)

    print("Deriving key bundle...")
    bundle = KeyBundle.new_from_seed(seed)
    print(f"  Identity: {bundle.get_id()}")
    print(f"  Encryption public key: {bundle.enc_keys.public.hex()}")

    # Same seed, same keys
    again = KeyBundle.new_from_seed(seed)
    assert bundle.is_same(again), "Derivation should be deterministic!"
    print("✓ Re-derivation yields the same bundle")

    print("\n--- Sign / Verify ---")
    message = SecBuf.from_bytes(b"Hello, identity!")
    signature = bundle.sign(message)
    print(f"  Signature size: {len(signature)} bytes")
    assert bundle.verify(message, signature)
    print("✓ Signature verified")

    tampered = SecBuf.from_bytes(b"Hello, identity?")
    assert not bundle.verify(tampered, signature)
    print("✓ Tampered message rejected")

    print("\n--- Encrypt / Decrypt ---")
    cipher = bundle.encrypt(message)
    print(f"  Plaintext size: {len(message)} bytes, ciphertext size: {len(cipher)} bytes")
    decrypted = bundle.decrypt(cipher)
    assert decrypted.compare(message), "Round trip mismatch!"
    print("✓ Decrypted message matches")

    print("\n--- Seed at rest ---")
    passphrase = SecBuf.from_bytes(b"correct horse battery staple")
    stored = seed.encrypt(passphrase, PwHashConfig.interactive())
    print(f"  Stored blob: {len(stored.to_json())} bytes of JSON")
    restored = Seed.decrypt(stored, passphrase, SeedType.DEVICE, PwHashConfig.interactive())
    assert KeyBundle.new_from_seed(restored).is_same(bundle)
    print("✓ Restored seed derives the same bundle")

    for buf in (seed, restored, message, tampered, signature, cipher, decrypted, passphrase):
        buf.release()
    bundle.release()
    again.release()

    print("\n=== Demo Complete ===")


if __name__ == "__main__":
    main()
