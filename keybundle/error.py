"""KeyBundle error types."""


class KeyBundleError(Exception):
    """Base exception for recoverable key material errors."""
    pass


class DerivationError(KeyBundleError):
    """Key derivation from a seed failed."""
    pass


class EncryptionError(KeyBundleError):
    """AEAD encryption failed."""
    pass


class DecryptionFailed(KeyBundleError):
    """AEAD decryption or authentication failed."""
    pass


class IdentifierError(KeyBundleError):
    """Malformed Base32 identifier."""
    pass


class ConfigError(KeyBundleError):
    """Configuration error."""
    pass


class BufferReleased(KeyBundleError):
    """Access to a protected buffer after it was released."""
    pass


class BufferLocked(KeyBundleError):
    """Protected buffer cannot be cleared while a lock is held."""
    pass


class InvariantViolation(AssertionError):
    """Internal precondition broken. A programming error, not a runtime condition."""
    pass
