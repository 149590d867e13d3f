"""
Exceptions
==========

Verification never raises for a bad proof or a bad opening: those are plain
``False`` results. The exceptions below are reserved for inputs that cannot be
interpreted at all (wrong-length buffers, values out of range, messages that
would overflow the keystream counter) and for prover-side search failures.
"""


class FKPSError(Exception):
    """Base class for all errors raised by this package."""


class MalformedInputError(FKPSError, ValueError):
    """An input buffer or value has the wrong shape or range."""


class MessageTooLongError(MalformedInputError):
    """The plaintext or ciphertext needs more keystream blocks than a single-byte counter allows."""


class NotInvertibleError(FKPSError):
    """Group element not invertible modulo the RSA modulus."""


class CertificateGenerationError(FKPSError):
    """No certifiable prime challenge was found within the nonce budget."""
