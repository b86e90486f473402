"""Error types for distributed Schnorr signing."""


class DSSError(Exception):
    """Base exception for all distributed signing errors."""


class ParticipantNotFoundError(DSSError):
    """The session secret's public key is not in the participant list."""


class IndexOutOfRangeError(DSSError):
    """A partial signature names an index outside the participant list."""


class InvalidAuthenticationError(DSSError):
    """The authentication tag on a partial signature does not verify."""


class SessionMismatchError(DSSError):
    """A partial signature is bound to a different session."""


class DuplicateShareError(DSSError):
    """A share for this index has already been accepted."""


class InvalidPartialValueError(DSSError):
    """A partial signature does not match the public commitments."""


class InsufficientSharesError(DSSError):
    """Fewer than threshold shares are available."""


class RecoveryError(DSSError):
    """Interpolation was given a degenerate set of shares."""


class SignatureVerificationError(DSSError):
    """A Schnorr signature does not verify."""
