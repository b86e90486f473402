"""
Distributed Schnorr signing session.

A group that has run key generation twice, once for a long-term key and once
for a single-use random key, can produce a signature under the long-term
combined public key without reconstructing either secret. Each participant
builds a SigningSession for the message, issues its partial signature, and
feeds in the partial signatures of the others. Once threshold partial
signatures have been accepted any holder of the session can recover the
signature, which is an ordinary BIP340 signature.

Partial signatures are authenticated with each participant's long-term
individual key, bound to a session identifier derived from both sets of
commitments, and checked against the public commitments to the issuer's
shares before they are accepted.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
import threading
from typing import List, Optional, Sequence, Set, Tuple
from . import schnorr
from .constants import Q, INDEX_SIZE, SCALAR_SIZE, SIGNATURE_SIZE, PARTIAL_TAG, SESSION_TAG
from .dkg import DistKeyShare
from .errors import (
    DuplicateShareError,
    IndexOutOfRangeError,
    InsufficientSharesError,
    InvalidAuthenticationError,
    InvalidPartialValueError,
    ParticipantNotFoundError,
    SessionMismatchError,
    SignatureVerificationError,
)
from .point import Point, G
from .share import PriShare, PubPoly, recover_secret

logger = logging.getLogger(__name__)

SESSION_ID_SIZE = 32


@dataclass(frozen=True)
class PartialSig:
    """
    A participant's contribution to the distributed signature, to be sent to
    every other participant.

    partial holds the issuer's index and response scalar, session_id the
    session it is bound to, and signature the BIP340 tag made with the
    issuer's long-term individual key over `hash()`.
    """

    partial: PriShare
    session_id: bytes
    signature: bytes = b""

    def hash(self) -> bytes:
        """
        Digest of the index, the response and the session id.

        Raises:
        ValueError: If the index is negative or the response is not a scalar.
        """
        index = self.partial.index
        value = self.partial.value
        if not isinstance(index, int) or not 0 <= index < 2 ** (8 * INDEX_SIZE):
            raise ValueError("Partial signature index cannot be encoded.")
        if not isinstance(value, int) or not 0 <= value < Q:
            raise ValueError("Partial signature value is not a scalar.")
        return schnorr.tagged_hash(
            PARTIAL_TAG,
            index.to_bytes(INDEX_SIZE, "big")
            + value.to_bytes(SCALAR_SIZE, "big")
            + self.session_id,
        )

    def serialize(self) -> bytes:
        """
        Encode as index || value || session_id || signature.

        Raises:
        ValueError: If a field has the wrong size.
        """
        if len(self.session_id) != SESSION_ID_SIZE:
            raise ValueError(f"Session id must be {SESSION_ID_SIZE} bytes.")
        if len(self.signature) != SIGNATURE_SIZE:
            raise ValueError(f"Signature must be {SIGNATURE_SIZE} bytes.")
        if not 0 <= self.partial.index < 2 ** (8 * INDEX_SIZE):
            raise ValueError("Partial signature index cannot be encoded.")
        if not 0 <= self.partial.value < Q:
            raise ValueError("Partial signature value is not a scalar.")
        return (
            self.partial.index.to_bytes(INDEX_SIZE, "big")
            + self.partial.value.to_bytes(SCALAR_SIZE, "big")
            + self.session_id
            + self.signature
        )

    @classmethod
    def deserialize(cls, data: bytes) -> PartialSig:
        """
        Decode the output of `serialize`.

        Raises:
        ValueError: If the input has the wrong length.
        """
        size = INDEX_SIZE + SCALAR_SIZE + SESSION_ID_SIZE + SIGNATURE_SIZE
        if len(data) != size:
            raise ValueError(f"Partial signature must be exactly {size} bytes.")

        offset = INDEX_SIZE + SCALAR_SIZE
        index = int.from_bytes(data[:INDEX_SIZE], "big")
        value = int.from_bytes(data[INDEX_SIZE:offset], "big")
        session_id = data[offset : offset + SESSION_ID_SIZE]
        signature = data[offset + SESSION_ID_SIZE :]
        return cls(PriShare(index, value), session_id, signature)


def session_id(long: DistKeyShare, random: DistKeyShare) -> bytes:
    """
    Derive the identifier shared by every session built on the same pair of
    key shares.

    Parameters:
    long (DistKeyShare): The long-term key share.
    random (DistKeyShare): The random key share.

    Returns:
    bytes: 32-byte hash of both ordered commitment lists.
    """
    data = b""
    for commitments in (long.commitments, random.commitments):
        data += len(commitments).to_bytes(INDEX_SIZE, "big")
        data += b"".join(commitment.sec_serialize() for commitment in commitments)
    return schnorr.tagged_hash(SESSION_TAG, data)


class SigningSession:
    """
    Class holding the state needed to issue a partial signature and to
    combine partial signatures into the distributed signature.
    """

    def __init__(
        self,
        secret: int,
        participants: Sequence[Point],
        long: DistKeyShare,
        random: DistKeyShare,
        message: bytes,
        threshold: int,
    ):
        """
        Initialize a signing session.

        Parameters:
        secret (int): This participant's long-term individual secret key, used
            to authenticate its partial signature.
        participants (Sequence[Point]): Long-term individual public keys of all
            participants. A participant's index is its position in this list.
        long (DistKeyShare): This participant's long-term distributed key share.
        random (DistKeyShare): This participant's single-use random key share.
        message (bytes): The message to sign.
        threshold (int): The number of partial signatures needed.

        Raises:
        ParticipantNotFoundError: If the public key of secret is not in participants.
        ValueError: If secret is not in the range 1..Q-1, or threshold is not
            between 1 and the number of participants.
        """
        if not isinstance(secret, int) or not 0 < secret < Q:
            raise ValueError("Secret key must be an integer in the range 1..Q-1.")

        public = secret * G
        for i, participant in enumerate(participants):
            if participant == public:
                index = i
                break
        else:
            raise ParticipantNotFoundError("Public key not found in list of participants.")

        if not 1 <= threshold <= len(participants):
            raise ValueError("Threshold must be between 1 and the number of participants.")

        self.secret = secret
        self.public = public
        self.index = index
        self.participants: Tuple[Point, ...] = tuple(participants)
        self.threshold = threshold
        self.long = long
        self.random = random
        self.long_poly = PubPoly(long.commitments)
        self.random_poly = PubPoly(random.commitments)
        self.message = message
        self.session_id = session_id(long, random)

        self._partials: List[PriShare] = []
        self._partials_idx: Set[int] = set()
        self._partial_sig: Optional[PartialSig] = None
        self._challenge: Optional[int] = None
        self._lock = threading.Lock()

    def _challenge_hash(self) -> int:
        # c = H(R || A || m) with
        #  * R = distributed random public key
        #  * A = distributed long-term public key
        if self._challenge is None:
            self._challenge = schnorr.challenge_hash(
                self.random_poly.commit(), self.long_poly.commit(), self.message
            )
        return self._challenge

    def _long_sign(self) -> int:
        # BIP340 signs for the even-y lift of A, so odd A negates every share.
        return 1 if self.long_poly.commit().has_even_y() else -1

    def _random_sign(self) -> int:
        return 1 if self.random_poly.commit().has_even_y() else -1

    def partial_sig(self) -> PartialSig:
        """
        Issue this participant's partial signature.

        The first call computes the response γ_i = c * α_i + β_i, records it
        as accepted and caches the result; later calls return the cached
        partial signature.

        Returns:
        PartialSig: The authenticated partial signature.
        """
        with self._lock:
            if self._partial_sig is not None:
                return self._partial_sig

            # γ_i = c * α_i + β_i
            alpha = self._long_sign() * self.long.share.value
            beta = self._random_sign() * self.random.share.value
            value = (self._challenge_hash() * alpha + beta) % Q

            unsigned = PartialSig(PriShare(self.index, value), self.session_id)
            partial_sig = PartialSig(
                unsigned.partial,
                self.session_id,
                schnorr.sign(self.secret, unsigned.hash()),
            )

            if self.index not in self._partials_idx:
                self._partials_idx.add(self.index)
                self._partials.append(partial_sig.partial)
            self._partial_sig = partial_sig

        logger.debug(f"Participant {self.index} issued its partial signature")
        return partial_sig

    def process_partial_sig(self, partial_sig: PartialSig) -> None:
        """
        Verify a partial signature from another participant and store it.

        Nothing is stored unless every check passes. Use `enough_partial_sigs`
        to find out whether the signature can be recovered afterwards.

        Parameters:
        partial_sig (PartialSig): The received partial signature.

        Raises:
        IndexOutOfRangeError: If the index names no participant.
        InvalidAuthenticationError: If the tag does not verify under the
            issuer's public key.
        SessionMismatchError: If the partial signature is for another session.
        DuplicateShareError: If a share for this index was already accepted.
        InvalidPartialValueError: If the response does not match the issuer's
            public key shares.
        """
        index = partial_sig.partial.index
        if not isinstance(index, int) or not 0 <= index < len(self.participants):
            logger.debug(f"Rejected partial signature with invalid index {index}")
            raise IndexOutOfRangeError(f"Partial signature with invalid index {index}.")

        try:
            authenticated = schnorr.verify(
                self.participants[index].xonly_serialize(),
                partial_sig.hash(),
                partial_sig.signature,
            )
        except ValueError as e:
            logger.debug(f"Rejected malformed partial signature from {index}: {e}")
            raise InvalidAuthenticationError(
                f"Malformed partial signature from participant {index}."
            ) from e
        if not authenticated:
            logger.debug(f"Rejected unauthenticated partial signature from {index}")
            raise InvalidAuthenticationError(
                f"Invalid authentication tag from participant {index}."
            )

        # session ids are public
        if partial_sig.session_id != self.session_id:
            logger.debug(f"Rejected partial signature from {index} for another session")
            raise SessionMismatchError("Session ids do not match.")

        if index in self._partials_idx:
            raise DuplicateShareError(
                f"Partial signature already received from participant {index}."
            )

        if not self._verify_partial(partial_sig.partial):
            logger.info(f"Participant {index} sent an invalid partial signature")
            raise InvalidPartialValueError(
                f"Partial signature from participant {index} is not valid."
            )

        with self._lock:
            if index in self._partials_idx:
                raise DuplicateShareError(
                    f"Partial signature already received from participant {index}."
                )
            self._partials_idx.add(index)
            self._partials.append(partial_sig.partial)
            accepted = len(self._partials)

        logger.debug(
            f"Participant {self.index} accepted partial signature from {index} "
            f"({accepted}/{self.threshold})"
        )

    def _verify_partial(self, partial: PriShare) -> bool:
        # g^γ_i ≟ A_i^c * R_i
        long_share = self.long_poly.eval(partial.index).value
        random_share = self.random_poly.eval(partial.index).value
        if self._long_sign() < 0:
            long_share = -long_share
        if self._random_sign() < 0:
            random_share = -random_share

        right = (self._challenge_hash() * long_share) + random_share
        return partial.value * G == right

    def enough_partial_sigs(self) -> bool:
        """Return True once threshold partial signatures have been accepted."""
        return len(self._partials) >= self.threshold

    def accepted_indices(self) -> Tuple[int, ...]:
        """Return the indices of the accepted partial signatures, in arrival order."""
        with self._lock:
            return tuple(partial.index for partial in self._partials)

    def signature(self) -> bytes:
        """
        Recover the distributed signature from the accepted partial signatures.

        Returns:
        bytes: The 64-byte BIP340 signature R || γ, valid under the long-term
        combined public key.

        Raises:
        InsufficientSharesError: If fewer than threshold partial signatures
            have been accepted.
        RecoveryError: If the accepted shares cannot be interpolated.
        """
        with self._lock:
            partials = tuple(self._partials)
        if len(partials) < self.threshold:
            raise InsufficientSharesError(
                "Not enough partial signatures to sign: "
                f"{len(partials)} < {self.threshold}."
            )

        gamma = recover_secret(partials, self.threshold, len(self.participants))
        # R || γ
        return self.random_poly.commit().xonly_serialize() + gamma.to_bytes(
            SCALAR_SIZE, "big"
        )


def verify(public_key: Point, message: bytes, signature: bytes) -> None:
    """
    Verify a Schnorr signature under a public key.

    Parameters:
    public_key (Point): The public key, such as the long-term combined key.
    message (bytes): The signed message.
    signature (bytes): The 64-byte signature.

    Raises:
    SignatureVerificationError: If the signature is invalid or malformed.
    """
    try:
        valid = schnorr.verify(public_key.xonly_serialize(), message, signature)
    except ValueError as e:
        raise SignatureVerificationError(str(e)) from e
    if not valid:
        raise SignatureVerificationError("Invalid signature.")
