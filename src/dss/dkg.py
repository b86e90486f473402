"""
Distributed key generation producing the key shares consumed by a signing
session.

Each participant deals a random polynomial to the others, proves knowledge of
its constant term with a Schnorr proof, and publishes commitments to every
coefficient. A participant's final share is the sum of the shares dealt to it,
and the group commitments are the element-wise sum of all dealers'
commitments. The constant group commitment is the combined public key.

A signing session needs two independent runs: one for the long-term key and
one for the single-use random key.
"""

from dataclasses import dataclass
from hashlib import sha256
import logging
import secrets
from typing import Optional, Tuple
from .constants import Q, INDEX_SIZE, KEYGEN_TAG
from .point import Point, G
from .share import PriPoly, PriShare, PubPoly

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DistKeyShare:
    """
    A participant's output of distributed key generation.

    share is the participant's private share of the distributed secret and
    commitments are the ordered group coefficient commitments, whose first
    element is the combined public key.
    """

    share: PriShare
    commitments: Tuple[Point, ...]

    def public_key(self) -> Point:
        return self.commitments[0]


class DistKeyGenerator:
    """Class representing one participant in distributed key generation."""

    def __init__(self, index: int, threshold: int, participants: int):
        """
        Initialize a participant.

        Parameters:
        index (int): Position of the participant, 0 <= index < participants.
        threshold (int): The number of shares needed to sign.
        participants (int): The total number of participants.

        Raises:
        ValueError: If the arguments are not integers or out of range.
        """
        if not all(isinstance(arg, int) for arg in (index, threshold, participants)):
            raise ValueError(
                "All arguments (index, threshold, participants) must be integers."
            )
        if not 1 <= threshold <= participants:
            raise ValueError("Threshold must be between 1 and the number of participants.")
        if not 0 <= index < participants:
            raise ValueError("Participant index is out of range.")

        self.index = index
        self.threshold = threshold
        self.participants = participants
        self.polynomial: Optional[PriPoly] = None
        self.coefficient_commitments: Optional[PubPoly] = None
        self.proof_of_knowledge: Optional[Tuple[Point, int]] = None
        self.aggregate_share: Optional[int] = None
        self.group_commitments: Optional[PubPoly] = None

    def init_keygen(self) -> None:
        """Generate the polynomial, its commitments and the proof of knowledge."""
        # 1. Generate polynomial with random coefficients, and with degree
        # equal to the threshold minus one.
        self.polynomial = PriPoly.random(self.threshold)
        # 2. Compute proof of knowledge of secret a_i_0.
        self.proof_of_knowledge = self._prove_knowledge(self.polynomial.secret())
        # 3. Compute coefficient commitments.
        self.coefficient_commitments = self.polynomial.commit()

    def _prove_knowledge(self, secret: int) -> Tuple[Point, int]:
        # k ⭠ ℤ_q
        nonce = secrets.randbits(256) % Q
        nonce_commitment = nonce * G
        challenge = self._proof_challenge(self.index, secret * G, nonce_commitment)
        # μ_i = k + a_i_0 * c_i
        return nonce_commitment, (nonce + secret * challenge) % Q

    @staticmethod
    def _proof_challenge(index: int, secret_commitment: Point, nonce_commitment: Point) -> int:
        # c_i = H(i, 𝚽, g^a_i_0, R_i)
        challenge = sha256()
        challenge.update(index.to_bytes(INDEX_SIZE, "big"))
        challenge.update(KEYGEN_TAG.encode())
        challenge.update(secret_commitment.sec_serialize())
        challenge.update(nonce_commitment.sec_serialize())
        return int.from_bytes(challenge.digest(), "big") % Q

    def verify_proof_of_knowledge(
        self, proof: Tuple[Point, int], secret_commitment: Point, index: int
    ) -> bool:
        """
        Verify another participant's proof of knowledge of its secret.

        Parameters:
        proof (Tuple[Point, int]): The nonce commitment R_l and response μ_l.
        secret_commitment (Point): The dealer's commitment g^a_l_0.
        index (int): The dealer's index.

        Returns:
        bool: True if the proof is valid.

        Raises:
        ValueError: If the proof is malformed.
        """
        if len(proof) != 2:
            raise ValueError(
                "Proof must be a tuple containing exactly two elements (nonce commitment and s)."
            )
        nonce_commitment, s = proof
        if not isinstance(nonce_commitment, Point) or not isinstance(s, int):
            raise ValueError("Proof must contain a Point and an integer.")

        challenge = self._proof_challenge(index, secret_commitment, nonce_commitment)
        # R_l ≟ g^μ_l * 𝜙_l_0^-c_l
        return nonce_commitment == (s * G) + ((Q - challenge) * secret_commitment)

    def deal(self) -> Tuple[PriShare, ...]:
        """
        Return the share of this participant's polynomial for every participant.

        Raises:
        ValueError: If keygen has not been initialized.
        """
        if self.polynomial is None:
            raise ValueError(
                "Polynomial coefficients must be initialized before generating shares."
            )
        return self.polynomial.shares(self.participants)

    def verify_share(self, share: PriShare, coefficient_commitments: PubPoly) -> bool:
        """
        Check a share dealt to this participant against the dealer's commitments.

        Raises:
        ValueError: If the share is for another participant or the number of
        commitments does not match the threshold.
        """
        if share.index != self.index:
            raise ValueError("Share was dealt to a different participant.")
        if coefficient_commitments.threshold != self.threshold:
            raise ValueError(
                "The number of coefficient commitments must match the threshold."
            )
        # g^f_l(i) ≟ ∏ 𝜙_l_k^i^k
        return coefficient_commitments.check(share)

    def aggregate_shares(self, other_shares: Tuple[PriShare, ...]) -> None:
        """
        Sum the shares dealt to this participant into its key share.

        Parameters:
        other_shares (Tuple[PriShare, ...]): Shares dealt by the other participants.

        Raises:
        ValueError: If keygen has not been initialized, or the count or the
        index of the shares is wrong.
        """
        if self.polynomial is None:
            raise ValueError("Participant's shares have not been initialized.")
        if len(other_shares) != self.participants - 1:
            raise ValueError(
                f"Expected exactly {self.participants - 1} other shares, "
                f"received {len(other_shares)}."
            )

        # s_i = ∑ f_l(i), 1 ≤ l ≤ n
        aggregate_share = self.polynomial.eval(self.index).value
        for other_share in other_shares:
            if other_share.index != self.index:
                raise ValueError("Share was dealt to a different participant.")
            aggregate_share = (aggregate_share + other_share.value) % Q
        self.aggregate_share = aggregate_share

    def derive_group_commitments(self, other_commitments: Tuple[PubPoly, ...]) -> None:
        """
        Add every dealer's coefficient commitments into the group commitments.

        Raises:
        ValueError: If keygen has not been initialized.
        """
        if self.coefficient_commitments is None:
            raise ValueError(
                "Coefficient commitments have not been initialized or are empty."
            )

        group_commitments = self.coefficient_commitments
        for commitments in other_commitments:
            group_commitments = group_commitments + commitments
        self.group_commitments = group_commitments

    def dist_key_share(self) -> DistKeyShare:
        """
        Return the finished key share.

        Raises:
        ValueError: If shares or commitments have not been aggregated, or the
        aggregate share does not match the group commitments.
        """
        if self.aggregate_share is None or self.group_commitments is None:
            raise ValueError("Key generation has not completed.")

        share = PriShare(self.index, self.aggregate_share)
        if not self.group_commitments.check(share):
            raise ValueError("Aggregate share does not match the group commitments.")
        return DistKeyShare(share, self.group_commitments.commitments)


def generate_dist_key_shares(threshold: int, participants: int) -> Tuple[DistKeyShare, ...]:
    """
    Run a complete key generation among local participants.

    Every proof of knowledge and every dealt share is verified by its
    recipient, as each participant would in a networked run.

    Parameters:
    threshold (int): The number of shares needed to sign.
    participants (int): The total number of participants.

    Returns:
    Tuple[DistKeyShare, ...]: One key share per participant, in index order.

    Raises:
    ValueError: If a proof of knowledge or a dealt share fails to verify.
    """
    generators = tuple(
        DistKeyGenerator(i, threshold, participants) for i in range(participants)
    )
    for generator in generators:
        generator.init_keygen()

    dealt = tuple(generator.deal() for generator in generators)

    for receiver in generators:
        others = tuple(g for g in generators if g.index != receiver.index)
        for dealer in others:
            if not receiver.verify_proof_of_knowledge(
                dealer.proof_of_knowledge,
                dealer.coefficient_commitments.commit(),
                dealer.index,
            ):
                raise ValueError(f"Invalid proof of knowledge from participant {dealer.index}.")
            if not receiver.verify_share(
                dealt[dealer.index][receiver.index], dealer.coefficient_commitments
            ):
                raise ValueError(f"Invalid share from participant {dealer.index}.")

        receiver.aggregate_shares(
            tuple(dealt[dealer.index][receiver.index] for dealer in others)
        )
        receiver.derive_group_commitments(
            tuple(dealer.coefficient_commitments for dealer in others)
        )

    key_shares = tuple(generator.dist_key_share() for generator in generators)
    logger.info(
        f"Generated distributed key for {participants} participants "
        f"with threshold {threshold}"
    )
    return key_shares
