"""
Shamir secret sharing over the scalar field of secp256k1, together with the
public (Feldman) commitments that let anyone check a share without learning
it.

Shares are indexed from 0, matching positions in the participant list. The
share with index i is the polynomial evaluated at x = i + 1, so the secret
itself, the value at x = 0, is never handed out as a share.
"""

from __future__ import annotations
from dataclasses import dataclass
import secrets
from typing import Iterable, List, Optional, Sequence, Tuple
from .constants import Q
from .errors import InsufficientSharesError, RecoveryError
from .point import Point, G


@dataclass(frozen=True)
class PriShare:
    """A private share: the secret polynomial evaluated at index + 1."""

    index: int
    value: int


@dataclass(frozen=True)
class PubShare:
    """A public share: the commitment polynomial evaluated at index + 1."""

    index: int
    value: Point


class PriPoly:
    """A secret polynomial of degree threshold - 1."""

    def __init__(self, coefficients: Tuple[int, ...]):
        if not coefficients:
            raise ValueError("A polynomial needs at least one coefficient.")
        self.coefficients = tuple(c % Q for c in coefficients)

    @classmethod
    def random(cls, threshold: int, secret: Optional[int] = None) -> PriPoly:
        """
        Generate a polynomial with random coefficients.

        Parameters:
        threshold (int): The number of shares needed to recover the secret.
        secret (Optional[int]): The constant term. Random when omitted.

        Returns:
        PriPoly: The new polynomial.
        """
        if threshold < 1:
            raise ValueError("Threshold must be at least 1.")
        # (a_0, . . ., a_(t - 1)) ⭠ $ ℤ_q
        coefficients = tuple(secrets.randbits(256) % Q for _ in range(threshold))
        if secret is not None:
            coefficients = (secret % Q,) + coefficients[1:]
        return cls(coefficients)

    @property
    def threshold(self) -> int:
        return len(self.coefficients)

    def secret(self) -> int:
        return self.coefficients[0]

    def eval(self, index: int) -> PriShare:
        """Evaluate the polynomial at index + 1 using Horner's method."""
        if not isinstance(index, int) or index < 0:
            raise ValueError("Share index must be a non-negative integer.")

        x = index + 1
        y = 0
        for coefficient in reversed(self.coefficients):
            y = (y * x + coefficient) % Q
        return PriShare(index, y)

    def shares(self, n: int) -> Tuple[PriShare, ...]:
        """Return the shares for indices 0 .. n - 1."""
        return tuple(self.eval(i) for i in range(n))

    def commit(self) -> PubPoly:
        """Commit to every coefficient: 𝜙_j = g^a_j."""
        return PubPoly(tuple(coefficient * G for coefficient in self.coefficients))


class PubPoly:
    """
    A polynomial in the exponent, given by its ordered coefficient
    commitments. The constant term is the commitment to the shared secret.
    """

    def __init__(self, commitments: Sequence[Point]):
        if not commitments:
            raise ValueError("A public polynomial needs at least one commitment.")
        self.commitments: Tuple[Point, ...] = tuple(commitments)

    @property
    def threshold(self) -> int:
        return len(self.commitments)

    def commit(self) -> Point:
        return self.commitments[0]

    def eval(self, index: int) -> PubShare:
        """
        Compute the public commitment to the share with the given index.

        Parameters:
        index (int): The share index.

        Returns:
        PubShare: g^f(index + 1), obtained as ∏ 𝜙_k^x^k, 0 ≤ k ≤ t - 1.
        """
        if not isinstance(index, int) or index < 0:
            raise ValueError("Share index must be a non-negative integer.")

        x = index + 1
        value = Point()  # Point at infinity
        for k, commitment in enumerate(self.commitments):
            value += pow(x, k, Q) * commitment
        return PubShare(index, value)

    def check(self, share: PriShare) -> bool:
        """Return True if the private share matches this commitment."""
        return share.value * G == self.eval(share.index).value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PubPoly):
            return NotImplemented
        return self.commitments == other.commitments

    def __add__(self, other: PubPoly) -> PubPoly:
        if len(self.commitments) != len(other.commitments):
            raise ValueError("Public polynomials must have the same threshold.")
        return PubPoly(tuple(a + b for a, b in zip(self.commitments, other.commitments)))


def lagrange_coefficient(indices: Sequence[int], index: int, x: int = 0) -> int:
    """
    Calculate the Lagrange basis polynomial for a share, evaluated at x.

    Parameters:
    indices (Sequence[int]): Share indices taking part in the interpolation.
    index (int): The share index whose coefficient is computed.
    x (int): The evaluation point. Defaults to 0, the secret.

    Returns:
    int: λ_index(x) modulo Q.

    Raises:
    ValueError: If duplicate indices are found.
    """
    if len(indices) != len(set(indices)):
        raise ValueError("Share indices must be unique.")

    x_i = index + 1
    # λ_i(x) = ∏ (x - x_j)/(x_i - x_j), j ≠ i
    numerator = 1
    denominator = 1
    for other in indices:
        if other == index:
            continue
        x_j = other + 1
        numerator = numerator * (x - x_j) % Q
        denominator = denominator * (x_i - x_j) % Q
    return (numerator * pow(denominator, Q - 2, Q)) % Q


def _select(shares: Iterable, t: int, n: int) -> List:
    """Pick the first t usable shares, rejecting degenerate input."""
    selected = []
    seen = set()
    for share in shares:
        if share is None:
            continue
        if not 0 <= share.index < n:
            raise RecoveryError(f"Share index {share.index} is out of range.")
        if share.index in seen:
            raise RecoveryError(f"Duplicate share index {share.index}.")
        seen.add(share.index)
        selected.append(share)
        if len(selected) == t:
            break

    if len(selected) < t:
        raise InsufficientSharesError(
            f"Not enough shares to recover the secret: {len(selected)} < {t}."
        )
    return selected


def recover_secret(shares: Iterable[Optional[PriShare]], t: int, n: int) -> int:
    """
    Recover the shared secret by Lagrange interpolation at 0.

    The basis is computed from the indices of the shares actually used, so
    any t distinct shares work. Extra shares beyond the first t are ignored.

    Parameters:
    shares (Iterable[Optional[PriShare]]): Private shares. None entries are skipped.
    t (int): The threshold.
    n (int): The total number of participants.

    Returns:
    int: The secret.

    Raises:
    InsufficientSharesError: If fewer than t shares are given.
    RecoveryError: If an index is duplicated or outside 0 .. n - 1.
    """
    selected = _select(shares, t, n)
    indices = tuple(share.index for share in selected)

    secret = 0
    for share in selected:
        secret = (secret + lagrange_coefficient(indices, share.index) * share.value) % Q
    return secret


def recover_commit(shares: Iterable[Optional[PubShare]], t: int, n: int) -> Point:
    """
    Recover the commitment to the shared secret from public shares. This is
    `recover_secret` carried out in the exponent.

    Raises:
    InsufficientSharesError: If fewer than t shares are given.
    RecoveryError: If an index is duplicated or outside 0 .. n - 1.
    """
    selected = _select(shares, t, n)
    indices = tuple(share.index for share in selected)

    commit = Point()
    for share in selected:
        commit += lagrange_coefficient(indices, share.index) * share.value
    return commit
