"""
Copyright (c) 2021-2024 Jesse Posner

Distributed under the MIT software license, see the accompanying file LICENSE
or http://www.opensource.org/licenses/mit-license.php.

This code is currently a work in progress. It's not secure nor stable.  IT IS
EXTREMELY DANGEROUS AND RECKLESS TO USE THIS MODULE IN PRODUCTION!

This package implements distributed (threshold) Schnorr signatures in which a
group holding a long-term distributed key and a single-use distributed random
key issues a BIP340 signature without any member learning either secret.

Modules:
- session: the SigningSession issuing, verifying and combining partial
  signatures, and the verify function for the resulting signatures.
- dkg: distributed key generation producing the key shares a session needs.
- share: Shamir shares, public polynomial commitments and Lagrange recovery.
- schnorr: single-party BIP340 signing, verification and tagged hashing.
- point: the Point class for secp256k1 arithmetic.
- errors: the exceptions raised by the protocol.
- constants: curve parameters P, Q, G and hash tags.
"""

from .point import Point, G
from .constants import P, Q
from .dkg import DistKeyShare, DistKeyGenerator, generate_dist_key_shares
from .errors import (
    DSSError,
    ParticipantNotFoundError,
    IndexOutOfRangeError,
    InvalidAuthenticationError,
    SessionMismatchError,
    DuplicateShareError,
    InvalidPartialValueError,
    InsufficientSharesError,
    RecoveryError,
    SignatureVerificationError,
)
from .session import PartialSig, SigningSession, session_id, verify
from .share import PriShare, PubShare, PriPoly, PubPoly, lagrange_coefficient, recover_secret
