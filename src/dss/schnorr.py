"""
Single-party BIP340 Schnorr signatures over secp256k1.

These are the primitives the distributed protocol builds on: the tagged hash
used for every domain-separated digest, the BIP340 challenge, and plain
signing and verification. Partial signatures are authenticated with `sign`,
and a recovered distributed signature is checked with `verify` exactly like a
signature from a single key holder.
"""

from hashlib import sha256
import secrets
from typing import Optional
from .constants import Q, AUX_TAG, NONCE_TAG, CHALLENGE_TAG
from .point import Point, G


def tagged_hash(tag: str, data: bytes) -> bytes:
    """
    Compute SHA256(SHA256(tag) || SHA256(tag) || data).

    Parameters:
    tag (str): The domain separation tag.
    data (bytes): The data to hash.

    Returns:
    bytes: The 32-byte digest.
    """
    tag_hash = sha256(tag.encode()).digest()
    return sha256(tag_hash + tag_hash + data).digest()


def challenge_hash(nonce_commitment: Point, public_key: Point, message: bytes) -> int:
    """
    Compute the BIP340 challenge binding the nonce commitment, the public key
    and the message.

    Parameters:
    nonce_commitment (Point): The nonce commitment R.
    public_key (Point): The public key Y.
    message (bytes): The signed message.

    Returns:
    int: c = H(R, Y, m) reduced modulo Q.
    """
    # c = H_2(R, Y, m)
    digest = tagged_hash(
        CHALLENGE_TAG,
        nonce_commitment.xonly_serialize() + public_key.xonly_serialize() + message,
    )
    return int.from_bytes(digest, "big") % Q


def pubkey_gen(secret: int) -> bytes:
    """Return the x-only public key for a secret scalar."""
    if not 1 <= secret <= Q - 1:
        raise ValueError("The secret key must be an integer in the range 1..Q-1.")
    return (secret * G).xonly_serialize()


def sign(secret: int, message: bytes, aux_rand: Optional[bytes] = None) -> bytes:
    """
    Produce a BIP340 signature.

    Parameters:
    secret (int): The signing key, 1 <= secret < Q.
    message (bytes): The message to sign, of any length.
    aux_rand (Optional[bytes]): 32 bytes of auxiliary randomness. Fresh random
        bytes are drawn when omitted.

    Returns:
    bytes: The 64-byte signature R.x || s.

    Raises:
    ValueError: If the secret is out of range or aux_rand is not 32 bytes.
    """
    if not 1 <= secret <= Q - 1:
        raise ValueError("The secret key must be an integer in the range 1..Q-1.")
    if aux_rand is None:
        aux_rand = secrets.token_bytes(32)
    if len(aux_rand) != 32:
        raise ValueError("aux_rand must be 32 bytes.")

    public_key = secret * G
    d = secret if public_key.has_even_y() else Q - secret
    masked = bytes(
        a ^ b for a, b in zip(d.to_bytes(32, "big"), tagged_hash(AUX_TAG, aux_rand))
    )
    nonce = (
        int.from_bytes(
            tagged_hash(NONCE_TAG, masked + public_key.xonly_serialize() + message),
            "big",
        )
        % Q
    )
    if nonce == 0:
        raise RuntimeError("Failure. This happens only with negligible probability.")

    nonce_commitment = nonce * G
    k = nonce if nonce_commitment.has_even_y() else Q - nonce
    c = challenge_hash(nonce_commitment, public_key, message)

    # σ = (R, k + c * d)
    return nonce_commitment.xonly_serialize() + ((k + c * d) % Q).to_bytes(32, "big")


def verify(public_key: bytes, message: bytes, signature: bytes) -> bool:
    """
    Verify a BIP340 signature.

    Parameters:
    public_key (bytes): The 32-byte x-only public key.
    message (bytes): The signed message.
    signature (bytes): The 64-byte signature.

    Returns:
    bool: True if the signature is valid, False otherwise.

    Raises:
    ValueError: If the public key or the signature has the wrong length.
    """
    if len(public_key) != 32:
        raise ValueError("The public key must be a 32-byte array.")
    if len(signature) != 64:
        raise ValueError("The signature must be a 64-byte array.")

    try:
        point = Point.lift_x(public_key)
        nonce_commitment = Point.lift_x(signature[:32])
    except ValueError:
        return False
    s = int.from_bytes(signature[32:], "big")
    if s >= Q:
        return False

    c = challenge_hash(nonce_commitment, point, message)
    # R ≟ g^s * Y^-c
    expected = (s * G) + ((Q - c) * point)
    if expected.is_zero() or not expected.has_even_y():
        return False
    return expected.x == nonce_commitment.x
