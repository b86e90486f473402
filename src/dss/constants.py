"""
Curve parameters for secp256k1 and the hash tags used by the distributed
signing protocol. The field has prime order P and the base point G, given by
G_x and G_y, generates a group of prime order Q.
"""

# secp256k1 constants for elliptic curve cryptography

# The prime modulus of the field
P: int = 2**256 - 2**32 - 977

# The order of the curve
Q: int = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

# X-coordinate of the generator point G
G_x: int = 0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798

# Y-coordinate of the generator point G
G_y: int = 0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8

# BIP340 tags
AUX_TAG: str = "BIP0340/aux"
NONCE_TAG: str = "BIP0340/nonce"
CHALLENGE_TAG: str = "BIP0340/challenge"

# Protocol tags
SESSION_TAG: str = "DSS/session"
PARTIAL_TAG: str = "DSS/partial"
KEYGEN_TAG: str = "DSS/keygen"

# Byte lengths of the wire encodings
SCALAR_SIZE: int = 32
INDEX_SIZE: int = 4
SIGNATURE_SIZE: int = 64
