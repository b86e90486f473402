import argparse
import logging
import secrets
import sys

from .constants import Q
from .dkg import generate_dist_key_shares
from .errors import DSSError, SignatureVerificationError
from .point import Point, G
from .session import SigningSession, verify as verify_signature

logger = logging.getLogger(__name__)


def _parse_signers(value):
    try:
        return tuple(int(i) for i in value.split(","))
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid signer list: {value}") from e


def _parse_public_key(value):
    data = bytes.fromhex(value)
    if len(data) == 32:
        return Point.lift_x(data)
    return Point.sec_deserialize(data)


def demo(args):
    # Sign a message with a locally simulated group and check the result
    n, t = args.participants, args.threshold
    signers = args.signers if args.signers is not None else tuple(range(t))
    if not 1 <= t <= n:
        print("threshold must be between 1 and the number of participants", file=sys.stderr)
        return 1
    if any(not 0 <= i < n for i in signers) or len(set(signers)) != len(signers):
        print("signers must be distinct participant indexes", file=sys.stderr)
        return 1

    message = args.message.encode()
    secret_keys = [1 + secrets.randbelow(Q - 1) for _ in range(n)]
    participants = [secret * G for secret in secret_keys]
    long_shares = generate_dist_key_shares(t, n)
    random_shares = generate_dist_key_shares(t, n)

    sessions = [
        SigningSession(
            secret_keys[i], participants, long_shares[i], random_shares[i], message, t
        )
        for i in range(n)
    ]
    combiner = sessions[signers[0]]
    try:
        for i in signers:
            partial_sig = sessions[i].partial_sig()
            if i != combiner.index:
                combiner.process_partial_sig(partial_sig)
        signature = combiner.signature()
        verify_signature(long_shares[0].public_key(), message, signature)
    except DSSError as e:
        logger.error(f"Signing failed: {e}")
        return 1

    print("Public key:", long_shares[0].public_key().xonly_serialize().hex())
    print("Signature: ", signature.hex())
    return 0


def verify(args):
    # Verify message against public key
    try:
        public_key = _parse_public_key(args.public_key)
        signature = bytes.fromhex(args.signature)
    except ValueError as e:
        print(f"invalid input: {e}", file=sys.stderr)
        return 1

    try:
        verify_signature(public_key, args.message.encode(), signature)
    except SignatureVerificationError:
        print("invalid")
        return 1
    print("valid")
    return 0


def main(argv=None):
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--verbose", action="store_true", default=argparse.SUPPRESS, help="Enable debug logging."
    )

    parser = argparse.ArgumentParser(prog="dss", parents=[common])
    subparsers = parser.add_subparsers()

    parser_demo = subparsers.add_parser(
        'demo', parents=[common], help='Sign a message with a locally simulated group.'
    )
    parser_demo.add_argument('--participants', type=int, default=3, help='Number of participants.')
    parser_demo.add_argument('--threshold', type=int, default=2, help='Signing threshold.')
    parser_demo.add_argument('--message', type=str, required=True, help='Message to sign.')
    parser_demo.add_argument(
        '--signers', type=_parse_signers, help='Comma separated indexes of the signers.'
    )
    parser_demo.set_defaults(func=demo)

    parser_verify = subparsers.add_parser('verify', parents=[common], help='Verify a message')
    parser_verify.add_argument('--public-key', type=str, required=True, help='Public key for verification.')
    parser_verify.add_argument('--message', type=str, required=True, help='Message to verify.')
    parser_verify.add_argument('--signature', type=str, required=True, help='Hex encoded signature.')
    parser_verify.set_defaults(func=verify)

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if getattr(args, "verbose", False) else logging.INFO)
    if hasattr(args, 'func'):
        return args.func(args)
    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
