import unittest

from dss import G, Point
from dss import DistKeyGenerator, PubPoly, generate_dist_key_shares, recover_secret


class Tests(unittest.TestCase):
    def setUp(self):
        self.p0 = DistKeyGenerator(index=0, threshold=2, participants=3)
        self.p1 = DistKeyGenerator(index=1, threshold=2, participants=3)
        self.p2 = DistKeyGenerator(index=2, threshold=2, participants=3)

        for p in (self.p0, self.p1, self.p2):
            p.init_keygen()

    def test_proof_of_knowledge(self):
        p0, p1, p2 = self.p0, self.p1, self.p2

        self.assertTrue(
            p0.verify_proof_of_knowledge(
                p1.proof_of_knowledge, p1.coefficient_commitments.commit(), index=1
            )
        )
        self.assertTrue(
            p0.verify_proof_of_knowledge(
                p2.proof_of_knowledge, p2.coefficient_commitments.commit(), index=2
            )
        )
        self.assertTrue(
            p2.verify_proof_of_knowledge(
                p0.proof_of_knowledge, p0.coefficient_commitments.commit(), index=0
            )
        )

        # A proof replayed under another index does not verify.
        self.assertFalse(
            p0.verify_proof_of_knowledge(
                p1.proof_of_knowledge, p1.coefficient_commitments.commit(), index=2
            )
        )
        # Nor does it verify for a different secret.
        self.assertFalse(
            p0.verify_proof_of_knowledge(
                p1.proof_of_knowledge, p2.coefficient_commitments.commit(), index=1
            )
        )

        with self.assertRaises(ValueError):
            p0.verify_proof_of_knowledge((G,), G, index=1)

    def test_keygen(self):
        p0, p1, p2 = self.p0, self.p1, self.p2
        dealt = {p.index: p.deal() for p in (p0, p1, p2)}

        self.assertTrue(p0.verify_share(dealt[1][0], p1.coefficient_commitments))
        self.assertTrue(p1.verify_share(dealt[2][1], p2.coefficient_commitments))
        self.assertTrue(p2.verify_share(dealt[0][2], p0.coefficient_commitments))
        self.assertFalse(p0.verify_share(dealt[1][0], p2.coefficient_commitments))
        with self.assertRaises(ValueError):
            p0.verify_share(dealt[1][1], p1.coefficient_commitments)

        p0.aggregate_shares((dealt[1][0], dealt[2][0]))
        p1.aggregate_shares((dealt[0][1], dealt[2][1]))
        p2.aggregate_shares((dealt[0][2], dealt[1][2]))

        p0.derive_group_commitments((p1.coefficient_commitments, p2.coefficient_commitments))
        p1.derive_group_commitments((p0.coefficient_commitments, p2.coefficient_commitments))
        p2.derive_group_commitments((p0.coefficient_commitments, p1.coefficient_commitments))

        self.assertEqual(p0.group_commitments, p1.group_commitments)
        self.assertEqual(p1.group_commitments, p2.group_commitments)

        # Y = ∏ 𝜙_j_0
        public_key = sum(
            (p.coefficient_commitments.commit() for p in (p0, p1, p2)), Point()
        )
        k0, k1, k2 = (p.dist_key_share() for p in (p0, p1, p2))
        self.assertEqual(k0.public_key(), public_key)

        for shares in ((k0, k1), (k0, k2), (k1, k2)):
            secret = recover_secret(tuple(k.share for k in shares), 2, 3)
            self.assertEqual(secret * G, public_key)

    def test_aggregate_shares_checks_input(self):
        dealt = {p.index: p.deal() for p in (self.p0, self.p1, self.p2)}

        with self.assertRaises(ValueError):
            self.p0.aggregate_shares((dealt[1][0],))
        with self.assertRaises(ValueError):
            self.p0.aggregate_shares((dealt[1][1], dealt[2][0]))

    def test_dist_key_share_checks_consistency(self):
        with self.assertRaises(ValueError):
            self.p0.dist_key_share()

        self.p0.aggregate_share = 1
        self.p0.group_commitments = self.p0.coefficient_commitments
        with self.assertRaises(ValueError):
            self.p0.dist_key_share()

    def test_generate_dist_key_shares(self):
        key_shares = generate_dist_key_shares(threshold=2, participants=3)
        self.assertEqual(len(key_shares), 3)

        commitments = key_shares[0].commitments
        self.assertEqual(len(commitments), 2)
        for i, key_share in enumerate(key_shares):
            self.assertEqual(key_share.share.index, i)
            self.assertEqual(key_share.commitments, commitments)
            self.assertTrue(PubPoly(commitments).check(key_share.share))

        secret = recover_secret((key_shares[2].share, key_shares[0].share), 2, 3)
        self.assertEqual(secret * G, key_shares[0].public_key())

    def test_invalid_parameters(self):
        with self.assertRaises(ValueError):
            DistKeyGenerator(index=0, threshold=4, participants=3)
        with self.assertRaises(ValueError):
            DistKeyGenerator(index=3, threshold=2, participants=3)
        with self.assertRaises(ValueError):
            DistKeyGenerator(index=0, threshold=0, participants=3)
        with self.assertRaises(ValueError):
            DistKeyGenerator(index="0", threshold=2, participants=3)
        with self.assertRaises(ValueError):
            DistKeyGenerator(index=0, threshold=2, participants=3).deal()


if __name__ == "__main__":
    unittest.main()
