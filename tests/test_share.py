import unittest

from dss import G, Q, Point
from dss import PriPoly, PriShare, PubPoly, lagrange_coefficient, recover_secret
from dss import InsufficientSharesError, RecoveryError
from dss.share import recover_commit


class Tests(unittest.TestCase):
    def setUp(self):
        self.n = 5
        self.t = 3
        self.poly = PriPoly.random(self.t)
        self.shares = self.poly.shares(self.n)

    def test_shares_are_indexed_from_zero(self):
        self.assertEqual(tuple(s.index for s in self.shares), (0, 1, 2, 3, 4))
        # f(1) = a_0 + a_1 + a_2
        self.assertEqual(self.shares[0].value, sum(self.poly.coefficients) % Q)

    def test_recover_secret(self):
        secret = self.poly.secret()
        self.assertEqual(recover_secret(self.shares, self.t, self.n), secret)
        self.assertEqual(recover_secret(self.shares[:3], self.t, self.n), secret)
        self.assertEqual(recover_secret(self.shares[2:], self.t, self.n), secret)
        subset = (self.shares[4], self.shares[1], self.shares[3])
        self.assertEqual(recover_secret(subset, self.t, self.n), secret)

    def test_recover_secret_skips_missing_shares(self):
        shares = (None, self.shares[1], None, self.shares[3], self.shares[4])
        self.assertEqual(recover_secret(shares, self.t, self.n), self.poly.secret())

    def test_recover_secret_with_fixed_secret(self):
        poly = PriPoly.random(2, secret=42)
        self.assertEqual(poly.secret(), 42)
        self.assertEqual(recover_secret(poly.shares(3)[1:], 2, 3), 42)

    def test_not_enough_shares(self):
        with self.assertRaises(InsufficientSharesError):
            recover_secret(self.shares[:2], self.t, self.n)
        with self.assertRaises(InsufficientSharesError):
            recover_secret((), self.t, self.n)

    def test_degenerate_shares(self):
        duplicate = (self.shares[0], self.shares[1], self.shares[1])
        with self.assertRaises(RecoveryError):
            recover_secret(duplicate, self.t, self.n)

        out_of_range = (self.shares[0], self.shares[1], PriShare(self.n, 1))
        with self.assertRaises(RecoveryError):
            recover_secret(out_of_range, self.t, self.n)

    def test_lagrange_coefficient(self):
        # λ_0 + λ_1 = 1 for any two points, since the constant polynomial 1
        # interpolates to itself.
        indices = (0, 1)
        total = sum(lagrange_coefficient(indices, i) for i in indices) % Q
        self.assertEqual(total, 1)

        # Evaluating the basis at x_i itself gives 1.
        self.assertEqual(lagrange_coefficient((2, 4, 7), 4, x=5), 1)
        self.assertEqual(lagrange_coefficient((2, 4, 7), 2, x=5), 0)

        with self.assertRaises(ValueError):
            lagrange_coefficient((1, 1, 2), 1)

    def test_public_polynomial(self):
        commitments = self.poly.commit()
        self.assertEqual(commitments.threshold, self.t)
        self.assertEqual(commitments.commit(), self.poly.secret() * G)

        for share in self.shares:
            public_share = commitments.eval(share.index)
            self.assertEqual(public_share.index, share.index)
            self.assertEqual(public_share.value, share.value * G)
            self.assertTrue(commitments.check(share))

        bad_share = PriShare(0, (self.shares[0].value + 1) % Q)
        self.assertFalse(commitments.check(bad_share))

    def test_recover_commit(self):
        commitments = self.poly.commit()
        public_shares = tuple(commitments.eval(i) for i in (4, 0, 2))
        self.assertEqual(
            recover_commit(public_shares, self.t, self.n), commitments.commit()
        )

    def test_public_polynomial_addition(self):
        other = PriPoly.random(self.t)
        combined = self.poly.commit() + other.commit()
        expected = PriPoly(
            tuple(a + b for a, b in zip(self.poly.coefficients, other.coefficients))
        )
        self.assertEqual(combined, expected.commit())

        with self.assertRaises(ValueError):
            self.poly.commit() + PriPoly.random(self.t + 1).commit()

    def test_invalid_polynomials(self):
        with self.assertRaises(ValueError):
            PriPoly(())
        with self.assertRaises(ValueError):
            PubPoly(())
        with self.assertRaises(ValueError):
            PriPoly.random(0)
        with self.assertRaises(ValueError):
            self.poly.eval(-1)
        self.assertEqual(PubPoly((Point(),)).eval(3).value, Point())


if __name__ == "__main__":
    unittest.main()
