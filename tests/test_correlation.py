import unittest

import numpy as np
import pandas as pd

from linstat import Dataset, InsufficientColumnsError, correlate


class TestCorrelate(unittest.TestCase):
    def setUp(self):
        rng = np.random.default_rng(12)
        a = rng.normal(size=50)
        self.df = pd.DataFrame(
            {
                "a": a,
                "b": 0.5 * a + rng.normal(size=50),
                "c": rng.uniform(size=50),
                "label": rng.choice(["x", "y"], 50),
            }
        )
        self.dataset = Dataset.from_pandas(self.df)

    def test_numeric_columns_only(self):
        matrix = correlate(self.dataset)
        self.assertEqual(list(matrix.columns), ["a", "b", "c"])
        self.assertEqual(list(matrix.index), ["a", "b", "c"])

    def test_properties(self):
        matrix = correlate(self.dataset).to_numpy()
        np.testing.assert_array_equal(matrix, matrix.T)
        np.testing.assert_array_equal(np.diag(matrix), np.ones(3))
        self.assertTrue(np.all(np.abs(matrix) <= 1.0))
        np.testing.assert_array_equal(matrix, np.round(matrix, 2))

    def test_matches_pandas(self):
        matrix = correlate(self.dataset, decimals=6)
        expected = self.df[["a", "b", "c"]].corr().round(6)
        np.testing.assert_allclose(matrix.to_numpy(), expected.to_numpy(), atol=1e-6)

    def test_too_few_numeric_columns(self):
        with self.assertRaises(InsufficientColumnsError):
            correlate(Dataset.from_pandas(self.df[["a", "label"]]))


if __name__ == "__main__":
    unittest.main()
