import unittest

import numpy as np
import pandas as pd
import statsmodels.api as sm
from statsmodels.stats.diagnostic import het_breuschpagan
from statsmodels.stats.stattools import durbin_watson

from linstat import Dataset, InsufficientDataError
from linstat.diagnostics import (
    AUTOCORRELATION_PRESENT,
    HETEROSCEDASTICITY_PRESENT,
    NO_MULTICOLLINEARITY,
    NOT_APPLICABLE,
    POTENTIAL_MULTICOLLINEARITY,
    RESIDUALS_NOT_NORMAL,
    compute_vifs,
    durbin_watson_pvalue,
    run_breusch_pagan_test,
    run_durbin_watson_test,
    run_isolated,
    run_lilliefors_test,
    run_regression_diagnostics,
    run_vif_test,
)
from linstat.regression import fit_ols_model


class TestDurbinWatson(unittest.TestCase):
    def setUp(self):
        rng = np.random.default_rng(11)
        self.n = 60
        self.x = rng.normal(size=self.n)
        self.X = sm.add_constant(self.x)
        self.white_noise = rng.normal(size=self.n)

        ar = np.zeros(self.n)
        shocks = rng.normal(size=self.n)
        for t in range(1, self.n):
            ar[t] = 0.9 * ar[t - 1] + shocks[t]
        self.ar_y = 1.0 + 2.0 * self.x + ar

    def test_statistic_matches_statsmodels(self):
        resid = sm.OLS(self.white_noise, self.X).fit().resid
        result = run_durbin_watson_test(resid, self.X)
        self.assertAlmostEqual(result.statistic, durbin_watson(resid), places=12)
        self.assertGreaterEqual(result.p_value, 0.0)
        self.assertLessEqual(result.p_value, 1.0)

    def test_detects_positive_autocorrelation(self):
        resid = sm.OLS(self.ar_y, self.X).fit().resid
        result = run_durbin_watson_test(resid, self.X)
        self.assertLess(result.statistic, 1.0)
        self.assertTrue(result.rejected)
        self.assertEqual(result.decision, AUTOCORRELATION_PRESENT)

    def test_exact_alternatives_are_complementary(self):
        resid = sm.OLS(self.white_noise, self.X).fit().resid
        d = durbin_watson(resid)
        greater = durbin_watson_pvalue(d, self.X, "greater", exact=True)
        less = durbin_watson_pvalue(d, self.X, "less", exact=True)
        two_sided = durbin_watson_pvalue(d, self.X, "two-sided", exact=True)
        self.assertAlmostEqual(greater + less, 1.0, places=10)
        self.assertAlmostEqual(two_sided, 2 * min(greater, less), places=10)

    def test_exact_and_normal_approximation_agree(self):
        resid = sm.OLS(self.white_noise, self.X).fit().resid
        d = durbin_watson(resid)
        exact = durbin_watson_pvalue(d, self.X, exact=True)
        approx = durbin_watson_pvalue(d, self.X, exact=False)
        self.assertAlmostEqual(exact, approx, delta=0.05)

    def test_p_value_increases_with_statistic(self):
        p_values = [durbin_watson_pvalue(d, self.X) for d in (1.0, 1.5, 2.0, 2.5, 3.0)]
        self.assertEqual(p_values, sorted(p_values))

    def test_zero_residuals(self):
        with self.assertRaises(InsufficientDataError):
            run_durbin_watson_test(np.zeros(self.n), self.X)

    def test_unknown_alternative(self):
        with self.assertRaises(ValueError):
            durbin_watson_pvalue(2.0, self.X, "sideways")


class TestBreuschPagan(unittest.TestCase):
    def setUp(self):
        rng = np.random.default_rng(3)
        n = 200
        self.x = rng.uniform(1, 10, n)
        self.X = sm.add_constant(self.x)
        self.homo_y = 2.0 + 0.5 * self.x + rng.normal(0, 1, n)
        self.hetero_y = 2.0 + 0.5 * self.x + rng.normal(0, 1, n) * self.x

    def test_matches_statsmodels(self):
        resid = sm.OLS(self.homo_y, self.X).fit().resid
        lm, lm_pvalue, _, _ = het_breuschpagan(resid, self.X, robust=True)
        result = run_breusch_pagan_test(resid, self.X)
        self.assertAlmostEqual(result.statistic, lm)
        self.assertAlmostEqual(result.p_value, lm_pvalue)
        self.assertEqual(result.df, 1.0)

    def test_detects_heteroscedasticity(self):
        resid = sm.OLS(self.hetero_y, self.X).fit().resid
        result = run_breusch_pagan_test(resid, self.X)
        self.assertTrue(result.rejected)
        self.assertEqual(result.decision, HETEROSCEDASTICITY_PRESENT)


class TestLilliefors(unittest.TestCase):
    def test_normal_residuals(self):
        resid = np.random.default_rng(5).normal(size=200)
        result = run_lilliefors_test(resid)
        self.assertGreaterEqual(result.p_value, 0.0)
        self.assertLessEqual(result.p_value, 1.0)
        self.assertEqual(result.test, "Lilliefors")

    def test_skewed_residuals(self):
        resid = np.random.default_rng(5).exponential(size=300)
        result = run_lilliefors_test(resid)
        self.assertTrue(result.rejected)
        self.assertEqual(result.decision, RESIDUALS_NOT_NORMAL)

    def test_scale_invariant(self):
        resid = np.random.default_rng(8).normal(size=50)
        self.assertAlmostEqual(run_lilliefors_test(resid).statistic, run_lilliefors_test(100 * resid + 3).statistic)

    def test_too_few_residuals(self):
        with self.assertRaises(InsufficientDataError):
            run_lilliefors_test([0.1, -0.2, 0.3, 0.0])


class TestVIF(unittest.TestCase):
    def setUp(self):
        rng = np.random.default_rng(21)
        n = 120
        x1 = rng.normal(size=n)
        x2 = 0.6 * x1 + 0.8 * rng.normal(size=n)
        self.df = pd.DataFrame(
            {
                "x1": x1,
                "x2": x2,
                "x3": x1 + 0.05 * rng.normal(size=n),
                "group": rng.choice(["a", "b", "c"], n),
                "y": 1.0 + x1 - x2 + rng.normal(size=n),
            }
        )
        self.dataset = Dataset.from_pandas(self.df)

    def test_two_predictor_closed_form(self):
        model = fit_ols_model(self.dataset, "y", ["x1", "x2"])
        r = np.corrcoef(self.df["x1"], self.df["x2"])[0, 1]
        vifs = compute_vifs(model.design)
        self.assertAlmostEqual(vifs["x1"], 1.0 / (1.0 - r**2), places=8)
        self.assertAlmostEqual(vifs["x2"], 1.0 / (1.0 - r**2), places=8)

    def test_generalized_vif_for_categorical_predictor(self):
        model = fit_ols_model(self.dataset, "y", ["x1", "group"])
        vifs = compute_vifs(model.design)
        self.assertEqual(set(vifs), {"x1", "group"})
        # With two terms both generalized VIFs reduce to det(R11)det(R22)/det(R)
        self.assertAlmostEqual(vifs["x1"], vifs["group"], places=8)
        self.assertGreaterEqual(vifs["group"], 1.0)

    def test_flags_collinear_predictors(self):
        model = fit_ols_model(self.dataset, "y", ["x1", "x2", "x3"])
        result = run_vif_test(model.design)
        self.assertEqual(result.decision, POTENTIAL_MULTICOLLINEARITY)
        self.assertIn("x1", result.flagged)
        self.assertIn("x3", result.flagged)
        self.assertNotIn("x2", result.flagged)
        self.assertEqual(result.statistic, max(result.values.values()))

    def test_no_multicollinearity(self):
        model = fit_ols_model(self.dataset, "y", ["x1", "x2"])
        result = run_vif_test(model.design)
        self.assertEqual(result.decision, NO_MULTICOLLINEARITY)
        self.assertFalse(result.rejected)

    def test_single_predictor_not_applicable(self):
        model = fit_ols_model(self.dataset, "y", ["x1"])
        result = run_vif_test(model.design)
        self.assertEqual(result.decision, NOT_APPLICABLE)
        self.assertFalse(result.applicable)
        self.assertIsNone(result.statistic)
        self.assertEqual(result.values, {})


class TestDiagnosticsSuite(unittest.TestCase):
    def test_failures_are_isolated(self):
        def failing():
            raise InsufficientDataError("not enough data")

        result = run_isolated("Lilliefors", 0.05, failing)
        self.assertEqual(result.decision, NOT_APPLICABLE)
        self.assertEqual(result.reason, "not enough data")

    def test_regression_diagnostics(self):
        rng = np.random.default_rng(1)
        df = pd.DataFrame({"x1": rng.normal(size=80), "x2": rng.normal(size=80)})
        df["y"] = 1 + df["x1"] + df["x2"] + rng.normal(size=80)
        model = fit_ols_model(Dataset.from_pandas(df), "y", ["x1", "x2"])
        diagnostics = run_regression_diagnostics(model)

        for result in diagnostics[:3]:
            self.assertTrue(result.applicable)
            self.assertGreaterEqual(result.p_value, 0.0)
            self.assertLessEqual(result.p_value, 1.0)
        self.assertEqual(set(diagnostics.multicollinearity.values), {"x1", "x2"})


if __name__ == "__main__":
    unittest.main()
