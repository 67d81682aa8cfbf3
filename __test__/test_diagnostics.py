"""Tests for residual diagnostics and multicollinearity checks."""

import numpy as np
import pandas as pd
import pytest

from diagnostics import residual_frame, assumption_tests, influential_points, run_diagnostics
from model_selection import fit_ols
from multicollinearity_utils import (
    compute_vif,
    condition_number,
    get_label,
    run_multicollinearity_diagnostics,
)


@pytest.fixture
def linear_model(linear_df):
    return fit_ols(linear_df, "y", ["x1", "x2", "group"])


class TestResidualFrame:

    def test_columns_and_length(self, linear_model, linear_df):
        rf = residual_frame(linear_model)
        assert list(rf.columns) == ["fitted", "resid", "std_resid", "sqrt_abs_std_resid", "leverage", "cooks_d"]
        assert len(rf) == len(linear_df)

    def test_leverage_sums_to_number_of_parameters(self, linear_model):
        rf = residual_frame(linear_model)
        assert rf["leverage"].sum() == pytest.approx(len(linear_model.params))

    def test_fitted_plus_resid_is_response(self, linear_model, linear_df):
        rf = residual_frame(linear_model)
        np.testing.assert_allclose(rf["fitted"] + rf["resid"], linear_df["y"])


class TestAssumptionTests:

    def test_reports_all_tests(self, linear_model):
        tests = assumption_tests(linear_model)
        assert tests["test"].tolist() == ["Breusch-Pagan", "Jarque-Bera", "Shapiro-Wilk", "Durbin-Watson"]
        pvals = tests["p_value"].dropna()
        assert ((pvals >= 0) & (pvals <= 1)).all()

    def test_independent_errors_pass_durbin_watson(self, linear_model):
        tests = assumption_tests(linear_model).set_index("test")
        assert tests.loc["Durbin-Watson", "conclusion"] == "no evidence of autocorrelation"

    def test_detects_heteroscedasticity(self):
        rng = np.random.default_rng(5)
        x = rng.uniform(1, 10, 300)
        df = pd.DataFrame({"x": x, "y": 2 * x + rng.normal(0, 1, 300) * x ** 1.5})
        tests = assumption_tests(fit_ols(df, "y", ["x"])).set_index("test")
        assert tests.loc["Breusch-Pagan", "p_value"] < 0.05
        assert tests.loc["Breusch-Pagan", "conclusion"] == "heteroscedasticity detected"

    def test_detects_skewed_residuals(self):
        rng = np.random.default_rng(9)
        x = rng.normal(size=300)
        df = pd.DataFrame({"x": x, "y": x + rng.exponential(3, 300)})
        tests = assumption_tests(fit_ols(df, "y", ["x"])).set_index("test")
        assert tests.loc["Shapiro-Wilk", "conclusion"] == "residuals not normal"


class TestInfluence:

    def test_high_leverage_outlier_ranked_first(self, linear_df):
        outlier = pd.DataFrame([{"x1": 12.0, "x2": 5.0, "group": "a", "y": -60.0}])
        df = pd.concat([linear_df, outlier], ignore_index=True)
        model = fit_ols(df, "y", ["x1", "x2", "group"])
        infl = influential_points(model)
        assert infl.index[0] == len(df) - 1
        assert (infl["cooks_d"] > 4 / len(df)).all()

    def test_custom_threshold(self, linear_model):
        assert influential_points(linear_model, threshold=1e9).empty


class TestRunDiagnostics:

    def test_writes_tables_and_figures(self, linear_model, linear_df, out_dirs):
        out_dir, fig_dir = out_dirs
        result = run_diagnostics(linear_model, linear_df, ["x1", "x2"], out_dir, fig_dir)
        for name in ["residuals.csv", "assumption_tests.csv", "influential_points.csv"]:
            assert (out_dir / name).exists()
        for name in ["diagnostic_plots.png", "residuals_vs_predictors.png", "residual_histogram.png",
                     "multicollinearity_correlation_heatmap.png", "multicollinearity_vif_bars.png"]:
            assert (fig_dir / name).exists()
        assert (out_dir / "multicollinearity" / "vif_tolerance.csv").exists()
        assert result["multicollinearity"]["vif"]["VIF"].max() < 5

    def test_single_numeric_predictor_writes_note(self, linear_model, linear_df, out_dirs):
        out_dir, fig_dir = out_dirs
        result = run_diagnostics(linear_model, linear_df, ["x1"], out_dir, fig_dir)
        assert result["multicollinearity"] is None
        assert (out_dir / "multicollinearity" / "multicollinearity_note.txt").exists()


class TestMulticollinearity:

    def test_vif_flags_near_duplicate(self):
        rng = np.random.default_rng(2)
        a = rng.normal(size=200)
        X = pd.DataFrame({"a": a, "b": a + rng.normal(0, 0.05, 200), "c": rng.normal(size=200)})
        vif = compute_vif(X).set_index("variable")
        assert vif.loc["a", "VIF"] > 10
        assert vif.loc["b", "VIF"] > 10
        assert vif.loc["c", "VIF"] < 2
        assert vif.loc["c", "Tolerance"] == pytest.approx(1 / vif.loc["c", "VIF"])

    def test_condition_number_grows_with_collinearity(self):
        rng = np.random.default_rng(4)
        a = rng.normal(size=200)
        indep = pd.DataFrame({"a": a, "c": rng.normal(size=200)})
        collinear = pd.DataFrame({"a": a, "b": a + rng.normal(0, 0.01, 200)})
        assert condition_number(collinear) > 30 > condition_number(indep)

    def test_summary_mentions_severe_vif(self, tmp_path):
        rng = np.random.default_rng(8)
        a = rng.normal(size=100)
        df = pd.DataFrame({"runtime": a, "title_chars": a * 2 + rng.normal(0, 0.01, 100)})
        result = run_multicollinearity_diagnostics(["runtime", "title_chars"], df, tmp_path / "fig", tmp_path / "out")
        text = (tmp_path / "out" / "multicollinearity" / "multicollinearity_summary.txt").read_text()
        assert "VIF > 10 (severe)" in text
        assert result["condition_number"] > 100

    def test_labels(self):
        assert get_label("critics_score") == "Critics score"
        assert get_label("some_new_col") == "Some new col"
