"""Tests for the final model fit and its saved tables."""

import numpy as np
import pandas as pd
import pytest

from model_audience import (
    significance_stars,
    fit_final_model,
    coefficient_table,
    fit_statistics,
    run_model,
)


class TestSignificanceStars:

    @pytest.mark.parametrize("pval,stars", [
        (0.0001, "***"),
        (0.005, "**"),
        (0.03, "*"),
        (0.05, ""),
        (0.7, ""),
    ])
    def test_thresholds(self, pval, stars):
        assert significance_stars(pval) == stars


class TestFinalModel:

    def test_uses_complete_cases_of_selected_only(self, linear_df):
        df = linear_df.copy()
        df["unused"] = np.where(np.arange(len(df)) % 4 == 0, np.nan, 1.0)
        model, model_df = fit_final_model(df, "y", ["x1", "x2"])
        assert int(model.nobs) == len(df)
        assert len(model_df) == len(df)

    def test_drops_rows_missing_a_selected_variable(self, linear_df):
        df = linear_df.copy()
        df.loc[:9, "x1"] = np.nan
        model, model_df = fit_final_model(df, "y", ["x1", "group"])
        assert int(model.nobs) == len(df) - 10
        assert model_df.index.tolist() == list(range(len(df) - 10))

    def test_too_few_rows(self, linear_df):
        with pytest.raises(ValueError):
            fit_final_model(linear_df.head(5), "y", ["x1"], min_obs=30)

    def test_coefficient_table(self, linear_df):
        model, _ = fit_final_model(linear_df, "y", ["x1", "x2", "group"])
        tbl = coefficient_table(model, alpha=0.05)
        assert tbl["variable"].tolist() == list(model.params.index)
        assert (tbl["ci_lower"] < tbl["coefficient"]).all()
        assert (tbl["coefficient"] < tbl["ci_upper"]).all()
        assert tbl.set_index("variable").loc["x1", "signif"] == "***"

    def test_fit_statistics(self, linear_df):
        model, _ = fit_final_model(linear_df, "y", ["x1", "x2", "group"])
        stats = fit_statistics(model).iloc[0]
        assert stats["nobs"] == len(linear_df)
        assert stats["adj_r2"] < stats["r2"]
        assert stats["resid_std_err"] == pytest.approx(1.0, abs=0.2)


class TestRunModel:

    def test_writes_model_outputs(self, featured_df, out_dirs):
        out_dir, fig_dir = out_dirs
        model, model_df, selection = run_model(featured_df, output_dir=out_dir, figure_dir=fig_dir)
        for name in ["ols_summary.txt", "coefficients.csv", "model_fit.csv", "selection_path.csv"]:
            assert (out_dir / name).exists()
        assert (fig_dir / "selection_path.png").exists()
        saved = pd.read_csv(out_dir / "selection_path.csv")
        assert len(saved) == len(selection["path"])
        assert int(model.nobs) == len(model_df)
        assert int(model.nobs) >= selection["nobs"]

    def test_selects_critics_score_without_saving(self, featured_df, tmp_path):
        _, _, selection = run_model(featured_df)
        assert "critics_score" in selection["selected"]
        assert not (tmp_path / "Output").exists()
