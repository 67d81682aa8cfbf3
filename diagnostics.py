#!/usr/bin/env python3
"""
diagnostics.py

Part 4c: residual diagnostics for the final audience-score model.

Checks the linear-model conditions:
  - linearity          residuals vs each numeric predictor, residuals vs fitted
  - constant variance  residuals vs fitted, scale-location, Breusch-Pagan
  - normality          normal Q-Q, Jarque-Bera, Shapiro-Wilk
  - independence       Durbin-Watson
  - influence          residuals vs leverage with Cook's distance contours
  - collinearity       VIF / condition number on numeric predictors

Outputs (Output/diagnostics/):
  residuals.csv, assumption_tests.csv, influential_points.csv, multicollinearity/
Figures (Figure/diagnostics/):
  diagnostic_plots.png, residuals_vs_predictors.png, residual_histogram.png,
  multicollinearity_*.png

Requirements: pandas, numpy, scipy, statsmodels, matplotlib, seaborn
"""
import warnings
warnings.filterwarnings("ignore")

from pathlib import Path
import math
import numpy as np
import pandas as pd
from scipy import stats
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import seaborn as sns
from statsmodels.nonparametric.smoothers_lowess import lowess
from statsmodels.stats.diagnostic import het_breuschpagan
from statsmodels.stats.stattools import durbin_watson, jarque_bera

from report_config import ALPHA, DPI
from multicollinearity_utils import get_label, run_multicollinearity_diagnostics

N_LABEL = 3                 # most influential points labelled in the plots
COOKS_LEVELS = (0.5, 1.0)
DW_RANGE = (1.5, 2.5)


def residual_frame(model):
    """Fitted values, raw / standardized residuals, leverage and Cook's distance per observation."""
    infl = model.get_influence()
    std_resid = np.asarray(infl.resid_studentized_internal)
    return pd.DataFrame({
        "fitted": np.asarray(model.fittedvalues),
        "resid": np.asarray(model.resid),
        "std_resid": std_resid,
        "sqrt_abs_std_resid": np.sqrt(np.abs(std_resid)),
        "leverage": np.asarray(infl.hat_matrix_diag),
        "cooks_d": np.asarray(infl.cooks_distance[0]),
    }, index=model.resid.index)


def assumption_tests(model, alpha=ALPHA):
    resid = np.asarray(model.resid)
    rows = []

    bp_stat, bp_pval, _, _ = het_breuschpagan(resid, model.model.exog)
    rows.append({
        "test": "Breusch-Pagan", "assumption": "constant variance",
        "statistic": float(bp_stat), "p_value": float(bp_pval),
        "conclusion": "heteroscedasticity detected" if bp_pval < alpha else "no evidence of heteroscedasticity",
    })

    jb_stat, jb_pval, _, _ = jarque_bera(resid)
    rows.append({
        "test": "Jarque-Bera", "assumption": "normal residuals",
        "statistic": float(jb_stat), "p_value": float(jb_pval),
        "conclusion": "residuals not normal" if jb_pval < alpha else "no evidence against normality",
    })

    sw_stat, sw_pval = stats.shapiro(resid)
    rows.append({
        "test": "Shapiro-Wilk", "assumption": "normal residuals",
        "statistic": float(sw_stat), "p_value": float(sw_pval),
        "conclusion": "residuals not normal" if sw_pval < alpha else "no evidence against normality",
    })

    dw = float(durbin_watson(resid))
    rows.append({
        "test": "Durbin-Watson", "assumption": "independent residuals",
        "statistic": dw, "p_value": np.nan,
        "conclusion": ("no evidence of autocorrelation" if DW_RANGE[0] <= dw <= DW_RANGE[1]
                       else "residual autocorrelation suspected"),
    })
    return pd.DataFrame(rows)


def influential_points(model, threshold=None):
    """Observations with Cook's distance above threshold (default 4/n), largest first."""
    rf = residual_frame(model)
    if threshold is None:
        threshold = 4.0 / len(rf)
    out = rf[rf["cooks_d"] > threshold].sort_values("cooks_d", ascending=False)
    return out


def _label_top(ax, x, y, cooks, n=N_LABEL):
    for idx in cooks.nlargest(n).index:
        ax.annotate(str(idx), (x[idx], y[idx]), fontsize=7, xytext=(3, 3), textcoords="offset points")


def plot_diagnostics(model, figure_path):
    """The four standard lm plots in one 2x2 figure."""
    rf = residual_frame(model)
    n_params = len(model.params)

    fig, axes = plt.subplots(2, 2, figsize=(10, 8))

    # Residuals vs fitted
    ax = axes[0, 0]
    ax.scatter(rf["fitted"], rf["resid"], s=10, alpha=0.6, color="steelblue")
    smooth = lowess(rf["resid"], rf["fitted"], frac=2 / 3)
    ax.plot(smooth[:, 0], smooth[:, 1], color="firebrick", lw=1.5)
    ax.axhline(0, color="grey", lw=0.8, linestyle="--")
    _label_top(ax, rf["fitted"], rf["resid"], rf["cooks_d"])
    ax.set_xlabel("Fitted values")
    ax.set_ylabel("Residuals")
    ax.set_title("Residuals vs Fitted")

    # Normal Q-Q
    ax = axes[0, 1]
    (osm, osr), (slope, intercept, _) = stats.probplot(rf["std_resid"], dist="norm")
    ax.scatter(osm, osr, s=10, alpha=0.6, color="steelblue")
    ax.plot(osm, slope * osm + intercept, color="firebrick", lw=1.5)
    ax.set_xlabel("Theoretical quantiles")
    ax.set_ylabel("Standardized residuals")
    ax.set_title("Normal Q-Q")

    # Scale-location
    ax = axes[1, 0]
    ax.scatter(rf["fitted"], rf["sqrt_abs_std_resid"], s=10, alpha=0.6, color="steelblue")
    smooth = lowess(rf["sqrt_abs_std_resid"], rf["fitted"], frac=2 / 3)
    ax.plot(smooth[:, 0], smooth[:, 1], color="firebrick", lw=1.5)
    _label_top(ax, rf["fitted"], rf["sqrt_abs_std_resid"], rf["cooks_d"])
    ax.set_xlabel("Fitted values")
    ax.set_ylabel("√|Standardized residuals|")
    ax.set_title("Scale-Location")

    # Residuals vs leverage
    ax = axes[1, 1]
    ax.scatter(rf["leverage"], rf["std_resid"], s=10, alpha=0.6, color="steelblue")
    h_max = max(rf["leverage"].max() * 1.05, 1e-3)
    hs = np.linspace(1e-3, h_max, 100)
    for level in COOKS_LEVELS:
        bound = np.sqrt(level * n_params * (1 - hs) / hs)
        ax.plot(hs, bound, color="grey", lw=0.8, linestyle="--")
        ax.plot(hs, -bound, color="grey", lw=0.8, linestyle="--")
        ax.text(hs[-1], bound[-1], f"{level}", fontsize=7, color="grey", va="bottom")
    ylim = max(3.5, rf["std_resid"].abs().max() * 1.1)
    ax.set_ylim(-ylim, ylim)
    ax.set_xlim(0, h_max)
    ax.axhline(0, color="grey", lw=0.8)
    _label_top(ax, rf["leverage"], rf["std_resid"], rf["cooks_d"])
    ax.set_xlabel("Leverage")
    ax.set_ylabel("Standardized residuals")
    ax.set_title("Residuals vs Leverage (Cook's distance)")

    fig.tight_layout()
    fig.savefig(figure_path, dpi=DPI, bbox_inches="tight")
    plt.close(fig)
    print(f"Saved: {figure_path}")


def plot_residuals_vs_predictors(model, df, numeric_predictors, figure_path):
    """Linearity check: residuals against every numeric predictor of the model."""
    if not numeric_predictors:
        return
    resid = model.resid
    n = len(numeric_predictors)
    ncols = min(3, n)
    nrows = math.ceil(n / ncols)
    fig, axes = plt.subplots(nrows, ncols, figsize=(ncols * 3.5, nrows * 3.0), constrained_layout=True)
    axes_flat = np.atleast_1d(axes).ravel()
    for ax, p in zip(axes_flat, numeric_predictors):
        x = df.loc[resid.index, p].astype(float)
        ax.scatter(x, resid, s=8, alpha=0.6, color="steelblue")
        ax.axhline(0, color="firebrick", lw=1, linestyle="--")
        ax.set_xlabel(get_label(p))
        ax.set_ylabel("Residuals")
        ax.set_title(f"Residuals vs {get_label(p)}", fontsize=10)
    for j in range(n, len(axes_flat)):
        axes_flat[j].set_visible(False)
    fig.savefig(figure_path, dpi=DPI, bbox_inches="tight")
    plt.close(fig)
    print(f"Saved: {figure_path}")


def plot_residual_histogram(model, figure_path):
    fig, ax = plt.subplots(figsize=(6, 4))
    sns.histplot(np.asarray(model.resid), kde=True, ax=ax, color="steelblue", edgecolor="white")
    ax.axvline(0, color="firebrick", lw=1, linestyle="--")
    ax.set_xlabel("Residuals")
    ax.set_title("Residual distribution")
    fig.tight_layout()
    fig.savefig(figure_path, dpi=DPI, bbox_inches="tight")
    plt.close(fig)
    print(f"Saved: {figure_path}")


def run_diagnostics(model, df, numeric_predictors, output_dir, figure_dir, alpha=ALPHA):
    """
    Write residual tables, assumption tests and figures.

    df must be the frame the model was fit on (same index as the residuals).
    Returns dict with 'residuals', 'tests', 'influential', 'multicollinearity'.
    """
    output_dir = Path(output_dir)
    figure_dir = Path(figure_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    figure_dir.mkdir(parents=True, exist_ok=True)

    rf = residual_frame(model)
    rf.to_csv(output_dir / "residuals.csv", index_label="row")

    tests = assumption_tests(model, alpha)
    tests.to_csv(output_dir / "assumption_tests.csv", index=False)
    print("\nAssumption tests:")
    for _, row in tests.iterrows():
        pv = "" if pd.isna(row["p_value"]) else f", p = {row['p_value']:.4g}"
        print(f"  {row['test']:<15} stat = {row['statistic']:.4f}{pv}  -> {row['conclusion']}")

    infl = influential_points(model)
    infl.to_csv(output_dir / "influential_points.csv", index_label="row")
    print(f"\nInfluential points (Cook's D > 4/n): {len(infl)}")
    if len(infl):
        print(infl.head(N_LABEL).round(4).to_string())
    n_large = int((rf["cooks_d"] > COOKS_LEVELS[0]).sum())
    print(f"Points with Cook's D > {COOKS_LEVELS[0]}: {n_large}")

    plot_diagnostics(model, figure_dir / "diagnostic_plots.png")
    plot_residuals_vs_predictors(model, df, numeric_predictors, figure_dir / "residuals_vs_predictors.png")
    plot_residual_histogram(model, figure_dir / "residual_histogram.png")

    print("\nMulticollinearity (numeric predictors):")
    mc = run_multicollinearity_diagnostics(numeric_predictors, df, figure_dir, output_dir)
    return {"residuals": rf, "tests": tests, "influential": infl, "multicollinearity": mc}


def main():
    from load_movies import load_movies, drop_leakage_columns
    from features import load_name_gender_table, engineer_features
    from model_selection import split_predictor_types
    from model_audience import run_model
    from report_config import part_dirs

    print("=" * 80)
    print("PART 4c: MODEL DIAGNOSTICS")
    print("=" * 80)
    df = drop_leakage_columns(load_movies())
    df, _ = engineer_features(df, load_name_gender_table())
    model, model_df, selection = run_model(df)
    numeric, _ = split_predictor_types(model_df, selection["selected"])
    out_dir, fig_dir = part_dirs("diagnostics")
    run_diagnostics(model, model_df, numeric, out_dir, fig_dir)


if __name__ == "__main__":
    main()
