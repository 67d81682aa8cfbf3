#!/usr/bin/env python3
"""
eda.py

Part 3b: exploratory data analysis of audience_score and its candidate predictors.

Tables (Output/eda/):
  - numeric_summary.csv              n, mean, sd, quartiles, skewness per numeric variable
  - response_by_<col>.csv            audience_score per level of each categorical variable
  - correlation_with_response.csv    Pearson r (and p-value) with audience_score

Figures (Figure/eda/):
  - response_distribution.png        histogram + KDE of audience_score
  - numeric_vs_response.png          scatter + OLS line, one panel per numeric predictor
  - response_by_category.png         boxplots, one panel per categorical predictor
  - release_weekday_counts.png       number of releases per weekday

Requirements: pandas, numpy, scipy, matplotlib, seaborn
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

from report_config import RESPONSE, DPI, FONT_SIZE
from features import WEEKDAYS
from multicollinearity_utils import get_label

PANEL_WIDTH = 3.5
PANEL_HEIGHT = 3.0
COLS_PER_ROW = 3
TITLE_FONT_SIZE = 12

plt.rcParams["font.family"] = "sans-serif"
plt.rcParams["font.sans-serif"] = ["DejaVu Sans", "Arial", "Helvetica"]
plt.rcParams["axes.titlesize"] = TITLE_FONT_SIZE
plt.rcParams["axes.labelsize"] = FONT_SIZE


# -------------------- Tables --------------------
def numeric_summary(df, cols):
    rows = []
    for c in cols:
        s = pd.to_numeric(df[c], errors="coerce").dropna()
        rows.append({
            "variable": c,
            "n": len(s),
            "mean": s.mean(),
            "std": s.std(),
            "min": s.min(),
            "q25": s.quantile(0.25),
            "median": s.median(),
            "q75": s.quantile(0.75),
            "max": s.max(),
            "skewness": stats.skew(s) if len(s) > 2 else np.nan,
        })
    return pd.DataFrame(rows)


def response_by_category(df, response, col):
    """Count / mean / median / sd of the response per level, highest median first."""
    grp = df.dropna(subset=[col, response]).groupby(col)[response]
    out = grp.agg(["count", "mean", "median", "std"]).reset_index()
    out = out.rename(columns={col: "level"})
    out.insert(0, "variable", col)
    return out.sort_values(["median", "mean"], ascending=False).reset_index(drop=True)


def correlation_with_response(df, response, cols):
    rows = []
    for c in cols:
        sub = df[[c, response]].apply(pd.to_numeric, errors="coerce").dropna()
        if len(sub) < 3 or sub[c].nunique() < 2:
            r, p = np.nan, np.nan
        else:
            r, p = stats.pearsonr(sub[c], sub[response])
        rows.append({"variable": c, "n": len(sub), "pearson_r": r, "p_value": p})
    out = pd.DataFrame(rows)
    order = out["pearson_r"].abs().sort_values(ascending=False, na_position="last").index
    return out.loc[order].reset_index(drop=True)


# -------------------- Figures --------------------
def _panel_grid(n_axes):
    ncols = min(COLS_PER_ROW, n_axes)
    nrows = math.ceil(n_axes / ncols)
    fig, axes = plt.subplots(nrows, ncols, figsize=(ncols * PANEL_WIDTH, nrows * PANEL_HEIGHT),
                             constrained_layout=True)
    axes_flat = np.atleast_1d(axes).ravel()
    for j in range(n_axes, len(axes_flat)):
        axes_flat[j].set_visible(False)
    return fig, axes_flat


def _tidy(ax):
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    ax.grid(axis="y", alpha=0.3, linestyle="--")


def plot_response_distribution(df, response, out_path):
    s = df[response].dropna().astype(float)
    fig, ax = plt.subplots(figsize=(6, 4))
    nbins = min(40, max(15, len(s) // 20))
    ax.hist(s, bins=nbins, color="steelblue", alpha=0.7, edgecolor="white", linewidth=0.4,
            density=True, label="Histogram")
    sns.kdeplot(s, ax=ax, color="navy", linewidth=2, label="KDE")
    ax.axvline(s.median(), color="firebrick", linestyle="--", linewidth=1, label=f"Median = {s.median():.0f}")
    ax.set_xlabel(get_label(response))
    ax.set_ylabel("Density")
    ax.set_title(f"{get_label(response)}\n(n = {len(s):,})", fontweight="bold")
    ax.legend(loc="upper left", frameon=True, fancybox=False, edgecolor="gray")
    _tidy(ax)
    fig.savefig(out_path, dpi=DPI, bbox_inches="tight")
    plt.close(fig)
    print(f"Saved: {out_path}")


def plot_numeric_vs_response(df, response, cols, out_path):
    if not cols:
        return
    fig, axes = _panel_grid(len(cols))
    for ax, c in zip(axes, cols):
        sub = df[[c, response]].dropna().astype(float)
        sns.regplot(x=c, y=response, data=sub, ax=ax, ci=None,
                    scatter_kws={"s": 8, "alpha": 0.5, "color": "steelblue"},
                    line_kws={"color": "firebrick", "linewidth": 1.5})
        ax.set_xlabel(get_label(c))
        ax.set_ylabel(get_label(response))
        ax.set_title(get_label(c), fontweight="bold")
        _tidy(ax)
    fig.suptitle(f"Numeric predictors vs {get_label(response)}", fontsize=TITLE_FONT_SIZE + 2,
                 fontweight="bold")
    fig.savefig(out_path, dpi=DPI, bbox_inches="tight")
    plt.close(fig)
    print(f"Saved: {out_path}")


def plot_response_by_category(df, response, cols, out_path):
    if not cols:
        return
    fig, axes = _panel_grid(len(cols))
    for ax, c in zip(axes, cols):
        sub = df[[c, response]].dropna()
        if c == "release_weekday":
            order = [d for d in WEEKDAYS if d in set(sub[c])]
        else:
            order = sub.groupby(c)[response].median().sort_values(ascending=False).index.tolist()
        sns.boxplot(x=c, y=response, data=sub, order=order, ax=ax, color="lightsteelblue",
                    fliersize=2, linewidth=0.8)
        ax.set_xlabel("")
        ax.set_ylabel(get_label(response))
        ax.set_title(get_label(c), fontweight="bold")
        ax.tick_params(axis="x", rotation=45, labelsize=FONT_SIZE - 3)
        for lbl in ax.get_xticklabels():
            lbl.set_ha("right")
        _tidy(ax)
    fig.suptitle(f"{get_label(response)} by category", fontsize=TITLE_FONT_SIZE + 2, fontweight="bold")
    fig.savefig(out_path, dpi=DPI, bbox_inches="tight")
    plt.close(fig)
    print(f"Saved: {out_path}")


def plot_weekday_counts(df, out_path, col="release_weekday"):
    counts = df[col].value_counts().reindex(WEEKDAYS, fill_value=0)
    fig, ax = plt.subplots(figsize=(6, 3.5))
    ax.bar(counts.index, counts.values, color="steelblue", edgecolor="gray", linewidth=0.5)
    for x, v in zip(counts.index, counts.values):
        ax.text(x, v, f"{v}", ha="center", va="bottom", fontsize=FONT_SIZE - 2)
    ax.set_ylabel("Movies")
    ax.set_title("Theatrical releases by weekday", fontweight="bold")
    _tidy(ax)
    fig.tight_layout()
    fig.savefig(out_path, dpi=DPI, bbox_inches="tight")
    plt.close(fig)
    print(f"Saved: {out_path}")


def run_eda(df, response, numeric_cols, categorical_cols, output_dir, figure_dir):
    """Write every EDA table and figure; returns the tables keyed by name."""
    output_dir = Path(output_dir)
    figure_dir = Path(figure_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    figure_dir.mkdir(parents=True, exist_ok=True)
    numeric_cols = [c for c in numeric_cols if c in df.columns and c != response]
    categorical_cols = [c for c in categorical_cols if c in df.columns]

    tables = {}
    tables["numeric_summary"] = numeric_summary(df, [response] + numeric_cols)
    tables["numeric_summary"].to_csv(output_dir / "numeric_summary.csv", index=False)
    print(f"\n{get_label(response)} and numeric predictors:")
    print(tables["numeric_summary"].round(2).to_string(index=False))

    tables["correlation_with_response"] = correlation_with_response(df, response, numeric_cols)
    tables["correlation_with_response"].to_csv(output_dir / "correlation_with_response.csv", index=False)
    print(f"\nCorrelation with {response}:")
    print(tables["correlation_with_response"].round(4).to_string(index=False))

    for c in categorical_cols:
        tbl = response_by_category(df, response, c)
        tables[f"response_by_{c}"] = tbl
        tbl.to_csv(output_dir / f"response_by_{c}.csv", index=False)
    print(f"\nSaved {len(categorical_cols)} per-category tables to: {output_dir}")

    plot_response_distribution(df, response, figure_dir / "response_distribution.png")
    plot_numeric_vs_response(df, response, numeric_cols, figure_dir / "numeric_vs_response.png")
    plot_response_by_category(df, response, categorical_cols, figure_dir / "response_by_category.png")
    if "release_weekday" in df.columns:
        plot_weekday_counts(df, figure_dir / "release_weekday_counts.png")
    return tables


def main():
    from load_movies import load_movies, drop_leakage_columns
    from features import load_name_gender_table, engineer_features
    from model_selection import split_predictor_types
    from report_config import CANDIDATE_PREDICTORS, part_dirs

    print("=" * 80)
    print("PART 3b: EXPLORATORY DATA ANALYSIS")
    print("=" * 80)
    df = drop_leakage_columns(load_movies())
    df, _ = engineer_features(df, load_name_gender_table())
    numeric_cols, categorical_cols = split_predictor_types(df, CANDIDATE_PREDICTORS)
    out_dir, fig_dir = part_dirs("eda")
    run_eda(df, RESPONSE, numeric_cols, categorical_cols, out_dir, fig_dir)


if __name__ == "__main__":
    main()
