#!/usr/bin/env python3
"""
model_audience.py

Part 4b: final multiple linear regression for audience_score.
  1) Load movies, drop leakage columns, engineer features
  2) Backward stepwise selection by adjusted R^2 (model_selection.py)
  3) Refit the selected formula on complete cases of the selected variables
  4) Save OLS summary, coefficient table, fit statistics, elimination path
     and a figure of adjusted R^2 by elimination step

Outputs (Output/model/):
  ols_summary.txt, coefficients.csv, model_fit.csv, selection_path.csv
Figures (Figure/model/):
  selection_path.png

Requirements:
  pandas, numpy, statsmodels, matplotlib
"""
import warnings
warnings.filterwarnings("ignore")

from pathlib import Path
import numpy as np
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from report_config import RESPONSE, CANDIDATE_PREDICTORS, ALPHA, COV_TYPE, MIN_OBS, DPI, part_dirs
from model_selection import backward_stepwise, fit_ols


def significance_stars(pval):
    if pval < 0.001:
        return "***"
    elif pval < 0.01:
        return "**"
    elif pval < 0.05:
        return "*"
    return ""


def fit_final_model(df, response, predictors, cov_type=COV_TYPE, min_obs=MIN_OBS):
    """Fit response ~ predictors on complete cases of those columns only."""
    model_df = df[[response] + list(predictors)].dropna().reset_index(drop=True)
    if len(model_df) < min_obs:
        raise ValueError(f"Only {len(model_df)} observations available, need at least {min_obs}.")
    return fit_ols(model_df, response, predictors, cov_type), model_df


def coefficient_table(model, alpha=ALPHA):
    ci = model.conf_int(alpha=alpha)
    out = pd.DataFrame({
        "variable": model.params.index,
        "coefficient": model.params.values,
        "std_err": model.bse.values,
        "t_stat": model.tvalues.values,
        "p_value": model.pvalues.values,
        "ci_lower": ci.iloc[:, 0].values,
        "ci_upper": ci.iloc[:, 1].values,
    })
    out["signif"] = out["p_value"].map(significance_stars)
    return out


def fit_statistics(model):
    return pd.DataFrame([{
        "nobs": int(model.nobs),
        "df_model": float(model.df_model),
        "r2": float(model.rsquared),
        "adj_r2": float(model.rsquared_adj),
        "f_stat": float(model.fvalue),
        "f_p_value": float(model.f_pvalue),
        "aic": float(model.aic),
        "bic": float(model.bic),
        "resid_std_err": float(np.sqrt(model.scale)),
    }])


def print_coefficients(model):
    """Print coefficients in a clean format."""
    print("\n" + "-" * 80)
    print("COEFFICIENTS:")
    print("-" * 80)
    print(f"{'Variable':<36} {'Coefficient':>12} {'Std Err':>10} {'P-value':>10} {'Signif':>7}")
    print("-" * 80)
    for var in model.params.index:
        pval = model.pvalues[var]
        print(f"{var:<36} {model.params[var]:>12.4f} {model.bse[var]:>10.4f} {pval:>10.4f} "
              f"{significance_stars(pval):>7}")
    print("-" * 80)
    print(f"R²: {model.rsquared:.4f}")
    print(f"Adj. R²: {model.rsquared_adj:.4f}")
    print(f"AIC: {model.aic:.2f}")
    print(f"BIC: {model.bic:.2f}")
    print(f"N: {int(model.nobs):,}")


def plot_selection_path(path, figure_path, best_step=None):
    fig, ax = plt.subplots(figsize=(7, 4))
    ax.plot(path["n_predictors"], path["adj_r2"], marker="o", color="steelblue", lw=1.5)
    if best_step is not None:
        row = path.loc[best_step]
        ax.scatter([row["n_predictors"]], [row["adj_r2"]], s=80, color="firebrick", zorder=3,
                   label=f"Selected: {int(row['n_predictors'])} predictors")
        ax.legend(loc="lower right")
    for _, row in path.iterrows():
        if row["removed"]:
            ax.annotate(row["removed"], (row["n_predictors"], row["adj_r2"]), fontsize=6,
                        rotation=45, xytext=(2, 4), textcoords="offset points")
    ax.set_xlabel("Number of predictors")
    ax.set_ylabel("Adjusted R²")
    ax.set_title("Backward elimination path")
    ax.invert_xaxis()
    ax.grid(alpha=0.3, linestyle="--")
    fig.tight_layout()
    fig.savefig(figure_path, dpi=DPI, bbox_inches="tight")
    plt.close(fig)
    print(f"Saved: {figure_path}")


def save_model_outputs(model, selection, output_dir, figure_dir, alpha=ALPHA):
    output_dir = Path(output_dir)
    figure_dir = Path(figure_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    figure_dir.mkdir(parents=True, exist_ok=True)

    with open(output_dir / "ols_summary.txt", "w") as f:
        f.write(str(model.summary(alpha=alpha)))
    coefficient_table(model, alpha).to_csv(output_dir / "coefficients.csv", index=False)
    fit_statistics(model).to_csv(output_dir / "model_fit.csv", index=False)
    selection["path"].to_csv(output_dir / "selection_path.csv", index=False)
    print(f"Model tables saved to: {output_dir}")
    plot_selection_path(selection["path"], figure_dir / "selection_path.png", selection["best_step"])


def run_model(df, response=RESPONSE, candidates=CANDIDATE_PREDICTORS, output_dir=None, figure_dir=None,
              cov_type=COV_TYPE):
    """Selection + final fit; returns (final model, model_df, selection dict)."""
    print(f"Searching {len(candidates)} candidate predictors (backward elimination, adj. R²)")
    selection = backward_stepwise(df, response, candidates, cov_type=cov_type, verbose=True)
    if selection["dropped_constant"]:
        print(f"⚠️  Constant in sample, not searched: {', '.join(selection['dropped_constant'])}")
    print(f"\nSearch sample: {selection['nobs']:,} complete cases")
    print(f"Selected model: {selection['formula']}")

    model, model_df = fit_final_model(df, response, selection["selected"], cov_type)
    print(f"\nFinal OLS fit on {len(model_df):,} complete cases of the selected variables")
    print_coefficients(model)

    if output_dir is not None and figure_dir is not None:
        save_model_outputs(model, selection, output_dir, figure_dir)
    return model, model_df, selection


def main():
    from load_movies import load_movies, drop_leakage_columns
    from features import load_name_gender_table, engineer_features

    print("=" * 80)
    print("PART 4b: FINAL MODEL")
    print("=" * 80)
    df = drop_leakage_columns(load_movies())
    df, _ = engineer_features(df, load_name_gender_table())
    out_dir, fig_dir = part_dirs("model")
    model, _, _ = run_model(df, output_dir=out_dir, figure_dir=fig_dir)
    print("\n" + str(model.summary()))
    return model


if __name__ == "__main__":
    main()
