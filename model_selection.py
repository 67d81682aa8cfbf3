#!/usr/bin/env python3
"""
model_selection.py

Part 4a: backward stepwise selection of predictors for audience_score.

Procedure:
  1) Restrict to complete cases over the response and ALL candidate predictors,
     so every model in the search is fit on the same rows (adj. R^2 comparable).
  2) Drop candidates that are constant in that sample.
  3) Fit the full model. At each step, try removing each remaining predictor
     and keep the removal with the highest adjusted R^2. Continue down to a
     single predictor, recording every step.
  4) Select the step with the maximum adjusted R^2 (ties -> fewer predictors).

Categorical predictors are removed as a whole (all dummy columns together).

Requirements:
  pandas, numpy, statsmodels
"""
import warnings
warnings.filterwarnings("ignore")

import numpy as np
import pandas as pd
import statsmodels.formula.api as smf

from report_config import MIN_OBS, COV_TYPE


# -------------------- Helper functions --------------------
def build_formula(response, predictors):
    rhs = " + ".join(predictors) if predictors else "1"
    return f"{response} ~ {rhs}"


def fit_ols(df, response, predictors, cov_type=COV_TYPE):
    """OLS through the formula interface; string columns enter as factors."""
    return smf.ols(build_formula(response, predictors), data=df).fit(cov_type=cov_type)


def split_predictor_types(df, predictors):
    """
    (numeric, categorical) split of predictors present in df.

    Numeric = numeric dtype with more than two distinct values; 0/1 indicators
    and string columns count as categorical.
    """
    numeric, categorical = [], []
    for p in predictors:
        if p not in df.columns:
            continue
        s = df[p]
        if pd.api.types.is_numeric_dtype(s) and s.dropna().nunique() > 2:
            numeric.append(p)
        else:
            categorical.append(p)
    return numeric, categorical


def _path_row(step, removed, predictors, model):
    return {
        "step": step,
        "removed": removed if removed is not None else "",
        "n_predictors": len(predictors),
        "adj_r2": float(model.rsquared_adj),
        "r2": float(model.rsquared),
        "aic": float(model.aic),
        "bic": float(model.bic),
        "predictors": " + ".join(predictors),
    }


# -------------------- Backward stepwise --------------------
def backward_stepwise(df, response, predictors, min_obs=MIN_OBS, cov_type=COV_TYPE, verbose=False):
    """
    Backward elimination by adjusted R^2.

    Returns dict with:
      selected          predictors of the best step (candidate order kept)
      formula           formula of the selected model
      model             fitted statsmodels results for the selected model
      path              DataFrame, one row per step
      nobs              rows used by every model in the search
      dropped_constant  candidates removed for having a single value
    """
    predictors = [p for p in dict.fromkeys(predictors) if p != response]
    missing = [c for c in [response] + predictors if c not in df.columns]
    if missing:
        raise ValueError(f"Columns not found in data: {', '.join(missing)}")

    sample = df[[response] + predictors].dropna().reset_index(drop=True)
    nobs = len(sample)
    if nobs < min_obs:
        raise ValueError(f"Only {nobs} complete observations available, need at least {min_obs}.")

    dropped_constant = [p for p in predictors if sample[p].nunique() < 2]
    current = [p for p in predictors if p not in dropped_constant]
    if not current:
        raise ValueError("No candidate predictor varies in the complete-case sample.")

    model = fit_ols(sample, response, current, cov_type)
    rows = [_path_row(0, None, current, model)]
    if verbose:
        print(f"  step 0: full model, {len(current)} predictors, adj. R² = {model.rsquared_adj:.4f}")

    step = 0
    while len(current) > 1:
        step += 1
        best = None
        for p in current:
            remaining = [c for c in current if c != p]
            trial = fit_ols(sample, response, remaining, cov_type)
            if best is None or trial.rsquared_adj > best[0]:
                best = (trial.rsquared_adj, p, remaining, trial)
        _, removed, current, model = best
        rows.append(_path_row(step, removed, current, model))
        if verbose:
            print(f"  step {step}: drop {removed:<20s} adj. R² = {model.rsquared_adj:.4f}")

    path = pd.DataFrame(rows)
    best_adj = path["adj_r2"].max()
    at_best = np.isclose(path["adj_r2"].values, best_adj, rtol=0.0, atol=1e-12)
    best_step = int(path.index[at_best][-1])

    chosen = set(path.loc[best_step, "predictors"].split(" + "))
    selected = [p for p in predictors if p in chosen]
    return {
        "selected": selected,
        "formula": build_formula(response, selected),
        "model": fit_ols(sample, response, selected, cov_type),
        "path": path,
        "best_step": best_step,
        "nobs": nobs,
        "dropped_constant": dropped_constant,
    }


def main():
    from load_movies import load_movies, drop_leakage_columns
    from features import load_name_gender_table, engineer_features
    from report_config import RESPONSE, CANDIDATE_PREDICTORS

    print("=" * 80)
    print("PART 4a: BACKWARD STEPWISE SELECTION (adj. R²)")
    print("=" * 80)
    df = drop_leakage_columns(load_movies())
    df, _ = engineer_features(df, load_name_gender_table())
    result = backward_stepwise(df, RESPONSE, CANDIDATE_PREDICTORS, verbose=True)
    print(f"\nComplete cases used: {result['nobs']:,}")
    print("\nElimination path:")
    print(result["path"].drop(columns="predictors").round(4).to_string(index=False))
    print(f"\nSelected ({len(result['selected'])}): {result['formula']}")
    return result


if __name__ == "__main__":
    main()
