#!/usr/bin/env python3
"""
predict_movie.py

Part 5: out-of-sample prediction of audience_score for one new movie.

The new movie (report_config.NEW_MOVIE, raw dataset columns) goes through the
same feature engineering as the analysis sample, re-using the sample's top-10
level sets. The final model then gives:
  - the point prediction
  - a confidence interval for the mean audience score of such movies
  - a prediction interval for this one movie

Output (Output/prediction/): prediction.csv

Requirements: pandas, statsmodels
"""
import warnings
warnings.filterwarnings("ignore")

from pathlib import Path
import pandas as pd

from report_config import ALPHA, NEW_MOVIE, NEW_MOVIE_ACTUAL
from features import engineer_features


def build_new_movie_frame(movie, name_table, top_level_sets):
    """One-row frame with every derived feature, using the training top-level sets."""
    new_df = pd.DataFrame([dict(movie)])
    new_df, _ = engineer_features(new_df, name_table, top_level_sets=top_level_sets)
    return new_df


def check_levels(model_df, predictors, new_df):
    """Raise ValueError if the new movie has a missing predictor or an unseen category."""
    missing = [p for p in predictors if p not in new_df.columns or pd.isna(new_df[p].iloc[0])]
    if missing:
        raise ValueError(f"New movie has no value for selected predictor(s): {', '.join(missing)}")
    unseen = []
    for p in predictors:
        if pd.api.types.is_numeric_dtype(model_df[p]):
            continue
        value = new_df[p].iloc[0]
        if value not in set(model_df[p].dropna()):
            unseen.append(f"{p}={value!r}")
    if unseen:
        raise ValueError(f"Category not seen when fitting the model: {', '.join(unseen)}")


def predict_with_interval(model, new_df, alpha=ALPHA):
    """Point prediction with confidence (mean) and prediction (single movie) intervals."""
    pred = model.get_prediction(new_df)
    sf = pred.summary_frame(alpha=alpha)
    out = pd.DataFrame({
        "fit": sf["mean"].values,
        "se_fit": sf["mean_se"].values,
        "ci_lower": sf["mean_ci_lower"].values,
        "ci_upper": sf["mean_ci_upper"].values,
        "pi_lower": sf["obs_ci_lower"].values,
        "pi_upper": sf["obs_ci_upper"].values,
    }, index=new_df.index)
    out["level"] = 1 - alpha
    return out


def run_prediction(model, model_df, predictors, name_table, top_level_sets, movie=NEW_MOVIE,
                   actual=NEW_MOVIE_ACTUAL, output_dir=None, alpha=ALPHA):
    new_df = build_new_movie_frame(movie, name_table, top_level_sets)
    check_levels(model_df, predictors, new_df)
    result = predict_with_interval(model, new_df, alpha)
    result.insert(0, "title", new_df["title"].values)

    row = result.iloc[0]
    level = int(round((1 - alpha) * 100))
    print(f"\nMovie: {row['title']}")
    print("Predictor values:")
    for p in predictors:
        print(f"  {p:<20s} {new_df[p].iloc[0]}")
    print(f"\nPredicted audience score: {row['fit']:.1f}")
    print(f"  {level}% confidence interval (mean): [{row['ci_lower']:.1f}, {row['ci_upper']:.1f}]")
    print(f"  {level}% prediction interval:        [{row['pi_lower']:.1f}, {row['pi_upper']:.1f}]")

    if actual is not None:
        result["actual"] = actual
        result["residual"] = actual - result["fit"]
        result["covered"] = (result["pi_lower"] <= actual) & (actual <= result["pi_upper"])
        covered = bool(result["covered"].iloc[0])
        print(f"  Actual: {actual}  (residual {actual - row['fit']:+.1f}; "
              f"{'inside' if covered else 'OUTSIDE'} the prediction interval)")

    if output_dir is not None:
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        result.to_csv(output_dir / "prediction.csv", index=False)
        print(f"Saved: {output_dir / 'prediction.csv'}")
    return result


def main():
    from load_movies import load_movies, drop_leakage_columns
    from features import load_name_gender_table
    from model_audience import run_model
    from report_config import part_dirs

    print("=" * 80)
    print("PART 5: PREDICTION")
    print("=" * 80)
    names = load_name_gender_table()
    df = drop_leakage_columns(load_movies())
    df, top_sets = engineer_features(df, names)
    model, model_df, selection = run_model(df)
    out_dir, _ = part_dirs("prediction")
    return run_prediction(model, model_df, selection["selected"], names, top_sets, output_dir=out_dir)


if __name__ == "__main__":
    main()
