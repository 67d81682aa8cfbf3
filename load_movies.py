#!/usr/bin/env python3
"""
load_movies.py

Part 1: load the movies dataset and prepare it for analysis.
  1) Read Data/movies.csv (651 movies, Rotten Tomatoes + IMDb attributes)
  2) Normalise blanks / "NA" strings to NaN
  3) Check that every column the report needs is present
  4) Drop leakage columns (recodes of the response, post-release IMDb measures, URLs)
  5) Report missingness per column

Requirements:
  pandas, numpy
"""
import warnings
warnings.filterwarnings("ignore")

from pathlib import Path
import numpy as np
import pandas as pd

from report_config import (
    MOVIES_CSV, RESPONSE, LEAKAGE_COLS, RELEASE_DATE_COLS,
    TOP_LEVEL_COLS, GENDER_NAME_COLS,
)

# Raw columns read directly by the feature step or the model.
RAW_PREDICTORS = [
    "title_type", "genre", "runtime", "mpaa_rating",
    "thtr_rel_year", "thtr_rel_month", "critics_score",
    "best_pic_nom", "best_pic_win", "best_actor_win", "best_actress_win",
    "best_dir_win", "top200_box",
]
REQUIRED_COLS = (
    [RESPONSE, "title"]
    + list(RELEASE_DATE_COLS)
    + list(TOP_LEVEL_COLS)
    + list(GENDER_NAME_COLS)
    + [c for c in RAW_PREDICTORS if c not in RELEASE_DATE_COLS]
)

NA_STRINGS = ["", "NA", "N/A", "NaN", "nan"]


def load_movies(path=MOVIES_CSV):
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Movies CSV not found: {path}")
    df = pd.read_csv(path, na_values=NA_STRINGS, keep_default_na=True)

    # Strip stray whitespace; blank strings become NaN
    for c in df.select_dtypes(include=["object", "string"]).columns:
        df[c] = df[c].str.strip()
        df.loc[df[c].isin(NA_STRINGS), c] = np.nan

    missing = [c for c in dict.fromkeys(REQUIRED_COLS) if c not in df.columns]
    if missing:
        raise ValueError(f"Movies data is missing required columns: {', '.join(missing)}")
    return df


def drop_leakage_columns(df, cols=LEAKAGE_COLS, response=RESPONSE):
    """Drop the fixed leakage list; absent columns are skipped, the response is always kept."""
    to_drop = [c for c in cols if c in df.columns and c != response]
    return df.drop(columns=to_drop)


def filter_complete_cases(df, cols):
    cols = list(cols)
    unknown = [c for c in cols if c not in df.columns]
    if unknown:
        raise KeyError(f"Columns not in data: {unknown}")
    return df.dropna(subset=cols).reset_index(drop=True)


def missing_summary(df):
    """Proportion missing per column (only columns with any missing), largest first."""
    prop = df.isna().mean()
    return prop[prop > 0].sort_values(ascending=False)


def main():
    print("=" * 80)
    print("PART 1: DATA")
    print("=" * 80)
    print(f"Loading from: {MOVIES_CSV}")
    df = load_movies(MOVIES_CSV)
    print(f"✓ Loaded {len(df):,} movies, {df.shape[1]} columns")

    print("\nProportion missing per column:")
    miss = missing_summary(df)
    if len(miss):
        print(miss.round(3).to_string())
    else:
        print("  (none)")

    before = set(df.columns)
    df = drop_leakage_columns(df)
    dropped = sorted(before - set(df.columns))
    print(f"\nDropped {len(dropped)} leakage columns: {', '.join(dropped)}")
    print(f"Remaining columns: {df.shape[1]}")
    return df


if __name__ == "__main__":
    main()
