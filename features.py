#!/usr/bin/env python3
"""
features.py

Part 3a: derived features for the audience-score model.

  - release_weekday   : day of week of the theatrical release (Mon ... Sun)
  - director_female   : 1/0 from the director's first name (name/gender table)
  - lead_female       : 1/0 from the first-billed actor's first name
  - title_words       : number of words in the title
  - title_chars       : number of characters in the title
  - top_studio        : 1/0, studio is among the TOP_N most frequent studios

Names that are not in the name/gender table get NaN and fall out at the
complete-case step. Top-N level sets are computed on the analysis sample and
re-used unchanged for the out-of-sample movie.

Requirements:
  pandas, numpy
"""
import warnings
warnings.filterwarnings("ignore")

from pathlib import Path
import numpy as np
import pandas as pd

from report_config import (
    NAMES_CSV, TOP_N, TOP_LEVEL_COLS, GENDER_NAME_COLS, RELEASE_DATE_COLS,
)

WEEKDAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

GENDER_CODES = {
    "f": "female", "female": "female",
    "m": "male", "male": "male",
}

_NAME_PUNCT = ".,;:'\"()[]-"


# -------------------- Release date --------------------
def release_weekday(df, year_col="thtr_rel_year", month_col="thtr_rel_month", day_col="thtr_rel_day"):
    """Three-letter weekday of the date triple; NaN for missing or impossible dates."""
    parts = df[[year_col, month_col, day_col]].apply(pd.to_numeric, errors="coerce")
    parts.columns = ["year", "month", "day"]
    out = pd.Series(np.nan, index=df.index, dtype=object)
    ok = parts.notna().all(axis=1)
    if not ok.any():
        return out
    dates = pd.to_datetime(parts[ok].astype("int64"), errors="coerce")
    valid = dates.notna()
    out.loc[dates.index[valid.values]] = [WEEKDAYS[d] for d in dates[valid].dt.dayofweek]
    return out


# -------------------- Gender from first name --------------------
def first_name(full_name):
    if not isinstance(full_name, str):
        return np.nan
    tokens = full_name.strip().split()
    if not tokens:
        return np.nan
    token = tokens[0].strip(_NAME_PUNCT).lower()
    return token if token else np.nan


def load_name_gender_table(path=NAMES_CSV):
    """
    Read a first-name/gender table and collapse it to one gender per name.

    Expected columns: name, gender (F/M/female/male, any case), optional count.
    With count, counts are summed per (name, gender) and the majority wins;
    without it every row counts once. Names with an exact tie are dropped.
    Returns a DataFrame indexed by lower-case name with a 'gender' column.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Name/gender table not found: {path}")
    raw = pd.read_csv(path)
    raw.columns = [c.strip().lower() for c in raw.columns]
    for c in ("name", "gender"):
        if c not in raw.columns:
            raise ValueError(f"Name/gender table needs column '{c}' (found: {list(raw.columns)})")
    return collapse_name_gender(raw)


def collapse_name_gender(raw):
    tbl = pd.DataFrame({
        "name": raw["name"].astype(str).str.strip().str.lower(),
        "gender": raw["gender"].astype(str).str.strip().str.lower().map(GENDER_CODES),
        "count": pd.to_numeric(raw["count"], errors="coerce") if "count" in raw.columns else 1.0,
    })
    tbl = tbl.dropna(subset=["gender", "count"])
    tbl = tbl[tbl["name"] != ""]

    counts = tbl.pivot_table(index="name", columns="gender", values="count", aggfunc="sum", fill_value=0)
    for g in ("female", "male"):
        if g not in counts.columns:
            counts[g] = 0
    counts = counts[counts["female"] != counts["male"]]
    gender = np.where(counts["female"] > counts["male"], "female", "male")
    out = pd.DataFrame({"gender": gender}, index=counts.index)
    out.index.name = "name"
    return out


def female_indicator(names, table):
    """1.0 female, 0.0 male, NaN where the first name is unknown."""
    lookup = table["gender"].map({"female": 1.0, "male": 0.0})
    firsts = pd.Series(names, copy=False).map(first_name)
    return firsts.map(lookup).astype(float)


# -------------------- Title --------------------
def title_word_count(titles):
    titles = pd.Series(titles, copy=False).astype("object")
    return titles.str.split().str.len().astype(float)


def title_char_count(titles):
    titles = pd.Series(titles, copy=False).astype("object")
    return titles.str.len().astype(float)


# -------------------- Frequent levels --------------------
def top_levels(series, n=TOP_N):
    """The n most frequent non-missing levels; ties broken alphabetically."""
    counts = series.dropna().value_counts()
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], str(kv[0])))
    return [level for level, _ in ranked[:n]]


def top_level_indicator(series, levels):
    ind = series.isin(set(levels)).astype(float)
    ind[series.isna()] = np.nan
    return ind


# -------------------- All features --------------------
def engineer_features(df, name_table, top_level_sets=None, n_top=TOP_N):
    """
    Add every derived column to a copy of df.

    top_level_sets: {raw column: [levels]}; computed from df when None.
    Returns (DataFrame, top_level_sets).
    """
    out = df.copy()
    out["release_weekday"] = release_weekday(out, *RELEASE_DATE_COLS)

    for raw_col, new_col in GENDER_NAME_COLS.items():
        out[new_col] = female_indicator(out[raw_col], name_table)

    out["title_words"] = title_word_count(out["title"])
    out["title_chars"] = title_char_count(out["title"])

    if top_level_sets is None:
        top_level_sets = {raw_col: top_levels(out[raw_col], n_top) for raw_col in TOP_LEVEL_COLS}
    for raw_col, new_col in TOP_LEVEL_COLS.items():
        out[new_col] = top_level_indicator(out[raw_col], top_level_sets[raw_col])

    return out, top_level_sets


def main():
    from load_movies import load_movies, drop_leakage_columns

    print("=" * 80)
    print("PART 3a: FEATURE ENGINEERING")
    print("=" * 80)
    df = drop_leakage_columns(load_movies())
    names = load_name_gender_table(NAMES_CSV)
    print(f"✓ Name/gender table: {len(names):,} first names")

    df, top_sets = engineer_features(df, names)
    for raw_col, levels in top_sets.items():
        print(f"\nTop {len(levels)} levels of '{raw_col}':")
        for lvl in levels:
            print(f"  - {lvl}")

    for raw_col, new_col in GENDER_NAME_COLS.items():
        known = df[new_col].notna().sum()
        print(f"\n{new_col}: {known:,}/{len(df):,} names resolved, "
              f"{int(df[new_col].sum()):,} female")

    print("\nRelease weekday counts:")
    print(df["release_weekday"].value_counts().reindex(WEEKDAYS, fill_value=0).to_string())
    print("\nTitle length:")
    print(df[["title_words", "title_chars"]].describe().round(2).to_string())
    return df, top_sets


if __name__ == "__main__":
    main()
