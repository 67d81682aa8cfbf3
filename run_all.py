#!/usr/bin/env python3
"""
run_all.py

Render the complete audience-score report.
Runs every part in sequence and writes Output/report_summary.txt.

  Part 1  Data                 load_movies.py
  Part 2  Research question
  Part 3  Features + EDA       features.py, eda.py
  Part 4  Modeling             model_selection.py, model_audience.py, diagnostics.py
  Part 5  Prediction           predict_movie.py
  Part 6  Summary
"""
import warnings
warnings.filterwarnings("ignore")

from pathlib import Path

from report_config import (
    MOVIES_CSV, NAMES_CSV, OUT_DIR, FIGURE_DIR, RESPONSE, CANDIDATE_PREDICTORS,
    NEW_MOVIE, NEW_MOVIE_ACTUAL, ALPHA, part_dirs, ensure_dirs,
)
from load_movies import load_movies, drop_leakage_columns, missing_summary
from features import load_name_gender_table, engineer_features
from eda import run_eda
from model_selection import split_predictor_types
from model_audience import run_model
from diagnostics import run_diagnostics
from predict_movie import run_prediction

RESEARCH_QUESTION = (
    "Which attributes of a movie, known around its theatrical release, are associated "
    "with its Rotten Tomatoes audience score, and how well do they predict it?"
)


def banner(title):
    print("\n" + "=" * 80)
    print(title)
    print("=" * 80)


def summary_lines(n_loaded, n_features, model, selection, diag, prediction):
    tests = diag["tests"]
    pred = prediction.iloc[0]
    level = int(round((1 - ALPHA) * 100))
    lines = [
        "MOVIE AUDIENCE SCORE REPORT: SUMMARY",
        "=" * 80,
        "",
        "Research question:",
        f"  {RESEARCH_QUESTION}",
        "",
        "Data:",
        f"  Movies loaded:                       {n_loaded}",
        f"  Columns after leakage drop + features: {n_features}",
        f"  Complete cases in selection search:  {selection['nobs']}",
        f"  Observations in final model:         {int(model.nobs)}",
        "",
        "Model (backward elimination by adjusted R²):",
        f"  {selection['formula']}",
        f"  R² = {model.rsquared:.4f}, adj. R² = {model.rsquared_adj:.4f}, "
        f"F = {model.fvalue:.2f} (p = {model.f_pvalue:.3g})",
        "",
        "Diagnostics:",
    ]
    for _, row in tests.iterrows():
        lines.append(f"  {row['test']:<15} {row['conclusion']}")
    lines.append(f"  Influential points (Cook's D > 4/n): {len(diag['influential'])}")
    lines += [
        "",
        f"Prediction for {pred['title']}:",
        f"  fit = {pred['fit']:.1f}, {level}% PI [{pred['pi_lower']:.1f}, {pred['pi_upper']:.1f}], "
        f"{level}% CI [{pred['ci_lower']:.1f}, {pred['ci_upper']:.1f}]",
    ]
    if "actual" in prediction.columns:
        lines.append(f"  actual = {pred['actual']}, inside PI: {bool(pred['covered'])}")
    return lines


def main(movies_csv=MOVIES_CSV, names_csv=NAMES_CSV, out_dir=OUT_DIR, figure_dir=FIGURE_DIR):
    ensure_dirs(out_dir, figure_dir)

    banner("PART 1: DATA")
    raw = load_movies(movies_csv)
    print(f"✓ Loaded {len(raw):,} movies from {movies_csv}")
    miss = missing_summary(raw)
    if len(miss):
        print("Proportion missing:")
        print(miss.round(3).to_string())
    df = drop_leakage_columns(raw)
    print(f"Dropped leakage columns: {', '.join(sorted(set(raw.columns) - set(df.columns)))}")

    banner("PART 2: RESEARCH QUESTION")
    print(RESEARCH_QUESTION)

    banner("PART 3: FEATURES AND EXPLORATORY DATA ANALYSIS")
    names = load_name_gender_table(names_csv)
    df, top_sets = engineer_features(df, names)
    for raw_col, levels in top_sets.items():
        print(f"Top {len(levels)} {raw_col}: {', '.join(map(str, levels))}")
    numeric, categorical = split_predictor_types(df, CANDIDATE_PREDICTORS)
    eda_out, eda_fig = part_dirs("eda", out_dir, figure_dir)
    run_eda(df, RESPONSE, numeric, categorical, eda_out, eda_fig)

    banner("PART 4: MODELING")
    model_out, model_fig = part_dirs("model", out_dir, figure_dir)
    model, model_df, selection = run_model(df, output_dir=model_out, figure_dir=model_fig)
    diag_out, diag_fig = part_dirs("diagnostics", out_dir, figure_dir)
    sel_numeric, _ = split_predictor_types(model_df, selection["selected"])
    diag = run_diagnostics(model, model_df, sel_numeric, diag_out, diag_fig)

    banner("PART 5: PREDICTION")
    pred_out, _ = part_dirs("prediction", out_dir, figure_dir)
    prediction = run_prediction(model, model_df, selection["selected"], names, top_sets,
                                movie=NEW_MOVIE, actual=NEW_MOVIE_ACTUAL, output_dir=pred_out)

    banner("PART 6: SUMMARY")
    lines = summary_lines(len(raw), df.shape[1], model, selection, diag, prediction)
    summary_path = Path(out_dir) / "report_summary.txt"
    with open(summary_path, "w") as f:
        f.write("\n".join(lines) + "\n")
    print("\n".join(lines))
    print(f"\nSaved: {summary_path}")

    banner("ALL PARTS COMPLETE!")
    return {"model": model, "selection": selection, "diagnostics": diag, "prediction": prediction}


if __name__ == "__main__":
    main()
