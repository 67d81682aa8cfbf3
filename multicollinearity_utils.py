"""
multicollinearity_utils.py

Shared multicollinearity diagnostics (VIF, correlation matrix, condition number)
and figures for the audience-score model. Used by diagnostics.py on the numeric
predictors of the selected model; eda.py and diagnostics.py also use get_label()
for axis labels.

Outputs:
  - CSV and .txt -> output_dir / "multicollinearity"
  - Figures (PNG) -> figure_dir

Usage:
  run_multicollinearity_diagnostics(
      pred_cols=[...],
      df=model_df,
      figure_dir=FIGURE_DIR / "diagnostics",
      output_dir=OUT_DIR / "diagnostics",
  )

If len(pred_cols) < 2, only a short note is written; no VIF/figures.
"""

import warnings
warnings.filterwarnings("ignore")

from pathlib import Path
import numpy as np
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import seaborn as sns
from statsmodels.stats.outliers_influence import variance_inflation_factor
from statsmodels.tools.tools import add_constant

from report_config import DPI, FONT_SIZE

MAX_LABEL_LEN = 22
VIF_MAX_DISPLAY = 15
VIF_COLORS = {"low": "steelblue", "moderate": "orange", "severe": "firebrick"}

LABEL_MAP = {
    "audience_score": "Audience score",
    "critics_score": "Critics score",
    "runtime": "Runtime (min)",
    "thtr_rel_year": "Release year",
    "thtr_rel_month": "Release month",
    "release_weekday": "Release weekday",
    "title_type": "Title type",
    "mpaa_rating": "MPAA rating",
    "best_pic_nom": "Best picture nom.",
    "best_pic_win": "Best picture win",
    "best_actor_win": "Best actor win",
    "best_actress_win": "Best actress win",
    "best_dir_win": "Best director win",
    "top200_box": "Top 200 box office",
    "director_female": "Female director",
    "lead_female": "Female lead",
    "title_words": "Title words",
    "title_chars": "Title characters",
    "top_studio": "Top-10 studio",
}


def get_label(col):
    """Short, report-ready label for a column name."""
    if col in LABEL_MAP:
        return LABEL_MAP[col]
    return col.replace("_", " ").capitalize()


def _fig_label(label):
    if len(label) <= MAX_LABEL_LEN:
        return label
    return label[: MAX_LABEL_LEN - 1] + "…"


def compute_vif(X_df):
    """VIF and tolerance per column; a constant is added before the auxiliary regressions."""
    exog = add_constant(X_df.astype(float), has_constant="add").values
    vif = pd.Series([variance_inflation_factor(exog, i + 1) for i in range(X_df.shape[1])], dtype=float)
    out = pd.DataFrame({"variable": list(X_df.columns), "VIF": vif.values})
    out["Tolerance"] = np.where(np.isfinite(out["VIF"]) & (out["VIF"] > 0), 1.0 / out["VIF"], np.nan)
    return out


def condition_number(X_df):
    """Condition number of the predictor matrix after z-scoring each column."""
    z = X_df.astype(float)
    sd = z.std(ddof=0).replace(0, 1.0)
    z = ((z - z.mean()) / sd).fillna(0.0)
    return float(np.linalg.cond(z.values))


def interpret(vif_df, cond):
    """One line per finding, worst first."""
    severe = vif_df.loc[vif_df["VIF"] > 10, "variable"].tolist()
    moderate = vif_df.loc[vif_df["VIF"].between(5, 10, inclusive="right"), "variable"].tolist()
    lines = []
    if severe:
        lines.append(f"  {len(severe)} predictor(s) with VIF > 10 (severe): {', '.join(severe)}")
    if moderate:
        lines.append(f"  {len(moderate)} predictor(s) with 5 < VIF <= 10 (moderate): {', '.join(moderate)}")
    if cond > 30:
        grade = "severe ill-conditioning" if cond > 100 else "ill-conditioning"
        lines.append(f"  Condition number {cond:.1f} indicates {grade}.")
    return lines or ["  No severe multicollinearity detected (all VIF <= 10, condition number acceptable)."]


def _write_note(out_dir, text):
    note_path = out_dir / "multicollinearity_note.txt"
    with open(note_path, "w") as f:
        f.write(text + "\n")
    print(f"Multicollinearity: {text.split(':', 1)[-1].strip()} Note saved to {note_path}")


def plot_correlation_heatmap(corr, figure_path):
    """Lower-triangle Pearson heatmap of the numeric predictors."""
    n_pred = len(corr.columns)
    labels = [_fig_label(get_label(c)) for c in corr.columns]
    fig, ax = plt.subplots(figsize=(max(6, n_pred * 0.9), max(5, n_pred * 0.8)))
    sns.heatmap(corr, mask=np.triu(np.ones_like(corr, dtype=bool), k=1), cmap="RdBu_r", vmin=-1, vmax=1,
                annot=True, fmt=".2f", annot_kws={"fontsize": FONT_SIZE - 3}, square=True,
                xticklabels=labels, yticklabels=labels, cbar_kws={"shrink": 0.8, "label": "Pearson r"}, ax=ax)
    ax.set_title("Numeric predictor correlations (Pearson)")
    plt.setp(ax.get_xticklabels(), rotation=45, ha="right")
    fig.tight_layout()
    fig.savefig(figure_path, dpi=DPI, bbox_inches="tight")
    plt.close(fig)
    print(f"Saved: {figure_path}")


def plot_vif_bars(vif_df, figure_path):
    """Horizontal VIF bars coloured by severity; bars above VIF_MAX_DISPLAY are clipped."""
    labels = [_fig_label(get_label(c)) for c in vif_df["variable"]]
    shown = vif_df["VIF"].clip(upper=VIF_MAX_DISPLAY)
    severity = pd.cut(vif_df["VIF"], bins=[-np.inf, 5, 10, np.inf], labels=list(VIF_COLORS))
    fig, ax = plt.subplots(figsize=(7, max(3, len(labels) * 0.45)))
    ax.barh(labels, shown, color=[VIF_COLORS[s] for s in severity], edgecolor="gray", linewidth=0.5)
    for threshold, style in ((5, "--"), (10, ":")):
        ax.axvline(threshold, color="gray", linestyle=style, linewidth=1, label=f"VIF = {threshold}")
    ax.set_xlim(0, VIF_MAX_DISPLAY if (vif_df["VIF"] > VIF_MAX_DISPLAY).any() else None)
    if (vif_df["VIF"] > VIF_MAX_DISPLAY).any():
        ax.text(0.98, 0.02, f"VIF > {VIF_MAX_DISPLAY} clipped; see vif_tolerance.csv", transform=ax.transAxes,
                fontsize=8, ha="right", va="bottom")
    ax.set_xlabel("Variance Inflation Factor")
    ax.set_title("Multicollinearity: VIF by predictor")
    ax.legend(loc="lower right")
    fig.tight_layout()
    fig.savefig(figure_path, dpi=DPI, bbox_inches="tight")
    plt.close(fig)
    print(f"Saved: {figure_path}")


def run_multicollinearity_diagnostics(pred_cols, df, figure_dir, output_dir):
    """
    Correlation matrix, VIF/tolerance and condition number for numeric predictors.

    CSV and txt -> output_dir/multicollinearity/; figures -> figure_dir.
    Uses complete cases of df over pred_cols. Returns a dict with 'corr',
    'vif' and 'condition_number', or None when fewer than two predictors
    (or complete cases) are available.
    """
    figure_dir, out_dir = Path(figure_dir), Path(output_dir) / "multicollinearity"
    for d in (figure_dir, out_dir):
        d.mkdir(parents=True, exist_ok=True)

    present = [c for c in pred_cols if c in df.columns]
    if len(present) < 2:
        _write_note(out_dir, f"Multicollinearity: only {len(present)} numeric predictor(s) "
                             f"({', '.join(present)}). VIF/figures require >=2 predictors.")
        return None
    X = df[present].dropna().astype(float)
    if len(X) < 2:
        _write_note(out_dir, "Multicollinearity: insufficient complete cases for predictor set.")
        return None

    corr = X.corr()
    vif_df = compute_vif(X)
    cond = condition_number(X)
    tables = {
        "correlation_matrix.csv": (corr, True),
        "vif_tolerance.csv": (vif_df, False),
        "condition_number.csv": (pd.DataFrame({"Condition_number": [cond]}), False),
    }
    for name, (table, keep_index) in tables.items():
        table.to_csv(out_dir / name, index=keep_index)
        print(f"Saved: {out_dir / name}")

    report = "\n".join([
        "Multicollinearity diagnostics (numeric predictors of the selected model)",
        f"Predictors: {', '.join(present)}",
        f"Complete cases: {len(X)}",
        "",
        "Variance inflation factors (moderate above 5, severe above 10):",
        vif_df.round(3).to_string(index=False),
        "",
        f"Condition number of the z-scored predictors: {cond:.2f} (ill-conditioned above 30, severe above 100)",
        "",
        "Interpretation:",
        *interpret(vif_df, cond),
    ])
    (out_dir / "multicollinearity_summary.txt").write_text(report + "\n")
    print(f"Saved: {out_dir / 'multicollinearity_summary.txt'}")

    plt.rcParams["font.size"] = FONT_SIZE
    plot_correlation_heatmap(corr, figure_dir / "multicollinearity_correlation_heatmap.png")
    plot_vif_bars(vif_df, figure_dir / "multicollinearity_vif_bars.png")
    return {"corr": corr, "vif": vif_df, "condition_number": cond}
