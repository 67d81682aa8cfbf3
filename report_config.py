"""
report_config.py

Shared parameters for the movie audience-score report.

Every script in the pipeline (load_movies, features, eda, model_selection,
model_audience, diagnostics, predict_movie, run_all) reads its paths and
modelling choices from here. Edit this block, not the scripts.

Inputs:
  - Data/movies.csv        651 movies x 32 columns (Rotten Tomatoes + IMDb)
  - Data/name_gender.csv   first name -> gender table (name, gender[, count])

Outputs:
  - Output/<part>/  CSV and .txt tables
  - Figure/<part>/  PNG figures (300 DPI)
"""

from pathlib import Path

# -------------------- PATHS --------------------
BASE_DIR = Path(__file__).resolve().parent
DATA_DIR = BASE_DIR / "Data"
MOVIES_CSV = DATA_DIR / "movies.csv"
NAMES_CSV = DATA_DIR / "name_gender.csv"

OUT_DIR = BASE_DIR / "Output"
FIGURE_DIR = BASE_DIR / "Figure"

PARTS = ["eda", "model", "diagnostics", "prediction"]

# -------------------- RESPONSE --------------------
RESPONSE = "audience_score"

# Columns that restate or are measured alongside the response (or are bare
# identifiers); removed right after loading.
LEAKAGE_COLS = [
    "audience_rating",   # categorical recode of audience_score
    "imdb_rating",
    "imdb_num_votes",
    "critics_rating",    # categorical recode of critics_score
    "imdb_url",
    "rt_url",
]

# -------------------- FEATURES --------------------
TOP_N = 10
# raw column -> derived "level is among the TOP_N most frequent" indicator
TOP_LEVEL_COLS = {
    "studio": "top_studio",
}
# raw name column -> derived female indicator (first-name lookup)
GENDER_NAME_COLS = {
    "director": "director_female",
    "actor1": "lead_female",
}
RELEASE_DATE_COLS = ("thtr_rel_year", "thtr_rel_month", "thtr_rel_day")

# -------------------- MODEL --------------------
CANDIDATE_PREDICTORS = [
    "title_type",
    "genre",
    "runtime",
    "mpaa_rating",
    "thtr_rel_year",
    "thtr_rel_month",
    "release_weekday",
    "critics_score",
    "best_pic_nom",
    "best_pic_win",
    "best_actor_win",
    "best_actress_win",
    "best_dir_win",
    "top200_box",
    "director_female",
    "lead_female",
    "title_words",
    "title_chars",
    "top_studio",
]

MIN_OBS = 30          # minimum complete cases to fit anything
ALPHA = 0.05          # 95% intervals, 5% test level
COV_TYPE = "nonrobust"

DPI = 300
FONT_SIZE = 11

# -------------------- OUT-OF-SAMPLE MOVIE --------------------
# Deadpool (2016); not part of the 651-movie sample. Raw dataset columns.
NEW_MOVIE = {
    "title": "Deadpool",
    "title_type": "Feature Film",
    "genre": "Action & Adventure",
    "runtime": 108,
    "mpaa_rating": "R",
    "studio": "20th Century Fox",
    "thtr_rel_year": 2016,
    "thtr_rel_month": 2,
    "thtr_rel_day": 12,
    "critics_score": 84,
    "best_pic_nom": "no",
    "best_pic_win": "no",
    "best_actor_win": "no",
    "best_actress_win": "no",
    "best_dir_win": "no",
    "top200_box": "yes",
    "director": "Tim Miller",
    "actor1": "Ryan Reynolds",
}
# Observed Rotten Tomatoes audience score, used only to check the interval.
NEW_MOVIE_ACTUAL = 90


def part_dirs(part, out_dir=OUT_DIR, figure_dir=FIGURE_DIR):
    """(output dir, figure dir) for one report part."""
    return Path(out_dir) / part, Path(figure_dir) / part


def ensure_dirs(out_dir=OUT_DIR, figure_dir=FIGURE_DIR):
    for part in PARTS:
        for d in part_dirs(part, out_dir, figure_dir):
            d.mkdir(parents=True, exist_ok=True)
