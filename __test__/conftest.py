"""Test configuration and fixtures for all tests."""

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest


STUDIOS = [
    "Paramount Pictures", "Warner Bros. Pictures", "Universal Pictures",
    "20th Century Fox", "Sony Pictures", "IFC Films", "Miramax Films",
    "MGM", "Lionsgate", "New Line Cinema", "Magnolia Pictures",
    "Focus Features", "Small Indie A", "Small Indie B",
]
STUDIO_WEIGHTS = np.array([14, 13, 12, 11, 10, 9, 8, 7, 6, 5, 2, 1.5, 1, 0.5])

FIRST_NAMES = ["tim", "ryan", "sofia", "kathryn", "james", "emma", "steven", "greta"]
LAST_NAMES = ["Miller", "Reynolds", "Coppola", "Bigelow", "Cameron", "Stone", "Spielberg", "Gerwig"]
TITLE_WORDS = ["Night", "The", "Return", "Dark", "City", "of", "Love", "Last", "Summer", "Storm"]


def make_movies(n=240, seed=7):
    """Synthetic movies frame with the dataset's columns and a known linear signal."""
    rng = np.random.default_rng(seed)
    genre = rng.choice(["Drama", "Comedy", "Action & Adventure", "Documentary"], size=n, p=[0.4, 0.25, 0.25, 0.1])
    critics = rng.integers(5, 100, size=n).astype(float)
    runtime = rng.normal(105, 15, size=n).round()
    noise = rng.normal(0, 5, size=n)
    score = 30 + 0.5 * critics + 8 * (genre == "Drama") + noise
    score = np.clip(score.round(), 1, 100)

    def person():
        return f"{rng.choice(FIRST_NAMES).capitalize()} {rng.choice(LAST_NAMES)}"

    df = pd.DataFrame({
        "title": [" ".join(rng.choice(TITLE_WORDS, size=rng.integers(1, 5))) for _ in range(n)],
        "title_type": rng.choice(["Feature Film", "Documentary"], size=n, p=[0.9, 0.1]),
        "genre": genre,
        "runtime": runtime,
        "mpaa_rating": rng.choice(["R", "PG-13", "PG"], size=n),
        "studio": rng.choice(STUDIOS, size=n, p=STUDIO_WEIGHTS / STUDIO_WEIGHTS.sum()),
        "thtr_rel_year": rng.integers(1975, 2015, size=n),
        "thtr_rel_month": rng.integers(1, 13, size=n),
        "thtr_rel_day": rng.integers(1, 29, size=n),
        "dvd_rel_year": rng.integers(1998, 2016, size=n),
        "dvd_rel_month": rng.integers(1, 13, size=n),
        "dvd_rel_day": rng.integers(1, 29, size=n),
        "imdb_rating": (score / 12).round(1),
        "imdb_num_votes": rng.integers(200, 900000, size=n),
        "critics_rating": np.where(critics >= 60, "Fresh", "Rotten"),
        "critics_score": critics,
        "audience_rating": np.where(score >= 60, "Upright", "Spilled"),
        "audience_score": score,
        "best_pic_nom": rng.choice(["no", "yes"], size=n, p=[0.9, 0.1]),
        "best_pic_win": rng.choice(["no", "yes"], size=n, p=[0.95, 0.05]),
        "best_actor_win": rng.choice(["no", "yes"], size=n, p=[0.85, 0.15]),
        "best_actress_win": rng.choice(["no", "yes"], size=n, p=[0.85, 0.15]),
        "best_dir_win": rng.choice(["no", "yes"], size=n, p=[0.9, 0.1]),
        "top200_box": rng.choice(["no", "yes"], size=n, p=[0.8, 0.2]),
        "director": [person() for _ in range(n)],
        "actor1": [person() for _ in range(n)],
        "actor2": [person() for _ in range(n)],
        "actor3": [person() for _ in range(n)],
        "actor4": [person() for _ in range(n)],
        "actor5": [person() for _ in range(n)],
        "imdb_url": [f"http://www.imdb.com/title/tt{i:07d}/" for i in range(n)],
        "rt_url": [f"//www.rottentomatoes.com/m/movie_{i}/" for i in range(n)],
    })
    df.loc[[3, 17], "runtime"] = np.nan
    df.loc[[5], "studio"] = np.nan
    return df


@pytest.fixture
def movies_df():
    return make_movies()


@pytest.fixture
def name_table_raw():
    return pd.DataFrame({
        "name": ["Tim", "Ryan", "Sofia", "Kathryn", "James", "Emma", "Steven", "Greta",
                 "Jordan", "Jordan", "Alex", "Alex"],
        "gender": ["M", "M", "F", "F", "M", "F", "M", "F", "F", "M", "female", "male"],
        "count": [900, 800, 700, 600, 1000, 950, 500, 300, 40, 60, 50, 50],
    })


@pytest.fixture
def names_csv(tmp_path, name_table_raw):
    path = tmp_path / "name_gender.csv"
    name_table_raw.to_csv(path, index=False)
    return path


@pytest.fixture
def movies_csv(tmp_path, movies_df):
    path = tmp_path / "movies.csv"
    movies_df.to_csv(path, index=False)
    return path


@pytest.fixture
def name_table(names_csv):
    from features import load_name_gender_table
    return load_name_gender_table(names_csv)


@pytest.fixture
def featured_df(movies_df, name_table):
    from features import engineer_features
    from load_movies import drop_leakage_columns
    df, _ = engineer_features(drop_leakage_columns(movies_df), name_table)
    return df


@pytest.fixture
def linear_df():
    """y = 1 + 2*x1 - 1.5*x2 + 3*[group == 'b'] + N(0, 1)."""
    rng = np.random.default_rng(11)
    n = 200
    df = pd.DataFrame({
        "x1": rng.normal(0, 1, n),
        "x2": rng.normal(5, 2, n),
        "group": rng.choice(["a", "b", "c"], size=n),
    })
    df["y"] = 1 + 2 * df["x1"] - 1.5 * df["x2"] + 3 * (df["group"] == "b") + rng.normal(0, 1, n)
    return df


@pytest.fixture
def out_dirs(tmp_path):
    out = tmp_path / "Output"
    fig = tmp_path / "Figure"
    return out, fig
