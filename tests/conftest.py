import pandas as pd
import pytest

from songstats.schema import PERCENT_FIELDS


def make_row(**overrides):
    row = {
        "track_name": "Song",
        "released_year": 2023,
        "released_month": 5,
        "released_day": 10,
        "in_spotify_playlists": 100,
        "in_spotify_charts": 10,
        "in_apple_playlists": 20,
        "in_apple_charts": 5,
        "shazam_charts": "1,021",
        "streams": "12345",
        "bpm": 120,
        "key": "C#",
        "mode": "Major",
    }
    row.update({f: 50 for f in PERCENT_FIELDS})
    row.update(overrides)
    return row


def make_raw(*rows):
    return pd.DataFrame([make_row(**r) for r in rows])


@pytest.fixture
def raw_songs():
    return make_raw(
        {"track_name": "A", "in_spotify_charts": 3, "bpm": 90, "key": "G", "mode": "Minor",
         "danceability_%": 60, "energy_%": 40, "valence_%": 20},
        {"track_name": "B", "in_spotify_charts": 1, "bpm": 150, "key": "C#", "mode": "Major",
         "danceability_%": 80, "energy_%": 70, "valence_%": 90, "shazam_charts": None},
        {"track_name": "C", "in_spotify_charts": 2, "bpm": 120, "key": "C#", "mode": "Major",
         "danceability_%": 70, "energy_%": 50, "valence_%": 60},
        {"track_name": "D", "key": None},
        {"track_name": "E", "released_month": 2, "released_day": 30},
        {"track_name": "F", "key": "H"},
        {"track_name": "G", "streams": "BPM110KeyAModeMajor"},
    )
