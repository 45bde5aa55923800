"""Shared fixtures for end-to-end selection tests."""

import pytest


GENRE_SETS = [
    ["synth pop", "new wave"],
    ["indie rock"],
    ["post-punk", "new wave"],
    ["shoegaze", "dream pop"],
    ["techno"],
    ["folk", "singer-songwriter"],
    ["hip hop"],
    ["jazz"],
]


def build_round_payload(n_artists: int = 24, round_number: int = 3) -> dict:
    profiles = [
        {
            "id": "tgt1",
            "name": "Target One",
            "genres": ["synth pop", "new wave"],
            "popularity": 72,
            "followers": {"total": 800000},
        },
        {
            "id": "tgt2",
            "name": "Target Two",
            "genres": ["folk"],
            "popularity": 48,
            "followers": {"total": 60000},
        },
        {"id": "cur", "name": "Current Band", "genres": ["indie rock"], "popularity": 55, "followers": {"total": 150000}},
    ]
    candidates = []
    for i in range(n_artists):
        artist_id = f"ar{i}"
        profiles.append(
            {
                "id": artist_id,
                "name": f"Band {i}",
                "genres": GENRE_SETS[i % len(GENRE_SETS)],
                "popularity": (i * 17) % 100,
                "followers": {"total": 1000 * (i + 1) ** 2},
            }
        )
        for j in range(2):
            candidates.append(
                {
                    "source": "recommendations" if j == 0 else "related_top_tracks",
                    "track": {
                        "id": f"tr{i}_{j}",
                        "name": f"Song {i}-{j}",
                        "artists": [{"id": artist_id, "name": f"Band {i}"}],
                        "album": {"release_date": f"{1975 + i}-01-01"},
                        "popularity": (i * 17 + j * 5) % 100,
                        "duration_ms": 150000 + i * 3000,
                    },
                }
            )
    candidates.append(
        {
            "source": "target_insertion",
            "track": {
                "id": "trt1",
                "name": "Target Hit",
                "artists": [{"id": "tgt1", "name": "Target One"}],
                "album": {"release_date": "1984-06-01"},
                "popularity": 80,
            },
        }
    )
    return {
        "round": round_number,
        "active_player": "player1",
        "current_track": {
            "id": "now",
            "name": "Now Playing",
            "artists": [{"id": "cur", "name": "Current Band"}],
            "album": {"release_date": "2005"},
            "popularity": 55,
            "duration_ms": 210000,
        },
        "candidates": candidates,
        "artist_profiles": profiles,
        "relationships": {"cur": ["ar1", "ar2"]},
        "targets": {
            "player1": {"artist_name": "Target One", "artist_id": "tgt1", "genres": ["synth pop", "new wave"]},
            "player2": {"artist_name": "Target Two", "artist_id": "tgt2", "genres": ["folk"]},
        },
        "gravities": {"player1": 0.4, "player2": 0.3},
    }


@pytest.fixture()
def round_payload():
    return build_round_payload()


@pytest.fixture()
def round_payload_factory():
    return build_round_payload
