"""Test configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add repo root to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from src.dgs.diagnostics import RecordingSink
from src.dgs.metadata import get_popularity_band
from src.dgs.types import ArtistRef, CandidateMetric, RoundContext, TargetProfile, TrackFeatureRecord


def make_track(
    track_id: str,
    artist_id: str = "artist_1",
    artist_name: str = "Artist One",
    *,
    name=None,
    genres=("rock",),
    popularity: int = 50,
    duration_ms: int = 180_000,
    release_year=2010,
    extra_artists=(),
) -> TrackFeatureRecord:
    artists = (ArtistRef(artist_id or None, artist_name or None),) + tuple(extra_artists)
    return TrackFeatureRecord(
        id=track_id,
        name=name if name is not None else f"Song {track_id}",
        artists=artists,
        genres=tuple(genres),
        popularity=popularity,
        duration_ms=duration_ms,
        release_year=release_year,
    )


def make_metric(
    track_id: str,
    *,
    artist_id: str = None,
    artist_name: str = None,
    attraction: float = 0.5,
    baseline: float = 0.0,
    final_score: float = 0.5,
    sim_score: float = 0.5,
    popularity: int = 50,
    genres=("rock",),
    b_attraction: float = None,
    track: TrackFeatureRecord = None,
    source: str = "recommendations",
) -> CandidateMetric:
    """Metric for player1 with an attraction delta of ``attraction - baseline``."""
    artist_id = artist_id if artist_id is not None else f"artist_{track_id}"
    artist_name = artist_name if artist_name is not None else f"Artist {track_id}"
    if track is None:
        track = make_track(track_id, artist_id, artist_name, genres=genres, popularity=popularity)
    return CandidateMetric(
        track=track,
        source=source,
        sim_score=sim_score,
        a_attraction=attraction,
        b_attraction=attraction if b_attraction is None else b_attraction,
        final_score=final_score,
        baseline=baseline,
        popularity_band=get_popularity_band(track.popularity),
        artist_id=artist_id,
        artist_name=artist_name,
        artist_genres=tuple(genres),
    )


def balanced_pool(per_category: int = 4, baseline: float = 0.5):
    """Pool with ``per_category`` genuine members in each category, all artists distinct."""
    metrics = []
    offsets = {"closer": 0.2, "neutral": 0.0, "further": -0.2}
    for category, offset in offsets.items():
        for i in range(per_category):
            metrics.append(
                make_metric(
                    f"{category}{i}",
                    attraction=baseline + offset + (0.01 * i if offset else 0.0),
                    baseline=baseline,
                    final_score=0.9 - 0.05 * i,
                    popularity=[20, 50, 80, 40][i % 4],
                )
            )
    return metrics


@pytest.fixture()
def sink():
    return RecordingSink()


@pytest.fixture()
def round_context():
    def _build(round_number=1, active="player1", gravity=0.3, targets=None, **kwargs):
        if targets is None:
            targets = {
                "player1": TargetProfile(artist_name="Target Artist", artist_id="target1"),
                "player2": None,
            }
        return RoundContext(
            round_number=round_number,
            active_player_id=active,
            targets=targets,
            gravities={"player1": gravity, "player2": gravity},
            **kwargs,
        )

    return _build


@pytest.fixture()
def metric_factory():
    return make_metric


@pytest.fixture()
def track_factory():
    return make_track


@pytest.fixture()
def pool_factory():
    return balanced_pool
