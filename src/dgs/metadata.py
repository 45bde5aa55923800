"""
Metadata extraction for catalog tracks.

Converts raw catalog payloads (plain dicts as returned by the search /
recommendation collaborator) into immutable ``TrackFeatureRecord``s, and
builds artist and target profiles from their dict forms.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from .rules import PopularityBand
from .types import ArtistProfile, ArtistRef, TargetProfile, TrackFeatureRecord

logger = logging.getLogger(__name__)

DEFAULT_POPULARITY = 50
DEFAULT_DURATION_MS = 180_000


def get_popularity_band(popularity: float) -> PopularityBand:
    """low for <=33, mid for 34-66, high for >=67."""
    if popularity < 34:
        return "low"
    if popularity < 67:
        return "mid"
    return "high"


def parse_release_year(release_date: Any) -> Optional[int]:
    """Year from 'YYYY', 'YYYY-MM' or 'YYYY-MM-DD'; None when unparseable."""
    if release_date is None:
        return None
    if isinstance(release_date, int):
        return release_date
    text = str(release_date).strip()
    if len(text) < 4:
        return None
    try:
        return int(text[:4])
    except ValueError:
        return None


def _clean_genres(genres: Any) -> Tuple[str, ...]:
    if not genres:
        return ()
    seen: Dict[str, None] = {}
    for genre in genres:
        if genre is None:
            continue
        text = str(genre).strip()
        if text:
            seen.setdefault(text, None)
    return tuple(seen)


def _as_int(value: Any, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def artist_profile_from_mapping(data: Mapping[str, Any]) -> ArtistProfile:
    followers = data.get("followers")
    if isinstance(followers, Mapping):
        followers = followers.get("total")
    return ArtistProfile(
        id=str(data.get("id") or ""),
        name=str(data.get("name") or ""),
        genres=_clean_genres(data.get("genres")),
        popularity=data.get("popularity"),
        followers=followers,
    )


def target_profile_from_mapping(data: Optional[Mapping[str, Any]]) -> Optional[TargetProfile]:
    """Build a TargetProfile; ``None`` or an entry without a name means no target."""
    if not data:
        return None
    name = data.get("artist_name") or data.get("name")
    if not name:
        return None
    return TargetProfile(
        artist_name=str(name),
        artist_id=data.get("artist_id") or data.get("id"),
        genres=_clean_genres(data.get("genres")),
        popularity=data.get("popularity"),
        followers=data.get("followers"),
    )


def extract_track_features(
    track: Mapping[str, Any],
    artist_profile: Optional[ArtistProfile] = None,
) -> TrackFeatureRecord:
    """
    Normalize a raw catalog track plus its artist profile into a feature record.

    Missing popularity/duration fall back to catalog-neutral defaults (50 and
    three minutes). Genres come from the artist profile; the catalog does not
    tag individual tracks.
    """
    artists = tuple(
        ArtistRef(id=a.get("id") or None, name=a.get("name") or None)
        for a in (track.get("artists") or [])
        if isinstance(a, Mapping)
    )
    album = track.get("album") or {}
    release = track.get("release_year")
    if release is None and isinstance(album, Mapping):
        release = album.get("release_date")

    return TrackFeatureRecord(
        id=str(track.get("id") or "").strip(),
        name=str(track.get("name") or "").strip(),
        artists=artists,
        genres=artist_profile.genres if artist_profile else _clean_genres(track.get("genres")),
        popularity=_as_int(track.get("popularity"), DEFAULT_POPULARITY),
        duration_ms=_as_int(track.get("duration_ms"), DEFAULT_DURATION_MS),
        release_year=parse_release_year(release),
        is_playable=bool(track.get("is_playable", True)),
        explicit=bool(track.get("explicit", False)),
        uri=track.get("uri"),
    )
