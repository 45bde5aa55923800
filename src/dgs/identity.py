from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Set

from src.string_utils import normalize_artist_key, normalize_name
from .types import CandidateMetric, TargetProfile, TrackFeatureRecord


@dataclass(frozen=True)
class ArtistIdentityKeys:
    """
    Every key a candidate's artist can be recognized by.

    ``ids`` holds catalog artist ids; ``names`` holds lower-cased, trimmed
    artist names. When the metadata carries neither, the track id stands in
    as an id so the candidate never collides by accident.
    """
    ids: FrozenSet[str]
    names: FrozenSet[str]

    def overlaps(self, ids: Set[str], names: Set[str]) -> bool:
        return bool(self.ids & ids) or bool(self.names & names)


def identity_keys_for_metric(metric: CandidateMetric) -> ArtistIdentityKeys:
    track = metric.track
    ids: Set[str] = set()
    names: Set[str] = set()

    primary = metric.artist_id or track.primary_artist_id
    if primary:
        ids.add(primary)
    for artist in track.artists:
        if artist.id:
            ids.add(artist.id)
        name = normalize_name(artist.name)
        if name:
            names.add(name)

    metric_name = normalize_name(metric.artist_name)
    if metric_name:
        names.add(metric_name)
        if not ids:
            ids.add(metric_name)

    if not ids and not names and track.id:
        ids.add(track.id)
    return ArtistIdentityKeys(frozenset(ids), frozenset(names))


@dataclass
class ArtistIdentityRegistry:
    """Artist identities already taken by the selection so far."""
    ids: Set[str] = field(default_factory=set)
    names: Set[str] = field(default_factory=set)

    def collides(self, metric: CandidateMetric) -> bool:
        return identity_keys_for_metric(metric).overlaps(self.ids, self.names)

    def register(self, metric: CandidateMetric) -> None:
        keys = identity_keys_for_metric(metric)
        self.ids.update(keys.ids)
        self.names.update(keys.names)

    def try_register(self, metric: CandidateMetric) -> bool:
        """Register ``metric`` unless its artist is already represented."""
        keys = identity_keys_for_metric(metric)
        if keys.overlaps(self.ids, self.names):
            return False
        self.ids.update(keys.ids)
        self.names.update(keys.names)
        return True

    def __len__(self) -> int:
        return len(self.ids) + len(self.names)


def matches_target(
    artist_id: Optional[str],
    artist_name: Optional[str],
    target: Optional[TargetProfile],
) -> bool:
    """True when the artist is ``target`` by id or by normalized name."""
    if target is None:
        return False
    if artist_id and target.artist_id and artist_id == target.artist_id:
        return True
    key = normalize_artist_key(artist_name)
    return bool(key) and key == normalize_artist_key(target.artist_name)


def track_matches_target(track: TrackFeatureRecord, target: Optional[TargetProfile]) -> bool:
    return matches_target(track.primary_artist_id, track.primary_artist_name, target)
