from src.dgs.identity import (
    ArtistIdentityRegistry,
    identity_keys_for_metric,
    matches_target,
)
from src.dgs.types import ArtistRef, TargetProfile


def test_keys_collect_ids_and_names(metric_factory, track_factory):
    track = track_factory(
        "t1",
        "a1",
        "Main Artist",
        extra_artists=(ArtistRef("a2", " Guest  "),),
    )
    keys = identity_keys_for_metric(metric_factory("t1", artist_id="a1", artist_name="Main Artist", track=track))
    assert keys.ids == {"a1", "a2"}
    assert keys.names == {"main artist", "guest"}


def test_name_stands_in_for_missing_ids(metric_factory, track_factory):
    track = track_factory("t1", "", "")
    keys = identity_keys_for_metric(metric_factory("t1", artist_id="", artist_name="Loner", track=track))
    assert keys.ids == {"loner"}
    assert keys.names == {"loner"}


def test_track_id_fallback(metric_factory, track_factory):
    track = track_factory("t9", "", "")
    keys = identity_keys_for_metric(metric_factory("t9", artist_id="", artist_name="", track=track))
    assert keys.ids == {"t9"}
    assert keys.names == frozenset()


def test_registry_blocks_id_and_name_duplicates(metric_factory, track_factory):
    registry = ArtistIdentityRegistry()
    first = metric_factory("t1", artist_id="a1", artist_name="Same Band")
    same_id = metric_factory("t2", artist_id="a1", artist_name="Renamed")
    same_name = metric_factory("t3", artist_id="zz", artist_name="SAME BAND ")
    featured = metric_factory(
        "t4",
        artist_id="b1",
        artist_name="Other",
        track=track_factory("t4", "b1", "Other", extra_artists=(ArtistRef("a1", None),)),
    )
    fresh = metric_factory("t5", artist_id="c1", artist_name="Fresh")

    assert registry.try_register(first)
    assert registry.collides(same_id)
    assert registry.collides(same_name)
    assert registry.collides(featured)
    assert not registry.collides(fresh)
    assert registry.try_register(fresh)
    assert not registry.try_register(same_id)


def test_tracks_without_artist_metadata_do_not_collide(metric_factory, track_factory):
    registry = ArtistIdentityRegistry()
    a = metric_factory("t1", artist_id="", artist_name="", track=track_factory("t1", "", ""))
    b = metric_factory("t2", artist_id="", artist_name="", track=track_factory("t2", "", ""))
    assert registry.try_register(a)
    assert registry.try_register(b)


def test_matches_target():
    target = TargetProfile(artist_name="Sigur Rós", artist_id="sr")
    assert matches_target("sr", "Anything", target)
    assert matches_target("other", "  sigur ros ", target)
    assert not matches_target("other", "Sigur", target)
    assert not matches_target("sr", "Sigur Rós", None)
