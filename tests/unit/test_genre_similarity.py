import pytest

from src.genre import (
    DEFAULT_GENRE_GRAPH,
    genre_cluster,
    genre_pair_similarity,
    genre_set_similarity,
    load_yaml_edges,
)


def test_pair_precedence():
    assert genre_pair_similarity("rock", "Rock").match_type == "exact"
    assert genre_pair_similarity("indie rock", "rock").score == pytest.approx(0.9)
    assert genre_pair_similarity("trap", "hip-hop").score == pytest.approx(0.7)
    assert genre_pair_similarity("metal", "rock").score == pytest.approx(0.8)
    assert genre_pair_similarity("jazz", "metal").score == 0.0


def test_cluster_lookup():
    assert genre_cluster("Hip-Hop") == "Hip-Hop"
    assert genre_cluster("deep house") == "House"
    assert genre_cluster("nu metal") == "Metal"
    assert genre_cluster("zydeco") is None


def test_set_similarity_unknown_and_empty():
    assert genre_set_similarity(["unknown"], ["unknown", "rock"]).score == 0.5
    assert genre_set_similarity(["unknown"], ["rock"]).score == 0.2
    assert genre_set_similarity([], ["rock"]).score == 0.0
    assert genre_set_similarity([], []).score == 0.0


def test_identical_sets_score_one_even_when_unknown():
    assert genre_set_similarity(["unknown"], ["Unknown"]).score == pytest.approx(1.0)
    assert genre_set_similarity(["unknown", "rock"], ["rock", "unknown"]).score == pytest.approx(1.0)


def test_set_similarity_symmetric_and_identity():
    a = ["indie rock", "shoegaze"]
    b = ["post-punk", "new wave", "synth pop"]
    assert genre_set_similarity(a, a).score == pytest.approx(1.0)
    assert genre_set_similarity(a, b).score == pytest.approx(genre_set_similarity(b, a).score)


def test_yaml_edges_build_a_new_graph(tmp_path):
    path = tmp_path / "edges.yaml"
    path.write_text("edges:\n  - [Jazz, Metal, 0.3]\n", encoding="utf-8")
    graph = load_yaml_edges(str(path))

    assert graph is not DEFAULT_GENRE_GRAPH
    assert len(graph.edges) == len(DEFAULT_GENRE_GRAPH.edges) + 1
    assert genre_pair_similarity("jazz", "metal", graph).score == pytest.approx(0.3)
    assert genre_set_similarity(["jazz"], ["metal"], graph).score == pytest.approx(0.3)
    # the built-in graph is untouched
    assert genre_pair_similarity("jazz", "metal").score == 0.0
    assert DEFAULT_GENRE_GRAPH.edge_weight("Jazz", "Metal") is None


def test_graph_edges_are_symmetric():
    graph = DEFAULT_GENRE_GRAPH.with_edges([("Jazz", "Metal", 0.4)])
    assert graph.edge_weight("Jazz", "Metal") == pytest.approx(0.4)
    assert graph.edge_weight("Metal", "Jazz") == pytest.approx(0.4)


def test_yaml_edges_rejects_bad_entries(tmp_path):
    path = tmp_path / "edges.yaml"
    path.write_text("edges:\n  - [Jazz, Metal]\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_yaml_edges(str(path))


def test_yaml_edges_missing_file(tmp_path):
    assert load_yaml_edges(str(tmp_path / "missing.yaml")) is DEFAULT_GENRE_GRAPH
