"""
Genre Similarity - Cluster Graph
================================
Pairwise and set-level genre similarity on a small weighted cluster graph.

Precedence for a pair of tags:
1. Exact match after normalization -> 1.0
2. One tag contains the other ("alt rock" / "rock") -> 0.9
3. Both tags map to the same cluster -> 0.7
4. Clusters joined by an edge -> edge weight
5. Otherwise -> 0.0

Set similarity averages, for every tag on one side, its best match on the
other side, and then averages both directions so the result is symmetric.

Cluster edges live on an immutable ``GenreGraph``. Callers that load extra
edges get a new graph and pass it down; nothing here is rewritten at runtime.
"""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import yaml

from src.string_utils import normalize_genre
from .clusters import CLUSTER_EDGES, COMPOUND_GENRE_MAPPINGS, GENRE_MAPPINGS

logger = logging.getLogger(__name__)

# Similarity score constants (tunable)
WEIGHT_EXACT = 1.0
WEIGHT_PARTIAL = 0.9
WEIGHT_CLUSTER = 0.7
SCORE_BOTH_UNKNOWN = 0.5
SCORE_ONE_UNKNOWN = 0.2
UNKNOWN_GENRE = "unknown"

Edge = Tuple[str, str, float]


@dataclass(frozen=True)
class GenreMatch:
    """Best match for one genre tag against the other side."""
    genre: str
    best_match: str
    score: float
    match_type: str  # exact | partial | cluster | related | unrelated
    cluster_a: Optional[str] = None
    cluster_b: Optional[str] = None


@dataclass(frozen=True)
class GenreSetSimilarity:
    score: float
    matches: Tuple[GenreMatch, ...] = ()


def _build_relationships(edges: Iterable[Edge]) -> Dict[str, Dict[str, float]]:
    relationships: Dict[str, Dict[str, float]] = {}
    for a, b, weight in edges:
        relationships.setdefault(a, {})[b] = float(weight)
        relationships.setdefault(b, {})[a] = float(weight)
    return relationships


@dataclass(frozen=True, eq=False)
class GenreGraph:
    """Weighted edges between genre clusters. Hashes by identity."""
    edges: Tuple[Edge, ...] = CLUSTER_EDGES
    _relationships: Dict[str, Dict[str, float]] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_relationships", _build_relationships(self.edges))

    def edge_weight(self, cluster_a: str, cluster_b: str) -> Optional[float]:
        return self._relationships.get(cluster_a, {}).get(cluster_b)

    def with_edges(self, extra: Iterable[Edge]) -> "GenreGraph":
        return GenreGraph(tuple(self.edges) + tuple(extra))


DEFAULT_GENRE_GRAPH = GenreGraph()
_STANDARD_CLUSTERS: Tuple[str, ...] = tuple(dict.fromkeys(GENRE_MAPPINGS.values()))


def load_yaml_edges(filepath: str, base: GenreGraph = DEFAULT_GENRE_GRAPH) -> GenreGraph:
    """
    Graph with extra cluster edges from a YAML file merged onto ``base``.

    Expected shape::

        edges:
          - [Shoegaze, Alternative, 0.8]

    A missing file is logged and ``base`` is returned unchanged.
    """
    path = Path(filepath)
    if not path.exists():
        logger.warning(f"Genre edge file not found: {filepath}")
        return base

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    edges = data.get("edges") or []
    parsed: List[Edge] = []
    for entry in edges:
        if not isinstance(entry, (list, tuple)) or len(entry) != 3:
            raise ValueError(f"Invalid genre edge entry in {filepath}: {entry!r}")
        a, b, weight = entry
        weight = float(weight)
        if not 0.0 <= weight <= 1.0:
            raise ValueError(f"Genre edge weight out of range in {filepath}: {entry!r}")
        parsed.append((str(a), str(b), weight))

    logger.info(f"Loaded {len(parsed)} genre cluster edges from {filepath}")
    return base.with_edges(parsed)


@lru_cache(maxsize=4096)
def genre_cluster(genre: str) -> Optional[str]:
    """Return the parent cluster for a genre tag, or None when unclassified."""
    normalized = normalize_genre(genre)
    if not normalized:
        return None

    if normalized in GENRE_MAPPINGS:
        return GENRE_MAPPINGS[normalized]

    for fragment, cluster in COMPOUND_GENRE_MAPPINGS.items():
        if fragment in normalized:
            return cluster

    for cluster in _STANDARD_CLUSTERS:
        if cluster.lower() == normalized:
            return cluster

    # "nu metal" -> Metal, "roots reggae" -> Reggae
    for cluster in _STANDARD_CLUSTERS:
        if normalize_genre(cluster) in normalized:
            return cluster

    return None


@lru_cache(maxsize=16384)
def genre_pair_similarity(
    genre_a: str,
    genre_b: str,
    graph: GenreGraph = DEFAULT_GENRE_GRAPH,
) -> GenreMatch:
    """Similarity between two single genre tags."""
    norm_a = normalize_genre(genre_a)
    norm_b = normalize_genre(genre_b)
    if not norm_a or not norm_b:
        return GenreMatch(genre_a, genre_b, 0.0, "unrelated")

    if norm_a == norm_b:
        return GenreMatch(genre_a, genre_b, WEIGHT_EXACT, "exact")

    if norm_a in norm_b or norm_b in norm_a:
        return GenreMatch(genre_a, genre_b, WEIGHT_PARTIAL, "partial")

    cluster_a = genre_cluster(norm_a)
    cluster_b = genre_cluster(norm_b)
    if not cluster_a or not cluster_b:
        return GenreMatch(genre_a, genre_b, 0.0, "unrelated", cluster_a, cluster_b)

    if cluster_a == cluster_b:
        return GenreMatch(genre_a, genre_b, WEIGHT_CLUSTER, "cluster", cluster_a, cluster_b)

    weight = graph.edge_weight(cluster_a, cluster_b)
    if weight is not None:
        return GenreMatch(genre_a, genre_b, weight, "related", cluster_a, cluster_b)

    return GenreMatch(genre_a, genre_b, 0.0, "unrelated", cluster_a, cluster_b)


def _avg_max(source: List[str], other: List[str], graph: GenreGraph) -> Tuple[float, List[GenreMatch]]:
    total = 0.0
    matches: List[GenreMatch] = []
    for genre in source:
        best: Optional[GenreMatch] = None
        for candidate in other:
            match = genre_pair_similarity(genre, candidate, graph)
            if best is None or match.score > best.score:
                best = match
            if best.score >= WEIGHT_EXACT:
                break
        if best is not None and best.score > 0:
            matches.append(best)
            total += best.score
    return total / len(source), matches


def genre_set_similarity(
    genres_a: Iterable[str],
    genres_b: Iterable[str],
    graph: Optional[GenreGraph] = None,
) -> GenreSetSimilarity:
    """
    Symmetric average-max similarity between two genre sets.

    Identical sets score 1.0. Otherwise 'unknown' tags short-circuit: both
    sides unknown -> 0.5, one side -> 0.2. An empty side scores 0.
    """
    graph = graph or DEFAULT_GENRE_GRAPH
    list_a = [g for g in genres_a or () if g]
    list_b = [g for g in genres_b or () if g]

    norm_a = {normalize_genre(g) for g in list_a}
    norm_b = {normalize_genre(g) for g in list_b}
    if norm_a and norm_a == norm_b:
        return GenreSetSimilarity(WEIGHT_EXACT)

    unknown_a = UNKNOWN_GENRE in norm_a
    unknown_b = UNKNOWN_GENRE in norm_b
    if unknown_a and unknown_b:
        return GenreSetSimilarity(SCORE_BOTH_UNKNOWN)
    if unknown_a or unknown_b:
        return GenreSetSimilarity(SCORE_ONE_UNKNOWN)

    if not list_a or not list_b:
        return GenreSetSimilarity(0.0)

    forward, forward_matches = _avg_max(list_b, list_a, graph)
    backward, _ = _avg_max(list_a, list_b, graph)
    matches = sorted(forward_matches, key=lambda m: m.score, reverse=True)
    return GenreSetSimilarity((forward + backward) / 2.0, tuple(matches))
