"""
Genre Cluster Graph
===================
Genre-tag normalization into parent clusters and cluster-graph similarity,
used by the similarity scorer and the attraction model.
"""

from .clusters import (
    CLUSTER_EDGES,
    COMPOUND_GENRE_MAPPINGS,
    GENRE_MAPPINGS,
)
from .similarity import (
    DEFAULT_GENRE_GRAPH,
    GenreGraph,
    GenreMatch,
    GenreSetSimilarity,
    genre_cluster,
    genre_pair_similarity,
    genre_set_similarity,
    load_yaml_edges,
)

__all__ = [
    # Vocabulary
    'CLUSTER_EDGES',
    'COMPOUND_GENRE_MAPPINGS',
    'GENRE_MAPPINGS',
    # Similarity
    'DEFAULT_GENRE_GRAPH',
    'GenreGraph',
    'GenreMatch',
    'GenreSetSimilarity',
    'genre_cluster',
    'genre_pair_similarity',
    'genre_set_similarity',
    'load_yaml_edges',
]
