"""
Genre cluster vocabulary.

Maps raw catalog genre tags onto a small set of parent clusters and defines
the weighted edges between related clusters. Keys are in the form produced by
``src.string_utils.normalize_genre`` (lowercase, hyphens as spaces).
"""
from typing import Dict, Tuple

# Standard tag -> parent cluster
GENRE_MAPPINGS: Dict[str, str] = {
    "rock": "Rock",
    "pop": "Pop",
    "hip hop": "Hip-Hop",
    "r&b": "R&B",
    "rhythm and blues": "R&B",
    "country": "Country",
    "jazz": "Jazz",
    "blues": "Blues",
    "electronic": "Electronic",
    "dance": "Dance",
    "folk": "Folk",
    "indie": "Indie",
    "alternative": "Alternative",
    "metal": "Metal",
    "punk": "Punk",
    "reggae": "Reggae",
    "soul": "Soul",
    "funk": "Funk",
    "disco": "Disco",
    "classical": "Classical",
    "latin": "Latin",
    "world": "World",
    "gospel": "Gospel",
    "christian": "Christian",
    "new age": "New Age",
    "ambient": "Ambient",
    "techno": "Techno",
    "house": "House",
    "trance": "Trance",
    "dubstep": "Dubstep",
    "trap": "Hip-Hop",
    "edm": "Electronic",
}

# Sub-genre fragment -> parent cluster, checked by substring in insertion order
COMPOUND_GENRE_MAPPINGS: Dict[str, str] = {
    "bedroom pop": "Pop",
    "arena rock": "Rock",
    "pop rock": "Pop",
    "pop rap": "Hip-Hop",
    "pop punk": "Punk",
    "alternative rock": "Alternative",
    "indie rock": "Indie",
    "indie pop": "Pop",
    "electronic dance": "Electronic",
    "deep house": "House",
    "tropical house": "House",
    "contemporary r&b": "R&B",
    "neo psychedelia": "Alternative",
    "psychedelia": "Alternative",
    "psychedelic": "Alternative",
    "post punk": "Punk",
    "new wave": "Alternative",
    "synth pop": "Pop",
    "art rock": "Rock",
    "progressive rock": "Rock",
    "prog rock": "Rock",
}

# Bidirectional edges between clusters: (a, b, weight)
CLUSTER_EDGES: Tuple[Tuple[str, str, float], ...] = (
    ("Metal", "Rock", 0.8),
    ("Punk", "Rock", 0.8),
    ("Alternative", "Rock", 0.7),
    ("Indie", "Alternative", 0.8),
    ("Blues", "Rock", 0.6),
    ("Hip-Hop", "R&B", 0.7),
    ("Pop", "R&B", 0.6),
    ("Pop", "Electronic", 0.5),
    ("Electronic", "Dance", 0.8),
    ("House", "Electronic", 0.9),
    ("Techno", "Electronic", 0.9),
    ("Trance", "Electronic", 0.9),
    ("Dubstep", "Electronic", 0.7),
    ("Indie", "Folk", 0.6),
    ("Country", "Folk", 0.7),
    ("Soul", "R&B", 0.8),
    ("Funk", "Soul", 0.8),
    ("Jazz", "Blues", 0.5),
    ("Reggae", "Hip-Hop", 0.4),
)
