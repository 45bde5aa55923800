# -*- coding: utf-8 -*-
"""
Convergence Duel - Selection Round CLI
Scores a candidate pool and picks the nine options for one player's turn
"""
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from src.config_loader import Config, random_seed_from_env
from src.dgs import (
    PoolCandidate,
    RoundContext,
    SelectionResult,
    default_dgs_config,
    extract_track_features,
    run_selection_round,
)
from src.dgs.metadata import artist_profile_from_mapping, target_profile_from_mapping
from src.dgs.rules import PLAYER_IDS
from src.genre import DEFAULT_GENRE_GRAPH, load_yaml_edges
from src.logging_utils import add_logging_args, configure_logging, format_count, resolve_log_level

logger = logging.getLogger(__name__)


class RoundFileError(ValueError):
    """Raised when a round file is missing required fields."""


def resolve_seed(cli_seed: Optional[int], config: Optional[Config]) -> Optional[int]:
    """--seed, then DGS_RANDOM_SEED, then dgs.random_seed from the config file."""
    if cli_seed is not None:
        return cli_seed
    if config is not None:
        return config.random_seed
    return random_seed_from_env()


def load_round_file(path: str) -> Dict[str, Any]:
    round_path = Path(path)
    if not round_path.exists():
        raise FileNotFoundError(f"Round file not found: {path}")
    with open(round_path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise RoundFileError("Round file must contain a JSON object")
    for key in ('current_track', 'candidates', 'round', 'active_player'):
        if key not in data:
            raise RoundFileError(f"Round file is missing '{key}'")
    return data


def build_round_inputs(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert a round file payload into selection inputs."""
    profiles_raw = data.get('artist_profiles') or []
    if isinstance(profiles_raw, Mapping):
        profiles_raw = list(profiles_raw.values())
    artist_profiles = {}
    for entry in profiles_raw:
        profile = artist_profile_from_mapping(entry)
        if profile.id:
            artist_profiles[profile.id] = profile

    def _track(raw: Mapping[str, Any]):
        artists = raw.get('artists') or []
        primary = artists[0].get('id') if artists and isinstance(artists[0], Mapping) else None
        return extract_track_features(raw, artist_profiles.get(primary) if primary else None)

    candidates: List[PoolCandidate] = []
    for entry in data['candidates']:
        if 'track' in entry:
            candidates.append(PoolCandidate(_track(entry['track']), entry.get('source', 'recommendations')))
        else:
            candidates.append(PoolCandidate(_track(entry)))

    targets_raw = data.get('targets') or {}
    targets = {player: target_profile_from_mapping(targets_raw.get(player)) for player in PLAYER_IDS}

    relationships = {
        artist_id: frozenset(related or [])
        for artist_id, related in (data.get('relationships') or {}).items()
    }

    context = RoundContext(
        round_number=int(data['round']),
        active_player_id=str(data['active_player']),
        targets=targets,
        gravities=dict(data.get('gravities') or {}),
        force_hard_convergence=data.get('force_hard_convergence'),
    )
    return {
        'current_track': _track(data['current_track']),
        'candidates': candidates,
        'context': context,
        'artist_profiles': artist_profiles,
        'relationships': relationships,
    }


def result_to_dict(result: SelectionResult, context: RoundContext) -> Dict[str, Any]:
    active = context.active_player_id
    options = []
    for metric in result.selected:
        options.append({
            'track_id': metric.track.id,
            'track_name': metric.track.name,
            'artist_id': metric.artist_id,
            'artist_name': metric.artist_name,
            'category': metric.selection_category,
            'source': metric.source,
            'final_score': round(metric.final_score, 4),
            'sim_score': round(metric.sim_score, 4),
            'attraction': round(metric.attraction_for(active), 4),
            'baseline': round(metric.baseline, 4),
            'popularity_band': metric.popularity_band,
        })
    return {
        'round': context.round_number,
        'active_player': active,
        'options': options,
        'category_counts': result.category_counts(),
        'filtered_artists': sorted(result.filtered_artist_names),
        'diagnostics': result.diagnostics,
    }


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Pick the nine next-track options for one turn of a convergence duel"
    )
    parser.add_argument(
        "round_file",
        help="JSON file with current_track, candidates, artist_profiles, targets, gravities, round, active_player",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Optional YAML config with dgs/logging/genre sections",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for the weighted category draw (default: DGS_RANDOM_SEED, then config dgs.random_seed)",
    )
    parser.add_argument(
        "--output",
        type=str,
        metavar="PATH",
        help="Write the options JSON here instead of stdout",
    )
    add_logging_args(parser)
    args = parser.parse_args(argv)

    config = None
    try:
        if args.config:
            config = Config(args.config)
    except (FileNotFoundError, ValueError) as e:
        configure_logging(level=resolve_log_level(args), log_file=args.log_file)
        logger.error(f"Configuration Error: {e}")
        return 1

    level = resolve_log_level(args)
    # Config level applies only when no logging flag was given
    if config and not (args.debug or args.quiet) and args.log_level == 'INFO':
        level = config.log_level
    log_file = args.log_file or (config.log_file if config else None)
    configure_logging(level=level, log_file=log_file)

    try:
        dgs_config = default_dgs_config(config.dgs_overrides if config else None)
        seed = resolve_seed(args.seed, config)
        genre_graph = DEFAULT_GENRE_GRAPH
        if config and config.genre_edges_path:
            genre_graph = load_yaml_edges(config.genre_edges_path)

        inputs = build_round_inputs(load_round_file(args.round_file))
        result = run_selection_round(
            inputs['current_track'],
            inputs['candidates'],
            inputs['context'],
            artist_profiles=inputs['artist_profiles'],
            relationships=inputs['relationships'],
            genre_graph=genre_graph,
            config=dgs_config,
            seed=seed,
        )
    except (FileNotFoundError, ValueError, json.JSONDecodeError) as e:
        logger.error(f"Round Error: {e}")
        return 1

    payload = json.dumps(result_to_dict(result, inputs['context']), indent=2)
    if args.output:
        Path(args.output).write_text(payload + "\n", encoding='utf-8')
        logger.info(f"Wrote {format_count(len(result), 'option')} to {args.output}")
    else:
        print(payload)
    return 0


if __name__ == "__main__":
    sys.exit(main())
