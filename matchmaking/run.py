"""
Batch runner for one matching cycle.

This is the single entrypoint for running a matching cycle from the command line.

Usage:
    python -m matchmaking.run --config configs/config.yaml --snapshot participants.json
    python -m matchmaking.run --config configs/config.yaml --synthetic 200 --dry-run

The runner performs the following steps:
1. Load and validate configuration
2. Load the participant snapshot (or generate a synthetic one)
3. Run the matching engine
4. Write matches, unmatched records, eligible pairs and diagnostics

The engine itself performs no I/O. Writing results, dry runs and re-runs
that discard earlier results are handled here.
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

MATCH_ARTIFACTS = ["matches.csv", "unmatched.csv", "pair_scores.csv", "diagnostics.json", "config_used.json"]


def setup_logging(log_level: str) -> None:
    """Configure logging level from config."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.getLogger().setLevel(level)


def clear_previous_results(output_dir: Path) -> List[str]:
    """
    Delete match artifacts from an earlier run in output_dir.

    Returns:
        Names of the files that were removed
    """
    removed = []
    for name in MATCH_ARTIFACTS:
        path = output_dir / name
        if path.exists():
            path.unlink()
            removed.append(name)
    if removed:
        logger.info(f"Re-run: removed previous results {removed} from {output_dir}")
    return removed


def write_results(outcome, output_dir: Path) -> Dict[str, str]:
    """
    Persist a completed outcome.

    Matches are written as two directed rows per match so either
    participant can look up their partner directly.

    Returns:
        Mapping of artifact name to path
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    paths = {}

    match_rows = [row for m in outcome.matches for row in m.directed_rows()]
    matches_df = pd.DataFrame(match_rows, columns=["participant_id", "partner_id", "pair_score"])
    paths["matches"] = str(output_dir / "matches.csv")
    matches_df.to_csv(paths["matches"], index=False)

    unmatched_df = pd.DataFrame(
        [u.to_dict() for u in outcome.unmatched],
        columns=["participant_id", "reason", "best_possible_score", "best_possible_partner_id", "rejection"]
    )
    paths["unmatched"] = str(output_dir / "unmatched.csv")
    unmatched_df.to_csv(paths["unmatched"], index=False)

    pairs_df = pd.DataFrame(
        [ps.to_dict() for ps in outcome.eligible_pairs],
        columns=["participant_a_id", "participant_b_id", "score", "score_a_to_b", "score_b_to_a"]
    )
    paths["pair_scores"] = str(output_dir / "pair_scores.csv")
    pairs_df.sort_values("score", ascending=False).to_csv(paths["pair_scores"], index=False)

    paths["diagnostics"] = str(output_dir / "diagnostics.json")
    outcome.diagnostics.save(paths["diagnostics"])

    logger.info(f"Wrote {len(match_rows)} match rows and {len(unmatched_df)} unmatched records to {output_dir}")
    return paths


def run_cycle(
    config_path: str,
    snapshot_path: Optional[str] = None,
    output_dir: Optional[str] = None,
    dry_run: bool = False,
    rerun: bool = False,
    synthetic: Optional[int] = None,
    n_jobs: Optional[int] = None
) -> Dict[str, Any]:
    """
    Run one matching cycle end to end.

    Args:
        config_path: Path to the configuration YAML file
        snapshot_path: Path to the participant snapshot JSON
        output_dir: Directory for results (defaults to global.output_dir)
        dry_run: Run the engine but write only diagnostics
        rerun: Discard earlier results in output_dir before writing
        synthetic: Generate this many synthetic participants instead of loading a snapshot
        n_jobs: Override matching.n_jobs

    Returns:
        Dictionary with run status, counts and artifact paths
    """
    from .configs import load_config, validate_config, MatchingConfig
    from .data_loading import load_snapshot, SyntheticPopulation
    from .engine import MatchingEngine
    from .schema import OutcomeStatus

    # =========================================================================
    # 1. Load and validate configuration
    # =========================================================================
    logger.info("=" * 60)
    logger.info("MATCHING CYCLE")
    logger.info("=" * 60)

    config = load_config(config_path)
    issues = validate_config(config)
    if issues:
        for issue in issues:
            logger.warning(f"Config issue: {issue}")

    setup_logging(config.get("global", {}).get("log_level", "INFO"))

    matching_config = MatchingConfig.from_config(config)
    if n_jobs is not None:
        matching_config.n_jobs = n_jobs

    effective_output_dir = Path(output_dir or config.get("global", {}).get("output_dir", "artifacts"))

    # =========================================================================
    # 2. Load participants
    # =========================================================================
    if synthetic is not None:
        logger.info(f"Generating {synthetic} synthetic participants (seed={matching_config.random_seed})")
        population = SyntheticPopulation(matching_config.questions, random_seed=matching_config.random_seed)
        participants = population.generate(synthetic)
    elif snapshot_path is not None:
        participants = load_snapshot(snapshot_path)
    else:
        raise ValueError("Either a snapshot path or a synthetic population size is required")

    # =========================================================================
    # 3. Run the engine
    # =========================================================================
    engine = MatchingEngine(matching_config)
    outcome = engine.run(participants)
    logger.info("\n" + outcome.diagnostics.summary())

    # =========================================================================
    # 4. Persist
    # =========================================================================
    effective_output_dir.mkdir(parents=True, exist_ok=True)
    paths: Dict[str, str] = {}

    if dry_run:
        paths["diagnostics"] = str(effective_output_dir / "diagnostics.json")
        outcome.diagnostics.save(paths["diagnostics"])
        logger.info("Dry run: matches were not written")
    elif outcome.status == OutcomeStatus.NOTHING_TO_MATCH:
        logger.warning("Nothing to match; existing results left untouched")
    else:
        if rerun:
            clear_previous_results(effective_output_dir)
        paths = write_results(outcome, effective_output_dir)
        paths["config_used"] = str(effective_output_dir / "config_used.json")
        matching_config.save(paths["config_used"])

    return {
        "success": True,
        "status": outcome.status.value,
        "run_timestamp": datetime.now().isoformat(),
        "dry_run": dry_run,
        "n_participants": len(participants),
        "n_matches": len(outcome.matches),
        "n_unmatched": len(outcome.unmatched),
        "output_dir": str(effective_output_dir),
        "artifacts": paths
    }


def main():
    """Main entry point for the matching runner."""
    parser = argparse.ArgumentParser(
        description="Run one compatibility matching cycle"
    )
    parser.add_argument(
        "--config",
        type=str,
        default="configs/config.yaml",
        help="Path to configuration YAML file"
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--snapshot",
        type=str,
        help="Path to participant snapshot JSON"
    )
    source.add_argument(
        "--synthetic",
        type=int,
        help="Generate this many synthetic participants instead of loading a snapshot"
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Output directory for results (overrides config)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Run the engine and write diagnostics only"
    )
    parser.add_argument(
        "--rerun",
        action="store_true",
        help="Discard results of an earlier run in the output directory first"
    )
    parser.add_argument(
        "--n-jobs",
        type=int,
        default=None,
        help="Workers for pair scoring (overrides config)"
    )

    args = parser.parse_args()

    try:
        result = run_cycle(
            config_path=args.config,
            snapshot_path=args.snapshot,
            output_dir=args.output_dir,
            dry_run=args.dry_run,
            rerun=args.rerun,
            synthetic=args.synthetic,
            n_jobs=args.n_jobs
        )
        logger.info(f"\nCycle finished with status {result['status']}: {result['n_matches']} matches")
        return 0
    except Exception as e:
        logger.exception(f"Matching cycle failed with error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
