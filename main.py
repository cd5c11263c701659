"""CLI entry point for the skill-matching engine."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

import yaml

from skillmatch.core.config import ScoringConfig, Settings
from skillmatch.core.schemas import JobPosting, MatchResult
from skillmatch.pipeline.ranker import export_results_json, find_matches
from skillmatch.pipeline.scorer import score_skills


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Skill-matching engine - score and rank candidates against job requirements",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- score subcommand ---
    score_parser = subparsers.add_parser("score", help="Score one skill list against requirements")
    score_parser.add_argument(
        "--skills",
        nargs="+",
        required=True,
        help="Candidate skills, e.g. --skills JS React 'Node.js'",
    )
    score_parser.add_argument(
        "--requirements",
        required=True,
        help="YAML file with a requirement list (or a job with 'requirements')",
    )

    # --- rank subcommand ---
    rank_parser = subparsers.add_parser("rank", help="Rank candidates against a job")
    rank_parser.add_argument("--job", required=True, help="YAML file describing the job")
    rank_parser.add_argument(
        "--candidates",
        required=True,
        help="YAML file with a list of candidates (id + skills)",
    )
    rank_parser.add_argument(
        "--min",
        type=float,
        dest="min_percentage",
        help="Minimum match percentage (default: from settings, 20)",
    )
    rank_parser.add_argument(
        "--workers",
        type=int,
        help="Thread pool size for scoring (default: from settings, 1)",
    )
    rank_parser.add_argument(
        "--export",
        choices=["json"],
        help="Export results to format (json)",
    )

    for sub in (score_parser, rank_parser):
        sub.add_argument(
            "--config",
            help="Path to settings YAML file (default: built-in defaults)",
        )
        sub.add_argument(
            "--profile",
            help="Scoring profile name, e.g. 'strict' (default: settings 'scoring' block)",
        )
        sub.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Enable verbose (DEBUG) logging",
        )

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def load_yaml(path: str | Path) -> Any:
    """Read a YAML data file."""
    path = Path(path)
    if not path.exists():
        msg = f"File not found: {path}"
        raise FileNotFoundError(msg)
    return yaml.safe_load(path.read_text())


def load_requirements(path: str | Path) -> list[Any]:
    """Requirements from either a bare list or a mapping with 'requirements'."""
    raw = load_yaml(path)
    if isinstance(raw, dict):
        raw = raw.get("requirements", raw.get("skillsRequired"))
    if not isinstance(raw, list):
        msg = f"{path}: expected a list of requirements"
        raise ValueError(msg)
    return raw


def load_job(path: str | Path) -> JobPosting:
    job = JobPosting.from_record(load_yaml(path))
    if job is None:
        msg = f"{path}: job must be a mapping with an 'id'"
        raise ValueError(msg)
    return job


def load_candidates(path: str | Path) -> list[Any]:
    raw = load_yaml(path)
    if isinstance(raw, dict):
        raw = raw.get("candidates")
    if not isinstance(raw, list):
        msg = f"{path}: expected a list of candidates"
        raise ValueError(msg)
    return raw


def load_settings(config_path: str | None) -> Settings:
    if config_path is None:
        return Settings()
    return Settings.from_yaml(config_path)


def format_result(result: MatchResult) -> str:
    """One-line summary: percentage plus each requirement's classification."""
    parts = [
        f"{m.skill}={m.match_type.value}"
        + (f" ({m.candidate_skill})" if m.candidate_skill != m.skill else "")
        for m in result.matched_skills
    ]
    parts += [f"{skill}=none" for skill in result.unmatched_skills]
    return f"{result.match_percentage}% | " + ", ".join(parts)


def cmd_score(args: argparse.Namespace, scoring: ScoringConfig) -> None:
    """Handle score subcommand."""
    requirements = load_requirements(args.requirements)
    result = score_skills(args.skills, requirements, scoring)
    print(f"Match: {format_result(result)}")


def cmd_rank(args: argparse.Namespace, settings: Settings, scoring: ScoringConfig) -> None:
    """Handle rank subcommand."""
    job = load_job(args.job)
    candidates = load_candidates(args.candidates)

    min_percentage = (
        args.min_percentage if args.min_percentage is not None
        else settings.ranking.min_percentage
    )
    workers = args.workers if args.workers is not None else settings.ranking.max_workers

    results = find_matches(
        candidates, job.requirements, min_percentage, scoring, max_workers=workers,
    )

    label = f"'{job.title}'" if job.title else job.job_id
    print(f"\n{len(results)}/{len(candidates)} candidates match {label} "
          f"at >= {min_percentage:g}%.")
    for rank, r in enumerate(results, start=1):
        print(f"  {rank}. {r.candidate_id}: {format_result(r)}")

    if args.export == "json" and results:
        print(f"\n{export_results_json(results)}")


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = load_settings(args.config)
        scoring = settings.profile(args.profile)
    except (FileNotFoundError, KeyError, ValueError, yaml.YAMLError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.command == "score":
            cmd_score(args, scoring)
        else:
            cmd_rank(args, settings, scoring)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
