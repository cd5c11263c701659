"""Candidate ranker: scores a pool against one job, filters and sorts.

Data flow:
  1. Coerce records → Candidate (unusable records skipped)
  2. Score each candidate (optionally fanned out over a thread pool)
  3. Drop results below the minimum percentage
  4. Stable sort by percentage, highest first
"""

import json
import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from skillmatch.core.config import ScoringConfig, resolve_scoring_config
from skillmatch.core.schemas import Candidate, MatchResult, to_skill_refs
from skillmatch.pipeline.scorer import score_skills

logger = logging.getLogger(__name__)

DEFAULT_MIN_PERCENTAGE = 20.0


def _coerce_candidates(candidates: Iterable[Any]) -> list[Candidate]:
    result: list[Candidate] = []
    skipped = 0
    for record in candidates:
        candidate = Candidate.from_record(record)
        if candidate is None:
            skipped += 1
            continue
        result.append(candidate)
    if skipped:
        logger.debug("Skipped %d candidate records without an id or skills list", skipped)
    return result


def find_matches(
    candidates: Iterable[Any] | None,
    requirements: Iterable[Any] | None,
    min_percentage: float = DEFAULT_MIN_PERCENTAGE,
    config: ScoringConfig | dict[str, Any] | None = None,
    *,
    max_workers: int | None = None,
) -> list[MatchResult]:
    """Rank candidates against a job's requirements.

    Args:
        candidates: Candidate instances or records with an id and ``skills``.
        requirements: The job's requirement entries.
        min_percentage: Results scoring below this are dropped.
        config: Scoring weights; validated once for the whole pool.
        max_workers: Score on a thread pool of this size when greater than 1.

    Returns:
        MatchResults sorted by percentage descending; equal scores keep
        input order.

    Raises:
        InvalidConfigurationError: If ``config`` holds out-of-range values.
    """
    cfg = resolve_scoring_config(config)
    pool = _coerce_candidates(candidates or ())
    if not pool:
        return []
    reqs = to_skill_refs(requirements)

    def _score(candidate: Candidate) -> MatchResult:
        return score_skills(candidate.skills, reqs, cfg, candidate.candidate_id)

    if max_workers is not None and max_workers > 1 and len(pool) > 1:
        # map() yields in submission order, so the stable sort below still
        # breaks ties by input position.
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            scored = list(executor.map(_score, pool))
    else:
        scored = [_score(c) for c in pool]

    kept = filter_by_match_percentage(scored, min_percentage)
    kept.sort(key=lambda r: r.match_percentage, reverse=True)
    logger.info(
        "Ranked %d candidates: %d at or above %s%%",
        len(pool), len(kept), min_percentage,
    )
    return kept


def filter_by_match_percentage(
    results: Iterable[MatchResult] | None,
    min_percentage: float,
) -> list[MatchResult]:
    """Keep results at or above ``min_percentage``, preserving order."""
    return [r for r in results or () if r.match_percentage >= min_percentage]


def export_results_json(results: Iterable[MatchResult]) -> str:
    """Export ranked results as a JSON string in the response shape."""
    return json.dumps([r.to_response() for r in results], indent=2)
