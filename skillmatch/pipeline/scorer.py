"""Skill-match scoring of a candidate against a job's requirements.

Each requirement is classified against every candidate skill, in precedence
order exact > abbreviation > partial > fuzzy. The best classification per
requirement contributes its configured weight; the match percentage is the
mean contribution scaled to 0-100 and rounded half-up.

Pure: identical inputs always give the identical MatchResult.
"""

import logging
import math
from collections.abc import Iterable
from typing import Any

from rapidfuzz.distance import Levenshtein

from skillmatch.core.config import ScoringConfig, resolve_scoring_config
from skillmatch.core.schemas import (
    JobPosting,
    MatchResult,
    MatchType,
    SkillMatch,
    to_skill_refs,
)
from skillmatch.pipeline.normalizer import are_abbreviations, normalize

logger = logging.getLogger(__name__)

# Shorter side of a substring match must be at least this long ("c" in "react").
MIN_PARTIAL_LENGTH = 3

_PRECEDENCE: dict[MatchType, int] = {
    MatchType.EXACT: 0,
    MatchType.ABBREVIATION: 1,
    MatchType.PARTIAL: 2,
    MatchType.FUZZY: 3,
    MatchType.NONE: 4,
}


def similarity(a: str, b: str) -> float:
    """Levenshtein similarity: ``1 - distance / max(len(a), len(b))``."""
    if a == b:
        return 1.0
    return Levenshtein.normalized_similarity(a, b)


def classify_pair(candidate_skill: str, requirement: str, config: ScoringConfig) -> MatchType:
    """Classify two normalized skill strings. First rule that applies wins."""
    if not candidate_skill or not requirement:
        return MatchType.NONE
    if candidate_skill == requirement:
        return MatchType.EXACT
    if are_abbreviations(candidate_skill, requirement):
        return MatchType.ABBREVIATION
    shorter, longer = sorted((candidate_skill, requirement), key=len)
    if len(shorter) >= MIN_PARTIAL_LENGTH and shorter in longer:
        return MatchType.PARTIAL
    if similarity(candidate_skill, requirement) >= config.fuzzy_threshold:
        return MatchType.FUZZY
    return MatchType.NONE


def match_weight(match_type: MatchType, config: ScoringConfig) -> float:
    """Weight a requirement earns for the given classification."""
    if match_type is MatchType.EXACT:
        return config.exact_match_weight
    if match_type is MatchType.ABBREVIATION:
        return config.abbreviation_match_weight
    if match_type is MatchType.PARTIAL:
        return config.partial_match_weight
    if match_type is MatchType.FUZZY:
        return config.fuzzy_match_weight
    return 0.0


def _index_skills(candidate_skills: Iterable[Any]) -> dict[str, str]:
    """Map normalized skill -> first raw spelling, dropping blanks and duplicates."""
    index: dict[str, str] = {}
    for ref in to_skill_refs(candidate_skills):
        key = normalize(ref.text)
        if key and key not in index:
            index[key] = ref.text
    return index


def _best_match(
    requirement: str,
    candidate_index: dict[str, str],
    config: ScoringConfig,
) -> tuple[MatchType, str, float]:
    """Best-case classification of one requirement across all candidate skills.

    Highest weight wins, ties go to the higher-precedence type. An exact match
    ends the scan: it is never reported as anything weaker.
    """
    best_type, best_skill, best_weight = MatchType.NONE, "", 0.0
    for normalized, raw in candidate_index.items():
        match_type = classify_pair(normalized, requirement, config)
        if match_type is MatchType.EXACT:
            return match_type, raw, config.exact_match_weight
        if match_type is MatchType.NONE:
            continue
        weight = match_weight(match_type, config)
        if (
            best_type is MatchType.NONE
            or weight > best_weight
            or (weight == best_weight and _PRECEDENCE[match_type] < _PRECEDENCE[best_type])
        ):
            best_type, best_skill, best_weight = match_type, raw, weight
    return best_type, best_skill, best_weight


def _to_percentage(total: float, count: int) -> int:
    value = math.floor(100.0 * total / count + 0.5)
    return int(max(0, min(100, value)))


def score_skills(
    candidate_skills: Iterable[Any] | None,
    requirements: Iterable[Any] | None,
    config: ScoringConfig | dict[str, Any] | None = None,
    candidate_id: str = "",
) -> MatchResult:
    """Score a candidate's skills against a job's requirements.

    Args:
        candidate_skills: Skill strings or ``{skill, proficiency}`` entries.
        requirements: Requirement entries in either shape.
        config: Weights and fuzzy threshold. None uses the defaults.
        candidate_id: Carried into the result for ranking.

    Returns:
        MatchResult with a 0-100 percentage and per-requirement detail.
        No requirements scores 100; no candidate skills scores 0.

    Raises:
        InvalidConfigurationError: If ``config`` holds out-of-range values.
    """
    cfg = resolve_scoring_config(config)
    reqs = to_skill_refs(requirements)
    if not reqs:
        return MatchResult(candidate_id=candidate_id, match_percentage=100)

    candidate_index = _index_skills(candidate_skills or ())
    matched: list[SkillMatch] = []
    unmatched: list[str] = []
    total = 0.0

    for req in reqs:
        match_type, candidate_skill, weight = _best_match(
            normalize(req.text), candidate_index, cfg,
        )
        if match_type is MatchType.NONE:
            unmatched.append(req.text)
            continue
        total += weight
        matched.append(SkillMatch(
            skill=req.text,
            match_type=match_type,
            candidate_skill=candidate_skill,
            proficiency=req.proficiency,
        ))

    percentage = _to_percentage(total, len(reqs))
    logger.debug(
        "Scored candidate '%s': %d%% (%d/%d requirements matched)",
        candidate_id, percentage, len(matched), len(reqs),
    )
    return MatchResult(
        candidate_id=candidate_id,
        match_percentage=percentage,
        matched_skills=tuple(matched),
        unmatched_skills=tuple(unmatched),
    )


def calculate_match_percentage(
    candidate_skills: Iterable[Any] | None,
    requirements: Iterable[Any] | None,
    config: ScoringConfig | dict[str, Any] | None = None,
) -> int:
    """Match percentage only; see score_skills."""
    return score_skills(candidate_skills, requirements, config).match_percentage


def best_job_match(
    candidate_skills: Iterable[Any] | None,
    jobs: Iterable[Any] | None,
    config: ScoringConfig | dict[str, Any] | None = None,
    candidate_id: str = "",
) -> tuple[str, MatchResult] | None:
    """Find the job a candidate fits best.

    Jobs are JobPosting instances or records with an id and a requirement
    list. The earliest job wins ties. Returns None if no job is usable.
    """
    cfg = resolve_scoring_config(config)
    best: tuple[str, MatchResult] | None = None
    for record in jobs or ():
        job = JobPosting.from_record(record)
        if job is None:
            logger.debug("Skipping job record without an id")
            continue
        result = score_skills(candidate_skills, job.requirements, cfg, candidate_id)
        if best is None or result.match_percentage > best[1].match_percentage:
            best = (job.job_id, result)
    return best
