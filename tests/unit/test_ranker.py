"""Tests for candidate ranking, filtering, and export."""

import json

import pytest

from skillmatch.core.config import InvalidConfigurationError
from skillmatch.core.schemas import Candidate, MatchResult
from skillmatch.pipeline.ranker import (
    export_results_json,
    filter_by_match_percentage,
    find_matches,
)

REQUIREMENTS = [
    {"skill": "JavaScript", "proficiency": "Advanced"},
    {"skill": "React", "proficiency": "Intermediate"},
    {"skill": "Node.js", "proficiency": "Intermediate"},
]


def _record(candidate_id: str, *skills: str) -> dict[str, object]:
    return {"_id": candidate_id, "firstName": "Test", "skills": list(skills)}


def _result(candidate_id: str, pct: int) -> MatchResult:
    return MatchResult(candidate_id=candidate_id, match_percentage=pct)


POOL = [
    _record("1", "JS", "React", "Node", "Mongo"),
    _record("2", "Python", "Django", "Postgres"),
    _record("3", "JS", "Vue", "Express"),
]


# ---------------------------------------------------------------------------
# find_matches
# ---------------------------------------------------------------------------


class TestFindMatches:
    def test_threshold_keeps_strong_candidate_only(self) -> None:
        results = find_matches(POOL, REQUIREMENTS, min_percentage=50)
        assert [r.candidate_id for r in results] == ["1"]
        assert results[0].match_percentage == 97

    def test_zero_threshold_keeps_everyone_sorted(self) -> None:
        results = find_matches(POOL, REQUIREMENTS, min_percentage=0)
        assert [(r.candidate_id, r.match_percentage) for r in results] == [
            ("1", 97),
            ("3", 32),
            ("2", 0),
        ]

    def test_default_threshold_is_twenty(self) -> None:
        results = find_matches(POOL, REQUIREMENTS)
        assert [r.candidate_id for r in results] == ["1", "3"]

    def test_threshold_is_inclusive(self) -> None:
        results = find_matches(POOL, REQUIREMENTS, min_percentage=32)
        assert [r.candidate_id for r in results] == ["1", "3"]

    def test_ties_keep_input_order(self) -> None:
        pool = [
            _record("a", "React"),
            _record("b", "Vue"),
            _record("c", "React"),
            _record("d", "react"),
        ]
        results = find_matches(pool, [{"skill": "React"}], min_percentage=0)
        assert [r.candidate_id for r in results] == ["a", "c", "d", "b"]

    def test_accepts_candidate_models(self) -> None:
        pool = [Candidate(candidate_id="x", skills=["JS", "React", "Node.js"])]
        results = find_matches(pool, REQUIREMENTS, min_percentage=0)
        assert results[0].candidate_id == "x"
        # JS abbreviation 0.95 + two exact matches = 2.95 / 3
        assert results[0].match_percentage == 98

    def test_empty_pool(self) -> None:
        assert find_matches([], REQUIREMENTS) == []
        assert find_matches(None, REQUIREMENTS) == []

    def test_no_requirements_matches_everyone(self) -> None:
        results = find_matches(POOL, [], min_percentage=100)
        assert [r.match_percentage for r in results] == [100, 100, 100]

    def test_skips_unusable_records(self) -> None:
        pool = [
            None,
            "not a record",
            {"skills": ["React"]},
            {"id": "no-list", "skills": "React"},
            {"id": "ok", "skills": ["React"]},
        ]
        results = find_matches(pool, [{"skill": "React"}], min_percentage=0)
        assert [r.candidate_id for r in results] == ["ok"]

    def test_null_skills_match_empty_requirements(self) -> None:
        pool = [{"_id": "nulls", "skills": None}, {"_id": "missing"}]
        results = find_matches(pool, [], min_percentage=100)
        assert [(r.candidate_id, r.match_percentage) for r in results] == [
            ("nulls", 100),
            ("missing", 100),
        ]

    def test_candidate_with_empty_skills_scores_zero(self) -> None:
        results = find_matches([_record("empty")], REQUIREMENTS, min_percentage=0)
        assert results[0].match_percentage == 0

    def test_thread_pool_matches_sequential(self) -> None:
        pool = [
            _record(str(i), *skills)
            for i, skills in enumerate(
                [["JS"], ["React"], ["Node"], ["JS", "React"], ["Python"]] * 6
            )
        ]
        sequential = find_matches(pool, REQUIREMENTS, min_percentage=0)
        threaded = find_matches(pool, REQUIREMENTS, min_percentage=0, max_workers=4)
        assert threaded == sequential

    def test_invalid_config_raises(self) -> None:
        with pytest.raises(InvalidConfigurationError):
            find_matches(POOL, REQUIREMENTS, config={"fuzzyThreshold": 0})

    def test_config_applies_to_every_candidate(self) -> None:
        results = find_matches(
            [_record("1", "JS")],
            [{"skill": "JavaScript"}],
            min_percentage=0,
            config={"abbreviation_match_weight": 0.5},
        )
        assert results[0].match_percentage == 50


# ---------------------------------------------------------------------------
# filter_by_match_percentage
# ---------------------------------------------------------------------------


class TestFilterByMatchPercentage:
    def test_keeps_at_or_above(self) -> None:
        results = [_result("a", 95), _result("b", 40), _result("c", 90)]
        kept = filter_by_match_percentage(results, 90)
        assert [r.candidate_id for r in kept] == ["a", "c"]

    def test_preserves_order(self) -> None:
        results = [_result("a", 50), _result("b", 80)]
        kept = filter_by_match_percentage(results, 0)
        assert [r.candidate_id for r in kept] == ["a", "b"]

    def test_none_results(self) -> None:
        assert filter_by_match_percentage(None, 50) == []


# ---------------------------------------------------------------------------
# export_results_json
# ---------------------------------------------------------------------------


class TestExportResultsJson:
    def test_camel_case_response_shape(self) -> None:
        results = find_matches(POOL, REQUIREMENTS, min_percentage=50)
        data = json.loads(export_results_json(results))
        assert data == [
            {
                "candidateId": "1",
                "matchPercentage": 97,
                "matchedSkills": [
                    {
                        "skill": "JavaScript",
                        "matchType": "abbreviation",
                        "candidateSkill": "JS",
                        "proficiency": "Advanced",
                    },
                    {
                        "skill": "React",
                        "matchType": "exact",
                        "candidateSkill": "React",
                        "proficiency": "Intermediate",
                    },
                    {
                        "skill": "Node.js",
                        "matchType": "abbreviation",
                        "candidateSkill": "Node",
                        "proficiency": "Intermediate",
                    },
                ],
                "unmatchedSkills": [],
            },
        ]

    def test_empty(self) -> None:
        assert json.loads(export_results_json([])) == []
