"""Core data models for the skill-matching engine.

Skills reach the engine in two shapes: bare strings (learner profiles) and
``{skill, proficiency}`` objects (job requirement lists). Both are modelled as
variants of ``SkillRef``; ``to_skill_ref`` is the only place that inspects raw
input shapes.
"""

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_ID_KEYS = ("candidate_id", "candidateId", "_id", "id")
_JOB_REQUIREMENT_KEYS = ("requirements", "skillsRequired", "skills_required")


class Proficiency(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"

    @classmethod
    def parse(cls, value: object) -> "Proficiency | None":
        """Case-insensitive lookup; unknown values map to None."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            wanted = value.strip().lower()
            for member in cls:
                if member.value.lower() == wanted:
                    return member
        return None


class MatchType(str, Enum):
    """Classification of a requirement against a candidate's skills."""

    EXACT = "exact"
    ABBREVIATION = "abbreviation"
    PARTIAL = "partial"
    FUZZY = "fuzzy"
    NONE = "none"


class PlainSkill(BaseModel):
    """A bare skill token, as stored on learner profiles."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["plain"] = "plain"
    name: str

    @property
    def text(self) -> str:
        return self.name

    @property
    def proficiency(self) -> None:
        return None


class WeightedSkillRef(BaseModel):
    """A skill with a proficiency level, as stored on job postings."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["weighted"] = "weighted"
    skill: str
    proficiency: Proficiency | None = None

    @field_validator("proficiency", mode="before")
    @classmethod
    def lenient_proficiency(cls, v: object) -> Proficiency | None:
        return Proficiency.parse(v)

    @property
    def text(self) -> str:
        return self.skill


# A job requirement is the weighted variant; proficiency is informational.
SkillRequirement = WeightedSkillRef

SkillRef = Annotated[PlainSkill | WeightedSkillRef, Field(discriminator="kind")]


def to_skill_ref(raw: object) -> PlainSkill | WeightedSkillRef | None:
    """Coerce a raw skill entry into a SkillRef, or None if it has no skill text."""
    if isinstance(raw, (PlainSkill, WeightedSkillRef)):
        return raw
    if isinstance(raw, str):
        return PlainSkill(name=raw)
    if isinstance(raw, Mapping):
        skill = raw.get("skill")
        if isinstance(skill, str):
            return WeightedSkillRef(skill=skill, proficiency=raw.get("proficiency"))
        # Dumped PlainSkill
        name = raw.get("name")
        if raw.get("kind") == "plain" and isinstance(name, str):
            return PlainSkill(name=name)
    return None


def to_skill_refs(raw: object) -> tuple[PlainSkill | WeightedSkillRef, ...]:
    """Coerce a raw skill collection, dropping entries without skill text.

    ``None`` and non-iterables (including a lone string) yield an empty tuple.
    """
    if raw is None or isinstance(raw, (str, bytes, Mapping)):
        return ()
    if not isinstance(raw, Iterable):
        return ()
    refs = (to_skill_ref(item) for item in raw)
    return tuple(r for r in refs if r is not None)


def _record_id(record: Mapping[str, Any]) -> str | None:
    for key in _ID_KEYS:
        value = record.get(key)
        if value is not None:
            return str(value)
    return None


class Candidate(BaseModel):
    """A learner being matched against a job."""

    model_config = ConfigDict(frozen=True)

    candidate_id: str
    skills: tuple[SkillRef, ...] = ()

    @field_validator("candidate_id", mode="before")
    @classmethod
    def id_as_string(cls, v: object) -> str:
        return str(v)

    @field_validator("skills", mode="before")
    @classmethod
    def coerce_skills(cls, v: object) -> tuple[PlainSkill | WeightedSkillRef, ...]:
        return to_skill_refs(v)

    @classmethod
    def from_record(cls, record: object) -> "Candidate | None":
        """Build a Candidate from a document-store record.

        A missing or null ``skills`` value means no skills. Returns None when
        the record has no identifier or ``skills`` is not a list.
        """
        if isinstance(record, Candidate):
            return record
        if not isinstance(record, Mapping):
            return None
        skills = record.get("skills")
        if skills is None:
            skills = []
        if not isinstance(skills, (list, tuple)):
            return None
        candidate_id = _record_id(record)
        if candidate_id is None:
            return None
        return cls(candidate_id=candidate_id, skills=skills)


class JobPosting(BaseModel):
    """A job opening and its skill requirements."""

    model_config = ConfigDict(frozen=True)

    job_id: str
    title: str = ""
    requirements: tuple[SkillRef, ...] = ()

    @field_validator("job_id", mode="before")
    @classmethod
    def id_as_string(cls, v: object) -> str:
        return str(v)

    @field_validator("requirements", mode="before")
    @classmethod
    def coerce_requirements(cls, v: object) -> tuple[PlainSkill | WeightedSkillRef, ...]:
        return to_skill_refs(v)

    @classmethod
    def from_record(cls, record: object) -> "JobPosting | None":
        """Build a JobPosting from a record with an id and a requirement list."""
        if isinstance(record, JobPosting):
            return record
        if not isinstance(record, Mapping):
            return None
        job_id = record.get("job_id", record.get("_id", record.get("id")))
        if job_id is None:
            return None
        requirements: object = None
        for key in _JOB_REQUIREMENT_KEYS:
            if key in record:
                requirements = record[key]
                break
        title = record.get("title", record.get("jobTitle", ""))
        return cls(
            job_id=job_id,
            title=title if isinstance(title, str) else "",
            requirements=requirements,
        )


class SkillMatch(BaseModel):
    """How one requirement was satisfied."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    skill: str
    match_type: MatchType
    candidate_skill: str = ""
    proficiency: Proficiency | None = None


class MatchResult(BaseModel):
    """Score of one candidate against one requirement set."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    candidate_id: str = ""
    match_percentage: int = Field(ge=0, le=100)
    matched_skills: tuple[SkillMatch, ...] = ()
    unmatched_skills: tuple[str, ...] = ()

    def to_response(self) -> dict[str, Any]:
        """JSON-ready dict in the camelCase response shape."""
        return self.model_dump(mode="json", by_alias=True)
