"""Fuzzy search and filtering over plain records (company or learner lists).

Filters are callables that take records and return a subset, so they chain:
  1. FuzzyFieldFilter: every given field must equal or closely resemble its value
  2. FuzzyTextFilter: free-text term against a set of fields, best score first
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict

from skillmatch.pipeline.scorer import similarity

logger = logging.getLogger(__name__)

CONTAINS_SCORE = 0.8

# A filter is a callable that takes records and returns a subset.
Filter = Callable[[list[Any]], list[Any]]


class SearchHit(BaseModel):
    """A record that matched a text search, with its best field score."""

    model_config = ConfigDict(frozen=True)

    record: Any
    score: float = 0.0
    matched_field: str = ""


def _field_value(record: Any, field: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(field)
    return getattr(record, field, None)


def _fold(value: Any) -> str:
    return " ".join(str(value).lower().split())


def fuzzy_text_search(
    records: Iterable[Any] | None,
    term: str | None,
    fields: Iterable[str] | None,
    threshold: float = 0.6,
) -> list[SearchHit]:
    """Score records by their best-matching field and keep those >= threshold.

    Field scores: exact 1.0, contains ``CONTAINS_SCORE``, otherwise Levenshtein
    similarity. A blank term or no fields returns every record unscored, in
    input order.
    """
    items = list(records or ())
    field_list = [f for f in fields or () if f]
    needle = _fold(term) if isinstance(term, str) else ""
    if not needle or not field_list:
        return [SearchHit(record=r) for r in items]

    hits: list[SearchHit] = []
    for record in items:
        best_score, matched_field = 0.0, ""
        for field in field_list:
            value = _field_value(record, field)
            if value is None or value == "":
                continue
            folded = _fold(value)
            if folded == needle:
                best_score, matched_field = 1.0, field
                break
            if needle in folded and CONTAINS_SCORE > best_score:
                best_score, matched_field = CONTAINS_SCORE, field
            sim = similarity(folded, needle)
            if sim > best_score and sim >= threshold:
                best_score, matched_field = sim, field
        if best_score >= threshold and matched_field:
            hits.append(SearchHit(record=record, score=best_score, matched_field=matched_field))

    hits.sort(key=lambda h: h.score, reverse=True)
    logger.debug("fuzzy_text_search '%s': %d/%d records matched", needle, len(hits), len(items))
    return hits


def fuzzy_filter(
    records: Iterable[Any] | None,
    filters: Mapping[str, Any] | None,
    threshold: float = 0.7,
) -> list[Any]:
    """Keep records whose fields match every non-empty filter value.

    A field matches when its folded value equals the filter value or, for
    string filter values, is at least ``threshold`` similar. Records lacking
    a filtered field are dropped.
    """
    items = list(records or ())
    active = {k: v for k, v in (filters or {}).items() if v is not None and v != ""}
    if not active:
        return items
    result = [r for r in items if _passes(r, active, threshold)]
    removed = len(items) - len(result)
    if removed:
        logger.debug("fuzzy_filter: removed %d records", removed)
    return result


def _passes(record: Any, filters: Mapping[str, Any], threshold: float) -> bool:
    for key, wanted in filters.items():
        value = _field_value(record, key)
        if value is None:
            return False
        folded_value, folded_wanted = _fold(value), _fold(wanted)
        if folded_value == folded_wanted:
            continue
        if isinstance(wanted, str) and similarity(folded_value, folded_wanted) >= threshold:
            continue
        return False
    return True


class FuzzyTextFilter:
    """Keep records matching a free-text term, best matches first."""

    def __init__(self, term: str, fields: list[str], threshold: float = 0.6) -> None:
        self._term = term
        self._fields = list(fields)
        self._threshold = threshold

    def __call__(self, records: list[Any]) -> list[Any]:
        return [hit.record for hit in fuzzy_text_search(records, self._term, self._fields, self._threshold)]


class FuzzyFieldFilter:
    """Keep records whose fields equal or closely resemble the given values."""

    def __init__(self, filters: Mapping[str, Any], threshold: float = 0.7) -> None:
        self._filters = dict(filters)
        self._threshold = threshold

    def __call__(self, records: list[Any]) -> list[Any]:
        return fuzzy_filter(records, self._filters, self._threshold)


def run_filter_chain(records: list[Any], filters: list[Filter]) -> list[Any]:
    """Apply filters in order, returning the surviving records."""
    result = records
    for f in filters:
        result = f(result)
    return result
