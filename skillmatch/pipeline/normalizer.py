"""Skill token normalization and the abbreviation table.

``normalize`` never raises: anything that is not a non-blank string becomes
``""``, which matches nothing downstream.
"""

import re
import string
from collections.abc import Mapping
from types import MappingProxyType

# Keys and values are already in normalized form.
ABBREVIATIONS: Mapping[str, str] = MappingProxyType({
    "js": "javascript",
    "ts": "typescript",
    "py": "python",
    "c#": "csharp",
    "c++": "cplusplus",
    "css3": "css",
    "html5": "html",
    "node": "nodejs",
    "node.js": "nodejs",
    "react": "reactjs",
    "react.js": "reactjs",
    "vue": "vuejs",
    "vue.js": "vuejs",
    "angular": "angularjs",
    "mongo": "mongodb",
    "postgres": "postgresql",
    "k8s": "kubernetes",
    "ml": "machine learning",
    "ai": "artificial intelligence",
    "db": "database",
    "sql": "structured query language",
    "oop": "object oriented programming",
})

# "+" and "#" carry meaning in c++ / c#; a leading "." in .net does too.
_EDGE_PUNCTUATION = "".join(ch for ch in string.punctuation if ch not in "+#.")
_SEPARATORS = re.compile(r"[-_\s]+")


def normalize(raw: object, *, expand_abbreviations: bool = False) -> str:
    """Canonicalize a raw skill token for comparison.

    Lower-cases, treats ``-`` and ``_`` as spaces, strips surrounding
    punctuation, and collapses whitespace. With ``expand_abbreviations``
    the result is also mapped through ``ABBREVIATIONS``.
    """
    if not isinstance(raw, str):
        return ""
    token = _SEPARATORS.sub(" ", raw.lower()).strip()
    token = token.lstrip(_EDGE_PUNCTUATION + " ").rstrip(_EDGE_PUNCTUATION + ". ")
    if expand_abbreviations:
        return canonical_form(token)
    return token


def canonical_form(token: str) -> str:
    """Expand a normalized token through the abbreviation table."""
    return ABBREVIATIONS.get(token, token)


def are_abbreviations(a: str, b: str) -> bool:
    """True if two distinct normalized tokens name the same skill via the table.

    Covers ``js``/``javascript`` in either order and sibling aliases such as
    ``node``/``node.js``.
    """
    if not a or not b or a == b:
        return False
    return canonical_form(a) == canonical_form(b)
