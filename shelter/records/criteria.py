"""Translate optional search parameters into a store-independent filter tree.

Each recognized query parameter contributes exactly one clause, and the
clauses are combined with a top-level AND. Absent or empty parameters add
nothing, so an empty ``SearchCriteria`` matches every record. Unrecognized
parameters are ignored and malformed values degrade to clauses that match
nothing; building criteria never raises.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

ParamValue = str | Sequence[str]

# Fields searched by the free-text ``searchterm`` parameter
SEARCHTERM_FIELDS = ("name", "species.breed", "description")


@dataclass(frozen=True)
class TextMatch:
    """Case-insensitive text match, either substring or anchored at both ends."""

    field: str
    value: str
    exact: bool = False


@dataclass(frozen=True)
class AnyOf:
    """Field value is a member of ``values``. An empty set matches nothing."""

    field: str
    values: tuple[str, ...]


@dataclass(frozen=True)
class Either:
    """Logical OR over sub-clauses."""

    clauses: tuple[Clause, ...]


Clause = TextMatch | AnyOf | Either


@dataclass(frozen=True)
class SearchCriteria:
    """Conjunction of clauses built for one search request."""

    clauses: tuple[Clause, ...] = field(default_factory=tuple)

    @property
    def matches_all(self) -> bool:
        return not self.clauses


def _last_value(raw: ParamValue) -> str:
    """Return the last non-empty value of a possibly repeated parameter."""
    if isinstance(raw, str):
        return raw.strip()
    for value in reversed(list(raw)):
        if value.strip():
            return value.strip()
    return ""


def _joined_value(raw: ParamValue) -> str:
    """Merge repeated comma-list parameters into one comma-separated string."""
    if isinstance(raw, str):
        return raw
    return ",".join(raw)


def _tokens(raw: str, normalize: Callable[[str], str]) -> tuple[str, ...]:
    tokens: list[str] = []
    for piece in raw.split(","):
        piece = piece.strip()
        if piece:
            token = normalize(piece)
            if token not in tokens:
                tokens.append(token)
    return tuple(tokens)


def _capitalize_first(token: str) -> str:
    """Upper-case the first letter only, leaving the rest untouched."""
    return token[:1].upper() + token[1:]


def _searchterm_clause(raw: ParamValue) -> Clause | None:
    term = _last_value(raw)
    if not term:
        return None
    return Either(tuple(TextMatch(name, term) for name in SEARCHTERM_FIELDS))


def _exact_clause(field_name: str) -> Callable[[ParamValue], Clause | None]:
    def build(raw: ParamValue) -> Clause | None:
        value = _last_value(raw)
        if not value:
            return None
        return TextMatch(field_name, value, exact=True)

    return build


def _membership_clause(
    field_name: str, normalize: Callable[[str], str]
) -> Callable[[ParamValue], Clause | None]:
    def build(raw: ParamValue) -> Clause | None:
        joined = _joined_value(raw)
        if not joined.strip():
            return None
        return AnyOf(field_name, _tokens(joined, normalize))

    return build


# Parameter name -> clause builder; adding a filterable field is one entry here
CLAUSE_BUILDERS: dict[str, Callable[[ParamValue], Clause | None]] = {
    "searchterm": _searchterm_clause,
    "gender": _exact_clause("gender"),
    "species_name": _exact_clause("species.species_name"),
    "status_tags": _membership_clause("status_tags", str.upper),
    "adopt_foster": _membership_clause("adopt_foster", _capitalize_first),
    "email": _exact_clause("current_caretaker.email"),
}


def build_criteria(params: Mapping[str, ParamValue]) -> SearchCriteria:
    """Build search criteria from raw query parameters.

    Args:
        params: Query parameters, each a string or a list of strings
            when the parameter was repeated.

    Returns:
        SearchCriteria combining one clause per recognized, non-empty
        parameter.
    """
    clauses: list[Clause] = []
    for name, builder in CLAUSE_BUILDERS.items():
        raw = params.get(name)
        if raw is None:
            continue
        clause = builder(raw)
        if clause is not None:
            clauses.append(clause)

    ignored = sorted(set(params) - set(CLAUSE_BUILDERS))
    if ignored:
        logger.debug("Ignoring unrecognized search parameters: %s", ignored)

    return SearchCriteria(tuple(clauses))
