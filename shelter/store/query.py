"""Translate search criteria trees into Elasticsearch query DSL."""

from __future__ import annotations

from shelter.records.criteria import AnyOf, Clause, Either, SearchCriteria, TextMatch

_WILDCARD_SPECIALS = ("\\", "*", "?")


def escape_wildcard(value: str) -> str:
    """Escape characters that the wildcard query would treat as operators."""
    for char in _WILDCARD_SPECIALS:
        value = value.replace(char, "\\" + char)
    return value


def _clause_to_query(clause: Clause) -> dict:
    if isinstance(clause, TextMatch):
        if clause.exact:
            return {
                "term": {
                    clause.field: {"value": clause.value, "case_insensitive": True}
                }
            }
        return {
            "wildcard": {
                clause.field: {
                    "value": f"*{escape_wildcard(clause.value)}*",
                    "case_insensitive": True,
                }
            }
        }

    if isinstance(clause, AnyOf):
        if not clause.values:
            return {"match_none": {}}
        return {"terms": {clause.field: list(clause.values)}}

    if isinstance(clause, Either):
        return {
            "bool": {
                "should": [_clause_to_query(sub) for sub in clause.clauses],
                "minimum_should_match": 1,
            }
        }

    raise TypeError(f"Unsupported criteria clause: {clause!r}")


def to_es_query(criteria: SearchCriteria) -> dict:
    """Build the ``query`` section of a search body.

    Clauses go into a ``bool.filter`` so they combine with AND and do not
    affect scoring; an empty criteria set becomes ``match_all``.

    Args:
        criteria: Criteria produced by ``build_criteria``.

    Returns:
        Elasticsearch query DSL dict.
    """
    if criteria.matches_all:
        return {"match_all": {}}
    return {"bool": {"filter": [_clause_to_query(c) for c in criteria.clauses]}}
