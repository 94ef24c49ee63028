"""
Query Shape Builder
Pure functions producing the structured backend query for each search intent

The shapes follow the Elasticsearch query DSL over a fixed field schema:
- entities:  id, value
- facts:     s.{id,value}, p.{id,value}, o.{id,value} (nested)
- relations: hyponyms.word, hypernyms.word, synonyms.word (nested)
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from .model import SearchParams


IS_A = "is-a"
PROPERTY_LEXICONS = ("hyponyms", "hypernyms", "synonyms")

Query = Dict[str, Any]


@dataclass(frozen=True)
class QueryHolder:
    """A built query together with the search parameters it targets"""
    query: Query
    search_params: SearchParams


def term(field: str, value: Any) -> Query:
    return {"term": {field: value}}


def terms(field: str, values: Iterable[Any]) -> Query:
    return {"terms": {field: list(values)}}


def match(field: str, text: str) -> Query:
    return {"match": {field: text}}


def nested(path: str, query: Query, score_mode: str = "max") -> Query:
    return {"nested": {"path": path, "query": query, "score_mode": score_mode}}


def bool_query(
    must: Iterable[Query] = (),
    should: Iterable[Query] = (),
    minimum_should_match: Optional[int] = None,
) -> Query:
    body: Dict[str, Any] = {}
    if must:
        body["must"] = list(must)
    if should:
        body["should"] = list(should)
    if minimum_should_match is not None:
        body["minimum_should_match"] = minimum_should_match
    return {"bool": body}


def entity_ids_query(ids: Iterable[str]) -> Query:
    """Exact membership: id in ids"""
    return terms("id", ids)


def class_query(search_term: str) -> Query:
    """Facts whose predicate is 'is-a' and whose object value matches the term"""
    return bool_query(
        must=[nested("p", term("p.id", IS_A))],
        should=[nested("o", match("o.value", search_term))],
        minimum_should_match=1,
    )


def instance_query(search_term: str) -> Query:
    return match("value", search_term)


def property_query(search_term: str) -> Query:
    """Properties with any lexical variant matching the term"""
    return bool_query(
        should=[nested(path, match(f"{path}.word", search_term)) for path in PROPERTY_LEXICONS],
        minimum_should_match=1,
    )


def pivoted_query(pivot_id: str) -> Query:
    """Facts having the pivot as subject or object"""
    return bool_query(
        should=[
            nested("s", term("s.id", pivot_id)),
            nested("o", term("o.id", pivot_id)),
        ],
        minimum_should_match=1,
    )
