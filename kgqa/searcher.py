"""
Search Backends
Executes structured queries against an index and returns scored entries

Implementations:
- InMemorySearcher: evaluates the query DSL over entries held in memory
- ElasticSearcher: Elasticsearch-compatible REST backend over httpx
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Optional
import re
import httpx
from loguru import logger

from config.settings import settings
from .errors import BackendQueryError, BackendUnavailableError
from .model import (
    BuiltInModel,
    ClassEntity,
    Entity,
    Fact,
    InstanceEntity,
    PropertyEntity,
    Score,
    Scores,
)
from .query_builder import IS_A, PROPERTY_LEXICONS, Query, QueryHolder


_TOKEN = re.compile(r"\w+", re.UNICODE)


def _tokens(text: Any) -> List[str]:
    return _TOKEN.findall(str(text).lower())


# =============================================================================
# Document mapping (index source <-> domain entries)
# =============================================================================


def to_document(entry: Any) -> Dict[str, Any]:
    """Index source form of an entry"""
    if isinstance(entry, Fact):
        return {
            "s": {"id": entry.subject.id, "value": entry.subject.value},
            "p": {"id": entry.predicate.id, "value": entry.predicate.value},
            "o": {"id": entry.object.id, "value": entry.object.value},
        }
    if isinstance(entry, PropertyEntity):
        doc: Dict[str, Any] = {"id": entry.id, "value": entry.value}
        for lexicon in PROPERTY_LEXICONS:
            doc[lexicon] = [{"word": w} for w in getattr(entry, lexicon)]
        return doc
    if isinstance(entry, Entity):
        return {"id": entry.id, "value": entry.value}
    raise TypeError(f"Cannot index entry of type {type(entry).__name__}")


def _words(source: Mapping[str, Any], lexicon: str) -> tuple:
    return tuple(item["word"] for item in source.get(lexicon) or [])


def from_document(source: Mapping[str, Any], model: BuiltInModel) -> Any:
    """Domain entry for an index source of the given model"""
    if model is BuiltInModel.FACT:
        predicate = PropertyEntity(source["p"]["id"], source["p"].get("value", source["p"]["id"]))
        object_cls = ClassEntity if predicate.id == IS_A else InstanceEntity
        return Fact(
            subject=InstanceEntity(source["s"]["id"], source["s"].get("value", source["s"]["id"])),
            predicate=predicate,
            object=object_cls(source["o"]["id"], source["o"].get("value", source["o"]["id"])),
        )
    if model is BuiltInModel.PROPERTY:
        return PropertyEntity(
            source["id"],
            source.get("value", source["id"]),
            hypernyms=_words(source, "hypernyms"),
            hyponyms=_words(source, "hyponyms"),
            synonyms=_words(source, "synonyms"),
        )
    return InstanceEntity(source["id"], source.get("value", source["id"]))


# =============================================================================
# Searchers
# =============================================================================


class Searcher(ABC):
    """Abstract base class for search backends"""

    @abstractmethod
    def search(self, holder: QueryHolder) -> Scores:
        """
        Execute a query against the index of holder.search_params.kb_id

        Args:
            holder: Built query plus the search parameters (kb, model, limit)

        Returns:
            Scores in backend order (most relevant first)

        Raises:
            BackendUnavailableError: If the backend cannot be reached
            BackendQueryError: If the backend rejects the query
        """
        pass


class InMemorySearcher(Searcher):
    """
    Evaluates the query DSL over in-memory entries

    Supports term, terms, match, nested and bool (must / should /
    minimum_should_match). Match scores are the share of query tokens found.
    """

    def __init__(self, entries: Optional[Mapping[BuiltInModel, Iterable[Any]]] = None):
        self.entries: Dict[BuiltInModel, List[Any]] = {
            model: list(items) for model, items in (entries or {}).items()
        }

    def add(self, model: BuiltInModel, entries: Iterable[Any]) -> None:
        self.entries.setdefault(model, []).extend(entries)

    def search(self, holder: QueryHolder) -> Scores:
        params = holder.search_params
        if params.model is None:
            raise BackendQueryError(f"No model selected for search on '{params.kb_name}'")

        scores = []
        for entry in self.entries.get(params.model, []):
            value = self._evaluate(holder.query, to_document(entry))
            if value is not None:
                scores.append(Score(entry, value))

        ranked = Scores(scores).sorted()
        if params.limit:
            ranked = ranked.top(params.limit)

        logger.debug(f"In-memory search on {params.kb_id} returned {len(ranked)} hits")
        return ranked

    @staticmethod
    def _values(doc: Any, field: str) -> List[Any]:
        nodes = [doc]
        for segment in field.split("."):
            resolved = []
            for node in nodes:
                if isinstance(node, list):
                    node_items = node
                else:
                    node_items = [node]
                for item in node_items:
                    if isinstance(item, Mapping) and segment in item:
                        value = item[segment]
                        resolved.extend(value if isinstance(value, list) else [value])
            nodes = resolved
        return nodes

    def _evaluate(self, query: Query, doc: Any) -> Optional[float]:
        (kind, body), = query.items()

        if kind == "term":
            (field, expected), = body.items()
            return 1.0 if expected in self._values(doc, field) else None

        if kind == "terms":
            (field, expected), = body.items()
            return 1.0 if set(self._values(doc, field)) & set(expected) else None

        if kind == "match":
            (field, text), = body.items()
            wanted = set(_tokens(text))
            if not wanted:
                return None
            found = set()
            for value in self._values(doc, field):
                found.update(_tokens(value))
            overlap = len(wanted & found)
            return overlap / len(wanted) if overlap else None

        if kind == "nested":
            path = body["path"]
            matched = [
                s for s in (
                    self._evaluate(body["query"], {path: sub})
                    for sub in self._values(doc, path)
                )
                if s is not None
            ]
            if not matched:
                return None
            if body.get("score_mode", "max") == "avg":
                return sum(matched) / len(matched)
            return max(matched)

        if kind == "bool":
            total = 0.0
            for clause in body.get("must", []):
                score = self._evaluate(clause, doc)
                if score is None:
                    return None
                total += score

            should = body.get("should", [])
            should_scores = [s for s in (self._evaluate(c, doc) for c in should) if s is not None]
            required = body.get("minimum_should_match", 0 if body.get("must") else min(1, len(should)))
            if len(should_scores) < int(required):
                return None
            return total + sum(should_scores)

        raise BackendQueryError(f"Unsupported query clause '{kind}'")


class ElasticSearcher(Searcher):
    """
    Elasticsearch-compatible REST backend

    One index per knowledge base model, named '<kb>.<model>'.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        max_results: Optional[int] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = (base_url or settings.SEARCH_BACKEND_URL).rstrip("/")
        self.timeout = timeout or settings.SEARCH_BACKEND_TIMEOUT
        self.max_results = max_results or settings.SEARCH_MAX_RESULTS
        self.transport = transport

    def _build_payload(self, holder: QueryHolder) -> Dict[str, Any]:
        return {
            "query": holder.query,
            "size": holder.search_params.limit or self.max_results,
        }

    def search(self, holder: QueryHolder) -> Scores:
        params = holder.search_params
        if params.model is None:
            raise BackendQueryError(f"No model selected for search on '{params.kb_name}'")

        url = f"{self.base_url}/{params.kb_id.index_name}/_search"
        payload = self._build_payload(holder)
        logger.debug(f"Elastic query on {url}: {payload}")

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(url, json=payload)
                response.raise_for_status()
                data = response.json()

        except httpx.HTTPStatusError as e:
            logger.error(
                f"Search backend HTTP error: {e.response.status_code} - {e.response.text}"
            )
            raise BackendQueryError(f"Search backend returned {e.response.status_code}") from e
        except httpx.TimeoutException as e:
            logger.error(f"Search backend timeout: {e}")
            raise BackendUnavailableError(f"Search backend timed out at {url}") from e
        except httpx.HTTPError as e:
            logger.error(f"Search backend unreachable: {e}")
            raise BackendUnavailableError(f"Search backend unreachable at {url}") from e
        except ValueError as e:
            raise BackendQueryError("Search backend returned invalid JSON") from e

        try:
            hits = data["hits"]["hits"]
            scores = Scores(
                Score(from_document(hit["_source"], params.model), float(hit.get("_score") or 0.0))
                for hit in hits
            )
        except (KeyError, TypeError, ValueError) as e:
            raise BackendQueryError(f"Unexpected search backend response from {url}") from e

        logger.info(f"Search on {params.kb_id} returned {len(scores)} hits")
        return scores
