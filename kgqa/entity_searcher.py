"""
Entity Searcher
Dispatches the structured search strategies and re-ranks their results

Every search follows the same steps:
1. tag the search params with the model of the strategy
2. fill in distributional rank params from the configuration
3. build the query shape
4. execute it on the knowledge base's searcher
5. remap the hits when the ranked target differs from the indexed one
6. delegate to the ranking strategy
"""

from typing import Any, Dict, List, Optional
from loguru import logger

from . import ranking
from . import query_builder
from .core import Core
from .model import BuiltInModel, Entity, PropertyEntity, Score, Scores, SearchParams
from .query_builder import QueryHolder
from .ranking import RankingStrategy, RankParams


class EntitySearcher:
    """
    Stateless between calls: every search re-executes against the backend
    and re-resolves the distributional service settings.
    """

    def __init__(self, core: Core):
        if core is None:
            raise ValueError("EntitySearcher requires a core")
        self.core = core

    def get_entity(self, kb_name: str, entity_id: str) -> Optional[Any]:
        """First entry with the given id, or None when not found"""
        res = self.get_entities(kb_name, [entity_id])
        if res:
            return res[0]
        return None

    def get_entities(self, kb_name: str, ids: List[str]) -> List[Any]:
        """
        Exact lookup by id

        Returns:
            Entries in backend order, not ranked. Empty when nothing matches.
        """
        logger.info(f"Fetching ids={ids}")
        if not ids:
            return []

        ns = self.core.get_namespace(kb_name)
        id_list = [ns.shrink_uri(i) for i in ids]
        search_params = SearchParams(kb_name).with_model(BuiltInModel.ENTITY)
        query = query_builder.entity_ids_query(id_list)

        searcher = self.core.get_searcher(kb_name)
        scores = searcher.search(QueryHolder(query, search_params))
        return scores.entries()

    def class_search(self, search_params: SearchParams, rank_params: RankParams) -> Scores:
        search_params.with_model(BuiltInModel.FACT)
        self._configure_rank_params(search_params.kb_name, rank_params)

        query = query_builder.class_query(search_params.search_term)
        scores = self._search(query, search_params)

        # The backend score measures the predicate match, not class relevance
        classes2score = Scores(Score(s.entry.object, 0) for s in scores)

        return ranking.apply(classes2score, rank_params, search_params.search_term)

    def instance_search(self, search_params: SearchParams, rank_params: RankParams) -> Scores:
        search_params.with_model(BuiltInModel.ENTITY)
        self._configure_rank_params(search_params.kb_name, rank_params)

        query = query_builder.instance_query(search_params.search_term)
        scores = self._search(query, search_params)

        return ranking.apply(scores, rank_params, search_params.search_term)

    def property_search(self, search_params: SearchParams, rank_params: RankParams) -> Scores:
        search_params.with_model(BuiltInModel.PROPERTY)
        self._configure_rank_params(search_params.kb_name, rank_params)

        query = query_builder.property_query(search_params.search_term)
        scores = self._search(query, search_params)

        return ranking.apply(scores, rank_params, search_params.search_term)

    def pivoted_search(
        self,
        pivot: Entity,
        search_params: SearchParams,
        rank_params: RankParams,
    ) -> Scores:
        """Properties reachable from the pivot, ranked against the search term"""
        search_params.with_model(BuiltInModel.FACT)
        self._configure_rank_params(search_params.kb_name, rank_params)

        query = query_builder.pivoted_query(pivot.id)
        scores = self._search(query, search_params)

        # Facts are remapped to their predicates, the real target of the ranker.
        # One entry per predicate id, first seen wins; fact level scores are reset.
        predicates: Dict[str, PropertyEntity] = {}
        for s in scores:
            predicates.setdefault(s.entry.predicate.id, s.entry.predicate)
        prop_scores = Scores(Score(p, 0) for p in predicates.values())

        logger.debug(f"Pivot '{pivot.id}': {len(scores)} facts, {len(prop_scores)} properties")
        return ranking.apply(prop_scores, rank_params, search_params.search_term)

    def _search(self, query: query_builder.Query, search_params: SearchParams) -> Scores:
        searcher = self.core.get_searcher(search_params.kb_name)
        logger.info(f"Searching {search_params.kb_id} for '{search_params.search_term}'")
        return searcher.search(QueryHolder(query, search_params))

    def _configure_rank_params(self, kb_name: str, rank_params: RankParams) -> None:
        if rank_params.strategy is RankingStrategy.DISTRIBUTIONAL:
            self._configure_distributional_params(kb_name, rank_params)

    def _configure_distributional_params(self, kb_name: str, params: ranking.DistributionalRankParams) -> None:
        config = self.core.get_config()
        url = config.get_string("distributional-service.rest-url")
        corpus = config.get_string("distributional-service.corpus")
        lang = self.core.get_kb_config(kb_name).get_string("language")
        params.configure(url, corpus, lang)
