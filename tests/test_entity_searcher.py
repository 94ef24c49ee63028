"""
Tests for the Entity Searcher (search dispatch, remapping and rank parameter setup)
"""

from unittest.mock import Mock, patch

import pytest

from kgqa.core import Core
from kgqa.entity_searcher import EntitySearcher
from kgqa.errors import BackendUnavailableError, RankingError, UnknownKnowledgeBaseError
from kgqa.model import (
    BuiltInModel,
    ClassEntity,
    Fact,
    InstanceEntity,
    PropertyEntity,
    Score,
    Scores,
    SearchParams,
)
from kgqa.ranking import ParamsBuilder


def passthrough(scores, rank_params, target):
    return scores


@pytest.fixture
def backend():
    searcher = Mock()
    searcher.search.return_value = Scores()
    return searcher


@pytest.fixture
def mocked_core(config, backend):
    return Core(config, searcher_factory=lambda core, kb_name: backend)


class TestEntityRetrieval:

    def test_get_entities_shrinks_ids(self, mocked_core, backend, obama):
        backend.search.return_value = Scores([Score(obama, 3.2)])
        searcher = EntitySearcher(mocked_core)

        entities = searcher.get_entities("kb1", ["http://dbpedia.org/resource/Barack_Obama"])

        assert entities == [obama]
        holder = backend.search.call_args[0][0]
        assert holder.query == {"terms": {"id": ["dbr:Barack_Obama"]}}
        assert holder.search_params.model is BuiltInModel.ENTITY
        assert holder.search_params.kb_name == "kb1"

    def test_backend_order_is_kept(self, mocked_core, backend):
        first = InstanceEntity("dbr:B", "B")
        second = InstanceEntity("dbr:A", "A")
        backend.search.return_value = Scores([Score(first, 0.1), Score(second, 0.9)])

        entities = EntitySearcher(mocked_core).get_entities("kb1", ["dbr:A", "dbr:B"])

        assert entities == [first, second]

    def test_empty_ids_short_circuit(self, mocked_core, backend):
        assert EntitySearcher(mocked_core).get_entities("kb1", []) == []
        backend.search.assert_not_called()

    def test_get_entity_not_found(self, mocked_core):
        assert EntitySearcher(mocked_core).get_entity("kb1", "dbr:Nobody") is None

    def test_get_entity(self, mocked_core, backend, obama):
        backend.search.return_value = Scores([Score(obama, 1.0)])
        assert EntitySearcher(mocked_core).get_entity("kb1", "dbr:Barack_Obama") == obama

    def test_unknown_kb(self, mocked_core):
        with pytest.raises(UnknownKnowledgeBaseError):
            EntitySearcher(mocked_core).get_entities("nope", ["x"])

    def test_backend_failure_propagates(self, mocked_core, backend):
        backend.search.side_effect = BackendUnavailableError("down")

        with pytest.raises(BackendUnavailableError):
            EntitySearcher(mocked_core).get_entities("kb1", ["dbr:X"])


class TestClassSearch:

    def test_remaps_to_object_and_discards_backend_score(self, mocked_core, backend, obama):
        person = ClassEntity("dbo:Person", "Person")
        backend.search.return_value = Scores([
            Score(Fact(obama, PropertyEntity("is-a", "is-a"), person), 0.9),
        ])

        with patch("kgqa.ranking.apply", side_effect=passthrough) as apply:
            params = SearchParams("kb1", "person")
            EntitySearcher(mocked_core).class_search(params, ParamsBuilder.levenshtein())

        ranked_input = apply.call_args[0][0]
        assert list(ranked_input) == [Score(person, 0)]
        assert ranked_input[0].entry.value == "Person"
        assert apply.call_args[0][2] == "person"
        assert params.model is BuiltInModel.FACT

    def test_query_shape(self, mocked_core, backend):
        EntitySearcher(mocked_core).class_search(SearchParams("kb1", "person"), ParamsBuilder.levenshtein())

        query = backend.search.call_args[0][0].query
        assert query["bool"]["must"][0]["nested"]["query"] == {"term": {"p.id": "is-a"}}
        assert query["bool"]["minimum_should_match"] == 1


class TestInstanceAndPropertySearch:

    def test_instance_hits_pass_through(self, mocked_core, backend, obama):
        hits = Scores([Score(obama, 2.5)])
        backend.search.return_value = hits

        with patch("kgqa.ranking.apply", side_effect=passthrough) as apply:
            params = SearchParams("kb1", "obama")
            EntitySearcher(mocked_core).instance_search(params, ParamsBuilder.jaccard())

        assert apply.call_args[0][0] is hits
        assert params.model is BuiltInModel.ENTITY

    def test_property_hits_pass_through(self, mocked_core, backend, spouse):
        hits = Scores([Score(spouse, 1.7)])
        backend.search.return_value = hits

        with patch("kgqa.ranking.apply", side_effect=passthrough) as apply:
            params = SearchParams("kb1", "wife")
            result = EntitySearcher(mocked_core).property_search(params, ParamsBuilder.levenshtein())

        assert apply.call_args[0][0] is hits
        assert result is hits
        assert params.model is BuiltInModel.PROPERTY
        query = backend.search.call_args[0][0].query
        assert len(query["bool"]["should"]) == 3


class TestPivotedSearch:

    def test_deduplicates_predicates_with_zero_score(self, mocked_core, backend, obama, spouse):
        michelle = InstanceEntity("dbr:Michelle_Obama", "Michelle Obama")
        backend.search.return_value = Scores([
            Score(Fact(obama, spouse, michelle), 4.0),
            Score(Fact(michelle, spouse, obama), 3.0),
        ])

        with patch("kgqa.ranking.apply", side_effect=passthrough) as apply:
            params = SearchParams("kb1", "wife")
            EntitySearcher(mocked_core).pivoted_search(obama, params, ParamsBuilder.levenshtein())

        assert list(apply.call_args[0][0]) == [Score(spouse, 0)]
        assert params.model is BuiltInModel.FACT

    def test_deduplicates_by_predicate_id(self, mocked_core, backend, obama):
        """Same predicate id with different lexicons is one property, first seen wins"""
        michelle = InstanceEntity("dbr:Michelle_Obama", "Michelle Obama")
        plain = PropertyEntity("dbo:spouse", "spouse")
        with_synonyms = PropertyEntity("dbo:spouse", "spouse", synonyms=("wife",))
        birth_place = PropertyEntity("dbo:birthPlace", "birth place")
        backend.search.return_value = Scores([
            Score(Fact(obama, plain, michelle), 4.0),
            Score(Fact(obama, birth_place, InstanceEntity("dbr:Honolulu", "Honolulu")), 3.5),
            Score(Fact(michelle, with_synonyms, obama), 3.0),
        ])

        with patch("kgqa.ranking.apply", side_effect=passthrough) as apply:
            EntitySearcher(mocked_core).pivoted_search(obama, SearchParams("kb1", "wife"), ParamsBuilder.levenshtein())

        ranked_input = apply.call_args[0][0]
        assert [s.entry.id for s in ranked_input] == ["dbo:spouse", "dbo:birthPlace"]
        assert ranked_input[0].entry is plain
        assert ranked_input.values() == [0, 0]

    def test_query_uses_pivot_id(self, mocked_core, backend, obama):
        EntitySearcher(mocked_core).pivoted_search(obama, SearchParams("kb1", "wife"), ParamsBuilder.levenshtein())

        should = backend.search.call_args[0][0].query["bool"]["should"]
        assert should[0]["nested"]["query"] == {"term": {"s.id": "dbr:Barack_Obama"}}
        assert should[1]["nested"]["query"] == {"term": {"o.id": "dbr:Barack_Obama"}}


class TestDistributionalParams:
    """Distributional rank params are filled from configuration before ranking"""

    @pytest.mark.parametrize("search", ["class_search", "instance_search", "property_search", "pivoted_search"])
    def test_params_configured(self, mocked_core, obama, search):
        rank_params = ParamsBuilder.distributional()
        searcher = EntitySearcher(mocked_core)

        with patch("kgqa.ranking.apply", side_effect=passthrough) as apply:
            if search == "pivoted_search":
                searcher.pivoted_search(obama, SearchParams("kb1", "wife"), rank_params)
            else:
                getattr(searcher, search)(SearchParams("kb1", "wife"), rank_params)

        configured = apply.call_args[0][1]
        assert configured.url == "http://indra.test:8916"
        assert configured.corpus == "wiki-2014"
        assert configured.language == "en"

    def test_string_params_untouched(self, mocked_core):
        rank_params = ParamsBuilder.levenshtein(threshold=0.3)

        with patch("kgqa.ranking.apply", side_effect=passthrough):
            EntitySearcher(mocked_core).class_search(SearchParams("kb1", "x"), rank_params)

        assert rank_params.threshold == 0.3
        assert not hasattr(rank_params, "url")

    def test_ranking_failure_propagates(self, mocked_core, backend, spouse):
        backend.search.return_value = Scores([Score(spouse, 1.0)])

        with patch("kgqa.ranking.apply", side_effect=RankingError("unreachable")):
            with pytest.raises(RankingError):
                EntitySearcher(mocked_core).property_search(
                    SearchParams("kb1", "wife"), ParamsBuilder.distributional()
                )


class TestEndToEnd:
    """Dispatcher over the in-memory backend with real string ranking"""

    def test_instance_search(self, core):
        results = EntitySearcher(core).instance_search(
            SearchParams("kb1", "Barack Obama"), ParamsBuilder.levenshtein()
        )

        assert results[0].entry.value == "Barack Obama"
        assert results[0].value == 1.0

    def test_class_search(self, core):
        results = EntitySearcher(core).class_search(SearchParams("kb1", "person"), ParamsBuilder.levenshtein())

        assert results.entries() == [ClassEntity("dbo:Person", "Person")]
        assert results[0].value == 1.0

    def test_pivoted_search(self, core, obama):
        results = EntitySearcher(core).pivoted_search(
            obama, SearchParams("kb1", "spouse"), ParamsBuilder.levenshtein()
        )

        values = [e.value for e in results.entries()]
        assert values[0] == "spouse"
        assert sorted(values) == ["birth place", "is-a", "spouse"]

    def test_property_search(self, core, spouse):
        results = EntitySearcher(core).property_search(SearchParams("kb1", "wife"), ParamsBuilder.jaccard())

        assert results.entries() == [spouse]

    def test_get_entity(self, core, obama):
        assert EntitySearcher(core).get_entity("kb1", "http://dbpedia.org/resource/Barack_Obama") == obama
