"""
Query Classification
Classifies questions with the per-language rule sets and resolves a query plan
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple
import re
from loguru import logger

from config.settings import settings
from .errors import UnsupportedLanguageError
from .language import Language
from .patterns import DataModelType, QueryPlanPattern, QueryType
from .rules import Rules


_WHITESPACE = re.compile(r"\s+")
_PLACEHOLDER = re.compile(r"(\b(?:%s)_\d+\b)" % "|".join(t.value for t in DataModelType))


def _normalize(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


@dataclass
class QueryAnalysis:
    """Analysis result for a question"""
    query: str
    language: Language
    clean_query: str
    query_type: Optional[QueryType]
    abstraction: str
    bindings: List[Tuple[str, str]] = field(default_factory=list)
    plan: Optional[QueryPlanPattern] = None
    triples: List[Tuple[str, str, str]] = field(default_factory=list)

    @property
    def has_plan(self) -> bool:
        return self.plan is not None

    def binding(self, placeholder: str) -> Optional[str]:
        for name, term in self.bindings:
            if name == placeholder:
                return term
        return None


class QueryClassifier:
    """
    Rule-based question classifier.

    Every step reads the rules of a single language; a language missing from
    the collection a step needs surfaces as UnsupportedLanguageError.
    """

    def __init__(self, rules: Rules):
        self.rules = rules

    def remove_stop_patterns(self, text: str, language: Language) -> str:
        """Delete every stop-pattern match, in configured order."""
        clean = text
        for pattern in self.rules.get_stop_rules(language):
            clean = pattern.sub(" ", clean)
        return _normalize(clean)

    def classify_query_type(self, text: str, language: Language) -> Optional[QueryType]:
        """First query type (in configured order) with a matching regex, or None."""
        for query_type_pattern in self.rules.get_query_type_rules(language):
            if query_type_pattern.matches(text):
                return query_type_pattern.query_type
        return None

    def abstract(self, text: str, language: Language) -> Tuple[str, List[Tuple[str, str]]]:
        """
        Replace data model type matches with placeholders

        Patterns are applied in order on the progressively abstracted text, so an
        earlier pattern wins over a later one for overlapping spans. Placeholders
        left by earlier patterns are never matched again.

        Returns:
            Tuple of (abstraction, [(placeholder, matched text), ...])
        """
        abstraction = text
        bindings: List[Tuple[str, str]] = []
        counters: Dict[str, int] = {}

        for rule in self.rules.get_data_model_type_rules(language):
            type_name = rule.model_type.value

            def _bind(match: re.Match) -> str:
                counters[type_name] = counters.get(type_name, 0) + 1
                placeholder = f"{type_name}_{counters[type_name]}"
                bindings.append((placeholder, match.group(0).strip()))
                return placeholder

            segments = _PLACEHOLDER.split(abstraction)
            # odd indexes hold the placeholders captured by split
            abstraction = "".join(
                segment if i % 2 else rule.pattern.sub(_bind, segment)
                for i, segment in enumerate(segments)
            )

        return _normalize(abstraction), bindings

    def find_plan(self, abstraction: str, language: Language) -> Optional[QueryPlanPattern]:
        target = _normalize(abstraction)
        for plan in self.rules.get_query_plan_rules(language):
            if _normalize(plan.plan_id) == target:
                return plan
        return None

    @staticmethod
    def resolve_triples(plan: QueryPlanPattern, bindings: Iterable[Tuple[str, str]]) -> List[Tuple[str, str, str]]:
        """Substitute bound terms into the plan's triple patterns."""
        bound = dict(bindings)
        triples = []
        for triple_pattern in plan.triple_patterns:
            terms = triple_pattern.split()
            if len(terms) != 3:
                logger.warning(f"Skipping malformed triple pattern '{triple_pattern}' in plan '{plan.plan_id}'")
                continue
            s, p, o = (bound.get(term, term) for term in terms)
            triples.append((s, p, o))
        return triples

    def analyze(self, text: str, language: Language) -> QueryAnalysis:
        """
        Classify a question and resolve its structured query plan.

        Args:
            text: Natural-language question
            language: Language whose rules are applied

        Returns:
            QueryAnalysis; plan and triples are empty when no plan matches
        """
        query_type = self.classify_query_type(text, language)
        clean_query = self.remove_stop_patterns(text, language)
        abstraction, bindings = self.abstract(clean_query, language)
        plan = self.find_plan(abstraction, language)
        triples = self.resolve_triples(plan, bindings) if plan else []

        analysis = QueryAnalysis(
            query=text,
            language=language,
            clean_query=clean_query,
            query_type=query_type,
            abstraction=abstraction,
            bindings=bindings,
            plan=plan,
            triples=triples,
        )

        logger.info(
            f"Query classified as {query_type.value if query_type else 'UNKNOWN'} "
            f"(plan: {plan.plan_id if plan else 'none'})"
        )
        logger.debug(f"Abstraction: '{abstraction}', bindings: {bindings}")

        return analysis

    def detect_language(self, text: str, candidates: Optional[Iterable[Language]] = None) -> Language:
        """
        Pick the first language whose query type rules recognise the text

        Falls back to settings.DEFAULT_LANGUAGE when no language matches.
        """
        for language in candidates or self.rules.languages:
            try:
                if self.classify_query_type(text, language) is not None:
                    return language
            except UnsupportedLanguageError:
                continue

        logger.debug(f"No language recognised '{text}', using default '{settings.DEFAULT_LANGUAGE}'")
        return Language.from_key(settings.DEFAULT_LANGUAGE)
