"""
Rule Repository
Loads and indexes the per-language pattern sets used to interpret free text

Four independent collections are read from the rules.* config namespace:
- syntatic-pattern: data model type patterns
- planner-pattern:  query plan templates
- stop-pattern:     text removed before classification
- query-pattern:    query type patterns
"""

from typing import Any, Callable, Dict, List, Mapping, Tuple, TypeVar
import re
from loguru import logger

from .config import Config
from .errors import ConfigurationError, UnsupportedLanguageError
from .language import Language
from .patterns import (
    DataModelType,
    DataModelTypePattern,
    QueryPlanPattern,
    QueryType,
    QueryTypePattern,
)


DATA_MODEL_SECTION = "rules.syntatic-pattern"
QUERY_PLAN_SECTION = "rules.planner-pattern"
STOP_SECTION = "rules.stop-pattern"
QUERY_TYPE_SECTION = "rules.query-pattern"

T = TypeVar("T")


def _compile(regex: Any, where: str) -> re.Pattern:
    if not isinstance(regex, str):
        raise ConfigurationError(f"Expected a regex string in {where}, got {type(regex).__name__}")
    try:
        return re.compile(regex)
    except re.error as e:
        raise ConfigurationError(f"Invalid regex {regex!r} in {where}: {e}") from e


def _string_list(value: Any, where: str) -> List[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigurationError(f"Expected a list of strings in {where}")
    return value


def _single_entry(item: Any, where: str) -> Tuple[str, Any]:
    if not isinstance(item, Mapping) or len(item) != 1:
        raise ConfigurationError(f"Expected a single-key mapping in {where}, got {item!r}")
    return next(iter(item.items()))


def _enum_member(enum_cls, name: Any, where: str):
    try:
        return enum_cls[str(name).upper()]
    except KeyError:
        raise ConfigurationError(f"Unknown {enum_cls.__name__} '{name}' in {where}") from None


def _by_language(
    section: Mapping[str, Any],
    parse: Callable[[Any, str], List[T]],
    name: str,
) -> Dict[Language, Tuple[T, ...]]:
    """Apply a per-language parser to every language key of a section"""
    if not isinstance(section, Mapping):
        raise ConfigurationError(f"Rule section '{name}' must be a mapping of languages")

    rules_by_lang: Dict[Language, Tuple[T, ...]] = {}
    for lang_key, body in section.items():
        language = Language.from_key(lang_key)
        if language in rules_by_lang:
            raise ConfigurationError(f"Language '{lang_key}' declared twice in '{name}'")
        rules_by_lang[language] = tuple(parse(body, f"{name}.{lang_key}"))
    return rules_by_lang


def _parse_data_model_types(body: Any, where: str) -> List[DataModelTypePattern]:
    if not isinstance(body, list):
        raise ConfigurationError(f"Expected a list of {{TYPE: [patterns]}} in {where}")

    rules = []
    for item in body:
        model_str, pattern_list = _single_entry(item, where)
        model_type = _enum_member(DataModelType, model_str, where)
        for regex in _string_list(pattern_list, f"{where}.{model_str}"):
            rules.append(DataModelTypePattern(_compile(regex, where), model_type))
    return rules


def _parse_query_plans(body: Any, where: str) -> List[QueryPlanPattern]:
    if not isinstance(body, list):
        raise ConfigurationError(f"Expected a list of {{plan: [triples]}} in {where}")

    plans = []
    seen = set()
    for item in body:
        plan_id, triples = _single_entry(item, where)
        plan_id = str(plan_id)
        triples = _string_list(triples, f"{where}.{plan_id}")
        if not triples:
            raise ConfigurationError(f"Query plan '{plan_id}' in {where} has no triple patterns")
        if plan_id in seen:
            raise ConfigurationError(f"Duplicate query plan '{plan_id}' in {where}")
        seen.add(plan_id)
        plans.append(QueryPlanPattern(plan_id, tuple(triples)))
    return plans


def _parse_stops(body: Any, where: str) -> List[re.Pattern]:
    return [_compile(regex, where) for regex in _string_list(body, where)]


def _parse_query_types(body: Any, where: str) -> List[QueryTypePattern]:
    if not isinstance(body, Mapping):
        raise ConfigurationError(f"Expected a mapping of {{QUERY_TYPE: [patterns]}} in {where}")

    patterns = []
    for key, regexes in body.items():
        query_type = _enum_member(QueryType, key, where)
        compiled = tuple(_compile(r, where) for r in _string_list(regexes, f"{where}.{key}"))
        patterns.append(QueryTypePattern(query_type, compiled))
    return patterns


def parse_data_model_type_patterns(section: Mapping[str, Any]) -> Dict[Language, Tuple[DataModelTypePattern, ...]]:
    """Parse rules.syntatic-pattern: {lang: [{MODEL_TYPE: [regex, ...]}, ...]}"""
    return _by_language(section, _parse_data_model_types, DATA_MODEL_SECTION)


def parse_query_plan_patterns(section: Mapping[str, Any]) -> Dict[Language, Tuple[QueryPlanPattern, ...]]:
    """Parse rules.planner-pattern: {lang: [{plan_id: [triple, ...]}, ...]}"""
    return _by_language(section, _parse_query_plans, QUERY_PLAN_SECTION)


def parse_stop_patterns(section: Mapping[str, Any]) -> Dict[Language, Tuple[re.Pattern, ...]]:
    """Parse rules.stop-pattern: {lang: [regex, ...]}"""
    return _by_language(section, _parse_stops, STOP_SECTION)


def parse_query_type_patterns(section: Mapping[str, Any]) -> Dict[Language, Tuple[QueryTypePattern, ...]]:
    """Parse rules.query-pattern: {lang: {QUERY_TYPE: [regex, ...]}}"""
    return _by_language(section, _parse_query_types, QUERY_TYPE_SECTION)


class Rules:
    """
    Per-language rule collections, built eagerly from the config tree.

    The mappings are never mutated after construction, so a single instance
    can be shared by any number of concurrent readers.
    """

    def __init__(self, config: Config):
        if config is None:
            raise ConfigurationError("Rules require a configuration tree")

        logger.info("Loading Rules.")
        self._data_model_type_patterns = parse_data_model_type_patterns(config.get_mapping(DATA_MODEL_SECTION))
        self._query_plan_patterns = parse_query_plan_patterns(config.get_mapping(QUERY_PLAN_SECTION))
        self._stop_patterns = parse_stop_patterns(config.get_mapping(STOP_SECTION))
        self._query_type_patterns = parse_query_type_patterns(config.get_mapping(QUERY_TYPE_SECTION))

        for name, rules in (
            ("Data Model Type", self._data_model_type_patterns),
            ("Query Plan", self._query_plan_patterns),
            ("Stop", self._stop_patterns),
            ("Query Type", self._query_type_patterns),
        ):
            for language, patterns in rules.items():
                logger.info(f"Loaded {len(patterns)} {name} patterns for '{language.value}'")
                logger.trace(f"All {name} rules for '{language.value}': {patterns}")

    @staticmethod
    def _lookup(rules: Dict[Language, Tuple[T, ...]], language: Language, collection: str) -> Tuple[T, ...]:
        if language in rules:
            return rules[language]
        raise UnsupportedLanguageError(language, collection)

    def get_data_model_type_rules(self, language: Language) -> Tuple[DataModelTypePattern, ...]:
        return self._lookup(self._data_model_type_patterns, language, "data model type rules")

    def get_query_plan_rules(self, language: Language) -> Tuple[QueryPlanPattern, ...]:
        return self._lookup(self._query_plan_patterns, language, "query plan rules")

    def get_stop_rules(self, language: Language) -> Tuple[re.Pattern, ...]:
        return self._lookup(self._stop_patterns, language, "stop rules")

    def get_query_type_rules(self, language: Language) -> Tuple[QueryTypePattern, ...]:
        return self._lookup(self._query_type_patterns, language, "query type rules")

    @property
    def languages(self) -> Tuple[Language, ...]:
        """Languages present in any collection, in declaration order"""
        seen: Dict[Language, None] = {}
        for rules in (
            self._data_model_type_patterns,
            self._query_plan_patterns,
            self._stop_patterns,
            self._query_type_patterns,
        ):
            for language in rules:
                seen.setdefault(language)
        return tuple(seen)
