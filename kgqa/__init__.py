"""
KGQA - Query understanding and search dispatch for knowledge-graph question answering
Rule-based question classification plus structured entity, class, instance, property and pivoted search
"""

__version__ = "1.0.0"

from .errors import (
    KGQAError,
    ConfigurationError,
    UnknownKnowledgeBaseError,
    UnsupportedLanguageError,
    BackendError,
    BackendUnavailableError,
    BackendQueryError,
    RankingError,
)
from .language import Language
from .patterns import DataModelType, QueryType, DataModelTypePattern, QueryPlanPattern, QueryTypePattern
from .config import Config, load_config
from .rules import Rules
from .query_classifier import QueryClassifier, QueryAnalysis
from .model import (
    BuiltInModel,
    KBId,
    Entity,
    InstanceEntity,
    ClassEntity,
    PropertyEntity,
    Fact,
    Score,
    Scores,
    SearchParams,
)
from .ranking import ParamsBuilder, RankingStrategy, StringRankParams, DistributionalRankParams
from .namespace import Namespace
from .searcher import Searcher, InMemorySearcher, ElasticSearcher
from .core import Core
from .entity_searcher import EntitySearcher

__all__ = [
    "KGQAError",
    "ConfigurationError",
    "UnknownKnowledgeBaseError",
    "UnsupportedLanguageError",
    "BackendError",
    "BackendUnavailableError",
    "BackendQueryError",
    "RankingError",
    "Language",
    "DataModelType",
    "QueryType",
    "DataModelTypePattern",
    "QueryPlanPattern",
    "QueryTypePattern",
    "Config",
    "load_config",
    "Rules",
    "QueryClassifier",
    "QueryAnalysis",
    "BuiltInModel",
    "KBId",
    "Entity",
    "InstanceEntity",
    "ClassEntity",
    "PropertyEntity",
    "Fact",
    "Score",
    "Scores",
    "SearchParams",
    "ParamsBuilder",
    "RankingStrategy",
    "StringRankParams",
    "DistributionalRankParams",
    "Namespace",
    "Searcher",
    "InMemorySearcher",
    "ElasticSearcher",
    "Core",
    "EntitySearcher",
]
