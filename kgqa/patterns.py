"""
Rule Pattern Types
Immutable value objects pairing compiled regexes with semantic tags
"""

from dataclasses import dataclass
from enum import Enum
import re
from typing import Tuple


class DataModelType(str, Enum):
    """Semantic types a text span can be abstracted into"""
    ENTITY = "ENTITY"
    FACT = "FACT"
    PROPERTY = "PROPERTY"
    CLASS = "CLASS"
    INSTANCE = "INSTANCE"
    TYPE = "TYPE"
    OPERATION = "OPERATION"
    LITERAL = "LITERAL"


class QueryType(str, Enum):
    """Kinds of questions recognised by the query type rules"""
    WHO = "WHO"
    WHAT = "WHAT"
    WHEN = "WHEN"
    WHERE = "WHERE"
    WHICH = "WHICH"
    HOW_MANY = "HOW_MANY"
    ASK = "ASK"
    LIST = "LIST"
    SELECT = "SELECT"


@dataclass(frozen=True)
class DataModelTypePattern:
    """A regex whose matches are abstracted into a data model type"""
    pattern: re.Pattern
    model_type: DataModelType

    def __repr__(self) -> str:
        return f"DataModelTypePattern({self.model_type.value}: {self.pattern.pattern!r})"


@dataclass(frozen=True)
class QueryPlanPattern:
    """A named structured query template; triple patterns are applied in order"""
    plan_id: str
    triple_patterns: Tuple[str, ...]


@dataclass(frozen=True)
class QueryTypePattern:
    """A query type with every regex that signals it"""
    query_type: QueryType
    patterns: Tuple[re.Pattern, ...]

    def matches(self, text: str) -> bool:
        return any(p.search(text) for p in self.patterns)
