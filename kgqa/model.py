"""
Domain Model
Entries returned by the search backend, scores and search parameters
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional, Tuple


class BuiltInModel(str, Enum):
    """Index models a knowledge base is split into"""
    ENTITY = "entities"
    FACT = "facts"
    PROPERTY = "relations"


@dataclass(frozen=True)
class KBId:
    """A knowledge base name plus the model (index) addressed inside it"""
    name: str
    model: Optional[BuiltInModel] = None

    @property
    def index_name(self) -> str:
        if self.model is None:
            raise ValueError(f"Knowledge base '{self.name}' has no model selected")
        return f"{self.name}.{self.model.value}".lower()

    def __str__(self) -> str:
        return self.name if self.model is None else f"{self.name}.{self.model.value}"


@dataclass(frozen=True)
class Entity:
    """A labeled node of the knowledge graph"""
    id: str
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class InstanceEntity(Entity):
    pass


@dataclass(frozen=True)
class ClassEntity(Entity):
    complex: bool = False


@dataclass(frozen=True)
class PropertyEntity(Entity):
    """A predicate with its lexical variants"""
    hypernyms: Tuple[str, ...] = ()
    hyponyms: Tuple[str, ...] = ()
    synonyms: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Fact:
    """A subject-predicate-object triple"""
    subject: Entity
    predicate: PropertyEntity
    object: Entity


@dataclass
class Score:
    """An entry paired with a numeric relevance value"""
    entry: Any
    value: float = 0.0


class Scores(list):
    """Ordered sequence of Score"""

    def __init__(self, scores: Optional[Iterable[Score]] = None):
        super().__init__(scores or [])

    def entries(self) -> List[Any]:
        return [s.entry for s in self]

    def values(self) -> List[float]:
        return [s.value for s in self]

    def sorted(self, reverse: bool = True) -> "Scores":
        """Stable sort by value, highest first by default"""
        return Scores(sorted(self, key=lambda s: s.value, reverse=reverse))

    def top(self, k: int) -> "Scores":
        return Scores(self[:k])


@dataclass
class SearchParams:
    """
    Parameters of a single search.

    The caller provides the knowledge base and the search term; the model is
    set by the dispatcher according to the search strategy.
    """
    kb_name: str
    search_term: Optional[str] = None
    model: Optional[BuiltInModel] = None
    limit: Optional[int] = None

    @property
    def kb_id(self) -> KBId:
        return KBId(self.kb_name, self.model)

    def term(self, search_term: str) -> "SearchParams":
        self.search_term = search_term
        return self

    def with_model(self, model: BuiltInModel) -> "SearchParams":
        self.model = model
        return self
