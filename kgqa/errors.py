"""
Error Types
Every failure this package raises derives from KGQAError
"""

from typing import Any


class KGQAError(Exception):
    """Base class for query understanding and search dispatch errors"""


class ConfigurationError(KGQAError):
    """Malformed or missing configuration, raised while constructing components"""


class UnknownKnowledgeBaseError(ConfigurationError):
    """A knowledge base name with no configuration section"""

    def __init__(self, kb_name: str):
        super().__init__(f"Knowledge base '{kb_name}' is not configured")
        self.kb_name = kb_name


class UnsupportedLanguageError(KGQAError):
    """
    Raised when a rule collection has no entries for the requested language.

    Raised independently per collection: a language may be supported for
    data model type rules and still be unsupported for query plan rules.
    """

    def __init__(self, language: Any, collection: str = "rules"):
        super().__init__(f"Language '{language}' is not supported by {collection}")
        self.language = language
        self.collection = collection


class BackendError(KGQAError):
    """Failure of the search backend collaborator"""


class BackendUnavailableError(BackendError):
    """The search backend could not be reached"""


class BackendQueryError(BackendError):
    """The search backend rejected the query or answered with an unusable body"""


class RankingError(KGQAError):
    """Failure of a ranking strategy (e.g. distributional service unreachable)"""
