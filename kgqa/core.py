"""
Core Wiring
Process-wide access to configuration, knowledge bases, namespaces, searchers and rules
"""

from typing import Callable, Dict, Optional
from loguru import logger

from .config import Config, load_config
from .errors import ConfigurationError, UnknownKnowledgeBaseError
from .language import Language
from .namespace import Namespace
from .rules import Rules
from .searcher import ElasticSearcher, Searcher


KB_SECTION = "kb"
DISTRIBUTIONAL_KEYS = ("distributional-service.rest-url", "distributional-service.corpus")

SearcherFactory = Callable[["Core", str], Searcher]


def default_searcher_factory(core: "Core", kb_name: str) -> Searcher:
    return ElasticSearcher()


class Core:
    """
    Holds everything built once at startup.

    Required keys are validated eagerly: the distributional service url and
    corpus, and a language for every kb.<name>. Nothing is mutated after
    construction.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        searcher_factory: Optional[SearcherFactory] = None,
        rules: Optional[Rules] = None,
    ):
        self.config = config if config is not None else load_config()
        self.searcher_factory = searcher_factory or default_searcher_factory

        # read again on every search; only checked here
        for key in DISTRIBUTIONAL_KEYS:
            value = self.config.get(key)
            if not isinstance(value, str) or not value:
                raise ConfigurationError(f"Required configuration key '{key}' must be a non-empty string")

        self._kb_configs: Dict[str, Config] = {}
        self._namespaces: Dict[str, Namespace] = {}
        self._languages: Dict[str, Language] = {}

        for kb_name in self.config.keys(KB_SECTION) if self.config.has_path(KB_SECTION) else []:
            kb_config = self.config.get_config(f"{KB_SECTION}.{kb_name}")
            if not kb_config.has_path("language"):
                raise ConfigurationError(f"Knowledge base '{kb_name}' has no 'language'")
            self._languages[kb_name] = Language.from_key(kb_config.get_string("language"))
            self._namespaces[kb_name] = Namespace(kb_config.get("namespaces", {}))
            self._kb_configs[kb_name] = kb_config

        self.rules = rules if rules is not None else Rules(self.config)

        logger.info(f"Core initialized with knowledge bases: {list(self._kb_configs)}")

    def get_config(self) -> Config:
        return self.config

    def get_kb_config(self, kb_name: str) -> Config:
        if kb_name not in self._kb_configs:
            raise UnknownKnowledgeBaseError(kb_name)
        return self._kb_configs[kb_name]

    def get_language(self, kb_name: str) -> Language:
        self.get_kb_config(kb_name)
        return self._languages[kb_name]

    def get_namespace(self, kb_name: str) -> Namespace:
        self.get_kb_config(kb_name)
        return self._namespaces[kb_name]

    def get_searcher(self, kb_name: str) -> Searcher:
        self.get_kb_config(kb_name)
        return self.searcher_factory(self, kb_name)

    def get_rules(self) -> Rules:
        return self.rules

    @property
    def kb_names(self):
        return list(self._kb_configs)
