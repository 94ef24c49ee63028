"""
Namespace Handling
Shrinks full URIs into the prefixed identifiers stored in the index
"""

from typing import Dict, Mapping, Optional

from .errors import ConfigurationError


class Namespace:
    """
    Prefix map of a knowledge base, e.g. {"dbr": "http://dbpedia.org/resource/"}

    URIs outside every known namespace pass through unchanged.
    """

    def __init__(self, prefixes: Optional[Mapping[str, str]] = None):
        self.prefixes: Dict[str, str] = {}
        for prefix, uri in (prefixes or {}).items():
            if not isinstance(uri, str) or not uri:
                raise ConfigurationError(f"Namespace prefix '{prefix}' needs a non-empty URI")
            self.prefixes[str(prefix)] = uri

        # Longest namespace first so nested namespaces shrink to the most specific prefix
        self._by_length = sorted(self.prefixes.items(), key=lambda kv: len(kv[1]), reverse=True)

    def shrink_uri(self, uri: str) -> str:
        for prefix, namespace in self._by_length:
            if uri.startswith(namespace):
                return f"{prefix}:{uri[len(namespace):]}"
        return uri

    def expand_uri(self, identifier: str) -> str:
        prefix, sep, local = identifier.partition(":")
        if sep and prefix in self.prefixes:
            return self.prefixes[prefix] + local
        return identifier

    def __repr__(self) -> str:
        return f"Namespace({self.prefixes!r})"
