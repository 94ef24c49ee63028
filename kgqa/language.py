"""
Supported Natural Languages
Closed set of languages used as the key for every rule lookup
"""

from enum import Enum

from .errors import ConfigurationError


class Language(str, Enum):
    """Languages the rule sets can be written for"""
    EN = "en"
    PT = "pt"
    DE = "de"
    FR = "fr"
    ES = "es"
    IT = "it"
    NL = "nl"

    @classmethod
    def from_key(cls, key: str) -> "Language":
        """
        Parse a configuration key (e.g. 'en', 'EN') into a Language

        Raises:
            ConfigurationError: If the key names no supported language
        """
        try:
            return cls(str(key).strip().lower())
        except ValueError:
            raise ConfigurationError(f"Unknown language '{key}'") from None
