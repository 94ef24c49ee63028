"""
Hierarchical Configuration Tree
Read-only access to the nested rules.* / kb.* / distributional-service.* settings
"""

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union
import copy
import yaml
from loguru import logger

from config.settings import settings
from .errors import ConfigurationError


REFERENCE_CONFIG = Path(__file__).resolve().parent.parent / "config" / "reference.yaml"


class Config:
    """
    Read-only view over a nested mapping, addressed by dotted paths.

    Path segments may themselves contain dashes ("distributional-service.rest-url").
    Every accessor fails with ConfigurationError on missing keys or type mismatch.
    """

    def __init__(self, data: Optional[Mapping[str, Any]] = None, origin: str = "<memory>"):
        self._data = copy.deepcopy(dict(data or {}))
        self.origin = origin

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Config":
        return cls(data)

    def _lookup(self, path: str) -> Any:
        node: Any = self._data
        for segment in path.split("."):
            if not isinstance(node, Mapping) or segment not in node:
                raise ConfigurationError(f"Missing configuration key '{path}' ({self.origin})")
            node = node[segment]
        return node

    def has_path(self, path: str) -> bool:
        try:
            return self._lookup(path) is not None
        except ConfigurationError:
            return False

    def get(self, path: str, default: Any = None) -> Any:
        if not self.has_path(path):
            return default
        return copy.deepcopy(self._lookup(path))

    def get_string(self, path: str) -> str:
        value = self._lookup(path)
        if isinstance(value, (dict, list)) or value is None:
            raise ConfigurationError(f"Expected a string at '{path}', got {type(value).__name__}")
        return str(value)

    def get_list(self, path: str) -> List[Any]:
        value = self._lookup(path)
        if not isinstance(value, list):
            raise ConfigurationError(f"Expected a list at '{path}', got {type(value).__name__}")
        return copy.deepcopy(value)

    def get_mapping(self, path: str) -> Dict[str, Any]:
        value = self._lookup(path)
        if not isinstance(value, Mapping):
            raise ConfigurationError(f"Expected a mapping at '{path}', got {type(value).__name__}")
        return copy.deepcopy(dict(value))

    def get_config(self, path: str) -> "Config":
        return Config(self.get_mapping(path), origin=f"{self.origin}:{path}")

    def keys(self, path: Optional[str] = None) -> List[str]:
        node = self._data if path is None else self.get_mapping(path)
        return list(node.keys())

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._data)

    def __repr__(self) -> str:
        return f"Config(origin={self.origin!r}, keys={list(self._data)})"


def _apply_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay environment settings on the distributional-service section"""
    overrides = {
        "rest-url": settings.DISTRIBUTIONAL_SERVICE_URL,
        "corpus": settings.DISTRIBUTIONAL_SERVICE_CORPUS,
    }
    overrides = {k: v for k, v in overrides.items() if v}
    if overrides:
        section = data.setdefault("distributional-service", {})
        if not isinstance(section, dict):
            raise ConfigurationError("'distributional-service' must be a mapping")
        section.update(overrides)
        logger.debug(f"Applied distributional-service overrides: {sorted(overrides)}")
    return data


def load_config(path: Optional[Union[str, Path]] = None) -> Config:
    """
    Load the configuration tree from YAML

    Args:
        path: YAML file; defaults to settings.CONFIG_FILE, then the bundled reference.yaml

    Returns:
        Config tree with environment overrides applied

    Raises:
        ConfigurationError: If the file is missing, unparsable or not a mapping
    """
    config_path = Path(path or settings.CONFIG_FILE or REFERENCE_CONFIG)

    try:
        with open(config_path, encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except FileNotFoundError:
        raise ConfigurationError(f"Configuration file not found: {config_path}") from None
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Top level of {config_path} must be a mapping")

    logger.info(f"Loaded configuration from {config_path}")
    return Config(_apply_overrides(data), origin=str(config_path))
