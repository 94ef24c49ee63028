"""
Shared fixtures: literal in-memory configuration trees and a wired core
"""

import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from kgqa.config import Config
from kgqa.core import Core
from kgqa.model import (
    BuiltInModel,
    ClassEntity,
    Fact,
    InstanceEntity,
    PropertyEntity,
)
from kgqa.searcher import InMemorySearcher


def make_config_dict():
    return {
        "distributional-service": {
            "rest-url": "http://indra.test:8916",
            "corpus": "wiki-2014",
        },
        "kb": {
            "kb1": {
                "language": "en",
                "namespaces": {"dbr": "http://dbpedia.org/resource/"},
            },
        },
        "rules": {
            "syntatic-pattern": {
                "en": [
                    {"CLASS": [r"\b(?:king|kings|person|city)\b"]},
                    {"INSTANCE": [r"\b[A-Z][\w'-]*(?: [A-Z][\w'-]*)*\b"]},
                    {"PROPERTY": [r"\b(?:wife|husband|capital)\b"]},
                ],
                "pt": [
                    {"INSTANCE": [r"\b[A-Z]\w*\b"]},
                ],
            },
            "planner-pattern": {
                "en": [
                    {"PROPERTY_1 INSTANCE_1": ["INSTANCE_1 PROPERTY_1 ?VAR"]},
                    {"CLASS_1 PROPERTY_1 INSTANCE_1": ["?VAR is-a CLASS_1", "?VAR PROPERTY_1 INSTANCE_1"]},
                ],
            },
            "stop-pattern": {
                "en": [r"^(?i:who|what|which)\b", r"\b(?i:is|the|of)\b", r"[?]"],
            },
            "query-pattern": {
                "en": {
                    "WHO": [r"(?i)^who\s"],
                    "WHAT": [r"(?i)^what\s", r"(?i)^which\s"],
                },
            },
        },
    }


@pytest.fixture
def config_dict():
    return make_config_dict()


@pytest.fixture
def config():
    return Config.from_dict(make_config_dict())


@pytest.fixture
def obama():
    return InstanceEntity("dbr:Barack_Obama", "Barack Obama")


@pytest.fixture
def spouse():
    return PropertyEntity("dbo:spouse", "spouse", hypernyms=("partner",), synonyms=("wife", "husband"))


@pytest.fixture
def in_memory_searcher(obama, spouse):
    michelle = InstanceEntity("dbr:Michelle_Obama", "Michelle Obama")
    person = ClassEntity("dbo:Person", "Person")
    is_a = PropertyEntity("is-a", "is-a")
    birth_place = PropertyEntity("dbo:birthPlace", "birth place", synonyms=("born in",))

    return InMemorySearcher({
        BuiltInModel.ENTITY: [obama, michelle],
        BuiltInModel.PROPERTY: [spouse, birth_place],
        BuiltInModel.FACT: [
            Fact(obama, is_a, person),
            Fact(obama, spouse, michelle),
            Fact(michelle, spouse, obama),
            Fact(obama, birth_place, InstanceEntity("dbr:Honolulu", "Honolulu")),
        ],
    })


@pytest.fixture
def core(config, in_memory_searcher):
    return Core(config, searcher_factory=lambda core, kb_name: in_memory_searcher)
