"""swrlkit: forward-chaining rule evaluation for ontology fact bases.

The engine lives in swrlkit.engine; swrlkit.schema holds the pydantic
models for reasoner configuration and JSON knowledge modules.
"""

from swrlkit.exceptions import (
    SwrlError,
    RuleConstructionError,
    KnowledgeModuleError,
)
from swrlkit.schema import ReasonerConfig, KnowledgeModule
from swrlkit.engine import (
    Variable,
    Individual,
    Literal,
    InMemoryFactStore,
    ClassAtom,
    ObjectPropertyAtom,
    DataPropertyAtom,
    Rule,
    Inference,
    RuleReasoner,
    KnowledgeLoader,
)

__version__ = "0.1.0"

__all__ = [
    "SwrlError",
    "RuleConstructionError",
    "KnowledgeModuleError",
    "ReasonerConfig",
    "KnowledgeModule",
    "Variable",
    "Individual",
    "Literal",
    "InMemoryFactStore",
    "ClassAtom",
    "ObjectPropertyAtom",
    "DataPropertyAtom",
    "Rule",
    "Inference",
    "RuleReasoner",
    "KnowledgeLoader",
]
