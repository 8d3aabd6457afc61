"""Pydantic models for reasoner configuration and knowledge modules.

A knowledge module is a JSON document bundling calibration declarations,
ground facts and rules. Arguments are written as strings (``"?x"`` for a
variable, anything else for an individual) or as literal objects.

Example module (JSON):
    {
        "name": "family",
        "declarations": [
            {"kind": "inverse", "arguments": ["ex:hasParent", "ex:hasChild"]}
        ],
        "facts": [
            {"kind": "class", "predicate": "ex:Person", "arguments": ["ex:alice"]},
            {"kind": "data", "predicate": "ex:age",
             "arguments": ["ex:alice", {"value": 34}]}
        ],
        "rules": [
            {
                "name": "adult",
                "antecedent": [
                    {"kind": "class", "predicate": "ex:Person", "arguments": ["?p"]},
                    {"kind": "data", "predicate": "ex:age", "arguments": ["?p", "?a"]}
                ],
                "builtins": [
                    {"name": "greaterThanOrEqual", "arguments": ["?a", {"value": 18}]}
                ],
                "consequent": [
                    {"kind": "class", "predicate": "ex:Adult", "arguments": ["?p"]}
                ]
            }
        ]
    }
"""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, Field, field_validator, model_validator

__all__ = [
    "ReasonerConfig",
    "LiteralSpec",
    "ArgumentSpec",
    "AtomSpec",
    "BuiltInSpec",
    "RuleSpec",
    "DeclarationSpec",
    "KnowledgeModule",
]


class ReasonerConfig(BaseModel):
    """Settings of the RuleReasoner."""

    max_iterations: int = Field(
        default=16,
        ge=1,
        description="Maximum rounds of rule application before stopping",
    )
    max_concurrency: int = Field(
        default=4,
        ge=1,
        description="Rule applications allowed to run at once in async batches",
    )
    include_asserted: bool = Field(
        default=False,
        description="Report inferences whose fact the input store already entails",
    )


class LiteralSpec(BaseModel):
    """A literal argument or fact value."""

    value: Union[bool, int, float, str]
    datatype: str | None = Field(
        default=None,
        description="Datatype IRI or xsd: name; inferred from value when omitted",
    )
    language: str | None = None


ArgumentSpec = Union[str, LiteralSpec]

AtomKind = Literal["class", "object", "data", "same", "different"]

_ARITY: dict[str, int] = {
    "class": 1,
    "object": 2,
    "data": 2,
    "same": 2,
    "different": 2,
}


class AtomSpec(BaseModel):
    """An atom (in a rule) or a fact (when all arguments are constants)."""

    kind: AtomKind
    predicate: str | None = Field(
        default=None,
        description="Class or property IRI; unused for same/different",
    )
    inverse: bool = Field(
        default=False,
        description="Read an object property in the inverse direction",
    )
    arguments: list[ArgumentSpec]

    @model_validator(mode="after")
    def check_shape(self) -> "AtomSpec":
        expected = _ARITY[self.kind]
        if len(self.arguments) != expected:
            raise ValueError(
                f"{self.kind} atom takes {expected} argument(s), got {len(self.arguments)}"
            )
        if self.kind in ("class", "object", "data") and not self.predicate:
            raise ValueError(f"{self.kind} atom requires a predicate")
        if self.inverse and self.kind != "object":
            raise ValueError("only object atoms can be inverse")
        return self


class BuiltInSpec(BaseModel):
    """A built-in call, by swrlb local name."""

    name: str
    arguments: list[ArgumentSpec] = Field(min_length=1)
    value: Union[int, float] | None = Field(
        default=None,
        description="Operand of add/subtract/multiply/divide/pow",
    )
    flags: str = Field(default="", description="Regex flags for matches (i, s, m, x)")


class RuleSpec(BaseModel):
    """A rule document."""

    name: str = Field(..., min_length=1)
    description: str = ""
    antecedent: list[AtomSpec] = Field(default_factory=list)
    builtins: list[BuiltInSpec] = Field(default_factory=list)
    consequent: list[AtomSpec] = Field(..., min_length=1)


DeclarationKind = Literal[
    "subclass",
    "equivalentClasses",
    "inverse",
    "symmetric",
    "equivalentObjectProperties",
    "equivalentDataProperties",
]


class DeclarationSpec(BaseModel):
    """A calibration declaration for the fact store."""

    kind: DeclarationKind
    arguments: list[str]

    @model_validator(mode="after")
    def check_arity(self) -> "DeclarationSpec":
        expected = 1 if self.kind == "symmetric" else 2
        if len(self.arguments) != expected:
            raise ValueError(
                f"{self.kind} declaration takes {expected} argument(s), "
                f"got {len(self.arguments)}"
            )
        return self


class KnowledgeModule(BaseModel):
    """A loadable bundle of declarations, facts and rules."""

    name: str = ""
    description: str = ""
    declarations: list[DeclarationSpec] = Field(default_factory=list)
    facts: list[AtomSpec] = Field(default_factory=list)
    rules: list[RuleSpec] = Field(default_factory=list)

    @field_validator("facts")
    @classmethod
    def facts_are_ground(cls, v: list[AtomSpec]) -> list[AtomSpec]:
        for fact in v:
            for arg in fact.arguments:
                if isinstance(arg, str) and arg.startswith("?"):
                    raise ValueError(f"Fact arguments must be constants, got variable {arg}")
        return v
