"""Inferences produced by rule application.

An Inference is a concrete fact plus the name of the rule (and the
consequent atom) that produced it. Inferences are transient: the engine
never writes them back, callers decide whether to merge them into their
fact store.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, TypeVar

from .arguments import Literal
from .fact_store import DataPropertyAssertion, Fact

__all__ = [
    "Inference",
    "literal_values",
]

F = TypeVar("F")


@dataclass(frozen=True)
class Inference:
    """A materialized fact with its provenance.

    Attributes:
        fact: The instantiated assertion
        rule_name: Name of the rule that produced it
        atom: Canonical text of the consequent atom it was built from
    """

    fact: Fact
    rule_name: str
    atom: str = ""

    def __str__(self) -> str:
        return f"{self.fact} [{self.rule_name}]"

    def fact_as(self, kind: type[F]) -> F | None:
        """The fact if it has the expected shape, else None."""
        return self.fact if isinstance(self.fact, kind) else None


def literal_values(inferences: Iterable[Inference], prop: str) -> list[Literal]:
    """Collect literal values carried by a data-property consequent.

    Useful when a rule uses a synthetic property to hand a derived value
    back to the caller. Inferences of another shape or property are
    skipped.

    Args:
        inferences: Inferences returned by Rule.apply
        prop: The data property to read

    Returns:
        Literal values in inference order
    """
    values: list[Literal] = []
    for inference in inferences:
        fact = inference.fact_as(DataPropertyAssertion)
        if fact is not None and fact.property == prop:
            values.append(fact.value)
    return values
