"""Indexed fact storage with property calibration.

This module provides the fact base that rule atoms are evaluated
against. Facts are hashable assertions indexed by class or property.
Queries are answered over a calibrated view of the asserted facts:

- subclass declarations make members of a subclass members of its
  superclasses (transitively)
- inverse, symmetric and equivalent object properties contribute the
  appropriately oriented edges
- equivalent data properties share their edges

The engine only depends on the FactStore protocol; InMemoryFactStore
is the default implementation.
"""

from __future__ import annotations

import copy
from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable, Iterator, Protocol, Union

from .arguments import Individual, Literal, render

__all__ = [
    "ObjectInverseOf",
    "ObjectPropertyExpression",
    "ClassAssertion",
    "ObjectPropertyAssertion",
    "DataPropertyAssertion",
    "SameIndividualAssertion",
    "DifferentIndividualsAssertion",
    "Fact",
    "FactStore",
    "InMemoryFactStore",
]


@dataclass(frozen=True)
class ObjectInverseOf:
    """The inverse of a named object property."""

    property: str

    def __str__(self) -> str:
        return f"inverseOf({self.property})"


ObjectPropertyExpression = Union[str, ObjectInverseOf]


@dataclass(frozen=True)
class ClassAssertion:
    """Membership of an individual in a class."""

    class_iri: str
    individual: Individual

    def __str__(self) -> str:
        return f"{self.class_iri}({self.individual})"


@dataclass(frozen=True)
class ObjectPropertyAssertion:
    """An edge of an object property between two individuals."""

    property: str
    source: Individual
    target: Individual

    def __str__(self) -> str:
        return f"{self.property}({self.source},{self.target})"


@dataclass(frozen=True)
class DataPropertyAssertion:
    """An edge of a data property from an individual to a literal."""

    property: str
    source: Individual
    value: Literal

    def __str__(self) -> str:
        return f"{self.property}({self.source},{render(self.value)})"


@dataclass(frozen=True)
class SameIndividualAssertion:
    left: Individual
    right: Individual

    def __str__(self) -> str:
        return f"sameAs({self.left},{self.right})"


@dataclass(frozen=True)
class DifferentIndividualsAssertion:
    left: Individual
    right: Individual

    def __str__(self) -> str:
        return f"differentFrom({self.left},{self.right})"


Fact = Union[
    ClassAssertion,
    ObjectPropertyAssertion,
    DataPropertyAssertion,
    SameIndividualAssertion,
    DifferentIndividualsAssertion,
]


class FactStore(Protocol):
    """Read-only queries the rule engine issues against a fact base."""

    def individuals_of_class(self, class_iri: str) -> set[Individual]: ...

    def object_property_edges(
        self, prop: ObjectPropertyExpression
    ) -> set[tuple[Individual, Individual]]: ...

    def data_property_edges(self, prop: str) -> set[tuple[Individual, Literal]]: ...

    def same_individual_pairs(self) -> set[tuple[Individual, Individual]]: ...

    def different_individual_pairs(self) -> set[tuple[Individual, Individual]]: ...


def _individual(value: Individual | str) -> Individual:
    return value if isinstance(value, Individual) else Individual(value)


def _closure(start: str, graph: dict[str, set[str]]) -> set[str]:
    """All nodes reachable from start (start included)."""
    seen = {start}
    frontier = [start]
    while frontier:
        node = frontier.pop()
        for nxt in graph.get(node, ()):
            if nxt not in seen:
                seen.add(nxt)
                frontier.append(nxt)
    return seen


class InMemoryFactStore:
    """Indexed in-memory storage for ontology assertions.

    Supports lookup by:
    - Exact fact (set membership)
    - Class (individuals asserted or inferred to belong to it)
    - Object or data property (calibrated edge sets)

    The store is mutated only through the add_* and declare_* methods;
    rule evaluation never writes to it.
    """

    def __init__(self, facts: Iterable[Fact] = ()) -> None:
        """Initialize the store, optionally seeding it with facts."""
        # Primary storage
        self._facts: set[Fact] = set()

        # Indexes
        self._class_members: dict[str, set[Individual]] = defaultdict(set)
        self._object_edges: dict[str, set[tuple[Individual, Individual]]] = defaultdict(set)
        self._data_edges: dict[str, set[tuple[Individual, Literal]]] = defaultdict(set)
        self._same: set[tuple[Individual, Individual]] = set()
        self._different: set[tuple[Individual, Individual]] = set()

        # Calibration declarations
        self._superclass_to_subclasses: dict[str, set[str]] = defaultdict(set)
        self._inverses: dict[str, set[str]] = defaultdict(set)
        self._symmetric: set[str] = set()
        self._equivalent_object: dict[str, set[str]] = defaultdict(set)
        self._equivalent_data: dict[str, set[str]] = defaultdict(set)

        for fact in facts:
            self.add_fact(fact)

    # ------------------------------------------------------------------
    # Assertions
    # ------------------------------------------------------------------

    def add_fact(self, fact: Fact) -> bool:
        """Add a fact and index it.

        Args:
            fact: The assertion to add

        Returns:
            True if this is a new fact, False if it was already stored
        """
        if fact in self._facts:
            return False
        self._facts.add(fact)
        self._index_fact(fact)
        return True

    def add_class_assertion(self, class_iri: str, individual: Individual | str) -> bool:
        return self.add_fact(ClassAssertion(class_iri, _individual(individual)))

    def add_object_assertion(
        self,
        prop: ObjectPropertyExpression,
        source: Individual | str,
        target: Individual | str,
    ) -> bool:
        """Add an object property edge.

        An edge asserted through an inverse expression is stored as the
        reversed edge of the named property.
        """
        source, target = _individual(source), _individual(target)
        if isinstance(prop, ObjectInverseOf):
            return self.add_fact(ObjectPropertyAssertion(prop.property, target, source))
        return self.add_fact(ObjectPropertyAssertion(prop, source, target))

    def add_data_assertion(
        self, prop: str, source: Individual | str, value: Literal | object
    ) -> bool:
        return self.add_fact(
            DataPropertyAssertion(prop, _individual(source), Literal.of(value))
        )

    def add_same_individuals(self, left: Individual | str, right: Individual | str) -> bool:
        return self.add_fact(SameIndividualAssertion(_individual(left), _individual(right)))

    def add_different_individuals(
        self, left: Individual | str, right: Individual | str
    ) -> bool:
        return self.add_fact(
            DifferentIndividualsAssertion(_individual(left), _individual(right))
        )

    # ------------------------------------------------------------------
    # Calibration declarations
    # ------------------------------------------------------------------

    def declare_subclass(self, subclass: str, superclass: str) -> None:
        self._superclass_to_subclasses[superclass].add(subclass)

    def declare_equivalent_classes(self, left: str, right: str) -> None:
        self.declare_subclass(left, right)
        self.declare_subclass(right, left)

    def declare_inverse(self, prop: str, inverse: str) -> None:
        self._inverses[prop].add(inverse)
        self._inverses[inverse].add(prop)

    def declare_symmetric(self, prop: str) -> None:
        self._symmetric.add(prop)

    def declare_equivalent_object_properties(self, left: str, right: str) -> None:
        self._equivalent_object[left].add(right)
        self._equivalent_object[right].add(left)

    def declare_equivalent_data_properties(self, left: str, right: str) -> None:
        self._equivalent_data[left].add(right)
        self._equivalent_data[right].add(left)

    # ------------------------------------------------------------------
    # Queries (FactStore protocol)
    # ------------------------------------------------------------------

    def individuals_of_class(self, class_iri: str) -> set[Individual]:
        """Get individuals of a class, including members of its subclasses."""
        result: set[Individual] = set()
        for cls in _closure(class_iri, self._superclass_to_subclasses):
            result |= self._class_members.get(cls, set())
        return result

    def object_property_edges(
        self, prop: ObjectPropertyExpression
    ) -> set[tuple[Individual, Individual]]:
        """Get calibrated edges of an object property expression.

        Edges of equivalent properties are included, edges of inverse
        properties are reversed, and symmetric properties are read in
        both directions. An inverse expression yields the reversed edges
        of its named property.
        """
        if isinstance(prop, ObjectInverseOf):
            return {(t, s) for s, t in self.object_property_edges(prop.property)}

        equivalents = _closure(prop, self._equivalent_object)
        edges: set[tuple[Individual, Individual]] = set()
        for name in equivalents:
            edges |= self._object_edges.get(name, set())
            for inverse in self._inverses.get(name, ()):
                for equivalent_inverse in _closure(inverse, self._equivalent_object):
                    edges |= {
                        (t, s) for s, t in self._object_edges.get(equivalent_inverse, set())
                    }
        if equivalents & self._symmetric:
            edges |= {(t, s) for s, t in edges}
        return edges

    def data_property_edges(self, prop: str) -> set[tuple[Individual, Literal]]:
        edges: set[tuple[Individual, Literal]] = set()
        for name in _closure(prop, self._equivalent_data):
            edges |= self._data_edges.get(name, set())
        return edges

    def same_individual_pairs(self) -> set[tuple[Individual, Individual]]:
        return self._same | {(r, l) for l, r in self._same}

    def different_individual_pairs(self) -> set[tuple[Individual, Individual]]:
        return self._different | {(r, l) for l, r in self._different}

    # ------------------------------------------------------------------
    # Housekeeping
    # ------------------------------------------------------------------

    def contains(self, fact: Fact) -> bool:
        return fact in self._facts

    def entails(self, fact: Fact) -> bool:
        """Check a fact against the calibrated view of the store."""
        if isinstance(fact, ClassAssertion):
            return fact.individual in self.individuals_of_class(fact.class_iri)
        if isinstance(fact, ObjectPropertyAssertion):
            return (fact.source, fact.target) in self.object_property_edges(fact.property)
        if isinstance(fact, DataPropertyAssertion):
            return (fact.source, fact.value) in self.data_property_edges(fact.property)
        if isinstance(fact, SameIndividualAssertion):
            return (fact.left, fact.right) in self.same_individual_pairs()
        if isinstance(fact, DifferentIndividualsAssertion):
            return (fact.left, fact.right) in self.different_individual_pairs()
        return False

    def facts(self) -> Iterator[Fact]:
        """Iterate over all asserted facts."""
        return iter(self._facts)

    def size(self) -> int:
        return len(self._facts)

    def copy(self) -> "InMemoryFactStore":
        """Independent snapshot of facts and declarations."""
        return copy.deepcopy(self)

    def clear(self) -> None:
        """Remove all facts, keeping calibration declarations."""
        self._facts.clear()
        self._class_members.clear()
        self._object_edges.clear()
        self._data_edges.clear()
        self._same.clear()
        self._different.clear()

    def _index_fact(self, fact: Fact) -> None:
        if isinstance(fact, ClassAssertion):
            self._class_members[fact.class_iri].add(fact.individual)
        elif isinstance(fact, ObjectPropertyAssertion):
            self._object_edges[fact.property].add((fact.source, fact.target))
        elif isinstance(fact, DataPropertyAssertion):
            self._data_edges[fact.property].add((fact.source, fact.value))
        elif isinstance(fact, SameIndividualAssertion):
            self._same.add((fact.left, fact.right))
        elif isinstance(fact, DifferentIndividualsAssertion):
            self._different.add((fact.left, fact.right))
        else:
            raise TypeError(f"Unsupported fact type: {type(fact).__name__}")
