"""Rule atoms: patterns that bind variables against the fact store.

Each atom kind is a frozen dataclass. Two functions dispatch on the kind:

- evaluate_atom: the atom's local binding table, one column per distinct
  variable, one row per fact consistent with its constant arguments
- instantiate_atom: the concrete fact obtained by substituting a row's
  bindings into the atom (used for consequent templates)

Constant arguments act as filters. A variable repeated inside the same
atom (e.g. ``knows(?x,?x)``) only matches facts where both positions
hold the same value.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Union

from swrlkit.exceptions import RuleConstructionError

from .arguments import (
    Argument,
    BindingValue,
    Individual,
    Literal,
    Variable,
    render,
    require,
    sort_key,
    to_argument,
    to_value_argument,
)
from .binding_table import BindingTable, Record
from .fact_store import (
    ClassAssertion,
    DataPropertyAssertion,
    DifferentIndividualsAssertion,
    Fact,
    FactStore,
    ObjectInverseOf,
    ObjectPropertyAssertion,
    ObjectPropertyExpression,
    SameIndividualAssertion,
)

__all__ = [
    "ClassAtom",
    "ObjectPropertyAtom",
    "DataPropertyAtom",
    "SameIndividualAtom",
    "DifferentIndividualsAtom",
    "Atom",
    "atom_variables",
    "evaluate_atom",
    "instantiate_atom",
]

logger = logging.getLogger(__name__)


def _argument(value: object, component: str, parameter: str, *allowed: type) -> Argument:
    """Validate and coerce one atom argument."""
    argument = to_argument(require(value, component, parameter))
    if not isinstance(argument, allowed):
        kinds = " or ".join(k.__name__.lower() for k in allowed)
        raise RuleConstructionError(component, parameter, f"must be a {kinds}")
    return argument


@dataclass(frozen=True)
class ClassAtom:
    """``Class(?x)``: membership of an individual in a class."""

    class_iri: str
    argument: Argument

    def __post_init__(self) -> None:
        require(self.class_iri, "class atom", "class_iri")
        object.__setattr__(
            self, "argument",
            _argument(self.argument, "class atom", "argument", Variable, Individual),
        )

    @property
    def arguments(self) -> tuple[Argument, ...]:
        return (self.argument,)

    def __str__(self) -> str:
        return f"{self.class_iri}({render(self.argument)})"


@dataclass(frozen=True)
class ObjectPropertyAtom:
    """``prop(?x,?y)``: an edge between two individuals."""

    property: ObjectPropertyExpression
    left: Argument
    right: Argument

    def __post_init__(self) -> None:
        require(self.property, "object property atom", "property")
        object.__setattr__(
            self, "left",
            _argument(self.left, "object property atom", "left", Variable, Individual),
        )
        object.__setattr__(
            self, "right",
            _argument(self.right, "object property atom", "right", Variable, Individual),
        )

    @property
    def arguments(self) -> tuple[Argument, ...]:
        return (self.left, self.right)

    def __str__(self) -> str:
        return f"{self.property}({render(self.left)},{render(self.right)})"


@dataclass(frozen=True)
class DataPropertyAtom:
    """``prop(?x,?v)``: an edge from an individual to a literal."""

    property: str
    left: Argument
    right: Argument

    def __post_init__(self) -> None:
        require(self.property, "data property atom", "property")
        object.__setattr__(
            self, "left",
            _argument(self.left, "data property atom", "left", Variable, Individual),
        )
        right = to_value_argument(require(self.right, "data property atom", "right"))
        object.__setattr__(
            self, "right",
            _argument(right, "data property atom", "right", Variable, Literal),
        )

    @property
    def arguments(self) -> tuple[Argument, ...]:
        return (self.left, self.right)

    def __str__(self) -> str:
        return f"{self.property}({render(self.left)},{render(self.right)})"


@dataclass(frozen=True)
class SameIndividualAtom:
    """``sameAs(?x,?y)``"""

    left: Argument
    right: Argument

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "left",
            _argument(self.left, "same individual atom", "left", Variable, Individual),
        )
        object.__setattr__(
            self, "right",
            _argument(self.right, "same individual atom", "right", Variable, Individual),
        )

    @property
    def arguments(self) -> tuple[Argument, ...]:
        return (self.left, self.right)

    def __str__(self) -> str:
        return f"sameAs({render(self.left)},{render(self.right)})"


@dataclass(frozen=True)
class DifferentIndividualsAtom:
    """``differentFrom(?x,?y)``"""

    left: Argument
    right: Argument

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "left",
            _argument(self.left, "different individuals atom", "left", Variable, Individual),
        )
        object.__setattr__(
            self, "right",
            _argument(self.right, "different individuals atom", "right", Variable, Individual),
        )

    @property
    def arguments(self) -> tuple[Argument, ...]:
        return (self.left, self.right)

    def __str__(self) -> str:
        return f"differentFrom({render(self.left)},{render(self.right)})"


Atom = Union[
    ClassAtom,
    ObjectPropertyAtom,
    DataPropertyAtom,
    SameIndividualAtom,
    DifferentIndividualsAtom,
]


def atom_variables(atom: Atom) -> list[str]:
    """Distinct variable names of an atom, in argument order."""
    names: list[str] = []
    for arg in atom.arguments:
        if isinstance(arg, Variable) and arg.name not in names:
            names.append(arg.name)
    return names


def _local_table(
    arguments: tuple[Argument, ...],
    candidates: Iterable[tuple[BindingValue, ...]],
) -> BindingTable:
    """Build an atom's local table from candidate fact tuples.

    Candidates are sorted so that the table does not depend on the
    iteration order of the store's sets.
    """
    columns: list[str] = []
    for arg in arguments:
        if isinstance(arg, Variable) and arg.name not in columns:
            columns.append(arg.name)

    rows: list[tuple[BindingValue, ...]] = []
    for values in sorted(candidates, key=lambda t: tuple(sort_key(v) for v in t)):
        bindings: dict[str, BindingValue] = {}
        consistent = True
        for arg, value in zip(arguments, values):
            if isinstance(arg, Variable):
                bound = bindings.setdefault(arg.name, value)
                if bound != value:
                    consistent = False
                    break
            elif arg != value:
                consistent = False
                break
        if consistent:
            rows.append(tuple(bindings[c] for c in columns))
    return BindingTable(columns, rows)


def evaluate_atom(atom: Atom, store: FactStore) -> BindingTable:
    """Evaluate an antecedent atom into its local binding table.

    Args:
        atom: The atom to evaluate
        store: Fact store to query (read only)

    Returns:
        BindingTable over the atom's variables
    """
    if isinstance(atom, ClassAtom):
        candidates = [(ind,) for ind in store.individuals_of_class(atom.class_iri)]
    elif isinstance(atom, ObjectPropertyAtom):
        candidates = list(store.object_property_edges(atom.property))
    elif isinstance(atom, DataPropertyAtom):
        candidates = list(store.data_property_edges(atom.property))
    elif isinstance(atom, SameIndividualAtom):
        candidates = list(store.same_individual_pairs())
    elif isinstance(atom, DifferentIndividualsAtom):
        candidates = list(store.different_individual_pairs())
    else:
        raise TypeError(f"Unsupported atom type: {type(atom).__name__}")

    table = _local_table(atom.arguments, candidates)
    logger.debug(f"Atom {atom} matched {len(table)} of {len(candidates)} facts")
    return table


def _resolve(argument: Argument, record: Record) -> BindingValue | None:
    if isinstance(argument, Variable):
        return record.get(argument.name)
    return argument


def instantiate_atom(atom: Atom, record: Record) -> Fact | None:
    """Substitute a row's bindings into a consequent atom.

    Returns None when a variable is unbound in the record or bound to a
    value of the wrong kind for its position (e.g. a literal where an
    individual is required); such rows produce no fact.
    """
    values = [_resolve(arg, record) for arg in atom.arguments]
    if any(v is None for v in values):
        return None

    if isinstance(atom, ClassAtom):
        (individual,) = values
        if isinstance(individual, Individual):
            return ClassAssertion(atom.class_iri, individual)
        return None

    if isinstance(atom, DataPropertyAtom):
        source, value = values
        if isinstance(source, Individual) and isinstance(value, Literal):
            return DataPropertyAssertion(atom.property, source, value)
        return None

    left, right = values
    if not (isinstance(left, Individual) and isinstance(right, Individual)):
        return None

    if isinstance(atom, ObjectPropertyAtom):
        if isinstance(atom.property, ObjectInverseOf):
            return ObjectPropertyAssertion(atom.property.property, right, left)
        return ObjectPropertyAssertion(atom.property, left, right)
    if isinstance(atom, SameIndividualAtom):
        return SameIndividualAssertion(left, right)
    if isinstance(atom, DifferentIndividualsAtom):
        return DifferentIndividualsAssertion(left, right)
    raise TypeError(f"Unsupported atom type: {type(atom).__name__}")
