"""Rules: antecedent patterns, built-in filters and consequent templates.

Represents:  atom1 ^ atom2 ^ ... ^ builtin1 ^ ... -> head1 ^ head2 ...

Applying a rule:
1. every antecedent atom is evaluated into a local binding table and
   natural-joined into the running table (starting from the unit table)
2. built-ins filter the joined table row by row
3. each surviving row is substituted into every consequent atom

Rules are immutable and never mutate the fact store, so the same rule
may be applied concurrently against any number of store snapshots.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Sequence

from swrlkit.exceptions import RuleConstructionError

from .arguments import require
from .atoms import Atom, atom_variables, evaluate_atom, instantiate_atom
from .binding_table import BindingTable
from .builtins import BuiltIn, builtin_variables, evaluate_builtin
from .fact_store import FactStore
from .inference import Inference

__all__ = [
    "Antecedent",
    "Consequent",
    "Rule",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Antecedent:
    """The "if" part of a rule: atoms joined in order, then built-ins.

    Attributes:
        atoms: Atoms to evaluate and join
        builtins: Built-ins applied to the joined table
    """

    atoms: tuple[Atom, ...] = ()
    builtins: tuple[BuiltIn, ...] = ()

    def __post_init__(self) -> None:
        require(self.atoms, "antecedent", "atoms")
        require(self.builtins, "antecedent", "builtins")
        object.__setattr__(self, "atoms", tuple(self.atoms))
        object.__setattr__(self, "builtins", tuple(self.builtins))
        for i, atom in enumerate(self.atoms):
            require(atom, "antecedent", f"atoms[{i}]")
        for i, builtin in enumerate(self.builtins):
            require(builtin, "antecedent", f"builtins[{i}]")

    def __str__(self) -> str:
        return " ^ ".join(str(part) for part in (*self.atoms, *self.builtins))

    def variables(self) -> list[str]:
        """Variables bound by the antecedent atoms, in first-use order."""
        names: list[str] = []
        for atom in self.atoms:
            for name in atom_variables(atom):
                if name not in names:
                    names.append(name)
        return names

    def evaluate(self, store: FactStore) -> BindingTable:
        """Evaluate into the final binding table.

        Stops as soon as a join or filter leaves no rows; the returned
        table is then empty.

        Args:
            store: Fact store to read

        Returns:
            BindingTable over the antecedent variables
        """
        table = BindingTable.unit()
        for atom in self.atoms:
            table = table.natural_join(evaluate_atom(atom, store))
            if table.is_empty():
                logger.debug(f"No bindings left after atom {atom}")
                return table

        for builtin in self.builtins:
            table = evaluate_builtin(builtin, table)
            if table.is_empty():
                logger.debug(f"No bindings left after built-in {builtin}")
                return table

        return table


@dataclass(frozen=True)
class Consequent:
    """The "then" part of a rule: atom templates to instantiate."""

    atoms: tuple[Atom, ...]

    def __post_init__(self) -> None:
        require(self.atoms, "consequent", "atoms")
        object.__setattr__(self, "atoms", tuple(self.atoms))
        if not self.atoms:
            raise RuleConstructionError("consequent", "atoms", "is empty")
        for i, atom in enumerate(self.atoms):
            require(atom, "consequent", f"atoms[{i}]")

    def __str__(self) -> str:
        return " ^ ".join(str(atom) for atom in self.atoms)

    def variables(self) -> list[str]:
        names: list[str] = []
        for atom in self.atoms:
            for name in atom_variables(atom):
                if name not in names:
                    names.append(name)
        return names

    def materialize(self, table: BindingTable, rule_name: str) -> list[Inference]:
        """Instantiate every atom template for every row.

        Rows whose values do not fit a template position yield no fact
        for that template.
        """
        inferences: list[Inference] = []
        templates = [(atom, str(atom)) for atom in self.atoms]
        for record in table.records():
            for atom, atom_text in templates:
                fact = instantiate_atom(atom, record)
                if fact is not None:
                    inferences.append(Inference(fact, rule_name, atom_text))
        return inferences


@dataclass(frozen=True)
class Rule:
    """A named rule.

    Every variable used by the consequent or by a built-in must be bound
    by some antecedent atom; otherwise construction fails.

    Attributes:
        name: Rule name, copied into every inference
        antecedent: Atoms and built-ins to evaluate
        consequent: Templates to instantiate
        description: Optional human-readable description
    """

    name: str
    antecedent: Antecedent
    consequent: Consequent
    description: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        require(self.name, "rule", "name")
        require(self.antecedent, "rule", "antecedent")
        require(self.consequent, "rule", "consequent")

        bound = set(self.antecedent.variables())
        for builtin in self.antecedent.builtins:
            unbound = [v for v in builtin_variables(builtin) if v not in bound]
            if unbound:
                raise RuleConstructionError(
                    "rule", "antecedent",
                    f"has built-in {builtin} using unbound variables {_names(unbound)}",
                )
        unbound = [v for v in self.consequent.variables() if v not in bound]
        if unbound:
            raise RuleConstructionError(
                "rule", "consequent", f"uses unbound variables {_names(unbound)}"
            )

    @classmethod
    def of(
        cls,
        name: str,
        antecedent: Sequence[Atom],
        consequent: Sequence[Atom],
        builtins: Sequence[BuiltIn] = (),
        description: str = "",
    ) -> "Rule":
        """Build a rule from plain atom and built-in lists."""
        return cls(
            name=name,
            antecedent=Antecedent(tuple(antecedent), tuple(builtins)),
            consequent=Consequent(tuple(consequent)),
            description=description,
        )

    def __str__(self) -> str:
        return f"{self.antecedent} -> {self.consequent}"

    def apply(self, store: FactStore) -> list[Inference]:
        """Apply the rule to a fact store.

        Deterministic for a fixed store snapshot; the store is not
        modified.

        Args:
            store: Fact store to read

        Returns:
            One inference per (surviving row, consequent atom) pair
        """
        table = self.antecedent.evaluate(store)
        if table.is_empty():
            logger.debug(f"Rule {self.name}: no bindings, nothing inferred")
            return []

        inferences = self.consequent.materialize(table, self.name)
        logger.debug(
            f"Rule {self.name}: {len(table)} binding rows -> {len(inferences)} inferences"
        )
        return inferences

    async def apply_async(self, store: FactStore) -> list[Inference]:
        """Apply the rule in a worker thread, for async callers."""
        return await asyncio.to_thread(self.apply, store)


def _names(variables: list[str]) -> str:
    return ", ".join(f"?{v}" for v in variables)
