"""Knowledge module loader.

Knowledge modules are JSON documents (see swrlkit.schema.KnowledgeModule)
holding calibration declarations, ground facts and rules. The loader
validates them with pydantic, builds engine objects and loads them into
a fact store and a reasoner.

Example usage:
    from swrlkit.engine import InMemoryFactStore, RuleReasoner
    from swrlkit.engine.loader import KnowledgeLoader

    store = InMemoryFactStore()
    reasoner = RuleReasoner()
    KnowledgeLoader.load_modules(store, reasoner, ["family"])
    result = reasoner.reason(store)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from swrlkit.exceptions import KnowledgeModuleError, RuleConstructionError
from swrlkit.schema import (
    ArgumentSpec,
    AtomSpec,
    BuiltInSpec,
    DeclarationSpec,
    KnowledgeModule,
    LiteralSpec,
    RuleSpec,
)

from .arguments import Argument, Literal
from .atoms import (
    Atom,
    ClassAtom,
    DataPropertyAtom,
    DifferentIndividualsAtom,
    ObjectPropertyAtom,
    SameIndividualAtom,
    instantiate_atom,
)
from .builtins import BuiltIn, create_builtin
from .fact_store import Fact, InMemoryFactStore, ObjectInverseOf
from .rule import Rule

if TYPE_CHECKING:
    from .reasoner import RuleReasoner

__all__ = ["KnowledgeLoader", "KB_DIR"]

logger = logging.getLogger(__name__)

# Bundled knowledge modules
KB_DIR = Path(__file__).parent / "kb"


def _literal(spec: LiteralSpec) -> Literal:
    if spec.datatype is None:
        literal = Literal.of(spec.value)
        if spec.language is not None:
            return Literal(literal.value, literal.datatype, spec.language)
        return literal
    value = spec.value
    if isinstance(value, bool):
        value = "true" if value else "false"
    return Literal(str(value), spec.datatype, spec.language)


def _argument(spec: ArgumentSpec) -> Argument | str:
    if isinstance(spec, LiteralSpec):
        return _literal(spec)
    return spec


class KnowledgeLoader:
    """Loader for JSON knowledge modules.

    Modules are looked up by name in KB_DIR, or read from an explicit
    path with load_file. Parsed modules are cached by name.
    """

    # Cache for validated modules
    _cache: dict[str, KnowledgeModule] = {}

    @classmethod
    def available_modules(cls) -> list[str]:
        """List bundled knowledge modules.

        Returns:
            List of module names
        """
        if not KB_DIR.exists():
            return []
        return sorted(f.stem for f in KB_DIR.glob("*.json"))

    @classmethod
    def load_modules(
        cls,
        store: InMemoryFactStore,
        reasoner: "RuleReasoner",
        module_names: list[str],
    ) -> dict[str, int]:
        """Load bundled modules into a store and a reasoner.

        Missing modules are logged and counted as zero; invalid modules
        raise.

        Args:
            store: Store receiving declarations and facts
            reasoner: Reasoner receiving the rules
            module_names: Names of the modules to load

        Returns:
            Dict mapping module name to number of facts/rules loaded
        """
        stats = {}

        for name in module_names:
            path = KB_DIR / f"{name}.json"
            if not path.exists():
                logger.warning(
                    f"Knowledge module '{name}' not found. "
                    f"Available: {cls.available_modules()}"
                )
                stats[name] = 0
                continue
            module = cls._load_cached(name, path)
            stats[name] = cls.load_into(store, reasoner, module)
            logger.debug(f"Loaded knowledge module '{name}': {stats[name]} facts/rules")

        return stats

    @classmethod
    def load_file(cls, path: str | Path) -> KnowledgeModule:
        """Read and validate a module from a JSON file.

        Raises:
            KnowledgeModuleError: If the file is missing or invalid
        """
        path = Path(path)
        if not path.exists():
            raise KnowledgeModuleError(str(path), "file not found")
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise KnowledgeModuleError(str(path), f"invalid JSON ({exc})") from exc
        return cls.parse_module(data, source=str(path))

    @classmethod
    def parse_module(cls, data: dict[str, Any], source: str = "<dict>") -> KnowledgeModule:
        """Validate raw module data.

        Raises:
            KnowledgeModuleError: If the data does not fit the schema
        """
        try:
            return KnowledgeModule.model_validate(data)
        except ValidationError as exc:
            raise KnowledgeModuleError(source, str(exc)) from exc

    @classmethod
    def load_into(
        cls,
        store: InMemoryFactStore,
        reasoner: "RuleReasoner",
        module: KnowledgeModule,
    ) -> int:
        """Load a validated module.

        Every fact and rule is built before the store or the reasoner is
        touched, so a module that fails to build leaves both unchanged.

        Returns:
            Number of facts and rules loaded

        Raises:
            KnowledgeModuleError: If a fact, atom or built-in cannot be built
        """
        try:
            facts = [cls.build_fact(spec) for spec in module.facts]
            rules = [cls.build_rule(spec) for spec in module.rules]
        except RuleConstructionError as exc:
            raise KnowledgeModuleError(module.name or "<module>", str(exc)) from exc

        for declaration in module.declarations:
            cls._declare(store, declaration)
        for fact in facts:
            store.add_fact(fact)
        for rule in rules:
            reasoner.add_rule(rule)

        return len(facts) + len(rules)

    @classmethod
    def build_atom(cls, spec: AtomSpec) -> Atom:
        args = [_argument(a) for a in spec.arguments]
        if spec.kind == "class":
            return ClassAtom(spec.predicate, args[0])
        if spec.kind == "object":
            prop = ObjectInverseOf(spec.predicate) if spec.inverse else spec.predicate
            return ObjectPropertyAtom(prop, args[0], args[1])
        if spec.kind == "data":
            return DataPropertyAtom(spec.predicate, args[0], args[1])
        if spec.kind == "same":
            return SameIndividualAtom(args[0], args[1])
        return DifferentIndividualsAtom(args[0], args[1])

    @classmethod
    def build_fact(cls, spec: AtomSpec) -> Fact:
        fact = instantiate_atom(cls.build_atom(spec), {})
        if fact is None:
            raise KnowledgeModuleError(spec.kind, f"cannot build a fact from {spec}")
        return fact

    @classmethod
    def build_builtin(cls, spec: BuiltInSpec) -> BuiltIn:
        args = [_argument(a) for a in spec.arguments]
        options: dict[str, Any] = {}
        if spec.value is not None:
            options["value"] = spec.value
        if spec.flags:
            options["flags"] = spec.flags
        if spec.name.rsplit(":", 1)[-1] == "matches" and len(args) >= 2:
            # Pattern (and flags) are given as literal arguments
            pattern, *rest = args[1:]
            if rest and "flags" not in options:
                options["flags"] = str(rest[0])
            return create_builtin(spec.name, args[0], str(pattern), **options)
        return create_builtin(spec.name, *args, **options)

    @classmethod
    def build_rule(cls, spec: RuleSpec) -> Rule:
        return Rule.of(
            name=spec.name,
            antecedent=[cls.build_atom(a) for a in spec.antecedent],
            consequent=[cls.build_atom(a) for a in spec.consequent],
            builtins=[cls.build_builtin(b) for b in spec.builtins],
            description=spec.description,
        )

    @classmethod
    def clear_cache(cls) -> None:
        """Clear the module cache."""
        cls._cache.clear()

    @classmethod
    def get_module_info(cls, name: str) -> dict:
        """Get metadata about a bundled module."""
        module = cls._load_cached(name, KB_DIR / f"{name}.json")
        return {
            "name": module.name or name,
            "description": module.description,
            "declarations_count": len(module.declarations),
            "facts_count": len(module.facts),
            "rules_count": len(module.rules),
        }

    @classmethod
    def _load_cached(cls, name: str, path: Path) -> KnowledgeModule:
        if name not in cls._cache:
            cls._cache[name] = cls.load_file(path)
        return cls._cache[name]

    @staticmethod
    def _declare(store: InMemoryFactStore, declaration: DeclarationSpec) -> None:
        args = declaration.arguments
        if declaration.kind == "subclass":
            store.declare_subclass(args[0], args[1])
        elif declaration.kind == "equivalentClasses":
            store.declare_equivalent_classes(args[0], args[1])
        elif declaration.kind == "inverse":
            store.declare_inverse(args[0], args[1])
        elif declaration.kind == "symmetric":
            store.declare_symmetric(args[0])
        elif declaration.kind == "equivalentObjectProperties":
            store.declare_equivalent_object_properties(args[0], args[1])
        else:
            store.declare_equivalent_data_properties(args[0], args[1])
