"""Rule arguments and the values they bind to.

An argument is either a Variable (a column of a binding table) or a
constant. Constants form a closed sum type:

    BindingValue = Individual | Literal

Individuals and literals never compare equal, and every built-in
inspects the variant before reading a value, so a column whose type
differs from row to row is handled row by row.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Union

from swrlkit.exceptions import RuleConstructionError

__all__ = [
    "XSD",
    "Variable",
    "Individual",
    "Literal",
    "BindingValue",
    "Argument",
    "to_argument",
    "to_value_argument",
    "require",
    "sort_key",
    "render",
]

logger = logging.getLogger(__name__)


class XSD:
    """XML Schema datatype IRIs understood by the engine."""

    NAMESPACE = "http://www.w3.org/2001/XMLSchema#"

    STRING = NAMESPACE + "string"
    NORMALIZED_STRING = NAMESPACE + "normalizedString"
    TOKEN = NAMESPACE + "token"
    ANY_URI = NAMESPACE + "anyURI"
    BOOLEAN = NAMESPACE + "boolean"
    DECIMAL = NAMESPACE + "decimal"
    DOUBLE = NAMESPACE + "double"
    FLOAT = NAMESPACE + "float"
    INTEGER = NAMESPACE + "integer"
    INT = NAMESPACE + "int"
    LONG = NAMESPACE + "long"
    SHORT = NAMESPACE + "short"
    BYTE = NAMESPACE + "byte"
    NON_NEGATIVE_INTEGER = NAMESPACE + "nonNegativeInteger"
    POSITIVE_INTEGER = NAMESPACE + "positiveInteger"
    NON_POSITIVE_INTEGER = NAMESPACE + "nonPositiveInteger"
    NEGATIVE_INTEGER = NAMESPACE + "negativeInteger"
    UNSIGNED_INT = NAMESPACE + "unsignedInt"
    UNSIGNED_LONG = NAMESPACE + "unsignedLong"
    DATE_TIME = NAMESPACE + "dateTime"

    STRINGS = frozenset({STRING, NORMALIZED_STRING, TOKEN, ANY_URI})
    INTEGERS = frozenset({
        INTEGER, INT, LONG, SHORT, BYTE,
        NON_NEGATIVE_INTEGER, POSITIVE_INTEGER,
        NON_POSITIVE_INTEGER, NEGATIVE_INTEGER,
        UNSIGNED_INT, UNSIGNED_LONG,
    })
    NUMERICS = INTEGERS | frozenset({DECIMAL, DOUBLE, FLOAT})

    @classmethod
    def expand(cls, datatype: str) -> str:
        """Expand an ``xsd:`` prefixed name to its full IRI."""
        if datatype.startswith("xsd:"):
            return cls.NAMESPACE + datatype[4:]
        return datatype


@dataclass(frozen=True)
class Variable:
    """A rule variable, rendered as ``?name``."""

    name: str

    def __post_init__(self) -> None:
        if self.name is None:
            raise RuleConstructionError("variable", "name")
        name = self.name[1:] if self.name.startswith("?") else self.name
        if not name:
            raise RuleConstructionError("variable", "name", "is empty")
        object.__setattr__(self, "name", name)

    def __str__(self) -> str:
        return f"?{self.name}"


@dataclass(frozen=True)
class Individual:
    """A named individual, identified by its IRI."""

    iri: str

    def __post_init__(self) -> None:
        if not self.iri:
            raise RuleConstructionError("individual", "iri")

    def __str__(self) -> str:
        return self.iri


@dataclass(frozen=True)
class Literal:
    """A typed (or language-tagged) literal value.

    The value is kept in its lexical form; typed views are computed on
    demand and return None when the lexical form does not fit the
    datatype.
    """

    value: str
    datatype: str = XSD.STRING
    language: str | None = field(default=None)

    def __post_init__(self) -> None:
        if self.value is None:
            raise RuleConstructionError("literal", "value")
        object.__setattr__(self, "value", str(self.value))
        object.__setattr__(self, "datatype", XSD.expand(self.datatype or XSD.STRING))

    @classmethod
    def of(cls, value: object) -> "Literal":
        """Build a literal from a Python value, picking the datatype."""
        if isinstance(value, Literal):
            return value
        if isinstance(value, bool):
            return cls("true" if value else "false", XSD.BOOLEAN)
        if isinstance(value, int):
            return cls(str(value), XSD.INTEGER)
        if isinstance(value, float):
            return cls(repr(value), XSD.DOUBLE)
        if isinstance(value, Decimal):
            return cls(str(value), XSD.DECIMAL)
        return cls(str(value), XSD.STRING)

    def __str__(self) -> str:
        return self.value

    def is_string(self) -> bool:
        """True for string-typed and language-tagged literals."""
        return self.language is not None or self.datatype in XSD.STRINGS

    def is_numeric(self) -> bool:
        return self.datatype in XSD.NUMERICS

    def is_boolean(self) -> bool:
        return self.datatype == XSD.BOOLEAN

    def as_number(self) -> float | None:
        """Numeric view of the literal, or None if it has none."""
        if not self.is_numeric():
            return None
        try:
            if self.datatype in XSD.INTEGERS:
                return float(int(self.value.strip()))
            if self.datatype == XSD.DECIMAL:
                return float(Decimal(self.value.strip()))
            return float(self.value.strip())
        except (ValueError, InvalidOperation, OverflowError):
            logger.debug(f"Literal '{self.value}' is not a valid {self.datatype}")
            return None

    def as_boolean(self) -> bool | None:
        if not self.is_boolean():
            return None
        return {"true": True, "1": True, "false": False, "0": False}.get(
            self.value.strip()
        )


BindingValue = Union[Individual, Literal]
Argument = Union[Variable, Individual, Literal]


def to_argument(value: object) -> Argument:
    """Coerce shorthand into an argument.

    Strings starting with ``?`` become variables, other strings become
    individuals; anything else that is not already an argument becomes a
    literal.
    """
    if isinstance(value, (Variable, Individual, Literal)):
        return value
    if isinstance(value, str):
        return Variable(value) if value.startswith("?") else Individual(value)
    return Literal.of(value)


def to_value_argument(value: object) -> Argument:
    """Coerce shorthand on a value side, where text means a string literal.

    Like to_argument, except that a bare string not starting with ``?``
    becomes a string literal instead of an individual.
    """
    if isinstance(value, str) and not value.startswith("?"):
        return Literal(value)
    return to_argument(value)


def require(value: object, component: str, parameter: str) -> object:
    """Fail fast on a missing required construction parameter."""
    if value is None:
        raise RuleConstructionError(component, parameter)
    return value


def sort_key(value: BindingValue) -> tuple:
    """Total order over binding values, used to keep tables deterministic."""
    if isinstance(value, Individual):
        return (0, value.iri, "", "")
    return (1, value.value, value.datatype, value.language or "")


def render(argument: Argument) -> str:
    """Canonical text of an argument: literals double-quoted, others bare.

    Backslashes and double quotes inside a literal are backslash-escaped.
    """
    if isinstance(argument, Literal):
        escaped = argument.value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return str(argument)
