"""Built-in predicates evaluated over binding tables.

Built-ins run strictly after all antecedent atoms have been joined. Each
one is checked row by row and only ever removes rows, so the result of
evaluate_builtin is always a subset of its input table.

Kinds:
- ComparisonBuiltIn: equal, notEqual, lessThan, lessThanOrEqual,
  greaterThan, greaterThanOrEqual
- StringBuiltIn: contains, containsIgnoreCase, startsWith, endsWith,
  stringEqualIgnoreCase
- MatchesBuiltIn: matches (regular expression with optional ``ismx`` flags)
- MathBuiltIn: left == f(right[, operand]) for abs, add, subtract,
  multiply, divide, pow, ceiling, floor, round, roundHalfToEven,
  sin, cos, tan
- StringDerivationBuiltIn: left == f(right, ...) for stringLength,
  upperCase, lowerCase, substring, substringAfter, substringBefore,
  replace

A row whose bound values do not fit the built-in (a numeric literal fed
to a string test, an individual compared with a literal, an unparsable
number, ...) does not satisfy it and is dropped. Missing or malformed
construction parameters raise RuleConstructionError immediately, whether
the built-in is created through a factory function or its class.

Every built-in renders canonically as ``name(arg1,arg2,...)``, with
literal arguments double-quoted:

    >>> str(matches("?L", "val"))
    'matches(?L,"val")'
    >>> str(matches("?C", "iv2$", "mi"))
    'matches(?C,"iv2$","im")'
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Callable, Mapping, NamedTuple, Union

from swrlkit.exceptions import RuleConstructionError

from .arguments import (
    Argument,
    BindingValue,
    Individual,
    Literal,
    Variable,
    render,
    require,
    to_argument,
    to_value_argument,
)
from .binding_table import BindingTable, Record

__all__ = [
    "ComparisonBuiltIn",
    "StringBuiltIn",
    "MatchesBuiltIn",
    "MathBuiltIn",
    "StringDerivationBuiltIn",
    "BuiltIn",
    "REGEX_FLAGS",
    "BUILTIN_FACTORIES",
    "builtin_variables",
    "evaluate_builtin",
    "create_builtin",
    # Comparison
    "equal",
    "not_equal",
    "less_than",
    "less_than_or_equal",
    "greater_than",
    "greater_than_or_equal",
    # String
    "contains",
    "contains_ignore_case",
    "starts_with",
    "ends_with",
    "string_equal_ignore_case",
    "matches",
    # Math
    "abs_",
    "add",
    "subtract",
    "multiply",
    "divide",
    "pow_",
    "ceiling",
    "floor",
    "round_",
    "round_half_to_even",
    "sin",
    "cos",
    "tan",
    # String derivations
    "string_length",
    "upper_case",
    "lower_case",
    "substring",
    "substring_after",
    "substring_before",
    "replace",
]

logger = logging.getLogger(__name__)

# Regex flag letters, in canonical rendering order
REGEX_FLAGS: dict[str, re.RegexFlag] = {
    "i": re.IGNORECASE,
    "s": re.DOTALL,
    "m": re.MULTILINE,
    "x": re.VERBOSE,
}

_COMPARISONS = {
    "equal": lambda c: c == 0,
    "notEqual": lambda c: c != 0,
    "lessThan": lambda c: c < 0,
    "lessThanOrEqual": lambda c: c <= 0,
    "greaterThan": lambda c: c > 0,
    "greaterThanOrEqual": lambda c: c >= 0,
}

_STRING_TESTS: dict[str, Callable[[str, str], bool]] = {
    "contains": lambda a, b: b in a,
    "containsIgnoreCase": lambda a, b: b.casefold() in a.casefold(),
    "startsWith": lambda a, b: a.startswith(b),
    "endsWith": lambda a, b: a.endswith(b),
    "stringEqualIgnoreCase": lambda a, b: a.casefold() == b.casefold(),
}


def _round_half_up(x: float) -> float:
    return float(math.floor(x + 0.5))


# name -> (function, takes operand)
_MATH: dict[str, tuple[Callable[..., float], bool]] = {
    "abs": (lambda x: abs(x), False),
    "add": (lambda x, v: x + v, True),
    "subtract": (lambda x, v: x - v, True),
    "multiply": (lambda x, v: x * v, True),
    "divide": (lambda x, v: x / v, True),
    "pow": (lambda x, v: math.pow(x, v), True),
    "ceiling": (lambda x: float(math.ceil(x)), False),
    "floor": (lambda x: float(math.floor(x)), False),
    "round": (_round_half_up, False),
    "roundHalfToEven": (lambda x: float(round(x)), False),
    "sin": (math.sin, False),
    "cos": (math.cos, False),
    "tan": (math.tan, False),
}


def _substring(text: str, start: float, length: float | None = None) -> str:
    """Zero-based substring; ValueError when the bounds do not fit."""
    if not float(start).is_integer() or (length is not None and not float(length).is_integer()):
        raise ValueError("substring bounds must be integral")
    begin = int(start)
    end = len(text) if length is None else begin + int(length)
    if begin < 0 or end < begin or end > len(text):
        raise ValueError(f"substring [{begin}:{end}] out of range for length {len(text)}")
    return text[begin:end]


def _substring_after(text: str, separator: str) -> str:
    if not separator:
        return ""
    _, found, tail = text.partition(separator)
    return tail if found else ""


def _substring_before(text: str, separator: str) -> str:
    if not separator:
        return ""
    head, found, _ = text.partition(separator)
    return head if found else ""


def _replace(text: str, pattern: str, replacement: str) -> str:
    return re.sub(pattern, replacement, text)


class _Derivation(NamedTuple):
    function: Callable[..., object]
    parameters: tuple[str, ...]  # extra arguments after the source
    required: int  # how many of them are mandatory
    numeric: bool  # extras are numbers (else text)


_DERIVATIONS: dict[str, _Derivation] = {
    "stringLength": _Derivation(len, (), 0, False),
    "upperCase": _Derivation(str.upper, (), 0, False),
    "lowerCase": _Derivation(str.lower, (), 0, False),
    "substring": _Derivation(_substring, ("start", "length"), 1, True),
    "substringAfter": _Derivation(_substring_after, ("separator",), 1, False),
    "substringBefore": _Derivation(_substring_before, ("separator",), 1, False),
    "replace": _Derivation(_replace, ("pattern", "replacement"), 2, False),
}


def _check_name(name: str, known: Mapping[str, object], component: str) -> None:
    require(name, component, "name")
    if name not in known:
        raise RuleConstructionError(
            component, "name", f"'{name}' is not one of {', '.join(known)}"
        )


def _builtin_argument(
    value: object, name: str, parameter: str, text: bool = False
) -> Argument:
    """Validate and coerce a built-in argument.

    With ``text`` set, a bare string is a string literal rather than an
    individual IRI.
    """
    value = require(value, f"{name} built-in", parameter)
    return to_value_argument(value) if text else to_argument(value)


def _canonical(name: str, arguments: tuple[Argument, ...]) -> str:
    return f"{name}({','.join(render(a) for a in arguments)})"


@dataclass(frozen=True)
class ComparisonBuiltIn:
    """Ordering or (in)equality test between two arguments."""

    name: str
    left: Argument
    right: Argument

    def __post_init__(self) -> None:
        _check_name(self.name, _COMPARISONS, "comparison built-in")
        object.__setattr__(self, "left", _builtin_argument(self.left, self.name, "left"))
        object.__setattr__(self, "right", _builtin_argument(self.right, self.name, "right"))

    @property
    def arguments(self) -> tuple[Argument, ...]:
        return (self.left, self.right)

    def to_canonical_string(self) -> str:
        return _canonical(self.name, self.arguments)

    def __str__(self) -> str:
        return self.to_canonical_string()


@dataclass(frozen=True)
class StringBuiltIn:
    """Substring/prefix/suffix/case-insensitive test over two strings."""

    name: str
    left: Argument
    right: Argument

    def __post_init__(self) -> None:
        _check_name(self.name, _STRING_TESTS, "string built-in")
        object.__setattr__(
            self, "left", _builtin_argument(self.left, self.name, "left", text=True)
        )
        object.__setattr__(
            self, "right", _builtin_argument(self.right, self.name, "right", text=True)
        )

    @property
    def arguments(self) -> tuple[Argument, ...]:
        return (self.left, self.right)

    def to_canonical_string(self) -> str:
        return _canonical(self.name, self.arguments)

    def __str__(self) -> str:
        return self.to_canonical_string()


@dataclass(frozen=True)
class MatchesBuiltIn:
    """Regular-expression test of a text argument against a fixed pattern.

    Flags are kept as the concatenation of their letters in ``ismx``
    order and rendered as a trailing quoted argument when present.
    """

    text: Argument
    pattern: str
    flags: str = ""
    compiled: re.Pattern = field(init=False, repr=False, compare=False)

    name = "matches"

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "text", _builtin_argument(self.text, self.name, "text")
        )
        require(self.pattern, "matches built-in", "pattern")
        unknown = set(self.flags) - set(REGEX_FLAGS)
        if unknown:
            raise RuleConstructionError(
                "matches built-in", "flags", f"contains unknown flags {sorted(unknown)}"
            )
        flags = "".join(f for f in REGEX_FLAGS if f in self.flags)
        object.__setattr__(self, "flags", flags)

        re_flags = re.RegexFlag(0)
        for letter in flags:
            re_flags |= REGEX_FLAGS[letter]
        try:
            compiled = re.compile(self.pattern, re_flags)
        except re.error as exc:
            raise RuleConstructionError(
                "matches built-in", "pattern", f"is not a valid regular expression ({exc})"
            ) from exc
        object.__setattr__(self, "compiled", compiled)

    @property
    def arguments(self) -> tuple[Argument, ...]:
        args: tuple[Argument, ...] = (self.text, Literal(self.pattern))
        if self.flags:
            args += (Literal(self.flags),)
        return args

    def to_canonical_string(self) -> str:
        return _canonical(self.name, self.arguments)

    def __str__(self) -> str:
        return self.to_canonical_string()


@dataclass(frozen=True)
class MathBuiltIn:
    """Numeric relation ``left == f(right[, operand])``.

    add, subtract, multiply, divide and pow require a numeric operand
    (a zero divisor is rejected); the other functions take none.
    """

    name: str
    left: Argument
    right: Argument
    operand: Literal | None = None

    def __post_init__(self) -> None:
        _check_name(self.name, _MATH, "math built-in")
        object.__setattr__(self, "left", _builtin_argument(self.left, self.name, "left"))
        object.__setattr__(self, "right", _builtin_argument(self.right, self.name, "right"))

        component = f"{self.name} built-in"
        _, takes_operand = _MATH[self.name]
        if not takes_operand:
            if self.operand is not None:
                raise RuleConstructionError(component, "value", "is not accepted")
            return

        operand = Literal.of(require(self.operand, component, "value"))
        number = operand.as_number()
        if number is None:
            raise RuleConstructionError(component, "value", "is not numeric")
        if self.name == "divide" and number == 0:
            raise RuleConstructionError(component, "value", "is zero")
        object.__setattr__(self, "operand", operand)

    @property
    def arguments(self) -> tuple[Argument, ...]:
        args: tuple[Argument, ...] = (self.left, self.right)
        if self.operand is not None:
            args += (self.operand,)
        return args

    def to_canonical_string(self) -> str:
        return _canonical(self.name, self.arguments)

    def __str__(self) -> str:
        return self.to_canonical_string()


@dataclass(frozen=True)
class StringDerivationBuiltIn:
    """String relation ``left == f(right, *extra)``.

    ``extra`` holds the further arguments of substring (start, length),
    substringAfter/substringBefore (separator) and replace (pattern,
    replacement).
    """

    name: str
    left: Argument
    right: Argument
    extra: tuple[Argument, ...] = ()

    def __post_init__(self) -> None:
        _check_name(self.name, _DERIVATIONS, "string built-in")
        object.__setattr__(
            self, "left", _builtin_argument(self.left, self.name, "left", text=True)
        )
        object.__setattr__(
            self, "right", _builtin_argument(self.right, self.name, "right", text=True)
        )

        derivation = _DERIVATIONS[self.name]
        extra = tuple(require(self.extra, f"{self.name} built-in", "extra"))
        if not derivation.required <= len(extra) <= len(derivation.parameters):
            raise RuleConstructionError(
                f"{self.name} built-in", "arguments",
                f"must include {', '.join(derivation.parameters) or 'no further arguments'}"
                f" after the source, got {len(extra)} extra",
            )
        extra = tuple(
            _builtin_argument(value, self.name, parameter, text=not derivation.numeric)
            for value, parameter in zip(extra, derivation.parameters)
        )
        object.__setattr__(self, "extra", extra)

        if self.name == "replace" and isinstance(extra[0], Literal):
            try:
                re.compile(extra[0].value)
            except re.error as exc:
                raise RuleConstructionError(
                    "replace built-in", "pattern", f"is not a valid regular expression ({exc})"
                ) from exc

    @property
    def arguments(self) -> tuple[Argument, ...]:
        return (self.left, self.right, *self.extra)

    def to_canonical_string(self) -> str:
        return _canonical(self.name, self.arguments)

    def __str__(self) -> str:
        return self.to_canonical_string()


BuiltIn = Union[
    ComparisonBuiltIn,
    StringBuiltIn,
    MatchesBuiltIn,
    MathBuiltIn,
    StringDerivationBuiltIn,
]


def builtin_variables(builtin: BuiltIn) -> list[str]:
    """Distinct variable names referenced by a built-in."""
    names: list[str] = []
    for arg in builtin.arguments:
        if isinstance(arg, Variable) and arg.name not in names:
            names.append(arg.name)
    return names


# ==============================================================================
# Row-level evaluation
# ==============================================================================


def _value(argument: Argument, record: Record) -> BindingValue | None:
    if isinstance(argument, Variable):
        return record.get(argument.name)
    return argument


def _text(value: BindingValue | None) -> str | None:
    """Text view of a value: IRIs and string literals only."""
    if isinstance(value, Individual):
        return value.iri
    if isinstance(value, Literal) and value.is_string():
        return value.value
    return None


def _string(value: BindingValue | None) -> str | None:
    """String literals only."""
    if isinstance(value, Literal) and value.is_string():
        return value.value
    return None


def _number(value: BindingValue | None) -> float | None:
    if isinstance(value, Literal):
        return value.as_number()
    return None


def _compare(a: BindingValue, b: BindingValue) -> tuple[int, bool] | None:
    """Compare two values.

    Returns (sign, orderable) or None when the values are not comparable.
    Individuals and booleans support only (in)equality.
    """
    if isinstance(a, Individual) and isinstance(b, Individual):
        return (0 if a.iri == b.iri else 1), False
    if not (isinstance(a, Literal) and isinstance(b, Literal)):
        return None

    if a.is_numeric() and b.is_numeric():
        x, y = a.as_number(), b.as_number()
        if x is None or y is None or math.isnan(x) or math.isnan(y):
            return None
        return (x > y) - (x < y), True
    if a.is_string() and b.is_string():
        return (a.value > b.value) - (a.value < b.value), True
    if a.is_boolean() and b.is_boolean():
        x, y = a.as_boolean(), b.as_boolean()
        if x is None or y is None:
            return None
        return (0 if x == y else 1), False
    if a.datatype == b.datatype:
        return (a.value > b.value) - (a.value < b.value), True
    return None


def _holds_comparison(builtin: ComparisonBuiltIn, record: Record) -> bool:
    a, b = _value(builtin.left, record), _value(builtin.right, record)
    if a is None or b is None:
        return False
    outcome = _compare(a, b)
    if outcome is None:
        return False
    sign, orderable = outcome
    if not orderable and builtin.name not in ("equal", "notEqual"):
        return False
    return _COMPARISONS[builtin.name](sign)


def _holds_string(builtin: StringBuiltIn, record: Record) -> bool:
    a = _text(_value(builtin.left, record))
    b = _text(_value(builtin.right, record))
    if a is None or b is None:
        return False
    return _STRING_TESTS[builtin.name](a, b)


def _holds_matches(builtin: MatchesBuiltIn, record: Record) -> bool:
    text = _text(_value(builtin.text, record))
    if text is None:
        return False
    return builtin.compiled.search(text) is not None


def _holds_math(builtin: MathBuiltIn, record: Record) -> bool:
    left = _number(_value(builtin.left, record))
    right = _number(_value(builtin.right, record))
    if left is None or right is None:
        return False
    func, takes_operand = _MATH[builtin.name]
    try:
        if takes_operand:
            operand = builtin.operand.as_number() if builtin.operand else None
            if operand is None:
                return False
            expected = func(right, operand)
        else:
            expected = func(right)
    except (ValueError, OverflowError, ZeroDivisionError):
        return False
    return math.isclose(left, expected, rel_tol=1e-9, abs_tol=1e-12)


def _holds_derivation(builtin: StringDerivationBuiltIn, record: Record) -> bool:
    source = _string(_value(builtin.right, record))
    if source is None:
        return False
    derivation = _DERIVATIONS[builtin.name]
    extras = []
    for argument in builtin.extra:
        value = _value(argument, record)
        extra = _number(value) if derivation.numeric else _text(value)
        if extra is None:
            return False
        extras.append(extra)
    try:
        derived = derivation.function(source, *extras)
    except (ValueError, re.error):
        return False
    left = _value(builtin.left, record)
    if isinstance(derived, int):
        number = _number(left)
        return number is not None and number == derived
    return _string(left) == derived


def evaluate_builtin(builtin: BuiltIn, table: BindingTable) -> BindingTable:
    """Filter a binding table through a built-in.

    Args:
        builtin: The built-in to evaluate
        table: Joined antecedent table

    Returns:
        New table with the rows satisfying the built-in, in input order
    """
    if isinstance(builtin, ComparisonBuiltIn):
        holds = _holds_comparison
    elif isinstance(builtin, StringBuiltIn):
        holds = _holds_string
    elif isinstance(builtin, MatchesBuiltIn):
        holds = _holds_matches
    elif isinstance(builtin, MathBuiltIn):
        holds = _holds_math
    elif isinstance(builtin, StringDerivationBuiltIn):
        holds = _holds_derivation
    else:
        raise TypeError(f"Unsupported built-in type: {type(builtin).__name__}")

    result = table.filter(lambda record: holds(builtin, record))
    logger.debug(f"Built-in {builtin} kept {len(result)} of {len(table)} rows")
    return result


# ==============================================================================
# Factory
# ==============================================================================


def _comparison(name: str) -> Callable[[object, object], ComparisonBuiltIn]:
    def factory(left: object, right: object) -> ComparisonBuiltIn:
        return ComparisonBuiltIn(name, left, right)

    factory.__name__ = name
    factory.__doc__ = (
        f"``{name}(left,right)`` comparison built-in.\n\n"
        "Shorthand follows atoms: ``?x`` is a variable and any other bare\n"
        "string names an individual. Pass a Literal to compare with\n"
        'string values, e.g. ``equal("?n", Literal("Alice"))``.'
    )
    return factory


def _string_test(name: str) -> Callable[[object, object], StringBuiltIn]:
    def factory(left: object, right: object) -> StringBuiltIn:
        return StringBuiltIn(name, left, right)

    factory.__name__ = name
    factory.__doc__ = (
        f"``{name}(left,right)`` string built-in; bare strings are string literals."
    )
    return factory


def _math(name: str) -> Callable[..., MathBuiltIn]:
    _, takes_operand = _MATH[name]

    def factory(left: object, right: object, value: float | None = None) -> MathBuiltIn:
        return MathBuiltIn(name, left, right, value)

    factory.__name__ = name
    factory.__doc__ = (
        f"``{name}`` math built-in: left == {name}(right"
        + (", value)" if takes_operand else ")")
    )
    return factory


def _derivation(name: str) -> Callable[[object, object], StringDerivationBuiltIn]:
    def factory(left: object, right: object) -> StringDerivationBuiltIn:
        return StringDerivationBuiltIn(name, left, right)

    factory.__name__ = name
    factory.__doc__ = f"``{name}`` string built-in: left == {name}(right)."
    return factory


def matches(text: object, pattern: str | re.Pattern, flags: str = "") -> MatchesBuiltIn:
    """Regular-expression built-in.

    Args:
        text: Argument holding the text to test (usually a variable)
        pattern: Pattern string, or a compiled pattern whose
            IGNORECASE/DOTALL/MULTILINE/VERBOSE flags become ``ismx``
        flags: Additional flag letters among ``i``, ``s``, ``m``, ``x``

    Returns:
        MatchesBuiltIn

    Raises:
        RuleConstructionError: On a missing argument, unknown flag or
            invalid pattern
    """
    require(pattern, "matches built-in", "pattern")
    if isinstance(pattern, re.Pattern):
        flags += "".join(f for f, v in REGEX_FLAGS.items() if pattern.flags & v)
        pattern = pattern.pattern
    return MatchesBuiltIn(text, pattern, flags or "")


def substring(
    left: object, right: object, start: object, length: object | None = None
) -> StringDerivationBuiltIn:
    """``left == right[start:start + length]`` with a zero-based start.

    Without a length the rest of the string is taken. Rows whose bounds
    fall outside the source string are dropped.
    """
    extra = (start,) if length is None else (start, length)
    return StringDerivationBuiltIn("substring", left, right, extra)


def substring_after(left: object, right: object, separator: object) -> StringDerivationBuiltIn:
    """``left`` is the text of ``right`` after the first ``separator``.

    An empty or absent separator derives the empty string.
    """
    return StringDerivationBuiltIn("substringAfter", left, right, (separator,))


def substring_before(left: object, right: object, separator: object) -> StringDerivationBuiltIn:
    """``left`` is the text of ``right`` before the first ``separator``."""
    return StringDerivationBuiltIn("substringBefore", left, right, (separator,))


def replace(
    left: object, right: object, pattern: object, replacement: object
) -> StringDerivationBuiltIn:
    """``left == re.sub(pattern, replacement, right)``.

    The replacement uses Python group syntax (``\\1``).
    """
    return StringDerivationBuiltIn("replace", left, right, (pattern, replacement))


equal = _comparison("equal")
not_equal = _comparison("notEqual")
less_than = _comparison("lessThan")
less_than_or_equal = _comparison("lessThanOrEqual")
greater_than = _comparison("greaterThan")
greater_than_or_equal = _comparison("greaterThanOrEqual")

contains = _string_test("contains")
contains_ignore_case = _string_test("containsIgnoreCase")
starts_with = _string_test("startsWith")
ends_with = _string_test("endsWith")
string_equal_ignore_case = _string_test("stringEqualIgnoreCase")

abs_ = _math("abs")
add = _math("add")
subtract = _math("subtract")
multiply = _math("multiply")
divide = _math("divide")
pow_ = _math("pow")
ceiling = _math("ceiling")
floor = _math("floor")
round_ = _math("round")
round_half_to_even = _math("roundHalfToEven")
sin = _math("sin")
cos = _math("cos")
tan = _math("tan")

string_length = _derivation("stringLength")
upper_case = _derivation("upperCase")
lower_case = _derivation("lowerCase")

# swrlb local name -> factory
BUILTIN_FACTORIES: dict[str, Callable[..., BuiltIn]] = {
    "equal": equal,
    "notEqual": not_equal,
    "lessThan": less_than,
    "lessThanOrEqual": less_than_or_equal,
    "greaterThan": greater_than,
    "greaterThanOrEqual": greater_than_or_equal,
    "contains": contains,
    "containsIgnoreCase": contains_ignore_case,
    "startsWith": starts_with,
    "endsWith": ends_with,
    "stringEqualIgnoreCase": string_equal_ignore_case,
    "matches": matches,
    "abs": abs_,
    "add": add,
    "subtract": subtract,
    "multiply": multiply,
    "divide": divide,
    "pow": pow_,
    "ceiling": ceiling,
    "floor": floor,
    "round": round_,
    "roundHalfToEven": round_half_to_even,
    "sin": sin,
    "cos": cos,
    "tan": tan,
    "stringLength": string_length,
    "upperCase": upper_case,
    "lowerCase": lower_case,
    "substring": substring,
    "substringAfter": substring_after,
    "substringBefore": substring_before,
    "replace": replace,
}


def create_builtin(name: str, *arguments: object, **options: object) -> BuiltIn:
    """Create a built-in from its swrlb local name.

    Args:
        name: Built-in name, e.g. "greaterThan" (an ``swrlb:`` prefix is
            accepted)
        *arguments: Positional arguments of the factory
        **options: Keyword arguments of the factory (``value``, ``flags``)

    Raises:
        RuleConstructionError: Unknown built-in or invalid arguments
    """
    require(name, "built-in", "name")
    local = name.split(":", 1)[1] if name.startswith("swrlb:") else name
    local = local.rsplit("#", 1)[-1]
    factory = BUILTIN_FACTORIES.get(local)
    if factory is None:
        raise RuleConstructionError("built-in", "name", f"'{name}' is not a known built-in")
    try:
        return factory(*arguments, **options)
    except TypeError as exc:
        raise RuleConstructionError(f"{local} built-in", "arguments", f"do not fit ({exc})") from exc
