"""SWRL-style rule evaluation engine.

Rules are evaluated bottom-up against a fact store: antecedent atoms
become binding tables that are natural-joined, built-ins filter the
joined rows, and the surviving rows instantiate the consequent atoms
into Inferences.

Example usage:
    from swrlkit.engine import (
        ClassAtom, DataPropertyAtom, InMemoryFactStore, Rule, greater_than,
    )

    store = InMemoryFactStore()
    store.add_class_assertion("ex:Person", "ex:alice")
    store.add_data_assertion("ex:age", "ex:alice", 34)

    rule = Rule.of(
        "adult",
        antecedent=[
            ClassAtom("ex:Person", "?p"),
            DataPropertyAtom("ex:age", "?p", "?a"),
        ],
        builtins=[greater_than("?a", 17)],
        consequent=[ClassAtom("ex:Adult", "?p")],
    )

    for inference in rule.apply(store):
        print(inference.fact, inference.rule_name)
"""

from .arguments import (
    XSD,
    Variable,
    Individual,
    Literal,
    BindingValue,
    Argument,
    to_argument,
    to_value_argument,
)
from .fact_store import (
    ObjectInverseOf,
    ClassAssertion,
    ObjectPropertyAssertion,
    DataPropertyAssertion,
    SameIndividualAssertion,
    DifferentIndividualsAssertion,
    Fact,
    FactStore,
    InMemoryFactStore,
)
from .binding_table import BindingTable
from .atoms import (
    ClassAtom,
    ObjectPropertyAtom,
    DataPropertyAtom,
    SameIndividualAtom,
    DifferentIndividualsAtom,
    Atom,
    evaluate_atom,
    instantiate_atom,
)
from .builtins import (
    BuiltIn,
    ComparisonBuiltIn,
    StringBuiltIn,
    MatchesBuiltIn,
    MathBuiltIn,
    StringDerivationBuiltIn,
    evaluate_builtin,
    create_builtin,
    equal,
    not_equal,
    less_than,
    less_than_or_equal,
    greater_than,
    greater_than_or_equal,
    contains,
    contains_ignore_case,
    starts_with,
    ends_with,
    string_equal_ignore_case,
    matches,
)
from .inference import Inference, literal_values
from .rule import Antecedent, Consequent, Rule
from .reasoner import RuleReasoner, ReasoningResult
from .loader import KnowledgeLoader, KB_DIR

__all__ = [
    # Arguments
    "XSD",
    "Variable",
    "Individual",
    "Literal",
    "BindingValue",
    "Argument",
    "to_argument",
    "to_value_argument",
    # Fact storage
    "ObjectInverseOf",
    "ClassAssertion",
    "ObjectPropertyAssertion",
    "DataPropertyAssertion",
    "SameIndividualAssertion",
    "DifferentIndividualsAssertion",
    "Fact",
    "FactStore",
    "InMemoryFactStore",
    # Binding tables
    "BindingTable",
    # Atoms
    "ClassAtom",
    "ObjectPropertyAtom",
    "DataPropertyAtom",
    "SameIndividualAtom",
    "DifferentIndividualsAtom",
    "Atom",
    "evaluate_atom",
    "instantiate_atom",
    # Built-ins
    "BuiltIn",
    "ComparisonBuiltIn",
    "StringBuiltIn",
    "MatchesBuiltIn",
    "MathBuiltIn",
    "StringDerivationBuiltIn",
    "evaluate_builtin",
    "create_builtin",
    "equal",
    "not_equal",
    "less_than",
    "less_than_or_equal",
    "greater_than",
    "greater_than_or_equal",
    "contains",
    "contains_ignore_case",
    "starts_with",
    "ends_with",
    "string_equal_ignore_case",
    "matches",
    # Rules
    "Antecedent",
    "Consequent",
    "Rule",
    "Inference",
    "literal_values",
    # Reasoner
    "RuleReasoner",
    "ReasoningResult",
    # Knowledge modules
    "KnowledgeLoader",
    "KB_DIR",
]
