"""Unit tests for knowledge module loading and schema validation."""

import json

import pytest
from pydantic import ValidationError

from swrlkit.exceptions import KnowledgeModuleError, RuleConstructionError
from swrlkit.schema import (
    AtomSpec,
    BuiltInSpec,
    DeclarationSpec,
    KnowledgeModule,
    ReasonerConfig,
    RuleSpec,
)
from swrlkit.engine import (
    XSD,
    ClassAtom,
    DataPropertyAssertion,
    Individual,
    InMemoryFactStore,
    KnowledgeLoader,
    Literal,
    MatchesBuiltIn,
    ObjectInverseOf,
    ObjectPropertyAssertion,
    ObjectPropertyAtom,
    RuleReasoner,
)


@pytest.fixture(autouse=True)
def clear_cache():
    KnowledgeLoader.clear_cache()
    yield
    KnowledgeLoader.clear_cache()


# ==============================================================================
# Schema Tests
# ==============================================================================


class TestSchema:
    """Test pydantic validation of module documents."""

    def test_config_defaults(self):
        config = ReasonerConfig()
        assert config.max_iterations == 16
        assert config.max_concurrency == 4
        assert config.include_asserted is False

    def test_config_bounds(self):
        with pytest.raises(ValidationError):
            ReasonerConfig(max_iterations=0)

    def test_atom_arity(self):
        with pytest.raises(ValidationError):
            AtomSpec(kind="object", predicate="ex:knows", arguments=["?x"])

    def test_atom_needs_predicate(self):
        with pytest.raises(ValidationError):
            AtomSpec(kind="class", arguments=["?x"])

    def test_same_atom_without_predicate(self):
        spec = AtomSpec(kind="same", arguments=["?x", "?y"])
        assert spec.predicate is None

    def test_only_object_atoms_inverse(self):
        with pytest.raises(ValidationError):
            AtomSpec(kind="data", predicate="ex:age", inverse=True, arguments=["?x", "?y"])

    def test_literal_argument(self):
        spec = AtomSpec(kind="data", predicate="ex:age", arguments=["?x", {"value": 3}])
        assert spec.arguments[1].value == 3

    def test_rule_needs_consequent(self):
        with pytest.raises(ValidationError):
            RuleSpec(name="r", antecedent=[], consequent=[])

    def test_declaration_arity(self):
        with pytest.raises(ValidationError):
            DeclarationSpec(kind="symmetric", arguments=["ex:a", "ex:b"])

    def test_facts_must_be_ground(self):
        with pytest.raises(ValidationError):
            KnowledgeModule(facts=[{"kind": "class", "predicate": "ex:A", "arguments": ["?x"]}])


# ==============================================================================
# Builder Tests
# ==============================================================================


class TestBuilders:
    """Test conversion of specs to engine objects."""

    def test_build_inverse_atom(self):
        atom = KnowledgeLoader.build_atom(
            AtomSpec(kind="object", predicate="ex:p", inverse=True, arguments=["?x", "ex:a"])
        )
        assert atom == ObjectPropertyAtom(ObjectInverseOf("ex:p"), "?x", "ex:a")

    def test_build_typed_fact(self):
        fact = KnowledgeLoader.build_fact(AtomSpec(
            kind="data",
            predicate="ex:weight",
            arguments=["ex:a", {"value": 2.5, "datatype": "xsd:decimal"}],
        ))
        assert fact == DataPropertyAssertion(
            "ex:weight", Individual("ex:a"), Literal("2.5", XSD.DECIMAL)
        )

    def test_build_language_literal(self):
        fact = KnowledgeLoader.build_fact(AtomSpec(
            kind="data",
            predicate="ex:label",
            arguments=["ex:a", {"value": "chat", "language": "fr"}],
        ))
        assert fact.value.language == "fr"
        assert fact.value.is_string()

    def test_build_matches(self):
        builtin = KnowledgeLoader.build_builtin(BuiltInSpec(
            name="matches",
            arguments=["?x", {"value": "iv2$"}, {"value": "mi"}],
        ))
        assert isinstance(builtin, MatchesBuiltIn)
        assert str(builtin) == 'matches(?x,"iv2$","im")'

    def test_build_math(self):
        builtin = KnowledgeLoader.build_builtin(
            BuiltInSpec(name="swrlb:add", arguments=["?r", "?x"], value=2)
        )
        assert str(builtin) == 'add(?r,?x,"2")'

    def test_build_rule(self):
        rule = KnowledgeLoader.build_rule(RuleSpec(
            name="adult",
            description="people over 17",
            antecedent=[
                {"kind": "class", "predicate": "ex:Person", "arguments": ["?p"]},
                {"kind": "data", "predicate": "ex:age", "arguments": ["?p", "?a"]},
            ],
            builtins=[{"name": "greaterThan", "arguments": ["?a", {"value": 17}]}],
            consequent=[{"kind": "class", "predicate": "ex:Adult", "arguments": ["?p"]}],
        ))
        assert rule.description == "people over 17"
        assert rule.consequent.atoms == (ClassAtom("ex:Adult", "?p"),)


# ==============================================================================
# Loader Tests
# ==============================================================================


class TestKnowledgeLoader:
    """Test module discovery and loading."""

    def test_available_modules(self):
        assert "family" in KnowledgeLoader.available_modules()

    def test_load_bundled_module(self):
        store = InMemoryFactStore()
        reasoner = RuleReasoner()

        stats = KnowledgeLoader.load_modules(store, reasoner, ["family"])

        assert stats == {"family": 14}
        assert store.size() == 11
        assert [rule.name for rule in reasoner.rules] == [
            "grandparent", "parent-of-sibling", "minor",
        ]
        # Inverse declaration applied
        assert store.entails(ObjectPropertyAssertion(
            "ex:hasParent", Individual("ex:cleo"), Individual("ex:bob")
        ))

    def test_missing_module(self, caplog):
        stats = KnowledgeLoader.load_modules(InMemoryFactStore(), RuleReasoner(), ["nope"])
        assert stats == {"nope": 0}
        assert "not found" in caplog.text

    def test_module_info(self):
        info = KnowledgeLoader.get_module_info("family")
        assert info["name"] == "family"
        assert info["rules_count"] == 3
        assert info["facts_count"] == 11

    def test_load_file(self, tmp_path):
        path = tmp_path / "pets.json"
        path.write_text(json.dumps({
            "name": "pets",
            "declarations": [{"kind": "subclass", "arguments": ["ex:Cat", "ex:Pet"]}],
            "facts": [{"kind": "class", "predicate": "ex:Cat", "arguments": ["ex:tom"]}],
            "rules": [{
                "name": "pet-owner",
                "antecedent": [
                    {"kind": "object", "predicate": "ex:owns", "arguments": ["?o", "?p"]},
                    {"kind": "class", "predicate": "ex:Pet", "arguments": ["?p"]},
                ],
                "consequent": [{"kind": "class", "predicate": "ex:PetOwner", "arguments": ["?o"]}],
            }],
        }))

        module = KnowledgeLoader.load_file(path)
        store = InMemoryFactStore()
        reasoner = RuleReasoner()
        count = KnowledgeLoader.load_into(store, reasoner, module)
        store.add_object_assertion("ex:owns", "ex:jon", "ex:tom")

        assert count == 2
        assert [inf.fact.individual for inf in reasoner.reason(store).inferences] == [
            Individual("ex:jon"),
        ]

    def test_missing_file(self, tmp_path):
        with pytest.raises(KnowledgeModuleError, match="file not found"):
            KnowledgeLoader.load_file(tmp_path / "absent.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(KnowledgeModuleError, match="invalid JSON"):
            KnowledgeLoader.load_file(path)

    def test_invalid_module(self):
        with pytest.raises(KnowledgeModuleError) as excinfo:
            KnowledgeLoader.parse_module({"facts": [{"kind": "planet", "arguments": []}]})
        assert isinstance(excinfo.value, ValueError)

    def test_unknown_builtin_leaves_store_and_reasoner_untouched(self):
        """A module that fails to build loads nothing."""
        module = KnowledgeLoader.parse_module({
            "name": "broken",
            "declarations": [{"kind": "symmetric", "arguments": ["ex:knows"]}],
            "facts": [{"kind": "class", "predicate": "ex:Person", "arguments": ["ex:ann"]}],
            "rules": [
                {
                    "name": "fine",
                    "antecedent": [{"kind": "class", "predicate": "ex:Person", "arguments": ["?p"]}],
                    "consequent": [{"kind": "class", "predicate": "ex:Agent", "arguments": ["?p"]}],
                },
                {
                    "name": "broken",
                    "antecedent": [{"kind": "class", "predicate": "ex:Person", "arguments": ["?p"]}],
                    "builtins": [{"name": "noSuch", "arguments": ["?p"]}],
                    "consequent": [{"kind": "class", "predicate": "ex:Odd", "arguments": ["?p"]}],
                },
            ],
        })
        store = InMemoryFactStore()
        store.add_object_assertion("ex:knows", "ex:ann", "ex:bob")
        reasoner = RuleReasoner()

        with pytest.raises(KnowledgeModuleError, match="noSuch") as excinfo:
            KnowledgeLoader.load_into(store, reasoner, module)

        assert excinfo.value.module == "broken"
        assert isinstance(excinfo.value.__cause__, RuleConstructionError)
        assert store.size() == 1
        assert not store.entails(ObjectPropertyAssertion(
            "ex:knows", Individual("ex:bob"), Individual("ex:ann")
        ))
        assert reasoner.rules == []

    def test_load_derivation_rule(self):
        """String derivations are built from module documents."""
        module = KnowledgeLoader.parse_module({
            "name": "mail",
            "facts": [
                {"kind": "data", "predicate": "ex:email", "arguments": ["ex:ann", "ann@example.org"]},
                {"kind": "data", "predicate": "ex:domain", "arguments": ["ex:ann", "example.org"]},
                {"kind": "data", "predicate": "ex:email", "arguments": ["ex:bob", "bob@example.net"]},
                {"kind": "data", "predicate": "ex:domain", "arguments": ["ex:bob", "example.org"]},
            ],
            "rules": [{
                "name": "consistent-domain",
                "antecedent": [
                    {"kind": "data", "predicate": "ex:email", "arguments": ["?p", "?e"]},
                    {"kind": "data", "predicate": "ex:domain", "arguments": ["?p", "?d"]},
                ],
                "builtins": [{"name": "substringAfter", "arguments": ["?d", "?e", "@"]}],
                "consequent": [{"kind": "class", "predicate": "ex:Consistent", "arguments": ["?p"]}],
            }],
        })
        store = InMemoryFactStore()
        reasoner = RuleReasoner()

        KnowledgeLoader.load_into(store, reasoner, module)

        assert reasoner.rules[0].antecedent.builtins[0].extra == (Literal("@"),)
        assert [inf.fact.individual for inf in reasoner.reason(store).inferences] == [
            Individual("ex:ann"),
        ]
