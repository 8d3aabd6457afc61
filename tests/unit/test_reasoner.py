"""Unit tests for the forward-chaining reasoner.

Tests cover:
- Fixpoint iteration over the bundled family module
- Iteration limits and reporting of already-entailed facts
- Async batch application
"""

import asyncio
import logging

import pytest

from swrlkit.schema import ReasonerConfig
from swrlkit.engine import (
    ClassAssertion,
    ClassAtom,
    Individual,
    InMemoryFactStore,
    KnowledgeLoader,
    ObjectPropertyAssertion,
    ObjectPropertyAtom,
    Rule,
    RuleReasoner,
)


def ind(name: str) -> Individual:
    return Individual(f"ex:{name}")


@pytest.fixture
def family():
    store = InMemoryFactStore()
    reasoner = RuleReasoner()
    KnowledgeLoader.load_modules(store, reasoner, ["family"])
    return store, reasoner


def ancestor_chain(length: int):
    """A parent chain p0 <- p1 <- ... and a transitive ancestor rule."""
    store = InMemoryFactStore()
    for i in range(length):
        store.add_object_assertion("ex:hasParent", f"ex:p{i + 1}", f"ex:p{i}")
    rules = [
        Rule.of(
            "parent-is-ancestor",
            antecedent=[ObjectPropertyAtom("ex:hasParent", "?x", "?y")],
            consequent=[ObjectPropertyAtom("ex:hasAncestor", "?x", "?y")],
        ),
        Rule.of(
            "ancestor-transitive",
            antecedent=[
                ObjectPropertyAtom("ex:hasAncestor", "?x", "?y"),
                ObjectPropertyAtom("ex:hasAncestor", "?y", "?z"),
            ],
            consequent=[ObjectPropertyAtom("ex:hasAncestor", "?x", "?z")],
        ),
    ]
    return store, rules


# ==============================================================================
# Fixpoint Tests
# ==============================================================================


class TestReason:
    """Test reasoning to fixpoint."""

    def test_family_fixpoint(self, family):
        store, reasoner = family

        result = reasoner.reason(store)

        assert result.fixpoint is True
        assert result.iterations == 3
        assert set(result.facts) == {
            ObjectPropertyAssertion("ex:hasGrandparent", ind("cleo"), ind("ada")),
            ObjectPropertyAssertion("ex:hasParent", ind("dan"), ind("bob")),
            ClassAssertion("ex:Minor", ind("cleo")),
            ClassAssertion("ex:Minor", ind("dan")),
            ObjectPropertyAssertion("ex:hasGrandparent", ind("dan"), ind("ada")),
        }
        assert len(result.inferences) == 5
        assert result.facts_total == store.size() + 5

    def test_second_round_uses_first_round_facts(self, family):
        """dan's grandparent needs the parent derived in round one."""
        store, reasoner = family
        result = reasoner.reason(store)
        late = result.inferences[-1]
        assert late.rule_name == "grandparent"
        assert late.fact == ObjectPropertyAssertion("ex:hasGrandparent", ind("dan"), ind("ada"))

    def test_input_store_untouched(self, family):
        store, reasoner = family
        size = store.size()
        result = reasoner.reason(store)
        assert store.size() == size
        assert result.store.entails(ClassAssertion("ex:Minor", ind("dan")))

    def test_include_asserted(self, family):
        """Facts the store already entails are reported on request."""
        store, reasoner = family
        reasoner.config = ReasonerConfig(include_asserted=True)

        result = reasoner.reason(store)

        # hasParent(cleo, bob) follows from hasChild(bob, cleo)
        assert ObjectPropertyAssertion("ex:hasParent", ind("cleo"), ind("bob")) in result.facts
        assert len(result.inferences) == 6

    def test_each_fact_reported_once(self):
        store, rules = ancestor_chain(4)
        result = RuleReasoner(rules).reason(store)
        assert len(result.facts) == len(set(result.facts))
        # 4 + 3 + 2 + 1 ancestor pairs
        assert len(result.facts) == 10

    def test_max_iterations(self, caplog):
        store, rules = ancestor_chain(8)
        reasoner = RuleReasoner(rules, ReasonerConfig(max_iterations=2))

        with caplog.at_level(logging.WARNING):
            result = reasoner.reason(store)

        assert result.fixpoint is False
        assert result.iterations == 2
        assert "Max iterations" in caplog.text

    def test_no_rules(self, family):
        store, _ = family
        result = RuleReasoner().reason(store)
        assert result.fixpoint is True
        assert result.iterations == 1
        assert result.inferences == []

    def test_reason_async(self, family):
        store, reasoner = family
        result = asyncio.run(reasoner.reason_async(store))
        assert len(result.inferences) == 5


class TestApplyAll:
    """Test a single round over one snapshot."""

    def test_apply_all_does_not_chain(self, family):
        store, reasoner = family
        facts = {inf.fact for inf in reasoner.apply_all(store)}
        assert ObjectPropertyAssertion("ex:hasGrandparent", ind("dan"), ind("ada")) not in facts

    def test_add_rule(self):
        reasoner = RuleReasoner()
        rule = Rule.of("r", antecedent=[ClassAtom("ex:A", "?x")], consequent=[ClassAtom("ex:B", "?x")])
        reasoner.add_rule(rule)
        assert reasoner.rules == [rule]


# ==============================================================================
# Async Batch Tests
# ==============================================================================


class TestApplyManyAsync:
    """Test concurrent rule applications."""

    def test_results_in_input_order(self):
        rule = Rule.of(
            "tag",
            antecedent=[ClassAtom("ex:Item", "?x")],
            consequent=[ClassAtom("ex:Tagged", "?x")],
        )
        stores = []
        for n in range(6):
            store = InMemoryFactStore()
            for i in range(n):
                store.add_class_assertion("ex:Item", f"ex:item{i}")
            stores.append(store)
        reasoner = RuleReasoner(config=ReasonerConfig(max_concurrency=2))

        results = asyncio.run(reasoner.apply_many_async((rule, s) for s in stores))

        assert [len(r) for r in results] == [0, 1, 2, 3, 4, 5]

    def test_empty_batch(self):
        assert asyncio.run(RuleReasoner().apply_many_async([])) == []
