"""Unit tests for the in-memory fact store.

Tests cover:
- Fact indexing and duplicate detection
- Calibration: subclasses, inverse, symmetric and equivalent properties
- Snapshots
"""

from swrlkit.engine import (
    XSD,
    ClassAssertion,
    DataPropertyAssertion,
    Individual,
    InMemoryFactStore,
    Literal,
    ObjectInverseOf,
    ObjectPropertyAssertion,
)


# ==============================================================================
# Fact Store Tests
# ==============================================================================


class TestFactStore:
    """Test fact indexing."""

    def test_add_and_contains(self):
        """Added facts are found by exact lookup."""
        store = InMemoryFactStore()
        is_new = store.add_class_assertion("ex:Person", "ex:alice")

        assert is_new is True
        assert store.contains(ClassAssertion("ex:Person", Individual("ex:alice")))
        assert store.size() == 1

    def test_duplicate_not_new(self):
        """Adding the same fact twice reports it as known."""
        store = InMemoryFactStore()
        store.add_object_assertion("ex:knows", "ex:a", "ex:b")
        assert store.add_object_assertion("ex:knows", "ex:a", "ex:b") is False
        assert store.size() == 1

    def test_individuals_of_class(self):
        """Class queries return asserted members."""
        store = InMemoryFactStore()
        store.add_class_assertion("ex:Person", "ex:a")
        store.add_class_assertion("ex:Person", "ex:b")
        store.add_class_assertion("ex:Robot", "ex:c")

        assert store.individuals_of_class("ex:Person") == {
            Individual("ex:a"), Individual("ex:b"),
        }
        assert store.individuals_of_class("ex:Unknown") == set()

    def test_data_edges(self):
        """Data property queries return (individual, literal) pairs."""
        store = InMemoryFactStore()
        store.add_data_assertion("ex:age", "ex:a", 30)

        assert store.data_property_edges("ex:age") == {
            (Individual("ex:a"), Literal("30", XSD.INTEGER)),
        }

    def test_data_fact_rendering(self):
        """Literal values are quoted and escaped."""
        fact = DataPropertyAssertion("ex:label", Individual("ex:a"), Literal('a "b"'))
        assert str(fact) == r'ex:label(ex:a,"a \"b\"")'

    def test_seed_facts(self):
        """Facts passed to the constructor are indexed."""
        fact = DataPropertyAssertion("ex:name", Individual("ex:a"), Literal("Ann"))
        store = InMemoryFactStore([fact])
        assert store.contains(fact)


class TestCalibration:
    """Test normalization of class and property assertions."""

    def test_subclass_members(self):
        """Members of subclasses belong to superclasses, transitively."""
        store = InMemoryFactStore()
        store.declare_subclass("ex:Cat", "ex:Mammal")
        store.declare_subclass("ex:Mammal", "ex:Animal")
        store.add_class_assertion("ex:Cat", "ex:tom")

        assert Individual("ex:tom") in store.individuals_of_class("ex:Animal")

    def test_inverse_property(self):
        """Edges of an inverse property are read reversed."""
        store = InMemoryFactStore()
        store.declare_inverse("ex:hasParent", "ex:hasChild")
        store.add_object_assertion("ex:hasChild", "ex:ann", "ex:bob")

        assert (Individual("ex:bob"), Individual("ex:ann")) in store.object_property_edges(
            "ex:hasParent"
        )

    def test_inverse_expression_query(self):
        """An inverse expression yields reversed edges."""
        store = InMemoryFactStore()
        store.add_object_assertion("ex:knows", "ex:a", "ex:b")

        assert store.object_property_edges(ObjectInverseOf("ex:knows")) == {
            (Individual("ex:b"), Individual("ex:a")),
        }

    def test_inverse_expression_assertion(self):
        """Assertions through an inverse expression are stored reversed."""
        store = InMemoryFactStore()
        store.add_object_assertion(ObjectInverseOf("ex:knows"), "ex:a", "ex:b")

        assert store.contains(
            ObjectPropertyAssertion("ex:knows", Individual("ex:b"), Individual("ex:a"))
        )

    def test_symmetric_property(self):
        """Symmetric properties are read in both directions."""
        store = InMemoryFactStore()
        store.declare_symmetric("ex:marriedTo")
        store.add_object_assertion("ex:marriedTo", "ex:a", "ex:b")

        assert store.object_property_edges("ex:marriedTo") == {
            (Individual("ex:a"), Individual("ex:b")),
            (Individual("ex:b"), Individual("ex:a")),
        }

    def test_equivalent_properties(self):
        """Equivalent properties share edges."""
        store = InMemoryFactStore()
        store.declare_equivalent_object_properties("ex:knows", "ex:isAcquaintedWith")
        store.declare_equivalent_data_properties("ex:age", "ex:years")
        store.add_object_assertion("ex:isAcquaintedWith", "ex:a", "ex:b")
        store.add_data_assertion("ex:years", "ex:a", 3)

        assert len(store.object_property_edges("ex:knows")) == 1
        assert len(store.data_property_edges("ex:age")) == 1

    def test_entails_uses_calibration(self):
        """entails() sees calibrated facts that are not asserted."""
        store = InMemoryFactStore()
        store.declare_inverse("ex:hasParent", "ex:hasChild")
        store.add_object_assertion("ex:hasChild", "ex:ann", "ex:bob")
        fact = ObjectPropertyAssertion("ex:hasParent", Individual("ex:bob"), Individual("ex:ann"))

        assert not store.contains(fact)
        assert store.entails(fact)

    def test_same_and_different_pairs_are_symmetric(self):
        """sameAs and differentFrom pairs are read both ways."""
        store = InMemoryFactStore()
        store.add_same_individuals("ex:a", "ex:b")
        store.add_different_individuals("ex:a", "ex:c")

        assert (Individual("ex:b"), Individual("ex:a")) in store.same_individual_pairs()
        assert (Individual("ex:c"), Individual("ex:a")) in store.different_individual_pairs()


class TestSnapshot:
    """Test store copies."""

    def test_copy_is_independent(self):
        """Changes to a copy leave the source store alone."""
        store = InMemoryFactStore()
        store.add_class_assertion("ex:Person", "ex:a")
        snapshot = store.copy()
        snapshot.add_class_assertion("ex:Person", "ex:b")

        assert store.size() == 1
        assert snapshot.size() == 2
