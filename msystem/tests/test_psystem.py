"""
Tests for the rule index.
"""

import logging

import pytest

from msystem.config import IndexParams, MSystemConfig
from msystem.core import (
    Catalog,
    CatalogError,
    Connector,
    EvolutionRule,
    FloatingObject,
    Glue,
    GlueRelation,
    MetabolicRule,
    NonMetabolicRule,
    Protein,
    PSystem,
    RuleType,
    Tile,
)


A, B, C = Glue("a"), Glue("b"), Glue("c")
X = FloatingObject("x", mobility=0.5)
Y = FloatingObject("y", mobility=2.0)
P = Protein("p")


@pytest.fixture
def tiles():
    rod = Tile("rod", [(0, 0, 0), (1, 0, 0)], connectors=[
        Connector("c0", A, [(0, 0, 0)]),
        Connector("c1", B, [(1, 0, 0)]),
    ])
    square = Tile("square", [(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)], connectors=[
        Connector("e0", A, [(0, 0, 0), (1, 0, 0)]),
        Connector("e1", C, [(1, 0, 0), (1, 1, 0)]),
    ])
    return {"rod": rod, "square": square}


@pytest.fixture
def rules(tiles):
    return {
        "create_rod": NonMetabolicRule(RuleType.CREATE, [X], [tiles["rod"]], priority=1, name="create_rod"),
        "create_square": NonMetabolicRule(RuleType.CREATE, [X], [tiles["square"]], priority=3,
                                          name="create_square"),
        "insert_rod": NonMetabolicRule(RuleType.INSERT, [X], [tiles["rod"]], name="insert_rod"),
        "insert_square": NonMetabolicRule(RuleType.INSERT, [X], [tiles["square"]], name="insert_square"),
        "divide": NonMetabolicRule(RuleType.DIVIDE, [], [A, B], name="divide"),
        "destroy_rod": NonMetabolicRule(RuleType.DESTROY, [tiles["rod"]], [X], name="destroy_rod"),
        "convert": MetabolicRule(left_side_objects=[X], right_side_objects=[Y], protein=P, name="convert"),
    }


@pytest.fixture
def relation():
    return GlueRelation({(A, B): ["water"], (C, A): [], (C, C): []})


@pytest.fixture
def catalog(tiles, rules, relation):
    return Catalog.from_objects(
        floating_objects=[X, Y],
        proteins=[P],
        tiles=tiles.values(),
        glues=[A, B, C],
        glue_relation=relation,
        evolution_rules=rules.values(),
    )


@pytest.fixture
def psystem(catalog):
    return PSystem(catalog)


class TestConstruction:
    """Tests for building the index."""

    def test_none_catalog(self):
        with pytest.raises(CatalogError):
            PSystem(None)

    def test_empty_catalog(self):
        """Empty catalogs are accepted unless the config requires content."""
        assert PSystem(Catalog()).creation_rules_for(A) == ()
        config = MSystemConfig(index=IndexParams(require_non_empty_catalog=True))
        with pytest.raises(CatalogError):
            PSystem(Catalog(), config)

    def test_malformed_rule_aborts(self, catalog):
        """A divide rule without two glues is an error, not skipped."""
        catalog.evolution_rules.append(NonMetabolicRule(RuleType.DIVIDE, [], [A], name="broken"))
        with pytest.raises(CatalogError) as info:
            PSystem(catalog)
        assert info.value.entity == "broken"

    def test_wrong_rule_variant(self, catalog):
        catalog.evolution_rules.append(EvolutionRule(RuleType.CREATE, [], [], name="plain"))
        with pytest.raises(CatalogError):
            PSystem(catalog)

    def test_metabolic_rule_without_protein(self, catalog):
        catalog.evolution_rules.append(MetabolicRule(left_side_objects=[X]))
        with pytest.raises(CatalogError):
            PSystem(catalog)

    def test_catalog_values(self, psystem):
        assert psystem.mobility == 2.0
        assert set(psystem.tiles) == {"rod", "square"}
        assert psystem.glue_radius == 0.1
        assert len(psystem.evolution_rules) == 7
        with pytest.raises(TypeError):
            psystem.tiles["other"] = None

    def test_summary_logged(self, catalog, caplog):
        with caplog.at_level(logging.INFO, logger="msystem.core.psystem"):
            PSystem(catalog)
        assert "Rule index built: 7 rules" in caplog.text

    def test_str(self, psystem):
        text = str(psystem)
        assert "Evolution rules:" in text
        assert "create_rod" in text


class TestIndices:
    """Tests for rule lookups."""

    def test_metabolic(self, psystem, rules):
        assert psystem.metabolic_rules_for("p") == (rules["convert"],)
        assert psystem.metabolic_rules_for("unknown") == ()

    def test_creation(self, psystem, rules):
        """Product tiles need a connector whose glue the key glue binds to."""
        assert psystem.creation_rules_for(A) == (rules["create_rod"],)
        assert psystem.creation_rules_for(C) == (rules["create_rod"], rules["create_square"])
        assert psystem.creation_rules_for(B) == ()

    def test_creation_priorities(self, psystem):
        assert psystem.creation_rules_priorities == (1, 3)

    def test_insertion_is_symmetric(self, psystem, rules):
        assert psystem.insertion_rules_for(A, C) == (rules["insert_rod"],)
        assert psystem.insertion_rules_for(C, A) == (rules["insert_rod"],)
        assert psystem.insertion_rules_for(A, A) == ()

    def test_division_is_symmetric(self, psystem, rules):
        """Divide rule producing (a, b) is found under both orders."""
        assert psystem.division_rules_for(A, B) == (rules["divide"],)
        assert psystem.division_rules_for(B, A) == (rules["divide"],)
        assert psystem.division_rules_for(A, C) == ()

    def test_destruction(self, psystem, rules):
        assert psystem.destruction_rules_for("rod") == (rules["destroy_rod"],)
        assert psystem.destruction_rules_for("square") == ()
        assert psystem.destruction_rules_for("unknown") == ()


class TestConnectorMatching:
    """Tests for insertion matching."""

    def test_matching_connectors(self, psystem, tiles):
        rod = tiles["rod"]
        first, second = psystem.matching_connectors(rod, C, A)
        assert first is rod.connector("c0")
        assert second is rod.connector("c1")

    def test_no_match(self, psystem, tiles):
        assert psystem.matching_connectors(tiles["rod"], B, B) == (None, None)

    def test_faces_are_never_insertable(self, psystem, tiles):
        """Faces fail closed even when connectors match."""
        square = tiles["square"]
        first, second = psystem.matching_connectors(square, C, C)
        assert first is square.connector("e0")
        assert second is square.connector("e1")
        assert not psystem.is_insertable(square, C, C)

    def test_rod_insertable(self, psystem, tiles):
        assert psystem.is_insertable(tiles["rod"], C, A)
        assert psystem.is_insertable(tiles["rod"], A, C)
        assert not psystem.is_insertable(tiles["rod"], A, B)
