"""
Tests for glues, connectors and tiles.
"""

import pytest
import numpy as np

from msystem.core import (
    Catalog,
    CatalogError,
    Connector,
    Glue,
    GlueRelation,
    PSystem,
    SeedTile,
    Tile,
    TileInSpace,
    TileState,
)
from msystem.geometry import Polygon, Segment


A, B, C = Glue("a"), Glue("b"), Glue("c")


def make_rod(name="rod", glues=(A, B)):
    return Tile(name, [(0, 0, 0), (1, 0, 0)], connectors=[
        Connector("c0", glues[0], [(0, 0, 0)]),
        Connector("c1", glues[1], [(1, 0, 0)]),
    ])


def make_square(name="square", size=1.0, glue=A):
    vertices = [(0, 0, 0), (size, 0, 0), (size, size, 0), (0, size, 0)]
    return Tile(name, vertices, connectors=[
        Connector("e0", glue, [(0, 0, 0), (size, 0, 0)]),
        Connector("p0", glue, [(0, 0, 0)]),
    ])


class TestGlueRelation:
    """Tests for glue compatibility."""

    def test_asymmetric_match(self):
        """Ordered pairs are not mirrored."""
        relation = GlueRelation([(A, B)])
        assert relation.match_asymmetric(A, B)
        assert not relation.match_asymmetric(B, A)
        assert relation.match(B, A)
        assert (A, B) in relation
        assert (B, A) not in relation

    def test_released_objects(self):
        relation = GlueRelation({(A, B): ["water"]})
        assert relation.get(A, B) == frozenset({"water"})
        assert relation.get(B, A) is None
        assert relation.glues() == {A, B}
        assert len(relation) == 1

    def test_glue_identity_by_value(self):
        """Equal names give equal, hashable glues."""
        assert Glue("a") == A
        assert len({Glue("a"), A, B}) == 2

    @pytest.mark.parametrize("name", [None, ""])
    def test_glue_needs_name(self, name):
        with pytest.raises(CatalogError):
            Glue(name)


class TestConnector:
    """Tests for connectors."""

    def test_anchor_count(self):
        with pytest.raises(CatalogError):
            Connector("c", A, [(0, 0, 0), (1, 0, 0), (2, 0, 0)])

    def test_length(self):
        assert Connector("c", A, [(0, 0, 0)]).length == 0.0
        assert Connector("c", A, [(0, 0, 0), (3, 4, 0)]).length == pytest.approx(5.0)

    def test_overlaps_in_any_order(self):
        first = Connector("c", A, [(0, 0, 0), (1, 0, 0)])
        second = Connector("d", B, [(1, 0, 0), (0, 0, 0)])
        assert first.overlaps(second)
        assert not first.overlaps(Connector("e", A, [(0, 0, 0)]))

    def test_owner(self):
        rod = make_rod()
        assert all(c.on_tile is rod for c in rod.connectors)
        assert all(c.on_rod for c in rod.connectors)
        assert not make_square().connector("e0").on_rod

    def test_unique_connector_names(self):
        with pytest.raises(CatalogError):
            Tile("rod", [(0, 0, 0), (1, 0, 0)], connectors=[
                Connector("c", A, [(0, 0, 0)]),
                Connector("c", B, [(1, 0, 0)]),
            ])


class TestCompatibility:
    """Tests for connector compatibility."""

    def psystem(self, tiles, relation):
        return PSystem(Catalog.from_objects(tiles=tiles, glues=[A, B, C], glue_relation=relation))

    def test_rod_connectors_respect_order(self):
        """Rod endpoints mate when the ordered pair is related."""
        first, second = make_rod("first", (A, A)), make_rod("second", (B, B))
        psystem = self.psystem([first, second], GlueRelation([(A, B)]))
        assert psystem.are_compatible(first.connector("c0"), second.connector("c0"))
        assert not psystem.are_compatible(second.connector("c0"), first.connector("c0"))

    def test_face_points_need_a_rod(self):
        """Two single anchors on faces never mate."""
        square, other = make_square("square"), make_square("other", glue=B)
        rod = make_rod("rod", (B, B))
        psystem = self.psystem([square, other, rod], GlueRelation([(A, B)]))
        assert not psystem.are_compatible(square.connector("p0"), other.connector("p0"))
        assert psystem.are_compatible(square.connector("p0"), rod.connector("c0"))

    def test_edges_need_equal_length(self):
        square = make_square("square")
        same = make_square("same", glue=B)
        larger = make_square("larger", size=2.0, glue=B)
        psystem = self.psystem([square, same, larger], GlueRelation([(A, B)]))
        assert psystem.are_compatible(square.connector("e0"), same.connector("e0"))
        assert not psystem.are_compatible(square.connector("e0"), larger.connector("e0"))

    def test_mixed_anchor_counts(self):
        square, rod = make_square(), make_rod("rod", (A, A))
        psystem = self.psystem([square, rod], GlueRelation([(A, A)]))
        assert not psystem.are_compatible(square.connector("e0"), rod.connector("c0"))


class TestTileInSpace:
    """Tests for placed tiles."""

    def test_shape_from_vertices(self):
        assert isinstance(make_rod().vertices, Segment)
        assert isinstance(make_square().vertices, Polygon)
        assert make_rod().is_rod

    def test_unique_ids(self):
        rod = make_rod()
        first, second = TileInSpace(rod), TileInSpace(rod)
        assert second.id > first.id
        assert first.state == TileState.CREATE

    def test_move(self):
        """Moving shifts shape and anchors; new tiles stay created."""
        placed = TileInSpace(make_rod())
        placed.move(np.array([0, 0, 1.0]))
        np.testing.assert_allclose(placed.vertices.vertices, [[0, 0, 1], [1, 0, 1]])
        np.testing.assert_allclose(placed.connector("c1").positions, [[1, 0, 1]])
        assert placed.state == TileState.CREATE

        placed.mark_unchanged()
        placed.move(np.array([1.0, 0, 0]))
        assert placed.state == TileState.MOVE
        np.testing.assert_allclose(placed.position, [1.5, 0, 1])

    def test_catalog_tile_untouched(self):
        """Placing and moving never changes the catalog tile."""
        rod = make_rod()
        placed = TileInSpace(rod, position=np.array([5.0, 0, 0]))
        placed.move(np.array([0, 1.0, 0]))
        np.testing.assert_allclose(rod.connector("c0").positions, [[0, 0, 0]])
        assert placed.connector("c0").on_tile is placed

    def test_connect_and_disconnect(self):
        first, second = TileInSpace(make_rod()), TileInSpace(make_rod())
        first.connect("c1", second, "c0")
        assert first.connector("c1").connected_to == (second.id, "c0")
        assert second.connector("c0").connected_to == (first.id, "c1")

        first.disconnect("c1", second)
        assert first.connector("c1").connected_to is None
        assert first.connector("c1").was_connected_to == (second.id, "c0")
        assert second.connector("c0").was_connected_to == (first.id, "c1")

    def test_disconnect_wrong_tile(self):
        first, second, third = (TileInSpace(make_rod()) for _ in range(3))
        first.connect("c1", second, "c0")
        with pytest.raises(ValueError):
            first.disconnect("c1", third)

    def test_destroy_and_color(self):
        placed = TileInSpace(make_rod())
        placed.set_color("Red")
        assert placed.color_was_changed
        placed.destroy()
        assert placed.state == TileState.DESTROY

    def test_pushing_between_placed_tiles(self):
        square = make_square()
        first = TileInSpace(square)
        second = TileInSpace(square, position=np.array([2.0, 0, 0]))
        np.testing.assert_allclose(first.pushing_of(second, np.array([1.5, 0, 0])), [0.5, 0, 0], atol=1e-12)


class TestSeedTile:
    """Tests for seed placement."""

    def test_rotated_and_moved(self):
        """Rotation about the origin comes before translation."""
        seed = SeedTile("rod", position=[1, 1, 1], angle=[0, 0, 90])
        placed = seed.place({"rod": make_rod()})
        np.testing.assert_allclose(placed.vertices.vertices, [[1, 1, 1], [1, 2, 1]], atol=1e-12)
        np.testing.assert_allclose(placed.connector("c1").positions, [[1, 2, 1]], atol=1e-12)

    def test_no_rotation(self):
        assert SeedTile("rod").rotation() is None

    def test_unknown_tile(self):
        with pytest.raises(CatalogError):
            SeedTile("missing").place({"rod": make_rod()})
