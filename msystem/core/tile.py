"""
Tiles and their connectors.

A Tile is a catalog type: a named shape (rod or face) with connectors.
A TileInSpace is a placed instance with a run-unique ID; it carries the
mutable state read by the simulation loop and the snapshot exporter
(position, color, attachment links, creation/destruction/move status).

Connector attachments are non-owning handles (tile ID, connector name), so
destroying a tile never leaves a dangling object reference behind.
"""

from __future__ import annotations
from enum import Enum
from dataclasses import dataclass, field
from itertools import count
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union
import numpy as np
from scipy.spatial.transform import Rotation

from ..config import DEFAULT_GEOMETRY
from ..geometry import Polygon, Polytope, Segment, Side, as_point, as_vertex_table, points_equal
from .glue import Glue
from .objects import CatalogError, Protein, check_name


# (tile ID, connector name)
ConnectorHandle = Tuple[int, str]

_tile_ids = count(1)


class TileState(Enum):
    """Status of a placed tile since the last snapshot."""
    CREATE = "Create"
    DESTROY = "Destroy"
    MOVE = "Move"
    UNCHANGED = "Unchanged"


class Connector:
    """
    Attachment point of a tile.

    Rods expose connectors with one anchor, faces with two (the endpoints
    of the edge shared with the neighbouring face).

    Attributes:
        name: Connector name, unique on its tile
        glue: Glue label
        positions: Read-only (1, 3) or (2, 3) anchor table
        angle: Angle between the owning tile and an attached face (radians)
        on_tile: Owning tile or placed tile
        connected_to: Handle of the connector currently attached, or None
        was_connected_to: Handle of the last detached connector, or None
        was_emphasized: Exporter flag, the detached edge was highlighted
    """

    def __init__(
        self,
        name: str,
        glue: Glue,
        positions: Iterable[Sequence[float]],
        angle: float = 0.0,
    ):
        check_name(name, "Connector")
        self.name = name
        self.glue = glue
        self.positions = as_vertex_table(positions)
        if len(self.positions) not in (1, 2):
            raise CatalogError("connector must have 1 or 2 positions", entity=name,
                               expected="1 or 2", observed=len(self.positions))
        self.angle = angle

        self.on_tile: Optional[Union["Tile", "TileInSpace"]] = None
        self.connected_to: Optional[ConnectorHandle] = None
        self.was_connected_to: Optional[ConnectorHandle] = None
        self.was_emphasized = False

    @property
    def anchor_count(self) -> int:
        return len(self.positions)

    @property
    def length(self) -> float:
        """Span between the two anchors, 0 for single-anchor connectors."""
        if len(self.positions) == 1:
            return 0.0
        return float(np.linalg.norm(self.positions[1] - self.positions[0]))

    @property
    def on_rod(self) -> bool:
        return self.on_tile is not None and self.on_tile.vertices.is_rod

    def overlaps(self, other: "Connector", tol: float = DEFAULT_GEOMETRY.tolerance) -> bool:
        """Both connectors sit at the same anchors, in any order."""
        if len(self.positions) != len(other.positions):
            return False
        if len(self.positions) == 1:
            return points_equal(self.positions[0], other.positions[0], tol)
        a0, a1 = self.positions
        b0, b1 = other.positions
        return ((points_equal(a0, b0, tol) and points_equal(a1, b1, tol))
                or (points_equal(a0, b1, tol) and points_equal(a1, b0, tol)))

    def placed(self, rotation: Optional[Rotation], translation: np.ndarray) -> "Connector":
        """Unattached copy with anchors rotated about the origin and moved."""
        positions = rotation.apply(np.array(self.positions)) if rotation is not None else self.positions
        return Connector(self.name, self.glue, positions + as_point(translation), self.angle)

    def __repr__(self) -> str:
        return f"Connector('{self.name}', glue={self.glue}, anchors={len(self.positions)})"


def _as_polytope(vertices: Union[Polytope, Iterable[Sequence[float]]], name: str) -> Polytope:
    if isinstance(vertices, Polytope):
        return vertices
    table = as_vertex_table(vertices)
    if len(table) == 2:
        return Segment(table, name)
    return Polygon(table, name)


class Tile:
    """
    Catalog tile type.

    Example:
        rod = Tile("rod", [(0, 0, 0), (1, 0, 0)], connectors=[
            Connector("c0", Glue("a"), [(0, 0, 0)]),
            Connector("c1", Glue("b"), [(1, 0, 0)]),
        ])
    """

    def __init__(
        self,
        name: str,
        vertices: Union[Polytope, Iterable[Sequence[float]]],
        connectors: Iterable[Connector] = (),
        surface_glue: Optional[Glue] = None,
        proteins: Iterable[Protein] = (),
        color: str = "DeepSkyBlue",
        alpha: int = 255,
    ):
        check_name(name, "Tile")
        self.name = name
        self.vertices = _as_polytope(vertices, name)
        self.connectors: List[Connector] = list(connectors)
        self.surface_glue = surface_glue
        self.proteins: List[Protein] = list(proteins)
        self.color = color
        self.alpha = alpha

        names = [c.name for c in self.connectors]
        if len(set(names)) != len(names):
            raise CatalogError("connector names must be unique", entity=name, observed=names)
        for connector in self.connectors:
            connector.on_tile = self

    @property
    def is_rod(self) -> bool:
        return self.vertices.is_rod

    def connector(self, name: str) -> Connector:
        for connector in self.connectors:
            if connector.name == name:
                return connector
        raise KeyError(f"Tile {self.name!r} has no connector {name!r}")

    def __str__(self) -> str:
        kind = "rod" if self.is_rod else f"{len(self.vertices)}-gon"
        connectors = ", ".join(f"{c.name}:{c.glue}" for c in self.connectors)
        return f"Tile {self.name} ({kind}) connectors [{connectors}]"

    def __repr__(self) -> str:
        return f"Tile('{self.name}', {len(self.connectors)} connectors)"


@dataclass
class SeedTile:
    """
    Tile placed at the start of a run.

    Attributes:
        name: Name of the catalog tile
        position: Translation applied after rotation
        angle: Extrinsic x-y-z Euler angles in degrees
    """
    name: str
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    angle: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self):
        check_name(self.name, "Seed tile")
        self.position = as_point(self.position)
        self.angle = as_point(self.angle)

    def rotation(self) -> Optional[Rotation]:
        if not np.any(self.angle):
            return None
        return Rotation.from_euler("xyz", self.angle, degrees=True)

    def place(self, tiles: Dict[str, Tile]) -> "TileInSpace":
        """Instantiate the seed from the catalog tiles."""
        if self.name not in tiles:
            raise CatalogError("seed refers to an unknown tile", entity=self.name)
        return TileInSpace(tiles[self.name], self.position, self.rotation())

    def __str__(self) -> str:
        return self.name


class TileInSpace:
    """
    Placed tile with a run-unique ID.

    The shape is immutable; moving the tile replaces it with a moved copy.
    Mutable fields (state, color, connector links) may be written only
    between discrete simulation steps, never concurrently with geometry
    queries.
    """

    def __init__(
        self,
        tile: Tile,
        position: Optional[np.ndarray] = None,
        rotation: Optional[Rotation] = None,
    ):
        translation = np.zeros(3) if position is None else as_point(position)
        self.tile = tile
        self.id = next(_tile_ids)
        self.vertices: Polytope = tile.vertices.transformed(rotation, translation, tile.name)
        self.connectors: List[Connector] = []
        for connector in tile.connectors:
            placed = connector.placed(rotation, translation)
            placed.on_tile = self
            self.connectors.append(placed)

        self.state = TileState.CREATE
        self.color = tile.color
        self.alpha = tile.alpha
        self.color_was_changed = False

    @property
    def name(self) -> str:
        return self.tile.name

    @property
    def is_rod(self) -> bool:
        return self.vertices.is_rod

    @property
    def position(self) -> np.ndarray:
        return self.vertices.center

    def connector(self, name: str) -> Connector:
        for connector in self.connectors:
            if connector.name == name:
                return connector
        raise KeyError(f"Tile {self.name!r} #{self.id} has no connector {name!r}")

    def move(self, vector: np.ndarray) -> None:
        """Shift the tile and its connectors."""
        vector = as_point(vector)
        self.vertices = self.vertices.translated(vector, self.name)
        for connector in self.connectors:
            moved = connector.positions + vector
            moved.flags.writeable = False
            connector.positions = moved
        if self.state != TileState.CREATE:
            self.state = TileState.MOVE

    def destroy(self) -> None:
        self.state = TileState.DESTROY

    def set_color(self, color: str, alpha: Optional[int] = None) -> None:
        if color != self.color or (alpha is not None and alpha != self.alpha):
            self.color_was_changed = True
        self.color = color
        if alpha is not None:
            self.alpha = alpha

    def mark_unchanged(self) -> None:
        """Reset per-step flags after a snapshot was taken."""
        self.state = TileState.UNCHANGED
        self.color_was_changed = False

    def connect(self, name: str, other: "TileInSpace", other_name: str) -> None:
        """Attach own connector ``name`` to ``other_name`` on ``other``."""
        mine = self.connector(name)
        theirs = other.connector(other_name)
        mine.connected_to = (other.id, other_name)
        theirs.connected_to = (self.id, name)

    def disconnect(self, name: str, other: "TileInSpace") -> None:
        """Detach own connector ``name`` from its partner on ``other``."""
        mine = self.connector(name)
        if mine.connected_to is None:
            return
        other_id, other_name = mine.connected_to
        if other_id != other.id:
            raise ValueError(f"Connector {name!r} of tile #{self.id} is not attached to tile #{other.id}")
        theirs = other.connector(other_name)
        mine.was_connected_to, mine.connected_to = mine.connected_to, None
        theirs.was_connected_to, theirs.connected_to = theirs.connected_to, None

    def side_point(self, position: np.ndarray, side: Side) -> np.ndarray:
        """Reference point on a side of a face; rods have no sides."""
        if isinstance(self.vertices, Polygon):
            return self.vertices.side_point(position, side)
        return as_point(position)

    def pushing_of(self, another: "TileInSpace", pushing_vector: np.ndarray) -> np.ndarray:
        return self.vertices.pushing_of(another.vertices, pushing_vector)

    def __repr__(self) -> str:
        return f"TileInSpace('{self.name}', id={self.id}, state={self.state.value})"
