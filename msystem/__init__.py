"""
M-system tile simulator core

Geometry kernel and rule index of a membrane-computing style simulator in
which rigid faces and rods, glued together at connectors, are rewritten by
evolution rules without ever interpenetrating.

Main components:
- geometry: Segment and Polygon shapes with containment, intersection,
  overlap and pushing queries under one tolerance policy
- core: glues, connectors, tiles, evolution rules and the PSystem rule index
- config: tolerance constants and index builder options
"""

__version__ = "0.1.0"
__author__ = "M-system Team"

from .config import MSystemConfig, GeometryParams, IndexParams, TOLERANCE, SIDE_DIST, MIN_FACE_DIST
from .geometry import Polytope, PolytopeError, Polygon, Segment, Side, Plane, PointSet
from .core import (
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
    SeedTile,
    Tile,
    TileInSpace,
    TileState,
)

__all__ = [
    "MSystemConfig",
    "GeometryParams",
    "IndexParams",
    "TOLERANCE",
    "SIDE_DIST",
    "MIN_FACE_DIST",
    "Polytope",
    "PolytopeError",
    "Polygon",
    "Segment",
    "Side",
    "Plane",
    "PointSet",
    "Catalog",
    "CatalogError",
    "Connector",
    "EvolutionRule",
    "FloatingObject",
    "Glue",
    "GlueRelation",
    "MetabolicRule",
    "NonMetabolicRule",
    "Protein",
    "PSystem",
    "RuleType",
    "SeedTile",
    "Tile",
    "TileInSpace",
    "TileState",
]
