"""
Geometry kernel for tile shapes.

Contains:
- Primitives: point helpers, Plane, PointSet, segment closest points
- Polytope: common interface of tile shapes
- Segment: rod shaped tiles
- Polygon: convex planar faces with containment, overlap and pushing

All shapes are immutable; moving one produces a new shape.
"""

from .primitives import (
    ORIGIN,
    Plane,
    PointSet,
    as_point,
    as_vertex_table,
    centroid,
    closest_points_between_segments,
    is_parallel,
    is_perpendicular,
    points_equal,
    unit,
)
from .polytope import Polytope, PolytopeError
from .segment import Segment
from .polygon import Polygon, Side

__all__ = [
    "ORIGIN",
    "Plane",
    "PointSet",
    "as_point",
    "as_vertex_table",
    "centroid",
    "closest_points_between_segments",
    "is_parallel",
    "is_perpendicular",
    "points_equal",
    "unit",
    "Polytope",
    "PolytopeError",
    "Segment",
    "Polygon",
    "Side",
]
