"""
Common interface of tile shapes.

A tile is either a rod (Segment) or a convex planar face (Polygon). The two
shapes answer the same containment, intersection and pushing queries; the
set of shapes is closed, and pushing between them is case-analyzed
explicitly in the concrete classes.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Iterator, Optional, Tuple, TYPE_CHECKING
import numpy as np

from ..config import GeometryParams, DEFAULT_GEOMETRY
from .primitives import PointSet, centroid

if TYPE_CHECKING:
    from scipy.spatial.transform import Rotation


class PolytopeError(ValueError):
    """Raised when a polytope cannot be constructed from the given vertices."""

    def __init__(self, name: Optional[str], message: str):
        self.name = name
        super().__init__(f"Polytope {name!r}: {message}" if name else message)


class Polytope(ABC):
    """
    Immutable shape with named, read-only vertices.

    Derived quantities (center, radius, ...) are computed once at
    construction. Moving a polytope produces a new one.
    """

    def __init__(self, vertices: np.ndarray, name: str, params: Optional[GeometryParams] = None):
        self._vertices = vertices
        self._name = name
        self._params = params or DEFAULT_GEOMETRY
        self._center = centroid(vertices)
        self._center.flags.writeable = False

    @staticmethod
    def _check_name(name: Optional[str]) -> None:
        if name is None:
            raise PolytopeError(None, "name cannot be None")
        if name == "":
            raise PolytopeError(None, "name cannot be empty")

    @property
    def name(self) -> str:
        return self._name

    @property
    def vertices(self) -> np.ndarray:
        """Read-only (N, 3) vertex table."""
        return self._vertices

    @property
    def params(self) -> GeometryParams:
        """Tolerance policy inherited by all derived polytopes."""
        return self._params

    @property
    def center(self) -> np.ndarray:
        """Centroid of the vertices."""
        return self._center

    @property
    @abstractmethod
    def radius(self) -> float:
        """Distance from center to the furthest vertex."""

    @property
    @abstractmethod
    def edges(self) -> Tuple[Tuple[np.ndarray, np.ndarray], ...]:
        """(start, end) vertex pairs of the boundary."""

    @property
    def is_rod(self) -> bool:
        return False

    @abstractmethod
    def contains_point(self, point: np.ndarray) -> bool:
        """True if the point lies on the shape (tolerance allowed)."""

    @abstractmethod
    def intersections_with(self, polytope: "Polytope") -> PointSet:
        """Points where another polytope crosses this one, boundary touches ignored."""

    @abstractmethod
    def pushing_of(self, another: "Polytope", pushing_vector: np.ndarray) -> np.ndarray:
        """
        Displacement imparted to ``another`` when this polytope moves by
        ``pushing_vector``. Never longer than ``pushing_vector``.
        """

    @abstractmethod
    def translated(self, vector: np.ndarray, name: Optional[str] = None) -> "Polytope":
        """Copy moved by ``vector``."""

    @abstractmethod
    def transformed(
        self,
        rotation: Optional["Rotation"],
        translation: np.ndarray,
        name: Optional[str] = None,
    ) -> "Polytope":
        """Copy rotated about the origin, then moved by ``translation``."""

    def _far_apart(self, another: "Polytope", slack: float = 0.0) -> bool:
        """Bounding spheres (grown by ``slack``) do not meet."""
        distance = float(np.linalg.norm(self.center - another.center))
        return distance > slack + self.radius + another.radius

    def __len__(self) -> int:
        return len(self._vertices)

    def __getitem__(self, index: int) -> np.ndarray:
        return self._vertices[index]

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self._vertices)

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self._name}', {len(self._vertices)} vertices)"
