"""
Rod shaped tiles: a straight segment between two endpoints.
"""

from __future__ import annotations
from typing import Iterable, List, Optional, Sequence, Tuple, TYPE_CHECKING
import numpy as np

from ..config import GeometryParams, DEFAULT_GEOMETRY
from .primitives import (
    PointSet,
    as_point,
    as_vertex_table,
    closest_points_between_segments,
    is_parallel,
    is_perpendicular,
    points_equal,
)
from .polytope import Polytope, PolytopeError

if TYPE_CHECKING:
    from scipy.spatial.transform import Rotation


class Segment(Polytope):
    """
    Segment with two named endpoints.

    Example:
        rod = Segment([(0, 0, 0), (1, 0, 0)], "rod")
        rod.contains_point(np.array([0.5, 0.0, 0.0]))     # True
    """

    def __init__(
        self,
        vertices: Iterable[Sequence[float]],
        name: str,
        params: Optional[GeometryParams] = None,
    ):
        params = params or DEFAULT_GEOMETRY
        Polytope._check_name(name)
        if vertices is None:
            raise PolytopeError(name, "list of vertices cannot be None")
        try:
            table = as_vertex_table(vertices)
        except ValueError as e:
            raise PolytopeError(name, str(e)) from e
        if len(table) != 2:
            raise PolytopeError(name, f"has {len(table)} vertices, segment must have 2")
        if points_equal(table[0], table[1], params.tolerance):
            raise PolytopeError(name, "endpoints are too close")

        super().__init__(table, name, params)
        self._length = float(np.linalg.norm(table[1] - table[0]))
        self._direction = (table[1] - table[0]) / self._length
        self._direction.flags.writeable = False

    @property
    def radius(self) -> float:
        return self._length / 2

    @property
    def length(self) -> float:
        return self._length

    @property
    def direction(self) -> np.ndarray:
        """Unit vector from the first to the second endpoint."""
        return self._direction

    @property
    def edges(self) -> Tuple[Tuple[np.ndarray, np.ndarray], ...]:
        return ((self._vertices[0], self._vertices[1]),)

    @property
    def is_rod(self) -> bool:
        return True

    def contains_point(self, point: np.ndarray) -> bool:
        start = self._vertices[0]
        t = float(np.clip(np.dot(point - start, self._direction), 0.0, self._length))
        return points_equal(start + t * self._direction, point, self._params.tolerance)

    def intersections_with(self, polytope: Polytope) -> PointSet:
        """Crossing with a polygon or another rod; endpoint touches are ignored."""
        tol = self._params.tolerance
        result = PointSet(tol=tol)
        if self._far_apart(polytope):
            return result

        if not isinstance(polytope, Segment):
            return polytope.intersections_with(self)

        c1, c2 = closest_points_between_segments(self[0], self[1], polytope[0], polytope[1])
        if np.linalg.norm(c1 - c2) <= tol and not any(points_equal(c1, end, tol) for end in (*self, *polytope)):
            result.add(c1)
        return result

    def _travel_to_hit(self, another: Polytope, start: np.ndarray, movement: np.ndarray) -> Optional[float]:
        """Distance ``start`` travels along ``movement`` before it meets ``another``."""
        tol = self._params.tolerance
        end = start + movement
        if isinstance(another, Segment):
            c1, c2 = closest_points_between_segments(start, end, another[0], another[1])
            if np.linalg.norm(c1 - c2) <= tol:
                return float(np.linalg.norm(c1 - start))
            return None

        intersection = another.intersection_with(start, end)
        if intersection is None:
            return None
        return float(np.linalg.norm(intersection - start))

    def _lies_in(self, face: Polytope, direction: np.ndarray) -> bool:
        """This rod and its push both lie in the plane of ``face``."""
        plane = face.plane
        return (is_perpendicular(plane.normal, direction, self._params.perpendicular_tolerance)
                and all(plane.absolute_distance(point) <= self._params.tolerance for point in self))

    def _sweep_contacts(self, another: Polytope, pushing_vector: np.ndarray) -> List[float]:
        """
        Travel distances at which this rod, moving by ``pushing_vector``,
        touches ``another``.
        """
        # Local import, polygon module depends on this one
        from .polygon import Polygon

        tol = self._params.tolerance
        start = self._vertices[0]
        direction = pushing_vector / np.linalg.norm(pushing_vector)
        contacts = []

        # Endpoints of this rod travelling forward
        for point in self:
            travel = self._travel_to_hit(another, point, pushing_vector)
            if travel is not None:
                contacts.append(travel)

        # Rays within the plane of a face miss its plane crossing test,
        # their edge hits are found in the plane instead
        if isinstance(another, Polygon) and self._lies_in(another, direction):
            contacts.append(another._unidirectional_distance(self, pushing_vector))

        # Vertices of another travelling backward onto this rod
        for point in another:
            c1, c2 = closest_points_between_segments(point, point - pushing_vector, self[0], self[1])
            if np.linalg.norm(c1 - c2) <= tol:
                contacts.append(float(np.linalg.norm(point - c1)))

        # Edges of another crossing the area swept by this rod
        if not is_parallel(direction, self._direction, self._params.parallel_tolerance):
            sweep_face = Polygon(
                [self[0], self[1], self[1] + pushing_vector, self[0] + pushing_vector],
                f"{self._name}-pushing projection",
                self._params,
            )
            lever = float(np.linalg.norm(np.cross(direction, self._direction)))
            for edge_start, edge_end in another.edges:
                crossing = sweep_face.intersection_with(edge_start, edge_end)
                if crossing is not None:
                    offset = np.cross(crossing - start, self._direction)
                    contacts.append(float(np.linalg.norm(offset)) / lever)

        return contacts

    def pushing_of(self, another: Polytope, pushing_vector: np.ndarray) -> np.ndarray:
        """
        Pushing of ``another`` polytope by this rod moving by ``pushing_vector``.

        The rod sweeps a parallelogram; the earliest contact along the sweep
        decides how much of the push is passed on. Touches at the starting
        position are ignored, as are boundary touches elsewhere in the kernel.
        """
        tol = self._params.tolerance
        pushing_vector = as_point(pushing_vector)
        length = float(np.linalg.norm(pushing_vector))

        if length < tol:
            return np.zeros(3)
        if self._far_apart(another, length):
            return np.zeros(3)
        if self.intersections_with(another):
            return pushing_vector.copy()

        contacts = [t for t in self._sweep_contacts(another, pushing_vector) if t > tol]
        if not contacts:
            return np.zeros(3)

        distance = length - min(min(contacts), length)
        return pushing_vector / length * distance

    def translated(self, vector: np.ndarray, name: Optional[str] = None) -> "Segment":
        return Segment(self._vertices + as_point(vector), name or f"{self._name} pushed", self._params)

    def transformed(
        self,
        rotation: Optional["Rotation"],
        translation: np.ndarray,
        name: Optional[str] = None,
    ) -> "Segment":
        vertices = rotation.apply(np.array(self._vertices)) if rotation is not None else self._vertices
        return Segment(vertices + as_point(translation), name or self._name, self._params)
