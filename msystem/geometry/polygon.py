"""
Convex planar polygon in 3D space.

Vertices are kept in clockwise order with respect to the polygon's normal;
inside/outside reference points depend on it. All derived quantities (plane,
centroid, radius, edge normals and offsets) are computed once in the
constructor and never change.

Edge normals lie in the polygon's plane and point inwards, so the signed
distance of a point to edge i is

    h_i(p) = m_i . p + D_i        (+ inside, - outside)

and a point belongs to the polygon iff it is close to the plane and
h_i(p) >= -tolerance for all edges.
"""

from __future__ import annotations
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple, TYPE_CHECKING
import numpy as np
from scipy.spatial.distance import cdist

from ..config import GeometryParams, DEFAULT_GEOMETRY
from .primitives import (
    Plane,
    PointSet,
    as_point,
    as_vertex_table,
    closest_points_between_segments,
    is_parallel,
    is_perpendicular,
    points_equal,
)
from .polytope import Polytope, PolytopeError
from .segment import Segment

if TYPE_CHECKING:
    from scipy.spatial.transform import Rotation


class Side(Enum):
    """Side of a face on which a floating object or connector is placed."""
    INSIDE = "in"
    OUTSIDE = "out"
    UNDEFINED = "undef"


class Polygon(Polytope):
    """
    Convex polygon with named vertices.

    Example:
        square = Polygon([(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)], "square")
        square.contains_point(np.array([0.5, 0.5, 0.0]))    # True
        square.pushing_of(other, np.array([1.5, 0.0, 0.0]))
    """

    def __init__(
        self,
        vertices: Iterable[Sequence[float]],
        name: str,
        params: Optional[GeometryParams] = None,
    ):
        params = params or DEFAULT_GEOMETRY
        super().__init__(self._reorder(vertices, name, params), name, params)

        self._plane = Plane.from_points(self._vertices[1], self._vertices[0], self._vertices[2])
        self._radius = float(cdist(self._vertices, self._center.reshape(1, 3)).max())

        starts = self._vertices
        ends = np.roll(self._vertices, -1, axis=0)
        directions = ends - starts
        directions /= np.linalg.norm(directions, axis=1, keepdims=True)

        self._edges: Tuple[Tuple[np.ndarray, np.ndarray], ...] = tuple(zip(starts, ends))
        self._edge_normals = np.cross(directions, self._plane.normal)
        self._edge_normals.flags.writeable = False
        self._edge_offsets = -np.einsum('ij,ij->i', starts, self._edge_normals)
        self._edge_offsets.flags.writeable = False

    @staticmethod
    def _reorder(points: Optional[Iterable[Sequence[float]]], name: str, params: GeometryParams) -> np.ndarray:
        """
        Validate vertices and return them ordered clockwise.

        Raises PolytopeError if the name is missing, there are fewer than
        three vertices, they are not coplanar, two adjacent ones coincide,
        or the loop is not convex.
        """
        Polytope._check_name(name)
        if points is None:
            raise PolytopeError(name, "list of vertices cannot be None")

        try:
            vertices = as_vertex_table(points)
        except ValueError as e:
            raise PolytopeError(name, str(e)) from e

        count = len(vertices)
        if count < 3:
            raise PolytopeError(name, f"has {count} vertices, must have >= 3")

        try:
            plane = Plane.from_points(vertices[1], vertices[0], vertices[2])
        except ValueError as e:
            raise PolytopeError(name, str(e)) from e

        for vertex in vertices[3:]:
            if plane.absolute_distance(vertex) > params.tolerance:
                raise PolytopeError(name, "vertices do not lie in a plane")

        clockwise = True
        counterclockwise = True
        for i in range(count):
            v1 = vertices[i]
            v2 = vertices[(i + 1) % count]
            v3 = vertices[(i + 2) % count]
            if points_equal(v1, v2, params.tolerance) or points_equal(v2, v3, params.tolerance):
                raise PolytopeError(name, "vertices are too close")

            sign = float(np.dot(np.cross(v1 - v2, v2 - v3), plane.normal))
            clockwise &= sign < 0
            counterclockwise &= sign > 0

        if clockwise:
            return vertices
        if counterclockwise:
            reordered = vertices[::-1].copy()
            reordered.flags.writeable = False
            return reordered

        raise PolytopeError(name, "must be convex")

    # ----- Derived data -----

    @property
    def plane(self) -> Plane:
        return self._plane

    @property
    def normal(self) -> np.ndarray:
        """Unit normal; vertices are clockwise when viewed along it."""
        return self._plane.normal

    @property
    def radius(self) -> float:
        return self._radius

    @property
    def edges(self) -> Tuple[Tuple[np.ndarray, np.ndarray], ...]:
        """(start, end) pairs, edge i runs from vertex i to vertex i+1."""
        return self._edges

    @property
    def edge_normals(self) -> np.ndarray:
        """Inward unit normals of the edges, lying in the polygon's plane."""
        return self._edge_normals

    def edge_distances(self, point: np.ndarray) -> np.ndarray:
        """Signed in-plane distances of ``point`` to all edge lines (+ inside)."""
        return self._edge_normals @ point + self._edge_offsets

    # ----- Containment and intersections -----

    def contains_point(
        self,
        point: np.ndarray,
        border_width: float = 0.0,
        vertical_tolerance: Optional[float] = None,
    ) -> bool:
        """
        True if the given point lies inside the polygon.

        Args:
            point: Tested point
            border_width: Width of the polygon border which is not considered inside
            vertical_tolerance: Tolerated distance of the point from the polygon's plane
        """
        tol = self._params.tolerance
        if vertical_tolerance is None:
            vertical_tolerance = tol

        if abs(self._plane.signed_distance(point)) > vertical_tolerance:
            return False

        signed = self.edge_distances(point)
        if border_width > 0 and np.any(signed < border_width):
            return False
        return not np.any(signed < -tol)

    def intersection_with(
        self,
        p1: np.ndarray,
        p2: np.ndarray,
        border_width: float = 0.0,
        include_endpoints: bool = True,
    ) -> Optional[np.ndarray]:
        """
        Intersection point of this polygon with segment p1-p2, or None.

        None is returned also if the segment endpoints are vertically close
        to (but do not reach) the polygon's plane.

        Args:
            p1: Segment start point
            p2: Segment end point
            border_width: Intersection within border_width of the edges not considered
            include_endpoints: If False, touches at p1 or p2 are not considered
        """
        tol = self._params.tolerance
        intersection = self._plane.intersection_with(p1, p2, tol)
        if intersection is None or not self.contains_point(intersection, border_width):
            return None
        if not include_endpoints and (points_equal(intersection, p1, tol) or points_equal(intersection, p2, tol)):
            return None
        return intersection

    def intersects_with(
        self,
        p1: np.ndarray,
        p2: np.ndarray,
        border_width: float = 0.0,
        include_endpoints: bool = True,
    ) -> bool:
        """True if this polygon intersects the segment p1-p2."""
        # The plane test is a cheap exclusion, the second one is exact
        return (self._plane.intersects(p1, p2, self._params.tolerance)
                and self.intersection_with(p1, p2, border_width, include_endpoints) is not None)

    def _one_way_intersections_with(self, another: Sequence[np.ndarray]) -> PointSet:
        """Points where edges of a vertex loop cross this polygon, touches included."""
        intersections = PointSet(tol=self._params.tolerance)
        count = len(another)
        for i in range(count):
            intersection = self.intersection_with(another[i], another[(i + 1) % count])
            if intersection is not None:
                intersections.add(intersection)
        return intersections

    def intersections_with(self, polytope: Polytope) -> PointSet:
        """
        All points where a polytope crosses this polygon.

        Boundary touches within tolerance are ignored. If the polytope lies
        in the plane of this polygon nothing is returned, even if they
        overlap; use overlaps_with for that.
        """
        tol = self._params.tolerance
        result = PointSet(tol=tol)
        if self._far_apart(polytope):
            return result

        if isinstance(polytope, Polygon):
            intersections = self._one_way_intersections_with(polytope.vertices)
            intersections.update(polytope._one_way_intersections_with(self._vertices))
            if intersections:
                # Grazing edges of coplanar or touching faces give points on
                # the borders only
                center = intersections.centroid()
                if self.contains_point(center, tol) and polytope.contains_point(center, tol):
                    return intersections
        elif isinstance(polytope, Segment):
            intersection = self.intersection_with(polytope[0], polytope[1], tol, include_endpoints=False)
            if intersection is not None:
                result.add(intersection)
        return result

    def overlaps_with(self, another: "Polygon") -> bool:
        """
        True if both polygons lie in the same plane and share area.

        A mere touch along an edge or at a vertex is not an overlap.
        """
        tol = self._params.tolerance
        if not (is_parallel(self.normal, another.normal, self._params.parallel_tolerance)
                and self._plane.absolute_distance(another[0]) < tol):
            return False

        # Border tolerance excludes vertices which just touch the other polygon
        if (any(self.contains_point(v, tol) for v in another)
                or any(another.contains_point(v, tol) for v in self)):
            return True

        contacts = PointSet(tol=tol)
        for start1, end1 in self._edges:
            for start2, end2 in another.edges:
                c1, c2 = closest_points_between_segments(start1, end1, start2, end2)
                if np.linalg.norm(c1 - c2) < tol:
                    contacts.add(c1)
        if not contacts:
            return False

        center = contacts.centroid()
        return self.contains_point(center, tol) or another.contains_point(center, tol)

    def side_point(self, position: np.ndarray, side: Side) -> np.ndarray:
        """
        Reference point for placing floating objects on a side of this face.

        The point lies side_dist from ``position`` along the normal for
        Side.INSIDE, against it for Side.OUTSIDE, at ``position`` otherwise.
        """
        sign = {Side.INSIDE: 1.0, Side.OUTSIDE: -1.0}.get(side, 0.0)
        return as_point(position) + sign * self._params.side_dist * self.normal

    # ----- Pushing -----

    def _unidirectional_distance(self, points: Iterable[np.ndarray], movement: np.ndarray) -> float:
        """
        Minimal travel of any of ``points`` along ``movement`` before it hits
        an edge of this polygon.

        Boundary touches are ignored. The points must start outside the
        polygon. The result is bounded by the length of ``movement``.
        """
        tol = self._params.tolerance
        distance = float(np.linalg.norm(movement))
        for point in points:
            final = point + movement
            final_distances = self.edge_distances(final)
            for i, (start, end) in enumerate(self._edges):
                # Only edges which the final position lies inwards of
                if final_distances[i] > tol:
                    c1, c2 = closest_points_between_segments(point, final, start, end)
                    if np.linalg.norm(c1 - c2) <= tol:
                        distance = min(distance, float(np.linalg.norm(point - c1)))
        return distance

    def _in_plane_crossing_distance(self, another: "Polygon", movement: np.ndarray) -> float:
        """
        Travel of this polygon along ``movement`` (lying in both planes)
        before it hits ``another`` lying in a different plane.
        """
        distance = float(np.linalg.norm(movement))

        # Points where edges of another cross our plane, moving against us
        crossings = another._one_way_crossings(self._plane)
        if any(self.contains_point(p, self._params.tolerance) for p in crossings):
            return 0.0
        distance = min(distance, self._unidirectional_distance(crossings, -movement))

        # Points where our edges cross the other plane, moving into it
        crossings = self._one_way_crossings(another.plane)
        if any(another.contains_point(p, self._params.tolerance) for p in crossings):
            return 0.0
        distance = min(distance, another._unidirectional_distance(crossings, movement))
        return distance

    def _one_way_crossings(self, plane: Plane) -> List[np.ndarray]:
        """Points where edges of this polygon cross a plane."""
        crossings = []
        for start, end in self._edges:
            crossing = plane.intersection_with(start, end, self._params.tolerance)
            if crossing is not None:
                crossings.append(crossing)
        return crossings

    def pushing_of(self, another: Polytope, pushing_vector: np.ndarray) -> np.ndarray:
        """
        Pushing of ``another`` polytope by this polygon moving by ``pushing_vector``.

        Returns the displacement ``another`` needs to avoid interpenetration.
        It points along ``pushing_vector`` and is never longer; it equals
        ``pushing_vector`` when the two already intersect.

        Cases:
            A  another is a Segment: swap roles
            B  another is a Polygon
            B.1   this is pushed within its plane
            B.1.1 another is pushed within its plane, too (edge to edge)
            B.1.2 another is NOT pushed within its plane: swap roles
            B.2   this is NOT pushed within its plane (sweep faces)
        """
        tol = self._params.tolerance
        pushing_vector = as_point(pushing_vector)
        length = float(np.linalg.norm(pushing_vector))

        # Must be tested first, sweep faces of a zero push are degenerate
        if length < tol:
            return np.zeros(3)
        if self._far_apart(another, length):
            return np.zeros(3)

        if isinstance(another, Segment):
            return -another.pushing_of(self, -pushing_vector)

        if self.intersections_with(another):
            return pushing_vector.copy()

        direction = pushing_vector / length
        perpendicular_tol = self._params.perpendicular_tolerance

        if is_perpendicular(self.normal, direction, perpendicular_tol):
            if not is_perpendicular(another.normal, direction, perpendicular_tol):
                return -another.pushing_of(self, -pushing_vector)

            if self._plane.absolute_distance(another[0]) >= tol or not is_parallel(
                    self.normal, another.normal, self._params.parallel_tolerance):
                distance = self._in_plane_crossing_distance(another, pushing_vector)
            else:
                # Same plane, pushing edge to edge
                distance = min(self._unidirectional_distance(another, -pushing_vector),
                               another._unidirectional_distance(self, pushing_vector))
            return direction * (length - distance)

        # This polygon leaves its plane: sweep every edge along the push
        intersections = PointSet(tol=tol)
        for start, end in self._edges:
            sweep_face = Polygon(
                [start, end, end + pushing_vector, start + pushing_vector],
                f"{self._name}-pushing projection",
                self._params,
            )
            intersections.update(sweep_face.intersections_with(another))

        # Vertices of another which this polygon would pass through
        for point in another:
            if self.intersects_with(point, point - pushing_vector, tol, include_endpoints=False):
                intersections.add(point)

        n = float(np.dot(self.normal, direction))
        distance = length
        for point in intersections:
            distance = min(distance, abs(self._plane.signed_distance(point) / n))

        distance = length - distance

        if is_parallel(self.normal, another.normal, self._params.parallel_tolerance) and (
                distance > 0 or another.overlaps_with(self.translated(pushing_vector))):
            # Face to face: the minimal face distance must remain between them
            distance += self._params.min_face_dist / abs(n)

        return direction * min(distance, length)

    # ----- Movement -----

    def translated(self, vector: np.ndarray, name: Optional[str] = None) -> "Polygon":
        return Polygon(self._vertices + as_point(vector), name or f"{self._name} pushed", self._params)

    def transformed(
        self,
        rotation: Optional["Rotation"],
        translation: np.ndarray,
        name: Optional[str] = None,
    ) -> "Polygon":
        vertices = rotation.apply(np.array(self._vertices)) if rotation is not None else self._vertices
        return Polygon(vertices + as_point(translation), name or self._name, self._params)
