"""
Point, vector and plane helpers for the geometry kernel.

Points and vectors are plain numpy arrays of shape (3,). Equality of points
is tolerance based: two points are equal if their distance does not exceed
the tolerance of the active GeometryParams.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple
import numpy as np
from scipy.spatial.distance import cdist

from ..config import DEFAULT_GEOMETRY


ORIGIN = np.zeros(3)
ORIGIN.flags.writeable = False


def as_point(p: Sequence[float]) -> np.ndarray:
    """Copy anything point-like into a float64 array of shape (3,)."""
    arr = np.array(p, dtype=np.float64).reshape(-1)
    if arr.shape != (3,):
        raise ValueError(f"Expected 3 coordinates, got {arr.shape[0]}")
    return arr


def as_vertex_table(points: Iterable[Sequence[float]]) -> np.ndarray:
    """Stack points into a read-only (N, 3) array."""
    table = np.array([as_point(p) for p in points], dtype=np.float64).reshape(-1, 3)
    table.flags.writeable = False
    return table


def points_equal(a: np.ndarray, b: np.ndarray, tol: float = DEFAULT_GEOMETRY.tolerance) -> bool:
    """True if the two points are closer than or exactly at ``tol``."""
    return float(np.linalg.norm(a - b)) <= tol


def unit(v: np.ndarray) -> np.ndarray:
    """Normalized copy of ``v``. Raises ValueError for a zero vector."""
    length = float(np.linalg.norm(v))
    if length == 0.0:
        raise ValueError("Cannot normalize a zero vector")
    return v / length


def is_parallel(u: np.ndarray, v: np.ndarray, tol: float = DEFAULT_GEOMETRY.parallel_tolerance) -> bool:
    """Parallel or antiparallel unit vectors."""
    return 1.0 - abs(float(np.dot(u, v))) < tol


def is_perpendicular(u: np.ndarray, v: np.ndarray, tol: float = DEFAULT_GEOMETRY.perpendicular_tolerance) -> bool:
    """Perpendicular unit vectors."""
    return abs(float(np.dot(u, v))) < tol


def centroid(points: Iterable[np.ndarray]) -> np.ndarray:
    """Arithmetic mean of points."""
    return np.mean(np.asarray(list(points), dtype=np.float64), axis=0)


def closest_points_between_segments(
    a0: np.ndarray,
    a1: np.ndarray,
    b0: np.ndarray,
    b1: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Closest points of two bounded segments a0-a1 and b0-b1.

    Returns (point on a, point on b). Degenerate (zero length) segments are
    handled as points.
    """
    d1 = a1 - a0
    d2 = b1 - b0
    r = a0 - b0
    a = float(np.dot(d1, d1))
    e = float(np.dot(d2, d2))
    f = float(np.dot(d2, r))

    if a == 0.0 and e == 0.0:
        return a0.copy(), b0.copy()

    if a == 0.0:
        s = 0.0
        t = float(np.clip(f / e, 0.0, 1.0))
    else:
        c = float(np.dot(d1, r))
        if e == 0.0:
            t = 0.0
            s = float(np.clip(-c / a, 0.0, 1.0))
        else:
            b = float(np.dot(d1, d2))
            denom = a * e - b * b
            # Parallel segments: any s works, pick the start and fix below
            s = float(np.clip((b * f - c * e) / denom, 0.0, 1.0)) if denom > 0.0 else 0.0
            t = (b * s + f) / e
            if t < 0.0:
                t = 0.0
                s = float(np.clip(-c / a, 0.0, 1.0))
            elif t > 1.0:
                t = 1.0
                s = float(np.clip((b - c) / a, 0.0, 1.0))

    return a0 + s * d1, b0 + t * d2


@dataclass(frozen=True)
class Plane:
    """
    Plane n . x = offset with unit normal n.

    Attributes:
        normal: Unit normal vector
        offset: Signed distance of the plane from the origin
    """
    normal: np.ndarray
    offset: float

    @classmethod
    def from_points(cls, p1: np.ndarray, p2: np.ndarray, p3: np.ndarray) -> "Plane":
        """
        Plane through three points with normal (p2 - p1) x (p3 - p1).

        Raises ValueError if the points are collinear.
        """
        cross = np.cross(p2 - p1, p3 - p1)
        length = float(np.linalg.norm(cross))
        if length == 0.0:
            raise ValueError("points are collinear, plane is undefined")
        normal = cross / length
        normal.flags.writeable = False
        return cls(normal=normal, offset=float(np.dot(normal, p1)))

    def signed_distance(self, point: np.ndarray) -> float:
        return float(np.dot(self.normal, point)) - self.offset

    def absolute_distance(self, point: np.ndarray) -> float:
        return abs(self.signed_distance(point))

    def intersects(self, p1: np.ndarray, p2: np.ndarray, tol: float = DEFAULT_GEOMETRY.tolerance) -> bool:
        """Fast test: segment endpoints are not both strictly on one side."""
        d1 = self.signed_distance(p1)
        d2 = self.signed_distance(p2)
        return not ((d1 > tol and d2 > tol) or (d1 < -tol and d2 < -tol))

    def intersection_with(
        self,
        p1: np.ndarray,
        p2: np.ndarray,
        tol: float = DEFAULT_GEOMETRY.tolerance,
    ) -> Optional[np.ndarray]:
        """
        Intersection of segment p1-p2 with the plane.

        None if the segment is parallel to the plane or if the crossing of
        its supporting line lies beyond ``tol`` outside the segment, which
        includes endpoints that are vertically close to, but do not reach,
        the plane.
        """
        direction = p2 - p1
        denom = float(np.dot(self.normal, direction))
        length = float(np.linalg.norm(direction))
        if length == 0.0 or abs(denom) < 1e-15 * length:
            return None
        t = -self.signed_distance(p1) / denom
        slack = tol / length
        if t < -slack or t > 1.0 + slack:
            return None
        return p1 + float(np.clip(t, 0.0, 1.0)) * direction

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Plane):
            return NotImplemented
        return self.offset == other.offset and np.array_equal(self.normal, other.normal)

    def __hash__(self) -> int:
        return hash((self.normal.tobytes(), self.offset))


class PointSet:
    """
    Insertion ordered set of points with tolerance based membership.

    Used for intersection results, where the same crossing is typically
    found from two directions with rounding noise.

    Example:
        points = PointSet()
        points.add(np.array([0.0, 0.0, 0.0]))
        points.add(np.array([0.0, 0.0, 1e-12]))   # same point
        assert len(points) == 1
    """

    def __init__(self, points: Optional[Iterable[np.ndarray]] = None, tol: float = DEFAULT_GEOMETRY.tolerance):
        self.tol = tol
        self._points: List[np.ndarray] = []
        if points is not None:
            self.update(points)

    def __contains__(self, point: np.ndarray) -> bool:
        if not self._points:
            return False
        distances = cdist(np.asarray(self._points), np.asarray(point, dtype=np.float64).reshape(1, 3))
        return bool(distances.min() <= self.tol)

    def add(self, point: np.ndarray) -> bool:
        """Add a point unless an equal one is present. Returns True if added."""
        if point in self:
            return False
        self._points.append(as_point(point))
        return True

    def update(self, points: Iterable[np.ndarray]) -> "PointSet":
        for point in points:
            self.add(point)
        return self

    def centroid(self) -> np.ndarray:
        """Centroid of the stored points. Raises ValueError if empty."""
        if not self._points:
            raise ValueError("centroid of an empty point set")
        return centroid(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def __bool__(self) -> bool:
        return bool(self._points)

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self._points)

    def __repr__(self) -> str:
        return f"PointSet({len(self._points)} points)"
