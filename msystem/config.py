"""
Configuration module for the M-system core.

Contains the numeric tolerance policy shared by every geometry call and
the options of the rule index builder.
"""

from dataclasses import dataclass, field
from typing import List
import json
from pathlib import Path


@dataclass(frozen=True)
class GeometryParams:
    """
    Numeric tolerances of the geometry kernel.

    Experimentally observed errors in vertex positions are of the order
    1e-16 when object sizes are of the order of units, so two points within
    ``tolerance`` of each other are considered identical.

    Attributes:
        tolerance: Point equality / touch distance
        side_dist: Offset of "inside" and "outside" reference points from a face
        min_face_dist: Minimal distance of two faces pushed face to face
        perpendicular_tolerance: |n . d| below which a push is "in plane"
        parallel_tolerance: 1 - |n1 . n2| below which normals are parallel
    """
    tolerance: float = 1e-10
    side_dist: float = 5 * 1e-10
    min_face_dist: float = 2 * (5 * 1e-10)
    perpendicular_tolerance: float = 1e-12
    parallel_tolerance: float = 1e-10

    def __post_init__(self):
        if self.tolerance <= 0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}")
        if self.side_dist < self.tolerance:
            raise ValueError("side_dist must not be smaller than tolerance")
        if self.min_face_dist < self.side_dist:
            raise ValueError("min_face_dist must not be smaller than side_dist")

    @classmethod
    def from_tolerance(cls, tolerance: float) -> "GeometryParams":
        """Derive side and face distances from a base tolerance (5x and 10x)."""
        side_dist = 5 * tolerance
        return cls(
            tolerance=tolerance,
            side_dist=side_dist,
            min_face_dist=2 * side_dist,
        )


@dataclass
class IndexParams:
    """Rule index builder parameters."""
    # Refuse catalogs without any tiles, glues, proteins or rules
    require_non_empty_catalog: bool = False

    # Log per-index sizes after the build
    log_index_summary: bool = True


@dataclass
class MSystemConfig:
    """
    Main configuration container.

    Example:
        config = MSystemConfig(geometry=GeometryParams.from_tolerance(1e-9))
        config.save("msystem.json")
        same = MSystemConfig.load("msystem.json")
    """
    geometry: GeometryParams = field(default_factory=GeometryParams)
    index: IndexParams = field(default_factory=IndexParams)

    def save(self, path: str | Path) -> None:
        """Save configuration to JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self._to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: str | Path) -> "MSystemConfig":
        """Load configuration from JSON file."""
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return cls._from_dict(data)

    def _to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        def convert(obj):
            if hasattr(obj, '__dataclass_fields__'):
                return {k: convert(v) for k, v in obj.__dict__.items()}
            return obj

        return convert(self)

    @classmethod
    def _from_dict(cls, data: dict) -> "MSystemConfig":
        """Reconstruct from dictionary."""
        data = dict(data)
        if 'geometry' in data:
            data['geometry'] = GeometryParams(**data['geometry'])
        if 'index' in data:
            data['index'] = IndexParams(**data['index'])
        return cls(**data)

    def validate(self) -> List[str]:
        """Validate configuration, return list of warnings/errors."""
        issues = []

        if self.geometry.tolerance > 1e-6:
            issues.append("tolerance > 1e-6 may merge distinct vertices")
        if self.geometry.perpendicular_tolerance > self.geometry.tolerance:
            issues.append("perpendicular_tolerance should not exceed tolerance")

        return issues


# Shared immutable tolerance policy used when no explicit params are given
DEFAULT_GEOMETRY = GeometryParams()

TOLERANCE = DEFAULT_GEOMETRY.tolerance
SIDE_DIST = DEFAULT_GEOMETRY.side_dist
MIN_FACE_DIST = DEFAULT_GEOMETRY.min_face_dist
