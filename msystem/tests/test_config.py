"""
Tests for configuration.
"""

import pytest

from msystem.config import (
    GeometryParams,
    IndexParams,
    MSystemConfig,
    MIN_FACE_DIST,
    SIDE_DIST,
    TOLERANCE,
)


class TestGeometryParams:
    """Tests for the tolerance policy."""

    def test_default_constants(self):
        """Interoperable tolerance values."""
        assert TOLERANCE == 1e-10
        assert SIDE_DIST == pytest.approx(5e-10)
        assert MIN_FACE_DIST == pytest.approx(2 * SIDE_DIST)

    def test_from_tolerance(self):
        params = GeometryParams.from_tolerance(1e-8)
        assert params.side_dist == pytest.approx(5e-8)
        assert params.min_face_dist == pytest.approx(1e-7)

    def test_immutable(self):
        params = GeometryParams()
        with pytest.raises(AttributeError):
            params.tolerance = 1.0

    @pytest.mark.parametrize("kwargs", [
        {"tolerance": 0.0},
        {"side_dist": 1e-11},
        {"min_face_dist": 1e-10},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            GeometryParams(**kwargs)


class TestMSystemConfig:
    """Tests for the configuration container."""

    def test_save_load(self, tmp_path):
        config = MSystemConfig(
            geometry=GeometryParams.from_tolerance(1e-9),
            index=IndexParams(require_non_empty_catalog=True),
        )
        path = tmp_path / "nested" / "msystem.json"
        config.save(path)

        loaded = MSystemConfig.load(path)
        assert loaded.geometry == config.geometry
        assert loaded.index.require_non_empty_catalog

    def test_validate(self):
        assert MSystemConfig().validate() == []
        loose = MSystemConfig(geometry=GeometryParams.from_tolerance(1e-3))
        assert len(loose.validate()) == 1
