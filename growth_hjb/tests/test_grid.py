"""Tests for state grids."""

import numpy as np
import pytest

from growth_hjb.exceptions import InvalidGridError
from growth_hjb.grid import StateGrid, TensorGrid, build_grid


class TestStateGrid:
    """Test StateGrid and build_grid."""

    @pytest.mark.parametrize(
        "min_value,max_value,num_points",
        [(0.0, 1.0, 2), (0.1, 10.0, 11), (-3.0, 7.5, 1000), (0.8, 1.2, 40)],
    )
    def test_uniform_increasing_nodes(self, min_value, max_value, num_points):
        """Test nodes are strictly increasing with constant spacing."""
        grid = build_grid("capital", min_value, max_value, num_points)

        assert len(grid.nodes) == num_points
        assert len(grid) == num_points
        assert np.all(np.diff(grid.nodes) > 0)
        assert grid.step == pytest.approx((max_value - min_value) / (num_points - 1))
        assert np.allclose(np.diff(grid.nodes), grid.step)
        assert grid.nodes[0] == min_value
        assert grid.nodes[-1] == pytest.approx(max_value)

    def test_grid_validation(self):
        """Test malformed bounds and counts are rejected."""
        with pytest.raises(InvalidGridError, match="min_value must be less than max_value"):
            build_grid("capital", 5.0, 5.0, 10)

        with pytest.raises(InvalidGridError, match="min_value must be less than max_value"):
            StateGrid("capital", 10.0, 5.0, 10)

        with pytest.raises(InvalidGridError, match="Need at least 2 grid points"):
            build_grid("capital", 0.0, 1.0, 1)

        with pytest.raises(InvalidGridError, match="finite"):
            build_grid("capital", 0.0, float("inf"), 10)

    def test_invalid_grid_error_is_value_error(self):
        """Test callers catching ValueError also see grid errors."""
        with pytest.raises(ValueError):
            build_grid("productivity", 1.0, 0.0, 5)

    def test_nodes_are_read_only(self):
        """Test the node array cannot be modified in place."""
        grid = build_grid("capital", 0.0, 1.0, 5)

        with pytest.raises(ValueError):
            grid.nodes[0] = 2.0


class TestTensorGrid:
    """Test TensorGrid composition and flattening."""

    def test_one_dimensional(self):
        """Test a capital-only grid."""
        grid = TensorGrid(build_grid("capital", 1.0, 2.0, 5))

        assert grid.ndim == 1
        assert grid.shape == (5,)
        assert grid.size == 5
        assert np.array_equal(grid.capital_mesh, grid.capital.nodes)
        assert np.array_equal(grid.exogenous_mesh, np.ones(5))

    def test_two_dimensional_meshes(self):
        """Test capital varies along rows and productivity along columns."""
        capital = build_grid("capital", 1.0, 2.0, 4)
        productivity = build_grid("productivity", 0.8, 1.2, 3)
        grid = TensorGrid(capital, productivity)

        assert grid.ndim == 2
        assert grid.shape == (3, 4)
        assert grid.size == 12
        for j in range(3):
            assert np.array_equal(grid.capital_mesh[j], capital.nodes)
            assert np.all(grid.exogenous_mesh[j] == productivity.nodes[j])

    def test_flat_index_matches_row_major(self):
        """Test capital neighbours sit at offset 1 and productivity neighbours at offset I."""
        grid = TensorGrid(build_grid("capital", 1.0, 2.0, 4), build_grid("z", 0.8, 1.2, 3))

        for j in range(3):
            for i in range(4):
                assert grid.flat_index(i, j) == np.ravel_multi_index((j, i), grid.shape)

        assert grid.flat_index(2, 1) - grid.flat_index(1, 1) == 1
        assert grid.flat_index(2, 2) - grid.flat_index(2, 1) == 4
