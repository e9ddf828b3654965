"""Tests for the leveling kernel."""

import numpy as np
import pytest

from basin import Grid, step
from basin.kernel import check_step_args


def ring_mask(shape):
    mask = np.ones(shape, dtype=bool)
    mask[1:-1, 1:-1] = False
    return mask


def wet_center(nx=3, ny=3, water=1.0):
    grid = Grid(nx, ny)
    grid.water[1, 1] = water
    return grid


class TestSourceInjection:
    """The spring adds a fixed amount at one cell every step."""

    def test_only_source_cell_gains(self):
        """With flow disabled by a huge epsilon, only the source cell changes."""
        grid = Grid(5, 5)
        step(grid, epsilon=10.0)

        assert grid.water[1, 1] == 1.0
        grid.water[1, 1] = 0.0
        assert np.all(grid.water == 0.0)

    def test_custom_increment_and_cell(self):
        """Increment and cell are configurable."""
        grid = Grid(6, 4)
        step(grid, source_increment=2.5, source_cell=(4, 2), epsilon=10.0)

        assert grid.water[4, 2] == 2.5
        assert grid.total_water() == 2.5

    def test_source_on_ring(self):
        """A ring source still receives injection; the pass never moves it."""
        grid = Grid(4, 4)
        for _ in range(3):
            step(grid, source_cell=(0, 0), boundary_absorbs=False)

        assert grid.water[0, 0] == 3.0
        assert grid.total_water() == 3.0


class TestLeveling:
    """Flow toward lower combined levels."""

    def test_single_cell_overdraws(self):
        """One wet cell with eight empty neighbours ends at 1 - 8 * 0.225."""
        grid = Grid(3, 3)
        step(grid)

        assert grid.water[1, 1] == pytest.approx(1.0 - 8 * 0.225)
        assert grid.water[1, 1] < 0.0
        assert np.allclose(grid.water[ring_mask(grid.shape)], 0.225)

    def test_level_snapshot_used_for_every_neighbor(self):
        """Each neighbour's share is computed from the level before any transfer."""
        grid = wet_center(water=2.0)
        step(grid, source_increment=0.0)

        shares = grid.water[ring_mask(grid.shape)]
        assert np.allclose(shares, (2.0 - 0.1) / 4)
        assert grid.water[1, 1] == pytest.approx(2.0 - 8 * (1.9 / 4))

    def test_no_uphill_flow(self):
        """Higher terrain around the cell blocks all outflow."""
        grid = wet_center()
        grid.height[ring_mask(grid.shape)] = 5
        step(grid, source_increment=0.0)

        assert grid.water[1, 1] == 1.0
        assert np.all(grid.water[ring_mask(grid.shape)] == 0.0)

    def test_equal_level_no_flow(self):
        """A neighbour at exactly the same level receives nothing."""
        grid = wet_center()
        grid.water[ring_mask(grid.shape)] = 1.0
        step(grid, source_increment=0.0)

        assert np.all(grid.water == 1.0)

    @pytest.mark.parametrize("neighbor", [0.95, 0.91, 0.999])
    def test_dead_zone(self, neighbor):
        """Differences under epsilon do not move water."""
        grid = wet_center()
        grid.water[ring_mask(grid.shape)] = neighbor
        step(grid, source_increment=0.0)

        assert grid.water[1, 1] == 1.0
        assert np.all(grid.water[ring_mask(grid.shape)] == neighbor)

    def test_just_outside_dead_zone(self):
        """Past epsilon the neighbour gets (L - eps - L_n) / 4."""
        grid = wet_center()
        grid.water[ring_mask(grid.shape)] = 0.85
        step(grid, source_increment=0.0)

        assert np.allclose(grid.water[ring_mask(grid.shape)], 0.85 + 0.05 / 4)
        assert grid.water[1, 1] == pytest.approx(1.0 - 8 * 0.05 / 4)

    def test_terrain_counts_toward_level(self):
        """Height lifts a cell's level: water runs off a raised cell onto flat ground."""
        grid = wet_center(water=0.5)
        grid.height[1, 1] = 2
        step(grid, source_increment=0.0)

        assert np.allclose(grid.water[ring_mask(grid.shape)], (2.5 - 0.1) / 4)

    def test_damping_divisor(self):
        """The divisor scales every share."""
        grid = wet_center()
        step(grid, source_increment=0.0, damping_divisor=8.0)

        assert np.allclose(grid.water[ring_mask(grid.shape)], 0.9 / 8)
        assert grid.water[1, 1] == pytest.approx(0.1)

    def test_dry_raised_cell_skipped(self):
        """A dry cell pours nothing even when its terrain towers over its neighbours."""
        grid = Grid(4, 3)
        grid.height[1, 1] = 5
        grid.water[2, 1] = 1.0
        step(grid, source_increment=0.0)

        # (1, 1) was dry when visited, so its height 5 moved nothing
        assert grid.water[0, 0] == 0.0
        assert grid.water[0, 1] == 0.0
        # (2, 1) sees (1, 1) at level 5, not lower, so nothing flows into it either
        assert grid.water[1, 1] == 0.0
        assert grid.water[3, 1] == pytest.approx(0.225)

    def test_dry_cell_receives_inflow(self):
        """A dry cell gains water from a wetter neighbour visited after it."""
        grid = Grid(4, 3)
        grid.water[2, 1] = 1.0
        step(grid, source_increment=0.0)

        assert grid.water[1, 1] == pytest.approx(0.225)

    def test_live_writes_feed_later_cells(self):
        """Water moved early in the sweep is seen by cells visited later in it."""
        grid = Grid(4, 3)
        step(grid)

        # (1, 1) pours 0.225 into (2, 1), which then pours on toward x=3 in the same pass
        assert grid.water[3, 1] == pytest.approx((0.225 - 0.1) / 4)
        assert grid.water[1, 1] == pytest.approx(-0.8 + (0.225 - 0.1 + 0.8) / 4)
        assert grid.water[2, 1] == pytest.approx(0.225 - 3 * 0.03125 - 0.23125)

    def test_height_untouched(self):
        """The terrain field is read only."""
        grid, _ = Grid.with_terrain(16, 12, seed=11)
        before = grid.height.copy()
        for _ in range(20):
            step(grid)

        assert np.array_equal(grid.height, before)


class TestScenario:
    """5x5 flat grid, default constants."""

    def test_first_step(self):
        """Corner ring cell only touches (1, 1), so it holds exactly one share."""
        grid = Grid(5, 5)
        step(grid)

        assert grid.water[0, 0] == pytest.approx(0.225)
        assert grid.total_water() == pytest.approx(1.0)
        assert grid.min_water() < 0.0

    def test_clamp_negative(self):
        """With clamping, no cell ends below dry."""
        grid = Grid(3, 3)
        step(grid, clamp_negative=True)

        assert grid.water[1, 1] == 0.0
        assert np.allclose(grid.water[ring_mask(grid.shape)], 0.225)


class TestBoundary:
    """The outer ring never pours water."""

    def test_ring_only_gains(self):
        """With absorbing ring, ring cells never lose water between steps."""
        grid, _ = Grid.with_terrain(12, 9, seed=5)
        mask = ring_mask(grid.shape)
        prev = grid.water[mask].copy()
        for _ in range(40):
            step(grid)
            cur = grid.water[mask]
            assert np.all(cur >= prev)
            prev = cur.copy()
        assert prev.sum() > 0.0

    def test_strict_ring_untouched(self):
        """With boundary_absorbs=False the pass never writes the ring."""
        grid, _ = Grid.with_terrain(12, 9, seed=5)
        for _ in range(40):
            step(grid, boundary_absorbs=False)

        assert np.all(grid.water[ring_mask(grid.shape)] == 0.0)

    def test_strict_ring_smallest_grid(self):
        """A 3x3 grid has no interior neighbours under the strict ring."""
        grid = Grid(3, 3)
        step(grid, boundary_absorbs=False)

        assert grid.water[1, 1] == 1.0
        assert grid.total_water() == 1.0


class TestConservationAndDeterminism:
    """Transfers move water, they never create or destroy it."""

    def test_total_equals_injected(self):
        """Without clamping, total water is exactly what the spring added."""
        grid, _ = Grid.with_terrain(14, 10, seed=7)
        for _ in range(30):
            step(grid)

        assert grid.total_water() == pytest.approx(30.0, rel=1e-9)

    def test_repeatable(self):
        """Two runs from the same seed match exactly."""
        a, _ = Grid.with_terrain(20, 15, seed=3)
        b, _ = Grid.with_terrain(20, 15, seed=3)
        for _ in range(50):
            step(a)
            step(b)

        assert np.array_equal(a.water, b.water)


def reference_step(water, height, epsilon=0.1, divisor=4.0):
    """Plain double loop: rows outer, columns inner, neighbour rows outer, columns inner."""
    nx, ny = water.shape
    water[1, 1] += 1.0
    for y in range(1, ny - 1):
        for x in range(1, nx - 1):
            w = water[x, y]
            if w == 0:
                continue
            level = w + height[x, y]
            for dy in (-1, 0, 1):
                for dx in (-1, 0, 1):
                    if dx == 0 and dy == 0:
                        continue
                    n_level = water[x + dx, y + dy] + height[x + dx, y + dy]
                    if n_level >= level:
                        continue
                    if n_level < level - epsilon:
                        flow = ((level - epsilon) - n_level) / divisor
                        water[x + dx, y + dy] += flow
                        water[x, y] -= flow


class TestSweepOrder:
    """The pass visits cells and neighbours in one fixed order."""

    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_matches_row_major_loop(self, seed):
        """Many steps on a multi-row terrain equal the reference loop exactly."""
        grid, _ = Grid.with_terrain(17, 11, seed=seed)
        water = grid.water.copy()
        for _ in range(150):
            step(grid)
            reference_step(water, grid.height)

        assert np.array_equal(grid.water, water)

    def test_two_rows_first_step(self):
        """4x4 flat grid: (2, 1) is visited before (1, 2) and ends lower."""
        grid = Grid(4, 4)
        step(grid)

        water = np.zeros((4, 4))
        reference_step(water, np.zeros((4, 4), dtype=np.int64))
        assert np.array_equal(grid.water, water)
        # transposing the start leaves it unchanged, so only the sweep breaks the symmetry
        assert grid.water[2, 1] != grid.water[1, 2]


class TestPreconditions:
    """Bad arguments fail before anything is written."""

    def test_source_outside_grid(self):
        grid = Grid(3, 3)
        with pytest.raises(ValueError):
            step(grid, source_cell=(3, 1))
        assert grid.total_water() == 0.0

    def test_negative_source_index(self):
        grid = Grid(3, 3)
        with pytest.raises(ValueError):
            check_step_args(grid, source_cell=(-1, 1))

    @pytest.mark.parametrize("divisor", [0.0, -4.0])
    def test_bad_divisor(self, divisor):
        grid = Grid(3, 3)
        with pytest.raises(ValueError):
            step(grid, damping_divisor=divisor)
        assert grid.total_water() == 0.0

    def test_negative_epsilon(self):
        with pytest.raises(ValueError):
            check_step_args(Grid(3, 3), epsilon=-0.1)

    def test_defaults_accepted(self):
        check_step_args(Grid(3, 3))
