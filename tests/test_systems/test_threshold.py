"""Tests for thresholding and NormalShrink systems."""

from __future__ import annotations

import numpy as np
import pytest

from wavelet_ecs.components.coeffs import DWT1DCoeff, DWT2DCoeff
from wavelet_ecs.core.world import World
from wavelet_ecs.exceptions import InvalidArgumentError
from wavelet_ecs.systems.dwt1d import decompose
from wavelet_ecs.systems.dwt2d import decompose2d, reconstruct2d
from wavelet_ecs.systems.threshold import (
    DetailThreshold,
    NormalShrink,
    hard_threshold,
    normal_shrink_thresholds,
    soft_threshold,
)


class TestThresholdFunctions:
    """Elementwise soft and hard thresholds."""

    def test_soft(self):
        """Values shrink toward zero by t."""
        out = soft_threshold([-3.0, -0.5, 0.0, 0.5, 3.0], 1.0)
        np.testing.assert_allclose(out, [-2.0, 0.0, 0.0, 0.0, 2.0])

    def test_hard(self):
        """Values at or below t are zeroed, the rest kept."""
        out = hard_threshold([-3.0, -1.0, 0.5, 1.0, 3.0], 1.0)
        np.testing.assert_allclose(out, [-3.0, 0.0, 0.0, 0.0, 3.0])

    def test_zero_threshold_is_identity(self):
        """t = 0 leaves soft thresholding unchanged."""
        x = np.random.default_rng(0).normal(size=10)
        np.testing.assert_allclose(soft_threshold(x, 0.0), x)

    def test_negative_threshold(self):
        """Negative thresholds are rejected."""
        with pytest.raises(InvalidArgumentError):
            soft_threshold([1.0], -0.1)
        with pytest.raises(InvalidArgumentError):
            hard_threshold([1.0], -0.1)


class TestDetailThreshold:
    """DetailThreshold system."""

    def test_init(self):
        """Test initialization and validation."""
        system = DetailThreshold(0.5, kind="hard")
        assert system.threshold == 0.5
        assert system.kind == "hard"
        with pytest.raises(InvalidArgumentError):
            DetailThreshold(0.5, kind="medium")  # type: ignore[arg-type]
        with pytest.raises(InvalidArgumentError):
            DetailThreshold(-1.0)

    def test_can_run(self):
        """Either pyramid type qualifies an entity."""
        world = World()
        bare = world.new_entity()
        with_1d = world.new_entity()
        world.add_component(with_1d, decompose(np.arange(8.0), 1, "haar"))

        system = DetailThreshold(1.0)
        assert not system.can_run(world, bare)
        assert system.can_run(world, with_1d)

    def test_1d_details_edited(self):
        """Only detail sequences change; approximations are kept."""
        world = World()
        eid = world.new_entity()
        coeff = decompose(np.random.default_rng(1).normal(size=32), 2, "db2")
        approx = np.array(coeff.access_approximate(2))
        world.add_component(eid, coeff)

        DetailThreshold(1e6, kind="hard").run(world, [eid])
        for _, detail in coeff.detail_bands():
            assert np.all(detail == 0.0)
        np.testing.assert_array_equal(coeff.access_approximate(2), approx)

    def test_level_subset(self):
        """Only the selected levels are edited."""
        world = World()
        eid = world.new_entity()
        coeff = decompose2d(np.random.default_rng(2).normal(size=(16, 16)), 2, "haar")
        level2 = np.array(coeff.access_diagonal(2))
        world.add_component(eid, coeff)

        DetailThreshold(1e6, levels=[1]).run(world, [eid])
        assert np.all(coeff.access_horizontal(1) == 0.0)
        np.testing.assert_array_equal(coeff.access_diagonal(2), level2)

    def test_level_subset_out_of_range(self):
        """Selecting a level the pyramid does not have is an error."""
        world = World()
        eid = world.new_entity()
        world.add_component(eid, decompose(np.arange(8.0), 1, "haar"))
        with pytest.raises(InvalidArgumentError):
            DetailThreshold(1.0, levels=[2]).run(world, [eid])


class TestNormalShrink:
    """NormalShrink adaptive denoising."""

    def test_required_components(self):
        """Operates on DWT2DCoeff only."""
        assert NormalShrink().required_components() == [DWT2DCoeff]
        assert NormalShrink().produced_components() == []

    def test_thresholds_formula(self):
        """Threshold = beta * noise_var / sigma."""
        coeff = decompose2d(np.random.default_rng(3).normal(size=(32, 32)), 2, "haar")
        hh1 = coeff.access_diagonal(1)
        noise_var = (np.median(np.abs(hh1)) / 0.6745) ** 2
        beta = np.sqrt(np.log((16 * 16) // 2))
        expected = beta * noise_var / np.std(coeff.access_horizontal(1))

        thresholds = normal_shrink_thresholds(coeff, 1)
        assert thresholds["horizontal"] == pytest.approx(expected)
        assert set(thresholds) == {"horizontal", "vertical", "diagonal"}

    def test_flat_band_untouched(self):
        """Zero-variance subbands get no threshold."""
        coeff = decompose2d(np.ones((8, 8)), 1, "haar")
        assert normal_shrink_thresholds(coeff, 1) == {
            "horizontal": None,
            "vertical": None,
            "diagonal": None,
        }

    def test_reduces_noise(self):
        """Shrinking a noisy smooth grid moves it toward the clean one."""
        rng = np.random.default_rng(4)
        y, x = np.mgrid[0:64, 0:64]
        clean = 100.0 * np.sin(x / 10.0) * np.cos(y / 12.0)
        noisy = clean + rng.normal(0.0, 10.0, clean.shape)

        world = World()
        eid = world.new_entity()
        coeff = decompose2d(noisy, 3, "db4")
        world.add_component(eid, coeff)
        NormalShrink().run(world, [eid])
        denoised = reconstruct2d(coeff)

        assert np.mean((denoised - clean) ** 2) < np.mean((noisy - clean) ** 2)

    def test_detail_energy_drops(self):
        """Soft thresholding never increases a subband's magnitude."""
        world = World()
        eid = world.new_entity()
        coeff = decompose2d(np.random.default_rng(5).normal(size=(32, 32)), 2, "db2")
        before = {(lvl, name): np.abs(band).sum() for lvl, name, band in coeff.detail_bands()}
        world.add_component(eid, coeff)
        NormalShrink().run(world, [eid])

        for lvl, name, band in coeff.detail_bands():
            assert np.abs(band).sum() <= before[(lvl, name)] + 1e-12

    def test_ignores_1d(self):
        """A 1D pyramid alone does not qualify."""
        world = World()
        eid = world.new_entity()
        world.add_component(eid, decompose(np.arange(8.0), 1, "haar"))
        assert not NormalShrink().can_run(world, eid)
        assert world.has_component(eid, DWT1DCoeff)
