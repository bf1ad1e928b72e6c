"""Tests for the 2D DWT engine and DWT2D system."""

from __future__ import annotations

import numpy as np
import pytest
import pywt

from wavelet_ecs.components.coeffs import DWT2DCoeff
from wavelet_ecs.components.image import Image2D, ReconImage2D
from wavelet_ecs.core.world import World
from wavelet_ecs.eval.pyramid import pyramid_shapes_2d
from wavelet_ecs.exceptions import InvalidArgumentError
from wavelet_ecs.systems.dwt1d import decompose
from wavelet_ecs.systems.dwt2d import DWT2D, decompose2d, reconstruct2d


class TestDecompose2D:
    """Forward 2D transform."""

    @pytest.mark.parametrize("shape", [(16, 16), (15, 16), (16, 15), (13, 9), (2, 2)])
    @pytest.mark.parametrize("name", ["haar", "db2", "db4"])
    def test_subband_shapes(self, name, shape):
        """Per axis the subband length follows the 1D law."""
        coeff = decompose2d(np.zeros(shape), levels=2, wavelet=name)
        shapes = [coeff.level_shape(level) for level in (1, 2)]
        assert shapes == pyramid_shapes_2d(shape, 2, name)
        for level in (1, 2):
            assert coeff.access_diagonal(level).shape == shapes[level - 1]

    def test_parity_flags(self):
        """Row and column parity are tracked independently."""
        coeff = decompose2d(np.zeros((9, 10)), levels=2, wavelet="db2")
        # rows 9 -> 6, cols 10 -> 6
        assert coeff.parity(1) == (False, True)
        assert coeff.parity(2) == (True, True)

    def test_haar_matches_pywt(self):
        """Haar on an even grid equals PyWavelets' periodized dwt2.

        PyWavelets names its details by orientation: cH is the high pass
        down the columns, which is our vertical subband.
        """
        grid = np.random.default_rng(2).normal(size=(8, 8))
        coeff = decompose2d(grid, levels=1, wavelet="haar")
        c_a, (c_h, c_v, c_d) = pywt.dwt2(grid, "haar", mode="periodization")
        np.testing.assert_allclose(coeff.access_approximate(1), c_a, atol=1e-12)
        np.testing.assert_allclose(coeff.access_vertical(1), c_h, atol=1e-12)
        np.testing.assert_allclose(coeff.access_horizontal(1), c_v, atol=1e-12)
        np.testing.assert_allclose(coeff.access_diagonal(1), c_d, atol=1e-12)

    def test_rows_match_1d(self):
        """A single-row pattern repeated over rows behaves like the 1D transform."""
        row = np.random.default_rng(4).normal(size=12)
        grid = np.tile(row, (4, 1))
        coeff2d = decompose2d(grid, levels=1, wavelet="haar")
        coeff1d = decompose(row, levels=1, wavelet="haar")
        # Constant columns: low pass scales by sqrt(2), high pass vanishes
        np.testing.assert_allclose(
            coeff2d.access_approximate(1)[0], np.sqrt(2) * coeff1d.access_approximate(1)
        )
        np.testing.assert_allclose(coeff2d.access_vertical(1), 0.0, atol=1e-12)

    @pytest.mark.parametrize("shape", [(1, 8), (8, 1), (8,), (2, 2, 2)])
    def test_bad_shapes(self, shape):
        """Grids must be 2D with both dimensions >= 2."""
        with pytest.raises(InvalidArgumentError):
            decompose2d(np.zeros(shape), levels=1, wavelet="haar")

    def test_bad_levels(self):
        """Level count must be >= 1."""
        with pytest.raises(InvalidArgumentError):
            decompose2d(np.zeros((4, 4)), levels=0, wavelet="haar")


class TestReconstruct2D:
    """Inverse 2D transform."""

    @pytest.mark.parametrize("shape", [(32, 32), (17, 32), (32, 17), (21, 13), (3, 2)])
    @pytest.mark.parametrize("name", ["haar", "db2", "db3", "db6"])
    def test_round_trip(self, name, shape):
        """decompose2d then reconstruct2d reproduces the grid."""
        grid = np.random.default_rng(sum(shape)).normal(size=shape)
        coeff = decompose2d(grid, levels=3, wavelet=name)
        recon = reconstruct2d(coeff)
        assert recon.shape == grid.shape
        np.testing.assert_allclose(recon, grid, atol=1e-9)

    def test_zeroed_details_blur(self):
        """Removing every detail subband leaves only the low-pass content."""
        grid = np.random.default_rng(6).uniform(size=(16, 16))
        coeff = decompose2d(grid, levels=2, wavelet="haar")
        for level, name, band in list(coeff.detail_bands()):
            coeff.assign_band(np.zeros_like(band), level, name)
        blurred = reconstruct2d(coeff)

        # Haar keeps the 4x4 block means
        expected = grid.reshape(4, 4, 4, 4).mean(axis=(1, 3)).repeat(4, axis=0).repeat(4, axis=1)
        np.testing.assert_allclose(blurred, expected, atol=1e-9)

    def test_no_wavelet(self):
        """Reconstruction needs a wavelet."""
        level = tuple(np.zeros((2, 2)) for _ in range(4))
        coeff = DWT2DCoeff.from_arrays([level], even=[(True, True)])
        with pytest.raises(InvalidArgumentError):
            reconstruct2d(coeff)

    def test_wavelet_override(self):
        """An override with the same filter length is used as given."""
        grid = np.random.default_rng(7).normal(size=(9, 12))
        coeff = decompose2d(grid, levels=2, wavelet="db2")
        np.testing.assert_allclose(reconstruct2d(coeff, "sym2"), grid, atol=1e-9)

    @pytest.mark.parametrize("name", ["haar", "db4"])
    def test_wavelet_override_length_mismatch(self, name):
        """An override with a different filter length is a caller error."""
        coeff = decompose2d(np.ones((8, 8)), levels=2, wavelet="db2")
        with pytest.raises(InvalidArgumentError, match="filter length"):
            reconstruct2d(coeff, name)


class TestDWT2DSystem:
    """DWT2D in a world."""

    def test_components(self):
        """Forward and inverse declare their components."""
        assert DWT2D(levels=1, wavelet="haar").required_components() == [Image2D]
        assert DWT2D(levels=1, wavelet="haar").produced_components() == [DWT2DCoeff]
        assert DWT2D(mode="inverse").required_components() == [DWT2DCoeff]
        assert DWT2D(mode="inverse").produced_components() == [ReconImage2D]

    def test_round_trip_in_world(self):
        """Image2D -> DWT2DCoeff -> ReconImage2D on several entities."""
        world = World()
        rng = np.random.default_rng(8)
        grids = [rng.normal(size=(10, 12)), rng.normal(size=(7, 7))]
        eids = [world.spawn_image(grid) for grid in grids]

        DWT2D(levels=2, wavelet="db2").run(world, eids)
        DWT2D(mode="inverse").run(world, eids)

        for eid, grid in zip(eids, grids):
            recon = world.arena.view(world.get_component(eid, ReconImage2D).pix)
            np.testing.assert_allclose(recon, grid, atol=1e-9)

    def test_uint8_input(self):
        """Integer images are transformed as float64."""
        world = World()
        img = np.random.default_rng(1).integers(0, 256, size=(16, 16), dtype=np.uint8)
        eid = world.spawn_image(img)
        recon = (
            world.pipe(eid)
            .to(DWT2D(levels=2, wavelet="db2"))
            .to(DWT2D(mode="inverse"))
            .out(ReconImage2D)
        )
        np.testing.assert_allclose(world.arena.view(recon.pix), img.astype(np.float64), atol=1e-9)
