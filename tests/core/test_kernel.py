"""
Tests for Kernel and StructuringElement
"""

import numpy as np
import pytest

from pixelflow.core.exceptions import InvalidParameter
from pixelflow.core.kernel import Kernel, StructuringElement, structuring_element, window_size
from pixelflow.filters import kernels


class TestKernel:
    """Test weight matrices"""

    def test_default_anchor_odd(self):
        """Test odd kernels anchor at the centre"""
        assert Kernel(np.ones((3, 5))).anchor == (2, 1)

    def test_default_anchor_even(self):
        """Test even kernels anchor right of / below the centre"""
        kernel = Kernel(np.ones((4, 4)))
        assert kernel.anchor == (2, 2)
        assert kernel.padding() == (2, 1, 2, 1)

    def test_explicit_anchor(self):
        """Test explicit anchors change the padding"""
        kernel = Kernel(np.ones((3, 3)), anchor=(0, 2))
        assert kernel.padding() == (2, 0, 0, 2)

    def test_anchor_outside(self):
        """Test anchors must lie inside the kernel"""
        with pytest.raises(InvalidParameter):
            Kernel(np.ones((3, 3)), anchor=(3, 0))

    @pytest.mark.parametrize("weights", [[], [1.0, 2.0], [[1.0, np.nan]], np.ones((2, 2, 2))])
    def test_invalid_weights(self, weights):
        """Test empty, non-2D and non-finite weights"""
        with pytest.raises(InvalidParameter):
            Kernel(weights)

    def test_weights_are_read_only(self):
        """Test kernels are immutable"""
        kernel = Kernel([[1.0, 2.0]])
        with pytest.raises(ValueError):
            kernel.weights[0, 0] = 5.0

    def test_source_array_not_aliased(self):
        """Test the kernel copies its weights"""
        source = np.ones((3, 3))
        kernel = Kernel(source)
        source[1, 1] = 9
        assert kernel.weights[1, 1] == 1.0

    def test_from_separable(self):
        """Test kernels built from 1D factors"""
        kernel = Kernel.from_separable([1, 2, 1], [-1, 0, 1])
        assert kernel.size == (3, 3)
        assert kernel.weights.tolist() == [[-1, 0, 1], [-2, 0, 2], [-1, 0, 1]]
        column, row = kernel.factors()
        assert column.tolist() == [1, 2, 1]
        assert row.tolist() == [-1, 0, 1]

    def test_factorizes_rank_one(self):
        """Test separability is detected on plain weight matrices"""
        kernel = Kernel([[1.0, 2.0], [2.0, 4.0]])
        column, row = kernel.factors()
        assert np.allclose(np.outer(column, row), kernel.weights)
        assert kernel.is_separable

    def test_not_separable(self):
        """Test the Laplacian has no 1D factors"""
        assert kernels.laplacian().factors() is None
        assert not kernels.laplacian().is_separable

    def test_equality(self):
        """Test kernels compare by weights and anchor"""
        assert Kernel(np.ones((2, 2))) == Kernel(np.ones((2, 2)))
        assert Kernel(np.ones((2, 2))) != Kernel(np.ones((2, 2)), anchor=(0, 0))


class TestKernelFactories:
    """Test predefined kernels"""

    def test_identity(self):
        """Test the identity kernel"""
        assert kernels.identity(3).weights.tolist() == [[0, 0, 0], [0, 1, 0], [0, 0, 0]]

    def test_box_sums_to_one(self):
        """Test the box kernel is normalized"""
        box = kernels.box((5, 3))
        assert box.size == (5, 3)
        assert box.weights.sum() == pytest.approx(1.0)
        assert box.is_separable

    def test_gaussian(self):
        """Test Gaussian kernels are normalized, symmetric and separable"""
        kernel = kernels.gaussian(5)
        weights = kernel.weights
        assert weights.sum() == pytest.approx(1.0)
        assert np.allclose(weights, weights.T)
        assert np.allclose(weights, weights[::-1, ::-1])
        assert weights[2, 2] == weights.max()
        assert kernel.factors() is not None

    def test_gaussian_size_one(self):
        """Test a 1-tap Gaussian is the identity"""
        assert kernels.gaussian(1).weights.tolist() == [[1.0]]

    def test_gaussian_invalid_sigma(self):
        """Test sigma must be positive"""
        with pytest.raises(InvalidParameter):
            kernels.gaussian(3, sigma=0)

    def test_sobel_orientation(self):
        """Test Sobel kernels follow the usual orientation"""
        assert kernels.sobel_x().weights.tolist() == [[-1, 0, 1], [-2, 0, 2], [-1, 0, 1]]
        assert kernels.sobel_y().weights.tolist() == [[-1, -2, -1], [0, 0, 0], [1, 2, 1]]


class TestStructuringElement:
    """Test neighbourhood masks"""

    def test_empty_mask(self):
        """Test a mask needs at least one set cell"""
        with pytest.raises(InvalidParameter):
            StructuringElement(np.zeros((3, 3)))

    def test_rectangle(self):
        """Test rectangular elements"""
        element = structuring_element("rectangle", (3, 2))
        assert element.size == (3, 2)
        assert element.anchor == (1, 1)
        assert len(element.offsets()) == 6
        assert StructuringElement.rectangle(3) == structuring_element("rectangle", 3)

    def test_cross(self):
        """Test cross elements"""
        element = structuring_element("CROSS", 3)
        assert sorted(element.offsets()) == [(-1, 0), (0, -1), (0, 0), (0, 1), (1, 0)]

    def test_disk(self):
        """Test disk elements are inscribed ellipses"""
        mask = structuring_element("disk", 5).mask
        assert mask.sum() == 13
        assert not mask[0, 0]
        assert mask[0, 2]
        assert mask[2, 2]

    def test_unknown_shape(self):
        """Test unknown shape names"""
        with pytest.raises(InvalidParameter):
            structuring_element("hexagon", 3)

    def test_offsets_relative_to_anchor(self):
        """Test offsets are (dy, dx) from the anchor"""
        element = StructuringElement([[1, 1]])
        assert element.anchor == (1, 0)
        assert element.offsets() == [(0, -1), (0, 0)]

    def test_reflected(self):
        """Test reflection negates every offset"""
        element = StructuringElement([[1, 1, 0], [0, 1, 1]], anchor=(0, 0))
        reflected = element.reflected()
        assert sorted(reflected.offsets()) == sorted((-dy, -dx) for dy, dx in element.offsets())

    @pytest.mark.parametrize("size", [0, (3, 0), "big"])
    def test_invalid_size(self, size):
        """Test window sizes must be positive"""
        with pytest.raises(InvalidParameter):
            window_size(size)
