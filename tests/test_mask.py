import numpy as np
import pytest

from logoextrude.mask import smooth_mask, smooth_mask_naive, threshold_mask


class TestThreshold:
    def test_dark_pixels_raised(self, make_rgba):
        grid = [[1, 0, 1], [0, 0, 1]]
        mask = threshold_mask(make_rgba(grid), 0.5)
        assert mask.dtype == np.uint8
        assert mask.shape == (2, 3)
        np.testing.assert_array_equal(mask, grid)

    def test_invert_is_complement(self, random_grid, make_rgba):
        image = make_rgba(random_grid)
        plain = threshold_mask(image, 0.5)
        inverted = threshold_mask(image, 0.5, invert=True)
        np.testing.assert_array_equal(inverted, 1 - plain)

    def test_invert_complement_on_grey_levels(self):
        rng = np.random.default_rng(3)
        image = rng.integers(0, 256, size=(9, 11, 4)).astype(np.uint8)
        for threshold in (0.0, 0.2, 0.5, 0.9, 1.0):
            plain = threshold_mask(image, threshold)
            inverted = threshold_mask(image, threshold, invert=True)
            assert plain.size == 9 * 11
            assert set(np.unique(plain)) <= {0, 1}
            np.testing.assert_array_equal(plain + inverted, np.ones((9, 11)))

    def test_luminance_weights(self):
        # pure green: 0.587 * 255 = 149.7, pure blue: 0.114 * 255 = 29.1
        image = np.array([[[0, 255, 0, 255], [0, 0, 255, 255]]], dtype=np.uint8)
        np.testing.assert_array_equal(threshold_mask(image, 0.5), [[0, 1]])
        np.testing.assert_array_equal(threshold_mask(image, 0.1), [[0, 0]])
        np.testing.assert_array_equal(threshold_mask(image, 0.6), [[1, 1]])

    def test_alpha_darkens(self):
        # fully transparent white has zero luminance
        image = np.array([[[255, 255, 255, 0]]], dtype=np.uint8)
        np.testing.assert_array_equal(threshold_mask(image, 0.5), [[1]])

    def test_cutoff_is_strict(self):
        # black has zero luminance, which is not greater than a zero cutoff
        image = np.array([[[0, 0, 0, 255]]], dtype=np.uint8)
        np.testing.assert_array_equal(threshold_mask(image, 0.0), [[1]])
        np.testing.assert_array_equal(threshold_mask(image, 0.0, invert=True), [[0]])

    def test_full_threshold_raises_grey(self):
        image = np.full((2, 2, 4), 200, dtype=np.uint8)
        image[..., 3] = 255
        np.testing.assert_array_equal(threshold_mask(image, 1.0), np.ones((2, 2)))

    def test_input_not_modified(self, random_grid, make_rgba):
        image = make_rgba(random_grid)
        before = image.copy()
        threshold_mask(image, 0.5, invert=True)
        np.testing.assert_array_equal(image, before)


class TestSmooth:
    def test_zero_smoothing_is_identity(self, random_grid):
        out = smooth_mask(random_grid, 0)
        np.testing.assert_array_equal(out, random_grid)
        assert out.tobytes() == random_grid.tobytes()

    def test_isolated_pixel_removed(self):
        mask = np.zeros((3, 3), dtype=np.uint8)
        mask[1, 1] = 1
        np.testing.assert_array_equal(smooth_mask(mask, 1), np.zeros((3, 3)))

    def test_hole_filled(self):
        mask = np.ones((5, 5), dtype=np.uint8)
        mask[2, 2] = 0
        np.testing.assert_array_equal(smooth_mask(mask, 1), np.ones((5, 5)))

    def test_out_of_bounds_neighbours_excluded(self):
        # corner window holds 4 in-bounds cells, 3 of them raised
        mask = np.array([[1, 1, 0], [1, 0, 0], [0, 0, 0]], dtype=np.uint8)
        out = smooth_mask(mask, 1)
        assert out[0, 0] == 1
        # centre window: 3 of 9
        assert out[1, 1] == 0

    def test_exact_half_is_flat(self):
        mask = np.array([[1, 0]], dtype=np.uint8)
        np.testing.assert_array_equal(smooth_mask(mask, 1), [[0, 0]])

    def test_radius_is_rounded_up(self):
        mask = np.array([[1, 1, 0, 0, 0]], dtype=np.uint8)
        # radius 1: pixel 1 sees (1, 1, 0) -> raised
        assert smooth_mask(mask, 1)[0, 1] == 1
        # 1.2 rounds up to 2: pixel 1 sees (1, 1, 0, 0) -> exactly half
        assert smooth_mask(mask, 1.2)[0, 1] == 0

    def test_result_values(self, random_grid):
        out = smooth_mask(random_grid, 2)
        assert out.dtype == np.uint8
        assert out.shape == random_grid.shape
        assert set(np.unique(out)) <= {0, 1}

    def test_input_not_modified(self, random_grid):
        before = random_grid.copy()
        smooth_mask(random_grid, 1)
        np.testing.assert_array_equal(random_grid, before)

    @pytest.mark.parametrize("smoothing", [0.5, 1, 2, 2.2, 3.7, 20])
    def test_matches_naive_window(self, random_grid, smoothing):
        np.testing.assert_array_equal(
            smooth_mask(random_grid, smoothing),
            smooth_mask_naive(random_grid, smoothing),
        )

    def test_matches_naive_on_sparse_mask(self):
        rng = np.random.default_rng(11)
        mask = (rng.random((20, 9)) > 0.8).astype(np.uint8)
        for smoothing in (1, 1.5, 4):
            np.testing.assert_array_equal(
                smooth_mask(mask, smoothing), smooth_mask_naive(mask, smoothing)
            )
