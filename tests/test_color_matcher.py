from __future__ import annotations

import numpy as np
import pytest

from redlight.detect.color_matcher import color_distance, match_weight, match_weights


def test_identical_color_weighs_one() -> None:
    assert match_weight((200, 50, 50), (200, 50, 50)) == 1.0


def test_distance_uses_green_heavier_channel_weights() -> None:
    # same absolute difference, green counts more
    assert color_distance((110, 100, 100), (100, 100, 100)) < color_distance((100, 110, 100), (100, 100, 100))
    assert color_distance((100, 110, 100), (100, 100, 100)) == pytest.approx((0.4 * 100) ** 0.5)


def test_pixel_at_or_beyond_threshold_is_rejected() -> None:
    pixel, target = (150, 80, 60), (200, 50, 50)
    d = color_distance(pixel, target)
    assert match_weight(pixel, target, threshold=d) == 0.0
    assert match_weight(pixel, target, threshold=d * 0.5) == 0.0
    assert 0.0 < match_weight(pixel, target, threshold=d * 2) < 1.0


def test_weight_falls_with_distance() -> None:
    target = (200, 50, 50)
    near = match_weight((205, 52, 50), target)
    far = match_weight((230, 70, 40), target)
    assert 1.0 > near > far > 0.0


def test_dark_pixels_only_match_bright_targets() -> None:
    dark = (20, 20, 20)
    # within a generous threshold of both targets, but too dark for the dim one
    assert match_weight(dark, (110, 110, 110), threshold=200) == 0.0
    assert match_weight(dark, (120, 120, 120), threshold=200) == pytest.approx(0.5)


def test_white_pixels_rejected_unless_target_is_white() -> None:
    white = (255, 255, 255)
    assert match_weight(white, (250, 230, 230)) == 0.0
    assert match_weight(white, (250, 250, 250)) > 0.0


def test_green_pixels_rejected_unless_target_is_green() -> None:
    green = (30, 230, 40)
    assert match_weight(green, (60, 210, 90)) == 0.0
    assert match_weight(green, (20, 220, 20)) > 0.0


def test_vectorised_weights_agree_with_scalar() -> None:
    target = (200, 50, 50)
    pixels = np.array([[
        [200, 50, 50, 255],
        [190, 60, 45, 255],
        [20, 20, 20, 255],
        [255, 255, 255, 255],
        [30, 230, 40, 255],
        [90, 90, 90, 255],
    ]], dtype=np.uint8)

    got = match_weights(pixels, target)
    expected = [match_weight(tuple(p[:3]), target) for p in pixels[0]]

    assert got.shape == (1, 6)
    np.testing.assert_allclose(got[0], expected, rtol=1e-5, atol=1e-6)
    assert got[0, 0] == pytest.approx(1.0)
