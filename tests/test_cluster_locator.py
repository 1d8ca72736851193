from __future__ import annotations

import pytest

from redlight.api.frame_data import ColorMatch
from redlight.detect.cluster_locator import build_clusters, locate, weighted_centroid


def _grid(cx: float, cy: float, n: int = 3, step: float = 6.0, weight: float = 0.8):
    return [ColorMatch(cx + i * step, cy + j * step, weight) for i in range(n) for j in range(n)]


def test_too_few_matches_is_no_detection() -> None:
    matches = [ColorMatch(10, 10, 1.0)] * 4
    assert locate(matches) is None


def test_two_close_points_merge_toward_heavier_one() -> None:
    clusters = build_clusters([ColorMatch(10, 0, 0.5), ColorMatch(0, 0, 1.0)], radius=50)

    assert len(clusters) == 1
    c = clusters[0]
    assert c.count == 2
    assert c.total_weight == pytest.approx(1.5)
    # on the segment, closer to the weight-1.0 point at x=0
    assert c.y == pytest.approx(0.0)
    assert c.x == pytest.approx(10 * 0.5 / 1.5)
    assert 0.0 < c.x < 5.0


def test_far_points_start_new_clusters() -> None:
    clusters = build_clusters([ColorMatch(0, 0, 1.0), ColorMatch(200, 0, 1.0)], radius=50)
    assert len(clusters) == 2


def test_dense_blob_beats_isolated_strong_points() -> None:
    dense = _grid(300, 200, n=4, weight=0.6)          # 16 points, score 16 * 9.6
    isolated = [ColorMatch(50, 50, 1.0), ColorMatch(600, 400, 1.0)]
    pos = locate(dense + isolated)

    assert pos is not None
    assert pos.x == pytest.approx(309.0)
    assert pos.y == pytest.approx(209.0)


def test_zero_weight_matches_are_no_detection() -> None:
    matches = [ColorMatch(float(i), 0.0, 0.0) for i in range(6)]
    assert build_clusters(matches) == []
    assert weighted_centroid(matches) is None
    assert locate(matches) is None


def test_weighted_centroid() -> None:
    c = weighted_centroid([ColorMatch(0, 0, 1.0), ColorMatch(10, 20, 3.0)])
    assert c == (pytest.approx(7.5), pytest.approx(15.0))


def test_point_in_reach_of_two_clusters_joins_the_nearest() -> None:
    a = ColorMatch(0, 0, 1.0)
    b = ColorMatch(60, 0, 0.9)
    between = ColorMatch(40, 0, 0.8)    # 40px from a, 20px from b

    clusters = build_clusters([a, b, between], radius=50)

    assert len(clusters) == 2
    first, second = clusters
    assert (first.x, first.count) == (0, 1)
    assert second.count == 2
    assert second.x == pytest.approx((60 * 0.9 + 40 * 0.8) / 1.7)
