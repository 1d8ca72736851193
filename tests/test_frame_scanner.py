from __future__ import annotations

import pytest

from redlight.api.frame_data import Point
from redlight.detect.frame_scanner import FrameScanner

from conftest import BLUE, RED, frame_with_blobs


def test_full_scan_samples_on_stride_inside_blob_only() -> None:
    frame = frame_with_blobs((320, 240, 20, RED))
    matches = FrameScanner(sample_step=6).scan(frame, RED)

    assert matches
    for m in matches:
        assert m.x % 6 == 0 and m.y % 6 == 0
        assert 300 <= m.x <= 340 and 220 <= m.y <= 260
        assert m.weight == pytest.approx(1.0)


def test_empty_frame_yields_nothing() -> None:
    assert FrameScanner().scan(frame_with_blobs(), RED) == []
    assert FrameScanner().scan(frame_with_blobs(), RED, previous=Point(100, 100)) == []


def test_window_scan_gets_proximity_bonus_and_ignores_far_blobs() -> None:
    # same color twice: one near the previous position, one across the frame
    frame = frame_with_blobs((120, 120, 15, RED), (520, 400, 15, RED))
    matches = FrameScanner(window_radius=100, proximity_bonus=1.5).scan(frame, RED, previous=Point(125, 118))

    assert matches
    assert all(m.x < 250 and m.y < 250 for m in matches)
    assert all(m.weight == pytest.approx(1.5) for m in matches)


def test_window_miss_falls_back_to_full_frame() -> None:
    frame = frame_with_blobs((520, 400, 15, RED))
    matches = FrameScanner(window_radius=100).scan(frame, RED, previous=Point(60, 60))

    assert matches
    assert all(m.weight == pytest.approx(1.0) for m in matches)
    assert all(m.x > 480 for m in matches)


def test_previous_position_outside_frame_still_scans() -> None:
    frame = frame_with_blobs((320, 240, 15, RED))
    matches = FrameScanner().scan(frame, RED, previous=Point(-900, -900))
    assert matches


def test_window_and_full_scan_share_the_sampling_grid() -> None:
    frame = frame_with_blobs((200, 200, 12, BLUE))
    scanner = FrameScanner(sample_step=6)
    full = {(m.x, m.y) for m in scanner.scan(frame, BLUE)}
    windowed = {(m.x, m.y) for m in scanner.scan(frame, BLUE, previous=Point(203.7, 197.2))}
    assert windowed == full


def test_sample_step_must_be_positive() -> None:
    with pytest.raises(ValueError):
        FrameScanner(sample_step=0)
