from __future__ import annotations

import numpy as np
import pytest

from iEdit.core.buffer import PixelBuffer
from iEdit.core.mask import Bounds, SelectionMask
from iEdit.core.selection import MagicWandSettings, SelectionEngine, select_region
from iEdit.errors import InvalidDimensionsError, InvalidSeedError


def _two_tone(left, right, width: int = 8, height: int = 6) -> PixelBuffer:
    array = np.zeros((height, width, 3), dtype=np.uint8)
    array[:, : width // 2] = left
    array[:, width // 2 :] = right
    return PixelBuffer.from_array(array)


def test_uniform_black_image_selects_everything() -> None:
    buffer = PixelBuffer.blank(4, 4, (0, 0, 0))
    settings = MagicWandSettings(sensitivity=0.1, color_metric="rgb")

    mask = select_region(buffer, 1, 1, settings)

    assert mask.count == 16
    assert mask.bounds == Bounds(0, 0, 4, 4)
    assert mask.border_indices.tolist() == [0, 1, 2, 3, 4, 7, 8, 11, 12, 13, 14, 15]
    assert set(np.unique(mask.pixels).tolist()) == {255}


@pytest.mark.parametrize("seed", [(0, 0), (6, 2), (9, 4)])
def test_uniform_image_border_is_the_perimeter(seed) -> None:
    buffer = PixelBuffer.blank(10, 5, (80, 90, 100))
    mask = select_region(buffer, *seed, MagicWandSettings(sensitivity=0.2))

    assert mask.bounds == Bounds(0, 0, 10, 5)
    grid = np.zeros((5, 10), dtype=bool)
    grid[0, :] = grid[-1, :] = grid[:, 0] = grid[:, -1] = True
    assert mask.border_indices.tolist() == np.flatnonzero(grid).tolist()


def test_zero_sensitivity_selects_only_exact_matches(gradient_buffer) -> None:
    mask = select_region(gradient_buffer, 5, 3, MagicWandSettings(sensitivity=0.0))

    assert mask.count == 1
    assert mask.contains(5, 3)
    assert mask.bounds == Bounds(5, 3, 1, 1)
    assert mask.border_indices.tolist() == [3 * 16 + 5]


def test_zero_sensitivity_follows_connected_duplicates() -> None:
    array = np.full((3, 5, 3), 10, dtype=np.uint8)
    array[:, 2] = (200, 0, 0)
    array[1, 3] = (200, 0, 0)
    buffer = PixelBuffer.from_array(array)

    mask = select_region(buffer, 2, 0, MagicWandSettings(sensitivity=0.0))

    assert mask.count == 4
    assert mask.contains(3, 1)
    assert not mask.contains(4, 1)


def test_region_stops_at_colour_boundary(split_buffer) -> None:
    mask = select_region(split_buffer, 1, 2, MagicWandSettings(sensitivity=0.1))

    assert mask.count == 24
    assert mask.bounds == Bounds(0, 0, 4, 6)
    assert mask.grid()[:, :4].all()
    assert not mask.grid()[:, 4:].any()


def test_lab_metric_uses_narrower_scale() -> None:
    buffer = _two_tone((100, 100, 100), (112, 100, 100))
    # RGB distance 12 passes a 0.1 * 255 threshold; Lab distance (~5) fails 0.1 * 45.
    rgb_mask = select_region(buffer, 0, 0, MagicWandSettings(sensitivity=0.1, color_metric="rgb"))
    lab_mask = select_region(buffer, 0, 0, MagicWandSettings(sensitivity=0.1, color_metric="lab"))
    wide_lab = select_region(buffer, 0, 0, MagicWandSettings(sensitivity=0.2, color_metric="lab"))

    assert rgb_mask.count == 48
    assert lab_mask.count == 24
    assert wide_lab.count == 48


def test_gradient_awareness_blocks_strong_edges() -> None:
    buffer = _two_tone((100, 100, 100), (160, 100, 100))

    plain = select_region(buffer, 0, 0, MagicWandSettings(sensitivity=0.5))
    strict = select_region(
        buffer, 0, 0, MagicWandSettings(sensitivity=0.5, gradient_aware=True, edge_smoothness=0.0)
    )
    smooth = select_region(
        buffer, 0, 0, MagicWandSettings(sensitivity=0.5, gradient_aware=True, edge_smoothness=1.0)
    )

    assert plain.count == 48
    # Column 3 sees a gradient of 30 against a threshold of 18, so the fill
    # stops one column short of the edge.
    assert strict.count == 18
    assert strict.bounds == Bounds(0, 0, 3, 6)
    assert smooth.count == 48


def test_subtract_clears_flooded_region_from_previous_mask(split_buffer) -> None:
    previous = SelectionMask.full(8, 6)

    mask = select_region(
        split_buffer, 1, 1, MagicWandSettings(sensitivity=0.1), previous_mask=previous, subtract=True
    )

    assert mask.count == 24
    assert not mask.grid()[:, :4].any()
    assert mask.grid()[:, 4:].all()
    assert mask.bounds == Bounds(4, 0, 4, 6)
    # The previous mask is left untouched.
    assert previous.count == 48


def test_subtract_never_adds_pixels(split_buffer) -> None:
    previous = SelectionMask.from_pixels(8, 6, np.eye(6, 8, dtype=np.uint8))

    mask = select_region(
        split_buffer, 6, 3, MagicWandSettings(sensitivity=0.1), previous_mask=previous, subtract=True
    )

    assert not np.any((mask.pixels != 0) & (previous.pixels == 0))
    assert not mask.grid()[:, 4:].any()
    assert mask.grid()[:4, :4].diagonal().all()


def test_additive_selection_keeps_previous_pixels(split_buffer) -> None:
    settings = MagicWandSettings(sensitivity=0.1, mode="add")
    left = select_region(split_buffer, 0, 0, settings)

    both = select_region(split_buffer, 7, 5, settings, previous_mask=left)

    assert both.count == 48
    assert both.bounds == Bounds(0, 0, 8, 6)


def test_mode_subtract_is_used_when_flag_is_omitted(split_buffer) -> None:
    previous = SelectionMask.full(8, 6)
    settings = MagicWandSettings(sensitivity=0.1, mode="subtract")

    mask = select_region(split_buffer, 7, 0, settings, previous_mask=previous)

    assert mask.grid()[:, :4].all()
    assert not mask.grid()[:, 4:].any()


def test_feathering_removes_isolated_pixels() -> None:
    array = np.zeros((5, 5, 3), dtype=np.uint8)
    array[2, 2] = (255, 255, 255)
    buffer = PixelBuffer.from_array(array)

    sharp = select_region(buffer, 2, 2, MagicWandSettings(sensitivity=0.0))
    feathered = select_region(buffer, 2, 2, MagicWandSettings(sensitivity=0.0, feather_radius=1))

    assert sharp.count == 1
    assert feathered.is_empty
    assert feathered.bounds == Bounds(0, 0, 0, 0)
    assert feathered.border_indices.size == 0


def test_feathering_keeps_solid_regions() -> None:
    buffer = PixelBuffer.blank(9, 7, (30, 30, 30))
    mask = select_region(buffer, 4, 3, MagicWandSettings(sensitivity=0.1, feather_radius=2))
    assert mask.count == 63


@pytest.mark.parametrize("seed", [(-1, 0), (0, -1), (8, 0), (0, 6)])
def test_out_of_range_seed_raises(split_buffer, seed) -> None:
    with pytest.raises(InvalidSeedError):
        select_region(split_buffer, *seed, MagicWandSettings())
    with pytest.raises(IndexError):
        select_region(split_buffer, *seed, MagicWandSettings())


def test_previous_mask_must_match_buffer(split_buffer) -> None:
    with pytest.raises(InvalidDimensionsError):
        select_region(split_buffer, 0, 0, MagicWandSettings(), previous_mask=SelectionMask.empty(4, 4))


def test_selection_is_deterministic_and_leaves_buffer_untouched(gradient_buffer) -> None:
    before = gradient_buffer.data.copy()
    settings = MagicWandSettings(sensitivity=0.3, color_metric="lab", gradient_aware=True)

    first = select_region(gradient_buffer, 7, 5, settings)
    second = select_region(gradient_buffer, 7, 5, settings)

    assert first == second
    assert first.pixels is not second.pixels
    assert np.array_equal(first.border_indices, second.border_indices)
    assert np.array_equal(gradient_buffer.data, before)


def test_returned_mask_is_read_only(split_buffer) -> None:
    mask = select_region(split_buffer, 0, 0, MagicWandSettings())
    with pytest.raises(ValueError):
        mask.pixels[0] = 0


def test_settings_validation_and_clamping() -> None:
    with pytest.raises(ValueError):
        MagicWandSettings(color_metric="hsv")
    with pytest.raises(ValueError):
        MagicWandSettings(mode="intersect")

    clamped = MagicWandSettings(sensitivity=1.7, edge_smoothness=-0.2, feather_radius=-3).clamp()
    assert clamped.sensitivity == 1.0
    assert clamped.edge_smoothness == 0.0
    assert clamped.feather_radius == 0.0


def test_thresholds_follow_metric_scales() -> None:
    assert MagicWandSettings(sensitivity=0.5).threshold == pytest.approx(127.5)
    assert MagicWandSettings(sensitivity=0.5, color_metric="lab").threshold == pytest.approx(22.5)
    assert MagicWandSettings(edge_smoothness=0.5).gradient_threshold == pytest.approx(48.0)
    assert MagicWandSettings(feather_radius=2.5).feather_pixels == 3


def test_engine_update_returns_new_snapshot(split_buffer) -> None:
    engine = SelectionEngine(MagicWandSettings(sensitivity=0.1))
    original = engine.settings

    updated = engine.update(sensitivity=0.0, color_metric="lab")

    assert original.sensitivity == 0.1
    assert updated.sensitivity == 0.0
    assert engine.settings is updated
    assert engine.select(split_buffer, 0, 0).count == 24
