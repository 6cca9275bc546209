from __future__ import annotations

import numpy as np
import pytest

from iEdit.core.buffer import PixelBuffer
from iEdit.core.filters import FilterPipeline, FilterState, apply_filters, resolve_filter_state
from iEdit.core.filters.pillow_executor import build_channel_luts, lut_eligible
from iEdit.core.mask import SelectionMask
from iEdit.errors import InvalidDimensionsError


def _single(rgb, alpha: int = 255) -> PixelBuffer:
    return PixelBuffer.blank(1, 1, tuple(rgb) + (alpha,))


def _rgb(buffer: PixelBuffer) -> tuple[int, int, int]:
    return buffer.rgb_at(0, 0)


@pytest.mark.parametrize("executor", ["auto", "jit", "numpy", "lut"])
def test_zero_state_returns_identical_bytes(gradient_buffer, executor) -> None:
    result = apply_filters(gradient_buffer, FilterState(), executor=executor)

    assert result is not gradient_buffer
    assert result.same_pixels(gradient_buffer)


@pytest.mark.parametrize("executor", ["jit", "numpy"])
def test_individual_stages(executor) -> None:
    source = _single((100, 50, 200))

    def run(**values):
        return _rgb(apply_filters(source, FilterState(**values), executor=executor))

    assert run(brightness=0.2) == (151, 101, 251)
    assert run(contrast=0.5) == (86, 11, 236)
    assert run(temperature=0.5, tint=0.4) == (120, 60, 180)
    assert run(bloom=0.2) == (107, 57, 207)
    assert run(brightness=1.0) == (255, 255, 255)
    assert run(brightness=-1.0) == (0, 0, 0)


@pytest.mark.parametrize("executor", ["jit", "numpy"])
def test_duotone_maps_luma_between_tones(executor) -> None:
    state = FilterState(duotone=0.5)
    dark = apply_filters(_single((0, 0, 0)), state, executor=executor)
    light = apply_filters(_single((255, 255, 255)), state, executor=executor)

    assert _rgb(dark) == (20, 40, 60)
    assert _rgb(light) == (60, 180, 255)


def test_custom_duotone_tones() -> None:
    state = FilterState(duotone=1.0, duotone_dark=(0, 0, 0), duotone_light=(255, 0, 128))
    assert _rgb(apply_filters(_single((255, 255, 255)), state)) == (255, 0, 128)


@pytest.mark.parametrize("executor", ["jit", "numpy"])
def test_glitch_hits_every_seventh_pixel(executor) -> None:
    source = PixelBuffer.blank(5, 3, (100, 100, 100))

    result = apply_filters(source, FilterState(glitch=0.5), executor=executor)

    pixels = result.pixels().reshape((-1, 4))
    for index, (r, g, b, a) in enumerate(pixels.tolist()):
        if index % 7 == 0:
            assert (r, g, b) == (135, 100, 70)
        else:
            assert (r, g, b) == (100, 100, 100)
        assert a == 255


def test_weak_glitch_and_bloom_are_ignored(gradient_buffer) -> None:
    state = FilterState(glitch=0.01, bloom=0.005)
    assert state.is_identity
    assert apply_filters(gradient_buffer, state).same_pixels(gradient_buffer)


def test_stage_order_is_fixed() -> None:
    # (200 + 51 - 128) * 0.4 + 128 = 177.2; contrast first would give 207.8.
    state = FilterState(brightness=0.2, contrast=-0.6)
    assert _rgb(apply_filters(_single((200, 200, 200)), state)) == (177, 177, 177)


@pytest.mark.parametrize("executor", ["auto", "jit", "numpy"])
def test_masked_out_pixels_are_untouched(gradient_buffer, executor) -> None:
    grid = np.zeros((12, 16), dtype=np.uint8)
    grid[2:7, 3:11] = 255
    mask = SelectionMask.from_pixels(16, 12, grid)
    state = FilterState(brightness=0.3, contrast=0.4, temperature=-0.6, duotone=0.2, glitch=0.9, bloom=0.5)

    result = apply_filters(gradient_buffer, state, mask, executor=executor)

    selected = grid.reshape(-1) != 0
    before = gradient_buffer.pixels().reshape((-1, 4))
    after = result.pixels().reshape((-1, 4))
    assert np.array_equal(after[~selected], before[~selected])
    assert not np.array_equal(after[selected], before[selected])
    assert np.all(after[:, 3] == before[:, 3])


def test_raw_bitmap_mask_is_accepted(split_buffer) -> None:
    bitmap = np.zeros(48, dtype=np.uint8)
    bitmap[0] = 1
    result = apply_filters(split_buffer, FilterState(brightness=0.2), bitmap)

    assert result.rgb_at(0, 0) == (171, 61, 61)
    assert result.rgb_at(1, 0) == split_buffer.rgb_at(1, 0)


def test_mask_size_mismatch_raises(split_buffer) -> None:
    with pytest.raises(InvalidDimensionsError):
        apply_filters(split_buffer, FilterState(brightness=0.1), SelectionMask.empty(3, 3))
    with pytest.raises(InvalidDimensionsError):
        apply_filters(split_buffer, FilterState(brightness=0.1), np.zeros(10, dtype=np.uint8))


def test_input_buffer_is_never_modified(gradient_buffer) -> None:
    before = gradient_buffer.data.copy()
    apply_filters(gradient_buffer, FilterState(brightness=0.4, glitch=1.0))
    assert np.array_equal(gradient_buffer.data, before)
    assert not gradient_buffer.data.flags.writeable


def test_reapplying_compounds() -> None:
    source = _single((100, 100, 100))
    state = FilterState(brightness=0.2)
    once = apply_filters(source, state)
    twice = apply_filters(once, state)
    assert _rgb(once) == (151, 151, 151)
    assert _rgb(twice) == (202, 202, 202)


def test_executors_agree(gradient_buffer) -> None:
    state = FilterState(
        brightness=0.13, contrast=-0.27, temperature=0.41, tint=-0.33, duotone=0.6, glitch=0.8, bloom=0.3
    )
    jit_result = apply_filters(gradient_buffer, state, executor="jit")
    numpy_result = apply_filters(gradient_buffer, state, executor="numpy")
    assert np.array_equal(jit_result.data, numpy_result.data)


def test_lut_matches_jit_for_per_channel_states(gradient_buffer) -> None:
    state = FilterState(brightness=-0.12, contrast=0.35, temperature=0.2, tint=0.7, bloom=0.45)
    assert lut_eligible(state, None)

    lut_result = apply_filters(gradient_buffer, state, executor="lut")
    jit_result = apply_filters(gradient_buffer, state, executor="jit")
    assert lut_result.same_pixels(jit_result)


def test_lut_curves_are_monotonic_for_positive_contrast() -> None:
    lut_r, lut_g, lut_b = build_channel_luts(FilterState(contrast=0.5))
    for table in (lut_r, lut_g, lut_b):
        assert table == sorted(table)
        assert table[0] == 0 and table[-1] == 255


def test_lut_executor_rejects_position_dependent_states(split_buffer) -> None:
    assert not lut_eligible(FilterState(duotone=0.5), None)
    assert not lut_eligible(FilterState(glitch=0.5), None)
    with pytest.raises(ValueError):
        apply_filters(split_buffer, FilterState(glitch=0.5), executor="lut")


def test_unknown_executor_raises(split_buffer) -> None:
    with pytest.raises(ValueError):
        apply_filters(split_buffer, FilterState(), executor="cuda")
    with pytest.raises(ValueError):
        FilterPipeline("opengl")


def test_pipeline_class_and_mapping_state() -> None:
    pipeline = FilterPipeline(executor="numpy")
    result = pipeline.apply(_single((100, 50, 200)), {"brightness": 0.2, "unknown": 3.0})
    assert _rgb(result) == (151, 101, 251)


def test_state_clamps_to_ranges() -> None:
    state = FilterState.from_mapping({"brightness": 4.0, "duotone": -1.0, "glitch": 2.0})
    assert state.brightness == 1.0
    assert state.duotone == 0.0
    assert state.glitch == 1.0
    with pytest.raises(KeyError):
        FilterState().with_value("sharpen", 0.5)


def test_resolve_filter_state_merges_known_amounts() -> None:
    base = FilterState(brightness=0.1, contrast=0.2)
    uniforms = {
        "brightness.amount": 0.3,
        "contrast.amount": 0.95,
        "vignette.amount": 0.8,
        "bloom.radius": 4.0,
    }

    delta = resolve_filter_state(base, uniforms)
    absolute = resolve_filter_state(base, uniforms, mode="absolute")

    assert delta.brightness == pytest.approx(0.4)
    assert delta.contrast == 1.0
    assert delta.bloom == 0.0
    assert absolute.brightness == pytest.approx(0.3)
    assert absolute.contrast == pytest.approx(0.95)
    assert base.brightness == 0.1


def test_resolve_filter_state_rejects_unknown_mode() -> None:
    with pytest.raises(ValueError):
        resolve_filter_state(FilterState(), {}, mode="multiply")
