import pytest

from imagegen.errors import InvalidTargetError, UnsupportedFormatError
from imagegen.models.generation_model import (
    DimensionPair,
    GenerationConfig,
    LoopState,
    SearchMode,
)
from imagegen.services.generation_service import GenerationService, build_label, target_size

MB = 1024 * 1024
CEILING = 32767


def area_model(bytes_per_pixel):
    return lambda call: call["width"] * call["height"] * bytes_per_pixel


class TestPreconditions:
    @pytest.mark.parametrize("size_mb", [0, -1])
    def test_invalid_target_never_renders(self, renderer_factory, size_mb):
        render = renderer_factory(area_model(1.5))
        with pytest.raises(InvalidTargetError):
            target_size(GenerationConfig(target_size_mb=size_mb, format="jpg"), render)
        assert render.calls == []

    def test_unsupported_format_never_renders(self, renderer_factory):
        render = renderer_factory(area_model(1.5))
        with pytest.raises(UnsupportedFormatError):
            target_size(GenerationConfig(target_size_mb=1, format="gif"), render)
        assert render.calls == []

    def test_format_is_case_insensitive(self, renderer_factory):
        render = renderer_factory(area_model(1.5))
        outcome = target_size(GenerationConfig(target_size_mb=1, format="PNG"), render)
        assert outcome.format == "png"
        assert render.calls[0]["format"] == "png"


class TestConvergence:
    def test_converges_on_area_proportional_encoder(self, renderer_factory):
        render = renderer_factory(area_model(3.0))
        outcome = target_size(GenerationConfig(target_size_mb=1, format="jpg"), render)

        assert outcome.converged
        assert outcome.warning is None
        assert 1 <= outcome.iterations <= 3
        assert outcome.actual_size_mb == pytest.approx(1, rel=0.05)
        assert outcome.actual_size_bytes == len(outcome.buffer)
        assert outcome.iterations == len(render.calls)

    def test_accurate_model_converges_first_try(self, renderer_factory):
        render = renderer_factory(area_model(1.2))
        outcome = target_size(GenerationConfig(target_size_mb=2, format="png"), render)
        assert outcome.iterations == 1
        assert outcome.converged

    def test_outcome_dimensions_match_last_render(self, renderer_factory):
        render = renderer_factory(area_model(3.0))
        outcome = target_size(GenerationConfig(target_size_mb=1, format="jpg"), render)
        assert (outcome.width, outcome.height) == render.dimensions[-1]

    def test_quality_reported_only_for_jpeg(self, renderer_factory):
        jpg = target_size(GenerationConfig(target_size_mb=1, format="jpeg"), renderer_factory(area_model(1.5)))
        png = target_size(GenerationConfig(target_size_mb=1, format="png"), renderer_factory(area_model(1.2)))
        assert jpg.quality == 90
        assert png.quality is None

    def test_passes_colors_font_and_label(self, renderer_factory):
        render = renderer_factory(area_model(1.5))
        cfg = GenerationConfig(
            target_size_mb=1.5,
            format="jpg",
            background_color="#112233",
            text_color="#ffeedd",
            font_family="DejaVuSans.ttf",
        )
        target_size(cfg, render)
        call = render.calls[0]
        assert call["background_color"] == "#112233"
        assert call["text_color"] == "#ffeedd"
        assert call["font_family"] == "DejaVuSans.ttf"
        assert call["label"] == f"1.5MB {call['width']} × {call['height']}"
        assert call["quality"] == 90


class TestIterationBudget:
    def test_single_iteration_budget(self, fixed_renderer):
        render = fixed_renderer(10)
        outcome = target_size(GenerationConfig(target_size_mb=1, format="jpg", max_iterations=1), render)
        assert len(render.calls) == 1
        assert outcome.iterations == 1
        assert not outcome.converged
        assert "maximum iterations (1)" in outcome.warning

    def test_exhaustion_returns_last_result(self, fixed_renderer):
        render = fixed_renderer(MB // 2)
        outcome = target_size(GenerationConfig(target_size_mb=1, format="png", max_iterations=5), render)
        assert len(render.calls) == 5
        assert outcome.iterations == 5
        assert not outcome.converged
        assert outcome.actual_size_bytes == MB // 2
        assert (outcome.width, outcome.height) == render.dimensions[-1]

    def test_dimensions_never_below_floor_after_adjustment(self, renderer_factory):
        render = renderer_factory(lambda _: 100 * MB, sized=True)
        target_size(GenerationConfig(target_size_mb=0.01, format="jpg", max_iterations=6), render)
        for width, height in render.dimensions[1:]:
            assert width >= 50
            assert height >= 50


class TestToleranceBoundary:
    def test_exact_boundary_is_rejected(self, fixed_renderer):
        render = fixed_renderer(int(MB * 1.25))
        outcome = target_size(
            GenerationConfig(target_size_mb=1, format="jpg", tolerance=0.25, max_iterations=1), render
        )
        assert not outcome.converged

    def test_just_inside_boundary_is_accepted(self, fixed_renderer):
        render = fixed_renderer(int(MB * 1.25) - 1)
        outcome = target_size(
            GenerationConfig(target_size_mb=1, format="jpg", tolerance=0.25, max_iterations=3), render
        )
        assert outcome.converged
        assert outcome.iterations == 1


class TestCeiling:
    def test_jpeg_switches_to_quality_search(self, renderer_factory):
        # size grows with quality only; dimensions are pinned at the ceiling
        render = renderer_factory(
            lambda call: call["width"] * call["height"] * 5 * call["quality"] // 100, sized=True
        )
        outcome = target_size(GenerationConfig(target_size_mb=2000, format="jpg"), render)

        assert set(render.dimensions) == {(CEILING, 18431)}
        assert render.qualities == [100, 95, 90, 85, 80, 75, 70]
        assert outcome.converged
        assert outcome.quality == 70
        assert outcome.iterations == 7

    def test_png_stays_within_ceiling_and_exhausts(self, renderer_factory):
        render = renderer_factory(area_model(1.0), sized=True)
        outcome = target_size(GenerationConfig(target_size_mb=2000, format="png", max_iterations=4), render)

        assert len(render.calls) == 4
        for width, height in render.dimensions:
            assert width <= CEILING
            assert height <= CEILING
        assert not outcome.converged
        assert outcome.quality is None

    def test_adjustment_past_ceiling_is_clamped_and_seeds_quality(self, renderer_factory):
        render = renderer_factory(area_model(0.5), sized=True)
        target_size(GenerationConfig(target_size_mb=500, format="jpg", max_iterations=4), render)

        first, second = render.dimensions[:2]
        assert max(first) < CEILING
        assert second[0] == CEILING
        assert second[1] <= CEILING
        # ~0.87 bytes per pixel needed at the ceiling
        assert render.qualities[1] == 80
        assert render.qualities[2:] == [85, 90]
        assert set(render.dimensions[1:]) == {second}


class TestSteps:
    def test_quality_mode_is_one_way(self):
        service = GenerationService(render=lambda **kwargs: b"")
        cfg = GenerationConfig(target_size_mb=1, format="jpg").validate()
        state = LoopState(dimensions=DimensionPair(CEILING, 1000))

        state = service.prepare_iteration(state, cfg)
        assert state.mode is SearchMode.QUALITY

        state = service.adjust_state(state, actual_size=10, target_size=MB)
        assert state.dimensions == DimensionPair(CEILING, 1000)
        assert service.prepare_iteration(state, cfg).mode is SearchMode.QUALITY

    def test_png_never_enters_quality_mode(self):
        service = GenerationService(render=lambda **kwargs: b"")
        cfg = GenerationConfig(target_size_mb=1, format="png").validate()
        state = service.prepare_iteration(LoopState(dimensions=DimensionPair(40000, 20000)), cfg)
        assert state.mode is SearchMode.DIMENSION
        assert state.dimensions.width == CEILING

    def test_dimension_mode_adjusts_size(self):
        service = GenerationService(render=lambda **kwargs: b"")
        state = LoopState(dimensions=DimensionPair(1000, 500))
        state = service.adjust_state(state, actual_size=4 * MB, target_size=MB)
        assert state.dimensions == DimensionPair(500, 250)
        assert state.quality == 90

    def test_build_label(self):
        assert build_label(1, DimensionPair(1115, 627)) == "1MB 1115 × 627"
        assert build_label(2.0, DimensionPair(10, 20)) == "2MB 10 × 20"
        assert build_label(0.25, DimensionPair(10, 20)) == "0.25MB 10 × 20"


def test_renderer_errors_propagate():
    def broken(**kwargs):
        raise RuntimeError("encoder exploded")

    with pytest.raises(RuntimeError, match="encoder exploded"):
        target_size(GenerationConfig(target_size_mb=1, format="jpg"), broken)
