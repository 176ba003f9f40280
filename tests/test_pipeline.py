"""
Tests for filter pipelines
"""

import json

import pytest

from pixelscan import Image, EmptyImageError
from pixelscan.filters import (
    FilterPipeline,
    PipelineStage,
    PIPELINE_REGISTRY,
    create_pipeline,
    glowing_edges,
    Invert,
    Median,
    Maximum,
    Sobel,
    Brightness,
    Rotate,
    Convolve,
    GradientMagnitude,
    CancellationToken,
)


class StageProbe(Invert):
    """Records the last reported progress when its scan starts."""

    def __init__(self, values, seen):
        self.values = values
        self.seen = seen

    def prepare(self, image):
        self.seen.append(self.values[-1])


class TestPipelineConstruction:
    """Tests for stage validation."""

    def test_from_filters_shares(self):
        pipeline = FilterPipeline.from_filters([Median(), Sobel(), Maximum()])
        assert [stage.share for stage in pipeline] == [33, 33, 34]
        assert [stage.name for stage in pipeline] == ['Median', 'Sobel', 'Maximum']
        assert FilterPipeline.from_filters([Invert()])[0].share == 100
        assert [s.share for s in FilterPipeline.from_filters([Invert()] * 6)] == [16] * 5 + [20]

    def test_shares_must_sum_to_100(self):
        with pytest.raises(ValueError):
            FilterPipeline([PipelineStage(Invert(), 50), PipelineStage(Invert(), 40)])
        with pytest.raises(ValueError):
            FilterPipeline([PipelineStage(Invert(), 110), PipelineStage(Invert(), -10)])

    def test_requires_stages(self):
        with pytest.raises(ValueError):
            FilterPipeline([])
        with pytest.raises(ValueError):
            FilterPipeline.from_filters([])

    def test_container_protocol(self):
        pipeline = glowing_edges()
        assert len(pipeline) == 3
        assert isinstance(pipeline[1].filter, Sobel)
        assert pipeline.filters == [Median(window_size=3), Sobel(), Maximum(window_size=3)]


class TestPipelineRun:
    """Tests for running pipelines."""

    def test_chains_stages(self, noise_image):
        pipeline = FilterPipeline.from_filters([Brightness(amount=20), Invert()])
        expected = Invert().apply(Brightness(amount=20).apply(noise_image))
        assert pipeline.apply(noise_image) == expected

    def test_glowing_edges(self, noise_image):
        expected = Maximum(3).apply(Sobel().apply(Median(3).apply(noise_image)))
        result = glowing_edges().run(noise_image)
        assert result.completed
        assert result.image == expected
        assert result.columns_processed == 3 * noise_image.width

    def test_progress_at_stage_boundaries(self, noise_image):
        """The second of three stages (33/33/34) ends at exactly 66."""
        values = []
        seen = []
        pipeline = FilterPipeline([
            PipelineStage(Median(), 33),
            PipelineStage(StageProbe(values, seen), 33),
            PipelineStage(StageProbe(values, seen), 34),
        ])
        result = pipeline.run(noise_image, progress=values.append)
        assert result.completed
        assert seen == [33, 66]
        assert values[0] == 0
        assert values[-1] == 100
        assert values == sorted(set(values))

    def test_cancel_in_second_stage(self, noise_image):
        values = []

        def cancel():
            return bool(values) and values[-1] > 40

        result = glowing_edges().run(noise_image, progress=values.append, cancel=cancel)
        assert result.cancelled
        assert result.image is None
        assert max(values) < 67
        assert noise_image.width < result.columns_processed < 2 * noise_image.width

    def test_cancelled_token(self, noise_image):
        token = CancellationToken()
        token.cancel()
        result = glowing_edges().run(noise_image, cancel=token)
        assert result.cancelled
        assert result.columns_processed == 0

    def test_empty_image(self):
        with pytest.raises(EmptyImageError):
            glowing_edges().run(Image(size=(0, 0)))


class TestPipelineSerialization:
    """Tests for parsing and serializing pipelines."""

    def test_parse(self):
        pipeline = FilterPipeline.parse('median 3|sobel|max 3')
        assert pipeline.filters == glowing_edges().filters
        assert [stage.share for stage in pipeline] == [33, 33, 34]

    def test_parse_shares(self):
        pipeline = FilterPipeline.parse('invert@20; brightness 10 @ 80')
        assert [stage.share for stage in pipeline] == [20, 80]
        assert pipeline[1].filter == Brightness(amount=10)

    def test_parse_partial_shares(self):
        with pytest.raises(ValueError):
            FilterPipeline.parse('invert@20|gray')
        with pytest.raises(ValueError):
            FilterPipeline.parse('invert@20|gray@20')
        with pytest.raises(ValueError):
            FilterPipeline.parse('')

    def test_to_string(self):
        assert glowing_edges().to_string() == 'median@33|sobel@33|maximum@34'
        pipeline = FilterPipeline.parse(glowing_edges().to_string())
        assert pipeline.filters == glowing_edges().filters

    def test_to_string_with_kernels(self):
        pipeline = FilterPipeline.from_filters([
            Convolve(weights=[[0, 1, 0], [1, 1, 1], [0, 1, 0]]),
            GradientMagnitude(),
        ])
        text = pipeline.to_string()
        assert text.startswith("convolve weights=[[0.0,1.0,0.0],")
        restored = FilterPipeline.parse(text)
        assert restored.filters == pipeline.filters
        assert [stage.share for stage in restored] == [50, 50]

    def test_dict_roundtrip(self, noise_image):
        original = FilterPipeline.from_filters([Median(5), Rotate(angle=0.5)], name='custom')
        data = json.loads(json.dumps(original.to_dict()))
        restored = FilterPipeline.from_dict(data)
        assert restored == original
        assert restored.apply(noise_image) == original.apply(noise_image)


class TestRegistry:

    def test_create_pipeline(self):
        assert set(PIPELINE_REGISTRY) >= {'glowing_edges', 'glow'}
        assert create_pipeline('glow') == glowing_edges()
        assert create_pipeline('GLOWING_EDGES').name == 'glowing_edges'
        with pytest.raises(ValueError):
            create_pipeline('unknown')
