# PixelScan Filters - Pipeline
"""
FilterPipeline for chaining multiple filters.

Each stage owns a share of the overall progress. The shares sum to 100, so
progress of the whole pipeline rises monotonically from 0 to 100 while the
stages run one after another, each on the output of its predecessor.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, TYPE_CHECKING

from .base import Filter
from .executor import ScanExecutor, ScanResult, ScanStatus, ProgressReporter, ProgressSink, CancelQuery
from .edge import Sobel
from .rank import Median, Maximum

if TYPE_CHECKING:
    from pixelscan import Image

logger = logging.getLogger(__name__)


@dataclass
class PipelineStage:
    """One filter of a pipeline and its share of the progress.

    :param filter: The filter to apply
    :param share: Percentage of the overall progress covered by this stage
    :param name: Display name, defaults to the filter type
    """
    filter: Filter
    share: int
    name: str = ''

    def __post_init__(self):
        if not self.name:
            self.name = self.filter.type


@dataclass
class FilterPipeline:
    """Chain of filters applied in sequence.

    Example:
        pipeline = FilterPipeline.parse('median 3|sobel|max 3')
        result = pipeline.run(image, progress=print)
    """
    stages: list[PipelineStage] = field(default_factory=list)
    name: str = 'pipeline'

    def __post_init__(self):
        if not self.stages:
            raise ValueError("A pipeline requires at least one stage")
        for stage in self.stages:
            if isinstance(stage.share, bool) or not isinstance(stage.share, int) or stage.share <= 0:
                raise ValueError(f"Stage {stage.name} has an invalid share: {stage.share!r}")
        total = sum(stage.share for stage in self.stages)
        if total != 100:
            raise ValueError(f"Stage shares of {self.name} sum to {total}, expected 100")

    @classmethod
    def from_filters(cls, filters: Iterable[Filter], name: str = 'pipeline') -> 'FilterPipeline':
        """Create a pipeline sharing the progress evenly, the last stage gets the remainder."""
        filters = list(filters)
        if not filters:
            raise ValueError("A pipeline requires at least one stage")
        share = 100 // len(filters)
        shares = [share] * (len(filters) - 1) + [100 - share * (len(filters) - 1)]
        return cls([PipelineStage(f, s) for f, s in zip(filters, shares)], name=name)

    def run(
        self,
        image: 'Image',
        progress: ProgressSink | None = None,
        cancel: CancelQuery | None = None,
    ) -> ScanResult:
        """Run all stages as one top-level, cancellable operation.

        Stage i reports progress in [offset, offset + share], offset being the
        sum of the previous shares. The first cancelled stage ends the run, its
        intermediate images are discarded.

        :param image: The source image, never modified
        :param progress: Receives integer percentages, restarting at 0
        :param cancel: Polled once per column of every stage
        :returns: The final image or a cancelled result
        """
        reporter = ProgressReporter(progress) if progress is not None else None
        if reporter is not None:
            reporter.reset()
        executor = ScanExecutor()
        start = time.perf_counter()
        current = image
        offset = 0
        columns = 0
        logger.debug("Running %s with %d stages on %s", self.name, len(self.stages), image)
        for index, stage in enumerate(self.stages):
            result = executor.run(
                stage.filter,
                current,
                progress=reporter,
                cancel=cancel,
                progress_offset=offset,
                progress_scale=stage.share,
            )
            columns += result.columns_processed
            if result.cancelled:
                current = None
                logger.debug("%s cancelled in stage %d (%s)", self.name, index + 1, stage.name)
                return ScanResult.cancelled_result(columns, _elapsed_ms(start))
            current = result.image
            offset += stage.share
        elapsed = _elapsed_ms(start)
        logger.debug("%s finished in %.1f ms", self.name, elapsed)
        return ScanResult(ScanStatus.COMPLETED, current, columns, elapsed)

    def apply(self, image: 'Image') -> 'Image':
        """Apply all stages and return the final image."""
        return self.run(image).image

    def __call__(self, image: 'Image') -> 'Image':
        return self.apply(image)

    def __len__(self) -> int:
        return len(self.stages)

    def __iter__(self):
        return iter(self.stages)

    def __getitem__(self, index: int) -> PipelineStage:
        return self.stages[index]

    @property
    def filters(self) -> list[Filter]:
        return [stage.filter for stage in self.stages]

    def to_dict(self) -> dict[str, Any]:
        """Serialize pipeline to dictionary."""
        return {
            'type': 'FilterPipeline',
            'name': self.name,
            'stages': [
                {'filter': stage.filter.to_dict(), 'share': stage.share, 'name': stage.name}
                for stage in self.stages
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'FilterPipeline':
        """Deserialize pipeline from dictionary."""
        stages = [
            PipelineStage(Filter.from_dict(entry['filter']), entry['share'], entry.get('name', ''))
            for entry in data.get('stages', [])
        ]
        return cls(stages, name=data.get('name', 'pipeline'))

    @classmethod
    def parse(cls, text: str, name: str = 'pipeline') -> 'FilterPipeline':
        """Parse filter string into pipeline.

        Stages are separated by | or ;, each may end with @share. Without
        shares the progress is split evenly.

        Examples:
            'median 3|sobel|max 3'
            'median 3@33|sobel@33|max 3@34'
        """
        filters = []
        shares = []
        for part in re.split(r'[|;]', text or ''):
            part = part.strip()
            if not part:
                continue
            match = re.match(r'^(.*?)\s*@\s*(\d+)$', part)
            if match:
                part, share = match.group(1), int(match.group(2))
            else:
                share = None
            filters.append(Filter.parse(part))
            shares.append(share)

        if not filters:
            raise ValueError(f"Invalid pipeline format: {text!r}")
        if all(share is None for share in shares):
            return cls.from_filters(filters, name=name)
        if any(share is None for share in shares):
            raise ValueError(f"Either all or no stages need a share: {text!r}")
        return cls([PipelineStage(f, s) for f, s in zip(filters, shares)], name=name)

    def to_string(self) -> str:
        """Convert pipeline to compact string format, e.g. 'median@33|sobel@33|maximum@34'.

        Kernel parameters appear as compact JSON lists, so every pipeline can
        be restored with :meth:`parse`. The pipeline name is not part of the text.
        """
        return '|'.join(f"{stage.filter.to_string()}@{stage.share}" for stage in self.stages)


def glowing_edges() -> FilterPipeline:
    """Median denoise, Sobel edges, then a maximum filter widening the edges into a glow."""
    return FilterPipeline(
        [
            PipelineStage(Median(window_size=3), 33, 'denoise'),
            PipelineStage(Sobel(), 33, 'edges'),
            PipelineStage(Maximum(window_size=3), 34, 'glow'),
        ],
        name='glowing_edges',
    )


PIPELINE_REGISTRY: dict[str, Callable[[], FilterPipeline]] = {
    'glowing_edges': glowing_edges,
    'glow': glowing_edges,
}


def create_pipeline(name: str) -> FilterPipeline:
    """Create a predefined pipeline by name."""
    factory = PIPELINE_REGISTRY.get(name.lower())
    if factory is None:
        raise ValueError(f"Unknown pipeline: {name}")
    return factory()


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000.0


__all__ = [
    "PipelineStage",
    "FilterPipeline",
    "glowing_edges",
    "PIPELINE_REGISTRY",
    "create_pipeline",
]
