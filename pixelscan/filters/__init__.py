# PixelScan Filters Module
"""
Dataclass-based filter system scanning images column by column.

All filters are JSON-serializable, can be parsed from a compact text form
and composed into pipelines with progress reporting and cancellation.
"""

from .base import (
    Filter,
    FilterKind,
    FilterInfo,
    FILTER_REGISTRY,
    FILTER_ALIASES,
    register_filter,
    register_alias,
    get_all_filters_info,
)

from .sampler import PixelSampler, sample

from .kernels import Kernel, KernelFactory

from .executor import (
    ScanExecutor,
    ScanResult,
    ScanStatus,
    CancellationToken,
    ProgressReporter,
)

from .point import (
    PointFilter,
    Invert,
    Grayscale,
    Sepia,
    Brightness,
)

from .rank import (
    RankFilter,
    Median,
    Maximum,
)

from .convolution import (
    ConvolutionFilter,
    Convolve,
    BoxBlur,
    GaussianBlur,
    Sharpen,
    MotionBlur,
    Emboss,
)

from .edge import (
    GradientFilter,
    GradientMagnitude,
    Sobel,
    Scharr,
    Prewitt,
)

from .geometric import (
    GeometricFilter,
    Translate,
    Rotate,
    Wave,
    Glass,
)

from .pipeline import (
    PipelineStage,
    FilterPipeline,
    glowing_edges,
    PIPELINE_REGISTRY,
    create_pipeline,
)

__all__ = [
    # Base
    'Filter',
    'FilterKind',
    'FilterInfo',
    'FILTER_REGISTRY',
    'FILTER_ALIASES',
    'register_filter',
    'register_alias',
    'get_all_filters_info',
    # Sampling and kernels
    'PixelSampler',
    'sample',
    'Kernel',
    'KernelFactory',
    # Execution
    'ScanExecutor',
    'ScanResult',
    'ScanStatus',
    'CancellationToken',
    'ProgressReporter',
    # Point
    'PointFilter',
    'Invert',
    'Grayscale',
    'Sepia',
    'Brightness',
    # Order statistic
    'RankFilter',
    'Median',
    'Maximum',
    # Convolution
    'ConvolutionFilter',
    'Convolve',
    'BoxBlur',
    'GaussianBlur',
    'Sharpen',
    'MotionBlur',
    'Emboss',
    # Gradient
    'GradientFilter',
    'GradientMagnitude',
    'Sobel',
    'Scharr',
    'Prewitt',
    # Geometric
    'GeometricFilter',
    'Translate',
    'Rotate',
    'Wave',
    'Glass',
    # Pipeline
    'PipelineStage',
    'FilterPipeline',
    'glowing_edges',
    'PIPELINE_REGISTRY',
    'create_pipeline',
]
