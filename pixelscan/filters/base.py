# PixelScan Filters - Base Classes
"""
Base classes for the filter system.

A filter computes the color of one destination pixel from the source image
and the pixel's coordinate. Filters are dataclasses holding only their
construction-time parameters, are registered by name and can be serialized
to JSON or to a compact text form such as ``'median 5'``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, fields, field, MISSING
from enum import Enum
from typing import Any, Callable, ClassVar, TYPE_CHECKING
import inspect
import json
import math
import numbers
import re

import numpy as np

from .sampler import PixelSampler

if TYPE_CHECKING:
    from pixelscan import Image
    from pixelscan.color import Color
    from .executor import ScanResult


class FilterKind(Enum):
    """The closed set of filter variants."""
    POINT = 'point'
    ORDER_STATISTIC = 'order_statistic'
    CONVOLUTION = 'convolution'
    DUAL_KERNEL_GRADIENT = 'dual_kernel_gradient'
    GEOMETRIC = 'geometric'


@dataclass
class FilterInfo:
    """Documentation of a registered filter."""

    name: str
    summary: str
    kind: FilterKind
    parameters: dict[str, Any] = field(default_factory=dict)  # name -> default
    aliases: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            'name': self.name,
            'summary': self.summary,
            'kind': self.kind.value,
            'parameters': dict(self.parameters),
            'aliases': list(self.aliases),
        }


# Global registries
FILTER_REGISTRY: dict[str, type['Filter']] = {}
FILTER_ALIASES: dict[str, type['Filter'] | tuple[type['Filter'], dict[str, Any]]] = {}


def register_filter(cls: type['Filter']) -> type['Filter']:
    """Decorator to register a filter class."""
    FILTER_REGISTRY[cls.__name__] = cls
    # Also register lowercase version
    FILTER_REGISTRY[cls.__name__.lower()] = cls
    return cls


def register_alias(
    alias: str,
    cls: type['Filter'],
    **default_params: Any
) -> None:
    """Register an alias for a filter class with optional default parameters.

    Examples:
        register_alias('gray', Grayscale)  # Simple alias
        register_alias('rot90', Rotate, angle=math.pi / 2)  # Alias with default params
    """
    if default_params:
        FILTER_ALIASES[alias.lower()] = (cls, default_params)
    else:
        FILTER_ALIASES[alias.lower()] = cls


def _resolve_name(name: str) -> tuple[type['Filter'], dict[str, Any]]:
    """Look up a filter class by alias or registered name."""
    alias_entry = FILTER_ALIASES.get(name)
    if alias_entry is not None:
        if isinstance(alias_entry, tuple):
            filter_cls, default_params = alias_entry
            return filter_cls, dict(default_params)
        return alias_entry, {}
    filter_cls = FILTER_REGISTRY.get(name)
    if filter_cls is None:
        raise ValueError(f"Unknown filter: {name}")
    return filter_cls, {}


@dataclass
class Filter(ABC):
    """Base class for all filters.

    Subclasses implement :meth:`evaluate_column`, which computes the
    destination colors of one image column. The per-pixel contract
    :meth:`evaluate` is derived from it, so both always agree.

    Example:
        @register_filter
        @dataclass
        class Darken(PointFilter):
            amount: int = 10

            def evaluate_column(self, sampler, x, ys):
                return clamp_channels(sampler.column(x, ys) - self.amount)
    """

    kind: ClassVar[FilterKind]

    # Parameter taking the unnamed value of the call form 'name(value)'
    _primary_param: ClassVar[str | None] = None

    @abstractmethod
    def evaluate_column(self, sampler: PixelSampler, x: int, ys: np.ndarray) -> np.ndarray:
        """Compute the destination colors of column x.

        :param sampler: Clamped access to the source image
        :param x: The column
        :param ys: The rows to compute
        :returns: uint8 array of shape (len(ys), 3)
        """

    def evaluate(self, image: 'Image', x: int, y: int) -> 'Color':
        """Compute the destination color of the pixel (x, y).

        :param image: The source image
        :param x: The column, 0 <= x < width
        :param y: The row, 0 <= y < height
        :returns: The color
        """
        if not (0 <= x < image.width and 0 <= y < image.height):
            raise IndexError(f"Pixel ({x}, {y}) out of bounds for {image.width}x{image.height}")
        row = self.evaluate_column(PixelSampler(image), x, np.array([y]))[0]
        return int(row[0]), int(row[1]), int(row[2])

    def _check_numbers(
        self,
        *names: str,
        integer: bool = False,
        error: type[ValueError] = ValueError,
    ) -> None:
        """Reject parameters which are not finite numbers (integers if ``integer``).

        Called from ``__post_init__`` so a bad parameter fails on construction
        instead of in the middle of a scan.
        """
        expected = numbers.Integral if integer else numbers.Real
        for name in names:
            value = getattr(self, name)
            valid = (
                not isinstance(value, bool)
                and isinstance(value, expected)
                and (isinstance(value, numbers.Integral) or math.isfinite(value))
            )
            if not valid:
                kind = 'an integer' if integer else 'a finite number'
                raise error(f"{self.type} {name} has to be {kind}, got {value!r}")

    def prepare(self, image: 'Image') -> None:
        """Called by the executor before a scan of ``image`` starts."""

    def run(
        self,
        image: 'Image',
        progress: Callable[[int], None] | None = None,
        cancel: Callable[[], bool] | None = None,
    ) -> 'ScanResult':
        """Apply the filter as a top-level, cancellable operation.

        Progress restarts at 0 and ends at 100 if the scan completes.

        :param image: The source image
        :param progress: Receives integer percentages
        :param cancel: Polled once per column, True aborts the scan
        :returns: The scan result, either completed with an image or cancelled
        """
        from .executor import ScanExecutor, ProgressReporter

        reporter = ProgressReporter(progress) if progress is not None else None
        if reporter is not None:
            reporter.reset()
        return ScanExecutor().run(self, image, progress=reporter, cancel=cancel)

    def apply(self, image: 'Image') -> 'Image':
        """Apply filter to image and return the result."""
        return self.run(image).image

    def __call__(self, image: 'Image') -> 'Image':
        return self.apply(image)

    @property
    def type(self) -> str:
        """Filter type name for serialization."""
        return self.__class__.__name__

    def _public_fields(self):
        return [f for f in fields(self) if not f.name.startswith('_') and f.init]

    def to_dict(self) -> dict[str, Any]:
        """Serialize filter to dictionary."""
        data = {}
        for f in self._public_fields():
            value = getattr(self, f.name)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, tuple):
                value = list(value)
            data[f.name] = value
        data['type'] = self.type
        return data

    def to_json(self) -> str:
        """Serialize filter to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'Filter':
        """Deserialize filter from dictionary."""
        data = data.copy()  # Don't modify original
        filter_type = data.pop('type', cls.__name__)

        filter_cls = FILTER_REGISTRY.get(filter_type) or FILTER_REGISTRY.get(filter_type.lower())
        if filter_cls is None:
            raise ValueError(f"Unknown filter type: {filter_type}")

        return _construct(filter_cls, data)

    @classmethod
    def from_json(cls, json_str: str) -> 'Filter':
        """Deserialize filter from JSON string."""
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def parse(cls, text: str) -> 'Filter':
        """Create a filter from its text form.

        The filter name or alias comes first. It is followed by values bound
        to the parameters in field order and by ``key=value`` pairs; explicit
        pairs win over positional values and over alias defaults::

            'median 5'                     -> Median(window_size=5)
            'translate 10 -2'              -> Translate(offset_x=10, offset_y=-2)
            'wave2 amplitude=5'            -> Wave(amplitude=5, period=30, driver='y')
            'glass spread=4 seed=none'     -> Glass(spread=4, seed=None)
            'convolve weights=[[0,1,0]]'   -> Convolve(weights=[[0, 1, 0]])

        The call form ``'median(5)'`` or ``'brightness(amount=-20)'`` is
        accepted as well; only the primary parameter may be given without a
        key there.

        :raises ValueError: For unknown names, surplus values or invalid parameters
        """
        text = (text or '').strip()
        call = _CALL_FORM.match(text)
        if call:
            return cls._parse_call(call.group(1).lower(), call.group(2))
        if text.count("'") % 2 or text.count('"') % 2:
            raise ValueError(f"Unbalanced quotes in filter {text!r}")

        tokens = _TOKEN.findall(text)
        if not tokens:
            raise ValueError(f"Invalid filter format: {text!r}")
        filter_cls, kwargs = _resolve_name(tokens[0].lower())
        values = []
        for token in tokens[1:]:
            key, sep, raw = token.partition('=')
            if sep and key.isidentifier():
                kwargs[key] = _parse_value(raw)
            else:
                values.append(_parse_value(token))
        _bind_positional(filter_cls, values, kwargs)
        return _construct(filter_cls, kwargs)

    @classmethod
    def _parse_call(cls, name: str, args: str) -> 'Filter':
        filter_cls, kwargs = _resolve_name(name)
        for index, arg in enumerate(part.strip() for part in args.split(',')):
            if not arg:
                continue
            key, sep, raw = arg.partition('=')
            if sep:
                kwargs[key.strip()] = _parse_value(raw)
            elif index == 0 and filter_cls._primary_param:
                kwargs[filter_cls._primary_param] = _parse_value(arg)
            else:
                raise ValueError(f"{name}() only takes its primary parameter without a key, got {arg!r}")
        return _construct(filter_cls, kwargs)

    @classmethod
    def get_info(cls) -> FilterInfo:
        """Get the documentation of this filter."""
        doc = inspect.getdoc(cls) or ''
        summary = doc.split('\n')[0].strip() if doc else cls.__name__
        parameters = {}
        for f in fields(cls):
            if f.name.startswith('_') or not f.init:
                continue
            if f.default is not MISSING:
                parameters[f.name] = f.default
            elif f.default_factory is not MISSING:
                parameters[f.name] = f.default_factory()
            else:
                parameters[f.name] = None
        aliases = []
        for alias, entry in FILTER_ALIASES.items():
            target = entry[0] if isinstance(entry, tuple) else entry
            if target is cls:
                aliases.append(alias)
        return FilterInfo(
            name=cls.__name__,
            summary=summary,
            kind=cls.kind,
            parameters=parameters,
            aliases=sorted(aliases),
        )

    def to_string(self) -> str:
        """Text form accepted by :meth:`parse`, e.g. 'median window_size=5'.

        Parameters equal to their default are left out, lists are written as
        compact JSON.
        """
        parts = [self.type.lower()]
        for f in self._public_fields():
            value = getattr(self, f.name)
            if f.default is not MISSING and value == f.default:
                continue
            parts.append(f"{f.name}={_format_value(value)}")
        return ' '.join(parts)


def get_all_filters_info() -> dict[str, FilterInfo]:
    """Get the documentation of all registered filters, keyed by class name."""
    result = {}
    for name, cls in FILTER_REGISTRY.items():
        if name == cls.__name__:
            result[name] = cls.get_info()
    return result


def _construct(filter_cls: type['Filter'], kwargs: dict[str, Any]) -> 'Filter':
    try:
        return filter_cls(**kwargs)
    except TypeError as e:
        raise ValueError(f"Invalid parameters for {filter_cls.__name__}: {e}") from e


_CALL_FORM = re.compile(r'^(\w+)\(([^)]*)\)$')

# Quoted text, a list nested up to two levels, or plain characters
_TOKEN = re.compile(r"""(?:'[^']*'|"[^"]*"|\[(?:[^\[\]]|\[[^\[\]]*\])*\]|[^\s'"\[])+""")


def _bind_positional(filter_cls: type['Filter'], values: list[Any], kwargs: dict[str, Any]) -> None:
    names = [f.name for f in fields(filter_cls) if f.init and not f.name.startswith('_')]
    if len(values) > len(names):
        raise ValueError(
            f"{filter_cls.__name__} takes at most {len(names)} values, got {len(values)}"
        )
    for name, value in zip(names, values):
        kwargs.setdefault(name, value)


def _parse_value(raw: str) -> Any:
    """Convert one parameter value of the text form.

    Quoted text stays a string, ``none`` becomes None and bracketed values
    are read as JSON lists. Anything else becomes an int or a float where
    possible and is kept as a string otherwise.
    """
    raw = raw.strip()
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in '\'"':
        return raw[1:-1]
    if raw.lower() == 'none':
        return None
    if raw.startswith('['):
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid list {raw!r}: {e.msg}") from e
    for convert in (int, float):
        try:
            return convert(raw)
        except ValueError:
            pass
    return raw


def _format_value(value: Any) -> str:
    if value is None:
        return 'none'
    if isinstance(value, (list, tuple)):
        return json.dumps(list(value), separators=(',', ':'))
    if isinstance(value, str):
        needs_quotes = not value or any(c.isspace() or c in '=|;@[' for c in value)
        return f"'{value}'" if needs_quotes else value
    if isinstance(value, float):
        return repr(value)
    return str(value)


__all__ = [
    "Filter",
    "FilterKind",
    "FilterInfo",
    "FILTER_REGISTRY",
    "FILTER_ALIASES",
    "register_filter",
    "register_alias",
    "get_all_filters_info",
]
