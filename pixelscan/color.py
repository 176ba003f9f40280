"""
Color type and the numeric helpers shared by all filters.

Every filter funnels its raw results through :func:`clamp_channels` (or
:func:`clamp` for scalars) before a value is written into an image, so
truncation and clamping behave identically everywhere.
"""

from __future__ import annotations

from typing import Union, Sequence

import numpy as np

Color = tuple[int, int, int]
"An RGB triple with each channel in [0, 255]"

ColorTypes = Union[Color, Sequence[int], np.ndarray, str]
"Values accepted by :func:`to_color`"

BLACK: Color = (0, 0, 0)
WHITE: Color = (255, 255, 255)

LUMA_WEIGHTS = (0.299, 0.587, 0.114)
"Rec. 601 luma weights used by Grayscale, Sepia and Emboss"

_LUMA_PERMILLE = np.array([299, 587, 114], dtype=np.int64)


def clamp(value: int, minimum: int = 0, maximum: int = 255) -> int:
    """
    Clamps a scalar into [minimum, maximum].

    :param value: The value
    :param minimum: Lower bound
    :param maximum: Upper bound
    :return: The clamped value
    """
    if value < minimum:
        return minimum
    if value > maximum:
        return maximum
    return value


def clamp_channels(values: np.ndarray | float) -> np.ndarray:
    """
    Truncates toward zero and clamps to [0, 255].

    :param values: Channel values of any numeric dtype
    :return: The values as uint8 array
    """
    values = np.asarray(values)
    if values.dtype.kind == "f":
        values = np.trunc(values)
    return np.clip(values, 0, 255).astype(np.uint8)


def intensity(rgb: np.ndarray | Sequence[int]) -> np.ndarray | int:
    """
    Truncated luma ``trunc(0.299 R + 0.587 G + 0.114 B)``.

    Computed in integer thousandths so that e.g. white maps to exactly 255.

    :param rgb: One color or an array of colors with the channel as last axis
    :return: The intensity, an int for a single color
    """
    arr = np.asarray(rgb, dtype=np.int64)
    result = (arr @ _LUMA_PERMILLE) // 1000
    if result.ndim == 0:
        return int(result)
    return result


def luminance(rgb: np.ndarray | Sequence[int]) -> np.ndarray | float:
    """
    Untruncated luma ``0.299 R + 0.587 G + 0.114 B`` as float.

    :param rgb: One color or an array of colors with the channel as last axis
    """
    arr = np.asarray(rgb, dtype=np.int64)
    result = (arr @ _LUMA_PERMILLE) / 1000.0
    if result.ndim == 0:
        return float(result)
    return result


def to_color(value: ColorTypes) -> Color:
    """
    Converts a tuple, list, array or ``#rrggbb`` string to a :data:`Color`.

    :param value: The source value
    :return: The color
    """
    if isinstance(value, str):
        text = value.strip().lstrip("#")
        if len(text) == 3:
            text = "".join(ch * 2 for ch in text)
        if len(text) != 6:
            raise ValueError(f"Invalid color string: {value!r}")
        try:
            return int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16)
        except ValueError as e:
            raise ValueError(f"Invalid color string: {value!r}") from e
    channels = list(np.asarray(value).reshape(-1))
    if len(channels) != 3:
        raise ValueError(f"A color needs exactly 3 channels, got {len(channels)}")
    result = tuple(int(c) for c in channels)
    if any(c < 0 or c > 255 for c in result):
        raise ValueError(f"Color channels must be in [0, 255]: {result}")
    return result


__all__ = [
    "Color",
    "ColorTypes",
    "BLACK",
    "WHITE",
    "LUMA_WEIGHTS",
    "clamp",
    "clamp_channels",
    "intensity",
    "luminance",
    "to_color",
]
