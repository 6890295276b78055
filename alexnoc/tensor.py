"""Reshaping, reading and printing of float tensors."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Iterable, Sequence

import numpy as np

from .params import INPUT_IMG_CHANNEL, INPUT_IMG_HEIGHT, INPUT_IMG_WIDTH


def _reshape(flat: Iterable[float], shape: tuple[int, ...]) -> np.ndarray:
    data = np.asarray(flat, dtype=np.float32).ravel()
    needed = math.prod(shape)
    if data.size < needed:
        raise ValueError(f"need {needed} values for shape {shape}, got {data.size}")
    return data[:needed].reshape(shape).copy()


def reshape_2d(flat, rows: int, cols: int) -> np.ndarray:
    """Lay out flat values row by row as a (rows, cols) tensor."""
    return _reshape(flat, (rows, cols))


def reshape_3d(flat, channels: int, width: int, height: int) -> np.ndarray:
    """Lay out flat values as a (channels, width, height) tensor."""
    return _reshape(flat, (channels, width, height))


def reshape_4d(flat, batch: int, channels: int, width: int, height: int) -> np.ndarray:
    """Lay out flat values as a (batch, channels, width, height) tensor."""
    return _reshape(flat, (batch, channels, width, height))


def flatten(tensor) -> np.ndarray:
    """Return the values of a tensor in row-major order."""
    return np.asarray(tensor, dtype=np.float32).ravel().copy()


def read_values(path: str | Path, count: int | None = None) -> np.ndarray:
    """Read whitespace-separated floats from a file; all of them if count is None."""
    tokens = Path(path).read_text().split()
    if count is not None:
        if len(tokens) < count:
            raise ValueError(f"{path}: expected {count} values, found {len(tokens)}")
        tokens = tokens[:count]
    try:
        return np.array([float(token) for token in tokens], dtype=np.float32)
    except ValueError as exc:
        raise ValueError(f"{path}: {exc}") from None


def read_tensor(path: str | Path, shape: Sequence[int]) -> np.ndarray:
    """Read a tensor of the given shape from a text file."""
    shape = tuple(shape)
    return read_values(path, math.prod(shape)).reshape(shape)


def _fmt(value) -> str:
    return f"{float(value):g}"


def format_tensor_1d(tensor, count: int) -> str:
    """Render the first count values of a 1-D tensor."""
    values = np.asarray(tensor).ravel()[:count]
    return "1D Tensor:\n" + "".join(f"{_fmt(v)} " for v in values) + "\n"


def format_tensor_3d(tensor, channels: tuple[int, int], widths: tuple[int, int],
                     heights: tuple[int, int]) -> str:
    """Render a window of a 3-D tensor; each range is (start, end), clipped to the shape."""
    data = np.asarray(tensor)
    n_c, n_w, n_h = data.shape
    lines = []
    for c in range(channels[0], min(channels[1], n_c)):
        lines.append(f"Channel {c}:\n")
        for w in range(widths[0], min(widths[1], n_w)):
            row = data[c, w, heights[0]:min(heights[1], n_h)]
            lines.append("".join(f"{_fmt(v)} " for v in row) + "\n")
        lines.append("\n")
    return "".join(lines)


def asymmetric_pad(flat) -> np.ndarray:
    """Pad a flat input image by two before and one after in both spatial axes."""
    image = reshape_3d(flat, INPUT_IMG_CHANNEL, INPUT_IMG_WIDTH, INPUT_IMG_HEIGHT)
    padded = np.pad(image, ((0, 0), (2, 1), (2, 1)))
    return padded.ravel()