"""Neural-network layer arithmetic and classification helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view


def convolution(inputs, weights, biases, stride: int, padding: int) -> np.ndarray:
    """2-D convolution of a (C, H, W) input with (O, C, K, K) weights plus bias."""
    x = np.asarray(inputs, dtype=np.float32)
    w = np.asarray(weights, dtype=np.float32)
    b = np.asarray(biases, dtype=np.float32)
    if x.ndim != 3 or w.ndim != 4:
        raise ValueError("input must be 3-D and weights 4-D")
    out_channels, in_channels, kernel, _ = w.shape
    if x.shape[0] != in_channels:
        raise ValueError(f"input has {x.shape[0]} channels, weights expect {in_channels}")
    if b.shape != (out_channels,):
        raise ValueError(f"expected {out_channels} biases, got {b.size}")
    padded = np.pad(x, ((0, 0), (padding, padding), (padding, padding)))
    out_h = (padded.shape[1] - kernel) // stride + 1
    out_w = (padded.shape[2] - kernel) // stride + 1
    windows = sliding_window_view(padded, (kernel, kernel), axis=(1, 2))
    windows = windows[:, ::stride, ::stride][:, :out_h, :out_w]
    out = np.einsum("chwij,ocij->ohw", windows, w, dtype=np.float32)
    return (out + b[:, None, None]).astype(np.float32)


def relu(tensor) -> np.ndarray:
    """Replace negative values with zero."""
    data = np.asarray(tensor, dtype=np.float32)
    return np.where(data < 0, np.float32(0), data)


def max_pool(inputs, kernel_size: int, stride: int) -> np.ndarray:
    """Max pooling over the two spatial axes of a (C, H, W) tensor."""
    x = np.asarray(inputs, dtype=np.float32)
    out_h = (x.shape[1] - kernel_size) // stride + 1
    out_w = (x.shape[2] - kernel_size) // stride + 1
    windows = sliding_window_view(x, (kernel_size, kernel_size), axis=(1, 2))
    windows = windows[:, ::stride, ::stride][:, :out_h, :out_w]
    return windows.max(axis=(3, 4))


def fully_connected(inputs, weights, biases) -> np.ndarray:
    """Dense layer: weights of shape (out, in) applied to the input, plus bias."""
    x = np.asarray(inputs, dtype=np.float32).ravel()
    w = np.asarray(weights, dtype=np.float32)
    b = np.asarray(biases, dtype=np.float32)
    if w.ndim != 2 or w.shape[1] > x.size:
        raise ValueError(f"weights of shape {w.shape} do not fit {x.size} inputs")
    return (w @ x[: w.shape[1]] + b[: w.shape[0]]).astype(np.float32)


def softmax(values) -> np.ndarray:
    """Normalised exponentials of the input values."""
    x = np.asarray(values, dtype=np.float32)
    exp = np.exp(x - x.max())
    return (exp / exp.sum()).astype(np.float32)


def read_classes(path: str | Path) -> list[str]:
    """Read one class name per line."""
    with open(path, encoding="utf-8") as handle:
        return [line.rstrip("\n") for line in handle]


def top_class(probabilities, classes: Sequence[str]) -> str:
    """Return the class with the highest positive probability, or the first class."""
    probs = np.asarray(probabilities)
    index = int(np.argmax(probs)) if probs.size else 0
    if probs.size == 0 or probs[index] <= 0:
        index = 0
    return classes[index]


def rank_classes(probabilities, classes: Sequence[str]) -> list[tuple[str, float]]:
    """Pair classes with their probabilities, highest first."""
    pairs = [(classes[i], float(p)) for i, p in enumerate(np.asarray(probabilities))]
    return sorted(pairs, key=lambda pair: pair[1], reverse=True)


def format_class_scores(probabilities, classes: Sequence[str]) -> str:
    """One "class: probability" line per class, in input order."""
    return "".join(
        f"{classes[i]}: {float(p):g}\n" for i, p in enumerate(np.asarray(probabilities))
    )