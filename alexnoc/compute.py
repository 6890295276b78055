"""Layer computation performed by each core of the accelerator."""

from __future__ import annotations

import numpy as np

from .layers import convolution, fully_connected, max_pool, relu
from .params import conv_spec, fc_spec
from .tensor import asymmetric_pad, flatten, reshape_2d, reshape_3d, reshape_4d

# Where each core sends its result: the next layer of the network.
_NEXT_DESTINATION = {
    1: 2,
    2: 5,
    3: 6,
    4: 3,
    5: 8,
    6: 0,
    7: 4,
    8: 7,
}

_CONV_CORES = frozenset({1, 2, 5, 7, 8})
_FC_CORES = frozenset({3, 4, 6})


def next_destination(core_id: int) -> int:
    """Core that receives the result of the given core; 0 is the controller."""
    return _NEXT_DESTINATION.get(core_id, 0)


def _conv_layer(core_id: int, weights, biases, image) -> np.ndarray:
    spec = conv_spec(core_id)
    inputs = reshape_3d(image, spec.in_channels, spec.in_size, spec.in_size)
    kernels = reshape_4d(
        weights, spec.out_channels, spec.in_channels, spec.kernel_size, spec.kernel_size
    )
    bias = np.asarray(biases, dtype=np.float32).ravel()
    if bias.size < spec.out_channels:
        raise ValueError(f"need {spec.out_channels} biases, got {bias.size}")
    out = relu(convolution(inputs, kernels, bias[: spec.out_channels], spec.stride, spec.padding))
    if spec.pooled:
        out = max_pool(out, spec.pool_kernel, spec.pool_stride)
    return flatten(out)


def _fc_layer(core_id: int, weights, biases, image) -> np.ndarray:
    spec = fc_spec(core_id)
    matrix = reshape_2d(weights, spec.out_features, spec.in_features)
    bias = np.asarray(biases, dtype=np.float32).ravel()
    if bias.size < spec.out_features:
        raise ValueError(f"need {spec.out_features} biases, got {bias.size}")
    out = fully_connected(image, matrix, bias[: spec.out_features])
    if spec.apply_relu:
        out = relu(out)
    return flatten(out)


def compute_layer(core_id: int, weights, biases, image) -> np.ndarray:
    """Run the layer assigned to a core on flat inputs; return the flat result.

    Core 1 pads the raw input image before its convolution. Convolution
    cores apply ReLU and, where the layer has one, max pooling. Fully
    connected cores apply ReLU except for the last layer.
    """
    flat_image = flatten(image)
    if core_id == 1:
        flat_image = asymmetric_pad(flat_image)
    if core_id in _CONV_CORES:
        return _conv_layer(core_id, weights, biases, flat_image)
    if core_id in _FC_CORES:
        return _fc_layer(core_id, weights, biases, flat_image)
    raise ValueError(f"core {core_id} does not compute a layer")