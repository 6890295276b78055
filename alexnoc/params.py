"""Layer shapes, router directions and flit constants of the accelerator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

# Input image
INPUT_IMG_CHANNEL = 3
INPUT_IMG_WIDTH = 224
INPUT_IMG_HEIGHT = 224
PAD_IMG_SIZE = 227

# Convolution and pooling layers
CONV1_IN_CHANNEL_NUM = 3
CONV1_OUT_CHANNEL_NUM = 64
CONV1_KERNEL_SIZE = 11
CONV1_STRIDE = 4
CONV1_PADDING_SIZE = 0

MP1_OUT_CHANNEL_NUM = 64
MP1_OUT_SHAPE = 27
MP1_KERNEL_SIZE = 3
MP1_STRIDE = 2

CONV2_IN_CHANNEL_NUM = 64
CONV2_IN_SIZE = 27
CONV2_OUT_CHANNEL_NUM = 192
CONV2_KERNEL_SIZE = 5
CONV2_STRIDE = 1
CONV2_PADDING_SIZE = 2

MP2_OUT_CHANNEL_NUM = 192
MP2_OUT_SHAPE = 13
MP2_KERNEL_SIZE = 3
MP2_STRIDE = 2

CONV3_IN_IMG_SIZE = 13
CONV3_IN_CHANNEL_NUM = 192
CONV3_OUT_CHANNEL_NUM = 384
CONV3_KERNEL_SIZE = 3
CONV3_STRIDE = 1
CONV3_PADDING_SIZE = 1

CONV4_IN_IMG_SIZE = 13
CONV4_IN_CHANNEL_NUM = 384
CONV4_OUT_CHANNEL_NUM = 256
CONV4_KERNEL_SIZE = 3
CONV4_STRIDE = 1
CONV4_PADDING_SIZE = 1
CONV4_OUT_SHAPE = 13

CONV5_IN_CHANNEL_NUM = 256
CONV5_IN_IMG_SIZE = 13
CONV5_OUT_CHANNEL_NUM = 256
CONV5_KERNEL_SIZE = 3
CONV5_STRIDE = 1
CONV5_PADDING_SIZE = 1
CONV5_OUT_SHAPE = 13

MP5_OUT_CHANNEL_NUM = 256
MP5_KERNEL_SIZE = 3
MP5_STRIDE = 2
MP5_OUT_SHAPE = 6

# Fully connected layers
FC6_IN_NUM = 9216
FC6_OUT_NUM = 4096
FC7_IN_NUM = 4096
FC7_OUT_NUM = 4096
FC8_IN_NUM = 4096
FC8_OUT_NUM = 1000

# Network-on-chip
BUFFER_SIZE = 5
FIFO_SIZE = 5
FLIT_WIDTH = 34


class Direction(IntEnum):
    """Router port directions."""

    CORE = 0
    EAST = 1
    NORTH = 2
    WEST = 3
    SOUTH = 4


@dataclass(frozen=True)
class ConvSpec:
    """Shape of a convolution layer, optionally followed by max pooling."""

    in_channels: int
    in_size: int
    out_channels: int
    kernel_size: int
    stride: int
    padding: int
    out_size: int
    pool_kernel: int | None = None
    pool_stride: int | None = None

    @property
    def pooled(self) -> bool:
        return self.pool_kernel is not None


@dataclass(frozen=True)
class FcSpec:
    """Shape of a fully connected layer."""

    in_features: int
    out_features: int
    apply_relu: bool


_CONV_SPECS = {
    1: ConvSpec(
        CONV1_IN_CHANNEL_NUM, PAD_IMG_SIZE, CONV1_OUT_CHANNEL_NUM,
        CONV1_KERNEL_SIZE, CONV1_STRIDE, CONV1_PADDING_SIZE,
        MP1_OUT_SHAPE, MP1_KERNEL_SIZE, MP1_STRIDE,
    ),
    2: ConvSpec(
        CONV2_IN_CHANNEL_NUM, MP1_OUT_SHAPE, CONV2_OUT_CHANNEL_NUM,
        CONV2_KERNEL_SIZE, CONV2_STRIDE, CONV2_PADDING_SIZE,
        MP2_OUT_SHAPE, MP2_KERNEL_SIZE, MP2_STRIDE,
    ),
    5: ConvSpec(
        CONV3_IN_CHANNEL_NUM, CONV3_IN_IMG_SIZE, CONV3_OUT_CHANNEL_NUM,
        CONV3_KERNEL_SIZE, CONV3_STRIDE, CONV3_PADDING_SIZE,
        CONV3_IN_IMG_SIZE,
    ),
    8: ConvSpec(
        CONV4_IN_CHANNEL_NUM, CONV4_IN_IMG_SIZE, CONV4_OUT_CHANNEL_NUM,
        CONV4_KERNEL_SIZE, CONV4_STRIDE, CONV4_PADDING_SIZE,
        CONV4_IN_IMG_SIZE,
    ),
    7: ConvSpec(
        CONV5_IN_CHANNEL_NUM, CONV5_IN_IMG_SIZE, CONV5_OUT_CHANNEL_NUM,
        CONV5_KERNEL_SIZE, CONV5_STRIDE, CONV5_PADDING_SIZE,
        MP5_OUT_SHAPE, MP5_KERNEL_SIZE, MP5_STRIDE,
    ),
}

_FC_SPECS = {
    4: FcSpec(FC6_IN_NUM, FC6_OUT_NUM, apply_relu=True),
    3: FcSpec(FC7_IN_NUM, FC7_OUT_NUM, apply_relu=True),
    6: FcSpec(FC8_IN_NUM, FC8_OUT_NUM, apply_relu=False),
}


def conv_spec(core_id: int) -> ConvSpec:
    """Return the convolution layer computed by the given core."""
    try:
        return _CONV_SPECS[core_id]
    except KeyError:
        raise ValueError(f"core {core_id} does not compute a convolution") from None


def fc_spec(core_id: int) -> FcSpec:
    """Return the fully connected layer computed by the given core."""
    try:
        return _FC_SPECS[core_id]
    except KeyError:
        raise ValueError(f"core {core_id} does not compute a fully connected layer") from None