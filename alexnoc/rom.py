"""Read-only memory that streams weights, biases and the input image."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from .sim import Signal
from .tensor import read_values

DEFAULT_IMAGE_FILE = "cat.txt"


class RomError(RuntimeError):
    """Raised for invalid requests to the ROM."""


def layer_file_name(layer_id: int, is_bias: bool, image_file_name: str = DEFAULT_IMAGE_FILE) -> str:
    """Data file holding the input image (layer 0) or a layer's weights or biases."""
    kind = "bias" if is_bias else "weight"
    if layer_id == 0:
        return image_file_name
    if layer_id <= 5:
        return f"conv{layer_id}_{kind}.txt"
    if layer_id <= 8:
        return f"fc{layer_id}_{kind}.txt"
    raise RomError(f"Invalid layer id {layer_id}.")


class Rom:
    """Streams one value per clock cycle from the requested data file.

    A request is made by raising ``layer_id_valid`` for a cycle with
    ``layer_id`` and ``layer_id_type`` set. Values follow on ``data``
    while ``data_valid`` is high; at the end of the file ``data_valid``
    falls and ``data`` returns to zero.
    """

    def __init__(
        self,
        rst: Signal,
        layer_id: Signal,
        layer_id_type: Signal,
        layer_id_valid: Signal,
        data: Signal,
        data_valid: Signal,
        data_path: str | Path = "data",
        image_file_name: str = DEFAULT_IMAGE_FILE,
    ) -> None:
        self.rst = rst
        self.layer_id = layer_id
        self.layer_id_type = layer_id_type
        self.layer_id_valid = layer_id_valid
        self.data = data
        self.data_valid = data_valid
        self.data_path = Path(data_path)
        self.image_file_name = image_file_name

    def _open(self, path: Path) -> Iterator[float]:
        try:
            values = read_values(path)
        except (OSError, ValueError) as exc:
            raise RomError(f"cannot read {path}: {exc}") from None
        return iter(values.tolist())

    def run(self):
        """ROM process."""
        while self.rst.read():
            yield
        values: Iterator[float] | None = None
        while True:
            if values is None:
                if self.layer_id_valid.read():
                    name = layer_file_name(
                        int(self.layer_id.read()),
                        bool(self.layer_id_type.read()),
                        self.image_file_name,
                    )
                    values = self._open(self.data_path / name)
            else:
                if self.layer_id_valid.read():
                    raise RomError("layer_id_valid should be low when reading data.")
                self.data_valid.write(True)
                value = next(values, None)
                if value is None:
                    self.data_valid.write(False)
                    self.data.write(0.0)
                    values = None
                    continue
                self.data.write(value)
            yield