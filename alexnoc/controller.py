"""Controller that loads every layer from the ROM, distributes it and classifies the result."""

from __future__ import annotations

import logging
import sys
from collections import deque
from collections.abc import Callable, Sequence
from enum import Enum
from pathlib import Path
from typing import TextIO

from .flit import (
    DATA_BIAS,
    DATA_IMAGE,
    DATA_WEIGHTS,
    FlitKind,
    Packet,
    flit_kind,
    flit_value,
    make_body,
    make_header,
    make_tail,
    parse_header,
)
from .layers import rank_classes, read_classes, softmax
from .sim import Signal

logger = logging.getLogger(__name__)

CONTROLLER_ID = 0
LAST_LAYER = 8
CLASSES_FILE = "imagenet_classes.txt"

_RESULTS_BANNER = "====================Classification   Results==============================="
_RESULTS_FOOTER = "======================Alexnet ends========================================="
_YELLOW = "\033[1;33m"
_DEFAULT_COLOUR = "\033[0m"

# Core that computes each layer of the network.
_LAYER_DESTINATION = {
    1: 1,
    2: 2,
    3: 5,
    4: 8,
    5: 7,
    6: 4,
    7: 3,
    8: 6,
}


class _State(Enum):
    LOADING = 0
    COLLECTING = 1
    CLASSIFYING = 2


def destination_core(layer_id: int) -> int:
    """Core that computes the given layer; 0 for an unknown layer."""
    return _LAYER_DESTINATION.get(layer_id, 0)


def classify(logits, classes: Sequence[str]) -> list[tuple[str, float]]:
    """Softmax the network output and rank the classes, most probable first."""
    return rank_classes(softmax(logits), classes)


def format_results(ranked: Sequence[tuple[str, float]], count: int = 5) -> str:
    """Coloured box listing the first count classes with their percentages."""
    lines = [_YELLOW + _RESULTS_BANNER + "\n"]
    lines.extend(f"{name}: {probability * 100:g}\n" for name, probability in ranked[:count])
    lines.append(_RESULTS_FOOTER + "\n")
    lines.append(_DEFAULT_COLOUR)
    return "".join(lines)


class Controller:
    """Clocked controller attached to the core port of router 0.

    For layers 1 to 8 it requests the weights and biases (and, for the
    first layer, the input image) from the ROM and sends each as one
    packet to the core computing that layer. It then waits for the
    final layer's output, classifies it and reports the top classes.
    """

    def __init__(
        self,
        rst: Signal,
        layer_id: Signal,
        layer_id_type: Signal,
        layer_id_valid: Signal,
        data: Signal,
        data_valid: Signal,
        flit_tx: Signal,
        req_tx: Signal,
        ack_tx: Signal,
        flit_rx: Signal,
        req_rx: Signal,
        ack_rx: Signal,
        data_path: str | Path = "data",
        classes_file: str = CLASSES_FILE,
        on_finish: Callable[[], None] | None = None,
        output: TextIO | None = None,
        top_count: int = 5,
    ) -> None:
        self.rst = rst
        self.layer_id = layer_id
        self.layer_id_type = layer_id_type
        self.layer_id_valid = layer_id_valid
        self.data = data
        self.data_valid = data_valid
        self.flit_tx = flit_tx
        self.req_tx = req_tx
        self.ack_tx = ack_tx
        self.flit_rx = flit_rx
        self.req_rx = req_rx
        self.ack_rx = ack_rx
        self.data_path = Path(data_path)
        self.classes_file = classes_file
        self.on_finish = on_finish
        self.output = output
        self.top_count = top_count

        self.layer_index = 1
        self.pkt_rx: Packet | None = None
        self.ranked: list[tuple[str, float]] = []
        self.finished = False
        self._state = _State.LOADING

    # ----------------------------------------------------------------- main
    def run(self):
        """Controller process."""
        while True:
            if self.rst.read():
                self._reset()
            elif self._state is _State.LOADING:
                yield from self._load_layer()
            elif self._state is _State.COLLECTING:
                self._collect_step()
            else:
                self._finish()
                return
            yield

    def _reset(self) -> None:
        self.layer_id.write(0)
        self.layer_id_type.write(False)
        self.layer_id_valid.write(False)
        self.flit_tx.write(0)
        self.req_tx.write(False)
        self.ack_rx.write(False)
        self._state = _State.LOADING
        self.layer_index = 1

    # -------------------------------------------------------------- loading
    def _request(self, layer_id: int, is_bias: bool):
        """Ask the ROM for a data file and collect its values."""
        self.layer_id.write(layer_id)
        self.layer_id_type.write(is_bias)
        self.layer_id_valid.write(True)
        yield
        self.layer_id_valid.write(False)
        while not self.data_valid.read():
            yield
        values: list[float] = []
        while self.data_valid.read():
            values.append(float(self.data.read()))
            yield
        return values

    def _load_layer(self):
        layer = self.layer_index
        weights = yield from self._request(layer, False)
        logger.info("Received weights of layer%d with %d data", layer, len(weights))
        biases = yield from self._request(layer, True)
        logger.info("Received biases of layer%d with %d data", layer, len(biases))

        packets = [(DATA_WEIGHTS, weights), (DATA_BIAS, biases)]
        if layer == 1:
            image = yield from self._request(0, False)
            logger.info("Received Imgs with number of %d data", len(image))
            packets.append((DATA_IMAGE, image))

        dest = destination_core(layer)
        for data_type, values in packets:
            logger.info("Controller sending data type %d to pe: %d", data_type, dest)
            yield from self._send(dest, data_type, values)

        self.layer_index += 1
        if self.layer_index > LAST_LAYER:
            self._state = _State.COLLECTING

    def _send(self, dest: int, data_type: int, values: Sequence[float]):
        """Send one packet over the req/ack handshake with router 0."""
        queue = deque(values)
        size = len(queue)
        count = 0
        while count < size + 1:
            self.req_tx.write(True)
            if count == 0:
                self.flit_tx.write(make_header(CONTROLLER_ID, dest, data_type))
                count += 1
            elif self.ack_tx.read() and self.req_tx.read():
                value = queue.popleft()
                if count == size:
                    self.flit_tx.write(make_tail(value))
                    count += 2
                else:
                    self.flit_tx.write(make_body(value))
                    count += 1
            yield
        while not (self.ack_tx.read() and self.req_tx.read()):
            yield
        self.req_tx.write(False)
        self.flit_tx.write(0)
        yield

    # ----------------------------------------------------------- collecting
    def _collect_step(self) -> None:
        flit = self.flit_rx.read()
        acked = bool(self.ack_rx.read())
        requested = bool(self.req_rx.read())

        if acked:
            self.ack_rx.write(False)
        elif requested:
            self.ack_rx.write(True)
        else:
            self.ack_rx.write(False)

        if not (requested and acked):
            return
        kind = flit_kind(flit)
        if kind is FlitKind.HEADER:
            header = parse_header(flit)
            self.pkt_rx = Packet(header.source_id, header.dest_id, header.data_type)
            logger.info(
                "Controller receive header, src_id:%d, dest_id:%d, data type: %d",
                header.source_id, header.dest_id, header.data_type,
            )
            return
        value = flit_value(flit)
        if self.pkt_rx is not None:
            self.pkt_rx.datas.append(value)
        if kind is FlitKind.TAIL:
            logger.info("Controller receive tail, data:%g", value)
            self._state = _State.CLASSIFYING

    # ---------------------------------------------------------- classifying
    def _finish(self) -> None:
        if self.pkt_rx is None:
            raise RuntimeError("tail received before any header")
        logger.info("Controller classifying %d results", len(self.pkt_rx.datas))
        classes = read_classes(self.data_path / self.classes_file)
        self.ranked = classify(self.pkt_rx.datas, classes)
        stream = self.output if self.output is not None else sys.stdout
        stream.write(format_results(self.ranked, self.top_count))
        self.finished = True
        if self.on_finish is not None:
            self.on_finish()