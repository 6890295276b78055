"""Processing core attached to a router: receives packets, computes a layer, sends the result."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from typing import Any

import numpy as np

from .compute import compute_layer, next_destination
from .flit import (
    DATA_BIAS,
    DATA_IMAGE,
    DATA_WEIGHTS,
    FlitKind,
    Header,
    Packet,
    flit_kind,
    flit_value,
    make_body,
    make_header,
    make_tail,
    parse_header,
)
from .sim import Signal
from .tensor import format_tensor_1d

logger = logging.getLogger(__name__)

LayerFunction = Callable[[int, Any, Any, Any], Any]


class Core:
    """A core with three clocked processes: sending, computing and receiving.

    Register ``send_packet``, ``gather_and_compute`` and ``receive_packet``
    with a simulator. Received packets are stored by data type; once
    weights, biases and an image are all present the core runs its layer
    and sends the result, as one image packet, to the next core.
    """

    def __init__(
        self,
        core_id: int,
        rst: Signal,
        flit_rx: Signal,
        req_rx: Signal,
        ack_rx: Signal,
        flit_tx: Signal,
        req_tx: Signal,
        ack_tx: Signal,
        layer: LayerFunction = compute_layer,
    ) -> None:
        self.id = core_id
        self.rst = rst
        self.flit_rx = flit_rx
        self.req_rx = req_rx
        self.ack_rx = ack_rx
        self.flit_tx = flit_tx
        self.req_tx = req_tx
        self.ack_tx = ack_tx
        self.layer = layer

        self.weights: list[float] = []
        self.biases: list[float] = []
        self.image: list[float] = []
        self.result: list[float] = []
        self.pkt_rx: Packet | None = None
        self.sending = False

        self._outgoing: Packet | None = None
        self._done_processing = False
        self._tail_received = False

    # ------------------------------------------------------------------ send
    def send_packet(self):
        """Sending process: packetise the result and push it out flit by flit."""
        queue: deque[float] = deque()
        flit_count = 0
        flit_total = 0
        header = Header(self.id, 0, DATA_IMAGE)
        while True:
            if self.rst.read():
                self.req_tx.write(False)
                self.flit_tx.write(0)
                flit_count = 0
                self.sending = False
            elif self._done_processing:
                self._outgoing = Packet(
                    source_id=self.id,
                    dest_id=next_destination(self.id),
                    data_type=DATA_IMAGE,
                    datas=list(self.result),
                )
                self._done_processing = False
                self.sending = True
            elif self._outgoing is not None:
                packet = self._outgoing
                queue.extend(packet.datas)
                flit_total = len(queue) + 1
                header = Header(packet.source_id, packet.dest_id, packet.data_type)
                logger.info(
                    "Core_%d send packet src_id:%d, dest_id:%d, num_of_flits:%d",
                    self.id, header.source_id, header.dest_id, flit_total,
                )
                self._outgoing = None
            elif flit_count < flit_total:
                self.req_tx.write(True)
                if flit_count == 0:
                    self.flit_tx.write(
                        make_header(header.source_id, header.dest_id, header.data_type)
                    )
                    flit_count += 1
                elif self.ack_tx.read() and self.req_tx.read():
                    value = queue.popleft()
                    is_tail = flit_count == flit_total - 1
                    self.flit_tx.write(make_tail(value) if is_tail else make_body(value))
                    flit_count += 1
            elif self.ack_tx.read():
                self.req_tx.write(False)
                self.flit_tx.write(0)
                flit_total = 0
                flit_count = 0
                self.sending = False
            yield

    # --------------------------------------------------------------- compute
    def _store(self, packet: Packet) -> None:
        if packet.data_type == DATA_WEIGHTS:
            logger.info("Core_id:%d Receiving weights", self.id)
            self.weights = list(packet.datas)
        elif packet.data_type == DATA_BIAS:
            logger.info("Core_id:%d Receiving biases", self.id)
            self.biases = list(packet.datas)
        elif packet.data_type == DATA_IMAGE:
            logger.info("Core_id:%d Receiving Imgs", self.id)
            self.image = list(packet.datas)
        logger.info(
            "weights size: %d, biases size: %d, img size: %d",
            len(self.weights), len(self.biases), len(self.image),
        )

    def gather_and_compute(self):
        """Computing process: store received packets and run the layer once all inputs arrived."""
        while True:
            if self._tail_received:
                self._tail_received = False
                packet = self.pkt_rx
                if packet is not None:
                    self._store(packet)
                    if self.weights and self.biases and self.image:
                        logger.info("Core_%d Start processing", self.id)
                        output = self.layer(self.id, self.weights, self.biases, self.image)
                        self.result = np.asarray(output, dtype=np.float32).ravel().tolist()
                        logger.debug("Core_%d result\n%s", self.id,
                                     format_tensor_1d(self.result, 10))
                        self._done_processing = True
                        yield
                        yield
            yield

    # --------------------------------------------------------------- receive
    def receive_packet(self):
        """Receiving process: acknowledge every other cycle and assemble packets."""
        while True:
            flit = self.flit_rx.read()
            acked = bool(self.ack_rx.read())
            requested = bool(self.req_rx.read())

            if self.rst.read():
                self.ack_rx.write(False)
            elif acked:
                self.ack_rx.write(False)
            elif requested:
                self.ack_rx.write(True)
            else:
                self.ack_rx.write(False)

            if requested and acked:
                kind = flit_kind(flit)
                if kind is FlitKind.HEADER:
                    header = parse_header(flit)
                    self.pkt_rx = Packet(header.source_id, header.dest_id, header.data_type)
                    logger.info(
                        "Core_%d receive header, src_id:%d, dest_id:%d, data type: %d",
                        self.id, header.source_id, header.dest_id, header.data_type,
                    )
                else:
                    value = flit_value(flit)
                    if self.pkt_rx is not None:
                        self.pkt_rx.datas.append(value)
                    if kind is FlitKind.TAIL:
                        logger.info("Core_%d receive tail, data:%g", self.id, value)
                        self._tail_received = True
            yield