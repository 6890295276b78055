"""The complete accelerator: a 3x3 torus of routers with cores, a controller and a ROM."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TextIO

from .compute import compute_layer
from .controller import Controller
from .core import Core
from .params import Direction
from .rom import DEFAULT_IMAGE_FILE, Rom, RomError
from .router import Port, Router
from .sim import Signal, Simulator

MESH_SIZE = 3
CLOCK_PERIOD = 10
RESET_TICKS = 15

LayerFunction = Callable[[int, Any, Any, Any], Any]


@dataclass(frozen=True)
class _Link:
    """One direction of a channel: flit and request go forward, ack comes back."""

    flit: Signal
    req: Signal
    ack: Signal


def _port(outgoing: _Link, incoming: _Link) -> Port:
    return Port(
        out_flit=outgoing.flit,
        out_req=outgoing.req,
        in_ack=outgoing.ack,
        in_flit=incoming.flit,
        in_req=incoming.req,
        out_ack=incoming.ack,
    )


class Network:
    """Builds and wires every module of the accelerator on one simulator.

    Router ``i * 3 + j`` sits in row ``i`` and column ``j``; rows and
    columns wrap around. The controller takes the core port of router 0;
    cores 1 to 8 sit on the other routers.
    """

    def __init__(
        self,
        data_path: str | Path = "data",
        image_file_name: str = DEFAULT_IMAGE_FILE,
        layer: LayerFunction = compute_layer,
        output: TextIO | None = None,
        top_count: int = 5,
        clock_period: int = CLOCK_PERIOD,
        reset_ticks: int = RESET_TICKS,
    ) -> None:
        self.sim = Simulator(clock_period, reset_ticks)
        rst = self.sim.rst
        count = MESH_SIZE * MESH_SIZE

        # [0] router to core, [1] core to router
        core_links = {rid: (self._link(), self._link()) for rid in range(count)}
        # [0] eastward output, [1] westward output
        horizontal = {rid: (self._link(), self._link()) for rid in range(count)}
        # [0] southward output, [1] northward output
        vertical = {rid: (self._link(), self._link()) for rid in range(count)}

        self.routers: list[Router] = []
        for row in range(MESH_SIZE):
            for col in range(MESH_SIZE):
                rid = row * MESH_SIZE + col
                east = row * MESH_SIZE + (col + 1) % MESH_SIZE
                west = row * MESH_SIZE + (col + 2) % MESH_SIZE
                south = ((row + 1) % MESH_SIZE) * MESH_SIZE + col
                north = ((row + 2) % MESH_SIZE) * MESH_SIZE + col
                ports = {
                    Direction.CORE: _port(core_links[rid][0], core_links[rid][1]),
                    Direction.EAST: _port(horizontal[rid][0], horizontal[east][1]),
                    Direction.WEST: _port(horizontal[rid][1], horizontal[west][0]),
                    Direction.SOUTH: _port(vertical[rid][0], vertical[south][1]),
                    Direction.NORTH: _port(vertical[rid][1], vertical[north][0]),
                }
                self.routers.append(Router(rid, rst, [ports[d] for d in Direction]))

        self.cores: dict[int, Core] = {}
        for rid in range(1, count):
            to_core, from_core = core_links[rid]
            self.cores[rid] = Core(
                rid, rst,
                flit_rx=to_core.flit, req_rx=to_core.req, ack_rx=to_core.ack,
                flit_tx=from_core.flit, req_tx=from_core.req, ack_tx=from_core.ack,
                layer=layer,
            )

        layer_id = self.sim.signal(0)
        layer_id_type = self.sim.signal(False)
        layer_id_valid = self.sim.signal(False)
        data = self.sim.signal(0.0)
        data_valid = self.sim.signal(False)

        self.rom = Rom(
            rst, layer_id, layer_id_type, layer_id_valid, data, data_valid,
            data_path=data_path, image_file_name=image_file_name,
        )
        to_controller, from_controller = core_links[0]
        self.controller = Controller(
            rst, layer_id, layer_id_type, layer_id_valid, data, data_valid,
            flit_tx=from_controller.flit, req_tx=from_controller.req, ack_tx=from_controller.ack,
            flit_rx=to_controller.flit, req_rx=to_controller.req, ack_rx=to_controller.ack,
            data_path=data_path, on_finish=self.sim.stop, output=output, top_count=top_count,
        )

        for rid in range(count):
            core = self.cores.get(rid)
            if core is not None:
                self.sim.process(core.send_packet)
                self.sim.process(core.gather_and_compute)
                self.sim.process(core.receive_packet)
            self.sim.process(self.routers[rid].run)
        self.sim.process(self.controller.run)
        self.sim.process(self.rom.run)

    def _link(self) -> _Link:
        return _Link(self.sim.signal(0), self.sim.signal(False), self.sim.signal(False))

    @property
    def finished(self) -> bool:
        """Whether the controller has classified the network output."""
        return self.controller.finished

    @property
    def ranked(self) -> list[tuple[str, float]]:
        """Classes ranked by probability, once the run has finished."""
        return self.controller.ranked

    def run(self, max_cycles: int | None = None) -> int:
        """Simulate until classification or max_cycles; return the cycles run."""
        return self.sim.run(max_cycles)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the accelerator on the data files of a directory."""
    parser = argparse.ArgumentParser(description="Simulate the network-on-chip accelerator.")
    parser.add_argument("--data-path", default="data", help="directory of the data files")
    parser.add_argument("--image", default=DEFAULT_IMAGE_FILE, help="input image file name")
    parser.add_argument("--max-cycles", type=int, default=None, help="cycle limit")
    parser.add_argument("--top", type=int, default=5, help="number of classes to report")
    parser.add_argument("-v", "--verbose", action="store_true", help="log progress")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)
    network = Network(args.data_path, args.image, top_count=args.top)
    try:
        network.run(args.max_cycles)
    except (RomError, OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    if not network.finished:
        print("Error: simulation ended before classification.", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())