"""Five-port wormhole router of the 3x3 torus network-on-chip."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .params import Direction
from .sim import Signal

_HEADER_BIT = 1 << 33
_TAIL_BIT = 1 << 32
_MESH_SIZE = 3


@dataclass
class Port:
    """Signals of one router port, as seen from the router."""

    out_flit: Signal
    out_req: Signal
    in_ack: Signal
    in_flit: Signal
    in_req: Signal
    out_ack: Signal


def route_direction(current_id: int, dest_id: int) -> Direction:
    """Output direction for a packet at current_id heading to dest_id (X first)."""
    cur_x, cur_y = current_id % _MESH_SIZE, current_id // _MESH_SIZE
    dst_x, dst_y = dest_id % _MESH_SIZE, dest_id // _MESH_SIZE
    if cur_x == dst_x and cur_y == dst_y:
        return Direction.CORE
    if cur_x != dst_x:
        cost_east = abs((_MESH_SIZE + cur_x + 1) % _MESH_SIZE - dst_x)
        cost_west = abs((_MESH_SIZE + cur_x - 1) % _MESH_SIZE - dst_x)
        return Direction.EAST if cost_east <= cost_west else Direction.WEST
    cost_north = abs((_MESH_SIZE + cur_y - 1) % _MESH_SIZE - dst_y)
    cost_south = abs((_MESH_SIZE + cur_y + 1) % _MESH_SIZE - dst_y)
    return Direction.NORTH if cost_north <= cost_south else Direction.SOUTH


class Router:
    """Forwards packets from input ports to output ports with req/ack handshakes."""

    def __init__(self, router_id: int, rst: Signal, ports: Iterable[Port]) -> None:
        self.id = router_id
        self.rst = rst
        self.ports = list(ports)
        if len(self.ports) != len(Direction):
            raise ValueError(f"a router needs {len(Direction)} ports, got {len(self.ports)}")
        count = len(self.ports)
        self._out_busy = [False] * count
        self._out_buf = [0] * count
        self._flit_sources = [0] * count
        self._src_current_dir = [0] * count

    def run(self):
        """Router process: one routing step per clock edge."""
        while True:
            if self.rst.read():
                self._reset()
            else:
                for out_dir in range(len(self.ports)):
                    if self._out_busy[out_dir]:
                        self._forward(out_dir)
                    else:
                        self._grant(out_dir)
            yield

    def _reset(self) -> None:
        for index, port in enumerate(self.ports):
            self._out_busy[index] = False
            self._out_buf[index] = 0
            self._src_current_dir[index] = 0
            self._flit_sources[index] = 0
            port.out_flit.write(0)
            port.out_req.write(False)
            port.out_ack.write(False)

    def _forward(self, out_dir: int) -> None:
        port = self.ports[out_dir]
        source = self.ports[self._flit_sources[out_dir]]
        flit = self._out_buf[out_dir]
        port.out_req.write(True)
        port.out_flit.write(flit)
        acked = bool(port.in_ack.read())
        if flit & _TAIL_BIT and acked:
            self._out_busy[out_dir] = False
            port.out_req.write(False)
            port.out_flit.write(0)
            source.out_ack.write(False)
        elif acked:
            self._out_buf[out_dir] = source.in_flit.read()
            port.out_flit.write(self._out_buf[out_dir])
            source.out_ack.write(True)
        else:
            source.out_ack.write(False)

    def _grant(self, out_dir: int) -> None:
        port = self.ports[out_dir]
        for in_dir, in_port in enumerate(self.ports):
            if not in_port.in_req.read():
                continue
            flit = in_port.in_flit.read()
            if not flit & _HEADER_BIT:
                continue
            direction = route_direction(self.id, (flit >> 24) & 0xF)
            if direction == out_dir:
                self._out_busy[out_dir] = True
                self._flit_sources[out_dir] = in_dir
                self._src_current_dir[in_dir] = direction
                self._out_buf[out_dir] = flit
                port.out_req.write(True)
                port.out_flit.write(flit)
                in_port.out_ack.write(True)
                break