import pytest

from alexnoc.flit import make_body, make_header, make_tail
from alexnoc.params import Direction
from alexnoc.router import Port, Router, route_direction
from alexnoc.sim import Simulator


def _port(sim, req_initial=False):
    return Port(
        out_flit=sim.signal(0),
        out_req=sim.signal(req_initial),
        in_ack=sim.signal(False),
        in_flit=sim.signal(0),
        in_req=sim.signal(False),
        out_ack=sim.signal(False),
    )


def _sender(port, flits):
    def gen():
        count = 0
        while count < len(flits):
            port.in_req.write(True)
            if count == 0:
                port.in_flit.write(flits[0])
                count = 1
            elif port.out_ack.read() and port.in_req.read():
                port.in_flit.write(flits[count])
                count += 1
            yield
        while not port.out_ack.read():
            yield
        port.in_req.write(False)
        port.in_flit.write(0)
        while True:
            yield

    return gen


def _receiver(port, received):
    def gen():
        while True:
            flit = port.out_flit.read()
            ack = port.in_ack.read()
            if ack:
                port.in_ack.write(False)
            elif port.out_req.read():
                port.in_ack.write(True)
            else:
                port.in_ack.write(False)
            if port.out_req.read() and ack:
                received.append(flit)
            yield

    return gen


@pytest.mark.parametrize("router_id", range(9))
def test_same_node_routes_to_core(router_id):
    assert route_direction(router_id, router_id) is Direction.CORE


def test_pinned_directions():
    assert route_direction(0, 1) is Direction.EAST
    assert route_direction(0, 2) is Direction.WEST
    assert route_direction(0, 3) is Direction.SOUTH


@pytest.mark.parametrize("current", range(9))
@pytest.mark.parametrize("dest", range(9))
def test_x_is_resolved_before_y(current, dest):
    direction = route_direction(current, dest)
    if current % 3 != dest % 3:
        assert direction in (Direction.EAST, Direction.WEST)
    elif current != dest:
        assert direction in (Direction.NORTH, Direction.SOUTH)


@pytest.mark.parametrize(
    "router_id, dest_id, in_dir, out_dir",
    [
        (4, 4, Direction.WEST, Direction.CORE),
        (0, 1, Direction.CORE, Direction.EAST),
    ],
)
def test_packet_passes_through_router(router_id, dest_id, in_dir, out_dir):
    sim = Simulator(reset_ticks=0)
    ports = [_port(sim) for _ in range(5)]
    router = Router(router_id, sim.rst, ports)
    flits = [make_header(0, dest_id, 1), make_body(1.0), make_body(2.0), make_tail(3.0)]
    received = []
    sim.process(_sender(ports[in_dir], flits))
    sim.process(router.run)
    sim.process(_receiver(ports[out_dir], received))
    sim.run(40)
    assert received == flits
    assert ports[out_dir].out_req.read() is False
    assert ports[out_dir].out_flit.read() == 0


def test_reset_clears_outputs():
    sim = Simulator(clock_period=10, reset_ticks=10)
    ports = [_port(sim, req_initial=True) for _ in range(5)]
    router = Router(0, sim.rst, ports)
    sim.process(router.run)
    sim.run(1)
    assert [p.out_req.read() for p in ports] == [False] * 5
    assert [p.out_ack.read() for p in ports] == [False] * 5


def test_router_needs_five_ports():
    sim = Simulator()
    with pytest.raises(ValueError):
        Router(0, sim.rst, [_port(sim) for _ in range(4)])