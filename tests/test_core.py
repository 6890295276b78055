import pytest

from alexnoc.compute import next_destination
from alexnoc.core import Core
from alexnoc.flit import (
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
from alexnoc.sim import Simulator


def _flits(dest, data_type, values, source=0):
    return (
        [make_header(source, dest, data_type)]
        + [make_body(v) for v in values[:-1]]
        + [make_tail(values[-1])]
    )


def _feeder(rst, flit, req, ack, packets):
    def run():
        while rst.read():
            yield
        for flits in packets:
            flit.write(flits[0])
            req.write(True)
            yield
            index = 0
            while index < len(flits):
                if ack.read():
                    index += 1
                    if index < len(flits):
                        flit.write(flits[index])
                    else:
                        req.write(False)
                        flit.write(0)
                yield

    return run


def _sink(rst, flit, req, ack, received):
    def run():
        while True:
            if rst.read():
                ack.write(False)
            elif ack.read():
                if req.read():
                    received.append(flit.read())
                ack.write(False)
            elif req.read():
                ack.write(True)
            yield

    return run


def _make_core(sim, core_id, layer=None, rx=None):
    rx = rx or (sim.signal(0), sim.signal(False), sim.signal(False))
    tx = (sim.signal(0), sim.signal(False), sim.signal(False))
    kwargs = {} if layer is None else {"layer": layer}
    core = Core(core_id, sim.rst, *rx, *tx, **kwargs)
    for proc in (core.send_packet, core.gather_and_compute, core.receive_packet):
        sim.process(proc)
    return core


def _feed(sim, core, packets):
    sim.process(_feeder(sim.rst, core.flit_rx, core.req_rx, core.ack_rx, packets))


class _Recorder:
    def __init__(self, output):
        self.output = output
        self.calls = []

    def __call__(self, core_id, weights, biases, image):
        self.calls.append((core_id, list(weights), list(biases), list(image)))
        return self.output


def test_receive_packet_collects_header_and_values():
    sim = Simulator()
    recorder = _Recorder([0.0])
    core = _make_core(sim, 2, recorder)
    _feed(sim, core, [_flits(2, DATA_WEIGHTS, [1.0, 2.5, -3.0])])
    sim.run(60)
    assert core.pkt_rx == Packet(0, 2, DATA_WEIGHTS, [1.0, 2.5, -3.0])
    assert core.weights == [1.0, 2.5, -3.0]
    assert core.biases == []
    assert recorder.calls == []


def test_no_compute_until_all_inputs_present():
    sim = Simulator()
    recorder = _Recorder([0.0])
    core = _make_core(sim, 2, recorder)
    _feed(sim, core, [_flits(2, DATA_WEIGHTS, [1.0, 2.0]), _flits(2, DATA_BIAS, [0.5])])
    sim.run(100)
    assert core.weights == [1.0, 2.0]
    assert core.biases == [0.5]
    assert core.image == []
    assert recorder.calls == []


def test_compute_called_with_received_inputs():
    sim = Simulator()
    recorder = _Recorder([4.0, 8.0])
    core = _make_core(sim, 2, recorder)
    _feed(sim, core, [
        _flits(2, DATA_WEIGHTS, [1.0, 2.0]),
        _flits(2, DATA_BIAS, [0.5]),
        _flits(2, DATA_IMAGE, [0.25, -0.75, 3.0]),
    ])
    sim.run(150)
    assert recorder.calls == [(2, [1.0, 2.0], [0.5], [0.25, -0.75, 3.0])]
    assert core.result == [4.0, 8.0]


def test_result_reaches_next_core():
    sim = Simulator()
    sender = _make_core(sim, 1, _Recorder([0.5, -1.5, 2.25]))
    receiver = _make_core(
        sim, next_destination(1), _Recorder([0.0]),
        rx=(sender.flit_tx, sender.req_tx, sender.ack_tx),
    )
    _feed(sim, sender, [
        _flits(1, DATA_WEIGHTS, [1.0]),
        _flits(1, DATA_BIAS, [1.0]),
        _flits(1, DATA_IMAGE, [1.0]),
    ])
    sim.run(200)
    assert receiver.pkt_rx == Packet(1, next_destination(1), DATA_IMAGE, [0.5, -1.5, 2.25])
    assert receiver.image == [0.5, -1.5, 2.25]


def test_sent_flit_sequence():
    sim = Simulator()
    core = _make_core(sim, 6, _Recorder([1.5, -2.0, 0.125]))
    received = []
    sim.process(_sink(sim.rst, core.flit_tx, core.req_tx, core.ack_tx, received))
    _feed(sim, core, [
        _flits(6, DATA_WEIGHTS, [1.0]),
        _flits(6, DATA_BIAS, [1.0]),
        _flits(6, DATA_IMAGE, [1.0]),
    ])
    sim.run(200)
    assert [flit_kind(f) for f in received] == [
        FlitKind.HEADER, FlitKind.BODY, FlitKind.BODY, FlitKind.TAIL,
    ]
    assert parse_header(received[0]) == Header(6, next_destination(6), DATA_IMAGE)
    assert [flit_value(f) for f in received[1:]] == [1.5, -2.0, 0.125]
    assert core.req_tx.read() is False
    assert core.sending is False


def test_reset_drives_outputs_low():
    sim = Simulator()
    flit_rx, req_rx, ack_rx = sim.signal(0), sim.signal(False), sim.signal(True)
    flit_tx, req_tx, ack_tx = sim.signal(5), sim.signal(True), sim.signal(False)
    core = Core(3, sim.rst, flit_rx, req_rx, ack_rx, flit_tx, req_tx, ack_tx)
    for proc in (core.send_packet, core.gather_and_compute, core.receive_packet):
        sim.process(proc)
    sim.run(1)
    assert req_tx.read() is False
    assert flit_tx.read() == 0
    assert ack_rx.read() is False


def test_flits_without_header_are_ignored():
    sim = Simulator()
    recorder = _Recorder([0.0])
    core = _make_core(sim, 2, recorder)
    _feed(sim, core, [[make_body(1.0), make_tail(2.0)]])
    sim.run(60)
    assert core.pkt_rx is None
    assert core.weights == []
    assert recorder.calls == []


def test_default_layer_rejects_core_without_layer():
    sim = Simulator()
    core = _make_core(sim, 0)
    _feed(sim, core, [
        _flits(0, DATA_WEIGHTS, [1.0]),
        _flits(0, DATA_BIAS, [1.0]),
        _flits(0, DATA_IMAGE, [1.0]),
    ])
    with pytest.raises(ValueError):
        sim.run(150)