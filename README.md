# alexnoc

`alexnoc` simulates, clock cycle by clock cycle, an AlexNet image classifier
running on a 3x3 network-on-chip whose rows and columns wrap around (a torus).
A controller fetches the weights, biases and input image from a ROM, packs
them into 34-bit flits and sends them through five-port routers to eight
compute cores. Each core runs one layer, either a convolution (with ReLU and,
where the network has one, max pooling) or a fully connected layer, and
forwards its result to the core holding the next layer. The last layer's
output returns to the controller, which applies softmax and prints the most
likely classes.

## Installation

```
pip install .
```

The only runtime dependency is `numpy`. To run the tests:

```
pip install ".[test]"
pytest
```

## Running the simulation

```
alexnoc --data-path data
```

Options:

- `--data-path DIR` – directory holding the data files (default `data`).
- `--image NAME` – input image file inside that directory (default `cat.txt`).
- `--max-cycles N` – stop after N clock cycles.
- `--top N` – number of classes to report (default 5).
- `-v`, `--verbose` – log progress.

The data directory must contain whitespace-separated text files of floats:
`conv1_weight.txt`, `conv1_bias.txt`, … `conv5_bias.txt`, `fc6_weight.txt`, …
`fc8_bias.txt`, the input image file (3×224×224 values) and
`imagenet_classes.txt` with one class name per line. The command exits with
status 1 if a file cannot be read or the simulation ends before
classification.

The ROM streams one value per clock cycle, so a run with full AlexNet weights
takes a very large number of cycles in pure Python.

## Using the system from Python

```python
import io
from alexnoc.network import Network

out = io.StringIO()
network = Network("data", "cat.txt", output=out, top_count=5)
network.run(max_cycles=None)
if network.finished:
    print(network.ranked[:5])
```

`Network` also accepts `layer`, a function `(core_id, weights, biases, image)`
returning the flat result, in place of `alexnoc.compute.compute_layer`, and
`clock_period` / `reset_ticks` for the clock and reset timing.

## Using the pieces directly

Layer arithmetic on numpy arrays:

```python
import numpy as np
from alexnoc.layers import convolution, relu, max_pool, softmax

image = np.random.rand(3, 8, 8).astype(np.float32)
weights = np.random.rand(4, 3, 3, 3).astype(np.float32)
biases = np.zeros(4, dtype=np.float32)

features = max_pool(relu(convolution(image, weights, biases, 1, 1)), 2, 2)
probabilities = softmax(np.array([1.0, 2.0, 3.0], dtype=np.float32))
```

Flit encoding:

```python
from alexnoc.flit import make_header, make_body, make_tail, flit_kind, parse_header, flit_value

header = make_header(0, 5, 1)
print(flit_kind(header), parse_header(header))
print(flit_value(make_body(0.5)), flit_value(make_tail(-1.25)))
```

Routing decisions (X first, then Y, taking the shorter way round):

```python
from alexnoc.router import route_direction

print(route_direction(0, 8))
```

Small standalone circuits:

```python
from alexnoc.exams import DualLfsr, ShiftRegister, FifoChannel, full_adder

lfsr = DualLfsr()
print([lfsr.step() for _ in range(4)])
print(full_adder(9, 8, 1))   # (sum, carry out)
```

## Modules

- `alexnoc.params` – layer shapes, the `Direction` port enum, and the layer
  each core computes (`conv_spec`, `fc_spec`).
- `alexnoc.tensor` – reshaping, flattening, reading value files, text
  rendering of tensors and the asymmetric padding of the input image.
- `alexnoc.layers` – convolution, ReLU, max pooling, fully connected layers,
  softmax, reading class names and ranking classes.
- `alexnoc.flit` – 34-bit flit encoding, `Header` and `Packet`.
- `alexnoc.sim` – `Signal` with delayed updates and a `Simulator` that runs
  generator processes once per clock edge and drives reset.
- `alexnoc.router` – `Router`, `Port` and `route_direction`.
- `alexnoc.rom` – `Rom`, `RomError` and `layer_file_name`.
- `alexnoc.compute` – `compute_layer` and `next_destination`.
- `alexnoc.core` – `Core`, with its sending, computing and receiving processes.
- `alexnoc.controller` – `Controller`, `destination_core`, `classify` and
  `format_results`.
- `alexnoc.network` – `Network`, the wiring of the whole system, and `main`
  behind the `alexnoc` command.
- `alexnoc.exams` – `DualLfsr`, `ShiftRegister`, `FifoChannel` and
  `full_adder`.

## What it does not do

- It writes no waveform or trace files; progress is only available through
  logging (`-v`).
- It ships no weights, images or class lists; these must be supplied in the
  data directory.