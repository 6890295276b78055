"""A small cycle-based simulation kernel with delayed-update signals.

Every process is a generator; each ``yield`` waits for the next rising
clock edge. Within one cycle every process sees the values committed at
the end of the previous cycle. Writes become visible only once all
processes have run for the cycle.
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from typing import Any


class Signal:
    """A value whose writes take effect when the signal is committed."""

    def __init__(self, initial: Any = 0) -> None:
        self._value = initial
        self._next = initial
        self._pending = False

    def read(self) -> Any:
        """Return the committed value."""
        return self._value

    def write(self, value: Any) -> None:
        """Schedule a new value; the last write before a commit wins."""
        self._next = value
        self._pending = True

    def commit(self) -> bool:
        """Apply a pending write; return whether the value changed."""
        if not self._pending:
            return False
        self._pending = False
        changed = bool(self._next != self._value)
        self._value = self._next
        return changed

    def __repr__(self) -> str:
        return f"Signal({self._value!r})"


class Simulator:
    """Clock, reset and scheduler for generator processes.

    The reset signal ``rst`` is high for every rising edge that falls
    before ``reset_ticks`` time units; the clock period is
    ``clock_period`` time units and the first edge is at time zero.
    """

    def __init__(self, clock_period: int = 10, reset_ticks: int = 15) -> None:
        if clock_period <= 0:
            raise ValueError("clock period must be positive")
        if reset_ticks < 0:
            raise ValueError("reset ticks must not be negative")
        self.clock_period = clock_period
        self.reset_ticks = reset_ticks
        self.cycle = 0
        self._signals: list[Signal] = []
        self._processes: list[Generator[Any, None, None]] = []
        self._stopped = False
        self.rst = self.signal(False)

    @property
    def reset_cycles(self) -> int:
        """Number of rising edges during which reset is held high."""
        return -(-self.reset_ticks // self.clock_period)

    @property
    def time(self) -> int:
        """Simulated time of the next rising edge."""
        return self.cycle * self.clock_period

    @property
    def stopped(self) -> bool:
        return self._stopped

    def signal(self, initial: Any = 0) -> Signal:
        """Create a signal that this simulator commits every cycle."""
        sig = Signal(initial)
        self._signals.append(sig)
        return sig

    def process(self, generator_function: Callable[[], Generator]) -> Generator:
        """Register a process; it first runs at the next rising edge."""
        generator = generator_function()
        if not isinstance(generator, Generator):
            raise TypeError("a process must be a generator function")
        self._processes.append(generator)
        return generator

    def stop(self) -> None:
        """End the simulation once the current cycle completes."""
        self._stopped = True

    def run(self, max_cycles: int | None = None) -> int:
        """Run until stopped, out of processes or max_cycles; return cycles run."""
        if max_cycles is not None and max_cycles < 0:
            raise ValueError("max_cycles must not be negative")
        ran = 0
        while not self._stopped and self._processes:
            if max_cycles is not None and ran >= max_cycles:
                break
            self.rst.write(self.cycle < self.reset_cycles)
            self.rst.commit()
            for generator in list(self._processes):
                try:
                    next(generator)
                except StopIteration:
                    self._processes.remove(generator)
            for sig in self._signals:
                sig.commit()
            self.cycle += 1
            ran += 1
        return ran