"""Cycle-level simulation of an AlexNet pipeline on a 3x3 network-on-chip, with small standalone circuits."""

__version__ = "0.1.0"