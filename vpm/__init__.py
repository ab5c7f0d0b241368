"""Bazel BUILD descriptor generation for SystemVerilog sources."""

__version__ = "0.1.0"
