"""Terratest runner: drive ``go test`` suites and collect their output."""

__version__ = "0.1.0"
