"""Payroll computation and export engine."""

__version__ = "0.1.0"
