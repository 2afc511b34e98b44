"""Pseudoscope: infer server-side logic from captured HTTP transactions."""

__version__ = "0.1.0"
