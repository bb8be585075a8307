"""Phasor analysis and linear unmixing of excitation-emission spectra."""

__version__ = "0.1.0"
