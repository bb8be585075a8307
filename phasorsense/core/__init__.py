"""Domain objects: spectra, assays, reference points and the unmixing system."""

from typing import Protocol, runtime_checkable

from .equations import CoordinateAxis, CoordinateEquation, UnityEquation
from .harmonics import DEFAULT_SLOT, HARMONIC_OPTIONS, HarmonicSlot, validate_harmonic
from .phasor_assay import PhasorAssay, common_extents
from .reference_points import ReferencePoint, ReferencePointBook
from .selection import FULL_ZOOM, AxisRange, ZoomWindow
from .spectrum import Spectrum
from .unmixing import FractionAnalysis, FractionResult, SolveStatus, SystemState, UnmixingSolver


@runtime_checkable
class Nameable(Protocol):
    """Anything that can be listed by name."""

    def display_name(self) -> str:
        ...


__all__ = [
    "Nameable",
    "Spectrum",
    "PhasorAssay",
    "common_extents",
    "AxisRange",
    "ZoomWindow",
    "FULL_ZOOM",
    "HarmonicSlot",
    "HARMONIC_OPTIONS",
    "DEFAULT_SLOT",
    "validate_harmonic",
    "ReferencePoint",
    "ReferencePointBook",
    "CoordinateAxis",
    "CoordinateEquation",
    "UnityEquation",
    "UnmixingSolver",
    "FractionAnalysis",
    "FractionResult",
    "SolveStatus",
    "SystemState",
]
