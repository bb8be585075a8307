# phasorsense/core/serialization.py
"""
Plain-dict and JSON persistence for the phasor object graph.

Every ``*_to_dict`` function has a matching ``*_from_dict``; the key names and
nesting they produce are the stable contract. Files written by ``save_json``
wrap the payload as ``{"kind": ..., "version": ..., "data": ...}`` so one
loader can dispatch on the content.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from phasorsense.algorithms.units import XUnit

from .equations import CoordinateEquation, LinearEquation, UnityEquation
from .harmonics import HarmonicSlot
from .phasor_assay import PhasorAssay
from .reference_points import ReferencePoint, ReferencePointBook
from .selection import AxisRange, ZoomWindow
from .spectrum import Spectrum
from .unmixing import FractionAnalysis, UnmixingSolver

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


class SerializationError(RuntimeError):
    """Raised when a payload cannot be turned back into objects."""


# --- Spectrum ---------------------------------------------------------------

def spectrum_to_dict(spectrum: Spectrum) -> Dict[str, Any]:
    excitation, emission = spectrum.axes_in(spectrum.source_unit)
    return {
        "name": spectrum.name,
        "unit": spectrum.source_unit.suffix,
        "current_unit": spectrum.current_unit.suffix,
        "excitation": excitation.tolist(),
        "emission": emission.tolist(),
        "intensities": spectrum.intensities.tolist(),
    }


def spectrum_from_dict(payload: Dict[str, Any]) -> Spectrum:
    spectrum = Spectrum(
        payload["name"],
        payload["excitation"],
        payload["emission"],
        payload["intensities"],
        XUnit.parse(payload["unit"]),
    )
    spectrum.set_unit(payload.get("current_unit", payload["unit"]))
    return spectrum


# --- PhasorAssay ------------------------------------------------------------

def assay_to_dict(assay: PhasorAssay) -> Dict[str, Any]:
    zoom = assay.zoom
    return {
        "name": assay.name,
        "harmonic": list(assay.harmonic),
        "ex_range": list(assay.ex_range),
        "em_range": list(assay.em_range),
        "zoom": {
            "min_g": zoom.min_g,
            "max_g": zoom.max_g,
            "min_s": zoom.min_s,
            "max_s": zoom.max_s,
        },
        "is_zoomed": assay.is_zoomed,
        "color_index": assay.color_index,
        "dot_shape": assay.dot_shape,
        "spectra": [spectrum_to_dict(spectrum) for spectrum in assay.spectra],
    }


def assay_from_dict(payload: Dict[str, Any]) -> PhasorAssay:
    spectra = [spectrum_from_dict(item) for item in payload.get("spectra", [])]
    assay = PhasorAssay(payload["name"], spectra, tuple(payload.get("harmonic", (1, 1))))
    if "ex_range" in payload:
        assay.ex_range = AxisRange.from_values(*payload["ex_range"])
    if "em_range" in payload:
        assay.em_range = AxisRange.from_values(*payload["em_range"])
    zoom = payload.get("zoom")
    if zoom:
        assay.zoom = ZoomWindow.clamped(zoom["min_g"], zoom["max_g"], zoom["min_s"], zoom["max_s"])
    assay.is_zoomed = bool(payload.get("is_zoomed", False))
    assay.color_index = int(payload.get("color_index", 0))
    assay.dot_shape = payload.get("dot_shape", assay.dot_shape)
    return assay


# --- Reference points and equations ------------------------------------------

def reference_point_to_dict(point: ReferencePoint) -> Dict[str, Any]:
    return {"slot": int(point.slot), "name": point.name, "g": point.g, "s": point.s}


def reference_point_from_dict(payload: Dict[str, Any]) -> ReferencePoint:
    return ReferencePoint(HarmonicSlot(payload["slot"]), payload["name"], payload["g"], payload["s"])


def equation_to_dict(equation: LinearEquation) -> Dict[str, Any]:
    if isinstance(equation, UnityEquation):
        return {"kind": equation.kind, "coefficients": list(equation.coefficients)}
    return {
        "kind": equation.kind,
        "axis": int(equation.axis),
        "slot": int(equation.slot),
        "coefficients": list(equation.coefficients),
    }


def equation_from_dict(payload: Dict[str, Any]) -> LinearEquation:
    kind = payload["kind"]
    if kind == UnityEquation.kind:
        return UnityEquation(len(payload["coefficients"]))
    if kind == CoordinateEquation.kind:
        return CoordinateEquation(payload["axis"], payload["slot"], payload["coefficients"])
    raise ValueError(f"Unknown equation kind: {kind!r}")


# --- Solver and analysis ------------------------------------------------------

def solver_to_dict(solver: UnmixingSolver) -> Dict[str, Any]:
    return {
        "component_count": solver.component_count,
        "equations": [equation_to_dict(eq) for eq in solver.equations],
        "references": [reference_point_to_dict(point) for point in solver.references],
    }


def solver_from_dict(payload: Dict[str, Any]) -> UnmixingSolver:
    book = ReferencePointBook()
    book.merge(reference_point_from_dict(item) for item in payload.get("references", []))
    solver = UnmixingSolver(book)
    count = payload.get("component_count")
    if count is not None:
        solver.define_system(count, check_references=False)
        for item in payload.get("equations", []):
            solver.add_equation(equation_from_dict(item))
    return solver


def analysis_to_dict(analysis: FractionAnalysis) -> Dict[str, Any]:
    return {
        "assays": [assay_to_dict(assay) for assay in analysis.assays],
        "solver": solver_to_dict(analysis.solver),
    }


def analysis_from_dict(payload: Dict[str, Any]) -> FractionAnalysis:
    assays = [assay_from_dict(item) for item in payload.get("assays", [])]
    solver = solver_from_dict(payload.get("solver", {}))
    return FractionAnalysis(assays, solver)


# --- JSON files -----------------------------------------------------------------

_ENCODERS = {
    "assay": assay_to_dict,
    "assay_list": lambda assays: [assay_to_dict(a) for a in assays],
    "reference_points": lambda points: [reference_point_to_dict(p) for p in points],
    "fraction_analysis": analysis_to_dict,
}

_DECODERS = {
    "assay": assay_from_dict,
    "assay_list": lambda items: [assay_from_dict(item) for item in items],
    "reference_points": lambda items: [reference_point_from_dict(item) for item in items],
    "fraction_analysis": analysis_from_dict,
}


def to_payload(kind: str, obj) -> Dict[str, Any]:
    if kind not in _ENCODERS:
        raise ValueError(f"Unknown payload kind: {kind!r}")
    return {"kind": kind, "version": FORMAT_VERSION, "data": _ENCODERS[kind](obj)}


def from_payload(payload: Dict[str, Any], expected_kind: Optional[str] = None):
    if not isinstance(payload, dict) or "kind" not in payload or "data" not in payload:
        raise SerializationError("Payload is missing the 'kind' or 'data' entry.")
    kind = payload["kind"]
    if kind not in _DECODERS:
        raise ValueError(f"Unknown payload kind: {kind!r}")
    if expected_kind is not None and kind != expected_kind:
        raise SerializationError(f"Expected a {expected_kind!r} payload, found {kind!r}.")
    try:
        return _DECODERS[kind](payload["data"])
    except (KeyError, TypeError, ValueError, IndexError) as exc:
        raise SerializationError(f"Malformed {kind!r} payload: {exc}") from exc


def save_json(kind: str, obj, path) -> Path:
    target = Path(path).expanduser()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(to_payload(kind, obj), indent=2), encoding="utf-8")
    logger.info("Saved %s to %s", kind, target)
    return target


def load_json(path, expected_kind: Optional[str] = None):
    source = Path(path).expanduser()
    try:
        payload = json.loads(source.read_text(encoding="utf-8"))
    except OSError as exc:
        raise SerializationError(f"Could not read {source}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise SerializationError(f"{source} is not valid JSON: {exc}") from exc
    obj = from_payload(payload, expected_kind)
    logger.info("Loaded %s from %s", payload["kind"], source)
    return obj


def load_reference_points(path, book: ReferencePointBook) -> int:
    """Merge the points saved in ``path`` into ``book``; returns how many were new."""
    points: List[ReferencePoint] = load_json(path, "reference_points")
    return book.merge(points)


__all__ = [
    "SerializationError",
    "FORMAT_VERSION",
    "spectrum_to_dict",
    "spectrum_from_dict",
    "assay_to_dict",
    "assay_from_dict",
    "reference_point_to_dict",
    "reference_point_from_dict",
    "equation_to_dict",
    "equation_from_dict",
    "solver_to_dict",
    "solver_from_dict",
    "analysis_to_dict",
    "analysis_from_dict",
    "to_payload",
    "from_payload",
    "save_json",
    "load_json",
    "load_reference_points",
]
