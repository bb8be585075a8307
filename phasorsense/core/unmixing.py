# phasorsense/core/unmixing.py
"""
Linear unmixing of phasor coordinates into component fractions.

``UnmixingSolver`` holds the reference points and the equation system and
solves it for one spectrum at a time. ``FractionAnalysis`` groups assays with
a solver and keeps the last batch of results until it is told to recompute.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from phasorsense.algorithms.linear_system import solve_cramer

from .equations import CoordinateAxis, CoordinateEquation, LinearEquation, UnityEquation
from .harmonics import HarmonicSlot
from .reference_points import ReferencePointBook

logger = logging.getLogger(__name__)

MIN_COMPONENTS = 2


class SolveStatus(Enum):
    OK = "ok"
    EMPTY_SYSTEM = "empty system"
    INCOMPLETE_SYSTEM = "fewer equations than components"
    DIMENSION_MISMATCH = "coefficient count differs from component count"
    SINGULAR_SYSTEM = "singular system"
    INVALID_HARMONIC = "no phasor for harmonic"


class SystemState(Enum):
    UNDEFINED = "undefined"
    PARTIAL = "partially defined"
    CORRECT = "correct"


class FractionResult(NamedTuple):
    fractions: Optional[np.ndarray]
    status: SolveStatus

    @property
    def ok(self) -> bool:
        return self.status is SolveStatus.OK


class UnmixingSolver:
    """
    Square linear system built from reference points.

    Only the first ``component_count`` equations are read when solving.
    Equations stored beyond that are kept, listed and serialized, but have no
    effect on the fractions.
    """

    def __init__(self, references: Optional[ReferencePointBook] = None):
        self.references = references if references is not None else ReferencePointBook()
        self.component_count: Optional[int] = None
        self.equations: List[LinearEquation] = []
        self.revision = 0

    def _touch(self) -> None:
        self.revision += 1

    # --- system definition ----------------------------------------------

    def usable_slots(self, component_count: int) -> Tuple[List[HarmonicSlot], List[HarmonicSlot]]:
        """
        Split the non-empty slots into ``(usable, unusable)``.

        A slot is usable when it holds at least ``component_count`` points;
        empty slots appear in neither list.
        """
        usable, unusable = [], []
        for slot in HarmonicSlot:
            count = self.references.count(slot)
            if count == 0:
                continue
            (usable if count >= component_count else unusable).append(slot)
        return usable, unusable

    def check_information(self, component_count: int) -> List[HarmonicSlot]:
        """
        Verify the references can support ``component_count`` components.

        Each usable slot contributes a G and an S equation and the unity
        equation adds one more. Returns the slots that are missing points;
        raises ValueError when not enough equations could be formed.
        """
        if component_count < MIN_COMPONENTS:
            raise ValueError(f"The number of components must be at least {MIN_COMPONENTS}.")
        usable, unusable = self.usable_slots(component_count)
        if 2 * len(usable) < component_count - 1:
            raise ValueError(
                f"There is not enough information to build a system of equations "
                f"for {component_count} components."
            )
        if unusable:
            logger.warning(
                "Harmonics missing reference points cannot be used: %s",
                ", ".join(slot.label for slot in unusable),
            )
        return unusable

    def define_system(self, component_count: int, check_references: bool = True) -> None:
        """Start a new system of ``component_count`` components; the equation list is cleared."""
        component_count = int(component_count)
        if check_references:
            self.check_information(component_count)
        elif component_count < MIN_COMPONENTS:
            raise ValueError(f"The number of components must be at least {MIN_COMPONENTS}.")
        self.component_count = component_count
        self.equations = []
        self._touch()
        logger.info("Defined unmixing system for %d components", component_count)

    def clear(self) -> None:
        self.component_count = None
        self.equations = []
        self._touch()

    def _require_components(self) -> int:
        if self.component_count is None:
            raise ValueError("Define the number of components before adding equations.")
        return self.component_count

    def add_equation(self, equation: LinearEquation) -> bool:
        """Append ``equation``; returns False if an equal equation is already in the system."""
        if equation in self.equations:
            logger.debug("Equation %r is already in the system", equation.display_name())
            return False
        self.equations.append(equation)
        self._touch()
        return True

    def add_unity_equation(self) -> bool:
        return self.add_equation(UnityEquation(self._require_components()))

    def add_coordinate_equation(self, axis, slot) -> bool:
        """Add the G or S equation of ``slot`` using its first ``component_count`` points."""
        count = self._require_components()
        slot = HarmonicSlot(slot)
        axis = CoordinateAxis(axis)
        if self.references.count(slot) < count:
            raise ValueError(f"{slot.label} holds fewer than {count} reference points.")
        coefficients = self.references.coefficients(slot, int(axis), count)
        return self.add_equation(CoordinateEquation(axis, slot, coefficients))

    def can_add_coordinate_equation(self, slot) -> bool:
        return self.component_count is not None and self.references.count(slot) >= self.component_count

    def has_unity_equation(self) -> bool:
        return any(isinstance(eq, UnityEquation) for eq in self.equations)

    def remove_equation(self, index: int) -> LinearEquation:
        equation = self.equations.pop(index)
        self._touch()
        return equation

    # --- readiness -------------------------------------------------------

    @property
    def state(self) -> SystemState:
        if self.component_count is None:
            return SystemState.UNDEFINED
        if len(self.equations) < self.component_count:
            return SystemState.PARTIAL
        return SystemState.CORRECT

    def is_correct(self) -> bool:
        return bool(self.equations) and self.state is SystemState.CORRECT

    def equation_names(self) -> List[str]:
        return [equation.display_name() for equation in self.equations]

    # --- solving ---------------------------------------------------------

    def solve(self, assay, spectrum_index: int) -> FractionResult:
        """Fractions of one spectrum of ``assay`` together with the reason for a missing result."""
        if not self.equations or self.component_count is None:
            return FractionResult(None, SolveStatus.EMPTY_SYSTEM)
        count = self.component_count
        if len(self.equations) < count:
            return FractionResult(None, SolveStatus.INCOMPLETE_SYSTEM)

        matrix = []
        rhs = []
        for equation in self.equations[:count]:
            if len(equation.coefficients) != count:
                return FractionResult(None, SolveStatus.DIMENSION_MISMATCH)
            matrix.append(list(equation.coefficients))
            if isinstance(equation, UnityEquation):
                rhs.append(1.0)
                continue
            phasor = assay.get_phasor(spectrum_index, equation.slot.harmonic)
            if phasor is None:
                return FractionResult(None, SolveStatus.INVALID_HARMONIC)
            rhs.append(phasor[int(equation.axis)])

        fractions = solve_cramer(matrix, rhs)
        if fractions is None:
            return FractionResult(None, SolveStatus.SINGULAR_SYSTEM)
        return FractionResult(fractions, SolveStatus.OK)

    def get_fractions(self, assay, spectrum_index: int) -> Optional[np.ndarray]:
        return self.solve(assay, spectrum_index).fractions


class FractionAnalysis:
    """
    Assays under one unmixing system plus the cached batch of fractions.

    The cache is filled only by ``recalculate``. Any change to the solver or
    to the spectrum count of the assays makes it stale, and stale lookups
    return None until the next ``recalculate``.
    """

    def __init__(self, assays: Optional[Sequence] = None, solver: Optional[UnmixingSolver] = None):
        self.assays = list(assays or [])
        self.solver = solver if solver is not None else UnmixingSolver()
        self._fractions: List[List[Optional[np.ndarray]]] = []
        self._stamp: Optional[Tuple] = None

    @property
    def references(self) -> ReferencePointBook:
        return self.solver.references

    def points_at(self, slot):
        return self.references.points_at(slot)

    def _current_stamp(self) -> Tuple:
        return id(self.solver), self.solver.revision, tuple(len(a.spectra) for a in self.assays)

    @property
    def is_stale(self) -> bool:
        return self._stamp != self._current_stamp()

    def add_assay(self, assay) -> None:
        self.assays.append(assay)
        self._stamp = None

    def add_assays(self, assays) -> None:
        self.assays.extend(assays)
        self._stamp = None

    def remove_assay(self, index: int):
        assay = self.assays.pop(index)
        self._stamp = None
        return assay

    def set_harmonic(self, harmonic) -> None:
        """Apply one harmonic to every assay, as the phasor plot does on slot change."""
        for assay in self.assays:
            assay.harmonic = harmonic

    def recalculate(self) -> None:
        """Solve every spectrum of every assay and store the results."""
        if not self.solver.is_correct():
            logger.warning("Unmixing system is %s; fractions left empty", self.solver.state.value)
        results = []
        solved = failed = 0
        for assay_index, assay in enumerate(self.assays):
            values = []
            for spectrum_index in range(len(assay.spectra)):
                result = self.solver.solve(assay, spectrum_index)
                if result.ok:
                    solved += 1
                else:
                    failed += 1
                    logger.debug(
                        "No fractions for assay %d spectrum %d: %s",
                        assay_index,
                        spectrum_index,
                        result.status.value,
                    )
                values.append(result.fractions)
            results.append(values)
        self._fractions = results
        self._stamp = self._current_stamp()
        logger.info("Recalculated fractions: %d solved, %d without result", solved, failed)

    def fractions_for(self, assay_index: int, spectrum_index: int) -> Optional[np.ndarray]:
        if self.is_stale:
            return None
        if not 0 <= assay_index < len(self._fractions):
            return None
        values = self._fractions[assay_index]
        if not 0 <= spectrum_index < len(values):
            return None
        return values[spectrum_index]

    def fraction_for(self, assay_index: int, spectrum_index: int, reference_index: int) -> Optional[float]:
        fractions = self.fractions_for(assay_index, spectrum_index)
        if fractions is None:
            return None
        return float(fractions[reference_index])


__all__ = [
    "SolveStatus",
    "SystemState",
    "FractionResult",
    "UnmixingSolver",
    "FractionAnalysis",
    "MIN_COMPONENTS",
]
