#!/usr/bin/env python3
"""
Unmix the spectra of a saved fraction analysis into component fractions.

The analysis JSON holds the assays, the reference points and (optionally) an
equation system. Reference points from extra files can be merged in and the
system can be redefined from the command line:

    unmix_fractions.py analysis.json -o fractions.xlsx --components 3 --equation unity --equation G@1,1 --equation S@1,1
"""

import argparse
import logging
import sys
from typing import List, Optional, Tuple

from phasorsense.core.equations import CoordinateAxis
from phasorsense.core.harmonics import HarmonicSlot
from phasorsense.core.serialization import (
    SerializationError,
    load_json,
    load_reference_points,
    save_json,
)
from phasorsense.core.unmixing import FractionAnalysis
from phasorsense.logging_config import setup_logging
from phasorsense.tools.phasor_export import export_fractions
from phasorsense.utils.config_manager import load_settings

logger = logging.getLogger("phasorsense.scripts.unmix_fractions")


def parse_harmonic(text: str) -> HarmonicSlot:
    n, m = (int(part) for part in text.replace(" ", "").split(","))
    return HarmonicSlot.for_harmonic((n, m))


def parse_equation(text: str) -> Tuple[object, Optional[HarmonicSlot]]:
    """``unity`` or ``<G|S>@n,m``."""
    text = text.strip()
    if text.lower() == "unity":
        return "unity", None
    axis, _, harmonic = text.partition("@")
    if not harmonic:
        raise ValueError(f"Equation must be 'unity' or '<G|S>@n,m', got {text!r}")
    return CoordinateAxis[axis.strip().upper()], parse_harmonic(harmonic)


def define_equations(analysis: FractionAnalysis, component_count: int, entries: List[str]) -> None:
    solver = analysis.solver
    solver.define_system(component_count)
    for entry in entries:
        axis, slot = parse_equation(entry)
        if axis == "unity":
            added = solver.add_unity_equation()
        else:
            added = solver.add_coordinate_equation(axis, slot)
        if not added:
            logger.warning("Equation %s is already in the system", entry)


def build_parser() -> argparse.ArgumentParser:
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Solve component fractions of a saved fraction analysis.")
    parser.add_argument("analysis", help="Fraction analysis JSON file.")
    parser.add_argument("-o", "--output", required=True, help="Output table (.xlsx or .csv).")
    parser.add_argument("--references", nargs="*", default=[], help="Reference point JSON files to merge in.")
    parser.add_argument("--components", type=int, default=None,
                        help=f"Redefine the system with this many components (config default "
                             f"{settings['default_component_count']}).")
    parser.add_argument("--equation", action="append", default=[],
                        help="Equation to add after --components: 'unity' or '<G|S>@n,m'.")
    parser.add_argument("--slot", default=None, help="Harmonic 'n,m' whose reference points head the columns.")
    parser.add_argument("--save", default=None, help="Optional JSON path to save the updated analysis to.")
    parser.add_argument("--log-level", default=settings["log_level"], help="Logging level.")
    return parser


def main(argv: List[str]) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        analysis = load_json(args.analysis, "fraction_analysis")
        for path in args.references:
            added = load_reference_points(path, analysis.references)
            logger.info("Merged %d new reference point(s) from %s", added, path)
        if args.components is not None or args.equation:
            count = args.components or load_settings()["default_component_count"]
            define_equations(analysis, count, args.equation)
        if args.slot:
            slot = parse_harmonic(args.slot)
        elif analysis.assays:
            slot = HarmonicSlot.for_harmonic(analysis.assays[0].harmonic)
        else:
            slot = HarmonicSlot.H11
    except (SerializationError, ValueError, KeyError) as e:
        logger.error("Could not prepare the analysis: %s", e)
        return 1

    if not analysis.solver.is_correct():
        logger.error("The equation system is %s; nothing to solve.", analysis.solver.state.value)
        return 1

    analysis.set_harmonic(slot.harmonic)
    analysis.recalculate()
    export_fractions(analysis, slot, args.output)
    if args.save:
        save_json("fraction_analysis", analysis, args.save)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
