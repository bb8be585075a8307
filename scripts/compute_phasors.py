#!/usr/bin/env python3
"""
Compute phasor coordinates for a set of excitation-emission grid files.

All files are grouped into one assay. The ranges default to the common extent
of the spectra and can be narrowed from the command line. The phasor table
(G, S, modulus and angle for the eight canonical harmonics) is written to an
Excel or CSV file; the assay itself can also be saved as JSON for later
unmixing.
"""

import argparse
import logging
import sys
from typing import List, Optional

from phasorsense.core.phasor_assay import PhasorAssay
from phasorsense.core.serialization import save_json
from phasorsense.logging_config import setup_logging
from phasorsense.tools.phasor_export import export_phasors
from phasorsense.utils.config_manager import load_settings
from phasorsense.utils.file_io import GridLoadError, load_spectra

logger = logging.getLogger("phasorsense.scripts.compute_phasors")


def build_assay(paths: List[str], name: str, unit: str, delimiter: str,
                excitation: Optional[List[float]] = None,
                emission: Optional[List[float]] = None,
                harmonic: Optional[List[int]] = None) -> PhasorAssay:
    spectra = load_spectra(paths, unit, delimiter)
    assay = PhasorAssay(name, spectra)
    if harmonic:
        assay.harmonic = tuple(harmonic)
    if excitation or emission:
        ex = excitation or [assay.ex_range.minimum, assay.ex_range.maximum]
        em = emission or [assay.em_range.minimum, assay.em_range.maximum]
        assay.set_ranges(ex[0], ex[1], em[0], em[1])
    return assay


def build_parser() -> argparse.ArgumentParser:
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Compute phasor coordinates of excitation-emission grids.")
    parser.add_argument("files", nargs="+", help="Grid files (first row excitation, first column emission).")
    parser.add_argument("-o", "--output", required=True, help="Output table (.xlsx or .csv).")
    parser.add_argument("--name", default="assay", help="Assay name, used as the sheet name.")
    parser.add_argument("--unit", default=settings["default_x_unit"], help="Axis unit of the files: nm, 1/cm or 1/um.")
    parser.add_argument("--delimiter", default=settings["csv_delimiter"], help="Field separator of the grid files.")
    parser.add_argument("--excitation", nargs=2, type=float, metavar=("MIN", "MAX"), help="Excitation window.")
    parser.add_argument("--emission", nargs=2, type=float, metavar=("MIN", "MAX"), help="Emission window.")
    parser.add_argument("--harmonic", nargs=2, type=int, metavar=("N", "M"), default=settings["default_harmonic"],
                        help="Assay harmonic stored with the saved assay.")
    parser.add_argument("--save-assay", default=None, help="Optional JSON path to save the assay to.")
    parser.add_argument("--log-level", default=settings["log_level"], help="Logging level.")
    return parser


def main(argv: List[str]) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        assay = build_assay(
            args.files,
            args.name,
            args.unit,
            args.delimiter,
            excitation=args.excitation,
            emission=args.emission,
            harmonic=args.harmonic,
        )
    except (GridLoadError, ValueError) as e:
        logger.error("Could not build the assay: %s", e)
        return 1

    export_phasors([assay], args.output)
    if args.save_assay:
        save_json("assay", assay, args.save_assay)
    logger.info("Wrote phasors of %d spectra to %s", len(assay.spectra), args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
