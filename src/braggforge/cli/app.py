"""Command-line interface for BraggForge using argparse."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from braggforge.bragg.edges import extract_bragg_edges
from braggforge.data.elements import format_species
from braggforge.errors import BraggEdgeError
from braggforge.io.artifacts import write_bragg_edge_artifact, write_edges_csv
from braggforge.material.loader import load_material
from braggforge.workflows.temperature_scan import TemperatureScanConfig, run_temperature_scan

DEFAULT_CAPACITY = 20000


def cmd_extract(args: argparse.Namespace) -> None:
    result = extract_bragg_edges(args.config, args.temperature, args.z, args.a, args.capacity)
    print(f"Material: {result.material_name} at {result.temperature:g} K")
    print(f"Species: {format_species(args.z, args.a)} (Z={args.z}, A={args.a})")
    print(f"Bragg edges: {result.plane_count}")
    print(f"Bound incoherent XS: {result.bound_incoherent_xs:.6g} barn")
    print(f"Bound coherent XS: {result.bound_coherent_xs:.6g} barn")
    print(f"Free-atom XS: {result.free_atom_xs:.6g} barn")
    print(f"Mean-squared displacement: {result.msd:.6g} Aa^2")
    print(f"Fraction: {result.fraction:.6g}")
    print(f"Smallest incoherent contribution: {result.min_incoherent_contribution:.6g}")
    print(f"Redistribute incoherent scattering: {'yes' if result.redistribute else 'no'}")
    if args.output:
        if args.output.suffix.lower() == ".csv":
            write_edges_csv(result, args.output)
        else:
            write_bragg_edge_artifact(args.output, result, material_config=args.config)
        print(f"Wrote Bragg edges to {args.output}")


def cmd_scan(args: argparse.Namespace) -> None:
    scan = run_temperature_scan(
        args.config,
        args.temperatures,
        args.z,
        args.a,
        TemperatureScanConfig(output_capacity=args.capacity),
    )
    print(scan.summary())
    if args.output:
        scan.to_dataframe().to_csv(args.output, index=False)
        print(f"Saved temperature scan to {args.output}")


def cmd_planes(args: argparse.Namespace) -> None:
    model = load_material(args.config, args.temperature)
    print(model.summary())
    print(f"{'d [Aa]':>12} {'F^2 [barn]':>14} {'mult':>6}")
    for plane in model.planes:
        print(f"{plane.d_spacing:12.6f} {plane.fsquared:14.6g} {plane.multiplicity:6d}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Bragg-edge extraction for thermal scattering kernel generation")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract = subparsers.add_parser("extract", help="Extract Bragg edges for one species and temperature")
    extract.add_argument("config", help="Material configuration, e.g. 'Al.yaml;dcutoff=0.5'")
    extract.add_argument("--temperature", type=float, required=True, help="Temperature in K")
    extract.add_argument("--z", type=int, required=True, help="Atomic number")
    extract.add_argument("--a", type=int, default=0, help="Mass number (0 = natural element)")
    extract.add_argument("--capacity", type=int, default=DEFAULT_CAPACITY, help="Reserved output slots")
    extract.add_argument("--output", type=Path, help="Artifact (.json/.yaml) or edge table (.csv)")
    extract.set_defaults(func=cmd_extract)

    scan = subparsers.add_parser("scan", help="Extract Bragg edges over several temperatures")
    scan.add_argument("config")
    scan.add_argument("--temperatures", type=float, nargs="+", required=True)
    scan.add_argument("--z", type=int, required=True)
    scan.add_argument("--a", type=int, default=0)
    scan.add_argument("--capacity", type=int, default=DEFAULT_CAPACITY)
    scan.add_argument("--output", type=Path, help="CSV summary, one row per temperature")
    scan.set_defaults(func=cmd_scan)

    planes = subparsers.add_parser("planes", help="List the diffraction planes of a material")
    planes.add_argument("config")
    planes.add_argument("--temperature", type=float, required=True)
    planes.set_defaults(func=cmd_planes)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        args.func(args)
    except BraggEdgeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return 0


if __name__ == "__main__":
    sys.exit(main())
