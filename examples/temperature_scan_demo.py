"""Bragg-edge extraction over a temperature grid.

Extracts the Bragg edges and per-isotope data of beryllium in BeO at the
temperatures a thermal-scattering evaluation would use, and prints the
redistribution decision for each species.

Run:
  python examples/temperature_scan_demo.py
"""

from __future__ import annotations

import logging
from pathlib import Path

from braggforge.bragg.edges import extract_bragg_edges
from braggforge.workflows.temperature_scan import run_temperature_scan

HERE = Path(__file__).resolve().parent


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    config = f"{HERE / 'BeO_sg186.yaml'};dcutoff=0.5"

    scan = run_temperature_scan(config, [296.0, 400.0, 600.0, 800.0, 1000.0, 1200.0], target_z=4, target_a=0)
    print("=== BeO: beryllium ===")
    print(scan.summary())

    for z, label in ((4, "Be"), (8, "O")):
        result = extract_bragg_edges(config, 296.0, z, 0, 20000)
        print(f"{label}: redistribute={result.redistribute}, "
              f"min f/(1-f)*sigma_inc={result.min_incoherent_contribution:.3e}")

    al = extract_bragg_edges(f"{HERE / 'Al_sg225.yaml'};dcutoff=0.5", 293.6, 13, 0, 20000)
    print(f"Al at 293.6 K: {al.plane_count} edges, first at {al.edges[0].energy * 1e3:.3f} meV")


if __name__ == "__main__":
    main()
