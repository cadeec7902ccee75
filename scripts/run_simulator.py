#!/usr/bin/env python
"""
Run pump-panel simulator: one session on the virtual 10 Hz clock, saved to HDF5/CSV

Usage:
    python scripts/run_simulator.py --source tank --lines xlay1 --psi 150 --seconds 60
    python scripts/run_simulator.py --source hydrant --static 80 --steamer 5:100 --side 5:100 \
        --lines xlay1 xlay2 twohalfA --psi 160

Output:
    <output-dir>/sessions.h5             per-tick channels
    <output-dir>/sessions_meta.jsonl     session summary
    <output-dir>/panel.json              discharges and supply ports
    <output-dir>/lines_summary.csv       per-line gpm / gallons
"""

import sys
import argparse
import logging
from pathlib import Path

import pandas as pd

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from pumpsim.config import SystemConfig
from pumpsim.controller import PumpPanelController
from pumpsim.core.types import HoseLeg
from pumpsim.driver import SimulationDriver
from pumpsim.hydrant import HavConfig, HydrantConfig, side_leg
from pumpsim.logger import SessionRecorder
from pumpsim.physics.pump_curve import HydrantTestData
from pumpsim.presets import DEFAULT_PRESETS, StaticPresetProvider


logger = logging.getLogger("run_simulator")


def parse_leg(text):
    """'5:100' -> (5.0, 100.0)"""
    try:
        d, length = text.split(":")
        return float(d), float(length)
    except ValueError:
        raise argparse.ArgumentTypeError(f"leg must look like DIAMETER:LENGTH, got {text!r}")


def parse_args():
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Run one pump-panel session and record gauges",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Two crosslays off the tank at 150 psi
  python scripts/run_simulator.py --source tank --lines xlay1 xlay2 --psi 150

  # Hydrant, 5" steamer + 5" side, RPM mode
  python scripts/run_simulator.py --source hydrant --steamer 5:100 --side 5:100 --mode rpm --rpm 1400
        """
    )

    parser.add_argument("--source", choices=["tank", "hydrant"], default="tank")
    parser.add_argument("--lines", nargs="*", default=["xlay1"], help="Discharge ids to open fully")
    parser.add_argument("--mode", choices=["pressure", "rpm"], default="pressure")
    parser.add_argument("--psi", type=float, default=150.0, help="Pressure setpoint (default: 150)")
    parser.add_argument("--rpm", type=float, default=1200.0, help="RPM setpoint (default: 1200)")
    parser.add_argument("--seconds", type=float, default=60.0, help="Session length (default: 60)")

    parser.add_argument("--static", type=float, default=80.0, help="Hydrant static psi (default: 80)")
    parser.add_argument("--steamer", type=parse_leg, default=None, help="Steamer leg DIA:LEN")
    parser.add_argument("--side", type=parse_leg, action="append", default=[], help="Side leg DIA:LEN (repeatable)")
    parser.add_argument("--hav", choices=["bypass", "boost"], default=None)
    parser.add_argument("--boost", type=float, default=0.0, help="HAV boost psi (0..50)")
    parser.add_argument("--flow-test", type=float, nargs=3, metavar=("PS", "PR", "Q"), default=None)
    parser.add_argument("--priority", action="store_true", help="Priority flow sharing")

    parser.add_argument(
        "--output-dir",
        type=str,
        default="data/sessions",
        help="Output directory for HDF5 and CSV files (default: data/sessions)"
    )
    parser.add_argument("--quiet", action="store_true", help="Only warnings")

    return parser.parse_args()


def build_hydrant(args):
    sides = list(args.side)
    legs = {"steamer": None, "sideA": None, "sideB": None}
    if args.steamer is not None:
        legs["steamer"] = HoseLeg(*args.steamer)
    for port, (d, length) in zip(("sideA", "sideB"), sides):
        legs[port] = side_leg(d, length)

    tap_mode = {0: "single", 1: "double"}.get(len(sides), "triple")
    hav = HavConfig(enabled=args.hav is not None, mode=args.hav or "bypass", boost_psi=args.boost)
    flow_test = HydrantTestData(*args.flow_test) if args.flow_test else None
    return HydrantConfig(tap_mode=tap_mode, static_psi=args.static, hav=hav, flow_test=flow_test, **legs)


def main():
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.seconds <= 0:
        print("Error: --seconds must be > 0")
        sys.exit(1)

    cfg = SystemConfig(flow_sharing_mode="priority" if args.priority else "proportional")
    by_category = {p.category: p for p in DEFAULT_PRESETS}
    ctl = PumpPanelController(cfg, presets=StaticPresetProvider(by_category=by_category))

    if args.source == "hydrant":
        ctl.set_hydrant(build_hydrant(args))

    ctl.engage_pump(args.source)
    try:
        for line_id in args.lines:
            ctl.set_line_open(line_id, True)
            ctl.set_valve_percent(line_id, 100.0)
    except KeyError as e:
        print(f"Error: {e}")
        sys.exit(1)

    ctl.set_governor_mode(args.mode)
    ctl.set_pressure_setpoint(args.psi)
    ctl.set_rpm_setpoint(args.rpm)

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    logger.info("source=%s lines=%s mode=%s seconds=%.1f", args.source, args.lines, args.mode, args.seconds)

    with SessionRecorder(output_dir) as rec:
        rec.write_panel(ctl.ctx)
        rec.begin_session(ctl.ctx)
        driver = SimulationDriver(ctl, recorder=rec)
        driver.run_simulated(args.seconds)
        meta = rec.end_session(ctl.ctx)

    lines_out = ctl.readout()["lines"]
    rows = []
    for line in ctl.ctx.discharges:
        rows.append({
            "line_id": line.id,
            "label": line.label,
            "assignment": line.assignment.kind,
            "open": line.open,
            "display_psi": round(line.display_psi, 1),
            "gpm_now": round(line.gpm_now, 1),
            "gallons": round(line.gallons_this_engagement, 1),
            "required_pdp_psi": round(lines_out[line.id]["required_pdp_psi"], 1),
        })
    df = pd.DataFrame(rows)
    csv_path = output_dir / "lines_summary.csv"
    df.to_csv(csv_path, index=False)

    print(df.to_string(index=False))
    print(f"\nTotal: {meta.gallons_total:.1f} gal, peak {meta.peak_gpm:.1f} gpm, tank {ctl.ctx.gauges.water_gal:.1f} gal")
    if args.source == "hydrant":
        hs = ctl.ctx.hydrant_status
        print(f"Hydrant residual {hs.hydrant_residual_psi:.1f} psi ({hs.badge}), intake {hs.engine_intake_psi:.1f} psi")
    print(f"Output: {output_dir}")


if __name__ == "__main__":
    main()
