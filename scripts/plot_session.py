#!/usr/bin/env python
"""
Plot recorded pump-panel session channels

Usage:
    python scripts/plot_session.py --input data/sessions/sessions.h5
    python scripts/plot_session.py --input data/sessions/sessions.h5 --session session_000000
"""

import argparse
from pathlib import Path

import h5py
import numpy as np
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt


UNITS = {
    "master_intake": "psi",
    "master_discharge": "psi",
    "system_psi": "psi",
    "hydrant_residual": "psi",
    "engine_intake": "psi",
    "rpm": "rpm",
    "water_gal": "gal",
    "gpm_total": "gpm",
}


def infer_unit(name: str) -> str:
    if name.startswith("gpm__"):
        return "gpm"
    return UNITS.get(name, "")


def parse_args():
    parser = argparse.ArgumentParser(description="Plot channels of a recorded session")
    parser.add_argument("--input", type=str, default="data/sessions/sessions.h5")
    parser.add_argument("--session", type=str, default=None, help="Group name (default: first)")
    parser.add_argument("--output-dir", type=str, default="plots")
    return parser.parse_args()


def main():
    args = parse_args()
    h5_path = Path(args.input)
    if not h5_path.exists():
        raise FileNotFoundError(f"Не найден {h5_path}")

    out_dir = Path(args.output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    with h5py.File(h5_path, "r") as f:
        sessions = f["sessions"]
        key = args.session or list(sessions.keys())[0]
        g = sessions[key]
        t = g["time_s"][:]
        names = [k for k in g.keys() if k != "time_s"]

        n = len(names)
        cols = 2
        rows = int(np.ceil(n / cols))
        fig, axes = plt.subplots(rows, cols, figsize=(14, 2.2 * rows), sharex=True)
        axes = np.array(axes).reshape(-1)

        for i, name in enumerate(names):
            ax = axes[i]
            ax.plot(t, g[name][:], linewidth=0.8)
            unit = infer_unit(name)
            ax.set_title(name + (f" [{unit}]" if unit else ""))
            ax.grid(True, alpha=0.3)

        for j in range(n, len(axes)):
            axes[j].axis("off")

        fig.suptitle(f"{key} ({g.attrs.get('source', '?')})", y=1.002)
        plt.tight_layout()
        out = out_dir / f"{key}_ALL.png"
        fig.savefig(out, dpi=150)
        plt.close(fig)

    print("Saved to:", out)


if __name__ == "__main__":
    main()
