from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List

import h5py
import numpy as np

from pumpsim.state import SimulationContext


logger = logging.getLogger(__name__)

# Каналы, которые пишутся на каждом тике (кроме расходов по линиям).
CHANNELS = (
    "master_intake",
    "master_discharge",
    "rpm",
    "water_gal",
    "system_psi",
    "gpm_total",
    "hydrant_residual",
    "engine_intake",
)


@dataclass
class SessionMeta:
    session_id: int
    source: str
    duration_s: float
    ticks: int
    governor_mode: str
    governor_enabled: bool
    gallons_total: float
    peak_gpm: float


class SessionRecorder:
    """Запись сессий панели в HDF5 + jsonl с метаданными + описание панели."""

    def __init__(self, out_dir: str | Path):
        self.out_dir = Path(out_dir)
        self.out_dir.mkdir(parents=True, exist_ok=True)

        self.h5_path = self.out_dir / "sessions.h5"
        self.meta_path = self.out_dir / "sessions_meta.jsonl"
        self.panel_path = self.out_dir / "panel.json"

        self.h5 = h5py.File(self.h5_path, "w")
        self.grp = self.h5.create_group("sessions")

        self._meta_f = open(self.meta_path, "w", encoding="utf-8")
        self._rows: Dict[str, List[float]] = {}
        self._line_ids: List[str] = []
        self._session_id = 0

    def __enter__(self) -> "SessionRecorder":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def write_panel(self, ctx: SimulationContext) -> None:
        # node.id совпадает с суффиксом каналов gpm__<id>
        panel = {
            "discharges": [
                {
                    "id": line.id,
                    "label": line.label,
                    "category": line.category,
                    "assignment": line.assignment.kind,
                    "hose": asdict(line.hose),
                }
                for line in ctx.discharges
            ],
            "supply_ports": [
                {"port": port, "leg": asdict(leg)}
                for port, leg in (
                    ("steamer", ctx.hydrant.steamer),
                    ("sideA", ctx.hydrant.sideA),
                    ("sideB", ctx.hydrant.sideB),
                )
                if leg is not None
            ],
            "tap_mode": ctx.hydrant.tap_mode,
        }
        self.panel_path.write_text(json.dumps(panel, ensure_ascii=False, indent=2), encoding="utf-8")

    def begin_session(self, ctx: SimulationContext) -> None:
        self._line_ids = [line.id for line in ctx.discharges]
        self._rows = {"time_s": []}
        for name in CHANNELS:
            self._rows[name] = []
        for line_id in self._line_ids:
            self._rows[f"gpm__{line_id}"] = []

    def record(self, t_s: float, ctx: SimulationContext) -> None:
        if not self._rows:
            self.begin_session(ctx)

        r = self._rows
        r["time_s"].append(float(t_s))
        r["master_intake"].append(ctx.gauges.master_intake)
        r["master_discharge"].append(ctx.gauges.master_discharge)
        r["rpm"].append(ctx.gauges.rpm)
        r["water_gal"].append(ctx.gauges.water_gal)
        r["system_psi"].append(ctx.system_psi)
        r["gpm_total"].append(ctx.totals.gpm_total_now)
        r["hydrant_residual"].append(ctx.hydrant_status.hydrant_residual_psi)
        r["engine_intake"].append(ctx.hydrant_status.engine_intake_psi)
        for line in ctx.discharges:
            key = f"gpm__{line.id}"
            if key in r:
                r[key].append(line.gpm_now)

    def end_session(self, ctx: SimulationContext) -> SessionMeta:
        sid = f"session_{self._session_id:06d}"
        g = self.grp.create_group(sid)

        timeline = {k: np.asarray(v, dtype=np.float32) for k, v in self._rows.items()}
        for k, arr in timeline.items():
            g.create_dataset(k, data=arr, compression="gzip", compression_opts=5)

        t = timeline.get("time_s", np.zeros((0,), dtype=np.float32))
        gpm = timeline.get("gpm_total", np.zeros((0,), dtype=np.float32))
        meta = SessionMeta(
            session_id=self._session_id,
            source=str(ctx.source),
            duration_s=float(t[-1]) if t.size else 0.0,
            ticks=int(t.size),
            governor_mode=ctx.governor.mode,
            governor_enabled=bool(ctx.governor.enabled),
            gallons_total=float(ctx.totals.gallons_pump_this_engagement),
            peak_gpm=float(gpm.max()) if gpm.size else 0.0,
        )

        g.attrs["source"] = meta.source
        g.attrs["duration_s"] = meta.duration_s
        g.attrs["governor_mode"] = meta.governor_mode
        g.attrs["gallons_total"] = meta.gallons_total
        g.attrs["line_ids_json"] = json.dumps(self._line_ids, ensure_ascii=False)

        self._meta_f.write(json.dumps(asdict(meta), ensure_ascii=False) + "\n")
        self._meta_f.flush()
        logger.info("recorded %s: %d ticks, %.1f gal", sid, meta.ticks, meta.gallons_total)

        self._session_id += 1
        self._rows = {}
        return meta

    def close(self) -> None:
        self._meta_f.close()
        self.h5.close()
