from __future__ import annotations

from typing import Dict


# Веса по типу назначения линии: мастер-струи и сухотрубы первыми.
DEFAULT_PRIORITIES: Dict[str, float] = {
    "deck_gun": 1.0,
    "blitzfire": 0.9,
    "fdc_standpipe": 0.9,
    "portable_standpipe": 0.8,
    "skid_leader": 0.7,
    "handline": 0.6,
}


def allocate_flow_proportional(qreq: Dict[str, float], qmax: float) -> Dict[str, float]:
    """Proportional sharing of limited supply.

    Every line is scaled by the same factor if total demand exceeds the ceiling.
    """

    demand = {k: max(0.0, float(v)) for k, v in qreq.items()}
    qsum = sum(demand.values())
    if qsum <= qmax + 1e-12:
        return demand
    alpha = max(0.0, qmax) / max(qsum, 1e-12)
    return {k: float(alpha * v) for k, v in demand.items()}


def allocate_flow_priority(
    qreq: Dict[str, float],
    qmax: float,
    priorities: Dict[str, float] | None = None,
) -> Dict[str, float]:
    """Priority-weighted allocator.

    Goals:
    - respect the ceiling (sum(qalloc) <= qmax)
    - prefer higher-priority lines when supply is limited
    - never give a line more than it asked for

    `priorities` is keyed by line id. Weights are not hard guarantees.
    """

    if priorities is None:
        priorities = {}

    demand = {k: max(0.0, float(v)) for k, v in qreq.items()}
    if sum(demand.values()) <= qmax + 1e-12:
        return dict(demand)

    remaining_flow = float(max(qmax, 0.0))
    remaining = {k for k, d in demand.items() if d > 0.0}
    alloc = {k: 0.0 for k in qreq.keys()}

    # Distribute until all demand is met or no supply remains.
    for _ in range(12):
        if remaining_flow <= 1e-12 or not remaining:
            break

        weights_sum = 0.0
        for k in remaining:
            weights_sum += float(priorities.get(k, 1.0)) * demand[k]
        if weights_sum <= 1e-12:
            break

        pool = remaining_flow
        progress = 0.0
        for k in sorted(remaining):
            w = float(priorities.get(k, 1.0))
            share = pool * (w * demand[k]) / weights_sum
            take = min(demand[k], share)
            if take > 0.0:
                alloc[k] += take
                demand[k] -= take
                remaining_flow -= take
                progress += take
            if demand[k] <= 1e-12:
                remaining.discard(k)

        if progress <= 1e-12:
            break

    return {k: float(v) for k, v in alloc.items()}


def allocate_flow(
    qreq: Dict[str, float],
    qmax: float,
    mode: str = "proportional",
    priorities: Dict[str, float] | None = None,
) -> Dict[str, float]:
    if mode == "priority":
        return allocate_flow_priority(qreq, qmax, priorities)
    return allocate_flow_proportional(qreq, qmax)


def line_priorities(kinds: Dict[str, str], table: Dict[str, float] | None = None) -> Dict[str, float]:
    """line id -> assignment kind  =>  line id -> weight."""

    table = DEFAULT_PRIORITIES if table is None else table
    return {line_id: float(table.get(kind, 1.0)) for line_id, kind in kinds.items()}
