"""pumpsim.core.validation

Базовые проверки, чтобы ловить невозможные значения конфигурации как можно раньше.

Важно: эти проверки вызываются только из конфигов и сеттеров, никогда из тика.
"""

from __future__ import annotations

from typing import Iterable


def ensure_non_negative(value: float, name: str) -> None:
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")


def ensure_positive(value: float, name: str) -> None:
    if value <= 0:
        raise ValueError(f"{name} must be > 0, got {value}")


def ensure_in_range(value: float, min_value: float, max_value: float, name: str) -> None:
    if not (min_value <= value <= max_value):
        raise ValueError(f"{name} must be in [{min_value}, {max_value}], got {value}")


def ensure_one_of(value: object, allowed: Iterable[object], name: str) -> None:
    allowed = tuple(allowed)
    if value not in allowed:
        raise ValueError(f"{name} must be one of {allowed}, got {value!r}")


def clamp(x: float, lo: float, hi: float) -> float:
    return float(max(lo, min(hi, x)))
