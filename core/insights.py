"""
core/insights.py
────────────────────────────────────────────────────────────────────────
Summarises a client's weigh-in history so the insight prompt states the
trend explicitly instead of leaving the arithmetic to the model.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class WeightTrend:
    logs: int
    net_change_kg: float
    mean_step_kg: float      # average change between consecutive logs
    slope_kg_per_log: float  # least-squares fit, robust to a single outlier log

    def describe(self) -> str:
        if self.logs < 2:
            return "Trend: not enough weigh-ins to establish a trend."
        direction = "down" if self.net_change_kg < 0 else "up" if self.net_change_kg > 0 else "flat"
        return (
            f"Trend: {direction} {abs(self.net_change_kg):.1f} kg over {self.logs} weigh-ins "
            f"(average {self.mean_step_kg:+.2f} kg per log, fitted {self.slope_kg_per_log:+.2f} kg per log)."
        )


def weight_trend(weights: list[float]) -> WeightTrend:
    arr = np.asarray(weights, dtype=np.float64)
    if arr.size < 2:
        return WeightTrend(logs=int(arr.size), net_change_kg=0.0, mean_step_kg=0.0, slope_kg_per_log=0.0)

    steps = np.diff(arr)
    slope = np.polyfit(np.arange(arr.size), arr, 1)[0]
    return WeightTrend(
        logs=int(arr.size),
        net_change_kg=round(float(arr[-1] - arr[0]), 2),
        mean_step_kg=round(float(steps.mean()), 2),
        slope_kg_per_log=round(float(slope), 2),
    )
