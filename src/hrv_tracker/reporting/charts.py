"""Static HRV trend charts rendered with matplotlib and seaborn."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from ..schema import HrvReading, readings_to_frame
from ..statistics import calculate_rolling_average

sns.set_theme(style="whitegrid")

CHART_NAME = "hrv_trend.png"


def save_plot(fig: plt.Figure, destination: Path) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(destination, dpi=150)
    plt.close(fig)


def plot_hrv_trend(
    readings: Sequence[HrvReading],
    output_dir: Path,
    *,
    window_days: int = 7,
    benchmark_p50: Optional[float] = None,
) -> Optional[Path]:
    """Plot daily HRV with its rolling average; returns None when there is nothing to draw."""
    if not readings:
        logging.warning("No readings available; skipping HRV chart")
        return None

    frame = readings_to_frame(readings)
    rolling = calculate_rolling_average(sorted(readings, key=lambda r: r.date), window_days)
    frame["rolling"] = [point.value for point in rolling]
    frame["date"] = pd.to_datetime(frame["date"])

    fig, ax = plt.subplots(figsize=(12, 6))
    sns.scatterplot(ax=ax, data=frame, x="date", y="hrv_ms", s=20, color="steelblue", label="Daily HRV")
    sns.lineplot(
        ax=ax,
        data=frame,
        x="date",
        y="rolling",
        linewidth=1.5,
        color="darkorange",
        label=f"{window_days}-day average",
    )
    if benchmark_p50 is not None:
        ax.axhline(benchmark_p50, linestyle="--", color="grey", label="Population median")
    ax.set_title("Heart Rate Variability Over Time")
    ax.set_xlabel("Date")
    ax.set_ylabel("HRV (ms)")
    ax.legend()
    fig.autofmt_xdate()

    destination = Path(output_dir) / CHART_NAME
    save_plot(fig, destination)
    logging.info("HRV chart written to %s", destination)
    return destination
