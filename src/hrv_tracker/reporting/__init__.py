"""Rendered outputs (charts) built from reading collections."""

from .charts import plot_hrv_trend

__all__ = ["plot_hrv_trend"]
