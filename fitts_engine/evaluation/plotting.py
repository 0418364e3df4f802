# fitts_engine/evaluation/plotting.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pandas as pd

from .summary import summarize_sets


@dataclass(frozen=True)
class PlotConfig:
    """Figure settings for the throughput plot."""

    figsize: Tuple[float, float] = (8.0, 4.5)
    dpi: int = 150
    title: Optional[str] = None
    show_effective: bool = True


class ThroughputPlotter:
    """
    Plots throughput and effective throughput per set.

    Example:
        >>> plotter = ThroughputPlotter(PlotConfig(title="P01 block 1"))
        >>> plotter.save(trials_df, "plots/P01_throughput.png")
    """

    def __init__(self, config: Optional[PlotConfig] = None):
        self.config = config or PlotConfig()

    def figure(self, df: pd.DataFrame):
        sets = summarize_sets(df)
        fig, ax = plt.subplots(figsize=self.config.figsize)
        for phase, label in ((0, "training"), (1, "testing")):
            rows = sets[sets["phase"] == phase]
            if rows.empty:
                continue
            ax.plot(rows["set"], rows["throughput_for_set"], marker="o", label=f"TP ({label})")
            if self.config.show_effective:
                ax.plot(
                    rows["set"], rows["effective_throughput"],
                    marker="s", linestyle="--", label=f"TPe ({label})",
                )
        ax.set_xlabel("Set number")
        ax.set_ylabel("Throughput [bits/s]")
        if self.config.title:
            ax.set_title(self.config.title)
        ax.legend()
        fig.tight_layout()
        return fig

    def save(self, df: pd.DataFrame, path: Union[str, Path]) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        fig = self.figure(df)
        fig.savefig(path, dpi=self.config.dpi, bbox_inches="tight")
        plt.close(fig)
        return path
