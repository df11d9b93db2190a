# ldp/missions/lunar/plots.py
"""
Speed / height / acceleration charts for a solved lunar descent.

One PNG per quantity, time on the x axis, ignition marked with a dashed
vertical line. Rendering uses the non-interactive Agg backend so this
works headless.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from ldp.edl.sampling import DescentSamples, PHASE_FREE_FALL, PHASE_POWERED


# stem -> (column, title, y label, series label)
CHARTS = {
    "graph_speed_change": ("v_mps", "Speed change", "V, m/s", "V(t)"),
    "graph_height": ("altitude_m", "Height", "H, m", "H(t)"),
    "graph_acceleration": ("a_mps2", "Acceleration change", "a, m/s²", "a(t)"),
}


def _plot_one(samples: DescentSamples, column: str, title: str, ylabel: str,
              label: str, outpath: Path) -> Path:
    df = samples.df
    fig, ax = plt.subplots(figsize=(8, 4.5))
    for phase in (PHASE_FREE_FALL, PHASE_POWERED):
        part = df[df["phase"] == phase]
        if part.empty:
            continue
        ax.plot(part["t_s"], part[column], lw=1.5,
                label=f"{label} {phase.replace('_', ' ')}")
    ax.axvline(samples.fall_time_s, color="k", ls="--", lw=0.8, label="ignition")
    ax.set_title(title)
    ax.set_xlabel("t, s")
    ax.set_ylabel(ylabel)
    ax.grid(True, alpha=0.3)
    ax.legend(loc="best")
    fig.savefig(outpath, dpi=150, bbox_inches="tight")
    plt.close(fig)
    return outpath


def plot_descent(samples: DescentSamples, out_dir: str | Path) -> Dict[str, Path]:
    """
    Write graph_speed_change.png, graph_height.png and
    graph_acceleration.png into out_dir (created if missing).
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    paths: Dict[str, Path] = {}
    for stem, (column, title, ylabel, label) in CHARTS.items():
        paths[stem] = _plot_one(samples, column, title, ylabel, label,
                                out_dir / f"{stem}.png")
    return paths


__all__ = ["CHARTS", "plot_descent"]
