# -*- coding: utf-8 -*-
# femexec/ops/results.py

"""
Project: femexec
Date: 3/8/2026 (Updated: 3/10/2026)

Purpose
-------
Quick-look plots of parsed result matrices: every column of a displacement or force
recorder against its row index, and a force-displacement (hysteresis) view of one
degree of freedom.

Notes
-----
- Empty matrices (failed or absent result files) produce a labelled empty figure.
- Column 0 is treated as data, not time; recorders with a time column can pass
  `skip_first=True`.
"""

from typing import Optional, Sequence

import numpy as np

from .style import figure


def _empty(title):
    with figure() as (fig, ax):
        ax.text(0.5, 0.5, "No result data", ha="center", va="center")
        ax.set_title(title)
        ax.set_axis_off()
        return fig, ax


def plot_matrix(data, title: str = "Results", ylabel: str = "Value",
                labels: Optional[Sequence[str]] = None, skip_first: bool = False):
    """
    Plot each column of `data` against the step index.

    Returns
    -------
    (matplotlib.figure.Figure, matplotlib.axes.Axes)
    """
    arr = np.asarray(data if data is not None else [], dtype=np.float64)
    if arr.size == 0:
        return _empty(title)
    if arr.ndim == 1:
        arr = arr.reshape(-1, 1)
    first = 1 if (skip_first and arr.shape[1] > 1) else 0
    steps = np.arange(1, arr.shape[0] + 1)

    with figure() as (fig, ax):
        for j in range(first, arr.shape[1]):
            label = labels[j - first] if labels and j - first < len(labels) else "col {}".format(j)
            ax.plot(steps, arr[:, j], label=label)
        ax.set_xlabel("Step")
        ax.set_ylabel(ylabel)
        ax.set_title(title)
        if arr.shape[1] - first <= 12:
            ax.legend()
        return fig, ax


def plot_hysteresis(displacements, forces, column: int = 0, title: Optional[str] = None):
    """
    Plot force vs. displacement for one column of matching result matrices.

    Raises
    ------
    ValueError
        If both matrices hold data but differ in row count or lack `column`.
    """
    d = np.asarray(displacements if displacements is not None else [], dtype=np.float64)
    f = np.asarray(forces if forces is not None else [], dtype=np.float64)
    title = title or "Force-displacement (col {})".format(column)
    if d.size == 0 or f.size == 0:
        return _empty(title)
    d = d.reshape(d.shape[0], -1)
    f = f.reshape(f.shape[0], -1)
    if d.shape[0] != f.shape[0]:
        raise ValueError("Row count mismatch: {} displacements vs {} forces".format(d.shape[0], f.shape[0]))
    if column >= d.shape[1] or column >= f.shape[1]:
        raise ValueError("Column {} out of range".format(column))

    with figure() as (fig, ax):
        ax.plot(d[:, column], f[:, column], marker=".", markersize=3)
        ax.set_xlabel("Displacement")
        ax.set_ylabel("Force")
        ax.set_title(title)
        return fig, ax
