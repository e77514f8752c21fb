# -*- coding: utf-8 -*-
# femexec/ops/style.py

"""
Project: femexec
Date: 3/8/2026

Purpose
-------
One place for Matplotlib styling of result quick-looks, plus a `figure()` context
manager returning a styled (fig, ax) pair with tight layout.

Notes
-----
- `figure()` applies the style every time so import order does not matter.
"""

import contextlib
import logging

import matplotlib.pyplot as plt

logger = logging.getLogger(__name__)

DEFAULT_DPI = 120


def apply_base_style():
    """Apply project-wide Matplotlib rcParams."""
    plt.rcParams.update({
        "figure.dpi": DEFAULT_DPI,
        "savefig.dpi": DEFAULT_DPI,
        "axes.grid": True,
        "grid.alpha": 0.25,
        "axes.titlesize": 12,
        "axes.labelsize": 11,
        "xtick.labelsize": 10,
        "ytick.labelsize": 10,
        "legend.fontsize": 9,
        "lines.linewidth": 1.4,
        "axes.linewidth": 0.8,
    })


@contextlib.contextmanager
def figure(width=6.0, height=4.0):
    """
    Context manager yielding a styled Matplotlib `(fig, ax)`.

    `tight_layout()` is attempted on exit; layout warnings are logged, not raised.
    """
    apply_base_style()
    fig, ax = plt.subplots(figsize=(float(width), float(height)))
    try:
        yield fig, ax
    finally:
        try:
            fig.tight_layout()
        except (ValueError, RuntimeError) as e:
            logger.debug("tight_layout failed: %s", e)
