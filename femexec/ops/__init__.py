# -*- coding: utf-8 -*-
# femexec/ops/__init__.py
"""
Project: femexec
Date: 3/8/2026

Modules
-------
- style:    Centralized Matplotlib style and figure() context for consistent plots.

- results:  Quick-look plots of displacement/force result matrices and a
            force-displacement view of one degree of freedom.
"""

from .style import apply_base_style, figure
from .results import plot_matrix, plot_hysteresis

__all__ = ["apply_base_style", "figure", "plot_matrix", "plot_hysteresis"]
