"""Tests for the quick-look result plots."""

import matplotlib.pyplot as plt
import numpy as np
import pytest

from femexec.ops.results import plot_hysteresis, plot_matrix


@pytest.fixture(autouse=True)
def _close_figures():
    yield
    plt.close("all")


def test_plot_matrix_one_line_per_column():
    data = np.arange(12, dtype=float).reshape(4, 3)
    fig, ax = plot_matrix(data, title="Displacements")
    assert len(ax.get_lines()) == 3
    assert ax.get_title() == "Displacements"


def test_plot_matrix_skip_first_uses_labels():
    data = np.arange(12, dtype=float).reshape(4, 3)
    fig, ax = plot_matrix(data, labels=["dx", "rz"], skip_first=True)
    assert [line.get_label() for line in ax.get_lines()] == ["dx", "rz"]


def test_plot_matrix_empty():
    fig, ax = plot_matrix(np.empty((0, 0)), title="Forces")
    assert len(ax.get_lines()) == 0
    assert ax.get_title() == "Forces"
    fig, ax = plot_matrix(None)
    assert len(ax.get_lines()) == 0


def test_hysteresis():
    d = np.linspace(0.0, 1.0, 5).reshape(5, 1)
    f = 10.0 * d
    fig, ax = plot_hysteresis(d, f)
    line = ax.get_lines()[0]
    np.testing.assert_allclose(line.get_ydata(), f[:, 0])


def test_hysteresis_mismatch():
    with pytest.raises(ValueError, match="Row count"):
        plot_hysteresis(np.zeros((3, 2)), np.zeros((4, 2)))
    with pytest.raises(ValueError, match="out of range"):
        plot_hysteresis(np.zeros((3, 2)), np.zeros((3, 2)), column=2)
