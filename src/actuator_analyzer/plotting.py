"""
Actuator Analyzer Plotting Module
=================================

Visualization of force curves and of the dq-axis constraints behind them.

Plot Types Available:
--------------------
- Cable force vs handle speed, one line per power supply
- Constraint profile: current, voltage and power limits on i_q over the
  field-weakening current at one speed

Classes:
--------
- ForceCurvePlotter: Main class for generating actuator plots

Usage:
-----
    from src.actuator_analyzer import ForceCurvePlotter, ParameterSet

    plotter = ForceCurvePlotter()
    plotter.plot_force_curves(ParameterSet.defaults())
    plt.show()
"""

from typing import Optional, Tuple, Union

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from matplotlib.axes import Axes

from .config import ActuatorAnalyzerConfig, DEFAULT_CONFIG
from .curves import CurveGenerator, ForceCurveResult
from .electrical import derive_electrical
from .parameters import ParameterSet
from .solver import FeasibleTorqueSolver


class ForceCurvePlotter:
    """
    Force curve visualization class.

    Attributes:
    ----------
    config : ActuatorAnalyzerConfig
        Configuration object containing settings.

    generator : CurveGenerator
        Used when a ParameterSet is passed instead of a result.

    Example:
    -------
        plotter = ForceCurvePlotter()
        fig = plotter.plot_force_curves(ParameterSet.defaults())
        fig.savefig("force_curves.png", dpi=150)
    """

    DEFAULT_LINE_WIDTH = 2
    DEFAULT_COLORMAP = 'viridis'

    def __init__(self, config: Optional[ActuatorAnalyzerConfig] = None):
        self.config = config if config is not None else DEFAULT_CONFIG
        self.generator = CurveGenerator(self.config)

    # =========================================================================
    # Force Curves
    # =========================================================================

    def plot_force_curves(
        self,
        data: Union[ForceCurveResult, ParameterSet],
        figsize: Optional[Tuple[int, int]] = None,
        ax: Optional[Axes] = None,
        title: Optional[str] = None
    ) -> Figure:
        """
        Plot cable force (lbf) against handle speed (m/s).

        Parameters:
        ----------
        data : ForceCurveResult or ParameterSet
            A computed result, or a snapshot to compute first.

        figsize : tuple, optional
            Figure size (width, height) in inches.

        ax : Axes, optional
            Existing axes to plot on.

        title : str, optional
            Plot title. A default describing the limits is used otherwise.

        Returns:
        -------
        Figure
            Matplotlib figure object.
        """
        result = data if isinstance(data, ForceCurveResult) else self.generator.generate(data)

        if ax is None:
            fig, ax = plt.subplots(figsize=figsize or self.config.figure_size)
        else:
            fig = ax.get_figure()

        colors = plt.get_cmap(self.DEFAULT_COLORMAP)(
            np.linspace(0, 0.9, max(1, len(result.curves)))
        )

        for curve, color in zip(result.curves, colors):
            ax.plot(
                curve.speeds,
                curve.forces_lbf,
                color=color,
                linewidth=self.DEFAULT_LINE_WIDTH,
                label=curve.label,
            )

        ax.set_xlabel('Rep speed (m/s)')
        ax.set_ylabel('Resistance (lbf)')
        ax.set_title(title or 'Resistance vs Rep Speed - Power, Voltage & Torque Limited')
        ax.set_xlim(0, result.max_speed if result.max_speed > 0 else None)
        ax.set_ylim(0, result.max_y if result.max_y > 0 else None)
        ax.grid(True, linestyle='--', alpha=0.3)
        if result.curves:
            ax.legend(loc='upper right')

        fig.tight_layout()
        return fig

    # =========================================================================
    # Constraint Profile
    # =========================================================================

    def plot_constraint_profile(
        self,
        parameters: ParameterSet,
        speed: float,
        power_limit: Optional[float] = None,
        figsize: Optional[Tuple[int, int]] = None,
        ax: Optional[Axes] = None
    ) -> Figure:
        """
        Plot the i_q limit of each constraint over the field-weakening current.

        Parameters:
        ----------
        parameters : ParameterSet
            Input snapshot.

        speed : float
            Handle speed (m/s) at which to evaluate the constraints.

        power_limit : float, optional
            Supply power cap (W). Defaults to the largest selected supply.

        Returns:
        -------
        Figure
            Matplotlib figure object.
        """
        if power_limit is None and parameters.supplies.selected:
            power_limit = max(parameters.supplies.selected)

        derived = derive_electrical(parameters.motor, parameters.limits, self.config)
        solver = FeasibleTorqueSolver.from_electrical(derived, parameters.limits, self.config)
        omega_m = self.generator.motor_speed(speed, parameters.transmission)
        profile = solver.constraint_profile(omega_m, power_limit)

        if ax is None:
            fig, ax = plt.subplots(figsize=figsize or self.config.figure_size)
        else:
            fig = ax.get_figure()

        i_d = profile["i_d"]
        marker = 'o' if len(i_d) == 1 else None

        for key, label, style in (
            ("iq_current", "Current limit", '-'),
            ("iq_voltage", "Voltage limit", '--'),
            ("iq_power", "Power limit", ':'),
        ):
            values = np.where(np.isfinite(profile[key]), profile[key], np.nan)
            if np.all(np.isnan(values)):
                continue
            ax.plot(i_d, values, linestyle=style, marker=marker, label=label)

        iq_max = np.where(np.isfinite(profile["iq_max"]), profile["iq_max"], np.nan)
        ax.plot(i_d, iq_max, color='black', linewidth=2,
                marker=marker, label='Admissible i_q')

        ax.set_xlabel('i_d (A)')
        ax.set_ylabel('|i_q| limit (A)')
        ax.set_title(
            f'dq Constraints @ {speed:.2f} m/s ({omega_m:.0f} rad/s motor)'
        )
        ax.set_ylim(0, None)
        ax.grid(True, alpha=0.3)
        ax.legend(loc='best')

        fig.tight_layout()
        return fig
