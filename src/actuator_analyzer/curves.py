"""
Force Curve Generator
=====================

Sweeps the handle speed from zero to the chart maximum and converts the
solver's motor torque into cable force for every selected power supply.

    ω_out = v / r
    ω_m   = ω_out × G
    F     = τ × G × η / r          (N)
    lbf   = F / 4.4482216152605

The output rows are shaped for a line chart: one "speed" column plus one
column per supply label ("3000 W", ...).
"""

import math
from dataclasses import dataclass, field
from typing import Optional, Dict, List, Tuple

import numpy as np
import pandas as pd

from .config import ActuatorAnalyzerConfig, DEFAULT_CONFIG, EPSILON, LBF_PER_N
from .debugger import debug_section, debug_step
from .electrical import DerivedElectrical, derive_electrical
from .parameters import (
    OperatingMode,
    ParameterSet,
    TransmissionParameters,
    supply_label,
)
from .solver import FeasibleTorqueSolver


@dataclass
class ForceCurve:
    """Force versus speed for one supply limit."""
    watts: int
    speeds: List[float] = field(default_factory=list)
    forces_lbf: List[float] = field(default_factory=list)

    @property
    def label(self) -> str:
        return supply_label(self.watts)

    @property
    def points(self) -> List[Tuple[float, float]]:
        """(speed m/s, force lbf) pairs in ascending speed order."""
        return list(zip(self.speeds, self.forces_lbf))

    @property
    def peak_force(self) -> float:
        return max(self.forces_lbf, default=0.0)


@dataclass
class ForceCurveResult:
    """
    Output of one force-curve computation.

    Attributes:
    ----------
    curves : list of ForceCurve
        One curve per selected supply, ascending watts.

    rows : list of dict
        Chart rows {"speed": v, "<W> W": lbf, ...}.

    series_keys : list of str
        Supply labels in display order.

    max_y : float
        Force axis maximum, rounded up to the axis tick (lbf).

    max_speed : float
        Upper end of the speed axis (m/s).

    derived : DerivedElectrical
        Per-phase values used by the solver.
    """
    curves: List[ForceCurve]
    rows: List[Dict[str, float]]
    series_keys: List[str]
    max_y: float
    max_speed: float
    derived: DerivedElectrical

    def to_dataframe(self) -> pd.DataFrame:
        """Rows as a DataFrame indexed by speed (m/s)."""
        columns = ["speed"] + self.series_keys
        return pd.DataFrame(self.rows, columns=columns).set_index("speed")

    def get_curve(self, watts: int) -> ForceCurve:
        """
        Get the curve for one supply rating.

        Raises:
        ------
        KeyError
            If the rating was not part of the computation.
        """
        for curve in self.curves:
            if curve.watts == watts:
                return curve
        available = [c.watts for c in self.curves]
        raise KeyError(
            f"No curve for {watts} W. "
            f"Available supplies: {available}"
        )


def axis_maximum(values, tick: float = 25.0) -> float:
    """Largest value rounded up to the next multiple of tick."""
    tick = max(tick, EPSILON)
    peak = 0.0
    for value in values:
        if math.isfinite(value):
            peak = max(peak, value)
    return math.ceil(peak / tick) * tick


class CurveGenerator:
    """
    Samples the torque solver across the speed range.

    Attributes:
    ----------
    config : ActuatorAnalyzerConfig
        Configuration object containing settings and constants.

    Example:
    -------
        generator = CurveGenerator()
        result = generator.generate(ParameterSet.defaults())
        print(result.max_y)
    """

    def __init__(self, config: Optional[ActuatorAnalyzerConfig] = None):
        self.config = config if config is not None else DEFAULT_CONFIG

    # =========================================================================
    # Unit Conversions
    # =========================================================================

    def speed_samples(self, max_speed: float, steps: int) -> np.ndarray:
        """
        Uniform handle speeds v_i = max_speed × i / steps, i = 0..steps.

        steps is guarded to at least 1 here; generate() applies the
        configured [min_steps, max_steps] clamp first.
        """
        steps = max(1, int(steps))
        return np.array([max_speed * i / steps for i in range(steps + 1)])

    def motor_speed(self, speed: float, transmission: TransmissionParameters) -> float:
        """Motor shaft speed (rad/s) for a handle speed (m/s)."""
        omega_out = speed / max(self.config.epsilon, transmission.drum_radius)
        return omega_out * transmission.gear_ratio

    def torque_to_force_lbf(self, torque: float, transmission: TransmissionParameters) -> float:
        """
        Convert motor torque (Nm) to cable force (lbf).

        Non-finite and negative forces are returned as zero.
        """
        t_out = torque * transmission.gear_ratio * transmission.gear_efficiency
        force_n = t_out / max(self.config.epsilon, transmission.drum_radius)
        lbf = force_n * LBF_PER_N
        return lbf if math.isfinite(lbf) and lbf > 0 else 0.0

    # =========================================================================
    # Sweep
    # =========================================================================

    def generate(self, parameters: ParameterSet) -> ForceCurveResult:
        """
        Compute one force curve per selected supply.

        In regenerating mode the supply rating does not limit torque, so
        the solver runs once per speed and every curve shares the result.

        Parameters:
        ----------
        parameters : ParameterSet
            Complete input snapshot.

        Returns:
        -------
        ForceCurveResult
        """
        derived = derive_electrical(parameters.motor, parameters.limits, self.config)
        solver = FeasibleTorqueSolver.from_electrical(
            derived, parameters.limits, self.config
        )
        transmission = parameters.transmission
        supplies = list(parameters.supplies.selected)
        regenerating = parameters.limits.mode is OperatingMode.REGENERATING

        steps = self.config.clamp_steps(parameters.sweep.steps)
        speeds = self.speed_samples(parameters.sweep.max_speed, steps)
        curves = [ForceCurve(watts=w) for w in supplies]
        rows: List[Dict[str, float]] = []

        debug_section(
            f"Speed sweep: {len(speeds)} samples × {len(supplies)} supplies "
            f"({parameters.limits.mode.name})"
        )

        for speed in speeds:
            speed = float(speed)
            omega_m = self.motor_speed(speed, transmission)
            row: Dict[str, float] = {"speed": speed}

            if regenerating:
                shared = self.torque_to_force_lbf(solver.max_torque(omega_m), transmission)
                forces = [shared] * len(supplies)
            else:
                forces = [
                    self.torque_to_force_lbf(torque, transmission)
                    for torque in solver.max_torques(omega_m, supplies)
                ]

            for curve, force in zip(curves, forces):
                curve.speeds.append(speed)
                curve.forces_lbf.append(force)
                row[curve.label] = force

            debug_step(
                category="Force",
                description="Cable force at handle speed",
                formula="F = τ × G × η / r / 4.4482216152605",
                variables={"v": speed, "omega_m": omega_m},
                result=max(forces, default=0.0),
                result_name="F_max",
                result_unit="lbf",
            )
            rows.append(row)

        series_keys = [curve.label for curve in curves]
        max_y = axis_maximum(
            (f for curve in curves for f in curve.forces_lbf), self.config.axis_tick
        )

        return ForceCurveResult(
            curves=curves,
            rows=rows,
            series_keys=series_keys,
            max_y=max_y,
            max_speed=parameters.sweep.max_speed,
            derived=derived,
        )


def compute(
    parameters: ParameterSet,
    config: Optional[ActuatorAnalyzerConfig] = None
) -> ForceCurveResult:
    """
    Compute force curves for a parameter snapshot.

    Pure function: the same snapshot always gives the same result and
    nothing is cached between calls.

    Example:
    -------
        result = compute(ParameterSet.defaults())
        for row in result.rows[:3]:
            print(row)
    """
    return CurveGenerator(config).generate(parameters)
