"""
Feasible Torque Solver
======================

Finds the largest motor torque that a permanent-magnet motor can hold at a
given shaft speed without breaking any of three limits.

Theory Background:
-----------------
Torque is produced by the q-axis current only (τ = Kt × i_q). A negative
d-axis current i_d (field weakening) lowers the back-EMF seen by the
controller at the cost of current budget. In steady state:

    v_d = R × i_d - ω × L × i_q
    v_q = R × i_q + ω × L × i_d + ω × Ke        (Ke = Kt in SI units)

For each candidate i_d the admissible |i_q| is the smallest of:

1. Current circle:    i_d² + i_q² ≤ Imax²
2. Voltage ellipse:   v_d² + v_q² ≤ Vmax²
                      A × i_q² ± B × i_q + C(i_d) ≤ 0
                      A = R² + (ωL)²,  B = 2RωKe
                      C = (R i_d)² + (ω(L i_d + Ke))² - Vmax²
                      (+B motoring, -B regenerating, in |i_q|)
3. Power hyperbola:   3R(i_d² + i_q²) + Kt ω i_q ≤ P   (motoring only)

A negative discriminant means no i_q satisfies the voltage or power
inequality at that i_d, so the limit is zero. In regenerating mode the
supply rating does not constrain torque (braking energy is assumed to be
absorbed by a regen clamp), so the power limit is unbounded.

The solver samples i_d uniformly over [-idFWmax, 0], keeps the best
torque, and finally clamps it to Kt × Imax.
"""

import math
from typing import Optional, Dict, Any, List, Sequence, Tuple

import numpy as np
from scipy import optimize

from .config import ActuatorAnalyzerConfig, DEFAULT_CONFIG
from .debugger import debug_step
from .electrical import DerivedElectrical
from .parameters import OperatingLimits, OperatingMode


def largest_root(a: float, b: float, c: float, epsilon: float) -> Optional[float]:
    """
    Largest real root of a·x² + b·x + c = 0.

    `a` is clamped to epsilon. For b ≥ 0 the root is evaluated as
    -2c / (b + √D), which avoids cancellation when 4ac is small next to b².

    Returns:
    -------
    float or None
        The root, or None when the discriminant is negative.
    """
    a = max(a, epsilon)
    disc = b * b - 4.0 * a * c
    if disc < 0 or math.isnan(disc):
        return None
    sqrt_disc = math.sqrt(disc)
    if b >= 0:
        denom = b + sqrt_disc
        if denom > 0:
            return -2.0 * c / denom
    return (-b + sqrt_disc) / (2.0 * a)


class FeasibleTorqueSolver:
    """
    Maximum-torque solver over the field-weakening current.

    Attributes:
    ----------
    r_phase : float
        Per-phase resistance (Ω).

    l_phase : float
        Per-phase inductance (H).

    kt : float
        Torque constant, also used as back-EMF constant (Nm/A = V·s/rad).

    v_phase_max : float
        Phase voltage limit (V). math.inf disables the voltage limit.

    i_max : float
        Phase current limit (A). math.inf disables the current limit.

    id_fw_max : float
        Maximum field-weakening |i_d| (A).

    mode : OperatingMode
        MOTORING applies the supply power limit, REGENERATING does not.

    Example:
    -------
        derived = derive_electrical(params.motor, params.limits)
        solver = FeasibleTorqueSolver.from_electrical(derived, params.limits)
        torque = solver.max_torque(omega_m=200.0, power_limit=3000.0)
    """

    def __init__(
        self,
        r_phase: float,
        l_phase: float,
        kt: float,
        v_phase_max: float,
        i_max: float,
        id_fw_max: float = 0.0,
        mode: OperatingMode = OperatingMode.MOTORING,
        config: Optional[ActuatorAnalyzerConfig] = None
    ):
        self.config = config if config is not None else DEFAULT_CONFIG
        self.r_phase = r_phase
        self.l_phase = l_phase
        self.kt = kt
        self.v_phase_max = v_phase_max
        self.i_max = i_max
        self.id_fw_max = max(0.0, id_fw_max)
        self.mode = mode

        # Uniform i_d grid, 0 first, endpoints included
        if self.id_fw_max > 0:
            self._id_grid = np.linspace(0.0, -self.id_fw_max, self.config.fw_grid_points)
        else:
            self._id_grid = np.zeros(1)

    @classmethod
    def from_electrical(
        cls,
        derived: DerivedElectrical,
        limits: OperatingLimits,
        config: Optional[ActuatorAnalyzerConfig] = None
    ) -> "FeasibleTorqueSolver":
        """Build a solver from derived electrical values and operating limits."""
        return cls(
            r_phase=derived.r_phase,
            l_phase=derived.l_phase,
            kt=derived.kt,
            v_phase_max=derived.v_phase_max,
            i_max=limits.i_max,
            id_fw_max=limits.id_fw_max,
            mode=limits.mode,
            config=config,
        )

    @property
    def id_grid(self) -> np.ndarray:
        """d-axis current samples searched by max_torque() (A)."""
        return self._id_grid.copy()

    @property
    def torque_cap(self) -> float:
        """Absolute torque cap Kt × Imax (Nm), never negative."""
        return max(0.0, self.kt * self.i_max)

    # =========================================================================
    # Individual Constraints
    # =========================================================================

    def current_limit(self, i_d: float) -> float:
        """Largest |i_q| inside the current circle (A)."""
        if math.isinf(self.i_max):
            return math.inf
        return math.sqrt(max(0.0, self.i_max * self.i_max - i_d * i_d))

    def voltage_limit(self, omega_m: float, i_d: float) -> float:
        """
        Largest |i_q| inside the voltage ellipse (A).

        Parameters:
        ----------
        omega_m : float
            Motor shaft speed (rad/s).

        i_d : float
            d-axis current (A), zero or negative.

        Returns:
        -------
        float
            Admissible |i_q|. Zero when the back-EMF cannot be held below
            Vmax at this i_d; math.inf when the voltage limit is disabled.
        """
        if math.isinf(self.v_phase_max):
            return math.inf

        r = self.r_phase
        wl = omega_m * self.l_phase
        ke = self.kt

        a = r * r + wl * wl
        b = 2.0 * r * omega_m * ke
        c = (r * i_d) ** 2 + (omega_m * (self.l_phase * i_d + ke)) ** 2 - self.v_phase_max ** 2

        if self.mode is OperatingMode.REGENERATING:
            b = -b

        root = largest_root(a, b, c, self.config.epsilon)
        if root is None:
            return 0.0
        return max(0.0, root)

    def power_limit(self, omega_m: float, i_d: float, power_limit: Optional[float]) -> float:
        """
        Largest i_q that keeps electrical input power within the supply (A).

            3R × i_q² + Kt ω × i_q + (3R × i_d² - P) ≤ 0

        Returns math.inf in regenerating mode or when power_limit is None,
        and zero when no positive i_q is feasible.
        """
        if self.mode is OperatingMode.REGENERATING or power_limit is None:
            return math.inf

        a = 3.0 * self.r_phase
        b = self.kt * omega_m
        c = 3.0 * self.r_phase * i_d * i_d - power_limit

        root = largest_root(a, b, c, self.config.epsilon)
        if root is None:
            return 0.0
        return max(0.0, root)

    def iq_limit(self, omega_m: float, i_d: float, power_limit: Optional[float] = None) -> float:
        """Largest admissible |i_q| at one d-axis current, all limits applied (A)."""
        iq = min(
            self.current_limit(i_d),
            self.voltage_limit(omega_m, i_d),
            self.power_limit(omega_m, i_d, power_limit),
        )
        if math.isnan(iq):
            return 0.0
        return iq

    def binding_constraint(
        self,
        omega_m: float,
        i_d: float,
        power_limit: Optional[float] = None
    ) -> str:
        """Name of the tightest limit at one d-axis current: current, voltage or power."""
        limits = {
            "current": self.current_limit(i_d),
            "voltage": self.voltage_limit(omega_m, i_d),
            "power": self.power_limit(omega_m, i_d, power_limit),
        }
        return min(limits, key=limits.get)

    def constraint_profile(
        self,
        omega_m: float,
        power_limit: Optional[float] = None
    ) -> Dict[str, np.ndarray]:
        """
        Evaluate every constraint over the i_d grid.

        Returns:
        -------
        dict
            Dictionary with arrays:
            - i_d: d-axis current samples (A)
            - iq_current: current-circle limit (A)
            - iq_voltage: voltage-ellipse limit (A)
            - iq_power: power limit (A), inf where not binding
            - iq_max: element-wise minimum (A)
            - torque: Kt × iq_max (Nm)
        """
        i_d = self._id_grid
        iq_current = np.array([self.current_limit(x) for x in i_d])
        iq_voltage = np.array([self.voltage_limit(omega_m, x) for x in i_d])
        iq_power = np.array([self.power_limit(omega_m, x, power_limit) for x in i_d])

        iq_max = np.minimum(np.minimum(iq_current, iq_voltage), iq_power)
        iq_max = np.nan_to_num(iq_max, nan=0.0, posinf=np.inf)

        with np.errstate(invalid="ignore"):
            torque = self.kt * iq_max
        torque = np.where(np.isfinite(torque), torque, 0.0)

        return {
            "i_d": i_d.copy(),
            "iq_current": iq_current,
            "iq_voltage": iq_voltage,
            "iq_power": iq_power,
            "iq_max": iq_max,
            "torque": torque,
        }

    # =========================================================================
    # Maximum Torque Search
    # =========================================================================

    def max_torque(self, omega_m: float, power_limit: Optional[float] = None) -> float:
        """
        Maximum motor torque magnitude at a shaft speed (Nm).

        Parameters:
        ----------
        omega_m : float
            Motor shaft speed (rad/s), zero or positive.

        power_limit : float, optional
            Supply power cap (W). Ignored in regenerating mode; None means
            unlimited.

        Returns:
        -------
        float
            Torque in [0, Kt × Imax]; never NaN or infinite.
        """
        if self.kt <= 0 or self.i_max <= 0:
            return 0.0

        best_torque = 0.0
        best_index = 0
        for index, i_d in enumerate(self._id_grid):
            torque = self.kt * self.iq_limit(omega_m, i_d, power_limit)
            if torque > best_torque:
                best_torque = torque
                best_index = index
        best_id = float(self._id_grid[best_index])

        if self.config.refine_field_weakening and len(self._id_grid) > 1:
            best_id, best_torque = self._refine(
                omega_m, power_limit, best_index, best_torque
            )

        torque = min(best_torque, self.torque_cap)

        debug_step(
            category="Solver",
            description="Maximum feasible torque",
            formula="τ = min(Kt × max_id min(iq_I, iq_V, iq_P), Kt × Imax)",
            variables={
                "omega_m": omega_m,
                "P": power_limit if power_limit is not None else "none",
                "mode": self.mode.name,
                "i_d": best_id,
                "binding": self.binding_constraint(omega_m, best_id, power_limit),
            },
            result=torque if math.isfinite(torque) else 0.0,
            result_name="tau_max",
            result_unit="Nm",
        )

        return torque if math.isfinite(torque) else 0.0

    def max_torques(
        self,
        omega_m: float,
        power_limits: Sequence[float]
    ) -> List[float]:
        """Maximum torque for several supply limits at one speed (Nm)."""
        return [self.max_torque(omega_m, p) for p in power_limits]

    def _refine(
        self,
        omega_m: float,
        power_limit: Optional[float],
        best_index: int,
        best_torque: float
    ) -> Tuple[float, float]:
        """
        Polish the best grid cell with a bounded scalar search.

        Returns (i_d, torque); the grid point is kept unless the search
        finds more torque.
        """
        grid = self._id_grid
        best_id = float(grid[best_index])
        lo = grid[min(best_index + 1, len(grid) - 1)]
        hi = grid[max(best_index - 1, 0)]
        if hi - lo <= 0:
            return best_id, best_torque

        def negative_torque(i_d: float) -> float:
            return -self.kt * self.iq_limit(omega_m, i_d, power_limit)

        result = optimize.minimize_scalar(
            negative_torque,
            bounds=(lo, hi),
            method="bounded",
            options={"xatol": self.config.refine_tolerance},
        )
        refined = -float(result.fun)
        if math.isfinite(refined) and refined > best_torque:
            return float(result.x), refined
        return best_id, best_torque

    # =========================================================================
    # Operating Point Inspection
    # =========================================================================

    def operating_point(self, omega_m: float, i_d: float, i_q: float) -> Dict[str, Any]:
        """
        Evaluate the dq model at a given current vector.

        Parameters:
        ----------
        omega_m : float
            Motor shaft speed (rad/s).

        i_d, i_q : float
            dq currents (A). Use a negative i_q for regenerating operation.

        Returns:
        -------
        dict
            Dictionary with:
            - v_d, v_q, v_mag: dq voltages and magnitude (V)
            - p_copper: 3R(i_d² + i_q²) (W)
            - p_mech: Kt × ω × i_q (W)
            - p_elec: p_copper + p_mech (W)
            - torque: Kt × i_q (Nm)
            - within_current, within_voltage: limit checks
        """
        r = self.r_phase
        v_d = r * i_d - omega_m * self.l_phase * i_q
        v_q = r * i_q + omega_m * self.l_phase * i_d + omega_m * self.kt
        v_mag = math.hypot(v_d, v_q)

        p_copper = 3.0 * r * (i_d * i_d + i_q * i_q)
        p_mech = self.kt * omega_m * i_q

        return {
            "v_d": v_d,
            "v_q": v_q,
            "v_mag": v_mag,
            "p_copper": p_copper,
            "p_mech": p_mech,
            "p_elec": p_copper + p_mech,
            "torque": self.kt * i_q,
            "within_current": math.hypot(i_d, i_q) <= self.i_max * (1 + 1e-9),
            "within_voltage": v_mag <= self.v_phase_max * (1 + 1e-9),
        }


# =============================================================================
# Power-Only Model
# =============================================================================

def simple_power_limited_torque(
    r_phase: float,
    kt: float,
    omega_m: float,
    power_limit: float,
    config: Optional[ActuatorAnalyzerConfig] = None
) -> float:
    """
    Maximum torque of the copper-loss-only model (Nm).

    Runs the full solver with the voltage and current limits disabled and
    no field weakening, which leaves only the power hyperbola.
    """
    solver = FeasibleTorqueSolver(
        r_phase=r_phase,
        l_phase=0.0,
        kt=kt,
        v_phase_max=math.inf,
        i_max=math.inf,
        id_fw_max=0.0,
        mode=OperatingMode.MOTORING,
        config=config,
    )
    return solver.max_torque(omega_m, power_limit)


def copper_loss_torque(
    kcu: float,
    omega_m: float,
    power_limit: float,
    config: Optional[ActuatorAnalyzerConfig] = None
) -> float:
    """
    Solve kcu × τ² + ω × τ - P = 0 for the positive torque (Nm).

    Closed form of the power-only model, used to cross-check
    simple_power_limited_torque().
    """
    config = config if config is not None else DEFAULT_CONFIG
    root = largest_root(kcu, omega_m, -power_limit, config.epsilon)
    if root is None or not math.isfinite(root):
        return 0.0
    return max(0.0, root)
