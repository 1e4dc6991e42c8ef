"""
Electrical Model
================

Converts line-to-line motor measurements into the per-phase quantities
used by the dq-axis torque solver.

    Rphase = Rbase × (1 + α × (T - 25))
    Rbase  = Rll / 2    (WYE)
           = 1.5 × Rll  (DELTA)
    Lphase = Lll / 2 or 1.5 × Lll (no temperature correction)
    Vmax   = utilization × Vbus / √3
    kcu    = 3 × Rphase / Kt²   (copper loss P_cu = kcu × τ²)

The DELTA factor is the per-phase value of the equivalent star model used
by the dq equations, not the physical delta branch resistance.
"""

import math
from dataclasses import dataclass
from typing import Optional

from .config import ActuatorAnalyzerConfig, DEFAULT_CONFIG
from .debugger import debug_step
from .parameters import MotorElectricalParameters, OperatingLimits, Winding


@dataclass(frozen=True)
class DerivedElectrical:
    """
    Per-phase electrical quantities derived from a parameter snapshot.

    Attributes:
    ----------
    r_phase : float
        Temperature-corrected per-phase resistance (Ω).

    l_phase : float
        Per-phase inductance (H).

    v_phase_max : float
        Maximum fundamental phase voltage (V).

    kt : float
        Effective torque constant (Nm/A).

    kv : float
        Effective speed constant (rpm/V).

    kcu : float
        Copper-loss coefficient (W/Nm²).

    torque_max : float
        Absolute motor torque cap Kt × Imax (Nm).
    """
    r_phase: float
    l_phase: float
    v_phase_max: float
    kt: float
    kv: float
    kcu: float
    torque_max: float


def winding_factor(winding: Winding) -> float:
    """Line-to-line to per-phase factor for the winding topology."""
    return 0.5 if winding is Winding.WYE else 1.5


def phase_resistance(
    rll: float,
    winding: Winding,
    copper_temp_c: float,
    config: Optional[ActuatorAnalyzerConfig] = None
) -> float:
    """
    Calculate temperature-corrected per-phase resistance.

    Parameters:
    ----------
    rll : float
        Line-to-line resistance at the reference temperature (Ω).

    winding : Winding
        Winding topology.

    copper_temp_c : float
        Copper temperature (°C).

    Returns:
    -------
    float
        Per-phase resistance (Ω).

    Example:
    -------
        phase_resistance(0.164, Winding.DELTA, 25.0)  # 0.246 Ω
        phase_resistance(0.164, Winding.WYE, 25.0)    # 0.082 Ω
    """
    config = config if config is not None else DEFAULT_CONFIG
    r_base = rll * winding_factor(winding)
    return config.resistance_at_temp(r_base, copper_temp_c)


def phase_inductance(lll: float, winding: Winding) -> float:
    """Per-phase inductance (H) from line-to-line inductance."""
    return lll * winding_factor(winding)


def phase_voltage_limit(v_bus: float, utilization: float) -> float:
    """Maximum fundamental phase voltage available from the DC bus (V)."""
    return utilization * v_bus / math.sqrt(3.0)


def copper_loss_coefficient(
    r_phase: float,
    kt: float,
    config: Optional[ActuatorAnalyzerConfig] = None
) -> float:
    """
    Copper-loss coefficient of the power-only model.

        P_cu = 3 × I² × Rphase = (3 × Rphase / Kt²) × τ²
    """
    config = config if config is not None else DEFAULT_CONFIG
    kt = max(config.epsilon, kt)
    return 3.0 * r_phase / (kt * kt)


def derive_electrical(
    motor: MotorElectricalParameters,
    limits: OperatingLimits,
    config: Optional[ActuatorAnalyzerConfig] = None
) -> DerivedElectrical:
    """
    Derive every per-phase quantity the solver needs.

    Parameters:
    ----------
    motor : MotorElectricalParameters
        Line-to-line motor data.

    limits : OperatingLimits
        Supplies bus voltage, utilization and current cap.

    config : ActuatorAnalyzerConfig, optional
        Uses the default configuration if not specified.

    Returns:
    -------
    DerivedElectrical
    """
    config = config if config is not None else DEFAULT_CONFIG

    kt = motor.torque_constant
    r_phase = phase_resistance(motor.rll, motor.winding, motor.copper_temp_c, config)
    l_phase = phase_inductance(motor.lll, motor.winding)
    v_phase_max = phase_voltage_limit(limits.v_bus, limits.utilization)
    kcu = copper_loss_coefficient(r_phase, kt, config)

    debug_step(
        category="Electrical",
        description="Per-phase resistance",
        formula="Rphase = Rll × k_winding × (1 + α × (T - T_ref))",
        variables={
            "Rll": motor.rll,
            "winding": motor.winding.value,
            "T": motor.copper_temp_c,
            "alpha": config.copper_temp_coeff,
        },
        result=r_phase,
        result_name="Rphase",
        result_unit="Ω",
    )
    debug_step(
        category="Electrical",
        description="Per-phase inductance",
        formula="Lphase = Lll × k_winding",
        variables={"Lll": motor.lll, "winding": motor.winding.value},
        result=l_phase,
        result_name="Lphase",
        result_unit="H",
    )
    debug_step(
        category="Electrical",
        description="Phase voltage limit",
        formula="Vmax = util × Vbus / √3",
        variables={"util": limits.utilization, "Vbus": limits.v_bus},
        result=v_phase_max,
        result_name="Vmax",
        result_unit="V",
    )
    debug_step(
        category="Electrical",
        description="Copper-loss coefficient",
        formula="kcu = 3 × Rphase / Kt²",
        variables={"Rphase": r_phase, "Kt": kt},
        result=kcu,
        result_name="kcu",
        result_unit="W/Nm²",
    )

    return DerivedElectrical(
        r_phase=r_phase,
        l_phase=l_phase,
        v_phase_max=v_phase_max,
        kt=kt,
        kv=motor.speed_constant,
        kcu=kcu,
        torque_max=limits.max_motor_torque(kt),
    )
