"""
Actuator Analyzer Module
========================

This module computes the maximum cable force a motor-driven linear
actuator (e.g. a cable machine) can hold as a function of handle speed,
limited by supply power, bus voltage and phase current.

The module enables:
- Per-phase electrical derivation from line-to-line measurements
- Maximum torque search over field-weakening current (dq model)
- Force vs speed curves for several power supplies at once
- Visualization of force curves and of the limiting constraints

Key Classes:
------------
- ParameterSet: Input snapshot (motor, limits, transmission, sweep, supplies)
- FeasibleTorqueSolver: Maximum torque at one motor speed
- CurveGenerator: Speed sweep producing one ForceCurve per supply
- ForceCurvePlotter: Visualization tools

Key Functions:
--------------
- compute(): ParameterSet -> ForceCurveResult
- derive_electrical(): Per-phase R, L, voltage limit and copper-loss coefficient

Example Usage:
-------------
    from src.actuator_analyzer import ParameterSet, compute

    params = ParameterSet.from_dict({
        "kt": 0.272,
        "rll": 0.164,
        "lll_uh": 235,
        "id_fw_max": 20,
        "supplies": [1000, 3000],
    })
    result = compute(params)
    print(result.rows[-1], result.max_y)

Units Convention:
----------------
- Speed: m/s at the handle, rad/s at the motor
- Force: pound-force (lbf) in the output, Newtons internally
- Torque: Newton-meters (Nm)
- Voltage: Volts (V), Current: Amperes (A), Power: Watts (W)
- Resistance: Ohms (Ω), Inductance: Henry (H)
- Temperature: Celsius (°C)
"""

from .config import ActuatorAnalyzerConfig, DEFAULT_CONFIG
from .parameters import (
    ConstantMode,
    MotorElectricalParameters,
    OperatingLimits,
    OperatingMode,
    ParameterSet,
    SupplySelection,
    SweepSettings,
    TransmissionParameters,
    Winding,
)
from .electrical import DerivedElectrical, derive_electrical
from .solver import FeasibleTorqueSolver, simple_power_limited_torque, copper_loss_torque
from .curves import CurveGenerator, ForceCurve, ForceCurveResult, compute
from .debugger import CalculationDebugger, set_debugger, get_debugger
from .plotting import ForceCurvePlotter

__all__ = [
    "ActuatorAnalyzerConfig",
    "DEFAULT_CONFIG",
    "ConstantMode",
    "MotorElectricalParameters",
    "OperatingLimits",
    "OperatingMode",
    "ParameterSet",
    "SupplySelection",
    "SweepSettings",
    "TransmissionParameters",
    "Winding",
    "DerivedElectrical",
    "derive_electrical",
    "FeasibleTorqueSolver",
    "simple_power_limited_torque",
    "copper_loss_torque",
    "CurveGenerator",
    "ForceCurve",
    "ForceCurveResult",
    "compute",
    "CalculationDebugger",
    "set_debugger",
    "get_debugger",
    "ForceCurvePlotter",
]
