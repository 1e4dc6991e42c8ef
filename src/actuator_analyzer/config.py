"""
Actuator Analyzer Configuration Module
======================================

This module contains configuration settings and physical constants
for the Actuator Analyzer. Solver resolution, sweep bounds and chart
defaults are centralized here for easy modification.

Configuration Classes:
---------------------
- ActuatorAnalyzerConfig: Main configuration class with all settings

Physical Constants:
------------------
- KT_FROM_KV_FACTOR: Kt [Nm/A] = 9.5492965964254 / Kv [rpm/V]
- COPPER_TEMP_COEFF: Temperature coefficient of copper (0.0039 /°C)
- LBF_PER_N: Newton to pound-force conversion
- EPSILON: Lower bound used for every physical denominator

Usage:
------
    from src.actuator_analyzer.config import ActuatorAnalyzerConfig

    config = ActuatorAnalyzerConfig()
    print(config.kt_from_kv(35))
"""

import math
from dataclasses import dataclass, field
from typing import Any, Tuple


# =============================================================================
# Physical Constants
# =============================================================================

# Conversion factor between torque and speed constants
# Kt [Nm/A] = 60 / (2π) / Kv [rpm/V]
KT_FROM_KV_FACTOR = 9.5492965964254

# Temperature coefficient of copper resistance (per °C)
COPPER_TEMP_COEFF = 0.0039

# Reference temperature for line-to-line resistance measurements (°C)
REFERENCE_TEMP_C = 25.0

# Newtons per pound-force
NEWTONS_PER_LBF = 4.4482216152605

# Pound-force per Newton
LBF_PER_N = 1.0 / NEWTONS_PER_LBF

# Smallest value allowed in a denominator (Kt, drum radius, gear ratio, ...)
EPSILON = 1e-9

# Power supply presets offered to the user (W)
PRESET_SUPPLY_WATTS: Tuple[int, ...] = (450, 1000, 1500, 2000, 3000, 5000)

# Number of d-axis current samples, endpoints included
DEFAULT_FW_GRID_POINTS = 41


def coerce_number(value: Any) -> float:
    """
    Convert a form-style value to a finite float.

    Strings are parsed as floats; anything that cannot be parsed, or that
    parses to NaN or infinity, becomes 0.

    Example:
    -------
        coerce_number("0.272")   # 0.272
        coerce_number("abc")     # 0.0
        coerce_number(float("nan"))  # 0.0
    """
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp value to the closed interval [lower, upper]."""
    return max(lower, min(upper, value))


@dataclass
class ActuatorAnalyzerConfig:
    """
    Configuration settings for the Actuator Analyzer module.

    Attributes:
    ----------
    reference_temp : float
        Temperature at which line-to-line resistance is specified (°C).

    copper_temp_coeff : float
        Temperature coefficient for copper resistance (/°C).

    epsilon : float
        Lower bound applied to denominators instead of raising.

    fw_grid_points : int
        Number of uniform d-axis current samples in the field-weakening
        search, both endpoints included.

    refine_field_weakening : bool
        Polish the best grid cell with a bounded scalar search.

    refine_tolerance : float
        Absolute d-axis current tolerance of the refinement (A).

    min_steps, max_steps : int
        Bounds applied to the number of speed intervals.

    axis_tick : float
        Force axis maximum is rounded up to a multiple of this (lbf).

    Example:
    -------
        config = ActuatorAnalyzerConfig(fw_grid_points=81)
        rphase_hot = config.resistance_at_temp(0.246, 80)
    """

    # -------------------------------------------------------------------------
    # Physical Model Parameters
    # -------------------------------------------------------------------------

    reference_temp: float = REFERENCE_TEMP_C

    copper_temp_coeff: float = COPPER_TEMP_COEFF

    epsilon: float = EPSILON

    # -------------------------------------------------------------------------
    # Solver Configuration
    # -------------------------------------------------------------------------

    fw_grid_points: int = DEFAULT_FW_GRID_POINTS

    # Off by default so results match the plain grid search
    refine_field_weakening: bool = False

    refine_tolerance: float = 1e-4

    # -------------------------------------------------------------------------
    # Sweep Configuration
    # -------------------------------------------------------------------------

    min_steps: int = 10

    max_steps: int = 500

    preset_supply_watts: Tuple[int, ...] = PRESET_SUPPLY_WATTS

    # -------------------------------------------------------------------------
    # Chart Configuration
    # -------------------------------------------------------------------------

    axis_tick: float = 25.0

    figure_size: Tuple[int, int] = field(default=(10, 6))

    def __post_init__(self):
        """Normalize solver resolution after dataclass initialization."""
        # A single sample is the i_d = 0 point
        self.fw_grid_points = max(1, int(self.fw_grid_points))

    # -------------------------------------------------------------------------
    # Calculation Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def kt_from_kv(kv: float) -> float:
        """
        Calculate torque constant (Kt) from speed constant (Kv).

            Kt [Nm/A] = 9.5492965964254 / Kv [rpm/V]

        Kv is clamped to EPSILON so a zero entry yields a large but finite Kt.
        """
        return KT_FROM_KV_FACTOR / max(EPSILON, kv)

    @staticmethod
    def kv_from_kt(kt: float) -> float:
        """Calculate speed constant (Kv) from torque constant (Kt)."""
        return KT_FROM_KV_FACTOR / max(EPSILON, kt)

    def resistance_at_temp(self, r_ref: float, temp: float) -> float:
        """
        Calculate winding resistance at a given copper temperature.

            R(T) = R_ref × (1 + α × (T - T_ref))

        Parameters:
        ----------
        r_ref : float
            Resistance at the reference temperature (Ω).

        temp : float
            Copper temperature (°C).

        Returns:
        -------
        float
            Resistance at the specified temperature (Ω).

        Example:
        -------
            config = ActuatorAnalyzerConfig()
            config.resistance_at_temp(0.246, 75)
            # ≈ 0.294 Ω (19.5% increase)
        """
        delta_t = temp - self.reference_temp
        return r_ref * (1.0 + self.copper_temp_coeff * delta_t)

    def clamp_steps(self, steps: float) -> int:
        """Round and clamp the number of speed intervals to the allowed range."""
        return int(clamp(round(coerce_number(steps)), self.min_steps, self.max_steps))


# =============================================================================
# Default Configuration Instance
# =============================================================================

DEFAULT_CONFIG = ActuatorAnalyzerConfig()
