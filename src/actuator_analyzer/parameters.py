"""
Actuator Parameter Models
=========================

Defines the dataclasses that make up one parameter snapshot of the
actuator: motor electrical data, operating limits, transmission, speed
sweep and the set of selected power supplies.

Every numeric field is coerced to a finite float when built from form
input (see ParameterSet.from_dict), so the calculation modules never see
NaN or non-numeric values.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .config import (
    ActuatorAnalyzerConfig,
    DEFAULT_CONFIG,
    EPSILON,
    PRESET_SUPPLY_WATTS,
    clamp,
    coerce_number,
)


class Winding(Enum):
    """Motor winding topology."""
    DELTA = "DELTA"
    WYE = "WYE"


class ConstantMode(Enum):
    """Which motor constant the user entered."""
    KT = "KT"   # Torque constant (Nm/A) is authoritative
    KV = "KV"   # Speed constant (rpm/V) is authoritative


class OperatingMode(Enum):
    """Direction of power flow in the actuator."""
    MOTORING = "CONC"       # Concentric: motor drives the cable
    REGENERATING = "ECC"    # Eccentric: cable back-drives the motor


def _parse_enum(enum_cls, value):
    """Accept an enum member, its value or its name (case-insensitive)."""
    if isinstance(value, enum_cls):
        return value
    text = str(value).strip()
    for member in enum_cls:
        if text.upper() in (member.value.upper(), member.name):
            return member
    accepted = [m.name for m in enum_cls] + [m.value for m in enum_cls]
    raise ValueError(
        f"Unknown {enum_cls.__name__} '{value}'. "
        f"Accepted values: {sorted(set(accepted))}"
    )


@dataclass(frozen=True)
class MotorElectricalParameters:
    """
    Motor electromagnetic parameters as measured line-to-line.

    Attributes:
    ----------
    kt : float
        Torque constant entry (Nm/A), authoritative in KT mode.

    kv : float
        Speed constant entry (rpm/V), authoritative in KV mode.

    constant_mode : ConstantMode
        Selects which of kt / kv is used.

    rll : float
        Line-to-line resistance at 25°C (Ω).

    lll : float
        Line-to-line inductance (H).

    winding : Winding
        DELTA or WYE.

    copper_temp_c : float
        Copper temperature (°C).
    """
    kt: float = 0.272
    kv: float = 35.0
    constant_mode: ConstantMode = ConstantMode.KT
    rll: float = 0.164
    lll: float = 235e-6
    winding: Winding = Winding.DELTA
    copper_temp_c: float = 25.0

    @property
    def torque_constant(self) -> float:
        """Effective Kt (Nm/A), derived from Kv in KV mode."""
        if self.constant_mode is ConstantMode.KV:
            return ActuatorAnalyzerConfig.kt_from_kv(self.kv)
        return self.kt

    @property
    def speed_constant(self) -> float:
        """Effective Kv (rpm/V), derived from Kt in KT mode."""
        if self.constant_mode is ConstantMode.KT:
            return ActuatorAnalyzerConfig.kv_from_kt(self.kt)
        return self.kv


@dataclass(frozen=True)
class OperatingLimits:
    """
    Electrical supply and controller limits.

    Attributes:
    ----------
    v_bus : float
        DC bus voltage (V).

    utilization : float
        Modulation utilization, 0-1.

    i_max : float
        Maximum phase current (A).

    id_fw_max : float
        Maximum field-weakening |i_d| (A), 0 disables field weakening.

    mode : OperatingMode
        MOTORING or REGENERATING.
    """
    v_bus: float = 48.0
    utilization: float = 0.95
    i_max: float = 72.0
    id_fw_max: float = 0.0
    mode: OperatingMode = OperatingMode.MOTORING

    def __post_init__(self):
        object.__setattr__(self, "utilization", clamp(self.utilization, 0.0, 1.0))
        object.__setattr__(self, "id_fw_max", max(0.0, self.id_fw_max))

    def max_motor_torque(self, kt: float) -> float:
        """Absolute torque cap Kt × Imax (Nm)."""
        return kt * self.i_max

    def with_max_motor_torque(self, torque: float, kt: float) -> "OperatingLimits":
        """Return a copy whose current cap produces the given motor torque."""
        return replace(self, i_max=coerce_number(torque) / max(EPSILON, kt))


@dataclass(frozen=True)
class TransmissionParameters:
    """Gearing between the motor and the cable drum."""
    gear_ratio: float = 10.0        # motor revolutions per drum revolution
    gear_efficiency: float = 0.9    # 0-1
    drum_radius: float = 0.05       # effective cable radius (m)

    def __post_init__(self):
        object.__setattr__(
            self, "gear_efficiency", clamp(self.gear_efficiency, 0.0, 1.0)
        )


@dataclass(frozen=True)
class SweepSettings:
    """Speed domain of the chart."""
    max_speed: float = 3.0  # m/s at the handle
    steps: int = 60         # speed intervals

    def __post_init__(self):
        # Sweep runs upward from standstill
        object.__setattr__(self, "max_speed", max(0.0, coerce_number(self.max_speed)))
        object.__setattr__(self, "steps", int(round(coerce_number(self.steps))))


@dataclass
class SupplySelection:
    """
    Selected power supply limits (W), kept sorted ascending.

    Presets are toggled on and off; custom values are added once.

    Example:
    -------
        supplies = SupplySelection()
        supplies.toggle(1000)
        supplies.add_custom("750")
        print(supplies.labels)  # ['750 W', '1000 W', '3000 W']
    """
    selected: List[int] = field(default_factory=lambda: [3000])
    presets: tuple = PRESET_SUPPLY_WATTS

    def __post_init__(self):
        watts = (int(round(coerce_number(w))) for w in self.selected)
        self.selected = sorted(set(w for w in watts if w > 0))

    def toggle(self, watts: Any):
        """
        Remove watts if selected, otherwise add it.

        The value is rounded to whole watts; zero and negative values are
        ignored.
        """
        watts = int(round(coerce_number(watts)))
        if watts <= 0:
            return
        if watts in self.selected:
            self.selected.remove(watts)
        else:
            self.selected = sorted(self.selected + [watts])

    def add_custom(self, value: Any) -> Optional[int]:
        """
        Add a custom supply rating.

        The value is coerced and rounded to whole watts. Zero, negative and
        already selected values are ignored.

        Returns:
        -------
        int or None
            The added wattage, or None when nothing was added.
        """
        watts = int(round(coerce_number(value)))
        if watts <= 0 or watts in self.selected:
            return None
        self.selected = sorted(self.selected + [watts])
        return watts

    @property
    def labels(self) -> List[str]:
        """Series labels in display order."""
        return [supply_label(w) for w in self.selected]


def supply_label(watts: int) -> str:
    """Series label for a supply limit, e.g. '3000 W'."""
    return f"{watts} W"


@dataclass
class ParameterSet:
    """
    Complete input snapshot for one force-curve computation.

    Example:
    -------
        params = ParameterSet.defaults()
        params = ParameterSet.from_dict({"kv": 35, "constant_mode": "KV"})
    """
    motor: MotorElectricalParameters = field(default_factory=MotorElectricalParameters)
    limits: OperatingLimits = field(default_factory=OperatingLimits)
    transmission: TransmissionParameters = field(default_factory=TransmissionParameters)
    sweep: SweepSettings = field(default_factory=SweepSettings)
    supplies: SupplySelection = field(default_factory=SupplySelection)

    @classmethod
    def defaults(cls) -> "ParameterSet":
        """Factory defaults (the values restored by a form reset)."""
        return cls()

    @classmethod
    def from_dict(
        cls,
        values: Mapping[str, Any],
        config: Optional[ActuatorAnalyzerConfig] = None
    ) -> "ParameterSet":
        """
        Build a parameter snapshot from a flat, form-like mapping.

        Missing keys keep their default. Numeric fields are coerced with
        coerce_number(), so blank or invalid entries become 0.

        Parameters:
        ----------
        values : mapping
            Keys: kt, kv, constant_mode, rll, lll (H) or lll_uh (µH),
            winding, copper_temp_c, v_bus, utilization, i_max,
            max_motor_torque, id_fw_max, mode, gear_ratio, gear_efficiency,
            drum_radius, max_speed, steps, supplies.

        config : ActuatorAnalyzerConfig, optional
            Supplies the steps bounds. Uses the default if not specified.

        Raises:
        ------
        ValueError
            If winding, constant_mode or mode is not a known option.
        """
        config = config if config is not None else DEFAULT_CONFIG
        base = cls.defaults()

        def num(key: str, default: float) -> float:
            return coerce_number(values[key]) if key in values else default

        if "lll_uh" in values:
            lll = coerce_number(values["lll_uh"]) * 1e-6
        else:
            lll = num("lll", base.motor.lll)

        motor = MotorElectricalParameters(
            kt=num("kt", base.motor.kt),
            kv=num("kv", base.motor.kv),
            constant_mode=_parse_enum(
                ConstantMode, values.get("constant_mode", base.motor.constant_mode)
            ),
            rll=num("rll", base.motor.rll),
            lll=lll,
            winding=_parse_enum(Winding, values.get("winding", base.motor.winding)),
            copper_temp_c=num("copper_temp_c", base.motor.copper_temp_c),
        )

        limits = OperatingLimits(
            v_bus=num("v_bus", base.limits.v_bus),
            utilization=num("utilization", base.limits.utilization),
            i_max=num("i_max", base.limits.i_max),
            id_fw_max=num("id_fw_max", base.limits.id_fw_max),
            mode=_parse_enum(OperatingMode, values.get("mode", base.limits.mode)),
        )
        if "max_motor_torque" in values:
            limits = limits.with_max_motor_torque(
                values["max_motor_torque"], motor.torque_constant
            )

        transmission = TransmissionParameters(
            gear_ratio=num("gear_ratio", base.transmission.gear_ratio),
            gear_efficiency=num("gear_efficiency", base.transmission.gear_efficiency),
            drum_radius=num("drum_radius", base.transmission.drum_radius),
        )

        raw_steps = values.get("steps", base.sweep.steps)
        steps = config.clamp_steps(raw_steps)
        if steps != round(coerce_number(raw_steps)):
            print(f"Warning: chart points {raw_steps!r} clamped to {steps} "
                  f"(allowed {config.min_steps}-{config.max_steps})")

        sweep = SweepSettings(
            max_speed=num("max_speed", base.sweep.max_speed),
            steps=steps,
        )

        supplies = SupplySelection(presets=config.preset_supply_watts)
        if "supplies" in values:
            supplies = SupplySelection(selected=[], presets=config.preset_supply_watts)
            for watts in _iter_supplies(values["supplies"]):
                supplies.add_custom(watts)

        return cls(
            motor=motor,
            limits=limits,
            transmission=transmission,
            sweep=sweep,
            supplies=supplies,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Flatten the snapshot back into from_dict() keys."""
        return {
            "kt": self.motor.kt,
            "kv": self.motor.kv,
            "constant_mode": self.motor.constant_mode.value,
            "rll": self.motor.rll,
            "lll": self.motor.lll,
            "winding": self.motor.winding.value,
            "copper_temp_c": self.motor.copper_temp_c,
            "v_bus": self.limits.v_bus,
            "utilization": self.limits.utilization,
            "i_max": self.limits.i_max,
            "id_fw_max": self.limits.id_fw_max,
            "mode": self.limits.mode.value,
            "gear_ratio": self.transmission.gear_ratio,
            "gear_efficiency": self.transmission.gear_efficiency,
            "drum_radius": self.transmission.drum_radius,
            "max_speed": self.sweep.max_speed,
            "steps": self.sweep.steps,
            "supplies": list(self.supplies.selected),
        }


def _iter_supplies(value: Any) -> Iterable[Any]:
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        return [value]
    return value
