"""
Calculation Debugger
====================

Records the electrical derivation, constraint limits and force conversion
steps of a force-curve computation so the numbers behind a chart can be
checked by hand.

Nothing is recorded unless a debugger has been installed with
set_debugger(); the solver and curve generator call debug_step() which is
a no-op otherwise.
"""

from dataclasses import dataclass
from typing import List, Any, Optional
from datetime import datetime


@dataclass
class CalculationStep:
    """A single calculation step with inputs, formula, and result."""
    category: str           # e.g. "Electrical", "Solver", "Force"
    description: str
    formula: str
    variables: dict
    result: Any
    result_name: str
    result_unit: str
    comment: str = ""


class CalculationDebugger:
    """
    Traces and records calculation steps.

    Usage:
        debugger = CalculationDebugger()
        set_debugger(debugger)
        debugger.start(scenario="defaults")
        result = compute(ParameterSet.defaults())
        debugger.finish()
        print(debugger.get_report())
        set_debugger(None)
    """

    def __init__(self, max_steps: Optional[int] = None):
        """
        Initialize the debugger.

        Parameters:
        ----------
        max_steps : int, optional
            Stop recording once this many steps are stored. A full sweep
            produces several steps per (speed, limit) pair.
        """
        self.max_steps = max_steps
        self.steps: List[CalculationStep] = []
        self.sections: List[tuple] = []  # (index, section_name)
        self.start_time: Optional[datetime] = None
        self.end_time: Optional[datetime] = None
        self.metadata: dict = {}
        self.dropped_steps = 0

    def clear(self):
        """Clear all recorded steps."""
        self.steps = []
        self.sections = []
        self.start_time = None
        self.end_time = None
        self.metadata = {}
        self.dropped_steps = 0

    def start(self, **metadata):
        """Start a new debugging session."""
        self.clear()
        self.start_time = datetime.now()
        self.metadata = metadata

    def finish(self):
        """Finish the debugging session."""
        self.end_time = datetime.now()

    def start_section(self, name: str):
        """Start a new section of calculations."""
        self.sections.append((len(self.steps), name))

    def add_step(
        self,
        category: str,
        description: str,
        formula: str,
        variables: dict,
        result: Any,
        result_name: str,
        result_unit: str = "",
        comment: str = ""
    ):
        """Add a calculation step."""
        if self.max_steps is not None and len(self.steps) >= self.max_steps:
            self.dropped_steps += 1
            return
        self.steps.append(CalculationStep(
            category=category,
            description=description,
            formula=formula,
            variables=variables,
            result=result,
            result_name=result_name,
            result_unit=result_unit,
            comment=comment
        ))

    def get_report(self, include_sections: bool = True) -> str:
        """
        Format the trace as text.

        Electrical steps are listed with their formulas. Solver and Force
        steps are grouped by speed sample: one line for the sample, then one
        line per supply with the torque and the limit that bound it.

        Parameters:
        ----------
        include_sections : bool
            Include section headers such as the speed sweep banner.
        """
        rule = "=" * 70
        lines = [rule, "FORCE CURVE CALCULATION REPORT", rule]

        if self.start_time:
            lines.append(f"Generated: {self.start_time:%Y-%m-%d %H:%M:%S}")
        if self.metadata:
            lines.append("Scenario:")
            lines.extend(f"  {key}: {value}" for key, value in self.metadata.items())

        section_starts = dict(self.sections)
        torques: List[CalculationStep] = []

        for index, step in enumerate(self.steps):
            if include_sections and index in section_starts:
                lines.extend(["", f">>> {section_starts[index]}", "-" * 70])

            if step.category == "Solver":
                torques.append(step)
            elif step.category == "Force":
                lines.extend(_format_speed_sample(step, torques))
                torques = []
            else:
                lines.extend(_format_torque(s) for s in torques)
                torques = []
                lines.extend(_format_step(step))

        # Solver calls made outside a sweep, or cut off by max_steps
        lines.extend(_format_torque(s) for s in torques)

        lines.extend(["", rule, f"Total Steps: {len(self.steps)}"])
        if self.dropped_steps:
            lines.append(f"Steps not recorded (max_steps reached): {self.dropped_steps}")
        if self.start_time and self.end_time:
            elapsed = (self.end_time - self.start_time).total_seconds()
            lines.append(f"Elapsed Time: {elapsed:.3f} seconds")
        lines.append(rule)

        return "\n".join(lines)

    def get_step_count(self) -> int:
        """Return the number of recorded steps."""
        return len(self.steps)

    def find_steps_by_category(self, category: str) -> List[CalculationStep]:
        """Find all steps in a given category."""
        return [s for s in self.steps if s.category == category]

    def find_step_by_result(self, result_name: str) -> Optional[CalculationStep]:
        """Find the most recent step that produced a specific result."""
        for step in reversed(self.steps):
            if step.result_name == result_name:
                return step
        return None


def _fmt(value: Any) -> str:
    return f"{value:.6g}" if isinstance(value, float) else str(value)


def _format_step(step: CalculationStep) -> List[str]:
    """Result line, formula and inputs of one derivation step."""
    unit = f" {step.result_unit}" if step.result_unit else ""
    lines = [f"  {step.result_name} = {_fmt(step.result)}{unit}    ({step.description})"]
    if step.formula:
        lines.append(f"      {step.formula}")
    if step.variables:
        inputs = ", ".join(f"{k}={_fmt(v)}" for k, v in step.variables.items())
        lines.append(f"      with {inputs}")
    if step.comment:
        lines.append(f"      // {step.comment}")
    return lines


def _format_torque(step: CalculationStep) -> str:
    """One supply's torque at a speed sample."""
    variables = step.variables
    power = variables.get("P", "none")
    supply = f"{power:g} W" if isinstance(power, (int, float)) else "no supply limit"
    line = (
        f"      {supply:>16}   τ = {_fmt(step.result)} {step.result_unit}"
        f"   i_d = {_fmt(variables.get('i_d', 0.0))} A"
    )
    if "binding" in variables:
        line += f"   limited by {variables['binding']}"
    return line


def _format_speed_sample(force: CalculationStep, torques: List[CalculationStep]) -> List[str]:
    """Speed sample header followed by the torque of every supply."""
    v = force.variables.get("v", 0.0)
    omega_m = force.variables.get("omega_m", 0.0)
    header = (
        f"  v = {_fmt(v)} m/s   ω_m = {_fmt(omega_m)} rad/s   "
        f"{force.result_name} = {_fmt(force.result)} {force.result_unit}"
    )
    return [header] + [_format_torque(s) for s in torques]


# Global debugger instance, None when tracing is off
_debugger: Optional[CalculationDebugger] = None


def get_debugger() -> Optional[CalculationDebugger]:
    """Get the installed debugger, or None when tracing is off."""
    return _debugger


def set_debugger(debugger: Optional[CalculationDebugger]):
    """Install a debugger, or pass None to turn tracing off."""
    global _debugger
    _debugger = debugger


def debug_section(name: str):
    """Start a section on the installed debugger (if active)."""
    if _debugger is not None:
        _debugger.start_section(name)


def debug_step(
    category: str,
    description: str,
    formula: str,
    variables: dict,
    result: Any,
    result_name: str,
    result_unit: str = "",
    comment: str = ""
):
    """Add a step to the installed debugger (if active)."""
    if _debugger is not None:
        _debugger.add_step(
            category=category,
            description=description,
            formula=formula,
            variables=variables,
            result=result,
            result_name=result_name,
            result_unit=result_unit,
            comment=comment
        )
