#!/usr/bin/env python3
"""
Actuator Force Explorer Launcher
================================

Computes the default cable-machine scenario and shows the resistance vs
rep speed chart.

The default scenario is a 0.272 Nm/A motor (0.164 Ω, 235 µH line-to-line,
delta winding) on a 48 V bus with a 72 A phase limit, driving a 0.05 m drum
through a 10:1 gearbox at 90% efficiency, for every preset power supply.

Usage:
------
    python run_force_explorer.py              # show the chart
    python run_force_explorer.py chart.png    # save the chart instead

Requirements:
------------
- Python 3.8+
- numpy, scipy, matplotlib, pandas
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.resolve()
sys.path.insert(0, str(project_root))


def main():
    """Compute the default scenario and plot it."""
    print("=" * 60)
    print("  Actuator Force Explorer")
    print("=" * 60)
    print()
    print("Initializing...")

    # Check dependencies
    try:
        import numpy
        import scipy
        import matplotlib
        import pandas
        print(f"  [OK] numpy {numpy.__version__}")
        print(f"  [OK] scipy {scipy.__version__}")
        print(f"  [OK] matplotlib {matplotlib.__version__}")
        print(f"  [OK] pandas {pandas.__version__}")
    except ImportError as e:
        print(f"\n[ERROR] Missing dependency: {e}")
        print("\nInstall with: pip install -e .")
        sys.exit(1)

    output_path = sys.argv[1] if len(sys.argv) > 1 else None
    if output_path:
        matplotlib.use("Agg")

    import matplotlib.pyplot as plt
    from src.actuator_analyzer import ForceCurvePlotter, ParameterSet, compute
    from src.actuator_analyzer.config import PRESET_SUPPLY_WATTS

    params = ParameterSet.from_dict({"supplies": list(PRESET_SUPPLY_WATTS)})
    result = compute(params)
    derived = result.derived

    print()
    print(f"  Per-phase R   = {derived.r_phase:.3f} Ω")
    print(f"  Per-phase L   = {derived.l_phase:.3e} H")
    print(f"  kcu           = {derived.kcu:.2f} W/Nm²")
    print(f"  Phase V limit = {derived.v_phase_max:.2f} V")
    print(f"  Torque cap    = {derived.torque_max:.2f} Nm")
    print()
    print(f"  {'Supply':>8}  {'Force @ 0 m/s':>14}  {'Force @ max':>12}")
    for curve in result.curves:
        print(f"  {curve.label:>8}  {curve.forces_lbf[0]:>10.1f} lbf  "
              f"{curve.forces_lbf[-1]:>8.1f} lbf")
    print("-" * 60)

    plotter = ForceCurvePlotter()
    fig = plotter.plot_force_curves(result)

    if output_path:
        fig.savefig(output_path, dpi=150)
        print(f"Chart saved to {output_path}")
    else:
        plt.show()


if __name__ == "__main__":
    main()
