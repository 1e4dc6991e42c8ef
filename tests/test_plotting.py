"""
Force Curve Plotting Tests
==========================

Checks that the plotter draws one line per supply, sets the chart axes
from the computed result, and labels every constraint in the i_d profile.
"""

import sys
from pathlib import Path
import unittest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from src.actuator_analyzer import (
    ForceCurvePlotter,
    ParameterSet,
    SupplySelection,
    compute,
)


class TestPlotting(unittest.TestCase):
    """Test that the plotter draws every series."""

    def setUp(self):
        self.plotter = ForceCurvePlotter()

    def tearDown(self):
        plt.close("all")

    def test_force_curves_from_result(self):
        """One line per supply and axes matching the result."""
        params = ParameterSet(supplies=SupplySelection([450, 3000]))
        result = compute(params)
        fig = self.plotter.plot_force_curves(result)
        ax = fig.axes[0]
        self.assertEqual(len(ax.get_lines()), 2)
        self.assertEqual(ax.get_xlim(), (0.0, result.max_speed))
        self.assertEqual(ax.get_ylim(), (0.0, result.max_y))
        labels = [t.get_text() for t in ax.get_legend().get_texts()]
        self.assertEqual(labels, ["450 W", "3000 W"])

    def test_force_curves_from_parameters(self):
        """A ParameterSet is computed before plotting."""
        fig = self.plotter.plot_force_curves(ParameterSet.defaults())
        self.assertEqual(len(fig.axes[0].get_lines()), 1)

    def test_existing_axes(self):
        """Plotting onto a provided axes reuses its figure."""
        fig, ax = plt.subplots()
        returned = self.plotter.plot_force_curves(ParameterSet.defaults(), ax=ax)
        self.assertIs(returned, fig)

    def test_constraint_profile(self):
        """Constraint plot draws the limits and the admissible i_q."""
        params = ParameterSet.from_dict({"id_fw_max": 30})
        fig = self.plotter.plot_constraint_profile(params, speed=0.5)
        labels = [t.get_text() for t in fig.axes[0].get_legend().get_texts()]
        self.assertIn("Current limit", labels)
        self.assertIn("Voltage limit", labels)
        self.assertIn("Power limit", labels)
        self.assertIn("Admissible i_q", labels)

    def test_constraint_profile_regenerating(self):
        """The power limit is not drawn when it never binds."""
        params = ParameterSet.from_dict({"mode": "ECC", "id_fw_max": 30})
        fig = self.plotter.plot_constraint_profile(params, speed=0.5)
        labels = [t.get_text() for t in fig.axes[0].get_legend().get_texts()]
        self.assertNotIn("Power limit", labels)


def run_validation():
    """Run validation tests and print summary."""
    print("=" * 60)
    print("Plotting Validation")
    print("=" * 60)
    print()

    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    suite.addTests(loader.loadTestsFromTestCase(TestPlotting))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    print()
    print("=" * 60)
    if result.wasSuccessful():
        print("All validation tests PASSED")
    else:
        print(f"FAILED: {len(result.failures)} failures, {len(result.errors)} errors")
    print("=" * 60)

    return result.wasSuccessful()


if __name__ == "__main__":
    success = run_validation()
    sys.exit(0 if success else 1)
