"""
ActuatorForceExplorer - Main Package
====================================

Tools for exploring how much cable force a motor-driven linear actuator
can hold as a function of speed.

This package provides modules for:
- Actuator Analysis (actuator_analyzer): power-, voltage- and
  current-limited force vs speed curves with field weakening

Author: ActuatorForceExplorer Team
"""

__version__ = "0.1.0"
__author__ = "ActuatorForceExplorer Team"
