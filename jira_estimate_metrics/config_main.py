"""Calculators run by the command line tool, in order."""

from .dashboard import ANALYSIS_CALCULATORS, DashboardCalculator

CALCULATORS = ANALYSIS_CALCULATORS + (
    DashboardCalculator,  # needs all analysis results
)
