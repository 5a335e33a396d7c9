"""Console output and run reporting."""

from reclaimer.reporting.console import ReclaimerConsole
from reclaimer.reporting.reporter import Reporter

__all__ = ["ReclaimerConsole", "Reporter"]
