"""
Background workers.

- AnalysisWorker: polls for pending submissions and runs them end to end
"""

from .base import BaseWorker
from .analysis import AnalysisWorker

__all__ = ["BaseWorker", "AnalysisWorker"]
