"""Cash reconciliation package."""

from src.reconciliation.variance import classify_variance, summarize
from src.reconciliation.workflow import DuplicateSubmissionError, ReconciliationWorkflow

__all__ = [
    "DuplicateSubmissionError",
    "ReconciliationWorkflow",
    "classify_variance",
    "summarize",
]
