"""Reconciliation engine."""

from provisioner.engine.batch import BatchReconciler, BatchSummary
from provisioner.engine.errors import (
    ReconcileError,
    RetriesExhaustedError,
    TerminalRequestError,
    TransientBackendError,
)
from provisioner.engine.reconciler import Reconciler, RetryPolicy, classify_response, reconcile

__all__ = [
    "BatchReconciler",
    "BatchSummary",
    "Reconciler",
    "RetryPolicy",
    "classify_response",
    "reconcile",
    "ReconcileError",
    "RetriesExhaustedError",
    "TerminalRequestError",
    "TransientBackendError",
]
