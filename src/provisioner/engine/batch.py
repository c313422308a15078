"""Ordered reconciliation of a list of specs with dependency gating."""

import logging
from typing import Dict, Iterable, List, Optional

from provisioner.engine.reconciler import Reconciler
from provisioner.models.resource import (
    ErrorDetail,
    ReconciliationResult,
    ReconcileState,
    ResourceSpec,
)


logger = logging.getLogger(__name__)


class BatchSummary:
    """Per-resource results of a batch, in the order they were processed."""

    def __init__(self, results: Optional[List[ReconciliationResult]] = None):
        self.results: List[ReconciliationResult] = list(results or [])

    def add(self, result: ReconciliationResult):
        self.results.append(result)

    def _count(self, state: ReconcileState) -> int:
        return sum(1 for r in self.results if r.state is state)

    @property
    def created(self) -> int:
        return self._count(ReconcileState.CREATED)

    @property
    def already_existed(self) -> int:
        return self._count(ReconcileState.ALREADY_EXISTS)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.succeeded)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.skipped)

    @property
    def ok(self) -> bool:
        return self.failed == 0

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    def counts(self) -> Dict[str, int]:
        return {
            "created": self.created,
            "already_exists": self.already_existed,
            "failed": self.failed,
            "skipped": self.skipped,
            "total": len(self.results),
        }


class BatchReconciler:
    """Reconciles specs one at a time in declared order.

    A spec whose parent was reconciled earlier in the same batch and failed
    is not attempted; it inherits the parent's failure state.
    """

    def __init__(self, reconciler: Reconciler):
        """Initialize batch reconciler."""
        self.reconciler = reconciler

    async def run(self, specs: Iterable[ResourceSpec]) -> BatchSummary:
        """Reconcile every spec and return the summary."""
        summary = BatchSummary()
        outcomes: Dict[tuple, ReconciliationResult] = {}

        for spec in specs:
            parent = self._parent_result(spec, outcomes)
            if parent is not None and not parent.succeeded:
                result = self._skip(spec, parent)
            else:
                try:
                    result = await self.reconciler.reconcile(spec)
                except Exception as e:
                    logger.error(f"Failed to reconcile {spec.describe()}: {e}", exc_info=True)
                    result = ReconciliationResult(
                        spec=spec,
                        state=ReconcileState.FAILED_TERMINAL,
                        last_error=ErrorDetail(message=str(e)),
                    )

            outcomes[spec.key] = result
            summary.add(result)

        logger.info(
            "Reconciliation finished: {created} created, {already_exists} already present, "
            "{failed} failed ({skipped} skipped)".format(**summary.counts())
        )
        return summary

    @staticmethod
    def _parent_result(spec: ResourceSpec, outcomes) -> Optional[ReconciliationResult]:
        if not spec.parent_key:
            return None
        parent_kind = spec.kind.parent_kind
        for (kind, name, _), result in outcomes.items():
            if name == spec.parent_key and (parent_kind is None or kind is parent_kind):
                return result
        return None

    @staticmethod
    def _skip(spec: ResourceSpec, parent: ReconciliationResult) -> ReconciliationResult:
        message = f"Skipped {spec.describe()}: parent {parent.spec.describe()} {parent.state.value}"
        logger.warning(message)
        parent_error = parent.last_error or ErrorDetail()
        return ReconciliationResult(
            spec=spec,
            state=parent.state,
            attempts=0,
            last_error=ErrorDetail(
                status_code=parent_error.status_code,
                body=parent_error.body,
                message=message,
            ),
            skipped=True,
        )
