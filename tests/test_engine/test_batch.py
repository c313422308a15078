"""Tests for ordered batch reconciliation."""

import pytest
from unittest.mock import AsyncMock, Mock

from provisioner.engine.batch import BatchReconciler, BatchSummary
from provisioner.models.resource import (
    ErrorDetail,
    ReconciliationResult,
    ReconcileState,
    ResourceKind,
    ResourceSpec,
)


def _provider(name):
    return ResourceSpec(kind=ResourceKind.OIDC_PROVIDER, name=name, payload={"name": name})


def _mapping(name):
    return ResourceSpec(kind=ResourceKind.IDENTITY_MAPPING, name=name, parent_key=name)


def _outcomes(mapping):
    """Fake Reconciler.reconcile answering from a {name-kind: state} mapping."""
    async def _reconcile(spec):
        state = mapping[(spec.kind, spec.name)]
        error = None
        if not state.succeeded:
            error = ErrorDetail(status_code=503, body="unavailable", message="boom")
        return ReconciliationResult(spec=spec, state=state, attempts=1, last_error=error)
    return _reconcile


@pytest.fixture
def reconciler():
    return Mock()


@pytest.mark.asyncio
class TestBatchReconciler:
    """Test dependency gating and failure isolation."""

    async def test_all_succeed_in_order(self, reconciler):
        specs = [_provider("a"), _mapping("a"), _provider("b"), _mapping("b")]
        reconciler.reconcile = AsyncMock(side_effect=_outcomes({
            (ResourceKind.OIDC_PROVIDER, "a"): ReconcileState.CREATED,
            (ResourceKind.IDENTITY_MAPPING, "a"): ReconcileState.CREATED,
            (ResourceKind.OIDC_PROVIDER, "b"): ReconcileState.ALREADY_EXISTS,
            (ResourceKind.IDENTITY_MAPPING, "b"): ReconcileState.ALREADY_EXISTS,
        }))

        summary = await BatchReconciler(reconciler).run(specs)

        assert [r.spec for r in summary.results] == specs
        assert [c.args[0] for c in reconciler.reconcile.await_args_list] == specs
        assert summary.created == 2
        assert summary.already_existed == 2
        assert summary.ok
        assert summary.exit_code == 0

    async def test_failed_parent_gates_child(self, reconciler):
        specs = [_provider("a"), _mapping("a"), _provider("b"), _mapping("b")]
        reconciler.reconcile = AsyncMock(side_effect=_outcomes({
            (ResourceKind.OIDC_PROVIDER, "a"): ReconcileState.FAILED_EXHAUSTED,
            (ResourceKind.OIDC_PROVIDER, "b"): ReconcileState.CREATED,
            (ResourceKind.IDENTITY_MAPPING, "b"): ReconcileState.CREATED,
        }))

        summary = await BatchReconciler(reconciler).run(specs)

        reconciled = [c.args[0] for c in reconciler.reconcile.await_args_list]
        assert _mapping("a") not in reconciled
        assert _mapping("b") in reconciled

        child = summary.results[1]
        assert child.skipped
        assert child.state is ReconcileState.FAILED_EXHAUSTED
        assert child.attempts == 0
        assert child.last_error.body == "unavailable"

        assert summary.failed == 2
        assert summary.skipped == 1
        assert summary.exit_code == 1

    async def test_gating_matches_parent_kind_and_name(self, reconciler):
        address = ResourceSpec(kind=ResourceKind.STATIC_ADDRESS, name="a", payload={"name": "a"})
        specs = [_provider("a"), address, _mapping("a")]
        reconciler.reconcile = AsyncMock(side_effect=_outcomes({
            (ResourceKind.OIDC_PROVIDER, "a"): ReconcileState.CREATED,
            (ResourceKind.STATIC_ADDRESS, "a"): ReconcileState.FAILED_TERMINAL,
            (ResourceKind.IDENTITY_MAPPING, "a"): ReconcileState.CREATED,
        }))

        summary = await BatchReconciler(reconciler).run(specs)

        assert reconciler.reconcile.await_count == 3
        assert summary.results[2].state is ReconcileState.CREATED
        assert not summary.results[2].skipped

    async def test_child_without_parent_in_batch_is_attempted(self, reconciler):
        reconciler.reconcile = AsyncMock(side_effect=_outcomes({
            (ResourceKind.IDENTITY_MAPPING, "a"): ReconcileState.CREATED,
        }))

        summary = await BatchReconciler(reconciler).run([_mapping("a")])

        reconciler.reconcile.assert_awaited_once()
        assert summary.ok

    async def test_unexpected_exception_does_not_stop_batch(self, reconciler):
        async def _reconcile(spec):
            if spec.name == "a":
                raise RuntimeError("provider exploded")
            return ReconciliationResult(spec=spec, state=ReconcileState.CREATED, attempts=1)
        reconciler.reconcile = AsyncMock(side_effect=_reconcile)

        summary = await BatchReconciler(reconciler).run([_provider("a"), _provider("b")])

        assert summary.results[0].state is ReconcileState.FAILED_TERMINAL
        assert "provider exploded" in summary.results[0].last_error.message
        assert summary.results[1].state is ReconcileState.CREATED


class TestBatchSummary:
    """Test summary counting."""

    def test_empty_summary_is_ok(self):
        summary = BatchSummary()
        assert summary.ok
        assert summary.counts() == {
            "created": 0, "already_exists": 0, "failed": 0, "skipped": 0, "total": 0,
        }
