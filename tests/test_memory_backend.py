"""Tests for the In-Memory Workflow Backend."""

from datetime import datetime

import pytest

from publication_kernel.backend.memory import (
    BranchStatus,
    DocumentNotFoundError,
    DocumentRecord,
    InMemoryWorkflowBackend,
    WorkflowInvocationError,
)
from publication_kernel.models.variants import MASTER_BRANCH, Variant, VariantLabel
from publication_kernel.state.summary import StateSummaryResolver
from publication_kernel.workflow.ledger import RequestLedger


def _make_backend() -> InMemoryWorkflowBackend:
    backend = InMemoryWorkflowBackend()
    backend.upsert_document(DocumentRecord(
        document_id="doc_1",
        hints={
            "publish": True,
            "requests": {
                "req_1": {"type": "publish", "state": "pending",
                          "acceptRequest": True, "rejectRequest": True},
            },
        },
        variants=[
            Variant(label=VariantLabel.DRAFT, retainable=True),
            Variant(label=VariantLabel.UNPUBLISHED, state_summary="new"),
        ],
    ))
    return backend


class TestRecords:
    def test_hints_are_copies(self):
        backend = _make_backend()
        hints = backend.get_hints("doc_1", MASTER_BRANCH)
        hints["publish"] = False
        hints["requests"].clear()
        assert backend.get_hints("doc_1", MASTER_BRANCH)["publish"] is True
        assert "req_1" in backend.get_hints("doc_1", MASTER_BRANCH)["requests"]

    def test_variants(self):
        variants = _make_backend().get_variants("doc_1")
        assert variants.document_id == "doc_1"
        assert variants.find(VariantLabel.DRAFT).retainable is True

    def test_unknown_document(self):
        backend = InMemoryWorkflowBackend()
        with pytest.raises(DocumentNotFoundError):
            backend.get_hints("missing", MASTER_BRANCH)
        with pytest.raises(DocumentNotFoundError):
            backend.publish("missing")

    def test_remove_document(self):
        backend = _make_backend()
        assert backend.remove_document("doc_1") is True
        assert backend.remove_document("doc_1") is False
        assert backend.document_ids() == []

    def test_branch_view(self):
        backend = InMemoryWorkflowBackend()
        backend.upsert_document(DocumentRecord(
            document_id="doc_2",
            branch_capable=True,
            branches={"summer": BranchStatus(live_available=True, modified=True)},
        ))
        view = backend.get_branch_view("doc_2")
        assert view.is_live_available("summer") is True
        assert view.is_modified("summer") is True
        assert view.is_live_available(MASTER_BRANCH) is False


class TestInvoker:
    def test_publish_makes_document_live(self):
        backend = _make_backend()
        backend.publish("doc_1")
        resolver = StateSummaryResolver(backend, backend)
        state = resolver.resolve_document("doc_1")
        assert state.live is True
        assert backend.calls == [{"operation": "publish", "document_id": "doc_1", "at": None}]

    def test_scheduled_publish_creates_request(self):
        backend = _make_backend()
        at = datetime(2024, 7, 1, 6, 0)
        backend.publish("doc_1", at)

        requests = RequestLedger().list(backend.get_hints("doc_1", MASTER_BRANCH))
        scheduled = [r for r in requests if r.id != "req_1"]
        assert len(scheduled) == 1
        assert scheduled[0].schedule == at
        assert scheduled[0].state.value == "scheduled"
        assert scheduled[0].type.value == "scheduledpublish"

    def test_depublish_branch_capable(self):
        backend = InMemoryWorkflowBackend()
        backend.upsert_document(DocumentRecord(
            document_id="doc_2",
            branch_capable=True,
            variants=[Variant(label=VariantLabel.UNPUBLISHED)],
            branches={MASTER_BRANCH: BranchStatus(live_available=True, modified=True)},
        ))
        backend.depublish("doc_2")
        assert backend.get_branch_view("doc_2").is_live_available(MASTER_BRANCH) is False

    def test_accept_publish_request(self):
        backend = _make_backend()
        backend.accept_request("req_1")
        assert "req_1" not in backend.get_hints("doc_1", MASTER_BRANCH)["requests"]
        assert StateSummaryResolver(backend).resolve_document("doc_1").live is True

    def test_reject_keeps_reason_and_allows_drop(self):
        backend = _make_backend()
        backend.reject_request("req_1", "missing image credits")

        hints = backend.get_hints("doc_1", MASTER_BRANCH)
        ledger = RequestLedger(backend)
        request = ledger.get(hints, "req_1")
        assert request.rejected
        assert ledger.rejection_reason(hints, "req_1") == "missing image credits"
        assert ledger.cancel_label(request) == "drop"

        ledger.cancel(hints, "req_1")
        assert backend.get_hints("doc_1", MASTER_BRANCH)["requests"] == {}

    def test_branch_requests_are_found(self):
        backend = _make_backend()
        record = backend.get_document("doc_1")
        record.branch_hints["summer"] = {
            "requests": {
                "req_2": {"type": "depublish", "state": "pending",
                          "rejectRequest": True, "cancelRequest": True},
                "req_3": {"type": "depublish", "state": "pending", "cancelRequest": True},
            },
        }

        backend.reject_request("req_2", "wrong branch")
        backend.cancel_request("req_3")

        summer = backend.get_hints("doc_1", "summer")["requests"]
        assert list(summer) == ["req_2"]
        assert summer["req_2"]["state"] == "rejected"
        assert summer["req_2"]["reason"] == "wrong branch"
        assert "req_1" in backend.get_hints("doc_1", MASTER_BRANCH)["requests"]

    def test_unknown_request(self):
        with pytest.raises(DocumentNotFoundError):
            _make_backend().cancel_request("req_404")

    def test_injected_failure(self):
        backend = _make_backend()
        backend.register_failure("doc_1", "publish", "disk full")
        with pytest.raises(WorkflowInvocationError, match="disk full"):
            backend.publish("doc_1")
        assert backend.calls == []
        backend.clear_failures()
        backend.publish("doc_1")
        assert len(backend.calls) == 1
