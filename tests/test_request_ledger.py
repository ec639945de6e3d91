"""Tests for the Request Ledger."""

from datetime import datetime

import pytest

from publication_kernel.models.requests import (
    RequestState,
    RequestTransition,
    RequestType,
)
from publication_kernel.models.visibility import Decision
from publication_kernel.workflow.ledger import (
    InvalidTransitionError,
    RequestLedger,
    RequestLedgerError,
    UnknownRequestError,
)


class _RecordingInvoker:
    def __init__(self):
        self.calls = []

    def accept_request(self, request_id):
        self.calls.append(("accept", request_id))

    def reject_request(self, request_id, reason):
        self.calls.append(("reject", request_id, reason))

    def cancel_request(self, request_id):
        self.calls.append(("cancel", request_id))


def _make_hints(**requests) -> dict:
    return {"publish": False, "requests": requests}


class TestListing:
    def setup_method(self):
        self.ledger = RequestLedger()

    def test_lists_requests_in_order(self):
        hints = _make_hints(
            req_1={"type": "publish", "state": "pending"},
            req_2={"type": "scheduleddepublish", "state": "scheduled",
                   "schedule": "2024-06-01T08:00:00"},
        )
        requests = self.ledger.list(hints)
        assert [r.id for r in requests] == ["req_1", "req_2"]
        assert requests[0].type == RequestType.PUBLISH
        assert requests[0].state == RequestState.PENDING
        assert requests[1].type == RequestType.SCHEDULED_DEPUBLISH
        assert requests[1].schedule == datetime(2024, 6, 1, 8, 0)

    def test_datetime_schedule(self):
        at = datetime(2024, 6, 1, 8, 0)
        hints = _make_hints(req_1={"type": "scheduledpublish", "schedule": at})
        assert self.ledger.get(hints, "req_1").schedule == at

    def test_unparseable_schedule_is_ignored(self):
        hints = _make_hints(req_1={"type": "publish", "schedule": "next tuesday"})
        assert self.ledger.get(hints, "req_1").schedule is None

    def test_no_requests(self):
        assert self.ledger.list({"publish": True}) == []
        assert self.ledger.list({"requests": "none"}) == []
        assert self.ledger.list(None) == []

    def test_non_mapping_entries_skipped(self):
        hints = _make_hints(req_1={"type": "publish"}, req_2=True)
        assert [r.id for r in self.ledger.list(hints)] == ["req_1"]

    def test_unknown_state_and_type(self):
        hints = _make_hints(req_1={"type": "archive", "state": "limbo"})
        request = self.ledger.get(hints, "req_1")
        assert request.type == RequestType.UNKNOWN
        assert request.state == RequestState.UNKNOWN

    def test_rejected_type_encoding(self):
        hints = _make_hints(req_1={"type": "rejected", "reason": "typo"})
        assert self.ledger.get(hints, "req_1").state == RequestState.REJECTED

    def test_rejection_reason_by_id(self):
        hints = _make_hints(req_1={"type": "publish", "state": "rejected", "reason": "typo"})
        assert self.ledger.rejection_reason(hints, "req_1") == "typo"

    def test_get_unknown_request(self):
        with pytest.raises(UnknownRequestError):
            self.ledger.get(_make_hints(), "req_404")


class TestGating:
    def setup_method(self):
        self.ledger = RequestLedger()

    def test_primary_keys(self):
        hints = _make_hints(req_1={
            "type": "publish", "state": "pending",
            "acceptRequest": True, "rejectRequest": False,
        })
        assert self.ledger.transitions(hints, "req_1") == {
            RequestTransition.ACCEPT: Decision.ENABLED,
            RequestTransition.REJECT: Decision.DISABLED,
            RequestTransition.CANCEL: Decision.HIDDEN,
        }

    def test_alias_keys(self):
        hints = _make_hints(req_1={"accept": True, "reject": True, "cancel": False})
        assert self.ledger.is_legal(hints, "req_1", RequestTransition.ACCEPT)
        assert self.ledger.is_legal(hints, "req_1", RequestTransition.REJECT)
        assert not self.ledger.is_legal(hints, "req_1", RequestTransition.CANCEL)

    def test_primary_key_takes_precedence_over_alias(self):
        hints = _make_hints(req_1={"acceptRequest": False, "accept": True})
        assert not self.ledger.is_legal(hints, "req_1", RequestTransition.ACCEPT)

    @pytest.mark.parametrize("entry", [{}, {"acceptRequest": False, "rejectRequest": False,
                                            "cancelRequest": False}])
    def test_never_legal_when_absent_or_false(self, entry):
        hints = _make_hints(req_1=entry)
        for transition in RequestTransition:
            assert not self.ledger.is_legal(hints, "req_1", transition)

    def test_unknown_request_is_not_legal(self):
        assert not self.ledger.is_legal(_make_hints(), "req_404", RequestTransition.CANCEL)

    def test_unknown_state_still_cancelable(self):
        hints = _make_hints(req_1={"state": "limbo", "cancelRequest": True})
        assert self.ledger.is_legal(hints, "req_1", RequestTransition.CANCEL)

    def test_cancel_label(self):
        hints = _make_hints(
            req_1={"state": "rejected", "cancelRequest": True},
            req_2={"state": "pending", "cancelRequest": True},
        )
        assert self.ledger.cancel_label(self.ledger.get(hints, "req_1")) == "drop"
        assert self.ledger.cancel_label(self.ledger.get(hints, "req_2")) == "cancel"


class TestTransitions:
    def setup_method(self):
        self.invoker = _RecordingInvoker()
        self.ledger = RequestLedger(self.invoker)
        self.hints = _make_hints(req_1={
            "type": "publish", "state": "pending",
            "acceptRequest": True, "rejectRequest": True, "cancelRequest": False,
        })

    def test_accept(self):
        request = self.ledger.accept(self.hints, "req_1")
        assert request.id == "req_1"
        assert self.invoker.calls == [("accept", "req_1")]

    def test_reject_with_reason(self):
        self.ledger.reject(self.hints, "req_1", "Needs a better title")
        assert self.invoker.calls == [("reject", "req_1", "Needs a better title")]

    @pytest.mark.parametrize("reason", ["", "   ", None])
    def test_reject_requires_reason(self, reason):
        with pytest.raises(InvalidTransitionError):
            self.ledger.reject(self.hints, "req_1", reason)
        assert self.invoker.calls == []

    def test_forbidden_cancel_fails_fast(self):
        with pytest.raises(InvalidTransitionError):
            self.ledger.cancel(self.hints, "req_1")
        assert self.invoker.calls == []

    def test_unknown_request(self):
        with pytest.raises(UnknownRequestError):
            self.ledger.accept(self.hints, "req_404")
        assert self.invoker.calls == []

    def test_drop_rejected_request(self):
        hints = _make_hints(req_1={"type": "publish", "state": "rejected",
                                   "reason": "typo", "cancelRequest": True})
        request = self.ledger.cancel(hints, "req_1")
        assert request.rejected
        assert self.invoker.calls == [("cancel", "req_1")]

    def test_missing_invoker(self):
        ledger = RequestLedger()
        with pytest.raises(RequestLedgerError):
            ledger.accept(self.hints, "req_1")

    def test_error_hierarchy(self):
        assert issubclass(InvalidTransitionError, RequestLedgerError)
        assert issubclass(UnknownRequestError, RequestLedgerError)
