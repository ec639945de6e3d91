"""
Request Ledger — pending workflow requests and their legal transitions.

Behavioral Contract:
- Projects the "requests" hint into WorkflowRequest values; never constructs requests
- Gates accept/reject/cancel through the request's own nested hints
- Rejects illegal transitions before any collaborator call (no partial mutation)
- Delegates the actual mutation to the WorkflowInvoker
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from publication_kernel.backend.protocols import WorkflowInvoker
from publication_kernel.gating.hints_gate import resolve
from publication_kernel.models.hints import (
    Hint,
    NestedHint,
    StrHint,
    UnknownHint,
    ensure_decoded,
)
from publication_kernel.models.requests import (
    RequestState,
    RequestTransition,
    RequestType,
    WorkflowRequest,
)
from publication_kernel.models.visibility import Decision

logger = logging.getLogger(__name__)

REQUESTS_KEY = "requests"

# transition -> (primary hint key, alias)
TRANSITION_KEYS: Dict[RequestTransition, Tuple[str, str]] = {
    RequestTransition.ACCEPT: ("acceptRequest", "accept"),
    RequestTransition.REJECT: ("rejectRequest", "reject"),
    RequestTransition.CANCEL: ("cancelRequest", "cancel"),
}


class RequestLedgerError(Exception):
    """Base class for request ledger errors."""
    pass


class UnknownRequestError(RequestLedgerError):
    """The request id is not present in the document's hints."""
    pass


class InvalidTransitionError(RequestLedgerError):
    """The transition is not legal for the request in its current state."""
    pass


def _string_value(hint: Optional[Hint]) -> Optional[str]:
    if isinstance(hint, StrHint):
        return hint.value
    return None


def _classify_type(value: Optional[str]) -> RequestType:
    try:
        return RequestType(value)
    except ValueError:
        return RequestType.UNKNOWN


def _classify_state(value: Optional[str], request_type: Optional[str]) -> RequestState:
    if value is None and request_type == "rejected":
        # older backends encode a rejected request through its type
        return RequestState.REJECTED
    try:
        return RequestState(value)
    except ValueError:
        return RequestState.UNKNOWN


def _parse_schedule(hint: Optional[Hint]) -> Optional[datetime]:
    if isinstance(hint, UnknownHint) and isinstance(hint.value, datetime):
        return hint.value
    if isinstance(hint, StrHint):
        try:
            return datetime.fromisoformat(hint.value)
        except ValueError:
            return None
    return None


def _to_request(request_id: str, entries: Dict[str, Hint]) -> WorkflowRequest:
    raw_type = _string_value(entries.get("type"))
    return WorkflowRequest(
        id=request_id,
        type=_classify_type(raw_type),
        state=_classify_state(_string_value(entries.get("state")), raw_type),
        schedule=_parse_schedule(entries.get("schedule")),
        reason=_string_value(entries.get("reason")),
    )


class RequestLedger:
    """Read-only projection of a document's requests plus transition gating."""

    def __init__(self, invoker: Optional[WorkflowInvoker] = None):
        self.invoker = invoker

    def _entries(self, hints: Any) -> Dict[str, Dict[str, Hint]]:
        requests = ensure_decoded(hints).get(REQUESTS_KEY)
        if not isinstance(requests, NestedHint):
            return {}
        return {
            request_id: hint.entries
            for request_id, hint in requests.entries.items()
            if isinstance(hint, NestedHint)
        }

    def list(self, hints: Any) -> List[WorkflowRequest]:
        return [
            _to_request(request_id, entries)
            for request_id, entries in self._entries(hints).items()
        ]

    def get(self, hints: Any, request_id: str) -> WorkflowRequest:
        entries = self._entries(hints).get(request_id)
        if entries is None:
            raise UnknownRequestError(f"Request {request_id} not found")
        return _to_request(request_id, entries)

    def _decision(
        self, entries: Dict[str, Hint], transition: RequestTransition
    ) -> Decision:
        primary, alias = TRANSITION_KEYS[transition]
        if primary in entries:
            return resolve(entries, primary)
        return resolve(entries, alias)

    def transitions(
        self, hints: Any, request_id: str
    ) -> Dict[RequestTransition, Decision]:
        entries = self._entries(hints).get(request_id)
        if entries is None:
            raise UnknownRequestError(f"Request {request_id} not found")
        return {t: self._decision(entries, t) for t in RequestTransition}

    def is_legal(
        self, hints: Any, request_id: str, transition: RequestTransition
    ) -> bool:
        entries = self._entries(hints).get(request_id)
        if entries is None:
            return False
        return self._decision(entries, transition) == Decision.ENABLED

    def cancel_label(self, request: WorkflowRequest) -> str:
        """Canceling a rejected request reads as dropping it."""
        return "drop" if request.rejected else "cancel"

    def rejection_reason(self, hints: Any, request_id: str) -> Optional[str]:
        return self.get(hints, request_id).reason

    # --- Transitions ---

    def _require(
        self, hints: Any, request_id: str, transition: RequestTransition
    ) -> WorkflowRequest:
        request = self.get(hints, request_id)
        if not self.is_legal(hints, request_id, transition):
            raise InvalidTransitionError(
                f"Cannot {transition.value} request {request_id}: "
                f"not permitted in state {request.state.value}"
            )
        if self.invoker is None:
            raise RequestLedgerError("No workflow invoker configured")
        return request

    def accept(self, hints: Any, request_id: str) -> WorkflowRequest:
        request = self._require(hints, request_id, RequestTransition.ACCEPT)
        self.invoker.accept_request(request_id)
        logger.info("Accepted %s request %s", request.type.value, request_id)
        return request

    def reject(self, hints: Any, request_id: str, reason: str) -> WorkflowRequest:
        if not reason or not reason.strip():
            raise InvalidTransitionError(
                f"Cannot reject request {request_id}: a reason is required"
            )
        request = self._require(hints, request_id, RequestTransition.REJECT)
        self.invoker.reject_request(request_id, reason)
        logger.info("Rejected %s request %s", request.type.value, request_id)
        return request

    def cancel(self, hints: Any, request_id: str) -> WorkflowRequest:
        request = self._require(hints, request_id, RequestTransition.CANCEL)
        self.invoker.cancel_request(request_id)
        logger.info(
            "%s %s request %s",
            "Dropped" if request.rejected else "Canceled",
            request.type.value, request_id,
        )
        return request
