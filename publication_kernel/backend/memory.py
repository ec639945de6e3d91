"""
In-Memory Workflow Backend — document records behind the collaborator protocols.

Implements HintsProvider, VariantReader, BranchViewProvider and
WorkflowInvoker over a dict of DocumentRecords. Used by the API and the
tests; production would back these with the content repository.
"""

import copy
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from pydantic import BaseModel

from publication_kernel.models.variants import (
    MASTER_BRANCH,
    StateSummary,
    Variant,
    VariantLabel,
    VariantSet,
)

logger = logging.getLogger(__name__)

REQUESTS_KEY = "requests"


class DocumentNotFoundError(LookupError):
    """No record exists for the document or request id."""
    pass


class WorkflowInvocationError(Exception):
    """Raised when a workflow operation fails on the backend."""
    pass


class BranchStatus(BaseModel):
    live_available: bool = False
    modified: bool = False


class DocumentRecord(BaseModel):
    """Everything the backend knows about one document handle."""

    document_id: str
    hints: Dict[str, Any] = {}                      # served for every branch...
    branch_hints: Dict[str, Dict[str, Any]] = {}    # ...unless overridden here
    branch_capable: bool = False
    variants: List[Variant] = []
    branches: Dict[str, BranchStatus] = {}


class RecordBranchView:
    """BranchView over a single document record."""

    def __init__(self, record: DocumentRecord):
        self._record = record

    def _status(self, branch_id: str) -> BranchStatus:
        return self._record.branches.get(branch_id, BranchStatus())

    def is_live_available(self, branch_id: str) -> bool:
        return self._status(branch_id).live_available

    def is_modified(self, branch_id: str) -> bool:
        return self._status(branch_id).modified


class InMemoryWorkflowBackend:
    """
    In-memory document store and workflow invoker.

    Every invocation is appended to `calls`. Failures can be injected per
    document and operation with `register_failure`.
    """

    def __init__(self):
        self._documents: Dict[str, DocumentRecord] = {}
        self._failures: Dict[Tuple[str, str], str] = {}
        self.calls: List[dict] = []

    # --- Records ---

    def upsert_document(self, record: DocumentRecord) -> None:
        self._documents[record.document_id] = record

    def get_document(self, document_id: str) -> Optional[DocumentRecord]:
        return self._documents.get(document_id)

    def remove_document(self, document_id: str) -> bool:
        return self._documents.pop(document_id, None) is not None

    def document_ids(self) -> List[str]:
        return list(self._documents.keys())

    def _require(self, document_id: str) -> DocumentRecord:
        record = self._documents.get(document_id)
        if record is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return record

    def register_failure(self, document_id: str, operation: str, message: str) -> None:
        """Make `operation` ("get_hints", "publish", ...) fail for a document."""
        self._failures[(document_id, operation)] = message

    def clear_failures(self) -> None:
        self._failures.clear()

    def _check_failure(self, document_id: str, operation: str) -> None:
        message = self._failures.get((document_id, operation))
        if message is not None:
            raise WorkflowInvocationError(message)

    # --- HintsProvider / VariantReader / BranchViewProvider ---

    def get_hints(self, document_id: str, branch_id: str) -> Dict[str, Any]:
        self._check_failure(document_id, "get_hints")
        record = self._require(document_id)
        hints = record.branch_hints.get(branch_id, record.hints)
        return copy.deepcopy(hints)

    def get_variants(self, document_id: str) -> VariantSet:
        self._check_failure(document_id, "get_variants")
        record = self._require(document_id)
        return VariantSet(
            document_id=record.document_id,
            branch_capable=record.branch_capable,
            variants=[v.model_copy() for v in record.variants],
        )

    def get_branch_view(self, document_id: str) -> RecordBranchView:
        return RecordBranchView(self._require(document_id))

    # --- WorkflowInvoker ---

    def publish(self, document_id: str, at: Optional[datetime] = None) -> None:
        self._invoke(document_id, "publish", at)

    def depublish(self, document_id: str, at: Optional[datetime] = None) -> None:
        self._invoke(document_id, "depublish", at)

    def accept_request(self, request_id: str) -> None:
        record, requests = self._find_request(request_id)
        self._check_failure(record.document_id, "accept_request")
        self._record_call("accept_request", record.document_id, request_id=request_id)
        request = requests.pop(request_id)

        request_type = request.get("type")
        if request_type == "publish":
            self._apply_publication(record, live=True)
        elif request_type == "depublish":
            self._apply_publication(record, live=False)

    def reject_request(self, request_id: str, reason: str) -> None:
        record, requests = self._find_request(request_id)
        self._check_failure(record.document_id, "reject_request")
        self._record_call(
            "reject_request", record.document_id, request_id=request_id, reason=reason
        )
        request = requests[request_id]
        request["state"] = "rejected"
        request["reason"] = reason
        request.pop("acceptRequest", None)
        request.pop("rejectRequest", None)
        request["cancelRequest"] = True

    def cancel_request(self, request_id: str) -> None:
        record, requests = self._find_request(request_id)
        self._check_failure(record.document_id, "cancel_request")
        self._record_call("cancel_request", record.document_id, request_id=request_id)
        del requests[request_id]

    # --- Internals ---

    def _record_call(self, operation: str, document_id: str, **details: Any) -> None:
        self.calls.append({"operation": operation, "document_id": document_id, **details})

    def _find_request(self, request_id: str) -> Tuple[DocumentRecord, dict]:
        """Return the record and the requests map (master or branch) holding the id."""
        for record in self._documents.values():
            for hints in [record.hints, *record.branch_hints.values()]:
                requests = hints.get(REQUESTS_KEY)
                if isinstance(requests, dict) and request_id in requests:
                    return record, requests
        raise DocumentNotFoundError(f"Request {request_id} not found")

    def _invoke(self, document_id: str, operation: str, at: Optional[datetime]) -> None:
        self._check_failure(document_id, operation)
        record = self._require(document_id)
        self._record_call(operation, document_id, at=at.isoformat() if at else None)

        if at is not None:
            request_id = f"req_{uuid4().hex[:12]}"
            record.hints.setdefault(REQUESTS_KEY, {})[request_id] = {
                "type": f"scheduled{operation}",
                "state": "scheduled",
                "schedule": at.isoformat(),
                "cancelRequest": True,
            }
            logger.debug("Scheduled %s of %s at %s", operation, document_id, at)
            return

        self._apply_publication(record, live=operation == "publish")

    def _apply_publication(self, record: DocumentRecord, live: bool) -> None:
        summary = StateSummary.LIVE if live else StateSummary.NEW
        for variant in record.variants:
            if variant.label in (VariantLabel.UNPUBLISHED, VariantLabel.PUBLISHED):
                variant.state_summary = summary.value
        if record.branch_capable:
            status = record.branches.setdefault(MASTER_BRANCH, BranchStatus())
            status.live_available = live
            status.modified = False
