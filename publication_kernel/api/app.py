"""
Publication Kernel API — FastAPI endpoints.

Exposes the kernel's functionality via a REST API for:
- Document record ingestion (in-memory backend)
- Action visibility and hints inspection
- Publication state and branch info
- Request listing and transitions
- Bulk publish/depublish
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from publication_kernel.backend.memory import (
    DocumentNotFoundError,
    DocumentRecord,
    InMemoryWorkflowBackend,
)
from publication_kernel.gating.hints_gate import fetch_hints, in_use_by
from publication_kernel.gating.visibility import ActionVisibilityMapper
from publication_kernel.models.bulk import BulkAction
from publication_kernel.models.config import KernelConfig
from publication_kernel.state.branch_info import BranchInfoFormatter, StaticLabelResolver
from publication_kernel.state.summary import StateSummaryResolver
from publication_kernel.workflow.bulk import BulkWorkflowExecutor
from publication_kernel.workflow.ledger import (
    InvalidTransitionError,
    RequestLedger,
    UnknownRequestError,
)


# --- Request/Response Models ---

class RejectRequestBody(BaseModel):
    reason: str


class BulkRequestBody(BaseModel):
    document_ids: List[str]
    action: BulkAction
    branch_id: Optional[str] = None
    at: Optional[datetime] = None


# --- Application Factory ---

def create_app(
    backend: Optional[InMemoryWorkflowBackend] = None,
    config: Optional[KernelConfig] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Publication Kernel API",
        description="Document publication state and authorization engine",
        version="0.1.0",
    )

    store = backend or InMemoryWorkflowBackend()
    app.state.backend = store
    app.state.config = config or KernelConfig()
    app.state.mapper = ActionVisibilityMapper()
    app.state.resolver = StateSummaryResolver(store, store)
    app.state.ledger = RequestLedger(store)

    def _config() -> KernelConfig:
        return app.state.config

    def _branch(branch: Optional[str]) -> str:
        return branch or _config().default_branch_id

    def _require_document(document_id: str) -> DocumentRecord:
        record = store.get_document(document_id)
        if record is None:
            raise HTTPException(404, "Document not found")
        return record

    def _hints(document_id: str, branch: Optional[str]) -> Dict[str, Any]:
        _require_document(document_id)
        return fetch_hints(store, document_id, _branch(branch))

    # === DOCUMENTS ===

    @app.put("/documents/{document_id}")
    def put_document(document_id: str, record: DocumentRecord):
        """Ingest a document record (for testing)."""
        if record.document_id != document_id:
            raise HTTPException(400, "Document id mismatch")
        store.upsert_document(record)
        return {"status": "ingested", "document_id": document_id}

    @app.get("/documents/{document_id}")
    def get_document(document_id: str):
        return _require_document(document_id).model_dump(mode="json")

    @app.get("/documents/{document_id}/hints")
    def get_hints(document_id: str, branch: Optional[str] = None):
        """Decoded hints, as the engine sees them."""
        hints = _hints(document_id, branch)
        return {key: hint.model_dump(mode="json") for key, hint in hints.items()}

    @app.get("/documents/{document_id}/visibility")
    def get_visibility(document_id: str, branch: Optional[str] = None):
        hints = _hints(document_id, branch)
        decisions = app.state.mapper.compute_all(hints)
        return {
            "components": {cid: d.value for cid, d in decisions.items()},
            "in_use_by": in_use_by(hints),
        }

    @app.get("/documents/{document_id}/state")
    def get_state(document_id: str, branch: Optional[str] = None):
        _require_document(document_id)
        branch_id = _branch(branch)
        state = app.state.resolver.resolve_document(document_id, branch_id)
        summary = app.state.resolver.summary_of(document_id, branch_id)
        return {"branch_id": branch_id, "summary": summary.value, **state.model_dump()}

    @app.get("/documents/{document_id}/branch-info")
    def get_branch_info(
        document_id: str,
        branch: Optional[str] = None,
        branch_name: Optional[str] = None,
    ):
        _require_document(document_id)
        branch_id = _branch(branch)
        state = app.state.resolver.resolve_document(document_id, branch_id)
        formatter = BranchInfoFormatter(StaticLabelResolver(_config().labels))
        return {
            "branch_id": branch_id,
            "info": formatter.describe(branch_id, state, branch_name),
        }

    # === REQUESTS ===

    @app.get("/documents/{document_id}/requests")
    def list_requests(document_id: str, branch: Optional[str] = None):
        hints = _hints(document_id, branch)
        ledger: RequestLedger = app.state.ledger
        labels = StaticLabelResolver(_config().labels)
        result = []
        for request in ledger.list(hints):
            transitions = ledger.transitions(hints, request.id)
            result.append({
                **request.model_dump(mode="json"),
                "transitions": {t.value: d.value for t, d in transitions.items()},
                "cancel_label": labels.lookup(ledger.cancel_label(request)),
            })
        return result

    def _transition(document_id: str, branch: Optional[str], perform):
        hints = _hints(document_id, branch)
        try:
            request = perform(hints)
        except UnknownRequestError as e:
            raise HTTPException(404, str(e))
        except InvalidTransitionError as e:
            raise HTTPException(409, str(e))
        except DocumentNotFoundError as e:
            raise HTTPException(404, str(e))
        return request.model_dump(mode="json")

    @app.post("/documents/{document_id}/requests/{request_id}/accept")
    def accept_request(document_id: str, request_id: str, branch: Optional[str] = None):
        return _transition(
            document_id, branch, lambda h: app.state.ledger.accept(h, request_id)
        )

    @app.post("/documents/{document_id}/requests/{request_id}/reject")
    def reject_request(
        document_id: str,
        request_id: str,
        body: RejectRequestBody,
        branch: Optional[str] = None,
    ):
        return _transition(
            document_id, branch,
            lambda h: app.state.ledger.reject(h, request_id, body.reason),
        )

    @app.post("/documents/{document_id}/requests/{request_id}/cancel")
    def cancel_request(document_id: str, request_id: str, branch: Optional[str] = None):
        return _transition(
            document_id, branch, lambda h: app.state.ledger.cancel(h, request_id)
        )

    # === BULK ===

    def _executor() -> BulkWorkflowExecutor:
        return BulkWorkflowExecutor(store, store, config=_config())

    @app.post("/bulk/candidates")
    def bulk_candidates(body: BulkRequestBody):
        """Documents eligible for the bulk action right now."""
        return {
            "action": body.action.value,
            "document_ids": _executor().select_candidates(
                body.document_ids, body.action, body.branch_id
            ),
        }

    @app.post("/bulk/run")
    def bulk_run(body: BulkRequestBody):
        report = _executor().run(
            body.document_ids, body.action, at=body.at, branch_id=body.branch_id
        )
        return report.model_dump(mode="json")

    # === CONFIG ===

    @app.get("/config")
    def get_config():
        return _config().model_dump()

    @app.put("/config")
    def update_config(new_config: KernelConfig):
        app.state.config = new_config
        return new_config.model_dump()

    return app


# Default application instance
app = create_app()
