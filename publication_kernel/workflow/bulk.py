"""
Bulk Workflow Executor — publish-all / depublish-all over a set of documents.

Behavioral Contract:
- Processes documents strictly sequentially: resolve -> reconcile pending
  requests -> re-resolve -> execute, with a refresh boundary after each
- Re-checks eligibility at execution time; selection-time eligibility is not trusted
- Isolates failures per document; a bad document never aborts the batch
- Honors a caller-supplied stop event; completed documents are not rolled back
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol

from publication_kernel.backend.protocols import HintsProvider, WorkflowInvoker
from publication_kernel.gating.hints_gate import fetch_hints, is_enabled
from publication_kernel.models.bulk import BulkAction, BulkFailure, BulkReport
from publication_kernel.models.config import KernelConfig
from publication_kernel.models.hints import Hint, ensure_decoded
from publication_kernel.models.requests import RequestTransition
from publication_kernel.workflow.ledger import RequestLedger

logger = logging.getLogger(__name__)


class StopSignal(Protocol):
    def is_set(self) -> bool: ...


def _no_refresh(document_id: str) -> None:
    pass


class BulkWorkflowExecutor:
    """Runs a bulk action over document ids, one full cycle at a time."""

    def __init__(
        self,
        hints_provider: HintsProvider,
        invoker: WorkflowInvoker,
        config: Optional[KernelConfig] = None,
        on_refresh: Optional[Callable[[str], None]] = None,
    ):
        self.hints_provider = hints_provider
        self.invoker = invoker
        self.config = config or KernelConfig()
        self.on_refresh = on_refresh or _no_refresh
        self.ledger = RequestLedger(invoker)

    def select_candidates(
        self,
        document_ids: Iterable[str],
        action: BulkAction,
        branch_id: Optional[str] = None,
    ) -> List[str]:
        """Ids whose hints currently allow the action."""
        branch = branch_id or self.config.default_branch_id
        action = BulkAction(action)
        return [
            document_id
            for document_id in document_ids
            if is_enabled(fetch_hints(self.hints_provider, document_id, branch), action.value)
        ]

    def run(
        self,
        document_ids: Iterable[str],
        action: BulkAction,
        at: Optional[datetime] = None,
        branch_id: Optional[str] = None,
        stop_event: Optional[StopSignal] = None,
    ) -> BulkReport:
        """Execute the bulk action. Always returns a report."""
        action = BulkAction(action)
        branch = branch_id or self.config.default_branch_id
        ids = list(document_ids)
        report = BulkReport(action=action)
        logger.info("Starting bulk %s of %d documents", action.value, len(ids))

        for document_id in ids:
            if stop_event is not None and stop_event.is_set():
                report.aborted = True
                logger.info(
                    "Bulk %s stopped before document %s", action.value, document_id
                )
                break
            try:
                if self._process(document_id, action, at, branch):
                    report.processed += 1
                else:
                    report.skipped.append(document_id)
            except Exception as e:
                logger.warning(
                    "Bulk %s failed for document %s: %s", action.value, document_id, e
                )
                report.failures.append(BulkFailure(
                    document_id=document_id,
                    error=str(e),
                    error_type=type(e).__name__,
                ))
            finally:
                self._refresh(document_id, action, report)

        logger.info(
            "Finished bulk %s: %d processed, %d failed, %d skipped",
            action.value, report.processed, len(report.failures), len(report.skipped),
        )
        return report

    def _refresh(self, document_id: str, action: BulkAction, report: BulkReport) -> None:
        try:
            self.on_refresh(document_id)
        except Exception as e:
            logger.warning(
                "Bulk %s refresh failed for document %s: %s", action.value, document_id, e
            )
            if document_id not in report.failed_ids:
                report.failures.append(BulkFailure(
                    document_id=document_id,
                    error=str(e),
                    error_type=type(e).__name__,
                ))

    def _get_hints(self, document_id: str, branch_id: str) -> Dict[str, Hint]:
        # lookup failures propagate here: they are per-item failures
        return ensure_decoded(self.hints_provider.get_hints(document_id, branch_id))

    def _process(
        self,
        document_id: str,
        action: BulkAction,
        at: Optional[datetime],
        branch_id: str,
    ) -> bool:
        hints = self._get_hints(document_id, branch_id)

        self._reconcile_requests(document_id, hints)
        hints = self._get_hints(document_id, branch_id)

        if not is_enabled(hints, action.value):
            logger.debug(
                "Document %s no longer allows %s; skipping", document_id, action.value
            )
            return False

        if action == BulkAction.PUBLISH:
            self.invoker.publish(document_id, at)
        else:
            self.invoker.depublish(document_id, at)
        logger.debug("Document %s: %s done", document_id, action.value)
        return True

    def _reconcile_requests(self, document_id: str, hints: Any) -> int:
        """Cancel or reject every request that would block the action."""
        resolved = 0
        for request in self.ledger.list(hints):
            if self.ledger.is_legal(hints, request.id, RequestTransition.CANCEL):
                self.ledger.cancel(hints, request.id)
                resolved += 1
            elif self.ledger.is_legal(hints, request.id, RequestTransition.REJECT):
                self.ledger.reject(hints, request.id, self.config.bulk_reject_reason)
                resolved += 1
            else:
                logger.debug(
                    "Request %s on document %s cannot be resolved", request.id, document_id
                )
        return resolved
