"""
Collaborator protocols — the kernel's only boundary.

Repository access, workflow execution, rendering and localization live
behind these. Every engine object receives its collaborators explicitly;
there is no ambient session.
"""

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol

from publication_kernel.models.variants import VariantSet


class HintsProvider(Protocol):
    """Source of the opaque hints map. May raise on repository errors."""

    def get_hints(self, document_id: str, branch_id: str) -> Mapping[str, Any]: ...


class VariantReader(Protocol):
    def get_variants(self, document_id: str) -> VariantSet: ...


class BranchView(Protocol):
    """Per-handle branch status. Only consulted for branch-capable handles."""

    def is_live_available(self, branch_id: str) -> bool: ...

    def is_modified(self, branch_id: str) -> bool: ...


class BranchViewProvider(Protocol):
    def get_branch_view(self, document_id: str) -> BranchView: ...


class WorkflowInvoker(Protocol):
    """Performs the actual state mutations. Failures are raised."""

    def publish(self, document_id: str, at: Optional[datetime] = None) -> None: ...

    def depublish(self, document_id: str, at: Optional[datetime] = None) -> None: ...

    def accept_request(self, request_id: str) -> None: ...

    def reject_request(self, request_id: str, reason: str) -> None: ...

    def cancel_request(self, request_id: str) -> None: ...


class LabelResolver(Protocol):
    def lookup(self, key: str) -> str: ...
