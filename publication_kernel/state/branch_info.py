"""Branch Info Formatter — "<branch> (<live|offline>[, <changes>])"."""

from typing import Dict, Optional

from publication_kernel.backend.protocols import LabelResolver
from publication_kernel.models.config import KernelConfig
from publication_kernel.models.variants import MASTER_BRANCH, ResolvedState


class StaticLabelResolver:
    """Dict-backed label lookup; unknown keys resolve to themselves."""

    def __init__(self, labels: Optional[Dict[str, str]] = None):
        self._labels = dict(labels) if labels is not None else dict(KernelConfig().labels)

    def lookup(self, key: str) -> str:
        return self._labels.get(key, key)


class BranchInfoFormatter:
    """
    Renders the status of a document on a branch.

    Exactly one suffix is surfaced: draft changes win over unpublished
    changes, and unpublished changes are only reported for live content.
    """

    def __init__(self, labels: Optional[LabelResolver] = None):
        self.labels = labels or StaticLabelResolver()

    def format(self, branch_label: str, state: ResolvedState) -> str:
        word = self.labels.lookup("live" if state.live else "offline")
        if state.draft_changes:
            suffix = f"({word}, {self.labels.lookup('draft-changes')})"
        elif state.live and state.unpublished_changes:
            suffix = f"({word}, {self.labels.lookup('unpublished-changes')})"
        else:
            suffix = f"({word})"
        return f"{branch_label} {suffix}"

    def branch_label(self, branch_id: str, branch_name: Optional[str] = None) -> str:
        if branch_id == MASTER_BRANCH:
            return self.labels.lookup("core")
        return branch_name or branch_id

    def describe(
        self,
        branch_id: str,
        state: ResolvedState,
        branch_name: Optional[str] = None,
    ) -> str:
        return self.format(self.branch_label(branch_id, branch_name), state)
