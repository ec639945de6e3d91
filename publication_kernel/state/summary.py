"""
State Summary Resolver — aggregate publication state of a document.

Behavioral Contract:
- Scans the handle's variants once
- Reads the state-summary property directly for plain handles
- Resolves live/modified relative to the active branch for branch-capable handles
- Never raises: any lookup failure is logged and yields the zero ResolvedState
"""

import logging
from typing import Optional, Tuple

from publication_kernel.backend.protocols import (
    BranchView,
    BranchViewProvider,
    VariantReader,
)
from publication_kernel.models.variants import (
    MASTER_BRANCH,
    ResolvedState,
    StateSummary,
    Variant,
    VariantLabel,
    VariantSet,
)

logger = logging.getLogger(__name__)


class BranchViewUnavailable(LookupError):
    """A branch-capable handle was resolved without a branch view."""
    pass


def _scan(variant_set: VariantSet) -> Tuple[Optional[Variant], Optional[Variant]]:
    """Return (state-summary variant, draft variant) in a single pass."""
    summary_variant = None
    draft = None
    for variant in variant_set.variants:
        if variant.label == VariantLabel.DRAFT:
            draft = variant
        elif summary_variant is None and variant.label in (
            VariantLabel.UNPUBLISHED, VariantLabel.PUBLISHED,
        ):
            summary_variant = variant
    return summary_variant, draft


def _branch_summary(
    variant_set: VariantSet,
    branch_id: str,
    branch_view: Optional[BranchView],
) -> StateSummary:
    if branch_view is None:
        raise BranchViewUnavailable(
            f"Document {variant_set.document_id} is branch capable "
            f"but no branch view was supplied"
        )
    if not branch_view.is_live_available(branch_id):
        return StateSummary.NEW
    has_unpublished = variant_set.find(VariantLabel.UNPUBLISHED) is not None
    if has_unpublished and branch_view.is_modified(branch_id):
        return StateSummary.CHANGED
    return StateSummary.LIVE


def summary_value(
    variant_set: VariantSet,
    active_branch_id: str = MASTER_BRANCH,
    branch_view: Optional[BranchView] = None,
) -> StateSummary:
    """Classified state-summary value. Raises on lookup errors."""
    if variant_set.branch_capable:
        return _branch_summary(variant_set, active_branch_id, branch_view)
    summary_variant, _ = _scan(variant_set)
    if summary_variant is None:
        return StateSummary.UNKNOWN
    return StateSummary.classify(summary_variant.state_summary)


def resolve(
    variant_set: VariantSet,
    active_branch_id: str = MASTER_BRANCH,
    branch_view: Optional[BranchView] = None,
) -> ResolvedState:
    """Compute the resolved state of a variant set. Never raises."""
    try:
        _, draft = _scan(variant_set)
        draft_changes = draft is not None and draft.retainable
        summary = summary_value(variant_set, active_branch_id, branch_view)
        return ResolvedState.from_summary(summary, draft_changes)
    except Exception:
        logger.exception(
            "Failed to resolve state summary for document %s on branch %s",
            getattr(variant_set, "document_id", "<unknown>"), active_branch_id,
        )
        return ResolvedState()


class StateSummaryResolver:
    """Resolves documents through the variant and branch collaborators."""

    def __init__(
        self,
        variant_reader: VariantReader,
        branch_views: Optional[BranchViewProvider] = None,
    ):
        self.variant_reader = variant_reader
        self.branch_views = branch_views

    def resolve(
        self,
        variant_set: VariantSet,
        active_branch_id: str = MASTER_BRANCH,
        branch_view: Optional[BranchView] = None,
    ) -> ResolvedState:
        return resolve(variant_set, active_branch_id, branch_view)

    def resolve_document(
        self,
        document_id: str,
        branch_id: str = MASTER_BRANCH,
    ) -> ResolvedState:
        """Read a document's variants and resolve them. Never raises."""
        try:
            variant_set = self.variant_reader.get_variants(document_id)
            branch_view = None
            if variant_set.branch_capable and self.branch_views is not None:
                branch_view = self.branch_views.get_branch_view(document_id)
        except Exception:
            logger.exception("Failed to read variants of document %s", document_id)
            return ResolvedState()
        return resolve(variant_set, branch_id, branch_view)

    def summary_of(
        self,
        document_id: str,
        branch_id: str = MASTER_BRANCH,
    ) -> StateSummary:
        """Classified summary for display; UNKNOWN when it cannot be read."""
        try:
            variant_set = self.variant_reader.get_variants(document_id)
            branch_view = None
            if variant_set.branch_capable and self.branch_views is not None:
                branch_view = self.branch_views.get_branch_view(document_id)
            return summary_value(variant_set, branch_id, branch_view)
        except Exception as e:
            logger.warning("Unable to ascertain state summary of %s: %s", document_id, e)
            return StateSummary.UNKNOWN
