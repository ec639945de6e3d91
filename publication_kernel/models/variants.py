"""Document variants and the resolved publication state."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, model_validator

MASTER_BRANCH = "master"


class VariantLabel(str, Enum):
    DRAFT = "draft"
    UNPUBLISHED = "unpublished"
    PUBLISHED = "published"


class StateSummary(str, Enum):
    """Classified value of a variant's state-summary property."""
    NEW = "new"             # never published
    CHANGED = "changed"     # live, with unpublished changes
    LIVE = "live"           # live, unpublished == published
    UNKNOWN = "unknown"     # missing or unrecognized; treated as not live

    @classmethod
    def classify(cls, value: Optional[str]) -> "StateSummary":
        for member in (cls.NEW, cls.CHANGED, cls.LIVE):
            if value == member.value:
                return member
        return cls.UNKNOWN


class Variant(BaseModel):
    """One lifecycle copy of a document's content."""

    label: VariantLabel
    retainable: bool = False                # draft holds changes not yet in unpublished
    state_summary: Optional[str] = None     # raw property value, classified on read


class VariantSet(BaseModel):
    """
    Snapshot of a handle's variants.

    `branch_capable` is decided once when the snapshot is read; the
    resolver never re-tests the repository node type.
    """

    document_id: str
    branch_capable: bool = False
    variants: List[Variant] = []

    @model_validator(mode="after")
    def _one_variant_per_label(self) -> "VariantSet":
        labels = [v.label for v in self.variants]
        if len(labels) != len(set(labels)):
            raise ValueError(
                f"Document {self.document_id} has more than one variant per label"
            )
        return self

    def find(self, label: VariantLabel) -> Optional[Variant]:
        return next((v for v in self.variants if v.label == label), None)


class ResolvedState(BaseModel):
    """Aggregate publication state. Computed fresh, never persisted."""

    live: bool = False
    unpublished_changes: bool = False
    draft_changes: bool = False

    @classmethod
    def from_summary(cls, summary: StateSummary, draft_changes: bool) -> "ResolvedState":
        return cls(
            live=summary in (StateSummary.CHANGED, StateSummary.LIVE),
            unpublished_changes=summary == StateSummary.CHANGED,
            draft_changes=draft_changes,
        )
