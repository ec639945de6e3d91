"""Publication Kernel data models."""

from publication_kernel.models.bulk import BulkAction, BulkFailure, BulkReport
from publication_kernel.models.config import KernelConfig
from publication_kernel.models.hints import (
    BoolHint,
    Hint,
    NestedHint,
    StrHint,
    UnknownHint,
    decode_hints,
)
from publication_kernel.models.requests import (
    RequestState,
    RequestTransition,
    RequestType,
    WorkflowRequest,
)
from publication_kernel.models.variants import (
    MASTER_BRANCH,
    ResolvedState,
    StateSummary,
    Variant,
    VariantLabel,
    VariantSet,
)
from publication_kernel.models.visibility import (
    Decision,
    DocumentAction,
    GateMode,
    PublicationAction,
)

__all__ = [
    "BoolHint",
    "BulkAction",
    "BulkFailure",
    "BulkReport",
    "Decision",
    "DocumentAction",
    "GateMode",
    "Hint",
    "KernelConfig",
    "MASTER_BRANCH",
    "NestedHint",
    "PublicationAction",
    "RequestState",
    "RequestTransition",
    "RequestType",
    "ResolvedState",
    "StateSummary",
    "StrHint",
    "UnknownHint",
    "Variant",
    "VariantLabel",
    "VariantSet",
    "WorkflowRequest",
    "decode_hints",
]
