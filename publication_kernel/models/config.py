"""Kernel configuration."""

from typing import Dict

from pydantic import BaseModel

from publication_kernel.models.variants import MASTER_BRANCH


def _default_labels() -> Dict[str, str]:
    return {
        "core": "Core",
        "live": "live",
        "offline": "offline",
        "draft-changes": "draft-changes",
        "unpublished-changes": "unpublished-changes",
        "cancel": "cancel",
        "drop": "drop",
    }


class KernelConfig(BaseModel):
    """Configuration for the publication kernel."""

    default_branch_id: str = MASTER_BRANCH
    bulk_reject_reason: str = "Rejected by bulk workflow operation"
    labels: Dict[str, str] = _default_labels()
