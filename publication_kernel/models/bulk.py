"""Bulk workflow report."""

from enum import Enum
from typing import List

from pydantic import BaseModel


class BulkAction(str, Enum):
    PUBLISH = "publish"
    DEPUBLISH = "depublish"


class BulkFailure(BaseModel):
    """A single document that failed during a bulk run."""

    document_id: str
    error: str
    error_type: str


class BulkReport(BaseModel):
    """Outcome of a bulk run. Partial completion is an accepted outcome."""

    action: BulkAction
    processed: int = 0
    failures: List[BulkFailure] = []
    skipped: List[str] = []                 # not eligible at execution time
    aborted: bool = False                   # stopped before the last document

    @property
    def failed_ids(self) -> List[str]:
        return [f.document_id for f in self.failures]
