"""Workflow requests attached to a document handle."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class RequestType(str, Enum):
    PUBLISH = "publish"
    DEPUBLISH = "depublish"
    DELETE = "delete"
    SCHEDULED_PUBLISH = "scheduledpublish"
    SCHEDULED_DEPUBLISH = "scheduleddepublish"
    UNKNOWN = "unknown"


class RequestState(str, Enum):
    PENDING = "pending"
    SCHEDULED = "scheduled"
    REJECTED = "rejected"
    UNKNOWN = "unknown"


class RequestTransition(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"
    CANCEL = "cancel"


class WorkflowRequest(BaseModel):
    """A pending workflow action, read from the document's hints."""

    id: str
    type: RequestType = RequestType.UNKNOWN
    state: RequestState = RequestState.UNKNOWN
    schedule: Optional[datetime] = None
    reason: Optional[str] = None            # only once rejected

    @property
    def rejected(self) -> bool:
        return self.state == RequestState.REJECTED
