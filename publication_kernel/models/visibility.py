"""Gate decisions and the action taxonomy they are mapped over."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class Decision(str, Enum):
    HIDDEN = "hidden"       # not offered at all in this context
    DISABLED = "disabled"   # offered but currently blocked (rendered grayed out)
    ENABLED = "enabled"


class GateMode(str, Enum):
    """How a hint key governs a component."""
    HIDE_OR_DISABLE = "hide_or_disable"     # absent -> hidden, false -> disabled
    HIDE_IF_FALSE = "hide_if_false"         # false -> hidden, otherwise enabled


class PublicationAction(BaseModel):
    """
    One row of the publication taxonomy.

    Direct and request-mediated execution of the same capability are
    mutually exclusive presentations: a reviewer sees the direct ids, a
    contributor only the request ids.
    """

    action: str                             # e.g. "publish"
    direct_ids: List[str]                   # action + its schedule sibling
    request_action: Optional[str] = None    # e.g. "requestPublication"
    request_ids: List[str] = []


class DocumentAction(BaseModel):
    """A secondary document component gated by a single hint key."""

    component_ids: List[str]
    key: str
    mode: GateMode = GateMode.HIDE_IF_FALSE


DEFAULT_PUBLICATION_TAXONOMY: List[PublicationAction] = [
    PublicationAction(
        action="publish",
        direct_ids=["publish", "schedulePublish"],
        request_action="requestPublication",
        request_ids=["requestPublication", "scheduleRequestPublication"],
    ),
    PublicationAction(
        action="depublish",
        direct_ids=["depublish", "scheduleDepublish"],
        request_action="requestDepublication",
        request_ids=["requestDepublication", "scheduleRequestDepublication"],
    ),
]

DEFAULT_DOCUMENT_ACTIONS: List[DocumentAction] = [
    DocumentAction(component_ids=["edit"], key="obtainEditableInstance"),
    DocumentAction(component_ids=["unlock"], key="unlock"),
    DocumentAction(component_ids=["requestDelete"], key="requestDelete"),
    DocumentAction(component_ids=["delete"], key="delete", mode=GateMode.HIDE_OR_DISABLE),
    DocumentAction(component_ids=["rename"], key="rename", mode=GateMode.HIDE_OR_DISABLE),
    DocumentAction(component_ids=["move"], key="move", mode=GateMode.HIDE_OR_DISABLE),
    DocumentAction(component_ids=["copy"], key="copy"),
    DocumentAction(component_ids=["info", "whereUsed", "history"], key="status"),
]
