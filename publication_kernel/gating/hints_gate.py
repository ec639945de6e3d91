"""
Hints Gate — the single decision every action component goes through.

Behavioral Contract:
- Key absent            -> HIDDEN   (never applicable in this context)
- Key present, False    -> DISABLED (applicable but currently blocked)
- Key present, anything else -> ENABLED
- Pure; never raises. Malformed input degrades, it does not propagate.
"""

import logging
from typing import Any, Dict, List, Optional

from publication_kernel.backend.protocols import HintsProvider
from publication_kernel.models.hints import BoolHint, Hint, StrHint, ensure_decoded
from publication_kernel.models.visibility import Decision, GateMode

logger = logging.getLogger(__name__)


def resolve(hints: Any, key: str) -> Decision:
    """Decide Hidden/Disabled/Enabled for a named action."""
    decoded = ensure_decoded(hints)
    hint = decoded.get(key)
    if hint is None:
        return Decision.HIDDEN
    if isinstance(hint, BoolHint) and not hint.value:
        return Decision.DISABLED
    return Decision.ENABLED


def resolve_all(hints: Any, key: str, count: int) -> List[Decision]:
    """Apply one decision to `count` co-dependent components at once."""
    decision = resolve(hints, key)
    return [decision] * max(count, 0)


def hide_if_false(hints: Any, key: str) -> Decision:
    """
    Secondary gating mode: only an explicit False hides the component.

    Absent keys keep the component visible, so this never yields DISABLED.
    """
    hint = ensure_decoded(hints).get(key)
    if isinstance(hint, BoolHint) and not hint.value:
        return Decision.HIDDEN
    return Decision.ENABLED


def gate(hints: Any, key: str, mode: GateMode) -> Decision:
    if mode == GateMode.HIDE_IF_FALSE:
        return hide_if_false(hints, key)
    return resolve(hints, key)


def is_enabled(hints: Any, key: str) -> bool:
    return resolve(hints, key) == Decision.ENABLED


def in_use_by(hints: Any) -> Optional[str]:
    """Name of the user currently holding the document, if hinted."""
    hint = ensure_decoded(hints).get("inUseBy")
    if isinstance(hint, StrHint):
        return hint.value
    return None


def fetch_hints(
    provider: HintsProvider,
    document_id: str,
    branch_id: str,
) -> Dict[str, Hint]:
    """
    Fetch and decode a document's hints.

    A failing provider means "no hints available": the empty map is
    returned and every gate resolves to HIDDEN.
    """
    try:
        raw = provider.get_hints(document_id, branch_id)
    except Exception as e:
        logger.warning(
            "Could not obtain hints for document %s on branch %s: %s",
            document_id, branch_id, e,
        )
        return {}
    return ensure_decoded(raw)
