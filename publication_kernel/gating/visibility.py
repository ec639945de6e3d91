"""
Action Visibility Mapper — one table-driven mapper for every document panel.

Maps the publication action taxonomy (publish/depublish, their schedule
siblings and their request-mediated counterparts) onto UI component ids.
A single hints payload decides whether the user sees direct buttons
(reviewer) or request buttons (contributor).
"""

from typing import Any, Dict, List, Optional

from publication_kernel.gating.hints_gate import (
    gate,
    in_use_by,
    resolve_all,
)
from publication_kernel.models.hints import BoolHint, Hint, ensure_decoded
from publication_kernel.models.visibility import (
    DEFAULT_DOCUMENT_ACTIONS,
    DEFAULT_PUBLICATION_TAXONOMY,
    Decision,
    DocumentAction,
    PublicationAction,
)

IN_USE_COMPONENT = "infoEdit"


def _is_true(hints: Dict[str, Hint], key: str) -> bool:
    hint = hints.get(key)
    return isinstance(hint, BoolHint) and hint.value


class ActionVisibilityMapper:
    """Computes component decisions from a hints map."""

    def __init__(
        self,
        taxonomy: Optional[List[PublicationAction]] = None,
        document_actions: Optional[List[DocumentAction]] = None,
    ):
        self.taxonomy = taxonomy if taxonomy is not None else DEFAULT_PUBLICATION_TAXONOMY
        self.document_actions = (
            document_actions if document_actions is not None else DEFAULT_DOCUMENT_ACTIONS
        )

    @property
    def publication_ids(self) -> List[str]:
        ids: List[str] = []
        for row in self.taxonomy:
            ids.extend(row.direct_ids)
            ids.extend(row.request_ids)
        return ids

    def _base_keys(self) -> List[str]:
        keys = []
        for row in self.taxonomy:
            keys.append(row.action)
            if row.request_action:
                keys.append(row.request_action)
        return keys

    def compute_visibility(self, hints: Any) -> Dict[str, Decision]:
        """Decide every publication component id."""
        decoded = ensure_decoded(hints)

        # Fast exit: no base key is explicitly true
        if not any(_is_true(decoded, key) for key in self._base_keys()):
            return {cid: Decision.HIDDEN for cid in self.publication_ids}

        result: Dict[str, Decision] = {}
        for row in self.taxonomy:
            direct = resolve_all(decoded, row.action, len(row.direct_ids))
            result.update(zip(row.direct_ids, direct))

            if row.action not in decoded and row.request_action:
                requested = resolve_all(decoded, row.request_action, len(row.request_ids))
                result.update(zip(row.request_ids, requested))
            else:
                for cid in row.request_ids:
                    result[cid] = Decision.HIDDEN
        return result

    def compute_document_visibility(self, hints: Any) -> Dict[str, Decision]:
        """Decide the secondary document components (edit, delete, info...)."""
        decoded = ensure_decoded(hints)
        result: Dict[str, Decision] = {}
        for entry in self.document_actions:
            decision = gate(decoded, entry.key, entry.mode)
            for cid in entry.component_ids:
                result[cid] = decision

        result[IN_USE_COMPONENT] = (
            Decision.ENABLED if in_use_by(decoded) is not None else Decision.HIDDEN
        )
        return result

    def compute_all(self, hints: Any) -> Dict[str, Decision]:
        decoded = ensure_decoded(hints)
        result = self.compute_document_visibility(decoded)
        result.update(self.compute_visibility(decoded))
        return result
