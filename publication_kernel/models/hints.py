"""Hints — the backend-computed permission/state payload, decoded once."""

from typing import Any, Dict, Literal, Mapping, Union

from pydantic import BaseModel


class BoolHint(BaseModel):
    """The only interpreted hint value: permitted (True) or blocked (False)."""

    kind: Literal["bool"] = "bool"
    value: bool


class StrHint(BaseModel):
    kind: Literal["str"] = "str"
    value: str                              # e.g. the "inUseBy" holder


class NestedHint(BaseModel):
    """A hint whose payload is itself a hints map (e.g. "requests")."""

    kind: Literal["nested"] = "nested"
    entries: Dict[str, "Hint"] = {}


class UnknownHint(BaseModel):
    """Any payload the engine does not interpret; the raw value is kept."""

    kind: Literal["unknown"] = "unknown"
    value: Any = None


Hint = Union[BoolHint, StrHint, NestedHint, UnknownHint]

NestedHint.model_rebuild()

_HINT_TYPES = (BoolHint, StrHint, NestedHint, UnknownHint)


def decode_hint(value: Any) -> Hint:
    """Decode a single raw hint value into the closed Hint type."""
    # bool before anything numeric: bool is an int subclass
    if isinstance(value, bool):
        return BoolHint(value=value)
    if isinstance(value, str):
        return StrHint(value=value)
    if isinstance(value, Mapping):
        return NestedHint(entries=decode_hints(value))
    return UnknownHint(value=value)


def decode_hints(raw: Any) -> Dict[str, Hint]:
    """
    Decode a raw hints map. Never raises.

    Non-mapping input decodes to the empty map, which gates every action
    to hidden.
    """
    if not isinstance(raw, Mapping):
        return {}
    decoded: Dict[str, Hint] = {}
    for key, value in raw.items():
        if isinstance(value, _HINT_TYPES):
            decoded[str(key)] = value
        else:
            decoded[str(key)] = decode_hint(value)
    return decoded


def ensure_decoded(hints: Any) -> Dict[str, Hint]:
    """Accept either an already decoded map or a raw one."""
    if isinstance(hints, dict) and all(
        isinstance(v, _HINT_TYPES) for v in hints.values()
    ):
        return hints
    return decode_hints(hints)
