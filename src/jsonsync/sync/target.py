"""Field access on caller-owned targets (dicts or plain objects)."""

from collections.abc import Mapping, MutableMapping
from typing import Any


def get_field(target: Any, name: str, default: Any = None) -> Any:
    if isinstance(target, Mapping):
        return target.get(name, default)
    return getattr(target, name, default)


def set_field(target: Any, name: str, value: Any) -> None:
    if isinstance(target, MutableMapping):
        target[name] = value
    else:
        setattr(target, name, value)
