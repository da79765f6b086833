# fieldler/fieldler/generator/registry.py
from __future__ import annotations
from typing import Any, Dict, Type

from fieldler.comparison import FieldComparison
from fieldler.errors import NullArgumentError
from .creator import FieldComparator, FieldEnum

_FIELDS: Dict[type, Type[FieldEnum]] = {}
_REGISTRY: Dict[type, FieldComparator] = {}

def _key(target: type) -> type:
    if not isinstance(target, type):
        raise TypeError(f"Expected a class, got {type(target).__name__}")
    return target

def _lookup(table: Dict[type, Any], target: type, inherited: bool) -> Any:
    if not inherited:
        return table.get(_key(target))
    # subclasses share the entry of their closest registered base
    for base in _key(target).__mro__:
        if base in table:
            return table[base]
    return None

def register_fields(target: type, field_type: Type[FieldEnum]) -> None:
    _FIELDS[_key(target)] = field_type

def register(target: type, comparator: FieldComparator) -> None:
    key = _key(target)
    _FIELDS[key] = comparator.field_type
    _REGISTRY[key] = comparator

def get(target: type, *, inherited: bool = True) -> FieldComparator | None:
    return _lookup(_REGISTRY, target, inherited)

def get_fields(target: type, *, inherited: bool = True) -> Type[FieldEnum] | None:
    return _lookup(_FIELDS, target, inherited)

def available() -> Dict[type, FieldComparator]:
    return dict(_REGISTRY)

def compare(object_a: Any, object_b: Any) -> FieldComparison:
    """
    Compare two objects with the comparator registered for the class of `object_a`,
    or for its closest registered base. A subclass compared through a base comparator
    only has the base fields compared; use `comparator_for(subclass)` to include its own.
    """
    if object_a is None:
        raise NullArgumentError("object_a")
    comparator = get(type(object_a))
    if comparator is None:
        raise LookupError(f"No field comparator registered for {type(object_a).__qualname__}")
    return comparator.compare(object_a, object_b)
