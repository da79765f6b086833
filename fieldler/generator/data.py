# fieldler/fieldler/generator/data.py
from __future__ import annotations
import operator
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional

from .naming import snake_case

ATTRIBUTE = "attribute"
METHOD = "method"
ITEM = "item"
ACCESS_KINDS = (ATTRIBUTE, METHOD, ITEM)


def _item_getter(key: str) -> Callable[[Mapping[str, Any]], Any]:
    # a key missing on both sides reads as None twice, which compares equal
    def get(record: Mapping[str, Any]) -> Any:
        return record.get(key)
    return get


def _attribute_getter(name: str) -> Callable[[Any], Any]:
    # an annotated member never assigned reads as None, like a missing key
    def get(obj: Any) -> Any:
        return getattr(obj, name, None)
    return get


@dataclass(frozen=True)
class FieldData:
    """
    One data member of a compared class.

    `name` is the logical field name (leading underscores stripped), `access` the
    attribute, method or key used to read it, or None when nothing public reads it.
    """
    name: str
    access: Optional[str]
    kind: str = ATTRIBUTE

    @property
    def enum_name(self) -> str:
        return snake_case(self.name)

    @property
    def is_accessible(self) -> bool:
        return self.access is not None

    def getter(self) -> Callable[[Any], Any]:
        if self.access is None:
            raise ValueError(f"Field '{self.name}' has no access path")
        if self.kind == METHOD:
            return operator.methodcaller(self.access)
        if self.kind == ITEM:
            return _item_getter(self.access)
        return _attribute_getter(self.access)


@dataclass(frozen=True)
class ClassData:
    canonical_name: str
    fields_data: List[FieldData] = field(default_factory=list)

    @property
    def class_name(self) -> str:
        return self.canonical_name.rsplit(".", 1)[-1]

    @property
    def package_path(self) -> str:
        if "." not in self.canonical_name:
            return ""
        return self.canonical_name.rsplit(".", 1)[0]

    def accessible_fields(self) -> List[FieldData]:
        return [f for f in self.fields_data if f.is_accessible]

    def has_accessible_fields(self) -> bool:
        return any(f.is_accessible for f in self.fields_data)
