# fieldler/fieldler/generator/creator.py
from __future__ import annotations
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Generic, Mapping, Tuple, Type, TypeVar

from fieldler.comparison import EqualityTest, FieldComparison
from fieldler.errors import GenerationError, NullArgumentError
from .data import ClassData

FIELD_SUFFIX = "Field"
COMPARATOR_SUFFIX = "FieldComparator"

T = TypeVar("T")


class FieldEnum(Enum):
    """Base of the generated field enumerations: `str(member)` is the original field name."""

    def __str__(self) -> str:
        return str(self.value)


def _equality_test(getter: Callable[[Any], Any]) -> EqualityTest:
    def test(object_a: Any, object_b: Any) -> bool:
        return getter(object_a) == getter(object_b)
    return test


def create_field_enum(class_data: ClassData) -> Type[FieldEnum]:
    """
    Build the `<ClassName>Field` enumeration with one member per accessible field.
    Raises GenerationError when two fields collapse into the same member name.
    """
    enum_name = class_data.class_name + FIELD_SUFFIX
    members: Dict[str, str] = {}
    for field_data in class_data.accessible_fields():
        member = field_data.enum_name
        if member in members:
            raise GenerationError(
                f"{enum_name}: fields '{members[member]}' and '{field_data.name}' both map to '{member}'"
            )
        members[member] = field_data.name

    try:
        return FieldEnum(
            enum_name,
            list(members.items()),
            module=class_data.package_path or __name__,
            qualname=enum_name,
        )
    except (TypeError, ValueError) as e:
        raise GenerationError(f"{enum_name}: {e}") from e


class FieldComparator(Generic[T]):
    """
    Entry point for comparing two objects of one class.

    Holds the generated field enumeration and the field -> equality test mapping, both
    built once per class and shared (read-only) by every comparison it creates.
    """

    def __init__(self, class_data: ClassData, field_type: Type[FieldEnum], equality_tests: Mapping[FieldEnum, EqualityTest]):
        self.class_data = class_data
        self.field_type = field_type
        self._equality_tests = MappingProxyType(dict(equality_tests))

    @property
    def name(self) -> str:
        return self.class_data.class_name + COMPARATOR_SUFFIX

    @property
    def equality_tests(self) -> Mapping[FieldEnum, EqualityTest]:
        return self._equality_tests

    def __repr__(self) -> str:
        return f"{self.name}(fields={[str(f) for f in self.field_type]})"

    def compare(self, object_a: T, object_b: T) -> FieldComparison[T, FieldEnum]:
        """
        Compare two objects, returning a FieldComparison. Nothing is compared until a
        FieldComparison method asks for it.

        Raises NullArgumentError if either object is None.
        """
        if object_a is None:
            raise NullArgumentError("object_a")
        if object_b is None:
            raise NullArgumentError("object_b")
        return FieldComparison(object_a, object_b, self._equality_tests)


def create_field_comparator(class_data: ClassData, field_type: Type[FieldEnum]) -> FieldComparator:
    equality_tests: Dict[FieldEnum, EqualityTest] = {}
    for field_data in class_data.accessible_fields():
        equality_tests[field_type[field_data.enum_name]] = _equality_test(field_data.getter())
    return FieldComparator(class_data, field_type, equality_tests)


def create_field_data_and_comparator(class_data: ClassData) -> Tuple[Type[FieldEnum], FieldComparator]:
    field_type = create_field_enum(class_data)
    return field_type, create_field_comparator(class_data, field_type)
