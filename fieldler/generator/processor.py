# fieldler/fieldler/generator/processor.py
from __future__ import annotations
import inspect
import logging
import typing
from typing import Any, Callable, ClassVar, Dict, List, Optional, Set, Tuple, Type, TypeVar

from fieldler.errors import GenerationError
from . import registry
from .creator import (
    FieldComparator,
    FieldEnum,
    create_field_comparator,
    create_field_data_and_comparator,
    create_field_enum,
)
from .data import ATTRIBUTE, METHOD, ClassData, FieldData

IS_PREFIX = "is_"
GETTER_PREFIX = "get_"

FIELD_DATA = "field_data"
FIELD_COMPARATOR = "field_comparator"

log = logging.getLogger(__name__)

C = TypeVar("C", bound=type)

_BOOLEAN_ANNOTATIONS = {"bool", "Optional[bool]", "typing.Optional[bool]", "bool|None", "None|bool"}

_processed: Set[type] = set()


# --------------------------- class walking ---------------------------

def _is_class_var(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return annotation is ClassVar or typing.get_origin(annotation) is ClassVar


def _is_boolean(annotation: Any) -> bool:
    if annotation is None:
        return False
    if isinstance(annotation, str):
        return annotation.replace(" ", "") in _BOOLEAN_ANNOTATIONS
    if annotation is bool:
        return True
    args = typing.get_args(annotation)
    return bool(args) and set(args) <= {bool, type(None)} and bool in args


def _is_mangled(klass: type, name: str) -> bool:
    return name.startswith("__") or name.startswith(f"_{klass.__name__.lstrip('_')}__")


def _slots(klass: type) -> Tuple[str, ...]:
    slots = klass.__dict__.get("__slots__", ())
    if isinstance(slots, str):
        slots = (slots,)
    return tuple(s for s in slots if s not in ("__dict__", "__weakref__"))


def declared_members(cls: type) -> List[Tuple[str, Any]]:
    """
    Instance-level data members of `cls` and its bases (object excluded), as
    (name, annotation) pairs. Subclass members come first; a member redeclared in a
    subclass is only reported once.
    """
    members: List[Tuple[str, Any]] = []
    seen: Set[str] = set()
    for klass in cls.__mro__:
        if klass is object:
            continue
        annotations = inspect.get_annotations(klass)
        declared: Dict[str, Any] = {}
        for name, annotation in annotations.items():
            if not _is_class_var(annotation):
                declared[name] = annotation
        for name in _slots(klass):
            declared.setdefault(name, None)
        for name, annotation in declared.items():
            if name in seen or _is_mangled(klass, name):
                continue
            seen.add(name)
            members.append((name, annotation))
    return members


# --------------------------- access paths ---------------------------

def _accepts_no_arguments(function: Callable[..., Any]) -> bool:
    try:
        params = list(inspect.signature(function).parameters.values())[1:]
    except (TypeError, ValueError):
        return False
    return all(
        p.default is not inspect.Parameter.empty
        or p.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        for p in params
    )


def _accessor(cls: type, name: str) -> Optional[Tuple[str, str]]:
    member = inspect.getattr_static(cls, name, None)
    if isinstance(member, property):
        return name, ATTRIBUTE
    if inspect.isfunction(member) and _accepts_no_arguments(member):
        return name, METHOD
    return None


def accepted_accessor_names(name: str, annotation: Any) -> List[str]:
    names: List[str] = []
    if _is_boolean(annotation):
        names.append(IS_PREFIX + name)
    names.append(GETTER_PREFIX + name)
    names.append(name)
    return names


def _field_data(cls: type, member: str, annotation: Any) -> FieldData:
    name = member.lstrip("_")
    if member == name:
        return FieldData(name, member, ATTRIBUTE)
    for candidate in accepted_accessor_names(name, annotation):
        found = _accessor(cls, candidate)
        if found is not None:
            access, kind = found
            return FieldData(name, access, kind)
    return FieldData(name, None)


def process_class(cls: type) -> ClassData:
    canonical_name = f"{cls.__module__}.{cls.__qualname__}"
    fields_data = [_field_data(cls, member, annotation) for member, annotation in declared_members(cls)]
    return ClassData(canonical_name, fields_data)


# --------------------------- decorators ---------------------------

def _can_process(element: Any) -> bool:
    return inspect.isclass(element) and not element.__name__.startswith("_")


def _generate(cls: type, class_data: ClassData, generator: str) -> str:
    if generator == FIELD_DATA:
        field_type = create_field_enum(class_data)
        registry.register_fields(cls, field_type)
        return field_type.__name__
    if generator == FIELD_COMPARATOR:
        field_type, comparator = create_field_data_and_comparator(class_data)
        registry.register(cls, comparator)
        return f"[{field_type.__name__}, {comparator.name}]"
    raise ValueError(f"Unknown generator {generator}")


def _process(element: C, generator: str) -> C:
    if not _can_process(element):
        log.warning("[fieldler] Can not process element: %r", element)
        return element
    if element in _processed:
        return element
    _processed.add(element)

    class_data = process_class(element)
    for field_data in class_data.fields_data:
        log.debug("[fieldler] %s.%s -> %s (%s)", class_data.class_name, field_data.name, field_data.access, field_data.kind)

    if not class_data.has_accessible_fields():
        log.warning("[fieldler] Element has no accessible fields, nothing will be generated for: %s", class_data.canonical_name)
        return element

    try:
        generated = _generate(element, class_data, generator)
        log.info("[fieldler] Generated %s for class %s", generated, class_data.canonical_name)
    except GenerationError as e:
        log.warning("[fieldler] Error generating classes - Detail: %s", e)
    return element


def field_data(cls: C) -> C:
    """Class decorator: generate and register the `<ClassName>Field` enumeration."""
    return _process(cls, FIELD_DATA)


def field_comparator(cls: C) -> C:
    """
    Class decorator: generate and register the `<ClassName>Field` enumeration and its
    comparator. Use `fields_of(cls)` and `comparator_for(cls)` (or `registry.compare`)
    afterwards.
    """
    return _process(cls, FIELD_COMPARATOR)


def fields_of(cls: type) -> Type[FieldEnum]:
    field_type = registry.get_fields(cls)
    if field_type is None:
        raise LookupError(f"No field enumeration registered for {cls.__qualname__}")
    return field_type


def comparator_for(cls: type) -> FieldComparator:
    """
    Comparator registered for `cls` itself. Classes that were never decorated, including
    undecorated subclasses of decorated ones, are processed and registered on first use
    so their own members are compared. Raises GenerationError if that is not possible.
    """
    comparator = registry.get(cls, inherited=False)
    if comparator is not None:
        return comparator

    class_data = process_class(cls)
    if not class_data.has_accessible_fields():
        raise GenerationError(f"{class_data.canonical_name} has no accessible fields")
    field_type = registry.get_fields(cls, inherited=False)
    if field_type is None or {m.name for m in field_type} != {f.enum_name for f in class_data.accessible_fields()}:
        field_type = create_field_enum(class_data)
    comparator = create_field_comparator(class_data, field_type)
    registry.register(cls, comparator)
    _processed.add(cls)
    return comparator
