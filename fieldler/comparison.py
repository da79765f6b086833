# fieldler/fieldler/comparison.py
from __future__ import annotations
import logging
from types import MappingProxyType
from typing import Any, Callable, Dict, Generic, Hashable, Iterable, Mapping, Optional, Set, Tuple, TypeVar

from fieldler.errors import NullArgumentError, UndefinedFieldError

log = logging.getLogger(__name__)

T = TypeVar("T")
F = TypeVar("F", bound=Hashable)

EqualityTest = Callable[[Any, Any], bool]
Action = Callable[..., Any]
ErrorFactory = Callable[[], BaseException]


def _selection(fields: Optional[Iterable[F]]) -> Tuple[F, ...]:
    # None and an empty iterable both mean "no selection"
    if fields is None:
        return ()
    return tuple(fields)


class FieldComparison(Generic[T, F]):
    """
    Field-by-field comparison of two objects of the same class.

    Each field is compared at most once, the first time a method needs it, and the
    result is cached until `reset_cache()` is called.

    The objects are held by reference. If either of them is modified after a field has
    been compared, the cached result is stale: e.g. comparing a red and a blue car,
    `is_different(COLOR)` returns True; repainting the blue car red afterwards does not
    change that answer until `reset_cache()` is called (or a new comparison is built).

    Selections:
      - methods taking `fields` accept any iterable of fields (list, tuple, set, ...).
      - an empty or missing selection falls back to the whole field set, it is NOT
        "no fields selected": `are_all_equal([])` means "no differences anywhere".

    Chaining:
      - `do_when_*`, `throw_when_*`, `reset_cache` and `evaluate_*` return the same
        comparison so calls can be chained.
    """

    def __init__(self, object_a: T, object_b: T, equality_tests: Mapping[F, EqualityTest]):
        if object_a is None:
            raise NullArgumentError("object_a")
        if object_b is None:
            raise NullArgumentError("object_b")
        if equality_tests is None:
            raise NullArgumentError("equality_tests")
        self._object_a = object_a
        self._object_b = object_b
        self._equality_tests = equality_tests
        self._equality_results: Dict[F, bool] = {}

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(fields={len(self._equality_tests)}, "
            f"evaluated={len(self._equality_results)})"
        )

    @property
    def object_a(self) -> T:
        return self._object_a

    @property
    def object_b(self) -> T:
        return self._object_b

    @property
    def fields(self) -> Set[F]:
        return set(self._equality_tests.keys())

    @property
    def equality_tests(self) -> Mapping[F, EqualityTest]:
        return MappingProxyType(dict(self._equality_tests))

    # --------------------------- per field ---------------------------

    def is_equal(self, field: F) -> bool:
        if not self._is_cached(field):
            self._test_field(field)
        return self._equality_results[field]

    def is_different(self, field: F) -> bool:
        return not self.is_equal(field)

    # --------------------------- whole field set ---------------------------

    def has_equalities(self) -> bool:
        """True if at least one field is equal. Cached results are checked first."""
        if any(self._equality_results.values()):
            return True
        return any(self.is_equal(field) for field in self._equality_tests)

    def has_differences(self) -> bool:
        """True if at least one field is different. Cached results are checked first."""
        if not all(self._equality_results.values()):
            return True
        return any(self.is_different(field) for field in self._equality_tests)

    def equal_fields(self) -> Set[F]:
        return {field for field in self._equality_tests if self.is_equal(field)}

    def different_fields(self) -> Set[F]:
        return {field for field in self._equality_tests if self.is_different(field)}

    def number_of_equalities(self) -> int:
        return len(self.equal_fields())

    def number_of_differences(self) -> int:
        return len(self.different_fields())

    # --------------------------- selections ---------------------------

    def is_any_equal(self, fields: Optional[Iterable[F]] = ()) -> bool:
        selected = _selection(fields)
        if not selected:
            return self.has_equalities()
        return any(self.is_equal(field) for field in selected)

    def is_any_different(self, fields: Optional[Iterable[F]] = ()) -> bool:
        selected = _selection(fields)
        if not selected:
            return self.has_differences()
        return any(self.is_different(field) for field in selected)

    def are_all_equal(self, fields: Optional[Iterable[F]] = ()) -> bool:
        selected = _selection(fields)
        if not selected:
            return not self.has_differences()
        return all(self.is_equal(field) for field in selected)

    def are_all_different(self, fields: Optional[Iterable[F]] = ()) -> bool:
        selected = _selection(fields)
        if not selected:
            return not self.has_equalities()
        return all(self.is_different(field) for field in selected)

    # --------------------------- actions ---------------------------

    def _run(self, condition: bool, action: Action, with_objects: bool) -> "FieldComparison[T, F]":
        if condition:
            if with_objects:
                action(self._object_a, self._object_b)
            else:
                action()
        return self

    def do_when_equal(self, field: F, action: Action, *, with_objects: bool = False) -> "FieldComparison[T, F]":
        """
        Run `action` if `field` is equal. With `with_objects=True` the action receives
        (object_a, object_b), otherwise it is called without arguments.
        """
        return self._run(self.is_equal(field), action, with_objects)

    def do_when_different(self, field: F, action: Action, *, with_objects: bool = False) -> "FieldComparison[T, F]":
        return self._run(self.is_different(field), action, with_objects)

    def do_when_any_equal(
        self, action: Action, fields: Optional[Iterable[F]] = (), *, with_objects: bool = False
    ) -> "FieldComparison[T, F]":
        return self._run(self.is_any_equal(fields), action, with_objects)

    def do_when_any_different(
        self, action: Action, fields: Optional[Iterable[F]] = (), *, with_objects: bool = False
    ) -> "FieldComparison[T, F]":
        return self._run(self.is_any_different(fields), action, with_objects)

    def do_when_all_equal(
        self, action: Action, fields: Optional[Iterable[F]] = (), *, with_objects: bool = False
    ) -> "FieldComparison[T, F]":
        return self._run(self.are_all_equal(fields), action, with_objects)

    def do_when_all_different(
        self, action: Action, fields: Optional[Iterable[F]] = (), *, with_objects: bool = False
    ) -> "FieldComparison[T, F]":
        return self._run(self.are_all_different(fields), action, with_objects)

    # --------------------------- assertions ---------------------------

    def _raise(self, condition: bool, error_factory: ErrorFactory) -> "FieldComparison[T, F]":
        if condition:
            raise error_factory()
        return self

    def throw_when_equal(self, field: F, error_factory: ErrorFactory) -> "FieldComparison[T, F]":
        """
        Raise the exception built by `error_factory` if `field` is equal.
        The factory is only called when the condition holds; an exception class works too.
        """
        return self._raise(self.is_equal(field), error_factory)

    def throw_when_different(self, field: F, error_factory: ErrorFactory) -> "FieldComparison[T, F]":
        return self._raise(self.is_different(field), error_factory)

    def throw_when_any_equal(
        self, error_factory: ErrorFactory, fields: Optional[Iterable[F]] = ()
    ) -> "FieldComparison[T, F]":
        return self._raise(self.is_any_equal(fields), error_factory)

    def throw_when_any_different(
        self, error_factory: ErrorFactory, fields: Optional[Iterable[F]] = ()
    ) -> "FieldComparison[T, F]":
        return self._raise(self.is_any_different(fields), error_factory)

    def throw_when_all_equal(
        self, error_factory: ErrorFactory, fields: Optional[Iterable[F]] = ()
    ) -> "FieldComparison[T, F]":
        return self._raise(self.are_all_equal(fields), error_factory)

    def throw_when_all_different(
        self, error_factory: ErrorFactory, fields: Optional[Iterable[F]] = ()
    ) -> "FieldComparison[T, F]":
        return self._raise(self.are_all_different(fields), error_factory)

    # --------------------------- cache ---------------------------

    def reset_cache(self) -> "FieldComparison[T, F]":
        self._equality_results.clear()
        return self

    def evaluate_all(self) -> "FieldComparison[T, F]":
        if self._no_pending_tests():
            return self
        for field in self.pending_fields():
            self._test_field(field)
        return self

    def evaluate_fields(self, fields: Optional[Iterable[F]]) -> "FieldComparison[T, F]":
        selected = _selection(fields)
        # undefined fields fail even when every field is already cached
        for field in selected:
            self._equality_test(field)
        if not selected or self._no_pending_tests():
            return self
        for field in selected:
            if field not in self._equality_results:
                self._test_field(field)
        return self

    def pending_fields(self) -> Set[F]:
        return {field for field in self._equality_tests if field not in self._equality_results}

    def _is_cached(self, field: F) -> bool:
        try:
            return field in self._equality_results
        except TypeError:
            raise UndefinedFieldError(field) from None

    def _equality_test(self, field: F) -> EqualityTest:
        # unhashable fields can not be keys of the mapping either
        try:
            return self._equality_tests[field]
        except (KeyError, TypeError):
            raise UndefinedFieldError(field) from None

    def _test_field(self, field: F) -> None:
        test = self._equality_test(field)
        result = bool(test(self._object_a, self._object_b))
        log.debug("compared field %s: %s", field, "equal" if result else "different")
        self._equality_results[field] = result

    def _no_pending_tests(self) -> bool:
        return len(self._equality_results) == len(self._equality_tests)
