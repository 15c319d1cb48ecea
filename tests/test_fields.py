"""
Tests for AttributeEnumerator, the default field enumerator.
"""

import collections
import math
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, NamedTuple

import numpy as np
import pytest

from obj_footprint import AttributeEnumerator, EnumeratorConfig, Footprint, PrimitiveType, measure
from obj_footprint.explorer.fields import CLASS_CACHE_SIZE, _cached_type_hints, declared_types, slot_names


class Color(Enum):
    RED = 1


class Slotted:
    __slots__ = ("a", "__b", "unset")

    def __init__(self):
        self.a = 1
        self.__b = []


class Base:
    __slots__ = ("x",)


class Child(Base):
    def __init__(self):
        self.x = 1
        self.y = 2


class Tagged(dict):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.tag = "t"


class WithClassVar:
    registry: ClassVar[list]

    def __init__(self):
        self.registry = []


class Broken:
    value: "DoesNotExist"  # noqa: F821

    def __init__(self):
        self.value = 3


@dataclass
class Sample:
    count: np.int16
    ratio: float
    label: str


@dataclass(slots=True)
class SlottedSample:
    left: int
    right: list


class EqualityMeta(type):
    """Metaclass with __eq__ and no __hash__, so its classes are unhashable."""

    def __eq__(cls, other):
        return cls is other


class Unhashable(metaclass=EqualityMeta):
    count: int

    def __init__(self):
        self.count = 1
        self.items = []


class UnboundProxy:
    """Mimics a context-local proxy used outside its context."""

    @property
    def __dict__(self):
        raise RuntimeError("working outside of context")


class Point(NamedTuple):
    x: int
    y: float


def edges(obj, **config):
    return list(AttributeEnumerator(EnumeratorConfig(**config)).enumerate_edges(obj))


def names(obj, **config):
    return [edge.name for edge in edges(obj, **config)]


class TestOpaqueValues:
    @pytest.mark.parametrize(
        "value",
        [None, 5, 2.5, True, 1j, "abc", b"abc", bytearray(b"x"), range(3), np.float64(1.0), dict, math, len],
    )
    def test_no_edges(self, value):
        assert edges(value) == []

    def test_unhashable_class(self):
        """Classes that cannot key a cache still have their hints and attributes read."""
        assert declared_types(Unhashable) == {"count": int}
        assert names(Unhashable()) == ["count", "items"]
        assert measure(Unhashable()) == Footprint(2, 1, {PrimitiveType.INT: 1})

    def test_raising_instance_dict(self):
        """An object whose __dict__ lookup fails has no attribute edges."""
        assert edges(UnboundProxy()) == []
        assert measure([UnboundProxy()]) == Footprint(2, 1)

    def test_class_cache_is_bounded(self):
        assert _cached_type_hints.cache_info().maxsize == CLASS_CACHE_SIZE

        for i in range(CLASS_CACHE_SIZE + 10):
            declared_types(type(f"Generated{i}", (), {}))

        assert _cached_type_hints.cache_info().currsize <= CLASS_CACHE_SIZE


class TestAttributes:
    def test_instance_dict(self):
        obj = Sample(np.int16(3), 1.5, "x")

        assert [(e.name, e.declared_type) for e in edges(obj)] == [
            ("count", np.int16),
            ("ratio", float),
            ("label", str),
        ]

    def test_slots_with_mangling(self):
        """Private slots are reported under their mangled name; unset slots are skipped."""
        assert names(Slotted()) == ["a", "_Slotted__b"]
        assert slot_names(Slotted) == ("a", "_Slotted__b", "unset")

    def test_dict_then_inherited_slots(self):
        assert names(Child()) == ["y", "x"]

    def test_slots_disabled(self):
        assert names(Child(), include_slots=False) == ["y"]

    def test_dataclass_slots(self):
        obj = SlottedSample(1, [])

        assert [(e.name, e.declared_type) for e in edges(obj)] == [("left", int), ("right", list)]

    def test_classvar_flagged_shared(self):
        (edge,) = edges(WithClassVar())

        assert edge.shared is True
        assert edge.declared_type is list

    def test_enum_member_fields_flagged_shared(self):
        found = edges(Color.RED)

        assert found
        assert all(edge.shared for edge in found)

    def test_unresolvable_hints_fall_back_to_runtime_type(self):
        assert declared_types(Broken) == {}
        (edge,) = edges(Broken())
        assert edge.declared_type is int

    def test_shared_types_config(self):
        holder = Tagged()
        holder.secret = Slotted()

        flagged = {e.name: e.shared for e in edges(holder, shared_types=(Slotted,))}
        assert flagged == {"tag": False, "secret": True}


class TestContainers:
    def test_dict_items(self):
        assert [(e.name, e.declared_type, e.value) for e in edges({"k": 1})] == [
            ("keys[0]", str, "k"),
            ("values[0]", int, 1),
        ]

    def test_dict_subclass_attributes(self):
        assert names(Tagged(k=1)) == ["keys[0]", "values[0]", "tag"]

    @pytest.mark.parametrize(
        "container",
        [[1, 2], (1, 2), collections.deque([1, 2])],
    )
    def test_sequences(self, container):
        assert names(container) == ["[0]", "[1]"]

    def test_sets(self):
        assert sorted(e.value for e in edges({1, 2})) == [1, 2]
        assert len(edges(frozenset({"a"}))) == 1

    def test_named_tuple_fields(self):
        """Named tuple elements carry the class annotations as declared types."""
        assert [(e.name, e.declared_type, e.value) for e in edges(Point(1, 2))] == [
            ("x", int, 1),
            ("y", float, 2),
        ]


class TestClosures:
    def test_cells_are_edges(self):
        data = [1, 2]
        label = "x"

        def callback():
            return data, label

        assert [(e.name, e.value) for e in edges(callback)] == [("data", data), ("label", "x")]

    def test_unbound_cell_skipped(self):
        def outer():
            def inner():
                return later

            found = edges(inner)
            later = 1
            return found

        assert outer() == []

    def test_plain_function_has_no_edges(self):
        def plain():
            return 1

        assert edges(plain) == []


class TestArrays:
    @pytest.mark.parametrize(
        "dtype, kind",
        [
            (np.bool_, PrimitiveType.BOOLEAN),
            (np.int8, PrimitiveType.BYTE),
            (np.int16, PrimitiveType.SHORT),
            (np.int32, PrimitiveType.INT),
            (np.int64, PrimitiveType.LONG),
            (np.uint16, PrimitiveType.CHAR),
            (np.float32, PrimitiveType.FLOAT),
            (np.float64, PrimitiveType.DOUBLE),
        ],
    )
    def test_numeric_arrays(self, dtype, kind):
        arr = np.zeros((2, 3), dtype=dtype)

        assert measure(arr) == Footprint(1, 0, {kind: 6})

    def test_object_array_shares_elements(self):
        arr = np.empty(2, dtype=object)
        arr[0] = []
        arr[1] = arr[0]

        assert measure(arr) == Footprint(2, 2)

    def test_unmapped_dtype_is_opaque(self):
        assert edges(np.zeros(3, dtype=np.complex128)) == []
        assert edges(np.array(["a", "b"])) == []

    def test_expand_arrays_disabled(self):
        assert edges(np.arange(3), expand_arrays=False) == []

    def test_numpy_annotation(self):
        """A NumPy-typed attribute is tallied by its dtype."""
        fp = measure(Sample(np.int16(3), 1.5, "x"))

        assert fp == Footprint(2, 1, {PrimitiveType.SHORT: 1, PrimitiveType.DOUBLE: 1})
