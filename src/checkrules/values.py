"""Dynamic values that may be unknown, null, or concrete."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ConversionError(ValueError):
    """Raised when a value cannot be converted to the requested type."""


class ValueState(StrEnum):
    UNKNOWN = "unknown"  # depends on work not yet performed
    NULL = "null"
    KNOWN = "known"


_TRUE_STRINGS = ("true", "1")
_FALSE_STRINGS = ("false", "0")


@dataclass(frozen=True)
class Value:
    """A value produced by expression evaluation.

    Unknown is distinct from null: an unknown value will become concrete in a
    later pass, a null value is already final.
    """

    state: ValueState
    type_name: str = "dynamic"
    raw: object = None

    @classmethod
    def unknown(cls, type_name: str = "dynamic") -> Value:
        return cls(state=ValueState.UNKNOWN, type_name=type_name)

    @classmethod
    def null(cls, type_name: str = "dynamic") -> Value:
        return cls(state=ValueState.NULL, type_name=type_name)

    @classmethod
    def of(cls, obj: object) -> Value:
        """Wrap a plain Python object. Existing Values are returned as-is."""
        if isinstance(obj, Value):
            return obj
        if obj is None:
            return cls.null()
        # bool before int: bool is an int subclass
        if isinstance(obj, bool):
            return cls(state=ValueState.KNOWN, type_name="bool", raw=obj)
        if isinstance(obj, str):
            return cls(state=ValueState.KNOWN, type_name="string", raw=obj)
        if isinstance(obj, (int, float)):
            return cls(state=ValueState.KNOWN, type_name="number", raw=obj)
        # reject unsupported nested values up front
        if isinstance(obj, (list, tuple)):
            items = tuple(obj)
            for item in items:
                cls.of(item)
            return cls(state=ValueState.KNOWN, type_name="list", raw=items)
        if isinstance(obj, dict):
            mapping = dict(obj)
            for item in mapping.values():
                cls.of(item)
            return cls(state=ValueState.KNOWN, type_name="map", raw=mapping)
        raise TypeError(f"unsupported value type: {type(obj).__name__}")

    def is_known(self) -> bool:
        return self.state is not ValueState.UNKNOWN

    def is_null(self) -> bool:
        return self.state is ValueState.NULL

    def to_bool(self) -> bool:
        """Convert to a bool, raising ConversionError if not coercible."""
        if self.state is ValueState.UNKNOWN:
            raise ConversionError("value is not yet known")
        if self.state is ValueState.NULL:
            raise ConversionError("a null value cannot be converted to bool")
        raw = self.raw
        if isinstance(raw, bool):
            return raw
        if isinstance(raw, str):
            if raw in _TRUE_STRINGS:
                return True
            if raw in _FALSE_STRINGS:
                return False
            raise ConversionError("a bool is required")
        raise ConversionError(f"bool required, but have {self.type_name}")
