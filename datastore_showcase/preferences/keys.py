"""Typed preference keys.

A key pairs a name with a value type and the default returned when the key
is absent, so readers never distinguish "missing" from "default".
"""

import math
import struct
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class PreferenceType(str, Enum):
    """Value types a preference can hold."""

    STRING = "string"
    FLOAT = "float"
    BOOLEAN = "boolean"
    INT = "int"
    STRING_SET = "string_set"


def to_float32(value: float) -> float:
    """Round a float through 32-bit precision.

    Finite values beyond the float32 range become signed infinity.
    """
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def type_of(value: Any) -> PreferenceType:
    """Infer the preference type of a stored Python value.

    Raises:
        TypeError: If the value is not a supported preference value
    """
    # bool first: it is an int subclass
    if isinstance(value, bool):
        return PreferenceType.BOOLEAN
    if isinstance(value, int):
        return PreferenceType.INT
    if isinstance(value, float):
        return PreferenceType.FLOAT
    if isinstance(value, str):
        return PreferenceType.STRING
    if isinstance(value, frozenset) and all(isinstance(v, str) for v in value):
        return PreferenceType.STRING_SET
    raise TypeError(f"Unsupported preference value type: {type(value).__name__}")


@dataclass(frozen=True)
class PreferenceKey(Generic[T]):
    """Name, type and default of one preference."""

    name: str
    type: PreferenceType
    default: T

    def coerce(self, value: Any) -> T:
        """Validate and convert a value before it is stored.

        Raises:
            TypeError: If value cannot be stored under this key
        """
        if self.type is PreferenceType.FLOAT:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise TypeError(f"{self.name} expects a float, got {type(value).__name__}")
            return to_float32(float(value))  # type: ignore[return-value]

        if self.type is PreferenceType.STRING_SET:
            if isinstance(value, str) or not all(isinstance(v, str) for v in value):
                raise TypeError(f"{self.name} expects a set of strings")
            return frozenset(value)  # type: ignore[return-value]

        if type_of(value) is not self.type:
            raise TypeError(
                f"{self.name} expects {self.type.value}, got {type(value).__name__}"
            )
        return value

    def read(self, raw: Any) -> T:
        """Typed read of a stored value; absent or mismatched values yield the default."""
        if raw is None:
            return self.default
        try:
            stored_type = type_of(raw)
        except TypeError:
            return self.default
        if stored_type is not self.type:
            return self.default
        return raw


def string_key(name: str, default: str = "") -> PreferenceKey[str]:
    return PreferenceKey(name, PreferenceType.STRING, default)


def float_key(name: str, default: float = 0.0) -> PreferenceKey[float]:
    return PreferenceKey(name, PreferenceType.FLOAT, to_float32(default))


def boolean_key(name: str, default: bool = False) -> PreferenceKey[bool]:
    return PreferenceKey(name, PreferenceType.BOOLEAN, default)


def int_key(name: str, default: int = 0) -> PreferenceKey[int]:
    return PreferenceKey(name, PreferenceType.INT, default)


def string_set_key(
    name: str, default: frozenset[str] = frozenset()
) -> PreferenceKey[frozenset[str]]:
    return PreferenceKey(name, PreferenceType.STRING_SET, default)
