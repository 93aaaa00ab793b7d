# mmdbimport/processing/convert.py
"""
Map decoded JSON (and a few structured Python values) onto the typed values
understood by mmdb_writer.

Numbers always leave here wrapped in explicit Mmdb* types. The writer's data
cache keys on equality, where 1 == 1.0 == True.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from mmdb_writer import (
    MmdbBaseType,
    MmdbF64,
    MmdbI32,
    MmdbU32,
    MmdbU64,
    MmdbU128,
)

from mmdbimport.errors import ConversionError

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1
UINT32_MAX = 2 ** 32 - 1
UINT64_MAX = 2 ** 64 - 1
UINT128_MAX = 2 ** 128 - 1


def convert_int(value: int) -> MmdbBaseType:
    """
    Smallest MMDB integer type that holds `value` without truncation.

    int32 is preferred for everything it can represent; larger positive
    values widen to uint32/uint64/uint128. Negative values below int32 have
    no MMDB representation.
    """
    if INT32_MIN <= value <= INT32_MAX:
        return MmdbI32(value)
    if value < INT32_MIN:
        raise ConversionError(f"integer {value} is below the int32 minimum")
    if value <= UINT32_MAX:
        return MmdbU32(value)
    if value <= UINT64_MAX:
        return MmdbU64(value)
    if value <= UINT128_MAX:
        return MmdbU128(value)
    raise ConversionError(f"integer {value} does not fit in uint128")


def convert(value: Any) -> Any:
    """Convert one value, recursing into containers."""
    if value is None:
        return ""

    if isinstance(value, MmdbBaseType):
        return value

    if isinstance(value, str):
        return value

    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return value

    if isinstance(value, int):
        return convert_int(value)

    if isinstance(value, (float, Decimal)):
        return MmdbF64(float(value))

    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)

    if isinstance(value, (list, tuple)):
        return convert_list(value)

    if isinstance(value, Mapping):
        return convert_map(value)

    return convert_custom(value)


def convert_list(items) -> list:
    result = []
    for i, item in enumerate(items):
        try:
            result.append(convert(item))
        except ConversionError as e:
            raise ConversionError(f"converting list item {i}: {e}") from e
    return result


def convert_map(mapping: Mapping) -> dict:
    result = {}
    for key, item in mapping.items():
        name = key if isinstance(key, str) else str(key)
        try:
            result[name] = convert(item)
        except ConversionError as e:
            raise ConversionError(f"converting map key {name}: {e}") from e
    return result


def _field_name(f: dataclasses.Field) -> str:
    return f.metadata.get("mmdb") or f.metadata.get("json") or f.name


def convert_custom(value: Any) -> Any:
    """
    Structured values that are not plain JSON.

    Objects may describe themselves through a ``to_mmdb()`` method returning
    a mapping; dataclass instances are converted field by field. Anything
    else is rejected.
    """
    to_mmdb = getattr(value, "to_mmdb", None)
    if callable(to_mmdb):
        described = to_mmdb()
        if not isinstance(described, Mapping):
            raise ConversionError(
                f"{type(value).__name__}.to_mmdb() returned {type(described).__name__}, expected a mapping"
            )
        return convert_map(described)

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        result = {}
        for f in dataclasses.fields(value):
            if f.name.startswith("_"):
                continue
            name = _field_name(f)
            try:
                result[name] = convert(getattr(value, f.name))
            except ConversionError as e:
                raise ConversionError(f"converting field {name}: {e}") from e
        return result

    raise ConversionError(f"unsupported type {type(value).__name__}")
