"""
Stat normalization.

Converts vendor statistic records (psutil namedtuples, dataclasses or plain
mappings) into a flat ``{field: unsigned int}`` mapping. The field set is
taken from the record itself, so new fields from the platform API show up
without code changes.
"""

import dataclasses
import numbers
from typing import Dict, Any, Mapping

from .base_collector import NormalizationError

UINT64_MAX = 2**64 - 1


def _to_mapping(record: Any) -> Dict[str, Any]:
    """Serialize a record into a plain dictionary."""
    if isinstance(record, Mapping):
        return dict(record)
    if hasattr(record, "_asdict"):
        return dict(record._asdict())
    if dataclasses.is_dataclass(record) and not isinstance(record, type):
        return dataclasses.asdict(record)
    raise NormalizationError(
        f"Cannot serialize record of type {type(record).__name__}"
    )


def _to_uint64(key: str, value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, numbers.Integral):
        number = int(value)
    elif isinstance(value, numbers.Real):
        if value != value or not float(value).is_integer():
            raise NormalizationError(f"Field {key!r} is not integral: {value!r}")
        number = int(value)
    else:
        raise NormalizationError(
            f"Field {key!r} has non-numeric value {value!r}"
        )

    if number < 0 or number > UINT64_MAX:
        raise NormalizationError(f"Field {key!r} out of uint64 range: {number}")
    return number


def _flatten(data: Mapping, prefix: str, out: Dict[str, int]) -> None:
    for key, value in data.items():
        full_key = f"{prefix}_{key}" if prefix else str(key)
        if full_key in out:
            raise NormalizationError(f"Duplicate field after flattening: {full_key!r}")
        if isinstance(value, Mapping):
            _flatten(value, full_key, out)
        elif hasattr(value, "_asdict"):
            _flatten(value._asdict(), full_key, out)
        else:
            out[full_key] = _to_uint64(full_key, value)


def normalize_stats(record: Any, name_field: str = "name") -> Dict[str, int]:
    """
    Convert a statistics record to a uniform numeric mapping.

    Args:
        record: namedtuple, dataclass instance or mapping of counters
        name_field: Device-identifying field to drop from the result

    Returns:
        Dictionary of field name to unsigned 64-bit integer

    Raises:
        NormalizationError: if any remaining field is not an unsigned integer
    """
    data = _to_mapping(record)
    data.pop(name_field, None)

    statistic: Dict[str, int] = {}
    _flatten(data, "", statistic)
    return statistic
