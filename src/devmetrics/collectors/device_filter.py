"""
Device name filtering.

Decides whether a device takes part in a collection pass. Decisions are a
pure function of the device name and the rules given at construction.
"""

import re
from typing import Dict, Any, Iterable, Optional

from .base_collector import ConfigurationError


def _compile(pattern: Optional[str]) -> Optional[re.Pattern]:
    if not pattern:
        return None
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ConfigurationError(f"Invalid device pattern {pattern!r}: {e}") from e


class DeviceFilter:
    """
    Inclusion/exclusion rule set over device names.

    A device is ignored when any of these holds:
        - its name is listed in ``ignored_devices``
        - ``ignored_pattern`` matches somewhere in the name
        - ``accepted_pattern`` is set and does not match the name
    """

    def __init__(
        self,
        ignored_devices: Iterable[str] = (),
        ignored_pattern: Optional[str] = None,
        accepted_pattern: Optional[str] = None,
    ):
        self._ignored_devices = frozenset(ignored_devices or ())
        self._ignored_pattern = _compile(ignored_pattern)
        self._accepted_pattern = _compile(accepted_pattern)

    @classmethod
    def from_config(cls, section: Optional[Dict[str, Any]]) -> "DeviceFilter":
        """Build a filter from a collector configuration section."""
        section = section or {}
        ignored = section.get("ignored_devices") or []
        if isinstance(ignored, str):
            ignored = [ignored]
        return cls(
            ignored_devices=ignored,
            ignored_pattern=section.get("ignored_pattern"),
            accepted_pattern=section.get("accepted_pattern"),
        )

    def ignored(self, name: str) -> bool:
        """Return True if the device should be skipped."""
        if name in self._ignored_devices:
            return True
        if self._ignored_pattern is not None and self._ignored_pattern.search(name):
            return True
        if self._accepted_pattern is not None and not self._accepted_pattern.search(name):
            return True
        return False

    def __repr__(self) -> str:
        return (
            f"DeviceFilter(ignored_devices={sorted(self._ignored_devices)!r}, "
            f"ignored_pattern={self._pattern_text(self._ignored_pattern)!r}, "
            f"accepted_pattern={self._pattern_text(self._accepted_pattern)!r})"
        )

    @staticmethod
    def _pattern_text(pattern: Optional[re.Pattern]) -> Optional[str]:
        return pattern.pattern if pattern is not None else None
