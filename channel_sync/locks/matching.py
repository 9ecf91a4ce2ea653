"""Pluggable resolution of a remote device name to a local unit."""

from __future__ import annotations

import re
from typing import Mapping, Optional, Protocol

_WHITESPACE = re.compile(r"\s+")


class UnitMatcher(Protocol):
    def match(self, device_name: str, candidates: Mapping[str, str]) -> Optional[str]:
        """
        Pick the unit a device belongs to.

        Args:
            device_name: Name of the remote device.
            candidates: Unit name to unit id.

        Returns:
            Optional[str]: Unit id, or None when nothing matches.
        """
        ...


def _variants(name: str) -> tuple[str, ...]:
    lowered = name.strip().lower()
    compact = _WHITESPACE.sub("", lowered)
    return (lowered, compact) if compact != lowered else (lowered,)


class SubstringUnitMatcher:
    """
    Case-insensitive bidirectional substring match.

    A device matches a unit when either name contains the other, comparing
    both with and without internal whitespace. Candidates are tried in the
    order given and the first match wins.

    Example:
        >>> SubstringUnitMatcher().match("Lock Villa A", {"Villa A": "u1"})
        'u1'
        >>> SubstringUnitMatcher().match("VillaA-door", {"Villa A": "u1"})
        'u1'
    """

    def match(self, device_name: str, candidates: Mapping[str, str]) -> Optional[str]:
        if not device_name or not device_name.strip():
            return None
        device_forms = _variants(device_name)

        for unit_name, unit_id in candidates.items():
            if not unit_name or not unit_name.strip():
                continue
            for unit_form in _variants(unit_name):
                for device_form in device_forms:
                    if unit_form in device_form or device_form in unit_form:
                        return unit_id
        return None
