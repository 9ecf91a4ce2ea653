"""
Unit tests for device-to-unit name matching.
"""

from __future__ import annotations

import pytest

from channel_sync.locks.matching import SubstringUnitMatcher


@pytest.fixture
def matcher() -> SubstringUnitMatcher:
    return SubstringUnitMatcher()


@pytest.mark.unit
def test_device_name_containing_unit_name_matches(matcher: SubstringUnitMatcher) -> None:
    """Test the canonical example: 'Lock Villa A' belongs to 'Villa A'."""
    assert matcher.match("Lock Villa A", {"Villa A": "u1"}) == "u1"


@pytest.mark.unit
def test_unit_name_containing_device_name_matches(matcher: SubstringUnitMatcher) -> None:
    """Test the reverse containment direction."""
    assert matcher.match("villa", {"Villa A Deluxe": "u1"}) == "u1"


@pytest.mark.unit
def test_whitespace_insensitive_match(matcher: SubstringUnitMatcher) -> None:
    """Test that internal whitespace is ignored in the compact comparison."""
    assert matcher.match("VillaA front door", {"Villa A": "u1"}) == "u1"


@pytest.mark.unit
def test_first_candidate_wins(matcher: SubstringUnitMatcher) -> None:
    """Test that candidate order decides between several matches."""
    candidates = {"Villa": "u1", "Villa A": "u2"}

    assert matcher.match("Lock Villa A", candidates) == "u1"


@pytest.mark.unit
def test_no_match_and_empty_names(matcher: SubstringUnitMatcher) -> None:
    """Test that unrelated or empty names never match."""
    assert matcher.match("Garage Lock", {"Villa A": "u1"}) is None
    assert matcher.match("", {"Villa A": "u1"}) is None
    assert matcher.match("Lock Villa A", {"": "u0", "  ": "u9"}) is None
