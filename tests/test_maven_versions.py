"""Tests for the version tie-break rule."""

import pytest

from maven.versions import is_newer


@pytest.mark.parametrize(
    "current,candidate,expected",
    [
        ("1.9", "1.10", True),     # longer segment wins, not plain string order
        ("1.10", "1.9", False),
        ("2.0", "2.0.1", True),    # more segments wins on a common prefix
        ("2.0.1", "2.0", False),
        ("2.0", "2.0", False),     # equal never replaces
        ("1.2", "1.3", True),
        ("1.3", "1.2", False),
        ("3.0", "2.9.9", False),
        ("1.0-alpha", "1.0-gamma", True),  # equal-length segments compare as strings
    ],
)
def test_is_newer(current, candidate, expected):
    assert is_newer(current, candidate) is expected
