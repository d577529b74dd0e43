from __future__ import annotations

import pytest

from src.hr_operations.hr_operations.common.validators import (
    optional_text,
    require_non_empty,
    require_non_negative_int,
)
from src.hr_operations.hr_operations.core.exceptions import ValidationError


def test_require_non_empty_strips():
    assert require_non_empty("  Flu  ", "Reason") == "Flu"
    with pytest.raises(ValidationError, match="Reason is required"):
        require_non_empty("   ", "Reason")
    with pytest.raises(ValidationError, match="Reason is required"):
        require_non_empty(None, "Reason")


@pytest.mark.parametrize("value", [42, ["Flu"], {"text": "Flu"}, True])
def test_require_non_empty_rejects_non_strings(value):
    with pytest.raises(ValidationError, match="Reason must be a string"):
        require_non_empty(value, "Reason")


def test_optional_text():
    assert optional_text(None) is None
    assert optional_text("  ") is None
    assert optional_text(" note ") == "note"
    with pytest.raises(ValidationError):
        optional_text(12)


def test_require_non_negative_int():
    assert require_non_negative_int(0, "days") == 0
    assert require_non_negative_int("21", "days") == 21
    for bad in (-1, "x", None, 2.5, False):
        with pytest.raises(ValidationError):
            require_non_negative_int(bad, "days")
