from __future__ import annotations

from src.hr_operations.hr_operations.settings.model import LeavePolicy, normalize_working_days


def test_zero_and_seven_both_mean_sunday():
    assert normalize_working_days([0, 1, 2]) == frozenset({7, 1, 2})
    assert normalize_working_days(["7", 1]) == frozenset({7, 1})
    assert normalize_working_days([9, -1]) == frozenset()
    assert normalize_working_days(None) == frozenset()


def test_leave_policy_merges_stored_document_over_defaults():
    defaults = LeavePolicy(sick=12, casual=12, earned=15)

    merged = LeavePolicy.merged({"sickLeavePerYear": 8, "earned": 20}, defaults)

    assert merged == LeavePolicy(sick=8, casual=12, earned=20)
    assert LeavePolicy.merged(None, defaults) == defaults
