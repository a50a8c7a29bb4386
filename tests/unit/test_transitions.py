"""
Exhaustive dataset status transition tests.

Anti-overfitting: Every (current, target) enum pair is tested, for both
ordinary transitions and transitions that start a new upload attempt.
"""

import pytest

from core.models.enums import DatasetStatus
from core.logic.transitions import (
    can_dataset_transition,
    get_dataset_active_states,
    get_dataset_terminal_states,
    is_dataset_terminal,
    validate_dataset_transition,
)
from exceptions import ValidationError


_DATASET_TRANSITIONS = {
    DatasetStatus.UPLOADING: {DatasetStatus.PROCESSING, DatasetStatus.FAILED},
    DatasetStatus.PROCESSING: {DatasetStatus.COMPLETED, DatasetStatus.FAILED},
    DatasetStatus.COMPLETED: set(),
    DatasetStatus.FAILED: set(),
}

ALL_STATUSES = list(DatasetStatus)
_PAIRS = [(current, target) for current in ALL_STATUSES for target in ALL_STATUSES]


def _expected(current, target, new_attempt=False) -> bool:
    if current == target:
        return True
    if new_attempt and current in (DatasetStatus.COMPLETED, DatasetStatus.FAILED):
        return target == DatasetStatus.PROCESSING
    return target in _DATASET_TRANSITIONS[current]


class TestDatasetTransitionsExhaustive:

    @pytest.mark.parametrize("current,target", _PAIRS,
                             ids=[f"{c.value}->{t.value}" for c, t in _PAIRS])
    def test_transition_pair(self, current, target):
        assert can_dataset_transition(current, target) == _expected(current, target)

    @pytest.mark.parametrize("current,target", _PAIRS,
                             ids=[f"{c.value}->{t.value}" for c, t in _PAIRS])
    def test_new_attempt_pair(self, current, target):
        assert (
            can_dataset_transition(current, target, new_attempt=True)
            == _expected(current, target, new_attempt=True)
        )

    def test_terminal_and_active_partition_statuses(self):
        terminal = set(get_dataset_terminal_states())
        active = set(get_dataset_active_states())
        assert terminal == {DatasetStatus.COMPLETED, DatasetStatus.FAILED}
        assert terminal & active == set()
        assert terminal | active == set(ALL_STATUSES)

    @pytest.mark.parametrize("status", ALL_STATUSES, ids=[s.value for s in ALL_STATUSES])
    def test_is_terminal_agrees_with_list(self, status):
        assert is_dataset_terminal(status) == (status in get_dataset_terminal_states())

    def test_validate_raises_validation_error(self):
        with pytest.raises(ValidationError):
            validate_dataset_transition(DatasetStatus.COMPLETED, DatasetStatus.UPLOADING)

    def test_validate_accepts_valid(self):
        validate_dataset_transition(DatasetStatus.UPLOADING, DatasetStatus.PROCESSING)
