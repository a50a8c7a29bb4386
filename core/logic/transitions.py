"""
State Transition Logic for Datasets.

Contains business rules for valid dataset status transitions.
Separated from data models for clean architecture.

Exports:
    can_dataset_transition: Check if dataset status transition is valid
    get_dataset_terminal_states: Terminal states of an upload attempt
    get_dataset_active_states: Non-terminal states of an upload attempt
    is_dataset_terminal: Check if dataset is in a terminal state
    validate_dataset_transition: Raise ValidationError on invalid transition

Dependencies:
    core.models.enums: DatasetStatus
"""

from typing import List

from exceptions import ValidationError
from ..models.enums import DatasetStatus


def can_dataset_transition(
    current: DatasetStatus,
    target: DatasetStatus,
    new_attempt: bool = False
) -> bool:
    """
    Check if a dataset can transition from current to target status.

    COMPLETED and FAILED are terminal for one upload attempt. A re-upload
    starts a new attempt, which may move them back to PROCESSING.

    Args:
        current: Current dataset status
        target: Target dataset status
        new_attempt: True when the transition starts a new upload attempt

    Returns:
        True if transition is valid, False otherwise
    """
    # Same status is always allowed (no-op)
    if current == target:
        return True

    transitions = {
        DatasetStatus.UPLOADING: [DatasetStatus.PROCESSING, DatasetStatus.FAILED],
        DatasetStatus.PROCESSING: [DatasetStatus.COMPLETED, DatasetStatus.FAILED],
        DatasetStatus.COMPLETED: [],  # Terminal for this attempt
        DatasetStatus.FAILED: []  # Terminal for this attempt
    }

    if new_attempt and current in get_dataset_terminal_states():
        return target == DatasetStatus.PROCESSING

    return target in transitions.get(current, [])


def get_dataset_terminal_states() -> List[DatasetStatus]:
    """
    Get list of terminal states for one upload attempt.

    Returns:
        List of terminal dataset statuses
    """
    return [
        DatasetStatus.COMPLETED,
        DatasetStatus.FAILED
    ]


def get_dataset_active_states() -> List[DatasetStatus]:
    return [
        DatasetStatus.UPLOADING,
        DatasetStatus.PROCESSING
    ]


def is_dataset_terminal(status: DatasetStatus) -> bool:
    """
    Check if a dataset status is terminal.

    Args:
        status: Dataset status to check

    Returns:
        True if status is terminal, False otherwise
    """
    return status in get_dataset_terminal_states()


def validate_dataset_transition(
    current: DatasetStatus,
    target: DatasetStatus,
    new_attempt: bool = False
) -> None:
    """Raise ValidationError when the transition is not allowed."""
    if not can_dataset_transition(current, target, new_attempt=new_attempt):
        raise ValidationError(
            f"Invalid dataset status transition: {current.value} -> {target.value}",
            details={'current': current.value, 'target': target.value, 'new_attempt': new_attempt}
        )
