from __future__ import annotations

from enum import Enum
from typing import Mapping

from casework.errors import InvalidTransition


class CaseStatus(str, Enum):
    """Supported states for a case's lifecycle."""

    NEW = "new"
    OPEN = "open"
    ESCALATED = "escalated"
    RESOLVED = "resolved"
    CLOSED = "closed"


class CaseStateMachine:
    """Validate case lifecycle transitions. Every edge moves forward; there is no reopen."""

    _TRANSITIONS: Mapping[CaseStatus, frozenset[CaseStatus]] = {
        CaseStatus.NEW: frozenset({CaseStatus.OPEN, CaseStatus.ESCALATED, CaseStatus.RESOLVED}),
        CaseStatus.OPEN: frozenset({CaseStatus.ESCALATED, CaseStatus.RESOLVED}),
        CaseStatus.ESCALATED: frozenset({CaseStatus.RESOLVED}),
        CaseStatus.RESOLVED: frozenset({CaseStatus.CLOSED}),
        CaseStatus.CLOSED: frozenset(),
    }

    @classmethod
    def initial_state(cls) -> CaseStatus:
        return CaseStatus.NEW

    @classmethod
    def can_transition(cls, current: CaseStatus, new: CaseStatus) -> bool:
        return new in cls._TRANSITIONS.get(current, frozenset())

    @classmethod
    def assert_transition(cls, current: CaseStatus, new: CaseStatus) -> None:
        if not cls.can_transition(current, new):
            raise InvalidTransition(f"Invalid case status transition: {current.value} -> {new.value}")

    @classmethod
    def sources_for(cls, target: CaseStatus) -> frozenset[CaseStatus]:
        """States from which ``target`` may be reached in one step."""

        return frozenset(state for state, targets in cls._TRANSITIONS.items() if target in targets)
