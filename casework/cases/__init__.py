"""Case workflow: support tickets, message threads and their lifecycle."""

from .models import Case, CaseMessage, CasePriority, CaseType
from .repository import CaseRepository
from .service import CaseService
from .state import CaseStateMachine, CaseStatus

__all__ = [
    "Case",
    "CaseMessage",
    "CasePriority",
    "CaseRepository",
    "CaseService",
    "CaseStateMachine",
    "CaseStatus",
    "CaseType",
]
