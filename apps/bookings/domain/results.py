"""
Evaluation results

The engine never raises for expected outcomes. Validation problems,
conflicts and illegal transitions come back as a Reject; everything else is
an Accept, optionally carrying non-blocking warnings.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple
from uuid import UUID

from shared.domain.value_objects import DateRange


class ResultCode(Enum):
    START_DATE_TAKEN = 'START_DATE_TAKEN'
    DATE_RANGE_BLOCKED = 'DATE_RANGE_BLOCKED'
    INVALID_RANGE = 'INVALID_RANGE'
    MISSING_REJECTION_REASON = 'MISSING_REJECTION_REASON'
    VALIDATION_ERROR = 'VALIDATION_ERROR'


CONFLICT_CODES = frozenset({ResultCode.START_DATE_TAKEN, ResultCode.DATE_RANGE_BLOCKED})


@dataclass(frozen=True)
class Accept:
    """
    Positive outcome

    dates: the normalized range that was evaluated (creates and edits)
    warnings: human-readable notes that must not block the write
    conflicts: ids of live bookings the warnings refer to
    noop: the request asked for the state the booking is already in
    """
    dates: DateRange | None = None
    warnings: Tuple[str, ...] = ()
    conflicts: Tuple[UUID, ...] = ()
    noop: bool = False

    @property
    def accepted(self) -> bool:
        return True

    def __bool__(self):
        return True


@dataclass(frozen=True)
class Reject:
    """
    Negative outcome

    errors holds field-level messages for VALIDATION_ERROR / INVALID_RANGE.
    conflicts holds the ids of the colliding live bookings.
    """
    code: ResultCode
    message: str
    errors: Dict[str, List[str]] = field(default_factory=dict)
    conflicts: Tuple[UUID, ...] = ()

    @property
    def accepted(self) -> bool:
        return False

    @property
    def is_conflict(self) -> bool:
        return self.code in CONFLICT_CODES

    def __bool__(self):
        return False
