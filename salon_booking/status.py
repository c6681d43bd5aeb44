# salon_booking/status.py

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import ValidationError


class StatusName(str, Enum):
    pending = "PENDING"
    confirmed = "CONFIRMED"
    in_progress = "IN_PROGRESS"
    completed = "COMPLETED"
    cancelled = "CANCELLED"
    no_show = "NO_SHOW"


class StatusKind(str, Enum):
    active = "active"
    terminal = "terminal"


# The only place terminal statuses are declared.
TERMINAL_STATUSES = frozenset({
    StatusName.completed,
    StatusName.cancelled,
    StatusName.no_show,
})

TRANSITIONS = {
    StatusName.pending: {StatusName.confirmed, StatusName.cancelled},
    StatusName.confirmed: {StatusName.in_progress, StatusName.cancelled, StatusName.no_show},
    StatusName.in_progress: {StatusName.completed, StatusName.cancelled},
    StatusName.completed: set(),
    StatusName.cancelled: set(),
    StatusName.no_show: set(),
}


def _as_status_name(name) -> Optional[StatusName]:
    try:
        return StatusName(name)
    except ValueError:
        return None


def is_terminal(name) -> bool:
    return _as_status_name(name) in TERMINAL_STATUSES


def kind_for(name) -> StatusKind:
    return StatusKind.terminal if is_terminal(name) else StatusKind.active


@dataclass(frozen=True)
class AppointmentStatus:
    """Immutable status value as loaded from the status store.

    The terminal/active split is carried explicitly in ``kind`` so callers
    never have to match on the name.
    """

    id: str
    name: str
    description: Optional[str] = None
    kind: Optional[StatusKind] = None

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValidationError("AppointmentStatus name cannot be empty")
        if len(self.name) > 50:
            raise ValidationError("AppointmentStatus name is too long (max 50 characters)")
        if self.description and len(self.description) > 200:
            raise ValidationError("AppointmentStatus description is too long (max 200 characters)")
        if self.kind is None:
            object.__setattr__(self, "kind", kind_for(self.name))
        else:
            object.__setattr__(self, "kind", StatusKind(self.kind))

    @property
    def is_terminal(self) -> bool:
        return self.kind == StatusKind.terminal

    def can_transition_to(self, new_name) -> bool:
        current = _as_status_name(self.name)
        target = _as_status_name(new_name)
        if current is None or target is None:
            return False
        return target in TRANSITIONS[current]
