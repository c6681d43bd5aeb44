# salon_booking/repositories.py

import logging
from datetime import datetime
from typing import List, Optional

from sqlmodel import Session, select

from .core import as_utc
from .domain import Appointment
from .errors import ConflictError, NotFoundError
from .models import (
    Appointment as AppointmentModel,
    AppointmentStatus as AppointmentStatusModel,
    Service as ServiceModel,
    Stylist as StylistModel,
)
from .status import AppointmentStatus, StatusKind, kind_for

logger = logging.getLogger(__name__)


def _db_time(value: Optional[datetime]) -> Optional[datetime]:
    # Columns are DateTime(timezone=True); bind aware UTC values only.
    return as_utc(value)


class StatusStore:
    def __init__(self, session: Session):
        self.session = session

    @staticmethod
    def _to_value(row: AppointmentStatusModel) -> AppointmentStatus:
        return AppointmentStatus(
            id=row.id,
            name=row.name,
            description=row.description,
            kind=StatusKind(row.kind),
        )

    def find_by_id(self, status_id: str) -> Optional[AppointmentStatus]:
        row = self.session.get(AppointmentStatusModel, status_id)
        return self._to_value(row) if row is not None else None

    def create(self, name: str, description: Optional[str] = None) -> AppointmentStatus:
        row = AppointmentStatusModel(
            name=name,
            description=description,
            kind=kind_for(name).value,
        )
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        return self._to_value(row)


class ServiceStore:
    def __init__(self, session: Session):
        self.session = session

    def find_by_id(self, service_id: str) -> Optional[ServiceModel]:
        return self.session.get(ServiceModel, service_id)


class StylistStore:
    def __init__(self, session: Session):
        self.session = session

    def find_by_id(self, stylist_id: str) -> Optional[StylistModel]:
        return self.session.get(StylistModel, stylist_id)


class AppointmentStore:
    """SQLModel-backed appointment persistence.

    ``update`` guards the check-then-act race: it locks the stylist row,
    re-runs the overlap query inside the write transaction and only then
    commits.
    """

    def __init__(self, session: Session, status_store: Optional[StatusStore] = None):
        self.session = session
        self.status_store = status_store or StatusStore(session)

    def _to_entity(self, row: AppointmentModel) -> Appointment:
        status = self.status_store.find_by_id(row.status_id)
        if status is None:
            raise NotFoundError("AppointmentStatus", row.status_id)
        return Appointment.from_persistence(
            id=row.id,
            date_time=row.starts_at,
            duration=row.duration,
            user_id=row.user_id,
            client_id=row.client_id,
            schedule_id=row.schedule_id,
            status=status,
            stylist_id=row.stylist_id,
            service_ids=list(row.service_ids or []),
            confirmed_at=row.confirmed_at,
            notes=row.notes,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @staticmethod
    def _copy_into(row: AppointmentModel, appt: Appointment) -> None:
        row.starts_at = _db_time(appt.date_time)
        row.ends_at = _db_time(appt.end_time)
        row.duration = appt.duration
        row.user_id = appt.user_id
        row.client_id = appt.client_id
        row.schedule_id = appt.schedule_id
        row.status_id = appt.status_id
        row.stylist_id = appt.stylist_id
        row.service_ids = list(appt.service_ids)
        row.confirmed_at = _db_time(appt.confirmed_at)
        row.notes = appt.notes
        row.created_at = _db_time(appt.created_at)
        row.updated_at = _db_time(appt.updated_at)

    def _commit(self, row: AppointmentModel) -> Appointment:
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        return self._to_entity(row)

    def find_by_id(self, appointment_id: str) -> Optional[Appointment]:
        row = self.session.get(AppointmentModel, appointment_id)
        return self._to_entity(row) if row is not None else None

    def find_conflicting_appointments(
        self,
        stylist_id: str,
        window_start: datetime,
        window_end: datetime,
        exclude_id: Optional[str] = None,
    ) -> List[Appointment]:
        stmt = (
            select(AppointmentModel)
            .join(AppointmentStatusModel, AppointmentStatusModel.id == AppointmentModel.status_id)
            .where(AppointmentModel.stylist_id == stylist_id)
            .where(AppointmentModel.starts_at < _db_time(window_end))
            .where(AppointmentModel.ends_at > _db_time(window_start))
            .where(AppointmentStatusModel.kind != StatusKind.terminal.value)
        )
        if exclude_id:
            stmt = stmt.where(AppointmentModel.id != exclude_id)

        rows = self.session.exec(stmt.order_by(AppointmentModel.starts_at)).all()
        return [self._to_entity(row) for row in rows]

    def _lock_stylist(self, stylist_id: str) -> None:
        # FOR UPDATE is ignored by SQLite, whose writers are serialized anyway.
        self.session.exec(
            select(StylistModel).where(StylistModel.id == stylist_id).with_for_update()
        ).first()

    def save(self, appt: Appointment) -> Appointment:
        if appt.stylist_id and not appt.status.is_terminal:
            self._lock_stylist(appt.stylist_id)
            self._raise_on_overlap(appt)
        row = AppointmentModel(id=appt.id)
        self._copy_into(row, appt)
        return self._commit(row)

    def update(self, appt: Appointment) -> Appointment:
        row = self.session.get(AppointmentModel, appt.id)
        if row is None:
            raise NotFoundError("Appointment", appt.id)

        window_moved = (
            row.stylist_id != appt.stylist_id
            or as_utc(row.starts_at) != appt.date_time
            or row.duration != appt.duration
        )
        if appt.stylist_id and window_moved and not appt.status.is_terminal:
            self._lock_stylist(appt.stylist_id)
            self._raise_on_overlap(appt)

        self._copy_into(row, appt)
        return self._commit(row)

    def _raise_on_overlap(self, appt: Appointment) -> None:
        clashes = self.find_conflicting_appointments(
            appt.stylist_id, appt.date_time, appt.end_time, appt.id
        )
        if clashes:
            self.session.rollback()
            logger.warning(
                "Write-time overlap for stylist %s on appointment %s (%d clash(es))",
                appt.stylist_id, appt.id, len(clashes),
            )
            raise ConflictError(
                f"The appointment conflicts with {len(clashes)} existing appointment(s)",
                count=len(clashes),
            )
