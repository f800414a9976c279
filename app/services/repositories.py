"""
Repository layer over SQLAlchemy for tables and reservations.

Every query is wrapped so that driver and ORM failures leave this module as
``InfrastructureError``; callers never see ``SQLAlchemyError``.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date, time
from typing import Iterator, List, Optional, Set

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import InfrastructureError
from app.models import Reservation, ReservationStatus, Table, TableStatus
from app.schemas.availability import ReservationCount, TableInfo

logger = logging.getLogger(__name__)


@contextmanager
def translate_db_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(f"Database error during {operation}: {e}")
        raise InfrastructureError("Database query failed") from e


# -------- Availability store --------

class SqlAvailabilityStore:
    """Read-only queries the availability engine depends on"""

    def __init__(self, db: Session):
        self.db = db

    def count_confirmed_reservations_by_time(self, for_date: date) -> List[ReservationCount]:
        with translate_db_errors("count_confirmed_reservations_by_time"):
            rows = self.db.query(
                Reservation.time,
                func.count(Reservation.id).label("reservation_count")
            ).filter(
                Reservation.date == for_date,
                Reservation.status == ReservationStatus.CONFIRMED
            ).group_by(Reservation.time).all()
        return [ReservationCount(time=row.time, count=row.reservation_count) for row in rows]

    def list_available_tables(self, min_seats: Optional[int] = None) -> List[TableInfo]:
        with translate_db_errors("list_available_tables"):
            query = self.db.query(Table).filter(Table.status == TableStatus.AVAILABLE)
            if min_seats is not None:
                query = query.filter(Table.seats >= min_seats)
            tables = query.order_by(Table.seats, Table.table_number).all()
        return [TableInfo.model_validate(table) for table in tables]

    def list_confirmed_reservation_table_ids(self, for_date: date, at_time: time) -> Set[int]:
        with translate_db_errors("list_confirmed_reservation_table_ids"):
            rows = self.db.query(Reservation.table_id).filter(
                Reservation.date == for_date,
                Reservation.time == at_time,
                Reservation.status == ReservationStatus.CONFIRMED,
                Reservation.table_id.isnot(None)
            ).all()
        return {row.table_id for row in rows}

    def count_available_tables(self) -> int:
        with translate_db_errors("count_available_tables"):
            return self.db.query(func.count(Table.id)).filter(
                Table.status == TableStatus.AVAILABLE
            ).scalar() or 0


# -------- Table repository --------

class TableRepo:
    @staticmethod
    def get_by_id(db: Session, table_id: int) -> Optional[Table]:
        with translate_db_errors("get_table"):
            return db.query(Table).filter(Table.id == table_id).first()

    @staticmethod
    def get_by_number(db: Session, table_number: str) -> Optional[Table]:
        with translate_db_errors("get_table_by_number"):
            return db.query(Table).filter(Table.table_number == table_number).first()

    @staticmethod
    def list_all(db: Session, status: Optional[str] = None, min_seats: Optional[int] = None) -> List[Table]:
        with translate_db_errors("list_tables"):
            query = db.query(Table)
            if status:
                query = query.filter(Table.status == status)
            if min_seats is not None:
                query = query.filter(Table.seats >= min_seats)
            return query.order_by(Table.table_number).all()

    @staticmethod
    def has_upcoming_confirmed(db: Session, table_id: int, today: date) -> bool:
        with translate_db_errors("has_upcoming_confirmed"):
            return db.query(Reservation.id).filter(
                Reservation.table_id == table_id,
                Reservation.status == ReservationStatus.CONFIRMED,
                Reservation.date >= today
            ).first() is not None


# -------- Reservation repository --------

class ReservationRepo:
    @staticmethod
    def get_by_id(db: Session, reservation_id: int, phone: Optional[str] = None) -> Optional[Reservation]:
        with translate_db_errors("get_reservation"):
            query = db.query(Reservation).filter(Reservation.id == reservation_id)
            if phone is not None:
                query = query.filter(Reservation.phone_number == phone.strip())
            return query.first()

    @staticmethod
    def list_upcoming(
        db: Session,
        today: date,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        limit: int = 20
    ) -> List[Reservation]:
        with translate_db_errors("list_upcoming_reservations"):
            query = db.query(Reservation).filter(Reservation.date >= today)
            if email:
                query = query.filter(func.lower(Reservation.email) == email.lower())
            elif phone:
                query = query.filter(Reservation.phone_number == phone)
            return query.order_by(Reservation.date, Reservation.time).limit(limit).all()

    @staticmethod
    def list_for_date(db: Session, for_date: date, status: Optional[str] = None) -> List[Reservation]:
        with translate_db_errors("list_reservations_for_date"):
            query = db.query(Reservation).filter(Reservation.date == for_date)
            if status:
                query = query.filter(Reservation.status == status)
            return query.order_by(Reservation.time, Reservation.id).all()

    @staticmethod
    def is_table_booked(
        db: Session,
        table_id: int,
        for_date: date,
        at_time: time,
        exclude_reservation_id: Optional[int] = None
    ) -> bool:
        with translate_db_errors("is_table_booked"):
            query = db.query(Reservation.id).filter(
                Reservation.table_id == table_id,
                Reservation.date == for_date,
                Reservation.time == at_time,
                Reservation.status == ReservationStatus.CONFIRMED
            )
            if exclude_reservation_id:
                query = query.filter(Reservation.id != exclude_reservation_id)
            return query.first() is not None
