"""
Reservation booking, updates and cancellation
"""

import logging
from datetime import date, datetime
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import InfrastructureError, NotFoundError, ReservationConflictError, ValidationError
from app.models import Reservation, ReservationStatus, Table, TableStatus
from app.schemas.reservation import ReservationCreate, ReservationSelfUpdate, ReservationUpdate
from app.services.availability_service import AvailabilityEngine
from app.services.repositories import ReservationRepo, TableRepo

logger = logging.getLogger(__name__)

class ReservationService:
    """Service for booking and maintaining reservations"""
    
    def __init__(self, engine: AvailabilityEngine):
        self.engine = engine
    
    def create_reservation(
        self,
        data: ReservationCreate,
        db: Session,
        today: Optional[date] = None
    ) -> Tuple[Reservation, Optional[Table]]:
        """Book a reservation.

        An explicit ``table_id`` must be free and large enough. Without one the
        smallest free table that seats the party is assigned; when none is
        free the reservation goes on the waitlist with no table.
        """
        today = today or date.today()
        if data.date < today:
            raise ValidationError("Cannot book a reservation in the past")
        
        table = None
        if data.table_id is not None:
            table = self._check_table(db, data.table_id, data.date, data.time, data.party_size)
        else:
            best_fit = self.engine.find_best_fit_table(data.date, data.time, data.party_size)
            if best_fit is not None:
                table = TableRepo.get_by_id(db, best_fit.id)
        
        status = ReservationStatus.CONFIRMED if table is not None else ReservationStatus.WAITLIST
        reservation = Reservation(
            name=data.customer_name.strip(),
            email=data.customer_email,
            phone_number=data.customer_phone.strip(),
            date=data.date,
            time=data.time.replace(second=0, microsecond=0),
            party_size=data.party_size,
            table_id=table.id if table is not None else None,
            status=status,
            special_instructions=data.special_requests
        )
        
        self._commit(db, reservation)
        
        if table is not None:
            logger.info(f"Reservation {reservation.id} confirmed at table {table.table_number} "
                        f"for {data.date.isoformat()} {data.time.strftime('%H:%M')}")
        else:
            logger.warning(f"No table free for party of {data.party_size} at "
                           f"{data.date.isoformat()} {data.time.strftime('%H:%M')}; "
                           f"reservation {reservation.id} waitlisted")
        return reservation, table
    
    def update_reservation(self, reservation_id: int, update: ReservationUpdate, db: Session) -> Reservation:
        """Apply a staff update, re-checking the table when the booking stays confirmed"""
        reservation = ReservationRepo.get_by_id(db, reservation_id)
        if not reservation:
            raise NotFoundError("Reservation not found")
        
        if update.status is not None and update.status not in ReservationStatus.ALL:
            raise ValidationError(
                f"Invalid status '{update.status}'",
                details={"allowed": list(ReservationStatus.ALL)}
            )
        
        new_status = update.status or reservation.status
        new_date = update.date or reservation.date
        new_time = (update.time or reservation.time).replace(second=0, microsecond=0)
        new_party_size = update.party_size or reservation.party_size
        new_table_id = update.table_id if update.table_id is not None else reservation.table_id
        
        booking_changed = (new_status, new_date, new_time, new_party_size, new_table_id) != (
            reservation.status,
            reservation.date,
            reservation.time.replace(second=0, microsecond=0),
            reservation.party_size,
            reservation.table_id
        )
        
        if new_status == ReservationStatus.CONFIRMED and booking_changed:
            if new_table_id is None:
                raise ValidationError("A confirmed reservation needs a table")
            self._check_table(db, new_table_id, new_date, new_time, new_party_size,
                              exclude_reservation_id=reservation.id)
        
        reservation.status = new_status
        reservation.date = new_date
        reservation.time = new_time
        reservation.party_size = new_party_size
        reservation.table_id = new_table_id
        if update.special_instructions is not None:
            reservation.special_instructions = update.special_instructions
        reservation.updated_at = datetime.utcnow()
        
        self._commit(db, reservation)
        logger.info(f"Reservation {reservation.id} updated (status={reservation.status})")
        return reservation
    
    def cancel_reservation(self, reservation_id: int, db: Session, phone: Optional[str] = None) -> Reservation:
        """Mark a reservation cancelled; its table becomes bookable again.

        With ``phone`` the reservation must belong to that number, otherwise
        it is reported as not found.
        """
        reservation = ReservationRepo.get_by_id(db, reservation_id, phone=phone)
        if not reservation:
            raise NotFoundError("Reservation not found")
        
        if reservation.status != ReservationStatus.CANCELLED:
            reservation.status = ReservationStatus.CANCELLED
            reservation.updated_at = datetime.utcnow()
            self._commit(db, reservation)
            logger.info(f"Reservation {reservation.id} cancelled")
        return reservation
    
    def update_own_reservation(self, reservation_id: int, update: ReservationSelfUpdate, db: Session) -> Reservation:
        """Customer edit of name, email and requests, verified by phone"""
        reservation = ReservationRepo.get_by_id(db, reservation_id, phone=update.phone)
        if not reservation:
            raise NotFoundError("Reservation not found")
        if reservation.status == ReservationStatus.CANCELLED:
            raise ValidationError("A cancelled reservation cannot be changed")
        
        if update.customer_name is not None:
            reservation.name = update.customer_name.strip()
        if update.customer_email is not None:
            reservation.email = update.customer_email
        if update.special_requests is not None:
            reservation.special_instructions = update.special_requests
        reservation.updated_at = datetime.utcnow()
        
        self._commit(db, reservation)
        return reservation
    
    @staticmethod
    def _check_table(
        db: Session,
        table_id: int,
        for_date: date,
        at_time,
        party_size: int,
        exclude_reservation_id: Optional[int] = None
    ) -> Table:
        table = TableRepo.get_by_id(db, table_id)
        if not table:
            raise NotFoundError("Table not found")
        if table.status != TableStatus.AVAILABLE:
            raise ReservationConflictError(f"Table {table.table_number} is not available ({table.status})")
        if table.seats < party_size:
            raise ValidationError(
                f"Table {table.table_number} seats {table.seats}, party size is {party_size}"
            )
        if ReservationRepo.is_table_booked(db, table.id, for_date, at_time, exclude_reservation_id):
            raise ReservationConflictError(
                f"Table {table.table_number} is already reserved at "
                f"{for_date.isoformat()} {at_time.strftime('%H:%M')}"
            )
        return table
    
    @staticmethod
    def _commit(db: Session, reservation: Reservation) -> None:
        try:
            db.add(reservation)
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ReservationConflictError("Table was booked by another reservation for this time")
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Database error saving reservation: {e}")
            raise InfrastructureError("Database query failed") from e
        db.refresh(reservation)
