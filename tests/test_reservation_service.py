"""
Tests for booking, updating and cancelling reservations
"""

import pytest
from datetime import date, time
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.db import Base
from app.core.exceptions import NotFoundError, ReservationConflictError, ValidationError
from app.models import Reservation, Table
from app.schemas.reservation import ReservationCreate, ReservationSelfUpdate, ReservationUpdate
from app.schemas.table import TableCreate, TableUpdate
from app.services.availability_service import AvailabilityEngine
from app.services.repositories import SqlAvailabilityStore
from app.services.reservation_service import ReservationService
from app.services.table_service import TableService

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///./test_reservations.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TODAY = date(2024, 5, 20)
DAY = date(2024, 6, 1)

@pytest.fixture
def db_session():
    """Create test database session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)

@pytest.fixture
def tables(db_session):
    created = {}
    for number, seats in [("T2", 2), ("T4", 4), ("T6", 6)]:
        table = Table(table_number=number, seats=seats, is_smoking=False, status="available")
        db_session.add(table)
        created[number] = table
    db_session.commit()
    return created

@pytest.fixture
def service(db_session):
    return ReservationService(AvailabilityEngine(SqlAvailabilityStore(db_session)))

def booking(**overrides):
    data = {
        "customerName": "Ada Lovelace",
        "customerEmail": "ada@analytical-engine.org",
        "customerPhone": "555-0101",
        "partySize": 3,
        "date": "2024-06-01",
        "time": "19:00",
    }
    data.update(overrides)
    return ReservationCreate(**data)

def test_best_fit_table_assigned(db_session, tables, service):
    reservation, table = service.create_reservation(booking(), db_session, today=TODAY)
    
    assert reservation.status == "confirmed"
    assert table.table_number == "T4"
    assert reservation.table_id == tables["T4"].id
    assert reservation.time == time(19, 0)

def test_next_best_table_when_smallest_taken(db_session, tables, service):
    service.create_reservation(booking(), db_session, today=TODAY)
    _, table = service.create_reservation(booking(customerName="Grace"), db_session, today=TODAY)
    
    assert table.table_number == "T6"

def test_waitlist_when_no_table_fits(db_session, tables, service):
    reservation, table = service.create_reservation(booking(partySize=8), db_session, today=TODAY)
    
    assert table is None
    assert reservation.status == "waitlist"
    assert reservation.table_id is None

def test_table_stays_bookable_at_other_times(db_session, tables, service):
    service.create_reservation(booking(partySize=2), db_session, today=TODAY)
    _, table = service.create_reservation(booking(partySize=2, time="19:30"), db_session, today=TODAY)
    
    assert table.table_number == "T2"

def test_explicit_table(db_session, tables, service):
    reservation, table = service.create_reservation(
        booking(tableId=tables["T6"].id), db_session, today=TODAY
    )
    assert table.table_number == "T6"
    assert reservation.status == "confirmed"

def test_explicit_table_already_booked(db_session, tables, service):
    service.create_reservation(booking(tableId=tables["T6"].id), db_session, today=TODAY)
    
    with pytest.raises(ReservationConflictError):
        service.create_reservation(booking(tableId=tables["T6"].id), db_session, today=TODAY)

def test_explicit_table_too_small(db_session, tables, service):
    with pytest.raises(ValidationError):
        service.create_reservation(booking(tableId=tables["T2"].id), db_session, today=TODAY)

def test_explicit_table_missing(db_session, tables, service):
    with pytest.raises(NotFoundError):
        service.create_reservation(booking(tableId=999), db_session, today=TODAY)

def test_past_date_rejected(db_session, tables, service):
    with pytest.raises(ValidationError):
        service.create_reservation(booking(), db_session, today=date(2024, 6, 2))

def test_unique_index_blocks_double_booking(db_session, tables):
    """Two bookings that both passed the availability check cannot both commit"""
    first = Reservation(name="A", phone_number="1", date=DAY, time=time(19, 0), party_size=2,
                        table_id=tables["T4"].id, status="confirmed")
    ReservationService._commit(db_session, first)
    
    second = Reservation(name="B", phone_number="2", date=DAY, time=time(19, 0), party_size=2,
                         table_id=tables["T4"].id, status="confirmed")
    with pytest.raises(ReservationConflictError):
        ReservationService._commit(db_session, second)
    
    assert db_session.query(Reservation).count() == 1

def test_cancel_frees_table(db_session, tables, service):
    reservation, _ = service.create_reservation(booking(partySize=6), db_session, today=TODAY)
    
    waitlisted, table = service.create_reservation(booking(partySize=6), db_session, today=TODAY)
    assert table is None
    
    cancelled = service.cancel_reservation(reservation.id, db_session)
    assert cancelled.status == "cancelled"
    
    _, table = service.create_reservation(booking(partySize=6), db_session, today=TODAY)
    assert table.table_number == "T6"

def test_cancel_missing(db_session, service):
    with pytest.raises(NotFoundError):
        service.cancel_reservation(42, db_session)

def test_cancel_checks_phone(db_session, tables, service):
    reservation, _ = service.create_reservation(booking(), db_session, today=TODAY)
    
    with pytest.raises(NotFoundError):
        service.cancel_reservation(reservation.id, db_session, phone="555-9999")
    
    cancelled = service.cancel_reservation(reservation.id, db_session, phone=" 555-0101 ")
    assert cancelled.status == "cancelled"

def test_customer_update_limited_to_contact_details(db_session, tables, service):
    reservation, _ = service.create_reservation(booking(), db_session, today=TODAY)
    
    updated = service.update_own_reservation(
        reservation.id,
        ReservationSelfUpdate(phone="555-0101", customerName="Ada King", specialRequests="Quiet corner"),
        db_session
    )
    assert updated.name == "Ada King"
    assert updated.special_instructions == "Quiet corner"
    assert updated.time == time(19, 0)
    
    with pytest.raises(NotFoundError):
        service.update_own_reservation(
            reservation.id, ReservationSelfUpdate(phone="555-9999", customerName="Eve"), db_session
        )
    
    service.cancel_reservation(reservation.id, db_session)
    with pytest.raises(ValidationError):
        service.update_own_reservation(
            reservation.id, ReservationSelfUpdate(phone="555-0101", customerName="Ada"), db_session
        )

def test_confirm_waitlisted_reservation(db_session, tables, service):
    reservation, _ = service.create_reservation(booking(partySize=8), db_session, today=TODAY)
    
    with pytest.raises(ValidationError):
        service.update_reservation(reservation.id, ReservationUpdate(status="confirmed"), db_session)
    
    updated = service.update_reservation(
        reservation.id,
        ReservationUpdate(status="confirmed", partySize=6, tableId=tables["T6"].id),
        db_session
    )
    assert updated.status == "confirmed"

def test_notes_update_on_table_under_maintenance(db_session, tables, service):
    reservation, table = service.create_reservation(booking(), db_session, today=TODAY)
    TableService.update_table(table.id, TableUpdate(status="maintenance"), db_session)
    
    updated = service.update_reservation(
        reservation.id, ReservationUpdate(specialInstructions="Birthday"), db_session
    )
    assert updated.special_instructions == "Birthday"
    assert updated.table_id == table.id
    
    with pytest.raises(ReservationConflictError):
        service.update_reservation(reservation.id, ReservationUpdate(time="19:30"), db_session)
    assert updated.table_id == tables["T6"].id

def test_move_reservation_onto_booked_table(db_session, tables, service):
    first, _ = service.create_reservation(booking(partySize=2), db_session, today=TODAY)
    second, _ = service.create_reservation(booking(partySize=2, time="20:00"), db_session, today=TODAY)
    assert second.table_id == first.table_id
    
    with pytest.raises(ReservationConflictError):
        service.update_reservation(second.id, ReservationUpdate(time="19:00"), db_session)

def test_update_keeps_own_slot(db_session, tables, service):
    reservation, _ = service.create_reservation(booking(), db_session, today=TODAY)
    
    updated = service.update_reservation(
        reservation.id, ReservationUpdate(specialInstructions="Window seat"), db_session
    )
    assert updated.special_instructions == "Window seat"
    assert updated.status == "confirmed"

def test_update_rejects_unknown_status(db_session, tables, service):
    reservation, _ = service.create_reservation(booking(), db_session, today=TODAY)
    
    with pytest.raises(ValidationError):
        service.update_reservation(reservation.id, ReservationUpdate(status="seated"), db_session)

# -------- Tables --------

def test_create_table_sets_qr_url(db_session):
    table = TableService.create_table(TableCreate(tableNumber="9B", seats=4), db_session)
    
    assert table.id is not None
    assert table.qr_code_url.endswith("/menu?table=9B")
    assert table.status == "available"

def test_duplicate_table_number(db_session, tables):
    with pytest.raises(ReservationConflictError):
        TableService.create_table(TableCreate(tableNumber="T2", seats=2), db_session)

def test_invalid_table_status(db_session, tables):
    with pytest.raises(ValidationError):
        TableService.update_table(tables["T2"].id, TableUpdate(status="broken"), db_session)

def test_maintenance_table_not_assigned(db_session, tables, service):
    TableService.update_table(tables["T4"].id, TableUpdate(status="maintenance"), db_session)
    
    _, table = service.create_reservation(booking(), db_session, today=TODAY)
    assert table.table_number == "T6"
    
    with pytest.raises(ReservationConflictError):
        service.create_reservation(booking(tableId=tables["T4"].id), db_session, today=TODAY)

def test_delete_table_with_upcoming_booking(db_session, tables, service):
    service.create_reservation(booking(), db_session, today=TODAY)
    
    with pytest.raises(ReservationConflictError):
        TableService.delete_table(tables["T4"].id, db_session, today=TODAY)
    
    TableService.delete_table(tables["T6"].id, db_session, today=TODAY)
    assert db_session.query(Table).count() == 2
