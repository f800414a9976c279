"""
Reservation API routes: availability lookups and public booking
"""

from datetime import date as date_type
from typing import Optional
from fastapi import APIRouter, Depends, Request, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.exceptions import NotFoundError, ReservationError
from app.schemas.reservation import (
    PublicReservationResponse,
    ReservationCreate,
    ReservationResponse,
    ReservationSelfUpdate
)
from app.services.availability_service import AvailabilityConfig, AvailabilityEngine, coerce_date
from app.services.repositories import ReservationRepo, SqlAvailabilityStore
from app.services.reservation_service import ReservationService
from app.utils.security import enforce_rate_limit, is_admin_request
from app.utils.responses import success_response, error_response, exception_response

router = APIRouter()

def get_availability_engine(db: Session = Depends(get_db)) -> AvailabilityEngine:
    return AvailabilityEngine(SqlAvailabilityStore(db), AvailabilityConfig.from_settings())

def get_reservation_service(
    engine: AvailabilityEngine = Depends(get_availability_engine)
) -> ReservationService:
    return ReservationService(engine)

@router.get("/available-slots", dependencies=[Depends(enforce_rate_limit)])
async def get_available_slots(
    date: Optional[str] = None,
    party_size: Optional[str] = Query(None, alias="partySize"),
    engine: AvailabilityEngine = Depends(get_availability_engine)
):
    """Bookable time slots for a date"""
    try:
        day = coerce_date(date)
        slots = engine.get_available_slots(day, party_size)
    except ReservationError as e:
        return exception_response(e)
    
    return JSONResponse(content={
        "date": day.isoformat(),
        "availableSlots": [slot.model_dump() for slot in slots],
        "success": True
    })

@router.get("/available-tables", dependencies=[Depends(enforce_rate_limit)])
async def get_available_tables(
    date: Optional[str] = None,
    time: Optional[str] = None,
    party_size: Optional[str] = None,
    engine: AvailabilityEngine = Depends(get_availability_engine)
):
    """Tables free at a date and time, smallest sufficient table first"""
    try:
        tables = engine.get_available_tables(date, time, party_size)
    except ReservationError as e:
        return exception_response(e)
    
    return JSONResponse(content={
        "tables": [table.model_dump(by_alias=True) for table in tables],
        "success": True
    })

@router.post("", dependencies=[Depends(enforce_rate_limit)])
async def create_reservation(
    reservation_data: ReservationCreate,
    db: Session = Depends(get_db),
    service: ReservationService = Depends(get_reservation_service)
):
    """Book a table, or join the waitlist when nothing fits"""
    try:
        reservation, table = service.create_reservation(reservation_data, db)
    except ReservationError as e:
        return exception_response(e)
    
    confirmed = table is not None
    return success_response(
        message="Reservation confirmed successfully!" if confirmed
        else "No tables available at this time. Added to waitlist!",
        data={
            "reservation": ReservationResponse.from_model(reservation).model_dump(mode="json", by_alias=True),
            "table_qr_code": table.qr_code_url if confirmed else None
        },
        status_code=201
    )

@router.get("", dependencies=[Depends(enforce_rate_limit)])
async def list_reservations(
    request: Request,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Upcoming reservations for a contact, or all upcoming ones for staff"""
    if not email and not phone and not is_admin_request(request):
        return error_response(
            message="An email or phone number is required",
            error_code="validation_error",
            status_code=400
        )
    
    try:
        reservations = ReservationRepo.list_upcoming(
            db,
            today=date_type.today(),
            email=email,
            phone=phone,
            limit=5 if (email or phone) else 20
        )
    except ReservationError as e:
        return exception_response(e)
    
    return success_response(
        message="Reservations retrieved successfully",
        data={
            "reservations": [
                ReservationResponse.from_model(r).model_dump(mode="json", by_alias=True)
                for r in reservations
            ]
        }
    )

@router.get("/{reservation_id}", dependencies=[Depends(enforce_rate_limit)])
async def get_reservation(
    reservation_id: int,
    request: Request,
    phone: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Get a single reservation; customers verify with the booking phone number"""
    admin = is_admin_request(request)
    if not admin and not (phone and phone.strip()):
        return error_response(
            message="Phone number is required for verification",
            error_code="unauthorized",
            status_code=401
        )
    
    try:
        reservation = ReservationRepo.get_by_id(db, reservation_id, phone=None if admin else phone)
        if not reservation:
            raise NotFoundError("Reservation not found")
    except ReservationError as e:
        return exception_response(e)
    
    if admin:
        data = ReservationResponse.from_model(reservation).model_dump(mode="json", by_alias=True)
    else:
        data = PublicReservationResponse.from_model(reservation).model_dump(mode="json", by_alias=True)
    return success_response(message="Reservation found", data=data)

@router.patch("/{reservation_id}", dependencies=[Depends(enforce_rate_limit)])
async def update_own_reservation(
    reservation_id: int,
    update: ReservationSelfUpdate,
    db: Session = Depends(get_db),
    service: ReservationService = Depends(get_reservation_service)
):
    """Customer update of contact details and requests"""
    try:
        reservation = service.update_own_reservation(reservation_id, update, db)
    except ReservationError as e:
        return exception_response(e)
    
    return success_response(
        message="Reservation updated successfully",
        data=PublicReservationResponse.from_model(reservation).model_dump(mode="json", by_alias=True)
    )

@router.delete("/{reservation_id}", dependencies=[Depends(enforce_rate_limit)])
async def cancel_own_reservation(
    reservation_id: int,
    phone: Optional[str] = None,
    db: Session = Depends(get_db),
    service: ReservationService = Depends(get_reservation_service)
):
    """Customer cancellation, verified by the booking phone number"""
    if not phone or not phone.strip():
        return error_response(
            message="Phone number is required for verification",
            error_code="unauthorized",
            status_code=401
        )
    
    try:
        reservation = service.cancel_reservation(reservation_id, db, phone=phone)
    except ReservationError as e:
        return exception_response(e)
    
    return success_response(
        message="Reservation cancelled successfully",
        data=PublicReservationResponse.from_model(reservation).model_dump(mode="json", by_alias=True)
    )
