"""
Reservation-related Pydantic schemas
"""

import datetime as dt
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_serializer
from pydantic.alias_generators import to_camel

class ReservationCreate(BaseModel):
    """Booking request from the public reservation form"""
    customer_name: str = Field(min_length=1, max_length=255)
    customer_email: Optional[EmailStr] = None
    customer_phone: str = Field(min_length=1, max_length=50)
    party_size: int = Field(gt=0)
    date: dt.date
    time: dt.time
    special_requests: Optional[str] = None
    table_id: Optional[int] = None
    
    class Config:
        alias_generator = to_camel
        populate_by_name = True

class ReservationUpdate(BaseModel):
    """Staff update of an existing reservation"""
    status: Optional[str] = None
    date: Optional[dt.date] = None
    time: Optional[dt.time] = None
    party_size: Optional[int] = Field(default=None, gt=0)
    table_id: Optional[int] = None
    special_instructions: Optional[str] = None
    
    class Config:
        alias_generator = to_camel
        populate_by_name = True

class ReservationResponse(BaseModel):
    """Reservation as returned to clients"""
    id: int
    name: str
    email: Optional[str] = None
    phone_number: str
    date: dt.date
    time: dt.time
    party_size: int
    table_id: Optional[int] = None
    table_number: Optional[str] = None
    status: str
    special_instructions: Optional[str] = None
    
    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True
    
    @field_serializer("time")
    def serialize_time(self, value: dt.time) -> str:
        return value.strftime("%H:%M")
    
    @classmethod
    def from_model(cls, reservation) -> "ReservationResponse":
        response = cls.model_validate(reservation)
        if reservation.table is not None:
            response.table_number = reservation.table.table_number
        return response

class ReservationSelfUpdate(BaseModel):
    """Changes a customer may make to their own booking"""
    phone: str = Field(min_length=1)
    customer_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    customer_email: Optional[EmailStr] = None
    special_requests: Optional[str] = None
    
    class Config:
        alias_generator = to_camel
        populate_by_name = True

class PublicReservationResponse(BaseModel):
    """Reservation as shown to a customer who verified by phone"""
    id: int
    customer_name: str
    date: dt.date
    time: dt.time
    party_size: int
    status: str
    
    class Config:
        alias_generator = to_camel
        populate_by_name = True
    
    @field_serializer("time")
    def serialize_time(self, value: dt.time) -> str:
        return value.strftime("%H:%M")
    
    @classmethod
    def from_model(cls, reservation) -> "PublicReservationResponse":
        return cls(
            id=reservation.id,
            customer_name=reservation.name,
            date=reservation.date,
            time=reservation.time,
            party_size=reservation.party_size,
            status=reservation.status
        )
