"""
Availability schemas: generated slots and the typed rows read from storage
"""

import datetime as dt
from typing import Optional
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

class Slot(BaseModel):
    """A bookable time window with remaining table-equivalents"""
    time: str
    display: str
    available: int

class TableInfo(BaseModel):
    """Table descriptor returned to booking clients"""
    id: int
    table_number: str
    seats: int
    is_smoking: bool = False
    status: str
    qr_code_url: Optional[str] = None
    
    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True

class ReservationCount(BaseModel):
    """Confirmed reservations at one time of day"""
    time: dt.time
    count: int
