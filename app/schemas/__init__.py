"""
Pydantic schemas package
"""

from .common import *
from .availability import *
from .reservation import *
from .table import *

__all__ = [
    "StandardResponse",
    "ErrorResponse",
    "Slot",
    "TableInfo",
    "ReservationCount",
    "ReservationCreate",
    "ReservationUpdate",
    "ReservationResponse",
    "ReservationSelfUpdate",
    "PublicReservationResponse",
    "TableCreate",
    "TableUpdate",
]
