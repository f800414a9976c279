"""
Database models package
"""

from .table import Table, TableStatus
from .reservation import Reservation, ReservationStatus

__all__ = ["Table", "TableStatus", "Reservation", "ReservationStatus"]
