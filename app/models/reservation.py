"""
Reservation model
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Date, Time, Text, DateTime, ForeignKey, Index, text
from sqlalchemy.orm import relationship

from app.core.db import Base

class ReservationStatus:
    WAITLIST = "waitlist"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"

    ALL = (WAITLIST, CONFIRMED, CANCELLED)

class Reservation(Base):
    __tablename__ = "reservations"
    
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True, index=True)
    phone_number = Column(String(50), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    time = Column(Time, nullable=False)
    party_size = Column(Integer, nullable=False)
    table_id = Column(Integer, ForeignKey("tables.id"), nullable=True)
    status = Column(String(50), default=ReservationStatus.WAITLIST, nullable=False)
    special_instructions = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    table = relationship("Table", back_populates="reservations")
    
    # At most one confirmed booking per table and (date, time)
    __table_args__ = (
        Index(
            "uq_confirmed_table_slot",
            "table_id", "date", "time",
            unique=True,
            sqlite_where=text("status = 'confirmed'"),
            postgresql_where=text("status = 'confirmed'"),
        ),
    )
