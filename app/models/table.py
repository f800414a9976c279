"""
Table model
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship

from app.core.db import Base

class TableStatus:
    AVAILABLE = "available"
    RESERVED = "reserved"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"

    ALL = (AVAILABLE, RESERVED, OCCUPIED, MAINTENANCE)

class Table(Base):
    __tablename__ = "tables"
    
    id = Column(Integer, primary_key=True, index=True)
    table_number = Column(String(50), unique=True, nullable=False, index=True)
    seats = Column(Integer, nullable=False)
    is_smoking = Column(Boolean, default=False)
    status = Column(String(50), default=TableStatus.AVAILABLE, nullable=False)
    qr_code_url = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    reservations = relationship("Reservation", back_populates="table")
