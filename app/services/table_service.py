"""
Table inventory management
"""

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import InfrastructureError, NotFoundError, ReservationConflictError, ValidationError
from app.models import Table, TableStatus
from app.schemas.table import TableCreate, TableUpdate
from app.services.qr_service import QRService
from app.services.repositories import TableRepo

logger = logging.getLogger(__name__)

class TableService:
    """Service for creating, editing and removing tables"""
    
    @staticmethod
    def create_table(data: TableCreate, db: Session) -> Table:
        TableService._validate_status(data.status)
        table_number = data.table_number.strip()
        if TableRepo.get_by_number(db, table_number):
            raise ReservationConflictError(f"A table with number '{table_number}' already exists")
        
        table = Table(
            table_number=table_number,
            seats=data.seats,
            is_smoking=data.is_smoking,
            status=data.status,
            qr_code_url=data.qr_code_url or QRService.get_table_url(table_number)
        )
        TableService._save(db, table)
        logger.info(f"Created table {table.table_number} ({table.seats} seats)")
        return table
    
    @staticmethod
    def update_table(table_id: int, data: TableUpdate, db: Session) -> Table:
        table = TableRepo.get_by_id(db, table_id)
        if not table:
            raise NotFoundError("Table not found")
        
        if data.status is not None:
            TableService._validate_status(data.status)
            table.status = data.status
        if data.table_number is not None and data.table_number.strip() != table.table_number:
            table_number = data.table_number.strip()
            if TableRepo.get_by_number(db, table_number):
                raise ReservationConflictError(f"A table with number '{table_number}' already exists")
            table.table_number = table_number
        if data.seats is not None:
            table.seats = data.seats
        if data.is_smoking is not None:
            table.is_smoking = data.is_smoking
        if data.qr_code_url is not None:
            table.qr_code_url = data.qr_code_url
        table.updated_at = datetime.utcnow()
        
        TableService._save(db, table)
        return table
    
    @staticmethod
    def delete_table(table_id: int, db: Session, today: Optional[date] = None) -> None:
        table = TableRepo.get_by_id(db, table_id)
        if not table:
            raise NotFoundError("Table not found")
        if TableRepo.has_upcoming_confirmed(db, table.id, today or date.today()):
            raise ReservationConflictError(
                f"Table {table.table_number} has upcoming confirmed reservations"
            )
        try:
            db.delete(table)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Database error deleting table {table_id}: {e}")
            raise InfrastructureError("Database query failed") from e
        logger.info(f"Deleted table {table_id}")
    
    @staticmethod
    def _validate_status(status: str) -> None:
        if status not in TableStatus.ALL:
            raise ValidationError(
                f"Invalid table status '{status}'",
                details={"allowed": list(TableStatus.ALL)}
            )
    
    @staticmethod
    def _save(db: Session, table: Table) -> None:
        try:
            db.add(table)
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ReservationConflictError(f"A table with number '{table.table_number}' already exists")
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Database error saving table: {e}")
            raise InfrastructureError("Database query failed") from e
        db.refresh(table)
