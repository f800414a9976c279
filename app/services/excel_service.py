"""
Excel processing service for table import and reservation export
"""

import io
import logging
from datetime import date
from typing import List, Dict, Tuple
import pandas as pd
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import InfrastructureError
from app.models import Table, TableStatus
from app.services.qr_service import QRService
from app.services.repositories import ReservationRepo, TableRepo

logger = logging.getLogger(__name__)

TRUE_VALUES = {'yes', 'y', 'true', '1', 'smoking'}
FALSE_VALUES = {'', 'nan', 'no', 'n', 'false', '0', 'none', 'non-smoking'}

class ExcelService:
    """Service for handling Excel operations"""
    
    REQUIRED_COLUMNS = ['table number', 'seats']
    MAX_TABLE_SEATS = 50
    
    @staticmethod
    def create_template() -> bytes:
        """Create Excel template with required columns"""
        df = pd.DataFrame(columns=['Table Number', 'Seats', 'Smoking'])
        
        # Add sample data for guidance
        sample_data = [
            ['1A', 2, 'no'],
            ['2A', 4, 'no'],
            ['4A', 2, 'yes'],
        ]
        
        for row in sample_data:
            df.loc[len(df)] = row
        
        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
            df.to_excel(writer, index=False, sheet_name='Tables')
        
        return buffer.getvalue()
    
    @staticmethod
    def map_columns(df: pd.DataFrame) -> Dict[str, str]:
        column_mapping = {}
        for col in df.columns:
            col_lower = str(col).lower().strip()
            if 'table' in col_lower:
                column_mapping['table'] = col
            elif 'seat' in col_lower:
                column_mapping['seats'] = col
            elif 'smok' in col_lower:
                column_mapping['smoking'] = col
        return column_mapping
    
    @staticmethod
    def normalize_table_number(value) -> str:
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        return str(value).strip()
    
    @staticmethod
    def validate_excel_structure(df: pd.DataFrame) -> Tuple[bool, List[str]]:
        """Validate Excel file structure"""
        errors = []
        
        # Normalize column names for case-insensitive comparison
        normalized_columns = [str(col).lower().strip() for col in df.columns]
        
        missing_columns = [
            req_col for req_col in ExcelService.REQUIRED_COLUMNS
            if req_col not in normalized_columns
        ]
        
        if missing_columns:
            errors.append(f"Missing required columns: {', '.join(missing_columns)}")
        
        return len(errors) == 0, errors
    
    @staticmethod
    def validate_data_constraints(df: pd.DataFrame) -> Tuple[bool, List[str]]:
        """Validate seat counts, smoking flags and duplicate table numbers"""
        errors = []
        column_mapping = ExcelService.map_columns(df)
        
        if 'seats' in column_mapping:
            seats = pd.to_numeric(df[column_mapping['seats']], errors='coerce')
            for index, value in seats.items():
                row_no = index + 2  # header is row 1
                if pd.isna(value) or not float(value).is_integer():
                    errors.append(f"Row {row_no}: seats must be a whole number")
                elif value <= 0 or value > ExcelService.MAX_TABLE_SEATS:
                    errors.append(f"Row {row_no}: seats must be between 1 and {ExcelService.MAX_TABLE_SEATS}")
        
        if 'table' in column_mapping:
            numbers = df[column_mapping['table']].map(ExcelService.normalize_table_number)
            for index, number in numbers.items():
                if number in ('', 'nan'):
                    errors.append(f"Row {index + 2}: table number is required")
            counts = numbers[~numbers.isin(['', 'nan'])].value_counts()
            for number, count in counts[counts > 1].items():
                errors.append(f"Duplicate table number '{number}' ({count} times)")
        
        if 'smoking' in column_mapping:
            for index, value in df[column_mapping['smoking']].items():
                flag = str(value).lower().strip()
                if flag not in TRUE_VALUES and flag not in FALSE_VALUES:
                    errors.append(f"Row {index + 2}: smoking must be yes or no")
        
        return len(errors) == 0, errors
    
    @staticmethod
    def process_table_import(file_content: bytes, db: Session) -> Tuple[bool, List[str], int, int]:
        """Validate an uploaded sheet and upsert tables by table number.

        Returns (success, errors, created, updated). Nothing is written when
        validation fails.
        """
        try:
            df = pd.read_excel(io.BytesIO(file_content))
        except Exception as e:
            return False, [f"Error reading Excel file: {str(e)}"], 0, 0
        
        valid_structure, structure_errors = ExcelService.validate_excel_structure(df)
        if not valid_structure:
            return False, structure_errors, 0, 0
        
        valid_data, data_errors = ExcelService.validate_data_constraints(df)
        if not valid_data:
            return False, data_errors, 0, 0
        
        column_mapping = ExcelService.map_columns(df)
        created = 0
        updated = 0
        
        try:
            for _, row in df.iterrows():
                table_number = ExcelService.normalize_table_number(row[column_mapping['table']])
                seats = int(row[column_mapping['seats']])
                is_smoking = False
                if 'smoking' in column_mapping:
                    is_smoking = str(row[column_mapping['smoking']]).lower().strip() in TRUE_VALUES
                
                table = TableRepo.get_by_number(db, table_number)
                if table:
                    table.seats = seats
                    table.is_smoking = is_smoking
                    updated += 1
                else:
                    db.add(Table(
                        table_number=table_number,
                        seats=seats,
                        is_smoking=is_smoking,
                        status=TableStatus.AVAILABLE,
                        qr_code_url=QRService.get_table_url(table_number)
                    ))
                    created += 1
            
            db.commit()
        except (SQLAlchemyError, InfrastructureError) as e:
            db.rollback()
            logger.error(f"Table import failed: {e}")
            raise InfrastructureError("Database query failed") from e
        
        logger.info(f"Table import: {created} created, {updated} updated")
        return True, [], created, updated
    
    @staticmethod
    def export_reservations(for_date: date, db: Session) -> bytes:
        """Export the reservations of one day to Excel"""
        reservations = ReservationRepo.list_for_date(db, for_date)
        
        data = [
            {
                'Time': reservation.time.strftime('%H:%M'),
                'Name': reservation.name,
                'Phone': reservation.phone_number,
                'Email': reservation.email or '',
                'Party Size': reservation.party_size,
                'Table': reservation.table.table_number if reservation.table else '',
                'Status': reservation.status,
                'Special Instructions': reservation.special_instructions or ''
            }
            for reservation in reservations
        ]
        
        df = pd.DataFrame(data, columns=[
            'Time', 'Name', 'Phone', 'Email', 'Party Size', 'Table', 'Status', 'Special Instructions'
        ])
        
        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
            df.to_excel(writer, index=False, sheet_name=for_date.isoformat())
        
        return buffer.getvalue()
