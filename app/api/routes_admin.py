"""
Admin API routes - requires authentication
"""

from datetime import date as date_type
from typing import Optional
from fastapi import APIRouter, Depends, UploadFile, File, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import get_db
from app.core.exceptions import ReservationError
from app.schemas.availability import TableInfo
from app.schemas.reservation import ReservationUpdate, ReservationResponse
from app.schemas.table import TableCreate, TableUpdate
from app.api.routes_reservations import get_reservation_service
from app.services.availability_service import coerce_date
from app.services.excel_service import ExcelService
from app.services.repositories import ReservationRepo, TableRepo
from app.services.reservation_service import ReservationService
from app.services.table_service import TableService
from app.utils.security import verify_admin_token
from app.utils.responses import success_response, error_response, exception_response

router = APIRouter(dependencies=[Depends(verify_admin_token)])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

def table_payload(table) -> dict:
    return TableInfo.model_validate(table).model_dump(by_alias=True)

def reservation_payload(reservation) -> dict:
    return ReservationResponse.from_model(reservation).model_dump(mode="json", by_alias=True)

# -------- Tables --------

@router.get("/tables")
async def list_tables(
    status: Optional[str] = None,
    capacity: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db)
):
    """List tables, optionally filtered by status and minimum seats"""
    try:
        tables = TableRepo.list_all(db, status=status, min_seats=capacity)
    except ReservationError as e:
        return exception_response(e)
    
    return success_response(
        message="Tables retrieved successfully",
        data={"tables": [table_payload(table) for table in tables]}
    )

@router.post("/tables")
async def create_table(
    table_data: TableCreate,
    db: Session = Depends(get_db)
):
    """Create a new table"""
    try:
        table = TableService.create_table(table_data, db)
    except ReservationError as e:
        return exception_response(e)
    
    return success_response(
        message="Table created successfully",
        data=table_payload(table),
        status_code=201
    )

@router.patch("/tables/{table_id}")
async def update_table(
    table_id: int,
    table_update: TableUpdate,
    db: Session = Depends(get_db)
):
    """Update table information"""
    try:
        table = TableService.update_table(table_id, table_update, db)
    except ReservationError as e:
        return exception_response(e)
    
    return success_response(
        message="Table updated successfully",
        data=table_payload(table)
    )

@router.delete("/tables/{table_id}")
async def delete_table(
    table_id: int,
    db: Session = Depends(get_db)
):
    """Delete a table with no upcoming confirmed reservations"""
    try:
        TableService.delete_table(table_id, db)
    except ReservationError as e:
        return exception_response(e)
    
    return success_response(
        message="Table deleted successfully",
        data={"deleted_table_id": table_id}
    )

@router.get("/tables/template.xlsx")
async def download_table_template():
    """Download Excel template for table import"""
    return Response(
        content=ExcelService.create_template(),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment; filename=tables_template.xlsx"}
    )

@router.post("/tables/import")
async def import_tables(
    file: UploadFile = File(...),
    db: Session = Depends(get_db)
):
    """Upload an Excel sheet of tables"""
    # Validate file type
    if not file.filename.endswith(('.xlsx', '.xls')):
        return error_response(
            message="Invalid file format. Please upload an Excel file (.xlsx or .xls)",
            status_code=400
        )
    
    file_content = await file.read()
    if len(file_content) > settings.MAX_UPLOAD_SIZE:
        return error_response(
            message="File is too large",
            status_code=413
        )
    
    try:
        success, errors, created, updated = ExcelService.process_table_import(file_content, db)
    except ReservationError as e:
        return exception_response(e)
    
    if not success:
        return error_response(
            message="Excel file validation failed",
            details=errors,
            status_code=422
        )
    
    return success_response(
        message=f"Excel file processed successfully. {created} tables created, {updated} updated.",
        data={
            "created": created,
            "updated": updated,
            "filename": file.filename
        }
    )

# -------- Reservations --------

@router.get("/reservations")
async def list_reservations_for_date(
    date: Optional[str] = None,
    status: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Reservations for a day, defaulting to today"""
    try:
        day = coerce_date(date) if date else date_type.today()
        reservations = ReservationRepo.list_for_date(db, day, status=status)
    except ReservationError as e:
        return exception_response(e)
    
    return success_response(
        message="Reservations retrieved successfully",
        data={
            "date": day.isoformat(),
            "reservations": [reservation_payload(r) for r in reservations]
        }
    )

@router.get("/reservations/export.xlsx")
async def export_reservations(
    date: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Export one day's reservations to Excel"""
    try:
        day = coerce_date(date) if date else date_type.today()
        excel_content = ExcelService.export_reservations(day, db)
    except ReservationError as e:
        return exception_response(e)
    
    return Response(
        content=excel_content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename=reservations_{day.isoformat()}.xlsx"}
    )

@router.patch("/reservations/{reservation_id}")
async def update_reservation(
    reservation_id: int,
    reservation_update: ReservationUpdate,
    db: Session = Depends(get_db),
    service: ReservationService = Depends(get_reservation_service)
):
    """Update reservation status, time, party size or table"""
    try:
        reservation = service.update_reservation(reservation_id, reservation_update, db)
    except ReservationError as e:
        return exception_response(e)
    
    return success_response(
        message="Reservation updated successfully",
        data=reservation_payload(reservation)
    )

@router.delete("/reservations/{reservation_id}")
async def cancel_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    service: ReservationService = Depends(get_reservation_service)
):
    """Cancel a reservation"""
    try:
        reservation = service.cancel_reservation(reservation_id, db)
    except ReservationError as e:
        return exception_response(e)
    
    return success_response(
        message="Reservation cancelled successfully",
        data=reservation_payload(reservation)
    )
