"""
Public API routes - no authentication required
"""

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.exceptions import NotFoundError, ReservationError
from app.services.qr_service import QRService
from app.services.repositories import TableRepo
from app.utils.security import enforce_rate_limit
from app.utils.responses import exception_response

router = APIRouter()

@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok"}

@router.get("/tables/{table_id}/qr.png", dependencies=[Depends(enforce_rate_limit)])
async def get_table_qr_code(
    table_id: int,
    db: Session = Depends(get_db)
):
    """Get QR code image for a table"""
    try:
        table = TableRepo.get_by_id(db, table_id)
        if not table:
            raise NotFoundError("Table not found")
    except ReservationError as e:
        return exception_response(e)
    
    qr_bytes = QRService.generate_table_qr(table)
    
    return Response(
        content=qr_bytes,
        media_type="image/png",
        headers={"Content-Disposition": f"inline; filename=qr_table_{table.table_number}.png"}
    )
