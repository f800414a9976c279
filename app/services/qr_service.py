"""
QR code generation service
"""

import io
from urllib.parse import quote
import qrcode

from app.core.config import settings

class QRService:
    """Service for generating table QR codes"""
    
    @staticmethod
    def get_table_url(table_number: str) -> str:
        """Get the URL that a table's QR code points to"""
        return f"{settings.BASE_URL}/menu?table={quote(str(table_number))}"
    
    @staticmethod
    def generate_qr(url: str, format: str = 'PNG') -> bytes:
        """Render a QR code for a URL"""
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=10,
            border=4,
        )
        qr.add_data(url)
        qr.make(fit=True)
        
        # Create QR code image
        img = qr.make_image(fill_color="black", back_color="white")
        
        # Convert to bytes
        buffer = io.BytesIO()
        img.save(buffer, format=format)
        
        return buffer.getvalue()
    
    @staticmethod
    def generate_table_qr(table) -> bytes:
        """QR code for a table, using its stored URL when one is set"""
        return QRService.generate_qr(table.qr_code_url or QRService.get_table_url(table.table_number))
