"""
Table management schemas
"""

from typing import Optional
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

class TableCreate(BaseModel):
    """Schema for creating a table"""
    table_number: str = Field(min_length=1, max_length=50)
    seats: int = Field(gt=0)
    is_smoking: bool = False
    status: str = "available"
    qr_code_url: Optional[str] = None
    
    class Config:
        alias_generator = to_camel
        populate_by_name = True

class TableUpdate(BaseModel):
    """Schema for updating a table"""
    table_number: Optional[str] = Field(default=None, min_length=1, max_length=50)
    seats: Optional[int] = Field(default=None, gt=0)
    is_smoking: Optional[bool] = None
    status: Optional[str] = None
    qr_code_url: Optional[str] = None
    
    class Config:
        alias_generator = to_camel
        populate_by_name = True
