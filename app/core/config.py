"""
Configuration settings for the application
"""

import os
from typing import List
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application settings"""
    
    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./restaurant.db")
    
    # Security
    ADMIN_TOKEN: str = os.getenv("ADMIN_TOKEN", "admin_token_123")
    
    # Application
    BASE_URL: str = os.getenv("BASE_URL", "http://localhost:8000")
    
    # CORS
    ALLOW_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]
    
    # File limits
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10MB
    
    # Rate limiting
    RATE_LIMIT_PER_MINUTE: int = 30
    
    # Availability
    OPEN_TIME: str = "18:00"
    CLOSE_TIME: str = "22:00"
    SLOT_MINUTES: int = 30
    SLOT_CAPACITY: int = 3  # 0 derives capacity from the table inventory
    SEATS_PER_TABLE: int = 4
    CLOSED_WEEKDAYS: List[int] = []  # 0 = Monday
    
    class Config:
        env_file = ".env"

settings = Settings()
