# app/core/config.py
import os
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from .env"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Database ===
    DATABASE_URL: str = "sqlite+aiosqlite:///./hr_payroll.db"
    DATABASE_TEST_URL: str = "sqlite+aiosqlite:///:memory:"
    DB_OPERATION_TIMEOUT_SECONDS: float = 10.0

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v):
        """Ensure database URL is safe for current environment"""
        env = os.getenv("ENVIRONMENT", "development").lower()
        if env == "production" and ("localhost" in v or v.startswith("sqlite")):
            raise ValueError("Production environment cannot use a local database")
        return v

    # === CORS ===
    ALLOWED_ORIGINS: List[str] = ["http://localhost:8080", "http://127.0.0.1:8080"]
    ALLOWED_METHODS: List[str] = ["*"]
    ALLOWED_HEADERS: List[str] = ["*"]

    # === System ===
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    TIMEZONE: str = "Africa/Dakar"

    # === Business Rules ===
    CURRENCY_CODE: str = "XOF"
    # Observed behaviour lets a pending payslip be paid without a validation step
    ALLOW_DIRECT_PENDING_TO_PAID: bool = True
    REQUIRE_PAYMENT_DATE: bool = False
    ALLOW_NEGATIVE_NET_PAYABLE: bool = False
    # Paid payroll records are financial records; deletion stays off unless explicitly enabled
    ALLOW_PAID_PAYROLL_DELETION: bool = False
    LEAVE_DECISIONS_FINAL: bool = True

    # === Notifications ===
    ADMIN_ROLE_NAMES: List[str] = ["admin", "hr_manager"]
    NOTIFICATION_MAX_RETRIES: int = 3


# Create a global settings instance
settings = Settings()
