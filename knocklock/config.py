# =======================================================================================
# knocklock/config.py - Configuration Management
# =======================================================================================
import os
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

def _env_str(name: str) -> Optional[str]:
    """Helper to read optional string environment variables (blank means unset)."""
    v = os.getenv(name)
    return v.strip() if v and v.strip() else None

def _env_float(name: str, default: str) -> float:
    """Helper to parse float environment variables."""
    return float(os.getenv(name, default))

class Config:
    # Store
    DB_URL: str = os.getenv("DB_URL", "sqlite:///./knocklock.db")
    STORE_POLL_INTERVAL: float = _env_float("STORE_POLL_INTERVAL", "1.0")

    # Database Connection Pool (ignored for SQLite)
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "10"))
    DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "20"))

    # API Settings
    API_DEBUG: bool = os.getenv("API_DEBUG", "false").lower() == "true"
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))

    # Logging
    LOG_PATH: Optional[str] = _env_str("LOG_PATH")

    # Device owner; every collection lives under this principal
    PRINCIPAL_ID: Optional[str] = _env_str("PRINCIPAL_ID")

    # External audit sink (spreadsheet webhook)
    AUDIT_SINK_URL: Optional[str] = _env_str("AUDIT_SINK_URL")
    AUDIT_SINK_TIMEOUT: float = _env_float("AUDIT_SINK_TIMEOUT", "5")

    # Knock patterns
    MAX_KNOCK_PATTERNS: int = int(os.getenv("MAX_KNOCK_PATTERNS", "5"))

    # Retention
    LOG_RETENTION_DAYS: int = int(os.getenv("LOG_RETENTION_DAYS", "30"))
    RETENTION_SWEEP_INTERVAL: float = _env_float("RETENTION_SWEEP_INTERVAL", "3600")
    RETENTION_INITIAL_DELAY: float = _env_float("RETENTION_INITIAL_DELAY", "10")

    # Remote unlock
    UNLOCK_HOLD_SECONDS: float = _env_float("UNLOCK_HOLD_SECONDS", "5")

    # Two-phase deletes
    CONFIRMATION_TTL: float = _env_float("CONFIRMATION_TTL", "120")

config = Config()
